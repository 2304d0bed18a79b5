"""
Centralized constants for cmdpalette.

Layout values are expressed in the host's window units. The Textual host
maps them onto terminal cells itself.
"""

import os
from pathlib import Path

# =============================================================================
# PATHS
# =============================================================================

CMDPALETTE_CONFIG_DIR = Path(
    os.environ.get("CMDPALETTE_CONFIG_DIR", str(Path.home() / ".config" / "cmdpalette"))
)

# =============================================================================
# WINDOW & ROW LAYOUT
# =============================================================================

MAX_ROWS_DISPLAYED = 8  # Display cap for the ranked list
WINDOW_WIDTH = 400
WINDOW_HEIGHT = 30  # Height of the text field; rows are added below it

ROW_HEIGHT = 32

# =============================================================================
# SUBTITLE TRUNCATION
# =============================================================================

SUBTITLE_MAX_SOFT_LENGTH = 35
SUBTITLE_MAX_TITLE_ADDITIVE_LENGTH = 15

# =============================================================================
# COLORS
# =============================================================================

DIM_COLOR_DARK = "#8e8e8e"  # Non-highlighted title text on a dark skin
DIM_COLOR_LIGHT = "#383838"  # Non-highlighted title text on a light skin
SELECTED_BACKGROUND_COLOR = "#4076d3"
SELECTED_BACKGROUND_ALPHA = 0.4

SKINS = ("dark", "light")

# =============================================================================
# WINDOW TITLES
# =============================================================================

OPEN_WINDOW_TITLE = "Open.. "
COMMAND_PALETTE_WINDOW_TITLE = "Command Palette.. "

# =============================================================================
# ENVIRONMENT
# =============================================================================

ENV_DEBUG = "CMDPALETTE_DEBUG"
TRUTHY_ENV_VALUES = ("1", "true", "yes", "on")
