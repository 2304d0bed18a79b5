"""
cmdpalette UI Configuration.

Handles persistence of palette preferences: debug scores, skin and the
number of rows shown.
Config is stored in ~/.config/cmdpalette/ui_config.json
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from cmdpalette.exceptions import ConfigurationError

from .constants import (
    CMDPALETTE_CONFIG_DIR,
    DIM_COLOR_DARK,
    DIM_COLOR_LIGHT,
    ENV_DEBUG,
    MAX_ROWS_DISPLAYED,
    SKINS,
    TRUTHY_ENV_VALUES,
)

logger = logging.getLogger(__name__)

DEFAULT_CONFIG: dict[str, Any] = {
    "debug": False,
    "skin": "dark",
    "max_rows": MAX_ROWS_DISPLAYED,
}


def get_ui_config_path() -> Path:
    """
    Get path to UI config file.

    Returns:
        Path to ~/.config/cmdpalette/ui_config.json
    """
    CMDPALETTE_CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    return CMDPALETTE_CONFIG_DIR / "ui_config.json"


def load_ui_config() -> dict[str, Any]:
    """
    Load UI configuration from file.

    Returns:
        Config dict, or defaults if file doesn't exist or is invalid
    """
    path = get_ui_config_path()
    if path.exists():
        try:
            config = json.loads(path.read_text())
            if not isinstance(config, dict):
                logger.warning(f"Ignoring non-object UI config in {path}")
                return DEFAULT_CONFIG.copy()
            # Merge with defaults to handle missing keys
            return {**DEFAULT_CONFIG, **config}
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Could not read UI config {path}: {e}")
            return DEFAULT_CONFIG.copy()
    return DEFAULT_CONFIG.copy()


def save_ui_config(config: dict[str, Any]) -> None:
    """
    Save UI configuration to file.

    Args:
        config: Configuration dict to save
    """
    path = get_ui_config_path()
    try:
        path.write_text(json.dumps(config, indent=2) + "\n")
    except OSError as e:
        # Config is non-critical
        logger.warning(f"Could not save UI config {path}: {e}")


def is_debug_enabled() -> bool:
    """
    Whether rows should show their match score.

    The CMDPALETTE_DEBUG environment variable wins over the config file.
    """
    env_value = os.environ.get(ENV_DEBUG)
    if env_value is not None:
        return env_value.strip().lower() in TRUTHY_ENV_VALUES
    return bool(load_ui_config().get("debug", False))


def set_debug(enabled: bool) -> None:
    """Persist the debug score preference."""
    config = load_ui_config()
    config["debug"] = bool(enabled)
    save_ui_config(config)


def get_skin() -> str:
    """Get the current skin name ("dark" or "light")."""
    skin = str(load_ui_config().get("skin", "dark"))
    if skin not in SKINS:
        return "dark"
    return skin


def set_skin(skin: str) -> None:
    """
    Set and persist the skin.

    Raises:
        ConfigurationError: if the skin is unknown
    """
    if skin not in SKINS:
        raise ConfigurationError(f"Unknown skin, expected one of {SKINS}", key="skin", value=skin)
    config = load_ui_config()
    config["skin"] = skin
    save_ui_config(config)


def get_dim_color() -> str:
    """Color used for the non-highlighted part of row titles."""
    return DIM_COLOR_DARK if get_skin() == "dark" else DIM_COLOR_LIGHT


def get_max_rows() -> int:
    """Get the display cap, falling back to the default on bad values."""
    raw = load_ui_config().get("max_rows", MAX_ROWS_DISPLAYED)
    if isinstance(raw, bool) or not isinstance(raw, int) or raw < 1:
        return MAX_ROWS_DISPLAYED
    return raw


def set_max_rows(max_rows: int) -> None:
    """
    Set and persist the display cap.

    Raises:
        ConfigurationError: if max_rows is not a positive integer
    """
    if isinstance(max_rows, bool) or not isinstance(max_rows, int) or max_rows < 1:
        raise ConfigurationError(
            "max_rows must be a positive integer", key="max_rows", value=max_rows
        )
    config = load_ui_config()
    config["max_rows"] = max_rows
    save_ui_config(config)
