"""
Command palette core: commands, sources, fuzzy ranking and the session
state machine. Nothing in here depends on a UI toolkit.
"""

from .palette_commands import (
    AssetCommand,
    CallbackCommand,
    CallbackCommandWithArguments,
    Command,
    MethodCommand,
    MethodCommandWithArguments,
    ObjectCommand,
    SupportsArguments,
    method_command,
)
from .palette_loaders import (
    AssetCommandLoader,
    CommandLoader,
    CommandSource,
    FunctionCommandLoader,
    MethodCommandLoader,
    ObjectCommandLoader,
    StaticCommandLoader,
)
from .palette_manager import CommandManager
from .palette_matcher import RankedCommand, rank, score
from .palette_presenter import (
    ExecutionQueue,
    PalettePresenter,
    PaletteRow,
    PaletteSession,
    PaletteState,
    ParsedInput,
    WindowGeometry,
    dispatch,
    parse_input,
)

__all__ = [
    "AssetCommand",
    "AssetCommandLoader",
    "CallbackCommand",
    "CallbackCommandWithArguments",
    "Command",
    "CommandLoader",
    "CommandManager",
    "CommandSource",
    "ExecutionQueue",
    "FunctionCommandLoader",
    "MethodCommand",
    "MethodCommandLoader",
    "MethodCommandWithArguments",
    "ObjectCommand",
    "ObjectCommandLoader",
    "PalettePresenter",
    "PaletteRow",
    "PaletteSession",
    "PaletteState",
    "ParsedInput",
    "RankedCommand",
    "StaticCommandLoader",
    "SupportsArguments",
    "WindowGeometry",
    "dispatch",
    "method_command",
    "parse_input",
    "rank",
    "score",
]
