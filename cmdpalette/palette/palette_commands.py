"""
Command model for the command palette.

A command is anything the palette can list and run: a title and subtitle to
match and display, an opaque icon handle, a validity check and an execute
action. Commands that can take the `;`-separated arguments typed after the
search term also implement `SupportsArguments`.
"""

from __future__ import annotations

import inspect
import logging
import weakref
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

logger = logging.getLogger(__name__)

METHOD_ICON = "ƒ"
OBJECT_ICON = "◆"
ASSET_ICON = "▣"


@runtime_checkable
class SupportsArguments(Protocol):
    """Capability of commands that accept an argument list."""

    def execute_with_arguments(self, arguments: list[str]) -> None:
        """Execute with the arguments parsed from the palette input."""
        ...


class Command(ABC):
    """A single entry the palette can rank and execute."""

    @property
    @abstractmethod
    def title(self) -> str:
        """Display title; this is what the query is matched against."""

    @property
    def subtitle(self) -> str:
        return ""

    @property
    def icon(self) -> Any:
        return None

    def is_valid(self) -> bool:
        return True

    @abstractmethod
    def execute(self) -> None:
        """Run the command without arguments."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(title={self.title!r})"


def humanize_name(name: str) -> str:
    """Turn a python identifier into a display title.

    >>> humanize_name("open_scene_view")
    'Open Scene View'
    """
    words = [w for w in name.strip("_").split("_") if w]
    return " ".join(w[:1].upper() + w[1:] for w in words)


def _first_doc_line(func: Callable[..., Any]) -> str:
    doc = inspect.getdoc(func)
    if not doc:
        return ""
    return doc.strip().splitlines()[0]


def accepts_positional_arguments(func: Callable[..., Any]) -> bool:
    """Whether func can be called with at least one positional argument."""
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        return False
    return any(
        p.kind
        in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
            inspect.Parameter.VAR_POSITIONAL,
        )
        for p in signature.parameters.values()
    )


class MethodCommand(Command):
    """A menu method: a plain callable run with no arguments."""

    def __init__(
        self,
        func: Callable[[], Any],
        title: str | None = None,
        subtitle: str | None = None,
        icon: Any = METHOD_ICON,
    ):
        self._func = func
        name = getattr(func, "__name__", type(func).__name__)
        self._title = title if title is not None else humanize_name(name)
        if subtitle is None:
            subtitle = _first_doc_line(func) or getattr(func, "__qualname__", name)
        self._subtitle = subtitle
        self._icon = icon

    @property
    def func(self) -> Callable[..., Any]:
        return self._func

    @property
    def title(self) -> str:
        return self._title

    @property
    def subtitle(self) -> str:
        return self._subtitle

    @property
    def icon(self) -> Any:
        return self._icon

    def execute(self) -> None:
        self._func()


class MethodCommandWithArguments(MethodCommand):
    """A menu method whose callable takes the typed arguments positionally."""

    def execute(self) -> None:
        self.execute_with_arguments([])

    def execute_with_arguments(self, arguments: list[str]) -> None:
        self._func(*arguments)


def method_command(
    func: Callable[..., Any],
    title: str | None = None,
    subtitle: str | None = None,
    icon: Any = METHOD_ICON,
) -> MethodCommand:
    """Build the right method command variant for func's signature."""
    if accepts_positional_arguments(func):
        return MethodCommandWithArguments(func, title=title, subtitle=subtitle, icon=icon)
    return MethodCommand(func, title=title, subtitle=subtitle, icon=icon)


class ObjectCommand(Command):
    """
    Selects a live scene object.

    The object is held weakly: once the host drops it the command turns
    invalid and disappears from the palette. Objects exposing a truthy
    ``destroyed`` attribute are treated the same way.
    """

    def __init__(
        self,
        target: Any,
        on_select: Callable[[Any], Any],
        title: str | None = None,
        subtitle: str | None = None,
        icon: Any = OBJECT_ICON,
    ):
        try:
            self._ref: Callable[[], Any] = weakref.ref(target)
        except TypeError:
            # Builtins like str/int cannot be weakly referenced
            self._ref = lambda: target
        self._on_select = on_select
        self._title = title if title is not None else str(getattr(target, "name", target))
        if subtitle is None:
            subtitle = str(getattr(target, "path", type(target).__name__))
        self._subtitle = subtitle
        self._icon = icon

    @property
    def target(self) -> Any:
        return self._ref()

    @property
    def title(self) -> str:
        return self._title

    @property
    def subtitle(self) -> str:
        return self._subtitle

    @property
    def icon(self) -> Any:
        return self._icon

    def is_valid(self) -> bool:
        target = self._ref()
        if target is None:
            return False
        return not getattr(target, "destroyed", False)

    def execute(self) -> None:
        target = self._ref()
        if target is None:
            logger.warning(f"Scene object for {self._title!r} no longer exists")
            return
        self._on_select(target)


class AssetCommand(Command):
    """Opens an asset (prefab) by path. The subtitle shows the full path."""

    def __init__(
        self,
        path: str | Path,
        on_open: Callable[[Path], Any],
        icon: Any = ASSET_ICON,
        check_exists: bool = True,
    ):
        self._path = Path(path)
        self._on_open = on_open
        self._icon = icon
        self._check_exists = check_exists

    @property
    def path(self) -> Path:
        return self._path

    @property
    def title(self) -> str:
        return self._path.stem

    @property
    def subtitle(self) -> str:
        return str(self._path)

    @property
    def icon(self) -> Any:
        return self._icon

    def is_valid(self) -> bool:
        if not self._check_exists:
            return True
        return self._path.exists()

    def execute(self) -> None:
        self._on_open(self._path)


class CallbackCommand(Command):
    """Ad-hoc command built from a title and a callable, with optional arguments."""

    def __init__(
        self,
        title: str,
        action: Callable[[], Any],
        subtitle: str = "",
        icon: Any = None,
        is_valid: Callable[[], bool] | None = None,
    ):
        self._title = title
        self._action = action
        self._subtitle = subtitle
        self._icon = icon
        self._is_valid = is_valid

    @property
    def title(self) -> str:
        return self._title

    @property
    def subtitle(self) -> str:
        return self._subtitle

    @property
    def icon(self) -> Any:
        return self._icon

    def is_valid(self) -> bool:
        return self._is_valid() if self._is_valid else True

    def execute(self) -> None:
        self._action()


class CallbackCommandWithArguments(CallbackCommand):
    """`CallbackCommand` whose action receives the argument list."""

    def __init__(
        self,
        title: str,
        action: Callable[[Sequence[str]], Any],
        subtitle: str = "",
        icon: Any = None,
        is_valid: Callable[[], bool] | None = None,
    ):
        super().__init__(title, lambda: action([]), subtitle, icon, is_valid)
        self._arguments_action = action

    def execute_with_arguments(self, arguments: list[str]) -> None:
        self._arguments_action(list(arguments))
