"""
Command sources for the command palette.

A source has one job: produce the commands available right now. Sources are
queried again every time the palette reloads, so they may rescan live host
state (scene objects, asset lists) on each call. Discovering that state is
the host's business; loaders here only turn what the host hands over into
commands.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable, Iterable, Sequence
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from .palette_commands import (
    ASSET_ICON,
    OBJECT_ICON,
    AssetCommand,
    Command,
    ObjectCommand,
    humanize_name,
    method_command,
)


@runtime_checkable
class CommandSource(Protocol):
    """Anything that can enumerate the commands it currently offers."""

    def load_commands(self) -> Sequence[Command]:
        ...


class CommandLoader:
    """Base class for the bundled sources."""

    def load_commands(self) -> list[Command]:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class StaticCommandLoader(CommandLoader):
    """Serves a fixed list of commands."""

    def __init__(self, commands: Iterable[Command]):
        self._commands = list(commands)

    def load_commands(self) -> list[Command]:
        return list(self._commands)


class FunctionCommandLoader(CommandLoader):
    """Adapts a zero-arg function returning commands into a source."""

    def __init__(self, provider: Callable[[], Iterable[Command]]):
        self._provider = provider

    def load_commands(self) -> list[Command]:
        return list(self._provider())


class MethodCommandLoader(CommandLoader):
    """
    Exposes callables as menu-method commands.

    Accepts either a list of callables, or an object whose public methods
    become commands. Methods taking positional parameters get the argument
    capability.
    """

    def __init__(
        self,
        methods: Iterable[Callable[..., Any]] | None = None,
        owner: Any = None,
        prefix: str = "",
    ):
        self._methods = list(methods or [])
        self._owner = owner
        self._prefix = prefix

    def _owner_methods(self) -> list[Callable[..., Any]]:
        if self._owner is None:
            return []
        methods = []
        # Only touch attributes we want; properties on the owner may raise
        for name in dir(self._owner):
            if name.startswith("_") or not name.startswith(self._prefix):
                continue
            member = getattr(self._owner, name, None)
            if not callable(member) or inspect.isclass(member):
                continue
            methods.append(member)
        return methods

    def load_commands(self) -> list[Command]:
        commands: list[Command] = []
        for func in [*self._methods, *self._owner_methods()]:
            title = None
            if self._prefix:
                name = getattr(func, "__name__", "")
                if name.startswith(self._prefix):
                    title = humanize_name(name[len(self._prefix):])
            commands.append(method_command(func, title=title))
        return commands


class ObjectCommandLoader(CommandLoader):
    """Turns the host's live scene objects into select-object commands."""

    def __init__(
        self,
        provider: Callable[[], Iterable[Any]],
        on_select: Callable[[Any], Any],
        icon: Any = OBJECT_ICON,
    ):
        self._provider = provider
        self._on_select = on_select
        self._icon = icon

    def load_commands(self) -> list[Command]:
        return [
            ObjectCommand(target, self._on_select, icon=self._icon) for target in self._provider()
        ]


class AssetCommandLoader(CommandLoader):
    """Turns asset paths supplied by the host into open-asset commands."""

    def __init__(
        self,
        provider: Callable[[], Iterable[str | Path]],
        on_open: Callable[[Path], Any],
        icon: Any = ASSET_ICON,
        check_exists: bool = True,
    ):
        self._provider = provider
        self._on_open = on_open
        self._icon = icon
        self._check_exists = check_exists

    def load_commands(self) -> list[Command]:
        return [
            AssetCommand(path, self._on_open, icon=self._icon, check_exists=self._check_exists)
            for path in self._provider()
        ]
