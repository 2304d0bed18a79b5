"""
Command manager for the command palette.

Aggregates commands from every registered source. Sources are queried live
on each call; nothing is cached between reloads.
"""

import logging
from collections.abc import Sequence

from cmdpalette.exceptions import CommandSourceError

from .palette_commands import Command
from .palette_loaders import CommandSource
from .palette_matcher import RankedCommand, rank, score

logger = logging.getLogger(__name__)


class CommandManager:
    """Registry of command sources for one palette window."""

    def __init__(self, sources: Sequence[CommandSource] = ()):
        self._sources: list[CommandSource] = []
        for source in sources:
            self.register(source)

    def register(self, source: CommandSource) -> None:
        """Register a command source."""
        if not isinstance(source, CommandSource):
            raise TypeError(f"{source!r} does not provide load_commands()")
        self._sources.append(source)
        logger.debug(f"Registered command source: {source!r}")

    # Name used by the editor menu entry points
    add_loader = register

    @property
    def sources(self) -> tuple[CommandSource, ...]:
        return tuple(self._sources)

    def __len__(self) -> int:
        return len(self._sources)

    def _load_source(self, source: CommandSource) -> list[Command]:
        commands = list(source.load_commands())
        for command in commands:
            if not isinstance(command, Command):
                raise CommandSourceError(
                    "Source returned a non-command item",
                    source=repr(source),
                    item=repr(command),
                )
        return commands

    def all_commands(self, search_term: str = "") -> list[Command]:
        """
        Get every valid command from every source.

        Args:
            search_term: Current search term, for sources that want it

        Returns:
            Commands in source-registration order, invalid ones removed
        """
        commands: list[Command] = []
        for source in self._sources:
            try:
                loaded = self._load_source(source)
            except Exception:
                logger.exception(f"Command source {source!r} failed, skipping it")
                continue
            commands.extend(c for c in loaded if c.is_valid())
        logger.debug(f"Loaded {len(commands)} commands for {search_term!r}")
        return commands

    def score_for(self, command: Command, query: str) -> float:
        """Match score of one command against query."""
        return score(command, query)

    def objects_sorted_by_match(self, query: str) -> list[RankedCommand]:
        """All valid commands, best match first."""
        return rank(self.all_commands(query), query)
