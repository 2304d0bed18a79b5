"""
Presenter for the command palette.

Owns one palette session at a time and drives it through its states:

    CLOSED -> OPEN -> EXECUTING -> CLOSED

Hosts forward raw events (text changes, keys, pointer, focus loss) and draw
whatever `rows()` and `geometry()` return. Selecting a command closes the
palette first and only then hands the command to the host's scheduler, so
the command never runs inside a window that is being torn down.
"""

import logging
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from cmdpalette.config.constants import (
    COMMAND_PALETTE_WINDOW_TITLE,
    ROW_HEIGHT,
    WINDOW_HEIGHT,
    WINDOW_WIDTH,
)
from cmdpalette.config.ui_config import get_dim_color, get_max_rows, is_debug_enabled
from cmdpalette.exceptions import CommandExecutionError

from .palette_commands import Command, SupportsArguments
from .palette_manager import CommandManager
from .palette_matcher import (
    RankedCommand,
    format_debug_subtitle,
    highlight_title,
    truncate_subtitle,
)

logger = logging.getLogger(__name__)

ARGUMENT_SEPARATOR = ";"


class PaletteState(Enum):
    """Lifecycle of a palette session."""

    CLOSED = "closed"
    OPEN = "open"
    EXECUTING = "executing"


@dataclass(frozen=True)
class ParsedInput:
    """Raw input split into the fuzzy search term and optional arguments."""

    search_term: str
    arguments: list[str] | None = None


def parse_input(raw: str | None) -> ParsedInput:
    """
    Split raw palette input on `;`.

    The first segment is the search term. Later segments, with empty ones
    dropped, are the argument list. Input without any argument segment has
    no argument list at all.
    """
    if not raw:
        return ParsedInput("")
    if ARGUMENT_SEPARATOR not in raw:
        return ParsedInput(raw)

    search_term, *rest = raw.split(ARGUMENT_SEPARATOR)
    arguments = [segment for segment in rest if segment]
    return ParsedInput(search_term, arguments or None)


def dispatch(command: Command, arguments: list[str] | None) -> None:
    """Run a command, passing arguments when it can take them."""
    if arguments is None:
        command.execute()
        return

    if isinstance(command, SupportsArguments):
        command.execute_with_arguments(list(arguments))
    else:
        logger.warning(
            f"Attempted to pass arguments to {command.title!r}, "
            "but it does not accept arguments"
        )
        command.execute()


class ExecutionQueue:
    """
    Next-tick scheduler for hosts without an event loop.

    The host calls `run_pending()` once its current event pass is done.
    """

    def __init__(self) -> None:
        self._pending: deque[Callable[[], Any]] = deque()

    def schedule(self, callback: Callable[[], Any]) -> None:
        self._pending.append(callback)

    def run_pending(self) -> int:
        """Run callbacks queued so far; ones queued meanwhile wait for next call."""
        count = len(self._pending)
        for _ in range(count):
            self._pending.popleft()()
        return count

    def __len__(self) -> int:
        return len(self._pending)


@dataclass
class PaletteSession:
    """Everything one palette invocation knows. Discarded on close."""

    title: str = COMMAND_PALETTE_WINDOW_TITLE
    manager: CommandManager | None = None
    raw_input: str = ""
    search_term: str = ""
    arguments: list[str] | None = None
    results: list[RankedCommand] = field(default_factory=list)
    selected_index: int = 0
    state: PaletteState = PaletteState.OPEN
    is_closing: bool = False


@dataclass(frozen=True)
class PaletteRow:
    """Draw instructions for one result row."""

    index: int
    title_markup: str
    plain_title: str
    subtitle: str
    icon: Any
    selected: bool
    score: float


@dataclass(frozen=True)
class WindowGeometry:
    """Requested palette window rectangle."""

    x: int
    y: int
    width: int
    height: int


class PalettePresenter:
    """
    Handles command palette business logic.

    Args:
        schedule: Host hook that runs a callback on its next event-loop
            iteration. Defaults to an internal `ExecutionQueue`.
        on_close: Called exactly once when the session closes.
        on_state_update: Called with the session after every change.
        display_cap: Max rows shown; defaults to the configured value.
        debug: Append match scores to subtitles; defaults to config.
        dim_color: Color for the non-highlighted part of titles.
    """

    def __init__(
        self,
        schedule: Callable[[Callable[[], Any]], Any] | None = None,
        on_close: Callable[[], Any] | None = None,
        on_state_update: Callable[[PaletteSession], None] | None = None,
        display_cap: int | None = None,
        debug: bool | None = None,
        dim_color: str | None = None,
    ):
        self.queue = ExecutionQueue()
        self._schedule = schedule or self.queue.schedule
        self.on_close = on_close
        self.on_state_update = on_state_update
        self.display_cap = display_cap if display_cap is not None else get_max_rows()
        self.debug = debug if debug is not None else is_debug_enabled()
        self.dim_color = dim_color or get_dim_color()
        self._session: PaletteSession | None = None

    @property
    def session(self) -> PaletteSession | None:
        return self._session

    @property
    def state(self) -> PaletteState:
        if self._session is None:
            return PaletteState.CLOSED
        return self._session.state

    @property
    def is_open(self) -> bool:
        return self.state == PaletteState.OPEN

    def _notify_update(self) -> None:
        if self.on_state_update and self._session is not None:
            self.on_state_update(self._session)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def open(
        self,
        manager: CommandManager | None,
        title: str = COMMAND_PALETTE_WINDOW_TITLE,
        initial_input: str = "",
    ) -> PaletteSession:
        """Start a fresh session; any previous one is dropped."""
        session = PaletteSession(title=title, manager=manager)
        self._session = session

        if manager is None:
            logger.error("Can't initialize a palette window without a command manager")
            self._notify_update()
            return session

        self._apply_input(initial_input)
        logger.debug(f"Opened {title!r} with {len(session.results)} results")
        self._notify_update()
        return session

    def close(self) -> bool:
        """Close the session. Returns False if it was already closing."""
        session = self._session
        if session is None or session.is_closing:
            return False

        session.is_closing = True
        if session.state != PaletteState.EXECUTING:
            session.state = PaletteState.CLOSED
        if self.on_close:
            self.on_close()
        self._notify_update()
        return True

    def focus_lost(self) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def _apply_input(self, text: str) -> None:
        session = self._session
        parsed = parse_input(text)
        session.raw_input = text
        session.search_term = parsed.search_term
        session.arguments = parsed.arguments
        session.selected_index = 0
        if session.manager is None:
            session.results = []
        else:
            session.results = session.manager.objects_sorted_by_match(parsed.search_term)

    def set_input(self, text: str) -> None:
        """Reparse input and recompute results. Selection goes back to the top."""
        if not self.is_open:
            return
        if text == self._session.raw_input:
            return
        self._apply_input(text)
        self._notify_update()

    def reload(self) -> None:
        """Query the sources again for the current input."""
        if not self.is_open:
            return
        self._apply_input(self._session.raw_input)
        self._notify_update()

    def displayed_results(self) -> list[RankedCommand]:
        """Results that get a row: valid ones, up to the display cap."""
        if self._session is None or self._session.is_closing:
            return []
        valid = [r for r in self._session.results if r.command.is_valid()]
        return valid[: self.display_cap]

    def _wrap(self, index: int) -> int:
        # Results can shrink between input changes when commands go invalid
        count = len(self.displayed_results())
        if count == 0:
            return 0
        return index % count

    def move_selection(self, delta: int) -> None:
        """Move selection up or down, wrapping at both ends."""
        if not self.is_open:
            return
        self._session.selected_index = self._wrap(self._session.selected_index + delta)
        self._notify_update()

    def select(self, index: int) -> bool:
        """Point the selection at a displayed row (pointer hover)."""
        if not self.is_open:
            return False
        if not 0 <= index < len(self.displayed_results()):
            return False
        if index != self._session.selected_index:
            self._session.selected_index = index
            self._notify_update()
        return True

    def handle_key(self, key: str) -> bool:
        """Route a key press. Returns True when the key was consumed."""
        if not self.is_open:
            return False

        key = key.lower()
        if key == "escape":
            self.close()
        elif key in ("enter", "return"):
            self.confirm()
        elif key in ("up", "ctrl+p"):
            self.move_selection(-1)
        elif key in ("down", "ctrl+n"):
            self.move_selection(1)
        else:
            return False
        return True

    # ------------------------------------------------------------------
    # Pointer
    # ------------------------------------------------------------------

    def row_at(self, x: float, y: float) -> int | None:
        """Row index under a window-relative position, if any."""
        if not 0 <= x < WINDOW_WIDTH or y < WINDOW_HEIGHT:
            return None
        row = int((y - WINDOW_HEIGHT) // ROW_HEIGHT)
        if row < len(self.displayed_results()):
            return row
        return None

    def pointer_move(self, x: float, y: float) -> None:
        row = self.row_at(x, y)
        if row is not None:
            self.select(row)

    def pointer_down(self, x: float, y: float, button: int = 0) -> bool:
        """Primary button on a row executes that row."""
        if button != 0:
            return False
        row = self.row_at(x, y)
        if row is None:
            return False
        return self.confirm(row)

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def confirm(self, index: int | None = None) -> bool:
        """
        Execute the command at index (default: the selection).

        The palette closes right away; the command itself runs on the
        host's next tick. Returns False when nothing was scheduled.
        """
        if not self.is_open:
            logger.debug("Ignoring confirm on a palette that is not open")
            return False

        session = self._session
        if index is None:
            index = self._wrap(session.selected_index)

        displayed = self.displayed_results()
        if not 0 <= index < len(displayed):
            logger.error(f"Can't execute command with index because out-of-bounds: {index}")
            return False

        command = displayed[index].command
        arguments = list(session.arguments) if session.arguments is not None else None

        session.state = PaletteState.EXECUTING
        self.close()
        self._schedule(lambda: self._run(session, command, arguments))
        return True

    def _run(
        self, session: PaletteSession, command: Command, arguments: list[str] | None
    ) -> None:
        try:
            dispatch(command, arguments)
        except Exception as e:
            error = CommandExecutionError(str(e), title=command.title, arguments=arguments)
            logger.error(str(error), exc_info=e)
        finally:
            session.state = PaletteState.CLOSED

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def rows(self) -> list[PaletteRow]:
        """Draw instructions for the visible rows. Empty once the session closes."""
        session = self._session
        if session is None:
            return []

        displayed = self.displayed_results()
        selected = self._wrap(session.selected_index)

        rows = []
        for i, ranked in enumerate(displayed):
            command = ranked.command
            title = command.title
            subtitle = truncate_subtitle(title, command.subtitle)
            if self.debug:
                subtitle = format_debug_subtitle(subtitle, ranked.score)
            rows.append(
                PaletteRow(
                    index=i,
                    title_markup=highlight_title(title, session.search_term, self.dim_color),
                    plain_title=title,
                    subtitle=subtitle,
                    icon=command.icon,
                    selected=i == selected,
                    score=ranked.score,
                )
            )
        return rows

    def geometry(self) -> WindowGeometry:
        """Window size for the current result count."""
        return WindowGeometry(
            x=0,
            y=0,
            width=WINDOW_WIDTH,
            height=WINDOW_HEIGHT + len(self.displayed_results()) * ROW_HEIGHT,
        )
