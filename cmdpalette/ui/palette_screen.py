"""
Command Palette Screen - modal overlay around `PalettePresenter`.

The screen only forwards events and draws the rows the presenter hands back;
matching, selection and execution live in the presenter.
"""

import logging

from rich.markup import escape
from textual import events
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.message import Message
from textual.screen import ModalScreen
from textual.widgets import Input, Static

from cmdpalette.config.constants import (
    COMMAND_PALETTE_WINDOW_TITLE,
    ROW_HEIGHT,
    SELECTED_BACKGROUND_ALPHA,
    SELECTED_BACKGROUND_COLOR,
    WINDOW_HEIGHT,
)
from cmdpalette.palette.palette_manager import CommandManager
from cmdpalette.palette.palette_presenter import PalettePresenter, PaletteRow, PaletteSession

logger = logging.getLogger(__name__)

# Terminal lines per result row: title + subtitle
ROW_LINES = 2

_SELECTED_BACKGROUND = f"{SELECTED_BACKGROUND_COLOR} {int(SELECTED_BACKGROUND_ALPHA * 100)}%"


class PaletteRowWidget(Static):
    """Widget for a single palette row."""

    DEFAULT_CSS = f"""
    PaletteRowWidget {{
        height: {ROW_LINES};
        padding: 0 1;
    }}

    PaletteRowWidget.-selected {{
        background: {_SELECTED_BACKGROUND};
    }}
    """

    class Highlighted(Message):
        """Pointer moved onto a row."""

        def __init__(self, index: int):
            super().__init__()
            self.index = index

    class Selected(Message):
        """Row clicked with the primary button."""

        def __init__(self, index: int):
            super().__init__()
            self.index = index

    def __init__(self, row: PaletteRow, **kwargs):
        super().__init__(self.format_row(row), **kwargs)
        self.row = row
        if row.selected:
            self.add_class("-selected")

    def show_row(self, row: PaletteRow) -> None:
        self.row = row
        self.set_class(row.selected, "-selected")
        self.update(self.format_row(row))

    @staticmethod
    def format_row(row: PaletteRow) -> str:
        icon = f"{escape(str(row.icon))} " if row.icon else ""
        return f"{icon}[b]{row.title_markup}[/b]\n[dim]{escape(row.subtitle)}[/dim]"

    def on_enter(self, event: events.Enter) -> None:
        self.post_message(self.Highlighted(self.row.index))

    def on_click(self, event: events.Click) -> None:
        if event.button != 1:
            return
        event.stop()
        self.post_message(self.Selected(self.row.index))


class CommandPaletteScreen(ModalScreen[None]):
    """
    Command palette modal overlay.

    Input syntax: `<search>;<arg>;<arg>` - everything after the first `;`
    is passed to commands that accept arguments.
    """

    CSS = """
    CommandPaletteScreen {
        align: center top;
        padding-top: 5;
    }

    #palette-container {
        width: 80;
        height: auto;
        background: $surface;
        border: solid $primary;
    }

    #palette-input {
        width: 100%;
        height: 3;
        border: none;
        border-bottom: solid $primary-darken-1;
        background: $surface-darken-1;
        padding: 0 1;
    }

    #palette-results {
        height: auto;
        padding: 0;
    }
    """

    BINDINGS = [
        Binding("escape", "palette_key('escape')", "Cancel", show=False, priority=True),
        Binding("enter", "palette_key('enter')", "Select", show=False, priority=True),
        Binding("up", "palette_key('up')", "Up", show=False, priority=True),
        Binding("down", "palette_key('down')", "Down", show=False, priority=True),
        Binding("ctrl+p", "palette_key('up')", "Up", show=False),
        Binding("ctrl+n", "palette_key('down')", "Down", show=False),
    ]

    def __init__(
        self,
        manager: CommandManager | None,
        window_title: str = COMMAND_PALETTE_WINDOW_TITLE,
        initial_input: str = "",
        debug: bool | None = None,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.manager = manager
        self.window_title = window_title
        self.initial_input = initial_input
        self.presenter = PalettePresenter(
            schedule=self._schedule,
            on_close=self._on_close,
            on_state_update=self._on_state_update,
            debug=debug,
        )
        self._render_id = 0
        self._rendered_titles: list[str] = []

    def compose(self) -> ComposeResult:
        with Vertical(id="palette-container"):
            yield Input(
                value=self.initial_input,
                placeholder=self.window_title.strip(),
                id="palette-input",
            )
            yield Vertical(id="palette-results")

    def on_mount(self) -> None:
        self.presenter.open(self.manager, self.window_title, self.initial_input)
        self.query_one("#palette-input", Input).focus()

    # ------------------------------------------------------------------
    # Presenter hooks
    # ------------------------------------------------------------------

    def _schedule(self, callback) -> None:
        # Runs after the dismiss has been processed
        self.app.call_later(callback)

    def _on_close(self) -> None:
        logger.debug(f"Closing palette {self.window_title!r}")
        self.dismiss(None)

    def _on_state_update(self, session: PaletteSession) -> None:
        self._render_id += 1
        self.call_later(self._render_results, self._render_id)

    async def _render_results(self, render_id: int) -> None:
        """Draw the presenter's rows, rebuilding widgets only when the rows changed."""
        # Skip if a newer render was requested
        if render_id != self._render_id or not self.presenter.is_open:
            return

        results_view = self.query_one("#palette-results", Vertical)
        rows = self.presenter.rows()
        titles = [row.plain_title for row in rows]
        if rows and titles == self._rendered_titles:
            # Same rows, only the selection moved
            for widget, row in zip(results_view.query(PaletteRowWidget), rows):
                widget.show_row(row)
            return
        self._rendered_titles = titles
        await results_view.remove_children()

        geometry = self.presenter.geometry()
        results_view.styles.height = (geometry.height - WINDOW_HEIGHT) // ROW_HEIGHT * ROW_LINES

        if not rows:
            if self.presenter.session and self.presenter.session.raw_input:
                results_view.styles.height = 1
                await results_view.mount(Static("[dim]No results found[/dim]", id="palette-empty"))
            return

        await results_view.mount_all(
            [PaletteRowWidget(row, id=f"palette-row-{row.index}") for row in rows]
        )

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id != "palette-input":
            return
        self.presenter.set_input(event.value)

    def action_palette_key(self, key: str) -> None:
        self.presenter.handle_key(key)

    def on_palette_row_widget_highlighted(self, message: PaletteRowWidget.Highlighted) -> None:
        self.presenter.select(message.index)

    def on_palette_row_widget_selected(self, message: PaletteRowWidget.Selected) -> None:
        self.presenter.confirm(message.index)
