"""
Reference Textual host for the command palette.

Keeps a tiny in-memory "scene" and a list of asset paths so both palette
flavours have something to show:

- ctrl+t        "Open.."            scene objects and assets
- ctrl+shift+m  "Command Palette.." the app's own command_* methods
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Footer, Static

from cmdpalette.config.constants import COMMAND_PALETTE_WINDOW_TITLE, OPEN_WINDOW_TITLE
from cmdpalette.palette.palette_loaders import (
    AssetCommandLoader,
    MethodCommandLoader,
    ObjectCommandLoader,
)
from cmdpalette.palette.palette_manager import CommandManager

from .palette_screen import CommandPaletteScreen

logger = logging.getLogger(__name__)

DEFAULT_SCENE = ("Main Camera", "Directional Light", "Player", "Enemy Spawner")


@dataclass(eq=False)
class SceneObject:
    """Stand-in for a live editor object."""

    name: str
    path: str
    destroyed: bool = False


class PaletteApp(App[None]):
    """Minimal editor shell that opens the palette."""

    ENABLE_COMMAND_PALETTE = False

    CSS = """
    Screen { layout: vertical; }

    #status {
        height: auto;
        padding: 1 2;
    }
    """

    BINDINGS = [
        Binding("ctrl+t", "open_palette", "Open.."),
        Binding("ctrl+shift+m", "open_commands", "Command Palette.."),
        Binding("ctrl+q", "quit", "Quit"),
    ]

    def __init__(
        self,
        asset_paths: list[Path] | None = None,
        scene: list[str] | tuple[str, ...] = DEFAULT_SCENE,
        start: str | None = "open",
        initial_input: str = "",
        debug: bool | None = None,
    ):
        super().__init__()
        self.asset_paths = list(asset_paths or [])
        self.scene: list[SceneObject] = [SceneObject(name, f"Scene/{name}") for name in scene]
        self.start = start
        self.initial_input = initial_input
        self.show_scores = debug
        self.selected: SceneObject | None = None
        self.history: list[str] = []

    def compose(self) -> ComposeResult:
        yield Static("Press ctrl+t to open, ctrl+shift+m for commands", id="status")
        yield Footer()

    def on_mount(self) -> None:
        if self.start == "open":
            self.action_open_palette()
        elif self.start == "commands":
            self.action_open_commands()

    # ------------------------------------------------------------------
    # Command managers, rebuilt per invocation
    # ------------------------------------------------------------------

    def live_objects(self) -> list[SceneObject]:
        return [obj for obj in self.scene if not obj.destroyed]

    def build_open_manager(self) -> CommandManager:
        manager = CommandManager()
        manager.add_loader(
            AssetCommandLoader(lambda: self.asset_paths, on_open=self.open_asset)
        )
        manager.add_loader(ObjectCommandLoader(self.live_objects, on_select=self.select_object))
        return manager

    def build_command_manager(self) -> CommandManager:
        return CommandManager([MethodCommandLoader(owner=self, prefix="command_")])

    def _palette_active(self) -> bool:
        return isinstance(self.screen, CommandPaletteScreen)

    def action_open_palette(self) -> None:
        if self._palette_active():
            return
        self.push_screen(
            CommandPaletteScreen(
                self.build_open_manager(),
                OPEN_WINDOW_TITLE,
                initial_input=self.initial_input,
                debug=self.show_scores,
            )
        )

    def action_open_commands(self) -> None:
        if self._palette_active():
            return
        self.push_screen(
            CommandPaletteScreen(
                self.build_command_manager(),
                COMMAND_PALETTE_WINDOW_TITLE,
                initial_input=self.initial_input,
                debug=self.show_scores,
            )
        )

    def on_app_blur(self, event: events.AppBlur) -> None:
        if self._palette_active():
            self.screen.presenter.focus_lost()

    # ------------------------------------------------------------------
    # Targets
    # ------------------------------------------------------------------

    def set_status(self, text: str) -> None:
        self.history.append(text)
        logger.info(text)
        self.query_one("#status", Static).update(text)

    def open_asset(self, path: Path) -> None:
        self.set_status(f"Opened asset {path}")

    def select_object(self, obj: SceneObject) -> None:
        self.selected = obj
        self.set_status(f"Selected {obj.path}")

    # ------------------------------------------------------------------
    # Palette commands (exposed through MethodCommandLoader)
    # ------------------------------------------------------------------

    def command_create_object(self, *names: str) -> None:
        """Create scene objects; pass names after ';'"""
        for name in names or ("GameObject",):
            self.scene.append(SceneObject(name, f"Scene/{name}"))
        self.set_status(f"Scene has {len(self.live_objects())} objects")

    def command_destroy_selected(self) -> None:
        """Destroy the selected scene object"""
        if self.selected is None or self.selected.destroyed:
            self.set_status("Nothing selected")
            return
        self.selected.destroyed = True
        self.set_status(f"Destroyed {self.selected.path}")
        self.selected = None

    def command_toggle_dark(self) -> None:
        """Switch between dark and light themes"""
        self.theme = "textual-light" if self.theme == "textual-dark" else "textual-dark"
        self.set_status(f"Theme: {self.theme}")

    def command_quit(self) -> None:
        """Exit the editor"""
        self.exit()
