"""Tests for the palette presenter: parsing, selection, execution, output."""

import logging

import pytest
from rich.text import Text

from cmdpalette.config.constants import ROW_HEIGHT, WINDOW_HEIGHT, WINDOW_WIDTH
from cmdpalette.palette.palette_commands import CallbackCommand
from cmdpalette.palette.palette_loaders import FunctionCommandLoader, StaticCommandLoader
from cmdpalette.palette.palette_manager import CommandManager
from cmdpalette.palette.palette_presenter import (
    ExecutionQueue,
    PalettePresenter,
    PaletteSession,
    PaletteState,
    ParsedInput,
    WindowGeometry,
    dispatch,
    parse_input,
)
from palette_fixtures import DIM, make_commands


def _manager(titles, executed, with_arguments=()):
    return CommandManager([StaticCommandLoader(make_commands(titles, executed, with_arguments))])


class TestParseInput:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("foo;bar;baz", ParsedInput("foo", ["bar", "baz"])),
            ("foo", ParsedInput("foo", None)),
            (";;foo", ParsedInput("", ["foo"])),
            ("foo;;bar;", ParsedInput("foo", ["bar"])),
            ("foo;", ParsedInput("foo", None)),
            ("", ParsedInput("", None)),
            (None, ParsedInput("", None)),
            ("a b;c d", ParsedInput("a b", ["c d"])),
        ],
    )
    def test_parse(self, raw, expected):
        assert parse_input(raw) == expected


class TestOpen:
    def test_initial_state_is_closed(self, presenter):
        assert presenter.state == PaletteState.CLOSED
        assert presenter.rows() == []

    def test_open_loads_all_commands(self, presenter, manager):
        session = presenter.open(manager)
        assert isinstance(session, PaletteSession)
        assert presenter.state == PaletteState.OPEN
        assert len(session.results) == 5
        assert session.selected_index == 0

    def test_open_with_initial_input(self, presenter, manager):
        session = presenter.open(manager, initial_input="cam;x")
        assert session.search_term == "cam"
        assert session.arguments == ["x"]
        assert session.results[0].command.title == "Main Camera"

    def test_reopen_starts_fresh_session(self, presenter, manager):
        first = presenter.open(manager)
        presenter.set_input("cam")
        presenter.move_selection(1)
        presenter.close()
        second = presenter.open(manager)
        assert second is not first
        assert second.raw_input == ""
        assert second.selected_index == 0
        assert presenter.is_open

    def test_missing_manager_logs_error(self, presenter, caplog):
        with caplog.at_level(logging.ERROR):
            session = presenter.open(None)
        assert "without a command manager" in caplog.text
        assert session.results == []
        assert presenter.rows() == []
        assert presenter.geometry().height == WINDOW_HEIGHT
        presenter.set_input("cam")
        assert presenter.rows() == []
        assert presenter.confirm() is False


class TestInput:
    def test_set_input_reranks_and_resets_selection(self, presenter, manager):
        presenter.open(manager)
        presenter.move_selection(2)
        presenter.set_input("light")
        session = presenter.session
        assert session.selected_index == 0
        assert session.results[0].command.title == "Directional Light"

    def test_set_input_parses_arguments(self, presenter, manager):
        presenter.open(manager)
        presenter.set_input("spawn;Goblin;;3")
        assert presenter.session.search_term == "spawn"
        assert presenter.session.arguments == ["Goblin", "3"]

    def test_state_updates_are_reported(self, manager):
        updates = []
        presenter = PalettePresenter(
            on_state_update=updates.append, display_cap=8, debug=False, dim_color=DIM
        )
        presenter.open(manager)
        presenter.set_input("c")
        presenter.move_selection(1)
        assert len(updates) == 3
        assert all(isinstance(u, PaletteSession) for u in updates)

    def test_reload_queries_sources_again(self, presenter):
        titles = ["One"]
        manager = CommandManager(
            [FunctionCommandLoader(lambda: [CallbackCommand(t, lambda: None) for t in titles])]
        )
        presenter.open(manager)
        titles.append("Two")
        presenter.reload()
        assert [r.command.title for r in presenter.session.results] == ["One", "Two"]


class TestSelection:
    def test_wraps_down(self, presenter, manager):
        presenter.open(manager)
        for _ in range(5):
            presenter.handle_key("down")
        assert presenter.session.selected_index == 0

    def test_wraps_up(self, presenter, manager):
        presenter.open(manager)
        presenter.handle_key("up")
        assert presenter.session.selected_index == 4

    def test_wraps_over_display_cap(self, executed):
        presenter = PalettePresenter(display_cap=8, debug=False, dim_color=DIM)
        presenter.open(_manager([f"Item {i}" for i in range(12)], executed))
        presenter.move_selection(-1)
        assert presenter.session.selected_index == 7
        presenter.move_selection(1)
        assert presenter.session.selected_index == 0

    def test_move_on_empty_results_stays_zero(self, presenter, executed):
        presenter.open(_manager([], executed))
        presenter.move_selection(1)
        assert presenter.session.selected_index == 0

    def test_select_within_bounds(self, presenter, manager):
        presenter.open(manager)
        assert presenter.select(3)
        assert presenter.session.selected_index == 3
        assert not presenter.select(5)
        assert presenter.session.selected_index == 3

    def test_unknown_key_not_consumed(self, presenter, manager):
        presenter.open(manager)
        assert presenter.handle_key("tab") is False
        assert presenter.handle_key("DOWN") is True


class TestConfirm:
    def test_executes_on_next_tick_after_close(self, manager, executed):
        events = []
        presenter = PalettePresenter(
            on_close=lambda: events.append("closed"), display_cap=8, debug=False, dim_color=DIM
        )
        presenter.open(manager)
        presenter.set_input("cam")
        assert presenter.handle_key("enter")

        assert events == ["closed"]
        assert executed == []
        assert presenter.state == PaletteState.EXECUTING

        assert presenter.queue.run_pending() == 1
        assert executed == ["Main Camera"]
        assert presenter.state == PaletteState.CLOSED

    def test_custom_scheduler(self, manager, executed):
        scheduled = []
        presenter = PalettePresenter(
            schedule=scheduled.append, display_cap=8, debug=False, dim_color=DIM
        )
        presenter.open(manager)
        presenter.move_selection(1)
        presenter.confirm()
        assert len(scheduled) == 1
        assert len(presenter.queue) == 0
        scheduled[0]()
        assert executed == ["Main Camera"]

    def test_out_of_range_does_nothing(self, presenter, manager, executed, caplog):
        presenter.open(manager)
        with caplog.at_level(logging.ERROR):
            assert presenter.confirm(7) is False
        assert "out-of-bounds: 7" in caplog.text
        assert presenter.state == PaletteState.OPEN
        assert presenter.queue.run_pending() == 0
        assert executed == []

    def test_confirm_after_results_emptied(self, presenter, manager, executed):
        presenter.open(manager)
        presenter.set_input("zzz")
        presenter.set_input("qqq")
        # Every command scored zero but is still listed
        assert len(presenter.session.results) == 5
        presenter.session.results = []
        assert presenter.confirm() is False
        assert presenter.is_open
        assert executed == []

    def test_arguments_passed_to_argument_commands(self, executed):
        presenter = PalettePresenter(display_cap=8, debug=False, dim_color=DIM)
        presenter.open(_manager(["Spawn Enemy"], executed, with_arguments=("Spawn Enemy",)))
        presenter.set_input("spawn;Goblin;3")
        presenter.confirm()
        presenter.queue.run_pending()
        assert executed == [("Spawn Enemy", ["Goblin", "3"])]

    def test_arguments_fall_back_for_plain_commands(self, presenter, manager, executed, caplog):
        presenter.open(manager)
        presenter.set_input("player;fast")
        presenter.confirm()
        with caplog.at_level(logging.WARNING):
            presenter.queue.run_pending()
        assert executed == ["Player"]
        assert "does not accept arguments" in caplog.text

    def test_failing_command_is_logged(self, presenter, caplog):
        def explode():
            raise RuntimeError("boom")

        manager = CommandManager([StaticCommandLoader([CallbackCommand("Explode", explode)])])
        presenter.open(manager)
        presenter.confirm()
        with caplog.at_level(logging.ERROR):
            presenter.queue.run_pending()
        assert "boom" in caplog.text
        assert "Explode" in caplog.text
        assert presenter.state == PaletteState.CLOSED

    def test_input_ignored_while_executing(self, presenter, manager):
        presenter.open(manager)
        presenter.confirm()
        presenter.set_input("cam")
        presenter.move_selection(1)
        assert presenter.session.raw_input == ""
        assert presenter.confirm() is False
        assert len(presenter.queue) == 1


class TestClose:
    def test_double_escape_closes_once(self, manager):
        closes = []
        presenter = PalettePresenter(
            on_close=lambda: closes.append(1), display_cap=8, debug=False, dim_color=DIM
        )
        presenter.open(manager)
        presenter.handle_key("escape")
        presenter.handle_key("escape")
        assert closes == [1]
        assert presenter.state == PaletteState.CLOSED

    def test_escape_then_focus_loss_closes_once(self, manager):
        closes = []
        presenter = PalettePresenter(
            on_close=lambda: closes.append(1), display_cap=8, debug=False, dim_color=DIM
        )
        presenter.open(manager)
        presenter.handle_key("escape")
        presenter.focus_lost()
        assert closes == [1]

    def test_confirm_then_focus_loss_closes_once(self, manager):
        closes = []
        presenter = PalettePresenter(
            on_close=lambda: closes.append(1), display_cap=8, debug=False, dim_color=DIM
        )
        presenter.open(manager)
        presenter.confirm()
        presenter.focus_lost()
        assert closes == [1]

    def test_close_without_session(self, presenter):
        assert presenter.close() is False

    def test_cancel_executes_nothing(self, presenter, manager, executed):
        presenter.open(manager)
        presenter.handle_key("escape")
        assert presenter.queue.run_pending() == 0
        assert executed == []

    def test_no_rows_after_close(self, presenter, manager):
        presenter.open(manager)
        assert len(presenter.rows()) == 5
        presenter.close()
        assert presenter.rows() == []
        assert presenter.displayed_results() == []
        assert presenter.geometry().height == WINDOW_HEIGHT

    def test_no_rows_while_executing(self, presenter, manager):
        presenter.open(manager)
        presenter.confirm()
        assert presenter.state == PaletteState.EXECUTING
        assert presenter.rows() == []


class TestPointer:
    def test_row_at(self, presenter, manager):
        presenter.open(manager)
        assert presenter.row_at(10, WINDOW_HEIGHT - 1) is None
        assert presenter.row_at(10, WINDOW_HEIGHT) == 0
        assert presenter.row_at(10, WINDOW_HEIGHT + ROW_HEIGHT * 2 + 5) == 2
        assert presenter.row_at(10, WINDOW_HEIGHT + ROW_HEIGHT * 5) is None
        assert presenter.row_at(WINDOW_WIDTH, WINDOW_HEIGHT) is None
        assert presenter.row_at(-1, WINDOW_HEIGHT) is None

    def test_pointer_move_selects_row(self, presenter, manager):
        presenter.open(manager)
        presenter.pointer_move(5, WINDOW_HEIGHT + ROW_HEIGHT * 3)
        assert presenter.session.selected_index == 3

    def test_pointer_down_executes_row(self, presenter, manager, executed):
        presenter.open(manager)
        assert presenter.pointer_down(5, WINDOW_HEIGHT + ROW_HEIGHT + 1)
        presenter.queue.run_pending()
        assert executed == ["Main Camera"]

    def test_secondary_button_ignored(self, presenter, manager, executed):
        presenter.open(manager)
        assert presenter.pointer_down(5, WINDOW_HEIGHT + 1, button=1) is False
        assert presenter.is_open

    def test_pointer_outside_rows(self, presenter, manager):
        presenter.open(manager)
        assert presenter.pointer_down(5, 5) is False
        assert presenter.is_open


class TestRows:
    def test_rows_highlight_and_selection(self, presenter, manager):
        presenter.open(manager)
        presenter.set_input("cam")
        rows = presenter.rows()
        assert rows[0].plain_title == "Main Camera"
        assert rows[0].selected
        assert not any(r.selected for r in rows[1:])
        assert rows[0].title_markup == f"[{DIM}]Main [/]Cam[{DIM}]era[/]"
        assert Text.from_markup(rows[0].title_markup).plain == "Main Camera"
        assert rows[0].subtitle == "Menu/Main Camera"

    def test_rows_capped(self, executed):
        presenter = PalettePresenter(display_cap=8, debug=False, dim_color=DIM)
        presenter.open(_manager([f"Item {i}" for i in range(12)], executed))
        assert len(presenter.rows()) == 8
        assert presenter.geometry() == WindowGeometry(0, 0, WINDOW_WIDTH, WINDOW_HEIGHT + 8 * ROW_HEIGHT)

    def test_geometry_tracks_rows(self, presenter, manager):
        presenter.open(manager)
        assert presenter.geometry().height == WINDOW_HEIGHT + 5 * ROW_HEIGHT
        assert presenter.geometry().height == WINDOW_HEIGHT + len(presenter.rows()) * ROW_HEIGHT

    def test_long_subtitles_truncated(self, presenter):
        long_path = "Assets/" + "Deep/" * 20 + "Player.prefab"
        manager = CommandManager(
            [StaticCommandLoader([CallbackCommand("Player", lambda: None, subtitle=long_path)])]
        )
        presenter.open(manager)
        subtitle = presenter.rows()[0].subtitle
        assert subtitle == ".." + long_path[-41:]

    def test_debug_appends_score(self, manager):
        presenter = PalettePresenter(display_cap=8, debug=True, dim_color=DIM)
        presenter.open(manager, initial_input="cam")
        row = presenter.rows()[0]
        assert row.subtitle == f"Menu/Main Camera (score: {row.score:.2f})"
        assert row.subtitle.endswith("(score: 3.06)")

    def test_invalidated_command_disappears(self, presenter):
        alive = {"player": True}
        commands = [
            CallbackCommand("Player", lambda: None, is_valid=lambda: alive["player"]),
            CallbackCommand("Camera", lambda: None),
        ]
        presenter.open(CommandManager([StaticCommandLoader(commands)]))
        presenter.move_selection(1)
        alive["player"] = False
        rows = presenter.rows()
        assert [r.plain_title for r in rows] == ["Camera"]
        assert rows[0].selected
        assert presenter.geometry().height == WINDOW_HEIGHT + ROW_HEIGHT

    def test_rows_do_not_change_selection(self, presenter):
        alive = {"player": True}
        commands = [
            CallbackCommand("Player", lambda: None, is_valid=lambda: alive["player"]),
            CallbackCommand("Camera", lambda: None),
        ]
        presenter.open(CommandManager([StaticCommandLoader(commands)]))
        presenter.move_selection(1)
        alive["player"] = False
        presenter.rows()
        assert presenter.session.selected_index == 1

    def test_confirm_uses_highlighted_row_after_shrink(self, presenter):
        ran = []
        alive = {"player": True}
        commands = [
            CallbackCommand("Player", lambda: ran.append("Player"), is_valid=lambda: alive["player"]),
            CallbackCommand("Camera", lambda: ran.append("Camera")),
        ]
        presenter.open(CommandManager([StaticCommandLoader(commands)]))
        presenter.move_selection(1)
        alive["player"] = False
        assert presenter.confirm()
        presenter.queue.run_pending()
        assert ran == ["Camera"]


class TestDispatchAndQueue:
    def test_dispatch_without_arguments(self, executed):
        (command,) = make_commands(["A"], executed, with_arguments=("A",))
        dispatch(command, None)
        assert executed == [("A", [])]

    def test_queue_runs_only_already_pending(self):
        queue = ExecutionQueue()
        order = []
        queue.schedule(lambda: (order.append(1), queue.schedule(lambda: order.append(2))))
        assert queue.run_pending() == 1
        assert order == [1]
        assert len(queue) == 1
        assert queue.run_pending() == 1
        assert order == [1, 2]
