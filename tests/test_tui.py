"""Tests for interactive key handling."""

import readchar

from bdmetals.loader import PriceDataSource
from bdmetals.models import MetalType, Unit, Window
from bdmetals.tui import InteractiveTUI
from bdmetals.view import PriceView

from .factories import FakeSource


def make_tui(window=Window.WEEK) -> InteractiveTUI:
    return InteractiveTUI(PriceView(FakeSource(), window=window))


class TestKeyHandling:
    def test_quit(self):
        tui = make_tui()
        assert tui.handle_key("q") is False
        assert tui.handle_key("x") is True

    def test_select_metal(self):
        tui = make_tui()
        tui.handle_key("s")
        assert tui.view.metal == MetalType.SILVER
        tui.handle_key("1")
        assert tui.view.metal == MetalType.GOLD

    def test_window_keys(self):
        tui = make_tui(Window.WEEK)
        tui.handle_key(">")
        assert tui.view.window == Window.MONTH
        tui.handle_key(",")
        assert tui.view.window == Window.WEEK

    def test_unit_toggle(self):
        tui = make_tui()
        tui.handle_key("u")
        assert tui.view.unit == Unit.GRAM

    def test_cursor_moves_within_series(self):
        tui = make_tui(Window.WEEK)

        tui.handle_key(readchar.key.LEFT)
        assert tui.cursor == 6
        for _ in range(10):
            tui.handle_key(readchar.key.LEFT)
        assert tui.cursor == 0
        tui.handle_key(readchar.key.RIGHT)
        assert tui.cursor == 1

    def test_detail_panel_follows_cursor(self):
        tui = make_tui(Window.WEEK)
        assert tui.build_detail_panel() is None

        tui.handle_key(readchar.key.RIGHT)

        assert tui.build_detail_panel() is not None

    def test_window_change_resets_cursor(self):
        tui = make_tui(Window.WEEK)
        tui.handle_key(readchar.key.LEFT)
        tui.handle_key(">")
        assert tui.cursor is None

    def test_build_display(self):
        tui = make_tui()
        tui.build_display()
        assert tui.error_message is None


class TestLoadErrors:
    """A source that cannot be read shows up in the status bar."""

    def make_broken_tui(self, tmp_path) -> InteractiveTUI:
        source = PriceDataSource(
            gold_source=tmp_path / "missing.csv",
            silver_source=tmp_path / "missing-silver.csv",
        )
        return InteractiveTUI(PriceView(source))

    def test_build_display_reports_error(self, tmp_path):
        tui = self.make_broken_tui(tmp_path)

        tui.build_display()

        assert "Price file not found" in tui.error_message

    def test_cursor_keys_do_not_crash(self, tmp_path):
        tui = self.make_broken_tui(tmp_path)
        tui.build_display()

        assert tui.handle_key(readchar.key.LEFT) is True
        assert tui.handle_key(readchar.key.RIGHT) is True

        assert tui.cursor is None
        assert "Price file not found" in tui.error_message
