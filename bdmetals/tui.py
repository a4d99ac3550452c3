"""Interactive TUI mode for bdmetals."""

import queue
import sys
import termios
import threading

import readchar
from rich.console import Group
from rich.live import Live
from rich.panel import Panel
from rich.text import Text

from .charts import chart_values, resample
from .display import (
    METAL_NAMES,
    build_record_panel,
    build_summary_panel,
    console,
    format_axis_date,
    render_chart,
)
from .loader import PriceDataError
from .models import MetalType
from .view import WINDOWS, PriceView

METAL_KEYS = {
    "1": MetalType.GOLD,
    "g": MetalType.GOLD,
    "2": MetalType.SILVER,
    "s": MetalType.SILVER,
}


class InteractiveTUI:
    """Interactive terminal UI over a PriceView."""

    def __init__(self, view: PriceView):
        self.view = view
        self.running = False
        self.error_message: str | None = None
        # Position in the filtered series shown in the detail panel
        self.cursor: int | None = None
        self._key_queue: queue.Queue[str] = queue.Queue()
        self._display_dirty = threading.Event()

    def build_keybindings(self) -> Text:
        """Build the keybindings help line."""
        keys = Text(justify="center")
        key_style = "yellow"
        keys.append("  1-2", style=key_style)
        keys.append(" or ", style="dim")
        keys.append("g/s", style=key_style)
        keys.append(": metal  ", style="dim")
        keys.append("< >", style=key_style)
        keys.append(": window  ", style="dim")
        keys.append("u", style=key_style)
        keys.append(": unit  ", style="dim")
        keys.append("← →", style=key_style)
        keys.append(": day  ", style="dim")
        keys.append("q", style=key_style)
        keys.append(": quit", style="dim")
        return keys

    def build_chart_panel(self) -> Panel:
        """Build the 22K price chart for the selected window."""
        series = self.view.series
        metal_name = METAL_NAMES[self.view.metal]

        if not series:
            content = Text("No price data available.", style="dim")
        else:
            # Account for panel borders (2), padding (2), and y-axis labels (~12)
            chart_width = max(20, min(console.width - 16, 120))
            values = resample(chart_values(series, self.view.unit), chart_width)
            content = Text(f"{render_chart(values, height=8)}\n\n")
            content.append(
                f"{format_axis_date(series[0].date, self.view.window)} to "
                f"{format_axis_date(series[-1].date, self.view.window)}",
                style="dim",
            )

        window_display = []
        for window in WINDOWS:
            if window == self.view.window:
                window_display.append(f"[reverse]{window.value}[/reverse]")
            else:
                window_display.append(f"[dim]{window.value}[/dim]")

        return Panel(
            content,
            title=f"{metal_name} 22K per {self.view.unit.value}",
            subtitle=f"[dim]< >: window[/dim]  {' '.join(window_display)}",
            border_style="magenta",
        )

    def build_detail_panel(self) -> Panel | None:
        """Prices for the day under the cursor."""
        series = self.view.series
        if self.cursor is None or not series:
            return None
        record = self.view.lookup(series[self.cursor].date)
        if record is None:
            return None
        return build_record_panel(record, self.view.unit)

    def build_status_bar(self) -> Text:
        status = Text()
        if self.error_message:
            status.append(f"Error: {self.error_message}", style="red")
        else:
            status.append(f"{len(self.view.series)} days shown", style="dim")
        return status

    def build_display(self) -> Group:
        """Build the complete display."""
        components = [self.build_keybindings(), Text()]

        try:
            components.append(build_summary_panel(
                self.view.metal, self.view.latest, self.view.trend, self.view.unit
            ))
            components.append(self.build_chart_panel())
            detail = self.build_detail_panel()
            if detail:
                components.append(detail)
            self.error_message = None
        except PriceDataError as e:
            self.error_message = str(e)

        components.append(self.build_status_bar())
        return Group(*components)

    def move_cursor(self, step: int) -> None:
        """Step through the days of the filtered series."""
        try:
            count = len(self.view.series)
        except PriceDataError as e:
            self.error_message = str(e)
            self.cursor = None
            return
        if not count:
            self.cursor = None
            return
        if self.cursor is None:
            self.cursor = count - 1
        else:
            self.cursor = max(0, min(count - 1, self.cursor + step))

    def handle_key(self, key: str) -> bool:
        """Handle a key press. Returns False to quit."""
        if key.lower() in ("q", "\x03"):  # q or Ctrl+C
            return False

        if key.lower() in METAL_KEYS:
            self.view.select_metal(METAL_KEYS[key.lower()])
            self.cursor = None
            self._display_dirty.set()

        if key in ("<", ","):
            self.view.cycle_window(-1)
            self.cursor = None
            self._display_dirty.set()

        if key in (">", "."):
            self.view.cycle_window(1)
            self.cursor = None
            self._display_dirty.set()

        if key.lower() == "u":
            self.view.toggle_unit()
            self._display_dirty.set()

        if key == readchar.key.LEFT:
            self.move_cursor(-1)
            self._display_dirty.set()

        if key == readchar.key.RIGHT:
            self.move_cursor(1)
            self._display_dirty.set()

        return True

    def _key_reader_thread(self) -> None:
        """Background thread to read key presses."""
        while self.running:
            try:
                key = readchar.readkey()
                self._key_queue.put(key)
            except OSError:
                self._key_queue.put("q")  # Signal quit on terminal error
                break

    def run(self) -> None:
        """Run the interactive TUI."""
        self.running = True

        # Save terminal settings to restore on exit
        try:
            old_settings = termios.tcgetattr(sys.stdin)
        except termios.error:
            old_settings = None

        key_thread = threading.Thread(target=self._key_reader_thread, daemon=True)
        key_thread.start()

        try:
            with Live(
                self.build_display(),
                console=console,
                refresh_per_second=2,
                screen=True,
                vertical_overflow="crop",
            ) as live:
                while self.running:
                    try:
                        key = self._key_queue.get(timeout=0.1)
                        if not self.handle_key(key):
                            break
                    except queue.Empty:
                        pass

                    if self._display_dirty.is_set():
                        self._display_dirty.clear()
                        live.update(self.build_display())

        except KeyboardInterrupt:
            pass
        finally:
            self.running = False
            if old_settings:
                try:
                    termios.tcsetattr(sys.stdin, termios.TCSADRAIN, old_settings)
                except termios.error:
                    pass


def run_interactive(view: PriceView) -> None:
    """Run the interactive TUI."""
    InteractiveTUI(view).run()
