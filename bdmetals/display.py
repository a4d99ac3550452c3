"""Price formatting and Rich-based terminal display for bdmetals."""

from typing import Protocol

from asciichartpy import plot
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import MetalType, PriceRecord, Purity, TrendStat, Unit, Window
from .series import from_millis

console = Console()

CURRENCY_SYMBOL = "৳"
TREND_LABEL = "গত ৭ দিনে"

METAL_NAMES = {
    MetalType.GOLD: "Gold",
    MetalType.SILVER: "Silver",
}

METAL_STYLES = {
    MetalType.GOLD: "bold yellow",
    MetalType.SILVER: "bold white",
}


class CurrencyFormatter(Protocol):
    """Formats an amount as currency with a fixed number of fraction digits."""

    def __call__(self, value: float, fraction_digits: int) -> str: ...


class NarrowSymbolFormatter:
    """en-US grouping with a narrow currency symbol, e.g. '৳11,664.0'."""

    def __init__(self, symbol: str = CURRENCY_SYMBOL):
        self.symbol = symbol

    def __call__(self, value: float, fraction_digits: int) -> str:
        amount = f"{abs(value):,.{fraction_digits}f}"
        # Avoid '-৳0' when a small negative rounds to zero
        sign = "-" if value < 0 and float(amount.replace(",", "")) != 0 else ""
        return f"{sign}{self.symbol}{amount}"


default_formatter = NarrowSymbolFormatter()


def convert_price(price: float, unit: Unit) -> float:
    """Convert a per-gram price to a per-unit price."""
    return price * unit.grams


def format_price(
    price: float,
    unit: Unit = Unit.GRAM,
    show_fraction: bool = False,
    formatter: CurrencyFormatter | None = None,
) -> str:
    """Format a per-gram price in the given unit.

    One fraction digit when show_fraction is set, none otherwise.
    """
    formatter = formatter or default_formatter
    return formatter(convert_price(price, unit), 1 if show_fraction else 0)


def format_trend(stat: TrendStat, unit: Unit) -> Text:
    """Format the 7-day change with an arrow and color coding."""
    style = "green" if stat.is_up else "red"
    arrow = "▲" if stat.is_up else "▼"
    return Text(
        f"{arrow} {format_price(abs(stat.diff), unit)} ({stat.percentage_text}%)",
        style=style,
    )


def format_axis_date(ts: int, window: Window) -> str:
    """Axis tick label: day precision for short windows, month otherwise."""
    if window in (Window.WEEK, Window.MONTH):
        return from_millis(ts).strftime("%b %d")
    return from_millis(ts).strftime("%b %Y")


def format_day(ts: int) -> str:
    return from_millis(ts).strftime("%b %d, %Y")


def format_long_day(ts: int) -> str:
    return from_millis(ts).strftime("%B %d, %Y")


def build_latest_table(record: PriceRecord, unit: Unit) -> Table:
    """Latest price for every purity in the active unit."""
    table = Table(expand=True)
    for purity in Purity:
        table.add_column(purity.label, justify="center")
    table.add_row(*(format_price(record.price(purity), unit) for purity in Purity))
    return table


def build_trend_line(stat: TrendStat | None, unit: Unit) -> Text:
    """The '7 days' trend line, or a dim placeholder when unavailable."""
    if stat is None:
        return Text(f"{TREND_LABEL}: -", style="dim")
    text = Text(f"{TREND_LABEL}: ")
    text.append_text(format_trend(stat, unit))
    return text


def build_record_panel(record: PriceRecord, unit: Unit) -> Panel:
    """Detail for one day, the terminal version of a chart tooltip."""
    table = Table(show_header=False, box=None)
    table.add_column("Purity", style="dim")
    table.add_column("Price", justify="right")

    bhori = unit is Unit.BHORI
    for purity in Purity:
        table.add_row(purity.label, format_price(record.price(purity), unit, show_fraction=bhori))

    return Panel(table, title=format_day(record.date), border_style="cyan")


def build_summary_panel(
    metal: MetalType,
    record: PriceRecord | None,
    trend: TrendStat | None,
    unit: Unit,
) -> Panel:
    """Latest prices, 7-day trend and last-updated date for a metal."""
    title = f"{METAL_NAMES[metal]} Price History in Bangladesh (per {unit.value})"
    if record is None:
        return Panel(Text("No price data available.", style="dim"), title=title, border_style="blue")

    table = Table(show_header=False, box=None, expand=True)
    table.add_column()
    table.add_row(build_trend_line(trend, unit))
    table.add_row(build_latest_table(record, unit))
    table.add_row(Text(f"Last updated: {format_long_day(record.date)}", style="dim"))
    return Panel(table, title=title, border_style="blue", expand=True)


def display_summary(
    metal: MetalType,
    record: PriceRecord | None,
    trend: TrendStat | None,
    unit: Unit,
) -> None:
    console.print(build_summary_panel(metal, record, trend, unit))


def display_trend(metal: MetalType, trend: TrendStat | None, unit: Unit) -> None:
    """Display the 7-day trend for a metal."""
    text = Text(f"{METAL_NAMES[metal]} 22K ", style=METAL_STYLES[metal])
    text.append_text(build_trend_line(trend, unit))
    console.print(text)


def display_record(record: PriceRecord | None, unit: Unit) -> None:
    """Display one day's prices, or a note when the date has no record."""
    if record is None:
        console.print("[dim]No price recorded for that date.[/dim]")
        return
    console.print(build_record_panel(record, unit))


def render_chart(values: list[float], height: int = 10) -> str:
    """Render values as an ASCII line chart."""
    return plot(values, {"height": height, "format": "{:10,.0f} "})


def display_chart(
    title: str,
    values: list[float],
    dates: list[int],
    window: Window,
) -> None:
    """Display ASCII price chart."""
    if not values or not dates:
        console.print("[dim]No historical data available.[/dim]")
        return

    chart = render_chart(values)
    start_date = format_axis_date(dates[0], window)
    end_date = format_axis_date(dates[-1], window)

    console.print(Panel(
        f"{chart}\n\n[dim]{start_date} to {end_date}[/dim]",
        title=f"{title} ({window.value})",
        border_style="magenta",
    ))


def display_error(message: str) -> None:
    """Display error message."""
    console.print(f"[red]Error:[/red] {message}")
