"""CLI interface for bdmetals."""

from typing import Annotated, Optional

import typer

from .charts import show_price_chart
from .display import console, display_error, display_record, display_summary, display_trend
from .loader import PriceDataError, PriceDataSource
from .log import configure_logging
from .models import MetalType, Unit, Window
from .tui import run_interactive
from .view import PriceView

app = typer.Typer(
    name="bdmetals",
    help="Gold and silver price history in Bangladesh, per gram or bhori.",
    invoke_without_command=True,
)

MetalOption = Annotated[
    MetalType,
    typer.Option("--metal", "-m", help="Metal to show"),
]
WindowOption = Annotated[
    Window,
    typer.Option("--window", "-w", help="Trailing time window"),
]
UnitOption = Annotated[
    Unit,
    typer.Option("--unit", "-u", help="Display unit"),
]


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    metal: MetalOption = MetalType.GOLD,
    window: WindowOption = Window.ALL,
    unit: UnitOption = Unit.BHORI,
    gold: Annotated[
        Optional[str],
        typer.Option("--gold", help="Gold price CSV path or URL"),
    ] = None,
    silver: Annotated[
        Optional[str],
        typer.Option("--silver", help="Silver price CSV path or URL"),
    ] = None,
    once: Annotated[
        bool,
        typer.Option("--once", "-1", help="Print a snapshot and exit (non-interactive)"),
    ] = False,
    log_level: Annotated[
        Optional[str],
        typer.Option("--log-level", help="Log level for messages on stderr"),
    ] = None,
) -> None:
    """Display gold or silver price history."""
    configure_logging(log_level)
    view = PriceView(PriceDataSource(gold, silver), metal=metal, window=window, unit=unit)
    ctx.obj = view

    if ctx.invoked_subcommand is not None:
        return

    if not once:
        run_interactive(view)
        return

    try:
        display_summary(view.metal, view.latest, view.trend, view.unit)
        console.print()
        show_price_chart(view)
    except PriceDataError as e:
        display_error(str(e))
        raise typer.Exit(1)


def get_view(ctx: typer.Context, **selection) -> PriceView:
    """The shared view, with any per-command selection applied."""
    view: PriceView = ctx.obj
    if selection.get("metal") is not None:
        view.select_metal(selection["metal"])
    if selection.get("window") is not None:
        view.select_window(selection["window"])
    if selection.get("unit") is not None:
        view.select_unit(selection["unit"])
    return view


@app.command()
def chart(
    ctx: typer.Context,
    metal: Annotated[Optional[MetalType], typer.Option("--metal", "-m", help="Metal to chart")] = None,
    window: Annotated[Optional[Window], typer.Option("--window", "-w", help="Time window")] = None,
    unit: Annotated[Optional[Unit], typer.Option("--unit", "-u", help="Display unit")] = None,
) -> None:
    """Show the 22K price chart for a metal."""
    view = get_view(ctx, metal=metal, window=window, unit=unit)

    try:
        show_price_chart(view)
    except PriceDataError as e:
        display_error(str(e))
        raise typer.Exit(1)


@app.command()
def trend(
    ctx: typer.Context,
    unit: Annotated[Optional[Unit], typer.Option("--unit", "-u", help="Display unit")] = None,
) -> None:
    """Show the 7-day 22K price change for gold and silver."""
    view = get_view(ctx, unit=unit)

    try:
        for metal in MetalType:
            view.select_metal(metal)
            display_trend(metal, view.trend, view.unit)
    except PriceDataError as e:
        display_error(str(e))
        raise typer.Exit(1)


@app.command()
def lookup(
    ctx: typer.Context,
    date: Annotated[str, typer.Argument(help="Day to look up, e.g. 2024-03-01")],
    metal: Annotated[Optional[MetalType], typer.Option("--metal", "-m", help="Metal to look up")] = None,
    unit: Annotated[Optional[Unit], typer.Option("--unit", "-u", help="Display unit")] = None,
) -> None:
    """Show all purity prices recorded on one day."""
    view = get_view(ctx, metal=metal, unit=unit)

    try:
        display_record(view.index.lookup_date(date), view.unit)
    except PriceDataError as e:
        display_error(str(e))
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
