"""Price history charting for bdmetals."""

from .display import METAL_NAMES, convert_price, display_chart
from .models import Unit
from .series import TREND_PURITY, Series
from .view import PriceView


def chart_values(series: Series, unit: Unit) -> list[float]:
    """22K prices of a series in the given unit, oldest first."""
    return [convert_price(record.price(TREND_PURITY), unit) for record in series]


def resample(values: list[float], target_points: int) -> list[float]:
    """Resample values to exactly target_points using linear interpolation."""
    if len(values) == target_points:
        return values
    if len(values) == 0:
        return []
    if len(values) == 1 or target_points == 1:
        return [values[-1]] * target_points

    result = []
    for i in range(target_points):
        # Map target index to source position
        src_pos = i * (len(values) - 1) / (target_points - 1)
        src_idx = int(src_pos)
        frac = src_pos - src_idx

        if src_idx >= len(values) - 1:
            result.append(values[-1])
        else:
            interpolated = values[src_idx] + frac * (values[src_idx + 1] - values[src_idx])
            result.append(interpolated)

    return result


def show_price_chart(view: PriceView, width: int | None = None) -> None:
    """Display the 22K price chart for the view's current selection."""
    series = view.series
    values = chart_values(series, view.unit)
    if width:
        values = resample(values, width)
    title = f"{METAL_NAMES[view.metal]} 22K Price per {view.unit.value}"
    display_chart(title, values, [record.date for record in series], view.window)
