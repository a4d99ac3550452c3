"""Selection state and derived price data for the active metal."""

from .loader import PriceDataSource
from .models import MetalType, PriceRecord, TrendStat, Unit, Window
from .series import Series, SeriesIndex, build_index, calculate_trend, filter_window

WINDOWS = list(Window)


class PriceView:
    """Holds the (metal, window, unit) selection and what is derived from it.

    Derived values are recomputed from scratch for each new selection and
    memoized by the selection they came from. Unit only affects formatting.
    """

    def __init__(
        self,
        source: PriceDataSource,
        metal: MetalType = MetalType.GOLD,
        window: Window = Window.ALL,
        unit: Unit = Unit.BHORI,
    ):
        self.source = source
        self.metal = metal
        self.window = window
        self.unit = unit
        self._full: dict[MetalType, Series] = {}
        self._filtered: dict[tuple[MetalType, Window], tuple[Series, SeriesIndex]] = {}
        self._trends: dict[MetalType, TrendStat | None] = {}

    def select_metal(self, metal: MetalType) -> None:
        self.metal = metal

    def select_window(self, window: Window) -> None:
        self.window = window

    def select_unit(self, unit: Unit) -> None:
        self.unit = unit

    def cycle_window(self, step: int = 1) -> Window:
        """Move to the next (or previous) window and return it."""
        position = (WINDOWS.index(self.window) + step) % len(WINDOWS)
        self.window = WINDOWS[position]
        return self.window

    def toggle_unit(self) -> Unit:
        self.unit = Unit.GRAM if self.unit is Unit.BHORI else Unit.BHORI
        return self.unit

    @property
    def full_series(self) -> Series:
        """Unfiltered series for the active metal."""
        if self.metal not in self._full:
            self._full[self.metal] = self.source.load_series(self.metal)
        return self._full[self.metal]

    def _filtered_entry(self) -> tuple[Series, SeriesIndex]:
        key = (self.metal, self.window)
        if key not in self._filtered:
            series = filter_window(self.full_series, self.window)
            self._filtered[key] = (series, build_index(series))
        return self._filtered[key]

    @property
    def series(self) -> Series:
        """Active series filtered to the selected window."""
        return self._filtered_entry()[0]

    @property
    def index(self) -> SeriesIndex:
        return self._filtered_entry()[1]

    @property
    def trend(self) -> TrendStat | None:
        """7-day trend for the active metal, regardless of window."""
        if self.metal not in self._trends:
            self._trends[self.metal] = calculate_trend(self.full_series)
        return self._trends[self.metal]

    @property
    def latest(self) -> PriceRecord | None:
        series = self.series
        return series[-1] if series else None

    def lookup(self, ts: int) -> PriceRecord | None:
        """Record at an exact timestamp in the filtered series."""
        return self.index.get(ts)
