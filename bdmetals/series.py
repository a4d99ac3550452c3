"""Price series parsing, windowing, indexing and trend statistics.

Every function here is pure: inputs are never mutated and each call returns
a new immutable value. A series is a tuple of PriceRecord sorted ascending
by date.
"""

import math
from collections.abc import Iterable, Iterator
from datetime import datetime, timedelta, timezone
from types import MappingProxyType

from loguru import logger

from .models import PriceRecord, Purity, RawRow, TrendStat, Window

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
PRICE_FIELDS = ("traditional", "k18", "k21", "k22")

TREND_DAYS = 7
TREND_PURITY = Purity.K22

Series = tuple[PriceRecord, ...]


class RecordParseError(ValueError):
    """A raw row could not be turned into a PriceRecord."""


class MalformedDate(RecordParseError):
    """The row's date is not an ISO-8601 date."""


class MalformedPrice(RecordParseError):
    """A price field is not a finite decimal number."""


def to_millis(moment: datetime) -> int:
    """Epoch milliseconds for a datetime. Naive values are taken as UTC."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return (moment - EPOCH) // timedelta(milliseconds=1)


def from_millis(ts: int) -> datetime:
    """UTC datetime for epoch milliseconds."""
    return EPOCH + timedelta(milliseconds=ts)


def parse_date(value: str) -> int:
    """Parse an ISO-8601 date or date-time into epoch milliseconds."""
    try:
        return to_millis(datetime.fromisoformat(value.strip()))
    except (AttributeError, ValueError) as e:
        raise MalformedDate(f"invalid date {value!r}") from e


def parse_price(value: str, field: str = "price") -> float:
    """Parse a decimal price string. NaN and infinities are rejected."""
    try:
        price = float(value)
    except (TypeError, ValueError) as e:
        raise MalformedPrice(f"invalid {field} {value!r}") from e
    if not math.isfinite(price):
        raise MalformedPrice(f"invalid {field} {value!r}")
    return price


def parse_row(row: RawRow) -> PriceRecord:
    """Convert one raw CSV row into a PriceRecord."""
    prices = {field: parse_price(getattr(row, field), field) for field in PRICE_FIELDS}
    return PriceRecord(date=parse_date(row.date), **prices)


def sort_series(records: Iterable[PriceRecord]) -> Series:
    """Return the records sorted ascending by date."""
    return tuple(sorted(records, key=lambda r: r.date))


def parse_rows(rows: Iterable[RawRow]) -> Series:
    """Parse a batch of rows, dropping the ones that fail, sorted by date."""
    records = []
    dropped = 0
    for row in rows:
        try:
            records.append(parse_row(row))
        except RecordParseError as e:
            dropped += 1
            logger.warning("Dropping price row dated {!r}: {}", row.date, e)

    if dropped:
        logger.info("Parsed {} price rows, dropped {}", len(records), dropped)
    return sort_series(records)


def _years_back(moment: datetime, years: int) -> datetime:
    """Same calendar day `years` earlier, clamping Feb 29 to Feb 28."""
    try:
        return moment.replace(year=moment.year - years)
    except ValueError:
        return moment.replace(year=moment.year - years, day=28)


def shift_back(ts: int, *, days: int = 0, years: int = 0) -> int:
    """Calendar-aware subtraction on an epoch-ms timestamp."""
    moment = from_millis(ts)
    if years:
        moment = _years_back(moment, years)
    return to_millis(moment - timedelta(days=days))


def window_cutoff(anchor: int, window: Window) -> int | None:
    """Exclusive lower bound for a window, or None when it keeps everything."""
    match window:
        case Window.WEEK:
            return shift_back(anchor, days=7)
        case Window.MONTH:
            return shift_back(anchor, days=30)
        case Window.YEAR:
            return shift_back(anchor, years=1)
        case Window.ALL:
            return None


def filter_window(series: Series, window: Window) -> Series:
    """Records within the trailing window, anchored at the latest record.

    A record dated exactly on the cutoff is excluded.
    """
    if not series:
        return ()

    anchor = max(record.date for record in series)
    cutoff = window_cutoff(anchor, window)
    if cutoff is None:
        return sort_series(series)
    return sort_series(record for record in series if record.date > cutoff)


class SeriesIndex:
    """Exact-timestamp lookup over a series.

    A miss returns None: hover positions between data points are normal.
    """

    def __init__(self, series: Series):
        self._records = MappingProxyType({record.date: record for record in series})

    def get(self, ts: int) -> PriceRecord | None:
        return self._records.get(ts)

    def lookup_date(self, value: str) -> PriceRecord | None:
        """Look up by ISO date string. Unparseable dates are misses."""
        try:
            return self.get(parse_date(value))
        except MalformedDate:
            return None

    def __contains__(self, ts: object) -> bool:
        return ts in self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[int]:
        return iter(sorted(self._records))


def build_index(series: Series) -> SeriesIndex:
    """Build a fresh timestamp index for a filtered series."""
    return SeriesIndex(series)


def calculate_trend(series: Series) -> TrendStat | None:
    """7-day change of the 22K price over the full, unfiltered series.

    Compares the latest record with the closest record on or before the
    date 7 days earlier. Returns None when there is not enough history
    or the earlier price is zero.
    """
    if len(series) < 2:
        return None

    last = max(series, key=lambda r: r.date)
    target = shift_back(last.date, days=TREND_DAYS)
    candidates = [record for record in series if record.date <= target]
    if not candidates:
        return None

    previous = max(candidates, key=lambda r: r.date)
    base = previous.price(TREND_PURITY)
    if base == 0:
        return None

    diff = last.price(TREND_PURITY) - base
    return TrendStat(
        diff=diff,
        percentage=round(diff / base * 100, 2),
        is_up=diff >= 0,
    )
