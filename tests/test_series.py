"""Tests for parsing, windowing, indexing and trend statistics."""

from datetime import date

import pytest
from loguru import logger

from bdmetals.models import Window
from bdmetals.series import (
    MalformedDate,
    MalformedPrice,
    build_index,
    calculate_trend,
    filter_window,
    parse_date,
    parse_price,
    parse_row,
    parse_rows,
    sort_series,
    window_cutoff,
)

from .factories import daily_records, make_record, make_row

DAY_MS = 86_400_000


class TestRecordParser:
    """Raw row to PriceRecord conversion."""

    def test_parse_date_is_utc_midnight(self):
        assert parse_date("1970-01-02") == DAY_MS
        assert parse_date("2024-01-01") == 1_704_067_200_000

    def test_parse_date_with_offset(self):
        assert parse_date("2024-03-01T06:00:00+06:00") == parse_date("2024-03-01")

    def test_parse_date_utc_suffix(self):
        assert parse_date("2024-03-01T00:00:00Z") == parse_date("2024-03-01")

    @pytest.mark.parametrize("value", ["", "2024-13-01", "yesterday", "01/03/2024"])
    def test_parse_date_malformed(self, value):
        with pytest.raises(MalformedDate):
            parse_date(value)

    def test_parse_price(self):
        assert parse_price("10500") == 10500.0
        assert parse_price(" 12.5 ") == 12.5

    @pytest.mark.parametrize("value", ["", "abc", "1,000", "nan", "inf", "-inf"])
    def test_parse_price_malformed(self, value):
        with pytest.raises(MalformedPrice):
            parse_price(value, "k22")

    def test_parse_row(self):
        record = parse_row(make_row("2024-03-01", k22="10000", k21="9500", k18="8000", traditional="6500"))

        assert record.date == parse_date("2024-03-01")
        assert (record.k22, record.k21, record.k18, record.traditional) == (10000, 9500, 8000, 6500)

    def test_parse_row_is_idempotent(self):
        row = make_row("2024-03-01", k22="10000.5")
        assert parse_row(row) == parse_row(row)

    def test_parse_rows_drops_malformed_and_sorts(self):
        rows = [
            make_row("2024-03-03"),
            make_row("bad-date"),
            make_row("2024-03-01"),
            make_row("2024-03-02", k22="n/a"),
            make_row("2024-03-02", k18=""),
        ]

        series = parse_rows(rows)

        assert [r.date for r in series] == [parse_date("2024-03-01"), parse_date("2024-03-03")]

    def test_parse_rows_logs_each_drop(self):
        messages = []
        sink_id = logger.add(lambda message: messages.append(message.record), level="WARNING")
        try:
            parse_rows([make_row("bad-date"), make_row("2024-03-01"), make_row("2024-03-02", k22="n/a")])
        finally:
            logger.remove(sink_id)

        warnings = [record for record in messages if record["level"].name == "WARNING"]
        assert len(warnings) == 2
        assert "bad-date" in warnings[0]["message"]
        assert "2024-03-02" in warnings[1]["message"]

    def test_parse_rows_empty(self):
        assert parse_rows([]) == ()


class TestWindowFilter:
    """Trailing windows anchored at the latest record."""

    @pytest.fixture
    def series(self):
        return daily_records(date(2024, 1, 1), 500)

    def test_all_time_keeps_everything_sorted(self, series):
        shuffled = series[250:] + series[:250]

        result = filter_window(shuffled, Window.ALL)

        assert len(result) == 500
        assert result == series

    def test_window_sizes(self, series):
        assert len(filter_window(series, Window.WEEK)) == 7
        assert len(filter_window(series, Window.MONTH)) == 30
        assert len(filter_window(series, Window.YEAR)) == 365

    def test_window_monotonicity(self, series):
        counts = [len(filter_window(series, w)) for w in (Window.WEEK, Window.MONTH, Window.YEAR, Window.ALL)]
        assert counts == sorted(counts)

    def test_output_strictly_ascending(self, series):
        for window in Window:
            result = filter_window(tuple(reversed(series)), window)
            assert all(a.date < b.date for a, b in zip(result, result[1:]))

    def test_cutoff_is_excluded(self):
        series = (make_record("2024-03-01"), make_record("2024-03-02"), make_record("2024-03-08"))

        result = filter_window(series, Window.WEEK)

        assert [r.date for r in result] == [parse_date("2024-03-02"), parse_date("2024-03-08")]

    def test_year_is_calendar_aware(self):
        # 2024-03-01 minus one calendar year is 2023-03-01, not 365 days back
        series = (make_record("2023-03-01"), make_record("2023-03-02"), make_record("2024-03-01"))

        result = filter_window(series, Window.YEAR)

        assert [r.date for r in result] == [parse_date("2023-03-02"), parse_date("2024-03-01")]

    def test_year_from_leap_day(self):
        series = (make_record("2023-02-28"), make_record("2023-03-01"), make_record("2024-02-29"))

        result = filter_window(series, Window.YEAR)

        assert [r.date for r in result] == [parse_date("2023-03-01"), parse_date("2024-02-29")]

    def test_window_cutoff(self):
        anchor = parse_date("2024-03-31")
        assert window_cutoff(anchor, Window.WEEK) == parse_date("2024-03-24")
        assert window_cutoff(anchor, Window.MONTH) == parse_date("2024-03-01")
        assert window_cutoff(anchor, Window.ALL) is None

    def test_empty_series(self):
        for window in Window:
            assert filter_window((), window) == ()

    def test_does_not_mutate_input(self, series):
        before = tuple(series)
        filter_window(series, Window.MONTH)
        assert series == before


class TestSeriesIndex:
    """Exact timestamp lookups."""

    def test_hit(self):
        series = sort_series([make_record("2024-03-02", k22=105), make_record("2024-03-01")])
        index = build_index(series)

        assert index.get(parse_date("2024-03-02")).k22 == 105
        assert parse_date("2024-03-01") in index
        assert len(index) == 2
        assert list(index) == [parse_date("2024-03-01"), parse_date("2024-03-02")]

    def test_miss_returns_none(self):
        index = build_index((make_record("2024-03-01"),))

        assert index.get(parse_date("2024-03-01") + 1) is None
        assert index.get(0) is None

    def test_lookup_date(self):
        index = build_index((make_record("2024-03-01", k22=101),))

        assert index.lookup_date("2024-03-01").k22 == 101
        assert index.lookup_date("2024-03-05") is None
        assert index.lookup_date("garbage") is None

    def test_empty(self):
        index = build_index(())
        assert len(index) == 0
        assert index.get(parse_date("2024-03-01")) is None


class TestTrendCalculator:
    """7-day change in the 22K price."""

    def test_exactly_seven_days(self):
        series = (make_record("2024-03-01", k22=100), make_record("2024-03-08", k22=110))

        stat = calculate_trend(series)

        assert stat.diff == 10
        assert stat.percentage == 10.0
        assert stat.percentage_text == "10.00"
        assert stat.is_up is True

    def test_single_record_unavailable(self):
        assert calculate_trend((make_record("2024-03-01"),)) is None

    def test_empty_unavailable(self):
        assert calculate_trend(()) is None

    def test_short_history_unavailable(self):
        series = (make_record("2024-03-01"), make_record("2024-03-05"))
        assert calculate_trend(series) is None

    def test_zero_base_unavailable(self):
        series = (make_record("2024-03-01", k22=0), make_record("2024-03-08", k22=100))
        assert calculate_trend(series) is None

    def test_uses_closest_predecessor(self):
        series = (
            make_record("2024-03-01", k22=100),
            make_record("2024-03-02", k22=105),
            make_record("2024-03-04", k22=120),
            make_record("2024-03-09", k22=130),
        )

        stat = calculate_trend(series)

        assert stat.diff == 25
        assert stat.percentage == 23.81

    def test_price_drop(self):
        series = (make_record("2024-03-01", k22=100), make_record("2024-03-08", k22=90))

        stat = calculate_trend(series)

        assert stat.diff == -10
        assert stat.percentage == -10.0
        assert stat.is_up is False

    def test_no_change_counts_as_up(self):
        series = (make_record("2024-03-01", k22=100), make_record("2024-03-08", k22=100))

        stat = calculate_trend(series)

        assert stat.diff == 0
        assert stat.is_up is True

    def test_sign_consistency(self):
        series = daily_records(date(2024, 1, 1), 30)

        stat = calculate_trend(series)

        assert stat.diff > 0
        assert stat.is_up is True

    def test_unsorted_input(self):
        series = (make_record("2024-03-08", k22=110), make_record("2024-03-01", k22=100))
        assert calculate_trend(series).diff == 10
