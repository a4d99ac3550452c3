"""Shared fixtures for the bdmetals test suite."""

import pytest

from .factories import write_csv


@pytest.fixture
def gold_csv(tmp_path):
    """A small, unsorted gold CSV with one malformed row."""
    path = tmp_path / "prices.csv"
    write_csv(path, [
        ("2024-03-08", "8800", "10300", "11000", "7300"),
        ("2024-03-01", "8000", "9500", "10000", "6500"),
        ("not-a-date", "8000", "9500", "10000", "6500"),
        ("2024-03-05", "8400", "9900", "10500", "6900"),
    ])
    return path


@pytest.fixture
def silver_csv(tmp_path):
    path = tmp_path / "silver-prices.csv"
    write_csv(path, [
        ("2024-03-01", "120", "140", "160", "100"),
        ("2024-03-08", "110", "130", "150", "90"),
    ])
    return path
