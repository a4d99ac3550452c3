"""CSV price history loader for gold and silver."""

import csv
import io
import os
from pathlib import Path

import httpx
from loguru import logger
from pydantic import ValidationError

from .models import MetalType, RawRow
from .series import Series, parse_rows

DEFAULT_DATA_DIR = Path.home() / ".local" / "share" / "bdmetals"
DEFAULT_SOURCES = {
    MetalType.GOLD: DEFAULT_DATA_DIR / "prices.csv",
    MetalType.SILVER: DEFAULT_DATA_DIR / "silver-prices.csv",
}
SOURCE_ENV_VARS = {
    MetalType.GOLD: "BDMETALS_GOLD_CSV",
    MetalType.SILVER: "BDMETALS_SILVER_CSV",
}
DEFAULT_HTTP_TIMEOUT = 30.0
REQUIRED_COLUMNS = ("date", "traditional", "k18", "k21", "k22")


class PriceDataError(Exception):
    """A price history source could not be read."""


def is_url(source: str | Path) -> bool:
    return isinstance(source, str) and source.startswith(("http://", "https://"))


class PriceDataSource:
    """Reads daily price rows for each metal from a CSV file or URL.

    Rows are read once per metal and kept in memory; callers get the same
    immutable tuple on every call.
    """

    def __init__(
        self,
        gold_source: str | Path | None = None,
        silver_source: str | Path | None = None,
        client: httpx.Client | None = None,
    ):
        # Source: constructor arg > env var > default file
        self.sources: dict[MetalType, str | Path] = {}
        for metal, given in ((MetalType.GOLD, gold_source), (MetalType.SILVER, silver_source)):
            self.sources[metal] = given or os.environ.get(SOURCE_ENV_VARS[metal]) or DEFAULT_SOURCES[metal]

        if client is None:
            env_timeout = os.environ.get("BDMETALS_HTTP_TIMEOUT")
            timeout = float(env_timeout) if env_timeout else DEFAULT_HTTP_TIMEOUT
            client = httpx.Client(timeout=timeout, follow_redirects=True)
        self._client = client
        self._rows: dict[MetalType, tuple[RawRow, ...]] = {}

    def _read_text(self, source: str | Path) -> str:
        """Fetch the raw CSV text from a URL or a local file."""
        if is_url(source):
            try:
                response = self._client.get(str(source))
            except httpx.HTTPError as e:
                raise PriceDataError(f"Could not fetch {source}: {e}") from e
            if response.status_code != 200:
                raise PriceDataError(f"HTTP error {response.status_code} fetching {source}")
            return response.content.decode("utf-8-sig")

        path = Path(source).expanduser()
        if not path.exists():
            raise PriceDataError(
                f"Price file not found: {path}. Pass a path or URL, or set "
                "BDMETALS_GOLD_CSV / BDMETALS_SILVER_CSV."
            )
        try:
            return path.read_text(encoding="utf-8-sig")
        except OSError as e:
            raise PriceDataError(f"Could not read {path}: {e}") from e

    def _parse_csv(self, text: str, source: str | Path) -> tuple[RawRow, ...]:
        """Turn CSV text into RawRows, skipping rows with missing cells."""
        reader = csv.DictReader(io.StringIO(text))
        header = [name.strip() for name in reader.fieldnames or []]
        missing = [column for column in REQUIRED_COLUMNS if column not in header]
        if missing:
            raise PriceDataError(f"{source} is missing columns: {', '.join(missing)}")
        reader.fieldnames = header

        rows = []
        for line_no, record in enumerate(reader, start=2):
            try:
                rows.append(RawRow(**{column: record[column] for column in REQUIRED_COLUMNS}))
            except ValidationError:
                logger.warning("Skipping incomplete row {} in {}", line_no, source)
        return tuple(rows)

    def load_rows(self, metal: MetalType) -> tuple[RawRow, ...]:
        """Raw rows for a metal, read on first use."""
        cached = self._rows.get(metal)
        if cached is not None:
            logger.debug("Using loaded {} rows", metal.value)
            return cached

        source = self.sources[metal]
        rows = self._parse_csv(self._read_text(source), source)
        logger.info("Loaded {} {} rows from {}", len(rows), metal.value, source)
        self._rows[metal] = rows
        return rows

    def load_series(self, metal: MetalType) -> Series:
        """Parsed, sorted series for a metal."""
        return parse_rows(self.load_rows(metal))
