"""Data models for bdmetals."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

GRAMS_PER_BHORI = 11.664


class MetalType(str, Enum):
    """Metals with an independently tracked price history."""

    GOLD = "gold"
    SILVER = "silver"


class Window(str, Enum):
    """Trailing time windows, anchored at the latest record."""

    WEEK = "7 days"
    MONTH = "30 days"
    YEAR = "1 year"
    ALL = "all time"


class Unit(str, Enum):
    """Display units for a per-gram price."""

    GRAM = "gram"
    BHORI = "bhori"

    @property
    def grams(self) -> float:
        """Weight of one unit in grams."""
        return GRAMS_PER_BHORI if self is Unit.BHORI else 1.0


class Purity(str, Enum):
    """Purity grades, in display order."""

    K22 = "k22"
    K21 = "k21"
    K18 = "k18"
    TRADITIONAL = "traditional"

    @property
    def label(self) -> str:
        return PURITY_LABELS[self]


PURITY_LABELS = {
    Purity.K22: "22K",
    Purity.K21: "21K",
    Purity.K18: "18K",
    Purity.TRADITIONAL: "সনাতন",
}


class RawRow(BaseModel):
    """One daily row as read from a price CSV."""

    model_config = ConfigDict(frozen=True)

    date: str = Field(description="ISO-8601 date, e.g. '2024-03-01'")
    traditional: str
    k18: str
    k21: str
    k22: str


class PriceRecord(BaseModel):
    """Parsed daily prices, BDT per gram."""

    model_config = ConfigDict(frozen=True)

    date: int = Field(description="Epoch milliseconds, UTC")
    traditional: float
    k18: float
    k21: float
    k22: float

    def price(self, purity: Purity) -> float:
        """Price per gram for the given purity."""
        return getattr(self, purity.value)


class TrendStat(BaseModel):
    """Trailing change of the 22K price."""

    model_config = ConfigDict(frozen=True)

    diff: float = Field(description="Price change in BDT per gram")
    percentage: float = Field(description="Change percentage, 2 decimals")
    is_up: bool

    @property
    def percentage_text(self) -> str:
        return f"{self.percentage:.2f}"
