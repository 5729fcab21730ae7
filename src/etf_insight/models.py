"""
Core data models for ETF Insight.

This module defines the records flowing through the ingestion and valuation
pipeline: holdings, price observations, the parsed price panel, and the
derived views (enriched holdings, valuation points, ranked entries).
All prices, weights and sizes use Decimal for precision.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional


class SortField(Enum):
    """Field used to order enriched holdings."""
    CONSTITUENT = "constituent"
    WEIGHT = "weight"
    PRICE = "price"


class SortOrder(Enum):
    """Sort direction."""
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class Holding:
    """
    A constituent and its portfolio weight.

    Attributes:
        constituent: Trimmed, non-empty constituent name
        weight: Portfolio weight as a fraction (not required to sum to 1)
    """
    constituent: str
    weight: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {"constituent": self.constituent, "weight": float(self.weight)}


@dataclass(frozen=True)
class PriceObservation:
    """
    Price of one constituent on one date.

    Attributes:
        date: Opaque date string, compared lexically
        constituent: Constituent name (price panel column header)
        price: Observed price
    """
    date: str
    constituent: str
    price: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date,
            "constituent": self.constituent,
            "price": float(self.price),
        }


@dataclass(frozen=True)
class DateRange:
    """Lexical min/max of the dates seen in a price panel."""
    min: str = ""
    max: str = ""

    def to_dict(self) -> dict[str, str]:
        return {"min": self.min, "max": self.max}


@dataclass(frozen=True)
class PricePanel:
    """
    Parsed multi-constituent price history.

    Attributes:
        prices: Observations in arrival order (row by row, column by column)
        constituents: Distinct constituent names in first-seen order
        date_range: Min/max over every dated row, including rows
                    that produced no observation
    """
    prices: tuple[PriceObservation, ...] = ()
    constituents: tuple[str, ...] = ()
    date_range: DateRange = field(default_factory=DateRange)

    def to_dict(self) -> dict[str, Any]:
        return {
            "prices": [p.to_dict() for p in self.prices],
            "constituents": list(self.constituents),
            "dateRange": self.date_range.to_dict(),
        }


@dataclass(frozen=True)
class LatestPrice:
    """Most recent observation for a constituent."""
    date: str
    price: Decimal


@dataclass(frozen=True)
class EnrichedHolding:
    """
    Holding joined with its latest price.

    holding_size is present iff latest_price is present, and is
    latest_price * weight without rounding.
    """
    constituent: str
    weight: Decimal
    latest_price: Optional[Decimal] = None
    holding_size: Optional[Decimal] = None

    @classmethod
    def from_holding(
        cls,
        holding: Holding,
        latest_price: Optional[Decimal],
    ) -> "EnrichedHolding":
        """Create an EnrichedHolding, deriving holding size from the price."""
        if latest_price is None:
            return cls(constituent=holding.constituent, weight=holding.weight)

        return cls(
            constituent=holding.constituent,
            weight=holding.weight,
            latest_price=latest_price,
            holding_size=latest_price * holding.weight,
        )

    def to_dict(self) -> dict[str, Any]:
        record: dict[str, Any] = {
            "constituent": self.constituent,
            "weight": float(self.weight),
        }
        # Absent values are omitted rather than serialized as null
        if self.latest_price is not None:
            record["latestPrice"] = float(self.latest_price)
        if self.holding_size is not None:
            record["holdingSize"] = float(self.holding_size)
        return record


@dataclass(frozen=True)
class ValuationPoint:
    """Portfolio value on one date, rounded to cents."""
    date: str
    value: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {"date": self.date, "price": float(self.value)}


@dataclass(frozen=True)
class RankedEntry:
    """Entry of the top-N ranking by holding size."""
    name: str
    size: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "size": float(self.size)}


@dataclass(frozen=True)
class HoldingsUpload:
    """
    Stored holdings snapshot.

    Attributes:
        holdings: Parsed holdings
        filename: Name of the uploaded file
        uploaded_at: When the upload was accepted
    """
    holdings: tuple[Holding, ...]
    filename: str
    uploaded_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "holdings": [h.to_dict() for h in self.holdings],
            "filename": self.filename,
            "uploadedAt": self.uploaded_at.isoformat(),
        }


@dataclass(frozen=True)
class PricesUpload:
    """
    Stored price panel snapshot.

    uploaded_at is None when the panel was restored from disk at startup.
    """
    panel: PricePanel
    filename: str
    uploaded_at: Optional[datetime] = None


@dataclass
class ServerConfig:
    """
    Server configuration loaded from YAML and the environment.

    Attributes:
        host: Interface the HTTP server binds to
        port: HTTP port
        upload_dir: Directory for the persisted price file
        max_upload_bytes: Maximum accepted request size
        log_level: Logging level name
    """
    host: str = "0.0.0.0"
    port: int = 3001
    upload_dir: str = "uploads"
    max_upload_bytes: int = 10 * 1024 * 1024
    log_level: str = "INFO"
