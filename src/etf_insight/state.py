"""
Process-wide snapshot state for uploaded holdings and prices.

Each snapshot lives in its own SnapshotStore. A store is replaced
wholesale by a single reference assignment, so readers always see a
complete old or new value. Concurrent uploads of the same kind resolve
last-write-wins.
"""

from dataclasses import dataclass, field
from typing import Generic, Optional, TypeVar

from etf_insight.models import HoldingsUpload, PricesUpload


T = TypeVar("T")


class MissingSnapshotError(Exception):
    """Raised when a query needs a snapshot that has not been loaded."""
    pass


class SnapshotStore(Generic[T]):
    """Single slot holding an immutable snapshot."""

    def __init__(self, initial: Optional[T] = None):
        self._value: Optional[T] = initial

    def get(self) -> Optional[T]:
        return self._value

    def set(self, value: Optional[T]) -> None:
        self._value = value


@dataclass
class AppState:
    """
    Holdings and price snapshots shared by all requests.

    Attributes:
        holdings: Last successfully uploaded holdings
        prices: Last successfully uploaded (or restored) price panel
    """
    holdings: SnapshotStore[HoldingsUpload] = field(default_factory=SnapshotStore)
    prices: SnapshotStore[PricesUpload] = field(default_factory=SnapshotStore)

    def require_prices(self) -> PricesUpload:
        """
        Get the price snapshot.

        Raises:
            MissingSnapshotError: If no prices have been loaded
        """
        prices = self.prices.get()
        if prices is None:
            raise MissingSnapshotError("No prices data available")
        return prices

    def require_both(self) -> tuple[HoldingsUpload, PricesUpload]:
        """
        Take both snapshots at once for a single computation.

        Returns:
            Tuple of (holdings snapshot, prices snapshot)

        Raises:
            MissingSnapshotError: Naming whichever snapshot is absent
        """
        holdings = self.holdings.get()
        prices = self.prices.get()

        if holdings is None and prices is None:
            raise MissingSnapshotError(
                "Both ETF holdings and prices data are required"
            )
        if holdings is None:
            raise MissingSnapshotError("ETF holdings data is required")
        if prices is None:
            raise MissingSnapshotError("Prices data is required")

        return holdings, prices
