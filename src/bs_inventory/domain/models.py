"""Domain models for bs_inventory: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass
class StockLevel:
    """Stock of one waste type, derived from the event history."""

    waste_type_id: int
    deposited: Decimal       # sum of deposit weights, kg
    sold: Decimal            # sum of sale weights, kg

    @property
    def raw_available(self) -> Decimal:
        return self.deposited - self.sold

    @property
    def available(self) -> Decimal:
        """Never negative: a negative raw figure is an integrity fault, not stock."""
        raw = self.raw_available
        return raw if raw > 0 else Decimal("0.000")


@dataclass
class SaleEvent:
    id: int
    collector_id: int
    waste_type_id: int
    weight: Decimal          # kg, scale 3
    unit_price: Decimal      # sell_price snapshot at creation
    amount: Decimal          # weight * unit_price, scale 2
    occurred_at: datetime
