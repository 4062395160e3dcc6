"""Domain models for bs_ledger: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass
class CustomerBalance:
    customer_id: int
    balance: Decimal         # scale 2, never negative


@dataclass
class WastePrices:
    """Point-in-time price catalog entry for one waste type."""

    waste_type_id: int
    buy_price: Decimal       # paid to customers per kg
    sell_price: Decimal      # charged to collectors per kg


@dataclass
class DepositEvent:
    id: int
    customer_id: int
    waste_type_id: int
    weight: Decimal          # kg, scale 3
    unit_price: Decimal      # buy_price snapshot at creation
    amount: Decimal          # weight * unit_price, scale 2
    balance_after: Decimal   # customer balance right after this event
    occurred_at: datetime


@dataclass
class WithdrawalEvent:
    id: int
    customer_id: int
    amount: Decimal
    balance_after: Decimal
    occurred_at: datetime
