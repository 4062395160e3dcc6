"""Domain models for bs_reporting: read-only projections, pure dataclasses."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from src.bs_common.enums import TransactionKind


@dataclass
class DashboardStats:
    total_customers: int
    total_officers: int
    total_waste_types: int
    total_deposits: int
    total_withdrawals: int
    total_balance: Decimal           # sum of customer balances
    total_stock: Decimal             # sum of per-type available stock, kg
    total_sold_weight: Decimal       # kg
    total_sales_amount: Decimal
    total_deposit_amount: Decimal

    @property
    def profit(self) -> Decimal:
        """Global margin: everything sold minus everything paid out for deposits."""
        return self.total_sales_amount - self.total_deposit_amount


@dataclass
class StockByType:
    waste_type_id: int
    code: str
    name: str
    deposited: Decimal
    sold: Decimal

    @property
    def available(self) -> Decimal:
        raw = self.deposited - self.sold
        return raw if raw > 0 else Decimal("0.000")


@dataclass
class LedgerEntry:
    """One row of the unified ledger. Unused columns are None for the kind."""

    kind: TransactionKind
    id: int
    occurred_at: datetime
    amount: Decimal
    customer_id: int | None = None
    customer_name: str | None = None
    collector_id: int | None = None
    collector_name: str | None = None
    waste_type_id: int | None = None
    waste_type_name: str | None = None
    weight: Decimal | None = None


@dataclass
class DepositLine:
    id: int
    customer_id: int
    customer_name: str
    waste_type_id: int
    waste_type_name: str
    weight: Decimal
    unit_price: Decimal
    amount: Decimal
    balance_after: Decimal
    occurred_at: datetime


@dataclass
class WithdrawalLine:
    id: int
    customer_id: int
    customer_name: str
    amount: Decimal
    balance_after: Decimal
    occurred_at: datetime


@dataclass
class SaleLine:
    id: int
    collector_id: int
    collector_name: str
    waste_type_id: int
    waste_type_name: str
    weight: Decimal
    unit_price: Decimal
    amount: Decimal
    occurred_at: datetime


@dataclass
class CustomerProfile:
    id: int
    code: str
    name: str
    id_number: str
    address: str
    institution: str | None
    balance: Decimal
    created_at: datetime


@dataclass
class CustomerStatement:
    customer: CustomerProfile
    deposits: list[DepositLine] = field(default_factory=list)
    withdrawals: list[WithdrawalLine] = field(default_factory=list)

    @property
    def balance(self) -> Decimal:
        return self.customer.balance


@dataclass
class DepositReceipt:
    deposit: DepositLine
    customer: CustomerProfile
    waste_type_code: str


@dataclass
class BalanceMismatch:
    customer_id: int
    stored_balance: Decimal
    event_balance: Decimal           # sum(deposit.amount) - sum(withdrawal.amount)


@dataclass
class NegativeStock:
    waste_type_id: int
    deposited: Decimal
    sold: Decimal
