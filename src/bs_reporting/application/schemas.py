"""Pydantic response schemas for bs_reporting.

Money and weight stay Decimal here and are serialized as strings by
model_dump(mode="json"); *_display fields carry the formatted form.
"""

from decimal import Decimal

from pydantic import BaseModel

from src.bs_common.decimals import rupiah_display, weight_display
from src.bs_reporting.application.service import describe
from src.bs_reporting.domain.models import (
    CustomerProfile,
    CustomerStatement,
    DashboardStats,
    DepositLine,
    DepositReceipt,
    LedgerEntry,
    SaleLine,
    StockByType,
    WithdrawalLine,
)

# ---------------------------------------------------------------------------
# Dashboard and stock
# ---------------------------------------------------------------------------


class DashboardResponse(BaseModel):
    total_customers: int
    total_officers: int
    total_waste_types: int
    total_deposits: int
    total_withdrawals: int
    total_balance: Decimal
    total_balance_display: str
    total_stock: Decimal
    total_sold_weight: Decimal
    profit: Decimal
    profit_display: str

    @classmethod
    def from_domain(cls, stats: DashboardStats) -> "DashboardResponse":
        return cls(
            total_customers=stats.total_customers,
            total_officers=stats.total_officers,
            total_waste_types=stats.total_waste_types,
            total_deposits=stats.total_deposits,
            total_withdrawals=stats.total_withdrawals,
            total_balance=stats.total_balance,
            total_balance_display=rupiah_display(stats.total_balance),
            total_stock=stats.total_stock,
            total_sold_weight=stats.total_sold_weight,
            profit=stats.profit,
            profit_display=rupiah_display(stats.profit),
        )


class StockByTypeResponse(BaseModel):
    waste_type_id: int
    code: str
    name: str
    total_deposited: Decimal
    total_sold: Decimal
    available: Decimal
    available_display: str

    @classmethod
    def from_domain(cls, level: StockByType) -> "StockByTypeResponse":
        return cls(
            waste_type_id=level.waste_type_id,
            code=level.code,
            name=level.name,
            total_deposited=level.deposited,
            total_sold=level.sold,
            available=level.available,
            available_display=weight_display(level.available),
        )


# ---------------------------------------------------------------------------
# Unified ledger
# ---------------------------------------------------------------------------


class LedgerEntryResponse(BaseModel):
    kind: str
    id: int
    occurred_at: str
    customer_id: int | None
    customer_name: str | None
    collector_id: int | None
    collector_name: str | None
    waste_type_id: int | None
    waste_type_name: str | None
    weight: Decimal | None
    amount: Decimal
    amount_display: str
    description: str

    @classmethod
    def from_domain(cls, entry: LedgerEntry) -> "LedgerEntryResponse":
        return cls(
            kind=entry.kind.value,
            id=entry.id,
            occurred_at=entry.occurred_at.isoformat(),
            customer_id=entry.customer_id,
            customer_name=entry.customer_name,
            collector_id=entry.collector_id,
            collector_name=entry.collector_name,
            waste_type_id=entry.waste_type_id,
            waste_type_name=entry.waste_type_name,
            weight=entry.weight,
            amount=entry.amount,
            amount_display=rupiah_display(entry.amount),
            description=describe(entry),
        )


# ---------------------------------------------------------------------------
# Event listings
# ---------------------------------------------------------------------------


class DepositLineResponse(BaseModel):
    id: int
    customer_id: int
    customer_name: str
    waste_type_id: int
    waste_type_name: str
    weight: Decimal
    weight_display: str
    unit_price: Decimal
    amount: Decimal
    amount_display: str
    balance_after: Decimal
    occurred_at: str

    @classmethod
    def from_domain(cls, line: DepositLine) -> "DepositLineResponse":
        return cls(
            id=line.id,
            customer_id=line.customer_id,
            customer_name=line.customer_name,
            waste_type_id=line.waste_type_id,
            waste_type_name=line.waste_type_name,
            weight=line.weight,
            weight_display=weight_display(line.weight),
            unit_price=line.unit_price,
            amount=line.amount,
            amount_display=rupiah_display(line.amount),
            balance_after=line.balance_after,
            occurred_at=line.occurred_at.isoformat(),
        )


class WithdrawalLineResponse(BaseModel):
    id: int
    customer_id: int
    customer_name: str
    amount: Decimal
    amount_display: str
    balance_after: Decimal
    occurred_at: str

    @classmethod
    def from_domain(cls, line: WithdrawalLine) -> "WithdrawalLineResponse":
        return cls(
            id=line.id,
            customer_id=line.customer_id,
            customer_name=line.customer_name,
            amount=line.amount,
            amount_display=rupiah_display(line.amount),
            balance_after=line.balance_after,
            occurred_at=line.occurred_at.isoformat(),
        )


class SaleLineResponse(BaseModel):
    id: int
    collector_id: int
    collector_name: str
    waste_type_id: int
    waste_type_name: str
    weight: Decimal
    weight_display: str
    unit_price: Decimal
    amount: Decimal
    amount_display: str
    occurred_at: str

    @classmethod
    def from_domain(cls, line: SaleLine) -> "SaleLineResponse":
        return cls(
            id=line.id,
            collector_id=line.collector_id,
            collector_name=line.collector_name,
            waste_type_id=line.waste_type_id,
            waste_type_name=line.waste_type_name,
            weight=line.weight,
            weight_display=weight_display(line.weight),
            unit_price=line.unit_price,
            amount=line.amount,
            amount_display=rupiah_display(line.amount),
            occurred_at=line.occurred_at.isoformat(),
        )


# ---------------------------------------------------------------------------
# Statement and receipt
# ---------------------------------------------------------------------------


class CustomerProfileResponse(BaseModel):
    id: int
    code: str
    name: str
    id_number: str
    address: str
    institution: str | None

    @classmethod
    def from_domain(cls, profile: CustomerProfile) -> "CustomerProfileResponse":
        return cls(
            id=profile.id,
            code=profile.code,
            name=profile.name,
            id_number=profile.id_number,
            address=profile.address,
            institution=profile.institution,
        )


class CustomerStatementResponse(BaseModel):
    customer: CustomerProfileResponse
    deposits: list[DepositLineResponse]
    withdrawals: list[WithdrawalLineResponse]
    balance: Decimal
    balance_display: str

    @classmethod
    def from_domain(cls, statement: CustomerStatement) -> "CustomerStatementResponse":
        return cls(
            customer=CustomerProfileResponse.from_domain(statement.customer),
            deposits=[DepositLineResponse.from_domain(d) for d in statement.deposits],
            withdrawals=[WithdrawalLineResponse.from_domain(w) for w in statement.withdrawals],
            balance=statement.balance,
            balance_display=rupiah_display(statement.balance),
        )


class DepositReceiptResponse(BaseModel):
    deposit: DepositLineResponse
    customer: CustomerProfileResponse
    waste_type_code: str

    @classmethod
    def from_domain(cls, receipt: DepositReceipt) -> "DepositReceiptResponse":
        return cls(
            deposit=DepositLineResponse.from_domain(receipt.deposit),
            customer=CustomerProfileResponse.from_domain(receipt.customer),
            waste_type_code=receipt.waste_type_code,
        )
