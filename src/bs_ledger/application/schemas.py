"""Pydantic schemas for the transaction write endpoints."""

from decimal import Decimal

from pydantic import BaseModel, Field

from src.bs_common.decimals import MAX_AMOUNT, MAX_WEIGHT, rupiah_display, weight_display
from src.bs_inventory.domain.models import SaleEvent
from src.bs_ledger.domain.models import CustomerBalance, DepositEvent, WithdrawalEvent

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class DepositRequest(BaseModel):
    customer_id: int
    waste_type_id: int
    weight: Decimal = Field(
        ..., gt=0, le=MAX_WEIGHT, description="Weight in kg, up to 3 decimals"
    )


class WithdrawalRequest(BaseModel):
    customer_id: int
    amount: Decimal = Field(
        ..., gt=0, le=MAX_AMOUNT, description="Amount in rupiah, up to 2 decimals"
    )


class SaleRequest(BaseModel):
    collector_id: int
    waste_type_id: int
    weight: Decimal = Field(
        ..., gt=0, le=MAX_WEIGHT, description="Weight in kg, up to 3 decimals"
    )


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class DepositResponse(BaseModel):
    id: int
    customer_id: int
    waste_type_id: int
    weight: Decimal
    weight_display: str
    unit_price: Decimal
    amount: Decimal
    amount_display: str
    balance_after: Decimal
    balance_after_display: str
    occurred_at: str  # ISO8601 string

    @classmethod
    def from_domain(cls, event: DepositEvent) -> "DepositResponse":
        return cls(
            id=event.id,
            customer_id=event.customer_id,
            waste_type_id=event.waste_type_id,
            weight=event.weight,
            weight_display=weight_display(event.weight),
            unit_price=event.unit_price,
            amount=event.amount,
            amount_display=rupiah_display(event.amount),
            balance_after=event.balance_after,
            balance_after_display=rupiah_display(event.balance_after),
            occurred_at=event.occurred_at.isoformat(),
        )


class WithdrawalResponse(BaseModel):
    id: int
    customer_id: int
    amount: Decimal
    amount_display: str
    balance_after: Decimal
    balance_after_display: str
    occurred_at: str

    @classmethod
    def from_domain(cls, event: WithdrawalEvent) -> "WithdrawalResponse":
        return cls(
            id=event.id,
            customer_id=event.customer_id,
            amount=event.amount,
            amount_display=rupiah_display(event.amount),
            balance_after=event.balance_after,
            balance_after_display=rupiah_display(event.balance_after),
            occurred_at=event.occurred_at.isoformat(),
        )


class SaleResponse(BaseModel):
    id: int
    collector_id: int
    waste_type_id: int
    weight: Decimal
    weight_display: str
    unit_price: Decimal
    amount: Decimal
    amount_display: str
    occurred_at: str

    @classmethod
    def from_domain(cls, event: SaleEvent) -> "SaleResponse":
        return cls(
            id=event.id,
            collector_id=event.collector_id,
            waste_type_id=event.waste_type_id,
            weight=event.weight,
            weight_display=weight_display(event.weight),
            unit_price=event.unit_price,
            amount=event.amount,
            amount_display=rupiah_display(event.amount),
            occurred_at=event.occurred_at.isoformat(),
        )


class BalanceResponse(BaseModel):
    customer_id: int
    balance: Decimal
    balance_display: str

    @classmethod
    def from_domain(cls, account: CustomerBalance) -> "BalanceResponse":
        return cls(
            customer_id=account.customer_id,
            balance=account.balance,
            balance_display=rupiah_display(account.balance),
        )
