"""Repository Protocols: dependency inversion for testability.

Unit tests inject mocks that conform to these Protocols.
Infrastructure layer provides the real implementations.
"""

from decimal import Decimal
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.bs_common.enums import EventReference
from src.bs_ledger.domain.models import (
    CustomerBalance,
    DepositEvent,
    WastePrices,
    WithdrawalEvent,
)


class LedgerRepositoryProtocol(Protocol):
    async def get_balance(
        self, db: AsyncSession, customer_id: int
    ) -> CustomerBalance | None: ...

    async def apply_deposit(
        self, db: AsyncSession, customer_id: int, amount: Decimal
    ) -> CustomerBalance: ...

    async def apply_withdrawal(
        self, db: AsyncSession, customer_id: int, amount: Decimal
    ) -> CustomerBalance: ...

    async def append_deposit_event(
        self,
        db: AsyncSession,
        customer_id: int,
        waste_type_id: int,
        weight: Decimal,
        unit_price: Decimal,
        amount: Decimal,
        balance_after: Decimal,
    ) -> DepositEvent: ...

    async def append_withdrawal_event(
        self,
        db: AsyncSession,
        customer_id: int,
        amount: Decimal,
        balance_after: Decimal,
    ) -> WithdrawalEvent: ...


class PriceCatalogProtocol(Protocol):
    """Read side of master data the ledger depends on."""

    async def get_waste_type_prices(
        self, db: AsyncSession, waste_type_id: int
    ) -> WastePrices | None: ...

    async def collector_exists(self, db: AsyncSession, collector_id: int) -> bool: ...


class EventGuardProtocol(Protocol):
    async def has_events(
        self, db: AsyncSession, reference: EventReference, entity_id: int
    ) -> bool: ...
