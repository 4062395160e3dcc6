"""Read-side repository Protocol for bs_reporting."""

from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.bs_reporting.domain.models import (
    BalanceMismatch,
    CustomerProfile,
    DashboardStats,
    DepositLine,
    LedgerEntry,
    NegativeStock,
    SaleLine,
    StockByType,
    WithdrawalLine,
)


class ReportingRepositoryProtocol(Protocol):
    async def begin_snapshot(self, db: AsyncSession) -> None: ...

    async def get_dashboard_stats(self, db: AsyncSession) -> DashboardStats: ...

    async def list_stock_by_type(self, db: AsyncSession) -> list[StockByType]: ...

    async def list_ledger(
        self,
        db: AsyncSession,
        lower: datetime | None,
        upper: datetime | None,
        customer_id: int | None,
    ) -> list[LedgerEntry]: ...

    async def get_customer_profile(
        self, db: AsyncSession, customer_id: int
    ) -> CustomerProfile | None: ...

    async def list_deposits(
        self, db: AsyncSession, customer_id: int | None = None
    ) -> list[DepositLine]: ...

    async def list_withdrawals(
        self, db: AsyncSession, customer_id: int | None = None
    ) -> list[WithdrawalLine]: ...

    async def list_sales(self, db: AsyncSession) -> list[SaleLine]: ...

    async def get_deposit(self, db: AsyncSession, deposit_id: int) -> DepositLine | None: ...

    async def get_waste_type_code(self, db: AsyncSession, waste_type_id: int) -> str | None: ...

    async def find_balance_mismatches(self, db: AsyncSession) -> list[BalanceMismatch]: ...

    async def find_negative_stock(self, db: AsyncSession) -> list[NegativeStock]: ...
