"""ReportingService: read-only aggregation over the event history.

Nothing here writes or locks. Every report is a point-in-time view: single
statements read their own snapshot, and reports assembled from several
statements share one REPEATABLE READ READ ONLY transaction.
"""

import logging
from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from src.bs_common.datetime_utils import day_range
from src.bs_common.decimals import rupiah_display, weight_display
from src.bs_common.enums import TransactionKind
from src.bs_common.errors import (
    CustomerNotFoundError,
    DepositNotFoundError,
    InternalError,
    InvalidDateRangeError,
)
from src.bs_reporting.domain.models import (
    CustomerStatement,
    DashboardStats,
    DepositLine,
    DepositReceipt,
    LedgerEntry,
    SaleLine,
    StockByType,
    WithdrawalLine,
)
from src.bs_reporting.domain.repository import ReportingRepositoryProtocol
from src.bs_reporting.infrastructure.persistence import ReportingRepository

logger = logging.getLogger(__name__)


def describe(entry: LedgerEntry) -> str:
    """Human-readable one-liner for a ledger row."""
    if entry.kind == TransactionKind.DEPOSIT:
        return (
            f"Deposit of {weight_display(entry.weight)} {entry.waste_type_name} "
            f"by {entry.customer_name}"
        )
    if entry.kind == TransactionKind.WITHDRAWAL:
        return f"Withdrawal of {rupiah_display(entry.amount)} by {entry.customer_name}"
    return (
        f"Sale of {weight_display(entry.weight)} {entry.waste_type_name} "
        f"to {entry.collector_name}"
    )


class ReportingService:
    def __init__(self, repo: ReportingRepositoryProtocol | None = None) -> None:
        self._repo: ReportingRepositoryProtocol = repo or ReportingRepository()

    async def dashboard(self, db: AsyncSession) -> DashboardStats:
        return await self._repo.get_dashboard_stats(db)

    async def stock_by_type(self, db: AsyncSession) -> list[StockByType]:
        levels = await self._repo.list_stock_by_type(db)
        for level in levels:
            if level.deposited < level.sold:
                logger.error(
                    "Waste type %d has negative stock: deposited=%s sold=%s",
                    level.waste_type_id,
                    level.deposited,
                    level.sold,
                )
        return levels

    async def ledger(
        self,
        db: AsyncSession,
        start_date: date | None = None,
        end_date: date | None = None,
        customer_id: int | None = None,
    ) -> list[LedgerEntry]:
        """Unified deposit/withdrawal/sale history, newest first.

        The date range is inclusive of whole calendar days in the report
        timezone. A customer filter keeps only that customer's deposits and
        withdrawals; sales have no customer and drop out.
        """
        if start_date is not None and end_date is not None and start_date > end_date:
            raise InvalidDateRangeError(start_date, end_date)
        if customer_id is not None:
            if await self._repo.get_customer_profile(db, customer_id) is None:
                raise CustomerNotFoundError(customer_id)
        lower, upper = day_range(start_date, end_date)
        return await self._repo.list_ledger(db, lower, upper, customer_id)

    async def customer_statement(self, db: AsyncSession, customer_id: int) -> CustomerStatement:
        """Profile, full history and balance, all read from one snapshot."""
        await self._repo.begin_snapshot(db)
        profile = await self._repo.get_customer_profile(db, customer_id)
        if profile is None:
            raise CustomerNotFoundError(customer_id)
        deposits = await self._repo.list_deposits(db, customer_id)
        withdrawals = await self._repo.list_withdrawals(db, customer_id)
        return CustomerStatement(customer=profile, deposits=deposits, withdrawals=withdrawals)

    async def deposit_receipt(self, db: AsyncSession, deposit_id: int) -> DepositReceipt:
        await self._repo.begin_snapshot(db)
        deposit = await self._repo.get_deposit(db, deposit_id)
        if deposit is None:
            raise DepositNotFoundError(deposit_id)
        customer = await self._repo.get_customer_profile(db, deposit.customer_id)
        code = await self._repo.get_waste_type_code(db, deposit.waste_type_id)
        # Both are FK-protected and cannot be deleted while the deposit exists.
        if customer is None or code is None:
            raise InternalError(f"Deposit {deposit_id} references missing master data")
        return DepositReceipt(deposit=deposit, customer=customer, waste_type_code=code)

    async def list_deposits(self, db: AsyncSession) -> list[DepositLine]:
        return await self._repo.list_deposits(db)

    async def list_withdrawals(self, db: AsyncSession) -> list[WithdrawalLine]:
        return await self._repo.list_withdrawals(db)

    async def list_sales(self, db: AsyncSession) -> list[SaleLine]:
        return await self._repo.list_sales(db)

    async def verify_invariants(self, db: AsyncSession) -> dict[str, object]:
        """Check stored balances against event sums and stock against zero."""
        await self._repo.begin_snapshot(db)
        violations: list[str] = []
        for m in await self._repo.find_balance_mismatches(db):
            violations.append(
                f"customer {m.customer_id}: stored balance {m.stored_balance} "
                f"!= event balance {m.event_balance}"
            )
        for s in await self._repo.find_negative_stock(db):
            violations.append(
                f"waste type {s.waste_type_id}: stock {s.deposited - s.sold} < 0 "
                f"(deposited {s.deposited}, sold {s.sold})"
            )
        for msg in violations:
            logger.error("Invariant violated: %s", msg)
        return {"ok": len(violations) == 0, "violations": violations}
