"""ReportingRepository: read-only SQL over master data and event tables.

All queries use raw text() SQL (no ORM). Single-statement reports read one
snapshot on their own; multi-statement reports call begin_snapshot first.
Nothing here locks.

Optional filters follow the `CAST(:param AS TYPE) IS NULL OR ...` pattern so a
single statement serves both the filtered and unfiltered case.
"""

from datetime import datetime

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.bs_common.decimals import quantize_money, quantize_weight
from src.bs_common.enums import TransactionKind
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

_SNAPSHOT_OPTIONS = {"isolation_level": "REPEATABLE READ", "postgresql_readonly": True}

# ---------------------------------------------------------------------------
# SQL: aggregates
# ---------------------------------------------------------------------------

_DASHBOARD_SQL = text("""
    SELECT
        (SELECT COUNT(*) FROM customers)          AS total_customers,
        (SELECT COUNT(*) FROM officers)           AS total_officers,
        (SELECT COUNT(*) FROM waste_types)        AS total_waste_types,
        (SELECT COUNT(*) FROM deposit_events)     AS total_deposits,
        (SELECT COUNT(*) FROM withdrawal_events)  AS total_withdrawals,
        (SELECT COALESCE(SUM(balance), 0) FROM customers) AS total_balance,
        (SELECT COALESCE(SUM(GREATEST(
                    COALESCE((SELECT SUM(d.weight) FROM deposit_events d
                               WHERE d.waste_type_id = w.id), 0)
                  - COALESCE((SELECT SUM(s.weight) FROM sale_events s
                               WHERE s.waste_type_id = w.id), 0),
                    0)), 0)
           FROM waste_types w)                    AS total_stock,
        (SELECT COALESCE(SUM(weight), 0) FROM sale_events)    AS total_sold_weight,
        (SELECT COALESCE(SUM(amount), 0) FROM sale_events)    AS total_sales_amount,
        (SELECT COALESCE(SUM(amount), 0) FROM deposit_events) AS total_deposit_amount
""")

_STOCK_BY_TYPE_SQL = text("""
    SELECT w.id, w.code, w.name,
           COALESCE(d.total, 0) AS deposited,
           COALESCE(s.total, 0) AS sold
    FROM waste_types w
    LEFT JOIN (SELECT waste_type_id, SUM(weight) AS total
               FROM deposit_events GROUP BY waste_type_id) d
           ON d.waste_type_id = w.id
    LEFT JOIN (SELECT waste_type_id, SUM(weight) AS total
               FROM sale_events GROUP BY waste_type_id) s
           ON s.waste_type_id = w.id
    ORDER BY w.name ASC, w.id ASC
""")

# ---------------------------------------------------------------------------
# SQL: unified ledger
# ---------------------------------------------------------------------------

_LEDGER_SQL = text("""
    SELECT kind, id, occurred_at, amount,
           customer_id, customer_name,
           collector_id, collector_name,
           waste_type_id, waste_type_name, weight
    FROM (
        SELECT 'DEPOSIT' AS kind, d.id, d.occurred_at, d.amount,
               d.customer_id, c.name AS customer_name,
               NULL::INTEGER AS collector_id, NULL::VARCHAR AS collector_name,
               d.waste_type_id, w.name AS waste_type_name, d.weight
        FROM deposit_events d
        JOIN customers c ON c.id = d.customer_id
        JOIN waste_types w ON w.id = d.waste_type_id
        UNION ALL
        SELECT 'WITHDRAWAL', wd.id, wd.occurred_at, wd.amount,
               wd.customer_id, c.name,
               NULL::INTEGER, NULL::VARCHAR,
               NULL::INTEGER, NULL::VARCHAR, NULL::NUMERIC
        FROM withdrawal_events wd
        JOIN customers c ON c.id = wd.customer_id
        UNION ALL
        SELECT 'SALE', s.id, s.occurred_at, s.amount,
               NULL::INTEGER, NULL::VARCHAR,
               s.collector_id, k.name,
               s.waste_type_id, w.name, s.weight
        FROM sale_events s
        JOIN collectors k ON k.id = s.collector_id
        JOIN waste_types w ON w.id = s.waste_type_id
    ) ledger
    WHERE (CAST(:lower AS TIMESTAMPTZ) IS NULL OR occurred_at >= CAST(:lower AS TIMESTAMPTZ))
      AND (CAST(:upper AS TIMESTAMPTZ) IS NULL OR occurred_at < CAST(:upper AS TIMESTAMPTZ))
      AND (CAST(:customer_id AS INTEGER) IS NULL
           OR (kind <> 'SALE' AND customer_id = CAST(:customer_id AS INTEGER)))
    ORDER BY occurred_at DESC, kind ASC, id DESC
""")

# ---------------------------------------------------------------------------
# SQL: listings, statement, receipt
# ---------------------------------------------------------------------------

_CUSTOMER_PROFILE_SQL = text("""
    SELECT id, code, name, id_number, address, institution, balance, created_at
    FROM customers
    WHERE id = :customer_id
""")

_DEPOSIT_COLUMNS = """
    SELECT d.id, d.customer_id, c.name AS customer_name,
           d.waste_type_id, w.name AS waste_type_name,
           d.weight, d.unit_price, d.amount, d.balance_after, d.occurred_at
    FROM deposit_events d
    JOIN customers c ON c.id = d.customer_id
    JOIN waste_types w ON w.id = d.waste_type_id
"""

_LIST_DEPOSITS_SQL = text(_DEPOSIT_COLUMNS + """
    WHERE (CAST(:customer_id AS INTEGER) IS NULL OR d.customer_id = CAST(:customer_id AS INTEGER))
    ORDER BY d.occurred_at DESC, d.id DESC
""")

_GET_DEPOSIT_SQL = text(_DEPOSIT_COLUMNS + """
    WHERE d.id = :deposit_id
""")

_LIST_WITHDRAWALS_SQL = text("""
    SELECT wd.id, wd.customer_id, c.name AS customer_name,
           wd.amount, wd.balance_after, wd.occurred_at
    FROM withdrawal_events wd
    JOIN customers c ON c.id = wd.customer_id
    WHERE (CAST(:customer_id AS INTEGER) IS NULL OR wd.customer_id = CAST(:customer_id AS INTEGER))
    ORDER BY wd.occurred_at DESC, wd.id DESC
""")

_LIST_SALES_SQL = text("""
    SELECT s.id, s.collector_id, k.name AS collector_name,
           s.waste_type_id, w.name AS waste_type_name,
           s.weight, s.unit_price, s.amount, s.occurred_at
    FROM sale_events s
    JOIN collectors k ON k.id = s.collector_id
    JOIN waste_types w ON w.id = s.waste_type_id
    ORDER BY s.occurred_at DESC, s.id DESC
""")

_WASTE_TYPE_CODE_SQL = text("SELECT code FROM waste_types WHERE id = :waste_type_id")

# ---------------------------------------------------------------------------
# SQL: invariant audit
# ---------------------------------------------------------------------------

_BALANCE_MISMATCH_SQL = text("""
    SELECT c.id, c.balance,
           COALESCE(d.total, 0) - COALESCE(w.total, 0) AS event_balance
    FROM customers c
    LEFT JOIN (SELECT customer_id, SUM(amount) AS total
               FROM deposit_events GROUP BY customer_id) d
           ON d.customer_id = c.id
    LEFT JOIN (SELECT customer_id, SUM(amount) AS total
               FROM withdrawal_events GROUP BY customer_id) w
           ON w.customer_id = c.id
    WHERE c.balance <> COALESCE(d.total, 0) - COALESCE(w.total, 0)
    ORDER BY c.id
""")

_NEGATIVE_STOCK_SQL = text("""
    SELECT w.id,
           COALESCE(d.total, 0) AS deposited,
           COALESCE(s.total, 0) AS sold
    FROM waste_types w
    LEFT JOIN (SELECT waste_type_id, SUM(weight) AS total
               FROM deposit_events GROUP BY waste_type_id) d
           ON d.waste_type_id = w.id
    LEFT JOIN (SELECT waste_type_id, SUM(weight) AS total
               FROM sale_events GROUP BY waste_type_id) s
           ON s.waste_type_id = w.id
    WHERE COALESCE(d.total, 0) < COALESCE(s.total, 0)
    ORDER BY w.id
""")


def _row_to_ledger_entry(row: object) -> LedgerEntry:
    weight = row.weight  # type: ignore[attr-defined]
    return LedgerEntry(
        kind=TransactionKind(row.kind),  # type: ignore[attr-defined]
        id=row.id,  # type: ignore[attr-defined]
        occurred_at=row.occurred_at,  # type: ignore[attr-defined]
        amount=quantize_money(row.amount),  # type: ignore[attr-defined]
        customer_id=row.customer_id,  # type: ignore[attr-defined]
        customer_name=row.customer_name,  # type: ignore[attr-defined]
        collector_id=row.collector_id,  # type: ignore[attr-defined]
        collector_name=row.collector_name,  # type: ignore[attr-defined]
        waste_type_id=row.waste_type_id,  # type: ignore[attr-defined]
        waste_type_name=row.waste_type_name,  # type: ignore[attr-defined]
        weight=quantize_weight(weight) if weight is not None else None,
    )


def _row_to_deposit(row: object) -> DepositLine:
    return DepositLine(
        id=row.id,  # type: ignore[attr-defined]
        customer_id=row.customer_id,  # type: ignore[attr-defined]
        customer_name=row.customer_name,  # type: ignore[attr-defined]
        waste_type_id=row.waste_type_id,  # type: ignore[attr-defined]
        waste_type_name=row.waste_type_name,  # type: ignore[attr-defined]
        weight=row.weight,  # type: ignore[attr-defined]
        unit_price=row.unit_price,  # type: ignore[attr-defined]
        amount=row.amount,  # type: ignore[attr-defined]
        balance_after=row.balance_after,  # type: ignore[attr-defined]
        occurred_at=row.occurred_at,  # type: ignore[attr-defined]
    )


def _row_to_withdrawal(row: object) -> WithdrawalLine:
    return WithdrawalLine(
        id=row.id,  # type: ignore[attr-defined]
        customer_id=row.customer_id,  # type: ignore[attr-defined]
        customer_name=row.customer_name,  # type: ignore[attr-defined]
        amount=row.amount,  # type: ignore[attr-defined]
        balance_after=row.balance_after,  # type: ignore[attr-defined]
        occurred_at=row.occurred_at,  # type: ignore[attr-defined]
    )


def _row_to_sale(row: object) -> SaleLine:
    return SaleLine(
        id=row.id,  # type: ignore[attr-defined]
        collector_id=row.collector_id,  # type: ignore[attr-defined]
        collector_name=row.collector_name,  # type: ignore[attr-defined]
        waste_type_id=row.waste_type_id,  # type: ignore[attr-defined]
        waste_type_name=row.waste_type_name,  # type: ignore[attr-defined]
        weight=row.weight,  # type: ignore[attr-defined]
        unit_price=row.unit_price,  # type: ignore[attr-defined]
        amount=row.amount,  # type: ignore[attr-defined]
        occurred_at=row.occurred_at,  # type: ignore[attr-defined]
    )


class ReportingRepository:
    async def begin_snapshot(self, db: AsyncSession) -> None:
        """Pin the session to one REPEATABLE READ READ ONLY transaction.

        Must run before the first query of a multi-statement report; every
        later statement then reads the same snapshot.
        """
        await db.connection(execution_options=_SNAPSHOT_OPTIONS)

    async def get_dashboard_stats(self, db: AsyncSession) -> DashboardStats:
        row = (await db.execute(_DASHBOARD_SQL)).one()
        return DashboardStats(
            total_customers=int(row.total_customers),
            total_officers=int(row.total_officers),
            total_waste_types=int(row.total_waste_types),
            total_deposits=int(row.total_deposits),
            total_withdrawals=int(row.total_withdrawals),
            total_balance=quantize_money(row.total_balance),
            total_stock=quantize_weight(row.total_stock),
            total_sold_weight=quantize_weight(row.total_sold_weight),
            total_sales_amount=quantize_money(row.total_sales_amount),
            total_deposit_amount=quantize_money(row.total_deposit_amount),
        )

    async def list_stock_by_type(self, db: AsyncSession) -> list[StockByType]:
        rows = (await db.execute(_STOCK_BY_TYPE_SQL)).fetchall()
        return [
            StockByType(
                waste_type_id=r.id,
                code=r.code,
                name=r.name,
                deposited=quantize_weight(r.deposited),
                sold=quantize_weight(r.sold),
            )
            for r in rows
        ]

    async def list_ledger(
        self,
        db: AsyncSession,
        lower: datetime | None,
        upper: datetime | None,
        customer_id: int | None,
    ) -> list[LedgerEntry]:
        result = await db.execute(
            _LEDGER_SQL,
            {"lower": lower, "upper": upper, "customer_id": customer_id},
        )
        return [_row_to_ledger_entry(r) for r in result.fetchall()]

    async def get_customer_profile(
        self, db: AsyncSession, customer_id: int
    ) -> CustomerProfile | None:
        row = (
            await db.execute(_CUSTOMER_PROFILE_SQL, {"customer_id": customer_id})
        ).fetchone()
        if row is None:
            return None
        return CustomerProfile(
            id=row.id,
            code=row.code,
            name=row.name,
            id_number=row.id_number,
            address=row.address,
            institution=row.institution,
            balance=row.balance,
            created_at=row.created_at,
        )

    async def list_deposits(
        self, db: AsyncSession, customer_id: int | None = None
    ) -> list[DepositLine]:
        result = await db.execute(_LIST_DEPOSITS_SQL, {"customer_id": customer_id})
        return [_row_to_deposit(r) for r in result.fetchall()]

    async def list_withdrawals(
        self, db: AsyncSession, customer_id: int | None = None
    ) -> list[WithdrawalLine]:
        result = await db.execute(_LIST_WITHDRAWALS_SQL, {"customer_id": customer_id})
        return [_row_to_withdrawal(r) for r in result.fetchall()]

    async def list_sales(self, db: AsyncSession) -> list[SaleLine]:
        result = await db.execute(_LIST_SALES_SQL)
        return [_row_to_sale(r) for r in result.fetchall()]

    async def get_deposit(self, db: AsyncSession, deposit_id: int) -> DepositLine | None:
        row = (await db.execute(_GET_DEPOSIT_SQL, {"deposit_id": deposit_id})).fetchone()
        return _row_to_deposit(row) if row else None

    async def get_waste_type_code(self, db: AsyncSession, waste_type_id: int) -> str | None:
        result = await db.execute(_WASTE_TYPE_CODE_SQL, {"waste_type_id": waste_type_id})
        return result.scalar_one_or_none()

    async def find_balance_mismatches(self, db: AsyncSession) -> list[BalanceMismatch]:
        rows = (await db.execute(_BALANCE_MISMATCH_SQL)).fetchall()
        return [
            BalanceMismatch(
                customer_id=r.id,
                stored_balance=r.balance,
                event_balance=quantize_money(r.event_balance),
            )
            for r in rows
        ]

    async def find_negative_stock(self, db: AsyncSession) -> list[NegativeStock]:
        rows = (await db.execute(_NEGATIVE_STOCK_SQL)).fetchall()
        return [
            NegativeStock(
                waste_type_id=r.id,
                deposited=quantize_weight(r.deposited),
                sold=quantize_weight(r.sold),
            )
            for r in rows
        ]
