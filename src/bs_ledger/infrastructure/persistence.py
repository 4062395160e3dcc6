"""LedgerRepository: concrete implementation of LedgerRepositoryProtocol.

Balance mutations are single conditional PostgreSQL UPDATE ... RETURNING
statements. The UPDATE takes the customer's row lock and holds it until the
caller commits, so at most one balance-affecting transaction per customer is
in flight. A result of 0 rows means either the customer does not exist or
the withdrawal would drive the balance negative.

Transaction ownership: the CALLER (TransactionRecorder) starts, commits and
rolls back. Nothing here commits.
"""

from decimal import Decimal

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.bs_common.errors import (
    CustomerNotFoundError,
    InsufficientBalanceError,
    InternalError,
)
from src.bs_ledger.domain.models import CustomerBalance, DepositEvent, WithdrawalEvent

# ---------------------------------------------------------------------------
# SQL: balance mutations
# ---------------------------------------------------------------------------

_APPLY_DEPOSIT_SQL = text("""
    UPDATE customers
    SET balance = balance + :amount,
        updated_at = NOW()
    WHERE id = :customer_id
    RETURNING id, balance
""")

_APPLY_WITHDRAWAL_SQL = text("""
    UPDATE customers
    SET balance = balance - :amount,
        updated_at = NOW()
    WHERE id = :customer_id AND balance >= :amount
    RETURNING id, balance
""")

_GET_BALANCE_SQL = text("""
    SELECT id, balance
    FROM customers
    WHERE id = :customer_id
""")

# ---------------------------------------------------------------------------
# SQL: append-only events
# ---------------------------------------------------------------------------

_INSERT_DEPOSIT_SQL = text("""
    INSERT INTO deposit_events
        (customer_id, waste_type_id, weight, unit_price, amount, balance_after)
    VALUES
        (:customer_id, :waste_type_id, :weight, :unit_price, :amount, :balance_after)
    RETURNING id, customer_id, waste_type_id, weight, unit_price, amount,
              balance_after, occurred_at
""")

_INSERT_WITHDRAWAL_SQL = text("""
    INSERT INTO withdrawal_events (customer_id, amount, balance_after)
    VALUES (:customer_id, :amount, :balance_after)
    RETURNING id, customer_id, amount, balance_after, occurred_at
""")


def _row_to_balance(row: object) -> CustomerBalance:
    return CustomerBalance(
        customer_id=row.id,  # type: ignore[attr-defined]
        balance=row.balance,  # type: ignore[attr-defined]
    )


def _row_to_deposit(row: object) -> DepositEvent:
    return DepositEvent(
        id=row.id,  # type: ignore[attr-defined]
        customer_id=row.customer_id,  # type: ignore[attr-defined]
        waste_type_id=row.waste_type_id,  # type: ignore[attr-defined]
        weight=row.weight,  # type: ignore[attr-defined]
        unit_price=row.unit_price,  # type: ignore[attr-defined]
        amount=row.amount,  # type: ignore[attr-defined]
        balance_after=row.balance_after,  # type: ignore[attr-defined]
        occurred_at=row.occurred_at,  # type: ignore[attr-defined]
    )


def _row_to_withdrawal(row: object) -> WithdrawalEvent:
    return WithdrawalEvent(
        id=row.id,  # type: ignore[attr-defined]
        customer_id=row.customer_id,  # type: ignore[attr-defined]
        amount=row.amount,  # type: ignore[attr-defined]
        balance_after=row.balance_after,  # type: ignore[attr-defined]
        occurred_at=row.occurred_at,  # type: ignore[attr-defined]
    )


class LedgerRepository:
    """Concrete repository; every balance change is atomic at the SQL level."""

    async def get_balance(
        self, db: AsyncSession, customer_id: int
    ) -> CustomerBalance | None:
        result = await db.execute(_GET_BALANCE_SQL, {"customer_id": customer_id})
        row = result.fetchone()
        return _row_to_balance(row) if row else None

    async def apply_deposit(
        self, db: AsyncSession, customer_id: int, amount: Decimal
    ) -> CustomerBalance:
        result = await db.execute(
            _APPLY_DEPOSIT_SQL, {"customer_id": customer_id, "amount": amount}
        )
        row = result.fetchone()
        if row is None:
            raise CustomerNotFoundError(customer_id)
        return _row_to_balance(row)

    async def apply_withdrawal(
        self, db: AsyncSession, customer_id: int, amount: Decimal
    ) -> CustomerBalance:
        result = await db.execute(
            _APPLY_WITHDRAWAL_SQL, {"customer_id": customer_id, "amount": amount}
        )
        row = result.fetchone()
        if row is None:
            current = await self.get_balance(db, customer_id)
            if current is None:
                raise CustomerNotFoundError(customer_id)
            raise InsufficientBalanceError(amount, current.balance)
        return _row_to_balance(row)

    async def append_deposit_event(
        self,
        db: AsyncSession,
        customer_id: int,
        waste_type_id: int,
        weight: Decimal,
        unit_price: Decimal,
        amount: Decimal,
        balance_after: Decimal,
    ) -> DepositEvent:
        result = await db.execute(
            _INSERT_DEPOSIT_SQL,
            {
                "customer_id": customer_id,
                "waste_type_id": waste_type_id,
                "weight": weight,
                "unit_price": unit_price,
                "amount": amount,
                "balance_after": balance_after,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Deposit insert returned no rows")
        return _row_to_deposit(row)

    async def append_withdrawal_event(
        self,
        db: AsyncSession,
        customer_id: int,
        amount: Decimal,
        balance_after: Decimal,
    ) -> WithdrawalEvent:
        result = await db.execute(
            _INSERT_WITHDRAWAL_SQL,
            {
                "customer_id": customer_id,
                "amount": amount,
                "balance_after": balance_after,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Withdrawal insert returned no rows")
        return _row_to_withdrawal(row)
