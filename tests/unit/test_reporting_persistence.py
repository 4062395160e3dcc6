# tests/unit/test_reporting_persistence.py
"""Unit tests for ReportingRepository using MagicMock AsyncSession."""
from datetime import UTC, datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.bs_common.enums import TransactionKind
from src.bs_reporting.infrastructure.persistence import ReportingRepository


@pytest.fixture
def db():
    return MagicMock()


def _rows(rows):
    result = MagicMock()
    result.fetchall.return_value = rows
    return result


class TestSnapshot:
    async def test_pins_repeatable_read_read_only(self, db):
        db.connection = AsyncMock()

        await ReportingRepository().begin_snapshot(db)

        db.connection.assert_awaited_once_with(
            execution_options={"isolation_level": "REPEATABLE READ", "postgresql_readonly": True}
        )


class TestDashboard:
    async def test_maps_and_quantizes(self, db):
        row = MagicMock()
        row.total_customers = 2
        row.total_officers = 1
        row.total_waste_types = 3
        row.total_deposits = 4
        row.total_withdrawals = 0
        row.total_balance = Decimal("28875")
        row.total_stock = Decimal("5.75")
        row.total_sold_weight = 0
        row.total_sales_amount = Decimal("20000.00")
        row.total_deposit_amount = Decimal("28875.00")
        result = MagicMock()
        result.one.return_value = row
        db.execute = AsyncMock(return_value=result)

        stats = await ReportingRepository().get_dashboard_stats(db)

        assert stats.total_balance == Decimal("28875.00")
        assert stats.total_stock == Decimal("5.750")
        assert stats.total_sold_weight == Decimal("0.000")
        assert stats.profit == Decimal("-8875.00")


class TestLedger:
    async def test_binds_filters_and_maps_kinds(self, db):
        row = MagicMock()
        row.kind = "WITHDRAWAL"
        row.id = 5
        row.occurred_at = datetime.now(UTC)
        row.amount = Decimal("1000")
        row.customer_id = 1
        row.customer_name = "Siti"
        row.collector_id = None
        row.collector_name = None
        row.waste_type_id = None
        row.waste_type_name = None
        row.weight = None
        db.execute = AsyncMock(return_value=_rows([row]))
        lower = datetime(2024, 1, 1, tzinfo=UTC)

        entries = await ReportingRepository().list_ledger(db, lower, None, 1)

        assert db.execute.call_args.args[1] == {"lower": lower, "upper": None, "customer_id": 1}
        assert entries[0].kind is TransactionKind.WITHDRAWAL
        assert entries[0].amount == Decimal("1000.00")
        assert entries[0].weight is None

    async def test_sql_orders_newest_first_with_tie_break(self, db):
        db.execute = AsyncMock(return_value=_rows([]))

        await ReportingRepository().list_ledger(db, None, None, None)

        sql = str(db.execute.call_args.args[0])
        assert "ORDER BY occurred_at DESC, kind ASC, id DESC" in sql
        assert "kind <> 'SALE'" in sql


class TestStockByType:
    async def test_ordered_by_name_in_sql(self, db):
        row = MagicMock()
        row.id = 1
        row.code = "PLS"
        row.name = "Plastic"
        row.deposited = Decimal("25.75")
        row.sold = Decimal("20")
        db.execute = AsyncMock(return_value=_rows([row]))

        levels = await ReportingRepository().list_stock_by_type(db)

        assert "ORDER BY w.name ASC, w.id ASC" in str(db.execute.call_args.args[0])
        assert levels[0].available == Decimal("5.750")
