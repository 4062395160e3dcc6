"""Unit tests for TransactionRecorder using mock and in-memory repositories."""

import asyncio
from datetime import UTC, datetime
from decimal import Decimal
from itertools import count
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.bs_common.errors import (
    AmountOutOfRangeError,
    CollectorNotFoundError,
    ConflictError,
    CustomerNotFoundError,
    InsufficientBalanceError,
    InsufficientStockError,
    NonPositiveAmountError,
    WasteTypeNotFoundError,
)
from src.bs_inventory.domain.models import SaleEvent, StockLevel
from src.bs_ledger.application.recorder import TransactionRecorder
from src.bs_ledger.domain.models import (
    CustomerBalance,
    DepositEvent,
    WastePrices,
    WithdrawalEvent,
)

_PRICES = WastePrices(waste_type_id=1, buy_price=Decimal("2000.00"), sell_price=Decimal("2500.00"))


def _session() -> MagicMock:
    db = MagicMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    return db


def _deposit_event(db, **kw) -> DepositEvent:
    return DepositEvent(id=1, occurred_at=datetime.now(UTC), **kw)


def _withdrawal_event(db, **kw) -> WithdrawalEvent:
    return WithdrawalEvent(id=1, occurred_at=datetime.now(UTC), **kw)


def _sale_event(db, **kw) -> SaleEvent:
    return SaleEvent(id=1, occurred_at=datetime.now(UTC), **kw)


def _recorder(ledger=None, inventory=None, catalog=None) -> TransactionRecorder:
    if catalog is None:
        catalog = AsyncMock()
        catalog.get_waste_type_prices.return_value = _PRICES
        catalog.collector_exists.return_value = True
    return TransactionRecorder(
        ledger=ledger or AsyncMock(),
        inventory=inventory or AsyncMock(),
        catalog=catalog,
        max_retries=3,
    )


# ---------------------------------------------------------------------------
# Deposits
# ---------------------------------------------------------------------------


class TestRecordDeposit:
    async def test_credits_at_buy_price(self) -> None:
        ledger = AsyncMock()
        ledger.apply_deposit.return_value = CustomerBalance(1, Decimal("71000.00"))
        ledger.append_deposit_event.side_effect = _deposit_event
        db = _session()

        event = await _recorder(ledger=ledger).record_deposit(db, 1, 1, "10.5")

        ledger.apply_deposit.assert_awaited_once_with(db, 1, Decimal("21000.00"))
        assert event.weight == Decimal("10.500")
        assert event.unit_price == Decimal("2000.00")
        assert event.amount == Decimal("21000.00")
        assert event.balance_after == Decimal("71000.00")
        db.commit.assert_awaited_once()

    @pytest.mark.parametrize("weight", ["0", "-2", "NaN"])
    async def test_rejects_bad_weight_before_touching_db(self, weight: str) -> None:
        ledger = AsyncMock()
        catalog = AsyncMock()
        db = _session()

        with pytest.raises(NonPositiveAmountError):
            await _recorder(ledger=ledger, catalog=catalog).record_deposit(db, 1, 1, weight)

        catalog.get_waste_type_prices.assert_not_awaited()
        ledger.apply_deposit.assert_not_awaited()
        db.commit.assert_not_awaited()

    async def test_unknown_waste_type_rolls_back(self) -> None:
        ledger = AsyncMock()
        catalog = AsyncMock()
        catalog.get_waste_type_prices.return_value = None
        db = _session()

        with pytest.raises(WasteTypeNotFoundError):
            await _recorder(ledger=ledger, catalog=catalog).record_deposit(db, 1, 99, "1")

        ledger.apply_deposit.assert_not_awaited()
        db.rollback.assert_awaited_once()
        db.commit.assert_not_awaited()

    async def test_unknown_customer_writes_no_event(self) -> None:
        ledger = AsyncMock()
        ledger.apply_deposit.side_effect = CustomerNotFoundError(99)
        db = _session()

        with pytest.raises(CustomerNotFoundError):
            await _recorder(ledger=ledger).record_deposit(db, 99, 1, "1")

        ledger.append_deposit_event.assert_not_awaited()

    async def test_weight_beyond_column_precision_is_rejected(self) -> None:
        ledger = AsyncMock()
        catalog = AsyncMock()
        db = _session()

        with pytest.raises(AmountOutOfRangeError):
            await _recorder(ledger=ledger, catalog=catalog).record_deposit(
                db, 1, 1, "100000000"
            )

        catalog.get_waste_type_prices.assert_not_awaited()
        ledger.append_deposit_event.assert_not_awaited()
        db.commit.assert_not_awaited()

    async def test_amount_beyond_column_precision_is_rejected(self) -> None:
        ledger = AsyncMock()
        catalog = AsyncMock()
        catalog.get_waste_type_prices.return_value = WastePrices(
            waste_type_id=1, buy_price=Decimal("99999999.98"), sell_price=Decimal("99999999.99")
        )
        db = _session()

        with pytest.raises(AmountOutOfRangeError):
            await _recorder(ledger=ledger, catalog=catalog).record_deposit(
                db, 1, 1, "9999999.999"
            )

        ledger.apply_deposit.assert_not_awaited()
        db.rollback.assert_awaited_once()


# ---------------------------------------------------------------------------
# Withdrawals
# ---------------------------------------------------------------------------


class TestRecordWithdrawal:
    async def test_debits_balance(self) -> None:
        ledger = AsyncMock()
        ledger.apply_withdrawal.return_value = CustomerBalance(1, Decimal("41000.00"))
        ledger.append_withdrawal_event.side_effect = _withdrawal_event
        db = _session()

        event = await _recorder(ledger=ledger).record_withdrawal(db, 1, "30000")

        assert event.amount == Decimal("30000.00")
        assert event.balance_after == Decimal("41000.00")
        db.commit.assert_awaited_once()

    async def test_insufficient_balance_leaves_no_event(self) -> None:
        ledger = AsyncMock()
        ledger.apply_withdrawal.side_effect = InsufficientBalanceError(
            Decimal("60000.00"), Decimal("50000.00")
        )
        db = _session()

        with pytest.raises(InsufficientBalanceError):
            await _recorder(ledger=ledger).record_withdrawal(db, 1, "60000")

        ledger.append_withdrawal_event.assert_not_awaited()
        db.rollback.assert_awaited_once()

    async def test_conflict_is_retried_as_a_whole(self) -> None:
        ledger = AsyncMock()
        ledger.apply_withdrawal.side_effect = [
            ConflictError(),
            CustomerBalance(1, Decimal("0.00")),
        ]
        ledger.append_withdrawal_event.side_effect = _withdrawal_event
        db = _session()

        event = await _recorder(ledger=ledger).record_withdrawal(db, 1, "100")

        assert ledger.apply_withdrawal.await_count == 2
        assert event.balance_after == Decimal("0.00")
        db.commit.assert_awaited_once()


# ---------------------------------------------------------------------------
# Sales
# ---------------------------------------------------------------------------


class TestRecordSale:
    def _inventory(self) -> AsyncMock:
        inventory = AsyncMock()
        inventory.lock_waste_type.return_value = _PRICES
        inventory.get_stock_level.return_value = StockLevel(
            1, Decimal("25.750"), Decimal("20.000")
        )
        inventory.append_sale_event.side_effect = _sale_event
        return inventory

    async def test_over_stock_sale_is_rejected(self) -> None:
        inventory = self._inventory()
        db = _session()

        with pytest.raises(InsufficientStockError):
            await _recorder(inventory=inventory).record_sale(db, 1, 1, "6.000")

        inventory.append_sale_event.assert_not_awaited()
        db.rollback.assert_awaited_once()

    async def test_sells_remaining_stock_at_sell_price(self) -> None:
        inventory = self._inventory()
        db = _session()

        event = await _recorder(inventory=inventory).record_sale(db, 1, 1, "5.750")

        assert event.weight == Decimal("5.750")
        assert event.unit_price == Decimal("2500.00")
        assert event.amount == Decimal("14375.00")
        db.commit.assert_awaited_once()

    async def test_unknown_collector(self) -> None:
        inventory = self._inventory()
        catalog = AsyncMock()
        catalog.collector_exists.return_value = False
        db = _session()

        with pytest.raises(CollectorNotFoundError):
            await _recorder(inventory=inventory, catalog=catalog).record_sale(db, 9, 1, "1")

        inventory.lock_waste_type.assert_not_awaited()


# ---------------------------------------------------------------------------
# Concurrency: in-memory repositories that honour the same lock semantics
# ---------------------------------------------------------------------------


class _FakeSession:
    """Releases the locks taken on its behalf when the unit of work ends."""

    def __init__(self) -> None:
        self.held: list[asyncio.Lock] = []

    async def commit(self) -> None:
        self._release()

    async def rollback(self) -> None:
        self._release()

    def _release(self) -> None:
        for lock in self.held:
            lock.release()
        self.held.clear()


class _InMemoryLedger:
    def __init__(self, balance: Decimal) -> None:
        self.balance = balance
        self.withdrawals: list[Decimal] = []
        self._ids = count(1)

    async def apply_withdrawal(self, db, customer_id, amount):
        await asyncio.sleep(0)
        # Conditional decrement, atomic like the UPDATE ... WHERE balance >= :amount
        if self.balance < amount:
            raise InsufficientBalanceError(amount, self.balance)
        self.balance -= amount
        return CustomerBalance(customer_id, self.balance)

    async def append_withdrawal_event(self, db, customer_id, amount, balance_after):
        await asyncio.sleep(0)
        self.withdrawals.append(amount)
        return WithdrawalEvent(next(self._ids), customer_id, amount, balance_after, datetime.now(UTC))


class _InMemoryInventory:
    def __init__(self, deposited: Decimal) -> None:
        self.deposited = deposited
        self.sales: list[Decimal] = []
        self._lock = asyncio.Lock()
        self._ids = count(1)

    async def lock_waste_type(self, db, waste_type_id):
        await self._lock.acquire()
        db.held.append(self._lock)
        return _PRICES

    async def get_stock_level(self, db, waste_type_id):
        await asyncio.sleep(0)
        return StockLevel(waste_type_id, self.deposited, sum(self.sales, Decimal("0.000")))

    async def waste_type_exists(self, db, waste_type_id):
        return True

    async def append_sale_event(self, db, collector_id, waste_type_id, weight, unit_price, amount):
        await asyncio.sleep(0)
        self.sales.append(weight)
        return SaleEvent(
            next(self._ids), collector_id, waste_type_id, weight, unit_price, amount,
            datetime.now(UTC),
        )


class TestConcurrency:
    async def test_concurrent_withdrawals_never_overdraw(self) -> None:
        ledger = _InMemoryLedger(Decimal("100000.00"))
        recorder = _recorder(ledger=ledger)

        results = await asyncio.gather(
            *(recorder.record_withdrawal(_FakeSession(), 1, "30000") for _ in range(5)),
            return_exceptions=True,
        )

        ok = [r for r in results if isinstance(r, WithdrawalEvent)]
        rejected = [r for r in results if isinstance(r, InsufficientBalanceError)]
        assert len(ok) == 3
        assert len(rejected) == 2
        assert ledger.balance == Decimal("10000.00")
        assert Decimal("100000.00") - sum(ledger.withdrawals) == ledger.balance

    async def test_concurrent_sales_never_oversell(self) -> None:
        inventory = _InMemoryInventory(Decimal("5.750"))
        recorder = _recorder(inventory=inventory)

        results = await asyncio.gather(
            *(recorder.record_sale(_FakeSession(), 1, 1, "2.000") for _ in range(4)),
            return_exceptions=True,
        )

        ok = [r for r in results if isinstance(r, SaleEvent)]
        rejected = [r for r in results if isinstance(r, InsufficientStockError)]
        assert len(ok) == 2
        assert len(rejected) == 2
        assert inventory.deposited - sum(inventory.sales) == Decimal("1.750")
