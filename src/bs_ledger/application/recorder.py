"""TransactionRecorder: the three write operations of the ledger.

Each record_* call is one unit of work: price snapshot, balance/stock check,
balance mutation and event insert all happen in a single database
transaction that is committed together or rolled back together. Transient
conflicts (deadlock, serialization failure, lock timeout) re-run the whole
unit a bounded number of times.

Amount validation happens before the transaction opens; existence checks run
inside it, ahead of any write.
"""

import logging
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.bs_common.decimals import (
    line_amount,
    require_amount_in_range,
    require_positive_money,
    require_positive_weight,
)
from src.bs_common.errors import CollectorNotFoundError, WasteTypeNotFoundError
from src.bs_common.retry import run_in_transaction
from src.bs_inventory.application.valuation import InventoryValuationEngine
from src.bs_inventory.domain.models import SaleEvent
from src.bs_inventory.domain.repository import InventoryRepositoryProtocol
from src.bs_inventory.infrastructure.persistence import InventoryRepository
from src.bs_ledger.domain.models import DepositEvent, WithdrawalEvent
from src.bs_ledger.domain.repository import LedgerRepositoryProtocol, PriceCatalogProtocol
from src.bs_ledger.infrastructure.persistence import LedgerRepository
from src.bs_masterdata.infrastructure.catalog import MasterDataCatalog

logger = logging.getLogger(__name__)


class TransactionRecorder:
    def __init__(
        self,
        ledger: LedgerRepositoryProtocol | None = None,
        inventory: InventoryRepositoryProtocol | None = None,
        catalog: PriceCatalogProtocol | None = None,
        max_retries: int | None = None,
    ) -> None:
        self._ledger: LedgerRepositoryProtocol = ledger or LedgerRepository()
        self._inventory: InventoryRepositoryProtocol = inventory or InventoryRepository()
        self._valuation = InventoryValuationEngine(self._inventory)
        self._catalog: PriceCatalogProtocol = catalog or MasterDataCatalog()
        self._max_retries = (
            settings.CONFLICT_MAX_RETRIES if max_retries is None else max_retries
        )

    async def record_deposit(
        self,
        db: AsyncSession,
        customer_id: int,
        waste_type_id: int,
        weight: Decimal | int | str,
    ) -> DepositEvent:
        """Credit a customer for `weight` kg of waste at the current buy price."""
        weight = require_positive_weight("weight", weight)

        async def work() -> DepositEvent:
            prices = await self._catalog.get_waste_type_prices(db, waste_type_id)
            if prices is None:
                raise WasteTypeNotFoundError(waste_type_id)
            amount = require_amount_in_range("amount", line_amount(weight, prices.buy_price))
            account = await self._ledger.apply_deposit(db, customer_id, amount)
            return await self._ledger.append_deposit_event(
                db,
                customer_id=customer_id,
                waste_type_id=waste_type_id,
                weight=weight,
                unit_price=prices.buy_price,
                amount=amount,
                balance_after=account.balance,
            )

        event = await run_in_transaction(
            db, work, max_retries=self._max_retries, label="record_deposit"
        )
        logger.info(
            "Deposit %d: customer=%d waste_type=%d weight=%s amount=%s balance=%s",
            event.id,
            customer_id,
            waste_type_id,
            event.weight,
            event.amount,
            event.balance_after,
        )
        return event

    async def record_withdrawal(
        self,
        db: AsyncSession,
        customer_id: int,
        amount: Decimal | int | str,
    ) -> WithdrawalEvent:
        """Pay out `amount` from a customer's balance; all or nothing."""
        amount = require_positive_money("amount", amount)

        async def work() -> WithdrawalEvent:
            account = await self._ledger.apply_withdrawal(db, customer_id, amount)
            return await self._ledger.append_withdrawal_event(
                db,
                customer_id=customer_id,
                amount=amount,
                balance_after=account.balance,
            )

        event = await run_in_transaction(
            db, work, max_retries=self._max_retries, label="record_withdrawal"
        )
        logger.info(
            "Withdrawal %d: customer=%d amount=%s balance=%s",
            event.id,
            customer_id,
            event.amount,
            event.balance_after,
        )
        return event

    async def record_sale(
        self,
        db: AsyncSession,
        collector_id: int,
        waste_type_id: int,
        weight: Decimal | int | str,
    ) -> SaleEvent:
        """Sell `weight` kg of stock to a collector at the current sell price."""
        weight = require_positive_weight("weight", weight)

        async def work() -> SaleEvent:
            if not await self._catalog.collector_exists(db, collector_id):
                raise CollectorNotFoundError(collector_id)
            prices = await self._valuation.reserve_for_sale(db, waste_type_id, weight)
            amount = require_amount_in_range("amount", line_amount(weight, prices.sell_price))
            return await self._inventory.append_sale_event(
                db,
                collector_id=collector_id,
                waste_type_id=waste_type_id,
                weight=weight,
                unit_price=prices.sell_price,
                amount=amount,
            )

        event = await run_in_transaction(
            db, work, max_retries=self._max_retries, label="record_sale"
        )
        logger.info(
            "Sale %d: collector=%d waste_type=%d weight=%s amount=%s",
            event.id,
            collector_id,
            waste_type_id,
            event.weight,
            event.amount,
        )
        return event
