"""InventoryValuationEngine: derived stock and sale admission.

available_stock() is a plain read. reserve_for_sale() must run inside the
caller's transaction: it locks the waste type row, recomputes stock under the
lock and only then lets the caller insert the SaleEvent. The lock is released
when the caller commits or rolls back, so the check and the insert are one
unit with respect to any other sale of the same waste type.
"""

import logging
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from src.bs_common.errors import InsufficientStockError, WasteTypeNotFoundError
from src.bs_inventory.domain.models import StockLevel
from src.bs_inventory.domain.repository import InventoryRepositoryProtocol
from src.bs_inventory.infrastructure.persistence import InventoryRepository
from src.bs_ledger.domain.models import WastePrices

logger = logging.getLogger(__name__)


class InventoryValuationEngine:
    def __init__(self, repo: InventoryRepositoryProtocol | None = None) -> None:
        self._repo: InventoryRepositoryProtocol = repo or InventoryRepository()

    async def stock_level(self, db: AsyncSession, waste_type_id: int) -> StockLevel:
        if not await self._repo.waste_type_exists(db, waste_type_id):
            raise WasteTypeNotFoundError(waste_type_id)
        level = await self._repo.get_stock_level(db, waste_type_id)
        _warn_if_negative(level)
        return level

    async def available_stock(self, db: AsyncSession, waste_type_id: int) -> Decimal:
        level = await self.stock_level(db, waste_type_id)
        return level.available

    async def reserve_for_sale(
        self, db: AsyncSession, waste_type_id: int, weight: Decimal
    ) -> WastePrices:
        """Lock the waste type and verify `weight` kg is available right now.

        Returns the price row read under the lock; its sell_price is the
        snapshot the sale must be recorded at.
        """
        prices = await self._repo.lock_waste_type(db, waste_type_id)
        if prices is None:
            raise WasteTypeNotFoundError(waste_type_id)
        level = await self._repo.get_stock_level(db, waste_type_id)
        _warn_if_negative(level)
        if level.available < weight:
            raise InsufficientStockError(waste_type_id, weight, level.available)
        return prices


def _warn_if_negative(level: StockLevel) -> None:
    if level.raw_available < 0:
        logger.error(
            "Negative derived stock: waste_type=%s deposited=%s sold=%s",
            level.waste_type_id,
            level.deposited,
            level.sold,
        )
