"""Repository Protocol: dependency inversion for testability."""

from decimal import Decimal
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.bs_inventory.domain.models import SaleEvent, StockLevel
from src.bs_ledger.domain.models import WastePrices


class InventoryRepositoryProtocol(Protocol):
    async def lock_waste_type(
        self, db: AsyncSession, waste_type_id: int
    ) -> WastePrices | None: ...

    async def get_stock_level(
        self, db: AsyncSession, waste_type_id: int
    ) -> StockLevel: ...

    async def waste_type_exists(self, db: AsyncSession, waste_type_id: int) -> bool: ...

    async def append_sale_event(
        self,
        db: AsyncSession,
        collector_id: int,
        waste_type_id: int,
        weight: Decimal,
        unit_price: Decimal,
        amount: Decimal,
    ) -> SaleEvent: ...
