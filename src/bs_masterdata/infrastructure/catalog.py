"""Master-data lookups consumed by the ledger (price catalog side).

Prices are read at call time inside the caller's transaction; the ledger
copies them into the event row, never references them afterwards.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.bs_ledger.domain.models import WastePrices
from src.bs_masterdata.infrastructure.db_models import CollectorORM, WasteTypeORM


class MasterDataCatalog:
    async def get_waste_type_prices(
        self, db: AsyncSession, waste_type_id: int
    ) -> WastePrices | None:
        result = await db.execute(
            select(WasteTypeORM.id, WasteTypeORM.buy_price, WasteTypeORM.sell_price)
            .where(WasteTypeORM.id == waste_type_id)
        )
        row = result.one_or_none()
        if row is None:
            return None
        return WastePrices(
            waste_type_id=row.id,
            buy_price=row.buy_price,
            sell_price=row.sell_price,
        )

    async def collector_exists(self, db: AsyncSession, collector_id: int) -> bool:
        result = await db.execute(
            select(CollectorORM.id).where(CollectorORM.id == collector_id)
        )
        return result.scalar_one_or_none() is not None
