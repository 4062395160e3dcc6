"""InventoryRepository: stock derivation and sale events.

Stock is never stored. It is recomputed from deposit_events and sale_events
using the (waste_type_id) INCLUDE (weight) indexes, so each sum is an
index-only scan over that type's rows.

Sales for one waste type are serialized by locking its waste_types row with
FOR NO KEY UPDATE. That mode conflicts with itself and with price updates,
but not with the FOR KEY SHARE lock taken by deposit inserts' foreign key
check, so deposits keep flowing while a sale is being admitted.
"""

from decimal import Decimal

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.bs_common.decimals import quantize_weight
from src.bs_common.errors import InternalError
from src.bs_inventory.domain.models import SaleEvent, StockLevel
from src.bs_ledger.domain.models import WastePrices

_LOCK_WASTE_TYPE_SQL = text("""
    SELECT id, buy_price, sell_price
    FROM waste_types
    WHERE id = :waste_type_id
    FOR NO KEY UPDATE
""")

_WASTE_TYPE_EXISTS_SQL = text("""
    SELECT EXISTS (SELECT 1 FROM waste_types WHERE id = :waste_type_id)
""")

_STOCK_LEVEL_SQL = text("""
    SELECT
        (SELECT COALESCE(SUM(weight), 0) FROM deposit_events
          WHERE waste_type_id = :waste_type_id) AS deposited,
        (SELECT COALESCE(SUM(weight), 0) FROM sale_events
          WHERE waste_type_id = :waste_type_id) AS sold
""")

_INSERT_SALE_SQL = text("""
    INSERT INTO sale_events
        (collector_id, waste_type_id, weight, unit_price, amount)
    VALUES
        (:collector_id, :waste_type_id, :weight, :unit_price, :amount)
    RETURNING id, collector_id, waste_type_id, weight, unit_price, amount, occurred_at
""")


def _row_to_sale(row: object) -> SaleEvent:
    return SaleEvent(
        id=row.id,  # type: ignore[attr-defined]
        collector_id=row.collector_id,  # type: ignore[attr-defined]
        waste_type_id=row.waste_type_id,  # type: ignore[attr-defined]
        weight=row.weight,  # type: ignore[attr-defined]
        unit_price=row.unit_price,  # type: ignore[attr-defined]
        amount=row.amount,  # type: ignore[attr-defined]
        occurred_at=row.occurred_at,  # type: ignore[attr-defined]
    )


class InventoryRepository:
    async def lock_waste_type(
        self, db: AsyncSession, waste_type_id: int
    ) -> WastePrices | None:
        result = await db.execute(_LOCK_WASTE_TYPE_SQL, {"waste_type_id": waste_type_id})
        row = result.fetchone()
        if row is None:
            return None
        return WastePrices(
            waste_type_id=row.id,
            buy_price=row.buy_price,
            sell_price=row.sell_price,
        )

    async def waste_type_exists(self, db: AsyncSession, waste_type_id: int) -> bool:
        result = await db.execute(_WASTE_TYPE_EXISTS_SQL, {"waste_type_id": waste_type_id})
        return bool(result.scalar_one())

    async def get_stock_level(
        self, db: AsyncSession, waste_type_id: int
    ) -> StockLevel:
        result = await db.execute(_STOCK_LEVEL_SQL, {"waste_type_id": waste_type_id})
        row = result.fetchone()
        return StockLevel(
            waste_type_id=waste_type_id,
            deposited=quantize_weight(row.deposited),  # type: ignore[union-attr]
            sold=quantize_weight(row.sold),  # type: ignore[union-attr]
        )

    async def append_sale_event(
        self,
        db: AsyncSession,
        collector_id: int,
        waste_type_id: int,
        weight: Decimal,
        unit_price: Decimal,
        amount: Decimal,
    ) -> SaleEvent:
        result = await db.execute(
            _INSERT_SALE_SQL,
            {
                "collector_id": collector_id,
                "waste_type_id": waste_type_id,
                "weight": weight,
                "unit_price": unit_price,
                "amount": amount,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Sale insert returned no rows")
        return _row_to_sale(row)
