"""Master-data service: customers, officers, waste types, collectors.

All DB operations use the injected AsyncSession. Transactions are managed
by the caller (router layer) via `async with db.begin()`.

Only two rules here matter to the ledger:
  - a waste type's sell_price must stay strictly above its buy_price, checked
    against the prospective combination while the row is locked;
  - a record referenced by any transaction event cannot be deleted.
"""

import logging
from decimal import Decimal
from typing import Any, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import DataError, IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.bs_common.decimals import require_positive_price
from src.bs_common.enums import EventReference
from src.bs_common.errors import (
    CollectorNotFoundError,
    CustomerNotFoundError,
    DataOutOfRangeError,
    DuplicateCodeError,
    InvalidArgumentError,
    InvalidPriceError,
    NotFoundError,
    OfficerNotFoundError,
    ReferencedByEventsError,
    WasteTypeNotFoundError,
)
from src.bs_common.retry import sqlstate_of
from src.bs_ledger.domain.repository import EventGuardProtocol
from src.bs_ledger.infrastructure.event_guard import EventGuard
from src.bs_masterdata.application.schemas import (
    CollectorCreate,
    CollectorUpdate,
    CustomerCreate,
    CustomerUpdate,
    OfficerCreate,
    OfficerUpdate,
    WasteTypeCreate,
    WasteTypeUpdate,
)
from src.bs_masterdata.infrastructure.db_models import (
    CollectorORM,
    CustomerORM,
    OfficerORM,
    WasteTypeORM,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", CustomerORM, OfficerORM, WasteTypeORM, CollectorORM)

_UNIQUE_VIOLATION = "23505"
_FOREIGN_KEY_VIOLATION = "23503"

# Columns that may be set to NULL through an update
_NULLABLE_FIELDS = frozenset({"institution"})


class MasterDataService:
    """Stateless service; instantiate once, reuse across requests."""

    def __init__(self, guard: EventGuardProtocol | None = None) -> None:
        self._guard: EventGuardProtocol = guard or EventGuard()

    # --- Customers -------------------------------------------------------

    async def create_customer(self, data: CustomerCreate, db: AsyncSession) -> CustomerORM:
        await self._ensure_code_free(CustomerORM, "Customer", data.code, db)
        customer = CustomerORM(**data.model_dump(), balance=Decimal("0.00"))
        return await self._insert(customer, "Customer", data.code, db)

    async def get_customer(self, customer_id: int, db: AsyncSession) -> CustomerORM:
        return await self._get(CustomerORM, customer_id, CustomerNotFoundError(customer_id), db)

    async def list_customers(self, db: AsyncSession) -> list[CustomerORM]:
        return await self._list(CustomerORM, db)

    async def update_customer(
        self, customer_id: int, data: CustomerUpdate, db: AsyncSession
    ) -> CustomerORM:
        customer = await self.get_customer(customer_id, db)
        return await self._update(customer, "Customer", data.model_dump(exclude_unset=True), db)

    async def delete_customer(self, customer_id: int, db: AsyncSession) -> None:
        customer = await self.get_customer(customer_id, db)
        await self._delete(customer, "customer", EventReference.CUSTOMER, db)

    # --- Officers --------------------------------------------------------

    async def create_officer(self, data: OfficerCreate, db: AsyncSession) -> OfficerORM:
        await self._ensure_code_free(OfficerORM, "Officer", data.code, db)
        return await self._insert(OfficerORM(**data.model_dump()), "Officer", data.code, db)

    async def get_officer(self, officer_id: int, db: AsyncSession) -> OfficerORM:
        return await self._get(OfficerORM, officer_id, OfficerNotFoundError(officer_id), db)

    async def list_officers(self, db: AsyncSession) -> list[OfficerORM]:
        return await self._list(OfficerORM, db)

    async def update_officer(
        self, officer_id: int, data: OfficerUpdate, db: AsyncSession
    ) -> OfficerORM:
        officer = await self.get_officer(officer_id, db)
        return await self._update(officer, "Officer", data.model_dump(exclude_unset=True), db)

    async def delete_officer(self, officer_id: int, db: AsyncSession) -> None:
        # Officers never appear on transaction events.
        officer = await self.get_officer(officer_id, db)
        await db.delete(officer)
        await db.flush()

    # --- Waste types -----------------------------------------------------

    async def create_waste_type(self, data: WasteTypeCreate, db: AsyncSession) -> WasteTypeORM:
        buy_price, sell_price = _checked_prices(data.buy_price, data.sell_price)
        await self._ensure_code_free(WasteTypeORM, "Waste type", data.code, db)
        waste_type = WasteTypeORM(
            code=data.code,
            name=data.name,
            buy_price=buy_price,
            sell_price=sell_price,
        )
        return await self._insert(waste_type, "Waste type", data.code, db)

    async def get_waste_type(self, waste_type_id: int, db: AsyncSession) -> WasteTypeORM:
        return await self._get(
            WasteTypeORM, waste_type_id, WasteTypeNotFoundError(waste_type_id), db
        )

    async def list_waste_types(self, db: AsyncSession) -> list[WasteTypeORM]:
        return await self._list(WasteTypeORM, db)

    async def update_waste_type(
        self, waste_type_id: int, data: WasteTypeUpdate, db: AsyncSession
    ) -> WasteTypeORM:
        """Partial update; the price pair is validated as it would be after the write.

        The row is locked first so a concurrent price edit cannot slip in
        between the check and the write.
        """
        result = await db.execute(
            select(WasteTypeORM).where(WasteTypeORM.id == waste_type_id).with_for_update()
        )
        waste_type = result.scalar_one_or_none()
        if waste_type is None:
            raise WasteTypeNotFoundError(waste_type_id)

        changes = data.model_dump(exclude_unset=True)
        if "buy_price" in changes or "sell_price" in changes:
            new_buy = changes.get("buy_price")
            new_sell = changes.get("sell_price")
            buy_price, sell_price = _checked_prices(
                waste_type.buy_price if new_buy is None else new_buy,
                waste_type.sell_price if new_sell is None else new_sell,
            )
            changes["buy_price"] = buy_price
            changes["sell_price"] = sell_price
        updated = await self._update(waste_type, "Waste type", changes, db)
        logger.info(
            "Waste type %d prices now buy=%s sell=%s",
            waste_type_id,
            updated.buy_price,
            updated.sell_price,
        )
        return updated

    async def delete_waste_type(self, waste_type_id: int, db: AsyncSession) -> None:
        waste_type = await self.get_waste_type(waste_type_id, db)
        await self._delete(waste_type, "waste type", EventReference.WASTE_TYPE, db)

    # --- Collectors ------------------------------------------------------

    async def create_collector(self, data: CollectorCreate, db: AsyncSession) -> CollectorORM:
        await self._ensure_code_free(CollectorORM, "Collector", data.code, db)
        return await self._insert(CollectorORM(**data.model_dump()), "Collector", data.code, db)

    async def get_collector(self, collector_id: int, db: AsyncSession) -> CollectorORM:
        return await self._get(
            CollectorORM, collector_id, CollectorNotFoundError(collector_id), db
        )

    async def list_collectors(self, db: AsyncSession) -> list[CollectorORM]:
        return await self._list(CollectorORM, db)

    async def update_collector(
        self, collector_id: int, data: CollectorUpdate, db: AsyncSession
    ) -> CollectorORM:
        collector = await self.get_collector(collector_id, db)
        return await self._update(collector, "Collector", data.model_dump(exclude_unset=True), db)

    async def delete_collector(self, collector_id: int, db: AsyncSession) -> None:
        collector = await self.get_collector(collector_id, db)
        await self._delete(collector, "collector", EventReference.COLLECTOR, db)

    # --- Shared helpers --------------------------------------------------

    async def _get(
        self, model: type[ModelT], entity_id: int, not_found: NotFoundError, db: AsyncSession
    ) -> ModelT:
        result = await db.execute(select(model).where(model.id == entity_id))
        obj = result.scalar_one_or_none()
        if obj is None:
            raise not_found
        return obj

    async def _list(self, model: type[ModelT], db: AsyncSession) -> list[ModelT]:
        result = await db.execute(select(model).order_by(model.id))
        return list(result.scalars().all())

    async def _ensure_code_free(
        self, model: type[ModelT], entity: str, code: str, db: AsyncSession
    ) -> None:
        # DB UNIQUE constraint is the final guard
        result = await db.execute(select(model.id).where(model.code == code))
        if result.scalar_one_or_none() is not None:
            raise DuplicateCodeError(entity, code)

    async def _insert(self, obj: ModelT, entity: str, code: str, db: AsyncSession) -> ModelT:
        db.add(obj)
        await self._flush(entity, code, db)
        await db.refresh(obj)
        return obj

    async def _update(
        self, obj: ModelT, entity: str, changes: dict[str, Any], db: AsyncSession
    ) -> ModelT:
        new_code = changes.get("code")
        if new_code is not None and new_code != obj.code:
            await self._ensure_code_free(type(obj), entity, new_code, db)
        for field, value in changes.items():
            if value is None and field not in _NULLABLE_FIELDS:
                raise InvalidArgumentError(f"{field} cannot be null")
            setattr(obj, field, value)
        await self._flush(entity, new_code or obj.code, db)
        await db.refresh(obj)
        return obj

    async def _delete(
        self, obj: ModelT, entity: str, reference: EventReference, db: AsyncSession
    ) -> None:
        if await self._guard.has_events(db, reference, obj.id):
            raise ReferencedByEventsError(entity, obj.id)
        await db.delete(obj)
        try:
            await db.flush()
        except IntegrityError as exc:
            # An event referencing the row was committed after the guard ran.
            if sqlstate_of(exc) == _FOREIGN_KEY_VIOLATION:
                raise ReferencedByEventsError(entity, obj.id) from exc
            raise
        logger.info("Deleted %s %d", entity, obj.id)

    async def _flush(self, entity: str, code: str, db: AsyncSession) -> None:
        try:
            await db.flush()
        except IntegrityError as exc:
            if sqlstate_of(exc) == _UNIQUE_VIOLATION:
                raise DuplicateCodeError(entity, code) from exc
            raise
        except DataError as exc:
            raise DataOutOfRangeError(f"{entity} {code}: value out of range") from exc


def _checked_prices(buy_price: Decimal, sell_price: Decimal) -> tuple[Decimal, Decimal]:
    """Quantize both prices and enforce sell_price > buy_price > 0."""
    buy = require_positive_price("buy_price", buy_price)
    sell = require_positive_price("sell_price", sell_price)
    if sell <= buy:
        raise InvalidPriceError(buy, sell)
    return buy, sell
