"""Referential guard consulted by master data before deleting a record.

A customer, waste type or collector that any event points at must never be
deleted. The foreign keys on the event tables are ON DELETE RESTRICT, so a
delete racing a concurrent insert still fails at commit; this check gives the
common case a clean error before any DELETE is attempted.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.bs_common.enums import EventReference

_CUSTOMER_HAS_EVENTS_SQL = text("""
    SELECT EXISTS (SELECT 1 FROM deposit_events WHERE customer_id = :entity_id)
        OR EXISTS (SELECT 1 FROM withdrawal_events WHERE customer_id = :entity_id)
""")

_WASTE_TYPE_HAS_EVENTS_SQL = text("""
    SELECT EXISTS (SELECT 1 FROM deposit_events WHERE waste_type_id = :entity_id)
        OR EXISTS (SELECT 1 FROM sale_events WHERE waste_type_id = :entity_id)
""")

_COLLECTOR_HAS_EVENTS_SQL = text("""
    SELECT EXISTS (SELECT 1 FROM sale_events WHERE collector_id = :entity_id)
""")

_SQL_BY_REFERENCE = {
    EventReference.CUSTOMER: _CUSTOMER_HAS_EVENTS_SQL,
    EventReference.WASTE_TYPE: _WASTE_TYPE_HAS_EVENTS_SQL,
    EventReference.COLLECTOR: _COLLECTOR_HAS_EVENTS_SQL,
}


class EventGuard:
    async def has_events(
        self, db: AsyncSession, reference: EventReference, entity_id: int
    ) -> bool:
        result = await db.execute(_SQL_BY_REFERENCE[reference], {"entity_id": entity_id})
        return bool(result.scalar_one())
