"""Pydantic schemas for bs_inventory."""

from decimal import Decimal

from pydantic import BaseModel

from src.bs_common.decimals import weight_display
from src.bs_inventory.domain.models import StockLevel


class StockLevelResponse(BaseModel):
    waste_type_id: int
    total_deposited: Decimal
    total_sold: Decimal
    available: Decimal
    available_display: str

    @classmethod
    def from_domain(cls, level: StockLevel) -> "StockLevelResponse":
        return cls(
            waste_type_id=level.waste_type_id,
            total_deposited=level.deposited,
            total_sold=level.sold,
            available=level.available,
            available_display=weight_display(level.available),
        )
