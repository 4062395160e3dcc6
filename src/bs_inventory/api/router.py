"""bs_inventory REST endpoint: live stock of one waste type."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.bs_common.database import get_db_session
from src.bs_common.response import ApiResponse, success_response
from src.bs_inventory.application.schemas import StockLevelResponse
from src.bs_inventory.application.valuation import InventoryValuationEngine

router = APIRouter(prefix="/inventory", tags=["inventory"])

_engine = InventoryValuationEngine()


@router.get("/stock/{waste_type_id}")
async def get_stock_level(
    waste_type_id: int,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    level = await _engine.stock_level(db, waste_type_id)
    resp = success_response(StockLevelResponse.from_domain(level).model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
