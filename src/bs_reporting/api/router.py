"""bs_reporting REST API: read-only reports and event listings.

GET /reports/dashboard
GET /reports/ledger?start_date=&end_date=&customer_id=
GET /reports/customers/{customer_id}/statement
GET /reports/invariants
GET /inventory/stock
GET /transactions/deposits | /withdrawals | /sales
GET /transactions/deposits/{deposit_id}/receipt
"""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.bs_common.database import get_db_session
from src.bs_common.response import ApiResponse, success_response
from src.bs_reporting.application.schemas import (
    CustomerStatementResponse,
    DashboardResponse,
    DepositLineResponse,
    DepositReceiptResponse,
    LedgerEntryResponse,
    SaleLineResponse,
    StockByTypeResponse,
    WithdrawalLineResponse,
)
from src.bs_reporting.application.service import ReportingService

router = APIRouter(tags=["reports"])

_service = ReportingService()


def _respond(request: Request, data: object) -> ApiResponse:
    resp = success_response(data)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/reports/dashboard")
async def get_dashboard(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    stats = await _service.dashboard(db)
    return _respond(request, DashboardResponse.from_domain(stats).model_dump(mode="json"))


@router.get("/reports/ledger")
async def get_ledger(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    start_date: date | None = Query(None, description="First day, inclusive"),
    end_date: date | None = Query(None, description="Last day, inclusive"),
    customer_id: int | None = Query(None, description="Only this customer's deposits and withdrawals"),
) -> ApiResponse:
    entries = await _service.ledger(db, start_date, end_date, customer_id)
    data = [LedgerEntryResponse.from_domain(e).model_dump(mode="json") for e in entries]
    return _respond(request, data)


@router.get("/reports/customers/{customer_id}/statement")
async def get_customer_statement(
    customer_id: int,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    statement = await _service.customer_statement(db, customer_id)
    return _respond(
        request, CustomerStatementResponse.from_domain(statement).model_dump(mode="json")
    )


@router.get("/reports/invariants")
async def verify_invariants(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    return _respond(request, await _service.verify_invariants(db))


@router.get("/inventory/stock")
async def list_stock_by_type(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    levels = await _service.stock_by_type(db)
    data = [StockByTypeResponse.from_domain(lv).model_dump(mode="json") for lv in levels]
    return _respond(request, data)


@router.get("/transactions/deposits")
async def list_deposits(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    lines = await _service.list_deposits(db)
    return _respond(request, [DepositLineResponse.from_domain(x).model_dump(mode="json") for x in lines])


@router.get("/transactions/withdrawals")
async def list_withdrawals(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    lines = await _service.list_withdrawals(db)
    return _respond(
        request, [WithdrawalLineResponse.from_domain(x).model_dump(mode="json") for x in lines]
    )


@router.get("/transactions/sales")
async def list_sales(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    lines = await _service.list_sales(db)
    return _respond(request, [SaleLineResponse.from_domain(x).model_dump(mode="json") for x in lines])


@router.get("/transactions/deposits/{deposit_id}/receipt")
async def get_deposit_receipt(
    deposit_id: int,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    receipt = await _service.deposit_receipt(db, deposit_id)
    return _respond(request, DepositReceiptResponse.from_domain(receipt).model_dump(mode="json"))
