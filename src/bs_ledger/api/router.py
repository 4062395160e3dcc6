"""Transaction write endpoints and balance lookup.

POST /transactions/deposits      customer deposits waste
POST /transactions/withdrawals   customer cashes out balance
POST /transactions/sales         operator sells stock to a collector
GET  /customers/{customer_id}/balance
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.bs_common.database import get_db_session
from src.bs_common.errors import CustomerNotFoundError
from src.bs_common.response import ApiResponse, success_response
from src.bs_ledger.application.recorder import TransactionRecorder
from src.bs_ledger.application.schemas import (
    BalanceResponse,
    DepositRequest,
    DepositResponse,
    SaleRequest,
    SaleResponse,
    WithdrawalRequest,
    WithdrawalResponse,
)
from src.bs_ledger.infrastructure.persistence import LedgerRepository

router = APIRouter(tags=["transactions"])

_recorder = TransactionRecorder()
_ledger = LedgerRepository()


@router.post("/transactions/deposits", status_code=status.HTTP_201_CREATED)
async def record_deposit(
    body: DepositRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    event = await _recorder.record_deposit(
        db, body.customer_id, body.waste_type_id, body.weight
    )
    resp = success_response(DepositResponse.from_domain(event).model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/transactions/withdrawals", status_code=status.HTTP_201_CREATED)
async def record_withdrawal(
    body: WithdrawalRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    event = await _recorder.record_withdrawal(db, body.customer_id, body.amount)
    resp = success_response(WithdrawalResponse.from_domain(event).model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/transactions/sales", status_code=status.HTTP_201_CREATED)
async def record_sale(
    body: SaleRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    event = await _recorder.record_sale(
        db, body.collector_id, body.waste_type_id, body.weight
    )
    resp = success_response(SaleResponse.from_domain(event).model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/customers/{customer_id}/balance")
async def get_balance(
    customer_id: int,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    account = await _ledger.get_balance(db, customer_id)
    if account is None:
        raise CustomerNotFoundError(customer_id)
    resp = success_response(BalanceResponse.from_domain(account).model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
