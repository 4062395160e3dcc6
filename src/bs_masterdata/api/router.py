"""Master-data REST API: customers, officers, waste types, collectors.

Each entity gets the same five endpoints (create, list, get, patch, delete).
Writes run inside `async with db.begin()` so a failed check rolls back
everything the request touched.
"""

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.bs_common.database import get_db_session
from src.bs_common.response import ApiResponse, success_response
from src.bs_masterdata.application.schemas import (
    CollectorCreate,
    CollectorResponse,
    CollectorUpdate,
    CustomerCreate,
    CustomerResponse,
    CustomerUpdate,
    OfficerCreate,
    OfficerResponse,
    OfficerUpdate,
    WasteTypeCreate,
    WasteTypeResponse,
    WasteTypeUpdate,
)
from src.bs_masterdata.application.service import MasterDataService

router = APIRouter(tags=["master-data"])
_service = MasterDataService()


def _respond(request: Request, data: object, message: str | None = None) -> ApiResponse:
    resp = success_response(data)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    if message:
        resp.message = message
    return resp


# ---------------------------------------------------------------------------
# Customers
# ---------------------------------------------------------------------------


@router.post("/customers", status_code=status.HTTP_201_CREATED, response_model=ApiResponse)
async def create_customer(
    request: Request,
    body: CustomerCreate,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse:
    async with db.begin():
        customer = await _service.create_customer(body, db)
    data = CustomerResponse.model_validate(customer).model_dump(mode="json")
    return _respond(request, data, "Customer created")


@router.get("/customers", response_model=ApiResponse)
async def list_customers(
    request: Request, db: AsyncSession = Depends(get_db_session)
) -> ApiResponse:
    customers = await _service.list_customers(db)
    data = [CustomerResponse.model_validate(c).model_dump(mode="json") for c in customers]
    return _respond(request, data)


@router.get("/customers/{customer_id}", response_model=ApiResponse)
async def get_customer(
    request: Request, customer_id: int, db: AsyncSession = Depends(get_db_session)
) -> ApiResponse:
    customer = await _service.get_customer(customer_id, db)
    return _respond(request, CustomerResponse.model_validate(customer).model_dump(mode="json"))


@router.patch("/customers/{customer_id}", response_model=ApiResponse)
async def update_customer(
    request: Request,
    customer_id: int,
    body: CustomerUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse:
    async with db.begin():
        customer = await _service.update_customer(customer_id, body, db)
    return _respond(request, CustomerResponse.model_validate(customer).model_dump(mode="json"))


@router.delete("/customers/{customer_id}", response_model=ApiResponse)
async def delete_customer(
    request: Request, customer_id: int, db: AsyncSession = Depends(get_db_session)
) -> ApiResponse:
    async with db.begin():
        await _service.delete_customer(customer_id, db)
    return _respond(request, None, "Customer deleted")


# ---------------------------------------------------------------------------
# Officers
# ---------------------------------------------------------------------------


@router.post("/officers", status_code=status.HTTP_201_CREATED, response_model=ApiResponse)
async def create_officer(
    request: Request,
    body: OfficerCreate,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse:
    async with db.begin():
        officer = await _service.create_officer(body, db)
    data = OfficerResponse.model_validate(officer).model_dump(mode="json")
    return _respond(request, data, "Officer created")


@router.get("/officers", response_model=ApiResponse)
async def list_officers(
    request: Request, db: AsyncSession = Depends(get_db_session)
) -> ApiResponse:
    officers = await _service.list_officers(db)
    data = [OfficerResponse.model_validate(o).model_dump(mode="json") for o in officers]
    return _respond(request, data)


@router.get("/officers/{officer_id}", response_model=ApiResponse)
async def get_officer(
    request: Request, officer_id: int, db: AsyncSession = Depends(get_db_session)
) -> ApiResponse:
    officer = await _service.get_officer(officer_id, db)
    return _respond(request, OfficerResponse.model_validate(officer).model_dump(mode="json"))


@router.patch("/officers/{officer_id}", response_model=ApiResponse)
async def update_officer(
    request: Request,
    officer_id: int,
    body: OfficerUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse:
    async with db.begin():
        officer = await _service.update_officer(officer_id, body, db)
    return _respond(request, OfficerResponse.model_validate(officer).model_dump(mode="json"))


@router.delete("/officers/{officer_id}", response_model=ApiResponse)
async def delete_officer(
    request: Request, officer_id: int, db: AsyncSession = Depends(get_db_session)
) -> ApiResponse:
    async with db.begin():
        await _service.delete_officer(officer_id, db)
    return _respond(request, None, "Officer deleted")


# ---------------------------------------------------------------------------
# Waste types
# ---------------------------------------------------------------------------


@router.post("/waste-types", status_code=status.HTTP_201_CREATED, response_model=ApiResponse)
async def create_waste_type(
    request: Request,
    body: WasteTypeCreate,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse:
    async with db.begin():
        waste_type = await _service.create_waste_type(body, db)
    data = WasteTypeResponse.model_validate(waste_type).model_dump(mode="json")
    return _respond(request, data, "Waste type created")


@router.get("/waste-types", response_model=ApiResponse)
async def list_waste_types(
    request: Request, db: AsyncSession = Depends(get_db_session)
) -> ApiResponse:
    waste_types = await _service.list_waste_types(db)
    data = [WasteTypeResponse.model_validate(w).model_dump(mode="json") for w in waste_types]
    return _respond(request, data)


@router.get("/waste-types/{waste_type_id}", response_model=ApiResponse)
async def get_waste_type(
    request: Request, waste_type_id: int, db: AsyncSession = Depends(get_db_session)
) -> ApiResponse:
    waste_type = await _service.get_waste_type(waste_type_id, db)
    return _respond(request, WasteTypeResponse.model_validate(waste_type).model_dump(mode="json"))


@router.patch("/waste-types/{waste_type_id}", response_model=ApiResponse)
async def update_waste_type(
    request: Request,
    waste_type_id: int,
    body: WasteTypeUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse:
    async with db.begin():
        waste_type = await _service.update_waste_type(waste_type_id, body, db)
    return _respond(request, WasteTypeResponse.model_validate(waste_type).model_dump(mode="json"))


@router.delete("/waste-types/{waste_type_id}", response_model=ApiResponse)
async def delete_waste_type(
    request: Request, waste_type_id: int, db: AsyncSession = Depends(get_db_session)
) -> ApiResponse:
    async with db.begin():
        await _service.delete_waste_type(waste_type_id, db)
    return _respond(request, None, "Waste type deleted")


# ---------------------------------------------------------------------------
# Collectors
# ---------------------------------------------------------------------------


@router.post("/collectors", status_code=status.HTTP_201_CREATED, response_model=ApiResponse)
async def create_collector(
    request: Request,
    body: CollectorCreate,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse:
    async with db.begin():
        collector = await _service.create_collector(body, db)
    data = CollectorResponse.model_validate(collector).model_dump(mode="json")
    return _respond(request, data, "Collector created")


@router.get("/collectors", response_model=ApiResponse)
async def list_collectors(
    request: Request, db: AsyncSession = Depends(get_db_session)
) -> ApiResponse:
    collectors = await _service.list_collectors(db)
    data = [CollectorResponse.model_validate(c).model_dump(mode="json") for c in collectors]
    return _respond(request, data)


@router.get("/collectors/{collector_id}", response_model=ApiResponse)
async def get_collector(
    request: Request, collector_id: int, db: AsyncSession = Depends(get_db_session)
) -> ApiResponse:
    collector = await _service.get_collector(collector_id, db)
    return _respond(request, CollectorResponse.model_validate(collector).model_dump(mode="json"))


@router.patch("/collectors/{collector_id}", response_model=ApiResponse)
async def update_collector(
    request: Request,
    collector_id: int,
    body: CollectorUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse:
    async with db.begin():
        collector = await _service.update_collector(collector_id, body, db)
    return _respond(request, CollectorResponse.model_validate(collector).model_dump(mode="json"))


@router.delete("/collectors/{collector_id}", response_model=ApiResponse)
async def delete_collector(
    request: Request, collector_id: int, db: AsyncSession = Depends(get_db_session)
) -> ApiResponse:
    async with db.begin():
        await _service.delete_collector(collector_id, db)
    return _respond(request, None, "Collector deleted")
