"""Pydantic request/response schemas for bs_masterdata.

All responses are wrapped in ApiResponse at the router layer.
Update requests are partial: only fields present in the body are applied.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from src.bs_common.decimals import MAX_PRICE

# ---------------------------------------------------------------------------
# Customers
# ---------------------------------------------------------------------------


class CustomerCreate(BaseModel):
    code: str = Field(..., min_length=1, max_length=32)
    name: str = Field(..., min_length=1, max_length=255)
    id_number: str = Field(..., min_length=1, max_length=64)
    address: str = Field(..., min_length=1)
    institution: str | None = Field(None, max_length=255)


class CustomerUpdate(BaseModel):
    code: str | None = Field(None, min_length=1, max_length=32)
    name: str | None = Field(None, min_length=1, max_length=255)
    id_number: str | None = Field(None, min_length=1, max_length=64)
    address: str | None = Field(None, min_length=1)
    institution: str | None = Field(None, max_length=255)


class CustomerResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    code: str
    name: str
    id_number: str
    address: str
    institution: str | None
    balance: Decimal
    created_at: datetime


# ---------------------------------------------------------------------------
# Officers
# ---------------------------------------------------------------------------


class OfficerCreate(BaseModel):
    code: str = Field(..., min_length=1, max_length=32)
    name: str = Field(..., min_length=1, max_length=255)
    id_number: str = Field(..., min_length=1, max_length=64)
    address: str = Field(..., min_length=1)
    institution: str | None = Field(None, max_length=255)


class OfficerUpdate(BaseModel):
    code: str | None = Field(None, min_length=1, max_length=32)
    name: str | None = Field(None, min_length=1, max_length=255)
    id_number: str | None = Field(None, min_length=1, max_length=64)
    address: str | None = Field(None, min_length=1)
    institution: str | None = Field(None, max_length=255)


class OfficerResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    code: str
    name: str
    id_number: str
    address: str
    institution: str | None
    created_at: datetime


# ---------------------------------------------------------------------------
# Waste types
# ---------------------------------------------------------------------------


class WasteTypeCreate(BaseModel):
    code: str = Field(..., min_length=1, max_length=32)
    name: str = Field(..., min_length=1, max_length=255)
    buy_price: Decimal = Field(..., gt=0, le=MAX_PRICE, description="Paid to customers per kg")
    sell_price: Decimal = Field(..., gt=0, le=MAX_PRICE, description="Charged to collectors per kg")


class WasteTypeUpdate(BaseModel):
    code: str | None = Field(None, min_length=1, max_length=32)
    name: str | None = Field(None, min_length=1, max_length=255)
    buy_price: Decimal | None = Field(None, gt=0, le=MAX_PRICE)
    sell_price: Decimal | None = Field(None, gt=0, le=MAX_PRICE)


class WasteTypeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    code: str
    name: str
    buy_price: Decimal
    sell_price: Decimal
    created_at: datetime


# ---------------------------------------------------------------------------
# Collectors
# ---------------------------------------------------------------------------


class CollectorCreate(BaseModel):
    code: str = Field(..., min_length=1, max_length=32)
    name: str = Field(..., min_length=1, max_length=255)
    address: str = Field(..., min_length=1)


class CollectorUpdate(BaseModel):
    code: str | None = Field(None, min_length=1, max_length=32)
    name: str | None = Field(None, min_length=1, max_length=255)
    address: str | None = Field(None, min_length=1)


class CollectorResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    code: str
    name: str
    address: str
    created_at: datetime
