"""ApiResponse: the envelope around every bank-sampah endpoint.

`code` is 0 on success or the AppError code (1xxx master data, 2xxx ledger,
3xxx inventory, 4xxx reporting, 9xxx system) on failure, in which case `data`
is null. `request_id` is overwritten with the id the request-log middleware
stamped on request.state, so a client can quote it when reporting a problem.

Routers dump their payloads with model_dump(mode="json") before wrapping, so
rupiah and kg values arrive as decimal strings ("71000.00", "10.500").
"""

import uuid
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field


class ApiResponse(BaseModel):
    code: int = 0
    message: str = "success"
    data: Any = None
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    request_id: str = Field(default_factory=lambda: f"req_{uuid.uuid4().hex[:12]}")


def success_response(data: Any = None) -> ApiResponse:
    return ApiResponse(code=0, message="success", data=data)


def error_response(code: int, message: str) -> ApiResponse:
    return ApiResponse(code=code, message=message, data=None)
