"""Helpers that create master data through the HTTP API."""

import uuid
from typing import Any

from httpx import AsyncClient


def unique_code(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:8]}"


async def create_customer(client: AsyncClient) -> dict[str, Any]:
    resp = await client.post("/api/v1/customers", json={
        "code": unique_code("C"),
        "name": "Siti Aminah",
        "id_number": uuid.uuid4().hex[:16],
        "address": "Jl. Melati 1, Bandung",
    })
    assert resp.status_code == 201, resp.text
    return dict(resp.json()["data"])


async def create_waste_type(
    client: AsyncClient, buy_price: str = "2000.00", sell_price: str = "2500.00"
) -> dict[str, Any]:
    resp = await client.post("/api/v1/waste-types", json={
        "code": unique_code("W"),
        "name": f"Plastic {uuid.uuid4().hex[:4]}",
        "buy_price": buy_price,
        "sell_price": sell_price,
    })
    assert resp.status_code == 201, resp.text
    return dict(resp.json()["data"])


async def create_collector(client: AsyncClient) -> dict[str, Any]:
    resp = await client.post("/api/v1/collectors", json={
        "code": unique_code("K"),
        "name": "CV Daur Ulang",
        "address": "Kawasan Industri Blok A",
    })
    assert resp.status_code == 201, resp.text
    return dict(resp.json()["data"])
