"""Integration tests for master-data endpoints (requires migrated PG).

Uses the session-scoped client fixture from tests/integration/conftest.py.
"""

import pytest
from httpx import AsyncClient

from tests.integration.helpers import (
    create_collector,
    create_customer,
    create_waste_type,
    unique_code,
)

pytestmark = pytest.mark.asyncio(loop_scope="session")


class TestCustomers:
    async def test_create_get_update(self, client: AsyncClient) -> None:
        customer = await create_customer(client)
        assert customer["balance"] == "0.00"

        resp = await client.patch(
            f"/api/v1/customers/{customer['id']}", json={"institution": "SDN 5"}
        )
        assert resp.status_code == 200
        assert resp.json()["data"]["institution"] == "SDN 5"

        resp = await client.get(f"/api/v1/customers/{customer['id']}")
        assert resp.json()["data"]["code"] == customer["code"]

    async def test_duplicate_code(self, client: AsyncClient) -> None:
        customer = await create_customer(client)
        resp = await client.post("/api/v1/customers", json={
            "code": customer["code"],
            "name": "Other",
            "id_number": "1",
            "address": "Elsewhere",
        })
        assert resp.status_code == 409
        assert resp.json()["code"] == 1005

    async def test_delete_unreferenced(self, client: AsyncClient) -> None:
        customer = await create_customer(client)
        resp = await client.delete(f"/api/v1/customers/{customer['id']}")
        assert resp.status_code == 200

        resp = await client.get(f"/api/v1/customers/{customer['id']}")
        assert resp.status_code == 404
        assert resp.json()["code"] == 1001


class TestOfficers:
    async def test_crud(self, client: AsyncClient) -> None:
        resp = await client.post("/api/v1/officers", json={
            "code": unique_code("P"),
            "name": "Budi",
            "id_number": "3201",
            "address": "Jl. Kenanga",
        })
        assert resp.status_code == 201
        officer_id = resp.json()["data"]["id"]

        resp = await client.get("/api/v1/officers")
        assert officer_id in [o["id"] for o in resp.json()["data"]]

        resp = await client.delete(f"/api/v1/officers/{officer_id}")
        assert resp.status_code == 200


class TestWasteTypes:
    async def test_sell_must_exceed_buy(self, client: AsyncClient) -> None:
        resp = await client.post("/api/v1/waste-types", json={
            "code": unique_code("W"),
            "name": "Cardboard",
            "buy_price": "1500.00",
            "sell_price": "1500.00",
        })
        assert resp.status_code == 422
        assert resp.json()["code"] == 1007

    async def test_update_violating_margin_leaves_prices(self, client: AsyncClient) -> None:
        waste_type = await create_waste_type(client)

        resp = await client.patch(
            f"/api/v1/waste-types/{waste_type['id']}", json={"buy_price": "3000.00"}
        )
        assert resp.status_code == 422

        resp = await client.get(f"/api/v1/waste-types/{waste_type['id']}")
        assert resp.json()["data"]["buy_price"] == "2000.00"

    async def test_update_both_prices(self, client: AsyncClient) -> None:
        waste_type = await create_waste_type(client)

        resp = await client.patch(
            f"/api/v1/waste-types/{waste_type['id']}",
            json={"buy_price": "3000.00", "sell_price": "3500.00"},
        )
        assert resp.status_code == 200
        assert resp.json()["data"]["sell_price"] == "3500.00"


class TestCollectors:
    async def test_missing_collector(self, client: AsyncClient) -> None:
        resp = await client.get("/api/v1/collectors/999999999")
        assert resp.status_code == 404
        assert resp.json()["code"] == 1004

    async def test_create_and_list(self, client: AsyncClient) -> None:
        collector = await create_collector(client)
        resp = await client.get("/api/v1/collectors")
        assert collector["id"] in [c["id"] for c in resp.json()["data"]]
