"""Integration tests for the ledger: deposits, withdrawals, sales and reports.

Each test builds its own customer / waste type / collector so tests stay
independent of data left by earlier runs.
"""

import asyncio
from typing import Any

import pytest
from httpx import AsyncClient

from tests.integration.helpers import create_collector, create_customer, create_waste_type

pytestmark = pytest.mark.asyncio(loop_scope="session")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _deposit(client: AsyncClient, customer_id: int, waste_type_id: int, weight: str):
    return await client.post("/api/v1/transactions/deposits", json={
        "customer_id": customer_id,
        "waste_type_id": waste_type_id,
        "weight": weight,
    })


async def _sell(client: AsyncClient, collector_id: int, waste_type_id: int, weight: str):
    return await client.post("/api/v1/transactions/sales", json={
        "collector_id": collector_id,
        "waste_type_id": waste_type_id,
        "weight": weight,
    })


async def _balance(client: AsyncClient, customer_id: int) -> str:
    resp = await client.get(f"/api/v1/customers/{customer_id}/balance")
    assert resp.status_code == 200
    return str(resp.json()["data"]["balance"])


async def _stock(client: AsyncClient, waste_type_id: int) -> dict[str, Any]:
    resp = await client.get(f"/api/v1/inventory/stock/{waste_type_id}")
    assert resp.status_code == 200
    return dict(resp.json()["data"])


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


class TestDeposits:
    async def test_deposit_credits_buy_price(self, client: AsyncClient) -> None:
        customer = await create_customer(client)
        waste_type = await create_waste_type(client)

        resp = await _deposit(client, customer["id"], waste_type["id"], "10.5")

        assert resp.status_code == 201
        data = resp.json()["data"]
        assert data["weight"] == "10.500"
        assert data["amount"] == "21000.00"
        assert data["balance_after"] == "21000.00"
        assert await _balance(client, customer["id"]) == "21000.00"

    async def test_price_change_does_not_touch_past_events(self, client: AsyncClient) -> None:
        customer = await create_customer(client)
        waste_type = await create_waste_type(client)
        first = (await _deposit(client, customer["id"], waste_type["id"], "1")).json()["data"]

        await client.patch(
            f"/api/v1/waste-types/{waste_type['id']}",
            json={"buy_price": "2200.00", "sell_price": "2700.00"},
        )
        second = (await _deposit(client, customer["id"], waste_type["id"], "1")).json()["data"]

        assert first["unit_price"] == "2000.00"
        assert second["unit_price"] == "2200.00"
        resp = await client.get(f"/api/v1/transactions/deposits/{first['id']}/receipt")
        assert resp.json()["data"]["deposit"]["unit_price"] == "2000.00"

    async def test_unknown_waste_type(self, client: AsyncClient) -> None:
        customer = await create_customer(client)
        resp = await _deposit(client, customer["id"], 999999999, "1")
        assert resp.status_code == 404
        assert resp.json()["code"] == 1003
        assert await _balance(client, customer["id"]) == "0.00"


class TestWithdrawals:
    async def test_over_balance_is_rejected_without_mutation(self, client: AsyncClient) -> None:
        customer = await create_customer(client)
        waste_type = await create_waste_type(client)
        await _deposit(client, customer["id"], waste_type["id"], "25")  # 50000.00

        resp = await client.post("/api/v1/transactions/withdrawals", json={
            "customer_id": customer["id"], "amount": "60000",
        })

        assert resp.status_code == 422
        assert resp.json()["code"] == 2001
        assert await _balance(client, customer["id"]) == "50000.00"

    async def test_concurrent_withdrawals_never_overdraw(self, client: AsyncClient) -> None:
        customer = await create_customer(client)
        waste_type = await create_waste_type(client)
        await _deposit(client, customer["id"], waste_type["id"], "50")  # 100000.00

        responses = await asyncio.gather(*(
            client.post("/api/v1/transactions/withdrawals", json={
                "customer_id": customer["id"], "amount": "30000",
            })
            for _ in range(5)
        ))

        codes = sorted(r.status_code for r in responses)
        assert codes == [201, 201, 201, 422, 422]
        assert await _balance(client, customer["id"]) == "10000.00"


class TestSales:
    async def test_stock_scenario(self, client: AsyncClient) -> None:
        customer = await create_customer(client)
        waste_type = await create_waste_type(client)
        collector = await create_collector(client)
        await _deposit(client, customer["id"], waste_type["id"], "10.500")
        await _deposit(client, customer["id"], waste_type["id"], "15.250")

        assert (await _sell(client, collector["id"], waste_type["id"], "20")).status_code == 201
        assert (await _stock(client, waste_type["id"]))["available"] == "5.750"

        resp = await _sell(client, collector["id"], waste_type["id"], "6.000")
        assert resp.status_code == 422
        assert resp.json()["code"] == 3001

        resp = await _sell(client, collector["id"], waste_type["id"], "5.750")
        assert resp.status_code == 201
        assert resp.json()["data"]["amount"] == "14375.00"
        assert (await _stock(client, waste_type["id"]))["available"] == "0.000"

    async def test_concurrent_sales_never_oversell(self, client: AsyncClient) -> None:
        customer = await create_customer(client)
        waste_type = await create_waste_type(client)
        collector = await create_collector(client)
        await _deposit(client, customer["id"], waste_type["id"], "5.750")

        responses = await asyncio.gather(*(
            _sell(client, collector["id"], waste_type["id"], "2") for _ in range(4)
        ))

        assert sorted(r.status_code for r in responses) == [201, 201, 422, 422]
        assert (await _stock(client, waste_type["id"]))["available"] == "1.750"


class TestReferentialGuard:
    async def test_cannot_delete_referenced_records(self, client: AsyncClient) -> None:
        customer = await create_customer(client)
        waste_type = await create_waste_type(client)
        collector = await create_collector(client)
        await _deposit(client, customer["id"], waste_type["id"], "2")
        await _sell(client, collector["id"], waste_type["id"], "1")

        for path in (
            f"/api/v1/customers/{customer['id']}",
            f"/api/v1/waste-types/{waste_type['id']}",
            f"/api/v1/collectors/{collector['id']}",
        ):
            resp = await client.delete(path)
            assert resp.status_code == 409, path
            assert resp.json()["code"] == 1006


class TestReports:
    async def test_statement_and_filtered_ledger(self, client: AsyncClient) -> None:
        customer = await create_customer(client)
        waste_type = await create_waste_type(client)
        collector = await create_collector(client)
        await _deposit(client, customer["id"], waste_type["id"], "3")
        await client.post("/api/v1/transactions/withdrawals", json={
            "customer_id": customer["id"], "amount": "1000",
        })
        await _sell(client, collector["id"], waste_type["id"], "1")

        resp = await client.get(f"/api/v1/reports/customers/{customer['id']}/statement")
        statement = resp.json()["data"]
        assert len(statement["deposits"]) == 1
        assert len(statement["withdrawals"]) == 1
        assert statement["balance"] == "5000.00"

        resp = await client.get("/api/v1/reports/ledger", params={"customer_id": customer["id"]})
        rows = resp.json()["data"]
        assert [r["kind"] for r in rows] == ["WITHDRAWAL", "DEPOSIT"]

    async def test_inverted_range(self, client: AsyncClient) -> None:
        resp = await client.get(
            "/api/v1/reports/ledger",
            params={"start_date": "2024-02-01", "end_date": "2024-01-01"},
        )
        assert resp.status_code == 422
        assert resp.json()["code"] == 4002

    async def test_dashboard_and_stock_by_type(self, client: AsyncClient) -> None:
        customer = await create_customer(client)
        waste_type = await create_waste_type(client)
        await _deposit(client, customer["id"], waste_type["id"], "4.250")

        resp = await client.get("/api/v1/reports/dashboard")
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert int(data["total_customers"]) >= 1
        assert "profit_display" in data

        resp = await client.get("/api/v1/inventory/stock")
        by_id = {r["waste_type_id"]: r for r in resp.json()["data"]}
        assert by_id[waste_type["id"]]["available"] == "4.250"
        assert by_id[waste_type["id"]]["total_sold"] == "0.000"

    async def test_invariants_hold(self, client: AsyncClient) -> None:
        resp = await client.get("/api/v1/reports/invariants")
        assert resp.json()["data"] == {"ok": True, "violations": []}

    async def test_missing_receipt(self, client: AsyncClient) -> None:
        resp = await client.get("/api/v1/transactions/deposits/999999999/receipt")
        assert resp.status_code == 404
        assert resp.json()["code"] == 4001
