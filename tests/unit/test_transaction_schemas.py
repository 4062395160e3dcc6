"""Tests for request validation and JSON rendering of transaction schemas."""

from datetime import UTC, datetime
from decimal import Decimal

import pytest
from pydantic import ValidationError

from src.bs_ledger.application.schemas import (
    BalanceResponse,
    DepositRequest,
    DepositResponse,
    WithdrawalRequest,
)
from src.bs_ledger.domain.models import CustomerBalance, DepositEvent


class TestRequests:
    def test_weight_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            DepositRequest(customer_id=1, waste_type_id=1, weight=Decimal("0"))

    def test_amount_accepts_string(self) -> None:
        req = WithdrawalRequest(customer_id=1, amount="30000.50")
        assert req.amount == Decimal("30000.50")

    def test_weight_bounded_by_column_precision(self) -> None:
        DepositRequest(customer_id=1, waste_type_id=1, weight=Decimal("9999999.999"))
        with pytest.raises(ValidationError):
            DepositRequest(customer_id=1, waste_type_id=1, weight=Decimal("10000000"))

    def test_amount_bounded_by_column_precision(self) -> None:
        with pytest.raises(ValidationError):
            WithdrawalRequest(customer_id=1, amount="10000000000000")


class TestResponses:
    def test_deposit_decimals_render_as_strings(self) -> None:
        event = DepositEvent(
            id=1,
            customer_id=1,
            waste_type_id=2,
            weight=Decimal("10.500"),
            unit_price=Decimal("2000.00"),
            amount=Decimal("21000.00"),
            balance_after=Decimal("71000.00"),
            occurred_at=datetime(2024, 5, 1, tzinfo=UTC),
        )

        data = DepositResponse.from_domain(event).model_dump(mode="json")

        assert data["weight"] == "10.500"
        assert data["amount"] == "21000.00"
        assert data["balance_after_display"] == "Rp71.000,00"
        assert data["weight_display"] == "10.500 kg"
        assert data["occurred_at"].startswith("2024-05-01")

    def test_balance(self) -> None:
        data = BalanceResponse.from_domain(CustomerBalance(1, Decimal("0.00"))).model_dump(
            mode="json"
        )
        assert data == {"customer_id": 1, "balance": "0.00", "balance_display": "Rp0,00"}
