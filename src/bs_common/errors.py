"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Master data
  2xxx: Ledger (customer balances)
  3xxx: Inventory (waste stock)
  4xxx: Reporting
  9xxx: System

Every ledger failure is one of five kinds, each with its own base class so
callers can catch by kind: NotFoundError, InvalidArgumentError,
InsufficientBalanceError, InsufficientStockError, ConflictError.
"""

from decimal import Decimal


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- Kinds ---

class NotFoundError(AppError):
    def __init__(self, code: int, message: str) -> None:
        super().__init__(code, message, 404)


class InvalidArgumentError(AppError):
    def __init__(self, message: str, code: int = 9003) -> None:
        super().__init__(code, message, 422)


class ConflictError(AppError):
    retryable = True

    def __init__(self, message: str = "Concurrent update conflict, retry the request", code: int = 9004) -> None:
        super().__init__(code, message, 409)


# --- 1xxx: Master data ---

class CustomerNotFoundError(NotFoundError):
    def __init__(self, customer_id: int) -> None:
        super().__init__(1001, f"Customer not found: {customer_id}")


class OfficerNotFoundError(NotFoundError):
    def __init__(self, officer_id: int) -> None:
        super().__init__(1002, f"Officer not found: {officer_id}")


class WasteTypeNotFoundError(NotFoundError):
    def __init__(self, waste_type_id: int) -> None:
        super().__init__(1003, f"Waste type not found: {waste_type_id}")


class CollectorNotFoundError(NotFoundError):
    def __init__(self, collector_id: int) -> None:
        super().__init__(1004, f"Collector not found: {collector_id}")


class DuplicateCodeError(ConflictError):
    retryable = False

    def __init__(self, entity: str, code: str) -> None:
        super().__init__(f"{entity} with code '{code}' already exists", 1005)


class ReferencedByEventsError(ConflictError):
    retryable = False

    def __init__(self, entity: str, entity_id: int) -> None:
        super().__init__(
            f"Cannot delete {entity} {entity_id}: it is referenced by transaction history",
            1006,
        )


class InvalidPriceError(InvalidArgumentError):
    def __init__(self, buy_price: Decimal, sell_price: Decimal) -> None:
        super().__init__(
            f"Sell price must be greater than buy price (buy={buy_price}, sell={sell_price})",
            1007,
        )


# --- 2xxx: Ledger ---

class InsufficientBalanceError(AppError):
    def __init__(self, required: Decimal, available: Decimal) -> None:
        super().__init__(
            2001,
            f"Insufficient balance: required {required}, available {available}",
            422,
        )


class NonPositiveAmountError(InvalidArgumentError):
    def __init__(self, field: str, value: object) -> None:
        super().__init__(f"{field} must be a positive number, got {value}", 2002)


class AmountOutOfRangeError(InvalidArgumentError):
    def __init__(self, field: str, value: object, maximum: Decimal) -> None:
        super().__init__(f"{field} {value} exceeds the maximum of {maximum}", 2003)


# --- 3xxx: Inventory ---

class InsufficientStockError(AppError):
    def __init__(self, waste_type_id: int, requested: Decimal, available: Decimal) -> None:
        super().__init__(
            3001,
            f"Insufficient stock for waste type {waste_type_id}: "
            f"requested {requested} kg, available {available} kg",
            422,
        )


# --- 4xxx: Reporting ---

class DepositNotFoundError(NotFoundError):
    def __init__(self, deposit_id: int) -> None:
        super().__init__(4001, f"Deposit transaction not found: {deposit_id}")


class InvalidDateRangeError(InvalidArgumentError):
    def __init__(self, start: object, end: object) -> None:
        super().__init__(f"start_date {start} is after end_date {end}", 4002)


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)


class DataOutOfRangeError(InvalidArgumentError):
    """A value was rejected by the database as out of range (SQLSTATE class 22)."""

    def __init__(self, detail: str = "Value out of range for storage") -> None:
        super().__init__(detail, 9005)
