"""Global enums: must match DB values exactly."""

from enum import Enum


class TransactionKind(str, Enum):
    DEPOSIT = "DEPOSIT"
    WITHDRAWAL = "WITHDRAWAL"
    SALE = "SALE"


class EventReference(str, Enum):
    """Master-data entities that transaction events point at."""

    CUSTOMER = "CUSTOMER"
    WASTE_TYPE = "WASTE_TYPE"
    COLLECTOR = "COLLECTOR"
