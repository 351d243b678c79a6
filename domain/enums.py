"""Domain Enums"""
from enum import Enum


class ReservationStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    EXPIRED = "EXPIRED"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


# Statuses that still hold the room for their date range
NON_TERMINAL_STATUSES = frozenset({
    ReservationStatus.PENDING,
    ReservationStatus.CONFIRMED,
    ReservationStatus.ACTIVE,
})

TERMINAL_STATUSES = frozenset({
    ReservationStatus.COMPLETED,
    ReservationStatus.CANCELLED,
    ReservationStatus.EXPIRED,
})


class ReservationEvent(str, Enum):
    CONFIRM_PAYMENT = "CONFIRM_PAYMENT"
    CHECK_IN = "CHECK_IN"
    CHECK_OUT = "CHECK_OUT"
    CANCEL = "CANCEL"
    EXPIRE = "EXPIRE"


class RoomType(str, Enum):
    STANDARD = "STANDARD"
    SUPERIOR = "SUPERIOR"
    SUITE = "SUITE"


class PaymentMethod(str, Enum):
    CASH = "CASH"
    CARD = "CARD"
    TRANSFER = "TRANSFER"

    @property
    def requires_reference(self) -> bool:
        return self in (PaymentMethod.CARD, PaymentMethod.TRANSFER)
