"""Domain Exceptions

Every error raised by the booking core carries an ``ErrorKind`` so callers
can branch on the category instead of the concrete class.
"""
from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    INVALID_DATE_RANGE = "INVALID_DATE_RANGE"
    VALIDATION = "VALIDATION"
    CONFLICT = "CONFLICT"
    STATE_CONFLICT = "STATE_CONFLICT"


class HotelBookingError(Exception):
    """Base class for all booking errors"""
    kind: ErrorKind = ErrorKind.VALIDATION

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(HotelBookingError):
    kind = ErrorKind.NOT_FOUND


class RoomNotFoundError(NotFoundError):
    def __init__(self, room_id: Any):
        super().__init__(f"Room not found with id: {room_id}")
        self.room_id = room_id


class ReservationNotFoundError(NotFoundError):
    def __init__(self, reservation_id: Any):
        super().__init__(f"Reservation not found with id: {reservation_id}")
        self.reservation_id = reservation_id


class InvalidDateRangeError(HotelBookingError):
    kind = ErrorKind.INVALID_DATE_RANGE


class BookingValidationError(HotelBookingError):
    kind = ErrorKind.VALIDATION


class ConflictError(HotelBookingError):
    kind = ErrorKind.CONFLICT


class RoomUnavailableError(ConflictError):
    def __init__(self, room_number: str):
        super().__init__(f"Room {room_number} is not available for the requested dates")
        self.room_number = room_number


class DuplicateRoomNumberError(ConflictError):
    def __init__(self, room_number: str):
        super().__init__(f"A room with number {room_number} already exists")
        self.room_number = room_number


class DuplicateReservationNumberError(ConflictError):
    def __init__(self, reservation_number: str):
        super().__init__(f"Reservation number {reservation_number} is already in use")
        self.reservation_number = reservation_number


class RoomInUseError(ConflictError):
    def __init__(self, room_number: str):
        super().__init__(f"Room {room_number} is referenced by reservations and cannot be deleted")
        self.room_number = room_number


class StateConflictError(HotelBookingError):
    kind = ErrorKind.STATE_CONFLICT


_ERROR_BY_KIND = {
    ErrorKind.NOT_FOUND: NotFoundError,
    ErrorKind.INVALID_DATE_RANGE: InvalidDateRangeError,
    ErrorKind.VALIDATION: BookingValidationError,
    ErrorKind.CONFLICT: ConflictError,
    ErrorKind.STATE_CONFLICT: StateConflictError,
}


def error_for(kind: ErrorKind, message: str) -> HotelBookingError:
    """Build the exception matching an error kind"""
    return _ERROR_BY_KIND[kind](message)
