"""Availability rules for booking a room over a date range"""
from datetime import date
from typing import Iterable, List, Optional
from uuid import UUID

from domain.entities import Reservation, Room
from domain.exceptions import BookingValidationError, InvalidDateRangeError
from domain.value_objects import DateRange

MAX_STAY_NIGHTS = 30


def validate_date_range(check_in: date, check_out: date, today: date) -> DateRange:
    """Reject past check-ins and empty or inverted ranges"""
    if check_in < today:
        raise InvalidDateRangeError("Check-in date cannot be in the past")
    if check_in >= check_out:
        raise InvalidDateRangeError("Check-in date must be before check-out date")
    return DateRange(check_in=check_in, check_out=check_out)


def validate_stay_length(date_range: DateRange, max_nights: int = MAX_STAY_NIGHTS) -> None:
    if date_range.nights() > max_nights:
        raise BookingValidationError(f"Maximum stay is {max_nights} nights")


def validate_capacity(room: Room, number_of_guests: int) -> None:
    if number_of_guests < 1:
        raise BookingValidationError("At least 1 guest is required")
    if number_of_guests > room.capacity:
        raise BookingValidationError(
            f"Room {room.room_number} holds {room.capacity} guests, {number_of_guests} requested"
        )


def find_blocking(
    reservations: Iterable[Reservation],
    room_id: UUID,
    date_range: DateRange,
    excluding_reservation_id: Optional[UUID] = None
) -> List[Reservation]:
    """Non-terminal reservations of ``room_id`` sharing a night with ``date_range``"""
    return [
        r for r in reservations
        if r.reservation_id != excluding_reservation_id and r.blocks(room_id, date_range)
    ]
