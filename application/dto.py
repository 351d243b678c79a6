"""Application DTOs - what the use cases hand back to callers"""
from pydantic import BaseModel
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID
from typing import List, Optional

from domain.entities import Guest, Reservation, Room
from domain.enums import ReservationStatus, RoomType
from domain.value_objects import RefundQuote


class RoomSummary(BaseModel):
    room_id: UUID
    room_number: str
    room_type: RoomType
    capacity: int
    price_per_night: Decimal
    is_available: bool

    @staticmethod
    def from_entity(room: Room) -> "RoomSummary":
        return RoomSummary(
            room_id=room.room_id,
            room_number=room.room_number,
            room_type=room.room_type,
            capacity=room.capacity,
            price_per_night=room.price_per_night,
            is_available=room.is_available
        )


class GuestSummary(BaseModel):
    guest_id: UUID
    first_name: str
    last_name: str
    full_name: str
    document_number: str
    email: str
    phone: str
    created_at: datetime

    @staticmethod
    def from_entity(guest: Guest) -> "GuestSummary":
        return GuestSummary(
            guest_id=guest.guest_id,
            first_name=guest.first_name,
            last_name=guest.last_name,
            full_name=guest.full_name,
            document_number=guest.document_number,
            email=guest.email,
            phone=guest.phone,
            created_at=guest.created_at
        )


class ReservationSummary(BaseModel):
    reservation_id: UUID
    reservation_number: str
    guest: GuestSummary
    room: RoomSummary
    check_in_date: date
    check_out_date: date
    number_of_guests: int
    number_of_nights: int
    total_amount: Decimal
    status: ReservationStatus
    created_at: datetime
    check_in_time: Optional[datetime] = None
    check_out_time: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    cancellation_reason: Optional[str] = None

    @staticmethod
    def from_entities(reservation: Reservation, guest: Guest, room: Room) -> "ReservationSummary":
        return ReservationSummary(
            reservation_id=reservation.reservation_id,
            reservation_number=reservation.reservation_number,
            guest=GuestSummary.from_entity(guest),
            room=RoomSummary.from_entity(room),
            check_in_date=reservation.check_in_date,
            check_out_date=reservation.check_out_date,
            number_of_guests=reservation.number_of_guests,
            number_of_nights=reservation.get_nights(),
            total_amount=reservation.total_amount,
            status=reservation.status,
            created_at=reservation.created_at,
            check_in_time=reservation.check_in_time,
            check_out_time=reservation.check_out_time,
            cancelled_at=reservation.cancelled_at,
            cancellation_reason=reservation.cancellation_reason
        )


class CancellationSummary(BaseModel):
    reservation_number: str
    cancellation_date: datetime
    total_amount: Decimal
    refund_amount: Decimal
    penalty_amount: Decimal
    refund_percentage: int

    @staticmethod
    def from_quote(reservation: Reservation, quote: RefundQuote) -> "CancellationSummary":
        return CancellationSummary(
            reservation_number=reservation.reservation_number,
            cancellation_date=reservation.cancelled_at,
            total_amount=quote.total_amount,
            refund_amount=quote.refund_amount,
            penalty_amount=quote.penalty_amount,
            refund_percentage=quote.refund_percentage
        )


class TodayReservations(BaseModel):
    check_ins: List[ReservationSummary]
    check_outs: List[ReservationSummary]
