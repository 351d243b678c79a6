"""Domain Entities - Aggregates

Aggregates reference each other by identifier only; a reservation holds
``guest_id`` and ``room_id`` and the services resolve them through the
repositories at the start of each use case.
"""
from pydantic import BaseModel, Field
from uuid import UUID, uuid4
from datetime import datetime, date
from typing import Optional
from decimal import Decimal

from domain.enums import ReservationStatus, ReservationEvent, RoomType, PaymentMethod, NON_TERMINAL_STATUSES
from domain.exceptions import BookingValidationError, error_for
from domain.state_machine import Effect, Rejection, Transition, TransitionContext, transition
from domain.value_objects import CancellationPolicy, DateRange, GuestInfo, RefundQuote


class Room(BaseModel):
    """Room Aggregate Root Entity"""

    room_id: UUID = Field(default_factory=uuid4)
    room_number: str = Field(min_length=1)
    room_type: RoomType
    capacity: int = Field(ge=1, le=10)
    price_per_night: Decimal = Field(gt=0)
    is_available: bool = True

    class Config:
        from_attributes = True

    def occupy(self) -> None:
        self.is_available = False

    def release(self) -> None:
        self.is_available = True


class Guest(BaseModel):
    """Guest Aggregate Root Entity, keyed naturally by document number"""

    guest_id: UUID = Field(default_factory=uuid4)
    first_name: str
    last_name: str
    document_number: str
    email: str
    phone: str
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @staticmethod
    def register(info: GuestInfo, now: datetime) -> "Guest":
        return Guest(
            first_name=info.first_name,
            last_name=info.last_name,
            document_number=info.document_number,
            email=info.email,
            phone=info.phone,
            created_at=now
        )

    def update_contact(self, info: GuestInfo, now: datetime) -> None:
        """Refresh name, email and phone; the document number never changes"""
        if info.document_number != self.document_number:
            raise BookingValidationError("Guest document number cannot be changed")

        self.first_name = info.first_name
        self.last_name = info.last_name
        self.email = info.email
        self.phone = info.phone
        self.updated_at = now


class Reservation(BaseModel):
    """Reservation Aggregate Root Entity"""

    # Identity
    reservation_id: UUID = Field(default_factory=uuid4)
    reservation_number: str

    # References to other aggregates
    guest_id: UUID
    room_id: UUID

    # Stay
    date_range: DateRange
    number_of_guests: int = Field(ge=1)
    total_amount: Decimal = Field(gt=0)

    status: ReservationStatus = ReservationStatus.PENDING

    # Metadata
    created_at: datetime
    updated_at: Optional[datetime] = None
    check_in_time: Optional[datetime] = None
    check_out_time: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    cancellation_reason: Optional[str] = None

    class Config:
        from_attributes = True

    # ==================== FACTORY METHOD ====================
    @staticmethod
    def create(
        reservation_number: str,
        guest_id: UUID,
        room: Room,
        date_range: DateRange,
        number_of_guests: int,
        now: datetime
    ) -> "Reservation":
        """Create a PENDING reservation; the total is fixed here and never recomputed"""
        total_amount = room.price_per_night * date_range.nights()

        return Reservation(
            reservation_number=reservation_number,
            guest_id=guest_id,
            room_id=room.room_id,
            date_range=date_range,
            number_of_guests=number_of_guests,
            total_amount=total_amount,
            status=ReservationStatus.PENDING,
            created_at=now
        )

    # ==================== STATE TRANSITION METHODS ====================
    def confirm_payment(self, paid_amount: Decimal, today: date, now: datetime) -> Transition:
        """Confirm reservation after payment"""
        context = TransitionContext(
            today=today,
            total_amount=self.total_amount,
            paid_amount=paid_amount
        )
        return self._fire(ReservationEvent.CONFIRM_PAYMENT, context, now)

    def check_in(self, today: date, now: datetime, room_occupied: bool = False) -> Transition:
        """Mark guest as checked in; only allowed on the scheduled date"""
        context = TransitionContext(
            today=today,
            check_in_date=self.check_in_date,
            room_occupied=room_occupied
        )
        return self._fire(ReservationEvent.CHECK_IN, context, now)

    def check_out(self, today: date, now: datetime) -> Transition:
        """Process guest check-out; early and late check-out are both accepted"""
        return self._fire(ReservationEvent.CHECK_OUT, TransitionContext(today=today), now)

    def cancel(self, reason: str, today: date, now: datetime) -> Transition:
        """Cancel reservation"""
        context = TransitionContext(today=today, reason=reason)
        return self._fire(ReservationEvent.CANCEL, context, now)

    def expire(self, today: date, now: datetime) -> Transition:
        """Mark an unpaid reservation as expired"""
        return self._fire(ReservationEvent.EXPIRE, TransitionContext(today=today), now)

    # ==================== QUERY METHODS ====================
    @property
    def check_in_date(self) -> date:
        return self.date_range.check_in

    @property
    def check_out_date(self) -> date:
        return self.date_range.check_out

    def get_nights(self) -> int:
        """Get number of nights"""
        return self.date_range.nights()

    def is_cancellable(self) -> bool:
        """Check if reservation can be cancelled"""
        return self.status in NON_TERMINAL_STATUSES

    def blocks(self, room_id: UUID, date_range: DateRange) -> bool:
        """Whether this reservation keeps ``room_id`` busy for any night of ``date_range``"""
        return (
            self.room_id == room_id
            and self.status in NON_TERMINAL_STATUSES
            and self.date_range.overlaps(date_range)
        )

    def calculate_refund(self, policy: CancellationPolicy, today: date) -> RefundQuote:
        """Calculate refund amount based on policy"""
        return policy.quote(self.status, self.check_in_date, self.total_amount, today)

    # ==================== PRIVATE METHODS ====================
    def _fire(self, event: ReservationEvent, context: TransitionContext, now: datetime) -> Transition:
        result = transition(self.status, event, context)
        if isinstance(result, Rejection):
            raise error_for(result.kind, result.message)

        self.status = result.to_status
        for effect in result.effects:
            if effect == Effect.STAMP_CHECK_IN_TIME:
                self.check_in_time = now
            elif effect == Effect.STAMP_CHECK_OUT_TIME:
                self.check_out_time = now
            elif effect == Effect.STAMP_CANCELLATION:
                self.cancelled_at = now
                self.cancellation_reason = context.reason.strip()
        self.updated_at = now
        return result


class PaymentRecord(BaseModel):
    """Side record of a confirmed payment; the reservation only keeps its status"""

    payment_id: UUID = Field(default_factory=uuid4)
    reservation_id: UUID
    method: PaymentMethod
    amount: Decimal
    reference: Optional[str] = None
    confirmed_at: datetime

    class Config:
        from_attributes = True
