"""Application Services - Business use cases

Every mutating use case runs inside ``UnitOfWork.transaction()``, so the
read-validate-write sequence for a room is never interleaved with another
request and a failure leaves no partial writes behind.
"""
import logging
import random
import string
from uuid import UUID
from datetime import date
from decimal import Decimal
from typing import List, Optional, Union

from pydantic import ValidationError

from application.dto import CancellationSummary, ReservationSummary, TodayReservations
from domain.availability import (
    MAX_STAY_NIGHTS, validate_capacity, validate_date_range, validate_stay_length
)
from domain.clock import Clock
from domain.entities import Guest, PaymentRecord, Reservation, Room
from domain.enums import PaymentMethod, ReservationStatus, RoomType
from domain.exceptions import (
    BookingValidationError, ConflictError, DuplicateReservationNumberError, DuplicateRoomNumberError,
    HotelBookingError, NotFoundError, ReservationNotFoundError, RoomInUseError, RoomNotFoundError,
    RoomUnavailableError
)
from domain.repositories import (
    GuestRepository, PaymentRepository, ReservationRepository, RoomRepository, UnitOfWork
)
from domain.state_machine import Effect, Transition
from domain.value_objects import CancellationPolicy, DateRange, GuestInfo

logger = logging.getLogger(__name__)


class AvailabilityService:
    """Answers whether a room is free for a half-open date range"""

    def __init__(self, reservation_repository: ReservationRepository):
        self.reservation_repository = reservation_repository

    async def find_overlapping(
        self,
        room_id: UUID,
        check_in: date,
        check_out: date,
        excluding_reservation_id: Optional[UUID] = None
    ) -> List[Reservation]:
        """Non-terminal reservations of the room sharing at least one night with the range"""
        overlapping = await self.reservation_repository.find_overlapping(room_id, check_in, check_out)
        return [r for r in overlapping if r.reservation_id != excluding_reservation_id]

    async def is_available(
        self,
        room_id: UUID,
        check_in: date,
        check_out: date,
        excluding_reservation_id: Optional[UUID] = None
    ) -> bool:
        blocking = await self.find_overlapping(room_id, check_in, check_out, excluding_reservation_id)
        return not blocking


class RoomService:
    """Service for Room inventory use cases"""

    def __init__(self,
                 repository: RoomRepository,
                 reservation_repository: ReservationRepository,
                 availability_service: AvailabilityService,
                 unit_of_work: UnitOfWork,
                 clock: Clock):
        self.repository = repository
        self.reservation_repository = reservation_repository
        self.availability_service = availability_service
        self.unit_of_work = unit_of_work
        self.clock = clock

    async def register_room(
        self,
        room_number: str,
        room_type: RoomType,
        capacity: int,
        price_per_night: Decimal
    ) -> Room:
        """Register a room; room numbers are unique"""
        try:
            room = Room(
                room_number=room_number,
                room_type=room_type,
                capacity=capacity,
                price_per_night=price_per_night
            )
        except ValidationError as e:
            raise BookingValidationError(f"Invalid room: {e}")

        async with self.unit_of_work.transaction():
            if await self.repository.exists_by_number(room_number):
                raise DuplicateRoomNumberError(room_number)
            await self.repository.save(room)

        logger.info("Room %s registered", room.room_number)
        return room

    async def get_room(self, room_id: UUID) -> Room:
        room = await self.repository.get_by_id(room_id)
        if not room:
            raise RoomNotFoundError(room_id)
        return room

    async def list_rooms(self) -> List[Room]:
        return await self.repository.find_all()

    async def get_available_rooms(
        self,
        check_in: date,
        check_out: date,
        room_type: Optional[RoomType] = None
    ) -> List[Room]:
        """Rooms with no blocking reservation anywhere in [check_in, check_out)"""
        validate_date_range(check_in, check_out, self.clock.today())

        available = []
        for room in await self.repository.find_all():
            if room_type is not None and room.room_type != room_type:
                continue
            if await self.availability_service.is_available(room.room_id, check_in, check_out):
                available.append(room)
        return available

    async def update_room(
        self,
        room_id: UUID,
        room_number: str,
        room_type: RoomType,
        capacity: int,
        price_per_night: Decimal
    ) -> Room:
        """Replace a room's details; existing reservations keep the total they were booked at"""
        async with self.unit_of_work.transaction():
            current = await self.get_room(room_id)
            try:
                room = Room(
                    room_id=current.room_id,
                    room_number=room_number,
                    room_type=room_type,
                    capacity=capacity,
                    price_per_night=price_per_night,
                    is_available=current.is_available
                )
            except ValidationError as e:
                raise BookingValidationError(f"Invalid room: {e}")
            await self.repository.save(room)

        logger.info("Room %s updated", room.room_number)
        return room

    async def delete_room(self, room_id: UUID) -> None:
        """Delete a room that no reservation references"""
        async with self.unit_of_work.transaction():
            room = await self.get_room(room_id)
            if await self.reservation_repository.exists_by_room_id(room_id):
                raise RoomInUseError(room.room_number)
            await self.repository.delete(room_id)

        logger.info("Room %s deleted", room.room_number)


class GuestService:
    """Service for Guest directory use cases"""

    def __init__(self, repository: GuestRepository, clock: Clock):
        self.repository = repository
        self.clock = clock

    async def register_or_update_guest(self, info: GuestInfo) -> Guest:
        """Insert a guest under a new document number, or refresh the existing one"""
        guest = await self.repository.find_by_document(info.document_number)
        if guest:
            guest.update_contact(info, self.clock.now())
        else:
            guest = Guest.register(info, self.clock.now())
        return await self.repository.save(guest)


class ReservationService:
    """Service for Reservation lifecycle use cases"""

    def __init__(self,
                 repository: ReservationRepository,
                 room_repository: RoomRepository,
                 guest_repository: GuestRepository,
                 guest_service: GuestService,
                 availability_service: AvailabilityService,
                 unit_of_work: UnitOfWork,
                 clock: Clock,
                 cancellation_policy: Optional[CancellationPolicy] = None,
                 max_stay_nights: int = MAX_STAY_NIGHTS,
                 reservation_number_attempts: int = 5):
        self.repository = repository
        self.room_repository = room_repository
        self.guest_repository = guest_repository
        self.guest_service = guest_service
        self.availability_service = availability_service
        self.unit_of_work = unit_of_work
        self.clock = clock
        self.cancellation_policy = cancellation_policy or CancellationPolicy()
        self.max_stay_nights = max_stay_nights
        self.reservation_number_attempts = reservation_number_attempts

    # ==================== CREATION ====================
    async def create_reservation(
        self,
        guest_info: GuestInfo,
        room_id: UUID,
        check_in: date,
        check_out: date,
        number_of_guests: int
    ) -> ReservationSummary:
        """Create a PENDING reservation after availability and capacity checks"""
        date_range = validate_date_range(check_in, check_out, self.clock.today())
        validate_stay_length(date_range, self.max_stay_nights)

        async with self.unit_of_work.transaction():
            room = await self.room_repository.get_by_id(room_id)
            if not room:
                raise RoomNotFoundError(room_id)
            validate_capacity(room, number_of_guests)

            if not await self.availability_service.is_available(room.room_id, check_in, check_out):
                logger.warning("Room %s unavailable for %s - %s", room.room_number, check_in, check_out)
                raise RoomUnavailableError(room.room_number)

            guest = await self.guest_service.register_or_update_guest(guest_info)
            reservation = await self._insert_with_unique_number(guest, room, date_range, number_of_guests)

        logger.info("Reservation %s created for room %s (%s nights, total %s)",
                    reservation.reservation_number, room.room_number,
                    reservation.get_nights(), reservation.total_amount)
        return ReservationSummary.from_entities(reservation, guest, room)

    async def _insert_with_unique_number(
        self,
        guest: Guest,
        room: Room,
        date_range: DateRange,
        number_of_guests: int
    ) -> Reservation:
        for _ in range(self.reservation_number_attempts):
            reservation = Reservation.create(
                reservation_number=self._generate_reservation_number(),
                guest_id=guest.guest_id,
                room=room,
                date_range=date_range,
                number_of_guests=number_of_guests,
                now=self.clock.now()
            )
            try:
                return await self.repository.save(reservation)
            except DuplicateReservationNumberError:
                logger.debug("Reservation number %s collided, retrying", reservation.reservation_number)
        raise ConflictError("Could not allocate a unique reservation number")

    def _generate_reservation_number(self) -> str:
        """Format: RES-<year>-<6 uppercase alphanumerics>"""
        suffix = ''.join(random.choices(string.ascii_uppercase + string.digits, k=6))
        return f"RES-{self.clock.today().year}-{suffix}"

    # ==================== QUERIES ====================
    async def get_reservation(self, reservation_id: UUID) -> ReservationSummary:
        """Get reservation by ID"""
        return await self._summarize(await self._load(reservation_id))

    async def search_reservations(
        self,
        reservation_number: Optional[str] = None,
        guest_name: Optional[str] = None
    ) -> List[ReservationSummary]:
        """Exact reservation-number match wins over a partial guest-name match"""
        reservation_number = (reservation_number or "").strip() or None
        guest_name = (guest_name or "").strip() or None

        if reservation_number is None and guest_name is None:
            raise BookingValidationError(
                "Provide at least one search criterion: reservation number or guest name"
            )

        if reservation_number is not None:
            reservation = await self.repository.find_by_reservation_number(reservation_number)
            return [await self._summarize(reservation)] if reservation else []

        reservations = await self.repository.find_by_guest_name_like(guest_name)
        return [await self._summarize(r) for r in reservations]

    async def get_today_reservations(self) -> TodayReservations:
        """Arrivals (CONFIRMED or ACTIVE) and departures (ACTIVE) scheduled for today"""
        today = self.clock.today()
        arrivals = await self.repository.find_by_check_in_date_and_status_in(
            today, [ReservationStatus.CONFIRMED, ReservationStatus.ACTIVE]
        )
        departures = await self.repository.find_by_check_out_date_and_status(
            today, ReservationStatus.ACTIVE
        )
        return TodayReservations(
            check_ins=[await self._summarize(r) for r in arrivals],
            check_outs=[await self._summarize(r) for r in departures]
        )

    # ==================== TRANSITIONS ====================
    async def check_in(self, reservation_id: UUID) -> ReservationSummary:
        """Check in on the scheduled date, provided no other guest occupies the room"""
        async with self.unit_of_work.transaction():
            reservation = await self._load(reservation_id)
            overlapping = await self.availability_service.find_overlapping(
                reservation.room_id,
                reservation.check_in_date,
                reservation.check_out_date,
                excluding_reservation_id=reservation.reservation_id
            )
            occupied = any(r.status == ReservationStatus.ACTIVE for r in overlapping)

            try:
                transition_ = reservation.check_in(self.clock.today(), self.clock.now(), room_occupied=occupied)
            except HotelBookingError as e:
                logger.warning("Check-in rejected for %s: %s", reservation.reservation_number, e)
                raise

            await self.repository.save(reservation)
            await self._apply_room_effects(reservation, transition_)

        logger.info("Reservation %s checked in", reservation.reservation_number)
        return await self._summarize(reservation)

    async def check_out(self, reservation_id: UUID) -> ReservationSummary:
        """Check out an ACTIVE reservation, whatever the date"""
        async with self.unit_of_work.transaction():
            reservation = await self._load(reservation_id)
            try:
                transition_ = reservation.check_out(self.clock.today(), self.clock.now())
            except HotelBookingError as e:
                logger.warning("Check-out rejected for %s: %s", reservation.reservation_number, e)
                raise

            await self.repository.save(reservation)
            await self._apply_room_effects(reservation, transition_)

        logger.info("Reservation %s checked out", reservation.reservation_number)
        return await self._summarize(reservation)

    async def cancel_reservation(self, reservation_id: UUID, reason: str) -> CancellationSummary:
        """Cancel and compute the refund from the days left before check-in"""
        async with self.unit_of_work.transaction():
            reservation = await self._load(reservation_id)
            # Quote against the pre-cancellation status; ACTIVE never refunds
            quote = reservation.calculate_refund(self.cancellation_policy, self.clock.today())

            try:
                transition_ = reservation.cancel(reason, self.clock.today(), self.clock.now())
            except HotelBookingError as e:
                logger.warning("Cancellation rejected for %s: %s", reservation.reservation_number, e)
                raise

            await self.repository.save(reservation)
            await self._apply_room_effects(reservation, transition_)

        logger.info("Reservation %s cancelled with %s%% refund",
                    reservation.reservation_number, quote.refund_percentage)
        return CancellationSummary.from_quote(reservation, quote)

    async def expire_reservation(self, reservation_id: UUID) -> ReservationSummary:
        """Expire an unpaid reservation"""
        async with self.unit_of_work.transaction():
            reservation = await self._load(reservation_id)
            try:
                reservation.expire(self.clock.today(), self.clock.now())
            except HotelBookingError as e:
                logger.warning("Expiry rejected for %s: %s", reservation.reservation_number, e)
                raise
            await self.repository.save(reservation)

        logger.info("Reservation %s expired", reservation.reservation_number)
        return await self._summarize(reservation)

    # ==================== HELPERS ====================
    async def _apply_room_effects(self, reservation: Reservation, transition_: Transition) -> None:
        """Flip the room's occupancy flag as the transition's effects dictate"""
        if Effect.OCCUPY_ROOM in transition_.effects:
            room = await self._load_room(reservation.room_id)
            room.occupy()
            logger.info("Room %s occupied by %s", room.room_number, reservation.reservation_number)
        elif Effect.RELEASE_ROOM in transition_.effects:
            room = await self._load_room(reservation.room_id)
            room.release()
            logger.info("Room %s released by %s", room.room_number, reservation.reservation_number)
        else:
            return
        await self.room_repository.save(room)

    async def _load(self, reservation_id: UUID) -> Reservation:
        reservation = await self.repository.find_by_id(reservation_id)
        if not reservation:
            raise ReservationNotFoundError(reservation_id)
        return reservation

    async def _load_room(self, room_id: UUID) -> Room:
        room = await self.room_repository.get_by_id(room_id)
        if not room:
            raise RoomNotFoundError(room_id)
        return room

    async def _summarize(self, reservation: Reservation) -> ReservationSummary:
        guest = await self.guest_repository.find_by_id(reservation.guest_id)
        if not guest:
            raise NotFoundError(f"Guest not found with id: {reservation.guest_id}")
        room = await self._load_room(reservation.room_id)
        return ReservationSummary.from_entities(reservation, guest, room)


class PaymentService:
    """Service for payment confirmation"""

    def __init__(self,
                 reservation_repository: ReservationRepository,
                 payment_repository: PaymentRepository,
                 unit_of_work: UnitOfWork,
                 clock: Clock):
        self.reservation_repository = reservation_repository
        self.payment_repository = payment_repository
        self.unit_of_work = unit_of_work
        self.clock = clock

    async def confirm_payment(
        self,
        reservation_id: UUID,
        method: Union[PaymentMethod, str],
        amount: Decimal,
        reference: Optional[str] = None
    ) -> PaymentRecord:
        """Confirm payment of a PENDING reservation; the amount must match the total exactly"""
        payment_method = self._validate_method(method)
        if payment_method.requires_reference and (reference is None or not reference.strip()):
            raise BookingValidationError(
                f"Payment method {payment_method.value} requires a reference/authorization number"
            )

        async with self.unit_of_work.transaction():
            reservation = await self.reservation_repository.find_by_id(reservation_id)
            if not reservation:
                raise ReservationNotFoundError(reservation_id)

            try:
                reservation.confirm_payment(Decimal(amount), self.clock.today(), self.clock.now())
            except HotelBookingError as e:
                logger.warning("Payment rejected for %s: %s", reservation.reservation_number, e)
                raise

            await self.reservation_repository.save(reservation)
            payment = PaymentRecord(
                reservation_id=reservation.reservation_id,
                method=payment_method,
                amount=Decimal(amount),
                reference=reference.strip() if reference else None,
                confirmed_at=self.clock.now()
            )
            await self.payment_repository.save(payment)

        logger.info("Payment confirmed for %s via %s", reservation.reservation_number, payment_method.value)
        return payment

    async def get_payments(self, reservation_id: UUID) -> List[PaymentRecord]:
        """Payments recorded against a reservation"""
        if not await self.reservation_repository.find_by_id(reservation_id):
            raise ReservationNotFoundError(reservation_id)
        return await self.payment_repository.find_by_reservation_id(reservation_id)

    @staticmethod
    def _validate_method(method: Union[PaymentMethod, str]) -> PaymentMethod:
        try:
            return PaymentMethod(method)
        except ValueError:
            valid = ", ".join(m.value for m in PaymentMethod)
            raise BookingValidationError(f"Invalid payment method: {method}. Valid methods: {valid}")
