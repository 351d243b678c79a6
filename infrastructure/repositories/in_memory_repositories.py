"""In-Memory Repository Implementations

Entities are copied on the way in and on the way out, so callers never
share a live object with the store or with each other.
"""
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional, List, Dict, Sequence
from uuid import UUID
from datetime import date

from domain.availability import find_blocking
from domain.entities import Guest, PaymentRecord, Reservation, Room
from domain.enums import ReservationStatus
from domain.exceptions import DuplicateReservationNumberError, DuplicateRoomNumberError
from domain.repositories import (
    GuestRepository, PaymentRepository, ReservationRepository, RoomRepository, UnitOfWork
)
from domain.value_objects import DateRange

logger = logging.getLogger(__name__)


class InMemoryRoomRepository(RoomRepository):
    """In-memory implementation of RoomRepository"""

    def __init__(self):
        self._storage: Dict[UUID, Room] = {}

    async def save(self, room: Room) -> Room:
        """Save room to memory"""
        for other in self._storage.values():
            if other.room_number == room.room_number and other.room_id != room.room_id:
                raise DuplicateRoomNumberError(room.room_number)
        self._storage[room.room_id] = room.model_copy(deep=True)
        return room

    async def get_by_id(self, room_id: UUID) -> Optional[Room]:
        """Find room by ID"""
        room = self._storage.get(room_id)
        return room.model_copy(deep=True) if room else None

    async def exists_by_number(self, room_number: str) -> bool:
        return any(r.room_number == room_number for r in self._storage.values())

    async def find_all(self) -> List[Room]:
        """Find all rooms ordered by room number"""
        rooms = sorted(self._storage.values(), key=lambda r: r.room_number)
        return [r.model_copy(deep=True) for r in rooms]

    async def delete(self, room_id: UUID) -> bool:
        """Delete room"""
        if room_id in self._storage:
            del self._storage[room_id]
            return True
        return False


class InMemoryGuestRepository(GuestRepository):
    """In-memory implementation of GuestRepository"""

    def __init__(self):
        self._storage: Dict[UUID, Guest] = {}

    async def save(self, guest: Guest) -> Guest:
        """Save guest to memory"""
        self._storage[guest.guest_id] = guest.model_copy(deep=True)
        return guest

    async def find_by_id(self, guest_id: UUID) -> Optional[Guest]:
        guest = self._storage.get(guest_id)
        return guest.model_copy(deep=True) if guest else None

    async def find_by_document(self, document_number: str) -> Optional[Guest]:
        for guest in self._storage.values():
            if guest.document_number == document_number:
                return guest.model_copy(deep=True)
        return None


class InMemoryReservationRepository(ReservationRepository):
    """In-memory implementation of ReservationRepository"""

    def __init__(self, guest_repository: GuestRepository):
        self._storage: Dict[UUID, Reservation] = {}
        self._guests = guest_repository

    async def save(self, reservation: Reservation) -> Reservation:
        """Save reservation to memory"""
        for other in self._storage.values():
            if (other.reservation_number == reservation.reservation_number
                    and other.reservation_id != reservation.reservation_id):
                raise DuplicateReservationNumberError(reservation.reservation_number)
        self._storage[reservation.reservation_id] = reservation.model_copy(deep=True)
        return reservation

    async def find_by_id(self, reservation_id: UUID) -> Optional[Reservation]:
        """Find reservation by ID"""
        reservation = self._storage.get(reservation_id)
        return reservation.model_copy(deep=True) if reservation else None

    async def find_by_reservation_number(self, reservation_number: str) -> Optional[Reservation]:
        for reservation in self._storage.values():
            if reservation.reservation_number == reservation_number:
                return reservation.model_copy(deep=True)
        return None

    async def find_overlapping(self, room_id: UUID, check_in: date, check_out: date) -> List[Reservation]:
        date_range = DateRange(check_in=check_in, check_out=check_out)
        return self._copies(find_blocking(self._storage.values(), room_id, date_range))

    async def find_by_guest_name_like(self, name: str) -> List[Reservation]:
        needle = name.strip().lower()
        matches = []
        for reservation in self._storage.values():
            guest = await self._guests.find_by_id(reservation.guest_id)
            if guest is None:
                continue
            if needle in guest.first_name.lower() or needle in guest.last_name.lower():
                matches.append(reservation)
        return self._copies(sorted(matches, key=lambda r: r.check_in_date))

    async def find_by_check_in_date_and_status_in(
        self, check_in_date: date, statuses: Sequence[ReservationStatus]
    ) -> List[Reservation]:
        matches = [
            r for r in self._storage.values()
            if r.check_in_date == check_in_date and r.status in statuses
        ]
        return self._copies(sorted(matches, key=lambda r: r.check_in_date))

    async def find_by_check_out_date_and_status(
        self, check_out_date: date, status: ReservationStatus
    ) -> List[Reservation]:
        matches = [
            r for r in self._storage.values()
            if r.check_out_date == check_out_date and r.status == status
        ]
        return self._copies(sorted(matches, key=lambda r: r.check_out_date))

    async def exists_by_room_id(self, room_id: UUID) -> bool:
        return any(r.room_id == room_id for r in self._storage.values())

    async def find_all(self) -> List[Reservation]:
        """Find all reservations"""
        return self._copies(self._storage.values())

    @staticmethod
    def _copies(reservations) -> List[Reservation]:
        return [r.model_copy(deep=True) for r in reservations]


class InMemoryPaymentRepository(PaymentRepository):
    """In-memory payment ledger"""

    def __init__(self):
        self._storage: Dict[UUID, PaymentRecord] = {}

    async def save(self, payment: PaymentRecord) -> PaymentRecord:
        self._storage[payment.payment_id] = payment.model_copy(deep=True)
        return payment

    async def find_by_reservation_id(self, reservation_id: UUID) -> List[PaymentRecord]:
        return [
            p.model_copy(deep=True) for p in self._storage.values()
            if p.reservation_id == reservation_id
        ]


class InMemoryUnitOfWork(UnitOfWork):
    """Serialises write transactions and rolls back every repository on failure.

    A database-backed store would lock the room row instead; here a single
    lock is enough because the whole store lives in one process.
    """

    def __init__(self, *repositories):
        self._repositories = repositories
        self._lock = asyncio.Lock()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        async with self._lock:
            snapshots = [dict(repo._storage) for repo in self._repositories]
            try:
                yield
            except BaseException:
                for repo, snapshot in zip(self._repositories, snapshots):
                    repo._storage.clear()
                    repo._storage.update(snapshot)
                logger.debug("Transaction rolled back")
                raise
