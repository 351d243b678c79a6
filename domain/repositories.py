"""Domain Repository Interfaces"""
from abc import ABC, abstractmethod
from typing import AsyncContextManager, Optional, List, Sequence
from uuid import UUID
from datetime import date

from domain.entities import Guest, PaymentRecord, Reservation, Room
from domain.enums import ReservationStatus


class RoomRepository(ABC):
    """Repository interface for Room Aggregate"""

    @abstractmethod
    async def save(self, room: Room) -> Room:
        """Insert or update room"""
        pass

    @abstractmethod
    async def get_by_id(self, room_id: UUID) -> Optional[Room]:
        """Find room by ID"""
        pass

    @abstractmethod
    async def exists_by_number(self, room_number: str) -> bool:
        """Check whether a room number is taken"""
        pass

    @abstractmethod
    async def find_all(self) -> List[Room]:
        """Find all rooms"""
        pass

    @abstractmethod
    async def delete(self, room_id: UUID) -> bool:
        """Delete room"""
        pass


class GuestRepository(ABC):
    """Repository interface for Guest Aggregate"""

    @abstractmethod
    async def save(self, guest: Guest) -> Guest:
        """Insert or update guest"""
        pass

    @abstractmethod
    async def find_by_id(self, guest_id: UUID) -> Optional[Guest]:
        """Find guest by ID"""
        pass

    @abstractmethod
    async def find_by_document(self, document_number: str) -> Optional[Guest]:
        """Find guest by document number"""
        pass


class ReservationRepository(ABC):
    """Repository interface for Reservation Aggregate.

    ``save`` must refuse a reservation number already held by another
    reservation with ``DuplicateReservationNumberError``.
    """

    @abstractmethod
    async def save(self, reservation: Reservation) -> Reservation:
        """Insert or update reservation"""
        pass

    @abstractmethod
    async def find_by_id(self, reservation_id: UUID) -> Optional[Reservation]:
        """Find reservation by ID"""
        pass

    @abstractmethod
    async def find_by_reservation_number(self, reservation_number: str) -> Optional[Reservation]:
        """Find reservation by its human-facing number"""
        pass

    @abstractmethod
    async def find_overlapping(self, room_id: UUID, check_in: date, check_out: date) -> List[Reservation]:
        """Non-terminal reservations of the room sharing a night with [check_in, check_out)"""
        pass

    @abstractmethod
    async def find_by_guest_name_like(self, name: str) -> List[Reservation]:
        """Case-insensitive partial match on guest first or last name, by check-in date"""
        pass

    @abstractmethod
    async def find_by_check_in_date_and_status_in(
        self, check_in_date: date, statuses: Sequence[ReservationStatus]
    ) -> List[Reservation]:
        """Reservations arriving on a date, ordered by check-in date"""
        pass

    @abstractmethod
    async def find_by_check_out_date_and_status(
        self, check_out_date: date, status: ReservationStatus
    ) -> List[Reservation]:
        """Reservations leaving on a date, ordered by check-out date"""
        pass

    @abstractmethod
    async def exists_by_room_id(self, room_id: UUID) -> bool:
        """Check whether any reservation references the room"""
        pass

    @abstractmethod
    async def find_all(self) -> List[Reservation]:
        """Find all reservations"""
        pass


class PaymentRepository(ABC):
    """Repository interface for confirmed payments"""

    @abstractmethod
    async def save(self, payment: PaymentRecord) -> PaymentRecord:
        pass

    @abstractmethod
    async def find_by_reservation_id(self, reservation_id: UUID) -> List[PaymentRecord]:
        pass


class UnitOfWork(ABC):
    """Transaction boundary for a use case.

    Writes made inside ``transaction()`` commit together or not at all, and
    two transactions never run their read-validate-write sequences
    interleaved.
    """

    @abstractmethod
    def transaction(self) -> AsyncContextManager[None]:
        pass
