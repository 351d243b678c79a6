"""API Dependencies - wiring of repositories, clock and services"""
from fastapi import Depends

from application.services import (
    AvailabilityService, GuestService, PaymentService, ReservationService, RoomService
)
from domain.clock import Clock
from infrastructure.clock import SystemClock
from infrastructure.config import Settings, load_settings
from infrastructure.repositories.in_memory_repositories import (
    InMemoryGuestRepository, InMemoryPaymentRepository, InMemoryReservationRepository,
    InMemoryRoomRepository, InMemoryUnitOfWork
)

settings = load_settings()


class Container:
    """Holds the stores shared by every request"""

    def __init__(self):
        self.room_repository = InMemoryRoomRepository()
        self.guest_repository = InMemoryGuestRepository()
        self.reservation_repository = InMemoryReservationRepository(self.guest_repository)
        self.payment_repository = InMemoryPaymentRepository()
        self.unit_of_work = InMemoryUnitOfWork(
            self.room_repository,
            self.guest_repository,
            self.reservation_repository,
            self.payment_repository
        )


_container = Container()
_system_clock = SystemClock(settings.timezone)


def get_settings() -> Settings:
    return settings


def get_container() -> Container:
    return _container


def get_clock() -> Clock:
    return _system_clock


def get_availability_service(container: Container = Depends(get_container)) -> AvailabilityService:
    return AvailabilityService(container.reservation_repository)


def get_room_service(
    container: Container = Depends(get_container),
    clock: Clock = Depends(get_clock)
) -> RoomService:
    return RoomService(
        container.room_repository,
        container.reservation_repository,
        AvailabilityService(container.reservation_repository),
        container.unit_of_work,
        clock
    )


def get_reservation_service(
    container: Container = Depends(get_container),
    clock: Clock = Depends(get_clock),
    app_settings: Settings = Depends(get_settings)
) -> ReservationService:
    return ReservationService(
        repository=container.reservation_repository,
        room_repository=container.room_repository,
        guest_repository=container.guest_repository,
        guest_service=GuestService(container.guest_repository, clock),
        availability_service=AvailabilityService(container.reservation_repository),
        unit_of_work=container.unit_of_work,
        clock=clock,
        cancellation_policy=app_settings.cancellation_policy(),
        max_stay_nights=app_settings.max_stay_nights,
        reservation_number_attempts=app_settings.reservation_number_attempts
    )


def get_payment_service(
    container: Container = Depends(get_container),
    clock: Clock = Depends(get_clock)
) -> PaymentService:
    return PaymentService(
        container.reservation_repository,
        container.payment_repository,
        container.unit_of_work,
        clock
    )
