"""Reservation state machine.

``transition`` is a pure function: given the current status, an event and
the facts the guards need, it returns either a ``Transition`` describing
the new status and the side effects to apply, or a ``Rejection`` naming
the error kind. It performs no I/O and never raises.

    PENDING -> CONFIRMED -> ACTIVE -> COMPLETED
    PENDING | CONFIRMED | ACTIVE -> CANCELLED
    PENDING -> EXPIRED
"""
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Dict, FrozenSet, Optional, Tuple, Union

from pydantic import BaseModel

from domain.enums import ReservationEvent, ReservationStatus
from domain.exceptions import ErrorKind


class Effect(str, Enum):
    STAMP_CHECK_IN_TIME = "STAMP_CHECK_IN_TIME"
    STAMP_CHECK_OUT_TIME = "STAMP_CHECK_OUT_TIME"
    STAMP_CANCELLATION = "STAMP_CANCELLATION"
    OCCUPY_ROOM = "OCCUPY_ROOM"
    RELEASE_ROOM = "RELEASE_ROOM"


class TransitionContext(BaseModel):
    """Facts the guards need; only the fields relevant to the event are read"""
    today: date
    check_in_date: Optional[date] = None
    total_amount: Optional[Decimal] = None
    paid_amount: Optional[Decimal] = None
    room_occupied: bool = False
    reason: Optional[str] = None

    class Config:
        frozen = True


class Transition(BaseModel):
    event: ReservationEvent
    from_status: ReservationStatus
    to_status: ReservationStatus
    effects: Tuple[Effect, ...] = ()

    class Config:
        frozen = True


class Rejection(BaseModel):
    event: ReservationEvent
    status: ReservationStatus
    kind: ErrorKind
    message: str

    class Config:
        frozen = True


TransitionResult = Union[Transition, Rejection]


_RULES: Dict[ReservationEvent, Tuple[FrozenSet[ReservationStatus], ReservationStatus]] = {
    ReservationEvent.CONFIRM_PAYMENT: (
        frozenset({ReservationStatus.PENDING}), ReservationStatus.CONFIRMED),
    ReservationEvent.CHECK_IN: (
        frozenset({ReservationStatus.CONFIRMED}), ReservationStatus.ACTIVE),
    ReservationEvent.CHECK_OUT: (
        frozenset({ReservationStatus.ACTIVE}), ReservationStatus.COMPLETED),
    ReservationEvent.CANCEL: (
        frozenset({ReservationStatus.PENDING, ReservationStatus.CONFIRMED, ReservationStatus.ACTIVE}),
        ReservationStatus.CANCELLED),
    ReservationEvent.EXPIRE: (
        frozenset({ReservationStatus.PENDING}), ReservationStatus.EXPIRED),
}


def allowed_sources(event: ReservationEvent) -> FrozenSet[ReservationStatus]:
    """Statuses from which ``event`` may fire"""
    return _RULES[event][0]


def can_transition(status: ReservationStatus, event: ReservationEvent) -> bool:
    return status in allowed_sources(event)


def transition(
    status: ReservationStatus,
    event: ReservationEvent,
    context: TransitionContext
) -> TransitionResult:
    """Decide the outcome of ``event`` fired on a reservation in ``status``"""
    guard = _GUARDS[event]
    rejection = guard(status, context)
    if rejection is not None:
        return rejection

    sources, target = _RULES[event]
    if status not in sources:
        return _reject(event, status, ErrorKind.STATE_CONFLICT, _status_message(event, status))

    return Transition(
        event=event,
        from_status=status,
        to_status=target,
        effects=_effects(event, status)
    )


# ==================== GUARDS ====================

def _reject(event: ReservationEvent, status: ReservationStatus, kind: ErrorKind, message: str) -> Rejection:
    return Rejection(event=event, status=status, kind=kind, message=message)


def _guard_confirm_payment(status: ReservationStatus, context: TransitionContext) -> Optional[Rejection]:
    event = ReservationEvent.CONFIRM_PAYMENT
    if status == ReservationStatus.EXPIRED:
        return _reject(event, status, ErrorKind.STATE_CONFLICT,
                       "Reservation has expired; payment cannot be confirmed")
    if status == ReservationStatus.CONFIRMED:
        return _reject(event, status, ErrorKind.STATE_CONFLICT,
                       "Payment for this reservation is already confirmed")
    if status != ReservationStatus.PENDING:
        return _reject(event, status, ErrorKind.STATE_CONFLICT,
                       f"Cannot confirm payment. Current status: {status.value}")
    # Exact decimal equality; 1250 and 1250.00 match, 1250.001 does not
    if context.paid_amount is None or context.paid_amount != context.total_amount:
        return _reject(event, status, ErrorKind.VALIDATION,
                       f"Paid amount ({context.paid_amount}) does not match "
                       f"the reservation total ({context.total_amount})")
    return None


def _guard_check_in(status: ReservationStatus, context: TransitionContext) -> Optional[Rejection]:
    event = ReservationEvent.CHECK_IN
    if context.check_in_date != context.today:
        return _reject(event, status, ErrorKind.STATE_CONFLICT,
                       f"Check-in is only allowed on the scheduled date. "
                       f"Expected: {context.check_in_date}, today is: {context.today}")
    if context.room_occupied:
        return _reject(event, status, ErrorKind.STATE_CONFLICT,
                       "Room is occupied by another active reservation")
    return None


def _guard_cancel(status: ReservationStatus, context: TransitionContext) -> Optional[Rejection]:
    event = ReservationEvent.CANCEL
    if status not in allowed_sources(event):
        return _reject(event, status, ErrorKind.STATE_CONFLICT,
                       f"Reservation with status {status.value} cannot be cancelled")
    if not context.reason or not context.reason.strip():
        return _reject(event, status, ErrorKind.VALIDATION, "A cancellation reason is required")
    return None


def _no_guard(status: ReservationStatus, context: TransitionContext) -> Optional[Rejection]:
    return None


_GUARDS = {
    ReservationEvent.CONFIRM_PAYMENT: _guard_confirm_payment,
    ReservationEvent.CHECK_IN: _guard_check_in,
    ReservationEvent.CHECK_OUT: _no_guard,
    ReservationEvent.CANCEL: _guard_cancel,
    ReservationEvent.EXPIRE: _no_guard,
}


def _status_message(event: ReservationEvent, status: ReservationStatus) -> str:
    expected = ", ".join(sorted(s.value for s in allowed_sources(event)))
    return (f"Cannot apply {event.value} to a reservation with status {status.value}; "
            f"expected {expected}")


def _effects(event: ReservationEvent, status: ReservationStatus) -> Tuple[Effect, ...]:
    if event == ReservationEvent.CHECK_IN:
        return (Effect.STAMP_CHECK_IN_TIME, Effect.OCCUPY_ROOM)
    if event == ReservationEvent.CHECK_OUT:
        return (Effect.STAMP_CHECK_OUT_TIME, Effect.RELEASE_ROOM)
    if event == ReservationEvent.CANCEL:
        if status == ReservationStatus.ACTIVE:
            return (Effect.STAMP_CANCELLATION, Effect.RELEASE_ROOM)
        return (Effect.STAMP_CANCELLATION,)
    return ()
