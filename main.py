from fastapi import FastAPI, Depends, Response
from uuid import UUID
from datetime import date
from typing import List, Optional

from api.schemas import (
    CreateRoomRequest, CreateReservationRequest, ConfirmPaymentRequest,
    CancelReservationRequest, PaymentResponse
)
from api.dependencies import (
    get_availability_service, get_payment_service, get_reservation_service, get_room_service, settings
)
from api.errors import to_http_exception
from application.dto import CancellationSummary, ReservationSummary, RoomSummary, TodayReservations
from application.services import AvailabilityService, PaymentService, ReservationService, RoomService
from domain.availability import validate_date_range
from domain.entities import PaymentRecord
from domain.enums import PaymentMethod, ReservationStatus, RoomType
from domain.exceptions import HotelBookingError
from infrastructure.logging_config import configure_logging

configure_logging(settings.log_level)

app = FastAPI(
    title=settings.app_name,
    description="Room inventory, reservations, payments, check-in/check-out and cancellations",
    version="1.0.0"
)

# ============================================================================
# HEALTH & ENUM REFERENCE ENDPOINTS
# ============================================================================

@app.get("/api/health", tags=["Health"])
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "message": "API is running"}

@app.get("/api/enums/reservation-status", tags=["Enum Reference"])
async def get_reservation_statuses():
    """Get all ReservationStatus enum values"""
    return {
        "values": [item.name for item in ReservationStatus],
        "description": "PENDING -> CONFIRMED -> ACTIVE -> COMPLETED; CANCELLED and EXPIRED are terminal"
    }

@app.get("/api/enums/room-type", tags=["Enum Reference"])
async def get_room_types():
    """Get all RoomType enum values"""
    return {"values": [item.name for item in RoomType]}

@app.get("/api/enums/payment-method", tags=["Enum Reference"])
async def get_payment_methods():
    """Get all PaymentMethod enum values"""
    return {
        "values": [item.name for item in PaymentMethod],
        "description": "CARD and TRANSFER require a reference number"
    }

# ============================================================================
# ROOM ENDPOINTS
# ============================================================================

@app.post("/api/rooms", response_model=RoomSummary, status_code=201, tags=["Rooms"])
async def register_room(
    request: CreateRoomRequest,
    service: RoomService = Depends(get_room_service)
):
    """Register a new room"""
    try:
        room = await service.register_room(
            room_number=request.room_number,
            room_type=request.room_type,
            capacity=request.capacity,
            price_per_night=request.price_per_night
        )
        return RoomSummary.from_entity(room)
    except HotelBookingError as e:
        raise to_http_exception(e)

@app.get("/api/rooms", response_model=List[RoomSummary], tags=["Rooms"])
async def list_rooms(service: RoomService = Depends(get_room_service)):
    """Get all rooms"""
    rooms = await service.list_rooms()
    return [RoomSummary.from_entity(r) for r in rooms]

@app.get("/api/rooms/available", response_model=List[RoomSummary], tags=["Rooms"])
async def get_available_rooms(
    check_in: date,
    check_out: date,
    room_type: Optional[RoomType] = None,
    service: RoomService = Depends(get_room_service)
):
    """Rooms free for the whole [check_in, check_out) range"""
    try:
        rooms = await service.get_available_rooms(check_in, check_out, room_type)
        return [RoomSummary.from_entity(r) for r in rooms]
    except HotelBookingError as e:
        raise to_http_exception(e)

@app.get("/api/rooms/{room_id}", response_model=RoomSummary, tags=["Rooms"])
async def get_room(
    room_id: UUID,
    service: RoomService = Depends(get_room_service)
):
    """Get room by ID"""
    try:
        return RoomSummary.from_entity(await service.get_room(room_id))
    except HotelBookingError as e:
        raise to_http_exception(e)

@app.put("/api/rooms/{room_id}", response_model=RoomSummary, tags=["Rooms"])
async def update_room(
    room_id: UUID,
    request: CreateRoomRequest,
    service: RoomService = Depends(get_room_service)
):
    """Update room details"""
    try:
        room = await service.update_room(
            room_id=room_id,
            room_number=request.room_number,
            room_type=request.room_type,
            capacity=request.capacity,
            price_per_night=request.price_per_night
        )
        return RoomSummary.from_entity(room)
    except HotelBookingError as e:
        raise to_http_exception(e)

@app.get("/api/rooms/{room_id}/availability", tags=["Rooms"])
async def check_room_availability(
    room_id: UUID,
    check_in: date,
    check_out: date,
    room_service: RoomService = Depends(get_room_service),
    availability_service: AvailabilityService = Depends(get_availability_service)
):
    """Check whether one room is free for a date range, listing what blocks it"""
    try:
        room = await room_service.get_room(room_id)
        validate_date_range(check_in, check_out, room_service.clock.today())
        blocking = await availability_service.find_overlapping(room.room_id, check_in, check_out)
        return {
            "room_id": room.room_id,
            "available": not blocking,
            "blocking_reservations": [r.reservation_number for r in blocking]
        }
    except HotelBookingError as e:
        raise to_http_exception(e)

@app.delete("/api/rooms/{room_id}", status_code=204, tags=["Rooms"])
async def delete_room(
    room_id: UUID,
    service: RoomService = Depends(get_room_service)
):
    """Delete a room that no reservation references"""
    try:
        await service.delete_room(room_id)
        return Response(status_code=204)
    except HotelBookingError as e:
        raise to_http_exception(e)

# ============================================================================
# RESERVATION ENDPOINTS
# ============================================================================

@app.post("/api/reservations", response_model=ReservationSummary, status_code=201, tags=["Reservations"])
async def create_reservation(
    request: CreateReservationRequest,
    service: ReservationService = Depends(get_reservation_service)
):
    """Create new reservation"""
    try:
        return await service.create_reservation(
            guest_info=request.guest.to_guest_info(),
            room_id=request.room_id,
            check_in=request.check_in_date,
            check_out=request.check_out_date,
            number_of_guests=request.number_of_guests
        )
    except HotelBookingError as e:
        raise to_http_exception(e)

@app.get("/api/reservations/search", response_model=List[ReservationSummary], tags=["Reservations"])
async def search_reservations(
    reservation_number: Optional[str] = None,
    guest_name: Optional[str] = None,
    service: ReservationService = Depends(get_reservation_service)
):
    """Search by exact reservation number or partial guest name"""
    try:
        return await service.search_reservations(reservation_number, guest_name)
    except HotelBookingError as e:
        raise to_http_exception(e)

@app.get("/api/reservations/today", response_model=TodayReservations, tags=["Reservations"])
async def get_today_reservations(service: ReservationService = Depends(get_reservation_service)):
    """Check-ins and check-outs scheduled for today"""
    return await service.get_today_reservations()

@app.get("/api/reservations/{reservation_id}", response_model=ReservationSummary, tags=["Reservations"])
async def get_reservation(
    reservation_id: UUID,
    service: ReservationService = Depends(get_reservation_service)
):
    """Get reservation by ID"""
    try:
        return await service.get_reservation(reservation_id)
    except HotelBookingError as e:
        raise to_http_exception(e)

@app.post("/api/reservations/{reservation_id}/confirm-payment", response_model=PaymentResponse, tags=["Reservations"])
async def confirm_payment(
    reservation_id: UUID,
    request: ConfirmPaymentRequest,
    service: PaymentService = Depends(get_payment_service)
):
    """Confirm payment of a pending reservation"""
    try:
        payment = await service.confirm_payment(
            reservation_id=reservation_id,
            method=request.payment_method,
            amount=request.amount,
            reference=request.reference
        )
        return _payment_to_response(payment)
    except HotelBookingError as e:
        raise to_http_exception(e)

@app.get("/api/reservations/{reservation_id}/payments", response_model=List[PaymentResponse], tags=["Reservations"])
async def get_payments(
    reservation_id: UUID,
    service: PaymentService = Depends(get_payment_service)
):
    """Payments recorded against a reservation"""
    try:
        return [_payment_to_response(p) for p in await service.get_payments(reservation_id)]
    except HotelBookingError as e:
        raise to_http_exception(e)

@app.post("/api/reservations/{reservation_id}/check-in", response_model=ReservationSummary, tags=["Reservations"])
async def check_in(
    reservation_id: UUID,
    service: ReservationService = Depends(get_reservation_service)
):
    """Check in guest on the scheduled date"""
    try:
        return await service.check_in(reservation_id)
    except HotelBookingError as e:
        raise to_http_exception(e)

@app.post("/api/reservations/{reservation_id}/check-out", response_model=ReservationSummary, tags=["Reservations"])
async def check_out(
    reservation_id: UUID,
    service: ReservationService = Depends(get_reservation_service)
):
    """Check out guest"""
    try:
        return await service.check_out(reservation_id)
    except HotelBookingError as e:
        raise to_http_exception(e)

@app.post("/api/reservations/{reservation_id}/cancel", response_model=CancellationSummary, tags=["Reservations"])
async def cancel_reservation(
    reservation_id: UUID,
    request: CancelReservationRequest,
    service: ReservationService = Depends(get_reservation_service)
):
    """Cancel reservation and report the refund"""
    try:
        return await service.cancel_reservation(reservation_id, request.reason)
    except HotelBookingError as e:
        raise to_http_exception(e)

@app.post("/api/reservations/{reservation_id}/expire", response_model=ReservationSummary, tags=["Reservations"])
async def expire_reservation(
    reservation_id: UUID,
    service: ReservationService = Depends(get_reservation_service)
):
    """Expire an unpaid reservation"""
    try:
        return await service.expire_reservation(reservation_id)
    except HotelBookingError as e:
        raise to_http_exception(e)

# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def _payment_to_response(payment: PaymentRecord) -> PaymentResponse:
    return PaymentResponse(
        payment_id=payment.payment_id,
        reservation_id=payment.reservation_id,
        method=payment.method,
        amount=payment.amount,
        reference=payment.reference,
        confirmed_at=payment.confirmed_at
    )

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
