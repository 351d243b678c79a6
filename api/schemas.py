"""API Schemas - Request and Response DTOs"""
from pydantic import BaseModel, Field
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID
from typing import Optional

from domain.enums import PaymentMethod, RoomType
from domain.value_objects import GuestInfo

PHONE_PATTERN = r"^\+?[0-9\s\-()]{7,20}$"
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


# ============================================================================
# ROOM SCHEMAS
# ============================================================================

class CreateRoomRequest(BaseModel):
    """Register room request DTO"""
    room_number: str = Field(min_length=1, max_length=20)
    room_type: RoomType
    capacity: int = Field(ge=1, le=10)
    price_per_night: Decimal = Field(gt=0)


# ============================================================================
# RESERVATION SCHEMAS
# ============================================================================

class GuestRequest(BaseModel):
    """Guest details request DTO"""
    first_name: str = Field(min_length=2, max_length=100)
    last_name: str = Field(min_length=2, max_length=100)
    document_number: str = Field(min_length=5, max_length=50)
    email: str = Field(max_length=150, pattern=EMAIL_PATTERN)
    phone: str = Field(pattern=PHONE_PATTERN)

    def to_guest_info(self) -> GuestInfo:
        return GuestInfo(
            first_name=self.first_name,
            last_name=self.last_name,
            document_number=self.document_number,
            email=self.email,
            phone=self.phone
        )


class CreateReservationRequest(BaseModel):
    """Create reservation request DTO"""
    guest: GuestRequest
    room_id: UUID
    check_in_date: date
    check_out_date: date
    number_of_guests: int = Field(ge=1, le=10)


class ConfirmPaymentRequest(BaseModel):
    """Confirm payment request DTO; reference is mandatory for CARD and TRANSFER"""
    payment_method: str = Field(min_length=1)
    amount: Decimal = Field(gt=0)
    reference: Optional[str] = None


class CancelReservationRequest(BaseModel):
    """Cancel reservation request DTO"""
    reason: str = Field(min_length=1, max_length=500)


class PaymentResponse(BaseModel):
    """Payment response DTO"""
    payment_id: UUID
    reservation_id: UUID
    method: PaymentMethod
    amount: Decimal
    reference: Optional[str] = None
    confirmed_at: datetime
