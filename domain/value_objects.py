"""Domain Value Objects"""
from pydantic import BaseModel, Field, validator
from datetime import date
from decimal import Decimal, ROUND_HALF_UP

from domain.enums import ReservationStatus

CENT = Decimal("0.01")


class DateRange(BaseModel):
    """Value Object for a half-open stay range [check_in, check_out)"""
    check_in: date
    check_out: date

    @validator('check_out')
    def check_out_after_check_in(cls, v, values):
        if 'check_in' in values and v <= values['check_in']:
            raise ValueError('Check-out must be after check-in')
        return v

    def nights(self) -> int:
        """Calculate number of nights"""
        return (self.check_out - self.check_in).days

    def overlaps(self, other: "DateRange") -> bool:
        """Two stays overlap when they share at least one night.

        A stay ending on the day another begins does not overlap it.
        """
        return self.check_in < other.check_out and other.check_in < self.check_out

    class Config:
        frozen = True


class GuestInfo(BaseModel):
    """Guest details supplied with a booking request"""
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    document_number: str = Field(min_length=1)
    email: str
    phone: str

    class Config:
        frozen = True


class RefundQuote(BaseModel):
    """Outcome of applying the cancellation policy to a reservation"""
    days_until_check_in: int
    refund_percentage: int = Field(ge=0, le=100)
    total_amount: Decimal
    refund_amount: Decimal
    penalty_amount: Decimal

    class Config:
        frozen = True


class CancellationPolicy(BaseModel):
    """Value Object for the time-based cancellation policy.

    - ``full_refund_days`` or more before check-in: 100% refund
    - ``partial_refund_days`` up to ``full_refund_days``: partial refund
    - fewer than ``partial_refund_days``: no refund
    - already checked in: no refund, whatever the dates say
    """
    policy_name: str = "Standard"
    partial_refund_days: int = Field(default=2, ge=0)
    full_refund_days: int = Field(default=7, ge=1)
    partial_refund_percentage: int = Field(default=50, ge=0, le=100)

    @validator('full_refund_days')
    def full_after_partial(cls, v, values):
        if 'partial_refund_days' in values and v <= values['partial_refund_days']:
            raise ValueError('full_refund_days must be greater than partial_refund_days')
        return v

    def refund_percentage(self, status: ReservationStatus, days_until_check_in: int) -> int:
        if status == ReservationStatus.ACTIVE:
            return 0
        if days_until_check_in >= self.full_refund_days:
            return 100
        if days_until_check_in >= self.partial_refund_days:
            return self.partial_refund_percentage
        return 0

    def quote(
        self,
        status: ReservationStatus,
        check_in_date: date,
        total_amount: Decimal,
        today: date
    ) -> RefundQuote:
        """Calculate refund and penalty for cancelling on ``today``"""
        days_until_check_in = (check_in_date - today).days
        percentage = self.refund_percentage(status, days_until_check_in)
        refund_amount = (total_amount * percentage / Decimal(100)).quantize(CENT, rounding=ROUND_HALF_UP)

        return RefundQuote(
            days_until_check_in=days_until_check_in,
            refund_percentage=percentage,
            total_amount=total_amount,
            refund_amount=refund_amount,
            penalty_amount=total_amount - refund_amount
        )

    class Config:
        frozen = True
