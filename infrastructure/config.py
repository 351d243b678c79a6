"""Application settings, read from HOTEL_* environment variables"""
import os
from typing import Mapping, Optional

from pydantic import BaseModel, Field, validator

from domain.value_objects import CancellationPolicy

ENV_PREFIX = "HOTEL_"


class Settings(BaseModel):
    app_name: str = "Hotel Booking API"
    timezone: str = "UTC"
    log_level: str = "INFO"
    max_stay_nights: int = Field(default=30, ge=1)
    reservation_number_attempts: int = Field(default=5, ge=1)
    partial_refund_days: int = Field(default=2, ge=0)
    full_refund_days: int = Field(default=7, ge=1)
    partial_refund_percentage: int = Field(default=50, ge=0, le=100)

    @validator('log_level')
    def normalise_log_level(cls, v):
        return v.upper()

    @validator('full_refund_days')
    def full_after_partial(cls, v, values):
        if 'partial_refund_days' in values and v <= values['partial_refund_days']:
            raise ValueError('full_refund_days must be greater than partial_refund_days')
        return v

    def cancellation_policy(self) -> CancellationPolicy:
        return CancellationPolicy(
            partial_refund_days=self.partial_refund_days,
            full_refund_days=self.full_refund_days,
            partial_refund_percentage=self.partial_refund_percentage
        )

    class Config:
        frozen = True


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build settings from the environment; unset variables keep their defaults"""
    environ = os.environ if environ is None else environ
    values = {}
    for name in Settings.model_fields:
        raw = environ.get(ENV_PREFIX + name.upper())
        if raw is not None:
            values[name] = raw
    return Settings(**values)
