"""Mapping of domain error kinds onto HTTP responses"""
from fastapi import HTTPException

from domain.exceptions import ErrorKind, HotelBookingError

STATUS_BY_KIND = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.INVALID_DATE_RANGE: 400,
    ErrorKind.VALIDATION: 422,
    ErrorKind.CONFLICT: 409,
    ErrorKind.STATE_CONFLICT: 409,
}


def to_http_exception(error: HotelBookingError) -> HTTPException:
    return HTTPException(
        status_code=STATUS_BY_KIND[error.kind],
        detail={"error": error.kind.value, "message": error.message}
    )
