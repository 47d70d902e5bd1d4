"""Domain errors raised by pricing and reservation flows.

Each error carries an ``ErrorCode`` and a user-facing message. The HTTP
layer maps codes to status codes (see ``rental.api.exceptions``).
"""

from enum import Enum
from typing import Optional


class ErrorCode(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    MINIMUM_NIGHTS_NOT_MET = "MINIMUM_NIGHTS_NOT_MET"
    DATES_UNAVAILABLE = "DATES_UNAVAILABLE"
    BOOKING_LOCKED = "BOOKING_LOCKED"


class RentalError(Exception):
    """Base class for errors surfaced to API callers."""

    code: ErrorCode = ErrorCode.NOT_FOUND

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(RentalError):
    code = ErrorCode.NOT_FOUND

    def __init__(self, entity: str, entity_id: object):
        super().__init__(f"{entity} not found")
        self.entity = entity
        self.entity_id = entity_id


class MinimumStayViolation(RentalError):
    """Requested stay is shorter than a MIN_NIGHTS rule allows."""

    code = ErrorCode.MINIMUM_NIGHTS_NOT_MET

    def __init__(self, minimum_nights: str, nights: Optional[int] = None):
        super().__init__(f"Minimum {minimum_nights} gece kalınması gerekiyor")
        self.minimum_nights = minimum_nights
        self.nights = nights


class BungalowUnavailable(RentalError):
    code = ErrorCode.DATES_UNAVAILABLE

    def __init__(self, message: str = "Seçilen tarihlerde bungalov müsait değil"):
        super().__init__(message)


class BookingInProgress(RentalError):
    """Another request holds the booking lock for this bungalow."""

    code = ErrorCode.BOOKING_LOCKED

    def __init__(self, message: str = "Bu bungalov için başka bir rezervasyon işleniyor"):
        super().__init__(message)
