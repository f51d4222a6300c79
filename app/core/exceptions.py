"""Custom application exceptions."""

from fastapi import HTTPException, status


class AppException(HTTPException):
    """Base application exception."""

    def __init__(
        self,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail: str = "An unexpected error occurred",
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(status_code=status_code, detail=detail, headers=headers)


class BadRequestError(AppException):
    """Malformed or user-correctable request."""

    def __init__(self, detail: str = "Invalid request") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class InvalidRange(BadRequestError):
    """Check-out is not after check-in."""

    def __init__(self, detail: str = "check_out must be after check_in") -> None:
        super().__init__(detail=detail)


class InvalidPrice(BadRequestError):
    """Per-night price is not positive."""

    def __init__(self, detail: str = "Price per night must be greater than zero") -> None:
        super().__init__(detail=detail)


class InvalidAmount(BadRequestError):
    """Order amount is not positive."""

    def __init__(self, detail: str = "Invalid amount") -> None:
        super().__init__(detail=detail)


class NotFoundError(AppException):
    """Resource not found exception."""

    def __init__(self, resource: str = "Resource", identifier: str | None = None) -> None:
        detail = f"{resource} not found"
        if identifier:
            detail = f"{resource} with ID '{identifier}' not found"
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class AuthenticationError(AppException):
    """Authentication failed exception."""

    def __init__(self, detail: str = "Authentication failed") -> None:
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class AuthorizationError(AppException):
    """Authorization denied exception."""

    def __init__(self, detail: str = "You don't have permission to access this resource") -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class DatesNotAvailable(AppException):
    """Dates not available exception."""

    def __init__(
        self,
        detail: str = "Selected dates are no longer available. Please choose different dates.",
    ) -> None:
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class PaymentAlreadyUsed(AppException):
    """A gateway order has already confirmed a booking."""

    def __init__(self, detail: str = "This payment has already been used for a booking") -> None:
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class InvalidBookingStatus(AppException):
    """Invalid booking status for operation."""

    def __init__(self, detail: str = "This operation is not allowed for the current booking status") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class GatewayUnavailable(AppException):
    """Payment gateway could not be reached or rejected the request."""

    def __init__(self, detail: str | None = None) -> None:
        message = "Payment gateway is unavailable"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(status_code=status.HTTP_502_BAD_GATEWAY, detail=message)


class RateLimitExceeded(AppException):
    """Rate limit exceeded exception."""

    def __init__(self, detail: str = "Too many requests. Please try again later.") -> None:
        super().__init__(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail=detail)


class ReceiptGenerationError(Exception):
    """Receipt could not be written. Never fails the parent booking operation."""

    def __init__(self, booking_id: str, reason: str) -> None:
        self.booking_id = booking_id
        super().__init__(f"Receipt for booking {booking_id} could not be generated: {reason}")
