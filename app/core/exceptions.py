"""
Domain errors raised by the pricing engine, the lifecycle state machine and
the booking/order/payment services.

Every error carries a machine-readable ``code``, a human message and the HTTP
status the API layer maps it to. ``app.main`` renders them as
``{"error": code, "message": message}``.
"""

from typing import Any, Dict, Optional


class AppError(Exception):
    code = "APP_ERROR"
    status_code = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        body = {"error": self.code, "message": self.message}
        if self.details:
            body["details"] = self.details
        return body

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={self.message!r})"


class ValidationError(AppError):
    """Bad input shape or range (guest count over capacity, checkout before checkin...)."""

    code = "VALIDATION_ERROR"
    status_code = 400


class InvalidTransition(AppError):
    """Requested status is not in the allowed-next set for the current status."""

    code = "INVALID_TRANSITION"
    status_code = 409

    def __init__(self, current: str, target: str, message: Optional[str] = None):
        super().__init__(
            message or f"Cannot transition from {current} to {target}",
            details={"current": current, "target": target},
        )
        self.current = current
        self.target = target


class NotFound(AppError):
    code = "NOT_FOUND"
    status_code = 404


class Unauthorized(AppError):
    """Actor lacks rights for the operation (owner-or-admin checks)."""

    code = "UNAUTHORIZED"
    status_code = 403


class AlreadyReviewed(AppError):
    code = "ALREADY_REVIEWED"
    status_code = 409


class NotEligible(AppError):
    code = "NOT_ELIGIBLE"
    status_code = 400


class ConcurrentUpdate(AppError):
    """The row changed underneath this request; the client may retry."""

    code = "CONCURRENT_UPDATE"
    status_code = 409


class ReferenceExhausted(AppError):
    """No free reference number after the allowed number of attempts."""

    code = "REFERENCE_EXHAUSTED"
    status_code = 503
