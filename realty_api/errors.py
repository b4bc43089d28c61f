"""
SSP Realty - Error Types
==========================
Exception hierarchy shared by the auth gate, the record stores and the
resource handlers.

Every error carries a short, static message that is safe to return to the
client and the HTTP status it maps to. Driver-level detail (e.g. a MongoDB
server message) is only ever logged, never placed in a response body.

Hierarchy:
    RealtyError          -> base, rendered as {"error": message}
    |- AuthError         -> 401, tagged with an AuthFailure reason
    |- NotFoundError     -> 404
    |- StoreError        -> 500, raised by record stores on driver failure
    |- OperationFailed   -> 500, raised by handlers with a per-route message
    |- BadRequestError   -> 400, body of a protected route failed to parse
"""

from enum import Enum


class AuthFailure(str, Enum):
    """Why an authentication or authorization attempt was rejected."""
    NO_TOKEN = "no_token"
    INVALID_TOKEN = "invalid_token"
    EXPIRED = "expired"
    INVALID_CREDENTIALS = "invalid_credentials"
    CONFIGURATION_MISSING = "configuration_missing"


AUTH_MESSAGES = {
    AuthFailure.NO_TOKEN: "No token provided",
    AuthFailure.INVALID_TOKEN: "Invalid or expired token",
    AuthFailure.EXPIRED: "Invalid or expired token",
    AuthFailure.INVALID_CREDENTIALS: "Invalid credentials",
    AuthFailure.CONFIGURATION_MISSING: "Admin login is not configured",
}


class RealtyError(Exception):
    """
    Base exception for all SSP Realty errors.

    Attributes:
        message:     Client-safe message placed in the response body.
        http_status: Status code the global handler responds with.
    """

    http_status = 500

    def __init__(self, message: str, http_status: int | None = None):
        super().__init__(message)
        self.message = message
        if http_status is not None:
            self.http_status = http_status

    def to_response(self) -> dict:
        """Render the standard error body."""
        return {"error": self.message}


class AuthError(RealtyError):
    """Rejected login or bearer token."""

    http_status = 401

    def __init__(self, reason: AuthFailure):
        super().__init__(AUTH_MESSAGES[reason])
        self.reason = reason


class NotFoundError(RealtyError):
    """No record matched the requested external id."""

    http_status = 404


class StoreError(RealtyError):
    """
    A record store operation failed.

    The message holds driver detail for the server log. Handlers convert
    this into an OperationFailed before it reaches the client.
    """

    def __init__(self, message: str, operation: str, collection: str):
        super().__init__(message)
        self.operation = operation
        self.collection = collection


class OperationFailed(RealtyError):
    """Generic server-side failure reported with a static message."""


class BadRequestError(RealtyError):
    """The request body is not JSON or does not fit the record model."""

    http_status = 400

    def __init__(self, message: str = "Invalid request body"):
        super().__init__(message)
