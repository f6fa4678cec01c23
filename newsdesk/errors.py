"""
Domain errors raised by services and the authorization gate.

Each carries the HTTP status it maps to; ``main.py`` renders all of them
as ``{"error": message, **extra}``.
"""


class ApiError(Exception):
    status_code = 500

    def __init__(self, message: str, **extra) -> None:
        super().__init__(message)
        self.message = message
        self.extra = extra

    def to_dict(self) -> dict:
        return {"error": self.message, **self.extra}


class ValidationError(ApiError):
    """Missing or malformed input."""

    status_code = 400


class AuthenticationError(ApiError):
    """Credentials did not match."""

    status_code = 401


class Forbidden(ApiError):
    """Missing identity, wrong role, or not the owner."""

    status_code = 403


class NotFound(ApiError):
    status_code = 404


class StoreError(ApiError):
    status_code = 500
