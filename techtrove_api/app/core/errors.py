"""
Domain errors raised by the service layer.

Each error carries the HTTP status it maps to.  The exception
handlers registered in ``main.create_app`` turn any ``ServiceError``
into a JSON body of the form ``{"error": "<message>"}``.  There are
no machine-readable error codes; the message is free text.
"""

from fastapi import status


class ServiceError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(ServiceError):
    """Missing or malformed input."""

    status_code = status.HTTP_400_BAD_REQUEST


class AuthError(ServiceError):
    """Credentials did not match.  The message never says which part failed."""

    status_code = status.HTTP_401_UNAUTHORIZED


class NotFoundError(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(ServiceError):
    """A unique value (the user email) is already taken."""

    status_code = status.HTTP_409_CONFLICT


class StoreError(ServiceError):
    """Any failure reported by the document store."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
