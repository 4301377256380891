"""Exception classes for the Contentify issuer.

Each class maps to one HTTP status in ``app.main``:
- ValidationError -> 400
- AuthenticationError -> 401
- PermissionDeniedError -> 403
- NotFoundError -> 404
- ExternalServiceError, PersistenceError -> 500
"""


class ContentifyError(Exception):
    """Base exception for all Contentify errors."""

    status_code: int = 500


class ValidationError(ContentifyError):
    """Malformed or out-of-range request input."""

    status_code = 400


class AuthenticationError(ContentifyError):
    """Caller did not supply an access token."""

    status_code = 401


class PermissionDeniedError(ContentifyError):
    """Caller is known but does not own the resource."""

    status_code = 403


class NotFoundError(ContentifyError):
    """Unknown credential, user or issuer."""

    status_code = 404


class ExternalServiceError(ContentifyError):
    """Non-success response (or no response) from cheqd Studio.

    Attributes:
        body: Raw error body returned by the remote service, if any
        remote_status: HTTP status returned by the remote service, if any
    """

    def __init__(self, message: str, body: str | None = None, remote_status: int | None = None):
        super().__init__(message)
        self.body = body
        self.remote_status = remote_status


class CircuitOpenError(ExternalServiceError):
    """Outbound call short-circuited after repeated upstream failures."""


class PersistenceError(ContentifyError):
    """Database operation failed."""
