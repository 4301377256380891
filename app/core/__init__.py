# Contentify core - exceptions and logging

from app.core.exceptions import (
    ContentifyError,
    ValidationError,
    AuthenticationError,
    PermissionDeniedError,
    NotFoundError,
    ExternalServiceError,
    CircuitOpenError,
    PersistenceError,
)
from app.core.logging import configure_logging, JsonFormatter

__all__ = [
    "ContentifyError",
    "ValidationError",
    "AuthenticationError",
    "PermissionDeniedError",
    "NotFoundError",
    "ExternalServiceError",
    "CircuitOpenError",
    "PersistenceError",
    "configure_logging",
    "JsonFormatter",
]
