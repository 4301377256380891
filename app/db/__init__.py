"""Database module for the Contentify issuer.

This module provides SQLAlchemy ORM models and session management for
users, AI providers, credentials, verifications and analytics events.
"""

from app.db.models import (
    Base,
    User,
    AIProvider,
    Credential,
    Verification,
    AnalyticsEvent,
)
from app.db.session import get_db, get_db_session, engine, SessionLocal

__all__ = [
    "Base",
    "User",
    "AIProvider",
    "Credential",
    "Verification",
    "AnalyticsEvent",
    "get_db",
    "get_db_session",
    "engine",
    "SessionLocal",
]
