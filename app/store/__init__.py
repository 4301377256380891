"""Persistence layer: store classes over a SQLAlchemy session."""

from app.store.analytics import AnalyticsStore, PlatformStats
from app.store.credentials import CREDENTIAL_STATUSES, CredentialStore
from app.store.providers import ProviderStore
from app.store.users import UserStats, UserStore, generate_api_key

__all__ = [
    "AnalyticsStore",
    "PlatformStats",
    "CREDENTIAL_STATUSES",
    "CredentialStore",
    "ProviderStore",
    "UserStats",
    "UserStore",
    "generate_api_key",
]
