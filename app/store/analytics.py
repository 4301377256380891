"""Analytics store: append-only usage events and platform aggregates."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import func, select

from app.db.models import AIProvider, AnalyticsEvent, Credential, User
from app.store.base import BaseStore


@dataclass
class PlatformStats:
    """Platform-wide counters."""

    total_users: int
    total_credentials: int
    total_verifications: int
    total_revenue: Decimal
    active_ai_providers: int


class AnalyticsStore(BaseStore):
    """Store for analytics events and aggregate reporting."""

    def record_event(
        self, user_id: str, event_type: str, event_data: Optional[dict[str, Any]] = None
    ) -> AnalyticsEvent:
        """Append an analytics event."""
        event = AnalyticsEvent(user_id=user_id, event_type=event_type, event_data=event_data)
        with self._guard("analytics record"):
            self.db.add(event)
            self.db.flush()
        return event

    def count_events(self, user_id: str, event_type: Optional[str] = None) -> int:
        """Count a user's events, optionally of one type."""
        query = self.db.query(func.count(AnalyticsEvent.id)).filter(
            AnalyticsEvent.user_id == user_id
        )
        if event_type:
            query = query.filter(AnalyticsEvent.event_type == event_type)
        with self._guard("analytics count"):
            return int(query.scalar() or 0)

    def platform_stats(self) -> PlatformStats:
        """Aggregate counts across the whole platform.

        Each figure is its own scalar subquery so the totals are not
        multiplied by a join.
        """
        stmt = select(
            select(func.count(User.id)).scalar_subquery(),
            select(func.count(Credential.id)).scalar_subquery(),
            select(func.coalesce(func.sum(Credential.verification_count), 0)).scalar_subquery(),
            select(func.coalesce(func.sum(Credential.revenue_earned), 0)).scalar_subquery(),
            select(func.count(AIProvider.id))
            .where(AIProvider.active == True)  # noqa: E712
            .scalar_subquery(),
        )
        with self._guard("platform stats"):
            users, credentials, verifications, revenue, providers = self.db.execute(stmt).one()
        return PlatformStats(
            total_users=int(users),
            total_credentials=int(credentials),
            total_verifications=int(verifications),
            total_revenue=Decimal(str(revenue)),
            active_ai_providers=int(providers),
        )
