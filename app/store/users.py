"""User store: access-token lookup, creation, credits and per-user stats."""

import logging
import secrets
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from sqlalchemy import func, update

from app.config import DEFAULT_USER_CREDITS, DEFAULT_USER_PLAN
from app.db.models import Credential, User
from app.store.base import BaseStore

log = logging.getLogger(__name__)


def generate_api_key() -> str:
    """Generate a fresh user access token."""
    return f"ck_{secrets.token_urlsafe(24)}"


@dataclass
class UserStats:
    """Aggregates over one user's credentials."""

    total_credentials: int
    total_verifications: int
    total_revenue: Decimal
    avg_authenticity_score: Optional[float]


class UserStore(BaseStore):
    """Store for user rows."""

    def get_by_api_key(self, api_key: str) -> Optional[User]:
        """Get a user by access token.

        Args:
            api_key: The user's access token

        Returns:
            User if found, None otherwise
        """
        with self._guard("user lookup"):
            return self.db.query(User).filter(User.api_key == api_key).first()

    def create(self, api_key: str, email: Optional[str] = None) -> User:
        """Insert a new user with the default plan and credits.

        Raises:
            PersistenceError: If the token or email is already taken
        """
        user = User(
            api_key=api_key,
            email=email,
            plan=DEFAULT_USER_PLAN,
            credits_remaining=DEFAULT_USER_CREDITS,
        )
        with self._guard("user create"):
            self.db.add(user)
            self.db.flush()
        log.info(f"Created user {user.id}")
        return user

    def decrement_credits(self, user_id: str) -> bool:
        """Take one credit from a user, never going below zero.

        A single conditional UPDATE, so concurrent callers cannot race each
        other past zero.

        Returns:
            True if a credit was taken, False if the user had none left
        """
        stmt = (
            update(User)
            .where(User.id == user_id, User.credits_remaining > 0)
            .values(credits_remaining=User.credits_remaining - 1)
            .execution_options(synchronize_session=False)
        )
        with self._guard("credit decrement"):
            result = self.db.execute(stmt)
        if result.rowcount == 0:
            log.info(f"User {user_id} has no credits left to decrement")
            return False
        return True

    def get_stats(self, user_id: str) -> UserStats:
        """Aggregate counters over a user's credentials."""
        with self._guard("user stats"):
            row = (
                self.db.query(
                    func.count(Credential.id),
                    func.coalesce(func.sum(Credential.verification_count), 0),
                    func.coalesce(func.sum(Credential.revenue_earned), 0),
                    func.avg(Credential.authenticity_score),
                )
                .filter(Credential.user_id == user_id)
                .one()
            )
        total, verifications, revenue, avg_score = row
        return UserStats(
            total_credentials=int(total),
            total_verifications=int(verifications),
            total_revenue=Decimal(str(revenue)),
            avg_authenticity_score=float(avg_score) if avg_score is not None else None,
        )
