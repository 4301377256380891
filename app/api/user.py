"""User dashboard endpoint."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.models import (
    CredentialListItem,
    UserCredentialsResponse,
    UserProfile,
    UserStatsResponse,
)
from app.core.exceptions import AuthenticationError, NotFoundError
from app.db.session import get_db
from app.store import CredentialStore, UserStore

log = logging.getLogger(__name__)
router = APIRouter(prefix="/api/user", tags=["user"])


@router.get("/credentials", response_model=UserCredentialsResponse)
def get_user_credentials(
    api_key: Optional[str] = Query(None, alias="apiKey", description="User access token"),
    limit: int = Query(50, ge=1, le=100, description="Maximum credentials to return"),
    offset: int = Query(0, ge=0, description="Credentials to skip"),
    db: Session = Depends(get_db),
) -> UserCredentialsResponse:
    """Return the caller's profile, aggregate stats and credentials.

    Credentials are listed newest first.
    """
    if not api_key:
        raise AuthenticationError("API key required")

    users = UserStore(db)
    user = users.get_by_api_key(api_key)
    if user is None:
        raise NotFoundError("User not found")

    stats = users.get_stats(user.id)
    credentials = CredentialStore(db).list_for_user(user.id, limit=limit, offset=offset)

    return UserCredentialsResponse(
        user=UserProfile(
            email=user.email,
            plan=user.plan,
            credits_remaining=user.credits_remaining,
        ),
        stats=UserStatsResponse(
            total_credentials=stats.total_credentials,
            total_verifications=stats.total_verifications,
            total_revenue=float(stats.total_revenue),
            avg_authenticity_score=stats.avg_authenticity_score,
        ),
        credentials=[
            CredentialListItem(
                id=c.credential_id,
                ai_provider=c.ai_provider.display_name if c.ai_provider else None,
                issuer_did=c.issuer_did,
                content_hash=c.content_hash,
                content_preview=c.content_preview,
                authenticity_score=c.authenticity_score,
                payment_amount=float(c.payment_amount),
                status=c.status,
                verification_count=c.verification_count,
                revenue_earned=float(c.revenue_earned),
                created_at=c.created_at.isoformat() if c.created_at else "",
            )
            for c in credentials
        ],
    )
