"""Platform statistics and AI provider listing."""
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.models import PlatformStatsResponse, ProviderResponse
from app.db.session import get_db
from app.store import AnalyticsStore, ProviderStore

log = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["stats"])


@router.get("/stats", response_model=PlatformStatsResponse)
def platform_stats(db: Session = Depends(get_db)) -> PlatformStatsResponse:
    """Aggregate counts across the platform."""
    stats = AnalyticsStore(db).platform_stats()
    return PlatformStatsResponse(
        total_users=stats.total_users,
        total_credentials=stats.total_credentials,
        total_verifications=stats.total_verifications,
        total_revenue=float(stats.total_revenue),
        active_ai_providers=stats.active_ai_providers,
    )


@router.get("/providers", response_model=list[ProviderResponse])
def list_providers(db: Session = Depends(get_db)) -> list[ProviderResponse]:
    """List active AI providers. Issuer keys are never returned."""
    return [
        ProviderResponse(
            id=p.id,
            name=p.name,
            display_name=p.display_name,
            description=p.description,
            issuer_did=p.issuer_did,
            active=p.active,
        )
        for p in ProviderStore(db).list_active()
    ]
