"""Health check and version endpoints."""
import logging
import os
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.models import HealthResponse, VersionResponse
from app.config import SERVICE_NAME, SERVICE_VERSION
from app.db.session import check_database, get_db

log = logging.getLogger(__name__)
router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
def health(db: Session = Depends(get_db)) -> HealthResponse:
    """Health check endpoint.

    Always answers 200; an unreachable database is reported in the body.
    """
    connected = check_database(db)
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc).isoformat(),
        database="connected" if connected else "disconnected",
    )


@router.get("/version", response_model=VersionResponse)
def version() -> VersionResponse:
    """Return service name, version and deployed commit."""
    return VersionResponse(
        service=SERVICE_NAME,
        version=SERVICE_VERSION,
        git_sha=os.getenv("GIT_SHA", "unknown"),
    )
