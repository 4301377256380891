"""Reference data for a fresh database."""

import logging

from sqlalchemy.orm import Session

from app.db.models import AIProvider, DEFAULT_AI_PROVIDERS

log = logging.getLogger(__name__)


def seed_default_providers(db: Session) -> int:
    """Insert any default AI providers that are missing.

    The caller owns the transaction.

    Returns:
        Number of providers added
    """
    existing = {name for (name,) in db.query(AIProvider.name).all()}
    added = 0
    for entry in DEFAULT_AI_PROVIDERS:
        if entry["name"] in existing:
            continue
        db.add(AIProvider(active=True, **entry))
        added += 1
    if added:
        db.flush()
        log.info(f"Seeded {added} default AI providers")
    return added
