"""AI provider store."""

import logging
from typing import Any, Optional

from sqlalchemy import update

from app.db.models import AIProvider
from app.store.base import BaseStore

log = logging.getLogger(__name__)


class ProviderStore(BaseStore):
    """Store for AI provider (issuer) rows."""

    def get_active(self, name: str) -> Optional[AIProvider]:
        """Get an active provider by its identity name (e.g. ``claude``)."""
        with self._guard("provider lookup"):
            return (
                self.db.query(AIProvider)
                .filter(AIProvider.name == name, AIProvider.active == True)  # noqa: E712
                .first()
            )

    def get(self, provider_id: str) -> Optional[AIProvider]:
        """Get a provider by primary key, bypassing the identity map."""
        with self._guard("provider lookup"):
            return self.db.get(AIProvider, provider_id, populate_existing=True)

    def list_active(self) -> list[AIProvider]:
        """List active providers ordered by display name."""
        with self._guard("provider list"):
            return (
                self.db.query(AIProvider)
                .filter(AIProvider.active == True)  # noqa: E712
                .order_by(AIProvider.display_name)
                .all()
            )

    def attach_did(self, provider_id: str, did: str, keys: dict[str, Any]) -> bool:
        """Store a freshly minted DID on a provider that has none yet.

        The update only matches rows whose ``issuer_did`` is still NULL, so a
        DID that is already stored is never replaced.

        Returns:
            True if this call stored the DID, False if one was already present
        """
        stmt = (
            update(AIProvider)
            .where(AIProvider.id == provider_id, AIProvider.issuer_did.is_(None))
            .values(issuer_did=did, issuer_keys=keys)
            .execution_options(synchronize_session=False)
        )
        with self._guard("provider DID update"):
            result = self.db.execute(stmt)
        stored = result.rowcount == 1
        if stored:
            log.info(f"Attached DID {did} to provider {provider_id}")
        return stored
