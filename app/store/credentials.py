"""Credential store: issued credentials, status changes and verifications."""

import logging
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import update
from sqlalchemy.orm import joinedload

from app.db.models import Credential, Verification
from app.store.base import BaseStore

log = logging.getLogger(__name__)

CREDENTIAL_STATUSES = ("active", "revoked", "suspended")


class CredentialStore(BaseStore):
    """Store for credential and verification rows."""

    def create(
        self,
        user_id: str,
        ai_provider_id: str,
        credential_id: str,
        issuer_did: str,
        content_hash: str,
        content_preview: str,
        authenticity_score: int,
        payment_amount: Decimal,
        payment_address: Optional[str],
        status_list_url: Optional[str],
        metadata: dict[str, Any],
    ) -> Credential:
        """Insert an issued credential.

        Raises:
            PersistenceError: If the credential id already exists or the
                insert fails
        """
        credential = Credential(
            user_id=user_id,
            ai_provider_id=ai_provider_id,
            credential_id=credential_id,
            issuer_did=issuer_did,
            content_hash=content_hash,
            content_preview=content_preview,
            authenticity_score=authenticity_score,
            payment_amount=payment_amount,
            payment_address=payment_address,
            status_list_url=status_list_url,
            status="active",
            verification_count=0,
            revenue_earned=Decimal("0"),
            credential_metadata=metadata,
        )
        with self._guard("credential create"):
            self.db.add(credential)
            self.db.flush()
        log.info(f"Saved credential {credential_id}")
        return credential

    def get(self, credential_id: str) -> Optional[Credential]:
        """Get a credential by its URN, with issuer and owner loaded.

        Args:
            credential_id: Credential identifier (``urn:uuid:...``)

        Returns:
            Credential if found, None otherwise
        """
        with self._guard("credential lookup"):
            return (
                self.db.query(Credential)
                .options(joinedload(Credential.ai_provider), joinedload(Credential.user))
                .filter(Credential.credential_id == credential_id)
                .first()
            )

    def list_for_user(self, user_id: str, limit: int = 50, offset: int = 0) -> list[Credential]:
        """List a user's credentials, newest first."""
        with self._guard("credential list"):
            return (
                self.db.query(Credential)
                .options(joinedload(Credential.ai_provider))
                .filter(Credential.user_id == user_id)
                .order_by(Credential.created_at.desc(), Credential.id)
                .limit(limit)
                .offset(offset)
                .all()
            )

    def update_status(self, credential_id: str, status: str) -> bool:
        """Set the local status of a credential.

        Returns:
            True if a row was updated
        """
        if status not in CREDENTIAL_STATUSES:
            raise ValueError(f"Unknown credential status: {status}")
        stmt = (
            update(Credential)
            .where(Credential.credential_id == credential_id)
            .values(status=status)
            .execution_options(synchronize_session=False)
        )
        with self._guard("credential status update"):
            result = self.db.execute(stmt)
        return result.rowcount == 1

    def record_verification(
        self,
        credential: Credential,
        verifier_address: str,
        payment_tx_hash: Optional[str] = None,
    ) -> Verification:
        """Append a verification event and bump the credential counters.

        ``verification_count`` grows by one and ``revenue_earned`` by the
        credential's stored payment amount, both as SQL expressions so
        concurrent verifications do not lose updates.
        """
        verification = Verification(
            credential_id=credential.id,
            verifier_address=verifier_address,
            payment_amount=credential.payment_amount,
            payment_tx_hash=payment_tx_hash,
        )
        stmt = (
            update(Credential)
            .where(Credential.id == credential.id)
            .values(
                verification_count=Credential.verification_count + 1,
                revenue_earned=Credential.revenue_earned + credential.payment_amount,
            )
            .execution_options(synchronize_session=False)
        )
        with self._guard("verification record"):
            self.db.add(verification)
            self.db.flush()
            self.db.execute(stmt)
        log.info(f"Recorded verification of {credential.credential_id} by {verifier_address}")
        return verification

    def list_verifications(self, credential: Credential) -> list[Verification]:
        """List verification events for a credential, newest first."""
        with self._guard("verification list"):
            return (
                self.db.query(Verification)
                .filter(Verification.credential_id == credential.id)
                .order_by(Verification.verified_at.desc())
                .all()
            )
