"""Content credential issuance workflow.

Steps, strictly in order:
1. resolve (or create) the calling user
2. resolve the AI provider
3. get or mint the provider's DID (serialized per provider)
4. create a revocation status list
5. assemble the credential and render its QR code
6. persist credential, credit decrement and analytics event in one transaction
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from fastapi import Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.audit import get_audit_logger
from app.cheqd.client import CheqdStudioClient
from app.cheqd.identity import IdentityClient, IssuerIdentity
from app.cheqd.status_list import StatusList, StatusListClient
from app.config import CONTENT_PREVIEW_LENGTH, get_network_label, get_verification_url
from app.core.exceptions import PersistenceError, ValidationError
from app.credential.assembler import AssembledCredential, build_content_credential, format_amount
from app.credential.qr import build_qr_payload, render_qr_data_url
from app.db.models import AIProvider, Credential, User
from app.issuance.locks import DIDLockRegistry
from app.store import AnalyticsStore, CredentialStore, ProviderStore, UserStore, generate_api_key

log = logging.getLogger(__name__)

CREDENTIAL_CREATED_EVENT = "credential_created"


@dataclass
class IssuanceRequest:
    """Validated input for one issuance."""

    content: str
    ai_provider: str
    payment_amount: float
    user_api_key: Optional[str] = None


@dataclass
class IssuanceResult:
    """Everything the create endpoint reports back."""

    user: User
    user_api_key: str
    provider: AIProvider
    identity: IssuerIdentity
    status_list: StatusList
    assembled: AssembledCredential
    qr_code: str
    record: Credential
    payment_amount: float

    @property
    def verification_url(self) -> str:
        return get_verification_url(self.assembled.credential_id)


class CredentialIssuanceService:
    """Runs the issuance workflow for one request.

    All collaborators are passed in, so a request never touches ambient
    globals and tests can supply fakes.
    """

    def __init__(
        self,
        db: Session,
        cheqd: CheqdStudioClient,
        did_locks: DIDLockRegistry,
    ):
        self.db = db
        self.cheqd = cheqd
        self.did_locks = did_locks
        self.users = UserStore(db)
        self.providers = ProviderStore(db)
        self.credentials = CredentialStore(db)
        self.analytics = AnalyticsStore(db)

    async def issue(
        self, request: IssuanceRequest, http_request: Request | None = None
    ) -> IssuanceResult:
        """Issue a content credential.

        Raises:
            ValidationError: Unknown AI provider
            ExternalServiceError: cheqd Studio failure
            PersistenceError: Database failure
        """
        user, api_key = self._resolve_user(request.user_api_key)

        provider = self.providers.get_active(request.ai_provider)
        if provider is None:
            raise ValidationError(f"Unknown AI provider: {request.ai_provider}")

        identity = await self._ensure_identity(provider, http_request)

        status_list = await StatusListClient(self.cheqd).create_status_list(
            identity.did, request.payment_amount
        )

        assembled = build_content_credential(
            content=request.content,
            issuer_name=provider.display_name,
            issuer_did=identity.did,
            status_list_credential=status_list.status_list_credential,
            payment_address=status_list.payment_address,
            payment_amount=request.payment_amount,
            network=self.cheqd.network,
        )

        qr_code = render_qr_data_url(
            build_qr_payload(
                credential_id=assembled.credential_id,
                issuer_name=provider.display_name,
                issuer_did=identity.did,
                network=get_network_label(self.cheqd.network),
                timestamp=assembled.issuance_date,
                authenticity_score=assembled.authenticity_score,
                content_hash=assembled.content_hash,
                verification_cost=f"{format_amount(request.payment_amount)} CHEQ",
                payment_address=status_list.payment_address,
                verification_url=get_verification_url(assembled.credential_id),
            )
        )

        record = self._persist(user, provider, identity, status_list, assembled, qr_code, request)

        get_audit_logger().log_access(
            action="credential.create",
            principal_id=user.id,
            resource=assembled.credential_id,
            details={
                "ai_provider": provider.name,
                "authenticity_score": assembled.authenticity_score,
            },
            request=http_request,
        )

        return IssuanceResult(
            user=user,
            user_api_key=api_key,
            provider=provider,
            identity=identity,
            status_list=status_list,
            assembled=assembled,
            qr_code=qr_code,
            record=record,
            payment_amount=request.payment_amount,
        )

    def _resolve_user(self, api_key: Optional[str]) -> tuple[User, str]:
        """Look up the caller by token, creating the user if needed.

        Callers without a token get a new user with a generated token.
        """
        if api_key:
            user = self.users.get_by_api_key(api_key)
            if user is not None:
                return user, api_key
        else:
            api_key = generate_api_key()

        try:
            user = self.users.create(api_key)
            self._commit("user create")
        except PersistenceError:
            # A concurrent request may have created the same token first
            self.db.rollback()
            user = self.users.get_by_api_key(api_key)
            if user is None:
                raise
        return user, api_key

    async def _ensure_identity(
        self, provider: AIProvider, http_request: Request | None
    ) -> IssuerIdentity:
        """Return the provider's DID, minting and storing it on first use."""
        if provider.has_identity:
            return IssuerIdentity(did=provider.issuer_did, keys=provider.issuer_keys)

        async with self.did_locks.lock_for(provider.name):
            # Another request may have minted while we waited for the lock
            provider = self.providers.get(provider.id)
            identity = await IdentityClient(self.cheqd).get_or_create_did(
                provider.display_name,
                provider.issuer_did,
                provider.issuer_keys,
            )
            if not identity.created:
                return identity

            try:
                stored = self.providers.attach_did(provider.id, identity.did, identity.keys)
                self._commit("provider DID update")
            except PersistenceError:
                self.db.rollback()
                raise

            if stored:
                get_audit_logger().log_access(
                    action="provider.did_minted",
                    resource=provider.name,
                    details={"did": identity.did},
                    request=http_request,
                )
                return identity

            # Lost a race with another process; the stored DID wins
            provider = self.providers.get(provider.id)
            log.warning(
                f"Discarding DID {identity.did}: provider {provider.name} "
                f"already has {provider.issuer_did}"
            )
            return IssuerIdentity(did=provider.issuer_did, keys=provider.issuer_keys)

    def _persist(
        self,
        user: User,
        provider: AIProvider,
        identity: IssuerIdentity,
        status_list: StatusList,
        assembled: AssembledCredential,
        qr_code: str,
        request: IssuanceRequest,
    ) -> Credential:
        """Store the credential, take a credit and log analytics atomically."""
        try:
            record = self.credentials.create(
                user_id=user.id,
                ai_provider_id=provider.id,
                credential_id=assembled.credential_id,
                issuer_did=identity.did,
                content_hash=assembled.content_hash,
                content_preview=request.content[:CONTENT_PREVIEW_LENGTH],
                authenticity_score=assembled.authenticity_score,
                payment_amount=Decimal(str(request.payment_amount)),
                payment_address=status_list.payment_address,
                status_list_url=status_list.status_list_credential,
                metadata={"credential": assembled.credential, "qrCode": qr_code},
            )
            self.users.decrement_credits(user.id)
            self.analytics.record_event(
                user.id,
                CREDENTIAL_CREATED_EVENT,
                {
                    "aiProvider": request.ai_provider,
                    "authenticityScore": assembled.authenticity_score,
                    "paymentAmount": request.payment_amount,
                },
            )
            self._commit("credential create")
        except PersistenceError:
            self.db.rollback()
            raise
        return record

    def _commit(self, operation: str) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            log.error(f"Commit failed during {operation}: {e}")
            raise PersistenceError(f"Database error during {operation}") from e
