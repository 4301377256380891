"""Content credential endpoints.

Issuance, lookup, verification recording and owner status changes.
"""
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.api.deps import CheqdClientFactory, get_cheqd_client_factory, get_did_locks
from app.api.models import (
    CreateCredentialRequest,
    CreateCredentialResponse,
    CredentialResponse,
    IssuedCredentialSummary,
    PaymentRails,
    UpdateCredentialStatusRequest,
    UpdateCredentialStatusResponse,
    VerificationListResponse,
    VerificationResponse,
    VerifiedCredentialSummary,
    VerifyCredentialRequest,
    VerifyCredentialResponse,
)
from app.audit import get_audit_logger
from app.config import MAX_PAYMENT_AMOUNT, MIN_PAYMENT_AMOUNT
from app.core.exceptions import (
    AuthenticationError,
    ExternalServiceError,
    NotFoundError,
    PermissionDeniedError,
    PersistenceError,
    ValidationError,
)
from app.credential.assembler import format_amount
from app.db.models import Credential
from app.db.session import get_db
from app.issuance import CredentialIssuanceService, IssuanceRequest
from app.issuance.locks import DIDLockRegistry
from app.store import CREDENTIAL_STATUSES, CredentialStore, UserStore

log = logging.getLogger(__name__)
router = APIRouter(prefix="/api/credentials", tags=["credential"])


def _validate_create(body: CreateCredentialRequest) -> None:
    if not body.content or not body.content.strip():
        raise ValidationError("Content is required")
    if not body.cheqd_api_key:
        raise ValidationError("cheqd API key is required")
    if not MIN_PAYMENT_AMOUNT <= body.payment_amount <= MAX_PAYMENT_AMOUNT:
        raise ValidationError(
            f"Payment amount must be between {format_amount(MIN_PAYMENT_AMOUNT)} "
            f"and {format_amount(MAX_PAYMENT_AMOUNT)} CHEQ"
        )


def _get_credential_or_404(store: CredentialStore, credential_id: str) -> Credential:
    credential = store.get(credential_id)
    if credential is None:
        raise NotFoundError("Credential not found")
    return credential


def _commit(db: Session, operation: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        log.error(f"Commit failed during {operation}: {e}")
        raise PersistenceError(f"Database error during {operation}") from e


def _credential_to_response(credential: Credential) -> CredentialResponse:
    return CredentialResponse(
        id=credential.credential_id,
        issuer_did=credential.issuer_did,
        ai_provider=credential.ai_provider.display_name if credential.ai_provider else None,
        content_hash=credential.content_hash,
        authenticity_score=credential.authenticity_score,
        payment_amount=float(credential.payment_amount),
        payment_address=credential.payment_address,
        status=credential.status,
        verification_count=credential.verification_count,
        revenue_earned=float(credential.revenue_earned),
        created_at=credential.created_at.isoformat() if credential.created_at else "",
        status_list_url=credential.status_list_url,
        metadata=credential.credential_metadata,
    )


# =============================================================================
# Issuance
# =============================================================================


@router.post("/create", response_model=CreateCredentialResponse)
async def create_credential(
    body: CreateCredentialRequest,
    http_request: Request,
    db: Session = Depends(get_db),
    cheqd_factory: CheqdClientFactory = Depends(get_cheqd_client_factory),
    did_locks: DIDLockRegistry = Depends(get_did_locks),
):
    """Issue a content credential on behalf of an AI provider.

    Mints the provider's DID on first use, creates a revocation status list,
    assembles the credential and stores it against the caller.
    """
    _validate_create(body)

    request = IssuanceRequest(
        content=body.content,
        ai_provider=body.ai_provider,
        payment_amount=body.payment_amount,
        user_api_key=body.user_api_key,
    )

    try:
        async with cheqd_factory(body.cheqd_api_key) as cheqd:
            service = CredentialIssuanceService(db, cheqd, did_locks)
            result = await service.issue(request, http_request)
    except (ExternalServiceError, PersistenceError) as e:
        log.error(f"Credential creation failed: {e}")
        get_audit_logger().log_access(
            action="credential.create",
            resource=body.ai_provider,
            status="error",
            details={"error": str(e)},
            request=http_request,
        )
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to create credential", "message": str(e)},
        )

    assembled = result.assembled
    rails = assembled.credential["paymentRails"]
    return CreateCredentialResponse(
        success=True,
        credential=IssuedCredentialSummary(
            id=assembled.credential_id,
            issuer_did=result.identity.did,
            issuer_name=result.provider.display_name,
            content_hash=assembled.content_hash,
            authenticity_score=assembled.authenticity_score,
            timestamp=assembled.issuance_date,
            payment_rails=PaymentRails(
                enabled=rails["enabled"],
                verification_cost=rails["verificationCost"],
                payment_address=rails["paymentAddress"],
            ),
            status_list_url=result.status_list.status_list_credential,
            verification_url=result.verification_url,
        ),
        qr_code=result.qr_code,
        full_credential=assembled.credential,
        user_api_key=result.user_api_key,
    )


# =============================================================================
# Lookup
# =============================================================================


@router.get("/{credential_id}", response_model=CredentialResponse)
def get_credential(credential_id: str, db: Session = Depends(get_db)) -> CredentialResponse:
    """Get a stored credential with its verification counters."""
    credential = _get_credential_or_404(CredentialStore(db), credential_id)
    return _credential_to_response(credential)


@router.get("/{credential_id}/verifications", response_model=VerificationListResponse)
def list_verifications(
    credential_id: str, db: Session = Depends(get_db)
) -> VerificationListResponse:
    """List verification events for a credential, newest first."""
    store = CredentialStore(db)
    credential = _get_credential_or_404(store, credential_id)
    verifications = [
        VerificationResponse(
            verifier_address=v.verifier_address,
            payment_amount=float(v.payment_amount) if v.payment_amount is not None else None,
            payment_tx_hash=v.payment_tx_hash,
            verified_at=v.verified_at.isoformat() if v.verified_at else "",
        )
        for v in store.list_verifications(credential)
    ]
    return VerificationListResponse(
        credential_id=credential.credential_id,
        verifications=verifications,
        count=len(verifications),
    )


# =============================================================================
# Verification
# =============================================================================


@router.post("/{credential_id}/verify", response_model=VerifyCredentialResponse)
def verify_credential(
    credential_id: str,
    body: VerifyCredentialRequest,
    http_request: Request,
    db: Session = Depends(get_db),
) -> VerifyCredentialResponse:
    """Record that a third party verified a credential.

    Appends a verification event and bumps the credential's counters in
    one transaction. No on-chain settlement takes place.
    """
    if not body.verifier_address:
        raise ValidationError("Verifier address is required")

    store = CredentialStore(db)
    credential = _get_credential_or_404(store, credential_id)

    try:
        store.record_verification(credential, body.verifier_address, body.payment_tx_hash)
    except PersistenceError:
        db.rollback()
        raise
    _commit(db, "verification record")

    get_audit_logger().log_access(
        action="credential.verify",
        resource=credential_id,
        details={"verifier_address": body.verifier_address},
        request=http_request,
    )

    return VerifyCredentialResponse(
        success=True,
        message="Verification recorded",
        credential=VerifiedCredentialSummary(
            id=credential.credential_id,
            status=credential.status,
            authenticity_score=credential.authenticity_score,
        ),
    )


# =============================================================================
# Status
# =============================================================================


@router.patch("/{credential_id}/status", response_model=UpdateCredentialStatusResponse)
def update_credential_status(
    credential_id: str,
    body: UpdateCredentialStatusRequest,
    http_request: Request,
    db: Session = Depends(get_db),
) -> UpdateCredentialStatusResponse:
    """Change the local status of a credential. Only its owner may do this.

    The status list entry on cheqd is not touched.
    """
    if body.status not in CREDENTIAL_STATUSES:
        raise ValidationError(
            f"Invalid status: must be one of {', '.join(CREDENTIAL_STATUSES)}"
        )
    if not body.api_key:
        raise AuthenticationError("API key required")

    store = CredentialStore(db)
    credential = _get_credential_or_404(store, credential_id)

    user = UserStore(db).get_by_api_key(body.api_key)
    if user is None or credential.user_id != user.id:
        get_audit_logger().log_access(
            action="credential.status",
            principal_id=user.id if user else None,
            resource=credential_id,
            status="denied",
            request=http_request,
        )
        raise PermissionDeniedError("Not authorized to modify this credential")

    previous = credential.status
    try:
        store.update_status(credential_id, body.status)
    except PersistenceError:
        db.rollback()
        raise
    _commit(db, "credential status update")

    get_audit_logger().log_access(
        action="credential.status",
        principal_id=user.id,
        resource=credential_id,
        details={"from": previous, "to": body.status},
        request=http_request,
    )

    return UpdateCredentialStatusResponse(success=True, id=credential_id, status=body.status)
