"""Credential issuance workflow."""

from app.issuance.locks import DIDLockRegistry, get_did_lock_registry, reset_did_lock_registry
from app.issuance.service import CredentialIssuanceService, IssuanceRequest, IssuanceResult

__all__ = [
    "DIDLockRegistry",
    "get_did_lock_registry",
    "reset_did_lock_registry",
    "CredentialIssuanceService",
    "IssuanceRequest",
    "IssuanceResult",
]
