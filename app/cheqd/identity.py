"""Issuer identity (DID) provisioning through cheqd Studio."""

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Optional

from app.cheqd.client import CheqdStudioClient
from app.config import APP_URL
from app.core.exceptions import ExternalServiceError

log = logging.getLogger(__name__)

KEY_TYPE = "Ed25519"
VERIFICATION_METHOD_TYPE = "Ed25519VerificationKey2018"
DID_CONTEXT = ["https://www.w3.org/ns/did/v1"]


@dataclass
class IssuerIdentity:
    """A DID together with the key document it was created from."""

    did: str
    keys: dict[str, Any]
    created: bool = False  # True when minted by this call


def service_fragment(display_name: str) -> str:
    """DID service id fragment for an issuer, e.g. ``claude-(anthropic)``."""
    return re.sub(r"\s+", "-", display_name.lower())


class IdentityClient:
    """Mints or reuses the DID an AI provider issues credentials under."""

    def __init__(self, client: CheqdStudioClient):
        self._client = client

    async def get_or_create_did(
        self,
        display_name: str,
        existing_did: Optional[str] = None,
        existing_keys: Optional[dict[str, Any]] = None,
    ) -> IssuerIdentity:
        """Return the stored identity, or mint a new keypair and DID.

        Args:
            display_name: Provider display name (used for the DID service entry)
            existing_did: Previously stored DID, if any
            existing_keys: Previously stored key document, if any

        Returns:
            IssuerIdentity; ``created`` is False when both inputs were reused

        Raises:
            ExternalServiceError: If key or DID creation fails
        """
        if existing_did and existing_keys:
            return IssuerIdentity(did=existing_did, keys=existing_keys, created=False)

        log.info(f"Creating new DID for AI provider: {display_name}")

        keys = await self._client.post(
            "/key",
            "Failed to create keys",
            json={"type": KEY_TYPE},
        )
        kid = keys.get("kid")
        if not kid:
            raise ExternalServiceError("Failed to create keys: response has no kid")

        service = [
            {
                "idFragment": service_fragment(display_name),
                "type": "AIAgent",
                "serviceEndpoint": [f"{APP_URL}/ai/{display_name}"],
            }
        ]
        did_data = await self._client.post(
            "/did/create",
            "Failed to create DID",
            data={
                "network": self._client.network,
                "identifierFormatType": "uuid",
                "verificationMethodType": VERIFICATION_METHOD_TYPE,
                "service": json.dumps(service),
                "key": kid,
                "@context": json.dumps(DID_CONTEXT),
            },
        )
        did = did_data.get("did")
        if not did:
            raise ExternalServiceError("Failed to create DID: response has no did")

        log.info(f"Created DID {did} for {display_name}")
        return IssuerIdentity(did=did, keys=keys, created=True)
