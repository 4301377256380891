"""Revocation status lists hosted by cheqd Studio."""

import logging
import time
from dataclasses import dataclass
from typing import Optional

from app.cheqd.client import CheqdStudioClient
from app.config import (
    PAYMENT_ADDRESS_DISABLED,
    STATUS_LIST_ENCODING,
    STATUS_LIST_LENGTH,
    STATUS_LIST_PREFIX,
)
from app.core.exceptions import ExternalServiceError

log = logging.getLogger(__name__)


@dataclass
class StatusList:
    """Reference to a newly created status list."""

    status_list_credential: str  # Addressable list URL
    payment_address: str
    resource_id: Optional[str] = None  # Content-addressed resource id


class StatusListClient:
    """Creates unencrypted revocation status lists for an issuer DID."""

    def __init__(self, client: CheqdStudioClient):
        self._client = client

    async def create_status_list(self, issuer_did: str, payment_amount: float) -> StatusList:
        """Create a named revocation list bound to ``issuer_did``.

        ``payment_amount`` is accepted for the paid (encrypted) variant but
        has no effect while payment rails are disabled.

        Raises:
            ExternalServiceError: If the list cannot be created
        """
        log.info("Creating status list (payment rails disabled)")

        name = f"{STATUS_LIST_PREFIX}-{int(time.time() * 1000)}"
        data = await self._client.post(
            "/credential-status/create/unencrypted",
            "Failed to create status list",
            params={"statusPurpose": "revocation"},
            data={
                "did": issuer_did,
                "statusListName": name,
                "length": str(STATUS_LIST_LENGTH),
                "encoding": STATUS_LIST_ENCODING,
            },
        )

        status_list_credential = data.get("statusListCredential")
        if not status_list_credential:
            raise ExternalServiceError(
                "Failed to create status list: response has no statusListCredential"
            )
        resource = data.get("resource") or {}

        return StatusList(
            status_list_credential=status_list_credential,
            payment_address=PAYMENT_ADDRESS_DISABLED,
            resource_id=resource.get("id"),
        )
