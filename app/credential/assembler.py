"""Content credential assembly.

Pure functions: no network or database access. Builds a W3C Verifiable
Credential with C2PA-style content provenance claims for a piece of
AI-generated content.
"""

import hashlib
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from app.config import PAYMENT_RAILS_ENABLED, get_network_label

CREDENTIAL_CONTEXT = [
    "https://www.w3.org/2018/credentials/v1",
    "https://c2pa.org/specifications/v1",
]
CREDENTIAL_TYPE = ["VerifiableCredential", "ContentCredential"]

HASH_ALGORITHM = "SHA-256"
CONTENT_ID_LENGTH = 16

# Authenticity heuristic
BASE_SCORE = 85
MAX_SCORE = 100
MARKER_BONUSES = (
    ("manifesto", 5),
    ("internet of trust", 5),
    ("cheqd", 3),
)
HEADING_MARKER = "#"
HEADING_BONUS = 2
LENGTH_BONUSES = (
    (1000, 2),
    (5000, 3),
)

AUTHENTICITY_FACTORS = [
    "AI-generated content",
    "Cryptographic content hash",
    "cheqd network anchored",
    "Payment rails disabled (testing mode)",
]

STATUS_LIST_INDEX = 0


@dataclass
class AssembledCredential:
    """A credential document plus the values derived while building it."""

    credential: dict[str, Any]
    content_hash: str
    authenticity_score: int

    @property
    def credential_id(self) -> str:
        return self.credential["id"]

    @property
    def issuance_date(self) -> str:
        return self.credential["issuanceDate"]


def hash_content(content: str) -> str:
    """SHA-256 hex digest of the UTF-8 content."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def content_id(content_hash: str) -> str:
    """Local content identifier derived from the content hash."""
    return f"urn:content:{content_hash[:CONTENT_ID_LENGTH]}"


def calculate_authenticity_score(content: str) -> int:
    """Heuristic authenticity score in [0, 100].

    Starts at a base value and adds fixed bonuses for marker phrases
    (case-insensitive), heading markup, and length. Deterministic.
    """
    score = BASE_SCORE
    lowered = content.lower()

    for marker, bonus in MARKER_BONUSES:
        if marker in lowered:
            score += bonus

    if HEADING_MARKER in content:
        score += HEADING_BONUS

    for threshold, bonus in LENGTH_BONUSES:
        if len(content) > threshold:
            score += bonus

    return max(0, min(score, MAX_SCORE))


def new_credential_id() -> str:
    """Fresh random credential URN, never derived from content."""
    return f"urn:uuid:{uuid.uuid4()}"


def build_content_credential(
    content: str,
    issuer_name: str,
    issuer_did: str,
    status_list_credential: str,
    payment_address: str,
    payment_amount: float,
    network: str | None = None,
    issued_at: datetime | None = None,
) -> AssembledCredential:
    """Build the credential document for ``content``.

    Args:
        content: Raw content being attested
        issuer_name: Display name of the AI provider
        issuer_did: DID the provider issues under
        status_list_credential: Revocation list URL
        payment_address: Address shown in the payment rails block
        payment_amount: Nominal verification cost in CHEQ
        network: cheqd network name; defaults to the configured one
        issued_at: Issuance time; defaults to now (UTC)

    Returns:
        AssembledCredential
    """
    content_hash = hash_content(content)
    score = calculate_authenticity_score(content)
    timestamp = (issued_at or datetime.now(timezone.utc)).isoformat().replace("+00:00", "Z")

    credential = {
        "@context": list(CREDENTIAL_CONTEXT),
        "type": list(CREDENTIAL_TYPE),
        "id": new_credential_id(),
        "issuer": {
            "id": issuer_did,
            "name": issuer_name,
            "type": "AIAgent",
        },
        "issuanceDate": timestamp,
        "credentialSubject": {
            "id": content_id(content_hash),
            "contentHash": content_hash,
            "hashAlgorithm": HASH_ALGORITHM,
            "contentType": "text/markdown",
            "c2pa:claim": {
                "dc:creator": issuer_name,
                "dc:title": "AI-Generated Content",
                "c2pa:signature": {
                    "algorithm": "Ed25519",
                    "created": timestamp,
                },
            },
            "authenticity": {
                "score": score,
                "factors": list(AUTHENTICITY_FACTORS),
            },
        },
        "credentialStatus": {
            "id": f"{status_list_credential}#{STATUS_LIST_INDEX}",
            "type": "StatusList2021Entry",
            "statusPurpose": "revocation",
            "statusListIndex": str(STATUS_LIST_INDEX),
            "statusListCredential": status_list_credential,
        },
        "paymentRails": {
            "enabled": PAYMENT_RAILS_ENABLED,
            "verificationCost": f"{format_amount(payment_amount)} CHEQ (disabled for testing)",
            "paymentAddress": payment_address,
            "network": get_network_label(network),
        },
    }

    return AssembledCredential(
        credential=credential,
        content_hash=content_hash,
        authenticity_score=score,
    )


def format_amount(amount: float) -> str:
    """Render a CHEQ amount without a trailing ``.0`` (0.5, 1, 2.25)."""
    return f"{float(amount):g}"
