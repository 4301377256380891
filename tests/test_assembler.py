"""Tests for credential assembly, scoring and QR rendering."""
import base64
import hashlib
from datetime import datetime, timezone

import pytest

from app.credential.assembler import (
    build_content_credential,
    calculate_authenticity_score,
    content_id,
    format_amount,
    hash_content,
    new_credential_id,
)
from app.credential.qr import build_qr_payload, render_qr_data_url

from tests.conftest import SAMPLE_CONTENT, TEST_DID, TEST_STATUS_LIST_URL


# =============================================================================
# Authenticity Score
# =============================================================================


class TestAuthenticityScore:
    """Heuristic authenticity score."""

    def test_plain_content_gets_base_score(self):
        assert calculate_authenticity_score("hello world") == 85

    @pytest.mark.parametrize(
        "content,expected",
        [
            ("A MANIFESTO for builders", 90),
            ("the Internet of Trust", 90),
            ("built on Cheqd", 88),
            ("# Heading only", 87),
        ],
    )
    def test_marker_bonuses(self, content, expected):
        assert calculate_authenticity_score(content) == expected

    def test_length_bonuses(self):
        assert calculate_authenticity_score("a" * 1000) == 85
        assert calculate_authenticity_score("a" * 1001) == 87
        assert calculate_authenticity_score("a" * 5001) == 90

    def test_score_is_capped_at_100(self):
        content = "# manifesto internet of trust cheqd " + "x" * 6000
        assert calculate_authenticity_score(content) == 100

    def test_score_is_deterministic(self):
        assert calculate_authenticity_score(SAMPLE_CONTENT) == calculate_authenticity_score(
            SAMPLE_CONTENT
        )


# =============================================================================
# Hashing and Identifiers
# =============================================================================


class TestHashing:
    def test_hash_is_sha256_hex(self):
        expected = hashlib.sha256("hello".encode("utf-8")).hexdigest()
        assert hash_content("hello") == expected
        assert len(hash_content("hello")) == 64

    def test_identical_content_same_hash(self):
        assert hash_content(SAMPLE_CONTENT) == hash_content(SAMPLE_CONTENT)

    def test_distinct_content_distinct_hash(self):
        assert hash_content("first") != hash_content("second")

    def test_content_id_uses_hash_prefix(self):
        digest = hash_content("hello")
        assert content_id(digest) == f"urn:content:{digest[:16]}"

    def test_credential_ids_are_never_reused(self):
        ids = {new_credential_id() for _ in range(50)}
        assert len(ids) == 50
        assert all(i.startswith("urn:uuid:") for i in ids)


class TestFormatAmount:
    @pytest.mark.parametrize(
        "amount,expected", [(0.5, "0.5"), (1.0, "1"), (100, "100"), (2.25, "2.25")]
    )
    def test_format_amount(self, amount, expected):
        assert format_amount(amount) == expected


# =============================================================================
# Credential Document
# =============================================================================


class TestBuildContentCredential:
    @pytest.fixture
    def assembled(self):
        return build_content_credential(
            content=SAMPLE_CONTENT,
            issuer_name="Claude (Anthropic)",
            issuer_did=TEST_DID,
            status_list_credential=TEST_STATUS_LIST_URL,
            payment_address="Payment rails disabled (testing mode)",
            payment_amount=0.5,
            network="testnet",
            issued_at=datetime(2025, 1, 15, 12, 30, tzinfo=timezone.utc),
        )

    def test_document_shape(self, assembled):
        doc = assembled.credential
        assert doc["@context"] == [
            "https://www.w3.org/2018/credentials/v1",
            "https://c2pa.org/specifications/v1",
        ]
        assert doc["type"] == ["VerifiableCredential", "ContentCredential"]
        assert doc["issuer"] == {"id": TEST_DID, "name": "Claude (Anthropic)", "type": "AIAgent"}
        assert doc["issuanceDate"] == "2025-01-15T12:30:00Z"

    def test_subject_carries_hash_and_score(self, assembled):
        subject = assembled.credential["credentialSubject"]
        assert subject["contentHash"] == hash_content(SAMPLE_CONTENT)
        assert subject["hashAlgorithm"] == "SHA-256"
        assert subject["id"] == content_id(subject["contentHash"])
        assert subject["authenticity"]["score"] == assembled.authenticity_score
        assert subject["c2pa:claim"]["dc:creator"] == "Claude (Anthropic)"
        assert subject["c2pa:claim"]["c2pa:signature"]["created"] == "2025-01-15T12:30:00Z"

    def test_status_entry_points_at_list(self, assembled):
        status = assembled.credential["credentialStatus"]
        assert status["type"] == "StatusList2021Entry"
        assert status["statusPurpose"] == "revocation"
        assert status["statusListIndex"] == "0"
        assert status["statusListCredential"] == TEST_STATUS_LIST_URL
        assert status["id"] == f"{TEST_STATUS_LIST_URL}#0"

    def test_payment_rails_disabled(self, assembled):
        rails = assembled.credential["paymentRails"]
        assert rails["enabled"] is False
        assert rails["verificationCost"].startswith("0.5 CHEQ")
        assert rails["network"] == "cheqd-testnet"

    def test_same_content_gets_fresh_id(self, assembled):
        again = build_content_credential(
            content=SAMPLE_CONTENT,
            issuer_name="Claude (Anthropic)",
            issuer_did=TEST_DID,
            status_list_credential=TEST_STATUS_LIST_URL,
            payment_address="n/a",
            payment_amount=0.5,
        )
        assert again.content_hash == assembled.content_hash
        assert again.credential_id != assembled.credential_id


# =============================================================================
# QR Code
# =============================================================================


class TestQrCode:
    def test_payload_truncates_hash(self):
        digest = hash_content(SAMPLE_CONTENT)
        payload = build_qr_payload(
            credential_id="urn:uuid:1",
            issuer_name="Claude (Anthropic)",
            issuer_did=TEST_DID,
            network="cheqd-testnet",
            timestamp="2025-01-15T12:30:00Z",
            authenticity_score=97,
            content_hash=digest,
            verification_cost="0.5 CHEQ",
            payment_address="n/a",
            verification_url="https://contentify.app/verify/urn:uuid:1",
        )
        assert payload["contentHash"] == digest[:16] + "..."
        assert payload["paymentRails"] == {"verificationCost": "0.5 CHEQ", "paymentAddress": "n/a"}
        assert payload["verify"] == "https://contentify.app/verify/urn:uuid:1"

    def test_render_returns_png_data_url(self):
        data_url = render_qr_data_url({"credentialId": "urn:uuid:1"})
        prefix = "data:image/png;base64,"
        assert data_url.startswith(prefix)
        png = base64.b64decode(data_url[len(prefix):])
        assert png[:8] == b"\x89PNG\r\n\x1a\n"
