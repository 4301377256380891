"""Tests for the persistence stores."""
from decimal import Decimal

import pytest
from sqlalchemy import event

from app.core.exceptions import PersistenceError
from app.db.models import (
    AIProvider,
    AnalyticsEvent,
    Credential,
    DEFAULT_AI_PROVIDERS,
    User,
    Verification,
)
from app.db.seed import seed_default_providers
from app.store import (
    AnalyticsStore,
    CredentialStore,
    ProviderStore,
    UserStore,
    generate_api_key,
)

from tests.conftest import TEST_DID, TEST_STATUS_LIST_URL, key_response


@pytest.fixture
def user(db_session):
    user = UserStore(db_session).create(generate_api_key(), email="writer@example.com")
    db_session.commit()
    return user


@pytest.fixture
def claude(db_session):
    return ProviderStore(db_session).get_active("claude")


def _create_credential(db_session, user, provider, credential_id="urn:uuid:cred-1", amount="0.5"):
    credential = CredentialStore(db_session).create(
        user_id=user.id,
        ai_provider_id=provider.id,
        credential_id=credential_id,
        issuer_did=TEST_DID,
        content_hash="a" * 64,
        content_preview="preview",
        authenticity_score=92,
        payment_amount=Decimal(amount),
        payment_address="Payment rails disabled (testing mode)",
        status_list_url=TEST_STATUS_LIST_URL,
        metadata={"credential": {"id": credential_id}},
    )
    db_session.commit()
    return credential


# =============================================================================
# Seeding
# =============================================================================


class TestSeeding:
    def test_default_providers_seeded(self, db_session):
        names = {p.name for p in ProviderStore(db_session).list_active()}
        assert names == {entry["name"] for entry in DEFAULT_AI_PROVIDERS}

    def test_seeding_is_idempotent(self, db_session):
        assert seed_default_providers(db_session) == 0
        assert db_session.query(AIProvider).count() == len(DEFAULT_AI_PROVIDERS)

    def test_seeded_providers_have_no_identity(self, db_session):
        for provider in ProviderStore(db_session).list_active():
            assert provider.issuer_did is None
            assert provider.has_identity is False


# =============================================================================
# Users
# =============================================================================


class TestUserStore:
    def test_generated_keys_are_unique(self):
        keys = {generate_api_key() for _ in range(20)}
        assert len(keys) == 20
        assert all(k.startswith("ck_") for k in keys)

    def test_create_uses_defaults(self, db_session, user):
        found = UserStore(db_session).get_by_api_key(user.api_key)
        assert found.id == user.id
        assert found.plan == "free"
        assert found.credits_remaining == 10

    def test_unknown_key_returns_none(self, db_session):
        assert UserStore(db_session).get_by_api_key("ck_unknown") is None

    def test_duplicate_key_raises_persistence_error(self, db_session, user):
        with pytest.raises(PersistenceError):
            UserStore(db_session).create(user.api_key)
        db_session.rollback()

    def test_decrement_never_goes_below_zero(self, db_session, user):
        db_session.query(User).filter(User.id == user.id).update({"credits_remaining": 1})
        db_session.commit()
        store = UserStore(db_session)

        assert store.decrement_credits(user.id) is True
        assert store.decrement_credits(user.id) is False
        db_session.commit()

        db_session.expire_all()
        assert db_session.get(User, user.id).credits_remaining == 0

    def test_decrement_is_single_update(self, db_session, db_engine, user):
        user_id = user.id
        statements = []

        @event.listens_for(db_engine, "before_cursor_execute")
        def capture(conn, cursor, statement, parameters, context, executemany):
            statements.append(statement)

        try:
            UserStore(db_session).decrement_credits(user_id)
        finally:
            event.remove(db_engine, "before_cursor_execute", capture)

        assert len(statements) == 1
        assert statements[0].lstrip().upper().startswith("UPDATE USERS")
        assert "credits_remaining > " in statements[0]

    def test_stats_for_new_user(self, db_session, user):
        stats = UserStore(db_session).get_stats(user.id)
        assert stats.total_credentials == 0
        assert stats.total_verifications == 0
        assert stats.total_revenue == Decimal("0")
        assert stats.avg_authenticity_score is None


# =============================================================================
# Providers
# =============================================================================


class TestProviderStore:
    def test_get_active_by_name(self, claude):
        assert claude.display_name == "Claude (Anthropic)"

    def test_inactive_provider_not_returned(self, db_session, claude):
        claude.active = False
        db_session.commit()
        assert ProviderStore(db_session).get_active("claude") is None

    def test_attach_did_only_once(self, db_session, claude):
        store = ProviderStore(db_session)

        assert store.attach_did(claude.id, TEST_DID, key_response()) is True
        db_session.commit()
        assert store.attach_did(claude.id, "did:cheqd:testnet:other", key_response()) is False
        db_session.commit()

        provider = store.get(claude.id)
        assert provider.issuer_did == TEST_DID
        assert provider.has_identity is True

    def test_issuer_did_is_unique(self, db_session):
        store = ProviderStore(db_session)
        claude = store.get_active("claude")
        gpt = store.get_active("gpt-4")

        store.attach_did(claude.id, TEST_DID, key_response())
        db_session.commit()

        with pytest.raises(PersistenceError):
            store.attach_did(gpt.id, TEST_DID, key_response())
        db_session.rollback()


# =============================================================================
# Credentials
# =============================================================================


class TestCredentialStore:
    def test_get_loads_provider_and_user(self, db_session, user, claude):
        _create_credential(db_session, user, claude)
        db_session.expire_all()

        found = CredentialStore(db_session).get("urn:uuid:cred-1")
        assert found.ai_provider.name == "claude"
        assert found.user.id == user.id
        assert found.status == "active"
        assert found.verification_count == 0
        assert found.credential_metadata == {"credential": {"id": "urn:uuid:cred-1"}}

    def test_get_unknown_returns_none(self, db_session):
        assert CredentialStore(db_session).get("urn:uuid:missing") is None

    def test_duplicate_credential_id_rejected(self, db_session, user, claude):
        _create_credential(db_session, user, claude)
        with pytest.raises(PersistenceError):
            _create_credential(db_session, user, claude)
        db_session.rollback()

    def test_record_verification_bumps_counters(self, db_session, user, claude):
        credential = _create_credential(db_session, user, claude, amount="1.25")
        store = CredentialStore(db_session)

        store.record_verification(credential, "cheqd1verifier", "0xabc")
        store.record_verification(credential, "cheqd1other")
        db_session.commit()
        db_session.expire_all()

        found = store.get("urn:uuid:cred-1")
        assert found.verification_count == 2
        assert found.revenue_earned == Decimal("2.50")

        history = store.list_verifications(found)
        assert {v.verifier_address for v in history} == {"cheqd1verifier", "cheqd1other"}
        assert all(v.payment_amount == Decimal("1.25") for v in history)

    def test_update_status(self, db_session, user, claude):
        _create_credential(db_session, user, claude)
        store = CredentialStore(db_session)

        assert store.update_status("urn:uuid:cred-1", "revoked") is True
        db_session.commit()
        db_session.expire_all()
        assert store.get("urn:uuid:cred-1").status == "revoked"

    def test_update_status_rejects_unknown_value(self, db_session):
        with pytest.raises(ValueError):
            CredentialStore(db_session).update_status("urn:uuid:cred-1", "deleted")

    def test_list_for_user_paginates(self, db_session, user, claude):
        for i in range(3):
            _create_credential(db_session, user, claude, credential_id=f"urn:uuid:cred-{i}")
        store = CredentialStore(db_session)

        assert len(store.list_for_user(user.id)) == 3
        assert len(store.list_for_user(user.id, limit=2)) == 2
        assert len(store.list_for_user(user.id, limit=2, offset=2)) == 1

    def test_user_stats_aggregate(self, db_session, user, claude):
        first = _create_credential(db_session, user, claude, credential_id="urn:uuid:a")
        _create_credential(db_session, user, claude, credential_id="urn:uuid:b")
        CredentialStore(db_session).record_verification(first, "cheqd1verifier")
        db_session.commit()

        stats = UserStore(db_session).get_stats(user.id)
        assert stats.total_credentials == 2
        assert stats.total_verifications == 1
        assert stats.total_revenue == Decimal("0.5")
        assert stats.avg_authenticity_score == 92.0

    def test_deleting_user_removes_credentials_and_verifications(self, db_session, user, claude):
        credential = _create_credential(db_session, user, claude)
        CredentialStore(db_session).record_verification(credential, "cheqd1verifier")
        AnalyticsStore(db_session).record_event(user.id, "credential_created")
        db_session.commit()
        user_id = user.id

        # Bulk delete skips ORM cascades, so only the foreign keys remove children
        db_session.query(User).filter(User.id == user_id).delete(synchronize_session=False)
        db_session.commit()
        db_session.expire_all()

        assert db_session.query(Credential).count() == 0
        assert db_session.query(Verification).count() == 0
        assert db_session.query(AnalyticsEvent).count() == 0


# =============================================================================
# Analytics
# =============================================================================


class TestAnalyticsStore:
    def test_record_and_count_events(self, db_session, user):
        store = AnalyticsStore(db_session)
        store.record_event(user.id, "credential_created", {"aiProvider": "claude"})
        store.record_event(user.id, "dashboard_viewed")
        db_session.commit()

        assert store.count_events(user.id) == 2
        assert store.count_events(user.id, "credential_created") == 1

    def test_platform_stats(self, db_session, user, claude):
        credential = _create_credential(db_session, user, claude)
        CredentialStore(db_session).record_verification(credential, "cheqd1verifier")
        db_session.commit()

        stats = AnalyticsStore(db_session).platform_stats()
        assert stats.total_users == 1
        assert stats.total_credentials == 1
        assert stats.total_verifications == 1
        assert stats.total_revenue == Decimal("0.5")
        assert stats.active_ai_providers == len(DEFAULT_AI_PROVIDERS)
