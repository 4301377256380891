"""Pytest fixtures for Contentify issuer tests."""
import pytest
import respx
from httpx import ASGITransport, AsyncClient, Response
from sqlalchemy.orm import sessionmaker

from app.audit.logger import reset_audit_logger
from app.cheqd.circuit import reset_circuit_breaker
from app.config import CHEQD_STUDIO_API
from app.db.models import AIProvider
from app.db.session import build_engine, get_db, init_database
from app.issuance.locks import reset_did_lock_registry
from app.main import app


# =============================================================================
# Test Data
# =============================================================================

TEST_CHEQD_KEY = "test-cheqd-studio-key"
TEST_DID = "did:cheqd:testnet:0f3a5e2c-7b1d-4a8e-9c6f-2d4b8e1a3c5f"
TEST_KID = "4f1c7e5b9a2d8c3e6f0a1b2c3d4e5f60718293a4b5c6d7e8f90a1b2c3d4e5f6a"
TEST_STATUS_LIST_URL = (
    "https://resolver.cheqd.net/1.0/identifiers/"
    f"{TEST_DID}?resourceName=contentify-1700000000000&resourceType=StatusList2021Revocation"
)

SAMPLE_CONTENT = "# The Internet of Trust\n\nA short manifesto about verifiable AI content on cheqd."


def key_response() -> dict:
    return {
        "kid": TEST_KID,
        "type": "Ed25519",
        "publicKeyHex": TEST_KID,
    }


def did_response() -> dict:
    return {
        "did": TEST_DID,
        "controllerKeyId": TEST_KID,
        "keys": [{"kid": TEST_KID, "type": "Ed25519"}],
    }


def status_list_response() -> dict:
    return {
        "created": True,
        "resource": {"id": "7c1b4d2e-0f6a-4b8c-9e3d-5a7f1c2b4d6e", "name": "contentify-1700000000000"},
        "statusListCredential": TEST_STATUS_LIST_URL,
    }


@pytest.fixture(autouse=True)
def reset_singletons():
    """Fresh breaker, DID locks and audit buffer for every test."""
    reset_circuit_breaker()
    reset_did_lock_registry()
    reset_audit_logger()
    yield
    reset_circuit_breaker()
    reset_did_lock_registry()
    reset_audit_logger()


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture
def db_engine():
    """In-memory SQLite database with tables and default providers."""
    engine = build_engine("sqlite://")
    init_database(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture
def db_session(session_factory):
    """Session for arranging and inspecting database state."""
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def provider_with_did(db_session):
    """The default ``claude`` provider with an already stored DID."""
    provider = db_session.query(AIProvider).filter(AIProvider.name == "claude").one()
    provider.issuer_did = TEST_DID
    provider.issuer_keys = key_response()
    db_session.commit()
    return provider


# =============================================================================
# HTTP Fixtures
# =============================================================================

@pytest.fixture
async def client(session_factory):
    """HTTP client against the app with the test database."""

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def studio():
    """Mocked cheqd Studio API with successful key, DID and status list routes."""
    with respx.mock(base_url=CHEQD_STUDIO_API, assert_all_called=False) as mock:
        mock.post("/key", name="key").mock(return_value=Response(200, json=key_response()))
        mock.post("/did/create", name="did").mock(return_value=Response(200, json=did_response()))
        mock.post("/credential-status/create/unencrypted", name="status_list").mock(
            return_value=Response(200, json=status_list_response())
        )
        yield mock


# =============================================================================
# Request Helpers
# =============================================================================

async def issue(client: AsyncClient, **overrides) -> Response:
    """POST /api/credentials/create with sensible defaults.

    Pass ``field=None`` to drop a field from the body.
    """
    body = {
        "content": SAMPLE_CONTENT,
        "aiProvider": "claude",
        "paymentAmount": 0.5,
        "cheqdApiKey": TEST_CHEQD_KEY,
    }
    body.update(overrides)
    body = {k: v for k, v in body.items() if v is not None}
    return await client.post("/api/credentials/create", json=body)


async def issue_ok(client: AsyncClient, **overrides) -> dict:
    """Issue a credential and return the decoded 200 response."""
    response = await issue(client, **overrides)
    assert response.status_code == 200, response.text
    return response.json()
