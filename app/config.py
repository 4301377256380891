"""Contentify issuer configuration constants.

Environment-based configuration, grouped by concern:
- DATABASE: relational store connection
- CHEQD: hosted identity / status-list service
- HTTP: listen port, CORS, public URLs
"""
import os


# =============================================================================
# ENVIRONMENT
# =============================================================================

ENVIRONMENT: str = os.getenv("ENVIRONMENT", os.getenv("NODE_ENV", "development")).lower()
IS_PRODUCTION: bool = ENVIRONMENT == "production"

SERVICE_NAME: str = "contentify-issuer"
SERVICE_VERSION: str = "1.0.0"

AUDIT_ENABLED: bool = os.getenv("CONTENTIFY_AUDIT_ENABLED", "true").lower() == "true"


# =============================================================================
# DATABASE CONFIGURATION
# =============================================================================


def _get_database_url() -> str:
    """Get database URL from environment.

    Priority:
    1. CONTENTIFY_DATABASE_URL - explicit override
    2. DATABASE_URL - hosted PostgreSQL (Supabase, Render, Heroku style)
    3. SQLite fallback for local development

    Hosted providers hand out ``postgres://`` URLs; those are normalized to
    the psycopg driver so SQLAlchemy can load them.
    """
    url = os.getenv("CONTENTIFY_DATABASE_URL") or os.getenv("DATABASE_URL")
    if not url:
        return "sqlite:///./contentify.db"

    if url.startswith("postgres://"):
        url = "postgresql+psycopg://" + url[len("postgres://"):]
    elif url.startswith("postgresql://"):
        url = "postgresql+psycopg://" + url[len("postgresql://"):]
    return url


DATABASE_URL: str = _get_database_url()

# Default bookkeeping values for new rows
DEFAULT_USER_PLAN: str = "free"
DEFAULT_USER_CREDITS: int = int(os.getenv("CONTENTIFY_DEFAULT_CREDITS", "10"))


# =============================================================================
# CHEQD STUDIO CONFIGURATION
# =============================================================================

CHEQD_STUDIO_API: str = os.getenv("CHEQD_STUDIO_API", "https://studio-api.cheqd.net").rstrip("/")
CHEQD_NETWORK: str = os.getenv("CHEQD_NETWORK", "testnet")

# Outbound call policy
CHEQD_TIMEOUT_SECONDS: float = float(os.getenv("CHEQD_TIMEOUT_SECONDS", "30.0"))
CHEQD_CIRCUIT_FAILURE_THRESHOLD: int = int(os.getenv("CHEQD_CIRCUIT_FAILURE_THRESHOLD", "5"))
CHEQD_CIRCUIT_RESET_SECONDS: float = float(os.getenv("CHEQD_CIRCUIT_RESET_SECONDS", "60"))

# Status list sizing (capacity reserved for future index allocation)
STATUS_LIST_LENGTH: int = 140000
STATUS_LIST_ENCODING: str = "base64url"
STATUS_LIST_PREFIX: str = "contentify"

# Settlement is not wired up; the address is a fixed marker
PAYMENT_RAILS_ENABLED: bool = False
PAYMENT_ADDRESS_DISABLED: str = "Payment rails disabled (testing mode)"

# Accepted verification price range (CHEQ)
MIN_PAYMENT_AMOUNT: float = 0.1
MAX_PAYMENT_AMOUNT: float = 100.0
DEFAULT_PAYMENT_AMOUNT: float = 0.5
DEFAULT_AI_PROVIDER: str = "claude"


def get_network_label(network: str | None = None) -> str:
    """Return the network label embedded in credentials (e.g. cheqd-testnet)."""
    return f"cheqd-{network or CHEQD_NETWORK}"


# =============================================================================
# HTTP CONFIGURATION
# =============================================================================

SERVICE_PORT: int = int(os.getenv("PORT", "3000"))
APP_URL: str = os.getenv("APP_URL", "https://contentify.app").rstrip("/")

# Maximum length kept in credentials.content_preview
CONTENT_PREVIEW_LENGTH: int = 200


def _parse_allowed_origins(raw: str | None) -> list[str]:
    """Parse comma-separated CORS origins. Empty means any origin."""
    if not raw:
        return ["*"]
    origins = [o.strip() for o in raw.split(",") if o.strip()]
    return origins or ["*"]


ALLOWED_ORIGINS: list[str] = _parse_allowed_origins(os.getenv("ALLOWED_ORIGINS"))


def get_verification_url(credential_id: str) -> str:
    """Public URL where a credential can be checked."""
    return f"{APP_URL}/verify/{credential_id}"
