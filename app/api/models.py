"""API models for the Contentify issuer.

Pydantic models for API requests and responses. Field names are snake_case in
Python and camelCase on the wire.
"""
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.config import DEFAULT_AI_PROVIDER, DEFAULT_PAYMENT_AMOUNT


class ApiModel(BaseModel):
    """Base model accepting either field names or camelCase aliases."""

    model_config = ConfigDict(populate_by_name=True)


# =============================================================================
# Request Models
# =============================================================================


class CreateCredentialRequest(ApiModel):
    """Request to issue a content credential.

    Presence and range checks run in the endpoint so failures carry the
    documented error messages.
    """

    content: Optional[str] = Field(None, description="Content to attest")
    ai_provider: str = Field(
        DEFAULT_AI_PROVIDER, alias="aiProvider", description="AI provider name"
    )
    payment_amount: float = Field(
        DEFAULT_PAYMENT_AMOUNT, alias="paymentAmount", description="Verification cost in CHEQ"
    )
    cheqd_api_key: Optional[str] = Field(
        None, alias="cheqdApiKey", description="Caller's cheqd Studio API key"
    )
    user_api_key: Optional[str] = Field(
        None, alias="userApiKey", description="Caller's Contentify access token"
    )


class VerifyCredentialRequest(ApiModel):
    """Request to record a verification."""

    verifier_address: Optional[str] = Field(None, alias="verifierAddress")
    payment_tx_hash: Optional[str] = Field(None, alias="paymentTxHash")


class UpdateCredentialStatusRequest(ApiModel):
    """Request to change a credential's local status."""

    status: Optional[str] = Field(None, description="active, revoked or suspended")
    api_key: Optional[str] = Field(None, alias="apiKey", description="Owner's access token")


# =============================================================================
# Response Models
# =============================================================================


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "healthy"
    timestamp: str
    database: str  # "connected" | "disconnected"


class VersionResponse(BaseModel):
    """Service version."""

    service: str
    version: str
    git_sha: str


class ProviderResponse(ApiModel):
    """Public view of an AI provider (keys are never exposed)."""

    id: str
    name: str
    display_name: str = Field(..., alias="displayName")
    description: Optional[str] = None
    issuer_did: Optional[str] = Field(None, alias="issuerDID")
    active: bool


class PlatformStatsResponse(ApiModel):
    """Platform-wide counters."""

    total_users: int = Field(..., alias="totalUsers")
    total_credentials: int = Field(..., alias="totalCredentials")
    total_verifications: int = Field(..., alias="totalVerifications")
    total_revenue: float = Field(..., alias="totalRevenue")
    active_ai_providers: int = Field(..., alias="activeAiProviders")


class PaymentRails(ApiModel):
    """Payment rails summary (settlement currently disabled)."""

    enabled: bool
    verification_cost: str = Field(..., alias="verificationCost")
    payment_address: str = Field(..., alias="paymentAddress")


class IssuedCredentialSummary(ApiModel):
    """Summary of a newly issued credential."""

    id: str
    issuer_did: str = Field(..., alias="issuerDID")
    issuer_name: str = Field(..., alias="issuerName")
    content_hash: str = Field(..., alias="contentHash")
    authenticity_score: int = Field(..., alias="authenticityScore")
    timestamp: str
    payment_rails: PaymentRails = Field(..., alias="paymentRails")
    status_list_url: str = Field(..., alias="statusListUrl")
    verification_url: str = Field(..., alias="verificationUrl")


class CreateCredentialResponse(ApiModel):
    """Response from credential issuance."""

    success: bool = True
    credential: IssuedCredentialSummary
    qr_code: str = Field(..., alias="qrCode")
    full_credential: dict[str, Any] = Field(..., alias="fullCredential")
    user_api_key: str = Field(..., alias="userApiKey")


class CredentialResponse(ApiModel):
    """Stored credential with its counters."""

    id: str
    issuer_did: str = Field(..., alias="issuerDID")
    ai_provider: Optional[str] = Field(None, alias="aiProvider")
    content_hash: str = Field(..., alias="contentHash")
    authenticity_score: int = Field(..., alias="authenticityScore")
    payment_amount: float = Field(..., alias="paymentAmount")
    payment_address: Optional[str] = Field(None, alias="paymentAddress")
    status: str
    verification_count: int = Field(..., alias="verificationCount")
    revenue_earned: float = Field(..., alias="revenueEarned")
    created_at: str = Field(..., alias="createdAt")
    status_list_url: Optional[str] = Field(None, alias="statusListUrl")
    metadata: Optional[dict[str, Any]] = None


class CredentialListItem(ApiModel):
    """Credential row in a user's dashboard list."""

    id: str
    ai_provider: Optional[str] = Field(None, alias="aiProvider")
    issuer_did: str = Field(..., alias="issuerDID")
    content_hash: str = Field(..., alias="contentHash")
    content_preview: Optional[str] = Field(None, alias="contentPreview")
    authenticity_score: int = Field(..., alias="authenticityScore")
    payment_amount: float = Field(..., alias="paymentAmount")
    status: str
    verification_count: int = Field(..., alias="verificationCount")
    revenue_earned: float = Field(..., alias="revenueEarned")
    created_at: str = Field(..., alias="createdAt")


class VerifiedCredentialSummary(ApiModel):
    """Credential summary returned after a verification."""

    id: str
    status: str
    authenticity_score: int = Field(..., alias="authenticityScore")


class VerifyCredentialResponse(ApiModel):
    """Response from recording a verification."""

    success: bool = True
    message: str = "Verification recorded"
    credential: VerifiedCredentialSummary


class VerificationResponse(ApiModel):
    """One verification event."""

    verifier_address: str = Field(..., alias="verifierAddress")
    payment_amount: Optional[float] = Field(None, alias="paymentAmount")
    payment_tx_hash: Optional[str] = Field(None, alias="paymentTxHash")
    verified_at: str = Field(..., alias="verifiedAt")


class VerificationListResponse(ApiModel):
    """Verification history for a credential."""

    credential_id: str = Field(..., alias="credentialId")
    verifications: list[VerificationResponse]
    count: int


class UpdateCredentialStatusResponse(ApiModel):
    """Response from a status change."""

    success: bool = True
    id: str
    status: str


class UserProfile(ApiModel):
    """User profile shown on the dashboard."""

    email: Optional[str] = None
    plan: str
    credits_remaining: int = Field(..., alias="creditsRemaining")


class UserStatsResponse(ApiModel):
    """Aggregates over a user's credentials."""

    total_credentials: int = Field(..., alias="totalCredentials")
    total_verifications: int = Field(..., alias="totalVerifications")
    total_revenue: float = Field(..., alias="totalRevenue")
    avg_authenticity_score: Optional[float] = Field(None, alias="avgAuthenticityScore")


class UserCredentialsResponse(ApiModel):
    """User dashboard: profile, stats and credentials."""

    user: UserProfile
    stats: UserStatsResponse
    credentials: list[CredentialListItem]
