"""SQLAlchemy ORM models for the Contentify issuer.

This module defines the database schema for:
- Users (access token, plan, remaining credits)
- AI providers (credential issuers with a lazily minted DID)
- Credentials (issued content credentials and their counters)
- Verifications (append-only verification events)
- Analytics (append-only usage events)
"""

import uuid
from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, relationship


def _uuid() -> str:
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class User(Base):
    """Platform user identified by an opaque access token.

    ``credits_remaining`` only ever moves down through
    ``UserStore.decrement_credits`` and never below zero.
    """

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_uuid)
    email = Column(String(255), nullable=True, unique=True)
    api_key = Column(String(255), nullable=False, unique=True)
    cheqd_api_key = Column(String(255), nullable=True)
    plan = Column(String(50), default="free", nullable=False)
    credits_remaining = Column(Integer, default=10, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )

    # Relationships
    credentials = relationship(
        "Credential", back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )
    analytics_events = relationship(
        "AnalyticsEvent", back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )

    __table_args__ = (
        CheckConstraint("credits_remaining >= 0", name="ck_users_credits_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id!r}, email={self.email!r}, plan={self.plan!r})>"


class AIProvider(Base):
    """AI content issuer (Claude, GPT, Gemini, ...).

    The DID and keypair are minted on first use and then reused for every
    credential this provider issues. ``issuer_did`` is unique so two rows can
    never share an identity.
    """

    __tablename__ = "ai_providers"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(100), nullable=False, unique=True)
    display_name = Column(String(100), nullable=False)
    issuer_did = Column(String(255), nullable=True, unique=True)
    issuer_keys = Column(JSON, nullable=True)
    description = Column(Text, nullable=True)
    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    credentials = relationship("Credential", back_populates="ai_provider")

    @property
    def has_identity(self) -> bool:
        """True once both DID and keys are stored."""
        return bool(self.issuer_did and self.issuer_keys)

    def __repr__(self) -> str:
        return f"<AIProvider(name={self.name!r}, issuer_did={self.issuer_did!r})>"


class Credential(Base):
    """Content credential issued on behalf of an AI provider."""

    __tablename__ = "credentials"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    ai_provider_id = Column(String(36), ForeignKey("ai_providers.id"), nullable=False)
    credential_id = Column(String(255), nullable=False, unique=True)  # urn:uuid:...
    issuer_did = Column(String(255), nullable=False)
    content_hash = Column(String(64), nullable=False)
    content_preview = Column(Text, nullable=True)
    authenticity_score = Column(Integer, nullable=False)
    payment_amount = Column(Numeric(10, 2), default=0.5, nullable=False)
    payment_address = Column(String(255), nullable=True)
    status_list_url = Column(Text, nullable=True)
    status = Column(String(20), default="active", nullable=False)
    verification_count = Column(Integer, default=0, nullable=False)
    revenue_earned = Column(Numeric(10, 2), default=0, nullable=False)
    # "metadata" is reserved on declarative classes
    credential_metadata = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )

    user = relationship("User", back_populates="credentials")
    ai_provider = relationship("AIProvider", back_populates="credentials")
    verifications = relationship(
        "Verification", back_populates="credential", cascade="all, delete-orphan", passive_deletes=True
    )

    __table_args__ = (
        CheckConstraint(
            "authenticity_score >= 0 AND authenticity_score <= 100",
            name="ck_credentials_score_range",
        ),
        CheckConstraint(
            "status IN ('active', 'revoked', 'suspended')",
            name="ck_credentials_status",
        ),
        Index("idx_credentials_user_id", "user_id"),
        Index("idx_credentials_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Credential(credential_id={self.credential_id!r}, status={self.status!r})>"


class Verification(Base):
    """One verification event. Rows are never updated."""

    __tablename__ = "verifications"

    id = Column(String(36), primary_key=True, default=_uuid)
    credential_id = Column(
        String(36), ForeignKey("credentials.id", ondelete="CASCADE"), nullable=False
    )
    verifier_address = Column(String(255), nullable=False)
    payment_amount = Column(Numeric(10, 2), nullable=True)
    payment_tx_hash = Column(String(255), nullable=True)
    verified_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    credential = relationship("Credential", back_populates="verifications")

    __table_args__ = (
        Index("idx_verifications_credential_id", "credential_id"),
    )


class AnalyticsEvent(Base):
    """Usage event for aggregate reporting."""

    __tablename__ = "analytics"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    event_type = Column(String(50), nullable=False)
    event_data = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    user = relationship("User", back_populates="analytics_events")

    __table_args__ = (
        Index("idx_analytics_user_id", "user_id"),
        Index("idx_analytics_created_at", "created_at"),
    )


# Issuers available out of the box
DEFAULT_AI_PROVIDERS: tuple[dict[str, str], ...] = (
    {
        "name": "claude",
        "display_name": "Claude (Anthropic)",
        "description": "Anthropic AI assistant - Claude Sonnet 4",
    },
    {
        "name": "gpt-4",
        "display_name": "ChatGPT (OpenAI)",
        "description": "OpenAI GPT-4 and GPT-4 Turbo",
    },
    {
        "name": "gemini",
        "display_name": "Gemini (Google)",
        "description": "Google Gemini Pro and Ultra",
    },
    {
        "name": "custom",
        "display_name": "Custom AI",
        "description": "User-defined AI agent or model",
    },
)
