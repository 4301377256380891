"""Audit logging module for the Contentify issuer."""

from app.audit.logger import AuditLogger, AuditEvent, get_audit_logger

__all__ = [
    "AuditLogger",
    "AuditEvent",
    "get_audit_logger",
]
