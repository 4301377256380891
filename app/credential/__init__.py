"""Credential assembly and rendering."""

from app.credential.assembler import (
    AssembledCredential,
    build_content_credential,
    calculate_authenticity_score,
    hash_content,
)
from app.credential.qr import build_qr_payload, render_qr_data_url

__all__ = [
    "AssembledCredential",
    "build_content_credential",
    "calculate_authenticity_score",
    "hash_content",
    "build_qr_payload",
    "render_qr_data_url",
]
