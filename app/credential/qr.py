"""QR code rendering for issued credentials."""

import base64
import io
import json
from typing import Any

import qrcode
from qrcode.constants import ERROR_CORRECT_H

QR_DARK_COLOR = "#6366f1"
QR_LIGHT_COLOR = "#ffffff"
QR_BOX_SIZE = 8
QR_BORDER = 4


def build_qr_payload(
    credential_id: str,
    issuer_name: str,
    issuer_did: str,
    network: str,
    timestamp: str,
    authenticity_score: int,
    content_hash: str,
    verification_cost: str,
    payment_address: str,
    verification_url: str,
) -> dict[str, Any]:
    """Summary fields embedded in the QR code."""
    return {
        "credentialId": credential_id,
        "issuer": issuer_name,
        "issuerDID": issuer_did,
        "network": network,
        "timestamp": timestamp,
        "authenticityScore": authenticity_score,
        "contentHash": content_hash[:16] + "...",
        "paymentRails": {
            "verificationCost": verification_cost,
            "paymentAddress": payment_address,
        },
        "verify": verification_url,
    }


def render_qr_data_url(payload: dict[str, Any]) -> str:
    """Encode ``payload`` as JSON into a PNG QR code data URL."""
    qr = qrcode.QRCode(
        version=None,
        error_correction=ERROR_CORRECT_H,
        box_size=QR_BOX_SIZE,
        border=QR_BORDER,
    )
    qr.add_data(json.dumps(payload, indent=2))
    qr.make(fit=True)

    img = qr.make_image(fill_color=QR_DARK_COLOR, back_color=QR_LIGHT_COLOR)
    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    img_str = base64.b64encode(buffer.getvalue()).decode()

    return f"data:image/png;base64,{img_str}"
