# Overview: Redemption code minting and QR rendering.

from __future__ import annotations

import base64
import secrets
from io import BytesIO

import qrcode

# Crockford base32: no I, L, O or U, so codes survive being read aloud or typed
CODE_ALPHABET = "0123456789ABCDEFGHJKMNPQRSTVWXYZ"
CODE_GROUPS = 4
CODE_GROUP_SIZE = 4


def generate_redemption_code(prefix: str = "CADEAU") -> str:
    """
    Mint an unguessable redemption code, e.g. CADEAU-7K3M-Q9XD-2HPA-W4TR.

    80 bits from secrets; unrelated to the transaction id.
    """
    groups = [
        "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_GROUP_SIZE))
        for _ in range(CODE_GROUPS)
    ]
    return "-".join([prefix, *groups])


def normalize_reference(value: str | None) -> str | None:
    """Trim a code or transaction id as typed or scanned; None if blank."""
    if value is None:
        return None
    value = value.strip()
    return value or None


def qr_data_url(data: str) -> str:
    """Render data as a PNG QR code and return it as a data: URL."""
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=8,
        border=4,
    )
    qr.add_data(data)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")
    buffer = BytesIO()
    img.save(buffer, format="PNG")
    encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
    return f"data:image/png;base64,{encoded}"
