from __future__ import annotations

import io
import urllib.parse

import qrcode

from ..core.constants import CHECKIN_PATH
from ..core.exceptions import InvalidTokenError


def build_checkin_url(base_url: str, token: str) -> str:
    """Participant-facing URL carrying ``token`` as a query parameter."""
    query = urllib.parse.urlencode({"token": token})
    return f"{base_url.rstrip('/')}{CHECKIN_PATH}?{query}"


def extract_token(url: str) -> str:
    values = urllib.parse.parse_qs(urllib.parse.urlsplit(url).query).get("token")
    if not values or not values[0]:
        raise InvalidTokenError("Token is required")
    return values[0]


def render_qr_png(data: str) -> bytes:
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_L,
        box_size=10,
        border=2,
    )
    qr.add_data(data)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")

    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()
