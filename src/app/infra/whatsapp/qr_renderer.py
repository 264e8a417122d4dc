"""Renderização do QR de pareamento em PNG."""

from __future__ import annotations

import io

import qrcode
import qrcode.constants


def render_pairing_png(token: str) -> bytes:
    """Gera PNG do QR a partir do token de pareamento.

    Raises:
        ValueError: Se o token estiver vazio
    """
    if not token:
        raise ValueError("token de pareamento vazio")
    qr = qrcode.QRCode(
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=10,
        border=4,
    )
    qr.add_data(token)
    qr.make(fit=True)
    image = qr.make_image(fill_color="black", back_color="white").convert("RGB")
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()
