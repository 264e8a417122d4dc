"""Adapters locais do canal WhatsApp: mídia, QR e cliente loopback."""

from app.infra.whatsapp.loopback_client import LoopbackClient, create_loopback_client
from app.infra.whatsapp.media_store import MediaStore
from app.infra.whatsapp.qr_renderer import render_pairing_png

__all__ = [
    "LoopbackClient",
    "MediaStore",
    "create_loopback_client",
    "render_pairing_png",
]
