"""Protocolos e contratos do core da aplicação."""

from .credential_store import CredentialStoreProtocol
from .protocol_client import (
    MediaDownloadClient,
    MediaSenderClient,
    ProfileLookupClient,
    ProtocolClient,
    ProtocolClientFactory,
    SenderProfile,
)

__all__ = [
    "CredentialStoreProtocol",
    "MediaDownloadClient",
    "MediaSenderClient",
    "ProfileLookupClient",
    "ProtocolClient",
    "ProtocolClientFactory",
    "SenderProfile",
]
