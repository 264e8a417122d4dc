"""Validadores de endereços e mídia para o canal WhatsApp.

Uso:
    from api.validators.whatsapp import validate_address, to_jid

    digits = validate_address("+55 11 99999-8888", policy)
    jid = to_jid(digits)
"""

from api.validators.whatsapp.address import (
    BRAZIL_COUNTRY_CODE,
    USER_JID_SUFFIX,
    is_address_allowed,
    is_sender_allowed,
    normalize_address,
    to_jid,
    validate_address,
)
from api.validators.whatsapp.media import (
    MAX_MEDIA_SIZE_BYTES,
    validate_media_file,
    validate_media_kind,
)

__all__ = [
    "BRAZIL_COUNTRY_CODE",
    "MAX_MEDIA_SIZE_BYTES",
    "USER_JID_SUFFIX",
    "is_address_allowed",
    "is_sender_allowed",
    "normalize_address",
    "to_jid",
    "validate_address",
    "validate_media_file",
    "validate_media_kind",
]
