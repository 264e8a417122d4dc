"""Normalizer WhatsApp — extração de mensagens recebidas pelo binding.

Responsabilidades:
- Extrair mensagens do payload bruto emitido pelo protocol client
- Normalizar para o modelo interno InboundMessage

Tipos suportados: text (conversation/extendedText), image, audio,
video e document; demais tipos viram "unsupported" com placeholder.
"""

from .extractor import (
    PLACEHOLDERS,
    extract_inbound_message,
    jid_to_address,
)

__all__ = [
    "PLACEHOLDERS",
    "extract_inbound_message",
    "jid_to_address",
]
