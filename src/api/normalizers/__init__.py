"""Normalizers — conversão de payloads externos para modelos internos.

Estrutura:
- whatsapp/: mensagens brutas emitidas pelo protocol client → InboundMessage
"""

__all__: list[str] = []
