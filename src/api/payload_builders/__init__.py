"""Payload builders — construção de payloads enviados a sistemas externos.

Estrutura:
- whatsapp/: webhooks de mensagem e de status para o consumidor downstream
"""

__all__: list[str] = []
