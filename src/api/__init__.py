"""API — camada de borda do gateway.

Responsabilidades:
- Expor endpoints HTTP de gestão de tenants, envio e health
- Normalizar mensagens brutas do protocol client para modelos internos
- Construir payloads dos webhooks entregues ao consumidor downstream
- Aplicar validações de endereço e mídia

Subpastas:
- normalizers/: payload bruto → InboundMessage
- payload_builders/: eventos → JSON de webhook
- validators/: política de endereços e mídia
- routes/: endpoints HTTP (tenants, health)

NÃO PODE conter: FSM, regras de sessão, ciclo de vida de conexão.
"""
