"""App — coração do gateway: sessões, infraestrutura e wiring.

Subpastas:
- bootstrap/: composition root (factories, inicialização, wiring)
- sessions/: TenantSession, TenantRegistry e pipeline de entrada
- infra/: implementações concretas de IO (stores, webhook, whatsapp)
- protocols/: contratos/interfaces
- observability/: correlation_id e métricas via log

Padrão: app executa; api adapta; fsm governa; utils apoia.
"""
