"""Rotas de gestão de tenants (sessões WhatsApp)."""

from api.routes.tenants.router import router

__all__ = ["router"]
