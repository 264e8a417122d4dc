"""Rotas HTTP da API.

Responsabilidades:
- Definir endpoints HTTP (tenants, health)
- Validação inicial de request (path, headers, body pydantic)
- Tradução de erros de domínio para status HTTP

Agregação:
- router.py: registra todos os routers no app principal
- errors.py: handlers de exceção
"""

from __future__ import annotations

from api.routes.errors import register_exception_handlers
from api.routes.router import create_api_router

__all__ = ["create_api_router", "register_exception_handlers"]
