"""
Exports públicos do módulo fsm/states.

Estados canônicos da conexão de cada tenant.
"""

from fsm.states.connection import (
    DEFAULT_INITIAL_STATE,
    IN_PROGRESS_STATES,
    LIVE_STATES,
    RESTARTABLE_STATES,
    ConnectionState,
    is_restartable,
)

__all__ = [
    "DEFAULT_INITIAL_STATE",
    "IN_PROGRESS_STATES",
    "LIVE_STATES",
    "RESTARTABLE_STATES",
    "ConnectionState",
    "is_restartable",
]
