"""
Exports públicos do módulo fsm/manager.

Máquina de estados (FSMStateMachine) da conexão de cada tenant.
"""

from fsm.manager.machine import (
    DEFAULT_HISTORY_SIZE,
    FSMStateMachine,
    create_fsm,
)

__all__ = [
    "DEFAULT_HISTORY_SIZE",
    "FSMStateMachine",
    "create_fsm",
]
