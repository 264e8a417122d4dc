"""
Módulo FSM — Máquina de estados da conexão de cada tenant.

Implementa a FSM determinística que governa o ciclo de vida
da conexão: estabelecimento, pareamento, quedas e reconexão.

Estrutura:
    - states/: Definições dos estados (ConnectionState enum)
    - transitions/: Regras de transição (VALID_TRANSITIONS)
    - rules/: Guards e classificação de quedas
    - manager/: Máquina de estados (FSMStateMachine)
    - types/: Tipos de dados (StateTransition, TransitionResult)
"""

# Manager
from fsm.manager import (
    FSMStateMachine,
    create_fsm,
)

# Guards/Rules
from fsm.rules import (
    DisconnectKind,
    GuardResult,
    ReconnectDecision,
    classify_disconnect,
    compute_backoff_delay,
    decide_reconnect,
    evaluate_guards,
)

# Estados
from fsm.states import (
    DEFAULT_INITIAL_STATE,
    IN_PROGRESS_STATES,
    LIVE_STATES,
    RESTARTABLE_STATES,
    ConnectionState,
    is_restartable,
)

# Transições
from fsm.transitions import (
    VALID_TRANSITIONS,
    get_valid_targets,
    is_transition_valid,
)

# Types
from fsm.types import (
    StateTransition,
    TransitionResult,
)

__all__ = [
    "DEFAULT_INITIAL_STATE",
    "IN_PROGRESS_STATES",
    "LIVE_STATES",
    "RESTARTABLE_STATES",
    # Transições
    "VALID_TRANSITIONS",
    # Estados
    "ConnectionState",
    # Rules
    "DisconnectKind",
    # Manager
    "FSMStateMachine",
    # Guards
    "GuardResult",
    "ReconnectDecision",
    # Types
    "StateTransition",
    "TransitionResult",
    "classify_disconnect",
    "compute_backoff_delay",
    "create_fsm",
    "decide_reconnect",
    "evaluate_guards",
    "get_valid_targets",
    "is_restartable",
    "is_transition_valid",
]
