"""
Exports públicos do módulo fsm/rules.

Guards de transição e classificação de quedas de conexão.
"""

from fsm.rules.disconnect import (
    LOGOUT_REASONS,
    LOGOUT_STATUS_CODES,
    DisconnectKind,
    ReconnectDecision,
    classify_disconnect,
    compute_backoff_delay,
    decide_reconnect,
)
from fsm.rules.guards import (
    DEFAULT_GUARDS,
    REFLEXIVE_STATES,
    Guard,
    GuardResult,
    evaluate_guards,
    guard_same_state,
)

__all__ = [
    "DEFAULT_GUARDS",
    "LOGOUT_REASONS",
    "LOGOUT_STATUS_CODES",
    "REFLEXIVE_STATES",
    "DisconnectKind",
    "Guard",
    "GuardResult",
    "ReconnectDecision",
    "classify_disconnect",
    "compute_backoff_delay",
    "decide_reconnect",
    "evaluate_guards",
    "guard_same_state",
]
