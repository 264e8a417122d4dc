"""
Guards aplicados às transições de estado da conexão.

Guards rodam depois da checagem do mapa de transições e podem
bloquear transições que o mapa aceitaria.
"""

from collections.abc import Callable

from fsm.states.connection import ConnectionState

# Estados que podem transitar para si mesmos
REFLEXIVE_STATES: frozenset[ConnectionState] = frozenset({
    ConnectionState.AWAITING_PAIRING,  # rotação do QR
    ConnectionState.CLOSING,  # queda durante a espera de reconexão
})


class GuardResult:
    """
    Resultado da avaliação de um guard.

    Attributes:
        allowed: Se a transição é permitida
        reason: Motivo do bloqueio (se allowed=False)
    """

    __slots__ = ("allowed", "reason")

    def __init__(self, allowed: bool, reason: str | None = None) -> None:
        self.allowed = allowed
        self.reason = reason

    @classmethod
    def allow(cls) -> "GuardResult":
        """Cria resultado permitindo a transição."""
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: str) -> "GuardResult":
        """Cria resultado negando a transição."""
        return cls(allowed=False, reason=reason)


Guard = Callable[[ConnectionState, ConnectionState], GuardResult]


def guard_same_state(
    from_state: ConnectionState,
    to_state: ConnectionState,
) -> GuardResult:
    """
    Guard: transições reflexivas só para os estados de REFLEXIVE_STATES.

    Args:
        from_state: Estado de origem
        to_state: Estado de destino

    Returns:
        GuardResult indicando se transição é permitida
    """
    if from_state != to_state or from_state in REFLEXIVE_STATES:
        return GuardResult.allow()

    return GuardResult.deny(
        f"Transição reflexiva não permitida: {from_state.name} → {to_state.name}"
    )


# Todos devem retornar allow() para a transição prosseguir
DEFAULT_GUARDS: list[Guard] = [
    guard_same_state,
]


def evaluate_guards(
    from_state: ConnectionState,
    to_state: ConnectionState,
    guards: list[Guard] | None = None,
) -> GuardResult:
    """
    Avalia todos os guards para uma transição.

    Args:
        from_state: Estado de origem
        to_state: Estado de destino
        guards: Lista de guards a aplicar (usa DEFAULT_GUARDS se None)

    Returns:
        GuardResult do primeiro guard que negar, ou allow() se todos passarem
    """
    guards_to_apply = guards if guards is not None else DEFAULT_GUARDS

    for guard in guards_to_apply:
        result = guard(from_state, to_state)
        if not result.allowed:
            return result

    return GuardResult.allow()
