"""
Regras de transição válidas entre estados da conexão.

Este módulo define o grafo de transições da máquina de estados
de cada tenant. Transições reflexivas presentes no mapa são
filtradas pelos guards (apenas AWAITING_PAIRING e CLOSING).
"""

from fsm.states.connection import ConnectionState

TransitionMap = dict[ConnectionState, frozenset[ConnectionState]]

# Chave: estado de origem
# Valor: conjunto de estados de destino permitidos
VALID_TRANSITIONS: TransitionMap = {
    # IDLE: connect explícito
    ConnectionState.IDLE: frozenset({
        ConnectionState.CONNECTING,
    }),

    # CONNECTING: QR emitido, conexão aberta, queda ou disconnect
    ConnectionState.CONNECTING: frozenset({
        ConnectionState.AWAITING_PAIRING,
        ConnectionState.CONNECTED,
        ConnectionState.CLOSING,
        ConnectionState.FAILED,
        ConnectionState.IDLE,
    }),

    # AWAITING_PAIRING: rotação de QR, expiração (nova tentativa) ou pareamento
    ConnectionState.AWAITING_PAIRING: frozenset({
        ConnectionState.AWAITING_PAIRING,
        ConnectionState.CONNECTING,
        ConnectionState.CONNECTED,
        ConnectionState.CLOSING,
        ConnectionState.FAILED,
        ConnectionState.IDLE,
    }),

    # CONNECTED: apenas quedas ou disconnect
    ConnectionState.CONNECTED: frozenset({
        ConnectionState.CLOSING,
        ConnectionState.FAILED,
        ConnectionState.IDLE,
    }),

    # CLOSING: timer de reconexão, connect explícito, nova queda
    ConnectionState.CLOSING: frozenset({
        ConnectionState.CONNECTING,
        ConnectionState.CLOSING,
        ConnectionState.FAILED,
        ConnectionState.IDLE,
    }),

    # FAILED: só sai por connect ou disconnect explícito
    ConnectionState.FAILED: frozenset({
        ConnectionState.CONNECTING,
        ConnectionState.IDLE,
    }),
}


def get_valid_targets(state: ConnectionState) -> frozenset[ConnectionState]:
    """
    Retorna os estados de destino válidos para um estado de origem.

    Args:
        state: Estado de origem

    Returns:
        Conjunto de estados de destino permitidos
    """
    return VALID_TRANSITIONS.get(state, frozenset())


def is_transition_valid(
    from_state: ConnectionState,
    to_state: ConnectionState,
) -> bool:
    """Verifica se uma transição consta no mapa."""
    return to_state in get_valid_targets(from_state)

