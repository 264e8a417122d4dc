"""
Estados canônicos da conexão de um tenant com a rede WhatsApp.

Cada tenant possui exatamente uma conexão lógica, cujo ciclo de vida
é governado por estes estados. Nenhum estado é terminal: FAILED e IDLE
aceitam um novo connect explícito.
"""

from enum import StrEnum


class ConnectionState(StrEnum):
    """
    Estados da conexão de um tenant.

    Estados sem cliente vivo:
        - IDLE: Sem conexão; estado inicial e pós-logout/disconnect
        - FAILED: Orçamento de reconexão esgotado; aguarda connect explícito

    Estados com cliente vivo ou reconexão agendada:
        - CONNECTING: Cliente instanciado, handshake em andamento
        - AWAITING_PAIRING: QR emitido, aguardando leitura pelo celular
        - CONNECTED: Sessão aberta e apta a enviar mensagens
        - CLOSING: Conexão caiu, reconexão agendada
    """

    IDLE = "IDLE"
    CONNECTING = "CONNECTING"
    AWAITING_PAIRING = "AWAITING_PAIRING"
    CONNECTED = "CONNECTED"
    CLOSING = "CLOSING"
    FAILED = "FAILED"

    def __str__(self) -> str:
        return self.value


# Estados a partir dos quais connect() inicia uma nova tentativa
RESTARTABLE_STATES: frozenset[ConnectionState] = frozenset({
    ConnectionState.IDLE,
    ConnectionState.FAILED,
    ConnectionState.CLOSING,
})

# Estados em que uma tentativa está em andamento (connect() não reinicia)
IN_PROGRESS_STATES: frozenset[ConnectionState] = frozenset({
    ConnectionState.CONNECTING,
    ConnectionState.AWAITING_PAIRING,
})

# Estados em que eventos Closed do cliente são tratados
LIVE_STATES: frozenset[ConnectionState] = frozenset({
    ConnectionState.CONNECTING,
    ConnectionState.AWAITING_PAIRING,
    ConnectionState.CONNECTED,
    ConnectionState.CLOSING,
})

DEFAULT_INITIAL_STATE: ConnectionState = ConnectionState.IDLE


def is_restartable(state: ConnectionState) -> bool:
    """
    Verifica se connect() inicia nova tentativa a partir do estado.

    Args:
        state: Estado a ser verificado

    Returns:
        True se o estado aceita uma nova tentativa de conexão
    """
    return state in RESTARTABLE_STATES

