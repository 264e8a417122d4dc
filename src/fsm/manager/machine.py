"""
Máquina de estados (FSMStateMachine) da conexão de um tenant.

Valida cada transição contra o mapa e os guards e mantém um
histórico limitado para diagnóstico.
"""

from collections import deque
from typing import Any

from fsm.rules.guards import GuardResult, evaluate_guards
from fsm.states.connection import DEFAULT_INITIAL_STATE, ConnectionState
from fsm.transitions.rules import get_valid_targets, is_transition_valid
from fsm.types.transition import StateTransition, TransitionResult

DEFAULT_HISTORY_SIZE = 50


class FSMStateMachine:
    """
    Máquina de estados da conexão de um tenant.

    Não é thread-safe: o TenantSession serializa o acesso
    com seu próprio lock.

    Attributes:
        current_state: Estado atual da máquina
        history: Últimas transições realizadas
    """

    __slots__ = ("_current_state", "_history", "_tenant_id")

    def __init__(
        self,
        initial_state: ConnectionState | None = None,
        tenant_id: str = "",
        history_size: int = DEFAULT_HISTORY_SIZE,
    ) -> None:
        """
        Inicializa a máquina de estados.

        Args:
            initial_state: Estado inicial (usa DEFAULT_INITIAL_STATE se None)
            tenant_id: Identificador do tenant para logs
            history_size: Quantidade máxima de transições mantidas
        """
        self._current_state = initial_state or DEFAULT_INITIAL_STATE
        self._history: deque[StateTransition] = deque(maxlen=history_size)
        self._tenant_id = tenant_id

    @property
    def current_state(self) -> ConnectionState:
        """Estado atual da máquina."""
        return self._current_state

    @property
    def history(self) -> list[StateTransition]:
        """Histórico de transições (cópia para evitar mutação externa)."""
        return list(self._history)

    @property
    def tenant_id(self) -> str:
        """Identificador do tenant."""
        return self._tenant_id

    def can_transition_to(self, target: ConnectionState) -> bool:
        """Verifica se pode transitar para o estado alvo."""
        if not is_transition_valid(self._current_state, target):
            return False
        return evaluate_guards(self._current_state, target).allowed

    def get_valid_targets(self) -> frozenset[ConnectionState]:
        """Retorna estados de destino válidos a partir do estado atual."""
        return get_valid_targets(self._current_state)

    def transition(
        self,
        target: ConnectionState,
        trigger: str,
        metadata: dict[str, Any] | None = None,
    ) -> TransitionResult:
        """
        Tenta realizar uma transição de estado.

        Args:
            target: Estado de destino
            trigger: Identificador do gatilho (ex: 'connect', 'closed')
            metadata: Dados adicionais para auditoria (nunca PII)

        Returns:
            TransitionResult com sucesso/falha e dados da transição
        """
        if not is_transition_valid(self._current_state, target):
            return TransitionResult(
                success=False,
                error_reason=(
                    f"Transição inválida: {self._current_state.name} → {target.name}"
                ),
            )

        guard_result: GuardResult = evaluate_guards(self._current_state, target)
        if not guard_result.allowed:
            return TransitionResult(
                success=False,
                error_reason=guard_result.reason,
            )

        transition = StateTransition(
            from_state=self._current_state,
            to_state=target,
            trigger=trigger,
            metadata=metadata or {},
        )

        self._current_state = target
        self._history.append(transition)

        return TransitionResult(success=True, transition=transition)

    def get_state_summary(self) -> dict[str, Any]:
        """
        Retorna resumo do estado atual para observability.

        Returns:
            Dict com informações do estado (seguro para logs)
        """
        return {
            "tenant_id": self._tenant_id,
            "current_state": self._current_state.name,
            "transition_count": len(self._history),
            "valid_targets": sorted(s.name for s in self.get_valid_targets()),
        }

    def get_history_summary(self) -> list[dict[str, Any]]:
        """Retorna histórico em formato seguro para logs."""
        return [t.to_log_dict() for t in self._history]


def create_fsm(
    tenant_id: str,
    initial_state: ConnectionState | None = None,
) -> FSMStateMachine:
    """
    Factory function para criar uma FSM.

    Args:
        tenant_id: Identificador do tenant
        initial_state: Estado inicial (opcional)

    Returns:
        FSMStateMachine configurada
    """
    return FSMStateMachine(
        initial_state=initial_state,
        tenant_id=tenant_id,
    )
