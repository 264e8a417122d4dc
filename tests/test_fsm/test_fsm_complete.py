"""
Testes abrangentes para o módulo FSM da conexão.

Testamos comportamento e contrato público: estados, mapa de
transições, guards e a máquina com histórico.
"""

import pytest

from fsm import (
    DEFAULT_INITIAL_STATE,
    IN_PROGRESS_STATES,
    LIVE_STATES,
    RESTARTABLE_STATES,
    VALID_TRANSITIONS,
    ConnectionState,
    FSMStateMachine,
    GuardResult,
    StateTransition,
    TransitionResult,
    create_fsm,
    evaluate_guards,
    get_valid_targets,
    is_restartable,
    is_transition_valid,
)
from fsm.rules.guards import DEFAULT_GUARDS, REFLEXIVE_STATES, guard_same_state


class TestConnectionStates:
    """ConnectionState e conjuntos derivados."""

    def test_enum_has_six_states_and_idle_is_initial(self) -> None:
        assert len(list(ConnectionState)) == 6
        assert DEFAULT_INITIAL_STATE == ConnectionState.IDLE
        assert str(ConnectionState.CONNECTED) == "CONNECTED"

    def test_state_sets(self) -> None:
        assert RESTARTABLE_STATES == {
            ConnectionState.IDLE,
            ConnectionState.FAILED,
            ConnectionState.CLOSING,
        }
        assert IN_PROGRESS_STATES == {
            ConnectionState.CONNECTING,
            ConnectionState.AWAITING_PAIRING,
        }
        assert ConnectionState.IDLE not in LIVE_STATES
        assert ConnectionState.FAILED not in LIVE_STATES
        assert ConnectionState.CLOSING in LIVE_STATES

    def test_restartable_means_not_connected_and_no_attempt_running(self) -> None:
        for state in ConnectionState:
            expected = state not in IN_PROGRESS_STATES and state != ConnectionState.CONNECTED
            assert is_restartable(state) is expected


class TestTransitionMap:
    """VALID_TRANSITIONS e helpers."""

    def test_map_is_complete_and_every_state_reaches_idle(self) -> None:
        assert set(VALID_TRANSITIONS) == set(ConnectionState)
        for state, targets in VALID_TRANSITIONS.items():
            if state != ConnectionState.IDLE:
                assert ConnectionState.IDLE in targets, state

    @pytest.mark.parametrize(
        ("from_state", "to_state", "expected"),
        [
            (ConnectionState.IDLE, ConnectionState.CONNECTING, True),
            (ConnectionState.IDLE, ConnectionState.CONNECTED, False),
            (ConnectionState.CONNECTING, ConnectionState.AWAITING_PAIRING, True),
            (ConnectionState.AWAITING_PAIRING, ConnectionState.CONNECTING, True),
            (ConnectionState.CONNECTED, ConnectionState.CONNECTING, False),
            (ConnectionState.CONNECTED, ConnectionState.CLOSING, True),
            (ConnectionState.CLOSING, ConnectionState.CONNECTING, True),
            (ConnectionState.CLOSING, ConnectionState.CONNECTED, False),
            (ConnectionState.FAILED, ConnectionState.CONNECTING, True),
            (ConnectionState.FAILED, ConnectionState.CLOSING, False),
        ],
    )
    def test_is_transition_valid(self, from_state, to_state, expected) -> None:
        assert is_transition_valid(from_state, to_state) is expected

    def test_get_valid_targets_from_idle(self) -> None:
        assert get_valid_targets(ConnectionState.IDLE) == {ConnectionState.CONNECTING}


class TestGuards:
    """Guards de transição."""

    def test_reflexive_only_for_pairing_and_closing(self) -> None:
        assert REFLEXIVE_STATES == {ConnectionState.AWAITING_PAIRING, ConnectionState.CLOSING}
        assert guard_same_state(ConnectionState.CLOSING, ConnectionState.CLOSING).allowed
        denied = guard_same_state(ConnectionState.CONNECTED, ConnectionState.CONNECTED)
        assert not denied.allowed
        assert "reflexiva" in denied.reason

    def test_evaluate_guards_returns_first_denial(self) -> None:
        def _deny_all(from_state, to_state) -> GuardResult:
            return GuardResult.deny("bloqueado")

        result = evaluate_guards(
            ConnectionState.IDLE, ConnectionState.CONNECTING, [*DEFAULT_GUARDS, _deny_all]
        )
        assert not result.allowed
        assert result.reason == "bloqueado"

    def test_default_guards_allow_regular_transition(self) -> None:
        assert evaluate_guards(ConnectionState.IDLE, ConnectionState.CONNECTING).allowed


class TestStateMachine:
    """FSMStateMachine: transições, histórico e resumos."""

    def test_full_lifecycle_records_history(self) -> None:
        fsm = create_fsm("loja-1")
        steps = [
            (ConnectionState.CONNECTING, "connect"),
            (ConnectionState.AWAITING_PAIRING, "challenge_issued"),
            (ConnectionState.AWAITING_PAIRING, "challenge_rotated"),
            (ConnectionState.CONNECTED, "opened"),
            (ConnectionState.CLOSING, "closed"),
            (ConnectionState.CLOSING, "closed"),
            (ConnectionState.CONNECTING, "reconnect_timer"),
            (ConnectionState.CONNECTED, "opened"),
            (ConnectionState.IDLE, "disconnect"),
        ]
        for target, trigger in steps:
            result = fsm.transition(target, trigger)
            assert result.success, result.error_reason

        assert fsm.current_state == ConnectionState.IDLE
        assert len(fsm.history) == len(steps)
        assert fsm.history[0].trigger == "connect"
        assert fsm.tenant_id == "loja-1"

    def test_invalid_transition_keeps_state(self) -> None:
        fsm = FSMStateMachine()

        result = fsm.transition(ConnectionState.CONNECTED, "opened")

        assert not result.success
        assert "IDLE" in result.error_reason
        assert fsm.current_state == ConnectionState.IDLE
        assert fsm.history == []

    def test_guard_denies_reflexive_connected(self) -> None:
        fsm = FSMStateMachine(initial_state=ConnectionState.CONNECTED)

        assert not fsm.can_transition_to(ConnectionState.CONNECTED)
        assert fsm.can_transition_to(ConnectionState.CLOSING)

    def test_history_is_bounded(self) -> None:
        fsm = FSMStateMachine(initial_state=ConnectionState.AWAITING_PAIRING, history_size=3)
        for _ in range(10):
            fsm.transition(ConnectionState.AWAITING_PAIRING, "challenge_rotated")

        assert len(fsm.history) == 3

    def test_summaries_are_log_safe(self) -> None:
        fsm = create_fsm("loja-1")
        fsm.transition(ConnectionState.CONNECTING, "connect", metadata={"attempt": 0})

        summary = fsm.get_state_summary()
        history = fsm.get_history_summary()

        assert summary["current_state"] == "CONNECTING"
        assert summary["transition_count"] == 1
        assert "IDLE" in summary["valid_targets"]
        assert history[0]["from_state"] == "IDLE"
        assert history[0]["to_state"] == "CONNECTING"
        assert history[0]["metadata"] == {"attempt": 0}


class TestTypes:
    def test_state_transition_requires_trigger(self) -> None:
        with pytest.raises(ValueError):
            StateTransition(
                from_state=ConnectionState.IDLE,
                to_state=ConnectionState.CONNECTING,
                trigger=" ",
            )

    def test_transition_result_consistency(self) -> None:
        with pytest.raises(ValueError):
            TransitionResult(success=True)
        with pytest.raises(ValueError):
            TransitionResult(success=False)
