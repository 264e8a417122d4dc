"""TenantSession — ciclo de vida da conexão de um tenant.

Cada sessão possui um protocol client por tentativa, a FSM da conexão,
os timers de reconexão e de expiração do QR e o contador de tentativas.

Concorrência:
    - Eventos do cliente entram numa fila (generation, evento) e são
      aplicados em ordem por uma task de bombeamento.
    - Mensagens recebidas só são extraídas e filtradas no bombeamento;
      perfil, mídia e webhook rodam em background no InboundProcessor.
    - Operações explícitas, timers e eventos de estado tomam o mesmo lock.
    - Envios não tomam o lock: falham rápido fora de CONNECTED.
    - Eventos e timers de um cliente antigo (generation diferente) são ignorados.
"""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

from api.validators.whatsapp import (
    to_jid,
    validate_address,
    validate_media_file,
    validate_media_kind,
)
from app.observability import (
    record_latency,
    record_reconnect_scheduled,
    record_state_transition,
)
from app.sessions.events import (
    ClientEvent,
    Closed,
    CredsUpdated,
    EventSink,
    MessageReceived,
    Opened,
    PairingChallengeIssued,
)
from app.sessions.models import (
    ConnectOutcome,
    PairingChallenge,
    SendResult,
    StatusKind,
    StatusWebhookEvent,
    TenantStatus,
)
from app.sessions.timers import SessionTimer
from config.logging import mask_address
from fsm import (
    IN_PROGRESS_STATES,
    LIVE_STATES,
    ConnectionState,
    DisconnectKind,
    FSMStateMachine,
    classify_disconnect,
    create_fsm,
    decide_reconnect,
    is_restartable,
)
from utils.errors import (
    GatewayError,
    NotConnectedError,
    PersistenceError,
    TransportError,
)

if TYPE_CHECKING:
    from app.infra.webhook import WebhookRelay
    from app.protocols.credential_store import CredentialStoreProtocol
    from app.protocols.protocol_client import ProtocolClient, ProtocolClientFactory
    from app.sessions.inbound import InboundProcessor
    from config.settings import AddressPolicySettings, GatewaySettings

logger = logging.getLogger(__name__)


class TenantSession:
    """Sessão de um tenant; criada e destruída exclusivamente pelo registry.

    Args:
        tenant_id: Identificador do tenant (imutável)
        client_factory: Factory de protocol clients
        credential_store: Store de credenciais
        relay: WebhookRelay para eventos de status
        inbound: Pipeline de mensagens recebidas
        settings: Parâmetros de reconexão, pareamento e timeouts
        address_policy: Política de destinatários
    """

    def __init__(
        self,
        tenant_id: str,
        *,
        client_factory: ProtocolClientFactory,
        credential_store: CredentialStoreProtocol,
        relay: WebhookRelay,
        inbound: InboundProcessor,
        settings: GatewaySettings,
        address_policy: AddressPolicySettings,
    ) -> None:
        if not tenant_id:
            raise ValueError("tenant_id não pode ser vazio")
        self._tenant_id = tenant_id
        self._client_factory = client_factory
        self._store = credential_store
        self._relay = relay
        self._inbound = inbound
        self._settings = settings
        self._address_policy = address_policy

        self._fsm: FSMStateMachine = create_fsm(tenant_id)
        self._lock = asyncio.Lock()
        self._queue: asyncio.Queue[tuple[int, ClientEvent]] = asyncio.Queue()
        self._pump_task: asyncio.Task[None] | None = None

        self._client: ProtocolClient | None = None
        self._generation = 0
        self._credentials = b""
        self._reconnect_attempts = 0
        self._reconnect_timer = SessionTimer("reconnect", tenant_id)
        self._pairing_timer = SessionTimer("pairing_expiry", tenant_id)
        self._pairing_challenge: PairingChallenge | None = None
        self._account_id: str | None = None
        self._last_error: str | None = None
        self._updated_at = datetime.now(UTC)

    # ──────────────────────────────────────────────────────────────
    # Leitura
    # ──────────────────────────────────────────────────────────────

    @property
    def tenant_id(self) -> str:
        return self._tenant_id

    @property
    def state(self) -> ConnectionState:
        return self._fsm.current_state

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def reconnect_attempts(self) -> int:
        return self._reconnect_attempts

    @property
    def pairing_challenge(self) -> PairingChallenge | None:
        return self._pairing_challenge

    @property
    def reconnect_pending(self) -> bool:
        return self._reconnect_timer.pending

    @property
    def pairing_expiry_pending(self) -> bool:
        return self._pairing_timer.pending

    @property
    def has_client(self) -> bool:
        return self._client is not None

    def status(self) -> TenantStatus:
        """Snapshot atual (não toma o lock)."""
        return TenantStatus(
            tenant_id=self._tenant_id,
            state=self.state,
            has_pairing_challenge=self._pairing_challenge is not None,
            reconnect_attempts=self._reconnect_attempts,
            last_error=self._last_error,
            account_id=self._account_id,
            updated_at=self._updated_at,
            recent_transitions=tuple(self._fsm.get_history_summary()[-10:]),
        )

    async def wait_for_events(self) -> None:
        """Aguarda a fila de eventos esvaziar e os enriquecimentos pendentes."""
        await self._queue.join()
        await self._inbound.join()

    # ──────────────────────────────────────────────────────────────
    # Operações explícitas
    # ──────────────────────────────────────────────────────────────

    async def connect(self) -> ConnectOutcome:
        """Inicia uma tentativa nova, salvo se já conectado/conectando.

        Raises:
            TransportError: Se o connect do cliente falhar ou expirar
            PersistenceError: Se as credenciais não puderem ser carregadas
        """
        async with self._lock:
            state = self.state
            if not is_restartable(state):
                if state == ConnectionState.CONNECTED:
                    return ConnectOutcome.ALREADY_CONNECTED
                return ConnectOutcome.IN_PROGRESS

            self._reconnect_timer.cancel()
            self._pairing_timer.cancel()
            self._reconnect_attempts = 0
            await self._start_attempt("connect")
            return ConnectOutcome.ACCEPTED

    async def disconnect(self) -> None:
        """Encerra a conexão e vai para IDLE, mantendo credenciais."""
        async with self._lock:
            was_idle = self.state == ConnectionState.IDLE
            await self._teardown("disconnect", logout=False)
        if not was_idle:
            self._notify(StatusKind.DISCONNECTED, reason="disconnect_requested")

    async def destroy(self) -> None:
        """Como disconnect, com logout best-effort e remoção das credenciais.

        Raises:
            PersistenceError: Se o blob não puder ser removido
        """
        try:
            async with self._lock:
                await self._teardown("destroy", logout=True)
                self._credentials = b""
                await self._store.delete_async(self._tenant_id)
        finally:
            await self._stop_pump()
        logger.info("tenant_session_destroyed", extra={"tenant_id": self._tenant_id})
        self._notify(StatusKind.LOGGED_OUT, reason="tenant_deleted")

    async def close(self) -> None:
        """Encerra a sessão no shutdown do processo (sem logout, sem webhook)."""
        try:
            async with self._lock:
                await self._teardown("shutdown", logout=False)
        finally:
            await self._stop_pump()

    async def send_message(self, address: str, text: str) -> SendResult:
        """Envia texto para um endereço.

        Raises:
            NotConnectedError: Se a sessão não está CONNECTED
            InvalidAddressError: Se o endereço não passa na política
            TransportError: Falha ou timeout do transporte
        """
        client = self._require_connected_client()
        digits = validate_address(address, self._address_policy)
        message_id = await self._call_transport(
            "send_text", client.send_text(to_jid(digits), text), address=digits
        )
        return SendResult(success=True, message_id=message_id)

    async def send_media(
        self,
        address: str,
        media_kind: str,
        file_path: str,
        caption: str | None = None,
    ) -> SendResult:
        """Envia arquivo local como mídia.

        Raises:
            NotConnectedError: Se a sessão não está CONNECTED
            InvalidAddressError: Se o endereço não passa na política
            InvalidMediaError: Tipo inválido, arquivo inexistente ou fora
                de media_send_dir
            TransportError: Falha do transporte ou cliente sem suporte a mídia
        """
        client = self._require_connected_client()
        digits = validate_address(address, self._address_policy)
        kind = validate_media_kind(media_kind)
        path: Path = await asyncio.to_thread(
            validate_media_file, file_path, self._settings.media_send_dir
        )

        send_media = getattr(client, "send_media", None)
        if send_media is None:
            raise TransportError(
                "Protocol client não suporta envio de mídia", tenant_id=self._tenant_id
            )
        data = await asyncio.to_thread(path.read_bytes)
        message_id = await self._call_transport(
            "send_media",
            send_media(to_jid(digits), kind.value, data, path.name, caption or None),
            address=digits,
        )
        return SendResult(success=True, message_id=message_id)

    def _require_connected_client(self) -> ProtocolClient:
        client = self._client
        if self.state != ConnectionState.CONNECTED or client is None:
            raise NotConnectedError(
                f"Tenant não conectado (estado {self.state})", tenant_id=self._tenant_id
            )
        return client

    async def _call_transport(self, operation: str, call: Any, *, address: str) -> str | None:
        start = time.perf_counter()
        try:
            message_id = await asyncio.wait_for(call, self._settings.send_timeout_seconds)
        except TimeoutError as exc:
            logger.warning(
                "send_timeout",
                extra={"tenant_id": self._tenant_id, "operation": operation},
            )
            raise TransportError(
                f"Timeout em {operation}", tenant_id=self._tenant_id
            ) from exc
        except GatewayError:
            raise
        except Exception as exc:
            logger.warning(
                "send_failed",
                extra={
                    "tenant_id": self._tenant_id,
                    "operation": operation,
                    "error_type": type(exc).__name__,
                },
            )
            raise TransportError(
                f"Falha em {operation}: {exc}", tenant_id=self._tenant_id
            ) from exc

        record_latency(
            "tenant_session",
            operation,
            (time.perf_counter() - start) * 1000,
            tenant_id=self._tenant_id,
        )
        logger.info(
            "message_sent",
            extra={
                "tenant_id": self._tenant_id,
                "operation": operation,
                "recipient": mask_address(address),
            },
        )
        return str(message_id) if message_id is not None else None

    # ──────────────────────────────────────────────────────────────
    # Tentativas de conexão (chamadas com o lock tomado)
    # ──────────────────────────────────────────────────────────────

    async def _start_attempt(self, trigger: str) -> None:
        """Descarta o cliente atual e conecta um cliente novo."""
        old_client = self._client
        self._client = None
        if old_client is not None:
            await self._close_client(old_client, logout=False)

        self._generation += 1
        generation = self._generation
        self._transition(ConnectionState.CONNECTING, trigger, attempt=self._reconnect_attempts)

        try:
            stored = await self._store.load_async(self._tenant_id)
        except PersistenceError as exc:
            self._last_error = "credentials_unavailable"
            logger.error(
                "credentials_load_failed",
                extra={"tenant_id": self._tenant_id, "error": str(exc)},
            )
            await self._handle_closed(Closed(reason="credentials_unavailable"))
            raise

        self._credentials = stored or b""
        client = self._client_factory(
            self._tenant_id, self._credentials, self._make_sink(generation)
        )
        self._client = client
        self._ensure_pump()

        start = time.perf_counter()
        try:
            await asyncio.wait_for(client.connect(), self._settings.connect_timeout_seconds)
        except Exception as exc:
            self._last_error = f"connect_failed: {type(exc).__name__}"
            logger.warning(
                "client_connect_failed",
                extra={
                    "tenant_id": self._tenant_id,
                    "generation": generation,
                    "error_type": type(exc).__name__,
                },
            )
            # Eventos tardios do cliente que falhou não contam outra queda
            self._generation += 1
            await self._handle_closed(Closed(reason="connect_failed"))
            raise TransportError(
                "Falha ao iniciar conexão", tenant_id=self._tenant_id
            ) from exc

        record_latency(
            "tenant_session",
            "connect",
            (time.perf_counter() - start) * 1000,
            tenant_id=self._tenant_id,
        )
        logger.info(
            "client_connect_started",
            extra={
                "tenant_id": self._tenant_id,
                "generation": generation,
                "has_credentials": bool(self._credentials),
            },
        )

    async def _close_client(self, client: ProtocolClient, *, logout: bool) -> None:
        """Fecha cliente (best effort, limitado por close_timeout_seconds)."""
        operations = ["logout", "close"] if logout else ["close"]
        for operation in operations:
            call = getattr(client, operation)
            try:
                await asyncio.wait_for(call(), self._settings.close_timeout_seconds)
            except Exception as exc:
                logger.info(
                    "client_close_failed",
                    extra={
                        "tenant_id": self._tenant_id,
                        "operation": operation,
                        "error_type": type(exc).__name__,
                    },
                )

    async def _teardown(self, trigger: str, *, logout: bool) -> None:
        self._reconnect_timer.cancel()
        self._pairing_timer.cancel()
        # Eventos ainda na fila do cliente antigo passam a ser obsoletos
        self._generation += 1
        client = self._client
        self._client = None
        if client is not None:
            await self._close_client(client, logout=logout)
        if self.state != ConnectionState.IDLE:
            self._transition(ConnectionState.IDLE, trigger)

    async def _on_reconnect_timer(self, generation: int) -> None:
        async with self._lock:
            if generation != self._generation or self.state != ConnectionState.CLOSING:
                logger.debug(
                    "reconnect_timer_stale",
                    extra={"tenant_id": self._tenant_id, "generation": generation},
                )
                return
            try:
                await self._start_attempt("reconnect_timer")
            except GatewayError as exc:
                logger.warning(
                    "reconnect_attempt_failed",
                    extra={
                        "tenant_id": self._tenant_id,
                        "attempt": self._reconnect_attempts,
                        "error_type": type(exc).__name__,
                    },
                )

    async def _on_pairing_expired(self, generation: int) -> None:
        async with self._lock:
            if generation != self._generation or self.state != ConnectionState.AWAITING_PAIRING:
                return
            logger.info(
                "pairing_challenge_expired",
                extra={"tenant_id": self._tenant_id, "generation": generation},
            )
            self._pairing_challenge = None
            self._reconnect_attempts = 0
            try:
                await self._start_attempt("pairing_expired")
            except GatewayError as exc:
                logger.warning(
                    "pairing_renewal_failed",
                    extra={"tenant_id": self._tenant_id, "error_type": type(exc).__name__},
                )

    # ──────────────────────────────────────────────────────────────
    # Eventos do cliente
    # ──────────────────────────────────────────────────────────────

    def _make_sink(self, generation: int) -> EventSink:
        loop = asyncio.get_running_loop()
        queue = self._queue

        def emit(event: ClientEvent) -> None:
            item = (generation, event)
            try:
                running = asyncio.get_running_loop()
            except RuntimeError:
                running = None
            if running is loop:
                queue.put_nowait(item)
            else:
                loop.call_soon_threadsafe(queue.put_nowait, item)

        return emit

    def _ensure_pump(self) -> None:
        if self._pump_task is None or self._pump_task.done():
            self._pump_task = asyncio.create_task(
                self._pump(), name=f"session_pump:{self._tenant_id}"
            )

    async def _stop_pump(self) -> None:
        task = self._pump_task
        self._pump_task = None
        if task is None or task.done():
            return
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)
        # Descarta eventos restantes para não bloquear wait_for_events
        while not self._queue.empty():
            self._queue.get_nowait()
            self._queue.task_done()

    async def _pump(self) -> None:
        while True:
            generation, event = await self._queue.get()
            try:
                await self._process_event(generation, event)
            except Exception:
                logger.exception(
                    "session_event_failed",
                    extra={
                        "tenant_id": self._tenant_id,
                        "event": type(event).__name__,
                        "generation": generation,
                    },
                )
            finally:
                self._queue.task_done()

    async def _process_event(self, generation: int, event: ClientEvent) -> None:
        async with self._lock:
            if generation != self._generation:
                self._log_stale(generation, event)
                return
            await self._apply_event(event)

    def _log_stale(self, generation: int, event: ClientEvent) -> None:
        logger.debug(
            "stale_event_ignored",
            extra={
                "tenant_id": self._tenant_id,
                "event": type(event).__name__,
                "generation": generation,
                "current_generation": self._generation,
            },
        )

    async def _apply_event(self, event: ClientEvent) -> None:
        if isinstance(event, MessageReceived):
            # Só extração e filtro aqui; perfil e mídia vão para background
            self._inbound.submit(self._tenant_id, self._client, event.raw)
        elif isinstance(event, PairingChallengeIssued):
            self._handle_challenge(event)
        elif isinstance(event, Opened):
            await self._handle_opened(event)
        elif isinstance(event, Closed):
            await self._handle_closed(event)
        elif isinstance(event, CredsUpdated):
            self._credentials = event.credentials
            await self._save_credentials()

    def _handle_challenge(self, event: PairingChallengeIssued) -> None:
        if self.state not in IN_PROGRESS_STATES:
            logger.debug(
                "pairing_challenge_ignored",
                extra={"tenant_id": self._tenant_id, "state": self.state.value},
            )
            return
        rotated = self.state == ConnectionState.AWAITING_PAIRING
        self._transition(
            ConnectionState.AWAITING_PAIRING,
            "challenge_rotated" if rotated else "challenge_issued",
        )
        ttl = self._settings.pairing_challenge_ttl_seconds
        self._pairing_challenge = PairingChallenge.issue(event.token, ttl)
        generation = self._generation
        self._pairing_timer.arm(ttl, lambda: self._on_pairing_expired(generation))
        self._notify(StatusKind.AWAITING_PAIRING, pairing_challenge=event.token)

    async def _handle_opened(self, event: Opened) -> None:
        if self.state not in IN_PROGRESS_STATES:
            logger.debug(
                "opened_event_ignored",
                extra={"tenant_id": self._tenant_id, "state": self.state.value},
            )
            return
        self._transition(ConnectionState.CONNECTED, "opened")
        self._reconnect_attempts = 0
        self._last_error = None
        if event.account_id:
            self._account_id = event.account_id
        await self._save_credentials()
        logger.info(
            "tenant_connected",
            extra={"tenant_id": self._tenant_id, "account": mask_address(self._account_id)},
        )
        self._notify(StatusKind.CONNECTED)

    async def _handle_closed(self, event: Closed) -> None:
        """Classifica a queda: logout limpa tudo; demais reconectam no orçamento."""
        if self.state not in LIVE_STATES:
            logger.debug(
                "closed_event_ignored",
                extra={"tenant_id": self._tenant_id, "state": self.state.value},
            )
            return

        kind = classify_disconnect(event.status_code, event.reason)
        self._pairing_timer.cancel()
        client = self._client
        self._client = None
        if client is not None:
            await self._close_client(client, logout=False)

        logger.info(
            "connection_closed",
            extra={
                "tenant_id": self._tenant_id,
                "status_code": event.status_code,
                "reason": event.reason,
                "disconnect_kind": kind.value,
                "attempt": self._reconnect_attempts,
            },
        )

        if kind == DisconnectKind.LOGOUT:
            await self._handle_logout(event)
            return

        decision = decide_reconnect(
            self._reconnect_attempts,
            max_attempts=self._settings.max_reconnect_attempts,
            base_delay=self._settings.reconnect_base_delay_seconds,
            max_delay=self._settings.reconnect_max_delay_seconds,
        )
        if not decision.schedule:
            self._reconnect_timer.cancel()
            self._last_error = event.reason or "reconnect_exhausted"
            self._transition(ConnectionState.FAILED, "reconnect_exhausted")
            logger.warning(
                "reconnect_budget_exhausted",
                extra={"tenant_id": self._tenant_id, "attempt": self._reconnect_attempts},
            )
            self._notify(StatusKind.FAILED, reason=event.reason or None)
            return

        self._reconnect_attempts = decision.attempt
        self._last_error = event.reason or None
        self._transition(ConnectionState.CLOSING, "closed", reason=event.reason)
        generation = self._generation
        self._reconnect_timer.arm(
            decision.delay_seconds, lambda: self._on_reconnect_timer(generation)
        )
        record_reconnect_scheduled(
            self._tenant_id,
            decision.attempt,
            decision.delay_seconds,
            self._settings.max_reconnect_attempts,
        )
        self._notify(StatusKind.DISCONNECTED, reason=event.reason or None)

    async def _handle_logout(self, event: Closed) -> None:
        self._reconnect_timer.cancel()
        self._reconnect_attempts = 0
        self._credentials = b""
        self._account_id = None
        self._last_error = event.reason or "logged_out"
        self._transition(ConnectionState.IDLE, "logged_out")
        try:
            await self._store.delete_async(self._tenant_id)
        except PersistenceError as exc:
            logger.error(
                "credentials_delete_failed",
                extra={"tenant_id": self._tenant_id, "error": str(exc)},
            )
        self._notify(StatusKind.LOGGED_OUT, reason=event.reason or None)

    async def _save_credentials(self) -> None:
        if not self._credentials:
            return
        try:
            await self._store.save_async(self._tenant_id, self._credentials)
        except PersistenceError as exc:
            # Sessão segue em memória; próxima atualização tenta de novo
            logger.error(
                "credentials_save_failed",
                extra={"tenant_id": self._tenant_id, "error": str(exc)},
            )

    # ──────────────────────────────────────────────────────────────
    # Helpers
    # ──────────────────────────────────────────────────────────────

    def _transition(self, target: ConnectionState, trigger: str, **metadata: Any) -> bool:
        from_state = self.state
        result = self._fsm.transition(
            target,
            trigger,
            metadata={k: v for k, v in metadata.items() if v is not None},
        )
        if not result.success:
            logger.warning(
                "invalid_state_transition",
                extra={
                    "tenant_id": self._tenant_id,
                    "from_state": from_state.value,
                    "to_state": target.value,
                    "trigger": trigger,
                    "error": result.error_reason,
                },
            )
            return False

        if target != ConnectionState.AWAITING_PAIRING:
            self._pairing_challenge = None
            self._pairing_timer.cancel()
        self._updated_at = datetime.now(UTC)
        record_state_transition(
            self._tenant_id, from_state.value, target.value, trigger, self._generation
        )
        return True

    def _notify(
        self,
        status: StatusKind,
        *,
        pairing_challenge: str | None = None,
        reason: str | None = None,
    ) -> None:
        self._relay.dispatch(
            StatusWebhookEvent(
                tenant_id=self._tenant_id,
                status=status,
                reconnect_attempts=self._reconnect_attempts,
                pairing_challenge=pairing_challenge,
                reason=reason,
            )
        )
