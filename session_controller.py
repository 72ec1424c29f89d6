"""State-machine based session orchestration."""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Optional

from errors import (
    ERROR_MESSAGES,
    IDLE_TEXT,
    LISTENING_TEXT,
    LOADING_TEXT,
    MODEL_NOT_READY,
    PERMISSION_DENIED,
    START_ERROR,
    START_FAILED_TEXT,
    ModelCreateError,
    ModelLoadError,
    RecognizerCreateError,
    SessionCreateError,
    SpeechEngineError,
)
from interfaces import PermissionProvider, SpeechEngine, StreamingSession
from models import AppLifecycleState, PermissionStatus, RecognitionKind, SessionState
from transcript import DisplayText, TranscriptDispatcher

logger = logging.getLogger(__name__)

StateCallback = Callable[[SessionState, SessionState], None]
TextCallback = Callable[[str], None]
ErrorCallback = Callable[[str, str], None]

DEFAULT_SAMPLE_RATE = 16000


class _Disposed(Exception):
    pass


class SessionController:
    """Owns the engine handles and the session state of one screen.

    ``initialize`` runs once; ``start_session``/``stop_session`` toggle
    recording.  Only one engine call is in flight at a time and commands that
    arrive meanwhile are dropped, not queued.
    """

    def __init__(
        self,
        engine: SpeechEngine,
        permissions: PermissionProvider,
        model_asset: str,
        sample_rate: int = DEFAULT_SAMPLE_RATE,
        release_timeout_s: float = 2.0,
        parse_workers: int = 2,
        on_state_change: Optional[StateCallback] = None,
        on_text: Optional[TextCallback] = None,
        on_error: Optional[ErrorCallback] = None,
    ) -> None:
        self._engine = engine
        self._permissions = permissions
        self._model_asset = model_asset
        self._sample_rate = sample_rate
        self._release_timeout_s = release_timeout_s
        self._on_state_change = on_state_change
        self._on_error = on_error

        self._lock = threading.RLock()
        self._idle = threading.Condition(self._lock)
        self._state = SessionState.UNINITIALIZED
        self._error_message = ""
        self._busy = False
        self._stop_requested = False
        self._disposed = False

        self._model: Any = None
        self._recognizer: Any = None
        self._session: Optional[StreamingSession] = None

        self._display = DisplayText(IDLE_TEXT, on_change=on_text)
        self._dispatcher = TranscriptDispatcher(self._display, max_workers=parse_workers)

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def error_message(self) -> str:
        return self._error_message

    @property
    def display_text(self) -> str:
        return self._display.value

    @property
    def is_busy(self) -> bool:
        return self._busy

    # ------------------------------------------------------------------
    # Initialization
    # ------------------------------------------------------------------

    def initialize(self) -> None:
        with self._lock:
            if self._state != SessionState.UNINITIALIZED or self._busy or self._disposed:
                return
            self._busy = True
            self._transition(SessionState.LOADING_MODEL)
            self._display.set(LOADING_TEXT)
        try:
            self._run_initialization()
        finally:
            with self._lock:
                self._set_idle()
                disposed = self._disposed
            if disposed:
                self._release_all(stop_first=False)

    def _run_initialization(self) -> None:
        if self._request_permission() != PermissionStatus.GRANTED:
            message = ERROR_MESSAGES[PERMISSION_DENIED]
            with self._lock:
                self._error_message = message
                self._transition(SessionState.PERMISSION_DENIED)
                self._display.set(message)
                self._emit_error(PERMISSION_DENIED, message)
            return

        try:
            model_path = self._step(
                ModelLoadError, "Failed to load model", self._engine.load_model_asset, self._model_asset
            )
            self._check_alive()
            self._model = self._step(
                ModelCreateError, "Failed to create model", self._engine.create_model, model_path
            )
            self._check_alive()
            self._recognizer = self._step(
                RecognizerCreateError,
                "Failed to create recognizer",
                self._engine.create_recognizer,
                self._model,
                self._sample_rate,
            )
            self._check_alive()
            self._session = self._step(
                SessionCreateError,
                "Failed to start speech service",
                self._engine.create_streaming_session,
                self._recognizer,
            )
            self._check_alive()
            self._step(SessionCreateError, "Failed to subscribe to results", self._subscribe, self._session)
        except _Disposed:
            logger.info("Disposed during initialization, releasing engine handles")
            return
        except SpeechEngineError as exc:
            logger.error("Vosk initialization error: %s", exc)
            with self._lock:
                self._error_message = str(exc)
                self._transition(SessionState.ERROR)
                self._display.set(str(exc))
                self._emit_error(exc.code, str(exc))
            return

        with self._lock:
            if self._disposed:
                return
            self._transition(SessionState.READY)
            self._display.set(IDLE_TEXT)
        logger.info("Model ready (%s @ %d Hz)", self._model_asset, self._sample_rate)

    def _subscribe(self, session: StreamingSession) -> None:
        session.on_partial(self._handle_partial)
        session.on_final(self._handle_final)

    def _request_permission(self) -> PermissionStatus:
        try:
            return self._permissions.request_microphone_permission()
        except Exception:
            logger.exception("Microphone permission request failed")
            return PermissionStatus.DENIED

    def _step(
        self,
        error_cls: type[SpeechEngineError],
        label: str,
        func: Callable[..., Any],
        *args: Any,
    ) -> Any:
        try:
            return func(*args)
        except Exception as exc:
            raise error_cls(f"{label}: {exc}") from exc

    def _check_alive(self) -> None:
        with self._lock:
            if self._disposed:
                raise _Disposed()

    # ------------------------------------------------------------------
    # Start / stop
    # ------------------------------------------------------------------

    def start_session(self) -> bool:
        with self._lock:
            if self._state != SessionState.READY or self._busy or self._disposed:
                if self._state not in (SessionState.READY, SessionState.RECORDING):
                    self._emit_error(MODEL_NOT_READY, ERROR_MESSAGES[MODEL_NOT_READY])
                return False
            session = self._session
            self._busy = True
            self._stop_requested = False
            self._transition(SessionState.RECORDING)
            self._display.set(LISTENING_TEXT)

        try:
            session.start()
        except Exception as exc:
            logger.warning("Start recognition error: %s", exc)
            with self._lock:
                if self._state == SessionState.RECORDING:
                    self._transition(SessionState.READY)
                self._display.set(START_FAILED_TEXT)
                self._set_idle()
                self._emit_error(START_ERROR, str(exc))
            return False

        with self._lock:
            stop_now = self._stop_requested and self._state == SessionState.RECORDING
            self._stop_requested = False
            self._set_idle()
        if stop_now:
            logger.info("Stop requested while starting, stopping now")
            self.stop_session()
        return True

    def stop_session(self) -> bool:
        with self._lock:
            if self._state != SessionState.RECORDING or self._busy:
                return False
            session = self._session
            self._busy = True
            self._transition(SessionState.READY)

        try:
            session.stop()
        except Exception as exc:
            logger.warning("Stop recognition error: %s", exc)
        finally:
            with self._lock:
                self._set_idle()
        return True

    # ------------------------------------------------------------------
    # Host lifecycle
    # ------------------------------------------------------------------

    def handle_lifecycle(self, state: AppLifecycleState) -> None:
        if state in (AppLifecycleState.INACTIVE, AppLifecycleState.PAUSED):
            self._force_stop()
        elif state == AppLifecycleState.DETACHED:
            self.dispose()

    def _force_stop(self) -> None:
        with self._lock:
            if self._busy and self._state == SessionState.RECORDING:
                self._stop_requested = True
                return
        self.stop_session()

    def dispose(self) -> None:
        with self._lock:
            if self._disposed:
                return
            self._disposed = True
            if self._state == SessionState.LOADING_MODEL:
                # the initialization thread releases what it creates
                self._dispatcher.shutdown()
                return
            if not self._idle.wait_for(lambda: not self._busy, timeout=self._release_timeout_s):
                logger.warning("Engine call still pending after %.1fs, releasing anyway", self._release_timeout_s)
            recording = self._state == SessionState.RECORDING
            if recording:
                self._transition(SessionState.READY)
        self._release_all(stop_first=recording)
        self._dispatcher.shutdown()

    def _release_all(self, stop_first: bool) -> None:
        with self._lock:
            session, recognizer, model = self._session, self._recognizer, self._model
            self._session = self._recognizer = self._model = None

        if session is not None:
            if stop_first:
                try:
                    session.stop()
                except Exception as exc:
                    logger.warning("Resource cleanup error (stop): %s", exc)
            try:
                session.dispose()
            except Exception as exc:
                logger.warning("Resource cleanup error (session): %s", exc)
        for name, handle in (("recognizer", recognizer), ("model", model)):
            close = getattr(handle, "close", None)
            if close is None:
                continue
            try:
                close()
            except Exception as exc:
                logger.warning("Resource cleanup error (%s): %s", name, exc)

    # ------------------------------------------------------------------
    # Engine events
    # ------------------------------------------------------------------

    def _handle_partial(self, payload: str) -> None:
        self._forward(RecognitionKind.PARTIAL, payload)

    def _handle_final(self, payload: str) -> None:
        self._forward(RecognitionKind.FINAL, payload)

    def _forward(self, kind: RecognitionKind, payload: str) -> None:
        try:
            self._dispatcher.dispatch(kind.value, payload)
        except Exception:
            logger.exception("Failed to dispatch %s result", kind.value)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _set_idle(self) -> None:
        self._busy = False
        self._idle.notify_all()

    def _emit_error(self, code: str, message: str) -> None:
        if self._on_error:
            self._on_error(code, message)

    def _transition(self, to_state: SessionState) -> None:
        from_state = self._state
        if from_state == to_state:
            return
        logger.debug("Session state %s -> %s", from_state.value, to_state.value)
        self._state = to_state
        if self._on_state_change:
            self._on_state_change(from_state, to_state)
