"""Application entrypoint."""

from __future__ import annotations

import logging
import sys
import threading
from pathlib import Path

from config import JsonConfigStore
from hotkey import PushToTalkHotkey
from interfaces import ConfigStore
from log_setup import setup_logging, shutdown_logging
from models import AppLifecycleState, SessionState
from permissions import SoundDevicePermissionProvider
from screen import SpeechScreen
from session_controller import SessionController
from vosk_engine import VoskSpeechEngine

try:
    from PySide6.QtCore import QObject, Qt, Signal
    from PySide6.QtWidgets import QApplication
except Exception as exc:  # pragma: no cover
    raise SystemExit(f"PySide6 is required to run the desktop app: {exc}")

logger = logging.getLogger(__name__)

LOG_FILE = Path.home() / ".config" / "vosk_dictation" / "logs" / "app.log"


def lifecycle_for(state: "Qt.ApplicationState") -> AppLifecycleState:
    if state == Qt.ApplicationState.ApplicationActive:
        return AppLifecycleState.RESUMED
    if state == Qt.ApplicationState.ApplicationInactive:
        return AppLifecycleState.INACTIVE
    return AppLifecycleState.PAUSED


class UIBridge(QObject):
    text_signal = Signal(str)
    error_signal = Signal(str, str)  # code, message
    state_signal = Signal(str, str)  # from_state, to_state


class App:
    def __init__(self) -> None:
        self.app = QApplication(sys.argv)
        self.config_store: ConfigStore = JsonConfigStore()
        setup_logging(self.config_store.get_log_level(), LOG_FILE)

        self.ui = UIBridge()
        self.ui.text_signal.connect(self._on_text_ui)
        self.ui.error_signal.connect(self._on_error_ui)
        self.ui.state_signal.connect(self._on_state_change_ui)

        sample_rate = self.config_store.get_sample_rate()
        self.controller = SessionController(
            engine=VoskSpeechEngine(),
            permissions=SoundDevicePermissionProvider(sample_rate=sample_rate),
            model_asset=self.config_store.get_model_path(),
            sample_rate=sample_rate,
            on_state_change=self._on_state_change,
            on_text=self._on_text,
            on_error=self._on_error,
        )
        self.screen = SpeechScreen(on_press=self._on_press, on_release=self._on_release)
        self.hotkey = PushToTalkHotkey(hotkey_name=self.config_store.get_hotkey())
        self.app.applicationStateChanged.connect(self._on_app_state)
        self.app.aboutToQuit.connect(self._shutdown)

    # ------------------------------------------------------------------
    # Callbacks (called from worker threads → emit signals for UI thread)
    # ------------------------------------------------------------------

    def _on_state_change(self, from_state: SessionState, to_state: SessionState) -> None:
        self.ui.state_signal.emit(from_state.value, to_state.value)

    def _on_text(self, text: str) -> None:
        self.ui.text_signal.emit(text)

    def _on_error(self, code: str, message: str) -> None:
        self.ui.error_signal.emit(code, message)

    # ------------------------------------------------------------------
    # UI thread handlers (safe for Qt)
    # ------------------------------------------------------------------

    def _on_text_ui(self, text: str) -> None:
        self.screen.set_text(text)

    def _on_error_ui(self, code: str, message: str) -> None:
        logger.info("Notice %s: %s", code, message)
        self.screen.show_error(message)

    def _on_state_change_ui(self, from_state: str, to_state: str) -> None:
        state = SessionState(to_state)
        detail = self.controller.error_message if state == SessionState.ERROR else ""
        self.screen.set_state(state, detail)

    def _on_app_state(self, state: "Qt.ApplicationState") -> None:
        self.controller.handle_lifecycle(lifecycle_for(state))

    # ------------------------------------------------------------------
    # Push-to-talk
    # ------------------------------------------------------------------

    def _on_press(self) -> None:
        self.controller.start_session()

    def _on_release(self) -> None:
        # stop joins the recognition worker; keep it off the Qt thread
        threading.Thread(target=self.controller.stop_session, daemon=True).start()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def run(self) -> int:
        self.screen.show()
        threading.Thread(target=self.controller.initialize, name="vosk-init", daemon=True).start()
        try:
            self.hotkey.start(on_press=self._on_press, on_release=self._on_release)
        except Exception as exc:
            logger.warning("Hotkey disabled: %s", exc)
        return self.app.exec()

    def _shutdown(self) -> None:
        self.hotkey.stop()
        self.controller.handle_lifecycle(AppLifecycleState.DETACHED)
        shutdown_logging()


def main() -> int:
    app = App()
    return app.run()


if __name__ == "__main__":
    raise SystemExit(main())
