"""Speech-to-text window: transcript, push-to-talk button and status line."""

from __future__ import annotations

from typing import Callable

from errors import IDLE_TEXT, LOADING_TEXT
from models import SessionState

try:
    from PySide6.QtCore import Qt
    from PySide6.QtWidgets import QLabel, QPushButton, QVBoxLayout, QWidget
except Exception:  # pragma: no cover
    Qt = None  # type: ignore
    QLabel = object  # type: ignore
    QPushButton = object  # type: ignore
    QVBoxLayout = object  # type: ignore
    QWidget = object  # type: ignore

TITLE = "VOSK Speech Recognition"

BUTTON_IDLE_STYLE = (
    "QPushButton { background: #1E88E5; color: white; font-size: 18px;"
    "border-radius: 50px; min-width: 100px; min-height: 100px; }"
    "QPushButton:disabled { background: #90A4AE; }"
)
BUTTON_RECORDING_STYLE = (
    "QPushButton { background: #E53935; color: white; font-size: 18px;"
    "border-radius: 50px; min-width: 100px; min-height: 100px; }"
)

STATUS_TEXT = {
    SessionState.UNINITIALIZED: ("Starting...", "orange"),
    SessionState.LOADING_MODEL: (LOADING_TEXT, "orange"),
    SessionState.READY: ("Model loaded successfully", "green"),
    SessionState.RECORDING: ("Listening", "green"),
    SessionState.PERMISSION_DENIED: ("Microphone permission denied", "red"),
    SessionState.ERROR: ("Error", "red"),
}


def status_line(state: SessionState, detail: str = "") -> tuple[str, str]:
    """Return the status label text and colour for ``state``."""
    label, color = STATUS_TEXT[state]
    if detail:
        label = f"{label}: {detail}"
    return label, color


class SpeechScreen(QWidget):
    def __init__(self, on_press: Callable[[], None], on_release: Callable[[], None]) -> None:
        if Qt is None:
            raise RuntimeError("PySide6 is not installed")
        super().__init__()
        self.setWindowTitle(TITLE)
        self.setMinimumWidth(480)

        self._text = QLabel(IDLE_TEXT)
        self._text.setWordWrap(True)
        self._text.setAlignment(Qt.AlignCenter)
        self._text.setStyleSheet("font-size: 24px; padding: 16px;")

        self._button = QPushButton("🎤")
        self._button.setStyleSheet(BUTTON_IDLE_STYLE)
        self._button.setEnabled(False)
        self._button.pressed.connect(on_press)
        self._button.released.connect(on_release)

        self._status = QLabel("")
        self._status.setAlignment(Qt.AlignCenter)

        layout = QVBoxLayout()
        layout.addStretch(1)
        layout.addWidget(self._text)
        layout.addSpacing(16)
        layout.addWidget(self._button, alignment=Qt.AlignCenter)
        layout.addSpacing(24)
        layout.addWidget(self._status)
        layout.addStretch(1)
        self.setLayout(layout)

        self.set_state(SessionState.UNINITIALIZED)

    def set_text(self, text: str) -> None:
        self._text.setText(text)

    def set_state(self, state: SessionState, detail: str = "") -> None:
        label, color = status_line(state, detail)
        self._status.setText(label)
        self._status.setStyleSheet(f"color: {color}; font-weight: bold;")

        recording = state == SessionState.RECORDING
        self._button.setEnabled(state in (SessionState.READY, SessionState.RECORDING))
        self._button.setText("🔇" if recording else "🎤")
        self._button.setStyleSheet(BUTTON_RECORDING_STYLE if recording else BUTTON_IDLE_STYLE)

    def show_error(self, text: str) -> None:
        self._status.setText(f"⚠️ {text}")
        self._status.setStyleSheet("color: #FF6B6B; font-weight: bold;")
