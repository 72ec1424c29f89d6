"""Protocol interfaces used by SessionController."""

from __future__ import annotations

from queue import Queue
from typing import Any, Callable, Protocol

from models import AudioFrame, PermissionStatus

PayloadListener = Callable[[str], None]


class StreamingSession(Protocol):
    def start(self) -> None: ...

    def stop(self) -> None: ...

    def dispose(self) -> None: ...

    def on_partial(self, listener: PayloadListener) -> None: ...

    def on_final(self, listener: PayloadListener) -> None: ...


class SpeechEngine(Protocol):
    def load_model_asset(self, path: str) -> str: ...

    def create_model(self, model_path: str) -> Any: ...

    def create_recognizer(self, model: Any, sample_rate: int) -> Any: ...

    def create_streaming_session(self, recognizer: Any) -> StreamingSession: ...


class PermissionProvider(Protocol):
    def request_microphone_permission(self) -> PermissionStatus: ...


class Recorder(Protocol):
    def start(self, audio_queue: Queue[AudioFrame | None]) -> None: ...

    def stop(self) -> None: ...


class ConfigStore(Protocol):
    def get_model_path(self) -> str: ...

    def set_model_path(self, path: str) -> None: ...

    def get_sample_rate(self) -> int: ...

    def get_hotkey(self) -> str: ...

    def set_hotkey(self, hotkey: str) -> None: ...

    def get_log_level(self) -> str: ...
