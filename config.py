"""Simple JSON-based config store."""

from __future__ import annotations

import json
import os
from pathlib import Path

DEFAULT_MODEL_PATH = "models/vosk-model-small-pt-0.3.zip"
DEFAULT_SAMPLE_RATE = 16000
DEFAULT_HOTKEY = "Key.alt_r"
DEFAULT_LOG_LEVEL = "INFO"

MODEL_PATH_ENV = "VOSK_MODEL_PATH"
LOG_LEVEL_ENV = "VOSK_DICTATION_LOG_LEVEL"


class JsonConfigStore:
    def __init__(self, path: Path | None = None) -> None:
        self._path = path or Path.home() / ".config" / "vosk_dictation" / "config.json"
        self._path.parent.mkdir(parents=True, exist_ok=True)

    def get_model_path(self) -> str:
        override = os.getenv(MODEL_PATH_ENV, "")
        if override:
            return override
        data = self._read_all()
        return str(data.get("model_path", DEFAULT_MODEL_PATH))

    def set_model_path(self, path: str) -> None:
        data = self._read_all()
        data["model_path"] = path
        self._write_all(data)

    def get_sample_rate(self) -> int:
        data = self._read_all()
        try:
            rate = int(data.get("sample_rate", DEFAULT_SAMPLE_RATE))
        except (TypeError, ValueError):
            return DEFAULT_SAMPLE_RATE
        return rate if rate > 0 else DEFAULT_SAMPLE_RATE

    def get_hotkey(self) -> str:
        data = self._read_all()
        return str(data.get("hotkey", DEFAULT_HOTKEY))

    def set_hotkey(self, hotkey: str) -> None:
        data = self._read_all()
        data["hotkey"] = hotkey
        self._write_all(data)

    def get_log_level(self) -> str:
        override = os.getenv(LOG_LEVEL_ENV, "")
        if override:
            return override.upper()
        data = self._read_all()
        return str(data.get("log_level", DEFAULT_LOG_LEVEL)).upper()

    def _read_all(self) -> dict:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError):
            return {}
        return data if isinstance(data, dict) else {}

    def _write_all(self, data: dict) -> None:
        self._path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
