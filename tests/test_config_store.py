from __future__ import annotations

import json
from pathlib import Path

import pytest

from config import DEFAULT_HOTKEY, DEFAULT_MODEL_PATH, JsonConfigStore


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch) -> None:  # noqa: ANN001
    monkeypatch.delenv("VOSK_MODEL_PATH", raising=False)
    monkeypatch.delenv("VOSK_DICTATION_LOG_LEVEL", raising=False)


def test_config_defaults(tmp_path: Path) -> None:
    store = JsonConfigStore(path=tmp_path / "config.json")

    assert store.get_model_path() == DEFAULT_MODEL_PATH
    assert store.get_sample_rate() == 16000
    assert store.get_hotkey() == DEFAULT_HOTKEY
    assert store.get_log_level() == "INFO"


def test_config_read_write(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    store = JsonConfigStore(path=path)

    store.set_model_path("/opt/models/vosk-model-small-en-us-0.15")
    store.set_hotkey("Key.ctrl_r")

    reloaded = JsonConfigStore(path=path)
    assert reloaded.get_model_path() == "/opt/models/vosk-model-small-en-us-0.15"
    assert reloaded.get_hotkey() == "Key.ctrl_r"


def test_config_invalid_json_fallback(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text("{invalid", encoding="utf-8")

    store = JsonConfigStore(path=path)
    assert store.get_model_path() == DEFAULT_MODEL_PATH
    assert store.get_hotkey() == DEFAULT_HOTKEY


def test_config_non_object_json_fallback(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text("[1, 2, 3]", encoding="utf-8")

    assert JsonConfigStore(path=path).get_sample_rate() == 16000


@pytest.mark.parametrize("value", ["fast", -8000, 0, None])
def test_invalid_sample_rate_falls_back(tmp_path: Path, value: object) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"sample_rate": value}), encoding="utf-8")

    assert JsonConfigStore(path=path).get_sample_rate() == 16000


def test_environment_overrides(tmp_path: Path, monkeypatch) -> None:  # noqa: ANN001
    store = JsonConfigStore(path=tmp_path / "config.json")
    store.set_model_path("/from/file")
    monkeypatch.setenv("VOSK_MODEL_PATH", "/from/env")
    monkeypatch.setenv("VOSK_DICTATION_LOG_LEVEL", "debug")

    assert store.get_model_path() == "/from/env"
    assert store.get_log_level() == "DEBUG"
