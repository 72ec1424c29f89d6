"""Core data models for the app."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class SessionState(str, Enum):
    UNINITIALIZED = "UNINITIALIZED"
    LOADING_MODEL = "LOADING_MODEL"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    READY = "READY"
    RECORDING = "RECORDING"
    ERROR = "ERROR"


class PermissionStatus(str, Enum):
    GRANTED = "GRANTED"
    DENIED = "DENIED"


class AppLifecycleState(str, Enum):
    RESUMED = "RESUMED"
    INACTIVE = "INACTIVE"
    PAUSED = "PAUSED"
    DETACHED = "DETACHED"


class RecognitionKind(str, Enum):
    PARTIAL = "partial"
    FINAL = "final"


@dataclass
class AudioFrame:
    pcm16_bytes: bytes
    sample_rate: int = 16000
    channels: int = 1
    timestamp_ms: int = 0


@dataclass
class TranscriptEvent:
    kind: str
    payload: str
    seq: int = 0
