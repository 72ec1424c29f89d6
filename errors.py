"""Shared error codes, exceptions and user-facing messages."""

from __future__ import annotations

PERMISSION_DENIED = "PERMISSION_DENIED"
MODEL_LOAD_ERROR = "MODEL_LOAD_ERROR"
ENGINE_INIT_ERROR = "ENGINE_INIT_ERROR"
START_ERROR = "START_ERROR"
STOP_ERROR = "STOP_ERROR"
EVENT_PARSE_ERROR = "EVENT_PARSE_ERROR"
MODEL_NOT_READY = "MODEL_NOT_READY"

ERROR_MESSAGES = {
    PERMISSION_DENIED: "Microphone permission denied.",
    MODEL_LOAD_ERROR: "Failed to load the speech model.",
    ENGINE_INIT_ERROR: "Failed to initialize speech recognition.",
    START_ERROR: "Failed to start recognition.",
    STOP_ERROR: "Failed to stop recognition.",
    EVENT_PARSE_ERROR: "Recognition result format is invalid.",
    MODEL_NOT_READY: "Model is not ready yet.",
}

IDLE_TEXT = "Hold the button to speak"
LOADING_TEXT = "Loading model..."
RECOGNIZING_TEXT = "Recognizing..."
LISTENING_TEXT = RECOGNIZING_TEXT
PARSE_ERROR_TEXT = "Could not read recognition result"
START_FAILED_TEXT = "Error starting recognition"


class SpeechEngineError(Exception):
    code = ENGINE_INIT_ERROR


class ModelLoadError(SpeechEngineError):
    code = MODEL_LOAD_ERROR


class EngineInitError(SpeechEngineError):
    code = ENGINE_INIT_ERROR


class ModelCreateError(EngineInitError):
    pass


class RecognizerCreateError(EngineInitError):
    pass


class SessionCreateError(EngineInitError):
    pass


class StartError(SpeechEngineError):
    code = START_ERROR


class StopError(SpeechEngineError):
    code = STOP_ERROR


class EventParseError(SpeechEngineError):
    code = EVENT_PARSE_ERROR
