"""Offline speech engine adapter built on Vosk.

The engine hands out three handles: a ``vosk.Model`` loaded from a model
directory, a :class:`RecognizerHandle` bound to a sample rate, and a
:class:`VoskStreamingSession` that records the microphone and publishes the
recognizer's raw JSON results to its listeners.
"""

from __future__ import annotations

import json
import logging
import threading
import zipfile
from dataclasses import dataclass
from pathlib import Path
from queue import Empty, Queue
from typing import Any, Callable, List, Optional

from errors import (
    ModelCreateError,
    ModelLoadError,
    RecognizerCreateError,
    SessionCreateError,
    StartError,
    StopError,
)
from interfaces import PayloadListener, Recorder
from models import AudioFrame
from recorder import SoundDeviceRecorder

try:
    import vosk
except Exception:  # pragma: no cover
    vosk = None  # type: ignore

logger = logging.getLogger(__name__)

MODEL_CACHE_DIR = Path.home() / ".cache" / "vosk_dictation" / "models"
_EXTRACTED_MARKER = ".extracted"

RecorderFactory = Callable[[int], Recorder]


@dataclass
class RecognizerHandle:
    recognizer: Any
    sample_rate: int

    def close(self) -> None:
        self.recognizer = None


class VoskSpeechEngine:
    def __init__(
        self,
        cache_dir: Optional[Path] = None,
        recorder_factory: Optional[RecorderFactory] = None,
        vosk_log_level: int = -1,
    ) -> None:
        self._cache_dir = cache_dir or MODEL_CACHE_DIR
        self._recorder_factory = recorder_factory or (
            lambda rate: SoundDeviceRecorder(sample_rate=rate)
        )
        self._vosk_log_level = vosk_log_level

    def load_model_asset(self, path: str) -> str:
        """Return a model directory for ``path``, extracting zip archives once."""
        source = Path(path).expanduser()
        if source.is_dir():
            return str(source)
        if not source.is_file():
            raise ModelLoadError(f"model asset not found: {source}")
        if not zipfile.is_zipfile(source):
            raise ModelLoadError(f"not a model directory or zip archive: {source}")

        target = self._cache_dir / source.stem
        if (target / _EXTRACTED_MARKER).exists():
            logger.debug("Using cached model at %s", target)
            return str(_model_root(target))

        logger.info("Extracting model %s to %s", source.name, target)
        try:
            target.mkdir(parents=True, exist_ok=True)
            with zipfile.ZipFile(source) as archive:
                archive.extractall(target)
            (target / _EXTRACTED_MARKER).touch()
        except (OSError, zipfile.BadZipFile) as exc:
            raise ModelLoadError(f"could not extract {source.name}: {exc}") from exc
        return str(_model_root(target))

    def create_model(self, model_path: str) -> Any:
        if vosk is None:
            raise ModelCreateError("vosk is not installed")
        vosk.SetLogLevel(self._vosk_log_level)
        try:
            model = vosk.Model(model_path)
        except Exception as exc:
            raise ModelCreateError(str(exc)) from exc
        logger.info("Vosk model loaded: %s", model_path)
        return model

    def create_recognizer(self, model: Any, sample_rate: int) -> RecognizerHandle:
        if vosk is None:
            raise RecognizerCreateError("vosk is not installed")
        try:
            recognizer = vosk.KaldiRecognizer(model, float(sample_rate))
            recognizer.SetWords(False)
        except Exception as exc:
            raise RecognizerCreateError(str(exc)) from exc
        return RecognizerHandle(recognizer=recognizer, sample_rate=sample_rate)

    def create_streaming_session(self, recognizer: RecognizerHandle) -> "VoskStreamingSession":
        if not isinstance(recognizer, RecognizerHandle) or recognizer.recognizer is None:
            raise SessionCreateError("recognizer is not available")
        try:
            recorder = self._recorder_factory(recognizer.sample_rate)
        except Exception as exc:
            raise SessionCreateError(str(exc)) from exc
        return VoskStreamingSession(recognizer, recorder)


def _model_root(target: Path) -> Path:
    # archives usually wrap the model in a single top-level directory
    entries = [p for p in target.iterdir() if not p.name.startswith(".")]
    if len(entries) == 1 and entries[0].is_dir():
        return entries[0]
    return target


def _has_text(payload: str) -> bool:
    try:
        return bool(str(json.loads(payload).get("text", "")).strip())
    except (TypeError, ValueError, AttributeError):
        return True


class VoskStreamingSession:
    """One microphone-to-recognizer stream, restartable until disposed.

    ``stop()`` always ends the worker: it exits on the recorder's end marker,
    or once the queue runs dry after the stop request. The recognizer is
    reset whenever the worker exits, so each utterance starts clean.
    """

    def __init__(
        self,
        handle: RecognizerHandle,
        recorder: Recorder,
        queue_maxsize: int = 50,
        join_timeout_s: float = 2.0,
    ) -> None:
        self._handle = handle
        self._recorder = recorder
        self._queue_maxsize = queue_maxsize
        self._join_timeout_s = join_timeout_s
        self._partial_listeners: List[PayloadListener] = []
        self._final_listeners: List[PayloadListener] = []
        self._lock = threading.Lock()
        self._abort = threading.Event()
        self._stopping = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._running = False
        self._disposed = False

    @property
    def is_running(self) -> bool:
        return self._running

    def on_partial(self, listener: PayloadListener) -> None:
        self._partial_listeners.append(listener)

    def on_final(self, listener: PayloadListener) -> None:
        self._final_listeners.append(listener)

    def start(self) -> None:
        with self._lock:
            if self._disposed:
                raise StartError("speech session is disposed")
            if self._running:
                return
            previous = self._thread
            if previous is not None and previous.is_alive():
                previous.join(timeout=self._join_timeout_s)
                if previous.is_alive():
                    raise StartError("previous utterance is still being recognized")
            audio_queue: Queue[AudioFrame | None] = Queue(maxsize=self._queue_maxsize)
            self._abort.clear()
            self._stopping = threading.Event()
            try:
                self._recorder.start(audio_queue)
            except Exception as exc:
                raise StartError(f"microphone unavailable: {exc}") from exc
            self._running = True
            self._thread = threading.Thread(
                target=self._worker,
                args=(audio_queue, self._stopping),
                name="vosk-session",
                daemon=True,
            )
            self._thread.start()

    def stop(self) -> None:
        with self._lock:
            if not self._running:
                return
            self._running = False
            thread, stopping = self._thread, self._stopping
        try:
            self._recorder.stop()
        except Exception as exc:
            self._abort.set()
            raise StopError(f"could not close microphone: {exc}") from exc
        finally:
            stopping.set()
            if thread is not None:
                thread.join(timeout=self._join_timeout_s)
                if thread.is_alive():
                    logger.warning("Recognition worker still draining after %.1fs", self._join_timeout_s)

    def dispose(self) -> None:
        if self._disposed:
            return
        try:
            self.stop()
        except StopError as exc:
            logger.warning("Speech session stop on dispose failed: %s", exc)
        finally:
            self._abort.set()
            self._disposed = True
            self._partial_listeners.clear()
            self._final_listeners.clear()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _worker(self, audio_queue: Queue[AudioFrame | None], stopping: threading.Event) -> None:
        """Feed recorded frames to the recognizer until the end of the utterance."""
        recognizer = self._handle.recognizer
        if recognizer is None:
            return
        last_partial = ""
        try:
            while True:
                try:
                    frame = audio_queue.get(timeout=0.2)
                except Empty:
                    if self._abort.is_set():
                        return
                    if stopping.is_set():
                        break
                    continue
                if frame is None:
                    break
                if recognizer.AcceptWaveform(frame.pcm16_bytes):
                    self._emit(self._final_listeners, recognizer.Result())
                    last_partial = ""
                    continue
                partial = recognizer.PartialResult()
                if partial != last_partial:
                    last_partial = partial
                    self._emit(self._partial_listeners, partial)

            final = recognizer.FinalResult()
            if _has_text(final):
                self._emit(self._final_listeners, final)
        except Exception:
            logger.exception("Recognition stream failed")
        finally:
            _reset(recognizer)

    def _emit(self, listeners: List[PayloadListener], payload: str) -> None:
        for listener in list(listeners):
            try:
                listener(payload)
            except Exception:
                logger.exception("Result listener error")


def _reset(recognizer: Any) -> None:
    try:
        recognizer.Reset()
    except Exception as exc:
        logger.warning("Recognizer reset failed: %s", exc)
