"""Microphone recorder adapter."""

from __future__ import annotations

import logging
import threading
import time
from queue import Empty, Full, Queue
from typing import Any, Optional

from models import AudioFrame

try:
    import numpy as np
except Exception:  # pragma: no cover
    np = None  # type: ignore

try:
    import sounddevice as sd
except Exception:  # pragma: no cover
    sd = None  # type: ignore

logger = logging.getLogger(__name__)


class SoundDeviceRecorder:
    """Captures int16 microphone blocks into the queue bound by ``start``.

    ``stop`` closes the input stream and delivers exactly one ``None`` end
    marker to that queue. When the consumer has fallen behind, the oldest
    buffered frames are evicted to make room for it.
    """

    def __init__(
        self,
        sample_rate: int = 16000,
        channels: int = 1,
        chunk_ms: int = 250,
        device: Optional[int | str] = None,
    ) -> None:
        self.sample_rate = sample_rate
        self.channels = channels
        self.chunk_ms = chunk_ms
        self.device = device
        self.dropped_chunks = 0
        self._lock = threading.Lock()
        self._stream: Any = None
        self._audio_queue: Queue[AudioFrame | None] | None = None

    @property
    def is_running(self) -> bool:
        return self._stream is not None

    def start(self, audio_queue: Queue[AudioFrame | None]) -> None:
        with self._lock:
            if self._stream is not None:
                return
            if sd is None:
                raise RuntimeError("sounddevice is not installed")
            stream = sd.InputStream(
                samplerate=self.sample_rate,
                channels=self.channels,
                dtype="int16",
                blocksize=int(self.sample_rate * self.chunk_ms / 1000),
                device=self.device,
                callback=self._on_audio,
            )
            stream.start()
            self.dropped_chunks = 0
            self._audio_queue = audio_queue
            self._stream = stream
            logger.debug("Microphone open (%d Hz, %d ch)", self.sample_rate, self.channels)

    def stop(self) -> None:
        with self._lock:
            stream, self._stream = self._stream, None
            audio_queue, self._audio_queue = self._audio_queue, None
            try:
                if stream is not None:
                    stream.stop()
                    stream.close()
            finally:
                if audio_queue is not None:
                    self._end_utterance(audio_queue)
        if audio_queue is not None and self.dropped_chunks:
            logger.warning("Dropped %d audio chunks (queue full)", self.dropped_chunks)

    def _on_audio(self, indata: Any, frames: int, time_info: Any, status: Any) -> None:
        if status:
            logger.debug("Audio input status: %s", status)
        audio_queue = self._audio_queue
        if audio_queue is None or np is None:
            return
        frame = AudioFrame(
            pcm16_bytes=np.asarray(indata, dtype=np.int16).tobytes(),
            sample_rate=self.sample_rate,
            channels=self.channels,
            timestamp_ms=int(time.time() * 1000),
        )
        try:
            audio_queue.put_nowait(frame)
        except Full:
            self.dropped_chunks += 1

    def _end_utterance(self, audio_queue: Queue[AudioFrame | None]) -> None:
        while True:
            try:
                audio_queue.put_nowait(None)
                return
            except Full:
                pass
            try:
                audio_queue.get_nowait()
            except Empty:
                continue
            self.dropped_chunks += 1
