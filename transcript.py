"""Turns raw recognizer messages into the text shown on screen.

Vosk reports results as small JSON documents: ``{"text": "..."}`` for a
committed segment and ``{"partial": "..."}`` for the hypothesis still being
decoded.  Parsing happens on a worker pool so the UI thread never waits on
it; only the resulting string travels back, through :class:`DisplayText`.
"""

from __future__ import annotations

import json
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Optional

from errors import PARSE_ERROR_TEXT, RECOGNIZING_TEXT, EventParseError
from models import TranscriptEvent

logger = logging.getLogger(__name__)

FINAL_KEY = "text"
PARTIAL_KEY = "partial"

TextCallback = Callable[[str], None]


def extract_display_text(message: str) -> str:
    """Return the display string for one raw engine payload.

    A non-empty final text wins over the partial text.  Never raises: an
    empty result gives ``RECOGNIZING_TEXT`` and an unreadable payload gives
    ``PARSE_ERROR_TEXT``.
    """
    try:
        return _extract(message)
    except EventParseError as exc:
        logger.debug("Text extraction error: %s", exc)
        return PARSE_ERROR_TEXT


def _extract(message: str) -> str:
    try:
        data = json.loads(message)
    except (TypeError, ValueError) as exc:
        raise EventParseError(f"payload is not JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise EventParseError(f"payload is not an object: {type(data).__name__}")

    for key in (FINAL_KEY, PARTIAL_KEY):
        value = data.get(key)
        if value is None:
            continue
        if not isinstance(value, str):
            raise EventParseError(f"field {key!r} is not a string")
        text = value.strip()
        if text:
            return text
    return RECOGNIZING_TEXT


class DisplayText:
    """Last-write-wins text value shared between worker threads and the UI.

    Every write carries a sequence number; a result older than the value
    already shown is discarded, so slow parses cannot overwrite newer text.
    """

    def __init__(self, initial: str = "", on_change: Optional[TextCallback] = None) -> None:
        self._lock = threading.Lock()
        self._value = initial
        self._next_seq = 0
        self._applied_seq = 0
        self._on_change = on_change

    @property
    def value(self) -> str:
        return self._value

    def next_seq(self) -> int:
        with self._lock:
            self._next_seq += 1
            return self._next_seq

    def set(self, text: str) -> None:
        """Write directly, superseding every result dispatched so far."""
        seq = self.next_seq()
        self.offer(seq, text)

    def offer(self, seq: int, text: str) -> bool:
        with self._lock:
            if seq <= self._applied_seq:
                return False
            self._applied_seq = seq
            changed = text != self._value
            self._value = text
            if changed and self._on_change:
                self._on_change(text)
            return True


class TranscriptDispatcher:
    def __init__(
        self,
        display: DisplayText,
        max_workers: int = 2,
        normalizer: Callable[[str], str] = extract_display_text,
    ) -> None:
        self._display = display
        self._normalizer = normalizer
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="transcript"
        )
        self._lock = threading.Lock()
        self._closed = False

    def dispatch(self, kind: str, payload: str) -> Optional[Future]:
        event = TranscriptEvent(kind=kind, payload=payload, seq=self._display.next_seq())
        with self._lock:
            if self._closed:
                return None
            future = self._executor.submit(self._normalizer, event.payload)
        future.add_done_callback(lambda f: self._deliver(event, f))
        return future

    def shutdown(self, wait: bool = False) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._executor.shutdown(wait=wait, cancel_futures=True)

    def _deliver(self, event: TranscriptEvent, future: Future) -> None:
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            logger.warning("Dropping %s result #%d: %s", event.kind, event.seq, exc)
            return
        try:
            self._display.offer(event.seq, future.result())
        except Exception:
            logger.exception("Display update failed for %s result #%d", event.kind, event.seq)
