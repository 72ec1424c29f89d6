"""Tests for transcript normalization and the display hand-off."""

from __future__ import annotations

import threading
import time

import pytest

from errors import PARSE_ERROR_TEXT, RECOGNIZING_TEXT
from transcript import DisplayText, TranscriptDispatcher, extract_display_text


def _wait_for(predicate, *, timeout: float = 2.0) -> bool:  # noqa: ANN001
    deadline = time.time() + timeout
    while time.time() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


# ---------------------------------------------------------------
# extract_display_text
# ---------------------------------------------------------------

def test_final_text() -> None:
    assert extract_display_text('{"text": "hello world"}') == "hello world"


def test_partial_text() -> None:
    assert extract_display_text('{"partial": "hel"}') == "hel"


def test_empty_final_falls_back_to_partial() -> None:
    assert extract_display_text('{"text": "", "partial": "hi"}') == "hi"


def test_final_wins_over_partial_and_is_trimmed() -> None:
    assert extract_display_text('{"text": "  bom dia \\n", "partial": "bom"}') == "bom dia"


def test_partial_is_trimmed() -> None:
    assert extract_display_text('{"partial": "   ola  "}') == "ola"


def test_whitespace_final_falls_back_to_partial() -> None:
    assert extract_display_text('{"text": "   ", "partial": "hi"}') == "hi"


@pytest.mark.parametrize("payload", ['{}', '{"text": ""}', '{"partial": "  "}', '{"result": []}'])
def test_no_speech_yet_shows_recognizing(payload: str) -> None:
    assert extract_display_text(payload) == RECOGNIZING_TEXT


@pytest.mark.parametrize(
    "payload",
    ["not json", "", "{", "null", "[1, 2]", '"text"', '{"text": 5}', '{"partial": ["a"]}'],
)
def test_malformed_payload_shows_parse_error(payload: str) -> None:
    assert extract_display_text(payload) == PARSE_ERROR_TEXT


def test_none_payload_does_not_raise() -> None:
    assert extract_display_text(None) == PARSE_ERROR_TEXT  # type: ignore[arg-type]


def test_parse_error_is_distinct_from_recognizing() -> None:
    assert PARSE_ERROR_TEXT != RECOGNIZING_TEXT


# ---------------------------------------------------------------
# DisplayText
# ---------------------------------------------------------------

def test_display_text_discards_stale_results() -> None:
    changes: list[str] = []
    display = DisplayText("idle", on_change=changes.append)
    first = display.next_seq()
    second = display.next_seq()

    assert display.offer(second, "newer") is True
    assert display.offer(first, "older") is False

    assert display.value == "newer"
    assert changes == ["newer"]


def test_display_text_set_supersedes_pending_results() -> None:
    display = DisplayText("idle")
    pending = display.next_seq()
    display.set("listening")

    assert display.offer(pending, "old partial") is False
    assert display.value == "listening"


def test_display_text_only_notifies_on_change() -> None:
    changes: list[str] = []
    display = DisplayText("idle", on_change=changes.append)
    display.set("hi")
    display.set("hi")

    assert changes == ["hi"]


# ---------------------------------------------------------------
# TranscriptDispatcher
# ---------------------------------------------------------------

def test_dispatch_updates_display_off_thread() -> None:
    threads: list[str] = []

    def normalizer(payload: str) -> str:
        threads.append(threading.current_thread().name)
        return extract_display_text(payload)

    display = DisplayText("idle")
    dispatcher = TranscriptDispatcher(display, normalizer=normalizer)
    dispatcher.dispatch("partial", '{"partial": "hel"}')
    dispatcher.shutdown(wait=True)

    assert display.value == "hel"
    assert threads and threads[0] != threading.current_thread().name


def test_slow_older_result_does_not_overwrite_newer() -> None:
    release = threading.Event()

    def normalizer(payload: str) -> str:
        if payload == "slow":
            release.wait(timeout=2.0)
        return payload

    display = DisplayText("idle")
    dispatcher = TranscriptDispatcher(display, max_workers=2, normalizer=normalizer)
    dispatcher.dispatch("partial", "slow")
    dispatcher.dispatch("final", "fast")

    assert _wait_for(lambda: display.value == "fast")
    release.set()
    dispatcher.shutdown(wait=True)

    assert display.value == "fast"


def test_normalizer_failure_keeps_previous_text() -> None:
    def normalizer(payload: str) -> str:
        raise RuntimeError("boom")

    display = DisplayText("kept")
    dispatcher = TranscriptDispatcher(display, normalizer=normalizer)
    dispatcher.dispatch("partial", '{"partial": "x"}')
    dispatcher.shutdown(wait=True)

    assert display.value == "kept"


def test_dispatch_after_shutdown_is_noop() -> None:
    display = DisplayText("idle")
    dispatcher = TranscriptDispatcher(display)
    dispatcher.shutdown()
    dispatcher.shutdown()  # should not raise

    assert dispatcher.dispatch("final", '{"text": "late"}') is None
    assert display.value == "idle"
