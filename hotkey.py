"""Push-to-talk key based on pynput."""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Optional

try:
    from pynput import keyboard
except Exception:  # pragma: no cover
    keyboard = None  # type: ignore

logger = logging.getLogger(__name__)


class PushToTalkHotkey:
    """Calls ``on_press`` when the key goes down and ``on_release`` when it
    comes up.  Key autorepeat does not call ``on_press`` again."""

    def __init__(self, hotkey_name: str = "Key.alt_r") -> None:
        self._hotkey_name = hotkey_name
        self._listener: Optional[Any] = None
        self._pressed = False
        self._lock = threading.Lock()
        self._on_press: Optional[Callable[[], None]] = None
        self._on_release: Optional[Callable[[], None]] = None

    def start(self, on_press: Callable[[], None], on_release: Callable[[], None]) -> None:
        if keyboard is None:
            raise RuntimeError("pynput is not installed")
        self._on_press = on_press
        self._on_release = on_release
        self._listener = keyboard.Listener(on_press=self._key_down, on_release=self._key_up)
        self._listener.start()
        logger.info("Push-to-talk key: %s", self._hotkey_name)

    def stop(self) -> None:
        listener = self._listener
        if listener is not None:
            listener.stop()
            self._listener = None

    def _key_down(self, key: object) -> None:
        if str(key) != self._hotkey_name:
            return
        with self._lock:
            if self._pressed:
                return
            self._pressed = True
        if self._on_press:
            self._on_press()

    def _key_up(self, key: object) -> None:
        if str(key) != self._hotkey_name:
            return
        with self._lock:
            if not self._pressed:
                return
            self._pressed = False
        if self._on_release:
            self._on_release()
