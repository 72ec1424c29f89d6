"""Microphone access check."""

from __future__ import annotations

import logging
from typing import Optional

from models import PermissionStatus

try:
    import sounddevice as sd
except Exception:  # pragma: no cover
    sd = None  # type: ignore

logger = logging.getLogger(__name__)


class SoundDevicePermissionProvider:
    """Reports GRANTED when the input device accepts the recording format.

    On desktop platforms the OS prompt (if any) is raised by opening the
    device, so a device that refuses the settings is treated as denied.
    """

    def __init__(
        self,
        sample_rate: int = 16000,
        channels: int = 1,
        device: Optional[int | str] = None,
    ) -> None:
        self.sample_rate = sample_rate
        self.channels = channels
        self.device = device

    def request_microphone_permission(self) -> PermissionStatus:
        if sd is None:
            logger.warning("sounddevice is not installed, microphone unavailable")
            return PermissionStatus.DENIED
        try:
            sd.check_input_settings(
                device=self.device,
                channels=self.channels,
                dtype="int16",
                samplerate=self.sample_rate,
            )
        except Exception as exc:
            logger.warning("Microphone access denied: %s", exc)
            return PermissionStatus.DENIED
        return PermissionStatus.GRANTED
