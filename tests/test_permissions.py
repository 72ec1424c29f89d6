from __future__ import annotations

from unittest.mock import MagicMock, patch

import permissions
from models import PermissionStatus
from permissions import SoundDevicePermissionProvider


@patch("permissions.sd")
def test_usable_input_device_is_granted(mock_sd: MagicMock) -> None:
    provider = SoundDevicePermissionProvider(sample_rate=16000)

    assert provider.request_microphone_permission() == PermissionStatus.GRANTED
    mock_sd.check_input_settings.assert_called_once_with(
        device=None, channels=1, dtype="int16", samplerate=16000
    )


@patch("permissions.sd")
def test_rejected_input_settings_are_denied(mock_sd: MagicMock) -> None:
    mock_sd.check_input_settings.side_effect = Exception("Error querying device -1")

    assert SoundDevicePermissionProvider().request_microphone_permission() == PermissionStatus.DENIED


def test_missing_sounddevice_is_denied(monkeypatch) -> None:  # noqa: ANN001
    monkeypatch.setattr(permissions, "sd", None)

    assert SoundDevicePermissionProvider().request_microphone_permission() == PermissionStatus.DENIED
