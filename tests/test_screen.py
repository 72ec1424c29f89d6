from __future__ import annotations

import pytest

from models import SessionState
from screen import STATUS_TEXT, status_line


def test_error_status_carries_error_message() -> None:
    label, color = status_line(SessionState.ERROR, "Failed to load model: not found")

    assert label == "Error: Failed to load model: not found"
    assert color == "red"


@pytest.mark.parametrize("state", list(SessionState))
def test_status_without_detail_is_plain_label(state: SessionState) -> None:
    assert status_line(state) == STATUS_TEXT[state]
