from __future__ import annotations

import os
from typing import List

import pytest

os.environ.setdefault("ENV_FILE", os.devnull)
os.environ.setdefault("OPENAI_API_KEY", "sk-test")
os.environ.pop("COURSE_WIZARD_STATE_PATH", None)

from course_wizard.telemetry import TelemetryEvent, clear_listeners, register_listener  # noqa: E402


@pytest.fixture
def telemetry_events():
    events: List[TelemetryEvent] = []
    clear_listeners()
    register_listener(events.append)
    yield events
    clear_listeners()
