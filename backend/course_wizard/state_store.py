"""Session-scoped persistence for wizard state."""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Callable, Dict, Optional, Tuple, TypeVar

from pydantic import ValidationError

from .config import get_settings
from .wizard import WizardState, new_state

logger = logging.getLogger(__name__)

STORAGE_KEY = "canvas-course-wizard-storage"

T = TypeVar("T")


def _normalize_session_id(session_id: str) -> str:
    normalized = session_id.strip()
    if not normalized:
        raise ValueError("Session id cannot be empty.")
    return normalized


class WizardStateStore:
    """Keeps one wizard state per session, in memory or in a JSON file.

    The file holds a single object under ``STORAGE_KEY`` mapping session ids to
    serialised states. Loading and saving hand out deep copies so callers never
    share a state object with the store.
    """

    def __init__(self, path: Optional[Path] = None) -> None:
        self._path = path
        self._lock = threading.RLock()
        self._memory: Dict[str, WizardState] = {}

    def _load_unlocked(self) -> Dict[str, WizardState]:
        if self._path is None:
            return self._memory
        if not self._path.exists():
            return {}
        with self._path.open("r", encoding="utf-8") as handle:
            raw = json.load(handle)
        sessions = raw.get(STORAGE_KEY, {}) if isinstance(raw, dict) else {}
        states: Dict[str, WizardState] = {}
        for session_id, payload in sessions.items():
            try:
                states[session_id] = WizardState.model_validate(payload)
            except ValidationError:
                logger.exception("Discarding unreadable wizard state for session %s", session_id)
        return states

    def _write_unlocked(self, states: Dict[str, WizardState]) -> None:
        if self._path is None:
            self._memory = states
            return
        payload = {
            STORAGE_KEY: {
                session_id: state.model_dump(mode="json")
                for session_id, state in states.items()
            }
        }
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with self._path.open("w", encoding="utf-8") as handle:
            json.dump(payload, handle, indent=2)

    def load(self, session_id: str) -> WizardState:
        key = _normalize_session_id(session_id)
        with self._lock:
            state = self._load_unlocked().get(key)
            return state.model_copy(deep=True) if state is not None else new_state()

    def save(self, session_id: str, state: WizardState) -> WizardState:
        key = _normalize_session_id(session_id)
        snapshot = state.model_copy(deep=True)
        with self._lock:
            states = dict(self._load_unlocked())
            states[key] = snapshot
            self._write_unlocked(states)
        return snapshot.model_copy(deep=True)

    def update(self, session_id: str, mutate: Callable[[WizardState], T]) -> Tuple[WizardState, T]:
        """Apply ``mutate`` to the session's state and save it, all under the store lock.

        Nothing is saved when ``mutate`` raises.
        """
        key = _normalize_session_id(session_id)
        with self._lock:
            states = dict(self._load_unlocked())
            current = states.get(key)
            state = current.model_copy(deep=True) if current is not None else new_state()
            outcome = mutate(state)
            states[key] = state
            self._write_unlocked(states)
            return state.model_copy(deep=True), outcome

    def clear(self, session_id: str) -> bool:
        key = _normalize_session_id(session_id)
        with self._lock:
            states = dict(self._load_unlocked())
            if key not in states:
                return False
            states.pop(key)
            self._write_unlocked(states)
        return True


def _default_store() -> WizardStateStore:
    configured = get_settings().state_path
    return WizardStateStore(Path(configured) if configured else None)


state_store = _default_store()


__all__ = ["STORAGE_KEY", "WizardStateStore", "state_store"]
