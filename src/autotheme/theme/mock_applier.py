"""In-memory theme applier for development and testing.

Keeps the "host" theme in a field and records every call, so tests can
assert how many externally observable transitions really happened.
"""

from __future__ import annotations

import logging
import threading

from autotheme.core.interfaces.collaborators import ThemeApplier
from autotheme.core.models.state import ApplyResult, DisplayState

_log = logging.getLogger(__name__)


class MockThemeApplier(ThemeApplier):
    """Idempotent applier with ``calls`` / ``transitions`` bookkeeping.

    Args:
        initial: Theme the simulated host starts in (``None`` = unknown).
    """

    def __init__(self, initial: DisplayState | None = None) -> None:
        self._lock = threading.Lock()
        self.current: DisplayState | None = initial
        self.calls: list[DisplayState] = []
        self.transitions: list[DisplayState] = []

    def apply(self, state: DisplayState) -> ApplyResult:
        with self._lock:
            self.calls.append(state)
            if state == self.current:
                return ApplyResult(state=state, changed=False, detail="already active")
            self.current = state
            self.transitions.append(state)
        _log.info("[mock] theme → %s", state.value)
        return ApplyResult(state=state, changed=True)

    # -- Simulation helpers --

    def simulate_external_change(self, state: DisplayState) -> None:
        """Pretend the user flipped the theme outside the controller."""
        with self._lock:
            self.current = state
