"""Test doubles for the controller's collaborators."""

from __future__ import annotations

import threading
from datetime import datetime, timedelta, tzinfo

from autotheme.core.interfaces.collaborators import (
    LocationProvider,
    LocationStoreInterface,
    LocationUnavailableError,
    NotificationSink,
)
from autotheme.core.models.state import ApplyResult, DisplayState, GeoPosition, Severity
from autotheme.theme.mock_applier import MockThemeApplier

LONDON = GeoPosition(latitude=51.5074, longitude=-0.1278, label="London, United Kingdom")
GREENWICH = GeoPosition(latitude=51.4769, longitude=0.0, label="Greenwich")


class FakeClock:
    """Settable clock; call it to read the current instant."""

    def __init__(self, *args: int, tz: tzinfo) -> None:
        self.now = datetime(*args, tzinfo=tz)

    def __call__(self) -> datetime:
        return self.now

    def set(self, value: datetime) -> None:
        self.now = value

    def advance(self, **delta: float) -> None:
        self.now = self.now + timedelta(**delta)


class MemoryStore(LocationStoreInterface):
    def __init__(self, position: GeoPosition | None = None, fail_on_save: bool = False) -> None:
        self.position = position
        self.fail_on_save = fail_on_save
        self.load_count = 0
        self.save_count = 0

    def load(self) -> GeoPosition | None:
        self.load_count += 1
        return self.position

    def save(self, position: GeoPosition) -> None:
        if self.fail_on_save:
            raise OSError("disk full")
        self.position = position
        self.save_count += 1


class StubProvider(LocationProvider):
    """Returns queued results in order, then repeats the last one.

    A queued exception is raised instead of returned.  When *gate* is set
    the call blocks until the test releases it.
    """

    def __init__(self, *results: GeoPosition | Exception, gate: threading.Event | None = None) -> None:
        self._results = list(results) or [LocationUnavailableError("no results queued")]
        self.gate = gate
        self.calls = 0

    def push(self, result: GeoPosition | Exception) -> None:
        self._results.append(result)

    def fetch(self, timeout: float) -> GeoPosition:
        self.calls += 1
        if self.gate is not None:
            self.gate.wait(5)
        result = self._results.pop(0) if len(self._results) > 1 else self._results[0]
        if isinstance(result, Exception):
            raise result
        return result


class GatedApplier(MockThemeApplier):
    """Mock applier whose ``apply`` blocks until ``release()``."""

    def __init__(self, initial: DisplayState | None = None) -> None:
        super().__init__(initial)
        self.entered = threading.Event()
        self.entries = 0
        self.active = 0
        self.max_active = 0
        self._gate = threading.Event()

    def release(self) -> None:
        self._gate.set()

    def hold(self) -> None:
        self._gate.clear()
        self.entered.clear()

    def apply(self, state: DisplayState) -> ApplyResult:
        with self._lock:
            self.entries += 1
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        self.entered.set()
        try:
            self._gate.wait(5)
            return super().apply(state)
        finally:
            with self._lock:
                self.active -= 1


class FailingApplier(MockThemeApplier):
    """Reports failure (or raises) until ``recover()`` is called."""

    def __init__(self, raise_error: bool = False) -> None:
        super().__init__()
        self.raise_error = raise_error
        self.failing = True

    def recover(self) -> None:
        self.failing = False

    def apply(self, state: DisplayState) -> ApplyResult:
        if self.failing:
            self.calls.append(state)
            if self.raise_error:
                raise RuntimeError("applier crashed")
            return ApplyResult(state=state, ok=False, changed=False, detail="access denied")
        return super().apply(state)


class RecordingNotifier(NotificationSink):
    def __init__(self) -> None:
        self.messages: list[tuple[str, Severity]] = []

    def notify(self, message: str, severity: Severity = Severity.INFO) -> None:
        self.messages.append((message, severity))

    def texts(self) -> list[str]:
        return [m for m, _ in self.messages]
