"""AutomationController — the scheduler and debounced theme state machine.

Lifecycle::

    initializing ──start()──► running ◄──set_enabled()──► paused
                                  │                          │
                                  └────────stop()────────────┴──► stopped

Every tick runs, in order: fold in a finished background location refresh,
recompute the solar window if the date or location changed, start a new
background refresh if the cached position is stale, derive the wanted
display state, apply it if it differs from the last applied one, and
publish a status snapshot.

Concurrency model:

* All controller state is mutated on the event loop, inside a tick (or
  ``start``/``set_enabled``/``stop``).  Ticks are serialized by an
  :class:`asyncio.Lock`; a timer firing while a tick is still running is
  skipped, an explicit :meth:`tick` queues behind it.
* The blocking collaborators (location provider, theme applier) run in
  worker threads bounded by ``asyncio.wait_for``.
* Pause and stop bump ``_epoch``.  Results produced under an older epoch
  are discarded, so nothing that finishes after a pause can change state.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import date, datetime, timedelta, tzinfo
from typing import Callable

from autotheme.core import events
from autotheme.core import solar
from autotheme.core.event_bus import EventBus
from autotheme.core.interfaces.collaborators import (
    LocationProvider,
    LocationStoreInterface,
    LocationUnavailableError,
    NotificationSink,
    ThemeApplier,
)
from autotheme.core.models.config import AutomationConfig
from autotheme.core.models.state import (
    ApplyResult,
    ControllerState,
    DisplayState,
    GeoPosition,
    LocationSource,
    NoTransition,
    Severity,
    SolarWindow,
    StatusSnapshot,
    TickPhase,
)
from autotheme.core.notifications import LogNotificationSink
from autotheme.location.cache import LocationCache
from autotheme.log_config.logger import ContextualLogger, get_logger

_log = get_logger(__name__)

Clock = Callable[[], datetime]
SolarState = SolarWindow | NoTransition


def _local_now() -> datetime:
    return datetime.now().astimezone()


def wanted_state(now: datetime, solar_state: SolarState) -> DisplayState:
    """Dark before sunrise and from sunset on; light in ``[sunrise, sunset)``."""
    if isinstance(solar_state, NoTransition):
        return solar_state.display_state
    if now < solar_state.sunrise or now >= solar_state.sunset:
        return DisplayState.DARK
    return DisplayState.LIGHT


def next_switch(now: datetime, solar_state: SolarState) -> datetime | None:
    """When the wanted state flips next; ``None`` during polar day/night.

    After sunset, tomorrow's sunrise is approximated by today's plus one day.
    """
    if isinstance(solar_state, NoTransition):
        return None
    if now < solar_state.sunrise:
        return solar_state.sunrise
    if now < solar_state.sunset:
        return solar_state.sunset
    return solar_state.sunrise + timedelta(days=1)


def _discard_late_error(future: asyncio.Future) -> None:
    # Marks a late applier exception as retrieved; the waiter already reported it.
    if not future.cancelled():
        future.exception()


@dataclass(frozen=True)
class _FetchOutcome:
    epoch: int
    position: GeoPosition | None = None
    error: str = ""


class AutomationController:
    """Owns the location cache, solar window, applied state and timer.

    Args:
        config: Scheduling/caching policy.  ``config.enabled`` is the
            initial value of the runtime toggle.
        store: Durable store for the last known position.
        applier: Performs the actual theme switch.
        event_bus: Observer channel for status and lifecycle events.
        provider: Fresh-position source; ``None`` runs from the store or
            the default window only.
        notifier: User-facing notification sink.  Failures are ignored.
        clock: Returns the current timezone-aware time.
        tz: Zone for the computed window; ``None`` uses the system zone.
    """

    def __init__(
        self,
        config: AutomationConfig,
        store: LocationStoreInterface,
        applier: ThemeApplier,
        event_bus: EventBus,
        provider: LocationProvider | None = None,
        notifier: NotificationSink | None = None,
        clock: Clock | None = None,
        tz: tzinfo | None = None,
    ) -> None:
        self._config = config
        self._applier = applier
        self._bus = event_bus
        self._provider = provider
        self._notifier = notifier or LogNotificationSink()
        self._clock = clock or _local_now
        self._tz = tz
        self._cache = LocationCache(store, config.change_threshold_degrees)
        self._log = ContextualLogger(_log, component="controller")

        self._enabled = config.enabled
        self._state = ControllerState.INITIALIZING
        self._phase = TickPhase.IDLE

        self._solar: SolarState | None = None
        self._applied: DisplayState | None = None
        self._transition_in_flight = False
        self._last_location_refresh: datetime | None = None
        self._location_changed = False
        self._first_tick_done = False

        self._epoch = 0
        self._pending_fetch: _FetchOutcome | None = None

        # Report each degraded condition once, not on every tick.
        self._location_failure_reported = False
        self._apply_failure_reported = False
        self._polar_reported_for: date | None = None
        self._solar_error_reported_for: date | None = None

        self._tick_lock = asyncio.Lock()
        self._timer_task: asyncio.Task[None] | None = None
        self._tick_task: asyncio.Task[StatusSnapshot | None] | None = None
        self._refresh_task: asyncio.Task[None] | None = None
        # Worker running ThemeApplier.apply; outlives a timed-out wait.
        self._apply_future: asyncio.Future[ApplyResult] | None = None

    # ------------------------------------------------------------------
    # Public properties
    # ------------------------------------------------------------------

    @property
    def state(self) -> ControllerState:
        return self._state

    @property
    def phase(self) -> TickPhase:
        return self._phase

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def applied_state(self) -> DisplayState | None:
        """Last state the applier confirmed; ``None`` before the first success."""
        return self._applied

    @property
    def solar_state(self) -> SolarState | None:
        return self._solar

    @property
    def position(self) -> GeoPosition | None:
        return self._cache.current

    @property
    def location_source(self) -> LocationSource:
        return self._cache.source

    @property
    def transition_in_flight(self) -> bool:
        return self._transition_in_flight

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> StatusSnapshot:
        """Resolve a location, compute the first window, apply it once, and
        arm the timer (or park in ``paused`` when disabled).

        Never raises for collaborator failures: with no provider, no
        persisted record and no network the default window is used.
        """
        if self._state is not ControllerState.INITIALIZING:
            raise RuntimeError(f"Controller already started (state={self._state.value})")

        self._log.info("Starting (enabled=%s)", self._enabled)
        epoch = self._epoch
        now = self._clock()

        self._phase = TickPhase.REFRESHING_LOCATION
        outcome = await self._fetch_location(epoch)
        await self._fold_location(outcome, now)
        self._recompute(now)

        if self._enabled:
            assert self._solar is not None
            await self._transition(wanted_state(now, self._solar), epoch)
            await self._set_state(ControllerState.RUNNING)
            self._arm_timer()
        else:
            await self._set_state(ControllerState.PAUSED)
        self._phase = TickPhase.IDLE
        return await self._publish_status(now)

    async def set_enabled(self, enabled: bool) -> None:
        """The pause/resume toggle.  Idempotent.

        Pausing disarms the timer and discards any in-flight refresh or
        apply result.  Resuming re-arms the timer and runs one tick
        immediately (queued behind a tick that is still finishing).
        """
        if self._state in (ControllerState.INITIALIZING, ControllerState.STOPPED):
            self._enabled = enabled
            return

        if enabled == self._enabled:
            return
        self._enabled = enabled

        if not enabled:
            self._epoch += 1
            self._disarm_timer()
            self._cancel_refresh()
            await self._set_state(ControllerState.PAUSED)
            self._notify("Automatic switching paused", Severity.INFO)
            await self._publish_status(self._clock())
            return

        await self._set_state(ControllerState.RUNNING)
        self._arm_timer()
        self._notify("Automatic switching resumed", Severity.INFO)
        await self.tick()

    async def stop(self) -> None:
        """Disarm the timer, cancel background work and discard its results."""
        if self._state is ControllerState.STOPPED:
            return
        self._log.info("Stopping")
        self._epoch += 1
        timer = self._timer_task
        self._disarm_timer()
        self._cancel_refresh()
        for task in (timer, self._tick_task):
            if task is not None and not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
        self._tick_task = None
        await self._set_state(ControllerState.STOPPED)

    # ------------------------------------------------------------------
    # Ticks
    # ------------------------------------------------------------------

    async def tick(self) -> StatusSnapshot | None:
        """Run one tick now, waiting for a tick already in progress.

        Returns the published snapshot, or ``None`` if the controller is
        not running or was paused while the tick was executing.
        """
        async with self._tick_lock:
            return await self._run_tick()

    async def _run_tick(self) -> StatusSnapshot | None:
        if self._state is not ControllerState.RUNNING:
            return None

        epoch = self._epoch
        now = self._clock()
        try:
            if self._pending_fetch is not None:
                outcome, self._pending_fetch = self._pending_fetch, None
                self._phase = TickPhase.REFRESHING_LOCATION
                await self._fold_location(outcome, now)

            if self._needs_recompute(now):
                self._recompute(now)
            self._first_tick_done = True

            if self._refresh_due(now):
                self._phase = TickPhase.REFRESHING_LOCATION
                self._start_refresh(epoch)

            assert self._solar is not None
            await self._transition(wanted_state(now, self._solar), epoch)
            if epoch != self._epoch:
                return None
            return await self._publish_status(now)
        except Exception:
            self._log.exception("Tick failed — keeping previous state")
            return None
        finally:
            self._phase = TickPhase.IDLE

    def _needs_recompute(self, now: datetime) -> bool:
        return (
            not self._first_tick_done
            or self._location_changed
            or self._solar is None
            or self._solar.date != self._local_date(now)
        )

    def _refresh_due(self, now: datetime) -> bool:
        if self._provider is None:
            return False
        if self._refresh_task is not None and not self._refresh_task.done():
            return False
        if self._last_location_refresh is None:
            return True
        age = (now - self._last_location_refresh).total_seconds()
        return age >= self._config.location_refresh_interval_seconds

    # ------------------------------------------------------------------
    # Timer
    # ------------------------------------------------------------------

    def _arm_timer(self) -> None:
        if self._timer_task is None or self._timer_task.done():
            self._timer_task = asyncio.create_task(self._timer_loop(), name="autotheme-timer")

    def _disarm_timer(self) -> None:
        if self._timer_task is not None:
            self._timer_task.cancel()
            self._timer_task = None

    async def _timer_loop(self) -> None:
        interval = self._config.poll_interval_seconds
        while True:
            await asyncio.sleep(interval)
            if self._tick_lock.locked():
                self._log.debug("Previous tick still running — skipping this one")
                continue
            # Separate task: disarming the timer must not cancel a tick
            # that is waiting on the applier.
            self._tick_task = asyncio.create_task(self.tick(), name="autotheme-tick")

    # ------------------------------------------------------------------
    # Location
    # ------------------------------------------------------------------

    async def _fetch_location(self, epoch: int) -> _FetchOutcome:
        if self._provider is None:
            return _FetchOutcome(epoch, error="no location provider configured")

        timeout = self._config.location_timeout_seconds
        try:
            position = await asyncio.wait_for(
                asyncio.to_thread(self._provider.fetch, timeout), timeout
            )
        except asyncio.TimeoutError:
            return _FetchOutcome(epoch, error=f"timed out after {timeout:g}s")
        except LocationUnavailableError as exc:
            return _FetchOutcome(epoch, error=str(exc))
        except Exception as exc:
            self._log.exception("Location provider raised unexpectedly")
            return _FetchOutcome(epoch, error=str(exc) or exc.__class__.__name__)
        return _FetchOutcome(epoch, position=position)

    def _start_refresh(self, epoch: int) -> None:
        self._refresh_task = asyncio.create_task(
            self._background_refresh(epoch), name="autotheme-location-refresh"
        )

    async def _background_refresh(self, epoch: int) -> None:
        outcome = await self._fetch_location(epoch)
        # Folded in by the next tick; never applied mid-tick.
        if outcome.epoch == self._epoch:
            self._pending_fetch = outcome

    def _cancel_refresh(self) -> None:
        if self._refresh_task is not None and not self._refresh_task.done():
            self._refresh_task.cancel()
        self._refresh_task = None
        self._pending_fetch = None

    async def _fold_location(self, outcome: _FetchOutcome, now: datetime) -> None:
        if outcome.epoch != self._epoch:
            self._log.debug("Discarding location result from a previous run")
            return

        before = self._cache.current
        if outcome.position is not None:
            moved = self._cache.accept(outcome.position)
            # Refreshed even for a discarded sample so it isn't re-fetched at once.
            self._last_location_refresh = now
            self._location_failure_reported = False
            if moved:
                self._log.info(
                    "Location %.4f, %.4f (%s)",
                    outcome.position.latitude,
                    outcome.position.longitude,
                    outcome.position.label or "unnamed",
                )
        else:
            self._log.warning("Location unavailable: %s", outcome.error)
            fallback = self._cache.fallback()
            if not self._location_failure_reported:
                self._location_failure_reported = True
                if fallback is None:
                    self._notify(
                        "Location detection failed — using default sunrise/sunset times",
                        Severity.WARNING,
                    )
                else:
                    self._notify(
                        f"Location unavailable — using last known location"
                        f" ({fallback.label or 'unnamed'})",
                        Severity.INFO,
                    )

        current = self._cache.current
        if current != before:
            self._location_changed = True
            await self._bus.publish(
                events.LOCATION_UPDATED,
                {"position": current, "source": self._cache.source.value},
                source="controller",
            )

    # ------------------------------------------------------------------
    # Solar window
    # ------------------------------------------------------------------

    def _local_date(self, now: datetime) -> date:
        return now.astimezone(self._tz).date()

    def _recompute(self, now: datetime) -> None:
        self._phase = TickPhase.RECOMPUTING
        today = self._local_date(now)
        position = self._cache.current

        if position is None:
            computed: SolarState = solar.fixed_window(
                today, self._config.default_sunrise, self._config.default_sunset, self._tz
            )
            self._log.info("Location unknown — using default window for %s", today)
        else:
            try:
                computed = solar.compute(today, position.latitude, position.longitude, self._tz)
            except solar.CoordinateError as exc:
                self._log.error("Cannot compute sun times: %s", exc)
                self._location_changed = False
                if self._solar_error_reported_for != today:
                    self._solar_error_reported_for = today
                    self._notify(f"Sun times unavailable: {exc}", Severity.WARNING)
                if self._solar is None:
                    self._solar = solar.fixed_window(
                        today, self._config.default_sunrise, self._config.default_sunset, self._tz
                    )
                return

        self._solar = computed
        self._location_changed = False

        if isinstance(computed, NoTransition):
            if self._polar_reported_for != today:
                self._polar_reported_for = today
                kept = computed.display_state.value
                self._notify(
                    f"No sunrise or sunset today ({computed.condition.value}) — staying {kept}",
                    Severity.INFO,
                )
        else:
            self._log.info(
                "Sun times for %s: sunrise %s, sunset %s",
                today,
                computed.sunrise.strftime("%H:%M"),
                computed.sunset.strftime("%H:%M"),
            )

    # ------------------------------------------------------------------
    # Transition
    # ------------------------------------------------------------------

    async def _transition(self, wanted: DisplayState, epoch: int) -> None:
        if wanted == self._applied:
            return
        if self._transition_in_flight:
            self._log.debug("Transition already in flight — not starting another")
            return
        if self._apply_future is not None and not self._apply_future.done():
            self._log.warning("Previous switch still running in the applier — not starting another")
            return

        self._transition_in_flight = True
        self._phase = TickPhase.TRANSITIONING
        timeout = self._config.apply_timeout_seconds
        future = asyncio.ensure_future(asyncio.to_thread(self._applier.apply, wanted))
        future.add_done_callback(_discard_late_error)
        self._apply_future = future
        try:
            # Shielded: a timeout stops the wait, not the worker.
            result = await asyncio.wait_for(asyncio.shield(future), timeout)
        except asyncio.TimeoutError:
            result = ApplyResult(
                state=wanted, ok=False, changed=False, detail=f"timed out after {timeout:g}s"
            )
        except Exception as exc:
            self._log.exception("Theme applier raised")
            result = ApplyResult(
                state=wanted, ok=False, changed=False, detail=str(exc) or exc.__class__.__name__
            )
        finally:
            self._transition_in_flight = False

        if epoch != self._epoch:
            self._log.info("Discarding %s switch result — paused or stopped meanwhile", wanted.value)
            return

        if result.ok:
            self._applied = wanted
            self._apply_failure_reported = False
            self._log.info("Theme is now %s%s", wanted.value, "" if result.changed else " (unchanged)")
            await self._bus.publish(
                events.THEME_APPLIED,
                {"state": wanted.value, "changed": result.changed},
                source="controller",
            )
            if result.changed:
                self._notify(f"The theme has been changed to {wanted.value} mode", Severity.INFO)
            return

        self._log.warning("Switch to %s failed: %s", wanted.value, result.detail)
        await self._bus.publish(
            events.THEME_APPLY_FAILED,
            {"state": wanted.value, "detail": result.detail},
            source="controller",
        )
        if not self._apply_failure_reported:
            self._apply_failure_reported = True
            self._notify(f"Could not switch to {wanted.value} mode: {result.detail}", Severity.WARNING)

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def snapshot(self, now: datetime | None = None) -> StatusSnapshot:
        """Immutable view of the controller for observers."""
        now = now or self._clock()
        solar_state = self._solar
        return StatusSnapshot(
            controller_state=self._state,
            enabled=self._enabled,
            display_state=wanted_state(now, solar_state) if solar_state is not None else None,
            applied_state=self._applied,
            transition_in_flight=self._transition_in_flight,
            position=self._cache.current,
            location_source=self._cache.source,
            window=solar_state if isinstance(solar_state, SolarWindow) else None,
            polar=solar_state.condition if isinstance(solar_state, NoTransition) else None,
            next_switch=next_switch(now, solar_state) if solar_state is not None else None,
            updated_at=now,
        )

    async def _publish_status(self, now: datetime) -> StatusSnapshot:
        snap = self.snapshot(now)
        await self._bus.publish(events.STATUS_UPDATED, {"snapshot": snap}, source="controller")
        return snap

    async def _set_state(self, state: ControllerState) -> None:
        if state is self._state:
            return
        previous, self._state = self._state, state
        self._log.info("State %s → %s", previous.value, state.value)
        await self._bus.publish(
            events.STATE_CHANGED,
            {"old": previous.value, "new": state.value},
            source="controller",
        )

    def _notify(self, message: str, severity: Severity) -> None:
        try:
            self._notifier.notify(message, severity)
        except Exception:
            self._log.debug("Notification sink failed for %r", message, exc_info=True)
