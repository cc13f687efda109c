"""Async event bus — ``asyncio.Queue``-based pub/sub.

This is the observer channel between the automation controller and
everything that reacts to it (status page, notification toasts, tests).
The controller never assumes which thread or UI its observers live on;
it only publishes.

Key behaviours:
* Handlers may be sync or async; both run on the bus's event loop.
* A handler that raises is **auto-unsubscribed** (logged + removed).
* Bounded queue — on overflow the oldest event is dropped with a warning.
* Publishing before :meth:`EventBus.start` is a no-op with a debug log, so
  collaborators can be exercised without a running bus.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass
from typing import Any, Callable

from autotheme.core.models.event import Event

_log = logging.getLogger(__name__)


@dataclass
class _Subscription:
    sub_id: str
    event_type: str
    handler: Callable[..., Any]


class EventBus:
    """Async event bus backed by an :class:`asyncio.Queue`.

    Args:
        queue_size: Maximum number of events queued before overflow handling.
    """

    def __init__(self, queue_size: int = 1000) -> None:
        self._queue_size = queue_size
        self._queue: asyncio.Queue[Event] | None = None
        self._subscriptions: dict[str, _Subscription] = {}
        # event_type → [sub_id, …]  for fast dispatch lookup
        self._type_index: dict[str, list[str]] = {}
        self._consumer_task: asyncio.Task[None] | None = None
        self._loop: asyncio.AbstractEventLoop | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        return self._consumer_task is not None and not self._consumer_task.done()

    async def start(self) -> None:
        """Start the background consumer task on the running loop."""
        self._loop = asyncio.get_running_loop()
        self._queue = asyncio.Queue(maxsize=self._queue_size)
        self._consumer_task = asyncio.create_task(self._consume(), name="event-bus-consumer")
        _log.info("Event bus started (queue_size=%d)", self._queue_size)

    async def stop(self) -> None:
        """Cancel the consumer task and forget all subscriptions."""
        if self._consumer_task is not None:
            self._consumer_task.cancel()
            try:
                await self._consumer_task
            except asyncio.CancelledError:
                pass
            self._consumer_task = None
        self._queue = None
        self._subscriptions.clear()
        self._type_index.clear()
        _log.info("Event bus stopped")

    # ------------------------------------------------------------------
    # Publish
    # ------------------------------------------------------------------

    async def publish(
        self,
        event_type: str,
        payload: dict[str, Any] | None = None,
        source: str = "",
    ) -> None:
        """Enqueue an event (call from async code on the event loop)."""
        if self._queue is None:
            _log.debug("Event bus not started — dropping %s", event_type)
            return
        event = Event(event_type=event_type, payload=payload or {}, source=source)
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            try:
                self._queue.get_nowait()
            except asyncio.QueueEmpty:
                pass
            _log.warning("Event bus queue overflow — dropped oldest event")
            self._queue.put_nowait(event)

    def publish_threadsafe(
        self,
        event_type: str,
        payload: dict[str, Any] | None = None,
        source: str = "",
    ) -> None:
        """Fire-and-forget publish, callable from any thread.

        Schedules :meth:`publish` on the bus loop via
        ``asyncio.run_coroutine_threadsafe``; never blocks the caller.
        """
        if self._loop is None or self._loop.is_closed():
            _log.debug("Event bus not started — dropping %s", event_type)
            return
        asyncio.run_coroutine_threadsafe(self.publish(event_type, payload, source), self._loop)

    # ------------------------------------------------------------------
    # Subscribe / unsubscribe
    # ------------------------------------------------------------------

    def subscribe(
        self,
        event_type: str,
        handler: Callable[..., Any],
    ) -> str:
        """Register *handler* for *event_type*, returning a subscription id."""
        sub_id = uuid.uuid4().hex
        self._subscriptions[sub_id] = _Subscription(
            sub_id=sub_id,
            event_type=event_type,
            handler=handler,
        )
        self._type_index.setdefault(event_type, []).append(sub_id)
        return sub_id

    def unsubscribe(self, sub_id: str) -> None:
        """Remove the subscription identified by *sub_id*."""
        sub = self._subscriptions.pop(sub_id, None)
        if sub is None:
            return
        ids = self._type_index.get(sub.event_type)
        if ids and sub_id in ids:
            ids.remove(sub_id)

    # ------------------------------------------------------------------
    # Consumer loop
    # ------------------------------------------------------------------

    async def _consume(self) -> None:
        """Drain the queue and dispatch to matching handlers."""
        assert self._queue is not None
        queue = self._queue
        while True:
            event = await queue.get()
            await self._dispatch(event)

    async def _dispatch(self, event: Event) -> None:
        for sub_id in list(self._type_index.get(event.event_type, [])):
            sub = self._subscriptions.get(sub_id)
            if sub is None:
                continue
            try:
                result = sub.handler(event)
                if asyncio.iscoroutine(result):
                    await result
            except Exception:
                _log.exception(
                    "Handler %s for '%s' raised — auto-unsubscribing",
                    sub.handler,
                    event.event_type,
                )
                self.unsubscribe(sub_id)
