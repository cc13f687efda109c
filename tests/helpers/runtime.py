"""Test helpers — polling and event capture for async tests."""

from __future__ import annotations

import asyncio
from typing import Callable

from autotheme.core.event_bus import EventBus
from autotheme.core.models.event import Event


async def wait_for(
    condition: Callable[[], bool],
    timeout: float = 5.0,
    interval: float = 0.02,
) -> None:
    """Poll *condition* until it is truthy.

    Raises :class:`TimeoutError` if it stays falsy for *timeout* seconds.
    """
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not condition():
        if loop.time() >= deadline:
            raise TimeoutError(f"Condition not met within {timeout}s")
        await asyncio.sleep(interval)


async def drain(delay: float = 0.05) -> None:
    """Give the bus consumer a chance to dispatch everything queued."""
    await asyncio.sleep(delay)


def capture(bus: EventBus, event_type: str) -> list[Event]:
    """Subscribe a recorder for *event_type* and return its list."""
    received: list[Event] = []
    bus.subscribe(event_type, received.append)
    return received
