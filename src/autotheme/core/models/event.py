"""Pydantic model for event bus messages."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field


class Event(BaseModel):
    """Structured event flowing through the async event bus.

    Payloads may carry frozen models (e.g. a ``StatusSnapshot``) so
    subscribers never receive a reference to mutable controller state.
    """

    event_type: str = Field(description="Dot-separated event type, e.g. 'automation.status.updated'")
    payload: dict[str, Any] = Field(default_factory=dict)
    source: str = Field(default="", description="Component that published the event")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
