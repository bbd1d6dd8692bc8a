from __future__ import annotations

import os

from fastapi import Request
from services.api.app.services.events_base import EventBus
from services.api.app.services.events_memory import InMemoryEventBus, NullEventBus


def build_event_bus() -> EventBus:
    """Select an event bus based on env vars.

    Defaults to the in-memory bus so local dev works without a broker.
    """

    mode = os.getenv("EATS_EVENT_BUS", "memory").strip().lower()

    if mode == "memory":
        return InMemoryEventBus()

    if mode == "null":
        return NullEventBus()

    raise ValueError(f"Unknown EATS_EVENT_BUS={mode!r}. Expected memory or null.")


def get_event_bus(request: Request) -> EventBus:
    """FastAPI dependency returning the bus built at startup."""

    bus = getattr(request.app.state, "event_bus", None)
    if bus is None:
        bus = build_event_bus()
        request.app.state.event_bus = bus
    return bus
