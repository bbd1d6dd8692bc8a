from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable

from packages.shared.schemas.events import OrderTopicV1
from pydantic import BaseModel
from services.api.app.services.events_base import Subscriber

logger = logging.getLogger(__name__)


class InMemoryEventBus:
    """Fans payloads out to in-process subscribers, in subscription order."""

    name = "memory"

    def __init__(self) -> None:
        self._subscribers: dict[OrderTopicV1, list[Subscriber]] = defaultdict(list)

    def subscribe(self, topic: OrderTopicV1, callback: Subscriber) -> Callable[[], None]:
        self._subscribers[topic].append(callback)

        def _unsubscribe() -> None:
            if callback in self._subscribers[topic]:
                self._subscribers[topic].remove(callback)

        return _unsubscribe

    def publish(self, topic: OrderTopicV1, payload: BaseModel) -> None:
        subscribers = list(self._subscribers.get(topic, ()))
        logger.info("Publishing %s to %d subscriber(s)", topic.value, len(subscribers))
        for callback in subscribers:
            try:
                callback(topic, payload)
            except Exception:
                # One broken subscriber must not starve the rest.
                logger.exception("Subscriber %r failed on %s", callback, topic.value)


class NullEventBus:
    name = "null"

    def publish(self, topic: OrderTopicV1, payload: BaseModel) -> None:
        logger.debug("Dropping %s event", topic.value)
