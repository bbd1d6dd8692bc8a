from __future__ import annotations

from collections.abc import Callable
from typing import Protocol

from packages.shared.schemas.events import OrderTopicV1
from pydantic import BaseModel

Subscriber = Callable[[OrderTopicV1, BaseModel], None]


class EventBus(Protocol):
    """Publish side of the order lifecycle channel.

    Delivery is best-effort and at-most-once. Callers do not learn whether anyone received
    the payload.
    """

    name: str

    def publish(self, topic: OrderTopicV1, payload: BaseModel) -> None: ...
