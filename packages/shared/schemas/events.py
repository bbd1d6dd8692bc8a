"""Shared order lifecycle event schema (v1).

The API publishes these payloads on the event bus. Subscribers (owner dashboards, driver apps,
customer order trackers) consume them to render live updates.
"""

from __future__ import annotations

from enum import Enum

from packages.shared.schemas.order_v1 import OrderV1
from pydantic import BaseModel


class OrderTopicV1(str, Enum):
    NEW_PENDING_ORDER = "NEW_PENDING_ORDER"
    NEW_COOKED_ORDER = "NEW_COOKED_ORDER"
    NEW_ORDER_UPDATE = "NEW_ORDER_UPDATE"


class PendingOrderEventV1(BaseModel):
    # Owner-side subscribers filter on owner_id.
    order: OrderV1
    owner_id: int


class CookedOrderEventV1(BaseModel):
    order: OrderV1


class OrderUpdateEventV1(BaseModel):
    order: OrderV1
