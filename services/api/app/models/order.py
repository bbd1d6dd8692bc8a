from __future__ import annotations

from packages.shared.schemas.order_v1 import OrderItemOptionV1, OrderStatusV1, OrderV1
from pydantic import BaseModel, Field
from services.api.app.models.common import MutationOutput


class CreateOrderItemInput(BaseModel):
    dish_id: int
    options: list[OrderItemOptionV1] = Field(default_factory=list)


class CreateOrderInput(BaseModel):
    restaurant_id: int
    items: list[CreateOrderItemInput] = Field(..., min_length=1)


class CreateOrderOutput(MutationOutput):
    pass


class GetOrdersOutput(MutationOutput):
    orders: list[OrderV1] | None = None


class GetOrderOutput(MutationOutput):
    order: OrderV1 | None = None


class EditOrderInput(BaseModel):
    status: OrderStatusV1


class EditOrderOutput(MutationOutput):
    pass


class TakeOrderOutput(MutationOutput):
    pass
