"""Shared order schema (v1).

These models are rendered by the owner dashboard, the customer app and the driver app.
They should remain stable and backwards compatible once shipped.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class UserRoleV1(str, Enum):
    OWNER = "Owner"
    CLIENT = "Client"
    DELIVERY = "Delivery"


class OrderStatusV1(str, Enum):
    PENDING = "Pending"
    COOKING = "Cooking"
    COOKED = "Cooked"
    PICKED_UP = "PickedUp"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


class DishChoiceV1(BaseModel):
    name: str
    extra: float | None = Field(default=None, ge=0)


class DishOptionV1(BaseModel):
    """A customization offered on a dish.

    `extra` is added whenever the option is selected. A selected choice adds its own extra on top.
    """

    name: str
    extra: float | None = Field(default=None, ge=0)
    choices: list[DishChoiceV1] | None = None


class OrderItemOptionV1(BaseModel):
    name: str
    choice: str | None = None


class OrderItemV1(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    dish_id: int
    options: list[OrderItemOptionV1] = Field(default_factory=list)


class OrderV1(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    customer_id: int | None = None
    driver_id: int | None = None
    restaurant_id: int | None = None
    total: float = Field(..., ge=0)
    status: OrderStatusV1
    items: list[OrderItemV1] = Field(default_factory=list)
