from __future__ import annotations

from datetime import datetime

from packages.shared.schemas.order_v1 import DishOptionV1
from pydantic import BaseModel, ConfigDict, Field
from services.api.app.models.common import MutationOutput


class DishOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    restaurant_id: int
    name: str
    price: float
    description: str | None = None
    options: list[DishOptionV1] = Field(default_factory=list)


class RestaurantOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    address: str
    cover_img: str | None = None
    owner_id: int
    is_promoted: bool
    promoted_until: datetime | None = None


class CreateRestaurantInput(BaseModel):
    name: str = Field(..., min_length=5)
    address: str
    cover_img: str | None = None


class CreateRestaurantOutput(MutationOutput):
    restaurant_id: int | None = None


class UpdateRestaurantInput(BaseModel):
    name: str | None = Field(default=None, min_length=5)
    address: str | None = None
    cover_img: str | None = None


class UpdateRestaurantOutput(MutationOutput):
    pass


class RestaurantsOutput(MutationOutput):
    restaurants: list[RestaurantOut] | None = None


class CreateDishInput(BaseModel):
    name: str
    price: float = Field(..., ge=0)
    description: str | None = None
    options: list[DishOptionV1] = Field(default_factory=list)


class CreateDishOutput(MutationOutput):
    dish_id: int | None = None
