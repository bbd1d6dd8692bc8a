from __future__ import annotations

from fastapi import APIRouter, Depends
from packages.shared.schemas.order_v1 import UserRoleV1
from services.api.app.db.models import User
from services.api.app.models.restaurant import (
    CreateDishInput,
    CreateDishOutput,
    CreateRestaurantInput,
    CreateRestaurantOutput,
    RestaurantsOutput,
    UpdateRestaurantInput,
    UpdateRestaurantOutput,
)
from services.api.app.routers.deps import get_restaurant_service, require_role
from services.api.app.services.restaurants import RestaurantService

router = APIRouter()

_owner = require_role(UserRoleV1.OWNER)


@router.get("/v1/restaurants", response_model=RestaurantsOutput)
def list_restaurants(
    restaurants: RestaurantService = Depends(get_restaurant_service),
) -> RestaurantsOutput:
    return restaurants.list_restaurants()


@router.post("/v1/restaurants", response_model=CreateRestaurantOutput)
def create_restaurant(
    payload: CreateRestaurantInput,
    owner: User = Depends(_owner),
    restaurants: RestaurantService = Depends(get_restaurant_service),
) -> CreateRestaurantOutput:
    return restaurants.create_restaurant(owner, payload)


@router.patch("/v1/restaurants/{restaurant_id}", response_model=UpdateRestaurantOutput)
def update_restaurant(
    restaurant_id: int,
    payload: UpdateRestaurantInput,
    owner: User = Depends(_owner),
    restaurants: RestaurantService = Depends(get_restaurant_service),
) -> UpdateRestaurantOutput:
    return restaurants.update_restaurant(owner, restaurant_id, payload)


@router.post("/v1/restaurants/{restaurant_id}/dishes", response_model=CreateDishOutput)
def create_dish(
    restaurant_id: int,
    payload: CreateDishInput,
    owner: User = Depends(_owner),
    restaurants: RestaurantService = Depends(get_restaurant_service),
) -> CreateDishOutput:
    return restaurants.create_dish(owner, restaurant_id, payload)
