from __future__ import annotations

import logging
from datetime import datetime

from services.api.app.db.models import Dish, Restaurant, User
from services.api.app.models.restaurant import (
    CreateDishInput,
    CreateDishOutput,
    CreateRestaurantInput,
    CreateRestaurantOutput,
    RestaurantOut,
    RestaurantsOutput,
    UpdateRestaurantInput,
    UpdateRestaurantOutput,
)
from services.api.app.services.errors import EntityNotFoundError, ForbiddenError, ServiceError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


class RestaurantService:
    def __init__(self, db: Session) -> None:
        self._db = db

    def create_restaurant(
        self, owner: User, payload: CreateRestaurantInput
    ) -> CreateRestaurantOutput:
        try:
            restaurant = Restaurant(
                name=payload.name,
                address=payload.address,
                cover_img=payload.cover_img,
                owner=owner,
            )
            self._db.add(restaurant)
            self._db.commit()
            return CreateRestaurantOutput(success=True, restaurant_id=restaurant.id)
        except Exception:
            logger.exception("create_restaurant failed for owner %s", owner.id)
            self._db.rollback()
            return CreateRestaurantOutput(success=False, error="Could not create restaurant")

    def list_restaurants(self) -> RestaurantsOutput:
        try:
            rows = (
                self._db.query(Restaurant)
                .order_by(Restaurant.is_promoted.desc(), Restaurant.id)
                .all()
            )
            return RestaurantsOutput(
                success=True, restaurants=[RestaurantOut.model_validate(r) for r in rows]
            )
        except Exception:
            logger.exception("list_restaurants failed")
            self._db.rollback()
            return RestaurantsOutput(success=False, error="Could not load restaurants")

    def update_restaurant(
        self, owner: User, restaurant_id: int, payload: UpdateRestaurantInput
    ) -> UpdateRestaurantOutput:
        try:
            restaurant = self._owned(owner, restaurant_id, "edit a restaurant")
            for field, value in payload.model_dump(exclude_unset=True).items():
                setattr(restaurant, field, value)
            self._db.commit()
            return UpdateRestaurantOutput(success=True)
        except ServiceError as e:
            return UpdateRestaurantOutput(success=False, error=str(e))
        except Exception:
            logger.exception("update_restaurant %s failed", restaurant_id)
            self._db.rollback()
            return UpdateRestaurantOutput(success=False, error="Could not edit restaurant")

    def create_dish(
        self, owner: User, restaurant_id: int, payload: CreateDishInput
    ) -> CreateDishOutput:
        try:
            restaurant = self._owned(owner, restaurant_id, "add dishes to a restaurant")
            dish = Dish(
                restaurant=restaurant,
                name=payload.name,
                price=payload.price,
                description=payload.description,
                options=[o.model_dump(exclude_none=True) for o in payload.options],
            )
            self._db.add(dish)
            self._db.commit()
            return CreateDishOutput(success=True, dish_id=dish.id)
        except ServiceError as e:
            return CreateDishOutput(success=False, error=str(e))
        except Exception:
            logger.exception("create_dish failed for restaurant %s", restaurant_id)
            self._db.rollback()
            return CreateDishOutput(success=False, error="Could not create dish")

    def expire_promotions(self, now: datetime | None = None) -> int:
        """Clear promotion on restaurants whose paid window has passed. Returns the count."""

        now = now or datetime.utcnow()
        expired = (
            self._db.query(Restaurant)
            .filter(Restaurant.is_promoted.is_(True), Restaurant.promoted_until < now)
            .all()
        )
        for restaurant in expired:
            restaurant.is_promoted = False
            restaurant.promoted_until = None
        self._db.commit()
        if expired:
            logger.info("Expired promotion on %d restaurant(s)", len(expired))
        return len(expired)

    def _owned(self, owner: User, restaurant_id: int, action: str) -> Restaurant:
        restaurant = self._db.get(Restaurant, restaurant_id)
        if restaurant is None:
            raise EntityNotFoundError("Restaurant")
        if restaurant.owner_id != owner.id:
            raise ForbiddenError(f"You can't {action} that you don't own")
        return restaurant
