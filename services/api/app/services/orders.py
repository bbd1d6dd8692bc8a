"""Order lifecycle: creation, visibility-filtered retrieval and status transitions.

Every public method returns a result model and never raises. Expected failures carry their own
message; anything else is logged and reported with a fixed, operation-specific message.
"""

from __future__ import annotations

import logging

from packages.shared.schemas.events import (
    CookedOrderEventV1,
    OrderTopicV1,
    OrderUpdateEventV1,
    PendingOrderEventV1,
)
from packages.shared.schemas.order_v1 import OrderStatusV1, OrderV1, UserRoleV1
from services.api.app.db.models import Dish, Order, OrderItem, Restaurant, User
from services.api.app.models.order import (
    CreateOrderInput,
    CreateOrderOutput,
    EditOrderInput,
    EditOrderOutput,
    GetOrderOutput,
    GetOrdersOutput,
    TakeOrderOutput,
)
from services.api.app.services.authorization import can_transition, can_view
from services.api.app.services.errors import (
    ConflictError,
    EntityNotFoundError,
    ForbiddenError,
    ServiceError,
)
from services.api.app.services.events_base import EventBus
from services.api.app.services.pricing import (
    compute_dish_price,
    compute_order_total,
    parse_dish_options,
)
from sqlalchemy.orm import Session, selectinload

logger = logging.getLogger(__name__)

NOT_ALLOWED_TO_ACCESS = "Order Not Allowed to Access"
NOT_ALLOWED_TO_UPDATE = "Not allowed to update status"


class OrderService:
    def __init__(self, db: Session, events: EventBus, *, atomic_create: bool = False) -> None:
        self._db = db
        self._events = events
        self._atomic_create = atomic_create

    def create_order(self, customer: User, payload: CreateOrderInput) -> CreateOrderOutput:
        try:
            restaurant = self._db.get(Restaurant, payload.restaurant_id)
            if restaurant is None:
                raise EntityNotFoundError("Restaurant")

            item_prices: list[float] = []
            order_items: list[OrderItem] = []
            for item in payload.items:
                dish = self._db.get(Dish, item.dish_id)
                if dish is None:
                    raise EntityNotFoundError("Dish")

                item_prices.append(
                    compute_dish_price(dish.price, parse_dish_options(dish.options), item.options)
                )
                order_item = OrderItem(
                    dish=dish, options=[o.model_dump(exclude_none=True) for o in item.options]
                )
                self._db.add(order_item)
                self._save_item()
                order_items.append(order_item)

            order = Order(
                customer=customer,
                restaurant=restaurant,
                total=compute_order_total(item_prices),
                status=OrderStatusV1.PENDING,
                items=order_items,
            )
            self._db.add(order)
            # The snapshot must validate before the order row is committed.
            self._db.flush()
            snapshot = OrderV1.model_validate(order)
            self._db.commit()
            logger.info(
                "Order %s created by user %s at restaurant %s total=%s",
                snapshot.id,
                customer.id,
                restaurant.id,
                snapshot.total,
            )

            self._events.publish(
                OrderTopicV1.NEW_PENDING_ORDER,
                PendingOrderEventV1(order=snapshot, owner_id=restaurant.owner_id),
            )
            return CreateOrderOutput(success=True)
        except ServiceError as e:
            self._db.rollback()
            return CreateOrderOutput(success=False, error=str(e))
        except Exception:
            logger.exception("create_order failed for user %s", customer.id)
            self._db.rollback()
            return CreateOrderOutput(success=False, error="Could not create an order")

    def get_orders(self, actor: User, status: OrderStatusV1 | None = None) -> GetOrdersOutput:
        try:
            orders: list[Order] = []
            if actor.role == UserRoleV1.CLIENT:
                orders = self._filtered(Order.customer_id == actor.id, status)
            elif actor.role == UserRoleV1.DELIVERY:
                orders = self._filtered(Order.driver_id == actor.id, status)
            elif actor.role == UserRoleV1.OWNER:
                restaurants = (
                    self._db.query(Restaurant)
                    .options(selectinload(Restaurant.orders).selectinload(Order.items))
                    .filter(Restaurant.owner_id == actor.id)
                    .order_by(Restaurant.id)
                    .all()
                )
                orders = [order for restaurant in restaurants for order in restaurant.orders]
                if status is not None:
                    orders = [order for order in orders if order.status == status]

            return GetOrdersOutput(
                success=True, orders=[OrderV1.model_validate(order) for order in orders]
            )
        except Exception:
            logger.exception("get_orders failed for user %s", actor.id)
            self._db.rollback()
            return GetOrdersOutput(success=False, error="Could not load orders")

    def get_order(self, actor: User, order_id: int) -> GetOrderOutput:
        try:
            order = self._load(order_id)
            if not can_view(actor, order):
                raise ForbiddenError(NOT_ALLOWED_TO_ACCESS)

            return GetOrderOutput(success=True, order=OrderV1.model_validate(order))
        except ServiceError as e:
            return GetOrderOutput(success=False, error=str(e))
        except Exception:
            logger.exception("get_order %s failed for user %s", order_id, actor.id)
            self._db.rollback()
            return GetOrderOutput(success=False, error="Could not load the order")

    def edit_order(self, actor: User, order_id: int, payload: EditOrderInput) -> EditOrderOutput:
        try:
            order = self._load(order_id)
            if not can_view(actor, order):
                raise ForbiddenError(NOT_ALLOWED_TO_ACCESS)
            if not can_transition(actor, order.status, payload.status):
                raise ForbiddenError(NOT_ALLOWED_TO_UPDATE)

            snapshot = OrderV1.model_validate(order)
            self._db.query(Order).filter(Order.id == order.id).update(
                {Order.status: payload.status}
            )
            self._db.commit()
            logger.info(
                "Order %s moved %s -> %s by user %s",
                order.id,
                snapshot.status.value,
                payload.status.value,
                actor.id,
            )

            updated = snapshot.model_copy(update={"status": payload.status})
            if actor.role == UserRoleV1.OWNER and payload.status == OrderStatusV1.COOKED:
                self._events.publish(
                    OrderTopicV1.NEW_COOKED_ORDER, CookedOrderEventV1(order=updated)
                )
            self._events.publish(OrderTopicV1.NEW_ORDER_UPDATE, OrderUpdateEventV1(order=updated))
            return EditOrderOutput(success=True)
        except ServiceError as e:
            return EditOrderOutput(success=False, error=str(e))
        except Exception:
            logger.exception("edit_order %s failed for user %s", order_id, actor.id)
            self._db.rollback()
            return EditOrderOutput(success=False, error="Could not edit the order")

    def take_order(self, driver: User, order_id: int) -> TakeOrderOutput:
        try:
            if driver.role != UserRoleV1.DELIVERY:
                raise ForbiddenError(NOT_ALLOWED_TO_ACCESS)

            order = self._load(order_id)
            if order.driver_id is not None:
                raise ConflictError("This order already has a driver")

            snapshot = OrderV1.model_validate(order)
            self._db.query(Order).filter(Order.id == order.id).update({Order.driver_id: driver.id})
            self._db.commit()
            logger.info("Order %s taken by driver %s", order.id, driver.id)

            updated = snapshot.model_copy(update={"driver_id": driver.id})
            self._events.publish(OrderTopicV1.NEW_ORDER_UPDATE, OrderUpdateEventV1(order=updated))
            return TakeOrderOutput(success=True)
        except ServiceError as e:
            return TakeOrderOutput(success=False, error=str(e))
        except Exception:
            logger.exception("take_order %s failed for driver %s", order_id, driver.id)
            self._db.rollback()
            return TakeOrderOutput(success=False, error="Could not update the order")

    def _save_item(self) -> None:
        # Without the atomic flag each item is committed on its own, like the order row later.
        if self._atomic_create:
            self._db.flush()
        else:
            self._db.commit()

    def _load(self, order_id: int) -> Order:
        order = (
            self._db.query(Order)
            .options(selectinload(Order.restaurant), selectinload(Order.items))
            .filter(Order.id == order_id)
            .first()
        )
        if order is None:
            raise EntityNotFoundError("Order")
        return order

    def _filtered(self, scope, status: OrderStatusV1 | None) -> list[Order]:
        query = self._db.query(Order).options(selectinload(Order.items)).filter(scope)
        if status is not None:
            query = query.filter(Order.status == status)
        return query.order_by(Order.id).all()
