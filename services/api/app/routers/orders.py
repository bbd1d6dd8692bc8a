from __future__ import annotations

from fastapi import APIRouter, Depends
from packages.shared.schemas.order_v1 import OrderStatusV1, UserRoleV1
from services.api.app.db.models import User
from services.api.app.models.order import (
    CreateOrderInput,
    CreateOrderOutput,
    EditOrderInput,
    EditOrderOutput,
    GetOrderOutput,
    GetOrdersOutput,
    TakeOrderOutput,
)
from services.api.app.routers.deps import get_current_user, get_order_service, require_role
from services.api.app.services.orders import OrderService

router = APIRouter()


@router.post("/v1/orders", response_model=CreateOrderOutput)
def create_order(
    payload: CreateOrderInput,
    user: User = Depends(require_role(UserRoleV1.CLIENT)),
    orders: OrderService = Depends(get_order_service),
) -> CreateOrderOutput:
    return orders.create_order(user, payload)


@router.get("/v1/orders", response_model=GetOrdersOutput)
def get_orders(
    status: OrderStatusV1 | None = None,
    user: User = Depends(get_current_user),
    orders: OrderService = Depends(get_order_service),
) -> GetOrdersOutput:
    return orders.get_orders(user, status)


@router.get("/v1/orders/{order_id}", response_model=GetOrderOutput)
def get_order(
    order_id: int,
    user: User = Depends(get_current_user),
    orders: OrderService = Depends(get_order_service),
) -> GetOrderOutput:
    return orders.get_order(user, order_id)


@router.patch("/v1/orders/{order_id}", response_model=EditOrderOutput)
def edit_order(
    order_id: int,
    payload: EditOrderInput,
    user: User = Depends(get_current_user),
    orders: OrderService = Depends(get_order_service),
) -> EditOrderOutput:
    return orders.edit_order(user, order_id, payload)


@router.post("/v1/orders/{order_id}/take", response_model=TakeOrderOutput)
def take_order(
    order_id: int,
    user: User = Depends(require_role(UserRoleV1.DELIVERY)),
    orders: OrderService = Depends(get_order_service),
) -> TakeOrderOutput:
    return orders.take_order(user, order_id)
