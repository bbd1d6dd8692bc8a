"""Who may see an order, and who may move it to which status.

Both checks are pure functions of their inputs. Callers check visibility first, then the
transition.
"""

from __future__ import annotations

from typing import Protocol

from packages.shared.schemas.order_v1 import OrderStatusV1, UserRoleV1

_ANY = None


class Actor(Protocol):
    id: int
    role: UserRoleV1


class _OwnedRestaurant(Protocol):
    owner_id: int


class VisibleOrder(Protocol):
    customer_id: int | None
    driver_id: int | None
    restaurant: _OwnedRestaurant | None


# role -> current status (or _ANY) -> statuses the role may request.
# Every role must have an entry; an unlisted current status allows nothing.
TRANSITIONS: dict[UserRoleV1, dict[OrderStatusV1 | None, frozenset[OrderStatusV1]]] = {
    UserRoleV1.CLIENT: {
        OrderStatusV1.PENDING: frozenset({OrderStatusV1.CANCELLED}),
    },
    UserRoleV1.OWNER: {
        _ANY: frozenset({OrderStatusV1.CANCELLED, OrderStatusV1.COOKING, OrderStatusV1.COOKED}),
    },
    UserRoleV1.DELIVERY: {
        OrderStatusV1.COOKED: frozenset({OrderStatusV1.PICKED_UP}),
        OrderStatusV1.PICKED_UP: frozenset({OrderStatusV1.DELIVERED}),
    },
}


def can_view(actor: Actor, order: VisibleOrder) -> bool:
    if actor.role == UserRoleV1.CLIENT:
        return order.customer_id == actor.id
    if actor.role == UserRoleV1.DELIVERY:
        return order.driver_id is not None and order.driver_id == actor.id
    if actor.role == UserRoleV1.OWNER:
        return order.restaurant is not None and order.restaurant.owner_id == actor.id
    raise ValueError(f"Unhandled role: {actor.role!r}")


def allowed_transitions(role: UserRoleV1, current: OrderStatusV1) -> frozenset[OrderStatusV1]:
    rules = TRANSITIONS[role]
    if _ANY in rules:
        return rules[_ANY]
    return rules.get(current, frozenset())


def can_transition(actor: Actor, current: OrderStatusV1, requested: OrderStatusV1) -> bool:
    return requested in allowed_transitions(actor.role, current)
