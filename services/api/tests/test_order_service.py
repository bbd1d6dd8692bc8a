from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest
from packages.shared.schemas.events import OrderTopicV1
from packages.shared.schemas.order_v1 import OrderItemOptionV1, OrderStatusV1, OrderV1, UserRoleV1
from pydantic import BaseModel
from services.api.app.db.database import db_session
from services.api.app.db.init_db import init_db
from services.api.app.db.models import Dish, Order, OrderItem, Restaurant, User
from services.api.app.models.order import CreateOrderInput, CreateOrderItemInput, EditOrderInput
from services.api.app.services.orders import OrderService
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

SIZE_OPTIONS = [{"name": "Size", "extra": 2, "choices": [{"name": "Large", "extra": 3}]}]


class RecordingBus:
    name = "recording"

    def __init__(self) -> None:
        self.published: list[tuple[OrderTopicV1, BaseModel]] = []

    def publish(self, topic: OrderTopicV1, payload: BaseModel) -> None:
        self.published.append((topic, payload))

    def topics(self) -> list[OrderTopicV1]:
        return [topic for topic, _ in self.published]


class ExplodingBus:
    name = "exploding"

    def publish(self, topic: OrderTopicV1, payload: BaseModel) -> None:
        raise ConnectionError("broker unavailable")


@pytest.fixture()
def db(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Session]:
    monkeypatch.setenv("DATABASE_URL", f"sqlite+pysqlite:///{tmp_path / 'eats_orders.db'}")
    monkeypatch.setenv("EATS_DB_AUTO_CREATE", "true")
    init_db()

    session = db_session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def bus() -> RecordingBus:
    return RecordingBus()


@pytest.fixture()
def service(db: Session, bus: RecordingBus) -> OrderService:
    return OrderService(db, bus)


def _user(db: Session, email: str, role: UserRoleV1) -> User:
    user = User(email=email, role=role)
    db.add(user)
    db.commit()
    return user


def _restaurant(db: Session, owner: User, name: str = "Pizza Place") -> Restaurant:
    restaurant = Restaurant(name=name, address="1 Main St", owner=owner)
    db.add(restaurant)
    db.commit()
    return restaurant


def _dish(
    db: Session, restaurant: Restaurant, price: float = 10, options: list | None = None
) -> Dish:
    dish = Dish(restaurant=restaurant, name="Margherita", price=price, options=options or [])
    db.add(dish)
    db.commit()
    return dish


def _order_input(restaurant_id: int, *items: CreateOrderItemInput) -> CreateOrderInput:
    return CreateOrderInput(restaurant_id=restaurant_id, items=list(items))


def _large(dish: Dish) -> CreateOrderItemInput:
    return CreateOrderItemInput(
        dish_id=dish.id, options=[OrderItemOptionV1(name="Size", choice="Large")]
    )


@pytest.fixture()
def world(db: Session) -> dict:
    owner = _user(db, "owner@eats.test", UserRoleV1.OWNER)
    client = _user(db, "client@eats.test", UserRoleV1.CLIENT)
    other_client = _user(db, "other@eats.test", UserRoleV1.CLIENT)
    driver = _user(db, "driver@eats.test", UserRoleV1.DELIVERY)
    restaurant = _restaurant(db, owner)
    dish = _dish(db, restaurant, options=SIZE_OPTIONS)
    return {
        "owner": owner,
        "client": client,
        "other_client": other_client,
        "driver": driver,
        "restaurant": restaurant,
        "dish": dish,
    }


def _place(service: OrderService, world: dict) -> OrderV1:
    result = service.create_order(
        world["client"], _order_input(world["restaurant"].id, _large(world["dish"]))
    )
    assert result.success, result.error
    orders = service.get_orders(world["client"]).orders
    assert orders
    return orders[-1]


def test_create_order_prices_options_and_publishes(
    service: OrderService, bus: RecordingBus, db: Session, world: dict
) -> None:
    result = service.create_order(
        world["client"], _order_input(world["restaurant"].id, _large(world["dish"]))
    )

    assert result.success is True
    assert result.error is None

    order = db.query(Order).one()
    assert order.total == 15
    assert order.status == OrderStatusV1.PENDING
    assert order.customer_id == world["client"].id
    assert [item.options for item in order.items] == [[{"name": "Size", "choice": "Large"}]]

    assert bus.topics() == [OrderTopicV1.NEW_PENDING_ORDER]
    event = bus.published[0][1]
    assert event.owner_id == world["owner"].id
    assert event.order.total == 15


def test_order_total_is_sum_of_item_prices(service: OrderService, db: Session, world: dict) -> None:
    plain = _dish(db, world["restaurant"], price=4)
    service.create_order(
        world["client"],
        _order_input(
            world["restaurant"].id,
            _large(world["dish"]),
            CreateOrderItemInput(dish_id=plain.id),
            CreateOrderItemInput(
                dish_id=world["dish"].id, options=[OrderItemOptionV1(name="Nope", choice="Nope")]
            ),
        ),
    )

    assert db.query(Order).one().total == 15 + 4 + 10


def test_create_order_unknown_restaurant_persists_nothing(
    service: OrderService, bus: RecordingBus, db: Session, world: dict
) -> None:
    result = service.create_order(world["client"], _order_input(999, _large(world["dish"])))

    assert result.success is False
    assert result.error == "Restaurant Not Found"
    assert db.query(Order).count() == 0
    assert db.query(OrderItem).count() == 0
    assert bus.published == []


def test_create_order_missing_dish_leaves_earlier_items_behind(
    service: OrderService, db: Session, world: dict
) -> None:
    result = service.create_order(
        world["client"],
        _order_input(
            world["restaurant"].id, _large(world["dish"]), CreateOrderItemInput(dish_id=999)
        ),
    )

    assert result.error == "Dish Not Found"
    assert db.query(Order).count() == 0
    assert db.query(OrderItem).count() == 1


def test_atomic_create_rolls_back_items(db: Session, bus: RecordingBus, world: dict) -> None:
    service = OrderService(db, bus, atomic_create=True)
    result = service.create_order(
        world["client"],
        _order_input(
            world["restaurant"].id, _large(world["dish"]), CreateOrderItemInput(dish_id=999)
        ),
    )

    assert result.error == "Dish Not Found"
    assert db.query(OrderItem).count() == 0
    assert bus.published == []


def test_create_order_storage_error_is_generic(
    service: OrderService, db: Session, world: dict, monkeypatch: pytest.MonkeyPatch
) -> None:
    def _fail() -> None:
        raise OperationalError("INSERT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(db, "commit", _fail)
    result = service.create_order(
        world["client"], _order_input(world["restaurant"].id, _large(world["dish"]))
    )

    assert result.success is False
    assert result.error == "Could not create an order"


def test_get_order_visibility(service: OrderService, world: dict) -> None:
    placed = _place(service, world)

    own = service.get_order(world["client"], placed.id)
    assert own.success is True
    assert own.order is not None
    assert own.order.total == 15
    assert len(own.order.items) == 1

    assert service.get_order(world["owner"], placed.id).success is True

    other = service.get_order(world["other_client"], placed.id)
    assert other.success is False
    assert other.error == "Order Not Allowed to Access"

    driver = service.get_order(world["driver"], placed.id)
    assert driver.error == "Order Not Allowed to Access"

    missing = service.get_order(world["client"], 999)
    assert missing.error == "Order Not Found"


def test_refetch_is_stable(service: OrderService, world: dict) -> None:
    placed = _place(service, world)

    first = service.get_order(world["client"], placed.id).order
    second = service.get_order(world["client"], placed.id).order

    assert first is not None and second is not None
    assert (first.status, first.total) == (second.status, second.total)


def test_owner_marks_cooked_and_notifies(
    service: OrderService, bus: RecordingBus, world: dict
) -> None:
    placed = _place(service, world)
    bus.published.clear()

    result = service.edit_order(
        world["owner"], placed.id, EditOrderInput(status=OrderStatusV1.COOKED)
    )

    assert result.success is True
    assert service.get_order(world["owner"], placed.id).order.status == OrderStatusV1.COOKED
    assert bus.topics() == [OrderTopicV1.NEW_COOKED_ORDER, OrderTopicV1.NEW_ORDER_UPDATE]
    assert all(payload.order.status == OrderStatusV1.COOKED for _, payload in bus.published)


def test_owner_cooking_only_publishes_update(
    service: OrderService, bus: RecordingBus, world: dict
) -> None:
    placed = _place(service, world)
    bus.published.clear()

    service.edit_order(world["owner"], placed.id, EditOrderInput(status=OrderStatusV1.COOKING))

    assert bus.topics() == [OrderTopicV1.NEW_ORDER_UPDATE]


def test_stranger_cannot_edit(service: OrderService, bus: RecordingBus, world: dict) -> None:
    placed = _place(service, world)
    bus.published.clear()

    result = service.edit_order(
        world["other_client"], placed.id, EditOrderInput(status=OrderStatusV1.CANCELLED)
    )

    assert result.success is False
    assert result.error == "Order Not Allowed to Access"
    assert service.get_order(world["client"], placed.id).order.status == OrderStatusV1.PENDING
    assert bus.published == []


def test_client_cannot_cancel_once_cooking(service: OrderService, world: dict) -> None:
    placed = _place(service, world)
    service.edit_order(world["owner"], placed.id, EditOrderInput(status=OrderStatusV1.COOKING))

    result = service.edit_order(
        world["client"], placed.id, EditOrderInput(status=OrderStatusV1.CANCELLED)
    )

    assert result.success is False
    assert result.error == "Not allowed to update status"
    assert service.get_order(world["client"], placed.id).order.status == OrderStatusV1.COOKING


def test_client_can_cancel_pending(service: OrderService, world: dict) -> None:
    placed = _place(service, world)

    result = service.edit_order(
        world["client"], placed.id, EditOrderInput(status=OrderStatusV1.CANCELLED)
    )

    assert result.success is True
    assert service.get_order(world["client"], placed.id).order.status == OrderStatusV1.CANCELLED


def test_edit_missing_order(service: OrderService, world: dict) -> None:
    result = service.edit_order(world["owner"], 999, EditOrderInput(status=OrderStatusV1.COOKED))
    assert result.error == "Order Not Found"


def test_delivery_flow(service: OrderService, bus: RecordingBus, world: dict) -> None:
    placed = _place(service, world)
    driver = world["driver"]

    early = service.edit_order(
        driver, placed.id, EditOrderInput(status=OrderStatusV1.PICKED_UP)
    )
    assert early.error == "Order Not Allowed to Access"

    assert service.take_order(driver, placed.id).success is True
    assert service.take_order(driver, placed.id).error == "This order already has a driver"

    not_cooked = service.edit_order(
        driver, placed.id, EditOrderInput(status=OrderStatusV1.PICKED_UP)
    )
    assert not_cooked.error == "Not allowed to update status"

    service.edit_order(world["owner"], placed.id, EditOrderInput(status=OrderStatusV1.COOKED))
    skip = service.edit_order(
        driver, placed.id, EditOrderInput(status=OrderStatusV1.DELIVERED)
    )
    assert skip.error == "Not allowed to update status"

    for status in (OrderStatusV1.PICKED_UP, OrderStatusV1.DELIVERED):
        assert service.edit_order(driver, placed.id, EditOrderInput(status=status)).success

    final = service.get_order(driver, placed.id).order
    assert final.status == OrderStatusV1.DELIVERED
    assert final.driver_id == driver.id
    assert [o.id for o in service.get_orders(driver).orders] == [placed.id]


def test_owner_rule_applies_from_any_status(service: OrderService, world: dict) -> None:
    placed = _place(service, world)
    service.edit_order(world["client"], placed.id, EditOrderInput(status=OrderStatusV1.CANCELLED))

    result = service.edit_order(
        world["owner"], placed.id, EditOrderInput(status=OrderStatusV1.COOKING)
    )

    assert result.success is True


def test_only_drivers_take_orders(service: OrderService, world: dict) -> None:
    placed = _place(service, world)
    assert service.take_order(world["owner"], placed.id).error == "Order Not Allowed to Access"
    assert service.take_order(world["driver"], 999).error == "Order Not Found"


def test_bus_failure_reports_generic_error_after_save(
    db: Session, world: dict, service: OrderService
) -> None:
    placed = _place(service, world)
    failing = OrderService(db, ExplodingBus())

    result = failing.edit_order(
        world["owner"], placed.id, EditOrderInput(status=OrderStatusV1.COOKING)
    )

    assert result.success is False
    assert result.error == "Could not edit the order"
    assert service.get_order(world["owner"], placed.id).order.status == OrderStatusV1.COOKING


def test_owner_sees_orders_across_restaurants_filtered(
    service: OrderService, db: Session, world: dict
) -> None:
    owner = world["owner"]
    second = _restaurant(db, owner, name="Burger Barn")
    second_dish = _dish(db, second, price=8)
    elsewhere = _restaurant(db, _user(db, "rival@eats.test", UserRoleV1.OWNER), name="Rival Diner")
    elsewhere_dish = _dish(db, elsewhere, price=8)

    for _ in range(2):
        _place(service, world)
    for _ in range(3):
        service.create_order(
            world["client"], _order_input(second.id, CreateOrderItemInput(dish_id=second_dish.id))
        )
    service.create_order(
        world["client"], _order_input(elsewhere.id, CreateOrderItemInput(dish_id=elsewhere_dish.id))
    )

    all_orders = service.get_orders(owner).orders
    assert len(all_orders) == 5

    cooked_id = all_orders[3].id
    service.edit_order(owner, cooked_id, EditOrderInput(status=OrderStatusV1.COOKED))

    cooked = service.get_orders(owner, OrderStatusV1.COOKED)
    assert cooked.success is True
    assert [o.id for o in cooked.orders] == [cooked_id]


def test_client_orders_filtered_by_status(service: OrderService, world: dict) -> None:
    first = _place(service, world)
    _place(service, world)
    service.edit_order(world["client"], first.id, EditOrderInput(status=OrderStatusV1.CANCELLED))

    assert len(service.get_orders(world["client"]).orders) == 2
    cancelled = service.get_orders(world["client"], OrderStatusV1.CANCELLED).orders
    assert [o.id for o in cancelled] == [first.id]
    assert service.get_orders(world["other_client"]).orders == []


def _storage_error(*args, **kwargs) -> None:
    raise OperationalError("SELECT", {}, Exception("database is locked"))


def test_negative_stored_extra_creates_nothing(
    service: OrderService, bus: RecordingBus, db: Session, world: dict
) -> None:
    dish = _dish(db, world["restaurant"], options=[{"name": "Discount", "extra": -15}])
    item = CreateOrderItemInput(dish_id=dish.id, options=[OrderItemOptionV1(name="Discount")])

    result = service.create_order(world["client"], _order_input(world["restaurant"].id, item))

    assert result.success is False
    assert result.error == "Could not create an order"
    assert db.query(Order).count() == 0
    assert bus.published == []
    assert service.get_orders(world["client"]).success is True


def test_negative_total_is_not_committed(
    service: OrderService, bus: RecordingBus, db: Session, world: dict
) -> None:
    dish = _dish(db, world["restaurant"], price=-5)

    result = service.create_order(
        world["client"], _order_input(world["restaurant"].id, CreateOrderItemInput(dish_id=dish.id))
    )

    assert result.success is False
    assert result.error == "Could not create an order"
    assert db.query(Order).count() == 0
    assert bus.published == []

    orders = service.get_orders(world["client"])
    assert orders.success is True
    assert orders.orders == []


@pytest.mark.parametrize("role", ["client", "owner", "driver"])
def test_get_orders_storage_error_is_generic(
    service: OrderService,
    bus: RecordingBus,
    db: Session,
    world: dict,
    monkeypatch: pytest.MonkeyPatch,
    role: str,
) -> None:
    _place(service, world)
    bus.published.clear()

    monkeypatch.setattr(db, "query", _storage_error)
    result = service.get_orders(world[role])

    assert result.success is False
    assert result.error == "Could not load orders"
    assert result.orders is None
    assert bus.published == []


def test_get_order_storage_error_is_generic(
    service: OrderService,
    bus: RecordingBus,
    db: Session,
    world: dict,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    placed = _place(service, world)
    bus.published.clear()

    monkeypatch.setattr(db, "query", _storage_error)
    result = service.get_order(world["client"], placed.id)

    assert result.success is False
    assert result.error == "Could not load the order"
    assert result.order is None
    assert bus.published == []


def test_take_order_storage_error_is_generic(
    service: OrderService,
    bus: RecordingBus,
    db: Session,
    world: dict,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    placed = _place(service, world)
    bus.published.clear()

    monkeypatch.setattr(db, "commit", _storage_error)
    result = service.take_order(world["driver"], placed.id)

    assert result.success is False
    assert result.error == "Could not update the order"
    assert bus.published == []
    assert service.get_order(world["owner"], placed.id).order.driver_id is None


def test_edit_order_storage_error_is_generic(
    service: OrderService,
    bus: RecordingBus,
    db: Session,
    world: dict,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    placed = _place(service, world)
    bus.published.clear()

    monkeypatch.setattr(db, "commit", _storage_error)
    result = service.edit_order(
        world["owner"], placed.id, EditOrderInput(status=OrderStatusV1.COOKED)
    )

    assert result.success is False
    assert result.error == "Could not edit the order"
    assert bus.published == []
    assert service.get_order(world["owner"], placed.id).order.status == OrderStatusV1.PENDING
