"""Dish and order pricing.

Pure functions: they never touch the database and never fail on unknown option names.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from packages.shared.schemas.order_v1 import DishOptionV1, OrderItemOptionV1


def compute_dish_price(
    base_price: float,
    dish_options: Sequence[DishOptionV1],
    selected: Iterable[OrderItemOptionV1],
) -> float:
    """Return base price plus the extras of every matched option and choice.

    A selection whose option (or choice) name is not offered on the dish contributes nothing.
    """

    options_by_name = {option.name: option for option in reversed(dish_options)}

    price = base_price
    for selection in selected:
        option = options_by_name.get(selection.name)
        if option is None:
            continue
        if option.extra:
            price += option.extra
        if option.choices and selection.choice is not None:
            choice = next((c for c in option.choices if c.name == selection.choice), None)
            if choice is not None and choice.extra:
                price += choice.extra
    return price


def compute_order_total(item_prices: Iterable[float]) -> float:
    return sum(item_prices, 0.0)


def parse_dish_options(raw: list | None) -> list[DishOptionV1]:
    return [DishOptionV1.model_validate(option) for option in raw or []]
