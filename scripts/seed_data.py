from __future__ import annotations

import argparse

from packages.shared.schemas.order_v1 import UserRoleV1
from services.api.app.db.database import db_session
from services.api.app.db.init_db import init_db
from services.api.app.db.models import Dish, Restaurant, User


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed a minimal Eats marketplace")
    parser.add_argument("--owner-email", default="owner@eats.local")
    parser.add_argument("--client-email", default="client@eats.local")
    parser.add_argument("--driver-email", default="driver@eats.local")
    parser.add_argument("--restaurant-name", default="Pizza Place")
    args = parser.parse_args()

    init_db()

    db = db_session()
    try:
        users: dict[UserRoleV1, User] = {}
        for email, role in (
            (args.owner_email, UserRoleV1.OWNER),
            (args.client_email, UserRoleV1.CLIENT),
            (args.driver_email, UserRoleV1.DELIVERY),
        ):
            user = db.query(User).filter(User.email == email).first()
            if user is None:
                user = User(email=email, role=role, verified=True)
                db.add(user)
            users[role] = user

        owner = users[UserRoleV1.OWNER]
        restaurant = (
            db.query(Restaurant)
            .filter(Restaurant.name == args.restaurant_name, Restaurant.owner_id == owner.id)
            .first()
            if owner.id is not None
            else None
        )
        if restaurant is None:
            restaurant = Restaurant(name=args.restaurant_name, address="1 Main St", owner=owner)
            db.add(restaurant)
            db.add(
                Dish(
                    restaurant=restaurant,
                    name="Margherita",
                    price=10,
                    description="Tomato, mozzarella, basil",
                    options=[
                        {
                            "name": "Size",
                            "extra": 2,
                            "choices": [{"name": "Medium"}, {"name": "Large", "extra": 3}],
                        },
                        {"name": "Extra cheese", "extra": 1.5},
                    ],
                )
            )

        db.commit()
        for role, user in users.items():
            print(f"{role.value}: id={user.id} email={user.email}")
        print(f"Restaurant: id={restaurant.id} name={restaurant.name}")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    raise SystemExit(main())
