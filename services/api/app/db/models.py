from __future__ import annotations

from datetime import datetime

from packages.shared.schemas.order_v1 import OrderStatusV1, UserRoleV1
from sqlalchemy import JSON, Boolean, DateTime, Enum, Float, ForeignKey, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow
    )


class User(TimestampMixin, Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    role: Mapped[UserRoleV1] = mapped_column(Enum(UserRoleV1), nullable=False)

    restaurants: Mapped[list[Restaurant]] = relationship(back_populates="owner")


class Verification(TimestampMixin, Base):
    __tablename__ = "verifications"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    code: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False
    )

    user: Mapped[User] = relationship()


class Restaurant(TimestampMixin, Base):
    __tablename__ = "restaurants"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    address: Mapped[str] = mapped_column(String, nullable=False)
    cover_img: Mapped[str | None] = mapped_column(String, nullable=True)
    owner_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)

    is_promoted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    promoted_until: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    owner: Mapped[User] = relationship(back_populates="restaurants")
    dishes: Mapped[list[Dish]] = relationship(back_populates="restaurant")
    orders: Mapped[list[Order]] = relationship(back_populates="restaurant", order_by="Order.id")


class Dish(TimestampMixin, Base):
    __tablename__ = "dishes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    restaurant_id: Mapped[int] = mapped_column(
        ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String, nullable=False)
    price: Mapped[float] = mapped_column(Float, nullable=False)
    description: Mapped[str | None] = mapped_column(String, nullable=True)
    # [{"name": ..., "extra": ..., "choices": [{"name": ..., "extra": ...}]}]
    options: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    restaurant: Mapped[Restaurant] = relationship(back_populates="dishes")


class Order(TimestampMixin, Base):
    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    customer_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    driver_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    restaurant_id: Mapped[int | None] = mapped_column(
        ForeignKey("restaurants.id", ondelete="SET NULL"), nullable=True
    )

    total: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    status: Mapped[OrderStatusV1] = mapped_column(
        Enum(OrderStatusV1), nullable=False, default=OrderStatusV1.PENDING
    )

    customer: Mapped[User | None] = relationship(foreign_keys=[customer_id])
    driver: Mapped[User | None] = relationship(foreign_keys=[driver_id])
    restaurant: Mapped[Restaurant | None] = relationship(back_populates="orders")
    items: Mapped[list[OrderItem]] = relationship(back_populates="order", order_by="OrderItem.id")


class OrderItem(TimestampMixin, Base):
    __tablename__ = "order_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Items are saved before their order exists, so the link is filled in afterwards.
    order_id: Mapped[int | None] = mapped_column(ForeignKey("orders.id"), nullable=True)
    dish_id: Mapped[int | None] = mapped_column(
        ForeignKey("dishes.id", ondelete="SET NULL"), nullable=True
    )
    # [{"name": ..., "choice": ...}]
    options: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    order: Mapped[Order | None] = relationship(back_populates="items")
    dish: Mapped[Dish | None] = relationship()


class Payment(TimestampMixin, Base):
    __tablename__ = "payments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    transaction_id: Mapped[str] = mapped_column(String, nullable=False)
    user_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    restaurant_id: Mapped[int] = mapped_column(
        ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False
    )

    user: Mapped[User | None] = relationship()
    restaurant: Mapped[Restaurant] = relationship()
