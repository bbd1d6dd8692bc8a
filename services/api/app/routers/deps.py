from __future__ import annotations

from collections.abc import Callable

from fastapi import Depends, Header, HTTPException, Request
from packages.shared.schemas.order_v1 import UserRoleV1
from services.api.app.config import atomic_order_create, promotion_days
from services.api.app.db.deps import get_db
from services.api.app.db.models import User
from services.api.app.services.events_base import EventBus
from services.api.app.services.events_factory import get_event_bus
from services.api.app.services.mail_base import MailSender
from services.api.app.services.mail_factory import get_mail_sender
from services.api.app.services.orders import OrderService
from services.api.app.services.payments import PaymentService
from services.api.app.services.restaurants import RestaurantService
from services.api.app.services.users import UserService
from sqlalchemy.orm import Session


def get_current_user(
    x_user_id: int | None = Header(default=None),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the caller. Token issuance lives in the gateway; it forwards the user id."""

    if x_user_id is None:
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")

    user = db.get(User, x_user_id)
    if user is None:
        raise HTTPException(status_code=401, detail="Unknown user")
    return user


def require_role(*roles: UserRoleV1) -> Callable[..., User]:
    allowed = set(roles)

    def _dependency(user: User = Depends(get_current_user)) -> User:
        if user.role not in allowed:
            raise HTTPException(status_code=403, detail="Forbidden resource")
        return user

    return _dependency


def event_bus(request: Request) -> EventBus:
    try:
        return get_event_bus(request)
    except ValueError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e


def mail_sender(request: Request) -> MailSender:
    try:
        return get_mail_sender(request)
    except ValueError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e


def get_order_service(
    db: Session = Depends(get_db), events: EventBus = Depends(event_bus)
) -> OrderService:
    return OrderService(db, events, atomic_create=atomic_order_create())


def get_user_service(
    db: Session = Depends(get_db), mail: MailSender = Depends(mail_sender)
) -> UserService:
    return UserService(db, mail)


def get_restaurant_service(db: Session = Depends(get_db)) -> RestaurantService:
    return RestaurantService(db)


def get_payment_service(db: Session = Depends(get_db)) -> PaymentService:
    try:
        days = promotion_days()
    except ValueError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e
    return PaymentService(db, promotion_days=days)
