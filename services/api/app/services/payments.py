from __future__ import annotations

import logging
from datetime import datetime, timedelta

from services.api.app.db.models import Payment, Restaurant, User
from services.api.app.models.payment import (
    CreatePaymentInput,
    CreatePaymentOutput,
    GetPaymentsOutput,
    PaymentOut,
)
from services.api.app.services.errors import EntityNotFoundError, ForbiddenError, ServiceError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


class PaymentService:
    def __init__(self, db: Session, *, promotion_days: int = 7) -> None:
        self._db = db
        self._promotion_days = promotion_days

    def create_payment(self, owner: User, payload: CreatePaymentInput) -> CreatePaymentOutput:
        """Record a promotion payment and promote the paid-for restaurant."""

        try:
            restaurant = self._db.get(Restaurant, payload.restaurant_id)
            if restaurant is None:
                raise EntityNotFoundError("Restaurant")
            if restaurant.owner_id != owner.id:
                raise ForbiddenError("Not Allowed to Access")

            self._db.add(
                Payment(transaction_id=payload.transaction_id, user=owner, restaurant=restaurant)
            )
            restaurant.is_promoted = True
            restaurant.promoted_until = datetime.utcnow() + timedelta(days=self._promotion_days)
            self._db.commit()
            logger.info(
                "Restaurant %s promoted until %s (transaction %s)",
                restaurant.id,
                restaurant.promoted_until.isoformat(),
                payload.transaction_id,
            )
            return CreatePaymentOutput(success=True)
        except ServiceError as e:
            return CreatePaymentOutput(success=False, error=str(e))
        except Exception:
            logger.exception("create_payment failed for owner %s", owner.id)
            self._db.rollback()
            return CreatePaymentOutput(success=False, error="Could not create payment")

    def get_payments(self, owner: User) -> GetPaymentsOutput:
        try:
            rows = (
                self._db.query(Payment)
                .filter(Payment.user_id == owner.id)
                .order_by(Payment.created_at.desc(), Payment.id.desc())
                .all()
            )
            return GetPaymentsOutput(
                success=True, payments=[PaymentOut.model_validate(p) for p in rows]
            )
        except Exception:
            logger.exception("get_payments failed for owner %s", owner.id)
            self._db.rollback()
            return GetPaymentsOutput(success=False, error="Could not load your payments")
