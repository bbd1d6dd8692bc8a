from __future__ import annotations

from fastapi import APIRouter, Depends
from packages.shared.schemas.order_v1 import UserRoleV1
from services.api.app.db.models import User
from services.api.app.models.payment import (
    CreatePaymentInput,
    CreatePaymentOutput,
    GetPaymentsOutput,
)
from services.api.app.routers.deps import get_payment_service, require_role
from services.api.app.services.payments import PaymentService

router = APIRouter()

_owner = require_role(UserRoleV1.OWNER)


@router.post("/v1/payments", response_model=CreatePaymentOutput)
def create_payment(
    payload: CreatePaymentInput,
    owner: User = Depends(_owner),
    payments: PaymentService = Depends(get_payment_service),
) -> CreatePaymentOutput:
    return payments.create_payment(owner, payload)


@router.get("/v1/payments", response_model=GetPaymentsOutput)
def get_payments(
    owner: User = Depends(_owner),
    payments: PaymentService = Depends(get_payment_service),
) -> GetPaymentsOutput:
    return payments.get_payments(owner)
