from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from services.api.app.models.common import MutationOutput


class PaymentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    transaction_id: str
    restaurant_id: int
    created_at: datetime


class CreatePaymentInput(BaseModel):
    transaction_id: str
    restaurant_id: int


class CreatePaymentOutput(MutationOutput):
    pass


class GetPaymentsOutput(MutationOutput):
    payments: list[PaymentOut] | None = None
