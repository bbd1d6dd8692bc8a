from __future__ import annotations

from packages.shared.schemas.order_v1 import UserRoleV1
from pydantic import BaseModel, ConfigDict, Field
from services.api.app.models.common import MutationOutput

_EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    role: UserRoleV1
    verified: bool


class CreateAccountInput(BaseModel):
    email: str = Field(..., pattern=_EMAIL_PATTERN)
    role: UserRoleV1


class CreateAccountOutput(MutationOutput):
    user_id: int | None = None


class UserProfileOutput(MutationOutput):
    user: UserOut | None = None


class EditProfileInput(BaseModel):
    email: str | None = Field(default=None, pattern=_EMAIL_PATTERN)


class EditProfileOutput(MutationOutput):
    pass


class VerifyEmailInput(BaseModel):
    code: str


class VerifyEmailOutput(MutationOutput):
    pass
