from __future__ import annotations

from fastapi import APIRouter, Depends
from services.api.app.db.models import User
from services.api.app.models.user import (
    CreateAccountInput,
    CreateAccountOutput,
    EditProfileInput,
    EditProfileOutput,
    UserOut,
    UserProfileOutput,
    VerifyEmailInput,
    VerifyEmailOutput,
)
from services.api.app.routers.deps import get_current_user, get_user_service
from services.api.app.services.users import UserService

router = APIRouter()


@router.post("/v1/users", response_model=CreateAccountOutput)
def create_account(
    payload: CreateAccountInput, users: UserService = Depends(get_user_service)
) -> CreateAccountOutput:
    return users.create_account(payload)


@router.get("/v1/users/me", response_model=UserOut)
def me(user: User = Depends(get_current_user)) -> UserOut:
    return UserOut.model_validate(user)


@router.patch("/v1/users/me", response_model=EditProfileOutput)
def edit_profile(
    payload: EditProfileInput,
    user: User = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
) -> EditProfileOutput:
    return users.edit_profile(user, payload)


@router.post("/v1/users/verify", response_model=VerifyEmailOutput)
def verify_email(
    payload: VerifyEmailInput, users: UserService = Depends(get_user_service)
) -> VerifyEmailOutput:
    return users.verify_email(payload.code)


@router.get("/v1/users/{user_id}", response_model=UserProfileOutput)
def user_profile(
    user_id: int,
    _: User = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
) -> UserProfileOutput:
    return users.user_profile(user_id)
