from __future__ import annotations

import logging
from uuid import uuid4

from services.api.app.db.models import User, Verification
from services.api.app.models.user import (
    CreateAccountInput,
    CreateAccountOutput,
    EditProfileInput,
    EditProfileOutput,
    UserOut,
    UserProfileOutput,
    VerifyEmailOutput,
)
from services.api.app.services.errors import ConflictError, EntityNotFoundError, ServiceError
from services.api.app.services.mail_base import MailSender
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, db: Session, mail: MailSender) -> None:
        self._db = db
        self._mail = mail

    def create_account(self, payload: CreateAccountInput) -> CreateAccountOutput:
        try:
            if self._db.query(User).filter(User.email == payload.email).first() is not None:
                raise ConflictError("There already exists a user with that email")

            user = User(email=payload.email, role=payload.role, verified=False)
            self._db.add(user)
            self._db.flush()
            verification = self._issue_verification(user)
            self._db.commit()
            logger.info("Account %s created with role %s", user.id, user.role.value)

            self._send_verification(user.email, verification.code)
            return CreateAccountOutput(success=True, user_id=user.id)
        except ServiceError as e:
            return CreateAccountOutput(success=False, error=str(e))
        except Exception:
            logger.exception("create_account failed")
            self._db.rollback()
            return CreateAccountOutput(success=False, error="Couldn't create account")

    def user_profile(self, user_id: int) -> UserProfileOutput:
        user = self._db.get(User, user_id)
        if user is None:
            return UserProfileOutput(success=False, error="User Not Found")
        return UserProfileOutput(success=True, user=UserOut.model_validate(user))

    def edit_profile(self, user: User, payload: EditProfileInput) -> EditProfileOutput:
        try:
            code: str | None = None
            if payload.email and payload.email != user.email:
                taken = (
                    self._db.query(User)
                    .filter(User.email == payload.email, User.id != user.id)
                    .first()
                )
                if taken is not None:
                    raise ConflictError("There already exists a user with that email")

                user.email = payload.email
                user.verified = False
                self._db.query(Verification).filter(Verification.user_id == user.id).delete()
                code = self._issue_verification(user).code

            self._db.commit()
            if code is not None:
                self._send_verification(user.email, code)
            return EditProfileOutput(success=True)
        except ServiceError as e:
            return EditProfileOutput(success=False, error=str(e))
        except Exception:
            logger.exception("edit_profile failed for user %s", user.id)
            self._db.rollback()
            return EditProfileOutput(success=False, error="Couldn't update profile")

    def verify_email(self, code: str) -> VerifyEmailOutput:
        try:
            verification = self._db.query(Verification).filter(Verification.code == code).first()
            if verification is None:
                raise EntityNotFoundError("Verification")

            verification.user.verified = True
            self._db.delete(verification)
            self._db.commit()
            return VerifyEmailOutput(success=True)
        except ServiceError as e:
            return VerifyEmailOutput(success=False, error=str(e))
        except Exception:
            logger.exception("verify_email failed")
            self._db.rollback()
            return VerifyEmailOutput(success=False, error="Verification failed")

    def _issue_verification(self, user: User) -> Verification:
        verification = Verification(user=user, code=uuid4().hex)
        self._db.add(verification)
        return verification

    def _send_verification(self, email: str, code: str) -> None:
        # The account is already saved; a delivery failure must not undo it.
        try:
            self._mail.send_verification_email(email, code)
        except Exception:
            logger.exception("Could not send verification mail to %s", email)
