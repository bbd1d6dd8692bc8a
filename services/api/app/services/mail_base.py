from __future__ import annotations

from typing import Protocol


class MailSenderError(Exception):
    """Base class for mail delivery errors."""


class MailSenderConfigError(MailSenderError, ValueError):
    def __init__(self, missing: list[str]) -> None:
        super().__init__(f"Mailgun sender is missing required settings: {', '.join(missing)}")
        self.missing = missing


class MailSender(Protocol):
    vendor: str

    def send_verification_email(self, email: str, code: str) -> None: ...
