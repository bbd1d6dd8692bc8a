from __future__ import annotations

import os

from fastapi import Request
from services.api.app.services.mail_base import MailSender
from services.api.app.services.mail_mock import MockMailSender


def build_mail_sender() -> MailSender:
    """Select a mail sender based on env vars.

    Defaults to the mock sender so tests and local dev never send real mail.
    """

    mode = os.getenv("EATS_MAIL_SENDER", "mock").strip().lower()

    if mode == "mock":
        return MockMailSender()

    if mode == "mailgun":
        from services.api.app.services.mail_mailgun import MailgunMailSender

        return MailgunMailSender.from_env()

    raise ValueError(f"Unknown EATS_MAIL_SENDER={mode!r}. Expected mock or mailgun.")


def get_mail_sender(request: Request) -> MailSender:
    sender = getattr(request.app.state, "mail_sender", None)
    if sender is None:
        sender = build_mail_sender()
        request.app.state.mail_sender = sender
    return sender
