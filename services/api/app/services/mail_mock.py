from __future__ import annotations

import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SentMail:
    to: str
    subject: str
    code: str


class MockMailSender:
    vendor = "MAIL_MOCK"

    def __init__(self) -> None:
        self.outbox: list[SentMail] = []

    def send_verification_email(self, email: str, code: str) -> None:
        self.outbox.append(SentMail(to=email, subject="Verify Your Email", code=code))
        logger.info("Queued verification mail for %s", email)
