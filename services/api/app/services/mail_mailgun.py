from __future__ import annotations

import logging
import os

import httpx
from services.api.app.services.mail_base import MailSenderConfigError, MailSenderError

logger = logging.getLogger(__name__)


class MailgunMailSender:
    vendor = "MAILGUN"

    def __init__(
        self,
        *,
        api_key: str,
        domain: str,
        from_email: str | None = None,
        timeout_s: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._domain = domain
        self._from_email = from_email
        self._timeout_s = timeout_s
        self._transport = transport

    @classmethod
    def from_env(cls) -> MailgunMailSender:
        settings = {
            "MAILGUN_API_KEY": os.getenv("MAILGUN_API_KEY", "").strip(),
            "MAILGUN_DOMAIN": os.getenv("MAILGUN_DOMAIN", "").strip(),
        }
        missing = [name for name, value in settings.items() if not value]
        if missing:
            raise MailSenderConfigError(missing)

        return cls(
            api_key=settings["MAILGUN_API_KEY"],
            domain=settings["MAILGUN_DOMAIN"],
            from_email=os.getenv("MAILGUN_FROM_EMAIL", "").strip() or None,
        )

    def send_verification_email(self, email: str, code: str) -> None:
        self._send(
            to=email,
            subject="Verify Your Email",
            text=f"Please confirm your account with this code: {code}",
        )

    def _send(self, *, to: str, subject: str, text: str) -> None:
        url = f"https://api.mailgun.net/v3/{self._domain}/messages"
        data = {
            "from": self._from_email or f"Eats <mailgun@{self._domain}>",
            "to": to,
            "subject": subject,
            "text": text,
        }
        with httpx.Client(timeout=self._timeout_s, transport=self._transport) as client:
            try:
                response = client.post(url, auth=("api", self._api_key), data=data)
            except httpx.HTTPError as e:
                raise MailSenderError(f"Mailgun request failed: {e}") from e

        if response.status_code >= 400:
            raise MailSenderError(
                f"Mailgun rejected message: status={response.status_code} "
                f"body={response.text[:200]}"
            )
        logger.info("Mailgun accepted message to %s", to)
