import logging
import os
import smtplib
from email.message import EmailMessage
from typing import Optional

import requests

logger = logging.getLogger(__name__)

EMAIL_OUTBOX: list[tuple[str, str, str]] = []

RESEND_API_URL = "https://api.resend.com/emails"
DEFAULT_CONTACT_TO = "santa.bartusevica@lu.lv"
DEFAULT_CONTACT_FROM = "Spatial Test Catalog <no-reply@catalog.mindcave.lv>"


class EmailProviderError(RuntimeError):
    """The transactional email API refused or could not be reached."""

    def __init__(self, details: str):
        super().__init__(details)
        self.details = details


def send_email(to_email: str, subject: str, message: str):
    if os.getenv("TESTING") == "1":
        EMAIL_OUTBOX.append((to_email, subject, message))
        return
    server = os.getenv("SMTP_SERVER")
    if not server:
        logger.warning("SMTP_SERVER not set; dropping email to %s", to_email)
        return
    from_addr = os.getenv("EMAIL_FROM", "noreply@example.com")
    msg = EmailMessage()
    msg["Subject"] = subject
    msg["From"] = from_addr
    msg["To"] = to_email
    msg.set_content(message)
    with smtplib.SMTP(server) as s:
        s.send_message(msg)


def contact_body(subject: str, message: str, sender_email: Optional[str]) -> str:
    return "\n".join(
        [
            "New message from Spatial Test Catalog contact form",
            "",
            f"Sender: {sender_email or 'unknown'}",
            f"Subject: {subject}",
            "",
            message,
        ]
    )


def send_transactional_email(
    subject: str, message: str, sender_email: Optional[str] = None
) -> None:
    """Deliver a contact-form message to the catalog maintainers through the mail API.

    Raises ``EmailProviderError`` with the provider's text on failure.
    """

    payload = {
        "from": os.getenv("CONTACT_FROM_EMAIL", DEFAULT_CONTACT_FROM),
        "to": [os.getenv("CONTACT_TO_EMAIL", DEFAULT_CONTACT_TO)],
        "subject": f"[Catalog] {subject}",
        "text": contact_body(subject, message, sender_email),
    }
    if sender_email:
        payload["reply_to"] = sender_email
    try:
        resp = requests.post(
            os.getenv("RESEND_API_URL", RESEND_API_URL),
            headers={
                "Authorization": f"Bearer {os.getenv('RESEND_API_KEY', '')}",
                "Content-Type": "application/json",
            },
            json=payload,
            timeout=10,
        )
    except requests.RequestException as exc:
        logger.error("Email provider unreachable: %s", exc)
        raise EmailProviderError(str(exc)) from exc
    if not resp.ok:
        logger.error("Email provider returned %s", resp.status_code)
        raise EmailProviderError(resp.text)
