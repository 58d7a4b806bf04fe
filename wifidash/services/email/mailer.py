"""
Outgoing email over SMTP.
Mailer is the interface the dispatcher and jobs depend on; SmtpMailer is the production transport.
"""
import logging
import re
import smtplib
import time
from email.message import EmailMessage
from typing import Protocol

from wifidash.core.config import settings
from wifidash.payments.models import EmailErrorKind
from wifidash.utils.metrics import email_requests_total, email_request_duration_seconds

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")


class EmailDeliveryError(Exception):
    def __init__(self, kind: EmailErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind


class Mailer(Protocol):
    def send(self, to: str, subject: str, html: str) -> None:
        """Deliver one message or raise EmailDeliveryError."""
        ...


def is_valid_address(address: str | None) -> bool:
    return bool(address) and bool(EMAIL_PATTERN.match(address))


class SmtpMailer:
    def __init__(
        self,
        host: str,
        port: int,
        sender: str,
        username: str = "",
        password: str = "",
        use_tls: bool = True,
        timeout: float = 10.0,
    ) -> None:
        self.host = host
        self.port = port
        self.sender = sender
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout

    def _build(self, to: str, subject: str, html: str) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = f'"WiFi Dashboard" <{self.sender}>'
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content("This message requires an HTML capable mail client.")
        msg.add_alternative(html, subtype="html")
        return msg

    def send(self, to: str, subject: str, html: str) -> None:
        if not is_valid_address(to):
            raise EmailDeliveryError(EmailErrorKind.INVALID_ADDRESS, f"invalid recipient: {to!r}")
        start = time.time()
        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
                if self.use_tls:
                    smtp.starttls()
                if self.username:
                    smtp.login(self.username, self.password)
                smtp.send_message(self._build(to, subject, html))
        except (smtplib.SMTPException, OSError) as e:
            email_requests_total.labels(status="error").inc()
            raise EmailDeliveryError(EmailErrorKind.TRANSPORT_ERROR, str(e)) from e
        finally:
            email_request_duration_seconds.observe(time.time() - start)
        email_requests_total.labels(status="success").inc()
        logger.info("email_sent")


def build_mailer() -> SmtpMailer | None:
    """SMTP mailer from settings; None when SMTP is not configured."""
    if not settings.email_enabled:
        return None
    return SmtpMailer(
        host=settings.smtp_host,
        port=settings.smtp_port,
        sender=settings.mail_sender,
        username=settings.smtp_user,
        password=settings.smtp_password,
        use_tls=settings.smtp_use_tls,
        timeout=settings.smtp_timeout,
    )
