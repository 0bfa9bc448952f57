"""SMTP delivery of verification codes."""

from __future__ import annotations

import smtplib
from dataclasses import dataclass, field
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from logging import getLogger
from typing import TYPE_CHECKING

from venturepay.config.mail import MailConfig, get_mail_config
from venturepay.domain.errors import DeliveryError

if TYPE_CHECKING:
    from collections.abc import Callable

log = getLogger(__name__)

VERIFICATION_SUBJECT = "Verify your email address"
SMTP_TIMEOUT_SECONDS = 15.0


def build_verification_message(*, sender: str, recipient: str, code: str) -> MIMEMultipart:
    message = MIMEMultipart("alternative")
    message["From"] = sender
    message["To"] = recipient
    message["Subject"] = VERIFICATION_SUBJECT
    message.attach(MIMEText(f"Your verification code is: {code}", "plain", "utf-8"))
    message.attach(
        MIMEText(
            f'<h2>Your verification code</h2><p style="font-size:18px;"><b>{code}</b></p>',
            "html",
            "utf-8",
        )
    )
    return message


def _default_connect(config: MailConfig) -> smtplib.SMTP:
    if config.port == smtplib.SMTP_SSL_PORT:
        return smtplib.SMTP_SSL(config.host, config.port, timeout=SMTP_TIMEOUT_SECONDS)
    connection = smtplib.SMTP(config.host, config.port, timeout=SMTP_TIMEOUT_SECONDS)
    connection.starttls()
    return connection


@dataclass(slots=True)
class SmtpVerificationSender:
    """``VerificationSender`` that logs in to an SMTP relay per message."""

    config: MailConfig = field(default_factory=get_mail_config)
    connect: Callable[[MailConfig], smtplib.SMTP] = field(default=_default_connect)

    def send_code(self, email: str, code: str) -> None:
        message = build_verification_message(
            sender=self.config.sender, recipient=email, code=code
        )
        try:
            with self.connect(self.config) as connection:
                connection.login(self.config.user, self.config.password)
                connection.send_message(message)
        except (smtplib.SMTPException, OSError) as exc:
            log.exception("Sending verification mail to %s failed", email)
            raise DeliveryError(f"Failed to send verification mail: {exc}") from exc
        log.info("Sent verification code to %s", email)


if TYPE_CHECKING:
    from venturepay.domain.ports.gateways import VerificationSender

    _sender_check: VerificationSender = SmtpVerificationSender()
