"""
SMTP mail sender adapter - Implements MailSender protocol via aiosmtplib.

Delivery failures are reported, not raised: a transport error and a
message whose recipient was refused both yield FAILED.
"""

import logging
from email.message import EmailMessage

import aiosmtplib

from src.config.settings import Settings
from src.domain.ports import MailMessage, MailOutcome
from src.domain.result import ResultStatus

logger = logging.getLogger(__name__)


class SmtpMailSender:
    """Sends mail through an SMTP server, one connection per message."""

    def __init__(
        self,
        hostname: str,
        port: int,
        sender: str,
        username: str = "",
        password: str = "",
        use_tls: bool = False,
        timeout: float = 10.0,
    ) -> None:
        self._hostname = hostname
        self._port = port
        self._sender = sender
        self._username = username
        self._password = password
        self._use_tls = use_tls
        self._timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "SmtpMailSender":
        return cls(
            hostname=settings.smtp_host,
            port=settings.smtp_port,
            sender=settings.mail_from,
            username=settings.smtp_username,
            password=settings.smtp_password,
            use_tls=settings.smtp_use_tls,
        )

    async def send(self, message: MailMessage) -> MailOutcome:
        """Deliver `message`; FAILED if the server errors or refuses the recipient."""
        email = self._build(message)
        try:
            refused, response = await aiosmtplib.send(
                email,
                hostname=self._hostname,
                port=self._port,
                username=self._username or None,
                password=self._password or None,
                use_tls=self._use_tls,
                timeout=self._timeout,
            )
        except (aiosmtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send email to {message.to}: {e}")
            return MailOutcome(status=ResultStatus.FAILED)

        if message.to in refused:
            logger.error(f"Recipient refused: {message.to} ({refused[message.to]})")
            return MailOutcome(status=ResultStatus.FAILED)

        logger.info(f"Email sent to {message.to}: {message.subject} ({response})")
        return MailOutcome(status=ResultStatus.SUCCESS)

    def _build(self, message: MailMessage) -> EmailMessage:
        email = EmailMessage()
        email["From"] = self._sender
        email["To"] = message.to
        email["Subject"] = message.subject
        email.set_content(message.text)
        if message.html:
            email.add_alternative(message.html, subtype="html")
        return email
