import asyncio
import logging
from email.message import EmailMessage
from email.utils import make_msgid
from typing import Optional

import aiosmtplib

from errors import TransportError

log = logging.getLogger(__name__)


class SmtpMailer:
    """
    Long-lived mail transport shared by every request.

    Holds only connection settings; each send opens its own SMTP session via
    aiosmtplib so concurrent sends never share a connection.
    """

    def __init__(
        self,
        hostname: str,
        port: int,
        username: str,
        password: str,
        use_tls: bool = False,
        timeout: float = 20,
        dry_run: bool = False,
        message_id_domain: Optional[str] = None,
    ):
        self.hostname = hostname
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout
        self.dry_run = dry_run
        self.message_id_domain = message_id_domain

    @classmethod
    def from_settings(cls, settings) -> "SmtpMailer":
        domain = settings.EMAIL_USER.split("@", 1)[1] if "@" in settings.EMAIL_USER else None
        return cls(
            hostname=settings.SMTP_HOST,
            port=settings.SMTP_PORT,
            username=settings.EMAIL_USER,
            password=settings.EMAIL_PASS,
            use_tls=settings.SMTP_USE_TLS,
            timeout=settings.SMTP_TIMEOUT,
            dry_run=settings.EMAIL_DRY_RUN,
            message_id_domain=domain,
        )

    async def send_mail(self, message: EmailMessage) -> str:
        """Deliver ``message`` and return its Message-ID. Raises TransportError."""
        if not message["Message-ID"]:
            message["Message-ID"] = make_msgid(domain=self.message_id_domain)
        message_id = message["Message-ID"]

        if self.dry_run:
            log.info("[EMAIL DRY RUN] to=%s subject=%s id=%s", message["To"], message["Subject"], message_id)
            return message_id

        if not (self.username and self.password):
            raise TransportError("SMTP credentials are not configured")

        try:
            errors, response = await aiosmtplib.send(
                message,
                hostname=self.hostname,
                port=self.port,
                username=self.username,
                password=self.password,
                use_tls=self.use_tls,
                start_tls=not self.use_tls,
                timeout=self.timeout,
            )
        except (aiosmtplib.SMTPException, OSError, asyncio.TimeoutError) as e:
            raise TransportError(f"SMTP send failed: {e}") from e

        if errors:
            raise TransportError(f"Recipients refused: {', '.join(sorted(errors))}")

        log.info("SMTP send ok → %s via %s:%s (%s)", message["To"], self.hostname, self.port, response)
        return message_id
