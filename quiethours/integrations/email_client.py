"""SMTP email transport for Quiet Hours."""

import logging
import os
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional
from dotenv import load_dotenv

from quiethours.models.constants import (
    DEFAULT_MAIL_HOST,
    DEFAULT_MAIL_PORT,
    DEFAULT_MAIL_TIMEOUT_SEC,
    SMTP_SSL_PORT,
)

load_dotenv()

logger = logging.getLogger(__name__)


class SMTPEmailClient:
    """Client that sends HTML email over SMTP.

    When credentials are missing, `send` degrades to returning False instead of raising.
    """

    def __init__(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        from_address: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        """Initialize SMTP client.

        Args:
            host: SMTP host. If None, reads MAIL_HOST (defaults to smtp.gmail.com).
            port: SMTP port. If None, reads MAIL_PORT (defaults to 587). Port 465 uses implicit TLS.
            username: SMTP login. If None, reads MAIL_USER.
            password: SMTP password. If None, reads MAIL_PASS.
            from_address: Sender address. If None, reads MAIL_FROM, falling back to the username.
            timeout: Socket timeout in seconds. If None, reads MAIL_TIMEOUT_SEC (defaults to 10).
        """
        self.host = host or os.getenv("MAIL_HOST", DEFAULT_MAIL_HOST)
        self.port = int(port or os.getenv("MAIL_PORT", DEFAULT_MAIL_PORT))
        self.username = username or os.getenv("MAIL_USER")
        self.password = password or os.getenv("MAIL_PASS")
        self.from_address = from_address or os.getenv("MAIL_FROM") or self.username
        self.timeout = float(timeout or os.getenv("MAIL_TIMEOUT_SEC", DEFAULT_MAIL_TIMEOUT_SEC))

    @property
    def configured(self) -> bool:
        return bool(self.host and self.username and self.password and self.from_address)

    def build_message(self, to: str, subject: str, html: str) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self.from_address
        msg["To"] = to
        msg.attach(MIMEText(html, "html", "utf-8"))
        return msg

    def _connect(self) -> smtplib.SMTP:
        if self.port == SMTP_SSL_PORT:
            return smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout)
        server = smtplib.SMTP(self.host, self.port, timeout=self.timeout)
        server.ehlo()
        server.starttls()
        return server

    def send(self, to: str, subject: str, html: str) -> bool:
        """Send an HTML email.

        Returns:
            True on success; False when SMTP is not configured or the send failed
        """
        if not self.configured:
            logger.warning("SMTP is not configured (MAIL_USER/MAIL_PASS missing); skipping email")
            return False

        msg = self.build_message(to, subject, html)
        try:
            with self._connect() as server:
                server.login(self.username, self.password)
                server.sendmail(self.from_address, [to], msg.as_string())
            logger.info(f"Sent email to {to}: {subject}")
            return True
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send email to {to}: {type(e).__name__}: {str(e)}")
            return False
