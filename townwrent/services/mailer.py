"""
Outgoing e-mail over SMTP.
Without an SMTP host the message is logged instead of sent, which is what development uses.
"""

from email.mime.text import MIMEText
from typing import Optional
import asyncio
import logging
import smtplib

from townwrent.config import settings

logger = logging.getLogger(__name__)


class Mailer:
    def __init__(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        use_tls: Optional[bool] = None,
        sender: Optional[str] = None
    ):
        self.host = host if host is not None else settings.smtp_host
        self.port = port or settings.smtp_port
        self.username = username if username is not None else settings.smtp_username
        self.password = password if password is not None else settings.smtp_password
        self.use_tls = settings.smtp_use_tls if use_tls is None else use_tls
        self.sender = sender or settings.mail_from

    def _send_sync(self, msg: MIMEText) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=30) as server:
            if self.use_tls:
                server.starttls()
            if self.username and self.password:
                server.login(self.username, self.password)
            server.send_message(msg)

    async def send(self, to: str, subject: str, body: str) -> None:
        """
        Send a plain-text e-mail.

        Raises:
            smtplib.SMTPException, OSError: If delivery fails
        """
        if not self.host:
            logger.info(f"SMTP not configured; e-mail to {to} not sent. Subject: {subject}\n{body}")
            return

        msg = MIMEText(body)
        msg["Subject"] = subject
        msg["From"] = self.sender
        msg["To"] = to

        await asyncio.to_thread(self._send_sync, msg)
        logger.info(f"Sent e-mail '{subject}' to {to}")
