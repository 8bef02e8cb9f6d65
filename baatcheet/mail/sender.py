"""SMTP delivery for rendered messages."""

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from ..config import MailConfig
from .templates import MailContent

logger = logging.getLogger(__name__)

SMTP_TIMEOUT_SECONDS = 15


class SMTPMailer:
    """
    Sends mail over SMTP.

    Port 465 uses implicit TLS; any other port upgrades with STARTTLS.
    """

    def __init__(self, config: MailConfig):
        self.config = config

    def is_configured(self) -> bool:
        return bool(self.config.smtp_host)

    def _connect(self) -> smtplib.SMTP:
        if self.config.smtp_port == 465:
            conn = smtplib.SMTP_SSL(self.config.smtp_host, self.config.smtp_port, timeout=SMTP_TIMEOUT_SECONDS)
        else:
            conn = smtplib.SMTP(self.config.smtp_host, self.config.smtp_port, timeout=SMTP_TIMEOUT_SECONDS)
            conn.ehlo()
            conn.starttls()
            conn.ehlo()

        if self.config.smtp_user:
            conn.login(self.config.smtp_user, self.config.smtp_password)
        return conn

    def build_message(self, to: str, content: MailContent) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = content.subject
        msg["From"] = self.config.sender
        msg["To"] = to
        msg.attach(MIMEText(content.text, "plain", "utf-8"))
        msg.attach(MIMEText(content.html, "html", "utf-8"))
        return msg

    def send(self, to: str, content: MailContent) -> None:
        """
        Deliver one message.

        Raises:
            RuntimeError: If SMTP is not configured
            smtplib.SMTPException, OSError: On delivery failure
        """
        if not self.is_configured():
            raise RuntimeError("SMTP not configured")

        msg = self.build_message(to, content)
        with self._connect() as conn:
            conn.sendmail(self.config.sender, [to], msg.as_string())

        logger.info(f"Email '{content.subject}' sent to {to}")
