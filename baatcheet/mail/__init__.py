"""
Outbound email.

Templates, SMTP delivery and the background job queue that keeps delivery
off the request path.
"""

from .templates import MailContent, otp_verification_content, password_reset_content
from .sender import SMTPMailer
from .queue import EmailQueue

__all__ = [
    "MailContent",
    "otp_verification_content",
    "password_reset_content",
    "SMTPMailer",
    "EmailQueue",
]
