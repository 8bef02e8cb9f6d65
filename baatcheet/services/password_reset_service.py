"""
Password reset service.

Reuses the OTP and rate-limit primitives of registration. A confirmed reset
only replaces the password hash; no session is issued.
"""

import logging

from .base import BaseService
from .results import AuthResult, AuthErrorCode
from ..auth import ResetTicket, AccountNotFoundError, generate_otp, normalize_email
from ..cache import keys
from ..mail import password_reset_content

logger = logging.getLogger(__name__)


class PasswordResetService(BaseService):
    """OTP-gated password reset."""

    def request_reset(self, email: str) -> AuthResult:
        """
        Issue a reset OTP for an existing account.

        The account lookup happens before rate limiting, so an unknown email
        is reported as NOT_FOUND.
        """
        email = normalize_email(email)

        account = self.accounts.get_by_email(email)
        if not account:
            return AuthResult.fail(AuthErrorCode.NOT_FOUND, "User not found")

        rate_key = keys.reset_rate_limit_key(email)
        if not self.rate_limiter.allow(rate_key):
            return AuthResult.fail(
                AuthErrorCode.RATE_LIMITED,
                "Too many OTP requests, Please wait before requesting again."
            )

        otp = generate_otp()
        self.otp.issue(keys.reset_key(email), ResetTicket(otp=otp))
        self.rate_limiter.arm(rate_key)

        self.send_email(
            email,
            password_reset_content(account.username, otp, self.config.mail.product_name, self.config.mail.product_link)
        )

        logger.info(f"Password reset requested for {email}")
        return AuthResult.ok("A password reset OTP has been sent to your email. Verify it within 5 minutes.")

    def verify_reset(self, email: str, otp: str, new_password: str) -> AuthResult:
        """Check the reset OTP and replace the stored password hash."""
        email = normalize_email(email)
        ticket_key = keys.reset_key(email)

        ticket = self.otp.load(ticket_key, ResetTicket)
        if ticket is None:
            return AuthResult.fail(AuthErrorCode.EXPIRED, "OTP Expired or Invalid")

        if not self.otp.matches(ticket, otp):
            return AuthResult.fail(AuthErrorCode.INVALID_OTP, "Invalid OTP")

        account = self.accounts.get_by_email(email)
        if not account:
            self.otp.discard(ticket_key)
            return AuthResult.fail(AuthErrorCode.NOT_FOUND, "User not found")

        try:
            self.accounts.set_password(account.account_id, new_password)
        except AccountNotFoundError:
            self.otp.discard(ticket_key)
            return AuthResult.fail(AuthErrorCode.NOT_FOUND, "User not found")

        self.otp.discard(ticket_key)
        self.rate_limiter.clear(keys.reset_rate_limit_key(email))

        logger.info(f"Password reset for account {account.account_id}")
        return AuthResult.ok("Password has been reset successfully. Please login again.")
