"""
Registration service.

Registration is two-step: the submitted details are staged in the ephemeral
store behind an emailed OTP, and the durable account is only created once
the code is confirmed. The password stays raw until then, so an abandoned
registration never leaves a hash behind.
"""

import logging

from .base import BaseService, ServiceContext
from .results import AuthResult, AuthErrorCode
from .session_service import SessionService
from ..auth import StagedRegistration, DuplicateAccountError, generate_otp, normalize_email
from ..cache import keys
from ..mail import otp_verification_content

logger = logging.getLogger(__name__)


class RegistrationService(BaseService):
    """Stages registrations and turns verified ones into accounts."""

    def __init__(self, context: ServiceContext, sessions: SessionService):
        super().__init__(context)
        self.sessions = sessions

    def stage_registration(self, username: str, email: str, password: str) -> AuthResult:
        """
        Stage a registration and send its OTP.

        Args:
            username: Desired username
            email: Email that will receive the code
            password: Raw password, hashed only after verification

        Returns:
            AuthResult indicating whether the OTP was issued
        """
        username = username.strip()
        email = normalize_email(email)

        if self.accounts.exists(username=username, email=email):
            return AuthResult.fail(AuthErrorCode.CONFLICT, "User with email or username already exists")

        rate_key = keys.register_rate_limit_key(email)
        if not self.rate_limiter.allow(rate_key):
            return AuthResult.fail(
                AuthErrorCode.RATE_LIMITED,
                "Too many OTP requests, Please wait before requesting again."
            )

        otp = generate_otp()
        self.otp.issue(
            keys.register_key(email),
            StagedRegistration(username=username, email=email, password=password, otp=otp)
        )
        self.rate_limiter.arm(rate_key)

        self.send_email(
            email,
            otp_verification_content(username, otp, self.config.mail.product_name, self.config.mail.product_link)
        )

        logger.info(f"Registration staged for {email}")
        return AuthResult.ok(
            "A verification email has been sent. Verify the OTP within 5 minutes."
        )

    def verify_registration(self, email: str, otp: str) -> AuthResult:
        """
        Confirm a staged registration and create the account.

        Returns:
            AuthResult with the new account and its session tokens
        """
        email = normalize_email(email)
        staged_key = keys.register_key(email)

        staged = self.otp.load(staged_key, StagedRegistration)
        if staged is None:
            return AuthResult.fail(AuthErrorCode.EXPIRED, "OTP Expired or Invalid")

        if not self.otp.matches(staged, otp):
            return AuthResult.fail(AuthErrorCode.INVALID_OTP, "Invalid OTP")

        # A concurrent verification may have created the account already
        if self.accounts.get_by_email(email):
            self.otp.discard(staged_key)
            return AuthResult.fail(AuthErrorCode.CONFLICT, "User Already Exists")

        try:
            account = self.accounts.create_account(
                username=staged.username,
                email=staged.email,
                password=staged.password,
                is_verified=True
            )
        except DuplicateAccountError as e:
            self.otp.discard(staged_key)
            logger.info(f"Registration for {email} lost a uniqueness race: {e}")
            return AuthResult.fail(AuthErrorCode.CONFLICT, "User with email or username already exists")

        tokens = self.sessions.issue_session(account)

        self.otp.discard(staged_key)
        self.rate_limiter.clear(keys.register_rate_limit_key(email))

        logger.info(f"Account verified and created: {account.account_id}")
        return AuthResult.ok(
            "User verified, created, and logged in successfully",
            account=account,
            tokens=tokens
        )
