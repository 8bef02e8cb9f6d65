"""
Session service.

Issues the access/refresh token pair, exchanges refresh tokens for new access
tokens and tears sessions down on logout.

Each account holds at most one valid refresh token: its SHA-256 hash lives at
``refresh:<account_id>`` and is replaced on every login. A refresh token that
verifies but does not match the stored hash has been superseded, so it is
treated as a replay and the session is revoked.

Session states per account:
    NoSession -> Active (hash stored) -> Active' (access renewed)
    -> Revoked (hash deleted by logout or reuse detection) -> NoSession
"""

import logging
from typing import Optional

from .base import BaseService
from .results import AuthResult, AuthTokens, AuthErrorCode
from ..auth import Account, TokenError, TokenExpiredError, hash_token
from ..cache import keys

logger = logging.getLogger(__name__)


class SessionService(BaseService):
    """
    Service for cookie sessions.

    Handles:
    - Issuing token pairs and persisting the refresh hash
    - Login with email and password
    - Logout
    - Refresh token exchange with reuse detection
    - Access token verification for protected routes
    """

    def issue_session(self, account: Account) -> AuthTokens:
        """
        Create a token pair for an account and store the refresh hash.

        Any previously issued refresh token for the account stops working.
        """
        access, refresh = self.jwt.create_token_pair(
            account_id=account.account_id,
            email=account.email
        )

        self.store.set(
            keys.refresh_key(account.account_id),
            hash_token(refresh),
            self.jwt.refresh_expiry
        )

        logger.info(f"Session issued for account {account.account_id}")
        return AuthTokens(
            access_token=access,
            refresh_token=refresh,
            access_max_age=self.jwt.access_expiry,
            refresh_max_age=self.jwt.refresh_expiry
        )

    def login(self, email: str, password: str) -> AuthResult:
        """
        Login with email and password.

        Returns:
            AuthResult with the account and tokens if successful
        """
        account = self.accounts.verify_password(email, password)
        if not account:
            return AuthResult.fail(AuthErrorCode.UNAUTHORIZED, "Invalid email or password")

        if not account.is_verified:
            return AuthResult.fail(AuthErrorCode.UNAUTHORIZED, "Account is not verified")

        account = self.accounts.set_presence(account.account_id, online=True) or account
        tokens = self.issue_session(account)

        logger.info(f"Account logged in: {account.account_id}")
        return AuthResult.ok("User logged in successfully", account=account, tokens=tokens)

    def logout(self, account_id: str) -> AuthResult:
        """
        End the account's session.

        Safe to call when no refresh record exists.
        """
        self.accounts.set_presence(account_id, online=False)
        self.store.delete(keys.refresh_key(account_id))

        logger.info(f"Account logged out: {account_id}")
        return AuthResult.ok("User logged out successfully")

    def refresh(self, refresh_token: Optional[str]) -> AuthResult:
        """
        Exchange a refresh token for a new access token.

        Returns:
            AuthResult with new tokens if successful. The refresh token is
            only replaced when rotation is enabled.
        """
        if not refresh_token:
            return AuthResult.fail(AuthErrorCode.UNAUTHORIZED, "Refresh token not found")

        try:
            payload = self.jwt.decode_token(refresh_token, token_type="refresh")
        except TokenExpiredError:
            return AuthResult.fail(AuthErrorCode.UNAUTHORIZED, "Refresh token expired")
        except TokenError:
            return AuthResult.fail(AuthErrorCode.UNAUTHORIZED, "Invalid refresh token")

        account_id = payload.account_id
        session_key = keys.refresh_key(account_id)

        stored_hash = self.store.get(session_key)
        if stored_hash is None:
            return AuthResult.fail(AuthErrorCode.SESSION_EXPIRED, "Session expired, please login again")

        if stored_hash != hash_token(refresh_token):
            # A validly signed but superseded token: revoke the live session too.
            self.store.delete(session_key)
            logger.warning(f"Refresh token reuse detected for account {account_id}; session revoked")
            return AuthResult.fail(
                AuthErrorCode.POSSIBLE_REUSE_ATTACK,
                "Refresh token reuse detected, please login again"
            )

        account = self.accounts.get_by_id(account_id)
        if not account:
            return AuthResult.fail(AuthErrorCode.UNAUTHORIZED, "User not found")

        if self.config.tokens.rotate_refresh_tokens:
            tokens = self.issue_session(account)
        else:
            tokens = AuthTokens(
                access_token=self.jwt.create_access_token(account.account_id, account.email),
                access_max_age=self.jwt.access_expiry
            )

        logger.debug(f"Access token refreshed for account {account_id}")
        return AuthResult.ok("Access token refreshed", account=account, tokens=tokens)

    def authenticate(self, access_token: Optional[str]) -> AuthResult:
        """
        Resolve the account behind an access token.

        Returns:
            AuthResult with the account, or an UNAUTHORIZED failure
        """
        if not access_token:
            return AuthResult.fail(AuthErrorCode.UNAUTHORIZED, "Unauthorized access — no access token found")

        try:
            payload = self.jwt.decode_token(access_token, token_type="access")
        except TokenExpiredError:
            return AuthResult.fail(AuthErrorCode.UNAUTHORIZED, "Access token expired")
        except TokenError:
            return AuthResult.fail(AuthErrorCode.UNAUTHORIZED, "Invalid access token")

        account = self.accounts.get_by_id(payload.account_id)
        if not account:
            return AuthResult.fail(AuthErrorCode.UNAUTHORIZED, "Invalid token — user not found")

        return AuthResult(success=True, account=account)
