"""
JWT token handler.

Generates and validates the access/refresh token pair used for cookie sessions.
Access tokens carry the account id and email; refresh tokens carry only the
account id and are signed with a separate secret.
"""

import hashlib
import time
import uuid
import logging
from typing import Optional, Literal
from dataclasses import dataclass, asdict

from jose import jwt, JWTError, ExpiredSignatureError

from ..config import TokenConfig, DEFAULT_ACCESS_TOKEN_SECRET, DEFAULT_REFRESH_TOKEN_SECRET

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"

TokenType = Literal["access", "refresh"]


class TokenError(Exception):
    """Token could not be decoded or failed validation."""


class TokenExpiredError(TokenError):
    """Token signature is valid but it has expired."""


@dataclass
class TokenPayload:
    """Decoded JWT claims."""
    account_id: str
    exp: int  # Expiration timestamp
    iat: int  # Issued at timestamp
    token_type: TokenType = "access"
    email: Optional[str] = None  # Access tokens only
    jti: Optional[str] = None  # Refresh tokens only

    def to_dict(self) -> dict:
        return {k: v for k, v in asdict(self).items() if v is not None}

    @classmethod
    def from_dict(cls, data: dict) -> "TokenPayload":
        account_id = data.get("account_id")
        if not account_id:
            raise TokenError("Token is missing the account_id claim")
        return cls(
            account_id=account_id,
            exp=int(data["exp"]),
            iat=int(data.get("iat", 0)),
            token_type=data.get("token_type", "access"),
            email=data.get("email"),
            jti=data.get("jti"),
        )


def hash_token(token: str) -> str:
    """One-way SHA-256 digest of a token, as stored in the session record."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class JWTHandler:
    """
    Handles JWT token generation and validation.

    Supports:
    - Access tokens (short-lived, authorize individual requests)
    - Refresh tokens (long-lived, exchanged for new access tokens)
    """

    def __init__(self, config: Optional[TokenConfig] = None):
        """
        Initialize JWT handler.

        Args:
            config: Token settings (loaded from the environment if not provided)
        """
        self.config = config or TokenConfig()

        if self.config.access_secret == DEFAULT_ACCESS_TOKEN_SECRET or \
                self.config.refresh_secret == DEFAULT_REFRESH_TOKEN_SECRET:
            logger.warning(
                "Using default JWT secret keys. "
                "Set ACCESS_TOKEN_SECRET and REFRESH_TOKEN_SECRET in production!"
            )

    @property
    def access_expiry(self) -> int:
        return self.config.access_expiry_seconds

    @property
    def refresh_expiry(self) -> int:
        return self.config.refresh_expiry_seconds

    def _secret_for(self, token_type: TokenType) -> str:
        if token_type == "refresh":
            return self.config.refresh_secret
        return self.config.access_secret

    def create_access_token(
        self,
        account_id: str,
        email: str,
        expires_in: Optional[int] = None
    ) -> str:
        """
        Create an access token.

        Args:
            account_id: Account identifier
            email: Account email
            expires_in: Custom expiration in seconds (default: configured access expiry)

        Returns:
            Encoded JWT token string
        """
        now = int(time.time())
        exp = now + (self.access_expiry if expires_in is None else expires_in)

        payload = TokenPayload(
            account_id=account_id,
            email=email,
            exp=exp,
            iat=now,
            token_type="access"
        )

        token = jwt.encode(payload.to_dict(), self._secret_for("access"), algorithm=ALGORITHM)
        logger.debug(f"Created access token for account {account_id}, expires in {exp - now}s")
        return token

    def create_refresh_token(self, account_id: str, expires_in: Optional[int] = None) -> str:
        """
        Create a refresh token.

        Only the account id is embedded so the token cannot authorize
        requests on its own. A random jti keeps two tokens issued in the
        same second distinguishable by their stored hash.
        """
        now = int(time.time())
        exp = now + (self.refresh_expiry if expires_in is None else expires_in)

        payload = TokenPayload(
            account_id=account_id,
            exp=exp,
            iat=now,
            token_type="refresh",
            jti=uuid.uuid4().hex
        )

        token = jwt.encode(payload.to_dict(), self._secret_for("refresh"), algorithm=ALGORITHM)
        logger.debug(f"Created refresh token for account {account_id}, expires in {exp - now}s")
        return token

    def create_token_pair(self, account_id: str, email: str) -> tuple[str, str]:
        """
        Create both access and refresh tokens.

        Returns:
            Tuple of (access_token, refresh_token)
        """
        access = self.create_access_token(account_id, email)
        refresh = self.create_refresh_token(account_id)
        return access, refresh

    def decode_token(self, token: str, token_type: TokenType = "access") -> TokenPayload:
        """
        Decode and validate a token of the given type.

        Raises:
            TokenExpiredError: Signature is valid but the token has expired
            TokenError: Malformed token, bad signature, wrong type or missing claims
        """
        try:
            data = jwt.decode(token, self._secret_for(token_type), algorithms=[ALGORITHM])
        except ExpiredSignatureError as e:
            raise TokenExpiredError(str(e)) from e
        except JWTError as e:
            raise TokenError(str(e)) from e

        try:
            payload = TokenPayload.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            raise TokenError(f"Malformed token claims: {e}") from e

        if payload.token_type != token_type:
            raise TokenError(f"Expected {token_type} token, got {payload.token_type}")

        return payload
