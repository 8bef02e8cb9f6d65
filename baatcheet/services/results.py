"""Result types shared by the auth services."""

from enum import Enum
from typing import Optional
from dataclasses import dataclass

from ..auth import Account


class AuthErrorCode(str, Enum):
    """Why an auth operation failed."""
    BAD_REQUEST = "bad_request"
    CONFLICT = "conflict"
    RATE_LIMITED = "rate_limited"
    EXPIRED = "expired"
    INVALID_OTP = "invalid_otp"
    UNAUTHORIZED = "unauthorized"
    SESSION_EXPIRED = "session_expired"
    POSSIBLE_REUSE_ATTACK = "possible_reuse_attack"
    NOT_FOUND = "not_found"


@dataclass
class AuthTokens:
    """Tokens to be delivered as cookies. Either may be absent."""
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    access_max_age: int = 0  # seconds
    refresh_max_age: int = 0  # seconds


@dataclass
class AuthResult:
    """Authentication result."""
    success: bool
    account: Optional[Account] = None
    tokens: Optional[AuthTokens] = None
    message: Optional[str] = None
    error: Optional[str] = None
    code: Optional[AuthErrorCode] = None

    @classmethod
    def ok(cls, message: str, account: Optional[Account] = None, tokens: Optional[AuthTokens] = None) -> "AuthResult":
        return cls(success=True, account=account, tokens=tokens, message=message)

    @classmethod
    def fail(cls, code: AuthErrorCode, error: str) -> "AuthResult":
        return cls(success=False, error=error, code=code)

    def to_dict(self) -> dict:
        result = {"success": self.success}
        if self.message:
            result["message"] = self.message
        if self.account:
            result["user"] = self.account.public_view()
        if self.error:
            result["error"] = self.error
            result["code"] = self.code.value if self.code else None
        return result
