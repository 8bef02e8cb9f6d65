"""
Authentication module for BaatCheet.

Provides JWT cookie sessions, bcrypt password hashing, the durable account
store and the OTP / rate-limit primitives shared by registration and
password reset.
"""

from .jwt_handler import JWTHandler, TokenPayload, TokenError, TokenExpiredError, hash_token
from .password import PasswordHandler
from .accounts import (
    AccountStore,
    Account,
    DuplicateAccountError,
    AccountNotFoundError,
    normalize_email,
)
from .otp import OTPIssuer, StagedRegistration, ResetTicket, generate_otp
from .rate_limit import RateLimiter

__all__ = [
    "JWTHandler",
    "TokenPayload",
    "TokenError",
    "TokenExpiredError",
    "hash_token",
    "PasswordHandler",
    "AccountStore",
    "Account",
    "DuplicateAccountError",
    "AccountNotFoundError",
    "normalize_email",
    "OTPIssuer",
    "StagedRegistration",
    "ResetTicket",
    "generate_otp",
    "RateLimiter",
]
