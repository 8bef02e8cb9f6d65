"""
Account password hashing.

Passwords are stored only as bcrypt hashes. Registration keeps the raw
password in the staged ticket until the OTP is confirmed; it is hashed here
when the durable account is created or a reset is confirmed.
"""

import logging

import bcrypt

logger = logging.getLogger(__name__)

# Work factor used in production; tests drop it to the minimum
BCRYPT_ROUNDS = 12

# bcrypt input limit, counted in UTF-8 bytes
MAX_PASSWORD_BYTES = 72


class PasswordHandler:
    """bcrypt hashing with a configurable work factor (BCRYPT_ROUNDS)."""

    def __init__(self, rounds: int = BCRYPT_ROUNDS):
        self.rounds = rounds

    def hash(self, password: str) -> str:
        """
        Hash a raw password with a fresh salt.

        Raises:
            ValueError: If the password is empty or longer than 72 bytes
        """
        if not password:
            raise ValueError("Password cannot be empty")

        encoded = password.encode("utf-8")
        if len(encoded) > MAX_PASSWORD_BYTES:
            raise ValueError(f"Password cannot be longer than {MAX_PASSWORD_BYTES} bytes")

        return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def verify(self, password: str, hashed: str) -> bool:
        """Check a login attempt against the stored hash. Never raises."""
        if not password or not hashed:
            return False

        try:
            return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
        except ValueError as e:
            logger.warning(f"Password verification error: {e}")
            return False
