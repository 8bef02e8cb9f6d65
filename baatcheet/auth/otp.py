"""
One-time code issuance and verification.

Codes are 6-digit decimal strings drawn from ``secrets``. Each flow stores a
typed ticket (the code plus any staged payload) under its own key with a
short TTL; issuing again for the same key replaces the previous ticket.
"""

import json
import logging
import secrets
from dataclasses import dataclass, asdict
from typing import Optional, Type, TypeVar, Union

from ..cache import EphemeralStore

logger = logging.getLogger(__name__)

OTP_TTL_SECONDS = 300  # 5 minutes
OTP_MIN = 100000
OTP_MAX = 999999


def generate_otp() -> str:
    """Uniformly random code in 100000..999999."""
    return str(OTP_MIN + secrets.randbelow(OTP_MAX - OTP_MIN + 1))


def _require_str(data: dict, name: str) -> str:
    value = data.get(name)
    if not isinstance(value, str) or not value:
        raise ValueError(f"Field '{name}' missing or not a string")
    return value


@dataclass
class StagedRegistration:
    """Registration awaiting OTP confirmation. The password is still raw."""
    username: str
    email: str
    password: str
    otp: str

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "StagedRegistration":
        return cls(
            username=_require_str(data, "username"),
            email=_require_str(data, "email"),
            password=_require_str(data, "password"),
            otp=_require_str(data, "otp"),
        )


@dataclass
class ResetTicket:
    """Password reset request awaiting OTP confirmation."""
    otp: str

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "ResetTicket":
        return cls(otp=_require_str(data, "otp"))


Ticket = Union[StagedRegistration, ResetTicket]
T = TypeVar("T", StagedRegistration, ResetTicket)


class OTPIssuer:
    """Stores, loads and checks OTP tickets in the ephemeral store."""

    def __init__(self, store: EphemeralStore, ttl_seconds: int = OTP_TTL_SECONDS):
        self.store = store
        self.ttl_seconds = ttl_seconds

    def issue(self, key: str, ticket: Ticket) -> None:
        """Write the ticket, replacing any earlier one for the same key."""
        self.store.set_json(key, ticket.to_dict(), self.ttl_seconds)
        logger.debug(f"Issued OTP ticket at {key} (ttl {self.ttl_seconds}s)")

    def load(self, key: str, ticket_cls: Type[T]) -> Optional[T]:
        """
        Read a ticket.

        Returns:
            The decoded ticket, or None when absent or unreadable. An
            unreadable entry is discarded.
        """
        try:
            data = self.store.get_json(key)
        except json.JSONDecodeError:
            data = {}

        if data is None:
            return None

        try:
            if not isinstance(data, dict):
                raise ValueError("Ticket is not an object")
            return ticket_cls.from_dict(data)
        except ValueError as e:
            logger.warning(f"Discarding malformed OTP ticket at {key}: {e}")
            self.store.delete(key)
            return None

    @staticmethod
    def matches(ticket: Ticket, submitted: str) -> bool:
        """Exact comparison of the stored and submitted codes."""
        return submitted is not None and ticket.otp == submitted

    def discard(self, key: str) -> None:
        self.store.delete(key)
