"""
Cooldown markers for OTP issuance.

Presence of the marker blocks a new code for that email and flow. The check
and the arm are separate round trips, so two requests landing together can
both pass the check.
"""

import logging

from ..cache import EphemeralStore

logger = logging.getLogger(__name__)

RATE_LIMIT_SECONDS = 60


class RateLimiter:
    """Per-key cooldown window."""

    def __init__(self, store: EphemeralStore, window_seconds: int = RATE_LIMIT_SECONDS):
        self.store = store
        self.window_seconds = window_seconds

    def allow(self, key: str) -> bool:
        """True when no cooldown marker is present for the key."""
        if self.store.exists(key):
            logger.info(f"Rate limit hit for {key}")
            return False
        return True

    def arm(self, key: str) -> None:
        """Start the cooldown. Call only after the OTP was issued."""
        self.store.set(key, "true", self.window_seconds)

    def clear(self, key: str) -> None:
        self.store.delete(key)
