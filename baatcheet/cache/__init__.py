"""
Ephemeral store access.

Redis-backed storage for TTL-bound auth state and its key schema.
"""

from .redis_client import EphemeralStore, StoreUnavailableError
from . import keys

__all__ = [
    "EphemeralStore",
    "StoreUnavailableError",
    "keys",
]
