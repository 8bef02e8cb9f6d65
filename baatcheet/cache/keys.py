"""Key schema for the ephemeral store."""


def register_key(email: str) -> str:
    """Staged registration payload."""
    return f"register:{email}"


def register_rate_limit_key(email: str) -> str:
    return f"register:ratelimit:{email}"


def refresh_key(account_id: str) -> str:
    """Hash of the account's current refresh token."""
    return f"refresh:{account_id}"


def reset_key(email: str) -> str:
    """Password reset ticket."""
    return f"reset:{email}"


def reset_rate_limit_key(email: str) -> str:
    return f"reset:rateLimit:{email}"
