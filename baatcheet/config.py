"""Configuration module for the BaatCheet auth backend."""

import os
from dataclasses import dataclass, field
from typing import List
from dotenv import load_dotenv

load_dotenv()

DEFAULT_ACCESS_TOKEN_SECRET = "baatcheet-access-secret-change-in-production"
DEFAULT_REFRESH_TOKEN_SECRET = "baatcheet-refresh-secret-change-in-production"


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes")


@dataclass
class TokenConfig:
    """JWT signing and expiry settings."""
    access_secret: str = field(default_factory=lambda: os.getenv("ACCESS_TOKEN_SECRET", DEFAULT_ACCESS_TOKEN_SECRET))
    refresh_secret: str = field(default_factory=lambda: os.getenv("REFRESH_TOKEN_SECRET", DEFAULT_REFRESH_TOKEN_SECRET))

    # Expiry in seconds: 15 minutes / 7 days
    access_expiry_seconds: int = field(default_factory=lambda: int(os.getenv("ACCESS_TOKEN_EXPIRY", "900")))
    refresh_expiry_seconds: int = field(default_factory=lambda: int(os.getenv("REFRESH_TOKEN_EXPIRY", str(7 * 24 * 60 * 60))))

    # Issue a fresh refresh token on every /refresh call
    rotate_refresh_tokens: bool = field(default_factory=lambda: _env_bool("ROTATE_REFRESH_TOKENS"))


@dataclass
class RedisConfig:
    """Ephemeral store connection."""
    url: str = field(default_factory=lambda: os.getenv("REDIS_URL", "redis://localhost:6379/0"))


@dataclass
class StorageConfig:
    """Durable account storage."""
    accounts_file: str = field(default_factory=lambda: os.getenv("ACCOUNTS_FILE", "data/accounts.json"))
    bcrypt_rounds: int = field(default_factory=lambda: int(os.getenv("BCRYPT_ROUNDS", "12")))


@dataclass
class OTPConfig:
    """One-time code lifetimes."""
    ttl_seconds: int = field(default_factory=lambda: int(os.getenv("OTP_TTL_SECONDS", "300")))
    rate_limit_seconds: int = field(default_factory=lambda: int(os.getenv("OTP_RATE_LIMIT_SECONDS", "60")))


@dataclass
class MailConfig:
    """Outbound email (SMTP) and delivery queue settings."""
    smtp_host: str = field(default_factory=lambda: os.getenv("SMTP_HOST", ""))
    smtp_port: int = field(default_factory=lambda: int(os.getenv("SMTP_PORT", "587")))
    smtp_user: str = field(default_factory=lambda: os.getenv("SMTP_USER", ""))
    smtp_password: str = field(default_factory=lambda: os.getenv("SMTP_PASSWORD", ""))
    mail_from: str = field(default_factory=lambda: os.getenv("SMTP_FROM", ""))

    product_name: str = "BaatCheet"
    product_link: str = "https://BaatCheet.com"

    max_attempts: int = field(default_factory=lambda: int(os.getenv("MAIL_MAX_ATTEMPTS", "2")))
    backoff_seconds: float = field(default_factory=lambda: float(os.getenv("MAIL_BACKOFF_SECONDS", "2")))

    @property
    def sender(self) -> str:
        return self.mail_from or f'"{self.product_name}" <{self.smtp_user}>'


@dataclass
class Config:
    """Main configuration container."""
    tokens: TokenConfig = field(default_factory=TokenConfig)
    redis: RedisConfig = field(default_factory=RedisConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    otp: OTPConfig = field(default_factory=OTPConfig)
    mail: MailConfig = field(default_factory=MailConfig)

    environment: str = field(default_factory=lambda: os.getenv("ENVIRONMENT", "development"))

    # Frontend origins allowed to send credentialed requests
    cors_origins: List[str] = field(default_factory=lambda: os.getenv("CORS_ORIGINS", "http://localhost:3000").split(","))

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


def load_config() -> Config:
    """Load configuration from environment variables."""
    return Config()
