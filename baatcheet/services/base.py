"""
Base service classes and shared context.

The ServiceContext owns the process-wide resources (Redis client, account
store, token and password handlers, email queue). It is created once at
startup, injected into every service and closed at shutdown.
"""

import logging
from typing import Optional
from dataclasses import dataclass

from ..config import Config, load_config
from ..auth import JWTHandler, PasswordHandler, AccountStore, OTPIssuer, RateLimiter
from ..cache import EphemeralStore
from ..mail import EmailQueue, SMTPMailer, MailContent

logger = logging.getLogger(__name__)


@dataclass
class ServiceContext:
    """Shared dependencies for all services."""
    config: Config
    store: EphemeralStore
    accounts: AccountStore
    jwt: JWTHandler
    passwords: PasswordHandler
    mail: EmailQueue

    @classmethod
    def create(cls, config: Optional[Config] = None) -> "ServiceContext":
        """
        Build and initialize all shared resources.

        Args:
            config: Optional config (loads from env if not provided)
        """
        cfg = config or load_config()

        store = EphemeralStore(url=cfg.redis.url).init()
        passwords = PasswordHandler(rounds=cfg.storage.bcrypt_rounds)
        accounts = AccountStore(file_path=cfg.storage.accounts_file, password_handler=passwords)
        jwt = JWTHandler(cfg.tokens)

        mail = EmailQueue(
            SMTPMailer(cfg.mail),
            max_attempts=cfg.mail.max_attempts,
            backoff_seconds=cfg.mail.backoff_seconds
        )
        mail.start()

        return cls(
            config=cfg,
            store=store,
            accounts=accounts,
            jwt=jwt,
            passwords=passwords,
            mail=mail
        )

    def close(self):
        """Clean up resources."""
        self.mail.shutdown()
        self.store.close()


class BaseService:
    """
    Base class for all services.

    Each service receives the shared context and provides focused functionality.
    """

    def __init__(self, context: ServiceContext):
        self.context = context
        self.otp = OTPIssuer(context.store, ttl_seconds=context.config.otp.ttl_seconds)
        self.rate_limiter = RateLimiter(context.store, window_seconds=context.config.otp.rate_limit_seconds)

    @property
    def config(self) -> Config:
        return self.context.config

    @property
    def store(self) -> EphemeralStore:
        return self.context.store

    @property
    def accounts(self) -> AccountStore:
        return self.context.accounts

    @property
    def jwt(self) -> JWTHandler:
        return self.context.jwt

    def send_email(self, email: str, content: MailContent) -> Optional[str]:
        """
        Hand a message to the email queue.

        Delivery is best effort: an enqueue failure is logged and never fails
        the calling flow.
        """
        try:
            return self.context.mail.enqueue(email, content)
        except Exception as e:
            logger.error(f"Failed to enqueue '{content.subject}' email for {email}: {e}")
            return None
