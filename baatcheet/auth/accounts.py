"""
Account storage and management.

Stores verified accounts in a JSON file, keyed by account id.
Username and email are unique; emails are stored lower-cased.
"""

import json
import logging
import os
import re
import tempfile
import threading
import uuid
from pathlib import Path
from datetime import datetime, timezone
from typing import Optional, List, Tuple
from dataclasses import dataclass, asdict, field

from .password import PasswordHandler

logger = logging.getLogger(__name__)

# Default storage path
DEFAULT_ACCOUNTS_FILE = Path(__file__).parent.parent.parent / "data" / "accounts.json"

MAX_PAGE_SIZE = 50
DEFAULT_PAGE_SIZE = 20

_ACCOUNT_ID_RE = re.compile(r"^[0-9a-f]{32}$")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def normalize_email(email: str) -> str:
    """Trim and lower-case an email address."""
    return (email or "").strip().lower()


class DuplicateAccountError(ValueError):
    """An account with the same username or email already exists."""


class AccountNotFoundError(ValueError):
    """No account matches the given identifier."""


@dataclass
class Account:
    """Account data model."""
    account_id: str
    username: str
    email: str
    password_hash: str
    is_verified: bool = False
    status: str = "offline"  # "online" or "offline"
    last_seen: str = field(default_factory=_now)
    avatar: Optional[str] = None
    bio: str = ""
    friends: List[str] = field(default_factory=list)  # Other account ids
    created_at: str = field(default_factory=_now)
    updated_at: str = field(default_factory=_now)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "Account":
        return cls(
            account_id=data["account_id"],
            username=data["username"],
            email=data["email"],
            password_hash=data["password_hash"],
            is_verified=data.get("is_verified", False),
            status=data.get("status", "offline"),
            last_seen=data.get("last_seen", _now()),
            avatar=data.get("avatar"),
            bio=data.get("bio", ""),
            friends=data.get("friends", []),
            created_at=data.get("created_at", _now()),
            updated_at=data.get("updated_at", _now())
        )

    def public_view(self) -> dict:
        """Fields safe to return to the account owner after auth."""
        return {
            "id": self.account_id,
            "username": self.username,
            "email": self.email,
            "is_verified": self.is_verified,
        }


class AccountStore:
    """
    JSON-based account storage.

    A process-wide lock serializes reads and read-modify-write cycles so the
    username/email unique constraints hold within one process. Saves replace
    the file atomically, so readers in other processes never see a partial
    document.
    """

    def __init__(self, file_path: Optional[Path] = None, password_handler: Optional[PasswordHandler] = None):
        """
        Initialize account store.

        Args:
            file_path: Path to accounts JSON file (default: data/accounts.json)
            password_handler: Hasher used for password writes and checks
        """
        self.file_path = Path(file_path) if file_path else DEFAULT_ACCOUNTS_FILE
        self.password_handler = password_handler or PasswordHandler()
        self._lock = threading.RLock()
        self._ensure_file()

    def _ensure_file(self):
        """Ensure the storage file and directory exist."""
        self.file_path.parent.mkdir(parents=True, exist_ok=True)
        if not self.file_path.exists():
            self._save_all({})

    def _load_all(self) -> dict[str, dict]:
        """Load all accounts from file."""
        with self._lock:
            try:
                with open(self.file_path, "r") as f:
                    return json.load(f)
            except FileNotFoundError:
                return {}

    def _save_all(self, accounts: dict[str, dict]):
        """
        Save all accounts to file.

        Writes a sibling temp file and swaps it in, so the target always
        holds a complete document.
        """
        fd, tmp_path = tempfile.mkstemp(dir=self.file_path.parent, prefix=".accounts-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(accounts, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self.file_path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def create_account(
        self,
        username: str,
        email: str,
        password: str,
        is_verified: bool = False
    ) -> Account:
        """
        Create a new account, hashing the raw password.

        Raises:
            DuplicateAccountError: If the username or email is taken
        """
        username = username.strip()
        email = normalize_email(email)
        password_hash = self.password_handler.hash(password)

        with self._lock:
            accounts = self._load_all()
            for data in accounts.values():
                if data["email"] == email:
                    raise DuplicateAccountError(f"Account with email {email} already exists")
                if data["username"] == username:
                    raise DuplicateAccountError(f"Account with username {username} already exists")

            account = Account(
                account_id=uuid.uuid4().hex,
                username=username,
                email=email,
                password_hash=password_hash,
                is_verified=is_verified
            )
            accounts[account.account_id] = account.to_dict()
            self._save_all(accounts)

        logger.info(f"Created account: {account.account_id} ({username})")
        return account

    def get_by_id(self, account_id: str) -> Optional[Account]:
        """Get account by id."""
        data = self._load_all().get(account_id)
        if data:
            return Account.from_dict(data)
        return None

    def get_by_email(self, email: str) -> Optional[Account]:
        """Get account by email (case-insensitive)."""
        email = normalize_email(email)
        for data in self._load_all().values():
            if data["email"] == email:
                return Account.from_dict(data)
        return None

    def get_by_username(self, username: str) -> Optional[Account]:
        """Get account by exact username."""
        username = username.strip()
        for data in self._load_all().values():
            if data["username"] == username:
                return Account.from_dict(data)
        return None

    def exists(self, username: Optional[str] = None, email: Optional[str] = None) -> bool:
        """Check whether an account matches the username OR the email."""
        if username and self.get_by_username(username):
            return True
        if email and self.get_by_email(email):
            return True
        return False

    def update_account(self, account: Account) -> Account:
        """
        Persist an existing account.

        Raises:
            AccountNotFoundError: If the account doesn't exist
        """
        with self._lock:
            accounts = self._load_all()

            if account.account_id not in accounts:
                raise AccountNotFoundError(f"Account {account.account_id} not found")

            account.updated_at = _now()
            accounts[account.account_id] = account.to_dict()
            self._save_all(accounts)

        logger.debug(f"Updated account: {account.account_id}")
        return account

    def set_password(self, account_id: str, password: str) -> Account:
        """Replace an account's password hash."""
        with self._lock:
            account = self.get_by_id(account_id)
            if not account:
                raise AccountNotFoundError(f"Account {account_id} not found")

            account.password_hash = self.password_handler.hash(password)
            return self.update_account(account)

    def verify_password(self, email: str, password: str) -> Optional[Account]:
        """
        Verify an account's password.

        Returns:
            Account if password is valid, None otherwise
        """
        account = self.get_by_email(email)
        if not account:
            return None

        if self.password_handler.verify(password, account.password_hash):
            return account
        return None

    def set_presence(self, account_id: str, online: bool) -> Optional[Account]:
        """
        Record a status change and stamp last_seen.

        Returns:
            Updated Account or None if not found
        """
        with self._lock:
            account = self.get_by_id(account_id)
            if not account:
                return None

            account.status = "online" if online else "offline"
            account.last_seen = _now()
            return self.update_account(account)

    def list_accounts(
        self,
        exclude_id: Optional[str] = None,
        search: str = "",
        cursor: Optional[str] = None,
        limit: int = DEFAULT_PAGE_SIZE
    ) -> Tuple[List[Account], Optional[str], bool]:
        """
        List accounts ordered by id with cursor pagination.

        Args:
            exclude_id: Account to leave out (usually the caller)
            search: Case-insensitive substring matched against username or email
            cursor: Return only accounts whose id sorts after this one
            limit: Page size, clamped to 1..50

        Returns:
            Tuple of (accounts, next_cursor, has_more)

        Raises:
            ValueError: If the cursor is not a valid account id
        """
        if cursor is not None and not _ACCOUNT_ID_RE.match(cursor):
            raise ValueError("Invalid cursor format")

        limit = min(max(limit, 1), MAX_PAGE_SIZE)
        needle = search.strip().lower()

        accounts = self._load_all()
        result = []
        for account_id in sorted(accounts):
            if account_id == exclude_id:
                continue
            if cursor is not None and account_id <= cursor:
                continue

            data = accounts[account_id]
            if needle and needle not in data["username"].lower() and needle not in data["email"]:
                continue

            result.append(Account.from_dict(data))
            if len(result) == limit:
                break

        has_more = len(result) == limit
        next_cursor = result[-1].account_id if has_more else None
        return result, next_cursor, has_more
