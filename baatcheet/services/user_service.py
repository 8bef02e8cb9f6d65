"""
User directory service.

Profile lookup for the signed-in account and a searchable, cursor-paginated
listing of other accounts.
"""

import logging
from typing import Optional, List
from dataclasses import dataclass, field

from .base import BaseService
from ..auth import Account
from ..auth.accounts import DEFAULT_PAGE_SIZE

logger = logging.getLogger(__name__)


@dataclass
class AccountPage:
    """One page of the account listing."""
    accounts: List[Account] = field(default_factory=list)
    next_cursor: Optional[str] = None
    has_more: bool = False


class UserService(BaseService):
    """Read-only access to account profiles."""

    def get_profile(self, account_id: str) -> Optional[Account]:
        """
        Get the account for the profile page.

        Returns:
            Account if found, None otherwise
        """
        return self.accounts.get_by_id(account_id)

    def list_accounts(
        self,
        current_account_id: str,
        search: str = "",
        cursor: Optional[str] = None,
        limit: Optional[int] = None
    ) -> AccountPage:
        """
        List accounts other than the caller.

        Raises:
            ValueError: If the cursor is malformed
        """
        if not limit or limit < 1:
            limit = DEFAULT_PAGE_SIZE

        accounts, next_cursor, has_more = self.accounts.list_accounts(
            exclude_id=current_account_id,
            search=search or "",
            cursor=cursor or None,
            limit=limit
        )
        return AccountPage(accounts=accounts, next_cursor=next_cursor, has_more=has_more)
