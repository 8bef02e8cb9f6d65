"""
User endpoints.

Current-account profile and the searchable account directory.
"""

from typing import Optional, List

from fastapi import APIRouter, HTTPException, status, Query
from pydantic import BaseModel

from ..deps import ServicesDep, CurrentAccount

router = APIRouter()


# Response models

class ProfileResponse(BaseModel):
    """Full profile of the signed-in account."""
    id: str
    username: str
    email: str
    avatar: Optional[str] = None
    bio: str = ""
    is_verified: bool
    last_seen: str
    status: str
    created_at: str


class UserSummary(BaseModel):
    """Directory entry (no email)."""
    id: str
    username: str
    avatar: Optional[str] = None
    bio: str = ""
    is_verified: bool
    last_seen: str
    status: str
    created_at: str


class UsersListResponse(BaseModel):
    users: List[UserSummary]
    next_cursor: Optional[str] = None
    has_more: bool


# Endpoints

@router.get("/me", response_model=ProfileResponse)
def get_me(current_account: CurrentAccount, services: ServicesDep):
    """
    Get current authenticated account info.

    Requires valid access token cookie.
    """
    account = services.users.get_profile(current_account.account_id)
    if account is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found in database"
        )

    return ProfileResponse(
        id=account.account_id,
        username=account.username,
        email=account.email,
        avatar=account.avatar,
        bio=account.bio,
        is_verified=account.is_verified,
        last_seen=account.last_seen,
        status=account.status,
        created_at=account.created_at
    )


@router.get("", response_model=UsersListResponse)
def list_users(
    current_account: CurrentAccount,
    services: ServicesDep,
    search: str = Query("", description="Matches username or email, case-insensitive"),
    cursor: Optional[str] = Query(None, description="Id of the last account on the previous page"),
    limit: int = Query(20, description="Page size (max 50)")
):
    """
    List other accounts with search and cursor pagination.
    """
    try:
        page = services.users.list_accounts(
            current_account_id=current_account.account_id,
            search=search,
            cursor=cursor,
            limit=limit
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

    return UsersListResponse(
        users=[
            UserSummary(
                id=account.account_id,
                username=account.username,
                avatar=account.avatar,
                bio=account.bio,
                is_verified=account.is_verified,
                last_seen=account.last_seen,
                status=account.status,
                created_at=account.created_at
            )
            for account in page.accounts
        ],
        next_cursor=page.next_cursor,
        has_more=page.has_more
    )
