"""
Session cookies.

Both tokens travel only as http-only, same-site strict cookies; ``secure`` is
enabled in production.
"""

from fastapi import Response

from baatcheet.services import AuthTokens

ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"


def set_auth_cookies(response: Response, tokens: AuthTokens, secure: bool):
    """Set whichever tokens are present, each with its own max age."""
    if tokens.access_token:
        response.set_cookie(
            key=ACCESS_COOKIE,
            value=tokens.access_token,
            max_age=tokens.access_max_age,
            httponly=True,
            secure=secure,
            samesite="strict",
            path="/",
        )
    if tokens.refresh_token:
        response.set_cookie(
            key=REFRESH_COOKIE,
            value=tokens.refresh_token,
            max_age=tokens.refresh_max_age,
            httponly=True,
            secure=secure,
            samesite="strict",
            path="/",
        )


def clear_auth_cookies(response: Response, secure: bool):
    for key in (ACCESS_COOKIE, REFRESH_COOKIE):
        response.delete_cookie(
            key=key,
            path="/",
            httponly=True,
            secure=secure,
            samesite="strict",
        )
