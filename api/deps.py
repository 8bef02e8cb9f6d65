"""
API dependencies.

Provides dependency injection for services, cookie authentication and the
mapping from service error codes to HTTP responses.
"""

import logging
from typing import Optional, Annotated, NoReturn
from dataclasses import dataclass

from fastapi import Cookie, Depends, HTTPException, status

from baatcheet.config import Config
from baatcheet.auth import Account
from baatcheet.services import (
    ServiceContext,
    SessionService,
    RegistrationService,
    PasswordResetService,
    UserService,
    AuthResult,
    AuthErrorCode,
    create_services,
)
from .cookies import ACCESS_COOKIE

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Container for all services."""
    config: Config
    context: ServiceContext
    sessions: SessionService
    registration: RegistrationService
    password_reset: PasswordResetService
    users: UserService


# Global services instance (singleton)
_services: Optional[Services] = None


def build_services(context: ServiceContext) -> Services:
    """Wire every service around an existing context."""
    _, sessions, registration, password_reset, users = create_services(context)
    return Services(
        config=context.config,
        context=context,
        sessions=sessions,
        registration=registration,
        password_reset=password_reset,
        users=users
    )


def get_services() -> Services:
    """
    Get or create the services singleton.

    This opens the Redis connection and starts the email queue on first call.
    """
    global _services

    if _services is None:
        logger.info("Initializing services...")
        _services = build_services(ServiceContext.create())
        logger.info("Services initialized successfully")

    return _services


def close_services():
    """Close and cleanup services."""
    global _services
    if _services:
        _services.context.close()
        _services = None
        logger.info("Services closed")


# Dependency for getting services
def services_dep() -> Services:
    """FastAPI dependency for services."""
    return get_services()


ServicesDep = Annotated[Services, Depends(services_dep)]


# Error mapping

ERROR_STATUS = {
    AuthErrorCode.BAD_REQUEST: status.HTTP_400_BAD_REQUEST,
    AuthErrorCode.CONFLICT: status.HTTP_409_CONFLICT,
    AuthErrorCode.RATE_LIMITED: status.HTTP_429_TOO_MANY_REQUESTS,
    AuthErrorCode.EXPIRED: status.HTTP_400_BAD_REQUEST,
    AuthErrorCode.INVALID_OTP: status.HTTP_400_BAD_REQUEST,
    AuthErrorCode.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    AuthErrorCode.SESSION_EXPIRED: status.HTTP_401_UNAUTHORIZED,
    AuthErrorCode.POSSIBLE_REUSE_ATTACK: status.HTTP_403_FORBIDDEN,
    AuthErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
}


def raise_for_result(result: AuthResult) -> NoReturn:
    """
    Raise the HTTPException matching a failed AuthResult.

    The error code is echoed in the X-Auth-Error header so clients can tell
    an expired session from a rejected token.
    """
    code = result.code or AuthErrorCode.BAD_REQUEST
    raise HTTPException(
        status_code=ERROR_STATUS.get(code, status.HTTP_400_BAD_REQUEST),
        detail=result.error,
        headers={"X-Auth-Error": code.value}
    )


# Authentication dependencies

def get_current_account(
    services: ServicesDep,
    access_token: Annotated[Optional[str], Cookie(alias=ACCESS_COOKIE)] = None
) -> Account:
    """
    Get current account from the access token cookie (required).

    Raises 401 if the cookie is missing, expired or invalid.
    """
    result = services.sessions.authenticate(access_token)
    if not result.success:
        raise_for_result(result)
    return result.account


# Type aliases for dependencies
CurrentAccount = Annotated[Account, Depends(get_current_account)]
