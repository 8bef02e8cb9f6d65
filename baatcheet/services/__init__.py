"""
Services layer for BaatCheet.

This module provides the auth business logic as reusable services that the
HTTP API (or any other interface) consumes.
"""

from .base import BaseService, ServiceContext
from .results import AuthResult, AuthTokens, AuthErrorCode
from .session_service import SessionService
from .registration_service import RegistrationService
from .password_reset_service import PasswordResetService
from .user_service import UserService, AccountPage

__all__ = [
    # Base
    "BaseService",
    "ServiceContext",
    # Services
    "SessionService",
    "RegistrationService",
    "PasswordResetService",
    "UserService",
    # Data classes
    "AuthResult",
    "AuthTokens",
    "AuthErrorCode",
    "AccountPage",
]


def create_services(context: ServiceContext = None):
    """
    Factory function to create all services with proper dependencies.

    Args:
        context: Optional ServiceContext (creates one if not provided)

    Returns:
        Tuple of (context, sessions, registration, password_reset, users)
    """
    if context is None:
        context = ServiceContext.create()

    sessions = SessionService(context)
    registration = RegistrationService(context, sessions)
    password_reset = PasswordResetService(context)
    users = UserService(context)

    return (
        context,
        sessions,
        registration,
        password_reset,
        users
    )
