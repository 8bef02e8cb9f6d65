"""
Authentication endpoints.

Handles OTP-gated registration, login/logout, access token refresh and the
forgot-password flow. Tokens are only ever returned as cookies.
"""

import logging
import re
from typing import Annotated, Optional

from fastapi import APIRouter, Cookie, Response, status
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from baatcheet.auth.password import MAX_PASSWORD_BYTES
from ..cookies import REFRESH_COOKIE, set_auth_cookies, clear_auth_cookies
from ..deps import ServicesDep, CurrentAccount, raise_for_result

logger = logging.getLogger(__name__)

router = APIRouter()

MAX_PASSWORD_LENGTH = MAX_PASSWORD_BYTES
SPECIAL_CHARACTERS = re.compile(r"[!@#$%^&*]")


def _check_password_strength(value: str) -> str:
    if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    if not re.search(r"\d", value):
        raise ValueError("Password must contain at least one number")
    if not re.search(r"[A-Z]", value):
        raise ValueError("Password must contain at least one uppercase letter")
    if not SPECIAL_CHARACTERS.search(value):
        raise ValueError("Password must contain at least one special character")
    return value


# Request/Response models

class RegisterRequest(BaseModel):
    """Registration request."""
    model_config = ConfigDict(str_strip_whitespace=True)

    username: str = Field(..., min_length=3, max_length=30, description="Username (3-30 chars)")
    email: EmailStr = Field(..., description="Email that receives the OTP")
    password: str = Field(..., min_length=6, max_length=MAX_PASSWORD_LENGTH, description="Password")

    @field_validator("password")
    @classmethod
    def strong_password(cls, value: str) -> str:
        return _check_password_strength(value)


class VerifyOtpRequest(BaseModel):
    """Registration OTP confirmation."""
    model_config = ConfigDict(str_strip_whitespace=True)

    email: EmailStr
    otp: str = Field(..., min_length=1, description="6-digit code from the email")


class LoginRequest(BaseModel):
    """Login request."""
    model_config = ConfigDict(str_strip_whitespace=True)

    email: EmailStr
    password: str = Field(..., min_length=1, max_length=MAX_PASSWORD_LENGTH)


class ForgotPasswordRequest(BaseModel):
    """Forgot-password request."""
    model_config = ConfigDict(str_strip_whitespace=True)

    email: EmailStr


class ResetPasswordRequest(BaseModel):
    """Forgot-password OTP confirmation with the new password."""
    model_config = ConfigDict(str_strip_whitespace=True)

    email: EmailStr
    otp: str = Field(..., min_length=1)
    password: str = Field(..., min_length=6, max_length=MAX_PASSWORD_LENGTH)

    @field_validator("password")
    @classmethod
    def strong_password(cls, value: str) -> str:
        return _check_password_strength(value)


class UserResponse(BaseModel):
    """Public account projection."""
    id: str
    username: str
    email: str
    is_verified: bool


class AuthResponse(BaseModel):
    """Authentication response with account info."""
    success: bool
    message: Optional[str] = None
    user: Optional[UserResponse] = None


class MessageResponse(BaseModel):
    success: bool
    message: str


# Endpoints

@router.post("/register", response_model=MessageResponse)
def register(request: RegisterRequest, services: ServicesDep):
    """
    Stage a registration.

    Sends a 6-digit OTP to the email; the account is created on /verify-otp.
    """
    result = services.registration.stage_registration(
        username=request.username,
        email=request.email,
        password=request.password
    )

    if not result.success:
        raise_for_result(result)

    return MessageResponse(success=True, message=result.message)


@router.post("/verify-otp", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def verify_otp(request: VerifyOtpRequest, response: Response, services: ServicesDep):
    """
    Confirm the registration OTP.

    Creates the verified account and logs it in.
    """
    result = services.registration.verify_registration(
        email=request.email,
        otp=request.otp
    )

    if not result.success:
        raise_for_result(result)

    set_auth_cookies(response, result.tokens, secure=services.config.is_production)
    return AuthResponse(
        success=True,
        message=result.message,
        user=UserResponse(**result.account.public_view())
    )


@router.post("/login", response_model=AuthResponse)
def login(request: LoginRequest, response: Response, services: ServicesDep):
    """Login with email and password."""
    result = services.sessions.login(
        email=request.email,
        password=request.password
    )

    if not result.success:
        raise_for_result(result)

    set_auth_cookies(response, result.tokens, secure=services.config.is_production)
    return AuthResponse(
        success=True,
        message=result.message,
        user=UserResponse(**result.account.public_view())
    )


@router.get("/logout", response_model=MessageResponse)
def logout(current_account: CurrentAccount, response: Response, services: ServicesDep):
    """
    Logout the current account.

    Requires a valid access token cookie.
    """
    result = services.sessions.logout(current_account.account_id)

    clear_auth_cookies(response, secure=services.config.is_production)
    return MessageResponse(success=True, message=result.message)


@router.post("/refresh", response_model=MessageResponse)
def refresh(
    response: Response,
    services: ServicesDep,
    refresh_token: Annotated[Optional[str], Cookie(alias=REFRESH_COOKIE)] = None
):
    """
    Renew the access token cookie from the refresh token cookie.
    """
    result = services.sessions.refresh(refresh_token)

    if not result.success:
        raise_for_result(result)

    set_auth_cookies(response, result.tokens, secure=services.config.is_production)
    return MessageResponse(success=True, message=result.message)


@router.post("/forgotpassword", response_model=MessageResponse)
def forgot_password(request: ForgotPasswordRequest, services: ServicesDep):
    """Send a password reset OTP."""
    result = services.password_reset.request_reset(request.email)

    if not result.success:
        raise_for_result(result)

    return MessageResponse(success=True, message=result.message)


@router.post("/verify-forgotpassword-otp", response_model=MessageResponse)
def verify_forgot_password_otp(request: ResetPasswordRequest, services: ServicesDep):
    """
    Confirm the reset OTP and set the new password.

    No session is created; login again with the new password.
    """
    result = services.password_reset.verify_reset(
        email=request.email,
        otp=request.otp,
        new_password=request.password
    )

    if not result.success:
        raise_for_result(result)

    return MessageResponse(success=True, message=result.message)
