"""
Account endpoints.

Password signup and login, plus the Google sign-in hook that creates
an account on first use.  Validation and credential checks live in
``UserService``; errors it raises are rendered by the handlers in
``main``.
"""

from fastapi import APIRouter, Depends

from ...schemas.user import (
    GoogleSignupRequest,
    GoogleSignupResponse,
    LoginRequest,
    LoginResponse,
    SignupRequest,
    SignupResponse,
)
from ...services import UserService
from ..deps import get_user_service

router = APIRouter()


@router.post("/signup", response_model=SignupResponse)
async def signup(
    body: SignupRequest,
    service: UserService = Depends(get_user_service),
) -> SignupResponse:
    """Register a user with name, email, username and password.

    Returns 400 when a field is missing and 409 when the email is
    already registered.
    """
    user_id = await service.signup(body)
    return SignupResponse(userId=user_id)


@router.post("/login", response_model=LoginResponse)
async def login(
    body: LoginRequest,
    service: UserService = Depends(get_user_service),
) -> LoginResponse:
    """Check email and password.  Any mismatch is a plain 401."""
    user = await service.login(body)
    return LoginResponse(user=user)


@router.post("/google-signup", response_model=GoogleSignupResponse)
async def google_signup(
    body: GoogleSignupRequest,
    service: UserService = Depends(get_user_service),
) -> GoogleSignupResponse:
    """Create the account for a Google identity or return the existing one."""
    user = await service.google_signup(body)
    return GoogleSignupResponse(user=user)
