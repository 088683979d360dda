"""
Business logic for user accounts.

``UserService`` covers the three ways an account comes into play:
password signup, password login and Google sign-in (which creates the
account on first use).  Emails are normalised (trimmed, lower-cased)
on every path so that lookups and the unique index agree.
"""

import logging
from typing import Any, Dict

from pymongo.errors import DuplicateKeyError

from ..core.db import store_errors, utc_now
from ..core.errors import AuthError, ConflictError, StoreError, ValidationError
from ..core.security import MAX_PASSWORD_BYTES, hash_password_async, verify_password_async
from ..schemas.user import (
    GoogleSignupRequest,
    GoogleUserRead,
    LoginRequest,
    SignupRequest,
    UserRead,
)

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"
EMAIL_TAKEN = "Email already registered"


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserService:
    """Account operations against the users collection.

    Parameters
    ----------
    collection
        An async collection (``AsyncCollection`` or the in-memory
        equivalent) holding user documents.
    """

    def __init__(self, collection: Any) -> None:
        self.collection = collection

    async def signup(self, data: SignupRequest) -> str:
        """Register a password account and return its id.

        Raises ``ValidationError`` when a field is missing and
        ``ConflictError`` when the email is taken.  The duplicate check
        is backed by a unique index, so two concurrent signups with the
        same email cannot both succeed.
        """
        email = normalize_email(data.email or "")
        if not (data.name and email and data.username and data.password):
            raise ValidationError("All fields are required")
        if len(data.password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")

        logger.info("Registering user %s", email)
        with store_errors("signup"):
            if await self.collection.find_one({"email": email}):
                raise ConflictError(EMAIL_TAKEN)

            new_user = {
                "name": data.name,
                "email": email,
                "username": data.username,
                "password": await hash_password_async(data.password),
                "createdAt": utc_now(),
            }
            try:
                result = await self.collection.insert_one(new_user)
            except DuplicateKeyError as exc:
                # Lost the race against a concurrent signup.
                logger.warning("Duplicate signup for %s rejected by unique index", email)
                raise ConflictError(EMAIL_TAKEN) from exc

        logger.info("User %s registered with id %s", email, result.inserted_id)
        return str(result.inserted_id)

    async def login(self, data: LoginRequest) -> UserRead:
        """Check credentials and return the public user view.

        Unknown emails and wrong passwords produce the same
        ``AuthError`` so callers cannot tell which emails exist.
        """
        email = normalize_email(data.email or "")
        if not (email and data.password):
            raise ValidationError("Email and password required")

        with store_errors("login"):
            user = await self.collection.find_one({"email": email})
        if not user or not await verify_password_async(data.password, user.get("password")):
            raise AuthError(INVALID_CREDENTIALS)

        return UserRead(
            id=str(user["_id"]),
            name=user.get("name"),
            email=user["email"],
            username=user.get("username"),
        )

    async def google_signup(self, data: GoogleSignupRequest) -> GoogleUserRead:
        """Return the account for a Google identity, creating it if needed.

        An existing account (password-based or not) is returned as is;
        the Google id is not merged into it.
        """
        email = normalize_email(data.email or "")
        if not (email and data.name and data.googleId):
            raise ValidationError("Missing required fields")

        with store_errors("google_signup"):
            user = await self.collection.find_one({"email": email})
            if user is None:
                user = {
                    "name": data.name,
                    "email": email,
                    "googleId": data.googleId,
                    "createdAt": utc_now(),
                }
                try:
                    await self.collection.insert_one(user)
                    logger.info("Created Google account for %s", email)
                except DuplicateKeyError as exc:
                    # A concurrent request created it first; use that one.
                    user = await self.collection.find_one({"email": email})
                    if user is None:
                        raise StoreError(str(exc)) from exc
        return _google_user_view(user)


def _google_user_view(user: Dict[str, Any]) -> GoogleUserRead:
    return GoogleUserRead(
        id=str(user["_id"]),
        name=user.get("name"),
        email=user["email"],
        username=user.get("username"),
        googleId=user.get("googleId"),
        createdAt=user.get("createdAt"),
    )
