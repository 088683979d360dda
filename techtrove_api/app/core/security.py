"""
Password hashing helpers.

Passwords are hashed with bcrypt using a per-password random salt and
the cost factor from ``settings.bcrypt_rounds`` (10 by default).  The
resulting hash is a self-describing ``$2b$...`` string, so verifying
needs nothing but the stored value.  Plain passwords are never stored
or logged.

bcrypt is deliberately slow, so the async variants push the work onto
Starlette's threadpool instead of blocking the event loop.
"""

from typing import Optional

import bcrypt
from starlette.concurrency import run_in_threadpool

from .config import settings

# bcrypt only looks at the first 72 bytes of its input.
MAX_PASSWORD_BYTES = 72


def hash_password(password: str, rounds: Optional[int] = None) -> str:
    """Return a salted bcrypt hash of ``password``.

    Parameters
    ----------
    password : str
        The plain text password.  Must encode to at most 72 bytes.
    rounds : Optional[int]
        Cost factor; defaults to ``settings.bcrypt_rounds``.

    Returns
    -------
    str
        The hash, including algorithm, cost and salt.
    """
    salt = bcrypt.gensalt(rounds=rounds or settings.bcrypt_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Check ``plain_password`` against a stored bcrypt hash.

    Accounts created through Google sign-in have no password at all;
    they, and any value that is not a valid bcrypt hash, never match.
    """
    if not hashed_password:
        return False
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        return False


async def hash_password_async(password: str) -> str:
    return await run_in_threadpool(hash_password, password)


async def verify_password_async(plain_password: str, hashed_password: Optional[str]) -> bool:
    return await run_in_threadpool(verify_password, plain_password, hashed_password)
