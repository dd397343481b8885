"""Password hashing and the bearer tokens handed out at login.

A token names a user and nothing else: `sub` is the decimal user id. Role and
status are looked up on every request (see auth.deps), so promoting, demoting
or blocking an account never requires reissuing its token.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from passlib.context import CryptContext

from blood_platform.db import is_row_id


_pwd = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
_JWT_ALG = "HS256"


def hash_password(password: str) -> str:
    if not password:
        raise ValueError("password_blank")
    return _pwd.hash(password)


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    # Accounts created through social login have no hash and never match.
    if not password or not password_hash:
        return False
    try:
        return _pwd.verify(password, password_hash)
    except (ValueError, TypeError):
        return False


def create_access_token(
    *,
    secret: str,
    user_id: int,
    expires_minutes: int,
    now: Optional[datetime] = None,
) -> str:
    if not secret:
        raise ValueError("jwt_secret_blank")
    if not is_row_id(user_id):
        raise ValueError(f"not a user id: {user_id!r}")

    issued = now or datetime.now(timezone.utc)
    lifetime = timedelta(minutes=max(1, int(expires_minutes)))
    return jwt.encode(
        {
            "sub": str(int(user_id)),
            "iat": int(issued.timestamp()),
            "exp": int((issued + lifetime).timestamp()),
        },
        secret,
        algorithm=_JWT_ALG,
    )


def decode_access_token(*, token: str, secret: str) -> Dict[str, Any]:
    """Verify signature and expiry; raises jwt.ExpiredSignatureError / jwt.InvalidTokenError."""
    if not token:
        raise ValueError("token_blank")
    if not secret:
        raise ValueError("jwt_secret_blank")
    return jwt.decode(token, secret, algorithms=[_JWT_ALG], options={"require": ["sub", "exp"]})


def token_user_id(payload: Dict[str, Any]) -> int:
    """The user id a decoded token was issued for."""
    sub = str(payload.get("sub") or "")
    if not (sub.isascii() and sub.isdigit()) or not is_row_id(sub):
        raise jwt.InvalidTokenError("token subject is not a user id")
    return int(sub)
