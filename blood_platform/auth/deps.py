from __future__ import annotations

from typing import Any, Dict, Optional

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from blood_platform.context import AppContext, get_context
from blood_platform.errors import Forbidden, Unauthenticated

from .crud import get_user_by_id, public_user
from .security import decode_access_token, token_user_id


_bearer = HTTPBearer(auto_error=False)


def get_current_user(
    ctx: AppContext = Depends(get_context),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
) -> Dict[str, Any]:
    """Authenticate a request from `Authorization: Bearer <jwt>`.

    Order of checks:
      1. header present and well-formed            -> else 401
      2. signature + expiry valid                  -> else 401
      3. subject resolves to an existing user      -> else 401
      4. user is not blocked                       -> else 403

    Status is read from the store on every call, so blocking a user takes effect
    immediately even for tokens that are still valid.
    """

    # HTTPBearer(auto_error=False) yields None for a missing header or a non-Bearer scheme.
    if credentials is None or not credentials.credentials:
        raise Unauthenticated("Unauthorized: token missing")

    try:
        payload = decode_access_token(token=credentials.credentials, secret=ctx.cfg.AUTH_JWT_SECRET)
        user_id = token_user_id(payload)
    except jwt.ExpiredSignatureError:
        raise Unauthenticated("Unauthorized: token expired")
    except (jwt.InvalidTokenError, ValueError):
        raise Unauthenticated("Unauthorized: invalid token")

    with ctx.store.connect() as conn:
        row = get_user_by_id(conn, user_id)

    if row is None:
        raise Unauthenticated("Unauthorized: user not found")
    user = public_user(row)
    if user["status"] == "blocked":
        raise Forbidden("Your account is blocked")
    return user


def require_admin(user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
    if user.get("role") != "admin":
        raise Forbidden("Admin access required")
    return user


def is_admin(user: Dict[str, Any]) -> bool:
    return user.get("role") == "admin"
