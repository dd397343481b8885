from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends

from blood_platform.auth import get_current_user
from blood_platform.auth.crud import create_user, get_user_by_email, link_external_id, public_user
from blood_platform.auth.security import create_access_token, verify_password
from blood_platform.context import AppContext, get_context
from blood_platform.errors import InvalidCredentials

from .schemas import FederatedLoginRequest, LoginRequest, RegisterRequest


router = APIRouter(prefix="/api/auth", tags=["auth"])


def _issue(ctx: AppContext, user: Dict[str, Any]) -> Dict[str, Any]:
    token = create_access_token(
        secret=ctx.cfg.AUTH_JWT_SECRET,
        user_id=int(user["id"]),
        expires_minutes=int(ctx.cfg.AUTH_TOKEN_EXPIRE_MINUTES),
    )
    return {"token": token, "user": user}


@router.post("/register", status_code=201)
def register(payload: RegisterRequest, ctx: AppContext = Depends(get_context)) -> Dict[str, Any]:
    """Self-serve registration. New accounts are active donors."""
    with ctx.store.connect() as conn:
        u = create_user(
            conn,
            email=payload.email,
            password=payload.password,
            name=payload.name,
            avatar=payload.avatar,
            blood_group=payload.blood_group or "",
            district=payload.district,
            sub_district=payload.sub_district,
            role="donor",
        )
    return _issue(ctx, u)


@router.post("/login")
def login(payload: LoginRequest, ctx: AppContext = Depends(get_context)) -> Dict[str, Any]:
    # Same error for unknown email, social-only account, and wrong password.
    with ctx.store.connect() as conn:
        row = get_user_by_email(conn, payload.email)
    if row is None or not verify_password(payload.password, row["password_hash"]):
        raise InvalidCredentials()
    return _issue(ctx, public_user(row))


@router.post("/google-login")
def google_login(payload: FederatedLoginRequest, ctx: AppContext = Depends(get_context)) -> Dict[str, Any]:
    """Upsert-then-issue for social sign-in.

    The first login creates a donor with placeholder profile fields; later logins
    reuse the account (linking the external id if the user originally registered
    with a password).
    """
    ident = ctx.identity.verify(
        email=payload.email,
        display_name=payload.display_name,
        external_id=payload.external_id,
        avatar=payload.photo_url,
        id_token=payload.id_token,
    )

    with ctx.store.connect() as conn:
        row = get_user_by_email(conn, ident.email)
        if row is None:
            u = create_user(
                conn,
                email=ident.email,
                external_id=ident.external_id,
                name=ident.display_name,
                avatar=ident.avatar,
                role="donor",
            )
        else:
            if not row["external_id"] and ident.external_id:
                link_external_id(conn, int(row["user_id"]), ident.external_id)
            u = public_user(row)
    return _issue(ctx, u)


@router.get("/me")
def me(user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
    return {"user": user}
