from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query

from blood_platform.auth import get_current_user, is_admin, require_admin
from blood_platform.auth.crud import ROLES, STATUSES, list_users, set_user_role, set_user_status, update_profile
from blood_platform.context import AppContext, get_context
from blood_platform.errors import BadRequest, Forbidden, NotFound

from .schemas import ProfileUpdateRequest, RoleUpdateRequest, StatusUpdateRequest


router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("")
def admin_list_users(
    status: Optional[str] = Query(None),
    role: Optional[str] = Query(None),
    _admin: Dict[str, Any] = Depends(require_admin),
    ctx: AppContext = Depends(get_context),
) -> List[Dict[str, Any]]:
    if status and status not in STATUSES:
        raise BadRequest("Invalid status filter")
    if role and role not in ROLES:
        raise BadRequest("Invalid role filter")
    with ctx.store.connect() as conn:
        return list_users(conn, status=status, role=role)


@router.patch("/{user_id}/status")
def admin_set_status(
    user_id: int,
    payload: StatusUpdateRequest,
    _admin: Dict[str, Any] = Depends(require_admin),
    ctx: AppContext = Depends(get_context),
) -> Dict[str, Any]:
    with ctx.store.connect() as conn:
        u = set_user_status(conn, user_id, payload.status)
    if u is None:
        raise NotFound("User not found")
    return u


@router.patch("/{user_id}/role")
def admin_set_role(
    user_id: int,
    payload: RoleUpdateRequest,
    _admin: Dict[str, Any] = Depends(require_admin),
    ctx: AppContext = Depends(get_context),
) -> Dict[str, Any]:
    with ctx.store.connect() as conn:
        u = set_user_role(conn, user_id, payload.role)
    if u is None:
        raise NotFound("User not found")
    return u


@router.put("/{user_id}")
def update_user_profile(
    user_id: int,
    payload: ProfileUpdateRequest,
    user: Dict[str, Any] = Depends(get_current_user),
    ctx: AppContext = Depends(get_context),
) -> Dict[str, Any]:
    """Edit profile fields. Users may edit themselves; admins may edit anyone.

    Email, role and status are not editable here (the body schema rejects them).
    """
    if int(user["id"]) != int(user_id) and not is_admin(user):
        raise Forbidden("You can only update your own profile")

    with ctx.store.connect() as conn:
        u = update_profile(conn, user_id, payload.model_dump(exclude_unset=True))
    if u is None:
        raise NotFound("User not found")
    return u
