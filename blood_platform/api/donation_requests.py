from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query

from blood_platform.auth import get_current_user
from blood_platform.context import AppContext, get_context
from blood_platform.donations.crud import (
    STATUSES,
    accept_request,
    create_request,
    delete_request,
    ensure_can_modify,
    list_my_requests,
    list_requests,
    public_request,
    require_request,
    update_request,
)
from blood_platform.errors import BadRequest
from blood_platform.util.normalization import normalize_blood_group

from .schemas import DonationRequestCreate, DonationRequestUpdate


router = APIRouter(prefix="/api/donation-requests", tags=["donation-requests"])


def _status_filter(status: Optional[str]) -> Optional[str]:
    s = (status or "").strip().lower() or None
    if s is not None and s not in STATUSES:
        raise BadRequest("Invalid status filter")
    return s


def blood_group_filter(value: Optional[str]) -> Optional[str]:
    try:
        return normalize_blood_group(value)
    except ValueError:
        raise BadRequest("Invalid blood group filter")


# Declared before /{request_id} so "my" is never parsed as an id.
@router.get("/my")
def my_requests(
    page: int = Query(1, ge=1),
    status: Optional[str] = Query(None),
    user: Dict[str, Any] = Depends(get_current_user),
    ctx: AppContext = Depends(get_context),
) -> Dict[str, Any]:
    """The caller's own requests, 10 per page, newest first."""
    with ctx.store.connect() as conn:
        items, window = list_my_requests(
            conn,
            requester_id=int(user["id"]),
            page=page,
            status=_status_filter(status),
        )
    return {
        "requests": items,
        "totalPages": window.total_pages,
        "currentPage": window.page,
        "total": window.total,
    }


@router.get("")
def list_all(
    status: Optional[str] = Query(None),
    blood_group: Optional[str] = Query(None, alias="bloodGroup"),
    district: Optional[str] = Query(None),
    ctx: AppContext = Depends(get_context),
) -> List[Dict[str, Any]]:
    with ctx.store.connect() as conn:
        return list_requests(
            conn,
            status=_status_filter(status),
            blood_group=blood_group_filter(blood_group),
            district=(district or "").strip() or None,
        )


@router.get("/{request_id}")
def get_one(request_id: int, ctx: AppContext = Depends(get_context)) -> Dict[str, Any]:
    with ctx.store.connect() as conn:
        return public_request(require_request(conn, request_id))


@router.post("", status_code=201)
def create(
    payload: DonationRequestCreate,
    user: Dict[str, Any] = Depends(get_current_user),
    ctx: AppContext = Depends(get_context),
) -> Dict[str, Any]:
    with ctx.store.connect() as conn:
        return create_request(conn, requester=user, fields=payload.model_dump())


@router.put("/{request_id}")
def update(
    request_id: int,
    payload: DonationRequestUpdate,
    user: Dict[str, Any] = Depends(get_current_user),
    ctx: AppContext = Depends(get_context),
) -> Dict[str, Any]:
    with ctx.store.connect() as conn:
        row = require_request(conn, request_id)
        ensure_can_modify(row, user)
        return update_request(conn, request_id, payload.model_dump(exclude_unset=True))


@router.delete("/{request_id}")
def delete(
    request_id: int,
    user: Dict[str, Any] = Depends(get_current_user),
    ctx: AppContext = Depends(get_context),
) -> Dict[str, Any]:
    with ctx.store.connect() as conn:
        row = require_request(conn, request_id)
        ensure_can_modify(row, user)
        delete_request(conn, request_id)
    return {"message": "Donation request deleted", "id": request_id}


@router.post("/{request_id}/donate")
def donate(
    request_id: int,
    user: Dict[str, Any] = Depends(get_current_user),
    ctx: AppContext = Depends(get_context),
) -> Dict[str, Any]:
    """Accept a pending request: status -> inprogress, caller attached as donor."""
    with ctx.store.connect() as conn:
        return accept_request(conn, request_id, donor=user)
