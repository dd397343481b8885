from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query

from blood_platform.auth.crud import search_donors
from blood_platform.context import AppContext, get_context

from .donation_requests import blood_group_filter


router = APIRouter(prefix="/api/donors", tags=["donors"])


@router.get("/search")
def search(
    blood_group: Optional[str] = Query(None, alias="bloodGroup"),
    district: Optional[str] = Query(None),
    sub_district: Optional[str] = Query(None, alias="subDistrict"),
    ctx: AppContext = Depends(get_context),
) -> List[Dict[str, Any]]:
    """Active users only. District filters are case-insensitive substrings."""
    with ctx.store.connect() as conn:
        return search_donors(
            conn,
            blood_group=blood_group_filter(blood_group),
            district=(district or "").strip() or None,
            sub_district=(sub_district or "").strip() or None,
        )
