from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from blood_platform.db import insert_returning_id, is_row_id, like_contains
from blood_platform.errors import BadRequest, Forbidden, NotFound
from blood_platform.util.pagination import PageWindow, page_window
from blood_platform.util.time import utcnow_iso


STATUSES = ("pending", "inprogress", "done", "canceled")

MY_REQUESTS_PAGE_SIZE = 10

# Columns the requester (or an admin) may change after creation.
EDITABLE_FIELDS = (
    "recipient_name",
    "recipient_district",
    "recipient_sub_district",
    "hospital_name",
    "full_address",
    "blood_group",
    "donation_date",
    "donation_time",
    "request_message",
    "status",
)


def _to_column(value: Any) -> Any:
    if isinstance(value, date):
        return value.isoformat()
    return value


def public_request(row: Any | Dict[str, Any]) -> Dict[str, Any]:
    d = dict(row)
    donor = None
    if d.get("donor_email"):
        donor = {
            "id": int(d["donor_id"]) if d.get("donor_id") is not None else None,
            "name": d.get("donor_name") or "",
            "email": d.get("donor_email") or "",
        }
    return {
        "id": int(d["request_id"]),
        "requesterId": int(d["requester_id"]),
        "requesterName": d.get("requester_name") or "",
        "requesterEmail": d.get("requester_email") or "",
        "recipientName": d.get("recipient_name") or "",
        "recipientDistrict": d.get("recipient_district") or "",
        "recipientSubDistrict": d.get("recipient_sub_district") or "",
        "hospitalName": d.get("hospital_name") or "",
        "fullAddress": d.get("full_address") or "",
        "bloodGroup": d.get("blood_group") or "",
        "donationDate": d.get("donation_date") or "",
        "donationTime": d.get("donation_time") or "",
        "requestMessage": d.get("request_message") or "",
        "status": d.get("status") or "pending",
        "donor": donor,
        "createdAt": d.get("created_at"),
        "updatedAt": d.get("updated_at"),
    }


def get_request(conn: Any, request_id: int) -> Optional[Any]:
    if not is_row_id(request_id):
        return None
    return conn.execute(
        "SELECT * FROM donation_requests WHERE request_id=?",
        (int(request_id),),
    ).fetchone()


def require_request(conn: Any, request_id: int) -> Any:
    row = get_request(conn, request_id)
    if row is None:
        raise NotFound("Donation request not found")
    return row


def ensure_can_modify(row: Any, user: Dict[str, Any]) -> None:
    """Only the requester or an admin may change or delete a request."""
    if user.get("role") == "admin":
        return
    if int(row["requester_id"]) == int(user["id"]):
        return
    raise Forbidden("You can only modify your own donation requests")


def create_request(conn: Any, *, requester: Dict[str, Any], fields: Dict[str, Any]) -> Dict[str, Any]:
    now = utcnow_iso()
    request_id = insert_returning_id(
        conn,
        """
        INSERT INTO donation_requests (
            requester_id, requester_name, requester_email,
            recipient_name, recipient_district, recipient_sub_district,
            hospital_name, full_address, blood_group, donation_date, donation_time,
            request_message, status, created_at, updated_at
        )
        VALUES (?,?,?,?,?,?,?,?,?,?,?,?,?,?,?)
        """,
        (
            int(requester["id"]),
            requester.get("name") or "",
            requester["email"],
            fields["recipient_name"],
            fields.get("recipient_district") or "",
            fields.get("recipient_sub_district") or "",
            fields.get("hospital_name") or "",
            fields.get("full_address") or "",
            fields["blood_group"],
            _to_column(fields["donation_date"]),
            fields.get("donation_time") or "",
            fields.get("request_message") or "",
            "pending",
            now,
            now,
        ),
        pk="request_id",
    )
    return public_request(require_request(conn, request_id))


def list_requests(
    conn: Any,
    *,
    status: str | None = None,
    blood_group: str | None = None,
    district: str | None = None,
) -> List[Dict[str, Any]]:
    """Public listing; status/blood_group are exact, district is a case-insensitive substring."""
    where: List[str] = []
    params: List[Any] = []
    if status:
        where.append("status=?")
        params.append(status)
    if blood_group:
        where.append("blood_group=?")
        params.append(blood_group)
    if district:
        where.append("LOWER(recipient_district) LIKE ? ESCAPE '\\'")
        params.append(like_contains(district))

    sql = "SELECT * FROM donation_requests"
    if where:
        sql += " WHERE " + " AND ".join(where)
    sql += " ORDER BY created_at DESC, request_id DESC"
    return [public_request(r) for r in conn.execute(sql, tuple(params)).fetchall()]


def list_my_requests(
    conn: Any,
    *,
    requester_id: int,
    page: int = 1,
    status: str | None = None,
    page_size: int = MY_REQUESTS_PAGE_SIZE,
) -> Tuple[List[Dict[str, Any]], PageWindow]:
    """One page of a requester's own requests, newest first."""
    where = ["requester_id=?"]
    params: List[Any] = [int(requester_id)]
    if status:
        where.append("status=?")
        params.append(status)
    where_sql = " AND ".join(where)

    total = conn.execute(
        f"SELECT COUNT(*) AS n FROM donation_requests WHERE {where_sql}",
        tuple(params),
    ).fetchone()["n"]
    window = page_window(page=page, page_size=page_size, total=int(total))

    rows = conn.execute(
        f"""
        SELECT * FROM donation_requests
        WHERE {where_sql}
        ORDER BY created_at DESC, request_id DESC
        LIMIT ? OFFSET ?
        """,
        (*params, window.page_size, window.offset),
    ).fetchall()
    return [public_request(r) for r in rows], window


def update_request(conn: Any, request_id: int, fields: Dict[str, Any]) -> Dict[str, Any]:
    sets = [(k, _to_column(v)) for k, v in fields.items() if k in EDITABLE_FIELDS and v is not None]
    status = dict(sets).get("status")
    if status is not None and status not in STATUSES:
        raise BadRequest("Invalid status")
    if sets:
        sql = ", ".join(f"{k}=?" for k, _ in sets)
        params = [v for _, v in sets] + [utcnow_iso(), int(request_id)]
        conn.execute(f"UPDATE donation_requests SET {sql}, updated_at=? WHERE request_id=?", params)
    return public_request(require_request(conn, request_id))


def delete_request(conn: Any, request_id: int) -> bool:
    if not is_row_id(request_id):
        return False
    cur = conn.execute("DELETE FROM donation_requests WHERE request_id=?", (int(request_id),))
    return int(cur.rowcount or 0) > 0


def accept_request(conn: Any, request_id: int, *, donor: Dict[str, Any]) -> Dict[str, Any]:
    """Move a pending request to inprogress and attach the donor.

    The status guard lives in the UPDATE itself, so two donors racing for the same
    request can't both win.
    """
    if not is_row_id(request_id):
        raise NotFound("Donation request not found")
    cur = conn.execute(
        """
        UPDATE donation_requests
        SET status='inprogress', donor_id=?, donor_name=?, donor_email=?, updated_at=?
        WHERE request_id=? AND status='pending'
        """,
        (int(donor["id"]), donor.get("name") or "", donor["email"], utcnow_iso(), int(request_id)),
    )
    if int(cur.rowcount or 0) == 0:
        require_request(conn, request_id)
        raise BadRequest("Request is not pending")
    return public_request(require_request(conn, request_id))


def count_requests(conn: Any) -> int:
    return int(conn.execute("SELECT COUNT(*) AS n FROM donation_requests").fetchone()["n"])
