from __future__ import annotations

from typing import Any, Dict, List, Optional

from blood_platform.db import Store, insert_returning_id, is_row_id, is_unique_violation, like_contains
from blood_platform.errors import Conflict
from blood_platform.util.time import utcnow_iso

from .security import hash_password


ROLES = ("donor", "volunteer", "admin")
STATUSES = ("active", "blocked")

# Profile columns a user (or an admin on their behalf) may edit.
PROFILE_FIELDS = ("name", "avatar", "blood_group", "district", "sub_district")


def _debug(msg: str) -> None:
    print(f"[auth] {msg}")


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def public_user(row: Any | Dict[str, Any]) -> Dict[str, Any]:
    """Project a users row onto the API shape.

    Built from an explicit allow-list: password_hash and external_id never leave the store.
    """
    d = dict(row)
    return {
        "id": int(d["user_id"]),
        "name": d.get("name") or "",
        "email": d.get("email") or "",
        "avatar": d.get("avatar") or "",
        "bloodGroup": d.get("blood_group") or "",
        "district": d.get("district") or "",
        "subDistrict": d.get("sub_district") or "",
        "role": d.get("role") or "donor",
        "status": d.get("status") or "active",
        "createdAt": d.get("created_at"),
        "updatedAt": d.get("updated_at"),
    }


def get_user_by_email(conn: Any, email: str) -> Optional[Any]:
    e = normalize_email(email)
    if not e:
        return None
    return conn.execute(
        "SELECT * FROM users WHERE email=?",
        (e,),
    ).fetchone()


def get_user_by_id(conn: Any, user_id: int) -> Optional[Any]:
    if not is_row_id(user_id):
        return None
    return conn.execute(
        "SELECT * FROM users WHERE user_id=?",
        (int(user_id),),
    ).fetchone()


def create_user(
    conn: Any,
    *,
    email: str,
    password: str | None = None,
    external_id: str | None = None,
    name: str = "",
    avatar: str = "",
    blood_group: str = "",
    district: str = "",
    sub_district: str = "",
    role: str = "donor",
    status: str = "active",
) -> Dict[str, Any]:
    """Insert a user and return its public shape.

    Raises Conflict when the email is taken (checked up-front and again via the
    UNIQUE index, so concurrent registrations can't both succeed).
    """
    e = normalize_email(email)
    if not e:
        raise ValueError("email_blank")
    if role not in ROLES:
        raise ValueError("invalid_role")
    if status not in STATUSES:
        raise ValueError("invalid_status")
    if password is None and not external_id:
        raise ValueError("credentials_missing")

    existing = conn.execute("SELECT 1 FROM users WHERE email=?", (e,)).fetchone()
    if existing is not None:
        raise Conflict("User already exists")

    now = utcnow_iso()
    try:
        user_id = insert_returning_id(
            conn,
            """
            INSERT INTO users (
                email, password_hash, external_id, name, avatar, blood_group,
                district, sub_district, role, status, created_at, updated_at
            )
            VALUES (?,?,?,?,?,?,?,?,?,?,?,?)
            """,
            (
                e,
                hash_password(password) if password is not None else None,
                external_id,
                (name or "").strip(),
                (avatar or "").strip(),
                blood_group or "",
                (district or "").strip(),
                (sub_district or "").strip(),
                role,
                status,
                now,
                now,
            ),
            pk="user_id",
        )
    except Exception as exc:
        if is_unique_violation(exc):
            raise Conflict("User already exists") from exc
        raise

    row = get_user_by_id(conn, user_id)
    if row is None:
        raise RuntimeError(f"user {user_id} vanished after insert")
    return public_user(row)


def link_external_id(conn: Any, user_id: int, external_id: str) -> None:
    conn.execute(
        "UPDATE users SET external_id=?, updated_at=? WHERE user_id=? AND external_id IS NULL",
        (external_id, utcnow_iso(), int(user_id)),
    )


def update_profile(conn: Any, user_id: int, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Update editable profile columns; returns the public user or None if missing."""
    if not is_row_id(user_id):
        return None
    sets = [(k, v) for k, v in fields.items() if k in PROFILE_FIELDS and v is not None]
    if sets:
        sql = ", ".join(f"{k}=?" for k, _ in sets)
        params = [v for _, v in sets] + [utcnow_iso(), int(user_id)]
        conn.execute(f"UPDATE users SET {sql}, updated_at=? WHERE user_id=?", params)
    row = get_user_by_id(conn, user_id)
    return public_user(row) if row is not None else None


def set_user_status(conn: Any, user_id: int, status: str) -> Optional[Dict[str, Any]]:
    if status not in STATUSES:
        raise ValueError("invalid_status")
    if not is_row_id(user_id):
        return None
    conn.execute(
        "UPDATE users SET status=?, updated_at=? WHERE user_id=?",
        (status, utcnow_iso(), int(user_id)),
    )
    row = get_user_by_id(conn, user_id)
    return public_user(row) if row is not None else None


def set_user_role(conn: Any, user_id: int, role: str) -> Optional[Dict[str, Any]]:
    if role not in ROLES:
        raise ValueError("invalid_role")
    if not is_row_id(user_id):
        return None
    conn.execute(
        "UPDATE users SET role=?, updated_at=? WHERE user_id=?",
        (role, utcnow_iso(), int(user_id)),
    )
    row = get_user_by_id(conn, user_id)
    return public_user(row) if row is not None else None


def list_users(
    conn: Any,
    *,
    status: str | None = None,
    role: str | None = None,
) -> List[Dict[str, Any]]:
    where: List[str] = []
    params: List[Any] = []
    if status:
        where.append("status=?")
        params.append(status)
    if role:
        where.append("role=?")
        params.append(role)

    sql = "SELECT * FROM users"
    if where:
        sql += " WHERE " + " AND ".join(where)
    sql += " ORDER BY created_at DESC, user_id DESC"
    return [public_user(r) for r in conn.execute(sql, tuple(params)).fetchall()]


def search_donors(
    conn: Any,
    *,
    blood_group: str | None = None,
    district: str | None = None,
    sub_district: str | None = None,
) -> List[Dict[str, Any]]:
    """Active users matching the filters.

    blood_group is an exact match; district/sub_district are case-insensitive substrings.
    """
    where = ["status='active'"]
    params: List[Any] = []
    if blood_group:
        where.append("blood_group=?")
        params.append(blood_group)
    if district:
        where.append("LOWER(district) LIKE ? ESCAPE '\\'")
        params.append(like_contains(district))
    if sub_district:
        where.append("LOWER(sub_district) LIKE ? ESCAPE '\\'")
        params.append(like_contains(sub_district))

    rows = conn.execute(
        f"SELECT * FROM users WHERE {' AND '.join(where)} ORDER BY name ASC, user_id ASC",
        tuple(params),
    ).fetchall()
    return [public_user(r) for r in rows]


def count_users(conn: Any) -> int:
    return int(conn.execute("SELECT COUNT(*) AS n FROM users").fetchone()["n"])


def bootstrap_admin_if_needed(store: Store, *, email: str, password: str) -> Optional[Dict[str, Any]]:
    """Create the first admin user if the users table is empty.

    Controlled via AUTH_BOOTSTRAP_ADMIN_EMAIL / AUTH_BOOTSTRAP_ADMIN_PASSWORD so a new
    deployment has a deterministic way to reach the admin endpoints. Nothing happens
    when either is blank or when any user exists.
    """
    if not normalize_email(email) or not password:
        return None

    with store.connect() as conn:
        if count_users(conn) > 0:
            return None
        u = create_user(conn, email=email, password=password, name="Admin", role="admin")
        _debug(f"Bootstrapped initial admin user: email={u['email']}")
        return u
