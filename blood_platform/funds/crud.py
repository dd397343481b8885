from __future__ import annotations

from typing import Any, Dict, List

from blood_platform.db import insert_returning_id
from blood_platform.util.time import utcnow_iso


def public_fund(row: Any | Dict[str, Any]) -> Dict[str, Any]:
    d = dict(row)
    return {
        "id": int(d["fund_id"]),
        "userId": int(d["user_id"]),
        "name": d.get("name") or "",
        "email": d.get("email") or "",
        "amount": float(d["amount"]),
        "transactionId": d.get("transaction_id"),
        "createdAt": d.get("created_at"),
    }


def create_fund(
    conn: Any,
    *,
    user: Dict[str, Any],
    amount: float,
    transaction_id: str | None = None,
) -> Dict[str, Any]:
    """Record a contribution. Funds are append-only; there is no update or delete."""
    if amount is None or float(amount) <= 0:
        raise ValueError("amount_must_be_positive")
    fund_id = insert_returning_id(
        conn,
        """
        INSERT INTO funds (user_id, name, email, amount, transaction_id, created_at)
        VALUES (?,?,?,?,?,?)
        """,
        (int(user["id"]), user.get("name") or "", user["email"], float(amount), transaction_id, utcnow_iso()),
        pk="fund_id",
    )
    row = conn.execute("SELECT * FROM funds WHERE fund_id=?", (fund_id,)).fetchone()
    return public_fund(row)


def list_funds(conn: Any) -> List[Dict[str, Any]]:
    rows = conn.execute("SELECT * FROM funds ORDER BY created_at DESC, fund_id DESC").fetchall()
    return [public_fund(r) for r in rows]


def total_funds(conn: Any) -> float:
    row = conn.execute("SELECT COALESCE(SUM(amount), 0) AS total FROM funds").fetchone()
    return float(row["total"] or 0)
