"""Database schema for the Blood Donation Coordination Platform.

SQLite is the default store; Postgres is supported for deployments.

We intentionally keep timestamps as ISO-8601 TEXT (UTC, with 'Z') for portability and to
avoid timezone surprises across engines. ISO strings sort lexicographically in time order,
so `ORDER BY created_at DESC` behaves correctly.

Denormalized name/email columns on donation_requests and funds mirror the user at write
time; they are not updated when a profile changes.

NOTE: The Postgres schema is generated from the SQLite schema with a small set of
transformations (types + autoincrement).
"""

from __future__ import annotations

import re


SCHEMA_SQLITE = r"""
PRAGMA foreign_keys = ON;

-- Users / Auth
-- password_hash is NULL for accounts created through social login.
CREATE TABLE IF NOT EXISTS users (
    user_id INTEGER PRIMARY KEY AUTOINCREMENT,
    email TEXT NOT NULL UNIQUE,
    password_hash TEXT,
    external_id TEXT,
    name TEXT NOT NULL DEFAULT '',
    avatar TEXT NOT NULL DEFAULT '',
    blood_group TEXT NOT NULL DEFAULT '',
    district TEXT NOT NULL DEFAULT '',
    sub_district TEXT NOT NULL DEFAULT '',
    role TEXT NOT NULL DEFAULT 'donor' CHECK (role IN ('donor','volunteer','admin')),
    status TEXT NOT NULL DEFAULT 'active' CHECK (status IN ('active','blocked')),
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_users_status_blood ON users (status, blood_group);
CREATE INDEX IF NOT EXISTS idx_users_role_status ON users (role, status);

-- Donation requests
CREATE TABLE IF NOT EXISTS donation_requests (
    request_id INTEGER PRIMARY KEY AUTOINCREMENT,
    requester_id INTEGER NOT NULL,
    requester_name TEXT NOT NULL DEFAULT '',
    requester_email TEXT NOT NULL,
    recipient_name TEXT NOT NULL,
    recipient_district TEXT NOT NULL DEFAULT '',
    recipient_sub_district TEXT NOT NULL DEFAULT '',
    hospital_name TEXT NOT NULL DEFAULT '',
    full_address TEXT NOT NULL DEFAULT '',
    blood_group TEXT NOT NULL,
    donation_date TEXT NOT NULL,
    donation_time TEXT NOT NULL DEFAULT '',
    request_message TEXT NOT NULL DEFAULT '',
    status TEXT NOT NULL DEFAULT 'pending' CHECK (status IN ('pending','inprogress','done','canceled')),
    donor_id INTEGER,
    donor_name TEXT,
    donor_email TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    FOREIGN KEY (requester_id) REFERENCES users(user_id)
);
CREATE INDEX IF NOT EXISTS idx_requests_requester_created ON donation_requests (requester_id, created_at);
CREATE INDEX IF NOT EXISTS idx_requests_status_blood ON donation_requests (status, blood_group);

-- Fund contributions (append-only)
CREATE TABLE IF NOT EXISTS funds (
    fund_id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id INTEGER NOT NULL,
    name TEXT NOT NULL DEFAULT '',
    email TEXT NOT NULL,
    amount REAL NOT NULL CHECK (amount > 0),
    transaction_id TEXT,
    created_at TEXT NOT NULL,
    FOREIGN KEY (user_id) REFERENCES users(user_id)
);
CREATE INDEX IF NOT EXISTS idx_funds_created ON funds (created_at);
"""


def _sqlite_to_postgres(ddl: str) -> str:
    # Remove SQLite pragmas
    lines: list[str] = []
    for line in ddl.splitlines():
        if line.strip().upper().startswith("PRAGMA "):
            continue
        lines.append(line)
    out = "\n".join(lines)

    # Types
    out = re.sub(r"\bREAL\b", "DOUBLE PRECISION", out)

    # AUTOINCREMENT primary keys
    out = re.sub(
        r"INTEGER\s+PRIMARY\s+KEY\s+AUTOINCREMENT",
        "BIGSERIAL PRIMARY KEY",
        out,
        flags=re.IGNORECASE,
    )
    out = re.sub(r"\bAUTOINCREMENT\b", "", out, flags=re.IGNORECASE)

    return out


SCHEMA_POSTGRES = _sqlite_to_postgres(SCHEMA_SQLITE)


def get_schema_sql(dialect: str) -> str:
    d = (dialect or "").lower()
    if d.startswith("post"):
        return SCHEMA_POSTGRES
    return SCHEMA_SQLITE
