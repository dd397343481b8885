"""Create a user directly in the DB.

Usage:
  python scripts/create_user.py --email alice@example.com --password '...' --role admin

NOTE: This is intended for local/dev and for promoting the first real admin.
"""

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from blood_platform.auth.crud import ROLES, create_user
from blood_platform.config import load_config
from blood_platform.db import Store, init_db


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--email", required=True)
    ap.add_argument("--password", required=True)
    ap.add_argument("--name", default="")
    ap.add_argument("--role", choices=list(ROLES), default="donor")
    args = ap.parse_args()

    cfg = load_config()
    init_db(cfg.DB_DSN, timeout=cfg.STORE_TIMEOUT_SECONDS)

    store = Store(dsn=cfg.DB_DSN, timeout=cfg.STORE_TIMEOUT_SECONDS)
    with store.connect() as conn:
        u = create_user(conn, email=args.email, password=args.password, name=args.name, role=args.role)

    print("Created user:")
    print(u)


if __name__ == "__main__":
    main()
