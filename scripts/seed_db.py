from __future__ import annotations

import argparse
import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.labour_portal.labour_portal.database.bootstrap import ensure_admin_user


def main() -> None:
    parser = argparse.ArgumentParser(description="Create the bootstrap admin account if it is missing.")
    parser.add_argument("--username", default="admin")
    parser.add_argument("--password", default="admin")
    parser.add_argument("--email", default="admin@example.com")
    args = parser.parse_args()

    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    created = ensure_admin_user(db_config, username=args.username, password=args.password, email=args.email)
    state = "created" if created else "already present"
    print(f"OK: admin user {args.username!r} {state} in {db_config.get('database')}")


if __name__ == "__main__":
    main()
