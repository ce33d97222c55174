"""Create an admin principal and print its API key.

Run from the ``backend`` directory::

    python -m scripts.create_admin ops@example.com --name "Ops"

The raw key is printed once; only its hash is stored.
"""

import argparse
import sys

from app.core.database import SessionLocal, init_db
from app.repositories.admin_repository import AdminRepository
from app.schemas.admin import AdminCreate


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create an admin API key.")
    parser.add_argument("email", help="Admin email address")
    parser.add_argument("--name", default=None, help="Display name")
    args = parser.parse_args(argv)

    init_db()
    db = SessionLocal()
    try:
        repo = AdminRepository(db)
        if repo.get_by_email(args.email):
            print(f"Admin {args.email} already exists", file=sys.stderr)
            return 1
        admin, raw_key = repo.create(AdminCreate(email=args.email, name=args.name))
    finally:
        db.close()

    print(f"Created admin {admin.email} ({admin.id})")
    print(f"API key: {raw_key}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
