#!/usr/bin/env python3
"""
Create an admin profile, or promote an existing profile to admin.

Profiles registered through the API always get the "user" role, so the
first admin has to be created here.

Usage:
    python scripts/create_admin.py --user-id=UID --name="Jane Doe" [--email=jane@example.com]

Options:
    --dry-run    Show what would change without writing
"""
import argparse
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlmodel import Session

from app.core.database import create_db_and_tables, engine
from app.core.store import DocumentNotFoundError, DocumentStore
from app.planning.permissions import ADMIN_ROLE


def main():
    parser = argparse.ArgumentParser(description="Create or promote an admin user")
    parser.add_argument("--user-id", required=True, help="User ID from the identity provider")
    parser.add_argument("--name", help="Display name (required for new profiles)")
    parser.add_argument("--email", default="", help="Email address")
    parser.add_argument("--dry-run", action="store_true", help="Do not write changes")
    args = parser.parse_args()

    create_db_and_tables()

    with Session(engine) as session:
        store = DocumentStore(session)
        try:
            profile = store.get("users", args.user_id)
        except DocumentNotFoundError:
            profile = None

        if profile is not None:
            if profile.role == ADMIN_ROLE:
                print(f"{profile.name} ({profile.id}) is already an admin.")
                return
            print(f"Promoting {profile.name} ({profile.id}) to admin.")
            if not args.dry_run:
                store.update("users", profile.id, {"role": ADMIN_ROLE})
        else:
            if not args.name:
                print("ERROR: --name is required when creating a new profile")
                sys.exit(1)
            print(f"Creating admin profile {args.name} ({args.user_id}).")
            if not args.dry_run:
                store.create(
                    "users",
                    {
                        "id": args.user_id,
                        "name": args.name,
                        "email": args.email,
                        "role": ADMIN_ROLE,
                    },
                )

        if args.dry_run:
            print("--- DRY RUN: No changes made ---")


if __name__ == "__main__":
    main()
