#!/usr/bin/env python3
"""Create an administrator account, or promote an existing user to admin.

Registration over the API only ever creates regular users.

Usage:
    python scripts/create_admin.py --email ops@example.com --name "Ops Team"
"""

import argparse
import getpass
import sys
from pathlib import Path

# Add parent directory to path to import sessionlog modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy.exc import SQLAlchemyError

from sessionlog.core.security import UserRole
from sessionlog.db.session import SessionLocal
from sessionlog.models.user import User
from sessionlog.services.auth_service import hash_password


def create_admin(email: str, full_name: str, password: str | None) -> User:
    """
    Create the admin user, or promote the existing account with that email.

    Args:
        email: Account email (case-insensitive)
        full_name: Display name, used only when creating
        password: Required when creating; ignored when promoting
    """
    db = SessionLocal()
    try:
        user = db.query(User).filter(User.email == email.lower()).first()
        if user:
            print(f"🔄 Promoting existing user {user.email} to admin...")
            user.role = UserRole.ADMIN.value
        else:
            if not password or len(password) < 8:
                raise ValueError("Password must be at least 8 characters")
            print(f"🔄 Creating admin {email.lower()}...")
            user = User(
                email=email.lower(),
                full_name=full_name,
                password_hash=hash_password(password),
                role=UserRole.ADMIN.value,
            )
            db.add(user)

        db.commit()
        db.refresh(user)
        print(f"✅ Admin ready: {user.email} ({user.id})")
        return user

    except SQLAlchemyError as e:
        db.rollback()
        print(f"❌ Error creating admin: {e}")
        raise
    finally:
        db.close()


def main() -> int:
    parser = argparse.ArgumentParser(description="Create or promote a SessionLog administrator")
    parser.add_argument("--email", required=True)
    parser.add_argument("--name", default="Administrator", help="Full name for a new account")
    parser.add_argument(
        "--password",
        help="Password for a new account (prompted when omitted)",
    )
    args = parser.parse_args()

    password = args.password
    if password is None:
        password = getpass.getpass("Password (leave empty to only promote): ") or None

    try:
        create_admin(args.email, args.name, password)
    except (SQLAlchemyError, ValueError) as e:
        print(f"❌ Script failed: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
