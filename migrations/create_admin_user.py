#!/usr/bin/env python3
"""Create an admin console account, or reset its password, and grant it admin access.

Usage: python migrations/create_admin_user.py EMAIL PASSWORD
"""

import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from portfolio_api.auth.auth import hash_password  # noqa: E402
from portfolio_api.auth.database import AdminUser, SessionLocal, User, init_db  # noqa: E402

MIN_PASSWORD_LENGTH = 8


def create_admin_user(db, email: str, password: str) -> User:
    """Create or update the user and make sure an admin_users row exists for it."""
    email = email.strip().lower()
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

    user = db.query(User).filter(User.email == email).first()
    if user is None:
        user = User(email=email, password_hash=hash_password(password))
        db.add(user)
        db.flush()
        print(f"Created user {email}")
    else:
        user.password_hash = hash_password(password)
        print(f"Reset password for existing user {email}")

    if user.admin is None:
        db.add(AdminUser(user_id=user.id))
        print(f"Granted admin access to {email}")
    else:
        print(f"User {email} is already an admin")

    db.commit()
    db.refresh(user)
    return user


def run_migration(email: str, password: str):
    init_db()
    db = SessionLocal()
    try:
        create_admin_user(db, email, password)
    finally:
        db.close()
    print("\n✓ Admin user ready")


if __name__ == "__main__":
    if len(sys.argv) != 3:
        print(__doc__)
        sys.exit(1)
    try:
        run_migration(sys.argv[1], sys.argv[2])
    except ValueError as e:
        print(f"ERROR: {e}")
        sys.exit(1)
