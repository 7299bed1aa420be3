"""Management CLI.

Usage:
    python -m firecert.cli create-user <email> <full_name> <owner|inspector|admin>
    python -m firecert.cli issue-token <user_id>
    python -m firecert.cli list-users
"""

import sys

from sqlalchemy import create_engine, select
from sqlalchemy.orm import Session

from firecert.auth.jwt import create_access_token
from firecert.auth.permissions import resolve_permissions
from firecert.config import settings
from firecert.models.user import User, UserRole


def _engine():
    return create_engine(settings.database_url_sync)


def create_user(email: str, full_name: str, role: str) -> None:
    try:
        user_role = UserRole(role)
    except ValueError:
        print(f"Unknown role: {role}")
        sys.exit(1)
    with Session(_engine()) as db:
        user = User(email=email, full_name=full_name, role=user_role)
        db.add(user)
        db.commit()
        print(user.id)


def issue_token(user_id: str) -> None:
    """Print an access token for a user (local testing; there is no login UI)."""
    with Session(_engine()) as db:
        user = db.get(User, user_id)
        if user is None:
            print(f"User not found: {user_id}")
            sys.exit(1)
        permissions = resolve_permissions(user.role.value, user.custom_permissions)
        print(create_access_token(user.id, user.role.value, permissions))


def list_users() -> None:
    with Session(_engine()) as db:
        users = db.execute(select(User).order_by(User.created_at)).scalars().all()
        for u in users:
            print(f"  {u.id}  {u.role.value:<9}  {u.email}")
        print(f"\n{len(users)} user(s)")


if __name__ == "__main__":
    cmd = sys.argv[1] if len(sys.argv) > 1 else ""
    args = sys.argv[2:]
    if cmd == "create-user" and len(args) == 3:
        create_user(*args)
    elif cmd == "issue-token" and len(args) == 1:
        issue_token(args[0])
    elif cmd == "list-users":
        list_users()
    else:
        print("Usage: python -m firecert.cli [create-user <email> <name> <role>|issue-token <user_id>|list-users]")
