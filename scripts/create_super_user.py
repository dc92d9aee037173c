#!/usr/bin/env python3
# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Seed RBAC data and create an initial super admin account."""

from __future__ import annotations

import argparse
import getpass
import sys
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT_DIR))

from src.database import SessionLocal  # noqa: E402
from src.models import User, UserRoleTier  # noqa: E402
from src.rbac.permissions import WILDCARD  # noqa: E402
from src.rbac.principal import build_principal  # noqa: E402
from src.rbac.roles import SUPER_ADMIN_ROLE  # noqa: E402
from src.security import get_password_hash  # noqa: E402
from src.services import auth_service, rbac_service  # noqa: E402
from src.services.rbac_seed_service import seed_rbac_data  # noqa: E402


def create_super_user(username: str, email: str, password: str) -> int:
    """Create the account and give it the Super Admin role. Returns an exit code."""
    db = SessionLocal()
    try:
        seed_rbac_data(db)

        if auth_service.get_user_by_username(db, username):
            print(f"User '{username}' already exists.")
            return 1

        user = User(
            username=username,
            email=email,
            hashed_password=get_password_hash(password),
            role=UserRoleTier.SUPER_ADMIN,
            is_active=True,
        )
        db.add(user)
        db.commit()
        db.refresh(user)

        # The new account assigns its own role
        actor = build_principal(
            user_id=user.id, role=UserRoleTier.SUPER_ADMIN, permissions={WILDCARD}
        )
        role = rbac_service.get_role_by_name(db, SUPER_ADMIN_ROLE)
        rbac_service.assign_role_to_user(db, actor, user.id, role.id)

        print(f"Super admin '{username}' created ({user.id}).")
        return 0
    finally:
        db.close()


def main() -> None:
    """Entry point for the bootstrap CLI."""
    parser = argparse.ArgumentParser(
        description="Seed roles and permissions, then create a super admin."
    )
    parser.add_argument("username", help="Login name of the new account.")
    parser.add_argument("email", help="E-mail address of the new account.")
    parser.add_argument(
        "--password",
        help="Password (prompted for when omitted).",
    )
    args = parser.parse_args()

    password = args.password or getpass.getpass("Password: ")
    if len(password) < 8:
        print("Password must be at least 8 characters.")
        sys.exit(2)

    sys.exit(create_super_user(args.username, args.email, password))


if __name__ == "__main__":
    main()
