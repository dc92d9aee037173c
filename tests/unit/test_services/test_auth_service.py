# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Tests for auth_service."""

from datetime import datetime, timedelta

from src.models import User
from src.models.session import Session as SessionModel
from src.security import get_password_hash, verify_password
from src.services import auth_service


def create_user(db_session, username: str = "existing", is_active: bool = True) -> User:
    """Helper to create a persisted user."""
    user = User(
        username=username,
        email=f"{username}@example.com",
        hashed_password=get_password_hash("Secret123!"),
        is_active=is_active,
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


def test_password_hash_roundtrip():
    hashed = get_password_hash("Secret123!")
    assert hashed != "Secret123!"
    assert verify_password("Secret123!", hashed) is True
    assert verify_password("wrong", hashed) is False


def test_verify_password_rejects_malformed_hash():
    assert verify_password("Secret123!", "not-a-bcrypt-hash") is False


def test_authenticate_success(db_session):
    user = create_user(db_session)
    assert auth_service.authenticate(db_session, "existing", "Secret123!").id == user.id


def test_authenticate_wrong_password(db_session):
    create_user(db_session)
    assert auth_service.authenticate(db_session, "existing", "nope") is None


def test_authenticate_unknown_user(db_session):
    assert auth_service.authenticate(db_session, "ghost", "Secret123!") is None


def test_authenticate_inactive_user(db_session):
    create_user(db_session, is_active=False)
    assert auth_service.authenticate(db_session, "existing", "Secret123!") is None


def test_create_and_get_session(db_session):
    user = create_user(db_session)
    token = auth_service.create_session(db_session, user.id)

    session = auth_service.get_session(db_session, token)
    assert session is not None
    assert session.user_id == user.id
    assert session.expires_at > datetime.utcnow()


def test_session_tokens_are_unique(db_session):
    user = create_user(db_session)
    first = auth_service.create_session(db_session, user.id)
    second = auth_service.create_session(db_session, user.id)
    assert first != second


def test_get_session_removes_expired(db_session):
    user = create_user(db_session)
    db_session.add(
        SessionModel(
            user_id=user.id,
            token="expired-token",
            expires_at=datetime.utcnow() - timedelta(minutes=1),
        )
    )
    db_session.commit()

    assert auth_service.get_session(db_session, "expired-token") is None
    assert (
        db_session.query(SessionModel).filter_by(token="expired-token").first() is None
    )


def test_delete_session(db_session):
    user = create_user(db_session)
    token = auth_service.create_session(db_session, user.id)

    assert auth_service.delete_session(db_session, token) is True
    assert auth_service.get_session(db_session, token) is None
    assert auth_service.delete_session(db_session, token) is False


def test_cleanup_expired_sessions(db_session):
    user = create_user(db_session)
    live = auth_service.create_session(db_session, user.id)
    db_session.add(
        SessionModel(
            user_id=user.id,
            token="stale",
            expires_at=datetime.utcnow() - timedelta(days=1),
        )
    )
    db_session.commit()

    assert auth_service.cleanup_expired_sessions(db_session) == 1
    assert auth_service.get_session(db_session, live) is not None


def test_user_lookups(db_session):
    user = create_user(db_session)
    assert auth_service.get_user_by_id(db_session, user.id).username == "existing"
    assert auth_service.get_user_by_username(db_session, "existing").id == user.id
    assert auth_service.get_user_by_username(db_session, "ghost") is None
