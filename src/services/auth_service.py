# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Authentication service: credentials and login sessions."""

import logging
import secrets
import uuid
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from src.config import settings
from src.models import User
from src.models.session import Session as SessionModel
from src.security import verify_password

logger = logging.getLogger(__name__)


def authenticate(db: Session, username: str, password: str) -> User | None:
    """Authenticate a user by username and password."""
    user = db.query(User).filter(User.username == username).first()
    if not user:
        return None
    if not verify_password(password, user.hashed_password):
        return None
    if not user.is_active:
        return None
    return user


def create_session(db: Session, user_id: uuid.UUID) -> str:
    """Create a new session for a user and return its token."""
    token = secrets.token_urlsafe(32)
    expires_at = datetime.utcnow() + timedelta(days=settings.session_expiry_days)

    session = SessionModel(
        user_id=user_id,
        token=token,
        expires_at=expires_at,
    )
    db.add(session)
    db.commit()

    logger.info("Session created for user %s", user_id)
    return token


def get_session(db: Session, token: str) -> SessionModel | None:
    """Get a valid session by token. Expired sessions are removed."""
    session = db.query(SessionModel).filter(SessionModel.token == token).first()
    if not session:
        return None
    if session.expires_at < datetime.utcnow():
        db.delete(session)
        db.commit()
        return None
    return session


def delete_session(db: Session, token: str) -> bool:
    """Delete a session by token."""
    session = db.query(SessionModel).filter(SessionModel.token == token).first()
    if session:
        user_id = session.user_id
        db.delete(session)
        db.commit()
        logger.info("Session closed for user %s", user_id)
        return True
    return False


def get_user_by_id(db: Session, user_id: uuid.UUID) -> User | None:
    """Get a user by ID."""
    return db.query(User).filter(User.id == user_id).first()


def get_user_by_username(db: Session, username: str) -> User | None:
    """Get a user by username."""
    return db.query(User).filter(User.username == username).first()


def cleanup_expired_sessions(db: Session) -> int:
    """Delete all expired sessions. Returns count of deleted sessions."""
    count = (
        db.query(SessionModel)
        .filter(SessionModel.expires_at < datetime.utcnow())
        .delete()
    )
    db.commit()
    return count
