# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Authentication API endpoints."""

from fastapi import APIRouter, Cookie, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from src.api.deps import SESSION_COOKIE, get_db, get_principal
from src.config import settings
from src.rbac.principal import Principal
from src.schemas.auth import AuthResponse, LoginRequest, PrincipalResponse
from src.schemas.common import MessageResponse
from src.services import auth_service, principal_service


def build_principal_response(principal: Principal) -> PrincipalResponse:
    """Build PrincipalResponse with a stable permission order."""
    return PrincipalResponse(
        user_id=principal.user_id,
        username=principal.username,
        email=principal.email,
        role=principal.role,
        organization_id=principal.organization_id,
        department_id=principal.department_id,
        is_super_user=principal.is_super_user,
        can_cross_organizations=principal.can_cross_organizations,
        can_cross_departments=principal.can_cross_departments,
        permissions=sorted(principal.permissions),
    )


router = APIRouter()


@router.post("/login", response_model=AuthResponse)
def login(
    data: LoginRequest,
    response: Response,
    db: Session = Depends(get_db),
) -> AuthResponse:
    """Login with username and password."""
    user = auth_service.authenticate(db, data.username, data.password)

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password",
        )

    user_id = user.id
    token = auth_service.create_session(db, user_id)

    response.set_cookie(
        key=SESSION_COOKIE,
        value=token,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
        max_age=86400 * settings.session_expiry_days,
    )

    # Login always reflects the current role assignments
    principal = principal_service.reload_principal(db, user_id)
    return AuthResponse(principal=build_principal_response(principal))


@router.post("/logout", response_model=MessageResponse)
def logout(
    response: Response,
    db: Session = Depends(get_db),
    session: str | None = Cookie(default=None),
) -> MessageResponse:
    """Logout and invalidate session."""
    if session:
        existing = auth_service.get_session(db, session)
        if existing:
            principal_service.invalidate_user(existing.user_id)
        auth_service.delete_session(db, session)

    response.delete_cookie(key=SESSION_COOKIE)
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=AuthResponse)
def get_me(principal: Principal = Depends(get_principal)) -> AuthResponse:
    """Get the current principal."""
    return AuthResponse(principal=build_principal_response(principal))
