# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
import os
from collections.abc import Callable

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Set test environment before importing app
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only-32chars!"  # nosec - test-only secret  # noqa: S105
os.environ["DATABASE_URL"] = "sqlite:///./test.db"
os.environ["ENVIRONMENT"] = "test"
os.environ["DEV_AUTH_BYPASS"] = "false"

from src.database import get_db
from src.main import app
from src.models import Department, Organization, Ticket, User
from src.models.base import Base
from src.models.enums import OrganizationType, UserRoleTier
from src.rbac.permissions import WILDCARD
from src.rbac.principal import build_principal
from src.security import get_password_hash
from src.services import principal_service, rbac_service
from src.services.rbac_seed_service import seed_rbac_data

# Test database setup
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

TEST_PASSWORD = "testpassword123"  # noqa: S105

# Actor used by fixtures to assign roles
SEED_ACTOR = build_principal(
    user_id=principal_service.DEV_PRINCIPAL_ID,
    role=UserRoleTier.SUPER_ADMIN,
    permissions={WILDCARD},
)


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh database for each test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def clear_principal_cache():
    """Start and end each test with an empty principal cache."""
    principal_service.invalidate_all()
    yield
    principal_service.invalidate_all()


@pytest.fixture(scope="function")
def client(db_session):
    """Create a test client with database override."""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def seeded(db_session):
    """Seed the core permissions and default roles."""
    seed_rbac_data(db_session)
    return db_session


@pytest.fixture
def make_org(db_session) -> Callable[..., Organization]:
    """Factory for organizations."""

    def _make(name: str = "Acme", type: OrganizationType = OrganizationType.CLIENT_COMPANY):
        org = Organization(name=name, type=type)
        db_session.add(org)
        db_session.commit()
        db_session.refresh(org)
        return org

    return _make


@pytest.fixture
def make_department(db_session) -> Callable[..., Department]:
    """Factory for departments."""

    def _make(organization: Organization, name: str = "Support"):
        department = Department(name=name, organization_id=organization.id)
        db_session.add(department)
        db_session.commit()
        db_session.refresh(department)
        return department

    return _make


@pytest.fixture
def make_user(seeded) -> Callable[..., User]:
    """Factory for users with a role tier and seeded role assignments."""
    db_session = seeded

    def _make(
        username: str,
        role: UserRoleTier = UserRoleTier.COMPANY_USER,
        organization: Organization | None = None,
        department: Department | None = None,
        roles: tuple[str, ...] = (),
        is_active: bool = True,
    ) -> User:
        user = User(
            username=username,
            email=f"{username}@example.com",
            hashed_password=get_password_hash(TEST_PASSWORD),
            role=role,
            organization_id=organization.id if organization else None,
            department_id=department.id if department else None,
            is_active=is_active,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)

        for role_name in roles:
            db_role = rbac_service.get_role_by_name(db_session, role_name)
            rbac_service.assign_role_to_user(db_session, SEED_ACTOR, user.id, db_role.id)
        return user

    return _make


@pytest.fixture
def make_ticket(db_session) -> Callable[..., Ticket]:
    """Factory for tickets placed directly in the database."""

    def _make(title: str = "Printer on fire", **kwargs) -> Ticket:
        ticket = Ticket(title=title, **kwargs)
        db_session.add(ticket)
        db_session.commit()
        db_session.refresh(ticket)
        return ticket

    return _make


@pytest.fixture
def login(client) -> Callable[[str], TestClient]:
    """Log a user in on the shared test client."""

    def _login(username: str, password: str = TEST_PASSWORD) -> TestClient:
        response = client.post(
            "/api/v1/auth/login",
            json={"username": username, "password": password},
        )
        assert response.status_code == 200
        return client

    return _login


@pytest.fixture
def admin_user(make_user) -> User:
    """Create a super admin with the Super Admin role."""
    return make_user("admin", role=UserRoleTier.SUPER_ADMIN, roles=("Super Admin",))


@pytest.fixture
def admin_client(login, admin_user) -> TestClient:
    """Create an authenticated super admin test client."""
    return login(admin_user.username)
