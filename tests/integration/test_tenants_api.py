# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Integration tests for organization and department endpoints."""

import uuid

import pytest

from src.models.enums import UserRoleTier


@pytest.fixture
def tenants(make_org, make_department):
    org_a = make_org("Org A")
    org_b = make_org("Org B")
    return {
        "org_a": org_a,
        "org_b": org_b,
        "a1": make_department(org_a, "A1"),
        "a2": make_department(org_a, "A2"),
        "b1": make_department(org_b, "B1"),
    }


@pytest.fixture
def company_admin_client(login, make_user, tenants):
    make_user(
        "boss",
        role=UserRoleTier.COMPANY_ADMIN,
        organization=tenants["org_a"],
        roles=("Administrator",),
    )
    return login("boss")


@pytest.fixture
def agent_client(login, make_user, tenants):
    make_user(
        "agent",
        role=UserRoleTier.COMPANY_AGENT,
        organization=tenants["org_a"],
        department=tenants["a1"],
        roles=("Agent",),
    )
    return login("agent")


class TestOrganizations:
    """Tests for /api/v1/organizations."""

    def test_admin_creates_client_company(self, admin_client):
        response = admin_client.post("/api/v1/organizations", json={"name": "Gamma"})
        assert response.status_code == 201
        data = response.json()
        assert data["type"] == "client_company"
        assert data["is_active"] is True

        departments = admin_client.get(
            "/api/v1/departments", params={"organization_id": data["id"]}
        ).json()
        assert [d["name"] for d in departments] == ["Administration", "IT", "Support"]

    def test_company_admin_cannot_create(self, company_admin_client):
        response = company_admin_client.post("/api/v1/organizations", json={"name": "Gamma"})
        assert response.status_code == 403

    def test_company_admin_updates_own_organization(self, company_admin_client, tenants):
        response = company_admin_client.put(
            f"/api/v1/organizations/{tenants['org_a'].id}",
            json={"email": "helpdesk@a.example"},
        )
        assert response.status_code == 200
        assert response.json()["email"] == "helpdesk@a.example"

    def test_company_admin_cannot_update_foreign_organization(
        self, company_admin_client, tenants
    ):
        response = company_admin_client.put(
            f"/api/v1/organizations/{tenants['org_b'].id}", json={"name": "Taken"}
        )
        assert response.status_code == 403

    def test_agent_cannot_update_organization(self, agent_client, tenants):
        response = agent_client.put(
            f"/api/v1/organizations/{tenants['org_a'].id}", json={"name": "Renamed"}
        )
        assert response.status_code == 403

    def test_null_name_is_rejected(self, admin_client, tenants):
        response = admin_client.put(
            f"/api/v1/organizations/{tenants['org_a'].id}", json={"name": None}
        )
        assert response.status_code == 422

    def test_get_organization(self, admin_client, tenants):
        response = admin_client.get(f"/api/v1/organizations/{tenants['org_b'].id}")
        assert response.status_code == 200
        assert response.json()["name"] == "Org B"

        assert admin_client.get(f"/api/v1/organizations/{uuid.uuid4()}").status_code == 404


class TestDepartments:
    """Tests for /api/v1/departments."""

    def test_company_admin_creates_department(self, company_admin_client, tenants):
        response = company_admin_client.post(
            "/api/v1/departments",
            json={"name": "Field", "organization_id": str(tenants["org_a"].id)},
        )
        assert response.status_code == 201
        assert response.json()["organization_id"] == str(tenants["org_a"].id)

    def test_company_admin_cannot_create_in_foreign_organization(
        self, company_admin_client, tenants
    ):
        response = company_admin_client.post(
            "/api/v1/departments",
            json={"name": "Field", "organization_id": str(tenants["org_b"].id)},
        )
        assert response.status_code == 403

    def test_agent_cannot_create(self, agent_client, tenants):
        response = agent_client.post(
            "/api/v1/departments",
            json={"name": "Field", "organization_id": str(tenants["org_a"].id)},
        )
        assert response.status_code == 403

    def test_update_department(self, company_admin_client, tenants):
        response = company_admin_client.put(
            f"/api/v1/departments/{tenants['a2'].id}", json={"description": "Second line"}
        )
        assert response.status_code == 200
        assert response.json()["description"] == "Second line"

    def test_agent_reads_only_own_department(self, agent_client, tenants):
        assert agent_client.get(f"/api/v1/departments/{tenants['a1'].id}").status_code == 200
        assert agent_client.get(f"/api/v1/departments/{tenants['a2'].id}").status_code == 403

    def test_unknown_department(self, admin_client):
        assert admin_client.get(f"/api/v1/departments/{uuid.uuid4()}").status_code == 404


class TestAssignUserToDepartment:
    """Tests for POST /api/v1/departments/{department_id}/users."""

    def test_move_changes_scope_of_cached_principal(
        self, client, login, make_user, tenants
    ):
        agent = make_user(
            "agent",
            role=UserRoleTier.COMPANY_AGENT,
            organization=tenants["org_a"],
            department=tenants["a1"],
            roles=("Agent",),
        )
        make_user(
            "manager",
            role=UserRoleTier.COMPANY_MANAGER,
            organization=tenants["org_a"],
            roles=("Supervisor",),
        )

        login("agent")
        agent_token = client.cookies.get("session")
        assert client.get("/api/v1/auth/me").json()["principal"]["department_id"] == str(
            tenants["a1"].id
        )

        login("manager")
        response = client.post(
            f"/api/v1/departments/{tenants['a2'].id}/users",
            json={"user_id": str(agent.id)},
        )
        assert response.status_code == 200

        client.cookies.clear()
        client.cookies.set("session", agent_token)
        assert client.get("/api/v1/auth/me").json()["principal"]["department_id"] == str(
            tenants["a2"].id
        )

    def test_agent_cannot_move_users(self, agent_client, make_user, tenants):
        user = make_user("colleague", organization=tenants["org_a"])
        response = agent_client.post(
            f"/api/v1/departments/{tenants['a1'].id}/users",
            json={"user_id": str(user.id)},
        )
        assert response.status_code == 403

    def test_unknown_user(self, company_admin_client, tenants):
        response = company_admin_client.post(
            f"/api/v1/departments/{tenants['a1'].id}/users",
            json={"user_id": str(uuid.uuid4())},
        )
        assert response.status_code == 404
