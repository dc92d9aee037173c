# tests/integration/test_rbac_api.py
import uuid

import pytest

from src.models.enums import UserRoleTier
from src.services import rbac_service


@pytest.fixture
def agent_client(login, make_user):
    make_user("agent", role=UserRoleTier.COMPANY_AGENT, roles=("Agent",))
    return login("agent")


def role_id(db_session, name):
    return rbac_service.get_role_by_name(db_session, name).id


def permission_id(db_session, name):
    return rbac_service.get_permission_by_name(db_session, name).id


class TestRbacReads:
    def test_list_permissions(self, admin_client):
        response = admin_client.get("/api/v1/rbac/permissions")
        assert response.status_code == 200
        names = {p["name"] for p in response.json()}
        assert {"*", "read_tickets", "manage_user_roles"} <= names

    def test_list_permissions_requires_permission(self, agent_client):
        assert agent_client.get("/api/v1/rbac/permissions").status_code == 403

    def test_list_permissions_requires_authentication(self, client):
        assert client.get("/api/v1/rbac/permissions").status_code == 401

    def test_get_permission(self, admin_client, db_session):
        pid = permission_id(db_session, "read_tickets")
        response = admin_client.get(f"/api/v1/rbac/permissions/{pid}")
        assert response.status_code == 200
        assert response.json()["resource"] == "tickets"
        assert admin_client.get(f"/api/v1/rbac/permissions/{uuid.uuid4()}").status_code == 404

    def test_get_role_with_permissions(self, admin_client, db_session):
        response = admin_client.get(f"/api/v1/rbac/roles/{role_id(db_session, 'Agent')}")
        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Agent"
        assert "read_tickets" in [p["name"] for p in data["permissions"]]

    def test_get_unknown_role(self, admin_client):
        assert admin_client.get(f"/api/v1/rbac/roles/{uuid.uuid4()}").status_code == 404

    def test_my_permissions(self, agent_client):
        response = agent_client.get("/api/v1/rbac/me/permissions")
        assert response.status_code == 200
        data = response.json()
        assert data["role"] == "company_agent"
        assert data["can_cross_departments"] is False
        assert "read_tickets" in data["permissions"]


class TestRoleMutations:
    def test_create_role(self, admin_client):
        response = admin_client.post(
            "/api/v1/rbac/roles",
            json={"name": "Auditor", "permissions": ["read_tickets"]},
        )
        assert response.status_code == 201
        assert response.json()["is_system"] is False

    def test_create_role_denied(self, agent_client):
        response = agent_client.post("/api/v1/rbac/roles", json={"name": "Sneaky"})
        assert response.status_code == 403

    def test_create_duplicate_role(self, admin_client):
        response = admin_client.post("/api/v1/rbac/roles", json={"name": "Agent"})
        assert response.status_code == 400

    def test_system_role_cannot_be_deleted(self, admin_client, db_session):
        response = admin_client.delete(
            f"/api/v1/rbac/roles/{role_id(db_session, 'Super Admin')}"
        )
        assert response.status_code == 403

    def test_update_and_delete_custom_role(self, admin_client, db_session):
        created = admin_client.post("/api/v1/rbac/roles", json={"name": "Temp"}).json()

        response = admin_client.put(
            f"/api/v1/rbac/roles/{created['id']}", json={"description": "Short lived"}
        )
        assert response.status_code == 200
        assert response.json()["description"] == "Short lived"

        assert admin_client.delete(f"/api/v1/rbac/roles/{created['id']}").status_code == 204
        assert admin_client.get(f"/api/v1/rbac/roles/{created['id']}").status_code == 404

    def test_assigned_role_cannot_be_deleted(self, admin_client, make_user):
        created = admin_client.post("/api/v1/rbac/roles", json={"name": "Temp"}).json()
        user = make_user("holder")
        admin_client.post(
            f"/api/v1/rbac/users/{user.id}/roles", json={"role_id": created["id"]}
        )

        assert admin_client.delete(f"/api/v1/rbac/roles/{created['id']}").status_code == 409
        assert admin_client.get(f"/api/v1/rbac/roles/{created['id']}").status_code == 200

    def test_create_permission(self, admin_client):
        response = admin_client.post(
            "/api/v1/rbac/permissions",
            json={"resource": "reports", "action": "export"},
        )
        assert response.status_code == 201
        assert response.json()["name"] == "export_reports"

    def test_create_permission_rejects_bad_name(self, admin_client):
        response = admin_client.post(
            "/api/v1/rbac/permissions", json={"resource": "*", "action": "*"}
        )
        assert response.status_code == 422


class TestRolePermissionLinks:
    def test_grant_and_remove(self, admin_client, db_session):
        agent = role_id(db_session, "Agent")
        delete_tickets = permission_id(db_session, "delete_tickets")

        response = admin_client.post(
            f"/api/v1/rbac/roles/{agent}/permissions",
            json={"permission_id": str(delete_tickets)},
        )
        assert response.status_code == 200
        assert "delete_tickets" in [p["name"] for p in response.json()["permissions"]]

        url = f"/api/v1/rbac/roles/{agent}/permissions/{delete_tickets}"
        assert admin_client.delete(url).status_code == 204
        assert admin_client.delete(url).status_code == 404

    def test_grant_takes_effect_for_holder(self, client, login, make_user, db_session):
        make_user("agent", role=UserRoleTier.COMPANY_AGENT, roles=("Agent",))
        make_user("admin", role=UserRoleTier.SUPER_ADMIN, roles=("Super Admin",))

        login("agent")
        assert client.get("/api/v1/rbac/roles").status_code == 403

        login("admin")
        client.post(
            f"/api/v1/rbac/roles/{role_id(db_session, 'Agent')}/permissions",
            json={"permission_id": str(permission_id(db_session, "read_roles"))},
        )

        login("agent")
        assert client.get("/api/v1/rbac/roles").status_code == 200


class TestUserRoleAssignments:
    def test_assign_list_and_revoke(self, admin_client, make_user, db_session):
        user = make_user("newbie")
        agent = role_id(db_session, "Agent")

        response = admin_client.post(
            f"/api/v1/rbac/users/{user.id}/roles", json={"role_id": str(agent)}
        )
        assert response.status_code == 201
        assert response.json()["role"]["name"] == "Agent"

        listed = admin_client.get(f"/api/v1/rbac/users/{user.id}/roles").json()
        assert [a["is_active"] for a in listed] == [True]

        url = f"/api/v1/rbac/users/{user.id}/roles/{agent}"
        assert admin_client.delete(url).status_code == 204
        # Revoking again is not an error
        assert admin_client.delete(url).status_code == 204

        listed = admin_client.get(f"/api/v1/rbac/users/{user.id}/roles").json()
        assert [a["is_active"] for a in listed] == [False]

    def test_revoke_never_assigned(self, admin_client, make_user, db_session):
        user = make_user("newbie")
        url = f"/api/v1/rbac/users/{user.id}/roles/{role_id(db_session, 'Agent')}"
        assert admin_client.delete(url).status_code == 404

    def test_assign_unknown_user(self, admin_client, db_session):
        response = admin_client.post(
            f"/api/v1/rbac/users/{uuid.uuid4()}/roles",
            json={"role_id": str(role_id(db_session, "Agent"))},
        )
        assert response.status_code == 404

    def test_assign_denied_without_permission(self, agent_client, make_user, db_session):
        user = make_user("victim")
        response = agent_client.post(
            f"/api/v1/rbac/users/{user.id}/roles",
            json={"role_id": str(role_id(db_session, "Super Admin"))},
        )
        assert response.status_code == 403

    def test_revoke_takes_effect_immediately(self, client, login, make_user, db_session):
        agent = make_user("agent", role=UserRoleTier.COMPANY_AGENT, roles=("Agent",))
        make_user("admin", role=UserRoleTier.SUPER_ADMIN, roles=("Super Admin",))

        login("agent")
        assert client.get("/api/v1/tickets").status_code == 200

        login("admin")
        client.delete(
            f"/api/v1/rbac/users/{agent.id}/roles/{role_id(db_session, 'Agent')}"
        )

        login("agent")
        assert client.get("/api/v1/tickets").status_code == 403

    def test_company_admin_stays_in_own_organization(
        self, client, login, make_user, make_org, db_session
    ):
        org_a, org_b = make_org("Org A"), make_org("Org B")
        make_user(
            "boss",
            role=UserRoleTier.COMPANY_ADMIN,
            organization=org_a,
            roles=("Administrator",),
        )
        colleague = make_user("colleague", organization=org_a)
        outsider = make_user("outsider", organization=org_b)
        agent = {"role_id": str(role_id(db_session, "Agent"))}
        super_admin = {"role_id": str(role_id(db_session, "Super Admin"))}
        login("boss")

        assert client.get(f"/api/v1/rbac/users/{outsider.id}/roles").status_code == 403
        assert client.post(f"/api/v1/rbac/users/{outsider.id}/roles", json=agent).status_code == 403
        assert (
            client.post(f"/api/v1/rbac/users/{colleague.id}/roles", json=super_admin).status_code
            == 403
        )
        assert client.post(f"/api/v1/rbac/users/{colleague.id}/roles", json=agent).status_code == 201

    def test_company_admin_cannot_create_foreign_role(self, client, login, make_user, make_org):
        org_a, org_b = make_org("Org A"), make_org("Org B")
        make_user(
            "boss",
            role=UserRoleTier.COMPANY_ADMIN,
            organization=org_a,
            roles=("Administrator",),
        )
        login("boss")

        response = client.post(
            "/api/v1/rbac/roles", json={"name": "Spy", "organization_id": str(org_b.id)}
        )
        assert response.status_code == 403
        response = client.post(
            "/api/v1/rbac/roles", json={"name": "Helpdesk", "organization_id": str(org_a.id)}
        )
        assert response.status_code == 201
