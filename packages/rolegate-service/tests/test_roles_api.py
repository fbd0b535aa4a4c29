"""Role assignment endpoint tests: the server-side admin check."""

from __future__ import annotations

import uuid

from rolegate.roles import Role


def test_developer_cannot_write_roles(harness):
    dev = harness.add_user("dev@example.com", role=Role.DEVELOPER)
    target = harness.add_user("user@example.com", role=Role.USER)

    resp = harness.client.put(
        f"/api/v1/roles/{target.id}", json={"role": "admin"}, headers=harness.headers_for(dev)
    )

    assert resp.status_code == 403
    assert resp.json()["detail"] == {
        "action": "change user roles",
        "required_role": "admin",
        "current_role": "developer",
    }
    assert harness.roles.rows[target.id] == "user"


def test_admin_upserts_role_for_user_without_row(harness):
    admin = harness.add_user("admin@example.com", role=Role.ADMIN)
    target = harness.add_user("plain@example.com")

    resp = harness.client.put(
        f"/api/v1/roles/{target.id}", json={"role": "developer"}, headers=harness.headers_for(admin)
    )

    assert resp.status_code == 200
    assert resp.json() == {"user_id": str(target.id), "role": "developer"}
    assert harness.roles.rows[target.id] == "developer"
    harness.session.commit.assert_awaited()


def test_admin_set_role_unknown_user_returns_404(harness):
    admin = harness.add_user("admin@example.com", role=Role.ADMIN)
    resp = harness.client.put(
        f"/api/v1/roles/{uuid.uuid4()}", json={"role": "user"}, headers=harness.headers_for(admin)
    )
    assert resp.status_code == 404


def test_set_role_rejects_unknown_value(harness):
    admin = harness.add_user("admin@example.com", role=Role.ADMIN)
    target = harness.add_user("plain@example.com")
    resp = harness.client.put(
        f"/api/v1/roles/{target.id}", json={"role": "owner"}, headers=harness.headers_for(admin)
    )
    assert resp.status_code == 422


def test_user_reads_own_role_row(harness):
    user = harness.add_user("plain@example.com")
    resp = harness.client.get(f"/api/v1/roles/{user.id}", headers=harness.headers_for(user))
    assert resp.status_code == 200
    assert resp.json() == {"user_id": str(user.id), "role": None}


def test_user_cannot_read_other_role(harness):
    user = harness.add_user("user@example.com", role=Role.USER)
    other = harness.add_user("dev@example.com", role=Role.DEVELOPER)
    resp = harness.client.get(f"/api/v1/roles/{other.id}", headers=harness.headers_for(user))
    assert resp.status_code == 403
    assert resp.json()["detail"]["current_role"] == "user"


def test_admin_lists_roles_and_profiles(harness):
    admin = harness.add_user("admin@example.com", role=Role.ADMIN)
    harness.add_user("plain@example.com")
    headers = harness.headers_for(admin)

    roles = harness.client.get("/api/v1/roles", headers=headers).json()
    profiles = harness.client.get("/api/v1/profiles", headers=headers).json()

    assert roles == [{"user_id": str(admin.id), "role": "admin"}]
    assert {p["email"] for p in profiles} == {"admin@example.com", "plain@example.com"}


def test_non_admin_cannot_list_profiles(harness):
    dev = harness.add_user("dev@example.com", role=Role.DEVELOPER)
    resp = harness.client.get("/api/v1/profiles", headers=harness.headers_for(dev))
    assert resp.status_code == 403
    assert resp.json()["detail"]["action"] == "manage users"


def test_malformed_row_is_treated_as_user(harness):
    user = harness.add_user("odd@example.com")
    harness.roles.rows[user.id] = "superuser"
    resp = harness.client.get("/api/v1/roles", headers=harness.headers_for(user))
    assert resp.status_code == 403
    assert resp.json()["detail"]["current_role"] == "user"
