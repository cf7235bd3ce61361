"""User management and usage statistics in the admin console."""

from typing import Generator

import pytest
from fastapi.testclient import TestClient

from catalogue_admin.modules.accounts import Account
from tests.helpers import upload_pdf

STAFF = Account(
    id="staff-1",
    username="staff",
    name="Sales Staff",
    email="staff@example.com",
    role="admin",
    is_active=True,
    password_hash="",
)


@pytest.fixture
def staff_client(app, fake_mailer) -> Generator[TestClient, None, None]:
    """Client authenticated as a regular admin without super admin rights."""
    from catalogue_admin.core.security import get_current_account
    from catalogue_admin.interfaces.http.deps import get_mailer

    app.dependency_overrides[get_mailer] = lambda: fake_mailer
    app.dependency_overrides[get_current_account] = lambda: STAFF
    with TestClient(app) as test_client:
        yield test_client


def create_user(client: TestClient, username: str, **fields) -> dict:
    payload = {"username": username, "password": "s3cret-pass", **fields}
    response = client.post("/api/admin/users", json=payload)
    assert response.status_code == 201, response.text
    return response.json()["data"]["user"]


def test_create_and_list_users(client):
    created = create_user(
        client,
        "buyer-acme",
        name="Acme Buyer",
        email="buyer@acme.example",
        companyName="Acme Plastics",
        city="Lyon",
    )

    assert created["companyName"] == "Acme Plastics"
    assert created["role"] == "user"
    create_user(client, "buyer-other", email="other@example.com")

    listing = client.get("/api/admin/users", params={"q": "acme"}).json()["data"]
    assert [user["username"] for user in listing["users"]] == ["buyer-acme"]
    assert listing["pagination"]["total"] == 1

    everyone = client.get("/api/admin/users").json()["data"]
    assert everyone["pagination"]["total"] == 2


def test_create_user_rejects_duplicates(client):
    create_user(client, "buyer-acme", email="buyer@acme.example")

    response = client.post(
        "/api/admin/users",
        json={"username": "someone-else", "password": "s3cret-pass", "email": "buyer@acme.example"},
    )

    assert response.status_code == 400
    assert response.json()["error"] == "duplicate_account"


def test_user_detail_includes_recent_activity(client):
    user = create_user(client, "buyer-acme")

    response = client.get(f"/api/admin/users/{user['id']}")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["user"]["username"] == "buyer-acme"
    assert [entry["type"] for entry in data["activities"]] == ["admin_create_user"]
    assert data["downloads"] == []


def test_unknown_user_is_not_found(client):
    response = client.get("/api/admin/users/missing")

    assert response.status_code == 404
    assert response.json()["error"] == "user_not_found"


def test_update_user_profile(client):
    user = create_user(client, "buyer-acme", name="Old Name", city="Lyon")

    response = client.put(f"/api/admin/users/{user['id']}", json={"name": "New Name", "phoneNumber": "+33 1 23"})

    assert response.status_code == 200
    updated = response.json()["data"]["user"]
    assert updated["name"] == "New Name"
    assert updated["phoneNumber"] == "+33 1 23"
    assert updated["city"] == "Lyon"


def test_update_user_rejects_taken_email(client):
    create_user(client, "first", email="first@example.com")
    second = create_user(client, "second", email="second@example.com")

    response = client.put(f"/api/admin/users/{second['id']}", json={"email": "first@example.com"})

    assert response.status_code == 400
    assert response.json()["error"] == "duplicate_email"


def test_deactivated_user_cannot_log_in(client):
    user = create_user(client, "buyer-acme")

    response = client.put(f"/api/admin/users/{user['id']}/status", json={"isActive": False})

    assert response.status_code == 200
    assert response.json()["data"]["user"]["isActive"] is False
    login = client.post("/api/auth/login", json={"username": "buyer-acme", "password": "s3cret-pass"})
    assert login.status_code == 401
    inactive = client.get("/api/admin/users", params={"isActive": "false"}).json()["data"]
    assert [item["id"] for item in inactive["users"]] == [user["id"]]


def test_deleted_user_disappears_from_listings(client):
    user = create_user(client, "buyer-acme")

    response = client.delete(f"/api/admin/users/{user['id']}")

    assert response.status_code == 200
    assert client.get("/api/admin/users").json()["data"]["pagination"]["total"] == 0
    assert client.get(f"/api/admin/users/{user['id']}").status_code == 404
    login = client.post("/api/auth/login", json={"username": "buyer-acme", "password": "s3cret-pass"})
    assert login.status_code == 401
    logged = client.get("/api/admin/activities", params={"type": "admin_delete_user"}).json()["data"]
    assert logged["activities"][0]["userId"] == user["id"]


def test_admin_cannot_delete_own_account(client):
    response = client.delete("/api/admin/users/admin-1")

    assert response.status_code == 400
    assert response.json()["error"] == "cannot_delete_self"


def test_user_changes_need_super_admin(staff_client):
    assert staff_client.get("/api/admin/users").status_code == 200

    response = staff_client.post("/api/admin/users", json={"username": "buyer-acme", "password": "s3cret-pass"})

    assert response.status_code == 403
    assert response.json()["error"] == "forbidden"


def test_dashboard_reports_user_figures(client):
    first = create_user(client, "first")
    create_user(client, "second")
    client.put(f"/api/admin/users/{first['id']}/status", json={"isActive": False})

    stats = client.get("/api/admin/dashboard").json()["data"]

    assert stats["stats"]["totalAccounts"] == 2
    assert stats["stats"]["activeUsers"] == 1
    assert {user["username"] for user in stats["recentUsers"]} == {"first", "second"}


def test_usage_stats_for_period(client):
    create_user(client, "buyer-acme")
    client.post("/api/auth/login", json={"username": "buyer-acme", "password": "s3cret-pass"})
    catalogue = upload_pdf(client, "Extruders.pdf")
    client.get(f"/api/catalogue/{catalogue['id']}/download")
    client.get(f"/api/catalogue/{catalogue['id']}/download")

    response = client.get("/api/admin/stats", params={"period": "7d"})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["period"] == "7d"
    assert sum(bucket["count"] for bucket in data["userGrowth"]) == 1
    assert data["userStatus"] == [{"isActive": True, "count": 1}]
    assert sum(bucket["count"] for bucket in data["downloadsOverTime"]) == 2
    assert sum(bucket["count"] for bucket in data["loginFrequency"]) == 1
    assert data["topDownloads"] == [{"catalogueId": catalogue["id"], "catalogueName": "Extruders.pdf", "count": 2}]


def test_usage_stats_rejects_unknown_period(client):
    response = client.get("/api/admin/stats", params={"period": "1y"})

    assert response.status_code == 400
    assert response.json()["error"] == "invalid_period"
