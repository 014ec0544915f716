"""Tests for the HTTP API: auth flow, gates, admin CRUD and landing pages."""
import json

import pytest

from landing.services.sessions import issue_session, revoke_session

from conftest import ADMIN_EMAIL, ADMIN_PASSWORD

TABLE_5 = {
    "name": "Table 5",
    "entity_type": "table",
    "show_menu_button": False,
    "custom_buttons": [
        {"button_text": "Call Waiter", "button_url": "https://x.test/call", "is_active": True},
    ],
}


@pytest.mark.asyncio
async def test_health(client):
    """Health endpoint returns ok."""
    r = await client.get("/api/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


# --- Login / logout ---


@pytest.mark.asyncio
async def test_login_sets_cookie_and_hides_hash(client, admin):
    r = await client.post("/api/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    assert r.status_code == 200
    data = r.json()
    assert data["token"]
    assert data["user"]["email"] == ADMIN_EMAIL
    assert data["user"]["role"] == "admin"
    assert "password_hash" not in data["user"]
    set_cookie = r.headers["set-cookie"]
    assert set_cookie.startswith(f"auth_token={data['token']}")
    assert "HttpOnly" in set_cookie


@pytest.mark.asyncio
async def test_login_unknown_email(client, admin):
    """Unknown email: 401, generic error, no cookie."""
    r = await client.post("/api/auth/login", json={"email": "ghost@example.com", "password": ADMIN_PASSWORD})
    assert r.status_code == 401
    assert r.json() == {"error": "Invalid email or password"}
    assert "set-cookie" not in r.headers


@pytest.mark.asyncio
async def test_login_wrong_password_same_response(client, admin):
    unknown = await client.post("/api/auth/login", json={"email": "ghost@example.com", "password": "x"})
    wrong = await client.post("/api/auth/login", json={"email": ADMIN_EMAIL, "password": "x"})
    assert unknown.status_code == wrong.status_code == 401
    assert unknown.json() == wrong.json()


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [{}, {"email": ADMIN_EMAIL}, {"password": "x"}, {"email": "", "password": ""}])
async def test_login_missing_fields(client, body):
    r = await client.post("/api/auth/login", json=body)
    assert r.status_code == 400
    assert "error" in r.json()


@pytest.mark.asyncio
async def test_login_without_body(client):
    r = await client.post("/api/auth/login")
    assert r.status_code == 400
    assert r.json() == {"error": "Email and password are required"}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "content, content_type",
    [
        ("email=a@b.c&password=x", "application/x-www-form-urlencoded"),
        ("{not json", "application/json"),
        ("[1, 2]", "application/json"),
        ('{"email": 5, "password": ["x"]}', "application/json"),
    ],
)
async def test_login_malformed_body(client, content, content_type):
    r = await client.post("/api/auth/login", content=content, headers={"content-type": content_type})
    assert r.status_code == 400
    assert "error" in r.json()


@pytest.mark.asyncio
async def test_me(auth_client):
    r = await auth_client.get("/api/auth/me")
    assert r.status_code == 200
    assert r.json()["email"] == ADMIN_EMAIL


@pytest.mark.asyncio
async def test_me_requires_session(client):
    r = await client.get("/api/auth/me")
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_logout_revokes_and_clears(auth_client):
    r = await auth_client.post("/api/auth/logout")
    assert r.status_code == 200
    assert r.json() == {"success": True}
    assert "Max-Age=0" in r.headers["set-cookie"]

    r = await auth_client.get("/api/auth/me")
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_logout_without_cookie(client):
    r = await client.post("/api/auth/logout")
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_logout_revokes_server_side(client, database, admin):
    """A copied cookie stops working once its session is logged out."""
    issued = await issue_session(database, admin.id)
    client.cookies.set("auth_token", issued.token)
    r = await client.post("/api/auth/logout")
    assert r.status_code == 200
    client.cookies.clear()

    client.cookies.set("auth_token", issued.token)
    r = await client.get("/admin/configurations")
    assert r.status_code == 307


# --- Gates ---


@pytest.mark.asyncio
async def test_edge_gate_redirects_without_cookie(client):
    r = await client.get("/admin/configurations")
    assert r.status_code == 307
    assert r.headers["location"] == "/login?redirectedFrom=%2Fadmin%2Fconfigurations"


@pytest.mark.asyncio
async def test_edge_gate_covers_every_admin_path(client):
    r = await client.get("/admin/anything/else")
    assert r.status_code == 307
    assert "redirectedFrom=%2Fadmin%2Fanything%2Felse" in r.headers["location"]


@pytest.mark.asyncio
async def test_non_admin_paths_are_not_gated(client):
    r = await client.get("/administrator")
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_page_gate_rejects_revoked_token(client, database, admin):
    """A present-but-revoked token passes the edge check but not require_auth."""
    issued = await issue_session(database, admin.id)
    await revoke_session(database, issued.token)
    client.cookies.set("auth_token", issued.token)
    r = await client.get("/admin/configurations")
    assert r.status_code == 307
    assert r.headers["location"] == "/login?redirectedFrom=%2Fadmin%2Fconfigurations"


@pytest.mark.asyncio
async def test_page_gate_rejects_malformed_cookie(client):
    client.cookies.set("auth_token", "{broken")
    r = await client.get("/admin/configurations")
    assert r.status_code == 307


@pytest.mark.asyncio
async def test_composite_cookie_accepted(client, database, admin):
    issued = await issue_session(database, admin.id)
    client.cookies.set("auth_token", json.dumps({"token": issued.token, "userId": str(admin.id)}))
    r = await client.get("/admin/configurations")
    assert r.status_code == 200


@pytest.mark.asyncio
async def test_login_entry_point(client):
    r = await client.get("/login", params={"redirectedFrom": "/admin/configurations"})
    assert r.status_code == 200
    assert r.json()["redirectedFrom"] == "/admin/configurations"


# --- Admin configurations ---


@pytest.mark.asyncio
async def test_list_configurations_empty(auth_client):
    r = await auth_client.get("/admin/configurations")
    assert r.status_code == 200
    assert r.json() == []


@pytest.mark.asyncio
async def test_configuration_crud_flow(auth_client):
    """Create, read, update, list, delete."""
    r = await auth_client.post("/admin/configurations", json=TABLE_5)
    assert r.status_code == 201
    cid = r.json()["id"]

    r = await auth_client.get(f"/admin/configurations/{cid}")
    assert r.status_code == 200
    data = r.json()
    assert data["name"] == "Table 5"
    assert [(b["button_text"], b["display_order"]) for b in data["custom_buttons"]] == [("Call Waiter", 0)]

    r = await auth_client.put(
        f"/admin/configurations/{cid}",
        json={
            "name": "Table 5",
            "entity_type": "table",
            "custom_buttons": [
                {"button_text": "Bill", "button_url": "https://x.test/bill"},
                {"button_text": "Review", "button_url": "https://x.test/review", "is_active": False},
            ],
        },
    )
    assert r.status_code == 200
    r = await auth_client.get(f"/admin/configurations/{cid}")
    assert [b["button_text"] for b in r.json()["custom_buttons"]] == ["Bill", "Review"]

    r = await auth_client.get("/admin/configurations")
    assert [c["id"] for c in r.json()] == [cid]

    r = await auth_client.delete(f"/admin/configurations/{cid}")
    assert r.status_code == 200
    r = await auth_client.get(f"/admin/configurations/{cid}")
    assert r.status_code == 404
    r = await auth_client.delete(f"/admin/configurations/{cid}")
    assert r.status_code == 200


@pytest.mark.asyncio
async def test_create_validation_error(auth_client):
    r = await auth_client.post(
        "/admin/configurations",
        json={
            "name": "",
            "entity_type": "table",
            "menu_button_link": "not a url",
            "custom_buttons": [{"button_text": "x", "button_url": "nope"}],
        },
    )
    assert r.status_code == 422
    errors = r.json()["errors"]
    assert "name" in errors
    assert "menu_button_link" in errors
    assert "custom_buttons.0.button_url" in errors

    r = await auth_client.get("/admin/configurations")
    assert r.json() == []


@pytest.mark.asyncio
async def test_update_unknown_configuration(auth_client):
    r = await auth_client.put(
        "/admin/configurations/00000000-0000-0000-0000-000000000000",
        json={"name": "X", "entity_type": "table"},
    )
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_admin_routes_gated_without_login(client):
    r = await client.post("/admin/configurations", json=TABLE_5)
    assert r.status_code == 307
    r = await client.delete("/admin/configurations/00000000-0000-0000-0000-000000000000")
    assert r.status_code == 307


@pytest.mark.asyncio
async def test_register_user_requires_session(client, auth_client):
    r = await auth_client.post(
        "/api/auth/users",
        json={"email": "staff@example.com", "password": "pw12345", "name": "Staff"},
    )
    assert r.status_code == 201
    assert r.json()["role"] == "user"

    r = await auth_client.post("/api/auth/users", json={"email": "staff@example.com", "password": "other"})
    assert r.status_code == 422
    assert "email" in r.json()["errors"]


# --- Public landing page ---


@pytest.mark.asyncio
async def test_landing_page_is_public(auth_client):
    r = await auth_client.post(
        "/admin/configurations",
        json={
            "name": "Room 12",
            "entity_type": "room",
            "show_menu_button": True,
            "menu_button_text": "Room service",
            "menu_button_link": "https://x.test/menu",
            "custom_buttons": [
                {"button_text": "two", "button_url": "https://x.test/2", "display_order": 2},
                {"button_text": "zero", "button_url": "https://x.test/0", "display_order": 0, "is_active": False},
                {"button_text": "one", "button_url": "https://x.test/1", "display_order": 1},
            ],
        },
    )
    cid = r.json()["id"]

    auth_client.cookies.clear()
    r = await auth_client.get(f"/l/{cid}")
    assert r.status_code == 200
    page = r.json()
    assert page["name"] == "Room 12"
    assert page["menu_button_text"] == "Room service"
    assert [b["button_text"] for b in page["buttons"]] == ["one", "two"]


@pytest.mark.asyncio
async def test_landing_page_not_found(client):
    r = await client.get("/l/00000000-0000-0000-0000-000000000000")
    assert r.status_code == 404
    r = await client.get("/l/garbage")
    assert r.status_code == 404
