from conftest import auth_headers


def test_login_and_me(client, admin):
    resp = client.post("/auth/login", json={"email": "Admin@Example.com", "password": "admin123"})
    assert resp.status_code == 200, resp.text
    token = resp.json()["access_token"]
    assert resp.json()["user_role"] == "ADMIN"

    me = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["email"] == "admin@example.com"


def test_login_wrong_password(client, admin):
    resp = client.post("/auth/login", json={"email": "admin@example.com", "password": "nope"})
    assert resp.status_code == 401


def test_only_admin_registers_users(client, admin, client_user):
    new_user = {"name": "Sub", "email": "sub@example.com", "password": "sub123", "role": "SUBCONTRACTOR"}
    assert client.post("/auth/register", json=new_user, headers=auth_headers(client_user)).status_code == 403

    resp = client.post("/auth/register", json=new_user, headers=auth_headers(admin))
    assert resp.status_code == 200
    assert resp.json()["role"] == "SUBCONTRACTOR"

    dup = client.post("/auth/register", json=new_user, headers=auth_headers(admin))
    assert dup.status_code == 400


def test_invalid_token(client):
    resp = client.get("/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401
