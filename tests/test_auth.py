"""
Auth endpoint tests.

Tests:
1. test_jwt_auth_round_trip — register → login → /me returns user
2. test_duplicate_email_is_conflict — 409, case-insensitive
3. test_bad_password_is_unauthorized
4. test_refresh_token_works — refresh → new access token
5. test_access_token_cannot_refresh
6. test_garbage_token_is_unauthorized
"""


def _register(client, email="owner@contractor.com", password="hunter2hunter2", name="Sam"):
    return client.post("/api/auth/register", json={"email": email, "password": password, "name": name})


def test_jwt_auth_round_trip(client):
    register = _register(client)
    assert register.status_code == 200
    assert register.json()["user"]["email"] == "owner@contractor.com"
    assert "password_hash" not in register.json()["user"]

    login = client.post("/api/auth/login", json={
        "email": "Owner@Contractor.com", "password": "hunter2hunter2",
    })
    assert login.status_code == 200
    headers = {"Authorization": f"Bearer {login.json()['access_token']}"}

    me = client.get("/api/auth/me", headers=headers)
    assert me.status_code == 200
    assert me.json()["name"] == "Sam"
    assert me.json()["id"] == register.json()["user_id"]


def test_duplicate_email_is_conflict(client):
    _register(client)
    response = _register(client, email="OWNER@contractor.com")
    assert response.status_code == 409


def test_bad_password_is_unauthorized(client):
    _register(client)
    response = client.post("/api/auth/login", json={
        "email": "owner@contractor.com", "password": "wrong",
    })
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid email or password"


def test_refresh_token_works(client):
    tokens = _register(client).json()
    response = client.post("/api/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert response.status_code == 200
    new_access = response.json()["access_token"]

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {new_access}"})
    assert me.status_code == 200


def test_access_token_cannot_refresh(client):
    tokens = _register(client).json()
    response = client.post("/api/auth/refresh", json={"refresh_token": tokens["access_token"]})
    assert response.status_code == 401


def test_garbage_token_is_unauthorized(client):
    response = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401
    assert client.get("/api/auth/me").status_code == 401
