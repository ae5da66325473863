from conftest import PASSWORD, auth_headers


async def test_register_and_login(client):
    resp = await client.post(
        "/auth/register",
        json={"name": "Dana", "email": "Dana@Example.com", "password": "hunter22", "address": "Main st. 1"},
    )
    assert resp.status_code == 201
    user = resp.json()
    assert user["email"] == "dana@example.com"
    assert user["role"] == "user"
    assert user["isActive"] is True
    assert user["isDeleted"] is False
    assert "passwordHash" not in user

    resp = await client.post("/auth/login", json={"email": "dana@example.com", "password": "hunter22"})
    assert resp.status_code == 200
    token = resp.json()
    assert token["tokenType"] == "bearer"
    assert token["user"]["name"] == "Dana"

    me = await client.get("/auth/me", headers={"Authorization": f"Bearer {token['accessToken']}"})
    assert me.status_code == 200
    assert me.json()["email"] == "dana@example.com"


async def test_register_duplicate_email(client, customer):
    resp = await client.post(
        "/auth/register", json={"name": "Alice", "email": customer.email, "password": "hunter22"}
    )

    assert resp.status_code == 400
    assert resp.json() == {"message": "User already exists"}


async def test_login_wrong_password(client, customer):
    resp = await client.post("/auth/login", json={"email": customer.email, "password": "wrong-password"})

    assert resp.status_code == 401


async def test_login_deleted_user_is_forbidden(client, make_user):
    user = await make_user("Gone", is_deleted=True, is_active=False)

    resp = await client.post("/auth/login", json={"email": user.email, "password": PASSWORD})

    assert resp.status_code == 403


async def test_invalid_token(client):
    resp = await client.get("/auth/me", headers={"Authorization": "Bearer not-a-jwt"})

    assert resp.status_code == 401
    assert resp.json() == {"message": "Not authorized, token failed"}


async def test_token_of_deleted_user_is_rejected(client, make_user):
    user = await make_user("Gone", is_deleted=True)

    resp = await client.get("/auth/me", headers=auth_headers(user))

    assert resp.status_code == 401


async def test_inactive_user_is_forbidden(client, make_user):
    user = await make_user("Paused", is_active=False)

    resp = await client.get("/auth/me", headers=auth_headers(user))

    assert resp.status_code == 403
