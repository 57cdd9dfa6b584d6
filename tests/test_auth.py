API = "/api/v1"


async def test_register_returns_user_and_token(client):
    response = await client.post(
        f"{API}/auth/register",
        json={"name": "Alice", "email": "Alice@Mail.com", "password": "password123"},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "ok"
    assert body["data"]["user"]["email"] == "alice@mail.com"
    assert body["data"]["user"]["role"] == "user"
    assert body["data"]["token_type"] == "Bearer"
    assert body["data"]["access_token"]


async def test_register_duplicate_email_is_rejected(client, register):
    await register(email="alice@mail.com")

    response = await client.post(
        f"{API}/auth/register",
        json={"name": "Other", "email": "alice@mail.com", "password": "password123"},
    )

    assert response.status_code == 422
    assert "email" in response.json()["errors"]


async def test_register_validates_input(client):
    response = await client.post(
        f"{API}/auth/register",
        json={"name": "Alice", "email": "not-an-email", "password": "short"},
    )

    assert response.status_code == 422
    body = response.json()
    assert body["message"] == "Validation failed"
    assert set(body["errors"]) == {"email", "password"}


async def test_login_issues_a_working_token(client, register):
    await register(email="alice@mail.com", password="password123")

    response = await client.post(
        f"{API}/auth/login",
        json={"email": "alice@mail.com", "password": "password123"},
    )

    assert response.status_code == 200
    token = response.json()["data"]["access_token"]
    me = await client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["data"]["user"]["email"] == "alice@mail.com"


async def test_login_with_wrong_password_is_unauthorized(client, register):
    await register(email="alice@mail.com", password="password123")

    response = await client.post(
        f"{API}/auth/login",
        json={"email": "alice@mail.com", "password": "wrong-password"},
    )

    assert response.status_code == 401
    assert response.json()["error_code"] == "UNAUTHORIZED"


async def test_me_requires_a_token(client):
    assert (await client.get(f"{API}/auth/me")).status_code == 401

    response = await client.get(
        f"{API}/auth/me", headers={"Authorization": "Bearer not-a-jwt"}
    )
    assert response.status_code == 401


async def test_logout_revokes_the_token(client, register):
    headers, _ = await register()

    response = await client.post(f"{API}/auth/logout", headers=headers)

    assert response.status_code == 200
    assert (await client.get(f"{API}/auth/me", headers=headers)).status_code == 401
