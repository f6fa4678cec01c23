"""
User endpoint tests: registration rules, first-user admin, login, the
availability check and profile editing.
"""
import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.models import User

PASSWORD = "Sup3r$ecret"


def _registration(**overrides) -> dict:
    payload = {
        "username": "alice",
        "email": "alice@example.com",
        "password": PASSWORD,
        "country": "Portugal",
        "firstName": "Alice",
        "lastName": "Silva",
    }
    payload.update(overrides)
    return payload


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_first_user_is_admin_then_users(async_client: AsyncClient):
    first = await async_client.post("/api/register", json=_registration())
    assert first.status_code == 201
    assert first.json()["role"] == "admin"
    assert first.json()["message"] == "User registered successfully"

    second = await async_client.post("/api/register", json=_registration(username="bob", email="bob@example.com"))
    assert second.status_code == 201
    assert second.json()["role"] == "user"
    assert second.json()["userId"] != first.json()["userId"]


@pytest.mark.asyncio
async def test_password_is_stored_hashed(async_client: AsyncClient, db_session: AsyncSession):
    await async_client.post("/api/register", json=_registration())
    stored = (await db_session.execute(select(User.password))).scalar_one()
    assert stored != PASSWORD
    assert stored.startswith("$2")


@pytest.mark.asyncio
@pytest.mark.parametrize("password", [
    "Short1!",          # too short
    "alllower1!",       # no uppercase
    "ALLUPPER1!",       # no lowercase
    "NoDigits!!",       # no digit
    "NoSymbol12",       # no symbol
    "Bad#Symbol1",      # symbol outside the allowed set
])
async def test_weak_password_is_rejected(async_client: AsyncClient, password: str):
    resp = await async_client.post("/api/register", json=_registration(password=password))
    assert resp.status_code == 400
    assert "error" in resp.json()


@pytest.mark.asyncio
async def test_missing_fields_are_rejected(async_client: AsyncClient):
    payload = _registration()
    del payload["country"]
    resp = await async_client.post("/api/register", json=payload)
    assert resp.status_code == 400
    assert "error" in resp.json()


@pytest.mark.asyncio
async def test_duplicates_are_case_insensitive(async_client: AsyncClient):
    await async_client.post("/api/register", json=_registration(username="alice", email="A@X.COM"))

    resp = await async_client.post("/api/register", json=_registration(username="Alice", email="a@x.com"))
    assert resp.status_code == 400
    body = resp.json()
    assert body["usernameExists"] is True
    assert body["emailExists"] is True
    assert body["error"] == "Username already exists"


@pytest.mark.asyncio
async def test_duplicate_email_only(async_client: AsyncClient):
    await async_client.post("/api/register", json=_registration())
    resp = await async_client.post("/api/register", json=_registration(username="carol", email="ALICE@example.com"))
    assert resp.status_code == 400
    assert resp.json() == {"error": "Email already exists", "usernameExists": False, "emailExists": True}


# ---------------------------------------------------------------------------
# Availability
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_check_username_email(async_client: AsyncClient):
    await async_client.post("/api/register", json=_registration())

    resp = await async_client.post("/api/check-username-email", json={"username": "ALICE", "email": "new@example.com"})
    assert resp.status_code == 200
    assert resp.json() == {"usernameTaken": True, "emailTaken": False}


@pytest.mark.asyncio
async def test_check_requires_username_or_email(async_client: AsyncClient):
    resp = await async_client.post("/api/check-username-email", json={})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Username or email required"}


# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_login_strips_password(async_client: AsyncClient):
    await async_client.post("/api/register", json=_registration())
    resp = await async_client.post("/api/login", json={"email": "Alice@Example.com", "password": PASSWORD})
    assert resp.status_code == 200
    user = resp.json()["user"]
    assert user["username"] == "alice"
    assert user["role"] == "admin"
    assert "password" not in user


@pytest.mark.asyncio
@pytest.mark.parametrize("email,password", [
    ("alice@example.com", "Wr0ng!pass"),
    ("nobody@example.com", PASSWORD),
])
async def test_failed_login_is_401(async_client: AsyncClient, email: str, password: str):
    await async_client.post("/api/register", json=_registration())
    resp = await async_client.post("/api/login", json={"email": email, "password": password})
    assert resp.status_code == 401
    assert resp.json() == {"error": "Invalid email or password"}


# ---------------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_get_profile(async_client: AsyncClient, make_user):
    user_id = await make_user("user", username="dina", email="dina@example.com")
    await async_client.post("/api/user/interests", json={"userId": user_id, "interest": "sailing"})

    resp = await async_client.get("/api/user-profile", params={"userId": user_id})
    assert resp.status_code == 200
    profile = resp.json()
    assert profile["username"] == "dina"
    assert profile["firstName"] == "Test"
    assert profile["interests"] == ["sailing"]
    assert "password" not in profile


@pytest.mark.asyncio
async def test_profile_requires_identity(async_client: AsyncClient):
    resp = await async_client.get("/api/user-profile")
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_update_profile(async_client: AsyncClient, make_user):
    user_id = await make_user("user", username="dina", email="dina@example.com")
    resp = await async_client.put("/api/user-profile", json={
        "userId": user_id,
        "username": "Dina",
        "email": "DINA.NEW@example.com",
        "country": "Spain",
    })
    assert resp.status_code == 200
    profile = resp.json()["profile"]
    assert profile["username"] == "Dina"
    assert profile["email"] == "dina.new@example.com"
    assert profile["country"] == "Spain"
    assert profile["lastName"] == "User1"


@pytest.mark.asyncio
async def test_update_profile_conflict(async_client: AsyncClient, make_user):
    await make_user("user", username="erik", email="erik@example.com")
    user_id = await make_user("user", username="fay", email="fay@example.com")
    resp = await async_client.put("/api/user-profile", json={
        "userId": user_id, "username": "ERIK", "email": "fay@example.com",
    })
    assert resp.status_code == 400
    assert resp.json()["error"] == "Username or email already in use."
    assert resp.json()["usernameExists"] is True
