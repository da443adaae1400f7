import pytest
from datetime import timedelta
from httpx import AsyncClient
from sqlalchemy import select

from app.core.security import create_access_token
from app.models import Traveler, User, UserNotification

from conftest import PASSWORD


@pytest.fixture
def register_data():
    """Registration payload"""
    return {
        "name": "Ana Souza",
        "email": "ana@example.com",
        "password": "supersecret1",
        "password_confirmation": "supersecret1"
    }


@pytest.mark.asyncio
async def test_register_creates_user_and_traveler(client: AsyncClient, db_session, register_data):
    """Registration creates a non-admin user with its own active traveler profile"""
    response = await client.post("/api/register", json=register_data)

    assert response.status_code == 201
    data = response.json()
    assert data["token_type"] == "Bearer"
    assert data["access_token"]
    assert data["expires_in"] == 3600
    assert data["user"]["email"] == register_data["email"]
    assert data["user"]["is_admin"] is False

    result = await db_session.execute(select(Traveler).where(Traveler.user_id == data["user"]["id"]))
    travelers = result.scalars().all()
    assert len(travelers) == 1
    assert travelers[0].is_active is True
    assert travelers[0].name == register_data["name"]


@pytest.mark.asyncio
async def test_register_duplicate_email(client: AsyncClient, register_data):
    """A taken email is a field violation"""
    await client.post("/api/register", json=register_data)
    response = await client.post("/api/register", json=register_data)

    assert response.status_code == 422
    data = response.json()
    assert data["code"] == "VALIDATION_ERROR"
    assert data["details"]["errors"][0]["field"] == "email"
    assert data["details"]["errors"][0]["rule"] == "unique"


@pytest.mark.asyncio
async def test_register_password_mismatch(client: AsyncClient, register_data):
    register_data["password_confirmation"] = "somethingelse"
    response = await client.post("/api/register", json=register_data)

    assert response.status_code == 422
    fields = [e["field"] for e in response.json()["details"]["errors"]]
    assert "password_confirmation" in fields


@pytest.mark.asyncio
async def test_register_short_password(client: AsyncClient, register_data):
    register_data["password"] = register_data["password_confirmation"] = "short"
    response = await client.post("/api/register", json=register_data)

    assert response.status_code == 422
    fields = [e["field"] for e in response.json()["details"]["errors"]]
    assert "password" in fields


@pytest.mark.asyncio
async def test_login_success(client: AsyncClient, regular_user: User):
    """Valid credentials return a bearer token usable on protected routes"""
    response = await client.post("/api/login", json={"email": regular_user.email, "password": PASSWORD})

    assert response.status_code == 200
    token = response.json()["access_token"]

    me = await client.get("/api/user", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["user"]["id"] == regular_user.id


@pytest.mark.asyncio
async def test_login_wrong_password(client: AsyncClient, regular_user: User):
    response = await client.post("/api/login", json={"email": regular_user.email, "password": "wrongpassword"})

    assert response.status_code == 422
    error = response.json()["details"]["errors"][0]
    assert error["field"] == "email"
    assert error["rule"] == "credentials"


@pytest.mark.asyncio
async def test_login_unknown_email(client: AsyncClient):
    response = await client.post("/api/login", json={"email": "nobody@example.com", "password": PASSWORD})

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_protected_route_without_token(client: AsyncClient):
    """Missing credentials are a 401, not a 403"""
    response = await client.get("/api/trip-requests")

    assert response.status_code == 401
    assert response.json()["code"] == "UNAUTHENTICATED"
    assert response.headers["www-authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_protected_route_with_garbage_token(client: AsyncClient):
    response = await client.get("/api/user", headers={"Authorization": "Bearer not-a-jwt"})

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_expired_token(client: AsyncClient, regular_user: User):
    token = create_access_token(regular_user.id, False, expires_delta=timedelta(seconds=-1))
    response = await client.get("/api/user", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401
    assert response.json()["message"] == "Token has expired."


@pytest.mark.asyncio
async def test_token_for_deleted_user(client: AsyncClient):
    token = create_access_token(999999, False)
    response = await client.get("/api/user", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_current_user_reports_unread_notifications(client: AsyncClient, db_session, regular_user, user_headers):
    db_session.add_all([
        UserNotification(user_id=regular_user.id, message="one", is_checked=False),
        UserNotification(user_id=regular_user.id, message="two", is_checked=True),
    ])
    await db_session.commit()

    response = await client.get("/api/user", headers=user_headers)

    assert response.status_code == 200
    user = response.json()["user"]
    assert user["email"] == regular_user.email
    assert user["unread_notifications_count"] == 1


@pytest.mark.asyncio
async def test_logout(client: AsyncClient, user_headers):
    response = await client.post("/api/logout", headers=user_headers)

    assert response.status_code == 200
    assert response.json()["message"] == "Successfully logged out"


@pytest.mark.asyncio
async def test_refresh_issues_new_token(client: AsyncClient, regular_user, user_headers):
    response = await client.post("/api/refresh", headers=user_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["user"]["id"] == regular_user.id
    assert data["access_token"]


@pytest.mark.asyncio
async def test_admin_flag_read_from_user_row(client: AsyncClient, db_session, regular_user):
    """A token claiming admin does not grant admin rights to a regular user"""
    token = create_access_token(regular_user.id, True)
    response = await client.post(
        "/api/destinations",
        json={"city": "Recife", "state": "PE", "country": "Brasil"},
        headers={"Authorization": f"Bearer {token}"}
    )

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}
