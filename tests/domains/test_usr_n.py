# tests/domains/test_usr_n.py

"""
'usr' 도메인 (사용자 및 인증) 관련 API 엔드포인트에 대한 통합 테스트 모듈입니다.
"""

from httpx import AsyncClient
from sqlmodel.ext.asyncio.session import AsyncSession

from fims.core.security import verify_password
from fims.domains.usr import models as usr_models


# =============================================================================
# 1. 인증 (Authentication) 엔드포인트 테스트
# =============================================================================
async def test_login_success_returns_tokens(client: AsyncClient, test_staff_user: usr_models.User):
    response = await client.post(
        "/api/v1/usr/auth/token", data={"username": "staff", "password": "staffpass123"}
    )
    assert response.status_code == 200
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["access_token"]
    assert body["refresh_token"]


async def test_login_wrong_password(client: AsyncClient, test_staff_user: usr_models.User):
    response = await client.post(
        "/api/v1/usr/auth/token", data={"username": "staff", "password": "wrongpass"}
    )
    assert response.status_code == 401


async def test_login_inactive_user(client: AsyncClient, user_factory):
    await user_factory("sleepy", "sleepypass123", role=usr_models.UserRole.STAFF, is_active=False)
    response = await client.post(
        "/api/v1/usr/auth/token", data={"username": "sleepy", "password": "sleepypass123"}
    )
    assert response.status_code == 400


async def test_read_me(staff_client: AsyncClient):
    response = await staff_client.get("/api/v1/usr/auth/me")
    assert response.status_code == 200
    assert response.json()["username"] == "staff"
    assert response.json()["role"] == usr_models.UserRole.STAFF.value
    assert "password_hash" not in response.json()


async def test_refresh_token_issues_new_access_token(client: AsyncClient, test_staff_user: usr_models.User):
    login = await client.post("/api/v1/usr/auth/token", data={"username": "staff", "password": "staffpass123"})
    refresh_token = login.json()["refresh_token"]

    response = await client.post("/api/v1/usr/auth/refresh", json={"refresh_token": refresh_token})
    assert response.status_code == 200
    new_access = response.json()["access_token"]

    me = await client.get("/api/v1/usr/auth/me", headers={"Authorization": f"Bearer {new_access}"})
    assert me.status_code == 200


async def test_access_token_is_not_a_refresh_token(client: AsyncClient, test_staff_user: usr_models.User):
    login = await client.post("/api/v1/usr/auth/token", data={"username": "staff", "password": "staffpass123"})
    access_token = login.json()["access_token"]

    response = await client.post("/api/v1/usr/auth/refresh", json={"refresh_token": access_token})
    assert response.status_code == 401


async def test_change_own_password(staff_client: AsyncClient, db_session: AsyncSession, test_staff_user: usr_models.User):
    user_id = test_staff_user.id

    wrong = await staff_client.put(
        "/api/v1/usr/auth/password",
        json={"current_password": "not-my-password", "new_password": "brandnewpass"},
    )
    assert wrong.status_code == 400

    response = await staff_client.put(
        "/api/v1/usr/auth/password",
        json={"current_password": "staffpass123", "new_password": "brandnewpass"},
    )
    assert response.status_code == 204

    user = await db_session.get(usr_models.User, user_id)
    await db_session.refresh(user)
    assert verify_password("brandnewpass", user.password_hash)


# =============================================================================
# 2. 사용자 (User) 관리 엔드포인트 테스트
# =============================================================================
async def test_admin_creates_user(admin_client: AsyncClient):
    payload = {
        "username": "newstaff",
        "password": "newstaffpass",
        "email": "newstaff@example.com",
        "full_name": "New Staff",
        "role": usr_models.UserRole.STAFF.value,
    }
    response = await admin_client.post("/api/v1/usr/users", json=payload)
    assert response.status_code == 201
    assert response.json()["username"] == "newstaff"

    duplicate = await admin_client.post("/api/v1/usr/users", json=payload)
    assert duplicate.status_code == 400
    assert duplicate.json()["code"] == "DUPLICATE"


async def test_admin_cannot_grant_superuser(admin_client: AsyncClient):
    payload = {
        "username": "sneaky",
        "password": "sneakypass",
        "role": usr_models.UserRole.SUPERUSER.value,
    }
    response = await admin_client.post("/api/v1/usr/users", json=payload)
    assert response.status_code == 403


async def test_staff_cannot_manage_users(staff_client: AsyncClient):
    response = await staff_client.get("/api/v1/usr/users")
    assert response.status_code == 403


async def test_list_users_paginated(admin_client: AsyncClient, test_staff_user, test_viewer_user):
    response = await admin_client.get("/api/v1/usr/users", params={"page": 1, "page_size": 2})
    assert response.status_code == 200
    body = response.json()
    assert len(body["items"]) == 2
    assert body["meta"]["total_items"] == 3
    assert body["meta"]["total_pages"] == 2
    assert body["meta"]["has_next_page"] is True

    filtered = await admin_client.get("/api/v1/usr/users", params={"search": "view"})
    assert [u["username"] for u in filtered.json()["items"]] == ["viewer"]


async def test_update_user_role(admin_client: AsyncClient, test_viewer_user: usr_models.User):
    response = await admin_client.put(
        f"/api/v1/usr/users/{test_viewer_user.id}", json={"role": usr_models.UserRole.STAFF.value}
    )
    assert response.status_code == 200
    assert response.json()["role"] == usr_models.UserRole.STAFF.value

    for field in ("role", "is_active"):
        response = await admin_client.put(f"/api/v1/usr/users/{test_viewer_user.id}", json={field: None})
        assert response.status_code == 422, field


async def test_admin_cannot_delete_self(admin_client: AsyncClient, test_admin_user: usr_models.User):
    response = await admin_client.delete(f"/api/v1/usr/users/{test_admin_user.id}")
    assert response.status_code == 400


async def test_superuser_cannot_be_deleted(admin_client: AsyncClient, test_superuser: usr_models.User):
    response = await admin_client.delete(f"/api/v1/usr/users/{test_superuser.id}")
    assert response.status_code == 400
    assert response.json()["code"] == "REFERENTIAL_INTEGRITY"


async def test_delete_user(admin_client: AsyncClient, db_session: AsyncSession, test_viewer_user: usr_models.User):
    user_id = test_viewer_user.id
    response = await admin_client.delete(f"/api/v1/usr/users/{user_id}")
    assert response.status_code == 204
    assert await db_session.get(usr_models.User, user_id) is None


async def test_update_own_profile(staff_client: AsyncClient, test_admin_user: usr_models.User):
    response = await staff_client.put(
        "/api/v1/usr/auth/profile", json={"full_name": "Renamed Staff", "email": "renamed@example.com"}
    )
    assert response.status_code == 200
    assert response.json()["full_name"] == "Renamed Staff"
    assert response.json()["email"] == "renamed@example.com"

    # 역할은 프로필 수정으로 바꿀 수 없습니다.
    response = await staff_client.put("/api/v1/usr/auth/profile", json={"role": usr_models.UserRole.ADMIN.value})
    assert response.status_code == 200
    assert response.json()["role"] == usr_models.UserRole.STAFF.value

    taken = await staff_client.put("/api/v1/usr/auth/profile", json={"email": "sysadm@example.com"})
    assert taken.status_code == 400
    assert taken.json()["code"] == "DUPLICATE"


async def test_user_stats(admin_client: AsyncClient, staff_client: AsyncClient, user_factory, test_viewer_user):
    await user_factory("retired", "retiredpass123", role=usr_models.UserRole.STAFF, is_active=False)

    response = await admin_client.get("/api/v1/usr/users/stats")
    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 4
    assert body["active"] == 3
    assert body["inactive"] == 1
    assert body["by_role"] == {"superuser": 0, "admin": 1, "manager": 0, "staff": 2, "viewer": 1}

    forbidden = await staff_client.get("/api/v1/usr/users/stats")
    assert forbidden.status_code == 403
