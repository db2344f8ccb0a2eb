# fims/domains/usr/routers.py

"""
'usr' 도메인 (사용자 및 인증)과 관련된 API 엔드포인트를 정의하는 모듈입니다.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status, Query
from fastapi.security import OAuth2PasswordRequestForm
from sqlmodel.ext.asyncio.session import AsyncSession

from fims.core import dependencies as deps
from fims.core.pagination import Page, paginated

from . import crud as usr_crud
from . import models as usr_models
from . import schemas as usr_schemas


router = APIRouter(
    tags=["User Management (사용자 관리)"],
    responses={404: {"description": "Not found"}},
)


# =============================================================================
# 1. 인증 (Authentication) 엔드포인트
# =============================================================================
def _issue_tokens(user: usr_models.User) -> dict:
    return {
        "access_token": deps.create_access_token(data={"sub": user.username}),
        "refresh_token": deps.create_refresh_token(data={"sub": user.username}),
        "token_type": "bearer",
    }


@router.post("/auth/token", response_model=usr_schemas.Token, summary="Access Token 획득")
async def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: AsyncSession = Depends(deps.get_db_session),
):
    user = await usr_crud.user.authenticate(db, username=form_data.username, password=form_data.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Inactive user")
    return _issue_tokens(user)


@router.post("/auth/refresh", response_model=usr_schemas.Token, summary="Refresh Token으로 토큰 재발급")
async def refresh_access_token(
    body: usr_schemas.RefreshRequest,
    db: AsyncSession = Depends(deps.get_db_session),
):
    username = deps.decode_refresh_token(body.refresh_token)
    user = await usr_crud.user.get_by_username(db, username=username)
    if user is None or not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Could not validate credentials")
    return _issue_tokens(user)


@router.get("/auth/me", response_model=usr_schemas.UserRead, summary="현재 사용자 정보 조회")
async def read_users_me(current_user: usr_models.User = Depends(deps.get_current_active_user)):
    return current_user


@router.put("/auth/profile", response_model=usr_schemas.UserRead, summary="본인 프로필 수정")
async def update_my_profile(
    body: usr_schemas.ProfileUpdate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: usr_models.User = Depends(deps.get_current_active_user),
):
    return await usr_crud.user.update_profile(db, db_obj=current_user, obj_in=body)


@router.put("/auth/password", status_code=status.HTTP_204_NO_CONTENT, summary="본인 비밀번호 변경")
async def change_my_password(
    body: usr_schemas.PasswordChange,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: usr_models.User = Depends(deps.get_current_active_user),
):
    if not deps.verify_password(body.current_password, current_user.password_hash):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Current password is incorrect")
    await usr_crud.user.set_password(db, db_obj=current_user, new_password=body.new_password)
    return None


# =============================================================================
# 2. 사용자 (User) 관리 엔드포인트 - 관리자 전용
# =============================================================================
@router.post("/users", response_model=usr_schemas.UserRead, status_code=status.HTTP_201_CREATED, summary="새 사용자 생성")
async def create_user(
    user: usr_schemas.UserCreate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_admin_user: usr_models.User = Depends(deps.get_current_admin_user),
):
    if user.role < current_admin_user.role:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Cannot grant a role above your own.")
    return await usr_crud.user.create(db, obj_in=user)


@router.get("/users", response_model=Page[usr_schemas.UserRead], summary="사용자 목록 조회")
async def read_users(
    search: Optional[str] = Query(None, description="사용자명/이름/이메일 검색어"),
    role: Optional[usr_models.UserRole] = None,
    is_active: Optional[bool] = None,
    params: deps.PageParams = Depends(deps.page_params),
    db: AsyncSession = Depends(deps.get_db_session),
    current_admin_user: usr_models.User = Depends(deps.get_current_admin_user),
):
    filters = {"role": role, "is_active": is_active}
    users = await usr_crud.user.get_filtered(
        db, filters=filters, search=search, order_desc=False, skip=params.skip, limit=params.limit
    )
    total = await usr_crud.user.count_filtered(db, filters=filters, search=search)
    return paginated(users, params, total)


@router.get("/users/stats", response_model=usr_schemas.UserStats, summary="사용자 통계 조회")
async def read_user_stats(
    db: AsyncSession = Depends(deps.get_db_session),
    current_admin_user: usr_models.User = Depends(deps.get_current_admin_user),
):
    return await usr_crud.user.stats(db)


@router.get("/users/{user_id}", response_model=usr_schemas.UserRead, summary="특정 사용자 조회")
async def read_user(
    user_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_admin_user: usr_models.User = Depends(deps.get_current_admin_user),
):
    return await usr_crud.user.get_or_raise(db, user_id)


@router.put("/users/{user_id}", response_model=usr_schemas.UserRead, summary="사용자 업데이트")
async def update_user(
    user_id: int,
    user_in: usr_schemas.UserUpdate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_admin_user: usr_models.User = Depends(deps.get_current_admin_user),
):
    db_user = await usr_crud.user.get_or_raise(db, user_id)
    if user_in.role is not None and user_in.role < current_admin_user.role:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Cannot grant a role above your own.")
    return await usr_crud.user.update(db, db_obj=db_user, obj_in=user_in)


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT, summary="사용자 삭제")
async def delete_user(
    user_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_admin_user: usr_models.User = Depends(deps.get_current_admin_user),
):
    if user_id == current_admin_user.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot delete your own account.")
    await usr_crud.user.remove(db, id=user_id)
    return None
