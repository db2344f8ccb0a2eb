# fims/domains/usr/crud.py

"""
'usr' 도메인의 CRUD 작업을 담당하는 모듈입니다.
"""

import logging
from typing import Optional

from sqlalchemy import func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from fims.core.crud_base import CRUDBase
from fims.core.exceptions import DuplicateError, ReferentialIntegrityError
from fims.core.security import get_password_hash, verify_password
from . import models as usr_models
from . import schemas as usr_schemas

logger = logging.getLogger(__name__)


# =============================================================================
# 1. users 테이블 CRUD
# =============================================================================
class CRUDUser(CRUDBase[usr_models.User, usr_schemas.UserCreate, usr_schemas.UserUpdate]):
    search_fields = ("username", "full_name", "email")

    def __init__(self):
        super().__init__(model=usr_models.User, resource_name="User")

    async def get_by_username(self, db: AsyncSession, *, username: str) -> Optional[usr_models.User]:
        """사용자명으로 사용자를 조회합니다."""
        return await self.get_by_attribute(db, attribute="username", value=username)

    async def get_by_email(self, db: AsyncSession, *, email: str) -> Optional[usr_models.User]:
        """이메일로 사용자를 조회합니다."""
        return await self.get_by_attribute(db, attribute="email", value=email)

    async def create(self, db: AsyncSession, *, obj_in: usr_schemas.UserCreate) -> usr_models.User:
        """새로운 사용자를 생성하며 비밀번호를 해싱하고 중복을 검사합니다."""
        if await self.get_by_username(db, username=obj_in.username):
            raise DuplicateError("Username already registered", {"username": obj_in.username})
        if obj_in.email and await self.get_by_email(db, email=obj_in.email):
            raise DuplicateError("Email already registered", {"email": obj_in.email})

        user_data = obj_in.model_dump(exclude={"password"})
        db_user = usr_models.User(**user_data, password_hash=get_password_hash(obj_in.password))

        db.add(db_user)
        await db.commit()
        await db.refresh(db_user)
        logger.info("User created: %s (%s)", db_user.username, db_user.role.name)
        return db_user

    async def authenticate(self, db: AsyncSession, *, username: str, password: str) -> Optional[usr_models.User]:
        """사용자명과 비밀번호를 사용하여 사용자를 인증합니다."""
        user = await self.get_by_username(db, username=username)
        if not user:
            return None
        if not verify_password(password, user.password_hash):
            return None
        return user

    async def update(self, db: AsyncSession, *, db_obj: usr_models.User, obj_in: usr_schemas.UserUpdate) -> usr_models.User:
        """
        사용자 정보를 업데이트합니다. 최고 관리자 계정의 역할 변경 및 비활성화를 방지합니다.
        """
        if obj_in.email is not None and obj_in.email != db_obj.email:
            existing = await self.get_by_email(db, email=obj_in.email)
            if existing and existing.id != db_obj.id:
                raise DuplicateError("Email already registered", {"email": obj_in.email})

        if db_obj.role == usr_models.UserRole.SUPERUSER:
            if obj_in.role is not None and obj_in.role != usr_models.UserRole.SUPERUSER:
                raise ReferentialIntegrityError("Cannot change the role of a superuser account.")
            if obj_in.is_active is False:
                raise ReferentialIntegrityError("Cannot deactivate a superuser account.")

        return await super().update(db, db_obj=db_obj, obj_in=obj_in)

    async def update_profile(
        self, db: AsyncSession, *, db_obj: usr_models.User, obj_in: usr_schemas.ProfileUpdate
    ) -> usr_models.User:
        """본인 프로필(이메일, 이름)만 수정합니다. 역할과 활성 상태는 바꿀 수 없습니다."""
        changes = usr_schemas.UserUpdate(**obj_in.model_dump(exclude_unset=True))
        db_obj = await self.update(db, db_obj=db_obj, obj_in=changes)
        logger.info("Profile updated for user: %s", db_obj.username)
        return db_obj

    async def stats(self, db: AsyncSession) -> usr_schemas.UserStats:
        """전체/활성/비활성 사용자 수와 역할별 사용자 수"""
        statement = (
            select(usr_models.User.role, usr_models.User.is_active, func.count())
            .group_by(usr_models.User.role, usr_models.User.is_active)
        )
        result = await db.execute(statement)

        by_role = {role.name.lower(): 0 for role in usr_models.UserRole}
        active = inactive = 0
        for role, is_active, count in result.all():
            by_role[usr_models.UserRole(role).name.lower()] += count
            if is_active:
                active += count
            else:
                inactive += count
        return usr_schemas.UserStats(total=active + inactive, active=active, inactive=inactive, by_role=by_role)

    async def set_password(self, db: AsyncSession, *, db_obj: usr_models.User, new_password: str) -> usr_models.User:
        db_obj.password_hash = get_password_hash(new_password)
        db.add(db_obj)
        await db.commit()
        await db.refresh(db_obj)
        return db_obj

    async def remove(self, db: AsyncSession, *, id: int) -> usr_models.User:
        """
        사용자를 삭제합니다. 최고 관리자 계정은 삭제를 허용하지 않습니다.
        """
        user_to_delete = await self.get_or_raise(db, id)
        if user_to_delete.role == usr_models.UserRole.SUPERUSER:
            raise ReferentialIntegrityError("Cannot delete a superuser account directly.")

        return await super().delete(db, id=id)


user = CRUDUser()
