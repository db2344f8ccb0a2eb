# fims/core/crud_base.py

"""
공통 CRUD(Create, Read, Update, Delete) 작업을 위한 기본 클래스 모듈입니다.
모든 메서드는 비동기(async) 환경에 맞게 작성되었습니다.
"""

import logging
from typing import Any, Dict, Generic, List, Optional, Sequence, Type, TypeVar
from datetime import date, timedelta

from sqlalchemy import func, or_
from sqlmodel import SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession
from pydantic import BaseModel

from fims.core.exceptions import NotFoundError

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound=SQLModel)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)


class CRUDBase(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    """
    모든 CRUD 작업에 대한 기본 클래스를 정의합니다.
    search_fields는 get_filtered/count_filtered의 search 인자가 적용될 컬럼 이름 목록입니다.
    """
    search_fields: Sequence[str] = ()

    def __init__(self, model: Type[ModelType], resource_name: Optional[str] = None):
        self.model = model
        self.resource_name = resource_name or model.__name__

    async def get(self, db: AsyncSession, id: Any) -> Optional[ModelType]:
        """ID를 기준으로 단일 레코드를 조회합니다."""
        return await db.get(self.model, id)

    async def get_or_raise(self, db: AsyncSession, id: Any) -> ModelType:
        """ID로 레코드를 조회하고, 없으면 NotFoundError를 발생시킵니다."""
        db_obj = await db.get(self.model, id)
        if db_obj is None:
            raise NotFoundError(self.resource_name, id)
        return db_obj

    async def get_by_attribute(
        self, db: AsyncSession, *, attribute: str, value: Any
    ) -> Optional[ModelType]:
        statement = select(self.model).where(getattr(self.model, attribute) == value)
        response = await db.execute(statement)
        return response.scalars().first()

    def _conditions(
        self,
        filters: Optional[Dict[str, Any]],
        search: Optional[str],
        date_range_field: Optional[str],
        start_date: Optional[date],
        end_date: Optional[date],
    ) -> list:
        conditions = []

        # 1. 다중 속성 필터링 (값이 None인 항목은 무시)
        for attribute, value in (filters or {}).items():
            if value is None:
                continue
            if hasattr(self.model, attribute):
                conditions.append(getattr(self.model, attribute) == value)
            else:
                logger.warning("Model %s has no attribute '%s'", self.model.__name__, attribute)

        # 2. 키워드 검색 (대소문자 구분 없는 부분 일치)
        if search and self.search_fields:
            pattern = f"%{search}%"
            conditions.append(or_(*(getattr(self.model, name).ilike(pattern) for name in self.search_fields)))

        # 3. 기간 검색 필터링
        if date_range_field and hasattr(self.model, date_range_field):
            date_field = getattr(self.model, date_range_field)
            if start_date is not None:
                conditions.append(date_field >= start_date)
            if end_date is not None:
                # end_date 당일까지 포함하기 위함
                conditions.append(date_field < end_date + timedelta(days=1))
        elif date_range_field:
            logger.warning("Model %s has no attribute '%s' for date range filtering.", self.model.__name__, date_range_field)

        return conditions

    async def get_filtered(
        self,
        db: AsyncSession,
        *,
        filters: Optional[Dict[str, Any]] = None,  # 다중 속성 필터: {"attribute_name": "value"}
        search: Optional[str] = None,
        date_range_field: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        order_by_field: Optional[str] = None,
        order_desc: bool = True,
        skip: int = 0,
        limit: int = 100
    ) -> List[ModelType]:
        """다중 속성, 키워드, 기간 검색 기능을 포함한 다중 조회."""
        query = select(self.model)
        conditions = self._conditions(filters, search, date_range_field, start_date, end_date)
        if conditions:
            query = query.where(*conditions)

        if order_by_field and hasattr(self.model, order_by_field):
            column = getattr(self.model, order_by_field)
            query = query.order_by(column.desc() if order_desc else column)
        elif order_by_field:
            logger.warning("Model %s has no attribute '%s' for ordering.", self.model.__name__, order_by_field)
        # 동일 정렬값 사이의 순서를 id로 고정합니다.
        query = query.order_by(self.model.id.desc() if order_desc else self.model.id)

        query = query.offset(skip).limit(limit)
        result = await db.execute(query)
        return result.scalars().all()

    async def count_filtered(
        self,
        db: AsyncSession,
        *,
        filters: Optional[Dict[str, Any]] = None,
        search: Optional[str] = None,
        date_range_field: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> int:
        """get_filtered와 같은 조건으로 전체 건수를 셉니다 (페이징 메타데이터용)."""
        query = select(func.count()).select_from(self.model)
        conditions = self._conditions(filters, search, date_range_field, start_date, end_date)
        if conditions:
            query = query.where(*conditions)
        result = await db.execute(query)
        return result.scalar_one()

    async def create(self, db: AsyncSession, *, obj_in: CreateSchemaType) -> ModelType:
        """새로운 레코드를 생성합니다."""
        db_obj = self.model.model_validate(obj_in)
        db.add(db_obj)
        await db.commit()
        await db.refresh(db_obj)
        return db_obj

    async def update(
        self, db: AsyncSession, *, db_obj: ModelType, obj_in: UpdateSchemaType
    ) -> ModelType:
        """기존 레코드를 업데이트합니다."""
        update_data = obj_in.model_dump(exclude_unset=True)
        for key, value in update_data.items():
            setattr(db_obj, key, value)

        db.add(db_obj)
        await db.commit()
        await db.refresh(db_obj)
        return db_obj

    async def delete(self, db: AsyncSession, *, id: Any) -> Optional[ModelType]:
        """ID를 기준으로 레코드를 삭제합니다."""
        db_obj = await db.get(self.model, id)
        if db_obj:
            await db.delete(db_obj)
            await db.commit()
        return db_obj
