# fims/domains/sal/crud.py

"""
'sal' 도메인의 조회용 CRUD 모듈입니다. 상태 전이는 services.SalesOrderCoordinator가 담당합니다.
"""

from typing import Optional

from sqlalchemy.orm import selectinload
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from fims.core.crud_base import CRUDBase
from fims.core.exceptions import NotFoundError
from . import models as sal_models
from . import schemas as sal_schemas


class CRUDSalesOrder(CRUDBase[sal_models.SalesOrder, sal_schemas.SalesOrderCreate, sal_schemas.SalesOrderUpdate]):
    search_fields = ("so_number",)

    async def get_with_items(
        self, db: AsyncSession, id: int, *, for_update: bool = False
    ) -> sal_models.SalesOrder:
        statement = (
            select(sal_models.SalesOrder)
            .where(sal_models.SalesOrder.id == id)
            .options(selectinload(sal_models.SalesOrder.items))
            .execution_options(populate_existing=True)
        )
        if for_update:
            statement = statement.with_for_update()
        result = await db.execute(statement)
        order: Optional[sal_models.SalesOrder] = result.scalars().first()
        if order is None:
            raise NotFoundError(self.resource_name, id)
        return order


sales_order = CRUDSalesOrder(sal_models.SalesOrder, resource_name="Sales order")
