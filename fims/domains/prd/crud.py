# fims/domains/prd/crud.py

"""
'prd' 도메인의 조회용 CRUD 모듈입니다. 상태 전이는 services.WorkOrderCoordinator가 담당합니다.
"""

from typing import Optional

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from fims.core.crud_base import CRUDBase
from fims.core.exceptions import NotFoundError
from . import models as prd_models
from . import schemas as prd_schemas


class CRUDWorkOrder(CRUDBase[prd_models.WorkOrder, prd_schemas.WorkOrderCreate, prd_schemas.WorkOrderUpdate]):
    search_fields = ("wo_number",)

    async def get_for_update(self, db: AsyncSession, id: int) -> prd_models.WorkOrder:
        """작업지시 행을 잠금 조회합니다. 없으면 NotFoundError."""
        statement = (
            select(prd_models.WorkOrder)
            .where(prd_models.WorkOrder.id == id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await db.execute(statement)
        order: Optional[prd_models.WorkOrder] = result.scalars().first()
        if order is None:
            raise NotFoundError(self.resource_name, id)
        return order


work_order = CRUDWorkOrder(prd_models.WorkOrder, resource_name="Work order")
