# fims/domains/pur/crud.py

"""
'pur' 도메인의 조회용 CRUD 모듈입니다.
생성, 상태 전이, 수정, 삭제는 services.PurchaseOrderCoordinator가 담당합니다.
"""

from typing import Optional

from sqlalchemy.orm import selectinload
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from fims.core.crud_base import CRUDBase
from fims.core.exceptions import NotFoundError
from . import models as pur_models
from . import schemas as pur_schemas


class CRUDPurchaseOrder(
    CRUDBase[pur_models.PurchaseOrder, pur_schemas.PurchaseOrderCreate, pur_schemas.PurchaseOrderUpdate]
):
    search_fields = ("po_number",)

    async def get_with_items(
        self, db: AsyncSession, id: int, *, for_update: bool = False
    ) -> pur_models.PurchaseOrder:
        """
        발주와 품목 전체를 함께 읽습니다. 없으면 NotFoundError.
        for_update=True이면 발주 행을 잠금 조회합니다 (상태 전이용).
        """
        statement = (
            select(pur_models.PurchaseOrder)
            .where(pur_models.PurchaseOrder.id == id)
            .options(selectinload(pur_models.PurchaseOrder.items))
            .execution_options(populate_existing=True)
        )
        if for_update:
            statement = statement.with_for_update()
        result = await db.execute(statement)
        order: Optional[pur_models.PurchaseOrder] = result.scalars().first()
        if order is None:
            raise NotFoundError(self.resource_name, id)
        return order


purchase_order = CRUDPurchaseOrder(pur_models.PurchaseOrder, resource_name="Purchase order")
