# fims/domains/ptn/crud.py

"""
'ptn' 도메인 (공급업체, 고객)의 CRUD 작업을 위한 함수들을 정의하는 모듈입니다.
"""

import logging

from sqlalchemy import func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from fims.core.crud_base import CRUDBase
from fims.core.exceptions import ReferentialIntegrityError
from fims.domains.inv import models as inv_models
from fims.domains.pur import models as pur_models
from fims.domains.sal import models as sal_models
from . import models as ptn_models
from . import schemas as ptn_schemas

logger = logging.getLogger(__name__)


async def _count(db: AsyncSession, statement) -> int:
    result = await db.execute(statement)
    return result.scalar_one()


async def _refuse_if_referenced(db: AsyncSession, resource: str, id: int, checks) -> None:
    """(키, 사유, 건수 조회문) 순서대로 종속 행을 세어 하나라도 있으면 ReferentialIntegrityError."""
    for key, reason, statement in checks:
        count = await _count(db, statement)
        if count:
            logger.warning("%s %s delete refused: %s=%s", resource, id, key, count)
            raise ReferentialIntegrityError(f"Cannot delete {resource.lower()}: {reason}", {key: count})


# =============================================================================
# 1. 공급업체 (Supplier) CRUD
# =============================================================================
class CRUDSupplier(CRUDBase[ptn_models.Supplier, ptn_schemas.SupplierCreate, ptn_schemas.SupplierUpdate]):
    search_fields = ("name", "contact")

    async def remove(self, db: AsyncSession, *, id: int) -> ptn_models.Supplier:
        """
        공급업체를 삭제합니다.
        이 업체를 기본 공급업체로 지정한 자재가 있거나, 이 업체 앞으로 된 발주가 하나라도 있으면
        (진행 중인 발주를 먼저 보고하고, 종료된 발주 이력도 포함) 거부합니다.
        """
        db_obj = await self.get_or_raise(db, id)

        orders = (
            select(func.count()).select_from(pur_models.PurchaseOrder)
            .where(pur_models.PurchaseOrder.supplier_id == id)
        )
        await _refuse_if_referenced(db, self.resource_name, id, [
            (
                "materials",
                "it is referenced by materials",
                select(func.count()).select_from(inv_models.Material)
                .where(inv_models.Material.supplier_id == id),
            ),
            (
                "open_purchase_orders",
                "it has pending or approved purchase orders",
                orders.where(pur_models.PurchaseOrder.status.in_(
                    [pur_models.PurchaseOrderStatus.PENDING, pur_models.PurchaseOrderStatus.APPROVED]
                )),
            ),
            ("purchase_orders", "it appears in purchase order history", orders),
        ])

        await db.delete(db_obj)
        await db.commit()
        logger.info("Supplier deleted: %s (ID: %s)", db_obj.name, id)
        return db_obj


# =============================================================================
# 2. 고객 (Customer) CRUD
# =============================================================================
class CRUDCustomer(CRUDBase[ptn_models.Customer, ptn_schemas.CustomerCreate, ptn_schemas.CustomerUpdate]):
    search_fields = ("name", "contact", "phone")

    async def remove(self, db: AsyncSession, *, id: int) -> ptn_models.Customer:
        """고객을 삭제합니다. 진행 중인(대기/확정) 판매 주문이나 종료된 주문 이력이 있으면 거부합니다."""
        db_obj = await self.get_or_raise(db, id)

        orders = (
            select(func.count()).select_from(sal_models.SalesOrder)
            .where(sal_models.SalesOrder.customer_id == id)
        )
        await _refuse_if_referenced(db, self.resource_name, id, [
            (
                "open_sales_orders",
                "it has pending or confirmed sales orders",
                orders.where(sal_models.SalesOrder.status.in_(
                    [sal_models.SalesOrderStatus.PENDING, sal_models.SalesOrderStatus.CONFIRMED]
                )),
            ),
            ("sales_orders", "it appears in sales order history", orders),
        ])

        await db.delete(db_obj)
        await db.commit()
        logger.info("Customer deleted: %s (ID: %s)", db_obj.name, id)
        return db_obj


supplier = CRUDSupplier(ptn_models.Supplier, resource_name="Supplier")
customer = CRUDCustomer(ptn_models.Customer, resource_name="Customer")
