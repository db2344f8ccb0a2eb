# fims/domains/inv/crud.py

"""
'inv' 도메인의 CRUD(Create, Read, Update, Delete) 작업을 위한 함수들을 정의하는 모듈입니다.
자재/제품의 재고(stock)는 여기서 직접 수정하지 않고, 초기 재고만 원장 기록과 함께 등록합니다.
"""

import logging
from typing import List, Optional, Union

from sqlalchemy import func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from fims.core.crud_base import CRUDBase
from fims.core.database import transaction_scope
from fims.core.exceptions import DuplicateError, NotFoundError, ReferentialIntegrityError
from fims.domains.ptn import models as ptn_models
from fims.domains.pur import models as pur_models
from fims.domains.prd import models as prd_models
from fims.domains.sal import models as sal_models
from . import models as inv_models
from . import schemas as inv_schemas
from .services import stock_ledger

logger = logging.getLogger(__name__)


async def _count(db: AsyncSession, statement) -> int:
    result = await db.execute(statement)
    return result.scalar_one()


# =============================================================================
# 1. 자재/제품 공통 CRUD
# =============================================================================
class StockItemCRUD(CRUDBase):
    """
    자재와 제품이 공유하는 SKU 중복 검사, 초기 재고 등록 로직입니다.
    하위 클래스는 item_kind를 지정합니다.
    """
    item_kind: inv_models.ItemKind
    search_fields = ("sku", "name")

    async def get_by_sku(self, db: AsyncSession, *, sku: str):
        return await self.get_by_attribute(db, attribute="sku", value=sku)

    async def _ensure_unique_sku(self, db: AsyncSession, sku: str, exclude_id: Optional[int] = None) -> None:
        existing = await self.get_by_sku(db, sku=sku)
        if existing is not None and existing.id != exclude_id:
            raise DuplicateError(f"{self.resource_name} with SKU '{sku}' already exists", {"sku": sku})

    async def _validate_references(self, db: AsyncSession, data: dict) -> None:
        """하위 클래스에서 FK 대상 존재 여부를 검사합니다."""

    async def create(self, db: AsyncSession, *, obj_in, actor_id: Optional[int] = None):
        """
        새 품목을 등록합니다. 초기 재고가 있으면 같은 트랜잭션에서 ADJUSTMENT 원장을 남깁니다.
        """
        await self._ensure_unique_sku(db, obj_in.sku)
        await self._validate_references(db, obj_in.model_dump())

        async with transaction_scope(db):
            db_obj = self.model.model_validate(obj_in)
            db.add(db_obj)
            await db.flush()
            if db_obj.stock > 0:
                await stock_ledger.record(
                    db,
                    item_type=self.item_kind,
                    item_id=db_obj.id,
                    movement_type=inv_models.MovementType.ADJUST,
                    quantity=db_obj.stock,
                    reference_type=inv_models.ReferenceType.ADJUSTMENT,
                    notes="Initial stock",
                    actor_id=actor_id,
                )
        await db.refresh(db_obj)
        logger.info("%s created: %s (ID: %s)", self.resource_name, db_obj.sku, db_obj.id)
        return db_obj

    async def update(self, db: AsyncSession, *, db_obj, obj_in):
        update_data = obj_in.model_dump(exclude_unset=True)
        if update_data.get("sku") and update_data["sku"] != db_obj.sku:
            await self._ensure_unique_sku(db, update_data["sku"], exclude_id=db_obj.id)
        await self._validate_references(db, update_data)
        return await super().update(db, db_obj=db_obj, obj_in=obj_in)

    async def _refuse_if_referenced(self, db: AsyncSession, id: int, checks) -> None:
        """
        checks의 (키, 사유, 건수 조회문) 순서대로 종속 행을 세어 하나라도 있으면 거부합니다.
        진행 중인 문서를 먼저 검사하고, 마지막으로 상태와 무관한 전체 이력을 검사합니다 (FK RESTRICT).
        """
        for key, reason, statement in checks:
            count = await _count(db, statement)
            if count:
                logger.warning("%s %s delete refused: %s=%s", self.resource_name, id, key, count)
                raise ReferentialIntegrityError(
                    f"Cannot delete {self.resource_name.lower()}: {reason}", {key: count}
                )


class MaterialCRUD(StockItemCRUD):
    item_kind = inv_models.ItemKind.MATERIAL

    async def _validate_references(self, db: AsyncSession, data: dict) -> None:
        supplier_id = data.get("supplier_id")
        if supplier_id is not None and await db.get(ptn_models.Supplier, supplier_id) is None:
            raise NotFoundError("Supplier", supplier_id)

    async def remove(self, db: AsyncSession, *, id: int) -> inv_models.Material:
        """
        자재를 삭제합니다. BOM에 사용 중이거나 발주 품목에 남아 있으면 (상태 무관) 거부합니다.
        """
        db_obj = await self.get_or_raise(db, id)

        po_lines = (
            select(func.count()).select_from(pur_models.POItem)
            .join(pur_models.PurchaseOrder, pur_models.PurchaseOrder.id == pur_models.POItem.po_id)
            .where(pur_models.POItem.material_id == id)
        )
        await self._refuse_if_referenced(db, id, [
            (
                "bom_entries",
                "it is used in bills of materials",
                select(func.count()).select_from(inv_models.BillOfMaterial)
                .where(inv_models.BillOfMaterial.material_id == id),
            ),
            (
                "open_purchase_order_lines",
                "it has pending or approved purchase orders",
                po_lines.where(pur_models.PurchaseOrder.status.in_(
                    [pur_models.PurchaseOrderStatus.PENDING, pur_models.PurchaseOrderStatus.APPROVED]
                )),
            ),
            ("purchase_order_lines", "it appears in purchase order history", po_lines),
        ])

        await db.delete(db_obj)
        await db.commit()
        logger.info("Material deleted: %s (ID: %s)", db_obj.sku, id)
        return db_obj


class ProductCRUD(StockItemCRUD):
    item_kind = inv_models.ItemKind.PRODUCT

    async def remove(self, db: AsyncSession, *, id: int) -> inv_models.Product:
        """
        제품을 삭제합니다. BOM, 판매 품목, 작업지시 중 하나라도 참조하면 거부합니다.
        진행 중인(대기/확정 판매, 대기/진행 작업지시) 문서를 먼저 보고하고, 그다음 종료된 이력을 보고합니다.
        """
        db_obj = await self.get_or_raise(db, id)

        so_lines = (
            select(func.count()).select_from(sal_models.SOItem)
            .join(sal_models.SalesOrder, sal_models.SalesOrder.id == sal_models.SOItem.so_id)
            .where(sal_models.SOItem.product_id == id)
        )
        work_orders = (
            select(func.count()).select_from(prd_models.WorkOrder)
            .where(prd_models.WorkOrder.product_id == id)
        )
        await self._refuse_if_referenced(db, id, [
            (
                "bom_entries",
                "it has bills of materials",
                select(func.count()).select_from(inv_models.BillOfMaterial)
                .where(inv_models.BillOfMaterial.product_id == id),
            ),
            (
                "open_sales_order_lines",
                "it has pending or confirmed sales orders",
                so_lines.where(sal_models.SalesOrder.status.in_(
                    [sal_models.SalesOrderStatus.PENDING, sal_models.SalesOrderStatus.CONFIRMED]
                )),
            ),
            (
                "open_work_orders",
                "it has pending or in-progress work orders",
                work_orders.where(prd_models.WorkOrder.status.in_(
                    [prd_models.WorkOrderStatus.PENDING, prd_models.WorkOrderStatus.IN_PROGRESS]
                )),
            ),
            ("sales_order_lines", "it appears in sales order history", so_lines),
            ("work_orders", "it appears in work order history", work_orders),
        ])

        await db.delete(db_obj)
        await db.commit()
        logger.info("Product deleted: %s (ID: %s)", db_obj.sku, id)
        return db_obj


# =============================================================================
# 2. BOM CRUD
# =============================================================================
class BillOfMaterialCRUD(
    CRUDBase[
        inv_models.BillOfMaterial,
        inv_schemas.BillOfMaterialCreate,
        inv_schemas.BillOfMaterialUpdate,
    ]
):
    async def get_by_pair(
        self, db: AsyncSession, *, product_id: int, material_id: int
    ) -> Optional[inv_models.BillOfMaterial]:
        statement = select(self.model).where(
            self.model.product_id == product_id, self.model.material_id == material_id
        )
        result = await db.execute(statement)
        return result.scalars().first()

    async def get_by_product(self, db: AsyncSession, *, product_id: int) -> List[inv_models.BillOfMaterial]:
        statement = select(self.model).where(self.model.product_id == product_id).order_by(self.model.id)
        result = await db.execute(statement)
        return result.scalars().all()

    async def _validate(
        self, db: AsyncSession, product_id: int, material_id: int, exclude_id: Optional[int] = None
    ) -> None:
        if await db.get(inv_models.Product, product_id) is None:
            raise NotFoundError("Product", product_id)
        if await db.get(inv_models.Material, material_id) is None:
            raise NotFoundError("Material", material_id)
        existing = await self.get_by_pair(db, product_id=product_id, material_id=material_id)
        if existing is not None and existing.id != exclude_id:
            raise DuplicateError(
                "BOM entry for this product and material already exists",
                {"product_id": product_id, "material_id": material_id},
            )

    async def create(
        self, db: AsyncSession, *, obj_in: inv_schemas.BillOfMaterialCreate
    ) -> inv_models.BillOfMaterial:
        await self._validate(db, obj_in.product_id, obj_in.material_id)
        return await super().create(db, obj_in=obj_in)

    async def update(
        self,
        db: AsyncSession,
        *,
        db_obj: inv_models.BillOfMaterial,
        obj_in: inv_schemas.BillOfMaterialUpdate,
    ) -> inv_models.BillOfMaterial:
        product_id = obj_in.product_id if obj_in.product_id is not None else db_obj.product_id
        material_id = obj_in.material_id if obj_in.material_id is not None else db_obj.material_id
        await self._validate(db, product_id, material_id, exclude_id=db_obj.id)
        return await super().update(db, db_obj=db_obj, obj_in=obj_in)


#  각 CRUD 클래스의 인스턴스 생성
material = MaterialCRUD(inv_models.Material, resource_name="Material")
product = ProductCRUD(inv_models.Product, resource_name="Product")
bill_of_material = BillOfMaterialCRUD(inv_models.BillOfMaterial, resource_name="BOM entry")


def for_kind(kind: inv_models.ItemKind) -> Union[MaterialCRUD, ProductCRUD]:
    """품목 종류에 대응하는 CRUD 인스턴스를 반환합니다."""
    return material if kind == inv_models.ItemKind.MATERIAL else product
