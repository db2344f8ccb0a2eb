# fims/domains/pur/services.py

"""
구매 발주 코디네이터(PurchaseOrderCoordinator)를 정의하는 모듈입니다.

각 연산은 transaction_scope 하나 안에서 실행됩니다. 상태 검사, 재고 입고, 원장 기록,
상태 변경이 모두 반영되거나 모두 취소되며, 도메인 오류는 잡지 않고 그대로 전달합니다.
"""

import logging
from datetime import date
from typing import Collection, Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from fims.core.database import transaction_scope
from fims.core.exceptions import InvalidTransitionError, NotFoundError
from fims.domains.inv import models as inv_models
from fims.domains.inv.services import post_movement
from fims.domains.ptn import models as ptn_models
from fims.utils.numbering import allocate_order_number
from fims.utils.order_lines import aggregate_by_item, build_order_lines
from . import crud as pur_crud
from . import models as pur_models
from . import schemas as pur_schemas

logger = logging.getLogger(__name__)

Status = pur_models.PurchaseOrderStatus


def _require_status(order: pur_models.PurchaseOrder, allowed: Collection[Status], action: str) -> None:
    if order.status not in allowed:
        logger.warning("PO %s: cannot %s from status '%s'", order.po_number, action, order.status.value)
        raise InvalidTransitionError("purchase order", order.status.value, action)


class PurchaseOrderCoordinator:
    """
    pending → approved → received, pending|approved → cancelled.
    received 전이에서만 각 품목 자재를 입고(IN)하고 ('PO', 발주 ID) 참조로 원장을 남깁니다.
    """

    async def _validate_supplier(self, db: AsyncSession, supplier_id: int) -> None:
        if await db.get(ptn_models.Supplier, supplier_id) is None:
            raise NotFoundError("Supplier", supplier_id)

    async def _build_items(self, db: AsyncSession, lines):
        for material_id in {line.material_id for line in lines}:
            if await db.get(inv_models.Material, material_id) is None:
                raise NotFoundError("Material", material_id)
        return build_order_lines(pur_models.POItem, lines, "material_id")

    async def create(
        self, db: AsyncSession, *, obj_in: pur_schemas.PurchaseOrderCreate, actor_id: Optional[int] = None
    ) -> pur_models.PurchaseOrder:
        async with transaction_scope(db):
            await self._validate_supplier(db, obj_in.supplier_id)
            items, total = await self._build_items(db, obj_in.items)
            po_number = await allocate_order_number(
                db, model=pur_models.PurchaseOrder, field="po_number", prefix="PO", requested=obj_in.po_number
            )
            order = pur_models.PurchaseOrder(
                po_number=po_number,
                supplier_id=obj_in.supplier_id,
                order_date=obj_in.order_date or date.today(),
                total=total,
                notes=obj_in.notes,
                created_by=actor_id,
            )
            order.items = items
            db.add(order)
            await db.flush()
            order_id = order.id

        logger.info("PO %s created (ID: %s, total %s) by user %s", po_number, order_id, total, actor_id)
        return await pur_crud.purchase_order.get_with_items(db, order_id)

    async def approve(
        self, db: AsyncSession, *, po_id: int, actor_id: Optional[int] = None
    ) -> pur_models.PurchaseOrder:
        async with transaction_scope(db):
            order = await pur_crud.purchase_order.get_with_items(db, po_id, for_update=True)
            _require_status(order, {Status.PENDING}, "approve")
            order.status = Status.APPROVED
            db.add(order)

        logger.info("PO %s approved (ID: %s) by user %s", order.po_number, po_id, actor_id)
        return await pur_crud.purchase_order.get_with_items(db, po_id)

    async def receive(
        self, db: AsyncSession, *, po_id: int, actor_id: Optional[int] = None
    ) -> pur_models.PurchaseOrder:
        """
        승인된 발주를 입고 처리합니다. 자재별로 한 번씩 재고를 늘리고 원장을 기록합니다.
        한 품목이라도 실패하면 (예: 자재 삭제됨) 모든 입고가 취소되고 상태는 approved로 남습니다.
        """
        async with transaction_scope(db):
            order = await pur_crud.purchase_order.get_with_items(db, po_id, for_update=True)
            _require_status(order, {Status.APPROVED}, "receive")
            po_number = order.po_number

            for material_id, quantity in aggregate_by_item(order.items, "material_id").items():
                await post_movement(
                    db,
                    item_type=inv_models.ItemKind.MATERIAL,
                    item_id=material_id,
                    movement_type=inv_models.MovementType.IN,
                    quantity=quantity,
                    reference_type=inv_models.ReferenceType.PO,
                    reference_id=po_id,
                    notes=f"Received from PO: {po_number}",
                    actor_id=actor_id,
                )

            order.status = Status.RECEIVED
            db.add(order)

        logger.info("PO %s received (ID: %s) by user %s", po_number, po_id, actor_id)
        return await pur_crud.purchase_order.get_with_items(db, po_id)

    async def cancel(
        self, db: AsyncSession, *, po_id: int, actor_id: Optional[int] = None
    ) -> pur_models.PurchaseOrder:
        async with transaction_scope(db):
            order = await pur_crud.purchase_order.get_with_items(db, po_id, for_update=True)
            _require_status(order, {Status.PENDING, Status.APPROVED}, "cancel")
            order.status = Status.CANCELLED
            db.add(order)

        logger.info("PO %s cancelled (ID: %s) by user %s", order.po_number, po_id, actor_id)
        return await pur_crud.purchase_order.get_with_items(db, po_id)

    async def update(
        self,
        db: AsyncSession,
        *,
        po_id: int,
        obj_in: pur_schemas.PurchaseOrderUpdate,
        actor_id: Optional[int] = None,
    ) -> pur_models.PurchaseOrder:
        """received/cancelled 발주는 수정할 수 없습니다. items가 오면 품목 전체를 교체합니다."""
        async with transaction_scope(db):
            order = await pur_crud.purchase_order.get_with_items(db, po_id, for_update=True)
            _require_status(order, {Status.PENDING, Status.APPROVED}, "update")

            if obj_in.supplier_id is not None:
                await self._validate_supplier(db, obj_in.supplier_id)
                order.supplier_id = obj_in.supplier_id
            if obj_in.order_date is not None:
                order.order_date = obj_in.order_date
            if "notes" in obj_in.model_fields_set:
                order.notes = obj_in.notes
            if obj_in.items is not None:
                items, total = await self._build_items(db, obj_in.items)
                order.items = items
                order.total = total
            db.add(order)

        logger.info("PO %s updated (ID: %s) by user %s", order.po_number, po_id, actor_id)
        return await pur_crud.purchase_order.get_with_items(db, po_id)

    async def delete(self, db: AsyncSession, *, po_id: int, actor_id: Optional[int] = None) -> None:
        """입고 완료(received)된 발주는 삭제할 수 없습니다."""
        async with transaction_scope(db):
            order = await pur_crud.purchase_order.get_with_items(db, po_id, for_update=True)
            _require_status(order, {Status.PENDING, Status.APPROVED, Status.CANCELLED}, "delete")
            po_number = order.po_number
            await db.delete(order)

        logger.info("PO %s deleted (ID: %s) by user %s", po_number, po_id, actor_id)


purchase_orders = PurchaseOrderCoordinator()
