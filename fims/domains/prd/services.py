# fims/domains/prd/services.py

"""
생산 작업지시 코디네이터(WorkOrderCoordinator)를 정의하는 모듈입니다.

- start: BOM 자재를 자재 ID 오름차순으로 잠근 뒤 부족 자재가 하나라도 있으면 전체 부족 목록과 함께 거부하고,
  아니면 자재별로 한 번씩 출고(OUT)합니다. 소수 소요량은 올림한 정수 단위로 출고합니다.
- complete: 실적 수량만큼 완제품을 입고(IN)합니다.
"""

import logging
import math
from datetime import datetime, UTC
from typing import Collection, List, Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from fims.core.database import transaction_scope
from fims.core.exceptions import (
    InsufficientMaterialsError,
    InvalidQuantityError,
    InvalidTransitionError,
    NotFoundError,
)
from fims.domains.inv import models as inv_models
from fims.domains.inv import schemas as inv_schemas
from fims.domains.inv.services import bom_calculator, post_movement, shortage_detail, stock_mutator
from fims.utils.numbering import allocate_order_number
from . import crud as prd_crud
from . import models as prd_models
from . import schemas as prd_schemas

logger = logging.getLogger(__name__)

Status = prd_models.WorkOrderStatus


def _require_status(order: prd_models.WorkOrder, allowed: Collection[Status], action: str) -> None:
    if order.status not in allowed:
        logger.warning("WO %s: cannot %s from status '%s'", order.wo_number, action, order.status.value)
        raise InvalidTransitionError("work order", order.status.value, action)


def _validate_planned(quantity_planned: int) -> None:
    if quantity_planned <= 0:
        raise InvalidQuantityError(
            "Planned quantity must be positive", {"quantity_planned": quantity_planned}
        )


class WorkOrderCoordinator:
    """pending → in_progress → completed, pending|in_progress → cancelled."""

    async def _validate_product(self, db: AsyncSession, product_id: int) -> None:
        if await db.get(inv_models.Product, product_id) is None:
            raise NotFoundError("Product", product_id)

    async def create(
        self, db: AsyncSession, *, obj_in: prd_schemas.WorkOrderCreate, actor_id: Optional[int] = None
    ) -> prd_models.WorkOrder:
        _validate_planned(obj_in.quantity_planned)
        async with transaction_scope(db):
            await self._validate_product(db, obj_in.product_id)
            wo_number = await allocate_order_number(
                db, model=prd_models.WorkOrder, field="wo_number", prefix="WO", requested=obj_in.wo_number
            )
            order = prd_models.WorkOrder(
                wo_number=wo_number,
                product_id=obj_in.product_id,
                quantity_planned=obj_in.quantity_planned,
                notes=obj_in.notes,
                created_by=actor_id,
            )
            db.add(order)
            await db.flush()

        logger.info("WO %s created (ID: %s, planned %s) by user %s", wo_number, order.id, order.quantity_planned, actor_id)
        return order

    async def requirements(self, db: AsyncSession, *, wo_id: int) -> List[inv_schemas.BOMRequirement]:
        """작업지시 계획 수량 기준의 자재 소요량 (조회 전용)"""
        order = await prd_crud.work_order.get_or_raise(db, wo_id)
        return await bom_calculator.calculate(db, product_id=order.product_id, quantity=order.quantity_planned)

    async def start(self, db: AsyncSession, *, wo_id: int, actor_id: Optional[int] = None) -> prd_models.WorkOrder:
        """
        작업지시를 시작합니다.
        1) BOM 자재 행을 자재 ID 오름차순으로 모두 잠금 조회한 뒤, 잠근 재고 기준으로 부족분을 전부 수집합니다.
        2) 부족분이 있으면 InsufficientMaterialsError (재고 변경 없음, 상태 pending 유지).
        3) 없으면 같은 순서로 자재별 올림 소요량만큼 출고(OUT)합니다.
        """
        async with transaction_scope(db):
            order = await prd_crud.work_order.get_for_update(db, wo_id)
            _require_status(order, {Status.PENDING}, "start")
            wo_number = order.wo_number

            requirements = await bom_calculator.calculate(
                db, product_id=order.product_id, quantity=order.quantity_planned
            )
            requirements.sort(key=lambda requirement: requirement.material_id)

            shortages = []
            for requirement in requirements:
                material = await stock_mutator.load_for_update(
                    db, inv_models.ItemKind.MATERIAL, requirement.material_id
                )
                if material.stock < requirement.required_quantity:
                    shortages.append(
                        shortage_detail(inv_models.ItemKind.MATERIAL, material, requirement.required_quantity)
                    )
            if shortages:
                logger.warning("WO %s start refused: %s material(s) short", wo_number, len(shortages))
                raise InsufficientMaterialsError(shortages)

            for requirement in requirements:
                await post_movement(
                    db,
                    item_type=inv_models.ItemKind.MATERIAL,
                    item_id=requirement.material_id,
                    movement_type=inv_models.MovementType.OUT,
                    quantity=math.ceil(requirement.required_quantity),
                    reference_type=inv_models.ReferenceType.WO,
                    reference_id=wo_id,
                    notes=f"Used for WO: {wo_number}",
                    actor_id=actor_id,
                )

            order.status = Status.IN_PROGRESS
            order.start_date = datetime.now(UTC)
            db.add(order)

        logger.info("WO %s started (ID: %s, %s materials) by user %s", wo_number, wo_id, len(requirements), actor_id)
        return order

    async def complete(
        self, db: AsyncSession, *, wo_id: int, quantity_produced: int, actor_id: Optional[int] = None
    ) -> prd_models.WorkOrder:
        async with transaction_scope(db):
            order = await prd_crud.work_order.get_for_update(db, wo_id)
            _require_status(order, {Status.IN_PROGRESS}, "complete")
            if not 0 < quantity_produced <= order.quantity_planned:
                raise InvalidQuantityError(
                    "Produced quantity must be greater than 0 and not exceed the planned quantity",
                    {"quantity_produced": quantity_produced, "quantity_planned": order.quantity_planned},
                )
            wo_number = order.wo_number

            await post_movement(
                db,
                item_type=inv_models.ItemKind.PRODUCT,
                item_id=order.product_id,
                movement_type=inv_models.MovementType.IN,
                quantity=quantity_produced,
                reference_type=inv_models.ReferenceType.WO,
                reference_id=wo_id,
                notes=f"Produced from WO: {wo_number}",
                actor_id=actor_id,
            )

            order.status = Status.COMPLETED
            order.quantity_produced = quantity_produced
            order.completion_date = datetime.now(UTC)
            db.add(order)

        logger.info("WO %s completed (ID: %s, produced %s) by user %s", wo_number, wo_id, quantity_produced, actor_id)
        return order

    async def cancel(self, db: AsyncSession, *, wo_id: int, actor_id: Optional[int] = None) -> prd_models.WorkOrder:
        """진행 중 취소 시 이미 출고된 자재는 되돌리지 않습니다."""
        async with transaction_scope(db):
            order = await prd_crud.work_order.get_for_update(db, wo_id)
            _require_status(order, {Status.PENDING, Status.IN_PROGRESS}, "cancel")
            order.status = Status.CANCELLED
            db.add(order)

        logger.info("WO %s cancelled (ID: %s) by user %s", order.wo_number, wo_id, actor_id)
        return order

    async def update(
        self,
        db: AsyncSession,
        *,
        wo_id: int,
        obj_in: prd_schemas.WorkOrderUpdate,
        actor_id: Optional[int] = None,
    ) -> prd_models.WorkOrder:
        """
        completed/cancelled 작업지시는 수정할 수 없습니다.
        in_progress 상태에서는 이미 계획 수량만큼 자재가 출고되었으므로 제품/계획 수량 변경을 거부합니다.
        """
        async with transaction_scope(db):
            order = await prd_crud.work_order.get_for_update(db, wo_id)
            _require_status(order, {Status.PENDING, Status.IN_PROGRESS}, "update")

            changes_plan = (
                (obj_in.product_id is not None and obj_in.product_id != order.product_id)
                or (obj_in.quantity_planned is not None and obj_in.quantity_planned != order.quantity_planned)
            )
            if changes_plan and order.status == Status.IN_PROGRESS:
                _require_status(order, {Status.PENDING}, "change the plan of")

            if obj_in.product_id is not None:
                await self._validate_product(db, obj_in.product_id)
                order.product_id = obj_in.product_id
            if obj_in.quantity_planned is not None:
                _validate_planned(obj_in.quantity_planned)
                order.quantity_planned = obj_in.quantity_planned
            if "notes" in obj_in.model_fields_set:
                order.notes = obj_in.notes
            db.add(order)

        logger.info("WO %s updated (ID: %s) by user %s", order.wo_number, wo_id, actor_id)
        return order

    async def delete(self, db: AsyncSession, *, wo_id: int, actor_id: Optional[int] = None) -> None:
        """진행 중(in_progress) 또는 완료(completed)된 작업지시는 삭제할 수 없습니다."""
        async with transaction_scope(db):
            order = await prd_crud.work_order.get_for_update(db, wo_id)
            _require_status(order, {Status.PENDING, Status.CANCELLED}, "delete")
            wo_number = order.wo_number
            await db.delete(order)

        logger.info("WO %s deleted (ID: %s) by user %s", wo_number, wo_id, actor_id)


work_orders = WorkOrderCoordinator()
