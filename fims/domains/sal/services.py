# fims/domains/sal/services.py

"""
판매 주문 코디네이터(SalesOrderCoordinator)를 정의하는 모듈입니다.

출하(ship)는 모든 품목의 재고를 먼저 확인하여 부족분을 빠짐없이 모은 뒤,
하나라도 부족하면 아무것도 출고하지 않고 InsufficientStockError를 발생시킵니다.
"""

import logging
from datetime import date
from typing import Collection, Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from fims.core.database import transaction_scope
from fims.core.exceptions import InsufficientStockError, InvalidTransitionError, NotFoundError
from fims.domains.inv import models as inv_models
from fims.domains.inv.services import post_movement, shortage_detail, stock_mutator
from fims.domains.ptn import models as ptn_models
from fims.utils.numbering import allocate_order_number
from fims.utils.order_lines import aggregate_by_item, build_order_lines
from . import crud as sal_crud
from . import models as sal_models
from . import schemas as sal_schemas

logger = logging.getLogger(__name__)

Status = sal_models.SalesOrderStatus


def _require_status(order: sal_models.SalesOrder, allowed: Collection[Status], action: str) -> None:
    if order.status not in allowed:
        logger.warning("SO %s: cannot %s from status '%s'", order.so_number, action, order.status.value)
        raise InvalidTransitionError("sales order", order.status.value, action)


class SalesOrderCoordinator:
    """pending → confirmed → shipped → completed, pending|confirmed → cancelled."""

    async def _validate_customer(self, db: AsyncSession, customer_id: int) -> None:
        if await db.get(ptn_models.Customer, customer_id) is None:
            raise NotFoundError("Customer", customer_id)

    async def _build_items(self, db: AsyncSession, lines):
        for product_id in {line.product_id for line in lines}:
            if await db.get(inv_models.Product, product_id) is None:
                raise NotFoundError("Product", product_id)
        return build_order_lines(sal_models.SOItem, lines, "product_id")

    async def _transition(
        self, db: AsyncSession, so_id: int, allowed: Collection[Status], target: Status, action: str, actor_id
    ) -> sal_models.SalesOrder:
        async with transaction_scope(db):
            order = await sal_crud.sales_order.get_with_items(db, so_id, for_update=True)
            _require_status(order, allowed, action)
            order.status = target
            db.add(order)

        logger.info("SO %s %s (ID: %s) by user %s", order.so_number, target.value, so_id, actor_id)
        return await sal_crud.sales_order.get_with_items(db, so_id)

    async def create(
        self, db: AsyncSession, *, obj_in: sal_schemas.SalesOrderCreate, actor_id: Optional[int] = None
    ) -> sal_models.SalesOrder:
        async with transaction_scope(db):
            await self._validate_customer(db, obj_in.customer_id)
            items, total = await self._build_items(db, obj_in.items)
            so_number = await allocate_order_number(
                db, model=sal_models.SalesOrder, field="so_number", prefix="SO", requested=obj_in.so_number
            )
            order = sal_models.SalesOrder(
                so_number=so_number,
                customer_id=obj_in.customer_id,
                order_date=obj_in.order_date or date.today(),
                total=total,
                notes=obj_in.notes,
                created_by=actor_id,
            )
            order.items = items
            db.add(order)
            await db.flush()
            order_id = order.id

        logger.info("SO %s created (ID: %s, total %s) by user %s", so_number, order_id, total, actor_id)
        return await sal_crud.sales_order.get_with_items(db, order_id)

    async def confirm(self, db: AsyncSession, *, so_id: int, actor_id: Optional[int] = None) -> sal_models.SalesOrder:
        return await self._transition(db, so_id, {Status.PENDING}, Status.CONFIRMED, "confirm", actor_id)

    async def ship(self, db: AsyncSession, *, so_id: int, actor_id: Optional[int] = None) -> sal_models.SalesOrder:
        """
        확정된 주문을 출하합니다.
        1) 제품별 주문 수량 합계를 구하고 모든 제품 행을 잠금 조회하여 부족분을 전부 수집합니다.
        2) 부족분이 있으면 InsufficientStockError (재고 변경 없음, 상태 confirmed 유지).
        3) 없으면 제품별로 출고(OUT)하고 ('SO', 주문 ID) 참조로 원장을 남깁니다.
        """
        async with transaction_scope(db):
            order = await sal_crud.sales_order.get_with_items(db, so_id, for_update=True)
            _require_status(order, {Status.CONFIRMED}, "ship")
            so_number = order.so_number
            quantities = aggregate_by_item(order.items, "product_id")

            shortages = []
            for product_id, quantity in quantities.items():
                product = await stock_mutator.load_for_update(db, inv_models.ItemKind.PRODUCT, product_id)
                if product.stock < quantity:
                    shortages.append(shortage_detail(inv_models.ItemKind.PRODUCT, product, quantity))
            if shortages:
                logger.warning("SO %s ship refused: %s product(s) short", so_number, len(shortages))
                raise InsufficientStockError(shortages)

            for product_id, quantity in quantities.items():
                await post_movement(
                    db,
                    item_type=inv_models.ItemKind.PRODUCT,
                    item_id=product_id,
                    movement_type=inv_models.MovementType.OUT,
                    quantity=quantity,
                    reference_type=inv_models.ReferenceType.SO,
                    reference_id=so_id,
                    notes=f"Sold in SO: {so_number}",
                    actor_id=actor_id,
                )

            order.status = Status.SHIPPED
            db.add(order)

        logger.info("SO %s shipped (ID: %s) by user %s", so_number, so_id, actor_id)
        return await sal_crud.sales_order.get_with_items(db, so_id)

    async def complete(self, db: AsyncSession, *, so_id: int, actor_id: Optional[int] = None) -> sal_models.SalesOrder:
        return await self._transition(db, so_id, {Status.SHIPPED}, Status.COMPLETED, "complete", actor_id)

    async def cancel(self, db: AsyncSession, *, so_id: int, actor_id: Optional[int] = None) -> sal_models.SalesOrder:
        return await self._transition(
            db, so_id, {Status.PENDING, Status.CONFIRMED}, Status.CANCELLED, "cancel", actor_id
        )

    async def update(
        self,
        db: AsyncSession,
        *,
        so_id: int,
        obj_in: sal_schemas.SalesOrderUpdate,
        actor_id: Optional[int] = None,
    ) -> sal_models.SalesOrder:
        """shipped/completed/cancelled 주문은 수정할 수 없습니다."""
        async with transaction_scope(db):
            order = await sal_crud.sales_order.get_with_items(db, so_id, for_update=True)
            _require_status(order, {Status.PENDING, Status.CONFIRMED}, "update")

            if obj_in.customer_id is not None:
                await self._validate_customer(db, obj_in.customer_id)
                order.customer_id = obj_in.customer_id
            if obj_in.order_date is not None:
                order.order_date = obj_in.order_date
            if "notes" in obj_in.model_fields_set:
                order.notes = obj_in.notes
            if obj_in.items is not None:
                items, total = await self._build_items(db, obj_in.items)
                order.items = items
                order.total = total
            db.add(order)

        logger.info("SO %s updated (ID: %s) by user %s", order.so_number, so_id, actor_id)
        return await sal_crud.sales_order.get_with_items(db, so_id)

    async def delete(self, db: AsyncSession, *, so_id: int, actor_id: Optional[int] = None) -> None:
        """출하(shipped) 또는 완료(completed)된 주문은 삭제할 수 없습니다."""
        async with transaction_scope(db):
            order = await sal_crud.sales_order.get_with_items(db, so_id, for_update=True)
            _require_status(order, {Status.PENDING, Status.CONFIRMED, Status.CANCELLED}, "delete")
            so_number = order.so_number
            await db.delete(order)

        logger.info("SO %s deleted (ID: %s) by user %s", so_number, so_id, actor_id)


sales_orders = SalesOrderCoordinator()
