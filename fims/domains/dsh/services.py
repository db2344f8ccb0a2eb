# fims/domains/dsh/services.py

"""
대시보드 집계 함수들을 정의하는 모듈입니다.

- summary: 발주/작업지시/판매 주문의 상태별 건수, 오늘 건수, 안전재고 이하 품목 수
- stats: 사용 중인 자재/제품/거래처 수와 재고 금액
- recent_movements: 최근 재고 수불 기록 (품목명, 작성자명 포함)

모두 조회 전용이며 데이터를 변경하지 않습니다.
"""

from datetime import date, datetime, time, UTC
from decimal import Decimal
from typing import Dict, Iterable, List, Tuple, Type

from sqlalchemy import func
from sqlmodel import SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession

from fims.core.pagination import PageParams
from fims.domains.inv import models as inv_models
from fims.domains.inv import schemas as inv_schemas
from fims.domains.inv.services import low_stock_items, stock_ledger, stockable_model
from fims.domains.prd import models as prd_models
from fims.domains.ptn import models as ptn_models
from fims.domains.pur import models as pur_models
from fims.domains.sal import models as sal_models
from fims.domains.usr import models as usr_models
from . import schemas as dsh_schemas


def _start_of_today() -> datetime:
    """서버 로컬 날짜의 자정을 UTC 시각으로 반환합니다."""
    return datetime.combine(date.today(), time.min).astimezone(UTC)


async def _count(db: AsyncSession, model: Type[SQLModel], *criteria) -> int:
    statement = select(func.count()).select_from(model)
    for criterion in criteria:
        statement = statement.where(criterion)
    result = await db.execute(statement)
    return result.scalar_one()


async def _status_counts(db: AsyncSession, model: Type[SQLModel], statuses: Iterable) -> Dict[str, int]:
    counts = {status.value: 0 for status in statuses}
    result = await db.execute(select(model.status, func.count()).group_by(model.status))
    for status, count in result.all():
        counts[status.value] = count
    return counts


async def summary(db: AsyncSession) -> dsh_schemas.DashboardSummary:
    today = date.today()
    purchase_orders = dsh_schemas.OrderStatusCounts(
        by_status=await _status_counts(db, pur_models.PurchaseOrder, pur_models.PurchaseOrderStatus),
        today=await _count(db, pur_models.PurchaseOrder, pur_models.PurchaseOrder.order_date == today),
    )
    # 작업지시에는 주문일이 없으므로 생성 시각으로 오늘 건수를 셉니다.
    work_orders = dsh_schemas.OrderStatusCounts(
        by_status=await _status_counts(db, prd_models.WorkOrder, prd_models.WorkOrderStatus),
        today=await _count(db, prd_models.WorkOrder, prd_models.WorkOrder.created_at >= _start_of_today()),
    )
    sales_orders = dsh_schemas.OrderStatusCounts(
        by_status=await _status_counts(db, sal_models.SalesOrder, sal_models.SalesOrderStatus),
        today=await _count(db, sal_models.SalesOrder, sal_models.SalesOrder.order_date == today),
    )
    low_stock = dsh_schemas.LowStockCounts(
        materials=len(await low_stock_items(db, inv_models.ItemKind.MATERIAL)),
        products=len(await low_stock_items(db, inv_models.ItemKind.PRODUCT)),
    )
    return dsh_schemas.DashboardSummary(
        purchase_orders=purchase_orders,
        work_orders=work_orders,
        sales_orders=sales_orders,
        low_stock=low_stock,
    )


async def _active_inventory(db: AsyncSession, kind: inv_models.ItemKind) -> Tuple[int, Decimal]:
    """사용 중 품목 수와 재고 금액. 금액은 Decimal로 합산합니다."""
    model = stockable_model(kind)
    result = await db.execute(
        select(model.stock, model.unit_price).where(model.status == inv_models.ItemStatus.ACTIVE)
    )
    rows = result.all()
    value = sum((Decimal(unit_price) * stock for stock, unit_price in rows), Decimal("0"))
    return len(rows), value


async def stats(db: AsyncSession) -> dsh_schemas.DashboardStats:
    materials, material_value = await _active_inventory(db, inv_models.ItemKind.MATERIAL)
    products, product_value = await _active_inventory(db, inv_models.ItemKind.PRODUCT)
    return dsh_schemas.DashboardStats(
        inventory=dsh_schemas.InventoryStats(
            materials=materials,
            products=products,
            material_value=material_value,
            product_value=product_value,
        ),
        partners=dsh_schemas.PartnerStats(
            suppliers=await _count(
                db, ptn_models.Supplier, ptn_models.Supplier.status == ptn_models.PartnerStatus.ACTIVE
            ),
            customers=await _count(
                db, ptn_models.Customer, ptn_models.Customer.status == ptn_models.PartnerStatus.ACTIVE
            ),
        ),
    )


async def _names_by_id(db: AsyncSession, column_id, column_name, ids: set) -> Dict[int, str]:
    if not ids:
        return {}
    result = await db.execute(select(column_id, column_name).where(column_id.in_(ids)))
    return {row_id: name for row_id, name in result.all()}


async def recent_movements(db: AsyncSession, *, limit: int) -> List[dsh_schemas.RecentMovement]:
    """최신 수불 기록 limit 건. 삭제된 품목/사용자의 이름은 None입니다."""
    entries, _ = await stock_ledger.list(db, params=PageParams(page=1, page_size=limit))

    item_names = {}
    for kind in inv_models.ItemKind:
        model = stockable_model(kind)
        ids = {entry.item_id for entry in entries if entry.item_type == kind}
        item_names[kind] = await _names_by_id(db, model.id, model.name, ids)
    user_names = await _names_by_id(
        db, usr_models.User.id, usr_models.User.full_name,
        {entry.created_by for entry in entries if entry.created_by is not None},
    )

    return [
        dsh_schemas.RecentMovement(
            **inv_schemas.StockLogResponse.model_validate(entry).model_dump(),
            item_name=item_names[entry.item_type].get(entry.item_id),
            created_by_name=user_names.get(entry.created_by),
        )
        for entry in entries
    ]
