# fims/domains/pur/routers.py

"""
'pur' 도메인 (구매 발주)과 관련된 API 엔드포인트를 정의하는 모듈입니다.

- 조회, 입고(receive): 현업 담당자(STAFF) 이상
- 생성, 수정, 승인, 취소, 삭제: 관리자(ADMIN)
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, status, Query
from sqlmodel.ext.asyncio.session import AsyncSession

from fims.core import dependencies as deps
from fims.core.pagination import Page, paginated
from fims.domains.usr import models as usr_models

from . import crud as pur_crud
from . import models as pur_models
from . import schemas as pur_schemas
from .services import purchase_orders


router = APIRouter(
    tags=["Purchasing (구매 관리)"],
    responses={404: {"description": "Not found"}},
)


@router.get("/purchase-orders", response_model=Page[pur_schemas.PurchaseOrderRead], summary="발주 목록 조회")
async def read_purchase_orders(
    search: Optional[str] = Query(None, description="발주 번호 검색어"),
    status_filter: Optional[pur_models.PurchaseOrderStatus] = Query(None, alias="status"),
    supplier_id: Optional[int] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    params: deps.PageParams = Depends(deps.page_params),
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: usr_models.User = Depends(deps.get_current_staff_user),
):
    filters = {"status": status_filter, "supplier_id": supplier_id}
    orders = await pur_crud.purchase_order.get_filtered(
        db, filters=filters, search=search,
        date_range_field="order_date", start_date=start_date, end_date=end_date,
        order_by_field="created_at", order_desc=True, skip=params.skip, limit=params.limit,
    )
    total = await pur_crud.purchase_order.count_filtered(
        db, filters=filters, search=search,
        date_range_field="order_date", start_date=start_date, end_date=end_date,
    )
    return paginated(orders, params, total)


@router.get("/purchase-orders/{po_id}", response_model=pur_schemas.PurchaseOrderResponse, summary="특정 발주 조회")
async def read_purchase_order(
    po_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: usr_models.User = Depends(deps.get_current_staff_user),
):
    return await pur_crud.purchase_order.get_with_items(db, po_id)


@router.post(
    "/purchase-orders",
    response_model=pur_schemas.PurchaseOrderResponse,
    status_code=status.HTTP_201_CREATED,
    summary="발주 생성",
)
async def create_purchase_order(
    po_in: pur_schemas.PurchaseOrderCreate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_admin_user: usr_models.User = Depends(deps.get_current_admin_user),
):
    return await purchase_orders.create(db, obj_in=po_in, actor_id=current_admin_user.id)


@router.put("/purchase-orders/{po_id}", response_model=pur_schemas.PurchaseOrderResponse, summary="발주 수정")
async def update_purchase_order(
    po_id: int,
    po_in: pur_schemas.PurchaseOrderUpdate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_admin_user: usr_models.User = Depends(deps.get_current_admin_user),
):
    return await purchase_orders.update(db, po_id=po_id, obj_in=po_in, actor_id=current_admin_user.id)


@router.post("/purchase-orders/{po_id}/approve", response_model=pur_schemas.PurchaseOrderResponse, summary="발주 승인")
async def approve_purchase_order(
    po_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_admin_user: usr_models.User = Depends(deps.get_current_admin_user),
):
    return await purchase_orders.approve(db, po_id=po_id, actor_id=current_admin_user.id)


@router.post("/purchase-orders/{po_id}/receive", response_model=pur_schemas.PurchaseOrderResponse, summary="발주 입고")
async def receive_purchase_order(
    po_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: usr_models.User = Depends(deps.get_current_staff_user),
):
    return await purchase_orders.receive(db, po_id=po_id, actor_id=current_user.id)


@router.post("/purchase-orders/{po_id}/cancel", response_model=pur_schemas.PurchaseOrderResponse, summary="발주 취소")
async def cancel_purchase_order(
    po_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_admin_user: usr_models.User = Depends(deps.get_current_admin_user),
):
    return await purchase_orders.cancel(db, po_id=po_id, actor_id=current_admin_user.id)


@router.delete("/purchase-orders/{po_id}", status_code=status.HTTP_204_NO_CONTENT, summary="발주 삭제")
async def delete_purchase_order(
    po_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_admin_user: usr_models.User = Depends(deps.get_current_admin_user),
):
    await purchase_orders.delete(db, po_id=po_id, actor_id=current_admin_user.id)
    return None
