# fims/domains/sal/routers.py

"""
'sal' 도메인 (판매 주문)과 관련된 API 엔드포인트를 정의하는 모듈입니다.
삭제를 제외한 모든 작업은 현업 담당자(STAFF) 이상이 수행할 수 있습니다.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, status, Query
from sqlmodel.ext.asyncio.session import AsyncSession

from fims.core import dependencies as deps
from fims.core.pagination import Page, paginated
from fims.domains.usr import models as usr_models

from . import crud as sal_crud
from . import models as sal_models
from . import schemas as sal_schemas
from .services import sales_orders


router = APIRouter(
    tags=["Sales (판매 관리)"],
    responses={404: {"description": "Not found"}},
)


@router.get("/sales-orders", response_model=Page[sal_schemas.SalesOrderRead], summary="판매 주문 목록 조회")
async def read_sales_orders(
    search: Optional[str] = Query(None, description="주문 번호 검색어"),
    status_filter: Optional[sal_models.SalesOrderStatus] = Query(None, alias="status"),
    customer_id: Optional[int] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    params: deps.PageParams = Depends(deps.page_params),
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: usr_models.User = Depends(deps.get_current_staff_user),
):
    filters = {"status": status_filter, "customer_id": customer_id}
    orders = await sal_crud.sales_order.get_filtered(
        db, filters=filters, search=search,
        date_range_field="order_date", start_date=start_date, end_date=end_date,
        order_by_field="created_at", order_desc=True, skip=params.skip, limit=params.limit,
    )
    total = await sal_crud.sales_order.count_filtered(
        db, filters=filters, search=search,
        date_range_field="order_date", start_date=start_date, end_date=end_date,
    )
    return paginated(orders, params, total)


@router.get("/sales-orders/{so_id}", response_model=sal_schemas.SalesOrderResponse, summary="특정 판매 주문 조회")
async def read_sales_order(
    so_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: usr_models.User = Depends(deps.get_current_staff_user),
):
    return await sal_crud.sales_order.get_with_items(db, so_id)


@router.post(
    "/sales-orders",
    response_model=sal_schemas.SalesOrderResponse,
    status_code=status.HTTP_201_CREATED,
    summary="판매 주문 생성",
)
async def create_sales_order(
    so_in: sal_schemas.SalesOrderCreate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: usr_models.User = Depends(deps.get_current_staff_user),
):
    return await sales_orders.create(db, obj_in=so_in, actor_id=current_user.id)


@router.put("/sales-orders/{so_id}", response_model=sal_schemas.SalesOrderResponse, summary="판매 주문 수정")
async def update_sales_order(
    so_id: int,
    so_in: sal_schemas.SalesOrderUpdate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: usr_models.User = Depends(deps.get_current_staff_user),
):
    return await sales_orders.update(db, so_id=so_id, obj_in=so_in, actor_id=current_user.id)


@router.post("/sales-orders/{so_id}/confirm", response_model=sal_schemas.SalesOrderResponse, summary="판매 주문 확정")
async def confirm_sales_order(
    so_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: usr_models.User = Depends(deps.get_current_staff_user),
):
    return await sales_orders.confirm(db, so_id=so_id, actor_id=current_user.id)


@router.post("/sales-orders/{so_id}/ship", response_model=sal_schemas.SalesOrderResponse, summary="판매 주문 출하")
async def ship_sales_order(
    so_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: usr_models.User = Depends(deps.get_current_staff_user),
):
    return await sales_orders.ship(db, so_id=so_id, actor_id=current_user.id)


@router.post("/sales-orders/{so_id}/complete", response_model=sal_schemas.SalesOrderResponse, summary="판매 주문 완료")
async def complete_sales_order(
    so_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: usr_models.User = Depends(deps.get_current_staff_user),
):
    return await sales_orders.complete(db, so_id=so_id, actor_id=current_user.id)


@router.post("/sales-orders/{so_id}/cancel", response_model=sal_schemas.SalesOrderResponse, summary="판매 주문 취소")
async def cancel_sales_order(
    so_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: usr_models.User = Depends(deps.get_current_staff_user),
):
    return await sales_orders.cancel(db, so_id=so_id, actor_id=current_user.id)


@router.delete("/sales-orders/{so_id}", status_code=status.HTTP_204_NO_CONTENT, summary="판매 주문 삭제")
async def delete_sales_order(
    so_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_admin_user: usr_models.User = Depends(deps.get_current_admin_user),
):
    await sales_orders.delete(db, so_id=so_id, actor_id=current_admin_user.id)
    return None
