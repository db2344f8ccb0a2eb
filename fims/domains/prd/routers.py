# fims/domains/prd/routers.py

"""
'prd' 도메인 (생산 작업지시)과 관련된 API 엔드포인트를 정의하는 모듈입니다.

- 조회, 시작(start), 완료(complete): 현업 담당자(STAFF) 이상
- 생성, 수정, 취소, 삭제: 관리자(ADMIN)
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, status, Query
from sqlmodel.ext.asyncio.session import AsyncSession

from fims.core import dependencies as deps
from fims.core.pagination import Page, paginated
from fims.domains.inv import schemas as inv_schemas
from fims.domains.usr import models as usr_models

from . import crud as prd_crud
from . import models as prd_models
from . import schemas as prd_schemas
from .services import work_orders


router = APIRouter(
    tags=["Production (생산 관리)"],
    responses={404: {"description": "Not found"}},
)


@router.get("/work-orders", response_model=Page[prd_schemas.WorkOrderResponse], summary="작업지시 목록 조회")
async def read_work_orders(
    search: Optional[str] = Query(None, description="작업지시 번호 검색어"),
    status_filter: Optional[prd_models.WorkOrderStatus] = Query(None, alias="status"),
    product_id: Optional[int] = None,
    params: deps.PageParams = Depends(deps.page_params),
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: usr_models.User = Depends(deps.get_current_staff_user),
):
    filters = {"status": status_filter, "product_id": product_id}
    orders = await prd_crud.work_order.get_filtered(
        db, filters=filters, search=search, order_by_field="created_at", order_desc=True,
        skip=params.skip, limit=params.limit,
    )
    total = await prd_crud.work_order.count_filtered(db, filters=filters, search=search)
    return paginated(orders, params, total)


@router.get("/work-orders/{wo_id}", response_model=prd_schemas.WorkOrderResponse, summary="특정 작업지시 조회")
async def read_work_order(
    wo_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: usr_models.User = Depends(deps.get_current_staff_user),
):
    return await prd_crud.work_order.get_or_raise(db, wo_id)


@router.get(
    "/work-orders/{wo_id}/bom-requirements",
    response_model=List[inv_schemas.BOMRequirement],
    summary="작업지시 자재 소요량 조회",
)
async def read_work_order_requirements(
    wo_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: usr_models.User = Depends(deps.get_current_staff_user),
):
    return await work_orders.requirements(db, wo_id=wo_id)


@router.post(
    "/work-orders",
    response_model=prd_schemas.WorkOrderResponse,
    status_code=status.HTTP_201_CREATED,
    summary="작업지시 생성",
)
async def create_work_order(
    wo_in: prd_schemas.WorkOrderCreate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_admin_user: usr_models.User = Depends(deps.get_current_admin_user),
):
    return await work_orders.create(db, obj_in=wo_in, actor_id=current_admin_user.id)


@router.put("/work-orders/{wo_id}", response_model=prd_schemas.WorkOrderResponse, summary="작업지시 수정")
async def update_work_order(
    wo_id: int,
    wo_in: prd_schemas.WorkOrderUpdate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_admin_user: usr_models.User = Depends(deps.get_current_admin_user),
):
    return await work_orders.update(db, wo_id=wo_id, obj_in=wo_in, actor_id=current_admin_user.id)


@router.post("/work-orders/{wo_id}/start", response_model=prd_schemas.WorkOrderResponse, summary="작업 시작")
async def start_work_order(
    wo_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: usr_models.User = Depends(deps.get_current_staff_user),
):
    return await work_orders.start(db, wo_id=wo_id, actor_id=current_user.id)


@router.post("/work-orders/{wo_id}/complete", response_model=prd_schemas.WorkOrderResponse, summary="작업 완료")
async def complete_work_order(
    wo_id: int,
    body: prd_schemas.WorkOrderComplete,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: usr_models.User = Depends(deps.get_current_staff_user),
):
    return await work_orders.complete(
        db, wo_id=wo_id, quantity_produced=body.quantity_produced, actor_id=current_user.id
    )


@router.post("/work-orders/{wo_id}/cancel", response_model=prd_schemas.WorkOrderResponse, summary="작업지시 취소")
async def cancel_work_order(
    wo_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_admin_user: usr_models.User = Depends(deps.get_current_admin_user),
):
    return await work_orders.cancel(db, wo_id=wo_id, actor_id=current_admin_user.id)


@router.delete("/work-orders/{wo_id}", status_code=status.HTTP_204_NO_CONTENT, summary="작업지시 삭제")
async def delete_work_order(
    wo_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_admin_user: usr_models.User = Depends(deps.get_current_admin_user),
):
    await work_orders.delete(db, wo_id=wo_id, actor_id=current_admin_user.id)
    return None
