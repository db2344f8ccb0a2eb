# fims/domains/ptn/routers.py

"""
'ptn' 도메인 (공급업체, 고객)과 관련된 API 엔드포인트를 정의하는 모듈입니다.
조회/등록/수정은 현업 담당자(STAFF) 이상, 삭제는 관리자(ADMIN)만 가능합니다.
"""

from typing import Optional

from fastapi import APIRouter, Depends, status, Query
from sqlmodel.ext.asyncio.session import AsyncSession

from fims.core import dependencies as deps
from fims.core.pagination import Page, paginated
from fims.domains.usr import models as usr_models

from . import crud as ptn_crud
from . import models as ptn_models
from . import schemas as ptn_schemas


router = APIRouter(
    tags=["Partner Management (거래처 관리)"],
    responses={404: {"description": "Not found"}},
)


# =============================================================================
# 1. 공급업체 (Supplier) 엔드포인트
# =============================================================================
@router.get("/suppliers", response_model=Page[ptn_schemas.SupplierResponse], summary="공급업체 목록 조회")
async def read_suppliers(
    search: Optional[str] = Query(None, description="업체명/담당자 검색어"),
    status_filter: Optional[ptn_models.PartnerStatus] = Query(None, alias="status"),
    params: deps.PageParams = Depends(deps.page_params),
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: usr_models.User = Depends(deps.get_current_staff_user),
):
    filters = {"status": status_filter}
    suppliers = await ptn_crud.supplier.get_filtered(
        db, filters=filters, search=search, order_by_field="name", order_desc=False,
        skip=params.skip, limit=params.limit,
    )
    total = await ptn_crud.supplier.count_filtered(db, filters=filters, search=search)
    return paginated(suppliers, params, total)


@router.get("/suppliers/{supplier_id}", response_model=ptn_schemas.SupplierResponse, summary="특정 공급업체 조회")
async def read_supplier(
    supplier_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: usr_models.User = Depends(deps.get_current_staff_user),
):
    return await ptn_crud.supplier.get_or_raise(db, supplier_id)


@router.post("/suppliers", response_model=ptn_schemas.SupplierResponse, status_code=status.HTTP_201_CREATED, summary="공급업체 등록")
async def create_supplier(
    supplier_in: ptn_schemas.SupplierCreate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: usr_models.User = Depends(deps.get_current_staff_user),
):
    return await ptn_crud.supplier.create(db, obj_in=supplier_in)


@router.put("/suppliers/{supplier_id}", response_model=ptn_schemas.SupplierResponse, summary="공급업체 수정")
async def update_supplier(
    supplier_id: int,
    supplier_in: ptn_schemas.SupplierUpdate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: usr_models.User = Depends(deps.get_current_staff_user),
):
    db_supplier = await ptn_crud.supplier.get_or_raise(db, supplier_id)
    return await ptn_crud.supplier.update(db, db_obj=db_supplier, obj_in=supplier_in)


@router.delete("/suppliers/{supplier_id}", status_code=status.HTTP_204_NO_CONTENT, summary="공급업체 삭제")
async def delete_supplier(
    supplier_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_admin_user: usr_models.User = Depends(deps.get_current_admin_user),
):
    await ptn_crud.supplier.remove(db, id=supplier_id)
    return None


# =============================================================================
# 2. 고객 (Customer) 엔드포인트
# =============================================================================
@router.get("/customers", response_model=Page[ptn_schemas.CustomerResponse], summary="고객 목록 조회")
async def read_customers(
    search: Optional[str] = Query(None, description="고객명/담당자/전화번호 검색어"),
    status_filter: Optional[ptn_models.PartnerStatus] = Query(None, alias="status"),
    type_filter: Optional[ptn_models.CustomerType] = Query(None, alias="type"),
    params: deps.PageParams = Depends(deps.page_params),
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: usr_models.User = Depends(deps.get_current_staff_user),
):
    filters = {"status": status_filter, "type": type_filter}
    customers = await ptn_crud.customer.get_filtered(
        db, filters=filters, search=search, order_by_field="name", order_desc=False,
        skip=params.skip, limit=params.limit,
    )
    total = await ptn_crud.customer.count_filtered(db, filters=filters, search=search)
    return paginated(customers, params, total)


@router.get("/customers/{customer_id}", response_model=ptn_schemas.CustomerResponse, summary="특정 고객 조회")
async def read_customer(
    customer_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: usr_models.User = Depends(deps.get_current_staff_user),
):
    return await ptn_crud.customer.get_or_raise(db, customer_id)


@router.post("/customers", response_model=ptn_schemas.CustomerResponse, status_code=status.HTTP_201_CREATED, summary="고객 등록")
async def create_customer(
    customer_in: ptn_schemas.CustomerCreate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: usr_models.User = Depends(deps.get_current_staff_user),
):
    return await ptn_crud.customer.create(db, obj_in=customer_in)


@router.put("/customers/{customer_id}", response_model=ptn_schemas.CustomerResponse, summary="고객 수정")
async def update_customer(
    customer_id: int,
    customer_in: ptn_schemas.CustomerUpdate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: usr_models.User = Depends(deps.get_current_staff_user),
):
    db_customer = await ptn_crud.customer.get_or_raise(db, customer_id)
    return await ptn_crud.customer.update(db, db_obj=db_customer, obj_in=customer_in)


@router.delete("/customers/{customer_id}", status_code=status.HTTP_204_NO_CONTENT, summary="고객 삭제")
async def delete_customer(
    customer_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_admin_user: usr_models.User = Depends(deps.get_current_admin_user),
):
    await ptn_crud.customer.remove(db, id=customer_id)
    return None
