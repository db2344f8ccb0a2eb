# fims/domains/inv/routers.py

"""
'inv' 도메인 (자재, 제품, BOM, 재고 수불)과 관련된 API 엔드포인트를 정의하는 모듈입니다.

- 조회와 자재/제품/BOM 등록·수정: 현업 담당자(STAFF) 이상
- 삭제와 수동 재고 조정: 관리자(ADMIN)
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, status, Query
from sqlmodel.ext.asyncio.session import AsyncSession

from fims.core import dependencies as deps
from fims.core.pagination import Page, paginated
from fims.domains.usr import models as usr_models

from . import crud as inv_crud
from . import models as inv_models
from . import schemas as inv_schemas
from . import services as inv_services


router = APIRouter(
    tags=["Inventory Management (재고 관리)"],
    responses={404: {"description": "Not found"}},
)


# =============================================================================
# 1. 자재 (Material) 엔드포인트
# =============================================================================
@router.get("/materials", response_model=Page[inv_schemas.MaterialResponse], summary="자재 목록 조회")
async def read_materials(
    search: Optional[str] = Query(None, description="SKU/자재명 검색어"),
    category: Optional[str] = None,
    supplier_id: Optional[int] = None,
    status_filter: Optional[inv_models.ItemStatus] = Query(None, alias="status"),
    params: deps.PageParams = Depends(deps.page_params),
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: usr_models.User = Depends(deps.get_current_staff_user),
):
    filters = {"category": category, "supplier_id": supplier_id, "status": status_filter}
    materials = await inv_crud.material.get_filtered(
        db, filters=filters, search=search, order_by_field="name", order_desc=False,
        skip=params.skip, limit=params.limit,
    )
    total = await inv_crud.material.count_filtered(db, filters=filters, search=search)
    return paginated(materials, params, total)


@router.get("/materials/low-stock", response_model=List[inv_schemas.MaterialResponse], summary="안전재고 이하 자재 조회")
async def read_low_stock_materials(
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: usr_models.User = Depends(deps.get_current_staff_user),
):
    return await inv_services.low_stock_items(db, inv_models.ItemKind.MATERIAL)


@router.get("/materials/{material_id}", response_model=inv_schemas.MaterialResponse, summary="특정 자재 조회")
async def read_material(
    material_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: usr_models.User = Depends(deps.get_current_staff_user),
):
    return await inv_crud.material.get_or_raise(db, material_id)


@router.post("/materials", response_model=inv_schemas.MaterialResponse, status_code=status.HTTP_201_CREATED, summary="자재 등록")
async def create_material(
    material_in: inv_schemas.MaterialCreate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: usr_models.User = Depends(deps.get_current_staff_user),
):
    return await inv_crud.material.create(db, obj_in=material_in, actor_id=current_user.id)


@router.put("/materials/{material_id}", response_model=inv_schemas.MaterialResponse, summary="자재 수정")
async def update_material(
    material_id: int,
    material_in: inv_schemas.MaterialUpdate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: usr_models.User = Depends(deps.get_current_staff_user),
):
    db_material = await inv_crud.material.get_or_raise(db, material_id)
    return await inv_crud.material.update(db, db_obj=db_material, obj_in=material_in)


@router.delete("/materials/{material_id}", status_code=status.HTTP_204_NO_CONTENT, summary="자재 삭제")
async def delete_material(
    material_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_admin_user: usr_models.User = Depends(deps.get_current_admin_user),
):
    await inv_crud.material.remove(db, id=material_id)
    return None


# =============================================================================
# 2. 제품 (Product) 엔드포인트
# =============================================================================
@router.get("/products", response_model=Page[inv_schemas.ProductResponse], summary="제품 목록 조회")
async def read_products(
    search: Optional[str] = Query(None, description="SKU/제품명 검색어"),
    category: Optional[str] = None,
    type_filter: Optional[str] = Query(None, alias="type"),
    status_filter: Optional[inv_models.ItemStatus] = Query(None, alias="status"),
    params: deps.PageParams = Depends(deps.page_params),
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: usr_models.User = Depends(deps.get_current_staff_user),
):
    filters = {"category": category, "type": type_filter, "status": status_filter}
    products = await inv_crud.product.get_filtered(
        db, filters=filters, search=search, order_by_field="name", order_desc=False,
        skip=params.skip, limit=params.limit,
    )
    total = await inv_crud.product.count_filtered(db, filters=filters, search=search)
    return paginated(products, params, total)


@router.get("/products/low-stock", response_model=List[inv_schemas.ProductResponse], summary="안전재고 이하 제품 조회")
async def read_low_stock_products(
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: usr_models.User = Depends(deps.get_current_staff_user),
):
    return await inv_services.low_stock_items(db, inv_models.ItemKind.PRODUCT)


@router.get("/products/{product_id}", response_model=inv_schemas.ProductResponse, summary="특정 제품 조회")
async def read_product(
    product_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: usr_models.User = Depends(deps.get_current_staff_user),
):
    return await inv_crud.product.get_or_raise(db, product_id)


@router.post("/products", response_model=inv_schemas.ProductResponse, status_code=status.HTTP_201_CREATED, summary="제품 등록")
async def create_product(
    product_in: inv_schemas.ProductCreate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: usr_models.User = Depends(deps.get_current_staff_user),
):
    return await inv_crud.product.create(db, obj_in=product_in, actor_id=current_user.id)


@router.put("/products/{product_id}", response_model=inv_schemas.ProductResponse, summary="제품 수정")
async def update_product(
    product_id: int,
    product_in: inv_schemas.ProductUpdate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: usr_models.User = Depends(deps.get_current_staff_user),
):
    db_product = await inv_crud.product.get_or_raise(db, product_id)
    return await inv_crud.product.update(db, db_obj=db_product, obj_in=product_in)


@router.delete("/products/{product_id}", status_code=status.HTTP_204_NO_CONTENT, summary="제품 삭제")
async def delete_product(
    product_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_admin_user: usr_models.User = Depends(deps.get_current_admin_user),
):
    await inv_crud.product.remove(db, id=product_id)
    return None


# =============================================================================
# 3. BOM (Bill of Materials) 엔드포인트
# =============================================================================
@router.get("/bom", response_model=Page[inv_schemas.BillOfMaterialResponse], summary="BOM 목록 조회")
async def read_bom_entries(
    product_id: Optional[int] = None,
    material_id: Optional[int] = None,
    params: deps.PageParams = Depends(deps.page_params),
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: usr_models.User = Depends(deps.get_current_staff_user),
):
    filters = {"product_id": product_id, "material_id": material_id}
    entries = await inv_crud.bill_of_material.get_filtered(
        db, filters=filters, order_desc=False, skip=params.skip, limit=params.limit
    )
    total = await inv_crud.bill_of_material.count_filtered(db, filters=filters)
    return paginated(entries, params, total)


@router.get("/bom/product/{product_id}", response_model=List[inv_schemas.BillOfMaterialResponse], summary="제품별 BOM 조회")
async def read_bom_by_product(
    product_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: usr_models.User = Depends(deps.get_current_staff_user),
):
    await inv_crud.product.get_or_raise(db, product_id)
    return await inv_crud.bill_of_material.get_by_product(db, product_id=product_id)


@router.get("/bom/{bom_id}", response_model=inv_schemas.BillOfMaterialResponse, summary="특정 BOM 조회")
async def read_bom_entry(
    bom_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: usr_models.User = Depends(deps.get_current_staff_user),
):
    return await inv_crud.bill_of_material.get_or_raise(db, bom_id)


@router.post("/bom", response_model=inv_schemas.BillOfMaterialResponse, status_code=status.HTTP_201_CREATED, summary="BOM 등록")
async def create_bom_entry(
    bom_in: inv_schemas.BillOfMaterialCreate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: usr_models.User = Depends(deps.get_current_staff_user),
):
    return await inv_crud.bill_of_material.create(db, obj_in=bom_in)


@router.put("/bom/{bom_id}", response_model=inv_schemas.BillOfMaterialResponse, summary="BOM 수정")
async def update_bom_entry(
    bom_id: int,
    bom_in: inv_schemas.BillOfMaterialUpdate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: usr_models.User = Depends(deps.get_current_staff_user),
):
    db_bom = await inv_crud.bill_of_material.get_or_raise(db, bom_id)
    return await inv_crud.bill_of_material.update(db, db_obj=db_bom, obj_in=bom_in)


@router.delete("/bom/{bom_id}", status_code=status.HTTP_204_NO_CONTENT, summary="BOM 삭제")
async def delete_bom_entry(
    bom_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_admin_user: usr_models.User = Depends(deps.get_current_admin_user),
):
    await inv_crud.bill_of_material.get_or_raise(db, bom_id)
    await inv_crud.bill_of_material.delete(db, id=bom_id)
    return None


# =============================================================================
# 4. 재고 수불 (Stock) 엔드포인트
# =============================================================================
@router.get("/stock/logs", response_model=Page[inv_schemas.StockLogResponse], summary="재고 수불 이력 조회")
async def read_stock_logs(
    item_type: Optional[inv_models.ItemKind] = None,
    item_id: Optional[int] = None,
    movement_type: Optional[inv_models.MovementType] = None,
    reference_type: Optional[inv_models.ReferenceType] = None,
    reference_id: Optional[int] = None,
    params: deps.PageParams = Depends(deps.page_params),
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: usr_models.User = Depends(deps.get_current_staff_user),
):
    entries, total = await inv_services.stock_ledger.list(
        db,
        params=params,
        item_type=item_type,
        item_id=item_id,
        movement_type=movement_type,
        reference_type=reference_type,
        reference_id=reference_id,
    )
    return paginated(entries, params, total)


@router.get(
    "/stock/movements/{item_type}/{item_id}",
    response_model=Page[inv_schemas.StockLogResponse],
    summary="품목별 재고 수불 이력 조회",
)
async def read_item_movements(
    item_type: inv_models.ItemKind,
    item_id: int,
    params: deps.PageParams = Depends(deps.page_params),
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: usr_models.User = Depends(deps.get_current_staff_user),
):
    await inv_crud.for_kind(item_type).get_or_raise(db, item_id)
    entries, total = await inv_services.stock_ledger.list_by_item(
        db, item_type=item_type, item_id=item_id, params=params
    )
    return paginated(entries, params, total)


@router.post("/stock/adjust", response_model=inv_schemas.StockAdjustResult, summary="수동 재고 조정")
async def adjust_stock(
    adjust_in: inv_schemas.StockAdjustRequest,
    db: AsyncSession = Depends(deps.get_db_session),
    current_admin_user: usr_models.User = Depends(deps.get_current_admin_user),
):
    return await inv_services.adjust_stock(
        db,
        item_type=adjust_in.item_type,
        item_id=adjust_in.item_id,
        new_stock=adjust_in.new_stock,
        notes=adjust_in.notes,
        actor_id=current_admin_user.id,
    )


@router.get("/stock/summary", response_model=inv_schemas.StockSummary, summary="재고 현황 요약")
async def read_stock_summary(
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: usr_models.User = Depends(deps.get_current_staff_user),
):
    return await inv_services.stock_summary(db)
