# fims/domains/inv/schemas.py

"""
'inv' 도메인 (자재, 제품, BOM, 재고 수불)의 API 데이터 전송 객체(DTO)를 정의하는 모듈입니다.
"""

from typing import List, Optional
from datetime import datetime
from decimal import Decimal
from sqlmodel import SQLModel, Field
from pydantic import field_validator

from fims.utils.validators import reject_null
from . import models as inv_models


# =============================================================================
# 1. 자재 (Material) 스키마
# =============================================================================
class MaterialBase(SQLModel):
    sku: str = Field(..., min_length=1, max_length=50, description="자재 SKU")
    name: str = Field(..., min_length=1, max_length=100, description="자재명")
    category: Optional[str] = Field(None, max_length=50, description="분류")
    unit: str = Field("pcs", max_length=20, description="단위")
    unit_price: Decimal = Field(Decimal("0"), ge=0, description="단가")
    min_stock: int = Field(0, ge=0, description="안전재고")
    supplier_id: Optional[int] = Field(None, description="기본 공급업체 ID")
    status: inv_models.ItemStatus = Field(inv_models.ItemStatus.ACTIVE, description="사용 상태")


class MaterialCreate(MaterialBase):
    stock: int = Field(0, ge=0, description="초기 재고")


class MaterialUpdate(SQLModel):
    """재고(stock)는 수정할 수 없습니다. 재고 조정 API를 사용하세요."""
    sku: Optional[str] = Field(None, min_length=1, max_length=50)
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    category: Optional[str] = Field(None, max_length=50)
    unit: Optional[str] = Field(None, max_length=20)
    unit_price: Optional[Decimal] = Field(None, ge=0)
    min_stock: Optional[int] = Field(None, ge=0)
    supplier_id: Optional[int] = None
    status: Optional[inv_models.ItemStatus] = None

    @field_validator("sku", "name", "unit", "unit_price", "min_stock", "status")
    @classmethod
    def check_not_null(cls, value, info):
        return reject_null(value, info)


class MaterialResponse(MaterialBase):
    id: int
    stock: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


# =============================================================================
# 2. 제품 (Product) 스키마
# =============================================================================
class ProductBase(SQLModel):
    sku: str = Field(..., min_length=1, max_length=50, description="제품 SKU")
    name: str = Field(..., min_length=1, max_length=100, description="제품명")
    category: Optional[str] = Field(None, max_length=50, description="분류")
    type: Optional[str] = Field(None, max_length=50, description="제품 유형")
    size: Optional[str] = Field(None, max_length=20, description="규격/사이즈")
    color: Optional[str] = Field(None, max_length=30, description="색상")
    unit_price: Decimal = Field(Decimal("0"), ge=0, description="판매 단가")
    min_stock: int = Field(0, ge=0, description="안전재고")
    status: inv_models.ItemStatus = Field(inv_models.ItemStatus.ACTIVE, description="사용 상태")


class ProductCreate(ProductBase):
    stock: int = Field(0, ge=0, description="초기 재고")


class ProductUpdate(SQLModel):
    sku: Optional[str] = Field(None, min_length=1, max_length=50)
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    category: Optional[str] = Field(None, max_length=50)
    type: Optional[str] = Field(None, max_length=50)
    size: Optional[str] = Field(None, max_length=20)
    color: Optional[str] = Field(None, max_length=30)
    unit_price: Optional[Decimal] = Field(None, ge=0)
    min_stock: Optional[int] = Field(None, ge=0)
    status: Optional[inv_models.ItemStatus] = None

    @field_validator("sku", "name", "unit_price", "min_stock", "status")
    @classmethod
    def check_not_null(cls, value, info):
        return reject_null(value, info)


class ProductResponse(ProductBase):
    id: int
    stock: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


# =============================================================================
# 3. BOM (Bill of Materials) 스키마
# =============================================================================
class BillOfMaterialCreate(SQLModel):
    product_id: int
    material_id: int
    quantity: Decimal = Field(..., gt=0, description="제품 1개당 자재 소요량")
    notes: Optional[str] = None


class BillOfMaterialUpdate(SQLModel):
    product_id: Optional[int] = None
    material_id: Optional[int] = None
    quantity: Optional[Decimal] = Field(None, gt=0)
    notes: Optional[str] = None

    @field_validator("product_id", "material_id", "quantity")
    @classmethod
    def check_not_null(cls, value, info):
        return reject_null(value, info)


class BillOfMaterialResponse(BillOfMaterialCreate):
    id: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class BOMRequirement(SQLModel):
    """BOM 전개 결과 한 줄: 자재별 소요량과 부족량"""
    material_id: int
    material_sku: str
    material_name: str
    unit: str
    required_quantity: Decimal
    current_stock: int
    shortage: Decimal


# =============================================================================
# 4. 재고 수불 (Stock Log) 및 재고 조정 스키마
# =============================================================================
class StockLogResponse(SQLModel):
    id: int
    item_type: inv_models.ItemKind
    item_id: int
    movement_type: inv_models.MovementType
    quantity: int
    reference_type: Optional[inv_models.ReferenceType] = None
    reference_id: Optional[int] = None
    notes: Optional[str] = None
    created_by: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True


class StockAdjustRequest(SQLModel):
    item_type: inv_models.ItemKind
    item_id: int
    new_stock: int = Field(..., description="조정 후 재고 (절대값)")
    notes: Optional[str] = None


class StockAdjustResult(SQLModel):
    item_type: inv_models.ItemKind
    item_id: int
    previous_stock: int
    new_stock: int
    adjustment_quantity: int
    log: StockLogResponse


# =============================================================================
# 5. 재고 현황 (Stock Summary) 스키마
# =============================================================================
class StockSummaryRow(SQLModel):
    id: int
    sku: str
    name: str
    stock: int
    min_stock: int
    difference: int = Field(..., description="stock - min_stock")
    status: inv_models.ItemStatus


class StockSummaryCounts(SQLModel):
    total: int
    low_stock: int
    out_of_stock: int


class StockSummary(SQLModel):
    materials: List[StockSummaryRow]
    products: List[StockSummaryRow]
    low_stock_materials: List[StockSummaryRow]
    low_stock_products: List[StockSummaryRow]
    material_counts: StockSummaryCounts
    product_counts: StockSummaryCounts
