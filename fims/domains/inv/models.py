# fims/domains/inv/models.py

"""
'inv' 도메인 (자재, 제품, BOM, 재고 수불)의 데이터베이스 ORM 모델을 정의하는 모듈입니다.

- materials, products: 재고 보유 품목. stock 컬럼은 재고 변경기(StockMutator)를 통해서만 바뀝니다.
- bill_of_materials: 제품 1개 생산에 필요한 자재별 소요량.
- stock_logs: 모든 재고 변경의 추가 전용(append-only) 수불 원장.
"""

from typing import Optional
from datetime import datetime, UTC
from decimal import Decimal
from enum import Enum

from sqlalchemy import CheckConstraint, ForeignKey, Index, Numeric, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP
from sqlmodel import Column, Field, SQLModel


class ItemStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class ItemKind(str, Enum):
    """재고 품목 종류. 각 값은 stock 컬럼을 가진 테이블 하나에 대응합니다."""
    MATERIAL = "material"
    PRODUCT = "product"


class MovementType(str, Enum):
    IN = "in"          # 입고 (증가량)
    OUT = "out"        # 출고 (감소량)
    ADJUST = "adjust"  # 조정 (변경 후 절대값)


class ReferenceType(str, Enum):
    PO = "PO"
    WO = "WO"
    SO = "SO"
    ADJUSTMENT = "ADJUSTMENT"


# =============================================================================
# 1. materials 테이블 모델
# =============================================================================
class MaterialBase(SQLModel):
    id: Optional[int] = Field(default=None, primary_key=True, description="자재 고유 ID")
    sku: str = Field(max_length=50, sa_column_kwargs={"unique": True}, description="자재 SKU")
    name: str = Field(max_length=100, index=True, description="자재명")
    category: Optional[str] = Field(default=None, max_length=50, description="분류")
    unit: str = Field(default="pcs", max_length=20, description="단위 (pcs, kg, m 등)")
    unit_price: Decimal = Field(default=Decimal("0"), sa_column=Column(Numeric(15, 2), nullable=False), description="단가")
    stock: int = Field(default=0, description="현재고")
    min_stock: int = Field(default=0, description="안전재고 (재주문 기준)")
    supplier_id: Optional[int] = Field(
        default=None,
        sa_column=Column(ForeignKey("suppliers.id", ondelete="RESTRICT"), nullable=True),
        description="기본 공급업체 ID (FK)"
    )
    status: ItemStatus = Field(default=ItemStatus.ACTIVE, description="사용 상태")

    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
        description="레코드 생성 일시"
    )
    updated_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=lambda: datetime.now(UTC)),
        description="레코드 마지막 업데이트 일시"
    )


class Material(MaterialBase, table=True):
    __tablename__ = "materials"
    __table_args__ = (
        CheckConstraint("stock >= 0", name="ck_materials_stock_non_negative"),
    )


# =============================================================================
# 2. products 테이블 모델
# =============================================================================
class ProductBase(SQLModel):
    id: Optional[int] = Field(default=None, primary_key=True, description="제품 고유 ID")
    sku: str = Field(max_length=50, sa_column_kwargs={"unique": True}, description="제품 SKU")
    name: str = Field(max_length=100, index=True, description="제품명")
    category: Optional[str] = Field(default=None, max_length=50, description="분류")
    type: Optional[str] = Field(default=None, max_length=50, description="제품 유형")
    size: Optional[str] = Field(default=None, max_length=20, description="규격/사이즈")
    color: Optional[str] = Field(default=None, max_length=30, description="색상")
    unit_price: Decimal = Field(default=Decimal("0"), sa_column=Column(Numeric(15, 2), nullable=False), description="판매 단가")
    stock: int = Field(default=0, description="현재고")
    min_stock: int = Field(default=0, description="안전재고")
    status: ItemStatus = Field(default=ItemStatus.ACTIVE, description="사용 상태")

    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
        description="레코드 생성 일시"
    )
    updated_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=lambda: datetime.now(UTC)),
        description="레코드 마지막 업데이트 일시"
    )


class Product(ProductBase, table=True):
    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("stock >= 0", name="ck_products_stock_non_negative"),
    )


# =============================================================================
# 3. bill_of_materials 테이블 모델
# =============================================================================
class BillOfMaterialBase(SQLModel):
    id: Optional[int] = Field(default=None, primary_key=True, description="BOM 고유 ID")
    product_id: int = Field(
        sa_column=Column(ForeignKey("products.id", ondelete="RESTRICT"), nullable=False, index=True),
        description="제품 ID (FK)"
    )
    material_id: int = Field(
        sa_column=Column(ForeignKey("materials.id", ondelete="RESTRICT"), nullable=False, index=True),
        description="자재 ID (FK)"
    )
    quantity: Decimal = Field(sa_column=Column(Numeric(10, 3), nullable=False), description="제품 1개당 자재 소요량")
    notes: Optional[str] = Field(default=None, description="비고")

    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
        description="레코드 생성 일시"
    )
    updated_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=lambda: datetime.now(UTC)),
        description="레코드 마지막 업데이트 일시"
    )


class BillOfMaterial(BillOfMaterialBase, table=True):
    __tablename__ = "bill_of_materials"
    __table_args__ = (
        UniqueConstraint("product_id", "material_id", name="uq_bom_product_material"),
    )


# =============================================================================
# 4. stock_logs 테이블 모델 (추가 전용 수불 원장)
# =============================================================================
class StockLogBase(SQLModel):
    id: Optional[int] = Field(default=None, primary_key=True, description="수불 기록 ID")
    item_type: ItemKind = Field(description="품목 종류 (material/product)")
    item_id: int = Field(description="품목 ID")
    movement_type: MovementType = Field(description="변동 종류 (in/out/adjust)")
    quantity: int = Field(description="변동 수량 (항상 양수, 방향은 movement_type이 표현)")
    reference_type: Optional[ReferenceType] = Field(default=None, description="원인 문서 종류 (PO/WO/SO/ADJUSTMENT)")
    reference_id: Optional[int] = Field(default=None, description="원인 문서 ID")
    notes: Optional[str] = Field(default=None, description="비고")
    created_by: Optional[int] = Field(
        default=None,
        sa_column=Column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        description="처리자 사용자 ID (FK)"
    )
    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
        description="기록 일시"
    )


class StockLog(StockLogBase, table=True):
    __tablename__ = "stock_logs"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_stock_logs_quantity_positive"),
        Index("ix_stock_logs_item", "item_type", "item_id"),
        Index("ix_stock_logs_reference", "reference_type", "reference_id"),
    )
