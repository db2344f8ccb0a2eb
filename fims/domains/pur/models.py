# fims/domains/pur/models.py

"""
'pur' 도메인 (구매 발주)의 데이터베이스 ORM 모델을 정의하는 모듈입니다.

상태 전이: pending → approved → received, pending|approved → cancelled.
received 전이만 재고를 변경합니다 (각 품목 자재 IN).
"""

from typing import List, Optional
from datetime import date, datetime, UTC
from decimal import Decimal
from enum import Enum

from sqlalchemy import ForeignKey, Numeric, CheckConstraint
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP
from sqlmodel import Column, Field, Relationship, SQLModel


class PurchaseOrderStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    RECEIVED = "received"
    CANCELLED = "cancelled"


# =============================================================================
# 1. purchase_orders 테이블 모델
# =============================================================================
class PurchaseOrderBase(SQLModel):
    id: Optional[int] = Field(default=None, primary_key=True, description="발주 고유 ID")
    po_number: str = Field(max_length=30, sa_column_kwargs={"unique": True}, description="발주 번호")
    supplier_id: int = Field(
        sa_column=Column(ForeignKey("suppliers.id", ondelete="RESTRICT"), nullable=False, index=True),
        description="공급업체 ID (FK)"
    )
    order_date: date = Field(default_factory=date.today, description="발주일")
    status: PurchaseOrderStatus = Field(default=PurchaseOrderStatus.PENDING, description="발주 상태")
    total: Decimal = Field(default=Decimal("0"), sa_column=Column(Numeric(15, 2), nullable=False), description="합계 금액")
    notes: Optional[str] = Field(default=None, description="비고")
    created_by: Optional[int] = Field(
        default=None,
        sa_column=Column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        description="작성자 사용자 ID (FK)"
    )

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


class PurchaseOrder(PurchaseOrderBase, table=True):
    __tablename__ = "purchase_orders"

    items: List["POItem"] = Relationship(
        back_populates="purchase_order",
        sa_relationship_kwargs={"cascade": "all, delete-orphan", "order_by": "POItem.id"},
    )


# =============================================================================
# 2. po_items 테이블 모델
# =============================================================================
class POItemBase(SQLModel):
    id: Optional[int] = Field(default=None, primary_key=True, description="발주 품목 ID")
    po_id: Optional[int] = Field(
        default=None,
        sa_column=Column(ForeignKey("purchase_orders.id", ondelete="CASCADE"), nullable=False, index=True),
        description="발주 ID (FK)"
    )
    material_id: int = Field(
        sa_column=Column(ForeignKey("materials.id", ondelete="RESTRICT"), nullable=False, index=True),
        description="자재 ID (FK)"
    )
    quantity: int = Field(description="발주 수량")
    price: Decimal = Field(sa_column=Column(Numeric(15, 2), nullable=False), description="단가")
    subtotal: Decimal = Field(sa_column=Column(Numeric(15, 2), nullable=False), description="소계 (수량 x 단가)")


class POItem(POItemBase, table=True):
    __tablename__ = "po_items"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_po_items_quantity_positive"),
    )

    purchase_order: Optional[PurchaseOrder] = Relationship(back_populates="items")
