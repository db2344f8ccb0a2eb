# fims/domains/sal/models.py

"""
'sal' 도메인 (판매 주문)의 데이터베이스 ORM 모델을 정의하는 모듈입니다.

상태 전이: pending → confirmed → shipped → completed, pending|confirmed → cancelled.
shipped 전이만 재고를 변경합니다 (각 품목 제품 OUT).
"""

from typing import List, Optional
from datetime import date, datetime, UTC
from decimal import Decimal
from enum import Enum

from sqlalchemy import ForeignKey, Numeric, CheckConstraint
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP
from sqlmodel import Column, Field, Relationship, SQLModel


class SalesOrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    SHIPPED = "shipped"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# =============================================================================
# 1. sales_orders 테이블 모델
# =============================================================================
class SalesOrderBase(SQLModel):
    id: Optional[int] = Field(default=None, primary_key=True, description="판매 주문 고유 ID")
    so_number: str = Field(max_length=30, sa_column_kwargs={"unique": True}, description="판매 주문 번호")
    customer_id: int = Field(
        sa_column=Column(ForeignKey("customers.id", ondelete="RESTRICT"), nullable=False, index=True),
        description="고객 ID (FK)"
    )
    order_date: date = Field(default_factory=date.today, description="주문일")
    status: SalesOrderStatus = Field(default=SalesOrderStatus.PENDING, description="주문 상태")
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


class SalesOrder(SalesOrderBase, table=True):
    __tablename__ = "sales_orders"

    items: List["SOItem"] = Relationship(
        back_populates="sales_order",
        sa_relationship_kwargs={"cascade": "all, delete-orphan", "order_by": "SOItem.id"},
    )


# =============================================================================
# 2. so_items 테이블 모델
# =============================================================================
class SOItemBase(SQLModel):
    id: Optional[int] = Field(default=None, primary_key=True, description="판매 품목 ID")
    so_id: Optional[int] = Field(
        default=None,
        sa_column=Column(ForeignKey("sales_orders.id", ondelete="CASCADE"), nullable=False, index=True),
        description="판매 주문 ID (FK)"
    )
    product_id: int = Field(
        sa_column=Column(ForeignKey("products.id", ondelete="RESTRICT"), nullable=False, index=True),
        description="제품 ID (FK)"
    )
    quantity: int = Field(description="주문 수량")
    price: Decimal = Field(sa_column=Column(Numeric(15, 2), nullable=False), description="단가")
    subtotal: Decimal = Field(sa_column=Column(Numeric(15, 2), nullable=False), description="소계 (수량 x 단가)")


class SOItem(SOItemBase, table=True):
    __tablename__ = "so_items"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_so_items_quantity_positive"),
    )

    sales_order: Optional[SalesOrder] = Relationship(back_populates="items")
