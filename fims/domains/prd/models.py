# fims/domains/prd/models.py

"""
'prd' 도메인 (생산 작업지시)의 데이터베이스 ORM 모델을 정의하는 모듈입니다.

상태 전이: pending → in_progress → completed, pending|in_progress → cancelled.
start 시 BOM 자재를 출고(OUT)하고, complete 시 완제품을 입고(IN)합니다.
"""

from typing import Optional
from datetime import datetime, UTC
from enum import Enum

from sqlalchemy import ForeignKey, CheckConstraint
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP
from sqlmodel import Column, Field, SQLModel


class WorkOrderStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# =============================================================================
# 1. work_orders 테이블 모델
# =============================================================================
class WorkOrderBase(SQLModel):
    id: Optional[int] = Field(default=None, primary_key=True, description="작업지시 고유 ID")
    wo_number: str = Field(max_length=30, sa_column_kwargs={"unique": True}, description="작업지시 번호")
    product_id: int = Field(
        sa_column=Column(ForeignKey("products.id", ondelete="RESTRICT"), nullable=False, index=True),
        description="생산 제품 ID (FK)"
    )
    quantity_planned: int = Field(description="계획 수량")
    quantity_produced: int = Field(default=0, description="실적 수량")
    status: WorkOrderStatus = Field(default=WorkOrderStatus.PENDING, description="작업 상태")
    start_date: Optional[datetime] = Field(default=None, sa_column=Column(TIMESTAMP(timezone=True), nullable=True), description="작업 시작 일시")
    completion_date: Optional[datetime] = Field(default=None, sa_column=Column(TIMESTAMP(timezone=True), nullable=True), description="작업 완료 일시")
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


class WorkOrder(WorkOrderBase, table=True):
    __tablename__ = "work_orders"
    __table_args__ = (
        CheckConstraint("quantity_planned > 0", name="ck_work_orders_quantity_planned_positive"),
        CheckConstraint("quantity_produced >= 0", name="ck_work_orders_quantity_produced_non_negative"),
    )
