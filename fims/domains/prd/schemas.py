# fims/domains/prd/schemas.py

"""
'prd' 도메인 (생산 작업지시)의 API 데이터 전송 객체(DTO)를 정의하는 모듈입니다.
"""

from typing import Optional
from datetime import datetime
from sqlmodel import SQLModel, Field

from . import models as prd_models


class WorkOrderCreate(SQLModel):
    wo_number: Optional[str] = Field(None, max_length=30, description="작업지시 번호 (생략 시 자동 생성)")
    product_id: int
    quantity_planned: int = Field(..., description="계획 수량 (양수)")
    notes: Optional[str] = None


class WorkOrderUpdate(SQLModel):
    product_id: Optional[int] = None
    quantity_planned: Optional[int] = None
    notes: Optional[str] = None


class WorkOrderComplete(SQLModel):
    quantity_produced: int = Field(..., description="실적 수량 (0 < 실적 <= 계획)")


class WorkOrderResponse(SQLModel):
    id: int
    wo_number: str
    product_id: int
    quantity_planned: int
    quantity_produced: int
    status: prd_models.WorkOrderStatus
    start_date: Optional[datetime] = None
    completion_date: Optional[datetime] = None
    notes: Optional[str] = None
    created_by: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
