# fims/domains/pur/schemas.py

"""
'pur' 도메인 (구매 발주)의 API 데이터 전송 객체(DTO)를 정의하는 모듈입니다.
품목 수량/단가의 범위 검사는 서비스 계층에서 InvalidQuantityError로 처리합니다.
"""

from typing import List, Optional
from datetime import date, datetime
from decimal import Decimal
from sqlmodel import SQLModel, Field

from . import models as pur_models


# =============================================================================
# 1. 발주 품목 (POItem) 스키마
# =============================================================================
class POItemCreate(SQLModel):
    material_id: int
    quantity: int = Field(..., description="발주 수량 (양수)")
    price: Decimal = Field(..., description="단가 (0 이상)")


class POItemResponse(SQLModel):
    id: int
    po_id: int
    material_id: int
    quantity: int
    price: Decimal
    subtotal: Decimal

    class Config:
        from_attributes = True


# =============================================================================
# 2. 발주 (PurchaseOrder) 스키마
# =============================================================================
class PurchaseOrderCreate(SQLModel):
    po_number: Optional[str] = Field(None, max_length=30, description="발주 번호 (생략 시 자동 생성)")
    supplier_id: int
    order_date: Optional[date] = Field(None, description="발주일 (생략 시 오늘)")
    notes: Optional[str] = None
    items: List[POItemCreate]


class PurchaseOrderUpdate(SQLModel):
    """items를 지정하면 기존 품목 전체를 교체하고 합계를 다시 계산합니다."""
    supplier_id: Optional[int] = None
    order_date: Optional[date] = None
    notes: Optional[str] = None
    items: Optional[List[POItemCreate]] = None


class PurchaseOrderRead(SQLModel):
    id: int
    po_number: str
    supplier_id: int
    order_date: date
    status: pur_models.PurchaseOrderStatus
    total: Decimal
    notes: Optional[str] = None
    created_by: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PurchaseOrderResponse(PurchaseOrderRead):
    items: List[POItemResponse] = []
