# fims/domains/sal/schemas.py

"""
'sal' 도메인 (판매 주문)의 API 데이터 전송 객체(DTO)를 정의하는 모듈입니다.
"""

from typing import List, Optional
from datetime import date, datetime
from decimal import Decimal
from sqlmodel import SQLModel, Field

from . import models as sal_models


class SOItemCreate(SQLModel):
    product_id: int
    quantity: int = Field(..., description="주문 수량 (양수)")
    price: Decimal = Field(..., description="판매 단가 (0 이상)")


class SOItemResponse(SQLModel):
    id: int
    so_id: int
    product_id: int
    quantity: int
    price: Decimal
    subtotal: Decimal

    class Config:
        from_attributes = True


class SalesOrderCreate(SQLModel):
    so_number: Optional[str] = Field(None, max_length=30, description="주문 번호 (생략 시 자동 생성)")
    customer_id: int
    order_date: Optional[date] = Field(None, description="주문일 (생략 시 오늘)")
    notes: Optional[str] = None
    items: List[SOItemCreate]


class SalesOrderUpdate(SQLModel):
    customer_id: Optional[int] = None
    order_date: Optional[date] = None
    notes: Optional[str] = None
    items: Optional[List[SOItemCreate]] = None


class SalesOrderRead(SQLModel):
    id: int
    so_number: str
    customer_id: int
    order_date: date
    status: sal_models.SalesOrderStatus
    total: Decimal
    notes: Optional[str] = None
    created_by: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class SalesOrderResponse(SalesOrderRead):
    items: List[SOItemResponse] = []
