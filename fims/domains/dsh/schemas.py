# fims/domains/dsh/schemas.py

"""
'dsh' 도메인 (대시보드)의 응답 DTO를 정의하는 모듈입니다. 모든 스키마는 조회 전용입니다.
"""

from decimal import Decimal
from typing import Dict, Optional

from sqlmodel import SQLModel

from fims.domains.inv.schemas import StockLogResponse


# =============================================================================
# 1. 요약 (Summary)
# =============================================================================
class OrderStatusCounts(SQLModel):
    """주문 종류별 상태 건수와 오늘 생성된 건수"""
    by_status: Dict[str, int]
    today: int


class LowStockCounts(SQLModel):
    materials: int
    products: int


class DashboardSummary(SQLModel):
    purchase_orders: OrderStatusCounts
    work_orders: OrderStatusCounts
    sales_orders: OrderStatusCounts
    low_stock: LowStockCounts


# =============================================================================
# 2. 통계 (Stats)
# =============================================================================
class InventoryStats(SQLModel):
    """사용 중 품목 수와 재고 금액 (stock x unit_price 합계)"""
    materials: int
    products: int
    material_value: Decimal
    product_value: Decimal


class PartnerStats(SQLModel):
    suppliers: int
    customers: int


class DashboardStats(SQLModel):
    inventory: InventoryStats
    partners: PartnerStats


# =============================================================================
# 3. 최근 활동 (Activities)
# =============================================================================
class RecentMovement(StockLogResponse):
    item_name: Optional[str] = None
    created_by_name: Optional[str] = None
