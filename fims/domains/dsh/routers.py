# fims/domains/dsh/routers.py

"""
'dsh' 도메인 (대시보드) API 엔드포인트를 정의하는 모듈입니다.
조회 전용이므로 로그인한 활성 사용자라면 조회 전용 사용자(VIEWER)도 접근할 수 있습니다.
"""

from typing import List

from fastapi import APIRouter, Depends, Query
from sqlmodel.ext.asyncio.session import AsyncSession

from fims.core import dependencies as deps
from fims.domains.usr import models as usr_models

from . import schemas as dsh_schemas
from . import services as dsh_services


router = APIRouter(
    tags=["Dashboard (대시보드)"],
)


@router.get("/summary", response_model=dsh_schemas.DashboardSummary, summary="주문 현황 및 재고 부족 요약")
async def read_dashboard_summary(
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: usr_models.User = Depends(deps.get_current_active_user),
):
    return await dsh_services.summary(db)


@router.get("/stats", response_model=dsh_schemas.DashboardStats, summary="기준정보 및 재고 금액 통계")
async def read_dashboard_stats(
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: usr_models.User = Depends(deps.get_current_active_user),
):
    return await dsh_services.stats(db)


@router.get("/activities", response_model=List[dsh_schemas.RecentMovement], summary="최근 재고 수불 기록")
async def read_recent_activities(
    limit: int = Query(10, ge=1, le=100, description="조회 건수"),
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: usr_models.User = Depends(deps.get_current_active_user),
):
    return await dsh_services.recent_movements(db, limit=limit)
