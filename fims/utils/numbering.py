# fims/utils/numbering.py

"""
주문번호 생성 유틸리티입니다.

형식: 접두사 + YYMMDD + 3자리 난수 (예: PO250314042).
난수 부분만으로는 유일성이 보장되지 않으므로 allocate_order_number는 기존 번호와의
충돌을 확인하고 settings.ORDER_NUMBER_MAX_ATTEMPTS 회까지 다시 생성합니다.
"""

import logging
import random
from datetime import datetime
from typing import Optional, Type

from sqlmodel import SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession

from fims.core.config import settings
from fims.core.exceptions import DuplicateError

logger = logging.getLogger(__name__)


def generate_order_number(prefix: str, now: Optional[datetime] = None) -> str:
    """날짜 부분은 서버 로컬 날짜를 사용합니다."""
    now = now or datetime.now()
    return f"{prefix}{now:%y%m%d}{random.randint(0, 999):03d}"


async def _number_exists(db: AsyncSession, model: Type[SQLModel], field: str, number: str) -> bool:
    column = getattr(model, field)
    result = await db.execute(select(column).where(column == number))
    return result.first() is not None


async def allocate_order_number(
    db: AsyncSession,
    *,
    model: Type[SQLModel],
    field: str,
    prefix: str,
    requested: Optional[str] = None,
) -> str:
    """
    사용할 주문번호를 반환합니다.

    - requested가 주어지면 그대로 사용하되, 이미 존재하면 DuplicateError.
    - 아니면 생성 후 중복 여부를 확인하고, 최대 시도 횟수를 넘기면 DuplicateError.
    """
    if requested:
        if await _number_exists(db, model, field, requested):
            raise DuplicateError(f"Order number '{requested}' already exists", {field: requested})
        return requested

    for attempt in range(1, settings.ORDER_NUMBER_MAX_ATTEMPTS + 1):
        candidate = generate_order_number(prefix)
        if not await _number_exists(db, model, field, candidate):
            return candidate
        logger.warning("Order number collision on %s (attempt %s)", candidate, attempt)

    raise DuplicateError(
        f"Could not allocate a unique {prefix} order number",
        {"prefix": prefix, "attempts": settings.ORDER_NUMBER_MAX_ATTEMPTS},
    )
