# fims/core/pagination.py

"""
페이지 번호 기반 목록 조회를 위한 공통 유틸리티입니다.
page/page_size 쿼리 파라미터를 offset/limit로 변환하고 응답용 페이징 메타데이터를 만듭니다.
"""

import math
from dataclasses import dataclass
from typing import Generic, List, TypeVar

from fastapi import Query
from pydantic import BaseModel

from fims.core.config import settings

T = TypeVar("T")


@dataclass(frozen=True)
class PageParams:
    page: int
    page_size: int

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.page_size

    @property
    def limit(self) -> int:
        return self.page_size


def page_params(
    page: int = Query(1, ge=1, description="페이지 번호 (1부터 시작)"),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE, description="페이지당 항목 수"),
) -> PageParams:
    """목록 엔드포인트에서 Depends(page_params)로 사용합니다."""
    return PageParams(page=page, page_size=page_size)


class PageMeta(BaseModel):
    current_page: int
    total_pages: int
    total_items: int
    items_per_page: int
    has_next_page: bool
    has_prev_page: bool


class Page(BaseModel, Generic[T]):
    """목록 응답 래퍼: 항목 목록과 페이징 메타데이터"""
    items: List[T]
    meta: PageMeta


def build_page_meta(params: PageParams, total_items: int) -> PageMeta:
    total_pages = math.ceil(total_items / params.page_size) if total_items else 0
    return PageMeta(
        current_page=params.page,
        total_pages=total_pages,
        total_items=total_items,
        items_per_page=params.page_size,
        has_next_page=params.page < total_pages,
        has_prev_page=params.page > 1,
    )


def paginated(items: list, params: PageParams, total_items: int) -> dict:
    """라우터가 반환할 Page 형태의 dict를 만듭니다."""
    return {"items": items, "meta": build_page_meta(params, total_items)}
