# fims/core/exceptions.py

"""
도메인 오류 체계를 정의하는 모듈입니다.

서비스/CRUD 계층은 HTTP를 알지 못하며 아래의 도메인 예외만 발생시킵니다.
각 예외는 기계가 읽을 수 있는 code, 사람이 읽을 메시지, 구조화된 details를 가지며,
main.py에 등록된 domain_error_handler가 클래스별 status_code로 HTTP 응답을 만듭니다.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class DomainError(Exception):
    """모든 도메인 오류의 기본 클래스"""
    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "DOMAIN_ERROR"

    def __init__(self, message: str, details: Optional[Any] = None):
        self.message = message
        self.details = details
        super().__init__(message)


class NotFoundError(DomainError):
    """주문, 품목, BOM 등의 레코드가 존재하지 않음"""
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"

    def __init__(self, resource: str, identifier: Any):
        self.resource = resource
        self.identifier = identifier
        super().__init__(
            f"{resource} not found: {identifier}",
            {"resource": resource, "identifier": identifier},
        )


class ItemNotFoundError(NotFoundError):
    """재고 변경 대상 자재/제품이 존재하지 않음"""
    code = "ITEM_NOT_FOUND"


class InvalidTransitionError(DomainError):
    """현재 상태에서 허용되지 않는 상태 전이"""
    code = "INVALID_TRANSITION"

    def __init__(self, resource: str, current_status: str, action: str):
        self.current_status = current_status
        self.action = action
        super().__init__(
            f"Cannot {action} {resource} with status '{current_status}'",
            {"resource": resource, "status": current_status, "action": action},
        )


class InsufficientStockError(DomainError):
    """
    출고 수량이 현재고를 초과함.
    shortages에는 부족한 모든 품목이 담기며, 각 항목은
    item_type, item_id, name, requested, available, shortage 키를 가집니다.
    """
    code = "INSUFFICIENT_STOCK"

    def __init__(self, shortages: List[Dict[str, Any]]):
        self.shortages = shortages
        names = ", ".join(str(s.get("name") or s["item_id"]) for s in shortages)
        super().__init__(f"Insufficient stock: {names}", shortages)

    @property
    def shortage(self) -> int:
        """부족 수량의 합계"""
        return sum(s["shortage"] for s in self.shortages)


class InsufficientMaterialsError(DomainError):
    """
    작업지시 시작 시 BOM 자재 부족. shortages에는 부족한 자재 전체가 담기며,
    InsufficientStockError와 같은 키(item_type, item_id, name, requested, available, shortage)를 가집니다.
    """
    code = "INSUFFICIENT_MATERIALS"

    def __init__(self, shortages: List[Dict[str, Any]]):
        self.shortages = shortages
        super().__init__("Insufficient materials for production", shortages)


class InvalidQuantityError(DomainError):
    """생산/조정 수량 등이 허용 범위를 벗어남"""
    code = "INVALID_QUANTITY"


class DuplicateError(DomainError):
    """고유 제약 위반 (SKU, 주문번호, BOM 쌍 등)"""
    code = "DUPLICATE"


class ReferentialIntegrityError(DomainError):
    """종속 레코드가 존재하여 삭제할 수 없음"""
    code = "REFERENTIAL_INTEGRITY"


# =============================================================================
# HTTP 변환 핸들러
# =============================================================================
async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    """도메인 예외를 {"detail", "code", "data"} 형태의 JSON 응답으로 변환합니다."""
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.info("%s %s rejected [%s]: %s", request.method, request.url.path, exc.code, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code, "data": jsonable_encoder(exc.details)},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)
