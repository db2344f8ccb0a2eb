# fims/utils/validators.py

"""
DTO 공통 유효성 검사 유틸리티입니다.

수정(Update) 스키마의 필드는 모두 Optional이지만, NOT NULL 컬럼에 대응하는 필드에
명시적인 null이 오면 DB 커밋 단계가 아니라 요청 검증 단계(422)에서 거부해야 합니다.
필드를 생략한 경우에는 검사기가 실행되지 않으므로 부분 수정은 그대로 허용됩니다.
"""

from typing import Any

from pydantic import ValidationInfo


def reject_null(value: Any, info: ValidationInfo) -> Any:
    if value is None:
        raise ValueError(f"{info.field_name} may not be null")
    return value
