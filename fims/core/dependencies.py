# fims/core/dependencies.py

"""
FastAPI 애플리케이션의 의존성 주입(Dependency Injection)을 정의하는 모듈입니다.

- 데이터베이스 세션 관리 (get_db_session).
- 현재 인증된 사용자 정보 획득 및 역할 기반 권한 부여 (security.py에서 재노출).
- 목록 조회용 페이지 파라미터 (pagination.py에서 재노출).
"""

from fims.core.database import get_session

# flake8: noqa
from fims.core.security import (
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
    get_password_hash,
    verify_password,
    oauth2_scheme,
    get_current_user_from_token,
    get_current_active_user,
    get_current_staff_user,
    get_current_admin_user,
)
from fims.core.pagination import PageParams, page_params


# 인증 의존성(get_current_user_from_token)과 라우터는 요청당 하나의 세션을 공유합니다.
get_db_session = get_session
