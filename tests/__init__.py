# tests/__init__.py

"""
FIMS FastAPI 애플리케이션의 테스트 스위트 패키지입니다.

- `conftest.py`: 테스트 DB 엔진, 세션, 역할별 인증 클라이언트, 기준정보 팩토리 픽스처.
- `domains/`: 도메인별(usr, ptn, inv, pur, prd, sal) 통합 테스트와 재고 엔진 테스트.
"""

__title__ = "FIMS API Tests"
__all__ = []
