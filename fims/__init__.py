# fims/__init__.py

"""
FIMS(Factory Inventory Management System) FastAPI 애플리케이션의 메인 패키지입니다.

이 패키지는 공장 재고 및 생산 주문 관리 백엔드를 구성합니다.
FastAPI 애플리케이션의 진입점 (main.py)과
공통 설정, 데이터베이스 연결, 보안 관련 유틸리티를 담는 core 서브패키지,
그리고 각 비즈니스 도메인(사용자, 거래처, 재고, 구매, 생산, 판매)을 대표하는 domains 서브패키지로 구성됩니다.
"""

APP_NAME = "FIMS FastAPI API"
APP_VERSION = "0.1.0"
API_PREFIX = "/api/v1"  # API 라우트의 공통 접두사 (main.py에서 적용)


# PEP 440 형식의 버전 정보
__version__ = APP_VERSION
__title__ = APP_NAME
__description__ = "Factory Inventory Management System (FIMS) API backend."
__all__ = []
