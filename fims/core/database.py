# fims/core/database.py

"""
애플리케이션의 데이터베이스 연결, 세션 및 트랜잭션 범위를 관리하는 모듈입니다.

- SQLModel의 비동기 엔진을 설정합니다.
- 요청 단위 비동기 세션 의존성(get_session)을 제공합니다.
- 재고 변경 작업을 하나의 트랜잭션으로 묶는 transaction_scope 컨텍스트 관리자를 제공합니다.
- 애플리케이션 시작 시 데이터베이스 테이블을 생성하는 함수를 포함합니다 (개발용).
"""

import logging
from typing import Any, AsyncGenerator, Dict
from contextlib import asynccontextmanager

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine
from sqlalchemy.orm import sessionmaker

from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from fims.core.config import settings

logger = logging.getLogger(__name__)


def _engine_options(url: str) -> Dict[str, Any]:
    """드라이버별 커넥션 풀 옵션을 반환합니다. SQLite는 풀 크기 옵션을 받지 않습니다."""
    options: Dict[str, Any] = {"echo": settings.DEBUG_MODE}
    if make_url(url).get_backend_name() != "sqlite":
        options.update(
            pool_recycle=3600,  # 1시간마다 연결 재활용
            pool_size=10,
            max_overflow=20,
            pool_pre_ping=True,
        )
    return options


_database_url = settings.DATABASE_URL.get_secret_value()

engine: AsyncEngine = create_async_engine(_database_url, **_engine_options(_database_url))

# 비동기 세션을 생성하는 '세션 공장'
# expire_on_commit=False: 커밋 이후에도 응답 직렬화 시 지연 로딩(IO)이 일어나지 않도록 합니다.
AsyncSessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

metadata = SQLModel.metadata


# =============================================================================
# 데이터베이스 초기화 및 테이블 생성 함수
# =============================================================================
async def create_db_and_tables() -> None:
    """
    등록된 모든 테이블을 생성합니다. 기존 테이블은 삭제하지 않습니다 (개발용).
    """
    # 모든 모델이 SQLModel.metadata에 등록되도록 임포트합니다.
    from fims.domains import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    logger.info("Database tables created (or already present).")


# =============================================================================
# 비동기 데이터베이스 세션 의존성 주입
# =============================================================================
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI 의존성 주입을 위한 비동기 데이터베이스 세션 제너레이터입니다.
    요청마다 새로운 세션을 생성하고, 요청 처리 후 세션을 자동으로 닫습니다.
    """
    async with AsyncSessionLocal() as session:
        yield session


@asynccontextmanager
async def transaction_scope(db: AsyncSession) -> AsyncGenerator[AsyncSession, None]:
    """
    주어진 세션 위에서 하나의 원자적 작업 단위를 실행합니다.

    블록이 정상 종료되면 커밋하고, 어떤 예외든 발생하면 롤백한 뒤 그대로 다시 발생시킵니다.
    재고 변경과 수불 기록, 주문 상태 변경은 항상 같은 범위 안에서 함께 반영되거나 함께 취소됩니다.
    """
    try:
        yield db
        await db.commit()
    except Exception:
        await db.rollback()
        raise
