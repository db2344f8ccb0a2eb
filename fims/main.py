# fims/main.py

import logging
from typing import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy import text
from sqlmodel.ext.asyncio.session import AsyncSession
from fastapi import FastAPI, Depends, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware

# 핵심 설정 및 데이터베이스 모듈 임포트
from fims.core.config import settings
from fims.core.database import engine, get_session, create_db_and_tables
from fims.core.exceptions import register_exception_handlers

from fims import API_PREFIX

# 각 도메인의 라우터들을 임포트합니다.
from fims.domains.usr.routers import router as usr_router
from fims.domains.ptn.routers import router as ptn_router
from fims.domains.inv.routers import router as inv_router
from fims.domains.pur.routers import router as pur_router
from fims.domains.prd.routers import router as prd_router
from fims.domains.sal.routers import router as sal_router
from fims.domains.dsh.routers import router as dsh_router


# -- 로깅 설정 --
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG_MODE else logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


# -- 애플리케이션 수명 주기 이벤트 핸들러 --
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    시작 시 테이블을 준비하고, 종료 시 데이터베이스 연결 풀을 정리합니다.
    """
    logger.info("Starting %s (%s)", settings.APP_NAME, settings.APP_ENV)
    await create_db_and_tables()

    yield  # 애플리케이션 실행

    logger.info("Shutting down %s", settings.APP_NAME)
    await engine.dispose()
    logger.info("Database connection pool disposed.")


# -- FastAPI 애플리케이션 인스턴스 생성 --
app = FastAPI(
    title=settings.APP_NAME,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    docs_url="/docs",       # Swagger UI (Interactive API documentation)
    redoc_url="/redoc",     # ReDoc (Alternative API documentation)
    lifespan=lifespan
)


# -- CORS (Cross-Origin Resource Sharing) 미들웨어 설정 --
# 프로덕션에서는 CORS_ORIGINS를 실제 프론트엔드 도메인으로 제한해야 합니다.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# -- 도메인 예외 → HTTP 응답 변환 --
register_exception_handlers(app)

# -- 도메인 라우터 포함 --
app.include_router(usr_router, prefix=f"{API_PREFIX}/usr", tags=["User Management (사용자 관리)"])
app.include_router(ptn_router, prefix=f"{API_PREFIX}/ptn", tags=["Partner Management (거래처 관리)"])
app.include_router(inv_router, prefix=f"{API_PREFIX}/inv", tags=["Inventory Management (재고 관리)"])
app.include_router(pur_router, prefix=f"{API_PREFIX}/pur", tags=["Purchasing (구매 관리)"])
app.include_router(prd_router, prefix=f"{API_PREFIX}/prd", tags=["Production (생산 관리)"])
app.include_router(sal_router, prefix=f"{API_PREFIX}/sal", tags=["Sales (판매 관리)"])
app.include_router(dsh_router, prefix=f"{API_PREFIX}/dsh", tags=["Dashboard (대시보드)"])


# -- 루트 엔드포인트 --
@app.get("/", summary="API Root", response_description="Welcome message and documentation link.")
async def read_root():
    """
    FIMS API의 루트 엔드포인트입니다.
    API의 시작점을 알리고 문서 링크를 제공합니다.
    """
    return {"message": "Welcome to FIMS API. Visit /docs for interactive API documentation."}


# -- 헬스 체크 엔드포인트 --
@app.get("/health-check", summary="Health Check", response_description="Status of the application and database connection.")
async def health_check(session: AsyncSession = Depends(get_session)):
    """
    데이터베이스에 SELECT 1을 실행하여 서비스의 정상 작동 여부를 확인합니다.
    """
    try:
        result = await session.execute(text("SELECT 1"))
        row = result.scalar()
    except Exception as e:
        logger.error("Database health check failed: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Database connection error during health check: {e}"
        ) from e
    if not row:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Database health check failed: No result from test query"
        )
    return {"status": "ok", "database_connection": "successful"}
