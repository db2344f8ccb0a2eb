# tests/conftest.py

import os
from decimal import Decimal
from typing import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager

# fims.core.config의 필수 설정값을 앱 임포트 전에 채워 둡니다.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./fims_test_import.db")
os.environ.setdefault("SECRET_KEY", "fims-test-secret-key")

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

# fims.main을 임포트하여 FastAPI 앱 인스턴스에 접근합니다.
from fims.main import app as main_app
from fims.core.database import get_session
from fims.core.security import get_password_hash

# --- 모든 모델 임포트 ---
#  SQLModel.metadata.create_all()이 모든 테이블을 인식하도록 합니다.
from fims.domains.models import *    # noqa: F401, F403

from fims.domains.usr import models as usr_models
from fims.domains.inv import models as inv_models
from fims.domains.ptn import models as ptn_models


# --- 테스트용 데이터베이스 설정 ---
# TEST_DATABASE_URL이 있으면 그 DB(예: PostgreSQL)를, 없으면 테스트마다 새 SQLite 파일을 사용합니다.
TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL")


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest_asyncio.fixture(scope="function")
async def test_engine(tmp_path):
    url = TEST_DATABASE_URL or f"sqlite+aiosqlite:///{tmp_path / 'fims_test.db'}"
    engine = create_async_engine(url, echo=False, poolclass=NullPool)
    if engine.dialect.name == "sqlite":
        # SQLite는 연결마다 외래 키 검사를 켜야 PostgreSQL과 같은 RESTRICT 동작을 합니다.
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """
    각 테스트 함수마다 빈 데이터베이스 위의 비동기 세션을 제공합니다.
    API 요청도 같은 세션을 사용하므로, 요청 후에는 refresh로 최신 상태를 읽어야 합니다.
    """
    TestingSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with TestingSessionLocal() as session:
        yield session


# --- 사용자 픽스처 ---
@pytest_asyncio.fixture(scope="function")
def user_factory(db_session: AsyncSession) -> Callable[..., Awaitable[usr_models.User]]:
    """역할과 속성을 지정하여 테스트 사용자를 생성하는 팩토리 함수를 반환합니다."""
    async def _create_user(
        username: str,
        password: str,
        role: usr_models.UserRole,
        is_active: bool = True,
        **kwargs,
    ) -> usr_models.User:
        user = usr_models.User(
            username=username,
            password_hash=get_password_hash(password),
            email=f"{username}@example.com",
            role=role,
            is_active=is_active,
            **kwargs,
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user
    return _create_user


@pytest_asyncio.fixture(scope="function")
async def test_superuser(user_factory: Callable) -> usr_models.User:
    return await user_factory("root", "rootpass123", role=usr_models.UserRole.SUPERUSER, full_name="Root")


@pytest_asyncio.fixture(scope="function")
async def test_admin_user(user_factory: Callable) -> usr_models.User:
    """관리자(ADMIN) 사용자를 생성합니다."""
    return await user_factory("sysadm", "sysadmpass123", role=usr_models.UserRole.ADMIN, full_name="Admin Test User")


@pytest_asyncio.fixture(scope="function")
async def test_staff_user(user_factory: Callable) -> usr_models.User:
    """현업 담당자(STAFF) 사용자를 생성합니다."""
    return await user_factory("staff", "staffpass123", role=usr_models.UserRole.STAFF, full_name="Staff Test User")


@pytest_asyncio.fixture(scope="function")
async def test_viewer_user(user_factory: Callable) -> usr_models.User:
    """조회 전용(VIEWER) 사용자를 생성합니다."""
    return await user_factory("viewer", "viewerpass123", role=usr_models.UserRole.VIEWER, full_name="Viewer Test User")


# --- 클라이언트 픽스처 ---
@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """인증되지 않은 클라이언트. 세션 의존성만 테스트 세션으로 교체합니다."""
    async def override_get_session():
        yield db_session

    main_app.dependency_overrides[get_session] = override_get_session
    transport = ASGITransport(app=main_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    main_app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
def authorized_client_factory(client: AsyncClient):
    """
    /api/v1/usr/auth/token으로 실제 로그인한 뒤 Authorization 헤더를 붙인 클라이언트를 만듭니다.
    """
    @asynccontextmanager
    async def _create_client_context(user: usr_models.User, password: str) -> AsyncGenerator[AsyncClient, None]:
        transport = ASGITransport(app=main_app)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            res = await ac.post("/api/v1/usr/auth/token", data={"username": user.username, "password": password})
            if res.status_code != 200:
                pytest.fail(f"Login failed for {user.username}: {res.text}")
            ac.headers["Authorization"] = f"Bearer {res.json()['access_token']}"
            yield ac

    return _create_client_context


@pytest_asyncio.fixture(scope="function")
async def superuser_client(authorized_client_factory, test_superuser) -> AsyncGenerator[AsyncClient, None]:
    async with authorized_client_factory(test_superuser, "rootpass123") as ac:
        yield ac


@pytest_asyncio.fixture(scope="function")
async def admin_client(authorized_client_factory, test_admin_user) -> AsyncGenerator[AsyncClient, None]:
    """관리자로 인증된 클라이언트를 반환합니다."""
    async with authorized_client_factory(test_admin_user, "sysadmpass123") as ac:
        yield ac


@pytest_asyncio.fixture(scope="function")
async def staff_client(authorized_client_factory, test_staff_user) -> AsyncGenerator[AsyncClient, None]:
    """현업 담당자로 인증된 클라이언트를 반환합니다."""
    async with authorized_client_factory(test_staff_user, "staffpass123") as ac:
        yield ac


@pytest_asyncio.fixture(scope="function")
async def viewer_client(authorized_client_factory, test_viewer_user) -> AsyncGenerator[AsyncClient, None]:
    """조회 전용 사용자로 인증된 클라이언트를 반환합니다."""
    async with authorized_client_factory(test_viewer_user, "viewerpass123") as ac:
        yield ac


# --- 기준정보 픽스처 ---
# 재고(stock)를 직접 지정해 행을 만듭니다. 원장 기록은 남기지 않으므로
# 원장 건수를 검증하는 테스트는 이후에 발생한 기록만 셉니다.

@pytest_asyncio.fixture(scope="function")
def supplier_factory(db_session: AsyncSession):
    async def _create(name: str = "Acme Supply", **kwargs) -> ptn_models.Supplier:
        supplier = ptn_models.Supplier(name=name, **kwargs)
        db_session.add(supplier)
        await db_session.commit()
        await db_session.refresh(supplier)
        return supplier
    return _create


@pytest_asyncio.fixture(scope="function")
def customer_factory(db_session: AsyncSession):
    async def _create(name: str = "Corner Shop", phone: str = "010-1234-5678", **kwargs) -> ptn_models.Customer:
        customer = ptn_models.Customer(name=name, phone=phone, **kwargs)
        db_session.add(customer)
        await db_session.commit()
        await db_session.refresh(customer)
        return customer
    return _create


@pytest_asyncio.fixture(scope="function")
def material_factory(db_session: AsyncSession):
    async def _create(sku: str, stock: int = 0, min_stock: int = 0, **kwargs) -> inv_models.Material:
        kwargs.setdefault("name", f"Material {sku}")
        kwargs.setdefault("unit_price", Decimal("1.00"))
        material = inv_models.Material(sku=sku, stock=stock, min_stock=min_stock, **kwargs)
        db_session.add(material)
        await db_session.commit()
        await db_session.refresh(material)
        return material
    return _create


@pytest_asyncio.fixture(scope="function")
def product_factory(db_session: AsyncSession):
    async def _create(sku: str, stock: int = 0, min_stock: int = 0, **kwargs) -> inv_models.Product:
        kwargs.setdefault("name", f"Product {sku}")
        kwargs.setdefault("unit_price", Decimal("10.00"))
        product = inv_models.Product(sku=sku, stock=stock, min_stock=min_stock, **kwargs)
        db_session.add(product)
        await db_session.commit()
        await db_session.refresh(product)
        return product
    return _create


@pytest_asyncio.fixture(scope="function")
def bom_factory(db_session: AsyncSession):
    async def _create(product_id: int, material_id: int, quantity) -> inv_models.BillOfMaterial:
        entry = inv_models.BillOfMaterial(product_id=product_id, material_id=material_id, quantity=Decimal(str(quantity)))
        db_session.add(entry)
        await db_session.commit()
        await db_session.refresh(entry)
        return entry
    return _create
