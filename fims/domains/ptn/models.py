# fims/domains/ptn/models.py

"""
'ptn' 도메인 (거래처: 공급업체, 고객)의 데이터베이스 ORM 모델을 정의하는 모듈입니다.
"""

from typing import Optional
from datetime import datetime, UTC
from enum import Enum
from sqlmodel import Field, SQLModel, Column
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP


class PartnerStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class CustomerType(str, Enum):
    RETAIL = "retail"        # 소매
    WHOLESALE = "wholesale"  # 도매


# =============================================================================
# 1. suppliers 테이블 모델
# =============================================================================
class SupplierBase(SQLModel):
    """
    suppliers 테이블의 기본 속성을 정의하는 SQLModel Base 클래스입니다.
    """
    id: Optional[int] = Field(default=None, primary_key=True, description="공급업체 고유 ID")
    name: str = Field(max_length=100, index=True, description="공급업체명")
    contact: Optional[str] = Field(default=None, max_length=100, description="담당자명")
    phone: Optional[str] = Field(default=None, max_length=20, description="전화번호")
    email: Optional[str] = Field(default=None, max_length=100, description="이메일")
    address: Optional[str] = Field(default=None, description="주소")
    status: PartnerStatus = Field(default=PartnerStatus.ACTIVE, description="거래 상태")

    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
        description="레코드 생성 일시"
    )
    updated_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=lambda: datetime.now(UTC)),
        description="레코드 마지막 업데이트 일시"
    )


class Supplier(SupplierBase, table=True):
    __tablename__ = "suppliers"


# =============================================================================
# 2. customers 테이블 모델
# =============================================================================
class CustomerBase(SQLModel):
    """
    customers 테이블의 기본 속성을 정의하는 SQLModel Base 클래스입니다.
    """
    id: Optional[int] = Field(default=None, primary_key=True, description="고객 고유 ID")
    name: str = Field(max_length=100, index=True, description="고객명")
    contact: Optional[str] = Field(default=None, max_length=100, description="담당자명")
    phone: str = Field(max_length=20, description="전화번호")
    email: Optional[str] = Field(default=None, max_length=100, description="이메일")
    address: Optional[str] = Field(default=None, description="주소")
    type: CustomerType = Field(default=CustomerType.RETAIL, description="고객 유형 (소매/도매)")
    status: PartnerStatus = Field(default=PartnerStatus.ACTIVE, description="거래 상태")

    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
        description="레코드 생성 일시"
    )
    updated_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=lambda: datetime.now(UTC)),
        description="레코드 마지막 업데이트 일시"
    )


class Customer(CustomerBase, table=True):
    __tablename__ = "customers"
