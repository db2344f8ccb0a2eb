# fims/domains/ptn/schemas.py

"""
'ptn' 도메인 (공급업체, 고객)의 API 데이터 전송 객체(DTO)를 정의하는 모듈입니다.
"""

from typing import Optional
from datetime import datetime
from sqlmodel import SQLModel, Field
from pydantic import EmailStr, field_validator

from fims.utils.validators import reject_null
from . import models as ptn_models


# =============================================================================
# 1. 공급업체 (Supplier) 스키마
# =============================================================================
class SupplierBase(SQLModel):
    name: str = Field(..., min_length=1, max_length=100, description="공급업체명")
    contact: Optional[str] = Field(None, max_length=100, description="담당자명")
    phone: Optional[str] = Field(None, max_length=20, description="전화번호")
    email: Optional[EmailStr] = Field(None, description="이메일")
    address: Optional[str] = Field(None, description="주소")
    status: ptn_models.PartnerStatus = Field(ptn_models.PartnerStatus.ACTIVE, description="거래 상태")


class SupplierCreate(SupplierBase):
    pass


class SupplierUpdate(SQLModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    contact: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, max_length=20)
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    status: Optional[ptn_models.PartnerStatus] = None

    @field_validator("name", "status")
    @classmethod
    def check_not_null(cls, value, info):
        return reject_null(value, info)


class SupplierResponse(SupplierBase):
    id: int
    email: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


# =============================================================================
# 2. 고객 (Customer) 스키마
# =============================================================================
class CustomerBase(SQLModel):
    name: str = Field(..., min_length=1, max_length=100, description="고객명")
    contact: Optional[str] = Field(None, max_length=100, description="담당자명")
    phone: str = Field(..., min_length=1, max_length=20, description="전화번호")
    email: Optional[EmailStr] = Field(None, description="이메일")
    address: Optional[str] = Field(None, description="주소")
    type: ptn_models.CustomerType = Field(ptn_models.CustomerType.RETAIL, description="고객 유형")
    status: ptn_models.PartnerStatus = Field(ptn_models.PartnerStatus.ACTIVE, description="거래 상태")


class CustomerCreate(CustomerBase):
    pass


class CustomerUpdate(SQLModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    contact: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, min_length=1, max_length=20)
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    type: Optional[ptn_models.CustomerType] = None
    status: Optional[ptn_models.PartnerStatus] = None

    @field_validator("name", "phone", "type", "status")
    @classmethod
    def check_not_null(cls, value, info):
        return reject_null(value, info)


class CustomerResponse(CustomerBase):
    id: int
    email: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
