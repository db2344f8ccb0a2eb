# fims/domains/usr/schemas.py

"""
'usr' 도메인 (사용자 및 인증)의 API 데이터 전송 객체(DTO)를 정의하는 모듈입니다.
"""

from typing import Dict, Optional
from datetime import datetime
from sqlmodel import SQLModel, Field
from pydantic import BaseModel, EmailStr, field_validator

from fims.utils.validators import reject_null
from . import models as usr_models


# =============================================================================
# 1. 사용자 (User) 스키마
# =============================================================================
class UserBase(SQLModel):
    """사용자 정보의 기본 필드를 정의하는 스키마"""
    username: str = Field(..., min_length=3, max_length=50)
    email: Optional[EmailStr] = Field(None, max_length=100)
    full_name: Optional[str] = Field(None, max_length=100)
    role: usr_models.UserRole = Field(default=usr_models.UserRole.STAFF, description="사용자 역할")
    is_active: bool = True


class UserCreate(UserBase):
    """사용자 생성을 위한 스키마"""
    password: str = Field(..., min_length=8)


class UserUpdate(SQLModel):
    """사용자 정보 수정을 위한 스키마"""
    email: Optional[EmailStr] = None
    full_name: Optional[str] = None
    role: Optional[usr_models.UserRole] = None
    is_active: Optional[bool] = None

    @field_validator("role", "is_active")
    @classmethod
    def check_not_null(cls, value, info):
        return reject_null(value, info)


class UserRead(UserBase):
    """
    사용자 정보 조회를 위한 기본 스키마.
    비밀번호 해시값 등 민감한 정보는 제외됩니다.
    """
    id: int
    created_at: datetime = Field(..., description="레코드 생성 일시")
    updated_at: datetime = Field(..., description="레코드 마지막 업데이트 일시")


class PasswordChange(SQLModel):
    """본인 비밀번호 변경 요청"""
    current_password: str
    new_password: str = Field(..., min_length=8)


class ProfileUpdate(SQLModel):
    """본인 프로필 수정 요청. 역할과 활성 상태는 관리자만 바꿀 수 있습니다."""
    email: Optional[EmailStr] = None
    full_name: Optional[str] = Field(None, max_length=100)


class UserStats(SQLModel):
    """사용자 통계 (관리자 전용)"""
    total: int
    active: int
    inactive: int
    by_role: Dict[str, int]


# =============================================================================
# 2. 인증 토큰 (Token) 스키마
# =============================================================================
class Token(BaseModel):
    """JWT 토큰 응답 스키마"""
    access_token: str
    refresh_token: Optional[str] = None
    token_type: str


class RefreshRequest(BaseModel):
    refresh_token: str
