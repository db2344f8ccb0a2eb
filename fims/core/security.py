# fims/core/security.py

"""
애플리케이션의 보안 관련 유틸리티 함수 및 의존성 주입을 정의하는 모듈입니다.

- 비밀번호 해싱 및 검증.
- JWT(JSON Web Token) 생성 및 검증.
- OAuth2 Password Bearer 스키마를 사용하여 현재 사용자 획득.
- 사용자 역할(role) 기반 권한 부여(Authorization) 검사.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt, JWTError
from passlib.context import CryptContext
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from fims import API_PREFIX
from fims.core.config import settings
from fims.core.database import get_session
from fims.domains.usr import models as usr_models

logger = logging.getLogger(__name__)

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"

# --- 비밀번호 해싱 설정 ---
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """일반 텍스트 비밀번호와 해싱된 비밀번호가 일치하는지 확인합니다."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


# --- OAuth2 스키마 설정 ---
# Swagger UI가 올바른 로그인 경로를 찾아가도록 API_PREFIX를 포함합니다.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{API_PREFIX}/usr/auth/token")


# --- JWT 토큰 생성 및 검증 ---
def _encode_token(data: dict, token_type: str, expire: datetime) -> str:
    to_encode = data.copy()
    to_encode.update({"exp": expire, "type": token_type})
    return jwt.encode(to_encode, settings.SECRET_KEY.get_secret_value(), algorithm=settings.ALGORITHM)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Access Token을 생성합니다."""
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    return _encode_token(data, ACCESS_TOKEN_TYPE, expire)


def create_refresh_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Refresh Token을 생성합니다.
    Refresh Token 만료 시간은 Access Token보다 훨씬 길게 설정합니다.
    """
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS))
    return _encode_token(data, REFRESH_TOKEN_TYPE, expire)


def decode_token(token: str, expected_type: str) -> str:
    """
    토큰을 디코딩하여 subject(username)를 반환합니다.
    서명, 만료, 토큰 종류 중 하나라도 맞지 않으면 401 예외를 발생시킵니다.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, settings.SECRET_KEY.get_secret_value(), algorithms=[settings.ALGORITHM])
    except JWTError as e:
        logger.debug("JWT decode failed: %s", e)
        raise credentials_exception
    username: Optional[str] = payload.get("sub")
    if username is None or payload.get("type") != expected_type:
        raise credentials_exception
    return username


async def get_current_user_from_token(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_session),
) -> usr_models.User:
    """JWT 토큰을 검증하여 현재 사용자를 데이터베이스에서 가져옵니다."""
    username = decode_token(token, ACCESS_TOKEN_TYPE)

    statement = select(usr_models.User).where(usr_models.User.username == username)
    result = await db.execute(statement)
    user = result.scalars().one_or_none()
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


# --- 역할 기반 권한 부여 의존성 ---
# 역할 값이 작을수록 권한이 높습니다 (SUPERUSER=1 ... VIEWER=100).

def get_current_active_user(
    current_user: usr_models.User = Depends(get_current_user_from_token),
) -> usr_models.User:
    """
    현재 인증된 활성 사용자를 반환합니다.
    계정이 비활성화된 경우 400 Bad Request를 발생시킵니다.
    """
    if not current_user.is_active:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Inactive user")
    return current_user


def get_current_staff_user(
    current_user: usr_models.User = Depends(get_current_active_user),
) -> usr_models.User:
    """현업 담당자(STAFF) 이상의 사용자를 반환합니다. 그렇지 않으면 403."""
    if current_user.role > usr_models.UserRole.STAFF:
        logger.warning("User '%s' (%s) denied: staff role required.", current_user.username, current_user.role.name)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not enough permissions. Staff role required."
        )
    return current_user


def get_current_admin_user(
    current_user: usr_models.User = Depends(get_current_active_user),
) -> usr_models.User:
    """관리자(ADMIN, role <= 10) 사용자를 반환합니다. 그렇지 않으면 403."""
    if current_user.role > usr_models.UserRole.ADMIN:
        logger.warning("User '%s' (%s) denied: admin role required.", current_user.username, current_user.role.name)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not enough permissions. Admin role required."
        )
    return current_user


def decode_refresh_token(token: str) -> str:
    """Refresh Token의 subject(username)를 반환합니다."""
    return decode_token(token, REFRESH_TOKEN_TYPE)
