"""
API 공통 의존성
"""
from typing import Optional

from fastapi import Depends, Header

from audit_portal.config.security import verify_token
from audit_portal.repositories.base import UnitOfWork
from audit_portal.repositories.sqlalchemy_repository import SqlAlchemyUnitOfWork
from audit_portal.service.access_service import AccessService
from audit_portal.service.errors import AuthenticationError


def get_uow() -> UnitOfWork:
    """요청마다 새 Unit of Work (테스트에서 dependency_overrides로 교체 가능)"""
    return SqlAlchemyUnitOfWork()


def get_current_user_id(authorization: Optional[str] = Header(None)) -> str:
    """
    현재 사용자 ID 추출
    Authorization 헤더에서 Bearer 토큰을 받아 사용자 내부 ID를 반환
    """
    if not authorization:
        raise AuthenticationError("Нэвтрэх токен байхгүй байна")

    # "Bearer <token>" 형식에서 토큰 추출
    if authorization.startswith("Bearer "):
        token = authorization[7:]
    else:
        token = authorization

    payload = verify_token(token)
    if not payload:
        raise AuthenticationError("Токен хүчингүй байна")

    user_id = payload.get("id")
    if not user_id:
        raise AuthenticationError("Токенд хэрэглэгчийн мэдээлэл алга")

    return user_id


def require_admin(
    user_id: str = Depends(get_current_user_id),
    uow: UnitOfWork = Depends(get_uow),
) -> str:
    """활성 관리자만 통과, 관리자 내부 ID 반환"""
    AccessService(uow).require_admin(user_id)
    return user_id
