"""
사용자 관리 API 라우트 (관리자 전용)
"""
from typing import List

from fastapi import APIRouter, Depends

from audit_portal.api.deps import get_uow, require_admin
from audit_portal.repositories.base import UnitOfWork
from audit_portal.schemas.common import ErrorResponse, MessageResponse
from audit_portal.schemas.users import (
    UpdateStatusRequest,
    UpdateToolsRequest,
    UpdateUserRequest,
    UserDetailResponse,
)
from audit_portal.service.user_service import UserService

router = APIRouter(
    prefix="/api/v1/users",
    tags=["Users"],
    dependencies=[Depends(require_admin)],
    responses={403: {"model": ErrorResponse, "description": "관리자 권한 없음"}},
)


def get_user_service(uow: UnitOfWork = Depends(get_uow)) -> UserService:
    return UserService(uow)


@router.get("", response_model=List[UserDetailResponse])
def list_users(service: UserService = Depends(get_user_service)):
    """전체 사용자 (최신순)"""
    return service.find_all()


@router.get(
    "/{id}",
    response_model=UserDetailResponse,
    responses={404: {"model": ErrorResponse, "description": "사용자 없음"}},
)
def get_user(id: str, service: UserService = Depends(get_user_service)):
    return service.find_one(id)


@router.patch(
    "/{id}",
    response_model=UserDetailResponse,
    responses={404: {"model": ErrorResponse, "description": "사용자 또는 부서 없음"}},
)
def update_user(
    id: str,
    request: UpdateUserRequest,
    service: UserService = Depends(get_user_service),
):
    """
    사용자 정보 수정 (전달된 필드만)

    - **name**, **position**
    - **departmentId**: 존재하는 부서여야 함
    - **isAdmin**
    - **allowedTools**: 도구 권한 전체 교체
    """
    return service.update(id, request)


@router.patch(
    "/{id}/status",
    response_model=UserDetailResponse,
    responses={404: {"model": ErrorResponse, "description": "사용자 없음"}},
)
def update_user_status(
    id: str,
    request: UpdateStatusRequest,
    service: UserService = Depends(get_user_service),
):
    """계정 활성/비활성 전환"""
    return service.update_status(id, request.is_active)


@router.patch(
    "/{id}/tools",
    response_model=UserDetailResponse,
    responses={404: {"model": ErrorResponse, "description": "사용자 없음"}},
)
def update_user_tools(
    id: str,
    request: UpdateToolsRequest,
    service: UserService = Depends(get_user_service),
):
    """도구 권한 교체 (재로그인 없이 다음 요청부터 적용)"""
    return service.update_tools(id, request.allowed_tools)


@router.delete(
    "/{id}",
    response_model=MessageResponse,
    responses={404: {"model": ErrorResponse, "description": "사용자 없음"}},
)
def delete_user(id: str, service: UserService = Depends(get_user_service)):
    """사용자 삭제 (소유한 도구 데이터 포함)"""
    return MessageResponse(message=service.remove(id))
