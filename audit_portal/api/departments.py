"""
부서 API 라우트

조회는 로그인 사용자, 변경은 관리자만 가능.
"""
from typing import List

from fastapi import APIRouter, Depends, status

from audit_portal.api.deps import get_current_user_id, get_uow, require_admin
from audit_portal.repositories.base import UnitOfWork
from audit_portal.schemas.common import ErrorResponse, MessageResponse
from audit_portal.schemas.departments import (
    DepartmentCreate,
    DepartmentResponse,
    DepartmentUpdate,
    RecountResponse,
)
from audit_portal.service.department_service import DepartmentService

router = APIRouter(prefix="/api/v1/departments", tags=["Departments"])


def get_department_service(uow: UnitOfWork = Depends(get_uow)) -> DepartmentService:
    return DepartmentService(uow)


@router.get("", response_model=List[DepartmentResponse])
def list_departments(
    _: str = Depends(get_current_user_id),
    service: DepartmentService = Depends(get_department_service),
):
    """전체 부서 (최신순, 구성원 포함)"""
    return service.find_all()


@router.post(
    "",
    response_model=DepartmentResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        409: {"model": ErrorResponse, "description": "부서명 중복"},
        403: {"model": ErrorResponse, "description": "관리자 권한 없음"},
    },
)
def create_department(
    request: DepartmentCreate,
    _: str = Depends(require_admin),
    service: DepartmentService = Depends(get_department_service),
):
    """새 부서 생성"""
    return service.create(request)


@router.post("/recount", response_model=RecountResponse)
def recount_employees(
    _: str = Depends(require_admin),
    service: DepartmentService = Depends(get_department_service),
):
    """
    모든 부서의 인원수를 실제 소속 사용자 수로 재계산

    반환:
    - updated: 값이 바뀐 부서 목록 (이전 값, 새 값)
    """
    return service.recount_employees()


@router.get(
    "/by-name/{name}",
    response_model=DepartmentResponse,
    responses={404: {"model": ErrorResponse, "description": "부서 없음"}},
)
def get_department_by_name(
    name: str,
    _: str = Depends(get_current_user_id),
    service: DepartmentService = Depends(get_department_service),
):
    """부서명으로 조회 (관리자 계정은 구성원에서 제외)"""
    return service.find_by_name(name)


@router.get(
    "/{department_id}",
    response_model=DepartmentResponse,
    responses={404: {"model": ErrorResponse, "description": "부서 없음"}},
)
def get_department(
    department_id: str,
    _: str = Depends(get_current_user_id),
    service: DepartmentService = Depends(get_department_service),
):
    return service.find_one(department_id)


@router.patch(
    "/{department_id}",
    response_model=DepartmentResponse,
    responses={
        404: {"model": ErrorResponse, "description": "부서 없음"},
        409: {"model": ErrorResponse, "description": "부서명 중복"},
        403: {"model": ErrorResponse, "description": "관리자 권한 없음"},
    },
)
def update_department(
    department_id: str,
    request: DepartmentUpdate,
    _: str = Depends(require_admin),
    service: DepartmentService = Depends(get_department_service),
):
    """부서 정보 수정 (전달된 필드만)"""
    return service.update(department_id, request)


@router.delete(
    "/{department_id}",
    response_model=MessageResponse,
    responses={
        404: {"model": ErrorResponse, "description": "부서 없음"},
        409: {"model": ErrorResponse, "description": "소속 사용자 있음"},
        403: {"model": ErrorResponse, "description": "관리자 권한 없음"},
    },
)
def delete_department(
    department_id: str,
    _: str = Depends(require_admin),
    service: DepartmentService = Depends(get_department_service),
):
    """부서 삭제 (소속 사용자가 없을 때만)"""
    return MessageResponse(message=service.remove(department_id))
