"""
인증 API 라우트

엔드포인트:
- POST /api/v1/auth/signup: 사용자 생성 (관리자)
- POST /api/v1/auth/check-user: 사용자 ID 확인
- POST /api/v1/auth/register: 비밀번호 없이 사전 등록
- POST /api/v1/auth/set-password: 첫 비밀번호 설정
- GET /api/v1/auth/user-id-prefix/{department}: 사용자 ID 접두어 미리보기
- POST /api/v1/auth/login: 부서 + 이름 로그인
- POST /api/v1/auth/login-by-id: 사용자 ID 로그인
- POST /api/v1/auth/admin-login: 관리자 로그인
- GET /api/v1/auth/departments/{department}/users: 부서 사용자 목록
- GET /api/v1/auth/users/search: 사용자 자동완성
- GET /api/v1/auth/me: 현재 사용자 정보
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from audit_portal.api.deps import get_current_user_id, get_uow, require_admin
from audit_portal.repositories.base import UnitOfWork
from audit_portal.schemas.auth import (
    AdminLoginRequest,
    AuthResponse,
    CheckUserRequest,
    CheckUserResponse,
    DepartmentUsersResponse,
    LoginByIdRequest,
    LoginRequest,
    RegisterUserRequest,
    RegisterUserResponse,
    SetPasswordRequest,
    SetPasswordResponse,
    SignupRequest,
    UserIdPrefixResponse,
    UserResponse,
    UserSearchResponse,
)
from audit_portal.schemas.common import ErrorResponse
from audit_portal.service.auth_service import AuthService

router = APIRouter(prefix="/api/v1/auth", tags=["Authentication"])


def get_auth_service(uow: UnitOfWork = Depends(get_uow)) -> AuthService:
    return AuthService(uow)


@router.post(
    "/signup",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        409: {"model": ErrorResponse, "description": "사용자 ID 중복"},
        403: {"model": ErrorResponse, "description": "관리자 권한 없음"},
        400: {"model": ErrorResponse, "description": "요청 데이터 오류"},
    },
)
def signup(
    request: SignupRequest,
    _: str = Depends(require_admin),
    service: AuthService = Depends(get_auth_service),
):
    """
    사용자 생성 (관리자가 비밀번호 지정)

    - **email**: 이메일 (생략 시 이름으로 생성)
    - **password**: 비밀번호 (6자 이상)
    - **name**: 이름
    - **department**: 부서명 (없으면 새로 생성)
    - **position**: 직위

    반환:
    - accessToken: 새 사용자의 JWT 액세스 토큰
    - user: 사용자 정보
    """
    return service.signup(request)


@router.post("/check-user", response_model=CheckUserResponse)
def check_user(
    request: CheckUserRequest,
    service: AuthService = Depends(get_auth_service),
):
    """
    사용자 ID 존재 여부와 비밀번호 설정 여부 확인

    첫 로그인 화면에서 set-password / login-by-id 중 어느 쪽으로 갈지 결정할 때 사용
    """
    return service.check_user(request)


@router.post(
    "/register",
    response_model=RegisterUserResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        409: {"model": ErrorResponse, "description": "사용자 ID 중복"},
        400: {"model": ErrorResponse, "description": "요청 데이터 오류"},
    },
)
def register(
    request: RegisterUserRequest,
    service: AuthService = Depends(get_auth_service),
):
    """
    비밀번호 없이 사전 등록

    반환된 userId로 set-password를 호출해 첫 비밀번호를 설정해야 로그인 가능
    """
    return service.register_user(request)


@router.post(
    "/set-password",
    response_model=SetPasswordResponse,
    responses={
        404: {"model": ErrorResponse, "description": "사용자 없음"},
        400: {"model": ErrorResponse, "description": "이미 설정됨 또는 비밀번호 규칙 위반"},
        401: {"model": ErrorResponse, "description": "비활성 계정"},
    },
)
def set_password(
    request: SetPasswordRequest,
    service: AuthService = Depends(get_auth_service),
):
    """
    첫 비밀번호 설정 (1회만 가능)

    - **userId**: 사용자 ID
    - **password**: 8자 이상, 대문자/소문자/숫자/특수문자(@$!%*?&) 포함

    반환:
    - accessToken, user (설정과 동시에 로그인 처리)
    """
    return service.set_password(request)


@router.get("/user-id-prefix/{department}", response_model=UserIdPrefixResponse)
def get_user_id_prefix(
    department: str,
    service: AuthService = Depends(get_auth_service),
):
    """부서별 사용자 ID 접두어 (등록 화면 미리보기)"""
    return UserIdPrefixResponse(prefix=service.get_user_id_prefix(department))


@router.post(
    "/login",
    response_model=AuthResponse,
    responses={
        401: {"model": ErrorResponse, "description": "이름 또는 비밀번호 오류, 비활성 계정"},
        404: {"model": ErrorResponse, "description": "부서 없음"},
        400: {"model": ErrorResponse, "description": "요청 데이터 오류"},
    },
)
def login(
    request: LoginRequest,
    service: AuthService = Depends(get_auth_service),
):
    """
    부서 + 이름 + 비밀번호 로그인

    - **department**: 부서명
    - **username**: 이름
    - **password**: 비밀번호
    """
    return service.login(request)


@router.post(
    "/login-by-id",
    response_model=AuthResponse,
    responses={
        401: {"model": ErrorResponse, "description": "사용자 ID 또는 비밀번호 오류, 비활성 계정"},
    },
)
def login_by_id(
    request: LoginByIdRequest,
    service: AuthService = Depends(get_auth_service),
):
    """사용자 ID + 비밀번호 로그인"""
    return service.login_by_id(request)


@router.post(
    "/admin-login",
    response_model=AuthResponse,
    responses={
        401: {"model": ErrorResponse, "description": "관리자 아님 또는 비밀번호 오류"},
    },
)
def admin_login(
    request: AdminLoginRequest,
    service: AuthService = Depends(get_auth_service),
):
    """관리자 로그인 (username: 이름 또는 사용자 ID)"""
    return service.admin_login(request)


@router.get("/departments/{department}/users", response_model=DepartmentUsersResponse)
def get_department_users(
    department: str,
    service: AuthService = Depends(get_auth_service),
):
    """부서의 활성 사용자 목록 (로그인 화면 선택용)"""
    return service.get_users_by_department(department)


@router.get("/users/search", response_model=UserSearchResponse)
def search_users(
    q: Optional[str] = Query(None, description="사용자 ID 또는 이름 (2자 이상)"),
    service: AuthService = Depends(get_auth_service),
):
    """사용자 자동완성 (최대 10건, 활성 사용자만)"""
    return service.search_users(q)


@router.get(
    "/me",
    response_model=UserResponse,
    responses={
        401: {"model": ErrorResponse, "description": "인증 오류"},
    },
)
def get_me(
    user_id: str = Depends(get_current_user_id),
    service: AuthService = Depends(get_auth_service),
):
    """
    현재 로그인한 사용자 정보

    Header:
    - **Authorization**: "Bearer <access_token>"
    """
    return service.get_current_user(user_id)
