"""
인증 비즈니스 로직
"""
import logging
import re
import time
from dataclasses import replace
from typing import Optional

from audit_portal.config import settings
from audit_portal.config.security import (
    create_access_token,
    dummy_verify,
    hash_password,
    verify_password,
)
from audit_portal.domain.entities import (
    Credential,
    User,
    new_id,
    normalize_tools,
    utcnow,
)
from audit_portal.repositories.base import DuplicateRecordError, UnitOfWork
from audit_portal.schemas.auth import (
    AdminLoginRequest,
    AuthResponse,
    CheckUserRequest,
    CheckUserResponse,
    DepartmentUserItem,
    DepartmentUsersResponse,
    LoginByIdRequest,
    LoginRequest,
    RegisterUserRequest,
    RegisterUserResponse,
    SetPasswordRequest,
    SetPasswordResponse,
    SignupRequest,
    UserResponse,
    UserSearchItem,
    UserSearchResponse,
)
from audit_portal.service.errors import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from audit_portal.service.user_id_service import UserIdGenerator, get_user_id_generator

logger = logging.getLogger(__name__)

INTERNAL_EMAIL_DOMAIN = "internal.local"
SEARCH_MIN_LENGTH = 2
SEARCH_LIMIT = 10

# 사용자 없음 / 비밀번호 오류는 같은 메시지 (사용자 존재 여부 비노출)
INVALID_CREDENTIALS = "Хэрэглэгч олдсонгүй эсвэл нууц үг буруу байна"
INVALID_ADMIN_CREDENTIALS = "Админ хэрэглэгч олдсонгүй эсвэл нууц үг буруу байна"
ACCOUNT_DISABLED = "Таны эрх идэвхгүй байна. Админд хандана уу."


def _email_local_part(name: str) -> str:
    return re.sub(r"\s+", ".", name.lower())


def _now_millis() -> int:
    return int(time.time() * 1000)


def _unique_email(name: str) -> str:
    """이름.밀리초.임의값@도메인 (같은 이름이 동시에 등록돼도 겹치지 않음)"""
    return f"{_email_local_part(name)}.{_now_millis()}.{new_id()[:8]}@{INTERNAL_EMAIL_DOMAIN}"


def issue_token(user: User) -> str:
    """세션 토큰 발급 (id, email, userId 포함)"""
    return create_access_token({
        "sub": user.user_id,
        "id": user.id,
        "email": user.email,
        "userId": user.user_id,
    })


class AuthService:
    """인증 서비스"""

    def __init__(self, uow: UnitOfWork, id_generator: Optional[UserIdGenerator] = None):
        self.uow = uow
        self.id_generator = id_generator or get_user_id_generator()

    # ============= 등록 =============

    def signup(self, request: SignupRequest) -> AuthResponse:
        """
        관리자가 비밀번호를 지정해 사용자 생성

        Args:
            request: 회원가입 요청

        Returns:
            AuthResponse: 액세스 토큰, 사용자 정보

        Raises:
            ConflictError: 사용자 ID가 이미 존재하는 경우
        """
        user_id = self.id_generator.generate_user_id(request.department, request.name)
        credential = Credential.with_hash(hash_password(request.password))

        with self.uow:
            self._ensure_user_id_available(user_id)

            email = request.email or f"{_email_local_part(request.name)}@{INTERNAL_EMAIL_DOMAIN}"
            if self.uow.users.get_by_email(email):
                # 이메일 중복은 실패 대신 타임스탬프를 붙인 주소 사용
                email = _unique_email(request.name)

            user = self._create_user(
                user_id=user_id,
                email=email,
                name=request.name,
                department=request.department,
                position=request.position,
                credential=credential,
            )
            self.uow.commit()

        logger.info(f"사용자 생성 (signup): {user.user_id}")
        return AuthResponse(access_token=issue_token(user), user=UserResponse.from_entity(user))

    def register_user(self, request: RegisterUserRequest) -> RegisterUserResponse:
        """
        비밀번호 없이 사전 등록 (첫 로그인 때 set_password 필요)

        Raises:
            ConflictError: 사용자 ID가 이미 존재하는 경우
        """
        user_id = self.id_generator.generate_user_id(request.department, request.name)
        email = _unique_email(request.name)

        with self.uow:
            self._ensure_user_id_available(user_id)
            user = self._create_user(
                user_id=user_id,
                email=email,
                name=request.name,
                department=request.department,
                position=request.position,
                credential=Credential.pending(),
            )
            self.uow.commit()

        logger.info(f"사용자 사전 등록: {user.user_id}")
        return RegisterUserResponse(
            success=True,
            user_id=user.user_id,
            name=user.name,
            department=request.department,
            position=request.position,
            message="Бүртгэл амжилттай. Нууц үгээ үүсгэнэ үү.",
        )

    def _ensure_user_id_available(self, user_id: str) -> None:
        if self.uow.users.get_by_user_id(user_id):
            logger.warning(f"사용자 ID 중복: {user_id}")
            raise ConflictError(f"Энэ хэрэглэгчийн ID ({user_id}) аль хэдийн бүртгэлтэй байна")

    def _create_user(
        self,
        user_id: str,
        email: str,
        name: str,
        department: str,
        position: str,
        credential: Credential,
    ) -> User:
        """부서 조회/생성 + 인원수 증가 + 사용자 추가 (호출자의 트랜잭션 안에서)"""
        dept, created = self.uow.departments.get_or_create(department)
        if not created:
            self.uow.departments.increment_employee_count(dept.id)

        try:
            return self.uow.users.add(User(
                id=new_id(),
                user_id=user_id,
                email=email,
                name=name,
                position=position,
                department_id=dept.id,
                department_name=dept.name,
                credential=credential,
                is_admin=False,
                is_active=True,
                allowed_tools=normalize_tools(settings.DEFAULT_ALLOWED_TOOLS),
                created_at=utcnow(),
            ))
        except DuplicateRecordError as e:
            logger.warning(f"사용자 생성 충돌 ({e.field}): {user_id}")
            if e.field == "email":
                raise ConflictError("Энэ имэйл хаяг аль хэдийн бүртгэлтэй байна")
            raise ConflictError(f"Энэ хэрэглэгчийн ID ({user_id}) аль хэдийн бүртгэлтэй байна")

    def create_initial_admin(self, user_id: str, name: str, email: str, password: str) -> bool:
        """
        최초 관리자 계정 생성 (서버 시작 시, 이미 있으면 건너뜀)

        Returns:
            새로 생성했는지 여부
        """
        with self.uow:
            if self.uow.users.get_by_user_id(user_id):
                return False

        credential = Credential.with_hash(hash_password(password))
        department = self.id_generator.code_table.management_department

        with self.uow:
            dept, created = self.uow.departments.get_or_create(department)
            if not created:
                self.uow.departments.increment_employee_count(dept.id)
            try:
                self.uow.users.add(User(
                    id=new_id(),
                    user_id=user_id,
                    email=email,
                    name=name,
                    position="Админ",
                    department_id=dept.id,
                    department_name=dept.name,
                    credential=credential,
                    is_admin=True,
                    is_active=True,
                    allowed_tools=normalize_tools(settings.DEFAULT_ALLOWED_TOOLS),
                    created_at=utcnow(),
                ))
            except DuplicateRecordError:
                # 다른 워커가 먼저 생성
                return False
            self.uow.commit()

        logger.info(f"최초 관리자 계정 생성: {user_id}")
        return True

    # ============= 비밀번호 설정 =============

    def set_password(self, request: SetPasswordRequest) -> SetPasswordResponse:
        """
        사전 등록 사용자의 첫 비밀번호 설정 (1회만 가능, 첫 로그인 겸함)

        Raises:
            NotFoundError: 사용자를 찾을 수 없는 경우
            ValidationError: 이미 비밀번호가 설정된 경우
            AuthenticationError: 비활성 계정
        """
        with self.uow:
            user = self.uow.users.get_by_user_id(request.user_id)
        self._check_password_setup_allowed(user)

        password_hash = hash_password(request.password)
        now = utcnow()

        with self.uow:
            if not self.uow.users.complete_password_setup(user.id, password_hash, now):
                raise ValidationError("Нууц үг аль хэдийн тохируулагдсан байна")
            self.uow.commit()

        user = replace(user, credential=Credential.with_hash(password_hash), last_login_at=now)
        logger.info(f"비밀번호 설정 완료: {user.user_id}")
        return SetPasswordResponse(
            success=True,
            access_token=issue_token(user),
            user=UserResponse.from_entity(user),
        )

    @staticmethod
    def _check_password_setup_allowed(user: Optional[User]) -> None:
        if user is None:
            raise NotFoundError("Хэрэглэгч олдсонгүй")
        if user.credential.is_set:
            logger.warning(f"비밀번호 재설정 시도 거부: {user.user_id}")
            raise ValidationError("Нууц үг аль хэдийн тохируулагдсан байна")
        if not user.is_active:
            raise AuthenticationError(ACCOUNT_DISABLED)

    # ============= 로그인 =============

    def login(self, request: LoginRequest) -> AuthResponse:
        """
        부서 + 이름 + 비밀번호 로그인

        Raises:
            NotFoundError: 부서를 찾을 수 없는 경우
            AuthenticationError: 사용자 없음/비밀번호 오류/비활성 계정
        """
        with self.uow:
            department = self.uow.departments.get_by_name(request.department)
            if department is None:
                raise NotFoundError("Хэлтэс олдсонгүй")
            user = self.uow.users.find_by_name_in_department(request.username, department.id)

        return self._complete_login(user, request.password, INVALID_CREDENTIALS)

    def login_by_id(self, request: LoginByIdRequest) -> AuthResponse:
        """사용자 ID + 비밀번호 로그인"""
        with self.uow:
            user = self.uow.users.get_by_user_id(request.user_id)

        return self._complete_login(user, request.password, INVALID_CREDENTIALS)

    def admin_login(self, request: AdminLoginRequest) -> AuthResponse:
        """관리자 로그인 (이름 또는 사용자 ID). 관리자가 아니면 사용자 없음과 같은 응답"""
        with self.uow:
            user = self.uow.users.find_admin(request.username)

        return self._complete_login(user, request.password, INVALID_ADMIN_CREDENTIALS)

    def _complete_login(self, user: Optional[User], password: str, failure_message: str) -> AuthResponse:
        if user is None:
            dummy_verify()
            logger.warning("로그인 실패: 사용자 없음")
            raise AuthenticationError(failure_message)

        if not user.is_active:
            logger.warning(f"로그인 거부 (비활성 계정): {user.user_id}")
            raise AuthenticationError(ACCOUNT_DISABLED)

        if not user.credential.is_set:
            dummy_verify()
            logger.warning(f"로그인 실패 (비밀번호 미설정): {user.user_id}")
            raise AuthenticationError(failure_message)

        if not verify_password(password, user.credential.password_hash):
            logger.warning(f"로그인 실패 (비밀번호 오류): {user.user_id}")
            raise AuthenticationError(failure_message)

        now = utcnow()
        with self.uow:
            self.uow.users.record_login(user.id, now)
            self.uow.commit()

        user = replace(user, last_login_at=now)
        logger.info(f"로그인 성공: {user.user_id}")
        return AuthResponse(access_token=issue_token(user), user=UserResponse.from_entity(user))

    # ============= 조회 =============

    def check_user(self, request: CheckUserRequest) -> CheckUserResponse:
        """사용자 ID 존재 여부와 비밀번호 설정 여부 확인"""
        with self.uow:
            user = self.uow.users.get_by_user_id(request.user_id)

        if user is None:
            return CheckUserResponse(exists=False, has_password=False)

        return CheckUserResponse(
            exists=True,
            has_password=user.credential.is_set,
            user_id=user.user_id,
            name=user.name,
            department=user.department_name,
            is_active=user.is_active,
        )

    def search_users(self, query: Optional[str]) -> UserSearchResponse:
        """사용자 ID / 이름 자동완성 (2자 미만이면 빈 결과)"""
        if not query or len(query) < SEARCH_MIN_LENGTH:
            return UserSearchResponse(users=[])

        with self.uow:
            users = self.uow.users.search_active(query, SEARCH_LIMIT)

        return UserSearchResponse(users=[
            UserSearchItem(
                id=user.id,
                name=user.name,
                user_id=user.user_id,
                department=user.department_name or "",
                position=user.position,
            )
            for user in users
        ])

    def get_users_by_department(self, department_name: str) -> DepartmentUsersResponse:
        """부서의 활성 사용자 목록 (로그인 화면용)"""
        with self.uow:
            department = self.uow.departments.get_by_name(department_name)
            users = [] if department is None else self.uow.users.list_by_department(
                department.id, active_only=True
            )

        return DepartmentUsersResponse(users=[
            DepartmentUserItem(id=user.id, name=user.name, position=user.position)
            for user in users
        ])

    def get_user_id_prefix(self, department: str) -> str:
        return self.id_generator.get_user_id_prefix(department)

    def get_current_user(self, id: str) -> UserResponse:
        """
        현재 사용자 정보 조회

        Raises:
            AuthenticationError: 토큰의 사용자가 존재하지 않는 경우
        """
        with self.uow:
            user = self.uow.users.get(id)

        if user is None:
            raise AuthenticationError("Хэрэглэгч олдсонгүй")

        return UserResponse.from_entity(user)
