"""
인증 관련 요청/응답 스키마
"""
from datetime import datetime
from typing import List, Optional

from pydantic import EmailStr, field_validator

from audit_portal.config.security import check_password_strength
from audit_portal.domain.entities import User
from audit_portal.schemas.common import CamelModel, not_blank, not_empty


class SignupRequest(CamelModel):
    """관리자용 사용자 생성 요청 (비밀번호 직접 지정)"""
    email: Optional[EmailStr] = None
    password: str
    name: str
    department: str
    position: str

    @field_validator("name", "department", "position")
    @classmethod
    def validate_not_blank(cls, v):
        return not_blank(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v):
        """비밀번호 최소 6자, 공백만으로 된 값 불가 (입력값 그대로 저장)"""
        if not v.strip():
            raise ValueError("Утга хоосон байж болохгүй")
        if len(v) < 6:
            raise ValueError("Нууц үг хамгийн багадаа 6 тэмдэгт байх ёстой")
        return v

    class Config:
        json_schema_extra = {
            "example": {
                "password": "Passw0rd!",
                "name": "бат-эрдэнэ",
                "department": "Ерөнхий аудитын хэлтэс",
                "position": "Аудитор"
            }
        }


class LoginRequest(CamelModel):
    """부서 + 이름 로그인 요청"""
    department: str
    username: str
    password: str

    @field_validator("department", "username")
    @classmethod
    def validate_not_blank(cls, v):
        return not_blank(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v):
        return not_empty(v)

    class Config:
        json_schema_extra = {
            "example": {
                "department": "Ерөнхий аудитын хэлтэс",
                "username": "Бат-Эрдэнэ",
                "password": "Passw0rd!"
            }
        }


class LoginByIdRequest(CamelModel):
    """사용자 ID 로그인 요청"""
    user_id: str
    password: str

    @field_validator("user_id")
    @classmethod
    def validate_not_blank(cls, v):
        return not_blank(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v):
        return not_empty(v)


class AdminLoginRequest(CamelModel):
    """관리자 로그인 요청 (username: 이름 또는 사용자 ID)"""
    username: str
    password: str

    @field_validator("username")
    @classmethod
    def validate_not_blank(cls, v):
        return not_blank(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v):
        return not_empty(v)


class CheckUserRequest(CamelModel):
    """사용자 존재 확인 요청"""
    user_id: str

    @field_validator("user_id")
    @classmethod
    def validate_not_blank(cls, v):
        return not_blank(v)


class RegisterUserRequest(CamelModel):
    """비밀번호 없는 사전 등록 요청"""
    department: str
    position: str
    name: str

    @field_validator("department", "position", "name")
    @classmethod
    def validate_not_blank(cls, v):
        return not_blank(v)


class SetPasswordRequest(CamelModel):
    """첫 로그인 비밀번호 설정 요청"""
    user_id: str
    password: str

    @field_validator("user_id")
    @classmethod
    def validate_not_blank(cls, v):
        return not_blank(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v):
        """8자 이상, 대문자/소문자/숫자/특수문자(@$!%*?&) 포함"""
        error = check_password_strength(v)
        if error:
            raise ValueError(error)
        return v


class UserResponse(CamelModel):
    """사용자 정보 응답 (비밀번호 정보 없음)"""
    id: str
    email: str
    user_id: str
    name: str
    position: Optional[str] = None
    department: Optional[str] = None
    department_id: Optional[str] = None
    is_admin: bool
    is_active: bool
    allowed_tools: List[str]
    last_login_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            email=user.email,
            user_id=user.user_id,
            name=user.name,
            position=user.position,
            department=user.department_name,
            department_id=user.department_id,
            is_admin=user.is_admin,
            is_active=user.is_active,
            allowed_tools=sorted(user.allowed_tools),
            last_login_at=user.last_login_at,
        )


class AuthResponse(CamelModel):
    """로그인 응답"""
    access_token: str
    token_type: str = "bearer"
    user: UserResponse

    class Config:
        json_schema_extra = {
            "example": {
                "accessToken": "eyJhbGciOiJIUzI1NiIs...",
                "tokenType": "bearer",
                "user": {
                    "id": "0b7c6c1e-5d0e-4a8e-9d7a-1f0c2b3a4d5e",
                    "email": "бат-эрдэнэ@internal.local",
                    "userId": "DAG-EAH-Бат-Эрдэнэ",
                    "name": "бат-эрдэнэ",
                    "position": "Аудитор",
                    "department": "Ерөнхий аудитын хэлтэс",
                    "isAdmin": False,
                    "isActive": True,
                    "allowedTools": ["fitness", "todo"]
                }
            }
        }


class SetPasswordResponse(AuthResponse):
    """비밀번호 설정 응답 (첫 로그인)"""
    success: bool = True


class CheckUserResponse(CamelModel):
    """사용자 존재 확인 응답"""
    exists: bool
    has_password: bool
    user_id: Optional[str] = None
    name: Optional[str] = None
    department: Optional[str] = None
    is_active: Optional[bool] = None


class RegisterUserResponse(CamelModel):
    """사전 등록 응답"""
    success: bool = True
    user_id: str
    name: str
    department: str
    position: str
    message: str


class UserIdPrefixResponse(CamelModel):
    prefix: str


class UserSearchItem(CamelModel):
    """자동완성 항목"""
    id: str
    name: str
    user_id: str
    department: str = ""
    position: Optional[str] = None


class UserSearchResponse(CamelModel):
    users: List[UserSearchItem]


class DepartmentUserItem(CamelModel):
    id: str
    name: str
    position: Optional[str] = None


class DepartmentUsersResponse(CamelModel):
    users: List[DepartmentUserItem]
