"""
사용자 관리(관리자용) 스키마
"""
from datetime import datetime
from typing import List, Optional

from pydantic import field_validator

from audit_portal.domain.entities import User
from audit_portal.schemas.common import CamelModel, not_blank


class UpdateUserRequest(CamelModel):
    """부분 수정 요청 (전달된 필드만 반영)"""
    name: Optional[str] = None
    position: Optional[str] = None
    department_id: Optional[str] = None
    is_admin: Optional[bool] = None
    allowed_tools: Optional[List[str]] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return None if v is None else not_blank(v)


class UpdateStatusRequest(CamelModel):
    is_active: bool


class UpdateToolsRequest(CamelModel):
    """도구 권한 전체 교체"""
    allowed_tools: List[str]

    class Config:
        json_schema_extra = {
            "example": {"allowedTools": ["todo", "fitness"]}
        }


class UserDetailResponse(CamelModel):
    """관리 화면용 사용자 정보"""
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
    has_password: bool
    last_login_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, user: User) -> "UserDetailResponse":
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
            has_password=user.credential.is_set,
            last_login_at=user.last_login_at,
            created_at=user.created_at,
        )
