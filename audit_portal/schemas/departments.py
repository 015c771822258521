"""
부서 스키마
"""
from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from audit_portal.domain.entities import Department, User
from audit_portal.schemas.common import CamelModel, not_blank


class DepartmentCreate(CamelModel):
    name: str
    description: Optional[str] = None
    manager: Optional[str] = None
    employee_count: int = Field(default=0, ge=0)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return not_blank(v)

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Ерөнхий аудитын хэлтэс",
                "description": "Санхүүгийн болон гүйцэтгэлийн аудит",
                "manager": "Д. Болд"
            }
        }


class DepartmentUpdate(CamelModel):
    """부분 수정 요청"""
    name: Optional[str] = None
    description: Optional[str] = None
    manager: Optional[str] = None
    employee_count: Optional[int] = Field(default=None, ge=0)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return None if v is None else not_blank(v)


class DepartmentMember(CamelModel):
    id: str
    user_id: str
    name: str
    position: Optional[str] = None
    email: str
    is_active: bool

    @classmethod
    def from_entity(cls, user: User) -> "DepartmentMember":
        return cls(
            id=user.id,
            user_id=user.user_id,
            name=user.name,
            position=user.position,
            email=user.email,
            is_active=user.is_active,
        )


class DepartmentResponse(CamelModel):
    id: str
    name: str
    description: Optional[str] = None
    manager: Optional[str] = None
    employee_count: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    users: List[DepartmentMember] = []

    @classmethod
    def from_entity(cls, department: Department, members: Optional[List[User]] = None) -> "DepartmentResponse":
        return cls(
            id=department.id,
            name=department.name,
            description=department.description,
            manager=department.manager,
            employee_count=department.employee_count,
            created_at=department.created_at,
            updated_at=department.updated_at,
            users=[DepartmentMember.from_entity(u) for u in members or []],
        )


class RecountItem(CamelModel):
    id: str
    name: str
    previous_count: int
    employee_count: int


class RecountResponse(CamelModel):
    """인원수 재계산 결과 (변경된 부서만)"""
    updated: List[RecountItem]
