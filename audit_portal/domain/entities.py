"""
도메인 모델

저장소와 무관한 순수 데이터 모델.
도구 권한(allowed_tools)은 집합으로만 다루며 직렬화는 영속성 어댑터가 담당.
"""
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import FrozenSet, Iterable, Optional


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PasswordState(str, Enum):
    """비밀번호 상태"""
    UNSET = "unset"
    PENDING = "pending"  # 사전 등록, 첫 로그인 시 비밀번호 설정 필요
    SET = "set"


@dataclass(frozen=True)
class Credential:
    """사용자 자격 증명 (상태 + bcrypt 해시)"""
    state: PasswordState = PasswordState.UNSET
    password_hash: Optional[str] = None

    @classmethod
    def pending(cls) -> "Credential":
        return cls(state=PasswordState.PENDING)

    @classmethod
    def with_hash(cls, password_hash: str) -> "Credential":
        return cls(state=PasswordState.SET, password_hash=password_hash)

    @property
    def is_set(self) -> bool:
        return self.state is PasswordState.SET and bool(self.password_hash)


@dataclass
class User:
    """사용자"""
    id: str
    user_id: str
    email: str
    name: str
    position: Optional[str] = None
    department_id: Optional[str] = None
    department_name: Optional[str] = None
    credential: Credential = field(default_factory=Credential)
    is_admin: bool = False
    is_active: bool = True
    allowed_tools: FrozenSet[str] = frozenset()
    last_login_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def has_tool(self, tool: str) -> bool:
        return tool in self.allowed_tools


@dataclass
class Department:
    """부서"""
    id: str
    name: str
    description: Optional[str] = None
    manager: Optional[str] = None
    employee_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class Exercise:
    """운동 종목 (사용자 소유)"""
    id: str
    owner_id: str
    name: str
    category: Optional[str] = None
    description: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass
class WorkoutLog:
    """운동 기록 (사용자 소유, 같은 사용자의 운동 종목 참조)"""
    id: str
    owner_id: str
    exercise_id: str
    sets: Optional[int] = None
    repetitions: Optional[int] = None
    weight: Optional[float] = None
    notes: Optional[str] = None
    date: Optional[datetime] = None
    exercise: Optional[Exercise] = None


@dataclass
class BodyStats:
    """신체 정보 기록 (사용자 소유)"""
    id: str
    owner_id: str
    weight: float
    height: float
    date: Optional[datetime] = None


def normalize_tools(tools: Iterable[str]) -> FrozenSet[str]:
    """공백 제거, 빈 값 제외"""
    return frozenset(t.strip() for t in tools if t and t.strip())
