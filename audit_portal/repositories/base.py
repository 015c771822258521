"""
저장소 인터페이스

서비스 계층은 이 인터페이스만 사용하므로
실제 DB 없이 메모리 구현으로도 테스트할 수 있음.
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from audit_portal.domain.entities import (
    BodyStats,
    Department,
    Exercise,
    User,
    WorkoutLog,
)


class DuplicateRecordError(Exception):
    """유니크 제약 위반 (field: 충돌한 컬럼명)"""

    def __init__(self, field: str, message: Optional[str] = None):
        super().__init__(message or f"duplicate value for {field}")
        self.field = field


class RecordInUseError(Exception):
    """다른 행이 참조 중이라 삭제할 수 없음 (외래키 제약 위반)"""


class UserRepository(ABC):

    @abstractmethod
    def get(self, id: str) -> Optional[User]:
        ...

    @abstractmethod
    def get_by_user_id(self, user_id: str) -> Optional[User]:
        ...

    @abstractmethod
    def get_by_email(self, email: str) -> Optional[User]:
        ...

    @abstractmethod
    def find_by_name_in_department(self, name: str, department_id: str) -> Optional[User]:
        ...

    @abstractmethod
    def find_admin(self, identifier: str) -> Optional[User]:
        """이름 또는 사용자 ID가 일치하는 관리자"""

    @abstractmethod
    def search_active(self, query: str, limit: int) -> List[User]:
        """user_id 또는 이름에 query가 포함된 활성 사용자"""

    @abstractmethod
    def list_all(self) -> List[User]:
        """생성일 역순"""

    @abstractmethod
    def list_by_department(
        self,
        department_id: str,
        include_admins: bool = True,
        active_only: bool = False,
    ) -> List[User]:
        ...

    @abstractmethod
    def count_by_department(self, department_id: str) -> int:
        ...

    @abstractmethod
    def add(self, user: User) -> User:
        """
        Raises:
            DuplicateRecordError: user_id 또는 email 중복
        """

    @abstractmethod
    def update(self, user: User) -> User:
        """프로필/권한/상태 필드 저장 (자격 증명 제외)"""

    @abstractmethod
    def record_login(self, id: str, when: datetime) -> None:
        ...

    @abstractmethod
    def complete_password_setup(self, id: str, password_hash: str, when: datetime) -> bool:
        """
        비밀번호가 아직 설정되지 않은 경우에만 해시 저장 + 로그인 시각 갱신

        Returns:
            갱신 여부 (이미 설정된 경우 False)
        """

    @abstractmethod
    def delete(self, id: str) -> None:
        """소유한 도구 데이터도 함께 삭제"""


class DepartmentRepository(ABC):

    @abstractmethod
    def get(self, id: str) -> Optional[Department]:
        ...

    @abstractmethod
    def get_by_name(self, name: str) -> Optional[Department]:
        ...

    @abstractmethod
    def list_all(self) -> List[Department]:
        """생성일 역순"""

    @abstractmethod
    def add(self, department: Department) -> Department:
        """
        Raises:
            DuplicateRecordError: name 중복
        """

    @abstractmethod
    def update(self, id: str, changes: Dict[str, Any]) -> Department:
        """
        전달된 컬럼만 갱신 (읽은 뒤 다른 요청이 바꾼 employee_count를 덮어쓰지 않음)

        Raises:
            DuplicateRecordError: name 중복
        """

    @abstractmethod
    def delete(self, id: str) -> None:
        """
        Raises:
            RecordInUseError: 소속 사용자가 남아 있는 경우
        """

    @abstractmethod
    def get_or_create(self, name: str) -> Tuple[Department, bool]:
        """
        이름으로 부서 조회, 없으면 employee_count=1로 생성

        Returns:
            (부서, 새로 생성했는지 여부)
        """

    @abstractmethod
    def increment_employee_count(self, id: str) -> None:
        ...

    @abstractmethod
    def set_employee_count(self, id: str, count: int) -> None:
        ...


class FitnessRepository(ABC):

    @abstractmethod
    def list_exercises(self, owner_id: str) -> List[Exercise]:
        ...

    @abstractmethod
    def get_exercise(self, owner_id: str, exercise_id: str) -> Optional[Exercise]:
        ...

    @abstractmethod
    def add_exercise(self, exercise: Exercise) -> Exercise:
        ...

    @abstractmethod
    def delete_exercise(self, exercise_id: str) -> None:
        ...

    @abstractmethod
    def list_workout_logs(self, owner_id: str, limit: int) -> List[WorkoutLog]:
        """날짜 역순, exercise 포함"""

    @abstractmethod
    def get_workout_log(self, owner_id: str, log_id: str) -> Optional[WorkoutLog]:
        ...

    @abstractmethod
    def add_workout_log(self, log: WorkoutLog) -> WorkoutLog:
        ...

    @abstractmethod
    def delete_workout_log(self, log_id: str) -> None:
        ...

    @abstractmethod
    def list_body_stats(self, owner_id: str, limit: int) -> List[BodyStats]:
        """날짜 역순"""

    @abstractmethod
    def get_body_stats(self, owner_id: str, stats_id: str) -> Optional[BodyStats]:
        ...

    @abstractmethod
    def add_body_stats(self, stats: BodyStats) -> BodyStats:
        ...

    @abstractmethod
    def delete_body_stats(self, stats_id: str) -> None:
        ...


class UnitOfWork(ABC):
    """
    하나의 논리 작업 = 하나의 트랜잭션

    사용법:
        with uow:
            uow.departments.get_or_create(...)
            uow.users.add(...)
            uow.commit()

    commit() 없이 블록을 벗어나거나 예외가 발생하면 롤백됨.
    """
    users: UserRepository
    departments: DepartmentRepository
    fitness: FitnessRepository

    def __enter__(self) -> "UnitOfWork":
        return self

    def __exit__(self, *args) -> None:
        self.rollback()

    @abstractmethod
    def commit(self) -> None:
        ...

    @abstractmethod
    def rollback(self) -> None:
        ...
