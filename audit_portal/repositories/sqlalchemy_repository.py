"""
SQLAlchemy 저장소 구현

ORM 행 ↔ 도메인 모델 변환과 allowed_tools JSON 직렬화는 이 모듈에서만 수행.
"""
import json
import logging
from datetime import datetime
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Optional, Tuple

from sqlalchemy import func, or_, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from audit_portal.db.database import SessionLocal
from audit_portal.domain.entities import (
    BodyStats,
    Credential,
    Department,
    Exercise,
    PasswordState,
    User,
    WorkoutLog,
    new_id,
    normalize_tools,
    utcnow,
)
from audit_portal.models.department import Department as DepartmentModel
from audit_portal.models.fitness import (
    BodyStats as BodyStatsModel,
    Exercise as ExerciseModel,
    WorkoutLog as WorkoutLogModel,
)
from audit_portal.models.user import User as UserModel
from audit_portal.repositories.base import (
    DepartmentRepository,
    DuplicateRecordError,
    FitnessRepository,
    RecordInUseError,
    UnitOfWork,
    UserRepository,
)

logger = logging.getLogger(__name__)

# ON CONFLICT DO NOTHING을 지원하는 방언별 insert
_CONFLICT_SAFE_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


# ============= 직렬화 =============

def encode_tools(tools: Iterable[str]) -> str:
    return json.dumps(sorted(normalize_tools(tools)), ensure_ascii=False)


def decode_tools(raw: Optional[str]) -> FrozenSet[str]:
    """저장된 JSON 배열 → 집합. 형식이 깨진 값은 빈 집합 (권한 없음)"""
    if not raw:
        return frozenset()
    try:
        value = json.loads(raw)
    except (ValueError, TypeError):
        logger.warning(f"allowed_tools 파싱 실패: {raw[:50]!r}")
        return frozenset()
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        logger.warning(f"allowed_tools 형식 오류: {raw[:50]!r}")
        return frozenset()
    return normalize_tools(value)


def _conflicting_field(error: IntegrityError) -> str:
    message = str(error.orig).lower()
    for field in ("user_id", "email", "name"):
        if field in message:
            return field
    return "unknown"


def _user_to_entity(row: UserModel) -> User:
    return User(
        id=row.id,
        user_id=row.user_id,
        email=row.email,
        name=row.name,
        position=row.position,
        department_id=row.department_id,
        department_name=row.department.name if row.department else None,
        credential=Credential(
            state=PasswordState(row.password_state or PasswordState.UNSET.value),
            password_hash=row.password_hash,
        ),
        is_admin=bool(row.is_admin),
        is_active=bool(row.is_active),
        allowed_tools=decode_tools(row.allowed_tools),
        last_login_at=row.last_login_at,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _department_to_entity(row: DepartmentModel) -> Department:
    return Department(
        id=row.id,
        name=row.name,
        description=row.description,
        manager=row.manager,
        employee_count=row.employee_count or 0,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _exercise_to_entity(row: ExerciseModel) -> Exercise:
    return Exercise(
        id=row.id,
        owner_id=row.owner_id,
        name=row.name,
        category=row.category,
        description=row.description,
        created_at=row.created_at,
    )


def _workout_log_to_entity(row: WorkoutLogModel) -> WorkoutLog:
    return WorkoutLog(
        id=row.id,
        owner_id=row.owner_id,
        exercise_id=row.exercise_id,
        sets=row.sets,
        repetitions=row.repetitions,
        weight=row.weight,
        notes=row.notes,
        date=row.date,
        exercise=_exercise_to_entity(row.exercise) if row.exercise else None,
    )


def _body_stats_to_entity(row: BodyStatsModel) -> BodyStats:
    return BodyStats(
        id=row.id,
        owner_id=row.owner_id,
        weight=row.weight,
        height=row.height,
        date=row.date,
    )


# ============= 사용자 =============

class SqlAlchemyUserRepository(UserRepository):

    def __init__(self, session: Session):
        self.session = session

    def _query(self):
        return self.session.query(UserModel).options(joinedload(UserModel.department))

    def get(self, id: str) -> Optional[User]:
        row = self._query().filter(UserModel.id == id).first()
        return _user_to_entity(row) if row else None

    def get_by_user_id(self, user_id: str) -> Optional[User]:
        row = self._query().filter(UserModel.user_id == user_id).first()
        return _user_to_entity(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        row = self._query().filter(UserModel.email == email).first()
        return _user_to_entity(row) if row else None

    def find_by_name_in_department(self, name: str, department_id: str) -> Optional[User]:
        row = self._query().filter(
            UserModel.name == name,
            UserModel.department_id == department_id,
        ).first()
        return _user_to_entity(row) if row else None

    def find_admin(self, identifier: str) -> Optional[User]:
        row = self._query().filter(
            or_(UserModel.name == identifier, UserModel.user_id == identifier),
            UserModel.is_admin.is_(True),
        ).first()
        return _user_to_entity(row) if row else None

    def search_active(self, query: str, limit: int) -> List[User]:
        rows = self._query().filter(
            UserModel.is_active.is_(True),
            or_(
                UserModel.user_id.contains(query, autoescape=True),
                UserModel.name.contains(query, autoescape=True),
            ),
        ).order_by(UserModel.name).limit(limit).all()
        return [_user_to_entity(row) for row in rows]

    def list_all(self) -> List[User]:
        rows = self._query().order_by(UserModel.created_at.desc()).all()
        return [_user_to_entity(row) for row in rows]

    def list_by_department(
        self,
        department_id: str,
        include_admins: bool = True,
        active_only: bool = False,
    ) -> List[User]:
        query = self._query().filter(UserModel.department_id == department_id)
        if not include_admins:
            query = query.filter(UserModel.is_admin.is_(False))
        if active_only:
            query = query.filter(UserModel.is_active.is_(True))
        return [_user_to_entity(row) for row in query.order_by(UserModel.name).all()]

    def count_by_department(self, department_id: str) -> int:
        return self.session.query(func.count(UserModel.id)).filter(
            UserModel.department_id == department_id
        ).scalar() or 0

    def add(self, user: User) -> User:
        row = UserModel(
            id=user.id,
            user_id=user.user_id,
            email=user.email,
            password_state=user.credential.state.value,
            password_hash=user.credential.password_hash,
            name=user.name,
            position=user.position,
            department_id=user.department_id,
            is_admin=user.is_admin,
            is_active=user.is_active,
            allowed_tools=encode_tools(user.allowed_tools),
            last_login_at=user.last_login_at,
            created_at=user.created_at or utcnow(),
        )
        self.session.add(row)
        try:
            self.session.flush()
        except IntegrityError as e:
            raise DuplicateRecordError(_conflicting_field(e)) from e
        self.session.refresh(row)
        return _user_to_entity(row)

    def update(self, user: User) -> User:
        row = self.session.get(UserModel, user.id)
        row.name = user.name
        row.position = user.position
        row.department_id = user.department_id
        row.is_admin = user.is_admin
        row.is_active = user.is_active
        row.allowed_tools = encode_tools(user.allowed_tools)
        row.updated_at = utcnow()
        self.session.flush()
        self.session.refresh(row)
        return _user_to_entity(row)

    def record_login(self, id: str, when: datetime) -> None:
        self.session.execute(
            update(UserModel.__table__)
            .where(UserModel.__table__.c.id == id)
            .values(last_login_at=when)
        )

    def complete_password_setup(self, id: str, password_hash: str, when: datetime) -> bool:
        table = UserModel.__table__
        result = self.session.execute(
            update(table)
            .where(table.c.id == id, table.c.password_state != PasswordState.SET.value)
            .values(
                password_state=PasswordState.SET.value,
                password_hash=password_hash,
                last_login_at=when,
                updated_at=when,
            )
        )
        return result.rowcount == 1

    def delete(self, id: str) -> None:
        row = self.session.get(UserModel, id)
        if row is not None:
            self.session.delete(row)
            self.session.flush()


# ============= 부서 =============

class SqlAlchemyDepartmentRepository(DepartmentRepository):

    def __init__(self, session: Session):
        self.session = session

    def get(self, id: str) -> Optional[Department]:
        row = self.session.get(DepartmentModel, id)
        return _department_to_entity(row) if row else None

    def _row_by_name(self, name: str) -> Optional[DepartmentModel]:
        return self.session.query(DepartmentModel).filter(
            DepartmentModel.name == name
        ).populate_existing().first()

    def get_by_name(self, name: str) -> Optional[Department]:
        row = self._row_by_name(name)
        return _department_to_entity(row) if row else None

    def list_all(self) -> List[Department]:
        rows = self.session.query(DepartmentModel).order_by(DepartmentModel.created_at.desc()).all()
        return [_department_to_entity(row) for row in rows]

    def add(self, department: Department) -> Department:
        row = DepartmentModel(
            id=department.id,
            name=department.name,
            description=department.description,
            manager=department.manager,
            employee_count=department.employee_count,
            created_at=department.created_at or utcnow(),
        )
        self.session.add(row)
        try:
            self.session.flush()
        except IntegrityError as e:
            raise DuplicateRecordError("name") from e
        return _department_to_entity(row)

    def update(self, id: str, changes: Dict[str, Any]) -> Department:
        table = DepartmentModel.__table__
        try:
            self.session.execute(
                update(table).where(table.c.id == id).values(**changes, updated_at=utcnow())
            )
        except IntegrityError as e:
            raise DuplicateRecordError("name") from e
        row = self.session.query(DepartmentModel).filter(
            DepartmentModel.id == id
        ).populate_existing().first()
        return _department_to_entity(row)

    def delete(self, id: str) -> None:
        row = self.session.get(DepartmentModel, id)
        if row is not None:
            self.session.delete(row)
            try:
                self.session.flush()
            except IntegrityError as e:
                raise RecordInUseError(f"department {id} is referenced by users") from e

    def get_or_create(self, name: str) -> Tuple[Department, bool]:
        row = self._row_by_name(name)
        if row is not None:
            return _department_to_entity(row), False

        values = {
            "id": new_id(),
            "name": name,
            "description": "",
            "employee_count": 1,
            "created_at": utcnow(),
        }
        dialect = self.session.get_bind().dialect.name
        insert = _CONFLICT_SAFE_INSERTS.get(dialect)
        if insert is not None:
            # 동시에 같은 부서가 생성되면 먼저 커밋된 쪽을 사용
            statement = insert(DepartmentModel.__table__).values(**values).on_conflict_do_nothing(
                index_elements=["name"]
            )
            created = self.session.execute(statement).rowcount == 1
        else:
            self.session.add(DepartmentModel(**values))
            self.session.flush()
            created = True

        return _department_to_entity(self._row_by_name(name)), created

    def increment_employee_count(self, id: str) -> None:
        table = DepartmentModel.__table__
        self.session.execute(
            update(table)
            .where(table.c.id == id)
            .values(employee_count=table.c.employee_count + 1)
        )

    def set_employee_count(self, id: str, count: int) -> None:
        table = DepartmentModel.__table__
        self.session.execute(
            update(table).where(table.c.id == id).values(employee_count=count, updated_at=utcnow())
        )


# ============= 피트니스 =============

class SqlAlchemyFitnessRepository(FitnessRepository):

    def __init__(self, session: Session):
        self.session = session

    def list_exercises(self, owner_id: str) -> List[Exercise]:
        rows = self.session.query(ExerciseModel).filter(
            ExerciseModel.owner_id == owner_id
        ).order_by(ExerciseModel.created_at.desc()).all()
        return [_exercise_to_entity(row) for row in rows]

    def get_exercise(self, owner_id: str, exercise_id: str) -> Optional[Exercise]:
        row = self.session.query(ExerciseModel).filter(
            ExerciseModel.id == exercise_id,
            ExerciseModel.owner_id == owner_id,
        ).first()
        return _exercise_to_entity(row) if row else None

    def add_exercise(self, exercise: Exercise) -> Exercise:
        row = ExerciseModel(
            id=exercise.id,
            owner_id=exercise.owner_id,
            name=exercise.name,
            category=exercise.category,
            description=exercise.description,
            created_at=exercise.created_at or utcnow(),
        )
        self.session.add(row)
        self.session.flush()
        return _exercise_to_entity(row)

    def delete_exercise(self, exercise_id: str) -> None:
        row = self.session.get(ExerciseModel, exercise_id)
        if row is not None:
            self.session.delete(row)
            self.session.flush()

    def list_workout_logs(self, owner_id: str, limit: int) -> List[WorkoutLog]:
        rows = self.session.query(WorkoutLogModel).options(
            joinedload(WorkoutLogModel.exercise)
        ).filter(
            WorkoutLogModel.owner_id == owner_id
        ).order_by(WorkoutLogModel.date.desc()).limit(limit).all()
        return [_workout_log_to_entity(row) for row in rows]

    def get_workout_log(self, owner_id: str, log_id: str) -> Optional[WorkoutLog]:
        row = self.session.query(WorkoutLogModel).filter(
            WorkoutLogModel.id == log_id,
            WorkoutLogModel.owner_id == owner_id,
        ).first()
        return _workout_log_to_entity(row) if row else None

    def add_workout_log(self, log: WorkoutLog) -> WorkoutLog:
        row = WorkoutLogModel(
            id=log.id,
            owner_id=log.owner_id,
            exercise_id=log.exercise_id,
            sets=log.sets,
            repetitions=log.repetitions,
            weight=log.weight,
            notes=log.notes,
            date=log.date or utcnow(),
        )
        self.session.add(row)
        self.session.flush()
        self.session.refresh(row)
        return _workout_log_to_entity(row)

    def delete_workout_log(self, log_id: str) -> None:
        row = self.session.get(WorkoutLogModel, log_id)
        if row is not None:
            self.session.delete(row)
            self.session.flush()

    def list_body_stats(self, owner_id: str, limit: int) -> List[BodyStats]:
        rows = self.session.query(BodyStatsModel).filter(
            BodyStatsModel.owner_id == owner_id
        ).order_by(BodyStatsModel.date.desc()).limit(limit).all()
        return [_body_stats_to_entity(row) for row in rows]

    def get_body_stats(self, owner_id: str, stats_id: str) -> Optional[BodyStats]:
        row = self.session.query(BodyStatsModel).filter(
            BodyStatsModel.id == stats_id,
            BodyStatsModel.owner_id == owner_id,
        ).first()
        return _body_stats_to_entity(row) if row else None

    def add_body_stats(self, stats: BodyStats) -> BodyStats:
        row = BodyStatsModel(
            id=stats.id,
            owner_id=stats.owner_id,
            weight=stats.weight,
            height=stats.height,
            date=stats.date or utcnow(),
        )
        self.session.add(row)
        self.session.flush()
        return _body_stats_to_entity(row)

    def delete_body_stats(self, stats_id: str) -> None:
        row = self.session.get(BodyStatsModel, stats_id)
        if row is not None:
            self.session.delete(row)
            self.session.flush()


# ============= Unit of Work =============

class SqlAlchemyUnitOfWork(UnitOfWork):
    """요청 하나당 세션 하나"""

    def __init__(self, session_factory: Callable[[], Session] = SessionLocal):
        self.session_factory = session_factory
        self.session: Optional[Session] = None

    def __enter__(self) -> "SqlAlchemyUnitOfWork":
        self.session = self.session_factory()
        self.users = SqlAlchemyUserRepository(self.session)
        self.departments = SqlAlchemyDepartmentRepository(self.session)
        self.fitness = SqlAlchemyFitnessRepository(self.session)
        return self

    def __exit__(self, *args) -> None:
        try:
            super().__exit__(*args)
        finally:
            self.session.close()
            self.session = None

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()
