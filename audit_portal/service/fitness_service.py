"""
피트니스 도구 서비스

모든 작업은 먼저 fitness 도구 권한을 확인하고,
기록은 소유자 본인만 조회/수정할 수 있음.
"""
import logging
from typing import List

from audit_portal.domain.entities import BodyStats, Exercise, WorkoutLog, new_id, utcnow
from audit_portal.repositories.base import UnitOfWork
from audit_portal.schemas.fitness import (
    BodyStatsCreate,
    BodyStatsResponse,
    DashboardResponse,
    ExerciseCreate,
    ExerciseResponse,
    WorkoutLogCreate,
    WorkoutLogResponse,
)
from audit_portal.service.access_service import FITNESS, has_capability
from audit_portal.service.errors import AuthorizationError, NotFoundError

logger = logging.getLogger(__name__)

WORKOUT_LOG_LIMIT = 100
BODY_STATS_LIMIT = 30

EXERCISE_NOT_FOUND = "Дасгал олдсонгүй"
RECORD_NOT_FOUND = "Бүртгэл олдсонгүй"


class FitnessService:
    """피트니스 서비스 (owner_id: 요청한 사용자의 내부 ID)"""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    def _check_access(self, owner_id: str) -> None:
        """열린 트랜잭션 안에서 호출"""
        if not has_capability(self.uow.users, owner_id, FITNESS):
            logger.warning(f"피트니스 접근 거부: {owner_id}")
            raise AuthorizationError("Эрх хүрэхгүй байна")

    # ============= 운동 종목 =============

    def list_exercises(self, owner_id: str) -> List[ExerciseResponse]:
        with self.uow:
            self._check_access(owner_id)
            exercises = self.uow.fitness.list_exercises(owner_id)
        return [ExerciseResponse.from_entity(e) for e in exercises]

    def create_exercise(self, owner_id: str, request: ExerciseCreate) -> ExerciseResponse:
        with self.uow:
            self._check_access(owner_id)
            exercise = self.uow.fitness.add_exercise(Exercise(
                id=new_id(),
                owner_id=owner_id,
                name=request.name,
                category=request.category,
                description=request.description,
                created_at=utcnow(),
            ))
            self.uow.commit()
        return ExerciseResponse.from_entity(exercise)

    def delete_exercise(self, owner_id: str, exercise_id: str) -> None:
        """운동 종목 삭제 (연결된 운동 기록 포함)"""
        with self.uow:
            self._check_access(owner_id)
            if self.uow.fitness.get_exercise(owner_id, exercise_id) is None:
                raise NotFoundError(EXERCISE_NOT_FOUND)
            self.uow.fitness.delete_exercise(exercise_id)
            self.uow.commit()

    # ============= 운동 기록 =============

    def list_workout_logs(self, owner_id: str, limit: int = WORKOUT_LOG_LIMIT) -> List[WorkoutLogResponse]:
        with self.uow:
            self._check_access(owner_id)
            logs = self.uow.fitness.list_workout_logs(owner_id, limit)
        return [WorkoutLogResponse.from_entity(log) for log in logs]

    def create_workout_log(self, owner_id: str, request: WorkoutLogCreate) -> WorkoutLogResponse:
        """
        운동 기록 추가

        Raises:
            AuthorizationError: fitness 권한 없음
            NotFoundError: 본인 소유가 아닌 운동 종목
        """
        with self.uow:
            self._check_access(owner_id)
            if self.uow.fitness.get_exercise(owner_id, request.exercise_id) is None:
                raise NotFoundError(EXERCISE_NOT_FOUND)
            log = self.uow.fitness.add_workout_log(WorkoutLog(
                id=new_id(),
                owner_id=owner_id,
                exercise_id=request.exercise_id,
                sets=request.sets,
                repetitions=request.repetitions,
                weight=request.weight,
                notes=request.notes,
                date=request.date or utcnow(),
            ))
            self.uow.commit()
        return WorkoutLogResponse.from_entity(log)

    def delete_workout_log(self, owner_id: str, log_id: str) -> None:
        with self.uow:
            self._check_access(owner_id)
            if self.uow.fitness.get_workout_log(owner_id, log_id) is None:
                raise NotFoundError(RECORD_NOT_FOUND)
            self.uow.fitness.delete_workout_log(log_id)
            self.uow.commit()

    # ============= 신체 정보 =============

    def list_body_stats(self, owner_id: str, limit: int = BODY_STATS_LIMIT) -> List[BodyStatsResponse]:
        with self.uow:
            self._check_access(owner_id)
            stats = self.uow.fitness.list_body_stats(owner_id, limit)
        return [BodyStatsResponse.from_entity(s) for s in stats]

    def create_body_stats(self, owner_id: str, request: BodyStatsCreate) -> BodyStatsResponse:
        with self.uow:
            self._check_access(owner_id)
            stats = self.uow.fitness.add_body_stats(BodyStats(
                id=new_id(),
                owner_id=owner_id,
                weight=request.weight,
                height=request.height,
                date=request.date or utcnow(),
            ))
            self.uow.commit()
        return BodyStatsResponse.from_entity(stats)

    def delete_body_stats(self, owner_id: str, stats_id: str) -> None:
        with self.uow:
            self._check_access(owner_id)
            if self.uow.fitness.get_body_stats(owner_id, stats_id) is None:
                raise NotFoundError(RECORD_NOT_FOUND)
            self.uow.fitness.delete_body_stats(stats_id)
            self.uow.commit()

    # ============= 대시보드 =============

    def get_dashboard(self, owner_id: str) -> DashboardResponse:
        with self.uow:
            self._check_access(owner_id)
            exercises = self.uow.fitness.list_exercises(owner_id)
            logs = self.uow.fitness.list_workout_logs(owner_id, WORKOUT_LOG_LIMIT)
            stats = self.uow.fitness.list_body_stats(owner_id, BODY_STATS_LIMIT)

        return DashboardResponse(
            exercises=[ExerciseResponse.from_entity(e) for e in exercises],
            workout_logs=[WorkoutLogResponse.from_entity(log) for log in logs],
            body_stats=[BodyStatsResponse.from_entity(s) for s in stats],
        )
