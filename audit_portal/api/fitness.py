"""
피트니스 도구 API 라우트

fitness 도구 권한이 있는 사용자(또는 관리자)만 사용 가능.
"""
from typing import List

from fastapi import APIRouter, Depends, Query, status

from audit_portal.api.deps import get_current_user_id, get_uow
from audit_portal.repositories.base import UnitOfWork
from audit_portal.schemas.common import ErrorResponse
from audit_portal.schemas.fitness import (
    BodyStatsCreate,
    BodyStatsResponse,
    DashboardResponse,
    ExerciseCreate,
    ExerciseResponse,
    WorkoutLogCreate,
    WorkoutLogResponse,
)
from audit_portal.service.fitness_service import (
    BODY_STATS_LIMIT,
    WORKOUT_LOG_LIMIT,
    FitnessService,
)

router = APIRouter(
    prefix="/api/v1/fitness",
    tags=["Fitness"],
    responses={
        401: {"model": ErrorResponse, "description": "인증 오류"},
        403: {"model": ErrorResponse, "description": "fitness 권한 없음"},
    },
)


def get_fitness_service(uow: UnitOfWork = Depends(get_uow)) -> FitnessService:
    return FitnessService(uow)


@router.get("/dashboard", response_model=DashboardResponse)
def get_dashboard(
    user_id: str = Depends(get_current_user_id),
    service: FitnessService = Depends(get_fitness_service),
):
    """운동 종목, 최근 운동 기록 100건, 최근 신체 정보 30건"""
    return service.get_dashboard(user_id)


# ============= 운동 종목 =============

@router.get("/exercises", response_model=List[ExerciseResponse])
def list_exercises(
    user_id: str = Depends(get_current_user_id),
    service: FitnessService = Depends(get_fitness_service),
):
    return service.list_exercises(user_id)


@router.post("/exercises", response_model=ExerciseResponse, status_code=status.HTTP_201_CREATED)
def create_exercise(
    request: ExerciseCreate,
    user_id: str = Depends(get_current_user_id),
    service: FitnessService = Depends(get_fitness_service),
):
    return service.create_exercise(user_id, request)


@router.delete(
    "/exercises/{exercise_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse, "description": "운동 종목 없음"}},
)
def delete_exercise(
    exercise_id: str,
    user_id: str = Depends(get_current_user_id),
    service: FitnessService = Depends(get_fitness_service),
):
    """운동 종목 삭제 (연결된 운동 기록도 삭제)"""
    service.delete_exercise(user_id, exercise_id)


# ============= 운동 기록 =============

@router.get("/workout-logs", response_model=List[WorkoutLogResponse])
def list_workout_logs(
    limit: int = Query(WORKOUT_LOG_LIMIT, ge=1, le=WORKOUT_LOG_LIMIT),
    user_id: str = Depends(get_current_user_id),
    service: FitnessService = Depends(get_fitness_service),
):
    """최근 운동 기록 (날짜 역순)"""
    return service.list_workout_logs(user_id, limit)


@router.post(
    "/workout-logs",
    response_model=WorkoutLogResponse,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": ErrorResponse, "description": "운동 종목 없음"}},
)
def create_workout_log(
    request: WorkoutLogCreate,
    user_id: str = Depends(get_current_user_id),
    service: FitnessService = Depends(get_fitness_service),
):
    """운동 기록 추가 (본인 운동 종목만)"""
    return service.create_workout_log(user_id, request)


@router.delete(
    "/workout-logs/{log_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse, "description": "기록 없음"}},
)
def delete_workout_log(
    log_id: str,
    user_id: str = Depends(get_current_user_id),
    service: FitnessService = Depends(get_fitness_service),
):
    service.delete_workout_log(user_id, log_id)


# ============= 신체 정보 =============

@router.get("/body-stats", response_model=List[BodyStatsResponse])
def list_body_stats(
    limit: int = Query(BODY_STATS_LIMIT, ge=1, le=BODY_STATS_LIMIT),
    user_id: str = Depends(get_current_user_id),
    service: FitnessService = Depends(get_fitness_service),
):
    return service.list_body_stats(user_id, limit)


@router.post("/body-stats", response_model=BodyStatsResponse, status_code=status.HTTP_201_CREATED)
def create_body_stats(
    request: BodyStatsCreate,
    user_id: str = Depends(get_current_user_id),
    service: FitnessService = Depends(get_fitness_service),
):
    return service.create_body_stats(user_id, request)


@router.delete(
    "/body-stats/{stats_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse, "description": "기록 없음"}},
)
def delete_body_stats(
    stats_id: str,
    user_id: str = Depends(get_current_user_id),
    service: FitnessService = Depends(get_fitness_service),
):
    service.delete_body_stats(user_id, stats_id)
