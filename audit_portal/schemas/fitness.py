"""
피트니스 도구 스키마
"""
from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from audit_portal.domain.entities import BodyStats, Exercise, WorkoutLog
from audit_portal.schemas.common import CamelModel, not_blank


class ExerciseCreate(CamelModel):
    name: str
    category: Optional[str] = None
    description: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return not_blank(v)


class ExerciseResponse(CamelModel):
    id: str
    name: str
    category: Optional[str] = None
    description: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, exercise: Exercise) -> "ExerciseResponse":
        return cls(
            id=exercise.id,
            name=exercise.name,
            category=exercise.category,
            description=exercise.description,
            created_at=exercise.created_at,
        )


class WorkoutLogCreate(CamelModel):
    exercise_id: str
    sets: Optional[int] = Field(default=None, ge=0)
    repetitions: Optional[int] = Field(default=None, ge=0)
    weight: Optional[float] = Field(default=None, ge=0)
    notes: Optional[str] = None
    date: Optional[datetime] = None

    class Config:
        json_schema_extra = {
            "example": {
                "exerciseId": "3f1c2b7e-8a4d-4a53-9b0e-2d6f1a7c9e10",
                "sets": 3,
                "repetitions": 12,
                "weight": 40.0
            }
        }


class ExerciseSummary(CamelModel):
    id: str
    name: str
    category: Optional[str] = None


class WorkoutLogResponse(CamelModel):
    id: str
    exercise_id: str
    sets: Optional[int] = None
    repetitions: Optional[int] = None
    weight: Optional[float] = None
    notes: Optional[str] = None
    date: Optional[datetime] = None
    exercise: Optional[ExerciseSummary] = None

    @classmethod
    def from_entity(cls, log: WorkoutLog) -> "WorkoutLogResponse":
        exercise = None
        if log.exercise is not None:
            exercise = ExerciseSummary(
                id=log.exercise.id,
                name=log.exercise.name,
                category=log.exercise.category,
            )
        return cls(
            id=log.id,
            exercise_id=log.exercise_id,
            sets=log.sets,
            repetitions=log.repetitions,
            weight=log.weight,
            notes=log.notes,
            date=log.date,
            exercise=exercise,
        )


class BodyStatsCreate(CamelModel):
    weight: float = Field(gt=0)
    height: float = Field(gt=0)
    date: Optional[datetime] = None


class BodyStatsResponse(CamelModel):
    id: str
    weight: float
    height: float
    date: Optional[datetime] = None

    @classmethod
    def from_entity(cls, stats: BodyStats) -> "BodyStatsResponse":
        return cls(id=stats.id, weight=stats.weight, height=stats.height, date=stats.date)


class DashboardResponse(CamelModel):
    """대시보드 (운동 종목, 최근 운동 기록, 최근 신체 정보)"""
    exercises: List[ExerciseResponse]
    workout_logs: List[WorkoutLogResponse]
    body_stats: List[BodyStatsResponse]
