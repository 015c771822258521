"""
피트니스 도구 테이블
모든 레코드는 한 사용자에게 속하며 사용자 삭제 시 함께 삭제됨
"""
from sqlalchemy import Column, Integer, String, Text, DateTime, Float, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from audit_portal.db.database import Base
from audit_portal.domain.entities import new_id


class Exercise(Base):
    """운동 종목"""
    __tablename__ = "exercises"

    id = Column(String(36), primary_key=True, default=new_id)
    owner_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    category = Column(String(100), nullable=True)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # 관계
    owner = relationship("User", back_populates="exercises")
    workout_logs = relationship("WorkoutLog", back_populates="exercise", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Exercise(id={self.id}, owner_id={self.owner_id}, name={self.name})>"


class WorkoutLog(Base):
    """운동 기록"""
    __tablename__ = "workout_logs"

    id = Column(String(36), primary_key=True, default=new_id)
    exercise_id = Column(String(36), ForeignKey("exercises.id", ondelete="CASCADE"), nullable=False, index=True)
    owner_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    sets = Column(Integer, nullable=True)
    repetitions = Column(Integer, nullable=True)
    weight = Column(Float, nullable=True)  # kg
    notes = Column(Text, nullable=True)
    date = Column(DateTime(timezone=True), server_default=func.now())

    # 관계
    owner = relationship("User", back_populates="workout_logs")
    exercise = relationship("Exercise", back_populates="workout_logs")

    def __repr__(self):
        return f"<WorkoutLog(id={self.id}, exercise_id={self.exercise_id})>"


class BodyStats(Base):
    """신체 정보 (체중 kg, 키 cm)"""
    __tablename__ = "body_stats"

    id = Column(String(36), primary_key=True, default=new_id)
    owner_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    weight = Column(Float, nullable=False)
    height = Column(Float, nullable=False)
    date = Column(DateTime(timezone=True), server_default=func.now())

    # 관계
    owner = relationship("User", back_populates="body_stats")

    def __repr__(self):
        return f"<BodyStats(id={self.id}, owner_id={self.owner_id})>"
