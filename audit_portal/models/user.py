from sqlalchemy import Column, String, Text, DateTime, Boolean, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from audit_portal.db.database import Base
from audit_portal.domain.entities import PasswordState, new_id


class User(Base):
    """
    사용자 정보 테이블
    user_id는 부서 코드가 들어간 업무용 ID (예: DAG-EAH-Бат)
    """
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(150), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_state = Column(String(10), nullable=False, default=PasswordState.UNSET.value)
    password_hash = Column(String(255), nullable=True)  # bcrypt 해시
    name = Column(String(100), nullable=False, index=True)
    position = Column(String(100), nullable=True)  # 직급
    department_id = Column(String(36), ForeignKey("departments.id"), nullable=True, index=True)
    is_admin = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    allowed_tools = Column(Text, nullable=True)  # JSON 배열 문자열 (예: ["todo", "fitness"])
    last_login_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # 관계
    department = relationship("Department", back_populates="users")
    exercises = relationship("Exercise", back_populates="owner", cascade="all, delete-orphan")
    workout_logs = relationship("WorkoutLog", back_populates="owner", cascade="all, delete-orphan")
    body_stats = relationship("BodyStats", back_populates="owner", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<User(id={self.id}, user_id={self.user_id}, name={self.name})>"
