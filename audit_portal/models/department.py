from sqlalchemy import Column, Integer, String, Text, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from audit_portal.db.database import Base
from audit_portal.domain.entities import new_id


class Department(Base):
    """
    부서 테이블
    employee_count는 사용자 생성 시 증가하는 비정규화 값
    """
    __tablename__ = "departments"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(255), unique=True, nullable=False, index=True)
    description = Column(Text, nullable=True)
    manager = Column(String(255), nullable=True)
    employee_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # 관계 (사용자가 있으면 DB 외래키가 부서 삭제를 막음)
    users = relationship("User", back_populates="department", passive_deletes="all")

    def __repr__(self):
        return f"<Department(id={self.id}, name={self.name}, employee_count={self.employee_count})>"
