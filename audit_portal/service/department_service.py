"""
부서 관리 서비스
"""
import logging
from typing import List

from audit_portal.domain.entities import Department, new_id, utcnow
from audit_portal.repositories.base import DuplicateRecordError, RecordInUseError, UnitOfWork
from audit_portal.schemas.departments import (
    DepartmentCreate,
    DepartmentResponse,
    DepartmentUpdate,
    RecountItem,
    RecountResponse,
)
from audit_portal.service.errors import ConflictError, NotFoundError

logger = logging.getLogger(__name__)

DUPLICATE_NAME = "Ийм нэртэй хэлтэс аль хэдийн байна"
NOT_FOUND = "Хэлтэс олдсонгүй"
IN_USE = "Энэ хэлтэст ажилтнууд байна. Эхлээд тэднийг шилжүүлнэ үү"


class DepartmentService:
    """부서 서비스"""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    def create(self, request: DepartmentCreate) -> DepartmentResponse:
        """
        부서 생성

        Raises:
            ConflictError: 같은 이름의 부서가 있는 경우
        """
        with self.uow:
            if self.uow.departments.get_by_name(request.name):
                raise ConflictError(DUPLICATE_NAME)
            try:
                department = self.uow.departments.add(Department(
                    id=new_id(),
                    name=request.name,
                    description=request.description,
                    manager=request.manager,
                    employee_count=request.employee_count,
                    created_at=utcnow(),
                ))
            except DuplicateRecordError:
                raise ConflictError(DUPLICATE_NAME)
            self.uow.commit()

        logger.info(f"부서 생성: {department.name}")
        return DepartmentResponse.from_entity(department)

    def find_all(self) -> List[DepartmentResponse]:
        """전체 부서 (최신순, 소속 사용자 포함)"""
        with self.uow:
            return [
                DepartmentResponse.from_entity(
                    department, self.uow.users.list_by_department(department.id)
                )
                for department in self.uow.departments.list_all()
            ]

    def find_one(self, id: str) -> DepartmentResponse:
        with self.uow:
            department = self.uow.departments.get(id)
            if department is None:
                raise NotFoundError(NOT_FOUND)
            members = self.uow.users.list_by_department(department.id)

        return DepartmentResponse.from_entity(department, members)

    def find_by_name(self, name: str) -> DepartmentResponse:
        """이름으로 조회 (관리자 계정은 구성원 목록에서 제외)"""
        with self.uow:
            department = self.uow.departments.get_by_name(name)
            if department is None:
                raise NotFoundError(NOT_FOUND)
            members = self.uow.users.list_by_department(department.id, include_admins=False)

        return DepartmentResponse.from_entity(department, members)

    def update(self, id: str, request: DepartmentUpdate) -> DepartmentResponse:
        """
        부서 수정 (전달된 필드만)

        Raises:
            NotFoundError: 부서가 없는 경우
            ConflictError: 변경할 이름을 다른 부서가 사용 중인 경우
        """
        changes = request.model_dump(exclude_unset=True, exclude_none=True)

        with self.uow:
            department = self.uow.departments.get(id)
            if department is None:
                raise NotFoundError(NOT_FOUND)

            new_name = changes.get("name")
            if new_name and new_name != department.name:
                other = self.uow.departments.get_by_name(new_name)
                if other is not None and other.id != id:
                    raise ConflictError(DUPLICATE_NAME)

            try:
                department = self.uow.departments.update(id, changes)
            except DuplicateRecordError:
                raise ConflictError(DUPLICATE_NAME)
            members = self.uow.users.list_by_department(department.id)
            self.uow.commit()

        logger.info(f"부서 수정: {department.name}")
        return DepartmentResponse.from_entity(department, members)

    def remove(self, id: str) -> str:
        """
        부서 삭제 (소속 사용자가 없을 때만)

        Raises:
            NotFoundError: 부서가 없는 경우
            ConflictError: 소속 사용자가 있는 경우
        """
        with self.uow:
            department = self.uow.departments.get(id)
            if department is None:
                raise NotFoundError(NOT_FOUND)
            if self.uow.users.count_by_department(id) > 0:
                logger.warning(f"부서 삭제 거부 (소속 사용자 있음): {department.name}")
                raise ConflictError(IN_USE)
            try:
                self.uow.departments.delete(id)
            except RecordInUseError:
                # 확인 이후 다른 요청이 사용자를 추가한 경우
                logger.warning(f"부서 삭제 거부 (외래키): {department.name}")
                raise ConflictError(IN_USE)
            self.uow.commit()

        logger.info(f"부서 삭제: {department.name}")
        return "Хэлтсийг амжилттай устгалаа"

    def recount_employees(self) -> RecountResponse:
        """모든 부서의 employee_count를 실제 소속 사용자 수로 다시 계산"""
        updated = []
        with self.uow:
            for department in self.uow.departments.list_all():
                actual = self.uow.users.count_by_department(department.id)
                if actual != department.employee_count:
                    self.uow.departments.set_employee_count(department.id, actual)
                    updated.append(RecountItem(
                        id=department.id,
                        name=department.name,
                        previous_count=department.employee_count,
                        employee_count=actual,
                    ))
            self.uow.commit()

        logger.info(f"부서 인원수 재계산: {len(updated)}개 부서 변경")
        return RecountResponse(updated=updated)
