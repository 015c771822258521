"""
사용자 관리 서비스 (관리자용)
"""
import logging
from dataclasses import replace
from typing import List

from audit_portal.domain.entities import normalize_tools
from audit_portal.repositories.base import UnitOfWork
from audit_portal.schemas.users import UpdateUserRequest, UserDetailResponse
from audit_portal.service.errors import NotFoundError

logger = logging.getLogger(__name__)

NOT_FOUND = "Хэрэглэгч олдсонгүй"


class UserService:
    """사용자 관리 서비스"""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    def find_all(self) -> List[UserDetailResponse]:
        with self.uow:
            return [UserDetailResponse.from_entity(u) for u in self.uow.users.list_all()]

    def find_one(self, id: str) -> UserDetailResponse:
        with self.uow:
            user = self.uow.users.get(id)

        if user is None:
            raise NotFoundError(NOT_FOUND)
        return UserDetailResponse.from_entity(user)

    def update(self, id: str, request: UpdateUserRequest) -> UserDetailResponse:
        """
        사용자 부분 수정

        Raises:
            NotFoundError: 사용자 또는 지정한 부서가 없는 경우
        """
        changes = request.model_dump(exclude_unset=True, exclude_none=True)

        with self.uow:
            user = self.uow.users.get(id)
            if user is None:
                raise NotFoundError(NOT_FOUND)

            if "allowed_tools" in changes:
                changes["allowed_tools"] = normalize_tools(changes["allowed_tools"])

            department_id = changes.get("department_id")
            if department_id is not None and department_id != user.department_id:
                department = self.uow.departments.get(department_id)
                if department is None:
                    raise NotFoundError("Хэлтэс олдсонгүй")
                changes["department_name"] = department.name

            user = self.uow.users.update(replace(user, **changes))
            self.uow.commit()

        logger.info(f"사용자 수정: {user.user_id} ({', '.join(sorted(changes))})")
        return UserDetailResponse.from_entity(user)

    def update_status(self, id: str, is_active: bool) -> UserDetailResponse:
        """계정 활성/비활성"""
        with self.uow:
            user = self.uow.users.get(id)
            if user is None:
                raise NotFoundError(NOT_FOUND)
            user = self.uow.users.update(replace(user, is_active=is_active))
            self.uow.commit()

        logger.info(f"사용자 상태 변경: {user.user_id} → {'active' if is_active else 'inactive'}")
        return UserDetailResponse.from_entity(user)

    def update_tools(self, id: str, allowed_tools: List[str]) -> UserDetailResponse:
        """도구 권한 전체 교체 (다음 요청부터 적용)"""
        with self.uow:
            user = self.uow.users.get(id)
            if user is None:
                raise NotFoundError(NOT_FOUND)
            user = self.uow.users.update(replace(user, allowed_tools=normalize_tools(allowed_tools)))
            self.uow.commit()

        logger.info(f"도구 권한 변경: {user.user_id} → {sorted(user.allowed_tools)}")
        return UserDetailResponse.from_entity(user)

    def remove(self, id: str) -> str:
        """사용자 삭제 (소유한 도구 데이터 포함)"""
        with self.uow:
            user = self.uow.users.get(id)
            if user is None:
                raise NotFoundError(NOT_FOUND)
            self.uow.users.delete(id)
            self.uow.commit()

        logger.info(f"사용자 삭제: {user.user_id}")
        return "Хэрэглэгчийг амжилттай устгалаа"
