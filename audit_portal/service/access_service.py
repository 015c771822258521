"""
권한 확인

도구 권한(capability)은 매 호출마다 저장소에서 새로 읽음.
권한 변경은 재로그인 없이 다음 요청부터 적용됨.
"""
import logging

from audit_portal.repositories.base import UnitOfWork, UserRepository
from audit_portal.service.errors import AuthorizationError

logger = logging.getLogger(__name__)

FITNESS = "fitness"
TODO = "todo"


def has_capability(users: UserRepository, id: str, capability: str) -> bool:
    """
    사용자가 도구를 사용할 수 있는지 확인

    - 존재하지 않는 사용자: False
    - 관리자: 모든 도구 허용
    - 그 외: allowed_tools에 포함된 경우만 허용
    """
    user = users.get(id)
    if user is None:
        return False
    if user.is_admin:
        return True
    return user.has_tool(capability)


class AccessService:
    """권한 서비스"""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    def has_capability(self, id: str, capability: str) -> bool:
        with self.uow:
            return has_capability(self.uow.users, id, capability)

    def require_capability(self, id: str, capability: str) -> None:
        """
        Raises:
            AuthorizationError: 도구 권한이 없는 경우
        """
        if not self.has_capability(id, capability):
            logger.warning(f"도구 접근 거부 ({capability}): {id}")
            raise AuthorizationError("Эрх хүрэхгүй байна")

    def require_admin(self, id: str) -> None:
        """
        활성 관리자만 통과

        Raises:
            AuthorizationError: 사용자 없음, 비활성, 관리자 아님
        """
        with self.uow:
            user = self.uow.users.get(id)

        if user is None or not user.is_active or not user.is_admin:
            logger.warning(f"관리자 권한 거부: {id}")
            raise AuthorizationError("Админ эрх шаардлагатай")
