"""
사용자 ID 생성

부서와 이름으로 결정되는 순수 함수. 같은 입력은 항상 같은 ID를 만듦.

형식:
- 경영(Удирдлага):        .{이름}-{코드}
- 데이터 분석:             {코드}-{이름}
- 그 외:                   DAG-{코드}-{이름}
"""
import re
from functools import lru_cache
from typing import Tuple

from audit_portal.config import settings
from audit_portal.config.departments import (
    DEFAULT_CODE_TABLE,
    DepartmentCodeTable,
    load_department_code_table,
)

_WHITESPACE = re.compile(r"\s+")


class UserIdGenerator:
    """부서 코드표를 주입받아 사용자 ID를 생성"""

    def __init__(self, code_table: DepartmentCodeTable = DEFAULT_CODE_TABLE):
        self.code_table = code_table

    @staticmethod
    def normalize_name(name: str) -> str:
        """
        이름 정규화

        하이픈으로 나눈 각 부분의 첫 글자는 대문자, 나머지는 소문자로 바꾼 뒤
        모든 공백을 제거. 예: "бат-эрдэнэ" → "Бат-Эрдэнэ"
        """
        parts = [part[:1].upper() + part[1:].lower() for part in name.split("-")]
        return _WHITESPACE.sub("", "-".join(parts))

    def _affixes(self, department: str) -> Tuple[str, str]:
        code = self.code_table.code_for(department)
        if department == self.code_table.management_department:
            return ".", f"-{code}"
        if department == self.code_table.data_analysis_department:
            return f"{code}-", ""
        return f"{self.code_table.org_prefix}-{code}-", ""

    def get_user_id_prefix(self, department: str) -> str:
        """이름 앞에 오는 부분 (화면 미리보기용)"""
        prefix, _ = self._affixes(department)
        return prefix

    def generate_user_id(self, department: str, name: str) -> str:
        prefix, suffix = self._affixes(department)
        return f"{prefix}{self.normalize_name(name)}{suffix}"


@lru_cache
def get_user_id_generator() -> UserIdGenerator:
    """설정(DEPARTMENT_CODES_FILE)에 따른 기본 생성기"""
    return UserIdGenerator(load_department_code_table(settings.DEPARTMENT_CODES_FILE))
