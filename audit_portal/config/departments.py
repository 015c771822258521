"""
부서 코드표

사용자 ID 생성에 쓰이는 부서명 → 부서 코드 매핑.
기존 사용자 ID와의 호환을 위해 기본 코드표는 그대로 유지해야 함.
"""
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

MANAGEMENT_DEPARTMENT = "Удирдлага"
DATA_ANALYSIS_DEPARTMENT = "Дата анализын алба"

DEFAULT_DEPARTMENT_CODES = MappingProxyType({
    "Удирдлага": "DAG",
    "Дата анализын алба": "DAA",
    "Ерөнхий аудитын хэлтэс": "EAH",
    "Зайны аудит чанарын баталгаажуулалтын хэлтэс": "ZAGCHBH",
    "Мэдээллийн технологийн аудитын хэлтэс": "MTAH",
})


@dataclass(frozen=True)
class DepartmentCodeTable:
    """버전이 있는 부서 코드표"""
    codes: Mapping[str, str] = field(default_factory=lambda: DEFAULT_DEPARTMENT_CODES)
    version: str = "1"
    fallback_code: str = "USR"
    org_prefix: str = "DAG"
    management_department: str = MANAGEMENT_DEPARTMENT
    data_analysis_department: str = DATA_ANALYSIS_DEPARTMENT

    def code_for(self, department: str) -> str:
        return self.codes.get(department) or self.fallback_code


DEFAULT_CODE_TABLE = DepartmentCodeTable()


def load_department_code_table(path: Optional[str] = None) -> DepartmentCodeTable:
    """
    JSON 파일에서 부서 코드표 로드

    파일 형식:
        {
            "version": "2",
            "codes": {"Удирдлага": "DAG", ...},
            "fallbackCode": "USR",
            "orgPrefix": "DAG",
            "managementDepartment": "Удирдлага",
            "dataAnalysisDepartment": "Дата анализын алба"
        }

    Args:
        path: JSON 파일 경로 (None이면 기본 코드표)

    Returns:
        DepartmentCodeTable
    """
    if not path:
        return DEFAULT_CODE_TABLE

    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    codes = raw.get("codes")
    if not isinstance(codes, dict) or not codes:
        raise ValueError(f"부서 코드표에 codes 항목이 없습니다: {path}")

    table = DepartmentCodeTable(
        codes=MappingProxyType({str(k): str(v) for k, v in codes.items()}),
        version=str(raw.get("version", "1")),
        fallback_code=raw.get("fallbackCode", DEFAULT_CODE_TABLE.fallback_code),
        org_prefix=raw.get("orgPrefix", DEFAULT_CODE_TABLE.org_prefix),
        management_department=raw.get("managementDepartment", MANAGEMENT_DEPARTMENT),
        data_analysis_department=raw.get("dataAnalysisDepartment", DATA_ANALYSIS_DEPARTMENT),
    )
    logger.info(f"부서 코드표 로드: {path} (version={table.version}, {len(table.codes)}개)")
    return table
