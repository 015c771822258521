import json
from types import MappingProxyType

import pytest

from audit_portal.config.departments import (
    DEFAULT_DEPARTMENT_CODES,
    DepartmentCodeTable,
    load_department_code_table,
)
from audit_portal.service.user_id_service import UserIdGenerator


@pytest.fixture()
def generator():
    return UserIdGenerator()


def test_management_department_wraps_name(generator):
    assert generator.generate_user_id("Удирдлага", "бат-эрдэнэ") == ".Бат-Эрдэнэ-DAG"


def test_data_analysis_department_has_no_org_prefix(generator):
    assert generator.generate_user_id("Дата анализын алба", "сараа") == "DAA-Сараа"


def test_regular_department_uses_org_prefix(generator):
    assert generator.generate_user_id("Ерөнхий аудитын хэлтэс", "болд") == "DAG-EAH-Болд"
    assert generator.generate_user_id("Мэдээллийн технологийн аудитын хэлтэс", "ТЭМҮЖИН") == "DAG-MTAH-Тэмүжин"


def test_unknown_department_falls_back(generator):
    assert generator.generate_user_id("Шинэ хэлтэс", "сараа") == "DAG-USR-Сараа"


def test_name_normalization_removes_whitespace(generator):
    assert generator.normalize_name("бат эрдэнэ") == "Батэрдэнэ"
    assert generator.normalize_name("мөнх очир-бат") == "Мөнхочир-Бат"


def test_generation_is_deterministic(generator):
    first = generator.generate_user_id("Ерөнхий аудитын хэлтэс", "бат-эрдэнэ")
    second = UserIdGenerator().generate_user_id("Ерөнхий аудитын хэлтэс", "бат-эрдэнэ")
    assert first == second


@pytest.mark.parametrize("department", list(DEFAULT_DEPARTMENT_CODES) + ["Шинэ хэлтэс"])
def test_generated_id_starts_with_prefix(generator, department):
    prefix = generator.get_user_id_prefix(department)
    assert generator.generate_user_id(department, "сараа").startswith(prefix)


def test_prefix_values(generator):
    assert generator.get_user_id_prefix("Удирдлага") == "."
    assert generator.get_user_id_prefix("Дата анализын алба") == "DAA-"
    assert generator.get_user_id_prefix("Ерөнхий аудитын хэлтэс") == "DAG-EAH-"


def test_injected_code_table():
    table = DepartmentCodeTable(codes=MappingProxyType({"Санхүү": "SAN"}), org_prefix="ORG", fallback_code="GEN")
    generator = UserIdGenerator(table)
    assert generator.generate_user_id("Санхүү", "дорж") == "ORG-SAN-Дорж"
    assert generator.generate_user_id("Ерөнхий аудитын хэлтэс", "дорж") == "ORG-GEN-Дорж"


def test_load_code_table_from_file(tmp_path):
    path = tmp_path / "codes.json"
    path.write_text(json.dumps({
        "version": "2",
        "codes": {"Удирдлага": "MGT", "Хууль": "HUL"},
    }, ensure_ascii=False), encoding="utf-8")

    table = load_department_code_table(str(path))

    assert table.version == "2"
    assert table.code_for("Хууль") == "HUL"
    assert UserIdGenerator(table).generate_user_id("Удирдлага", "бат") == ".Бат-MGT"


def test_load_code_table_without_codes(tmp_path):
    path = tmp_path / "codes.json"
    path.write_text(json.dumps({"version": "3"}), encoding="utf-8")

    with pytest.raises(ValueError):
        load_department_code_table(str(path))


def test_load_code_table_default():
    assert load_department_code_table(None).code_for("Удирдлага") == "DAG"
