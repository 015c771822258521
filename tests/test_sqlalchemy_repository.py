from datetime import datetime, timezone

import pytest

from audit_portal.domain.entities import (
    Credential,
    Exercise,
    User,
    WorkoutLog,
    new_id,
    utcnow,
)
from audit_portal.repositories.base import DuplicateRecordError, RecordInUseError
from audit_portal.repositories.sqlalchemy_repository import decode_tools, encode_tools


def make_user(department_id, user_id="DAG-EAH-Бат", email="bat@internal.local", name="Бат", **kwargs):
    return User(
        id=new_id(),
        user_id=user_id,
        email=email,
        name=name,
        department_id=department_id,
        allowed_tools=frozenset({"todo"}),
        created_at=utcnow(),
        **kwargs,
    )


def test_encode_decode_tools():
    assert encode_tools({"todo", " fitness", ""}) == '["fitness", "todo"]'
    assert decode_tools('["todo", "fitness"]') == {"todo", "fitness"}
    assert decode_tools(None) == frozenset()
    assert decode_tools("{broken") == frozenset()


def test_get_or_create_department(sql_uow):
    with sql_uow:
        first, created = sql_uow.departments.get_or_create("Хууль")
        again, created_again = sql_uow.departments.get_or_create("Хууль")
        sql_uow.commit()

    assert created is True
    assert created_again is False
    assert first.id == again.id
    assert first.employee_count == 1


def test_increment_employee_count(sql_uow):
    with sql_uow:
        department, _ = sql_uow.departments.get_or_create("Хууль")
        sql_uow.departments.increment_employee_count(department.id)
        sql_uow.departments.increment_employee_count(department.id)
        sql_uow.commit()

    with sql_uow:
        assert sql_uow.departments.get_by_name("Хууль").employee_count == 3


def test_user_round_trip_and_duplicates(sql_uow):
    with sql_uow:
        department, _ = sql_uow.departments.get_or_create("Ерөнхий аудитын хэлтэс")
        saved = sql_uow.users.add(make_user(department.id, credential=Credential.pending()))
        sql_uow.commit()

    assert saved.department_name == "Ерөнхий аудитын хэлтэс"
    assert saved.allowed_tools == {"todo"}
    assert saved.credential.is_set is False

    with sql_uow:
        with pytest.raises(DuplicateRecordError) as exc:
            sql_uow.users.add(make_user(department.id, email="other@internal.local"))
    assert exc.value.field == "user_id"

    with sql_uow:
        with pytest.raises(DuplicateRecordError) as exc:
            sql_uow.users.add(make_user(department.id, user_id="DAG-EAH-Болд"))
    assert exc.value.field == "email"


def test_complete_password_setup_only_once(sql_uow):
    with sql_uow:
        department, _ = sql_uow.departments.get_or_create("Ерөнхий аудитын хэлтэс")
        user = sql_uow.users.add(make_user(department.id, credential=Credential.pending()))
        sql_uow.commit()

    now = datetime.now(timezone.utc)
    with sql_uow:
        assert sql_uow.users.complete_password_setup(user.id, "hash-1", now) is True
        sql_uow.commit()
    with sql_uow:
        assert sql_uow.users.complete_password_setup(user.id, "hash-2", now) is False
        sql_uow.commit()

    with sql_uow:
        stored = sql_uow.users.get(user.id)
    assert stored.credential.is_set is True
    assert stored.credential.password_hash == "hash-1"
    assert stored.last_login_at is not None


def test_search_escapes_wildcards(sql_uow):
    with sql_uow:
        department, _ = sql_uow.departments.get_or_create("Ерөнхий аудитын хэлтэс")
        sql_uow.users.add(make_user(department.id))
        sql_uow.users.add(make_user(department.id, user_id="DAG-EAH-Болд", email="bold@internal.local", name="Болд"))
        sql_uow.commit()

    with sql_uow:
        assert sql_uow.users.search_active("%%", 10) == []
        assert [u.name for u in sql_uow.users.search_active("DAG-EAH", 10)] == ["Бат", "Болд"]


def test_delete_user_cascades_fitness_records(sql_uow):
    with sql_uow:
        department, _ = sql_uow.departments.get_or_create("Ерөнхий аудитын хэлтэс")
        user = sql_uow.users.add(make_user(department.id))
        exercise = sql_uow.fitness.add_exercise(Exercise(id=new_id(), owner_id=user.id, name="Гүйлт"))
        sql_uow.fitness.add_workout_log(WorkoutLog(id=new_id(), owner_id=user.id, exercise_id=exercise.id, sets=3))
        sql_uow.commit()

    with sql_uow:
        logs = sql_uow.fitness.list_workout_logs(user.id, 100)
        assert logs[0].exercise.name == "Гүйлт"
        sql_uow.users.delete(user.id)
        sql_uow.commit()

    with sql_uow:
        assert sql_uow.users.get(user.id) is None
        assert sql_uow.fitness.list_exercises(user.id) == []
        assert sql_uow.fitness.list_workout_logs(user.id, 100) == []
        assert sql_uow.users.count_by_department(department.id) == 0


def test_uncommitted_work_is_rolled_back(sql_uow):
    with sql_uow:
        sql_uow.departments.get_or_create("Хууль")

    with sql_uow:
        assert sql_uow.departments.get_by_name("Хууль") is None


def test_failed_user_insert_rolls_back_count(sql_uow):
    with sql_uow:
        department, _ = sql_uow.departments.get_or_create("Ерөнхий аудитын хэлтэс")
        sql_uow.users.add(make_user(department.id))
        sql_uow.commit()

    with sql_uow:
        existing, created = sql_uow.departments.get_or_create("Ерөнхий аудитын хэлтэс")
        assert created is False
        sql_uow.departments.increment_employee_count(existing.id)
        with pytest.raises(DuplicateRecordError):
            sql_uow.users.add(make_user(existing.id, email="new@internal.local"))

    with sql_uow:
        assert sql_uow.departments.get_by_name("Ерөнхий аудитын хэлтэс").employee_count == 1


def test_update_keeps_concurrent_employee_count_increment(sql_uow):
    with sql_uow:
        department, _ = sql_uow.departments.get_or_create("Хууль")
        sql_uow.commit()

    with sql_uow:
        read = sql_uow.departments.get(department.id)
        assert read.employee_count == 1
        # 읽은 뒤 다른 등록 요청이 인원수를 올린 상황
        sql_uow.departments.increment_employee_count(department.id)
        updated = sql_uow.departments.update(department.id, {"description": "Эрх зүйн хэлтэс"})
        sql_uow.commit()

    assert updated.description == "Эрх зүйн хэлтэс"
    assert updated.employee_count == 2
    with sql_uow:
        assert sql_uow.departments.get(department.id).employee_count == 2


def test_update_rename_conflict(sql_uow):
    with sql_uow:
        sql_uow.departments.get_or_create("Хууль")
        other, _ = sql_uow.departments.get_or_create("Санхүү")
        sql_uow.commit()

    with sql_uow:
        with pytest.raises(DuplicateRecordError):
            sql_uow.departments.update(other.id, {"name": "Хууль"})


def test_delete_department_with_users_is_refused(sql_uow):
    with sql_uow:
        department, _ = sql_uow.departments.get_or_create("Ерөнхий аудитын хэлтэс")
        user = sql_uow.users.add(make_user(department.id))
        sql_uow.commit()

    with sql_uow:
        with pytest.raises(RecordInUseError):
            sql_uow.departments.delete(department.id)

    with sql_uow:
        assert sql_uow.departments.get(department.id) is not None
        assert sql_uow.users.get(user.id).department_id == department.id
