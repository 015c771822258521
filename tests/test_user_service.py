import pytest

from audit_portal.schemas.departments import DepartmentCreate
from audit_portal.schemas.fitness import ExerciseCreate
from audit_portal.schemas.users import UpdateUserRequest
from audit_portal.service.department_service import DepartmentService
from audit_portal.service.errors import NotFoundError
from audit_portal.service.fitness_service import FitnessService
from audit_portal.service.user_service import UserService


@pytest.fixture()
def service(uow):
    return UserService(uow)


def test_find_all_and_one(service, seed_user):
    seed_user(name="Бат")
    user = seed_user(name="Сараа", password=None)

    assert {u.name for u in service.find_all()} == {"Бат", "Сараа"}

    detail = service.find_one(user.id)
    assert detail.has_password is False
    assert detail.created_at is not None
    assert detail.department == "Ерөнхий аудитын хэлтэс"


def test_find_unknown(service):
    with pytest.raises(NotFoundError):
        service.find_one("missing")


def test_partial_update(service, seed_user, uow):
    user = seed_user(name="Бат")
    target = DepartmentService(uow).create(DepartmentCreate(name="Хууль"))

    updated = service.update(user.id, UpdateUserRequest(
        position="Ахлах аудитор",
        department_id=target.id,
        is_admin=True,
        allowed_tools=["fitness", " ", "todo"],
    ))

    assert updated.name == "Бат"
    assert updated.position == "Ахлах аудитор"
    assert updated.department == "Хууль"
    assert updated.is_admin is True
    assert updated.allowed_tools == ["fitness", "todo"]
    assert updated.has_password is True


def test_update_unknown_department(service, seed_user):
    user = seed_user(name="Бат")

    with pytest.raises(NotFoundError):
        service.update(user.id, UpdateUserRequest(department_id="missing"))


def test_update_status_and_tools(service, seed_user):
    user = seed_user(name="Бат", tools=("todo",))

    assert service.update_status(user.id, False).is_active is False
    assert service.update_tools(user.id, ["fitness"]).allowed_tools == ["fitness"]
    with pytest.raises(NotFoundError):
        service.update_status("missing", True)


def test_delete_removes_owned_tool_data(service, seed_user, uow, store):
    user = seed_user(name="Бат", tools=("fitness",))
    other = seed_user(name="Болд", tools=("fitness",))
    fitness = FitnessService(uow)
    fitness.create_exercise(user.id, ExerciseCreate(name="Гүйлт"))
    fitness.create_exercise(other.id, ExerciseCreate(name="Сэлэлт"))

    assert service.remove(user.id) == "Хэрэглэгчийг амжилттай устгалаа"

    assert user.id not in store.data.users
    assert [e.name for e in store.data.exercises.values()] == ["Сэлэлт"]
    with pytest.raises(NotFoundError):
        service.remove(user.id)
