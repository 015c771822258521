from datetime import datetime, timedelta, timezone

import pytest

from audit_portal.schemas.fitness import BodyStatsCreate, ExerciseCreate, WorkoutLogCreate
from audit_portal.service.errors import AuthorizationError, NotFoundError
from audit_portal.service.fitness_service import FitnessService
from audit_portal.service.user_service import UserService


@pytest.fixture()
def service(uow):
    return FitnessService(uow)


@pytest.fixture()
def member(seed_user):
    return seed_user(name="Бат", tools=("todo", "fitness"))


def test_user_without_fitness_is_denied_everything(service, seed_user, store):
    user = seed_user(name="Болд", tools=("todo",))
    calls = [
        lambda: service.get_dashboard(user.id),
        lambda: service.list_exercises(user.id),
        lambda: service.create_exercise(user.id, ExerciseCreate(name="Гүйлт")),
        lambda: service.delete_exercise(user.id, "x"),
        lambda: service.list_workout_logs(user.id),
        lambda: service.create_workout_log(user.id, WorkoutLogCreate(exercise_id="x")),
        lambda: service.delete_workout_log(user.id, "x"),
        lambda: service.list_body_stats(user.id),
        lambda: service.create_body_stats(user.id, BodyStatsCreate(weight=70, height=175)),
        lambda: service.delete_body_stats(user.id, "x"),
    ]

    for call in calls:
        with pytest.raises(AuthorizationError):
            call()

    assert store.data.exercises == {}
    assert store.data.body_stats == {}


def test_granting_fitness_allows_access(service, seed_user, uow):
    user = seed_user(name="Болд", tools=("todo",))
    with pytest.raises(AuthorizationError):
        service.list_exercises(user.id)

    UserService(uow).update_tools(user.id, ["todo", "fitness"])

    assert service.list_exercises(user.id) == []


def test_admin_without_explicit_tool(service, seed_user):
    admin = seed_user(name="Админ", is_admin=True, tools=())
    assert service.create_exercise(admin.id, ExerciseCreate(name="Гүйлт")).name == "Гүйлт"


def test_unknown_user_is_denied(service):
    with pytest.raises(AuthorizationError):
        service.list_exercises("missing")


def test_exercise_lifecycle(service, member):
    exercise = service.create_exercise(member.id, ExerciseCreate(name="Суулт", category="хөл"))

    assert [e.id for e in service.list_exercises(member.id)] == [exercise.id]

    service.delete_exercise(member.id, exercise.id)
    assert service.list_exercises(member.id) == []
    with pytest.raises(NotFoundError):
        service.delete_exercise(member.id, exercise.id)


def test_workout_log_requires_own_exercise(service, member, seed_user):
    other = seed_user(name="Сараа", tools=("fitness",))
    foreign = service.create_exercise(other.id, ExerciseCreate(name="Сэлэлт"))

    with pytest.raises(NotFoundError) as exc:
        service.create_workout_log(member.id, WorkoutLogCreate(exercise_id=foreign.id, sets=3))

    assert exc.value.message == "Дасгал олдсонгүй"


def test_workout_logs_newest_first_with_exercise(service, member):
    exercise = service.create_exercise(member.id, ExerciseCreate(name="Суулт"))
    now = datetime.now(timezone.utc)
    older = service.create_workout_log(member.id, WorkoutLogCreate(
        exercise_id=exercise.id, sets=3, repetitions=10, weight=60, date=now - timedelta(days=1)
    ))
    newer = service.create_workout_log(member.id, WorkoutLogCreate(
        exercise_id=exercise.id, sets=5, repetitions=5, weight=80, date=now
    ))

    logs = service.list_workout_logs(member.id)

    assert [log.id for log in logs] == [newer.id, older.id]
    assert logs[0].exercise.name == "Суулт"
    assert len(service.list_workout_logs(member.id, limit=1)) == 1


def test_records_are_owner_scoped(service, member, seed_user):
    other = seed_user(name="Сараа", tools=("fitness",))
    exercise = service.create_exercise(member.id, ExerciseCreate(name="Суулт"))
    log = service.create_workout_log(member.id, WorkoutLogCreate(exercise_id=exercise.id))
    stats = service.create_body_stats(member.id, BodyStatsCreate(weight=70.5, height=175))

    assert service.list_exercises(other.id) == []
    assert service.list_workout_logs(other.id) == []
    assert service.list_body_stats(other.id) == []

    with pytest.raises(NotFoundError):
        service.delete_exercise(other.id, exercise.id)
    with pytest.raises(NotFoundError):
        service.delete_workout_log(other.id, log.id)
    with pytest.raises(NotFoundError):
        service.delete_body_stats(other.id, stats.id)

    service.delete_workout_log(member.id, log.id)
    service.delete_body_stats(member.id, stats.id)
    assert service.list_workout_logs(member.id) == []
    assert service.list_body_stats(member.id) == []


def test_deleting_exercise_removes_its_logs(service, member):
    exercise = service.create_exercise(member.id, ExerciseCreate(name="Суулт"))
    service.create_workout_log(member.id, WorkoutLogCreate(exercise_id=exercise.id))

    service.delete_exercise(member.id, exercise.id)

    assert service.list_workout_logs(member.id) == []


def test_body_stats_validation():
    with pytest.raises(ValueError):
        BodyStatsCreate(weight=0, height=175)


def test_dashboard(service, member):
    exercise = service.create_exercise(member.id, ExerciseCreate(name="Суулт"))
    service.create_workout_log(member.id, WorkoutLogCreate(exercise_id=exercise.id, sets=3))
    service.create_body_stats(member.id, BodyStatsCreate(weight=70, height=175))

    dashboard = service.get_dashboard(member.id)

    assert [e.name for e in dashboard.exercises] == ["Суулт"]
    assert len(dashboard.workout_logs) == 1
    assert len(dashboard.body_stats) == 1
    assert set(dashboard.model_dump(by_alias=True)) == {"exercises", "workoutLogs", "bodyStats"}
