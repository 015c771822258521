import os

import pytest

# 앱 모듈 import 전에 설정 (settings는 import 시점에 환경변수를 읽음)
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ.pop("INITIAL_ADMIN_PASSWORD", None)
os.environ.pop("DEPARTMENT_CODES_FILE", None)

from fastapi.testclient import TestClient  # noqa: E402

from audit_portal.config.security import hash_password  # noqa: E402
from audit_portal.db.database import Base, SessionLocal, engine  # noqa: E402
from audit_portal.domain.entities import Credential, User, new_id, normalize_tools, utcnow  # noqa: E402
from audit_portal.models import department, fitness, user  # noqa: E402,F401
from audit_portal.repositories.sqlalchemy_repository import SqlAlchemyUnitOfWork  # noqa: E402
from audit_portal.service.auth_service import AuthService  # noqa: E402
from audit_portal.service.user_id_service import UserIdGenerator  # noqa: E402
from fakes import FakeStore, FakeUnitOfWork  # noqa: E402

STRONG_PASSWORD = "Secret1!"


@pytest.fixture()
def store():
    return FakeStore()


@pytest.fixture()
def uow(store):
    return FakeUnitOfWork(store)


@pytest.fixture()
def auth_service(uow):
    return AuthService(uow, UserIdGenerator())


@pytest.fixture()
def seed_user(uow):
    """서비스를 거치지 않고 사용자 추가 (부서는 없으면 생성)"""

    def _seed(
        name="Бат",
        department="Ерөнхий аудитын хэлтэс",
        password=STRONG_PASSWORD,
        is_admin=False,
        is_active=True,
        tools=("todo",),
        user_id=None,
    ) -> User:
        credential = Credential.with_hash(hash_password(password)) if password else Credential.pending()
        with uow:
            dept, created = uow.departments.get_or_create(department)
            if not created:
                uow.departments.increment_employee_count(dept.id)
            seeded = uow.users.add(User(
                id=new_id(),
                user_id=user_id or UserIdGenerator().generate_user_id(department, name),
                email=f"{new_id()}@internal.local",
                name=name,
                position="Аудитор",
                department_id=dept.id,
                credential=credential,
                is_admin=is_admin,
                is_active=is_active,
                allowed_tools=normalize_tools(tools),
                created_at=utcnow(),
            ))
            uow.commit()
        return seeded

    return _seed


@pytest.fixture()
def db_tables():
    """메모리 SQLite에 테이블 생성 / 정리"""
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def sql_uow(db_tables):
    return SqlAlchemyUnitOfWork(SessionLocal)


@pytest.fixture()
def client(db_tables):
    from audit_portal.main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def admin_headers(client):
    """최초 관리자 계정 생성 후 관리자 로그인 토큰 헤더"""
    AuthService(SqlAlchemyUnitOfWork(SessionLocal), UserIdGenerator()).create_initial_admin(
        user_id="ADMIN001",
        name="Систем Админ",
        email="admin@internal.local",
        password=STRONG_PASSWORD,
    )
    response = client.post(
        "/api/v1/auth/admin-login",
        json={"username": "ADMIN001", "password": STRONG_PASSWORD},
    )
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['accessToken']}"}
