import logging

import pytest

from audit_portal.models.user import User as UserModel
from audit_portal.service.access_service import FITNESS, TODO, AccessService
from audit_portal.service.errors import AuthorizationError
from audit_portal.service.user_service import UserService


def test_regular_user_capabilities(uow, seed_user):
    user = seed_user(tools=("todo",))
    access = AccessService(uow)

    assert access.has_capability(user.id, TODO) is True
    assert access.has_capability(user.id, FITNESS) is False


def test_admin_has_every_capability(uow, seed_user):
    admin = seed_user(name="Админ", is_admin=True, tools=())
    access = AccessService(uow)

    assert access.has_capability(admin.id, FITNESS) is True
    assert access.has_capability(admin.id, "anything") is True


def test_unknown_user_has_no_capability(uow):
    assert AccessService(uow).has_capability("missing", TODO) is False


def test_capability_change_applies_immediately(uow, seed_user):
    user = seed_user(tools=("todo",))
    access = AccessService(uow)
    assert access.has_capability(user.id, FITNESS) is False

    UserService(uow).update_tools(user.id, ["todo", "fitness"])

    assert access.has_capability(user.id, FITNESS) is True


def test_require_capability(uow, seed_user):
    user = seed_user(tools=("todo",))

    with pytest.raises(AuthorizationError):
        AccessService(uow).require_capability(user.id, FITNESS)


def test_require_admin(uow, seed_user):
    admin = seed_user(name="Админ", is_admin=True)
    inactive_admin = seed_user(name="Хуучин", is_admin=True, is_active=False)
    user = seed_user(name="Бат")
    access = AccessService(uow)

    access.require_admin(admin.id)
    for id in (inactive_admin.id, user.id, "missing"):
        with pytest.raises(AuthorizationError):
            access.require_admin(id)


@pytest.mark.parametrize("raw", ["not json", '{"tools": "fitness"}', "[1, 2]"])
def test_malformed_stored_tools_deny_access(sql_uow, raw, caplog):
    with sql_uow:
        sql_uow.session.add(UserModel(
            id="u-1",
            user_id="DAG-USR-Бат",
            email="bat@internal.local",
            name="Бат",
            allowed_tools=raw,
        ))
        sql_uow.commit()

    with caplog.at_level(logging.WARNING):
        assert AccessService(sql_uow).has_capability("u-1", FITNESS) is False

    assert "allowed_tools" in caplog.text


def test_stored_tools_are_read_from_database(sql_uow):
    with sql_uow:
        sql_uow.session.add(UserModel(
            id="u-2",
            user_id="DAG-USR-Сараа",
            email="saraa@internal.local",
            name="Сараа",
            allowed_tools='["todo", " fitness "]',
        ))
        sql_uow.commit()

    assert AccessService(sql_uow).has_capability("u-2", FITNESS) is True
