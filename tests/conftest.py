from __future__ import annotations

import pytest

from src.tuition_system.tuition_system.core.enums import Role
from src.tuition_system.tuition_system.main import create_app

from fakes import World


@pytest.fixture
def world():
    w = World()
    d = w.directory
    d.add_user("a1", "Alice Admin", Role.ADMIN)
    d.add_user("t1", "Tom Teacher", Role.TEACHER)
    d.add_user("t2", "Tina Teacher", Role.TEACHER)
    d.add_user("s1", "Sam Student", Role.STUDENT)
    d.add_user("s2", "Sue Student", Role.STUDENT)
    d.add_subject("math", "Mathematics")
    d.add_subject("eng", "English")
    return w


@pytest.fixture
def container(world):
    return world.container()


@pytest.fixture
def app(container, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    return create_app(container)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def login(client):
    def _login(user_id: str, role: Role):
        with client.session_transaction() as sess:
            sess["user_id"] = user_id
            sess["role"] = role.value
        return client

    return _login
