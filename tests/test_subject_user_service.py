import pytest

from src.tuition_system.tuition_system.core.enums import Role
from src.tuition_system.tuition_system.core.exceptions import AuthorizationError, NotFoundError, ValidationError


def test_subject_crud(container):
    svc = container.subject_service
    created = svc.create(current_role=Role.ADMIN, name="  Physics ", description="Mechanics")
    assert created.name == "Physics"

    updated = svc.update(current_role=Role.ADMIN, subject_id=created.subject_id, data={"description": "Optics"})
    assert updated.description == "Optics"
    assert updated.name == "Physics"

    svc.delete(current_role=Role.ADMIN, subject_id=created.subject_id)
    with pytest.raises(NotFoundError):
        svc.get(current_role=Role.ADMIN, subject_id=created.subject_id)


def test_subject_name_limits(container):
    svc = container.subject_service
    with pytest.raises(ValidationError):
        svc.create(current_role=Role.ADMIN, name="   ")
    with pytest.raises(ValidationError):
        svc.create(current_role=Role.ADMIN, name="x" * 101)
    with pytest.raises(ValidationError):
        svc.create(current_role=Role.ADMIN, name="Art", description="d" * 501)


def test_subjects_are_admin_only(container):
    with pytest.raises(AuthorizationError):
        container.subject_service.list_all(current_role=Role.TEACHER)


def test_delete_missing_subject(container):
    with pytest.raises(NotFoundError):
        container.subject_service.delete(current_role=Role.ADMIN, subject_id="nope")


def test_user_search_by_role(container):
    hits = container.user_service.search(query="teach", role="teacher")
    assert sorted(u.user_id for u in hits) == ["t1", "t2"]
    assert container.user_service.search(query="teach", role="student") == []
    with pytest.raises(ValidationError):
        container.user_service.search(query="x", role="wizard")


def test_rename_and_ban(container, world):
    svc = container.user_service
    assert svc.rename(current_role=Role.ADMIN, user_id="s1", name="  Samuel ") == "Samuel"
    assert world.directory.users["s1"].name == "Samuel"

    svc.set_banned(current_role=Role.ADMIN, user_id="s1", banned=True, reason="spam")
    assert world.directory.users["s1"].banned

    with pytest.raises(NotFoundError):
        svc.rename(current_role=Role.ADMIN, user_id="ghost", name="Boo")
    with pytest.raises(AuthorizationError):
        svc.rename(current_role=Role.TEACHER, user_id="s1", name="Boo")
