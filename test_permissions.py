# test_permissions.py
from types import SimpleNamespace

import pytest

from headpress.core import permissions

ROLES = ["administrator", "editor", "author", "contributor", "subscriber"]


def _user(role, user_id=10):
    return SimpleNamespace(id=user_id, role=role)


@pytest.mark.parametrize("role, own, other", [
    ("administrator", True, True),
    ("editor", True, True),
    ("author", True, False),
    ("contributor", True, False),
    ("subscriber", False, False),
])
def test_can_edit_matrix(role, own, other):
    user = _user(role)
    assert permissions.can_edit(user, author_id=10) is own
    assert permissions.can_edit(user, author_id=99) is other
    assert permissions.can_delete(user, author_id=10) is own


@pytest.mark.parametrize("role, allowed", [
    ("administrator", True),
    ("editor", True),
    ("author", True),
    ("contributor", False),
    ("subscriber", False),
])
def test_can_publish(role, allowed):
    assert permissions.can_publish(_user(role)) is allowed


def test_anonymous_is_denied_everything():
    assert not permissions.can_edit(None, 1)
    assert not permissions.can_publish(None)
    assert not permissions.can_view_private_fields(None, 1)
    assert not permissions.can_manage_terms(None)
    assert not permissions.can_upload(None)
    assert not permissions.can_edit_comment(None, None)
    assert not permissions.can_edit_moment(None, 1)


@pytest.mark.parametrize("role", ROLES)
def test_private_fields_for_self(role):
    assert permissions.can_view_private_fields(_user(role), subject_id=10)


@pytest.mark.parametrize("role, allowed", [
    ("administrator", True),
    ("editor", True),
    ("author", False),
    ("contributor", False),
    ("subscriber", False),
])
def test_private_fields_of_others(role, allowed):
    assert permissions.can_view_private_fields(_user(role), subject_id=99) is allowed


def test_guest_comment_is_not_owned_by_anyone():
    # a guest comment has no user_id
    assert not permissions.can_edit_comment(_user("subscriber"), None)
    assert permissions.can_edit_comment(_user("editor"), None)


def test_term_and_upload_roles():
    assert [permissions.can_manage_terms(_user(r)) for r in ROLES] == [True, True, False, False, False]
    assert [permissions.can_create_tags(_user(r)) for r in ROLES] == [True, True, True, False, False]
    assert [permissions.can_upload(_user(r)) for r in ROLES] == [True, True, True, False, False]


def test_moment_and_user_ownership():
    assert permissions.can_edit_moment(_user("administrator"), 99)
    assert not permissions.can_edit_moment(_user("editor"), 99)
    assert permissions.can_edit_moment(_user("subscriber"), 10)
    assert permissions.can_edit_user(_user("subscriber"), 10)
    assert not permissions.can_edit_user(_user("editor"), 99)
