# headpress/core/permissions.py
"""
Authorization predicates shared by every endpoint.

All predicates accept the resolved caller (``None`` for anonymous requests)
and only read ``id`` and ``role`` from it.
"""
from typing import Any, Optional

from headpress.models.user import UserRole

ADMIN = UserRole.administrator.value
EDITOR = UserRole.editor.value
AUTHOR = UserRole.author.value
CONTRIBUTOR = UserRole.contributor.value

EDITORIAL_ROLES = frozenset({ADMIN, EDITOR})
PUBLISHING_ROLES = frozenset({ADMIN, EDITOR, AUTHOR})
OWNER_ROLES = frozenset({AUTHOR, CONTRIBUTOR})
UPLOAD_ROLES = frozenset({ADMIN, EDITOR, AUTHOR})


def _role(user: Optional[Any]) -> Optional[str]:
    if user is None:
        return None
    role = user.role
    return role.value if isinstance(role, UserRole) else role


def is_administrator(user: Optional[Any]) -> bool:
    return _role(user) == ADMIN


def is_editorial(user: Optional[Any]) -> bool:
    """Administrator or editor."""
    return _role(user) in EDITORIAL_ROLES


def _owns(user: Any, owner_id: Optional[int]) -> bool:
    return owner_id is not None and user.id == owner_id


def can_edit(user: Optional[Any], author_id: Optional[int]) -> bool:
    """
    Administrators and editors may edit anything; authors and contributors
    only their own content; everyone else nothing.
    """
    role = _role(user)
    if role in EDITORIAL_ROLES:
        return True
    if role in OWNER_ROLES:
        return _owns(user, author_id)
    return False


def can_delete(user: Optional[Any], author_id: Optional[int]) -> bool:
    return can_edit(user, author_id)


def can_publish(user: Optional[Any]) -> bool:
    """Contributors and subscribers can never publish, not even their own content."""
    return _role(user) in PUBLISHING_ROLES


def can_view_private_fields(viewer: Optional[Any], subject_id: Optional[int] = None) -> bool:
    """
    Emails, IPs and other personal fields are visible to administrators and
    editors, and to a user looking at their own record.
    """
    if viewer is None:
        return False
    if is_editorial(viewer):
        return True
    return _owns(viewer, subject_id)


def can_manage_terms(user: Optional[Any]) -> bool:
    """Categories, tags, links and link categories."""
    return is_editorial(user)


def can_upload(user: Optional[Any]) -> bool:
    return _role(user) in UPLOAD_ROLES


def can_edit_media(user: Optional[Any], author_id: Optional[int]) -> bool:
    if user is None:
        return False
    return is_editorial(user) or _owns(user, author_id)


def can_edit_moment(user: Optional[Any], author_id: Optional[int]) -> bool:
    if user is None:
        return False
    return is_administrator(user) or _owns(user, author_id)


def can_moderate_comments(user: Optional[Any]) -> bool:
    return is_editorial(user)


def can_edit_comment(user: Optional[Any], comment_user_id: Optional[int]) -> bool:
    if user is None:
        return False
    return can_moderate_comments(user) or _owns(user, comment_user_id)


def can_edit_user(user: Optional[Any], subject_id: int) -> bool:
    if user is None:
        return False
    return is_administrator(user) or _owns(user, subject_id)


def can_create_tags(user: Optional[Any]) -> bool:
    """Authors may add tags while writing; everything else about terms is editorial."""
    return _role(user) in PUBLISHING_ROLES
