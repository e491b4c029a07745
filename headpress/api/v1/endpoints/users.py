# headpress/api/v1/endpoints/users.py
import logging
from typing import Dict, Literal, Optional

from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy.orm import Session

from headpress.api.v1.common import base_url, commit_guard, set_pagination_headers, split_csv
from headpress.core import permissions, security
from headpress.core.deps import (
    get_current_user,
    get_current_user_or_none,
    get_object_store,
    get_site_settings,
    require_role,
)
from headpress.core.errors import Forbidden, InvalidParameter, NotFound, Unauthenticated
from headpress.crud import crud_user
from headpress.crud.crud_user import UserQuery
from headpress.db.session import get_db
from headpress.models.user import User, UserRole
from headpress.schemas.token import AuthResponse
from headpress.schemas.user import AdminUserCreate, UserCreate, UserLogin, UserUpdate
from headpress.services.formatter import format_user
from headpress.services.storage import ObjectStore, StorageError

logger = logging.getLogger(__name__)

router = APIRouter()


def _auth_response(user: User, site_settings: Dict[str, str]) -> dict:
    return AuthResponse(
        token=security.create_access_token(user),
        user=format_user(user, base_url(site_settings), is_admin=True),
        user_email=user.email,
        user_nicename=user.username,
        user_display_name=user.display_name or user.username,
    ).model_dump()


def _ensure_unique(db: Session, username: Optional[str], email: Optional[str]) -> None:
    if username and crud_user.get_user_by_username(db, username):
        raise InvalidParameter("Sorry, that username already exists!", code="existing_user_login")
    if email and crud_user.get_user_by_email(db, email):
        raise InvalidParameter("Sorry, that email address is already used!", code="existing_user_email")


def _get_user_or_404(db: Session, user_id: int) -> User:
    user = crud_user.get_user(db, user_id=user_id)
    if user is None:
        raise NotFound("Invalid user ID.", code="rest_user_invalid_id")
    return user


@router.post("/login", summary="Log in with username or email")
def login(
    credentials: UserLogin,
    db: Session = Depends(get_db),
    site_settings: Dict[str, str] = Depends(get_site_settings),
):
    user = crud_user.get_user_by_login(db, credentials.username)
    if user is None or not user.is_active:
        raise Unauthenticated("Invalid username or password.", code="invalid_username")
    user = crud_user.authenticate_user(db, credentials.username, credentials.password)
    if user is None:
        raise Unauthenticated("Invalid username or password.", code="incorrect_password")
    logger.info("User logged in", extra={"user_id": user.id})
    return _auth_response(user, site_settings)


@router.post("/register", status_code=status.HTTP_201_CREATED, summary="Register a new account")
def register(
    user_in: UserCreate,
    db: Session = Depends(get_db),
    site_settings: Dict[str, str] = Depends(get_site_settings),
):
    """
    Public sign-up. The first account ever registered becomes the site
    administrator; every later one is a subscriber.
    """
    _ensure_unique(db, user_in.username, user_in.email)
    user = commit_guard(db, crud_user.register_user, user_in, conflict_code="existing_user_login")
    logger.info("User registered", extra={"user_id": user.id, "event": f"role:{user.role}"})
    return _auth_response(user, site_settings)


@router.get("/me", summary="Current user")
def read_me(
    current_user: User = Depends(get_current_user),
    site_settings: Dict[str, str] = Depends(get_site_settings),
):
    return format_user(current_user, base_url(site_settings), is_admin=True)


@router.get("", summary="List users")
def read_users(
    request: Request,
    response: Response,
    page: int = Query(1, ge=1),
    per_page: int = Query(10, ge=1, le=100),
    search: Optional[str] = None,
    roles: Optional[str] = None,
    orderby: Literal["id", "name", "registered", "email"] = "name",
    order: Literal["asc", "desc"] = "asc",
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_current_user_or_none),
    site_settings: Dict[str, str] = Depends(get_site_settings),
):
    privileged = permissions.can_view_private_fields(current_user)
    params = UserQuery(
        page=page,
        per_page=per_page,
        search=search,
        search_email=privileged,
        roles=split_csv(roles) or None,
        orderby=orderby if privileged or orderby != "email" else "name",
        order=order,
    )
    result = crud_user.get_users(db, params)
    set_pagination_headers(response, request, result, site_settings, "users")
    return [
        format_user(user, base_url(site_settings), is_admin=privileged)
        for user in result.items
    ]


@router.get("/{user_id}", summary="Get a user")
def read_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_current_user_or_none),
    site_settings: Dict[str, str] = Depends(get_site_settings),
):
    user = crud_user.get_user(db, user_id=user_id)
    visible = user is not None and (user.is_active or permissions.is_editorial(current_user))
    if not visible:
        raise NotFound("Invalid user ID.", code="rest_user_invalid_id")
    return format_user(
        user,
        base_url(site_settings),
        is_admin=permissions.can_view_private_fields(current_user, user.id),
    )


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create a user")
def create_user(
    user_in: AdminUserCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_role(UserRole.administrator.value)),
    site_settings: Dict[str, str] = Depends(get_site_settings),
):
    _ensure_unique(db, user_in.username, user_in.email)
    user = commit_guard(
        db, crud_user.create_user, user_in, role=user_in.role.value, conflict_code="existing_user_login"
    )
    logger.info("User created", extra={"user_id": current_user.id, "event": f"created:{user.id}"})
    return format_user(user, base_url(site_settings), is_admin=True)


@router.put("/{user_id}", summary="Update a user")
def update_user(
    user_id: int,
    user_in: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    site_settings: Dict[str, str] = Depends(get_site_settings),
):
    if not permissions.can_edit_user(current_user, user_id):
        raise Forbidden("Sorry, you are not allowed to edit this user.", code="rest_cannot_edit")
    user = _get_user_or_404(db, user_id)

    if user_in.role is not None and not permissions.is_administrator(current_user):
        raise Forbidden("Sorry, you are not allowed to edit roles.", code="rest_cannot_edit_roles")
    if user_in.email and user_in.email.lower() != (user.email or "").lower():
        _ensure_unique(db, None, user_in.email)

    user = commit_guard(db, crud_user.update_user, user, user_in, conflict_code="existing_user_email")
    return format_user(user, base_url(site_settings), is_admin=True)


@router.delete("/{user_id}", summary="Delete or deactivate a user")
def delete_user(
    user_id: int,
    force: bool = False,
    reassign: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_role(UserRole.administrator.value)),
    store: ObjectStore = Depends(get_object_store),
    site_settings: Dict[str, str] = Depends(get_site_settings),
):
    """
    Without `force` the account is deactivated. With `force` it is removed;
    its content moves to `reassign` when given, otherwise it is deleted too.
    """
    user = _get_user_or_404(db, user_id)
    if user.id == current_user.id:
        raise Forbidden("Sorry, you cannot delete yourself.", code="rest_user_cannot_delete")

    previous = format_user(user, base_url(site_settings), is_admin=True)

    if not force:
        user = crud_user.deactivate_user(db, user)
        return format_user(user, base_url(site_settings), is_admin=True)

    if reassign is not None:
        if reassign == user.id or crud_user.get_user(db, user_id=reassign) is None:
            raise InvalidParameter("Invalid user ID for reassignment.", code="rest_user_invalid_reassign")

    orphaned_keys = crud_user.delete_user(db, user, reassign_to=reassign)
    for key in orphaned_keys:
        try:
            store.delete(key)
        except StorageError:
            logger.warning("Could not remove stored media %s", key, exc_info=True)

    logger.info("User deleted", extra={"user_id": current_user.id, "event": f"deleted:{user_id}"})
    return {"deleted": True, "previous": previous}
