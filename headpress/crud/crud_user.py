from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from headpress.core.security import get_password_hash, verify_password
from headpress.crud.query import ListParams, PageResult, apply_predicates, direction, paginate
from headpress.models.comment import Comment
from headpress.models.content import Post
from headpress.models.media import Media
from headpress.models.moment import Moment
from headpress.models.user import User, UserRole, UserStatus
from headpress.schemas.user import UserCreate, UserUpdate


class UserQuery(ListParams):
    search: Optional[str] = None
    search_email: bool = False
    roles: Optional[List[str]] = None
    orderby: str = "name"
    order: str = "asc"


def _active(params: UserQuery):
    return User.status == UserStatus.active.value


def _search(params: UserQuery):
    if not params.search:
        return None
    pattern = f"%{params.search}%"
    columns = [User.username, User.display_name]
    if params.search_email:
        columns.append(User.email)
    return or_(*(column.ilike(pattern) for column in columns))


def _roles(params: UserQuery):
    return User.role.in_(params.roles) if params.roles else None


USER_PREDICATES = (_active, _search, _roles)

USER_ORDERING = {
    "id": User.id,
    "name": func.coalesce(User.display_name, User.username),
    "registered": User.registered_at,
    "email": User.email,
}


def get_user(db: Session, user_id: int) -> Optional[User]:
    return db.get(User, user_id)


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(func.lower(User.email) == email.strip().lower()).first()


def get_user_by_username(db: Session, username: str) -> Optional[User]:
    return db.query(User).filter(User.username == username).first()


def get_user_by_login(db: Session, login: str) -> Optional[User]:
    """Looks the user up by username, then by email."""
    return get_user_by_username(db, login) or get_user_by_email(db, login)


def get_users(db: Session, params: UserQuery) -> PageResult:
    query = apply_predicates(db.query(User), params, USER_PREDICATES)
    column = USER_ORDERING.get(params.orderby, USER_ORDERING["name"])
    return paginate(query, params, direction(column, params.order), User.id.asc())


def count_users(db: Session) -> int:
    return db.query(User).count()


def authenticate_user(db: Session, login: str, password: str) -> Optional[User]:
    """
    Checks credentials for an active user and stamps `last_login`.
    """
    user = get_user_by_login(db, login)
    if not user or not user.is_active:
        return None
    if not verify_password(password, user.password_hash):
        return None
    user.last_login = datetime.now(timezone.utc)
    db.commit()
    db.refresh(user)
    return user


def create_user(db: Session, user_in: UserCreate, role: str) -> User:
    db_user = User(
        username=user_in.username,
        email=user_in.email,
        password_hash=get_password_hash(user_in.password),
        display_name=user_in.display_name or user_in.username,
        role=role,
        status=UserStatus.active.value,
        bio=user_in.bio,
        avatar_url=user_in.avatar_url,
    )
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user


def register_user(db: Session, user_in: UserCreate) -> User:
    """
    Public registration: the very first account becomes administrator,
    everyone after that a subscriber.
    """
    is_first = count_users(db) == 0
    role = UserRole.administrator.value if is_first else UserRole.subscriber.value
    return create_user(db, user_in, role=role)


def update_user(db: Session, db_user: User, user_update: UserUpdate) -> User:
    update_data = user_update.model_dump(exclude_unset=True)
    # an explicit null on a required column means "leave unchanged"
    for field in ("email", "role", "display_name"):
        if update_data.get(field) is None:
            update_data.pop(field, None)
    password = update_data.pop("password", None)
    if password:
        db_user.password_hash = get_password_hash(password)

    for field, value in update_data.items():
        if field == "role" and value is not None:
            value = UserRole(value).value
        setattr(db_user, field, value)

    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user


def deactivate_user(db: Session, db_user: User) -> User:
    db_user.status = UserStatus.inactive.value
    db.commit()
    db.refresh(db_user)
    return db_user


def delete_user(db: Session, db_user: User, reassign_to: Optional[int] = None) -> List[str]:
    """
    Removes the user. Their posts, media and moments move to `reassign_to`,
    or are deleted with them. Returns the object-store keys of deleted media.
    """
    from headpress.crud import crud_post

    orphaned_keys: List[str] = []
    owned = {Post: Post.author_id, Media: Media.author_id, Moment: Moment.author_id}

    if reassign_to is not None:
        for model, column in owned.items():
            db.query(model).filter(column == db_user.id).update(
                {column: reassign_to}, synchronize_session=False
            )
    else:
        for post in db.query(Post).filter(Post.author_id == db_user.id).all():
            crud_post.remove_post(db, post, commit=False)
        for media in db.query(Media).filter(Media.author_id == db_user.id).all():
            orphaned_keys.append(media.storage_key)
            db.delete(media)
        db.query(Moment).filter(Moment.author_id == db_user.id).delete(synchronize_session=False)

    db.query(Comment).filter(Comment.user_id == db_user.id).update(
        {Comment.user_id: None}, synchronize_session=False
    )
    db.delete(db_user)
    db.commit()
    return orphaned_keys
