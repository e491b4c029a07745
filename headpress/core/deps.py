# headpress/core/deps.py
from typing import Dict, Optional

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from headpress.core import security
from headpress.core.config import settings
from headpress.core.errors import Forbidden, Unauthenticated
from headpress.crud import crud_user
from headpress.db.session import get_db
from headpress.models.user import User
from headpress.services.settings_cache import SettingsCache
from headpress.services.storage import ObjectStore
from headpress.services.text_generator import TextGenerator
from headpress.services.webhook import WebhookNotifier

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/wp-json/wp/v2/users/login", auto_error=False)


def get_token(request: Request, bearer: Optional[str] = Depends(oauth2_scheme)) -> Optional[str]:
    """
    Bearer token from the Authorization header, else the auth cookie.
    """
    if bearer:
        return bearer
    return request.cookies.get(settings.AUTH_COOKIE_NAME) or None


def _resolve_user(db: Session, token: str) -> Optional[User]:
    payload = security.decode_access_token(token)
    if payload is None:
        return None
    user = crud_user.get_user(db, user_id=payload.userId)
    if user is None or not user.is_active:
        return None
    return user


def get_current_user_or_none(
    request: Request,
    db: Session = Depends(get_db),
    token: Optional[str] = Depends(get_token),
) -> Optional[User]:
    """
    Optional authentication: a missing or invalid token means an anonymous
    request, never an error.
    """
    if not token:
        return None
    user = _resolve_user(db, token)
    if user is not None:
        request.state.user_id = user.id
    return user


def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
    token: Optional[str] = Depends(get_token),
) -> User:
    """
    Required authentication.
    """
    if not token:
        raise Unauthenticated("You are not currently logged in.", code="rest_not_logged_in")
    user = _resolve_user(db, token)
    if user is None:
        raise Unauthenticated("Invalid or expired token.", code="rest_invalid_token")
    request.state.user_id = user.id
    return user


def require_role(*roles: str):
    """
    Dependency factory: 401 without identity, 403 when the role is not allowed.
    """
    allowed = frozenset(roles)

    def checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed:
            raise Forbidden("Sorry, you are not allowed to do that.", code="rest_forbidden")
        return current_user

    return checker


def get_settings_cache(request: Request) -> SettingsCache:
    return request.app.state.settings_cache


def get_site_settings(
    db: Session = Depends(get_db),
    cache: SettingsCache = Depends(get_settings_cache),
) -> Dict[str, str]:
    return cache.get(db)


def get_object_store(request: Request) -> ObjectStore:
    return request.app.state.object_store


def get_text_generator(request: Request) -> TextGenerator:
    return request.app.state.text_generator


def get_webhook_notifier(request: Request) -> WebhookNotifier:
    return request.app.state.webhook_notifier
