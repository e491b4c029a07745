# headpress/api/v1/endpoints/settings.py
import logging
from typing import Any, Dict

from fastapi import APIRouter, BackgroundTasks, Body, Depends
from sqlalchemy.orm import Session

from headpress.core.deps import (
    get_current_user_or_none,
    get_settings_cache,
    get_site_settings,
    get_webhook_notifier,
    require_role,
)
from headpress.core import permissions
from headpress.core.errors import InvalidParameter, NotFound
from headpress.crud import crud_option
from headpress.db.session import get_db
from headpress.models.user import User, UserRole
from headpress.schemas.setting import SettingValue
from headpress.services.settings_cache import SECRET_KEYS, SettingsCache, public_settings
from headpress.services.webhook import WebhookNotifier, is_valid_webhook_url

logger = logging.getLogger(__name__)

router = APIRouter()

require_admin = require_role(UserRole.administrator.value)


def _check_key(key: str) -> None:
    if not key or len(key) > 191 or not key.replace("_", "").replace("-", "").isalnum():
        raise InvalidParameter(f"Invalid setting name: {key}", code="rest_setting_invalid")


def _check_value(key: str, value: Any) -> None:
    if key == "webhook_url" and not is_valid_webhook_url(str(value or "").strip()):
        raise InvalidParameter("Invalid parameter(s): webhook_url", code="rest_invalid_param")


def _after_write(cache: SettingsCache, db: Session, background_tasks: BackgroundTasks,
                 notifier: WebhookNotifier, changed: Dict[str, Any]) -> Dict[str, str]:
    """
    Drops the cached map, reloads it and announces the change. The event is
    gated by the freshly written settings, so enabling webhooks takes effect
    immediately.
    """
    cache.invalidate()
    fresh = cache.get(db)
    payload = {key: value for key, value in changed.items() if key not in SECRET_KEYS}
    notifier.dispatch(background_tasks, "settings.updated", payload, fresh)
    return fresh


@router.get("", summary="Public site settings")
def read_settings(site_settings: Dict[str, str] = Depends(get_site_settings)):
    return public_settings(site_settings)


@router.get("/admin", summary="All site settings")
def read_admin_settings(
    current_user: User = Depends(require_admin),
    site_settings: Dict[str, str] = Depends(get_site_settings),
):
    return site_settings


@router.get("/{key}", summary="Get one setting")
def read_setting(
    key: str,
    current_user: User = Depends(get_current_user_or_none),
    site_settings: Dict[str, str] = Depends(get_site_settings),
):
    # secrets read as missing to non-administrators
    if key in SECRET_KEYS and not permissions.is_administrator(current_user):
        raise NotFound("Setting not found.", code="rest_setting_invalid")
    if key not in site_settings:
        raise NotFound("Setting not found.", code="rest_setting_invalid")
    return {"key": key, "value": site_settings[key]}


@router.put("", summary="Update several settings")
def update_settings(
    background_tasks: BackgroundTasks,
    values: Dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
    cache: SettingsCache = Depends(get_settings_cache),
    notifier: WebhookNotifier = Depends(get_webhook_notifier),
):
    if not values:
        raise InvalidParameter("No settings provided.", code="rest_setting_invalid")
    for key in values:
        _check_key(key)
        _check_value(key, values[key])
    crud_option.set_options(db, values)
    logger.info("Settings updated", extra={"user_id": current_user.id, "event": ",".join(sorted(values))})
    return _after_write(cache, db, background_tasks, notifier, values)


@router.put("/{key}", summary="Update one setting")
def update_setting(
    key: str,
    background_tasks: BackgroundTasks,
    setting_in: SettingValue,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
    cache: SettingsCache = Depends(get_settings_cache),
    notifier: WebhookNotifier = Depends(get_webhook_notifier),
):
    _check_key(key)
    _check_value(key, setting_in.value)
    option = crud_option.set_option(db, key, setting_in.value)
    logger.info("Setting updated", extra={"user_id": current_user.id, "event": key})
    _after_write(cache, db, background_tasks, notifier, {key: option.option_value})
    return {"key": key, "value": option.option_value}
