# headpress/services/settings_cache.py
import logging
import time
from typing import Callable, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from headpress.core.config import Settings
from headpress.models.option import Option

logger = logging.getLogger(__name__)

# Keys never exposed by the public settings endpoint.
SECRET_KEYS = frozenset({"webhook_url", "webhook_secret"})


def default_settings(config: Settings) -> Dict[str, str]:
    """
    Values used when a key has no stored row, or when the store is unreachable.
    """
    return {
        "site_title": config.SITE_NAME,
        "site_description": config.SITE_DESCRIPTION,
        "site_url": config.SITE_URL,
        "admin_email": config.ADMIN_EMAIL,
        "posts_per_page": "10",
        "default_comment_status": "open",
        "date_format": "Y-m-d",
        "time_format": "H:i:s",
        "timezone": "UTC",
        "webhook_url": "",
        "webhook_secret": "",
        "webhook_events": "",
    }


class SettingsCache:
    """
    Caches the full settings map for `ttl` seconds.

    Concurrent refreshes are harmless: the last one to finish wins the slot.
    """

    def __init__(self, defaults: Dict[str, str], ttl: float = 60.0,
                 clock: Callable[[], float] = time.monotonic):
        self._defaults = dict(defaults)
        self._ttl = ttl
        self._clock = clock
        self._cached: Optional[Dict[str, str]] = None
        self._loaded_at = 0.0

    def get(self, db: Session) -> Dict[str, str]:
        now = self._clock()
        if self._cached is not None and now - self._loaded_at < self._ttl:
            return dict(self._cached)

        try:
            rows = db.query(Option.option_name, Option.option_value).all()
        except SQLAlchemyError as e:
            logger.error(f"Could not load settings, serving defaults: {e}")
            db.rollback()
            return dict(self._defaults)

        merged = dict(self._defaults)
        for name, value in rows:
            # empty values would otherwise hide required defaults like site_url
            if value is None or (value == "" and merged.get(name)):
                continue
            merged[name] = value
        self._cached = merged
        self._loaded_at = now
        return dict(merged)

    def invalidate(self) -> None:
        self._cached = None


def public_settings(values: Dict[str, str]) -> Dict[str, str]:
    return {key: value for key, value in values.items() if key not in SECRET_KEYS}


def site_url(values: Dict[str, str]) -> str:
    """Site URL without trailing slash."""
    return (values.get("site_url") or "").rstrip("/")
