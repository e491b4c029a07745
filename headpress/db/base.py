# headpress/db/base.py
from datetime import datetime, timezone

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Declarative base every model inherits from.
    Models are registered on it through headpress.db.models_registry.
    """
    pass


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
