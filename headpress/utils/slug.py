# headpress/utils/slug.py
import re
from typing import Optional

from sqlalchemy.orm import Session

from headpress.core.errors import Conflict

_STRIP = re.compile(r'[^\w\s-]', re.ASCII)
_SEPARATORS = re.compile(r'[\s_-]+', re.ASCII)

MIN_SLUG_LENGTH = 2


def slugify(text: Optional[str]) -> str:
    """
    Deterministic slug: lower-case, trimmed, non-word characters dropped,
    whitespace/underscore/hyphen runs collapsed to one hyphen.
    """
    if not text:
        return ""
    slug = _STRIP.sub('', text.lower().strip())
    slug = _SEPARATORS.sub('-', slug)
    return slug.strip('-')


def unique_slug(db: Session, model, candidate: str, exclude_id: Optional[int] = None) -> str:
    """
    Returns `candidate`, or `candidate-1`, `candidate-2`, ... until no row of
    `model` uses it. The unique constraint on the column remains the final guard.
    """
    def taken(slug: str) -> bool:
        query = db.query(model.id).filter(model.slug == slug)
        if exclude_id is not None:
            query = query.filter(model.id != exclude_id)
        return query.first() is not None

    if not taken(candidate):
        return candidate

    # Each existing row can block at most one suffix.
    limit = db.query(model).count() + 1
    for counter in range(1, limit + 1):
        slug = f"{candidate}-{counter}"
        if not taken(slug):
            return slug

    raise Conflict(
        f"Could not find a free slug for '{candidate}'.",
        code="rest_slug_conflict",
    )
