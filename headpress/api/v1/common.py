# headpress/api/v1/common.py
"""
Helpers shared by the wp/v2 routers.
"""
from typing import Any, Dict, List, Optional

from fastapi import Request, Response
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from headpress.core import permissions
from headpress.core.errors import Conflict, InvalidParameter
from headpress.crud.crud_term import Taxonomy
from headpress.crud.query import PageResult
from headpress.models.content import Post, PostStatus
from headpress.services.formatter import api_url, pagination_headers
from headpress.services.settings_cache import site_url
from headpress.services.text_generator import TextGenerator, resolve_slug
from headpress.utils.slug import slugify, unique_slug


def base_url(site_settings: Dict[str, str]) -> str:
    return site_url(site_settings)


def set_pagination_headers(response: Response, request: Request, result: PageResult,
                           site_settings: Dict[str, str], collection: str) -> None:
    """
    Adds X-WP-Total, X-WP-TotalPages and Link. Filters other than page and
    per_page are carried into the prev/next URLs.
    """
    params = {
        key: value for key, value in request.query_params.items()
        if key not in ("page", "per_page")
    }
    headers = pagination_headers(
        result.page,
        result.per_page,
        result.total,
        api_url(base_url(site_settings), collection),
        params,
    )
    response.headers.update(headers)


def split_csv(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    return [part.strip() for part in raw.split(",") if part.strip()]


def parse_ids(raw: Optional[str], name: str) -> Optional[List[int]]:
    values = split_csv(raw)
    if not values:
        return None
    try:
        return [int(value) for value in values]
    except ValueError:
        raise InvalidParameter(f"Invalid parameter(s): {name}", code="rest_invalid_param")


def resolve_term_filter(db: Session, taxonomy: Taxonomy, raw: Optional[str]) -> Optional[List[int]]:
    """
    Accepts term ids or slugs (comma separated). Unknown slugs match nothing.
    """
    values = split_csv(raw)
    if not values:
        return None
    ids = [int(value) for value in values if value.isdigit()]
    slugs = [value for value in values if not value.isdigit()]
    if slugs:
        model = taxonomy.model
        ids.extend(row[0] for row in db.query(model.id).filter(model.slug.in_(slugs)))
    # -1 never matches, so unknown slugs yield an empty listing instead of no filter
    return ids or [-1]


def visible_statuses(raw: Optional[str], viewer: Optional[Any], allowed: List[str],
                     default: str = PostStatus.publish.value) -> Optional[List[str]]:
    """
    Status filter for public listings. Anything beyond the default needs an
    administrator or editor; other viewers silently get the default. `all`
    means no filter. Returns None for "no filter".
    """
    if not permissions.is_editorial(viewer):
        return [default]
    requested = split_csv(raw) or [default]
    if "all" in requested:
        return None
    invalid = [value for value in requested if value not in allowed]
    if invalid:
        raise InvalidParameter(
            f"Invalid parameter(s): status ({', '.join(invalid)})",
            code="rest_invalid_param",
        )
    return requested


def post_slug(db: Session, requested: Optional[str], title: str, generator: TextGenerator,
              fallback: str, exclude_id: Optional[int] = None) -> str:
    """
    Explicit slug when one is given, else the assisted/deterministic one;
    then made unique across posts and pages.
    """
    candidate = slugify(requested) if requested else ""
    if not candidate:
        candidate = resolve_slug(title, generator, fallback=fallback)
    return unique_slug(db, Post, candidate, exclude_id=exclude_id)


def commit_guard(db: Session, action, *args, conflict_code: str = "rest_slug_conflict", **kwargs):
    """
    Runs a crud write; a unique-constraint race becomes a 409 instead of a 500.
    """
    try:
        return action(db, *args, **kwargs)
    except IntegrityError:
        db.rollback()
        raise Conflict("The resource conflicts with an existing one.", code=conflict_code)
