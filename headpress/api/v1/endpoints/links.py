# headpress/api/v1/endpoints/links.py
"""
Blogroll: friendship links and the categories they are filed under.
"""
from typing import Dict, Optional

from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy.orm import Session

from headpress.api.v1.common import base_url, commit_guard, set_pagination_headers
from headpress.core import permissions
from headpress.core.deps import get_current_user, get_current_user_or_none, get_site_settings
from headpress.core.errors import Forbidden, InvalidParameter, NotFound
from headpress.crud import crud_link
from headpress.crud.crud_link import LinkQuery
from headpress.crud.query import PageResult
from headpress.db.session import get_db
from headpress.models.link import DEFAULT_LINK_CATEGORY_ID, Link, LinkCategory, LinkVisibility
from headpress.models.user import User
from headpress.schemas.link import LinkCategoryCreate, LinkCategoryUpdate, LinkCreate, LinkUpdate
from headpress.services.formatter import format_link, format_link_category

router = APIRouter()
category_router = APIRouter()

VISIBLE = LinkVisibility.yes.value


def _require_manager(user: User) -> None:
    if not permissions.can_manage_terms(user):
        raise Forbidden("Sorry, you are not allowed to manage links.", code="rest_forbidden")


def _get_link_or_404(db: Session, link_id: int) -> Link:
    link = crud_link.get_link(db, link_id)
    if link is None:
        raise NotFound("Invalid link ID.", code="rest_link_invalid")
    return link


def _get_category_or_404(db: Session, category_id: int) -> LinkCategory:
    category = crud_link.get_link_category(db, category_id)
    if category is None:
        raise NotFound("Invalid link category ID.", code="rest_term_invalid")
    return category


def _check_category(db: Session, category_id: int) -> None:
    if crud_link.get_link_category(db, category_id) is None:
        raise InvalidParameter("Invalid parameter(s): category", code="rest_invalid_param")


# --- Links -----------------------------------------------------------------

@router.get("", summary="List links")
def read_links(
    request: Request,
    response: Response,
    page: int = Query(1, ge=1),
    per_page: int = Query(50, ge=1, le=100),
    category: Optional[int] = None,
    visible: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_current_user_or_none),
    site_settings: Dict[str, str] = Depends(get_site_settings),
):
    """
    Hidden links (`visible=no`) and `visible=all` are for administrators
    and editors; everyone else only gets visible links.
    """
    requested = visible or VISIBLE
    if not permissions.is_editorial(current_user):
        requested = VISIBLE
    elif requested not in ("all", VISIBLE, LinkVisibility.no.value):
        raise InvalidParameter("Invalid parameter(s): visible", code="rest_invalid_param")

    params = LinkQuery(
        page=page,
        per_page=per_page,
        category=category,
        visible=None if requested == "all" else requested,
    )
    result = crud_link.get_links(db, params)
    set_pagination_headers(response, request, result, site_settings, "links")
    return [format_link(link, base_url(site_settings)) for link in result.items]


@router.get("/{link_id}", summary="Get a link")
def read_link(
    link_id: int,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_current_user_or_none),
    site_settings: Dict[str, str] = Depends(get_site_settings),
):
    link = _get_link_or_404(db, link_id)
    if link.visible != VISIBLE and not permissions.is_editorial(current_user):
        raise NotFound("Invalid link ID.", code="rest_link_invalid")
    return format_link(link, base_url(site_settings))


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create a link")
def create_link(
    link_in: LinkCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    site_settings: Dict[str, str] = Depends(get_site_settings),
):
    _require_manager(current_user)
    _check_category(db, link_in.category_id)
    link = crud_link.create_link(db, link_in.model_dump(mode="json"))
    return format_link(link, base_url(site_settings))


@router.put("/{link_id}", summary="Update a link")
def update_link(
    link_id: int,
    link_in: LinkUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    site_settings: Dict[str, str] = Depends(get_site_settings),
):
    _require_manager(current_user)
    link = _get_link_or_404(db, link_id)
    update_data = {
        field: value
        for field, value in link_in.model_dump(exclude_unset=True, mode="json").items()
        if value is not None or field in ("description", "avatar")
    }
    if "category_id" in update_data:
        _check_category(db, update_data["category_id"])
    link = crud_link.update_link(db, link, update_data)
    return format_link(link, base_url(site_settings))


@router.delete("/{link_id}", summary="Delete a link")
def delete_link(
    link_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    site_settings: Dict[str, str] = Depends(get_site_settings),
):
    _require_manager(current_user)
    link = _get_link_or_404(db, link_id)
    previous = format_link(link, base_url(site_settings))
    crud_link.delete_link(db, link)
    return {"deleted": True, "previous": previous}


# --- Link categories -------------------------------------------------------

@category_router.get("", summary="List link categories")
def read_link_categories(
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    site_settings: Dict[str, str] = Depends(get_site_settings),
):
    categories = crud_link.get_link_categories(db)
    result = PageResult(items=categories, total=len(categories), page=1, per_page=max(len(categories), 1))
    set_pagination_headers(response, request, result, site_settings, "link-categories")
    return [format_link_category(category, base_url(site_settings)) for category in categories]


@category_router.get("/{category_id}", summary="Get a link category")
def read_link_category(
    category_id: int,
    db: Session = Depends(get_db),
    site_settings: Dict[str, str] = Depends(get_site_settings),
):
    return format_link_category(_get_category_or_404(db, category_id), base_url(site_settings))


@category_router.post("", status_code=status.HTTP_201_CREATED, summary="Create a link category")
def create_link_category(
    category_in: LinkCategoryCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    site_settings: Dict[str, str] = Depends(get_site_settings),
):
    _require_manager(current_user)
    category = commit_guard(
        db, crud_link.create_link_category, category_in.name, category_in.slug, category_in.description
    )
    return format_link_category(category, base_url(site_settings))


@category_router.put("/{category_id}", summary="Update a link category")
def update_link_category(
    category_id: int,
    category_in: LinkCategoryUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    site_settings: Dict[str, str] = Depends(get_site_settings),
):
    _require_manager(current_user)
    category = _get_category_or_404(db, category_id)
    update_data = category_in.model_dump(exclude_unset=True)
    if update_data.get("name") is None:
        update_data.pop("name", None)
    category = crud_link.update_link_category(db, category, update_data)
    return format_link_category(category, base_url(site_settings))


@category_router.delete("/{category_id}", summary="Delete a link category")
def delete_link_category(
    category_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    site_settings: Dict[str, str] = Depends(get_site_settings),
):
    """Links filed under the category move to the default one."""
    _require_manager(current_user)
    category = _get_category_or_404(db, category_id)
    if category.id == DEFAULT_LINK_CATEGORY_ID:
        raise Forbidden("The default link category cannot be deleted.", code="rest_cannot_delete")
    previous = format_link_category(category, base_url(site_settings))
    moved = crud_link.delete_link_category(db, category)
    return {"deleted": True, "previous": previous, "moved_links": moved}
