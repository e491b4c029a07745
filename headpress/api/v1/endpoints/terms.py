# headpress/api/v1/endpoints/terms.py
"""
Categories and tags. Both collections expose the same operations, so one
router factory builds each of them from its taxonomy.
"""
from typing import Callable, Dict, Literal, Optional, Type

from fastapi import APIRouter, BackgroundTasks, Body, Depends, Query, Request, Response, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from headpress.api.v1.common import base_url, commit_guard, parse_ids, set_pagination_headers, split_csv
from headpress.core import permissions
from headpress.core.deps import get_current_user, get_site_settings, get_webhook_notifier
from headpress.core.errors import Forbidden, InvalidParameter, NotFound, NotImplementedOperation
from headpress.crud import crud_term
from headpress.crud.crud_term import CATEGORY, TAG, Taxonomy, TermQuery
from headpress.db.session import get_db
from headpress.models.taxonomy import DEFAULT_CATEGORY_ID
from headpress.models.user import User
from headpress.schemas.taxonomy import CategoryCreate, CategoryUpdate, TermCreate, TermUpdate
from headpress.services.formatter import format_category, format_tag
from headpress.services.webhook import WebhookNotifier


def _require(allowed: bool) -> None:
    if not allowed:
        raise Forbidden("Sorry, you are not allowed to manage terms.", code="rest_cannot_create")


def build_term_router(taxonomy: Taxonomy, collection: str, event_prefix: str,
                      create_schema: Type[BaseModel], update_schema: Type[BaseModel],
                      formatter: Callable,
                      can_create: Callable = permissions.can_manage_terms) -> APIRouter:
    router = APIRouter()
    hierarchical = taxonomy is CATEGORY

    def get_or_404(db: Session, term_id: int):
        term = crud_term.get_term(db, taxonomy, term_id)
        if term is None:
            raise NotFound("Term does not exist.", code="rest_term_invalid")
        return term

    def check_parent(db: Session, parent_id: Optional[int], term_id: Optional[int] = None) -> None:
        if not parent_id:
            return
        if parent_id == term_id or crud_term.get_term(db, taxonomy, parent_id) is None:
            raise InvalidParameter("Parent term does not exist.", code="rest_term_invalid")

    def check_name(db: Session, name: str, term_id: Optional[int] = None) -> None:
        existing = crud_term.get_term_by_name(db, taxonomy, name)
        if existing is not None and existing.id != term_id:
            raise InvalidParameter(
                "A term with the name provided already exists.", code="rest_term_exists"
            )

    @router.get("", summary=f"List {collection}")
    def read_terms(
        request: Request,
        response: Response,
        page: int = Query(1, ge=1),
        per_page: int = Query(10, ge=1, le=100),
        search: Optional[str] = None,
        slug: Optional[str] = None,
        include: Optional[str] = None,
        exclude: Optional[str] = None,
        post: Optional[int] = None,
        parent: Optional[int] = None,
        hide_empty: bool = False,
        orderby: Literal["name", "slug", "count", "id"] = "name",
        order: Literal["asc", "desc"] = "asc",
        db: Session = Depends(get_db),
        site_settings: Dict[str, str] = Depends(get_site_settings),
    ):
        params = TermQuery(
            page=page,
            per_page=per_page,
            search=search,
            slug=split_csv(slug) or None,
            include=parse_ids(include, "include"),
            exclude=parse_ids(exclude, "exclude"),
            post=post,
            parent=parent if hierarchical else None,
            hide_empty=hide_empty,
            orderby=orderby,
            order=order,
        )
        result = crud_term.get_terms(db, taxonomy, params)
        set_pagination_headers(response, request, result, site_settings, collection)
        return [formatter(term, base_url(site_settings)) for term in result.items]

    @router.get("/{term_id}", summary=f"Get one of {collection}")
    def read_term(
        term_id: int,
        db: Session = Depends(get_db),
        site_settings: Dict[str, str] = Depends(get_site_settings),
    ):
        return formatter(get_or_404(db, term_id), base_url(site_settings))

    @router.post("", status_code=status.HTTP_201_CREATED, summary=f"Create one of {collection}")
    def create_term(
        background_tasks: BackgroundTasks,
        term_in: create_schema = Body(...),
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user),
        site_settings: Dict[str, str] = Depends(get_site_settings),
        notifier: WebhookNotifier = Depends(get_webhook_notifier),
    ):
        _require(can_create(current_user))
        check_name(db, term_in.name)
        extra = {}
        if hierarchical:
            check_parent(db, term_in.parent)
            extra["parent_id"] = term_in.parent or 0
        term = commit_guard(
            db, crud_term.create_term, taxonomy, term_in.name, term_in.slug, term_in.description,
            conflict_code="rest_term_exists", **extra
        )
        body = formatter(term, base_url(site_settings))
        notifier.dispatch(background_tasks, f"{event_prefix}.created", body, site_settings)
        return body

    @router.put("/{term_id}", summary=f"Update one of {collection}")
    def update_term(
        term_id: int,
        background_tasks: BackgroundTasks,
        term_in: update_schema = Body(...),
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user),
        site_settings: Dict[str, str] = Depends(get_site_settings),
        notifier: WebhookNotifier = Depends(get_webhook_notifier),
    ):
        _require(permissions.can_manage_terms(current_user))
        term = get_or_404(db, term_id)
        update_data = term_in.model_dump(exclude_unset=True)
        if update_data.get("name") is None:
            update_data.pop("name", None)
        if "name" in update_data:
            check_name(db, update_data["name"], term.id)
        if hierarchical and "parent" in update_data:
            parent_id = update_data.pop("parent") or 0
            check_parent(db, parent_id, term.id)
            update_data["parent_id"] = parent_id
        if update_data.get("description") is None:
            update_data.pop("description", None)
        term = crud_term.update_term(db, taxonomy, term, update_data)
        body = formatter(term, base_url(site_settings))
        notifier.dispatch(background_tasks, f"{event_prefix}.updated", body, site_settings)
        return body

    @router.delete("/{term_id}", summary=f"Delete one of {collection}")
    def delete_term(
        term_id: int,
        background_tasks: BackgroundTasks,
        force: bool = False,
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user),
        site_settings: Dict[str, str] = Depends(get_site_settings),
        notifier: WebhookNotifier = Depends(get_webhook_notifier),
    ):
        _require(permissions.can_manage_terms(current_user))
        term = get_or_404(db, term_id)
        if not force:
            raise NotImplementedOperation(
                "Terms do not support trashing. Set 'force=true' to delete.",
                code="rest_trash_not_supported",
            )
        if hierarchical and term.id == DEFAULT_CATEGORY_ID:
            raise Forbidden("The default category cannot be deleted.", code="rest_cannot_delete")

        previous = formatter(term, base_url(site_settings))
        crud_term.delete_term(db, taxonomy, term)
        notifier.dispatch(background_tasks, f"{event_prefix}.deleted", previous, site_settings)
        return {"deleted": True, "previous": previous}

    return router


categories_router = build_term_router(
    CATEGORY, "categories", "category", CategoryCreate, CategoryUpdate, format_category,
)
tags_router = build_term_router(
    TAG, "tags", "tag", TermCreate, TermUpdate, format_tag,
    can_create=permissions.can_create_tags,
)
