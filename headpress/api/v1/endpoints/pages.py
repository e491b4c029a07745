# headpress/api/v1/endpoints/pages.py
from typing import Dict, Literal, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request, Response, status
from sqlalchemy.orm import Session

from headpress.api.v1.common import (
    base_url,
    commit_guard,
    parse_ids,
    post_slug,
    set_pagination_headers,
    split_csv,
    visible_statuses,
)
from headpress.core import permissions
from headpress.core.deps import (
    get_current_user,
    get_current_user_or_none,
    get_site_settings,
    get_text_generator,
    get_webhook_notifier,
)
from headpress.core.errors import Forbidden, InvalidParameter, NotFound
from headpress.crud import crud_media, crud_post
from headpress.crud.crud_post import PostQuery
from headpress.db.session import get_db
from headpress.models.content import Post, PostStatus, PostType
from headpress.models.user import User
from headpress.schemas.post import PageCreate, PageUpdate
from headpress.services.formatter import format_page
from headpress.services.text_generator import TextGenerator, resolve_excerpt
from headpress.services.webhook import WebhookNotifier

router = APIRouter()

PAGE = PostType.page.value
PUBLISH = PostStatus.publish.value
POST_STATUSES = [item.value for item in PostStatus]
WRITER_ROLES = permissions.EDITORIAL_ROLES | permissions.OWNER_ROLES


def _render(page: Post, site_settings: Dict[str, str]) -> dict:
    author = page.author
    author_name = (author.display_name or author.username) if author else None
    return format_page(page, base_url(site_settings), author_name=author_name)


def _get_page_or_404(db: Session, page_id: int) -> Post:
    page = crud_post.get_post(db, page_id, PAGE)
    if page is None:
        raise NotFound("Invalid page ID.", code="rest_page_invalid")
    return page


def _check_parent(db: Session, parent_id: Optional[int], page_id: Optional[int] = None) -> None:
    if not parent_id:
        return
    if parent_id == page_id or crud_post.get_post(db, parent_id, PAGE) is None:
        raise InvalidParameter("Invalid parameter(s): parent", code="rest_invalid_param")


@router.get("", summary="List pages")
def read_pages(
    request: Request,
    response: Response,
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    status_filter: Optional[str] = Query(None, alias="status"),
    author: Optional[int] = None,
    parent: Optional[int] = None,
    slug: Optional[str] = None,
    search: Optional[str] = None,
    include: Optional[str] = None,
    exclude: Optional[str] = None,
    orderby: Literal["date", "modified", "title", "id", "slug"] = "date",
    order: Literal["asc", "desc"] = "desc",
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_current_user_or_none),
    site_settings: Dict[str, str] = Depends(get_site_settings),
):
    params = PostQuery(
        page=page,
        per_page=per_page,
        post_type=PAGE,
        statuses=visible_statuses(status_filter, current_user, POST_STATUSES),
        author=author,
        parent=parent,
        slug=split_csv(slug) or None,
        search=search,
        include=parse_ids(include, "include"),
        exclude=parse_ids(exclude, "exclude"),
        orderby=orderby,
        order=order,
    )
    result = crud_post.get_posts(db, params)
    set_pagination_headers(response, request, result, site_settings, "pages")
    return [_render(item, site_settings) for item in result.items]


@router.get("/{page_id}", summary="Get a page")
def read_page(
    page_id: int,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_current_user_or_none),
    site_settings: Dict[str, str] = Depends(get_site_settings),
):
    page = _get_page_or_404(db, page_id)
    if page.status != PUBLISH and not permissions.can_edit(current_user, page.author_id):
        raise NotFound("Invalid page ID.", code="rest_page_invalid")
    crud_post.increment_view_count(db, page)
    return _render(page, site_settings)


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create a page")
def create_page(
    page_in: PageCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    site_settings: Dict[str, str] = Depends(get_site_settings),
    generator: TextGenerator = Depends(get_text_generator),
    notifier: WebhookNotifier = Depends(get_webhook_notifier),
):
    if current_user.role not in WRITER_ROLES:
        raise Forbidden("Sorry, you are not allowed to create pages as this user.", code="rest_cannot_create")
    if page_in.status == PostStatus.publish and not permissions.can_publish(current_user):
        raise Forbidden("Sorry, you are not allowed to publish pages.", code="rest_cannot_publish")
    _check_parent(db, page_in.parent)
    if page_in.featured_media and crud_media.get_media(db, page_in.featured_media) is None:
        raise InvalidParameter("Invalid parameter(s): featured_media", code="rest_invalid_param")

    content = page_in.content or ""
    excerpt = page_in.excerpt
    if not excerpt and content:
        excerpt = resolve_excerpt(page_in.title, content, generator)

    data = {
        "title": page_in.title,
        "content": content,
        "excerpt": excerpt or "",
        "slug": post_slug(db, page_in.slug, page_in.title, generator, PAGE),
        "status": page_in.status.value,
        "post_type": PAGE,
        "parent_id": page_in.parent or 0,
        "featured_media_id": page_in.featured_media or None,
        "featured_image_url": page_in.featured_image_url,
        "comment_status": (
            page_in.comment_status.value if page_in.comment_status
            else site_settings.get("default_comment_status") or "open"
        ),
    }
    page = commit_guard(db, crud_post.create_post, data, author_id=current_user.id)
    body = _render(page, site_settings)

    event = "page.published" if page.status == PUBLISH else "page.created"
    notifier.dispatch(background_tasks, event, body, site_settings)
    return body


@router.put("/{page_id}", summary="Update a page")
def update_page(
    page_id: int,
    page_in: PageUpdate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    site_settings: Dict[str, str] = Depends(get_site_settings),
    generator: TextGenerator = Depends(get_text_generator),
    notifier: WebhookNotifier = Depends(get_webhook_notifier),
):
    page = _get_page_or_404(db, page_id)
    if not permissions.can_edit(current_user, page.author_id):
        raise Forbidden("Sorry, you are not allowed to edit this page.", code="rest_cannot_edit")

    update_data = page_in.model_dump(exclude_unset=True, mode="json")
    for field in ("title", "status", "comment_status"):
        if update_data.get(field) is None:
            update_data.pop(field, None)

    was_published = page.status == PUBLISH
    becomes_published = update_data.get("status") == PUBLISH and not was_published
    if becomes_published and not permissions.can_publish(current_user):
        raise Forbidden("Sorry, you are not allowed to publish pages.", code="rest_cannot_publish")

    if "parent" in update_data:
        parent_id = update_data.pop("parent") or 0
        _check_parent(db, parent_id, page.id)
        update_data["parent_id"] = parent_id
    if "featured_media" in update_data:
        media_id = update_data.pop("featured_media")
        if media_id and crud_media.get_media(db, media_id) is None:
            raise InvalidParameter("Invalid parameter(s): featured_media", code="rest_invalid_param")
        update_data["featured_media_id"] = media_id or None

    title = update_data.get("title", page.title)
    if "slug" in update_data:
        update_data["slug"] = post_slug(
            db, update_data.pop("slug"), title, generator, PAGE, exclude_id=page.id
        )
    if update_data.get("content") and "excerpt" not in update_data:
        update_data["excerpt"] = resolve_excerpt(title, update_data["content"], generator)

    page = commit_guard(db, crud_post.update_post, page, update_data)
    body = _render(page, site_settings)

    event = "page.published" if becomes_published else "page.updated"
    notifier.dispatch(background_tasks, event, body, site_settings)
    return body


@router.delete("/{page_id}", summary="Trash or delete a page")
def delete_page(
    page_id: int,
    background_tasks: BackgroundTasks,
    force: bool = False,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    site_settings: Dict[str, str] = Depends(get_site_settings),
    notifier: WebhookNotifier = Depends(get_webhook_notifier),
):
    page = _get_page_or_404(db, page_id)
    if not permissions.can_delete(current_user, page.author_id):
        raise Forbidden("Sorry, you are not allowed to delete this page.", code="rest_cannot_delete")

    if not force:
        page = crud_post.trash_post(db, page)
        body = _render(page, site_settings)
        notifier.dispatch(background_tasks, "page.updated", body, site_settings)
        return body

    previous = _render(page, site_settings)
    crud_post.remove_post(db, page)
    notifier.dispatch(background_tasks, "page.deleted", previous, site_settings)
    return {"deleted": True, "previous": previous}
