# headpress/api/v1/endpoints/posts.py
import logging
from typing import Dict, Literal, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request, Response, status
from sqlalchemy.orm import Session

from headpress.api.v1.common import (
    base_url,
    commit_guard,
    parse_ids,
    post_slug,
    resolve_term_filter,
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
from headpress.crud.crud_term import CATEGORY, TAG
from headpress.db.session import get_db
from headpress.models.content import Post, PostStatus, PostType
from headpress.models.user import User
from headpress.schemas.post import PostCreate, PostUpdate
from headpress.services.formatter import format_post
from headpress.services.text_generator import TextGenerator, resolve_excerpt
from headpress.services.webhook import WebhookNotifier

logger = logging.getLogger(__name__)

router = APIRouter()

POST_STATUSES = [item.value for item in PostStatus]
WRITER_ROLES = permissions.EDITORIAL_ROLES | permissions.OWNER_ROLES
PUBLISH = PostStatus.publish.value


def _render(db: Session, post: Post, site_settings: Dict[str, str]) -> dict:
    categories, tags = crud_post.get_terms_for(db, post)
    return format_post(post, base_url(site_settings), categories, tags)


def _get_post_or_404(db: Session, post_id: int) -> Post:
    post = crud_post.get_post(db, post_id, PostType.post.value)
    if post is None:
        raise NotFound("Invalid post ID.", code="rest_post_invalid_id")
    return post


def _check_featured_media(db: Session, media_id: Optional[int]) -> None:
    if media_id and crud_media.get_media(db, media_id) is None:
        raise InvalidParameter("Invalid parameter(s): featured_media", code="rest_invalid_param")


@router.get("", summary="List posts")
def read_posts(
    request: Request,
    response: Response,
    page: int = Query(1, ge=1),
    per_page: int = Query(10, ge=1, le=100),
    status_filter: Optional[str] = Query(None, alias="status"),
    author: Optional[int] = None,
    slug: Optional[str] = None,
    categories: Optional[str] = None,
    tags: Optional[str] = None,
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
        post_type=PostType.post.value,
        statuses=visible_statuses(status_filter, current_user, POST_STATUSES),
        author=author,
        slug=split_csv(slug) or None,
        search=search,
        categories=resolve_term_filter(db, CATEGORY, categories),
        tags=resolve_term_filter(db, TAG, tags),
        include=parse_ids(include, "include"),
        exclude=parse_ids(exclude, "exclude"),
        orderby=orderby,
        order=order,
    )
    result = crud_post.get_posts(db, params)
    set_pagination_headers(response, request, result, site_settings, "posts")
    return [_render(db, post, site_settings) for post in result.items]


@router.get("/{post_id}", summary="Get a post")
def read_post(
    post_id: int,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_current_user_or_none),
    site_settings: Dict[str, str] = Depends(get_site_settings),
):
    """
    Public posts are visible to everyone. Any other status reads as missing
    unless the viewer may edit the post. Each read counts as a view.
    """
    post = _get_post_or_404(db, post_id)
    if post.status != PUBLISH and not permissions.can_edit(current_user, post.author_id):
        raise NotFound("Invalid post ID.", code="rest_post_invalid_id")
    crud_post.increment_view_count(db, post)
    return _render(db, post, site_settings)


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create a post")
def create_post(
    post_in: PostCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    site_settings: Dict[str, str] = Depends(get_site_settings),
    generator: TextGenerator = Depends(get_text_generator),
    notifier: WebhookNotifier = Depends(get_webhook_notifier),
):
    if current_user.role not in WRITER_ROLES:
        raise Forbidden("Sorry, you are not allowed to create posts as this user.", code="rest_cannot_create")
    if post_in.status == PostStatus.publish and not permissions.can_publish(current_user):
        raise Forbidden("Sorry, you are not allowed to publish posts.", code="rest_cannot_publish")
    _check_featured_media(db, post_in.featured_media)

    content = post_in.content or ""
    excerpt = post_in.excerpt
    if not excerpt and content:
        excerpt = resolve_excerpt(post_in.title, content, generator)

    data = {
        "title": post_in.title,
        "content": content,
        "excerpt": excerpt or "",
        "slug": post_slug(db, post_in.slug, post_in.title, generator, PostType.post.value),
        "status": post_in.status.value,
        "post_type": PostType.post.value,
        "featured_media_id": post_in.featured_media or None,
        "featured_image_url": post_in.featured_image_url,
        "comment_status": (
            post_in.comment_status.value if post_in.comment_status
            else site_settings.get("default_comment_status") or "open"
        ),
    }
    post = commit_guard(
        db, crud_post.create_post, data,
        author_id=current_user.id,
        categories=post_in.categories,
        tags=post_in.tags,
    )
    body = _render(db, post, site_settings)

    event = "post.published" if post.status == PUBLISH else "post.created"
    notifier.dispatch(background_tasks, event, body, site_settings)
    logger.info("Post created", extra={"user_id": current_user.id, "event": event})
    return body


@router.put("/{post_id}", summary="Update a post")
def update_post(
    post_id: int,
    post_in: PostUpdate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    site_settings: Dict[str, str] = Depends(get_site_settings),
    generator: TextGenerator = Depends(get_text_generator),
    notifier: WebhookNotifier = Depends(get_webhook_notifier),
):
    post = _get_post_or_404(db, post_id)
    if not permissions.can_edit(current_user, post.author_id):
        raise Forbidden("Sorry, you are not allowed to edit this post.", code="rest_cannot_edit")

    update_data = post_in.model_dump(exclude_unset=True, exclude={"categories", "tags"}, mode="json")
    for field in ("title", "status", "comment_status"):
        if update_data.get(field) is None:
            update_data.pop(field, None)

    was_published = post.status == PUBLISH
    becomes_published = update_data.get("status") == PUBLISH and not was_published
    if becomes_published and not permissions.can_publish(current_user):
        raise Forbidden("Sorry, you are not allowed to publish posts.", code="rest_cannot_publish")

    if "featured_media" in update_data:
        media_id = update_data.pop("featured_media")
        _check_featured_media(db, media_id)
        update_data["featured_media_id"] = media_id or None

    title = update_data.get("title", post.title)
    if "slug" in update_data:
        requested = update_data.pop("slug")
        update_data["slug"] = post_slug(
            db, requested, title, generator, PostType.post.value, exclude_id=post.id
        )
    if update_data.get("content") and "excerpt" not in update_data:
        update_data["excerpt"] = resolve_excerpt(title, update_data["content"], generator)

    fields = post_in.model_fields_set
    post = commit_guard(
        db, crud_post.update_post, post, update_data,
        categories=post_in.categories if "categories" in fields else None,
        tags=post_in.tags if "tags" in fields else None,
    )
    body = _render(db, post, site_settings)

    event = "post.published" if becomes_published else "post.updated"
    notifier.dispatch(background_tasks, event, body, site_settings)
    return body


@router.delete("/{post_id}", summary="Trash or delete a post")
def delete_post(
    post_id: int,
    background_tasks: BackgroundTasks,
    force: bool = False,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    site_settings: Dict[str, str] = Depends(get_site_settings),
    notifier: WebhookNotifier = Depends(get_webhook_notifier),
):
    post = _get_post_or_404(db, post_id)
    if not permissions.can_delete(current_user, post.author_id):
        raise Forbidden("Sorry, you are not allowed to delete this post.", code="rest_cannot_delete")

    if not force:
        post = crud_post.trash_post(db, post)
        body = _render(db, post, site_settings)
        notifier.dispatch(background_tasks, "post.updated", body, site_settings)
        return body

    previous = _render(db, post, site_settings)
    crud_post.remove_post(db, post)
    notifier.dispatch(background_tasks, "post.deleted", previous, site_settings)
    logger.info("Post deleted", extra={"user_id": current_user.id, "event": "post.deleted"})
    return {"deleted": True, "previous": previous}
