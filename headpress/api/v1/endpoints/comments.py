# headpress/api/v1/endpoints/comments.py
import logging
from typing import Dict, Literal, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request, Response, status
from sqlalchemy.orm import Session

from headpress.api.v1.common import base_url, set_pagination_headers, visible_statuses
from headpress.core import permissions
from headpress.core.deps import (
    get_current_user,
    get_current_user_or_none,
    get_site_settings,
    get_webhook_notifier,
)
from headpress.core.errors import Forbidden, InvalidParameter, NotFound
from headpress.crud import crud_comment, crud_post
from headpress.crud.crud_comment import CommentQuery
from headpress.db.session import get_db
from headpress.models.comment import Comment, CommentStatus
from headpress.models.content import DiscussionStatus, PostStatus
from headpress.models.user import User
from headpress.schemas.comment import CommentCreate, CommentUpdate
from headpress.services.formatter import format_comment
from headpress.services.webhook import WebhookNotifier

logger = logging.getLogger(__name__)

router = APIRouter()

COMMENT_STATUSES = [item.value for item in CommentStatus]
APPROVED = CommentStatus.approved.value


def client_ip(request: Request) -> str:
    """
    The visitor's address: Cloudflare's header first, then the first
    X-Forwarded-For hop, then the socket peer.
    """
    forwarded = request.headers.get("cf-connecting-ip")
    if forwarded:
        return forwarded.strip()
    chain = request.headers.get("x-forwarded-for")
    if chain:
        return chain.split(",")[0].strip()
    return request.client.host if request.client else ""


def _get_comment_or_404(db: Session, comment_id: int) -> Comment:
    comment = crud_comment.get_comment(db, comment_id)
    if comment is None:
        raise NotFound("Invalid comment ID.", code="rest_comment_invalid")
    return comment


def _visible(comment: Comment, viewer: Optional[User]) -> bool:
    if comment.status == APPROVED:
        return True
    return permissions.can_edit_comment(viewer, comment.user_id)


@router.get("", summary="List comments")
def read_comments(
    request: Request,
    response: Response,
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    post: Optional[int] = None,
    parent: Optional[int] = None,
    author: Optional[int] = None,
    search: Optional[str] = None,
    status_filter: Optional[str] = Query(None, alias="status"),
    order: Literal["asc", "desc"] = "desc",
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_current_user_or_none),
    site_settings: Dict[str, str] = Depends(get_site_settings),
):
    params = CommentQuery(
        page=page,
        per_page=per_page,
        post=post,
        parent=parent,
        author=author,
        search=search,
        statuses=visible_statuses(status_filter, current_user, COMMENT_STATUSES, default=APPROVED),
        order=order,
    )
    result = crud_comment.get_comments(db, params)
    set_pagination_headers(response, request, result, site_settings, "comments")

    titles = crud_comment.post_titles(db, (comment.post_id for comment in result.items))
    privileged = permissions.can_moderate_comments(current_user)
    return [
        format_comment(
            comment,
            base_url(site_settings),
            is_admin=privileged,
            post_title=titles.get(comment.post_id),
        )
        for comment in result.items
    ]


@router.get("/{comment_id}", summary="Get a comment")
def read_comment(
    comment_id: int,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_current_user_or_none),
    site_settings: Dict[str, str] = Depends(get_site_settings),
):
    comment = _get_comment_or_404(db, comment_id)
    if not _visible(comment, current_user):
        raise NotFound("Invalid comment ID.", code="rest_comment_invalid")
    return format_comment(
        comment,
        base_url(site_settings),
        is_admin=permissions.can_moderate_comments(current_user),
    )


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create a comment")
def create_comment(
    request: Request,
    comment_in: CommentCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_current_user_or_none),
    site_settings: Dict[str, str] = Depends(get_site_settings),
    notifier: WebhookNotifier = Depends(get_webhook_notifier),
):
    """
    Open to guests. Comments from moderators are approved straight away,
    everyone else's wait in the pending queue.
    """
    post = crud_post.get_any_post(db, comment_in.post)
    if post is None or (
        post.status != PostStatus.publish.value
        and not permissions.can_edit(current_user, post.author_id)
    ):
        raise NotFound("Invalid post ID.", code="rest_post_invalid_id")
    if post.comment_status == DiscussionStatus.closed.value:
        raise Forbidden("Sorry, comments are closed for this item.", code="rest_comment_closed")

    if comment_in.parent:
        parent = crud_comment.get_comment(db, comment_in.parent)
        if parent is None or parent.post_id != post.id:
            raise InvalidParameter("Invalid parameter(s): parent", code="rest_comment_invalid")

    moderator = permissions.can_moderate_comments(current_user)
    comment = crud_comment.create_comment(db, {
        "post_id": post.id,
        "parent_id": comment_in.parent or 0,
        "author_name": comment_in.author_name,
        "author_email": comment_in.author_email,
        "author_url": comment_in.author_url or "",
        "author_ip": client_ip(request),
        "content": comment_in.content,
        "status": APPROVED if moderator else CommentStatus.pending.value,
        "user_id": current_user.id if current_user else None,
    })

    notifier.dispatch(
        background_tasks,
        "comment.created",
        format_comment(comment, base_url(site_settings), is_admin=True, post_title=post.title),
        site_settings,
    )
    logger.info("Comment created", extra={"event": "comment.created", "user_id": comment.user_id})
    return format_comment(comment, base_url(site_settings), is_admin=moderator, post_title=post.title)


@router.put("/{comment_id}", summary="Update or moderate a comment")
def update_comment(
    comment_id: int,
    comment_in: CommentUpdate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    site_settings: Dict[str, str] = Depends(get_site_settings),
    notifier: WebhookNotifier = Depends(get_webhook_notifier),
):
    comment = _get_comment_or_404(db, comment_id)
    if not permissions.can_edit_comment(current_user, comment.user_id):
        raise Forbidden("Sorry, you are not allowed to edit this comment.", code="rest_cannot_edit")

    update_data = comment_in.model_dump(exclude_unset=True, mode="json")
    for field in ("content", "author_name", "author_email", "status"):
        if update_data.get(field) is None:
            update_data.pop(field, None)
    if "status" in update_data and not permissions.can_moderate_comments(current_user):
        raise Forbidden("Sorry, you are not allowed to moderate comments.", code="rest_cannot_moderate")

    comment = crud_comment.update_comment(db, comment, update_data)
    body = format_comment(comment, base_url(site_settings), is_admin=True)
    notifier.dispatch(background_tasks, "comment.updated", body, site_settings)
    return format_comment(
        comment,
        base_url(site_settings),
        is_admin=permissions.can_moderate_comments(current_user),
    )


@router.delete("/{comment_id}", summary="Trash or delete a comment")
def delete_comment(
    comment_id: int,
    background_tasks: BackgroundTasks,
    force: bool = False,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    site_settings: Dict[str, str] = Depends(get_site_settings),
    notifier: WebhookNotifier = Depends(get_webhook_notifier),
):
    comment = _get_comment_or_404(db, comment_id)
    if not permissions.can_edit_comment(current_user, comment.user_id):
        raise Forbidden("Sorry, you are not allowed to delete this comment.", code="rest_cannot_delete")
    is_admin = permissions.can_moderate_comments(current_user)

    if not force:
        comment = crud_comment.trash_comment(db, comment)
        notifier.dispatch(
            background_tasks, "comment.updated",
            format_comment(comment, base_url(site_settings), is_admin=True), site_settings,
        )
        return format_comment(comment, base_url(site_settings), is_admin=is_admin)

    snapshot = format_comment(comment, base_url(site_settings), is_admin=True)
    previous = format_comment(comment, base_url(site_settings), is_admin=is_admin)
    crud_comment.delete_comment(db, comment)
    notifier.dispatch(background_tasks, "comment.deleted", snapshot, site_settings)
    return {"deleted": True, "previous": previous}
