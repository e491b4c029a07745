from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from headpress.crud.query import ListParams, PageResult, apply_predicates, direction, paginate
from headpress.models.comment import Comment, CommentStatus
from headpress.models.content import Post


class CommentQuery(ListParams):
    post: Optional[int] = None
    parent: Optional[int] = None
    author: Optional[int] = None
    statuses: Optional[List[str]] = [CommentStatus.approved.value]
    search: Optional[str] = None
    per_page: int = 20


def _post(params: CommentQuery):
    return Comment.post_id == params.post if params.post is not None else None


def _parent(params: CommentQuery):
    return Comment.parent_id == params.parent if params.parent is not None else None


def _author(params: CommentQuery):
    return Comment.user_id == params.author if params.author is not None else None


def _status(params: CommentQuery):
    return Comment.status.in_(params.statuses) if params.statuses else None


def _search(params: CommentQuery):
    return Comment.content.ilike(f"%{params.search}%") if params.search else None


COMMENT_PREDICATES = (_post, _parent, _author, _status, _search)


def get_comment(db: Session, comment_id: int) -> Optional[Comment]:
    return db.get(Comment, comment_id)


def get_comments(db: Session, params: CommentQuery) -> PageResult:
    query = apply_predicates(db.query(Comment), params, COMMENT_PREDICATES)
    return paginate(
        query, params,
        direction(Comment.created_at, params.order),
        direction(Comment.id, params.order),
    )


def post_titles(db: Session, post_ids) -> dict:
    ids = set(post_ids)
    if not ids:
        return {}
    return dict(db.query(Post.id, Post.title).filter(Post.id.in_(ids)).all())


def _bump_comment_count(db: Session, post_id: int, delta: int) -> None:
    db.execute(
        update(Post)
        .where(Post.id == post_id)
        .values(comment_count=Post.comment_count + delta)
    )


def create_comment(db: Session, data: dict) -> Comment:
    """
    Stores the comment and increments the post's comment_count.
    """
    db_comment = Comment(**data)
    db.add(db_comment)
    _bump_comment_count(db, db_comment.post_id, +1)
    db.commit()
    db.refresh(db_comment)
    return db_comment


def update_comment(db: Session, db_comment: Comment, update_data: dict) -> Comment:
    for field, value in update_data.items():
        setattr(db_comment, field, value)
    db.add(db_comment)
    db.commit()
    db.refresh(db_comment)
    return db_comment


def trash_comment(db: Session, db_comment: Comment) -> Comment:
    db_comment.status = CommentStatus.trash.value
    db.commit()
    db.refresh(db_comment)
    return db_comment


def delete_comment(db: Session, db_comment: Comment) -> None:
    _bump_comment_count(db, db_comment.post_id, -1)
    # replies move up to the deleted comment's parent
    db.query(Comment).filter(Comment.parent_id == db_comment.id).update(
        {Comment.parent_id: db_comment.parent_id or 0}, synchronize_session=False
    )
    db.delete(db_comment)
    db.commit()
