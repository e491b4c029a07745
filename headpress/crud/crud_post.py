from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import delete, or_, select, update
from sqlalchemy.orm import Session

from headpress.crud import crud_term
from headpress.crud.crud_term import CATEGORY, TAG
from headpress.crud.query import ListParams, PageResult, apply_predicates, direction, paginate
from headpress.models.comment import Comment
from headpress.models.content import Post, PostMeta, PostStatus, PostType
from headpress.models.taxonomy import DEFAULT_CATEGORY_ID


class PostQuery(ListParams):
    """
    Filters for post and page listings. `statuses=None` means any status.
    """
    post_type: str = PostType.post.value
    statuses: Optional[List[str]] = [PostStatus.publish.value]
    author: Optional[int] = None
    slug: Optional[List[str]] = None
    search: Optional[str] = None
    categories: Optional[List[int]] = None
    tags: Optional[List[int]] = None
    parent: Optional[int] = None
    include: Optional[List[int]] = None
    exclude: Optional[List[int]] = None
    orderby: str = "date"


def _type(params: PostQuery):
    return Post.post_type == params.post_type


def _status(params: PostQuery):
    return Post.status.in_(params.statuses) if params.statuses else None


def _author(params: PostQuery):
    return Post.author_id == params.author if params.author is not None else None


def _slug(params: PostQuery):
    return Post.slug.in_(params.slug) if params.slug else None


def _search(params: PostQuery):
    if not params.search:
        return None
    pattern = f"%{params.search}%"
    return or_(Post.title.ilike(pattern), Post.content.ilike(pattern), Post.excerpt.ilike(pattern))


def _categories(params: PostQuery):
    if not params.categories:
        return None
    table = CATEGORY.table
    return Post.id.in_(select(table.c.post_id).where(table.c.category_id.in_(params.categories)))


def _tags(params: PostQuery):
    if not params.tags:
        return None
    table = TAG.table
    return Post.id.in_(select(table.c.post_id).where(table.c.tag_id.in_(params.tags)))


def _parent(params: PostQuery):
    return Post.parent_id == params.parent if params.parent is not None else None


def _include(params: PostQuery):
    return Post.id.in_(params.include) if params.include else None


def _exclude(params: PostQuery):
    return Post.id.notin_(params.exclude) if params.exclude else None


POST_PREDICATES = (
    _type, _status, _author, _slug, _search, _categories, _tags, _parent, _include, _exclude,
)

POST_ORDERING = {
    "date": Post.published_at,
    "modified": Post.updated_at,
    "title": Post.title,
    "id": Post.id,
    "slug": Post.slug,
}


def get_post(db: Session, post_id: int, post_type: str = PostType.post.value) -> Optional[Post]:
    return (
        db.query(Post)
        .filter(Post.id == post_id, Post.post_type == post_type)
        .first()
    )


def get_posts(db: Session, params: PostQuery) -> PageResult:
    query = apply_predicates(db.query(Post), params, POST_PREDICATES)
    column = POST_ORDERING.get(params.orderby, Post.published_at)
    order_by = [direction(column, params.order)]
    if params.orderby == "date":
        # drafts have no published_at
        order_by.append(direction(Post.created_at, params.order))
    order_by.append(direction(Post.id, params.order))
    return paginate(query, params, *order_by)


def increment_view_count(db: Session, post: Post) -> None:
    db.execute(update(Post).where(Post.id == post.id).values(view_count=Post.view_count + 1))
    db.commit()
    db.refresh(post)


def create_post(db: Session, data: dict, author_id: int,
                categories: Optional[List[int]] = None,
                tags: Optional[List[int]] = None) -> Post:
    """
    Inserts the post and its taxonomy links in one transaction.
    `published_at` is stamped when the post is created as published.
    """
    db_post = Post(author_id=author_id, **data)
    if db_post.status == PostStatus.publish.value:
        db_post.published_at = datetime.now(timezone.utc)
    db.add(db_post)
    db.flush()

    if db_post.post_type == PostType.post.value:
        category_ids = crud_term.existing_term_ids(db, CATEGORY, categories or [])
        crud_term.attach_terms(db, CATEGORY, db_post.id, category_ids or [DEFAULT_CATEGORY_ID])
        crud_term.attach_terms(db, TAG, db_post.id, crud_term.existing_term_ids(db, TAG, tags or []))

    db.commit()
    db.refresh(db_post)
    return db_post


def update_post(db: Session, db_post: Post, update_data: dict,
                categories: Optional[List[int]] = None,
                tags: Optional[List[int]] = None) -> Post:
    """
    Applies a partial update. `published_at` is only set the first time the
    post becomes published. Passing `categories`/`tags` replaces the whole set.
    """
    if (
        update_data.get("status") == PostStatus.publish.value
        and not db_post.published_at
    ):
        update_data["published_at"] = datetime.now(timezone.utc)

    for field, value in update_data.items():
        setattr(db_post, field, value)
    db_post.updated_at = datetime.now(timezone.utc)

    if categories is not None:
        category_ids = crud_term.existing_term_ids(db, CATEGORY, categories)
        crud_term.replace_terms(db, CATEGORY, db_post.id, category_ids or [DEFAULT_CATEGORY_ID])
    if tags is not None:
        crud_term.replace_terms(db, TAG, db_post.id, crud_term.existing_term_ids(db, TAG, tags))

    db.add(db_post)
    db.commit()
    db.refresh(db_post)
    return db_post


def trash_post(db: Session, db_post: Post) -> Post:
    db_post.status = PostStatus.trash.value
    db_post.updated_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(db_post)
    return db_post


def remove_post(db: Session, db_post: Post, commit: bool = True) -> None:
    """
    Hard delete: taxonomy links (with their counts), meta and comments go too.
    """
    crud_term.detach_all_terms(db, CATEGORY, db_post.id)
    crud_term.detach_all_terms(db, TAG, db_post.id)
    db.execute(delete(PostMeta).where(PostMeta.post_id == db_post.id))
    db.execute(delete(Comment).where(Comment.post_id == db_post.id))
    db.delete(db_post)
    if commit:
        db.commit()


def get_terms_for(db: Session, post: Post):
    """(category ids, tag ids) attached to the post."""
    return (
        crud_term.get_term_ids(db, CATEGORY, post.id),
        crud_term.get_term_ids(db, TAG, post.id),
    )


def get_any_post(db: Session, post_id: int) -> Optional[Post]:
    """Post or page, whichever has the id."""
    return db.get(Post, post_id)
