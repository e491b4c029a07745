"""
Categories and tags, plus the denormalized `count` kept on each term.

Both taxonomies share the same functions; a `Taxonomy` bundles the model with
its join table column so callers pass one object instead of three.
"""
from dataclasses import dataclass
from typing import Iterable, List, Optional

from sqlalchemy import delete, insert, or_, select, update
from sqlalchemy.orm import Session

from headpress.crud.query import ListParams, PageResult, apply_predicates, direction, paginate
from headpress.models.content import post_categories, post_tags
from headpress.models.taxonomy import DEFAULT_CATEGORY_ID, Category, Tag
from headpress.utils.slug import slugify, unique_slug


@dataclass(frozen=True)
class Taxonomy:
    name: str
    model: type
    table: object
    term_column: str

    @property
    def join_term(self):
        return self.table.c[self.term_column]

    @property
    def join_post(self):
        return self.table.c.post_id


CATEGORY = Taxonomy("category", Category, post_categories, "category_id")
TAG = Taxonomy("post_tag", Tag, post_tags, "tag_id")


class TermQuery(ListParams):
    search: Optional[str] = None
    slug: Optional[List[str]] = None
    include: Optional[List[int]] = None
    exclude: Optional[List[int]] = None
    post: Optional[int] = None
    parent: Optional[int] = None
    hide_empty: bool = False
    orderby: str = "name"
    order: str = "asc"


def _predicates(taxonomy: Taxonomy):
    model = taxonomy.model

    def search(params: TermQuery):
        if not params.search:
            return None
        pattern = f"%{params.search}%"
        return or_(model.name.ilike(pattern), model.description.ilike(pattern))

    def slug(params: TermQuery):
        return model.slug.in_(params.slug) if params.slug else None

    def include(params: TermQuery):
        return model.id.in_(params.include) if params.include else None

    def exclude(params: TermQuery):
        return model.id.notin_(params.exclude) if params.exclude else None

    def post(params: TermQuery):
        if params.post is None:
            return None
        attached = select(taxonomy.join_term).where(taxonomy.join_post == params.post)
        return model.id.in_(attached)

    def parent(params: TermQuery):
        if params.parent is None or not hasattr(model, "parent_id"):
            return None
        return model.parent_id == params.parent

    def hide_empty(params: TermQuery):
        return model.count > 0 if params.hide_empty else None

    return (search, slug, include, exclude, post, parent, hide_empty)


def get_term(db: Session, taxonomy: Taxonomy, term_id: int):
    return db.get(taxonomy.model, term_id)


def get_term_by_name(db: Session, taxonomy: Taxonomy, name: str):
    return db.query(taxonomy.model).filter(taxonomy.model.name == name).first()


def get_terms(db: Session, taxonomy: Taxonomy, params: TermQuery) -> PageResult:
    model = taxonomy.model
    query = apply_predicates(db.query(model), params, _predicates(taxonomy))
    ordering = {
        "id": model.id,
        "name": model.name,
        "slug": model.slug,
        "count": model.count,
    }
    column = ordering.get(params.orderby, model.name)
    return paginate(query, params, direction(column, params.order), model.id.asc())


def create_term(db: Session, taxonomy: Taxonomy, name: str, slug: Optional[str] = None,
                description: Optional[str] = None, **extra):
    candidate = slugify(slug) or slugify(name) or taxonomy.name
    term = taxonomy.model(
        name=name,
        slug=unique_slug(db, taxonomy.model, candidate),
        description=description or "",
        **extra,
    )
    db.add(term)
    db.commit()
    db.refresh(term)
    return term


def update_term(db: Session, taxonomy: Taxonomy, term, update_data: dict):
    if "slug" in update_data:
        candidate = slugify(update_data.pop("slug")) or slugify(update_data.get("name") or term.name)
        term.slug = unique_slug(db, taxonomy.model, candidate, exclude_id=term.id)
    for field, value in update_data.items():
        setattr(term, field, value)
    db.add(term)
    db.commit()
    db.refresh(term)
    return term


# --- Attachments & counters ------------------------------------------------

def get_term_ids(db: Session, taxonomy: Taxonomy, post_id: int) -> List[int]:
    rows = db.execute(
        select(taxonomy.join_term)
        .where(taxonomy.join_post == post_id)
        .order_by(taxonomy.join_term)
    )
    return [row[0] for row in rows]


def existing_term_ids(db: Session, taxonomy: Taxonomy, term_ids: Iterable[int]) -> List[int]:
    """Keeps the ids that exist, in request order and without duplicates."""
    wanted = list(dict.fromkeys(term_ids))
    if not wanted:
        return []
    found = {
        row[0] for row in db.query(taxonomy.model.id).filter(taxonomy.model.id.in_(wanted))
    }
    return [term_id for term_id in wanted if term_id in found]


def _bump(db: Session, taxonomy: Taxonomy, term_ids: Iterable[int], delta: int) -> None:
    model = taxonomy.model
    for term_id in term_ids:
        db.execute(update(model).where(model.id == term_id).values(count=model.count + delta))


def attach_terms(db: Session, taxonomy: Taxonomy, post_id: int, term_ids: Iterable[int]) -> None:
    """Links each term to the post and increments its count."""
    for term_id in term_ids:
        db.execute(insert(taxonomy.table).values({"post_id": post_id, taxonomy.term_column: term_id}))
        _bump(db, taxonomy, [term_id], +1)


def detach_all_terms(db: Session, taxonomy: Taxonomy, post_id: int) -> List[int]:
    """Unlinks every term from the post, decrementing each count."""
    previous = get_term_ids(db, taxonomy, post_id)
    _bump(db, taxonomy, previous, -1)
    db.execute(delete(taxonomy.table).where(taxonomy.join_post == post_id))
    return previous


def replace_terms(db: Session, taxonomy: Taxonomy, post_id: int, term_ids: Iterable[int]) -> None:
    """
    Two passes, not a diff: decrement everything attached, then increment
    everything requested. Re-attaching the same term nets to zero.
    Runs inside the caller's transaction.
    """
    detach_all_terms(db, taxonomy, post_id)
    attach_terms(db, taxonomy, post_id, term_ids)


def delete_term(db: Session, taxonomy: Taxonomy, term) -> None:
    """
    Hard delete. Posts left without any category fall back to the default one.
    """
    post_ids = [
        row[0] for row in db.execute(select(taxonomy.join_post).where(taxonomy.join_term == term.id))
    ]
    db.execute(delete(taxonomy.table).where(taxonomy.join_term == term.id))

    if taxonomy is CATEGORY:
        for post_id in post_ids:
            if not get_term_ids(db, CATEGORY, post_id):
                attach_terms(db, CATEGORY, post_id, [DEFAULT_CATEGORY_ID])

    db.delete(term)
    db.commit()
