"""
Blogroll links and their categories. Each link category keeps a `count` of
the links filed under it.
"""
from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.orm import Session, joinedload

from headpress.crud.query import ListParams, PageResult, apply_predicates, paginate
from headpress.models.link import DEFAULT_LINK_CATEGORY_ID, Link, LinkCategory, LinkVisibility
from headpress.utils.slug import slugify, unique_slug


class LinkQuery(ListParams):
    category: Optional[int] = None
    visible: Optional[str] = LinkVisibility.yes.value
    per_page: int = 50


def _category(params: LinkQuery):
    return Link.category_id == params.category if params.category is not None else None


def _visible(params: LinkQuery):
    return Link.visible == params.visible if params.visible else None


LINK_PREDICATES = (_category, _visible)


def _bump(db: Session, category_id: int, delta: int) -> None:
    db.execute(
        update(LinkCategory)
        .where(LinkCategory.id == category_id)
        .values(count=LinkCategory.count + delta)
    )


# --- Links -----------------------------------------------------------------

def get_link(db: Session, link_id: int) -> Optional[Link]:
    return db.query(Link).options(joinedload(Link.category)).filter(Link.id == link_id).first()


def get_links(db: Session, params: LinkQuery) -> PageResult:
    query = apply_predicates(db.query(Link).options(joinedload(Link.category)), params, LINK_PREDICATES)
    return paginate(query, params, Link.sort_order.asc(), Link.created_at.desc(), Link.id.desc())


def create_link(db: Session, data: dict) -> Link:
    db_link = Link(**data)
    db.add(db_link)
    _bump(db, db_link.category_id, +1)
    db.commit()
    db.refresh(db_link)
    return db_link


def update_link(db: Session, db_link: Link, update_data: dict) -> Link:
    new_category = update_data.get("category_id")
    if new_category is not None and new_category != db_link.category_id:
        _bump(db, db_link.category_id, -1)
        _bump(db, new_category, +1)
    for field, value in update_data.items():
        setattr(db_link, field, value)
    db.add(db_link)
    db.commit()
    db.refresh(db_link)
    return db_link


def delete_link(db: Session, db_link: Link) -> None:
    _bump(db, db_link.category_id, -1)
    db.delete(db_link)
    db.commit()


# --- Link categories -------------------------------------------------------

def get_link_category(db: Session, category_id: int) -> Optional[LinkCategory]:
    return db.get(LinkCategory, category_id)


def get_link_categories(db: Session) -> List[LinkCategory]:
    return db.query(LinkCategory).order_by(LinkCategory.name.asc(), LinkCategory.id.asc()).all()


def create_link_category(db: Session, name: str, slug: Optional[str] = None,
                         description: Optional[str] = None) -> LinkCategory:
    candidate = slugify(slug) or slugify(name) or "links"
    category = LinkCategory(
        name=name,
        slug=unique_slug(db, LinkCategory, candidate),
        description=description or "",
    )
    db.add(category)
    db.commit()
    db.refresh(category)
    return category


def update_link_category(db: Session, category: LinkCategory, update_data: dict) -> LinkCategory:
    if "slug" in update_data:
        candidate = slugify(update_data.pop("slug")) or slugify(update_data.get("name") or category.name)
        category.slug = unique_slug(db, LinkCategory, candidate, exclude_id=category.id)
    for field, value in update_data.items():
        setattr(category, field, value)
    db.add(category)
    db.commit()
    db.refresh(category)
    return category


def delete_link_category(db: Session, category: LinkCategory) -> int:
    """
    Moves the category's links to the default category, then deletes it.
    Returns how many links were moved.
    """
    moved = db.query(Link).filter(Link.category_id == category.id).update(
        {Link.category_id: DEFAULT_LINK_CATEGORY_ID}, synchronize_session=False
    )
    if moved:
        _bump(db, DEFAULT_LINK_CATEGORY_ID, moved)
    db.delete(category)
    db.commit()
    return moved
