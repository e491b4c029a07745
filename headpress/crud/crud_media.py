from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from headpress.crud.query import ListParams, PageResult, apply_predicates, direction, paginate
from headpress.models.content import Post
from headpress.models.media import Media


class MediaQuery(ListParams):
    media_type: Optional[str] = None
    mime_type: Optional[str] = None
    author: Optional[int] = None
    search: Optional[str] = None


def _media_type(params: MediaQuery):
    return Media.file_type == params.media_type if params.media_type else None


def _mime_type(params: MediaQuery):
    return Media.mime_type == params.mime_type if params.mime_type else None


def _author(params: MediaQuery):
    return Media.author_id == params.author if params.author is not None else None


def _search(params: MediaQuery):
    if not params.search:
        return None
    pattern = f"%{params.search}%"
    return or_(Media.title.ilike(pattern), Media.filename.ilike(pattern))


MEDIA_PREDICATES = (_media_type, _mime_type, _author, _search)


def get_media(db: Session, media_id: int) -> Optional[Media]:
    return db.get(Media, media_id)


def get_media_list(db: Session, params: MediaQuery) -> PageResult:
    query = apply_predicates(db.query(Media), params, MEDIA_PREDICATES)
    return paginate(
        query, params,
        direction(Media.created_at, params.order),
        direction(Media.id, params.order),
    )


def create_media(db: Session, data: dict) -> Media:
    db_media = Media(**data)
    db.add(db_media)
    db.commit()
    db.refresh(db_media)
    return db_media


def update_media(db: Session, db_media: Media, update_data: dict) -> Media:
    for field, value in update_data.items():
        setattr(db_media, field, value)
    db.add(db_media)
    db.commit()
    db.refresh(db_media)
    return db_media


def delete_media(db: Session, db_media: Media) -> None:
    db.query(Post).filter(Post.featured_media_id == db_media.id).update(
        {Post.featured_media_id: None}, synchronize_session=False
    )
    db.delete(db_media)
    db.commit()
