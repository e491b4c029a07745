from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.orm import Session, joinedload

from headpress.crud.query import ListParams, PageResult, apply_predicates, direction, paginate
from headpress.models.moment import Moment, MomentStatus


class MomentQuery(ListParams):
    statuses: Optional[List[str]] = [MomentStatus.publish.value]
    author: Optional[int] = None


def _status(params: MomentQuery):
    return Moment.status.in_(params.statuses) if params.statuses else None


def _author(params: MomentQuery):
    return Moment.author_id == params.author if params.author is not None else None


MOMENT_PREDICATES = (_status, _author)


def get_moment(db: Session, moment_id: int) -> Optional[Moment]:
    return db.query(Moment).options(joinedload(Moment.author)).filter(Moment.id == moment_id).first()


def get_moments(db: Session, params: MomentQuery) -> PageResult:
    query = apply_predicates(db.query(Moment).options(joinedload(Moment.author)), params, MOMENT_PREDICATES)
    return paginate(
        query, params,
        direction(Moment.created_at, params.order),
        direction(Moment.id, params.order),
    )


def increment_view_count(db: Session, moment: Moment) -> None:
    db.execute(update(Moment).where(Moment.id == moment.id).values(view_count=Moment.view_count + 1))
    db.commit()
    db.refresh(moment)


def create_moment(db: Session, data: dict, author_id: int) -> Moment:
    db_moment = Moment(author_id=author_id, **data)
    db.add(db_moment)
    db.commit()
    db.refresh(db_moment)
    return db_moment


def update_moment(db: Session, db_moment: Moment, update_data: dict) -> Moment:
    for field, value in update_data.items():
        setattr(db_moment, field, value)
    db.add(db_moment)
    db.commit()
    db.refresh(db_moment)
    return db_moment


def trash_moment(db: Session, db_moment: Moment) -> Moment:
    return update_moment(db, db_moment, {"status": MomentStatus.trash.value})


def delete_moment(db: Session, db_moment: Moment) -> None:
    db.delete(db_moment)
    db.commit()
