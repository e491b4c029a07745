# headpress/crud/query.py
"""
List queries built from parameter objects.

Each list endpoint fills a pydantic parameter model; each crud module pairs
that model with a tuple of predicate functions. A predicate returns a
SQLAlchemy expression for its field, or None when the field is unset.
"""
import math
from dataclasses import dataclass
from typing import Any, Callable, Generic, Iterable, List, Optional, TypeVar

from pydantic import BaseModel, Field
from sqlalchemy.orm import Query

T = TypeVar("T")
Predicate = Callable[[Any], Optional[Any]]


class ListParams(BaseModel):
    page: int = Field(1, ge=1)
    per_page: int = Field(10, ge=1, le=100)
    order: str = "desc"

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per_page


@dataclass
class PageResult(Generic[T]):
    items: List[T]
    total: int
    page: int
    per_page: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.per_page) if self.per_page else 0


def apply_predicates(query: Query, params: BaseModel, predicates: Iterable[Predicate]) -> Query:
    for predicate in predicates:
        expression = predicate(params)
        if expression is not None:
            query = query.filter(expression)
    return query


def paginate(query: Query, params: ListParams, *order_by) -> PageResult:
    total = query.order_by(None).count()
    if order_by:
        query = query.order_by(*order_by)
    items = query.offset(params.offset).limit(params.per_page).all()
    return PageResult(items=items, total=total, page=params.page, per_page=params.per_page)


def direction(column, order: str):
    return column.asc() if (order or "").lower() == "asc" else column.desc()
