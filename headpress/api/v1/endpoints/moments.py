# headpress/api/v1/endpoints/moments.py
from typing import Dict, Literal, Optional

from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy.orm import Session

from headpress.api.v1.common import base_url, set_pagination_headers, visible_statuses
from headpress.core import permissions
from headpress.core.deps import get_current_user, get_current_user_or_none, get_site_settings
from headpress.core.errors import Forbidden, NotFound
from headpress.crud import crud_moment
from headpress.crud.crud_moment import MomentQuery
from headpress.db.session import get_db
from headpress.models.moment import Moment, MomentStatus
from headpress.models.user import User
from headpress.schemas.moment import MomentCreate, MomentUpdate
from headpress.services.formatter import format_moment

router = APIRouter()

MOMENT_STATUSES = [item.value for item in MomentStatus]
PUBLISH = MomentStatus.publish.value


def _get_moment_or_404(db: Session, moment_id: int) -> Moment:
    moment = crud_moment.get_moment(db, moment_id)
    if moment is None:
        raise NotFound("Invalid moment ID.", code="rest_moment_invalid")
    return moment


@router.get("", summary="List moments")
def read_moments(
    request: Request,
    response: Response,
    page: int = Query(1, ge=1),
    per_page: int = Query(10, ge=1, le=100),
    status_filter: Optional[str] = Query(None, alias="status"),
    author: Optional[int] = None,
    order: Literal["asc", "desc"] = "desc",
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_current_user_or_none),
    site_settings: Dict[str, str] = Depends(get_site_settings),
):
    params = MomentQuery(
        page=page,
        per_page=per_page,
        statuses=visible_statuses(status_filter, current_user, MOMENT_STATUSES),
        author=author,
        order=order,
    )
    result = crud_moment.get_moments(db, params)
    set_pagination_headers(response, request, result, site_settings, "moments")
    return [format_moment(moment, base_url(site_settings)) for moment in result.items]


@router.get("/{moment_id}", summary="Get a moment")
def read_moment(
    moment_id: int,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_current_user_or_none),
    site_settings: Dict[str, str] = Depends(get_site_settings),
):
    moment = _get_moment_or_404(db, moment_id)
    if moment.status != PUBLISH and not permissions.can_edit_moment(current_user, moment.author_id):
        raise NotFound("Invalid moment ID.", code="rest_moment_invalid")
    crud_moment.increment_view_count(db, moment)
    return format_moment(moment, base_url(site_settings))


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create a moment")
def create_moment(
    moment_in: MomentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    site_settings: Dict[str, str] = Depends(get_site_settings),
):
    moment = crud_moment.create_moment(db, moment_in.model_dump(mode="json"), author_id=current_user.id)
    return format_moment(moment, base_url(site_settings))


@router.put("/{moment_id}", summary="Update a moment")
def update_moment(
    moment_id: int,
    moment_in: MomentUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    site_settings: Dict[str, str] = Depends(get_site_settings),
):
    moment = _get_moment_or_404(db, moment_id)
    if not permissions.can_edit_moment(current_user, moment.author_id):
        raise Forbidden("Sorry, you are not allowed to edit this moment.", code="rest_cannot_edit")
    update_data = {
        field: value
        for field, value in moment_in.model_dump(exclude_unset=True, mode="json").items()
        if value is not None
    }
    moment = crud_moment.update_moment(db, moment, update_data)
    return format_moment(moment, base_url(site_settings))


@router.delete("/{moment_id}", summary="Trash or delete a moment")
def delete_moment(
    moment_id: int,
    force: bool = False,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    site_settings: Dict[str, str] = Depends(get_site_settings),
):
    moment = _get_moment_or_404(db, moment_id)
    if not permissions.can_edit_moment(current_user, moment.author_id):
        raise Forbidden("Sorry, you are not allowed to delete this moment.", code="rest_cannot_delete")
    if not force:
        moment = crud_moment.trash_moment(db, moment)
        return format_moment(moment, base_url(site_settings))
    previous = format_moment(moment, base_url(site_settings))
    crud_moment.delete_moment(db, moment)
    return {"deleted": True, "previous": previous}
