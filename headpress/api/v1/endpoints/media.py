# headpress/api/v1/endpoints/media.py
import logging
import mimetypes
import os
import secrets
import time
from datetime import datetime, timezone
from typing import Dict, Literal, Optional

from fastapi import APIRouter, Depends, File, Form, Query, Request, Response, UploadFile, status
from sqlalchemy.orm import Session

from headpress.api.v1.common import base_url, set_pagination_headers
from headpress.core import permissions
from headpress.core.deps import get_current_user, get_object_store, get_site_settings
from headpress.core.errors import (
    Forbidden,
    InvalidParameter,
    NotFound,
    NotImplementedOperation,
    UpstreamFailure,
)
from headpress.crud import crud_media
from headpress.crud.crud_media import MediaQuery
from headpress.db.session import get_db
from headpress.models.media import Media
from headpress.models.user import User
from headpress.schemas.media import MediaUpdate
from headpress.services.formatter import format_media, normalize_base_url
from headpress.services.storage import ObjectStore, StorageError
from headpress.utils.image_utils import image_dimensions

logger = logging.getLogger(__name__)

router = APIRouter()

ALLOWED_MIME_TYPES = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
    "image/svg+xml": "svg",
    "video/mp4": "mp4",
    "video/webm": "webm",
    "application/pdf": "pdf",
}


def media_kind(mime_type: str) -> str:
    prefix = mime_type.split("/", 1)[0]
    return prefix if prefix in ("image", "video", "audio") else "file"


def storage_key(filename: str, mime_type: str, now: Optional[datetime] = None) -> str:
    """uploads/YYYY/MM/<epoch-ms>-<6 random chars>.<ext>"""
    now = now or datetime.now(timezone.utc)
    ext = os.path.splitext(filename or "")[1].lstrip(".").lower()
    if not ext:
        guessed = mimetypes.guess_extension(mime_type) or ""
        ext = guessed.lstrip(".") or ALLOWED_MIME_TYPES.get(mime_type, "bin")
    stamp = int(time.time() * 1000)
    return f"uploads/{now:%Y}/{now:%m}/{stamp}-{secrets.token_hex(3)}.{ext}"


def _get_media_or_404(db: Session, media_id: int) -> Media:
    media = crud_media.get_media(db, media_id)
    if media is None:
        raise NotFound("Invalid media ID.", code="rest_post_invalid_id")
    return media


@router.get("", summary="List media")
def read_media_list(
    request: Request,
    response: Response,
    page: int = Query(1, ge=1),
    per_page: int = Query(10, ge=1, le=100),
    media_type: Optional[Literal["image", "video", "audio", "file"]] = None,
    mime_type: Optional[str] = None,
    author: Optional[int] = None,
    search: Optional[str] = None,
    order: Literal["asc", "desc"] = "desc",
    db: Session = Depends(get_db),
    site_settings: Dict[str, str] = Depends(get_site_settings),
):
    params = MediaQuery(
        page=page,
        per_page=per_page,
        media_type=media_type,
        mime_type=mime_type,
        author=author,
        search=search,
        order=order,
    )
    result = crud_media.get_media_list(db, params)
    set_pagination_headers(response, request, result, site_settings, "media")
    return [format_media(item, base_url(site_settings)) for item in result.items]


@router.get("/{media_id}", summary="Get a media item")
def read_media(
    media_id: int,
    db: Session = Depends(get_db),
    site_settings: Dict[str, str] = Depends(get_site_settings),
):
    return format_media(_get_media_or_404(db, media_id), base_url(site_settings))


@router.post("", status_code=status.HTTP_201_CREATED, summary="Upload a file")
def upload_media(
    file: UploadFile = File(...),
    title: Optional[str] = Form(None),
    alt_text: Optional[str] = Form(None),
    caption: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    store: ObjectStore = Depends(get_object_store),
    site_settings: Dict[str, str] = Depends(get_site_settings),
):
    """
    Stores the file in the object store and records it. Image sizes are
    read from the file header when the format carries them.
    """
    if not permissions.can_upload(current_user):
        raise Forbidden("Sorry, you are not allowed to upload files.", code="rest_cannot_create")

    mime_type = (file.content_type or "").split(";")[0].strip().lower()
    if mime_type not in ALLOWED_MIME_TYPES:
        raise InvalidParameter(
            "Sorry, you are not allowed to upload this file type.", code="rest_invalid_file_type"
        )

    data = file.file.read()
    key = storage_key(file.filename, mime_type)
    try:
        store.put(key, data, mime_type)
    except StorageError as e:
        logger.error(f"Upload of {file.filename} failed: {e}", extra={"user_id": current_user.id})
        raise UpstreamFailure("The file could not be stored.", code="rest_upload_failed")

    width = height = None
    kind = media_kind(mime_type)
    if kind == "image":
        size = image_dimensions(data)
        if size:
            width, height = size

    filename = file.filename or key.rsplit("/", 1)[-1]
    media = crud_media.create_media(db, {
        "title": title or os.path.splitext(filename)[0] or filename,
        "filename": filename,
        "file_type": kind,
        "file_size": len(data),
        "mime_type": mime_type,
        "storage_key": key,
        "url": f"{normalize_base_url(base_url(site_settings))}/media/{key}",
        "alt_text": alt_text or "",
        "caption": caption or "",
        "description": description or "",
        "width": width,
        "height": height,
        "author_id": current_user.id,
    })
    logger.info("Media uploaded", extra={"user_id": current_user.id, "event": key})
    return format_media(media, base_url(site_settings))


@router.put("/{media_id}", summary="Update media metadata")
def update_media(
    media_id: int,
    media_in: MediaUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    site_settings: Dict[str, str] = Depends(get_site_settings),
):
    media = _get_media_or_404(db, media_id)
    if not permissions.can_edit_media(current_user, media.author_id):
        raise Forbidden("Sorry, you are not allowed to edit this item.", code="rest_cannot_edit")
    update_data = media_in.model_dump(exclude_unset=True)
    if not update_data.get("title"):
        update_data.pop("title", None)
    media = crud_media.update_media(db, media, update_data)
    return format_media(media, base_url(site_settings))


@router.delete("/{media_id}", summary="Delete a media item")
def delete_media(
    media_id: int,
    force: bool = False,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    store: ObjectStore = Depends(get_object_store),
    site_settings: Dict[str, str] = Depends(get_site_settings),
):
    media = _get_media_or_404(db, media_id)
    if not permissions.can_edit_media(current_user, media.author_id):
        raise Forbidden("Sorry, you are not allowed to delete this item.", code="rest_cannot_delete")
    if not force:
        raise NotImplementedOperation(
            "Media does not support trashing. Set 'force=true' to delete.",
            code="rest_trash_not_supported",
        )

    previous = format_media(media, base_url(site_settings))
    key = media.storage_key
    crud_media.delete_media(db, media)
    try:
        store.delete(key)
    except StorageError:
        logger.warning("Stored object %s was not removed", key, exc_info=True)
    return {"deleted": True, "previous": previous}
