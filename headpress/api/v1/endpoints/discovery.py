# headpress/api/v1/endpoints/discovery.py
"""
Site-level routes outside the wp/v2 namespace: the REST index and stored
media files.
"""
from typing import Dict

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from headpress.api.v1.common import base_url
from headpress.core.deps import get_object_store, get_site_settings
from headpress.core.errors import NotFound, UpstreamFailure
from headpress.services.formatter import api_url
from headpress.services.storage import ObjectStore, StorageError

router = APIRouter()

COLLECTIONS = (
    "posts", "pages", "categories", "tags", "comments", "media",
    "users", "links", "link-categories", "moments", "settings",
)


@router.get("/wp-json", summary="REST API index")
def api_index(site_settings: Dict[str, str] = Depends(get_site_settings)):
    site = base_url(site_settings)
    return {
        "name": site_settings.get("site_title", ""),
        "description": site_settings.get("site_description", ""),
        "url": site,
        "home": site,
        "namespaces": ["wp/v2"],
        "authentication": {"jwt": True},
        "routes": {
            f"/wp/v2/{collection}": {
                "namespace": "wp/v2",
                "_links": {"self": [{"href": api_url(site, collection)}]},
            }
            for collection in COLLECTIONS
        },
    }


@router.get("/media/{key:path}", summary="Serve a stored file", include_in_schema=False)
def serve_media(key: str, store: ObjectStore = Depends(get_object_store)):
    try:
        stored = store.get(key)
    except StorageError:
        raise UpstreamFailure("The file could not be read.", code="rest_media_unavailable")
    if stored is None:
        raise NotFound("File not found.", code="rest_media_not_found")
    return Response(
        content=stored.body,
        media_type=stored.content_type,
        headers={"Cache-Control": "public, max-age=31536000, immutable"},
    )
