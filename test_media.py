# test_media.py
import re
from datetime import datetime, timezone
from io import BytesIO
from unittest import mock

from PIL import Image

from headpress.api.v1.endpoints.media import media_kind, storage_key
from headpress.services.storage import StorageError

API = "/wp-json/wp/v2/media"


def _png(width=3, height=2) -> bytes:
    buffer = BytesIO()
    Image.new("RGB", (width, height), color=(200, 30, 30)).save(buffer, format="PNG")
    return buffer.getvalue()


def _upload(client, headers, data=None, filename="photo.png", content_type="image/png", **fields):
    return client.post(
        API,
        files={"file": (filename, data if data is not None else _png(), content_type)},
        data=fields,
        headers=headers,
    )


def test_storage_key_layout():
    key = storage_key("Holiday.JPG", "image/jpeg", now=datetime(2024, 7, 9, tzinfo=timezone.utc))
    assert re.fullmatch(r"uploads/2024/07/\d{13}-[0-9a-f]{6}\.jpg", key)
    assert storage_key("noext", "application/pdf").endswith(".pdf")


def test_media_kind():
    assert media_kind("image/png") == "image"
    assert media_kind("video/mp4") == "video"
    assert media_kind("application/pdf") == "file"


def test_upload_reads_image_size(client, auth, admin, object_store):
    response = _upload(client, auth(admin), title="Red dot", alt_text="A red dot")
    assert response.status_code == 201
    body = response.json()
    assert body["media_type"] == "image"
    assert body["mime_type"] == "image/png"
    assert body["media_details"]["width"] == 3
    assert body["media_details"]["height"] == 2
    assert body["title"]["rendered"] == "Red dot"
    assert body["alt_text"] == "A red dot"

    key = body["media_details"]["file"]
    assert body["source_url"] == f"http://testserver/media/{key}"
    assert object_store.get(key).body == _png()


def test_uploaded_file_is_served(client, auth, admin):
    key = _upload(client, auth(admin)).json()["media_details"]["file"]
    served = client.get(f"/media/{key}")
    assert served.status_code == 200
    assert served.headers["content-type"] == "image/png"
    assert "immutable" in served.headers["cache-control"]
    assert client.get("/media/uploads/none.png").status_code == 404


def test_title_defaults_to_filename(client, auth, admin):
    body = _upload(client, auth(admin), filename="sunset.png").json()
    assert body["title"]["rendered"] == "sunset"


def test_pdf_has_no_dimensions(client, auth, admin):
    body = _upload(client, auth(admin), data=b"%PDF-1.4 test", filename="doc.pdf",
                   content_type="application/pdf").json()
    assert body["media_type"] == "file"
    assert body["media_details"]["width"] is None


def test_rejects_unknown_type(client, auth, admin):
    response = _upload(client, auth(admin), data=b"MZ", filename="app.exe",
                       content_type="application/x-msdownload")
    assert response.status_code == 400
    assert response.json()["code"] == "rest_invalid_file_type"


def test_upload_roles(client, make_user, auth):
    assert _upload(client, auth(make_user("contributor"))).status_code == 403
    assert _upload(client, {}).status_code == 401
    assert _upload(client, auth(make_user("author"))).status_code == 201


def test_store_failure_is_reported(client, auth, admin, object_store):
    with mock.patch.object(object_store, "put", side_effect=StorageError("bucket unreachable")):
        response = _upload(client, auth(admin))
    assert response.status_code == 500
    assert response.json()["code"] == "rest_upload_failed"
    assert client.get(API).json() == []


def test_update_and_delete(client, make_user, auth, admin, object_store):
    owner = make_user("author")
    body = _upload(client, auth(owner)).json()
    key = body["media_details"]["file"]

    stranger = make_user("author")
    denied = client.put(f"{API}/{body['id']}", json={"caption": "x"}, headers=auth(stranger))
    assert denied.status_code == 403
    updated = client.put(f"{API}/{body['id']}", json={"caption": "Sunset"}, headers=auth(owner))
    assert updated.json()["caption"]["rendered"] == "Sunset"

    not_forced = client.delete(f"{API}/{body['id']}", headers=auth(owner))
    assert not_forced.status_code == 501

    deleted = client.delete(f"{API}/{body['id']}", params={"force": True}, headers=auth(admin))
    assert deleted.json()["deleted"] is True
    assert object_store.get(key) is None
    assert client.get(f"{API}/{body['id']}").status_code == 404


def test_featured_media_must_exist(client, auth, admin):
    response = client.post("/wp-json/wp/v2/posts", json={"title": "x", "featured_media": 42},
                           headers=auth(admin))
    assert response.status_code == 400

    media = _upload(client, auth(admin)).json()
    post = client.post("/wp-json/wp/v2/posts", json={"title": "x", "featured_media": media["id"]},
                       headers=auth(admin)).json()
    assert post["featured_media"] == media["id"]


def test_list_filters(client, auth, admin):
    _upload(client, auth(admin), filename="a.png")
    _upload(client, auth(admin), data=b"%PDF-1.4", filename="b.pdf", content_type="application/pdf")
    images = client.get(API, params={"media_type": "image"}).json()
    assert [item["slug"] for item in images] == ["a.png"]
    assert client.get(API).headers["X-WP-Total"] == "2"
