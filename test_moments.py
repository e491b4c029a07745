# test_moments.py
API = "/wp-json/wp/v2/moments"


def _create(client, headers, **fields):
    fields.setdefault("content", "Morning run by the river")
    return client.post(API, json=fields, headers=headers)


def test_any_signed_in_user_can_post(client, auth, make_user):
    reader = make_user("subscriber", username="reader")
    response = _create(client, auth(reader), media_urls=["https://cdn.example.com/a.jpg"])
    assert response.status_code == 201
    body = response.json()
    assert body["author_name"] == "reader"
    assert body["status"] == "publish"
    assert body["media_urls"] == ["https://cdn.example.com/a.jpg"]
    assert _create(client, {}).status_code == 401


def test_empty_content_is_rejected(client, auth, admin):
    response = _create(client, auth(admin), content="")
    assert response.status_code == 400
    assert response.json()["code"] == "rest_invalid_param"


def test_views_are_counted(client, auth, admin):
    moment = _create(client, auth(admin)).json()
    client.get(f"{API}/{moment['id']}")
    assert client.get(f"{API}/{moment['id']}").json()["view_count"] == 2


def test_drafts_stay_with_their_author(client, auth, make_user, admin):
    owner = make_user("subscriber")
    draft = _create(client, auth(owner), status="draft").json()
    assert client.get(f"{API}/{draft['id']}").status_code == 404
    assert client.get(f"{API}/{draft['id']}", headers=auth(owner)).status_code == 200
    assert client.get(API).json() == []
    listed = client.get(API, params={"status": "draft"}, headers=auth(admin)).json()
    assert [item["id"] for item in listed] == [draft["id"]]


def test_only_owner_or_admin_edits(client, auth, make_user, admin):
    owner = make_user("subscriber")
    moment = _create(client, auth(owner)).json()

    editor = make_user("editor")
    denied = client.put(f"{API}/{moment['id']}", json={"content": "x"}, headers=auth(editor))
    assert denied.status_code == 403

    updated = client.put(f"{API}/{moment['id']}", json={"content": "Evening run"}, headers=auth(owner))
    assert updated.json()["content"]["raw"] == "Evening run"
    by_admin = client.put(f"{API}/{moment['id']}", json={"status": "draft"}, headers=auth(admin))
    assert by_admin.json()["status"] == "draft"


def test_delete_trashes_unless_forced(client, auth, make_user):
    owner = make_user("subscriber")
    moment = _create(client, auth(owner)).json()

    trashed = client.delete(f"{API}/{moment['id']}", headers=auth(owner))
    assert trashed.json()["status"] == "trash"
    assert client.get(API).json() == []

    deleted = client.delete(f"{API}/{moment['id']}", params={"force": True}, headers=auth(owner))
    assert deleted.json()["deleted"] is True
    assert deleted.json()["previous"]["id"] == moment["id"]
    assert client.get(f"{API}/{moment['id']}", headers=auth(owner)).status_code == 404


def test_author_filter(client, auth, make_user):
    first, second = make_user(), make_user()
    _create(client, auth(first))
    _create(client, auth(second))
    listed = client.get(API, params={"author": second.id}).json()
    assert [item["author"] for item in listed] == [second.id]
