# test_comments.py
from headpress.models.content import Post

API = "/wp-json/wp/v2/comments"


def _post(client, headers, **fields):
    fields.setdefault("title", "Commented")
    fields.setdefault("status", "publish")
    return client.post("/wp-json/wp/v2/posts", json=fields, headers=headers).json()


def _comment(client, post_id, headers=None, **fields):
    payload = {
        "post": post_id,
        "author_name": "Guest",
        "author_email": "guest@example.com",
        "content": "First!",
    }
    payload.update(fields)
    return client.post(API, json=payload, headers=headers or {})


def test_guest_comment_waits_for_moderation(client, auth, admin):
    post = _post(client, auth(admin))
    response = _comment(client, post["id"], headers={"X-Forwarded-For": "198.51.100.7, 10.0.0.1"})
    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "pending"
    assert body["author"] == 0
    assert "author_email" not in body

    # hidden from the public listing until approved
    assert client.get(API, params={"post": post["id"]}).json() == []
    assert client.get(f"{API}/{body['id']}").status_code == 404

    moderated = client.get(API, params={"post": post["id"], "status": "pending"}, headers=auth(admin)).json()
    assert moderated[0]["author_ip"] == "198.51.100.7"
    assert moderated[0]["author_email"] == "guest@example.com"
    assert moderated[0]["post_title"] == "Commented"


def test_moderator_comment_is_approved(client, auth, admin, make_user):
    post = _post(client, auth(admin))
    editor = make_user("editor")
    body = _comment(client, post["id"], headers=auth(editor)).json()
    assert body["status"] == "approved"
    assert body["author"] == editor.id


def test_cf_connecting_ip_wins(client, auth, admin):
    post = _post(client, auth(admin))
    _comment(client, post["id"], headers={"CF-Connecting-IP": "203.0.113.5", "X-Forwarded-For": "1.2.3.4"})
    listed = client.get(API, params={"status": "all"}, headers=auth(admin)).json()
    assert listed[0]["author_ip"] == "203.0.113.5"


def test_only_moderators_change_status(client, auth, admin, make_user):
    post = _post(client, auth(admin))
    member = make_user("subscriber")
    comment = _comment(client, post["id"], headers=auth(member)).json()

    edit = client.put(f"{API}/{comment['id']}", json={"content": "Edited"}, headers=auth(member))
    assert edit.status_code == 200
    assert edit.json()["content"]["rendered"] == "Edited"

    self_approve = client.put(f"{API}/{comment['id']}", json={"status": "approved"}, headers=auth(member))
    assert self_approve.status_code == 403
    assert self_approve.json()["code"] == "rest_cannot_moderate"

    approved = client.put(f"{API}/{comment['id']}", json={"status": "approved"}, headers=auth(admin))
    assert approved.json()["status"] == "approved"
    assert len(client.get(API, params={"post": post["id"]}).json()) == 1


def test_strangers_cannot_edit(client, auth, admin, make_user):
    post = _post(client, auth(admin))
    comment = _comment(client, post["id"], headers=auth(make_user("subscriber"))).json()
    response = client.put(f"{API}/{comment['id']}", json={"content": "x"}, headers=auth(make_user("author")))
    assert response.status_code == 403


def test_closed_post_rejects_comments(client, auth, admin):
    post = _post(client, auth(admin), comment_status="closed")
    response = _comment(client, post["id"])
    assert response.status_code == 403
    assert response.json()["code"] == "rest_comment_closed"


def test_comment_on_draft_is_not_found(client, auth, admin):
    post = _post(client, auth(admin), status="draft")
    assert _comment(client, post["id"]).status_code == 404
    assert _comment(client, 9999).status_code == 404


def test_parent_must_belong_to_same_post(client, auth, admin):
    first = _post(client, auth(admin), title="One")
    second = _post(client, auth(admin), title="Two")
    parent = _comment(client, first["id"], headers=auth(admin)).json()

    reply = _comment(client, first["id"], headers=auth(admin), parent=parent["id"])
    assert reply.json()["parent"] == parent["id"]

    stray = _comment(client, second["id"], parent=parent["id"])
    assert stray.status_code == 400
    assert stray.json()["code"] == "rest_comment_invalid"


def test_invalid_email_is_rejected(client, auth, admin):
    post = _post(client, auth(admin))
    response = _comment(client, post["id"], author_email="nope")
    assert response.status_code == 400


def test_comment_count_tracks_create_and_force_delete(client, auth, admin, db):
    post = _post(client, auth(admin))
    first = _comment(client, post["id"], headers=auth(admin)).json()
    _comment(client, post["id"], headers=auth(admin))
    db.expire_all()
    assert db.get(Post, post["id"]).comment_count == 2

    trashed = client.delete(f"{API}/{first['id']}", headers=auth(admin))
    assert trashed.json()["status"] == "trash"

    deleted = client.delete(f"{API}/{first['id']}", params={"force": True}, headers=auth(admin))
    assert deleted.json()["deleted"] is True
    assert deleted.json()["previous"]["author_email"] == "guest@example.com"
    db.expire_all()
    assert db.get(Post, post["id"]).comment_count == 1


def test_comment_webhook_payload_is_private(client, auth, admin, enable_webhooks, webhook_calls):
    enable_webhooks("comment.created")
    post = _post(client, auth(admin))
    _comment(client, post["id"])
    assert len(webhook_calls) == 1
    assert webhook_calls[0]["json"]["data"]["author_email"] == "guest@example.com"
