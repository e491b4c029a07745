# test_terms.py
from unittest import mock

from sqlalchemy.exc import IntegrityError

CATEGORIES = "/wp-json/wp/v2/categories"
TAGS = "/wp-json/wp/v2/tags"
POSTS = "/wp-json/wp/v2/posts"


def test_default_category_is_protected(client, auth, admin):
    trash = client.delete(f"{CATEGORIES}/1", headers=auth(admin))
    assert trash.status_code == 501
    assert trash.json()["code"] == "rest_trash_not_supported"

    forced = client.delete(f"{CATEGORIES}/1", params={"force": True}, headers=auth(admin))
    assert forced.status_code == 403
    assert forced.json()["code"] == "rest_cannot_delete"


def test_create_category_and_duplicate_name(client, auth, admin):
    created = client.post(CATEGORIES, json={"name": "Travel Notes"}, headers=auth(admin))
    assert created.status_code == 201
    body = created.json()
    assert body["slug"] == "travel-notes"
    assert body["taxonomy"] == "category"
    assert body["count"] == 0

    duplicate = client.post(CATEGORIES, json={"name": "Travel Notes"}, headers=auth(admin))
    assert duplicate.status_code == 400
    assert duplicate.json()["code"] == "rest_term_exists"


def test_slug_collision_between_terms(client, auth, admin):
    client.post(CATEGORIES, json={"name": "Rust", "slug": "lang"}, headers=auth(admin))
    second = client.post(CATEGORIES, json={"name": "Go", "slug": "lang"}, headers=auth(admin)).json()
    assert second["slug"] == "lang-1"


def test_category_parent_must_exist(client, auth, admin):
    response = client.post(CATEGORIES, json={"name": "Child", "parent": 999}, headers=auth(admin))
    assert response.status_code == 400
    parent = client.post(CATEGORIES, json={"name": "Parent"}, headers=auth(admin)).json()
    child = client.post(CATEGORIES, json={"name": "Child", "parent": parent["id"]}, headers=auth(admin)).json()
    assert child["parent"] == parent["id"]
    listed = client.get(CATEGORIES, params={"parent": parent["id"]}).json()
    assert [term["name"] for term in listed] == ["Child"]


def test_term_writes_need_editorial_role(client, make_user, auth):
    author = make_user("author")
    response = client.post(CATEGORIES, json={"name": "Nope"}, headers=auth(author))
    assert response.status_code == 403
    assert client.post(CATEGORIES, json={"name": "Nope"}).status_code == 401


def test_authors_may_create_tags(client, make_user, auth):
    author = make_user("author")
    created = client.post(TAGS, json={"name": "python"}, headers=auth(author))
    assert created.status_code == 201
    assert created.json()["taxonomy"] == "post_tag"

    rename = client.put(f"{TAGS}/{created.json()['id']}", json={"name": "py"}, headers=auth(author))
    assert rename.status_code == 403
    assert client.post(TAGS, json={"name": "x"}, headers=auth(make_user("contributor"))).status_code == 403


def test_deleting_category_rehomes_posts(client, auth, admin):
    travel = client.post(CATEGORIES, json={"name": "Travel"}, headers=auth(admin)).json()
    post = client.post(POSTS, json={"title": "Trip", "status": "publish", "categories": [travel["id"]]},
                       headers=auth(admin)).json()
    assert post["categories"] == [travel["id"]]

    deleted = client.delete(f"{CATEGORIES}/{travel['id']}", params={"force": True}, headers=auth(admin))
    assert deleted.json()["deleted"] is True
    assert deleted.json()["previous"]["count"] == 1

    assert client.get(f"{POSTS}/{post['id']}").json()["categories"] == [1]
    assert client.get(f"{CATEGORIES}/1").json()["count"] == 1
    assert client.get(f"{CATEGORIES}/{travel['id']}").status_code == 404


def test_deleting_tag_detaches_posts(client, auth, admin):
    tag = client.post(TAGS, json={"name": "news"}, headers=auth(admin)).json()
    post = client.post(POSTS, json={"title": "Tagged", "status": "publish", "tags": [tag["id"]]},
                       headers=auth(admin)).json()
    assert client.get(f"{TAGS}/{tag['id']}").json()["count"] == 1

    client.delete(f"{TAGS}/{tag['id']}", params={"force": True}, headers=auth(admin))
    assert client.get(f"{POSTS}/{post['id']}").json()["tags"] == []


def test_list_filters(client, auth, admin):
    for name in ("Alpha", "Beta", "Gamma"):
        client.post(TAGS, json={"name": name}, headers=auth(admin))
    post = client.post(POSTS, json={"title": "P", "status": "publish", "tags": []}, headers=auth(admin)).json()

    names = [term["name"] for term in client.get(TAGS).json()]
    assert names == ["Alpha", "Beta", "Gamma"]
    assert [t["name"] for t in client.get(TAGS, params={"search": "amm"}).json()] == ["Gamma"]
    assert client.get(TAGS, params={"hide_empty": True}).json() == []
    assert client.get(TAGS, params={"post": post["id"]}).json() == []
    assert client.get(TAGS).headers["X-WP-Total"] == "3"


def test_update_category_webhook(client, auth, admin, enable_webhooks, webhook_calls):
    enable_webhooks("category.created,category.updated,category.deleted")
    created = client.post(CATEGORIES, json={"name": "Food"}, headers=auth(admin)).json()
    client.put(f"{CATEGORIES}/{created['id']}", json={"description": "Recipes"}, headers=auth(admin))
    client.delete(f"{CATEGORIES}/{created['id']}", params={"force": True}, headers=auth(admin))
    assert [call["json"]["event"] for call in webhook_calls] == [
        "category.created", "category.updated", "category.deleted",
    ]
    assert webhook_calls[1]["json"]["data"]["description"] == "Recipes"


def test_unique_race_on_create_is_a_conflict(client, auth, admin):
    race = IntegrityError("INSERT INTO tags", {}, Exception("UNIQUE constraint failed: tags.slug"))
    with mock.patch("headpress.crud.crud_term.create_term", side_effect=race):
        response = client.post(TAGS, json={"name": "Python"}, headers=auth(admin))
    assert response.status_code == 409
    assert response.json()["code"] == "rest_term_exists"
    assert client.post(TAGS, json={"name": "Python"}, headers=auth(admin)).status_code == 201
