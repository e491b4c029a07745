# test_pages.py
API = "/wp-json/wp/v2/pages"


def _create(client, headers, **fields):
    fields.setdefault("title", "About")
    return client.post(API, json=fields, headers=headers)


def test_page_shape(client, auth, make_user):
    author = make_user("author", username="writer")
    body = _create(client, auth(author), status="publish").json()
    assert body["type"] == "page"
    assert body["slug"] == "about"
    assert body["author_name"] == "writer"
    assert body["parent"] == 0
    assert "categories" not in body and "tags" not in body
    assert body["link"] == "http://testserver/about"


def test_pages_and_posts_share_slugs(client, auth, admin):
    client.post("/wp-json/wp/v2/posts", json={"title": "About"}, headers=auth(admin))
    assert _create(client, auth(admin)).json()["slug"] == "about-1"


def test_parent_must_be_a_page(client, auth, admin):
    post = client.post("/wp-json/wp/v2/posts", json={"title": "News"}, headers=auth(admin)).json()
    assert _create(client, auth(admin), parent=post["id"]).status_code == 400

    parent = _create(client, auth(admin), status="publish").json()
    child = _create(client, auth(admin), title="Team", parent=parent["id"], status="publish").json()
    assert child["parent"] == parent["id"]
    assert client.put(f"{API}/{parent['id']}", json={"parent": parent["id"]},
                      headers=auth(admin)).status_code == 400

    children = client.get(API, params={"parent": parent["id"]}).json()
    assert [item["id"] for item in children] == [child["id"]]


def test_contributor_cannot_publish(client, auth, make_user):
    contributor = make_user("contributor")
    assert _create(client, auth(contributor), status="publish").status_code == 403
    draft = _create(client, auth(contributor)).json()
    response = client.put(f"{API}/{draft['id']}", json={"status": "publish"}, headers=auth(contributor))
    assert response.json()["code"] == "rest_cannot_publish"
    assert _create(client, auth(make_user("subscriber"))).status_code == 403


def test_default_page_size_is_twenty(client, auth, admin):
    for number in range(22):
        _create(client, auth(admin), title=f"Page {number}", status="publish")
    response = client.get(API)
    assert len(response.json()) == 20
    assert response.headers["X-WP-TotalPages"] == "2"


def test_page_events(client, auth, admin, enable_webhooks, webhook_calls):
    enable_webhooks("page.created,page.published,page.updated,page.deleted")
    page = _create(client, auth(admin)).json()
    client.put(f"{API}/{page['id']}", json={"status": "publish"}, headers=auth(admin))
    client.delete(f"{API}/{page['id']}", headers=auth(admin))
    client.delete(f"{API}/{page['id']}", params={"force": True}, headers=auth(admin))
    events = [call["json"]["event"] for call in webhook_calls]
    assert events == ["page.created", "page.published", "page.updated", "page.deleted"]
    assert webhook_calls[-1]["json"]["data"]["id"] == page["id"]


def test_unpublished_pages_are_hidden(client, auth, make_user):
    owner = make_user("author")
    draft = _create(client, auth(owner)).json()
    assert client.get(f"{API}/{draft['id']}").status_code == 404
    assert client.get(f"{API}/{draft['id']}", headers=auth(owner)).status_code == 200
    assert client.get(f"{API}/{draft['id']}", headers=auth(make_user("author"))).status_code == 404
