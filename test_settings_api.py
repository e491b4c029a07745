# test_settings_api.py
API = "/wp-json/wp/v2/settings"


def test_public_settings_hide_secrets(client, enable_webhooks):
    enable_webhooks("post.published", secret="s3cret")
    body = client.get(API).json()
    assert body["site_title"] == "My Blog"
    assert body["webhook_events"] == "post.published"
    assert "webhook_secret" not in body
    assert "webhook_url" not in body


def test_admin_view_includes_secrets(client, auth, admin, make_user, enable_webhooks):
    enable_webhooks("post.published", secret="s3cret")
    body = client.get(f"{API}/admin", headers=auth(admin)).json()
    assert body["webhook_secret"] == "s3cret"
    assert client.get(f"{API}/admin", headers=auth(make_user("editor"))).status_code == 403
    assert client.get(f"{API}/admin").status_code == 401


def test_single_setting(client, auth, admin, enable_webhooks):
    enable_webhooks("post.published", secret="s3cret")
    assert client.get(f"{API}/site_title").json() == {"key": "site_title", "value": "My Blog"}
    assert client.get(f"{API}/webhook_secret").status_code == 404
    assert client.get(f"{API}/webhook_secret", headers=auth(admin)).json()["value"] == "s3cret"
    assert client.get(f"{API}/no_such_key").status_code == 404


def test_update_is_visible_immediately(client, auth, admin):
    response = client.put(API, json={"site_title": "Field Notes", "posts_per_page": 5},
                          headers=auth(admin))
    assert response.status_code == 200
    assert response.json()["posts_per_page"] == "5"
    assert client.get(API).json()["site_title"] == "Field Notes"
    assert client.get("/wp-json").json()["name"] == "Field Notes"


def test_update_single_setting(client, auth, admin):
    response = client.put(f"{API}/site_description", json={"value": "Notes from the field"},
                          headers=auth(admin))
    assert response.json() == {"key": "site_description", "value": "Notes from the field"}
    assert client.get(f"{API}/site_description").json()["value"] == "Notes from the field"


def test_updates_are_admin_only(client, auth, make_user):
    editor = make_user("editor")
    assert client.put(API, json={"site_title": "x"}, headers=auth(editor)).status_code == 403
    assert client.put(f"{API}/site_title", json={"value": "x"}).status_code == 401


def test_invalid_keys_are_rejected(client, auth, admin):
    assert client.put(API, json={}, headers=auth(admin)).status_code == 400
    response = client.put(API, json={"bad key!": "x"}, headers=auth(admin))
    assert response.json()["code"] == "rest_setting_invalid"


def test_enabling_webhooks_takes_effect_at_once(client, auth, admin, webhook_calls):
    client.put(API, json={
        "webhook_url": "https://hooks.example.com/cms",
        "webhook_events": "settings.updated",
        "webhook_secret": "s3cret",
    }, headers=auth(admin))
    assert len(webhook_calls) == 1
    call = webhook_calls[0]
    assert call["url"] == "https://hooks.example.com/cms"
    assert call["json"]["event"] == "settings.updated"
    assert call["json"]["data"] == {"webhook_events": "settings.updated"}
    assert "s3cret" not in call["body"].decode()


def test_webhook_url_must_be_http(client, auth, admin):
    for url in ("ftp://hooks.example.com/cms", "http://[::1", "not a url"):
        response = client.put(API, json={"webhook_url": url}, headers=auth(admin))
        assert response.status_code == 400
        assert response.json()["code"] == "rest_invalid_param"
    single = client.put(f"{API}/webhook_url", json={"value": "http://[::1"}, headers=auth(admin))
    assert single.status_code == 400
    cleared = client.put(f"{API}/webhook_url", json={"value": ""}, headers=auth(admin))
    assert cleared.status_code == 200
