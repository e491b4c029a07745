# test_users.py
from datetime import timedelta
from unittest import mock

import pytest
from sqlalchemy.exc import IntegrityError

from headpress.crud import crud_user
from headpress.core import security

API = "/wp-json/wp/v2/users"


def _register(client, username, password="secret123"):
    return client.post(f"{API}/register", json={
        "username": username,
        "email": f"{username}@example.com",
        "password": password,
    })


def test_first_registered_user_becomes_administrator(client):
    first = _register(client, "founder")
    assert first.status_code == 201
    assert first.json()["user"]["role"] == "administrator"

    second = _register(client, "reader")
    assert second.status_code == 201
    assert second.json()["user"]["role"] == "subscriber"


def test_register_returns_a_working_token(client):
    body = _register(client, "founder").json()
    assert body["user_nicename"] == "founder"
    me = client.get(f"{API}/me", headers={"Authorization": f"Bearer {body['token']}"})
    assert me.status_code == 200
    assert me.json()["email"] == "founder@example.com"


def test_register_rejects_duplicates(client):
    _register(client, "founder")
    again = _register(client, "founder")
    assert again.status_code == 400
    assert again.json()["code"] == "existing_user_login"


def test_register_validates_email(client):
    response = client.post(f"{API}/register", json={
        "username": "bad", "email": "not-an-email", "password": "secret123",
    })
    assert response.status_code == 400
    assert response.json()["code"] == "rest_invalid_param"
    assert response.json()["data"] == {"status": 400}


def test_login_by_username_or_email(client, make_user, db):
    user = make_user("author", username="writer")
    by_name = client.post(f"{API}/login", json={"username": "writer", "password": "secret123"})
    assert by_name.status_code == 200
    payload = security.decode_access_token(by_name.json()["token"])
    assert payload.userId == user.id
    assert payload.role == "author"

    by_email = client.post(f"{API}/login", json={"username": "writer@example.com", "password": "secret123"})
    assert by_email.status_code == 200


def test_login_failures(client, make_user, db):
    user = make_user("author", username="writer")
    wrong = client.post(f"{API}/login", json={"username": "writer", "password": "nope"})
    assert wrong.status_code == 401
    assert wrong.json()["code"] == "incorrect_password"

    unknown = client.post(f"{API}/login", json={"username": "ghost", "password": "secret123"})
    assert unknown.json()["code"] == "invalid_username"

    crud_user.deactivate_user(db, user)
    inactive = client.post(f"{API}/login", json={"username": "writer", "password": "secret123"})
    assert inactive.status_code == 401


def test_me_requires_a_token(client):
    response = client.get(f"{API}/me")
    assert response.status_code == 401
    assert response.json()["code"] == "rest_not_logged_in"

    bad = client.get(f"{API}/me", headers={"Authorization": "Bearer garbage"})
    assert bad.status_code == 401
    assert bad.json()["code"] == "rest_invalid_token"


def test_cookie_token_is_accepted(client, make_user):
    user = make_user("subscriber")
    cookie = f"auth_token={security.create_access_token(user)}"
    assert client.get(f"{API}/me", headers={"Cookie": cookie}).status_code == 200


def test_user_redaction_by_viewer(client, make_user, auth):
    subject = make_user("author")
    editor = make_user("editor")
    stranger = make_user("subscriber")

    anonymous = client.get(f"{API}/{subject.id}").json()
    assert "email" not in anonymous

    as_stranger = client.get(f"{API}/{subject.id}", headers=auth(stranger)).json()
    assert "email" not in as_stranger

    as_self = client.get(f"{API}/{subject.id}", headers=auth(subject)).json()
    assert as_self["email"] == subject.email

    as_editor = client.get(f"{API}/{subject.id}", headers=auth(editor)).json()
    assert as_editor["email"] == subject.email


def test_list_users_hides_emails_from_public(client, make_user, auth, admin):
    make_user("author")
    public = client.get(API)
    assert public.status_code == 200
    assert public.headers["X-WP-Total"] == "2"
    assert all("email" not in user for user in public.json())

    private = client.get(API, headers=auth(admin)).json()
    assert all("email" in user for user in private)


def test_only_admin_creates_users(client, make_user, auth, admin):
    payload = {"username": "newbie", "email": "newbie@example.com", "password": "secret123", "role": "editor"}
    editor = make_user("editor")
    assert client.post(API, json=payload, headers=auth(editor)).status_code == 403
    created = client.post(API, json=payload, headers=auth(admin))
    assert created.status_code == 201
    assert created.json()["role"] == "editor"


def test_role_change_is_admin_only(client, make_user, auth, admin):
    user = make_user("subscriber")
    self_promotion = client.put(f"{API}/{user.id}", json={"role": "administrator"}, headers=auth(user))
    assert self_promotion.status_code == 403
    assert self_promotion.json()["code"] == "rest_cannot_edit_roles"

    own_update = client.put(f"{API}/{user.id}", json={"display_name": "Renamed"}, headers=auth(user))
    assert own_update.json()["name"] == "Renamed"

    promoted = client.put(f"{API}/{user.id}", json={"role": "editor"}, headers=auth(admin))
    assert promoted.json()["role"] == "editor"


def test_cannot_edit_someone_else(client, make_user, auth):
    user = make_user("editor")
    other = make_user("author")
    response = client.put(f"{API}/{other.id}", json={"display_name": "x"}, headers=auth(user))
    assert response.status_code == 403


def test_password_update_is_rehashed(client, make_user, auth):
    user = make_user("subscriber", username="changer")
    client.put(f"{API}/{user.id}", json={"password": "brandnew1"}, headers=auth(user))
    login = client.post(f"{API}/login", json={"username": "changer", "password": "brandnew1"})
    assert login.status_code == 200


def test_delete_user_rules(client, make_user, auth, admin):
    assert client.delete(f"{API}/{admin.id}", params={"force": True}, headers=auth(admin)).json()["code"] == \
        "rest_user_cannot_delete"

    user = make_user("author")
    user_id = user.id
    deactivated = client.delete(f"{API}/{user_id}", headers=auth(admin))
    assert deactivated.json()["status"] == "inactive"
    assert client.get(f"{API}/{user_id}").status_code == 404

    removed = client.delete(f"{API}/{user_id}", params={"force": True}, headers=auth(admin))
    assert removed.json()["deleted"] is True
    assert client.get(f"{API}/{user_id}", headers=auth(admin)).status_code == 404


def test_delete_user_reassigns_posts(client, make_user, auth, admin):
    author = make_user("author")
    author_id = author.id
    post = client.post("/wp-json/wp/v2/posts", json={"title": "Kept", "status": "publish"},
                       headers=auth(author)).json()

    bad = client.delete(f"{API}/{author_id}", params={"force": True, "reassign": 9999}, headers=auth(admin))
    assert bad.json()["code"] == "rest_user_invalid_reassign"

    client.delete(f"{API}/{author_id}", params={"force": True, "reassign": admin.id}, headers=auth(admin))
    moved = client.get(f"/wp-json/wp/v2/posts/{post['id']}").json()
    assert moved["author"] == admin.id


def test_null_fields_leave_values_unchanged(client, make_user, auth, admin):
    user = make_user("author", email="keep@example.com")
    own = client.put(f"{API}/{user.id}", json={"email": None, "display_name": None}, headers=auth(user))
    assert own.status_code == 200
    assert own.json()["email"] == "keep@example.com"

    by_admin = client.put(f"{API}/{user.id}", json={"role": None}, headers=auth(admin))
    assert by_admin.status_code == 200
    assert by_admin.json()["role"] == "author"


def test_expired_token_is_rejected(client, make_user):
    user = make_user("subscriber")
    token = security.create_access_token(user, expires_delta=timedelta(seconds=-1))
    response = client.get(f"{API}/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.json()["code"] == "rest_invalid_token"


@pytest.mark.parametrize("token", ["garbage", "expired"])
def test_public_reads_ignore_bad_tokens(client, make_user, auth, admin, token):
    if token == "expired":
        token = security.create_access_token(admin, expires_delta=timedelta(seconds=-1))
    headers = {"Authorization": f"Bearer {token}"}
    make_user("author", email="hidden@example.com")
    client.post("/wp-json/wp/v2/posts", json={"title": "Draft"}, headers=auth(admin))

    posts = client.get("/wp-json/wp/v2/posts", params={"status": "draft"}, headers=headers)
    assert posts.status_code == 200
    assert posts.json() == []

    users = client.get(API, headers=headers)
    assert users.status_code == 200
    assert all("email" not in item for item in users.json())


def test_unique_race_on_register_is_a_conflict(client):
    race = IntegrityError("INSERT INTO users", {}, Exception("UNIQUE constraint failed: users.username"))
    with mock.patch("headpress.crud.crud_user.register_user", side_effect=race):
        response = _register(client, "racer")
    assert response.status_code == 409
    assert response.json()["code"] == "existing_user_login"


def test_search_matches_email_only_for_privileged_viewers(client, make_user, auth, admin):
    make_user("author", username="quiet", email="secret-address@example.com")
    public = client.get(API, params={"search": "secret-address"}).json()
    assert public == []

    privileged = client.get(API, params={"search": "secret-address"}, headers=auth(admin)).json()
    assert [item["slug"] for item in privileged] == ["quiet"]
    assert [item["slug"] for item in client.get(API, params={"search": "quie"}).json()] == ["quiet"]
