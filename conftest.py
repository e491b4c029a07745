# conftest.py
# Shared fixtures: an in-memory SQLite database, the app with its
# collaborators swapped for test doubles, and helpers to act as a user.
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("SITE_URL", "http://testserver")

import json
from itertools import count

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from headpress.core import deps, security
from headpress.core.config import settings
from headpress.crud import crud_option, crud_user
from headpress.db.init_db import init_db
from headpress.db.models_registry import Base
from headpress.db.session import get_db
from headpress.main import create_app
from headpress.models.user import UserRole
from headpress.schemas.user import UserCreate
from headpress.services.settings_cache import SettingsCache, default_settings
from headpress.services.storage import LocalObjectStore
from headpress.services.text_generator import NullTextGenerator
from headpress.services.webhook import WebhookNotifier


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    init_db(session)
    yield session
    session.close()


@pytest.fixture
def settings_cache():
    return SettingsCache(default_settings(settings), ttl=60)


@pytest.fixture
def object_store(tmp_path):
    return LocalObjectStore(str(tmp_path / "media"))


@pytest.fixture
def webhook_calls():
    """Requests received by the fake webhook endpoint."""
    return []


@pytest.fixture
def webhook_notifier(webhook_calls):
    def handler(request: httpx.Request) -> httpx.Response:
        webhook_calls.append({
            "url": str(request.url),
            "headers": dict(request.headers),
            "body": request.content,
            "json": json.loads(request.content),
        })
        return httpx.Response(200, json={"ok": True})

    return WebhookNotifier(timeout=1.0, transport=httpx.MockTransport(handler))


@pytest.fixture
def text_generator():
    return NullTextGenerator()


@pytest.fixture
def app(db, session_factory, settings_cache, object_store, webhook_notifier, text_generator):
    app = create_app()

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[deps.get_settings_cache] = lambda: settings_cache
    app.dependency_overrides[deps.get_object_store] = lambda: object_store
    app.dependency_overrides[deps.get_webhook_notifier] = lambda: webhook_notifier
    app.dependency_overrides[deps.get_text_generator] = lambda: text_generator
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


_sequence = count(1)


@pytest.fixture
def make_user(db):
    """Factory: make_user("editor") creates and returns an active user."""
    def _make_user(role: str = UserRole.subscriber.value, username: str = None,
                   email: str = None, password: str = "secret123"):
        number = next(_sequence)
        username = username or f"{role}{number}"
        user_in = UserCreate(
            username=username,
            email=email or f"{username}@example.com",
            password=password,
        )
        return crud_user.create_user(db, user_in, role=role)

    return _make_user


@pytest.fixture
def auth():
    """auth(user) -> headers carrying a bearer token for that user."""
    def _auth(user):
        return {"Authorization": f"Bearer {security.create_access_token(user)}"}

    return _auth


@pytest.fixture
def admin(make_user):
    return make_user(UserRole.administrator.value, username="admin")


@pytest.fixture
def enable_webhooks(db, settings_cache):
    """enable_webhooks("post.published,post.updated", secret="s3cret")"""
    def _enable(events: str, secret: str = "", url: str = "https://hooks.example.com/cms"):
        crud_option.set_options(db, {
            "webhook_url": url,
            "webhook_events": events,
            "webhook_secret": secret,
        })
        settings_cache.invalidate()

    return _enable
