# test_settings_cache.py
from unittest import mock

from sqlalchemy.exc import OperationalError

from headpress.crud import crud_option
from headpress.services.settings_cache import SettingsCache, public_settings

DEFAULTS = {"site_title": "Default", "site_url": "http://default.test", "webhook_secret": ""}


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_reads_store_and_merges_defaults(db):
    crud_option.set_option(db, "site_title", "Stored")
    cache = SettingsCache(DEFAULTS, ttl=60)
    values = cache.get(db)
    assert values["site_title"] == "Stored"
    assert values["site_url"] == "http://default.test"


def test_empty_stored_value_keeps_default(db):
    crud_option.set_option(db, "site_url", "")
    values = SettingsCache(DEFAULTS).get(db)
    assert values["site_url"] == "http://default.test"


def test_ttl_and_invalidate(db):
    clock = FakeClock()
    cache = SettingsCache(DEFAULTS, ttl=60, clock=clock)
    crud_option.set_option(db, "site_title", "First")
    assert cache.get(db)["site_title"] == "First"

    crud_option.set_option(db, "site_title", "Second")
    clock.now += 59
    assert cache.get(db)["site_title"] == "First"

    clock.now += 1
    assert cache.get(db)["site_title"] == "Second"

    crud_option.set_option(db, "site_title", "Third")
    cache.invalidate()
    assert cache.get(db)["site_title"] == "Third"


def test_returned_map_is_a_copy(db):
    cache = SettingsCache(DEFAULTS)
    cache.get(db)["site_title"] = "mutated"
    assert cache.get(db)["site_title"] != "mutated"


def test_store_failure_falls_back_to_defaults():
    session = mock.Mock()
    session.query.side_effect = OperationalError("SELECT", {}, Exception("database is down"))
    cache = SettingsCache(DEFAULTS)
    assert cache.get(session) == DEFAULTS
    session.rollback.assert_called_once()


def test_public_settings_hides_secrets():
    values = {"site_title": "x", "webhook_url": "https://h", "webhook_secret": "s"}
    assert public_settings(values) == {"site_title": "x"}
