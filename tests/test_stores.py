import json

from airesume.storage import (
    AUTH_STORAGE_KEY,
    THEME_STORAGE_KEY,
    CookieStorage,
    KeyValueStorage,
    MemoryStorage,
)
from airesume.stores import AuthStore, ThemeStore


def test_auth_state_is_persisted_in_envelope(tmp_path):
    storage = KeyValueStorage(tmp_path)
    AuthStore(storage).login({"id": 1, "email": "a@b.test", "user_type": "employee"}, "tok")

    raw = json.loads((tmp_path / "auth-storage.json").read_text())
    assert raw == {
        "state": {
            "user": {"id": 1, "email": "a@b.test", "user_type": "employee"},
            "token": "tok",
            "isAuthenticated": True,
        },
        "version": 0,
    }

    restored = AuthStore(storage)
    assert restored.is_authenticated
    assert restored.current_user.email == "a@b.test"


def test_logout_removes_stored_session(tmp_path):
    storage = KeyValueStorage(tmp_path)
    store = AuthStore(storage)
    store.login({"id": 1}, "tok")
    store.logout()
    assert not storage.contains(AUTH_STORAGE_KEY)
    assert not AuthStore(storage).is_authenticated


def test_update_user_merges(tmp_path):
    store = AuthStore(KeyValueStorage(tmp_path))
    store.login({"id": 1, "first_name": "Sam", "email": "s@x.test"}, "tok")
    store.update_user({"first_name": "Samira"})
    assert store.user == {"id": 1, "first_name": "Samira", "email": "s@x.test"}


def test_corrupt_storage_is_ignored(tmp_path):
    (tmp_path / "auth-storage.json").write_text("{not json")
    store = AuthStore(KeyValueStorage(tmp_path))
    assert not store.is_authenticated
    assert store.token is None


def test_theme_follows_os_preference_when_unset(tmp_path):
    storage = KeyValueStorage(tmp_path)
    assert ThemeStore(storage).initialize(lambda: True) is True
    assert storage.get(THEME_STORAGE_KEY) == {"isDarkMode": True}


def test_stored_theme_wins_over_os_preference(tmp_path):
    storage = KeyValueStorage(tmp_path)
    storage.set(THEME_STORAGE_KEY, {"isDarkMode": False})
    assert ThemeStore(storage).initialize(lambda: True) is False


def test_theme_toggle(tmp_path):
    storage = KeyValueStorage(tmp_path)
    theme = ThemeStore(storage)
    assert theme.toggle() is True
    assert theme.toggle() is False
    assert storage.get(THEME_STORAGE_KEY) == {"isDarkMode": False}


class FakeCookieManager:
    """Stands in for ``extra_streamlit_components.CookieManager``."""

    def __init__(self, cookies=None):
        self.cookies = dict(cookies or {})
        self.component_keys = []

    def get(self, cookie):
        return self.cookies.get(cookie)

    def set(self, cookie, val, expires_at=None, key="set"):
        self.component_keys.append(key)
        self.cookies[cookie] = val

    def delete(self, cookie, key="delete"):
        self.component_keys.append(key)
        del self.cookies[cookie]


def test_memory_storage_is_private_to_each_instance():
    first, second = MemoryStorage(), MemoryStorage()
    AuthStore(first).login({"id": 1}, "tok")
    assert first.get(AUTH_STORAGE_KEY)["token"] == "tok"
    assert not second.contains(AUTH_STORAGE_KEY)
    assert not AuthStore(second).is_authenticated


def test_cookie_storage_round_trips_envelope():
    manager = FakeCookieManager()
    storage = CookieStorage(manager)
    AuthStore(storage).login({"id": 1, "user_type": "employer"}, "tok")

    assert json.loads(manager.cookies[AUTH_STORAGE_KEY])["version"] == 0
    assert AuthStore(CookieStorage(manager)).user_type == "employer"


def test_cookie_storage_accepts_parsed_cookie_values():
    manager = FakeCookieManager({THEME_STORAGE_KEY: {"state": {"isDarkMode": True}, "version": 0}})
    assert ThemeStore(CookieStorage(manager)).is_dark_mode is True


def test_cookie_storage_uses_unique_component_keys_per_run():
    manager = FakeCookieManager()
    storage = CookieStorage(manager)
    store = AuthStore(storage)
    store.login({"id": 1}, "tok")
    store.update_user({"first_name": "Sam"})
    store.logout()

    assert len(set(manager.component_keys)) == 3
    assert AUTH_STORAGE_KEY not in manager.cookies


def test_cookie_writes_before_bind_are_flushed():
    storage = CookieStorage()
    theme = ThemeStore(storage)
    theme.set_theme(True)
    assert storage.get(THEME_STORAGE_KEY) == {"isDarkMode": True}
    assert not storage.loaded

    manager = FakeCookieManager({"_streamlit_xsrf": "x"})
    storage.bind(manager)

    assert storage.loaded
    assert json.loads(manager.cookies[THEME_STORAGE_KEY])["state"] == {"isDarkMode": True}


def test_cookie_remove_of_missing_key_is_a_no_op():
    manager = FakeCookieManager()
    CookieStorage(manager).remove(AUTH_STORAGE_KEY)
    assert manager.component_keys == []
