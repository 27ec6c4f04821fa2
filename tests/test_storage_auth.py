# tests/test_storage_auth.py
import pytest

from boutique.auth import AUTHENTICATED, AdminSession
from boutique.database import ADMIN_AUTH_KEY, FileStorage, MemoryStorage, Storage


def test_file_storage_roundtrip(tmp_path):
    storage = FileStorage(tmp_path / "slots")
    assert storage.read("products") is None

    storage.write("products", "[]")
    storage.write("products", "[{\"id\": \"1\"}]")
    assert FileStorage(tmp_path / "slots").read("products") == "[{\"id\": \"1\"}]"
    assert [p.name for p in (tmp_path / "slots").iterdir()] == ["products.json"]

    storage.delete("products")
    storage.delete("products")
    assert storage.read("products") is None


def test_file_storage_treats_undecodable_slot_as_empty(tmp_path):
    (tmp_path / "products.json").write_bytes(b"\xff\xfe")
    assert FileStorage(tmp_path).read("products") is None


def test_storage_interface_is_abstract():
    with pytest.raises(TypeError):
        Storage()

    class ReadOnly(Storage):
        def read(self, key):
            return None

    with pytest.raises(TypeError):
        ReadOnly()


def test_memory_storage():
    storage = MemoryStorage({"a": "1"})
    assert storage.read("a") == "1"
    storage.delete("a")
    assert "a" not in storage
    assert storage.read("a") is None


def test_login_sets_session_flag():
    session = MemoryStorage()
    admin = AdminSession(session, "admin123")
    assert not admin.is_authenticated()

    assert admin.login("admin123")
    assert session.read(ADMIN_AUTH_KEY) == AUTHENTICATED
    # Another view in the same session sees the flag.
    assert AdminSession(session, "admin123").is_authenticated()


def test_failed_login_allows_retry():
    admin = AdminSession(MemoryStorage(), "admin123")
    assert not admin.login("wrong")
    assert not admin.login("")
    assert not admin.is_authenticated()
    assert admin.login("admin123")


def test_logout_clears_flag():
    session = MemoryStorage()
    admin = AdminSession(session, "admin123")
    admin.login("admin123")
    admin.logout()
    assert not admin.is_authenticated()
    assert ADMIN_AUTH_KEY not in session


def test_flag_does_not_outlive_the_session():
    AdminSession(MemoryStorage(), "admin123").login("admin123")
    assert not AdminSession(MemoryStorage(), "admin123").is_authenticated()
