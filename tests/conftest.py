# tests/conftest.py
import pytest
from fastapi.testclient import TestClient

from boutique.cart import CartEngine
from boutique.catalog import CatalogStore
from boutique.config import Settings
from boutique.database import MemoryStorage
from boutique.main import create_app
from boutique.seed import seed_products

ADMIN_PASSWORD = "admin123"


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def session_storage():
    return MemoryStorage()


@pytest.fixture
def settings(tmp_path):
    return Settings(storage_dir=str(tmp_path / "store"), admin_password=ADMIN_PASSWORD)


@pytest.fixture
def catalog(storage):
    return CatalogStore.load(storage, seed=seed_products())


@pytest.fixture
def cart():
    return CartEngine()


@pytest.fixture
def client(storage, session_storage, settings):
    return TestClient(create_app(storage=storage, session_storage=session_storage, settings=settings))


@pytest.fixture
def admin_client(client):
    r = client.post("/admin/login", json={"password": ADMIN_PASSWORD})
    assert r.status_code == 200
    return client
