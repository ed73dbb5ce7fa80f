import os

# przed importem app.* - settings czytaja env przy imporcie
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CELERY_BROKER_URL"] = "memory://"
os.environ["CELERY_RESULT_BACKEND"] = "cache+memory://"
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "true"
os.environ["CHECKOUT_LOCK_ENABLED"] = "false"
os.environ["JWT_SECRET"] = "test-secret"

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from app.api import create_app
from app.data.database import Datastore
from app.data.models.product import ProductModel
from app.services.storage_service import ImageStorage


class InMemoryLockService:
    """Zamiennik LockService trzymajacy locki w slowniku."""

    def __init__(self):
        self.held = {}

    def acquire_checkout_lock(self, session_id: str, token: str, ttl: int) -> bool:
        if session_id in self.held:
            return False
        self.held[session_id] = token
        return True

    def release_checkout_lock(self, session_id: str, token: str) -> bool:
        if self.held.get(session_id) == token:
            del self.held[session_id]
            return True
        return False


@pytest.fixture()
def datastore():
    store = Datastore("sqlite://")
    store.connect()
    yield store
    store.dispose()


@pytest.fixture()
def file_datastore(tmp_path):
    """Baza w pliku: kazda sesja dostaje wlasne polaczenie."""
    store = Datastore(f"sqlite:///{tmp_path}/shop.db")
    store.connect()
    yield store
    store.dispose()


@pytest.fixture()
def db(datastore):
    session = datastore.session()
    yield session
    session.close()


@pytest.fixture()
def lock_service():
    return InMemoryLockService()


@pytest.fixture()
def storage(tmp_path):
    return ImageStorage(str(tmp_path / "uploads"))


@pytest.fixture()
def app(datastore, lock_service, storage):
    return create_app(datastore=datastore, lock_service=lock_service, storage=storage)


@pytest.fixture()
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def make_product(db):
    def _make(name="Keyboard", price="10.00", stock=10, category="accessories", description=None):
        product = ProductModel(
            name=name,
            description=description,
            price=Decimal(price),
            stock=stock,
            category=category,
        )
        db.add(product)
        db.commit()
        return product

    return _make


@pytest.fixture()
def register_user(client):
    def _register(email="admin@example.com", role="Admin", password="secret123", name="Admin"):
        response = client.post(
            "/auth/register",
            json={"name": name, "email": email, "password": password, "role": role},
        )
        assert response.status_code == 201, response.text
        return response.json()["token"]

    return _register


@pytest.fixture()
def admin_headers(register_user):
    return {"Authorization": f"Bearer {register_user()}"}


@pytest.fixture()
def user_headers(register_user):
    token = register_user(email="user@example.com", role="User", name="User")
    return {"Authorization": f"Bearer {token}"}
