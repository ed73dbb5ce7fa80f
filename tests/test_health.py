"""Health check and datastore readiness."""

import pytest
from fastapi.testclient import TestClient

from app.api import create_app
from app.data.database import Datastore, DatastoreState


class TestHealth:
    def test_healthy(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == {"state": "connected", "ready": True}
        assert "timestamp" in body

    def test_index(self, client):
        body = client.get("/").json()
        assert body["status"] == "running"
        assert body["endpoints"]["orders"] == "/orders"


@pytest.fixture()
def broken_client(tmp_path, lock_service, storage):
    datastore = Datastore(f"sqlite:///{tmp_path}/missing-dir/shop.db")
    app = create_app(datastore=datastore, lock_service=lock_service, storage=storage)
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c, datastore


class TestDatastoreUnavailable:
    def test_starts_but_reports_unhealthy(self, broken_client):
        client, datastore = broken_client
        assert datastore.state == DatastoreState.DISCONNECTED

        body = client.get("/health").json()
        assert body["status"] == "unhealthy"
        assert body["database"]["state"] == "disconnected"
        assert body["database"]["ready"] is False

    def test_catalog_reads_return_503(self, broken_client):
        client, _ = broken_client
        response = client.get("/products")
        assert response.status_code == 503
        assert response.json()["message"] == "Database connection not available"

        assert client.get("/products/1").status_code == 503

    def test_other_routes_map_driver_errors_to_503(self, broken_client):
        client, _ = broken_client
        response = client.get("/cart/sess-1")
        assert response.status_code == 503
        assert "message" in response.json()


class TestDatastoreLifecycle:
    def test_connect_check_dispose(self):
        store = Datastore("sqlite://")
        assert store.state == DatastoreState.DISCONNECTED
        assert store.connect() is True
        assert store.is_ready
        assert store.check() is True
        store.dispose()
        assert store.state == DatastoreState.DISCONNECTED
