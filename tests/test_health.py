"""Tests for the health endpoints."""

from sqlalchemy.exc import OperationalError

from pawpal_market import __version__
from pawpal_market.database import get_db
from pawpal_market.main import app


class BrokenSession:
    def execute(self, statement):
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))


class TestHealth:
    """Tests for /health and /."""

    def test_healthy(self, client):
        body = client.get("/health").json()

        assert body["status"] == "healthy"
        assert body["database"] == "healthy"
        assert body["service"] == "marketplace-service"

    def test_unreachable_database(self, client):
        app.dependency_overrides[get_db] = lambda: BrokenSession()

        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "unhealthy"
        assert response.json()["database"].startswith("unhealthy: ")

    def test_root(self, client):
        assert client.get("/").json()["version"] == __version__
