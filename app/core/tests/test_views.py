"""
Tests for the health check endpoint.
"""

from django.db import DatabaseError

from core import views


class TestHealthCheck:
    """Tests for GET /health/."""

    def test_healthy(self, client, db):
        response = client.get("/health/")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "database": "connected"}

    def test_database_down(self, client, db, monkeypatch):
        def unreachable():
            raise DatabaseError("connection refused")

        monkeypatch.setattr(views, "ping_database", unreachable)

        response = client.get("/health/")

        assert response.status_code == 503
        assert response.json() == {"status": "unhealthy", "database": "disconnected"}
