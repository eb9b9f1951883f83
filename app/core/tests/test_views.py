"""
Tests for the health check endpoint.
"""

from __future__ import annotations

import pytest
from django.db import OperationalError

HEALTH_URL = "/health/"


@pytest.mark.django_db
class TestHealthCheck:
    """GET /health/"""

    def test_healthy(self, client):
        response = client.get(HEALTH_URL)

        assert response.status_code == 200
        assert response.json() == {
            "status": "healthy",
            "database": "connected",
            "channel_layer": "connected",
        }

    def test_database_down_is_unhealthy(self, client, mocker):
        connection = mocker.patch("core.views.connection")
        connection.cursor.side_effect = OperationalError("down")

        response = client.get(HEALTH_URL)

        assert response.status_code == 503
        assert response.json()["database"] == "disconnected"

    def test_channel_layer_down_still_serves(self, client, mocker):
        """
        A missing channel layer degrades health without failing it.

        Why it matters: Messages stay readable over REST when live updates
        are unavailable.
        """
        mocker.patch("core.views.get_channel_layer", return_value=None)

        response = client.get(HEALTH_URL)

        assert response.status_code == 200
        assert response.json()["channel_layer"] == "disconnected"
