"""Tests for health check endpoint."""

from unittest.mock import patch

import pytest
from litestar import Litestar
from litestar.testing import TestClient
from sqlalchemy.exc import OperationalError

from sdp_server.resources.health import HealthResource
from sdp_server.utils.db import Database


def test_health_returns_ok(client: TestClient[Litestar]) -> None:
    """GET /api/health returns status ok with a reachable ledger."""
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "ledger": "ok"}


@pytest.mark.asyncio
async def test_health_reports_unreachable_ledger() -> None:
    """A ledger connection error degrades the status instead of raising."""
    error = OperationalError("SELECT 1", {}, Exception("down"))
    with patch.object(Database, "ping", side_effect=error):
        assert await HealthResource().check() == {
            "status": "degraded", "ledger": "unreachable",
        }
