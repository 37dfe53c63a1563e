"""Health resource — reports whether the command ledger is reachable."""

from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError

from sdp_server.utils.db import Database

logger = logging.getLogger(__name__)


class HealthResource:
    """Health check operations."""

    async def check(self) -> dict[str, str]:
        """Return server and ledger status."""
        try:
            await Database.ping()
        except SQLAlchemyError as error:
            logger.warning("Health check could not reach the ledger: %s", error)
            return {"status": "degraded", "ledger": "unreachable"}
        return {"status": "ok", "ledger": "ok"}
