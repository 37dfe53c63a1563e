"""Settings model — pydantic-settings with env var support."""

from __future__ import annotations

from pydantic_settings import BaseSettings

ENV_PREFIX = "SDP_"


class Settings(BaseSettings):
    """Server settings.

    Use ``ConfigLoader.load_settings()`` to build with YAML + env var layering.
    Direct construction (e.g. in tests) skips YAML loading.

    The two time windows are tunables, not protocol constants.
    ``issuance_window_seconds`` bounds the clock skew accepted between a
    command's issue time and server time. ``instruction_validity_seconds``
    is how long an incomplete command stays actionable.
    """

    database_url: str = "sqlite+aiosqlite:///sdp.db"
    issuance_window_seconds: int = 60
    instruction_validity_seconds: int = 900
    minimum_battery_level: int = 50
    ledger_timeout_seconds: float = 5.0
    log_level: str = "INFO"

    model_config = {"env_prefix": ENV_PREFIX}
