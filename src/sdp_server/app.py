"""Litestar application factory and CLI entry point."""

from __future__ import annotations

import argparse
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from litestar import Litestar
from litestar.datastructures import State
from litestar.di import Provide

from sdp_server.config import ConfigLoader, Settings
from sdp_server.controllers.health import HealthController
from sdp_server.controllers.robot import RobotController
from sdp_server.dao.command_dao import CommandDAO
from sdp_server.resources.health import HealthResource
from sdp_server.resources.robot import RobotResource
from sdp_server.services.battery_guard import BatteryGuard
from sdp_server.services.command_service import CommandService
from sdp_server.services.poll_service import PollService
from sdp_server.utils.db import Database
from sdp_server.utils.logging_config import LoggingConfig


class AppFactory:
    """Builds and configures the Litestar application. All methods are static."""

    @staticmethod
    def _build(settings: Settings) -> State:
        """Construct the full object graph once.

        pool → command_dao → command_service ─┬→ poll_service ─┐
                             battery_guard ───┘                ├→ RobotResource
                             command_service ──────────────────┘
        HealthResource (standalone, pings the ledger)
        """
        pool = Database.init(settings.database_url)
        command_dao = CommandDAO(pool)
        command_service = CommandService(
            command_dao,
            issuance_window_seconds=settings.issuance_window_seconds,
            instruction_validity_seconds=settings.instruction_validity_seconds,
            ledger_timeout_seconds=settings.ledger_timeout_seconds,
        )
        poll_service = PollService(
            command_service, BatteryGuard(settings.minimum_battery_level),
        )
        return State({
            "health": HealthResource(),
            "robot": RobotResource(
                poll_service=poll_service,
                command_service=command_service,
            ),
        })

    @staticmethod
    @asynccontextmanager
    async def _lifespan(app: Litestar) -> AsyncIterator[None]:
        """Create tables on startup, dispose engine on shutdown."""
        await Database.create_tables()
        yield
        await Database.close()

    @staticmethod
    def provide_health(state: State) -> HealthResource:
        """Provide the pre-built HealthResource from app state."""
        health_resource: HealthResource = state.health
        return health_resource

    @staticmethod
    def provide_robot(state: State) -> RobotResource:
        """Provide the pre-built RobotResource from app state."""
        robot_resource: RobotResource = state.robot
        return robot_resource

    @staticmethod
    def create_app(settings: Settings | None = None) -> Litestar:
        """Create and configure the Litestar application."""
        if settings is None:
            settings = ConfigLoader.load_settings()
        LoggingConfig.configure(settings.log_level)
        return Litestar(
            route_handlers=[HealthController, RobotController],
            state=AppFactory._build(settings),
            lifespan=[AppFactory._lifespan],
            dependencies={
                "health_resource": Provide(AppFactory.provide_health, sync_to_thread=False),
                "robot_resource": Provide(AppFactory.provide_robot, sync_to_thread=False),
            },
        )


# Public alias so conftest / uvicorn can call create_app() without knowing AppFactory.
create_app = AppFactory.create_app


class CLI:
    """Command-line interface for sdp-server."""

    @staticmethod
    def _build_parser() -> argparse.ArgumentParser:
        """Build the CLI argument parser."""
        parser = argparse.ArgumentParser(
            prog="sdp-server", description="Robot command authority",
        )
        subparsers = parser.add_subparsers(dest="command")

        run_parser = subparsers.add_parser("run", help="Start the server")
        run_parser.add_argument("--host", default="0.0.0.0")
        run_parser.add_argument("--port", type=int, default=8000)
        run_parser.add_argument("--reload", action="store_true", help="Auto-reload on file changes")

        return parser

    @staticmethod
    def main(argv: list[str] | None = None) -> None:
        """CLI entry point. Catches all exceptions and exits cleanly."""
        parser = CLI._build_parser()
        args = parser.parse_args(argv)

        if args.command is None:
            parser.print_help()
            sys.exit(1)

        try:
            if args.command == "run":
                import uvicorn

                uvicorn.run(
                    "sdp_server.app:create_app",
                    factory=True,
                    host=args.host,
                    port=args.port,
                    reload=args.reload,
                )
        except KeyboardInterrupt:
            pass
        except Exception as error:
            print(f"Error: {error}", file=sys.stderr)
            sys.exit(1)


if __name__ == "__main__":
    CLI.main()
