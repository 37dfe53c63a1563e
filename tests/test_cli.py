"""Tests for CLI entry point."""

from __future__ import annotations

import subprocess
import sys
from unittest.mock import patch

import pytest

from sdp_server.app import CLI


def test_parser_run_defaults() -> None:
    """Parser parses 'run' with defaults."""
    parser = CLI._build_parser()
    args = parser.parse_args(["run"])
    assert args.command == "run"
    assert args.host == "0.0.0.0"
    assert args.port == 8000
    assert args.reload is False


def test_cli_no_command_exits(capsys: pytest.CaptureFixture[str]) -> None:
    """CLI with no command prints help and exits 1."""
    with pytest.raises(SystemExit) as exc_info:
        CLI.main([])
    assert exc_info.value.code == 1
    assert "sdp-server" in capsys.readouterr().out


def test_cli_run_starts_uvicorn_factory() -> None:
    """'run' hands the app factory to uvicorn with the parsed options."""
    with patch("uvicorn.run") as run:
        CLI.main(["run", "--host", "127.0.0.1", "--port", "9001"])
    run.assert_called_once_with(
        "sdp_server.app:create_app",
        factory=True,
        host="127.0.0.1",
        port=9001,
        reload=False,
    )


def test_cli_run_error_exits(capsys: pytest.CaptureFixture[str]) -> None:
    """A startup failure is reported on stderr with exit code 1."""
    with patch("uvicorn.run", side_effect=RuntimeError("port in use")):
        with pytest.raises(SystemExit) as exc_info:
            CLI.main(["run"])
    assert exc_info.value.code == 1
    assert "port in use" in capsys.readouterr().err


def test_cli_entry_point_installed() -> None:
    """sdp-server module entry point is callable."""
    result = subprocess.run(
        [sys.executable, "-m", "sdp_server.app"],
        capture_output=True, text=True, timeout=5,
    )
    # Should print help (no command given) and exit 1
    assert result.returncode == 1
