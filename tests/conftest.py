"""Shared test fixtures for apitransport.

Provides settings and transport fixtures backed by
:class:`httpx.MockTransport`, environment isolation, output state
management, and a CLI runner.  Fixtures are discovered automatically by
pytest.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Callable

import httpx
import pytest

from apitransport.client import HttpxTransport
from apitransport.models import TransportSettings
from apitransport.output import OutputFormat, OutputManager, reset_output, set_output

Handler = Callable[[httpx.Request], httpx.Response]


# ---------------------------------------------------------------------------
# Async backend
# ---------------------------------------------------------------------------


@pytest.fixture
def anyio_backend() -> str:
    """Run ``pytest.mark.anyio`` tests on asyncio only."""
    return "asyncio"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> Iterator[None]:
    """Reset the global OutputManager after every test.

    The OutputManager holds Rich consoles bound to the streams that were
    current when it was created; CliRunner swaps those streams per
    invocation, so a fresh manager is needed for every test.
    """
    yield
    reset_output()


@pytest.fixture
def quiet_output() -> Iterator[OutputManager]:
    """Install a PLAIN-format, quiet OutputManager for the test."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# Environment isolation
# ---------------------------------------------------------------------------


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Remove every APITRANSPORT_* variable so host settings never leak in."""
    for var in [
        "APITRANSPORT_CONFIG",
        "APITRANSPORT_BASE_URL",
        "APITRANSPORT_API_VERSION",
        "APITRANSPORT_VERIFY_SSL",
        "APITRANSPORT_TIMEOUT",
        "APITRANSPORT_ENCODING",
        "APITRANSPORT_TOKEN",
    ]:
        monkeypatch.delenv(var, raising=False)
    return monkeypatch


# ---------------------------------------------------------------------------
# Settings and transport fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def settings() -> TransportSettings:
    """Default settings pointing at a fake API host."""
    return TransportSettings(base_url="https://api.example.com", api_version="4.0")


@pytest.fixture
def make_transport(settings: TransportSettings) -> Callable[[Handler], HttpxTransport]:
    """Factory building an HttpxTransport whose client answers with *handler*."""

    def _make(handler: Handler) -> HttpxTransport:
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return HttpxTransport(settings, client=client)

    return _make


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
