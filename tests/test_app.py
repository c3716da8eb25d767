"""CLI tests for the ``apitransport`` Typer application.

Requests are answered by :class:`httpx.MockTransport`: ``HttpxTransport``
is patched in :mod:`apitransport.app` with a factory that injects a mock
client.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Callable

import httpx
import pytest

from apitransport import __version__
from apitransport.app import app
from apitransport.client import HttpxTransport
from apitransport.models import TransportSettings

Handler = Callable[[httpx.Request], httpx.Response]

_HOST_ARGS = ["--base-url", "https://api.example.com", "--api-version", "4.0"]


@pytest.fixture
def mock_api(monkeypatch: pytest.MonkeyPatch, clean_env: pytest.MonkeyPatch) -> Callable[[Handler], None]:
    """Route every transport the CLI creates to *handler*."""

    def _install(handler: Handler) -> None:
        def factory(settings: TransportSettings) -> HttpxTransport:
            client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
            return HttpxTransport(settings, client=client)

        monkeypatch.setattr("apitransport.app.HttpxTransport", factory)

    return _install


class TestGlobalOptions:
    def test_version(self, cli_runner) -> None:
        result = cli_runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"apitransport {__version__}" in result.output

    def test_no_args_shows_help(self, cli_runner) -> None:
        result = cli_runner.invoke(app, [])
        assert "request" in result.output
        assert "classify" in result.output


class TestClassifyCommand:
    @pytest.mark.parametrize(
        ("content_type", "mode"),
        [("image/png", "binary"), ("image/svg+xml", "string"), ("foo/bar", "unknown")],
    )
    def test_modes(self, cli_runner, content_type: str, mode: str) -> None:
        result = cli_runner.invoke(app, ["--plain", "classify", content_type])
        assert result.exit_code == 0
        assert f"mode\t{mode}" in result.output

    def test_json(self, cli_runner) -> None:
        result = cli_runner.invoke(app, ["--json", "classify", "text/plain; charset=utf-8"])
        assert result.exit_code == 0
        assert json.loads(result.output) == {
            "content_type": "text/plain; charset=utf-8",
            "mode": "string",
            "utf8": True,
        }


class TestRequestCommand:
    def test_success(self, cli_runner, mock_api) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/api/4.0/users"
            assert request.url.params["limit"] == "10"
            assert "authorization" not in request.headers
            return httpx.Response(200, json=[{"id": 1, "name": "ada"}])

        mock_api(handler)
        result = cli_runner.invoke(
            app, ["--plain", "request", "GET", "/api/4.0/users", "-Q", "limit=10", *_HOST_ARGS]
        )
        assert result.exit_code == 0, result.output
        assert "1\tada" in result.output

    def test_token_and_body(self, cli_runner, mock_api) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.method == "POST"
            assert request.headers["authorization"] == "Bearer tok"
            assert json.loads(request.content) == {"name": "x"}
            return httpx.Response(201, json={"id": 5})

        mock_api(handler)
        result = cli_runner.invoke(
            app,
            ["--json", "request", "post", "/items", "--body", '{"name": "x"}', "--token", "tok", *_HOST_ARGS],
        )
        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == {"id": 5}

    def test_settings_from_env(self, cli_runner, mock_api, clean_env) -> None:
        clean_env.setenv("APITRANSPORT_BASE_URL", "https://env.example.com")
        clean_env.setenv("APITRANSPORT_API_VERSION", "4.0")

        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.host == "env.example.com"
            return httpx.Response(200, text="pong")

        mock_api(handler)
        result = cli_runner.invoke(app, ["--plain", "request", "GET", "/ping"])
        assert result.exit_code == 0, result.output
        assert "pong" in result.output

    def test_error_body(self, cli_runner, mock_api) -> None:
        mock_api(lambda request: httpx.Response(404, json={"message": "Not found"}))
        result = cli_runner.invoke(app, ["--plain", "request", "GET", "/missing", *_HOST_ARGS])
        assert result.exit_code == 4
        assert "Request failed" in result.output
        assert "message\tNot found" in result.output

    def test_network_error(self, cli_runner, mock_api) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        mock_api(handler)
        result = cli_runner.invoke(app, ["--plain", "request", "GET", "/x", *_HOST_ARGS])
        assert result.exit_code == 6
        assert "refused" in result.output

    def test_invalid_method(self, cli_runner, mock_api) -> None:
        mock_api(lambda request: httpx.Response(200))
        result = cli_runner.invoke(app, ["request", "FETCH", "/x", *_HOST_ARGS])
        assert result.exit_code == 2
        assert "Unsupported HTTP method" in result.output

    def test_bad_query(self, cli_runner, mock_api) -> None:
        mock_api(lambda request: httpx.Response(200))
        result = cli_runner.invoke(app, ["request", "GET", "/x", "-Q", "novalue", *_HOST_ARGS])
        assert result.exit_code == 2

    def test_missing_base_url(self, cli_runner, mock_api) -> None:
        mock_api(lambda request: httpx.Response(200))
        result = cli_runner.invoke(app, ["request", "GET", "/x", "--api-version", "4.0"])
        assert result.exit_code == 1
        assert "Invalid transport settings" in result.output


class TestStreamCommand:
    def test_writes_file(self, cli_runner, mock_api, tmp_path: Path) -> None:
        payload = b"\x89PNG" + bytes(range(256)) * 8
        mock_api(lambda request: httpx.Response(200, content=payload, headers={"content-type": "image/png"}))
        out = tmp_path / "out.png"
        result = cli_runner.invoke(
            app, ["--no-color", "stream", "GET", "/render", "--out", str(out), *_HOST_ARGS]
        )
        assert result.exit_code == 0, result.output
        assert out.read_bytes() == payload
        assert f"Wrote {len(payload)} bytes" in result.output

    def test_server_error(self, cli_runner, mock_api, tmp_path: Path) -> None:
        mock_api(lambda request: httpx.Response(500, json={"message": "exploded"}))
        out = tmp_path / "out.bin"
        result = cli_runner.invoke(app, ["stream", "GET", "/x", "-o", str(out), *_HOST_ARGS])
        assert result.exit_code == 5
        assert "exploded" in result.output
        assert not out.exists()

    def test_unauthorized(self, cli_runner, mock_api, tmp_path: Path) -> None:
        mock_api(lambda request: httpx.Response(401))
        result = cli_runner.invoke(app, ["stream", "GET", "/x", "-o", str(tmp_path / "o"), *_HOST_ARGS])
        assert result.exit_code == 3

    def test_out_required(self, cli_runner, mock_api) -> None:
        result = cli_runner.invoke(app, ["stream", "GET", "/x", *_HOST_ARGS])
        assert result.exit_code == 2
