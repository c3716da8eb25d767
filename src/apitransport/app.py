"""Typer application and CLI entry point for apitransport.

The CLI is a thin driver over :class:`~apitransport.client.HttpxTransport`
for trying an API by hand:

* ``apitransport request GET /users -q limit=10`` -- buffered request,
  decoded body on stdout.
* ``apitransport stream GET /files/1 --out file.bin`` -- streamed download.
* ``apitransport classify "image/svg+xml"`` -- show how a content type is
  decoded.

Settings come from :func:`~apitransport.config.resolve_settings`, so a
settings file and ``APITRANSPORT_*`` variables work as well as flags.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional

import typer

from apitransport import __version__
from apitransport.auth import StaticTokenSession
from apitransport.client import HttpxTransport
from apitransport.config import resolve_settings
from apitransport.exceptions import ApiTransportError, InvalidUsageError
from apitransport.exit_codes import EXIT_CONNECTION_ERROR, EXIT_REQUEST_FAILED
from apitransport.models import SDKError, SDKResponse, TransportSettings
from apitransport.output import OutputFormat, OutputManager, get_output, set_output
from apitransport.transport import is_utf8, response_mode

app = typer.Typer(
    name="apitransport",
    help="Send API requests through the pluggable transport.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"apitransport {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version and exit."
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-essential output."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
) -> None:
    """Initialise output and logging before every sub-command."""
    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN
    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            stream=sys.stderr,
            format="%(levelname)s %(name)s: %(message)s",
        )


# ------------------------------------------------------------------ #
# Shared options
# ------------------------------------------------------------------ #

_query_option = typer.Option(
    None, "--query", "-Q", help="Query parameter as key=value. Repeatable."
)
_body_option = typer.Option(None, "--body", "-b", help="Request body; parsed as JSON when possible.")
_token_option = typer.Option(
    None, "--token", envvar="APITRANSPORT_TOKEN", help="Bearer token for the request."
)
_config_option = typer.Option(None, "--config", "-c", help="JSON settings file.")
_base_url_option = typer.Option(None, "--base-url", help="Base URL of the API host.")
_api_version_option = typer.Option(None, "--api-version", help="API version.")
_timeout_option = typer.Option(None, "--timeout", help="Request timeout in seconds.")
_insecure_option = typer.Option(False, "--insecure", "-k", help="Skip SSL certificate verification.")


def _parse_query(items: Optional[list[str]]) -> dict[str, str]:
    """Turn ``key=value`` strings into a query mapping."""
    query: dict[str, str] = {}
    for item in items or []:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise InvalidUsageError(f"Query parameter must be key=value, got {item!r}")
        query[key] = value
    return query


def _parse_body(body: Optional[str]) -> Any:
    """Parse *body* as JSON if possible, returning the raw string on failure."""
    if body is None:
        return None
    try:
        return json.loads(body)
    except (json.JSONDecodeError, TypeError):
        return body


def _settings(
    config: Optional[Path],
    base_url: Optional[str],
    api_version: Optional[str],
    timeout: Optional[float],
    insecure: bool,
) -> TransportSettings:
    return resolve_settings(
        path=config,
        base_url=base_url,
        api_version=api_version,
        timeout=timeout,
        verify_ssl=False if insecure else None,
    )


def _fail(exc: ApiTransportError) -> typer.Exit:
    get_output().error(str(exc))
    return typer.Exit(code=exc.exit_code)


# ------------------------------------------------------------------ #
# Commands
# ------------------------------------------------------------------ #


@app.command("request")
def request_command(
    method: str = typer.Argument(..., help="HTTP method."),
    path: str = typer.Argument(..., help="Path relative to the base URL, or an absolute URL."),
    query: Optional[list[str]] = _query_option,
    body: Optional[str] = _body_option,
    token: Optional[str] = _token_option,
    config: Optional[Path] = _config_option,
    base_url: Optional[str] = _base_url_option,
    api_version: Optional[str] = _api_version_option,
    timeout: Optional[float] = _timeout_option,
    insecure: bool = _insecure_option,
) -> None:
    """Send a request and print the decoded response body.

    Exits 4 when the API returns an error body and 6 when the request
    itself fails.
    """
    output = get_output()
    try:
        settings = _settings(config, base_url, api_version, timeout, insecure)
        params = _parse_query(query)
    except ApiTransportError as exc:
        raise _fail(exc) from exc

    async def _run() -> SDKResponse[Any, Any]:
        async with HttpxTransport(settings) as transport:
            session = StaticTokenSession(settings, transport, token) if token else None
            return await transport.request(
                method,
                path,
                query_params=params,
                body=_parse_body(body),
                authenticator=session.authenticate if session else None,
            )

    try:
        result = asyncio.run(_run())
    except ValueError as exc:
        raise _fail(InvalidUsageError(str(exc))) from exc

    if result.ok:
        output.print_value(result.value)
        return

    output.print_failure(result.error)
    if isinstance(result.error, SDKError):
        raise typer.Exit(code=EXIT_CONNECTION_ERROR)
    raise typer.Exit(code=EXIT_REQUEST_FAILED)


@app.command("stream")
def stream_command(
    method: str = typer.Argument(..., help="HTTP method."),
    path: str = typer.Argument(..., help="Path relative to the base URL, or an absolute URL."),
    out: Path = typer.Option(..., "--out", "-o", help="File to write the response body to."),
    query: Optional[list[str]] = _query_option,
    body: Optional[str] = _body_option,
    token: Optional[str] = _token_option,
    config: Optional[Path] = _config_option,
    base_url: Optional[str] = _base_url_option,
    api_version: Optional[str] = _api_version_option,
    timeout: Optional[float] = _timeout_option,
    insecure: bool = _insecure_option,
) -> None:
    """Stream a response body into a file."""
    output = get_output()

    async def _write(chunks: Any) -> int:
        written = 0
        with out.open("wb") as fh:
            async for chunk in chunks:
                fh.write(chunk)
                written += len(chunk)
                output.debug(f"Wrote {written} bytes")
        return written

    try:
        settings = _settings(config, base_url, api_version, timeout, insecure)
        params = _parse_query(query)

        async def _run() -> int:
            async with HttpxTransport(settings) as transport:
                session = StaticTokenSession(settings, transport, token) if token else None
                return await transport.stream(
                    _write,
                    method,
                    path,
                    query_params=params,
                    body=_parse_body(body),
                    authenticator=session.authenticate if session else None,
                )

        written = asyncio.run(_run())
    except ApiTransportError as exc:
        raise _fail(exc) from exc
    except ValueError as exc:
        raise _fail(InvalidUsageError(str(exc))) from exc

    output.success(f"Wrote {written} bytes to {out}")


@app.command("classify")
def classify_command(
    content_type: str = typer.Argument(..., help="Content-Type header value."),
) -> None:
    """Show how a response with CONTENT_TYPE would be decoded."""
    get_output().print_value(
        {
            "content_type": content_type,
            "mode": response_mode(content_type).value,
            "utf8": is_utf8(content_type),
        }
    )


def main() -> None:
    """Console-script entry point."""
    try:
        app()
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
