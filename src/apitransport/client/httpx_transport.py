"""Asynchronous :class:`~apitransport.transport.Transport` backed by :mod:`httpx`.

:class:`HttpxTransport` resolves per-call settings, builds the request
properties, runs the authenticator, dispatches through
:class:`httpx.AsyncClient`, and decodes the body with
:func:`~apitransport.client.response.decode_body`.

A transport can run with a shared client (entered as an async context
manager, or passed in) or open a short-lived client per call.  With a
shared client the connection-level settings (``verify_ssl``, redirect
limit) come from that client; a request whose ``agent`` is set always
gets its own client.
"""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, Optional, TypeVar

import httpx
from pydantic import BaseModel

from apitransport.client.response import decode_body
from apitransport.constants import DEFAULT_MAX_REDIRECTS
from apitransport.exceptions import ApiTransportError, BodyTooLargeError, RequestFailedError
from apitransport.models import (
    HttpMethod,
    RequestProps,
    SDKError,
    SDKFailure,
    SDKResponse,
    SDKSuccess,
    TransportSettings,
)
from apitransport.status import is_success
from apitransport.transport import (
    DEFAULT_CONTENT_PATTERNS,
    Authenticator,
    ContentPatterns,
    StreamCallback,
    Transport,
    Values,
    sdk_error,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Failures that ``request`` reports as ``SDKFailure`` instead of raising.
# ``httpx.InvalidURL`` is not an ``httpx.HTTPError``.
_EXPECTED_FAILURES = (httpx.HTTPError, httpx.InvalidURL, ApiTransportError, ValueError, OSError)


class HttpxTransport(Transport):
    """Transport that performs I/O with :class:`httpx.AsyncClient`.

    Args:
        settings: Default settings shared by every call.
        patterns: Content-type patterns used to classify response bodies.
        client: Optional shared client.  When ``None``, a client is opened
            for the lifetime of ``async with`` or, outside it, per call.

    Example::

        settings = TransportSettings(base_url="https://api.example.com", api_version="4.0")
        async with HttpxTransport(settings) as transport:
            result = await transport.request("GET", "/api/4.0/user", authenticator=session.authenticate)
            if result.ok:
                print(result.value)
    """

    def __init__(
        self,
        settings: TransportSettings,
        patterns: ContentPatterns = DEFAULT_CONTENT_PATTERNS,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        super().__init__(settings, patterns)
        self._client = client
        self._owns_client = False

    # ------------------------------------------------------------------ #
    # Async context manager
    # ------------------------------------------------------------------ #

    async def __aenter__(self) -> HttpxTransport:
        if self._client is None:
            self._client = self._new_client(self.settings, agent=None, follow=None)
            self._owns_client = True
        return self

    async def __aexit__(self, *args: object) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
            self._owns_client = False

    # ------------------------------------------------------------------ #
    # Transport contract
    # ------------------------------------------------------------------ #

    async def request(
        self,
        method: HttpMethod | str,
        path: str,
        query_params: Values = None,
        body: Any = None,
        authenticator: Optional[Authenticator] = None,
        options: Optional[dict[str, Any]] = None,
    ) -> SDKResponse[Any, Any]:
        settings = self.settings.merged(options)
        props = self.init_request(method, body, settings)
        url = self.make_url(path, settings, query_params)

        try:
            props = await self.authenticate(props, authenticator)
        except Exception as exc:
            error = sdk_error(exc)
            logger.warning("Authentication for %s %s failed: %s", props.method.value, url, error.message)
            return SDKFailure(error)

        try:
            async with self._client_for(props, settings) as client:
                response = await self._send(client, props, url)
                try:
                    content = await self._read_body(response, props.size)
                finally:
                    await response.aclose()
        except _EXPECTED_FAILURES as exc:
            error = sdk_error(exc)
            logger.warning("%s %s failed: %s", props.method.value, url, error.message)
            return SDKFailure(error)

        content_type = response.headers.get("content-type", "")
        try:
            value = decode_body(content, content_type, settings.encoding, self.patterns)
        except ValueError as exc:
            error = sdk_error(exc)
            logger.warning("Could not decode %s response from %s: %s", content_type, url, error.message)
            return SDKFailure(error)

        if is_success(response.status_code):
            return SDKSuccess(value)
        if value is None:
            value = SDKError(message=_status_line(response))
        return SDKFailure(value)

    async def stream(
        self,
        callback: StreamCallback[T],
        method: HttpMethod | str,
        path: str,
        query_params: Values = None,
        body: Any = None,
        authenticator: Optional[Authenticator] = None,
        options: Optional[dict[str, Any]] = None,
    ) -> T:
        settings = self.settings.merged(options)
        props = self.init_request(method, body, settings)
        url = self.make_url(path, settings, query_params)

        try:
            props = await self.authenticate(props, authenticator)
        except Exception as exc:
            error = sdk_error(exc)
            raise RequestFailedError(error.message, error=error) from exc

        async with self._client_for(props, settings) as client:
            try:
                response = await self._send(client, props, url)
            except (httpx.HTTPError, httpx.InvalidURL) as exc:
                error = sdk_error(exc)
                raise RequestFailedError(error.message, error=error) from exc

            try:
                if not is_success(response.status_code):
                    raise await self._stream_failure(response, settings)
                logger.debug("Streaming %s response from %s", response.status_code, url)
                return await callback(response.aiter_bytes())
            finally:
                await response.aclose()

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _new_client(
        self,
        settings: TransportSettings,
        agent: Optional[httpx.AsyncBaseTransport],
        follow: Optional[int],
    ) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            verify=settings.verify_ssl,
            timeout=settings.timeout or None,
            transport=agent,
            max_redirects=follow or DEFAULT_MAX_REDIRECTS,
        )

    @asynccontextmanager
    async def _client_for(
        self,
        props: RequestProps,
        settings: TransportSettings,
    ) -> AsyncIterator[httpx.AsyncClient]:
        """Yield the shared client, or a per-call client closed on exit."""
        if self._client is not None and props.agent is None:
            yield self._client
            return
        client = self._new_client(settings, props.agent, props.follow)
        try:
            yield client
        finally:
            await client.aclose()

    async def _send(
        self,
        client: httpx.AsyncClient,
        props: RequestProps,
        url: str,
    ) -> httpx.Response:
        headers = dict(props.headers)
        if not props.compress:
            headers["Accept-Encoding"] = "identity"
        timeout = props.timeout if props.timeout is not None else self.settings.timeout
        request = client.build_request(
            props.method.value,
            url,
            content=_serialize_body(props.body),
            headers=headers,
            timeout=timeout or None,
        )
        logger.debug("%s %s", props.method.value, url)
        follow_redirects = props.redirect and props.follow != 0
        return await client.send(request, stream=True, follow_redirects=follow_redirects)

    async def _read_body(self, response: httpx.Response, limit: int) -> bytes:
        if not limit:
            return await response.aread()
        chunks: list[bytes] = []
        total = 0
        async for chunk in response.aiter_bytes():
            total += len(chunk)
            if total > limit:
                raise BodyTooLargeError(f"Response body exceeds {limit} bytes")
            chunks.append(chunk)
        return b"".join(chunks)

    async def _stream_failure(
        self,
        response: httpx.Response,
        settings: TransportSettings,
    ) -> RequestFailedError:
        content = await response.aread()
        content_type = response.headers.get("content-type", "")
        try:
            error = decode_body(content, content_type, settings.encoding, self.patterns)
        except ValueError:
            error = content.decode("utf-8", errors="replace")
        if error is None:
            error = SDKError(message=_status_line(response))
        message = sdk_error(error).message
        logger.warning("Stream request failed with %s: %s", response.status_code, message)
        return RequestFailedError(message, error=error, status_code=response.status_code)


def _status_line(response: httpx.Response) -> str:
    return f"HTTP {response.status_code} {response.reason_phrase}".rstrip()


def _serialize_body(body: Any) -> Optional[bytes]:
    """Encode a request body: bytes and text as-is, everything else as JSON."""
    if body is None:
        return None
    if isinstance(body, (bytes, bytearray)):
        return bytes(body)
    if isinstance(body, str):
        return body.encode("utf-8")
    if isinstance(body, BaseModel):
        body = body.model_dump(mode="json", exclude_none=True)
    return json.dumps(body, default=str).encode("utf-8")
