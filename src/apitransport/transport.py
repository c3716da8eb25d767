"""The transport contract and the pure helpers every transport shares.

A *transport* is the seam between "how an API call is described" (method,
path, query values, body, authentication) and "how bytes move over the
wire".  Generated API methods build the call and hand it to
:meth:`Transport.request` or :meth:`Transport.stream`; a concrete
implementation such as :class:`~apitransport.client.HttpxTransport`
performs the I/O.

The module-level functions are deliberately free of I/O so that every
implementation classifies and encodes identically:

* :func:`response_mode` / :func:`is_utf8` -- decide how to decode a body
  from its ``Content-Type``, using a pluggable :class:`ContentPatterns`.
* :func:`encode_params` / :func:`add_query_params` -- query-string encoding.
* :func:`sdk_error` -- normalize any failure shape into an
  :class:`~apitransport.models.SDKError`.
"""

from __future__ import annotations

import inspect
import json
import logging
import math
import re
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Awaitable, Mapping
from dataclasses import dataclass
from typing import Any, Callable, Optional, TypeVar, Union
from urllib.parse import quote

from apitransport.constants import (
    AGENT_TAG,
    MATCH_CHARSET_UTF8,
    MATCH_MODE_BINARY,
    MATCH_MODE_STRING,
)
from apitransport.models import (
    HttpMethod,
    RequestProps,
    ResponseMode,
    SDKError,
    SDKResponse,
    TransportSettings,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

Values = Optional[Mapping[str, Any]]
"""Name/value collection for query parameters."""

Authenticator = Callable[[RequestProps], Union[RequestProps, Awaitable[RequestProps]]]
"""Decorates outgoing request properties, typically ``AuthSession.authenticate``."""

StreamCallback = Callable[[AsyncIterator[bytes]], Awaitable[T]]
"""Consumes a response byte stream and produces the result of :meth:`Transport.stream`."""


class _Unset:
    """Marker for a query parameter that is absent, as opposed to ``None``."""

    _instance: Optional[_Unset] = None

    def __new__(cls) -> _Unset:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()
"""Query value that is omitted from the encoded query string."""

# Characters ``encodeURIComponent`` leaves unescaped besides letters, digits, ``-_.``
_URI_COMPONENT_SAFE = "!~*'()"


# --- Response mode classification ---


@dataclass(frozen=True)
class ContentPatterns:
    """Compiled content-type patterns used for response classification.

    Attributes:
        string: Matches content types decoded as text.
        binary: Matches content types returned as raw bytes.
        charset_utf8: Matches a ``charset=utf-8`` attribute.
    """

    string: re.Pattern[str]
    binary: re.Pattern[str]
    charset_utf8: re.Pattern[str]

    @classmethod
    def from_strings(
        cls,
        string: str = MATCH_MODE_STRING,
        binary: str = MATCH_MODE_BINARY,
        charset_utf8: str = MATCH_CHARSET_UTF8,
    ) -> ContentPatterns:
        """Compile case-insensitive patterns from regular expression strings."""
        return cls(
            string=re.compile(string, re.IGNORECASE),
            binary=re.compile(binary, re.IGNORECASE),
            charset_utf8=re.compile(charset_utf8, re.IGNORECASE),
        )


DEFAULT_CONTENT_PATTERNS = ContentPatterns.from_strings()


def response_mode(
    content_type: Optional[str],
    patterns: ContentPatterns = DEFAULT_CONTENT_PATTERNS,
) -> ResponseMode:
    """Is the content type binary or "string"?

    The string pattern is tested first, so a content type matching both
    patterns (``image/svg+xml``, ``application/pdf; charset=utf-8``) is
    classified as :attr:`ResponseMode.STRING`.

    Args:
        content_type: Value of the ``Content-Type`` header.
        patterns: Pattern set to classify with.

    Returns:
        The :class:`~apitransport.models.ResponseMode` for *content_type*.
    """
    if not content_type:
        return ResponseMode.UNKNOWN
    if patterns.string.search(content_type):
        return ResponseMode.STRING
    if patterns.binary.search(content_type):
        return ResponseMode.BINARY
    return ResponseMode.UNKNOWN


def is_utf8(
    content_type: Optional[str],
    patterns: ContentPatterns = DEFAULT_CONTENT_PATTERNS,
) -> bool:
    """Does this content type declare a UTF-8 charset?"""
    if not content_type:
        return False
    return patterns.charset_utf8.search(content_type) is not None


# --- Query encoding ---


def _format_number(value: float) -> str:
    """Format *value* the way JavaScript prints numbers (``1.0`` -> ``1``)."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return repr(value)


def _stringify(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return _format_number(value)
    if isinstance(value, (list, tuple)):
        return ",".join("" if item is None else _stringify(item) for item in value)
    if isinstance(value, Mapping):
        return json.dumps(value, separators=(",", ":"), default=str)
    if isinstance(value, HttpMethod):
        return value.value
    return str(value)


def encode_params(values: Values = None) -> str:
    """Convert *values* to query string format.

    Only :data:`UNSET` values are omitted; ``None`` and ``False`` are both
    included as ``null`` and ``false``.  Values are percent-encoded with the
    same reserved set as JavaScript's ``encodeURIComponent``.

    Example::

        encode_params({"a": 1, "b": UNSET, "c": False, "d": None})
        # 'a=1&c=false&d=null'
    """
    if not values:
        return ""
    return "&".join(
        f"{key}={quote(_stringify(value), safe=_URI_COMPONENT_SAFE)}"
        for key, value in values.items()
        if value is not UNSET
    )


def add_query_params(path: str, values: Values = None) -> str:
    """Append encoded *values* to *path*, leaving *path* unchanged when nothing encodes."""
    params = encode_params(values)
    if not params:
        return path
    separator = "&" if "?" in path else "?"
    return f"{path}{separator}{params}"


# --- Error normalization ---


def _field(source: Any, name: str) -> Any:
    if isinstance(source, Mapping):
        return source.get(name)
    return getattr(source, name, None)


def sdk_error(result: Any) -> SDKError:
    """Normalize any failure payload into an :class:`~apitransport.models.SDKError`.

    The message is taken from, in order:

    1. a string ``message`` field (mapping key or attribute; for exceptions
       without one, the exception text);
    2. a string ``error.message`` field;
    3. a serialization of *result*, reported as an unknown error.

    Never raises.
    """
    message = _field(result, "message")
    if isinstance(message, str):
        return SDKError(message=message)
    if isinstance(result, BaseException) and str(result):
        return SDKError(message=str(result))

    nested = _field(result, "error")
    if nested is not None:
        nested_message = _field(nested, "message")
        if isinstance(nested_message, str):
            return SDKError(message=nested_message)

    try:
        serialized = json.dumps(result, default=repr)
    except (TypeError, ValueError):
        serialized = repr(result)
    return SDKError(message=f"Unknown error with SDK method {serialized}")


# --- Transport contract ---


class Transport(ABC):
    """Transport plug-in interface.

    Implementations execute requests described by generated API methods.
    ``settings`` holds the shared defaults; per-call ``options`` are merged
    into a copy with :meth:`TransportSettings.merged` and never written back.

    Subclasses implement :meth:`request` and :meth:`stream`; the helpers
    below give every subclass the same URL resolution and request
    construction.
    """

    def __init__(
        self,
        settings: TransportSettings,
        patterns: ContentPatterns = DEFAULT_CONTENT_PATTERNS,
    ) -> None:
        self.settings = settings
        self.patterns = patterns

    @abstractmethod
    async def request(
        self,
        method: HttpMethod | str,
        path: str,
        query_params: Values = None,
        body: Any = None,
        authenticator: Optional[Authenticator] = None,
        options: Optional[dict[str, Any]] = None,
    ) -> SDKResponse[Any, Any]:
        """HTTP request for atomic, fully downloaded responses.

        Args:
            method: HTTP method of the request.
            path: Request path, either relative to ``base_url`` or absolute.
            query_params: Name/value pairs to pass as part of the URL.
            body: Data for the body of the request.
            authenticator: Callback that decorates the request properties,
                typically an ``AuthSession.authenticate``.
            options: Overrides of the default transport settings.

        Returns:
            :class:`~apitransport.models.SDKSuccess` with the decoded body,
            or :class:`~apitransport.models.SDKFailure` with the decoded
            error body or an :class:`~apitransport.models.SDKError`.
        """
        ...

    @abstractmethod
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
        """HTTP request for a streamable response.

        Args:
            callback: Receives the response byte stream and consumes it.
            method: HTTP method of the request.
            path: Request path, either relative to ``base_url`` or absolute.
            query_params: Name/value pairs to pass as part of the URL.
            body: Data for the body of the request.
            authenticator: Callback that decorates the request properties.
            options: Overrides of the default transport settings.

        Returns:
            Whatever *callback* returns.

        Raises:
            RequestFailedError: If the request fails before a stream is
                available.
        """
        ...

    def make_url(self, path: str, settings: TransportSettings, query_params: Values = None) -> str:
        """Resolve *path* against ``base_url`` and append the query string."""
        if re.match(r"^https?://", path, re.IGNORECASE):
            return add_query_params(path, query_params)
        return add_query_params(f"{settings.base_url.rstrip('/')}{path}", query_params)

    def init_request(
        self,
        method: HttpMethod | str,
        body: Any,
        settings: TransportSettings,
    ) -> RequestProps:
        """Build the request properties for one call before authentication.

        Raises:
            ValueError: If *method* is not a recognised HTTP method.
        """
        headers = {"User-Agent": AGENT_TAG, **(settings.headers or {})}
        if body is not None and not isinstance(body, (str, bytes, bytearray)):
            headers.setdefault("Content-Type", "application/json")
        return RequestProps(
            method=HttpMethod.parse(method),
            body=body,
            headers=headers,
            timeout=settings.timeout,
        )

    async def authenticate(
        self,
        props: RequestProps,
        authenticator: Optional[Authenticator],
    ) -> RequestProps:
        """Run *authenticator* on *props*, awaiting it when it is a coroutine."""
        if authenticator is None:
            return props
        logger.debug("Authenticating %s request", props.method.value)
        result = authenticator(props)
        if inspect.isawaitable(result):
            result = await result
        return result
