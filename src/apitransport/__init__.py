"""apitransport -- pluggable HTTP transport for generated API clients.

Generated API methods describe a call (method, path, query values, body,
authenticator) and hand it to a :class:`Transport`; the transport moves
the bytes and returns a tagged :data:`SDKResponse`.  Classification,
query encoding, and error normalization are pure functions shared by every
transport implementation.

Modules:
    transport: The :class:`Transport` contract and the pure helpers.
    models: Settings, request properties, and result types.
    client: :class:`HttpxTransport`, the httpx-backed implementation.
    auth: The :class:`AuthSession` contract and a bearer-token session.
    config: Settings resolution from files and environment variables.
    status: The :class:`StatusCode` reference table.
    app: The ``apitransport`` CLI.
"""

__version__ = "0.1.0"

from apitransport.auth import AuthSession, StaticTokenSession  # noqa: E402
from apitransport.client import HttpxTransport  # noqa: E402
from apitransport.config import resolve_settings  # noqa: E402
from apitransport.exceptions import ApiTransportError, RequestFailedError  # noqa: E402
from apitransport.models import (  # noqa: E402
    HttpMethod,
    RequestProps,
    ResponseMode,
    SDKError,
    SDKFailure,
    SDKResponse,
    SDKSuccess,
    TransportSettings,
)
from apitransport.status import StatusCode  # noqa: E402
from apitransport.transport import (  # noqa: E402
    DEFAULT_CONTENT_PATTERNS,
    UNSET,
    Authenticator,
    ContentPatterns,
    Transport,
    Values,
    add_query_params,
    encode_params,
    is_utf8,
    response_mode,
    sdk_error,
)

__all__ = [
    "__version__",
    "ApiTransportError",
    "AuthSession",
    "Authenticator",
    "ContentPatterns",
    "DEFAULT_CONTENT_PATTERNS",
    "HttpMethod",
    "HttpxTransport",
    "RequestFailedError",
    "RequestProps",
    "ResponseMode",
    "SDKError",
    "SDKFailure",
    "SDKResponse",
    "SDKSuccess",
    "StaticTokenSession",
    "StatusCode",
    "Transport",
    "TransportSettings",
    "UNSET",
    "Values",
    "add_query_params",
    "encode_params",
    "is_utf8",
    "resolve_settings",
    "response_mode",
    "sdk_error",
]
