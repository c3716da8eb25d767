"""Shared data shapes for the transport layer.

**Configuration models** (pydantic):
    :class:`TransportSettings` -- per-client defaults, shared read-only
    across calls, and :class:`RequestProps` -- the fully resolved
    description of a single outgoing request.

**Result types** (frozen dataclasses):
    :class:`SDKSuccess`, :class:`SDKFailure`, and the :data:`SDKResponse`
    union returned by :meth:`~apitransport.transport.Transport.request`.
    The ``ok`` discriminant is fixed by the arm's class, so a response can
    never carry both a value and an error.

:class:`SDKError` is the normalized shape used when a failure is not a
typed domain error (network, timeout, parse failure).
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Generic, Literal, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field

from apitransport.constants import DEFAULT_TIMEOUT


class HttpMethod(str, enum.Enum):
    """HTTP methods a transport accepts."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"
    TRACE = "TRACE"
    HEAD = "HEAD"

    @classmethod
    def parse(cls, value: str | HttpMethod) -> HttpMethod:
        """Coerce *value* to a member, accepting any letter case.

        Raises:
            ValueError: If *value* is not a recognised method.
        """
        if isinstance(value, HttpMethod):
            return value
        try:
            return cls(value.upper())
        except (AttributeError, ValueError):
            allowed = ", ".join(m.value for m in cls)
            raise ValueError(f"Unsupported HTTP method {value!r}; expected one of {allowed}") from None


class ResponseMode(enum.Enum):
    """How a response body should be decoded."""

    BINARY = "binary"
    STRING = "string"
    UNKNOWN = "unknown"


# --- Settings ---


class TransportSettings(BaseModel):
    """Default settings for every request made by one transport instance.

    Unrecognised keys are preserved in ``model_extra`` and passed through
    to the transport untouched, so a concrete transport can read its own
    options from the same object.

    Example::

        settings = TransportSettings(base_url="https://api.example.com", api_version="4.0")
        per_call = settings.merged({"timeout": 5})
        assert settings.timeout == 120 and per_call.timeout == 5
    """

    model_config = ConfigDict(extra="allow")

    base_url: str = Field(description="Base URL of the API host")
    api_version: str = Field(description="API version, e.g. '4.0'")
    headers: Optional[dict[str, str]] = Field(
        default=None, description="Headers sent with every request"
    )
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")
    timeout: float = Field(
        default=DEFAULT_TIMEOUT, ge=0, description="Request timeout in seconds"
    )
    encoding: Optional[str] = Field(
        default=None, description="Text encoding override for string responses"
    )

    @property
    def api_path(self) -> str:
        """Versioned API root, ``{base_url}/api/{api_version}``."""
        return f"{self.base_url.rstrip('/')}/api/{self.api_version}"

    def merged(self, options: Optional[dict[str, Any] | TransportSettings] = None) -> TransportSettings:
        """Return the effective settings for one call.

        *options* overrides individual fields; ``self`` is never modified.
        Header mappings are merged rather than replaced.

        Args:
            options: Partial settings for a single call.

        Returns:
            A new :class:`TransportSettings` (or ``self`` when *options* is
            empty).
        """
        if not options:
            return self
        if isinstance(options, TransportSettings):
            options = options.model_dump(exclude_unset=True)
        data = self.model_dump()
        overrides = dict(options)
        if overrides.get("headers") is not None:
            overrides["headers"] = {**(self.headers or {}), **overrides["headers"]}
        data.update(overrides)
        return TransportSettings.model_validate(data)


class RequestProps(BaseModel):
    """Everything a transport needs to dispatch one request.

    Built fresh for each call and handed to the authenticator, which may
    modify it (typically ``headers``) before dispatch.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    method: HttpMethod
    body: Any = None
    headers: dict[str, str] = Field(default_factory=dict)
    redirect: bool = Field(default=True, description="Follow redirects")
    agent: Any = Field(
        default=None,
        description="Connection layer override (an httpx transport) for proxies, certificates, tests",
    )
    compress: bool = Field(default=True, description="Accept gzip/deflate content encoding")
    follow: Optional[int] = Field(
        default=None, ge=0, description="Maximum redirect count, 0 to not follow"
    )
    size: int = Field(default=0, ge=0, description="Maximum response body size in bytes, 0 to disable")
    timeout: Optional[float] = Field(default=None, ge=0, description="Timeout in seconds, 0 to disable")


# --- Results ---


class SDKError(BaseModel):
    """An error raised inside the SDK itself, e.g. a network or parse failure."""

    model_config = ConfigDict(frozen=True)

    type: Literal["sdk_error"] = "sdk_error"
    message: str


TSuccess = TypeVar("TSuccess")
TError = TypeVar("TError")


@dataclass(frozen=True)
class SDKSuccess(Generic[TSuccess]):
    """A successful SDK call."""

    value: TSuccess
    ok: Literal[True] = field(default=True, init=False)


@dataclass(frozen=True)
class SDKFailure(Generic[TError]):
    """A failed SDK call; ``error`` is the domain error body or an :class:`SDKError`."""

    error: TError
    ok: Literal[False] = field(default=False, init=False)


SDKResponse = Union[SDKSuccess[TSuccess], SDKFailure[Union[TError, SDKError]]]
