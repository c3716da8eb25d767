"""Process-wide constants for the transport layer.

The three ``MATCH_*`` strings are the default content-type patterns used by
:class:`~apitransport.transport.ContentPatterns`.  They are plain strings so
that a caller can build a replacement pattern set without touching the
classification functions in :mod:`apitransport.transport`.
"""

from apitransport import __version__

SDK_VERSION = __version__
"""Version reported in the default ``User-Agent`` header."""

AGENT_TAG = f"PY-SDK {SDK_VERSION}"
"""Default ``User-Agent`` value sent with every request."""

DEFAULT_TIMEOUT = 120
"""Default request timeout in seconds (two minutes)."""

DEFAULT_MAX_REDIRECTS = 20
"""Redirect limit used when a request does not set ``follow``."""

MATCH_CHARSET = r";.*\bcharset\b="
"""Matches a ``charset=`` attribute following the media type."""

MATCH_CHARSET_UTF8 = rf"{MATCH_CHARSET}\s*\butf-8\b"
"""Matches a ``charset=utf-8`` attribute anywhere after the media type."""

MATCH_MODE_STRING = (
    r"(^application/.*(\bjson\b|\bxml\b|\bsql\b|\bgraphql\b|\bjavascript\b"
    r"|\bx-www-form-urlencoded\b)|^text/|.*\+xml\b|;.*\bcharset\b=)"
)
"""Content types whose bodies are decoded as text."""

MATCH_MODE_BINARY = r"^image/|^audio/|^video/|^font/|^application/|^multipart/"
"""Content types whose bodies are returned as raw bytes."""

JSON_CONTENT_TYPE = r"^application/(.*\+)?json\b"
"""Content types whose text bodies are parsed as JSON."""
