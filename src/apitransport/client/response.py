"""Response body decoding driven by :func:`~apitransport.transport.response_mode`.

After a transport has downloaded a body, :func:`decode_body` turns the raw
bytes into the value handed back to the caller:

* ``string`` mode -- text, decoded with the effective charset, and parsed
  as JSON when the content type is a JSON type;
* ``binary`` mode -- the raw bytes;
* ``unknown`` mode -- text when the bytes decode, raw bytes otherwise.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Optional

from apitransport.constants import JSON_CONTENT_TYPE
from apitransport.models import ResponseMode
from apitransport.transport import (
    DEFAULT_CONTENT_PATTERNS,
    ContentPatterns,
    is_utf8,
    response_mode,
)

logger = logging.getLogger(__name__)

_json_pattern = re.compile(JSON_CONTENT_TYPE, re.IGNORECASE)
_charset_pattern = re.compile(r";.*\bcharset\b=\s*\"?([\w.:-]+)", re.IGNORECASE)


def response_charset(
    content_type: str,
    encoding: Optional[str] = None,
    patterns: ContentPatterns = DEFAULT_CONTENT_PATTERNS,
) -> str:
    """Pick the charset used to decode a text body.

    Precedence: the *encoding* override, a UTF-8 charset attribute, any
    other declared charset, then UTF-8.
    """
    if encoding:
        return encoding
    if is_utf8(content_type, patterns):
        return "utf-8"
    match = _charset_pattern.search(content_type or "")
    if match:
        return match.group(1)
    return "utf-8"


def decode_body(
    content: bytes,
    content_type: str,
    encoding: Optional[str] = None,
    patterns: ContentPatterns = DEFAULT_CONTENT_PATTERNS,
) -> Any:
    """Decode a downloaded response body according to its content type.

    Args:
        content: Raw response bytes.
        content_type: Value of the ``Content-Type`` header (may be empty).
        encoding: Text encoding override from the transport settings.
        patterns: Pattern set used for classification.

    Returns:
        ``None`` for an empty body, otherwise a JSON value, ``str``, or
        ``bytes`` depending on the response mode.

    Raises:
        ValueError: If a string-mode body cannot be decoded or a JSON body
            is malformed.
    """
    if not content:
        return None

    mode = response_mode(content_type, patterns)
    if mode is ResponseMode.BINARY:
        return content

    charset = response_charset(content_type, encoding, patterns)
    if mode is ResponseMode.UNKNOWN:
        try:
            return content.decode(charset)
        except (UnicodeDecodeError, LookupError):
            logger.debug("Undecodable body with content type %r returned as bytes", content_type)
            return content

    try:
        text = content.decode(charset)
    except LookupError as exc:
        raise ValueError(f"Unknown response encoding {charset!r}") from exc
    if _json_pattern.search(content_type):
        return json.loads(text)
    return text
