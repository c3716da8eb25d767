"""Transport settings resolution from files, environment, and overrides.

:func:`resolve_settings` builds the :class:`~apitransport.models.TransportSettings`
for a client.  Precedence (high to low):

1. Explicit overrides (keyword arguments, CLI flags)
2. Environment variables (``APITRANSPORT_BASE_URL``, ``APITRANSPORT_API_VERSION``,
   ``APITRANSPORT_VERIFY_SSL``, ``APITRANSPORT_TIMEOUT``, ``APITRANSPORT_ENCODING``)
3. A JSON settings file (``path`` argument or ``APITRANSPORT_CONFIG``)
4. Model defaults

The result is built once per client configuration and shared read-only by
every call; per-call overrides go through
:meth:`~apitransport.models.TransportSettings.merged`.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from apitransport.exceptions import ConfigError
from apitransport.models import TransportSettings

ENV_PREFIX = "APITRANSPORT_"
CONFIG_ENV_VAR = f"{ENV_PREFIX}CONFIG"

_ENV_FIELDS = ("base_url", "api_version", "verify_ssl", "timeout", "encoding")
_FALSE_VALUES = {"0", "false", "no", "off"}


def load_settings_file(path: Path) -> dict[str, Any]:
    """Read a JSON settings file.

    Args:
        path: Path to a JSON object with settings keys.

    Returns:
        The parsed settings mapping.

    Raises:
        ConfigError: If the file is missing, unreadable, or not a JSON object.
    """
    path = path.expanduser()
    if not path.is_file():
        raise ConfigError(f"Settings file not found: {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as exc:
        raise ConfigError(f"Invalid settings file at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Settings file {path} must contain a JSON object")
    return data


def settings_from_env(environ: Optional[dict[str, str]] = None) -> dict[str, Any]:
    """Collect settings from ``APITRANSPORT_*`` environment variables.

    Empty variables are ignored.  ``APITRANSPORT_VERIFY_SSL`` accepts
    ``0``/``false``/``no``/``off`` (any case) as false.
    """
    env = os.environ if environ is None else environ
    values: dict[str, Any] = {}
    for name in _ENV_FIELDS:
        raw = env.get(f"{ENV_PREFIX}{name.upper()}")
        if not raw:
            continue
        if name == "verify_ssl":
            values[name] = raw.strip().lower() not in _FALSE_VALUES
        else:
            values[name] = raw
    return values


def resolve_settings(
    path: Optional[Path] = None,
    environ: Optional[dict[str, str]] = None,
    **overrides: Any,
) -> TransportSettings:
    """Resolve transport settings with the full precedence chain.

    Args:
        path: JSON settings file.  Falls back to ``APITRANSPORT_CONFIG``;
            with neither, no file is read.
        environ: Environment mapping, ``os.environ`` by default.
        **overrides: Highest-precedence values.  ``None`` values are ignored
            so unset CLI options can be passed straight through.

    Returns:
        The validated :class:`~apitransport.models.TransportSettings`.

    Raises:
        ConfigError: If the file is invalid or the merged values fail
            validation (for example ``base_url`` is missing).
    """
    env = os.environ if environ is None else environ

    data: dict[str, Any] = {}
    config_path = path
    if config_path is None and env.get(CONFIG_ENV_VAR):
        config_path = Path(env[CONFIG_ENV_VAR])
    if config_path is not None:
        data.update(load_settings_file(config_path))

    data.update(settings_from_env(env))
    data.update({key: value for key, value in overrides.items() if value is not None})

    try:
        return TransportSettings.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid transport settings: {exc}") from exc
