"""Numeric process exit codes for the ``apitransport`` CLI.

Each constant maps to an error category and is referenced by the
corresponding :class:`~apitransport.exceptions.ApiTransportError`
subclass, so shell wrappers can tell failure classes apart without
parsing stderr.
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred (including configuration problems)."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments."""

EXIT_AUTH_FAILURE = 3
"""Authentication failed or the server rejected the credentials."""

EXIT_REQUEST_FAILED = 4
"""The server answered with a non-2xx status."""

EXIT_SERVER_ERROR = 5
"""The server answered with a 5xx status."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""
