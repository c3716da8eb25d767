"""Concrete transports.

:class:`HttpxTransport` implements :class:`~apitransport.transport.Transport`
on top of :class:`httpx.AsyncClient`.

Example::

    from apitransport.client import HttpxTransport

    async with HttpxTransport(settings) as transport:
        result = await transport.request("GET", "/users")
"""

from apitransport.client.httpx_transport import HttpxTransport
from apitransport.client.response import decode_body

__all__ = ["HttpxTransport", "decode_body"]
