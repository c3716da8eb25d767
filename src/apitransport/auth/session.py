"""Abstract base class for authentication sessions.

An :class:`AuthSession` owns login state -- the sudo user id, whether the
session is authenticated, and the access token.  A transport never reads
or changes that state; it only calls :meth:`AuthSession.authenticate`
through the ``authenticator`` hook of
:meth:`~apitransport.transport.Transport.request`::

    result = await transport.request("GET", "/user", authenticator=session.authenticate)

To implement a new session, subclass :class:`AuthSession` and implement
every abstract method.  :class:`~apitransport.auth.token.StaticTokenSession`
is a minimal reference implementation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional, Union

from apitransport.models import RequestProps, TransportSettings
from apitransport.transport import Transport


class AuthSession(ABC):
    """Basic authorization session interface for most API authentication scenarios.

    Args:
        settings: Settings of the API the session authenticates against.
        transport: Transport used for login and logout round-trips.
    """

    def __init__(self, settings: TransportSettings, transport: Transport) -> None:
        self.settings = settings
        self.transport = transport
        self.sudo_id: Optional[str] = None

    @abstractmethod
    def is_authenticated(self) -> bool:
        """Is the current session authenticated?"""
        ...

    @abstractmethod
    async def authenticate(self, props: RequestProps) -> RequestProps:
        """Decorate the request with authentication information.

        Logs in first when the session is not yet authenticated, so the
        call may itself perform a network round-trip.

        Args:
            props: Properties of the request to update.

        Returns:
            The request properties with authentication information added.
        """
        ...

    @abstractmethod
    async def logout(self) -> bool:
        """Log out the current user.

        - If the current user is a sudo user, the API user becomes the
          active user.
        - If the current user is the API user, the API session is logged
          out; subsequent calls log the API user back in automatically.

        Returns:
            ``True`` if a logout happened, ``False`` otherwise.
        """
        ...

    @abstractmethod
    async def get_token(self) -> Any:
        """Return the data used for authentication, typically an access token."""
        ...

    @abstractmethod
    def is_sudo(self) -> bool:
        """Is the session acting as a sudo user?"""
        ...

    @abstractmethod
    async def login(self, sudo_id: Optional[Union[str, int]] = None) -> Any:
        """Log in, optionally as the sudo user *sudo_id*.

        Returns:
            Authentication data for the new session.
        """
        ...

    @abstractmethod
    def reset(self) -> None:
        """Clear all authentication tracking.

        Does **not** log the API user out on the server in default
        implementations.
        """
        ...
