"""Session around a pre-issued bearer token.

:class:`StaticTokenSession` is the simplest
:class:`~apitransport.auth.session.AuthSession`: the token is obtained
out of band (environment variable, secrets manager, CLI flag) and injected
as an ``Authorization: Bearer <token>`` header.  There is no login
round-trip, so ``login`` and ``logout`` only track local state.
"""

from __future__ import annotations

import logging
from typing import Optional, Union

from pydantic import BaseModel, Field

from apitransport.auth.session import AuthSession
from apitransport.exceptions import AuthError
from apitransport.models import RequestProps, TransportSettings
from apitransport.transport import Transport

logger = logging.getLogger(__name__)


class AccessToken(BaseModel):
    """Access token data returned by :meth:`StaticTokenSession.get_token`."""

    access_token: str
    token_type: str = "Bearer"
    expires_in: Optional[int] = Field(default=None, description="Lifetime in seconds, if known")


class StaticTokenSession(AuthSession):
    """Authenticate every request with a fixed bearer token.

    Sudo mode sends the sudo user's id in the ``X-Sudo-User`` header,
    since a static token cannot be exchanged for a sudo token.

    Example::

        session = StaticTokenSession(settings, transport, token="tok123")
        result = await transport.request("GET", "/user", authenticator=session.authenticate)
    """

    sudo_header = "X-Sudo-User"

    def __init__(self, settings: TransportSettings, transport: Transport, token: Optional[str]) -> None:
        super().__init__(settings, transport)
        self._token = token
        self._active = False

    def is_authenticated(self) -> bool:
        return self._active and bool(self._token)

    async def authenticate(self, props: RequestProps) -> RequestProps:
        if not self.is_authenticated():
            await self.login(self.sudo_id)
        props.headers["Authorization"] = f"Bearer {self._token}"
        if self.sudo_id is not None:
            props.headers[self.sudo_header] = self.sudo_id
        return props

    async def logout(self) -> bool:
        if self.is_sudo():
            logger.debug("Leaving sudo session for user %s", self.sudo_id)
            self.sudo_id = None
            return True
        if not self._active:
            return False
        self._active = False
        return True

    async def get_token(self) -> AccessToken:
        if not self.is_authenticated():
            return await self.login(self.sudo_id)
        return AccessToken(access_token=self._token)

    def is_sudo(self) -> bool:
        return self.sudo_id is not None and self._active

    async def login(self, sudo_id: Optional[Union[str, int]] = None) -> AccessToken:
        if not self._token:
            raise AuthError("No access token configured for this session")
        self._active = True
        self.sudo_id = str(sudo_id) if sudo_id is not None else None
        return AccessToken(access_token=self._token)

    def reset(self) -> None:
        self._active = False
        self.sudo_id = None
