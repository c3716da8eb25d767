"""Authentication session contract and the bearer-token session.

- :class:`AuthSession` -- abstract session whose ``authenticate`` method is
  passed to a transport as the ``authenticator`` callback.
- :class:`StaticTokenSession` -- session around a pre-issued bearer token.
"""

from apitransport.auth.session import AuthSession
from apitransport.auth.token import AccessToken, StaticTokenSession

__all__ = ["AuthSession", "AccessToken", "StaticTokenSession"]
