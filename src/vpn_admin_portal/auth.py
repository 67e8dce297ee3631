"""
Administrator authentication.

PURPOSE: Establish the administrator's identity before any route runs.
AI CONTEXT: Two interchangeable FastAPI dependencies, chosen by
Config.auth_method and stored on app.state.

METHODS:
- basic: HTTP Basic against a static user -> password list
- header: Identity taken from a header set by a trusted SSO reverse proxy
  (e.g. Apache mod_auth_mellon); the proxy must strip client copies

USAGE:
    authenticator = build_authenticator(config)
    router = APIRouter(dependencies=[Depends(require_admin)])
"""

from __future__ import annotations

import logging
import secrets
from abc import ABC, abstractmethod
from collections.abc import Mapping

from fastapi import HTTPException, Request, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from .config import Config

__all__ = [
    "Authenticator",
    "BasicAuthenticator",
    "HeaderAuthenticator",
    "build_authenticator",
    "require_admin",
]

logger = logging.getLogger(__name__)


class Authenticator(ABC):
    """Base class: resolve the request to an administrator id or raise 401."""

    @abstractmethod
    async def __call__(self, request: Request) -> str: ...


class BasicAuthenticator(Authenticator):
    """HTTP Basic authentication using constant-time comparisons."""

    def __init__(self, users: Mapping[str, str], realm: str = Config.BASIC_REALM) -> None:
        self._users = dict(users)
        self._realm = realm
        self._basic = HTTPBasic(auto_error=False, realm=realm)

    def _unauthorized(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": f'Basic realm="{self._realm}"'},
        )

    async def __call__(self, request: Request) -> str:
        credentials: HTTPBasicCredentials | None = await self._basic(request)
        if credentials is None:
            raise self._unauthorized()

        expected = self._users.get(credentials.username)
        # Compare against a dummy for unknown users so timing does not
        # reveal which user names exist.
        candidate = expected if expected is not None else secrets.token_hex(16)
        matches = secrets.compare_digest(
            credentials.password.encode("utf-8"), candidate.encode("utf-8")
        )
        if not matches or expected is None:
            logger.warning("Rejected Basic credentials for %r", credentials.username)
            raise self._unauthorized()
        return credentials.username


class HeaderAuthenticator(Authenticator):
    """Trust the identity a reverse proxy placed in a request header."""

    def __init__(self, header: str) -> None:
        self._header = header

    async def __call__(self, request: Request) -> str:
        value = request.headers.get(self._header, "").strip()
        if not value:
            logger.warning("Request without %s header rejected", self._header)
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=f"Missing {self._header} header",
            )
        return value


def build_authenticator(config: Config) -> Authenticator:
    """
    Create the authenticator selected by the configuration.

    Args:
        config: Portal configuration; auth_method is already validated.

    Returns:
        BasicAuthenticator or HeaderAuthenticator.

    Raises:
        ValueError: If Basic authentication is selected without users.

    Example:
        >>> config = Config(basic_users={"admin": "pw"})
        >>> isinstance(build_authenticator(config), BasicAuthenticator)
        True
    """
    if config.auth_method == "header":
        return HeaderAuthenticator(config.auth_header)
    if not config.basic_users:
        raise ValueError("Basic authentication requires at least one user in VPN_ADMIN_BASIC_USERS")
    return BasicAuthenticator(config.basic_users)


async def require_admin(request: Request) -> str:
    """Router-level dependency delegating to the configured authenticator."""
    authenticator: Authenticator = request.app.state.authenticator
    return await authenticator(request)
