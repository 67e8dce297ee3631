"""
Configuration for the VPN Admin Portal.

PURPOSE: Centralized configuration constants and runtime settings.
AI CONTEXT: All configurable values live here - modify this file to change behavior.

CONFIGURATION CATEGORIES:
- Server API: Location and credentials of the remote VPN server API
- Authentication: How administrators prove who they are
- Statistics: Chart window and rendering parameters
- HTTP: Security headers added to every response

ENVIRONMENT VARIABLES:
- VPN_ADMIN_SERVER_API_URI: Base URI of the server API
- VPN_ADMIN_SERVER_API_USER / VPN_ADMIN_SERVER_API_PASS: Service credentials
- VPN_ADMIN_SERVER_API_TIMEOUT: Seconds before a remote call fails (default: none)
- VPN_ADMIN_AUTH_METHOD: "basic" (default) or "header"
- VPN_ADMIN_BASIC_USERS: Comma separated "user:password" pairs
- VPN_ADMIN_AUTH_HEADER: Header carrying the SSO identity (default: X-Remote-User)
- VPN_ADMIN_STATS_DAYS: Days shown on the statistics charts (default: 31)

USAGE:
    from vpn_admin_portal.config import Config
    config = Config.from_env()
    client = ServerClient(config.server_api_uri, ...)
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import ClassVar

__all__ = ["Config", "AUTH_METHODS"]

AUTH_METHODS: frozenset[str] = frozenset({"basic", "header"})


def _parse_basic_users(raw: str) -> dict[str, str]:
    """
    Parse the "user:password,user:password" credential list.

    Empty entries are skipped. The password may itself contain colons;
    only the first colon separates it from the user name.

    Args:
        raw: Value of VPN_ADMIN_BASIC_USERS.

    Returns:
        Mapping of user name to password.

    Raises:
        ValueError: If an entry has no colon or an empty user name.

    Example:
        >>> _parse_basic_users("admin:s3cret, ops:a:b")
        {'admin': 's3cret', 'ops': 'a:b'}
    """
    users: dict[str, str] = {}
    for entry in raw.split(","):
        entry = entry.strip()
        if not entry:
            continue
        user, sep, password = entry.partition(":")
        if not sep or not user:
            raise ValueError(f"Invalid VPN_ADMIN_BASIC_USERS entry: {entry!r}")
        users[user] = password
    return users


def _parse_timeout(raw: str | None) -> float | None:
    if raw is None or not raw.strip():
        return None
    try:
        timeout = float(raw)
    except ValueError as exc:
        raise ValueError(f"VPN_ADMIN_SERVER_API_TIMEOUT must be a number, got {raw!r}") from exc
    if timeout <= 0:
        raise ValueError("VPN_ADMIN_SERVER_API_TIMEOUT must be positive")
    return timeout


def _parse_days(raw: str | None) -> int:
    if raw is None or not raw.strip():
        return Config.DEFAULT_STATS_DAYS
    try:
        days = int(raw)
    except ValueError as exc:
        raise ValueError(f"VPN_ADMIN_STATS_DAYS must be an integer, got {raw!r}") from exc
    if days < 1:
        raise ValueError("VPN_ADMIN_STATS_DAYS must be at least 1")
    return days


@dataclass(frozen=True)
class Config:
    """
    Immutable configuration container for the VPN Admin Portal.

    DESIGN: Frozen dataclass ensures configuration immutability at runtime.
    Instance fields hold deployment settings (read once from the
    environment); class-level constants hold fixed protocol and rendering
    values shared by every deployment.

    SECURITY HEADERS:
    Every response carries a restrictive Content-Security-Policy and
    X-Frame-Options so the portal can neither load foreign resources nor
    be framed by another site.
    """

    # =========================================================================
    # DEPLOYMENT SETTINGS
    # =========================================================================
    server_api_uri: str = "http://localhost/vpn-server-api/api.php"
    server_api_user: str = "vpn-admin-portal"
    server_api_pass: str = ""
    server_api_timeout: float | None = None
    auth_method: str = "basic"
    basic_users: Mapping[str, str] = field(default_factory=dict)
    auth_header: str = "X-Remote-User"
    stats_days: int = 31

    # =========================================================================
    # HTTP CONSTANTS
    # =========================================================================
    SECURITY_HEADERS: ClassVar[dict[str, str]] = {
        "Content-Security-Policy": "default-src 'self'",
        "X-Frame-Options": "DENY",
    }
    BASIC_REALM: ClassVar[str] = "VPN Admin Portal"

    # =========================================================================
    # STATISTICS AND CHART CONSTANTS
    # =========================================================================
    DEFAULT_STATS_DAYS: ClassVar[int] = 31
    DATE_FORMAT: ClassVar[str] = "%Y-%m-%d"
    DATE_TIME_FORMAT: ClassVar[str] = "%Y-%m-%d %H:%M:%S"
    CHART_FIGSIZE: ClassVar[tuple[float, float]] = (8.0, 3.0)
    CHART_DPI: ClassVar[int] = 100
    CHART_BAR_COLOR: ClassVar[str] = "#3b82f6"

    # =========================================================================
    # SERVER API CONSTANTS
    # =========================================================================
    MOTD_MESSAGE_TYPE: ClassVar[str] = "motd"

    def __post_init__(self) -> None:
        if self.auth_method not in AUTH_METHODS:
            raise ValueError(
                f"Unsupported authentication method {self.auth_method!r}; "
                f"expected one of: {', '.join(sorted(AUTH_METHODS))}"
            )
        if not self.auth_header.strip():
            raise ValueError("Authentication header name must not be empty")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Config:
        """
        Build a configuration from environment variables.

        Reads every VPN_ADMIN_* variable, falling back to the dataclass
        defaults for anything unset or blank. Values are validated here
        so a misconfigured deployment fails at startup rather than on
        the first request.

        Business context: The portal is deployed next to the VPN server
        API, usually behind a reverse proxy. Environment variables keep
        credentials out of the source tree and fit container and
        systemd deployments alike.

        Args:
            environ: Mapping to read from. Defaults to os.environ; tests
                pass a plain dict for isolation.

        Returns:
            Populated, validated Config instance.

        Raises:
            ValueError: If a numeric setting is malformed, a Basic
                credential entry is invalid, or the auth method is unknown.

        Example:
            >>> config = Config.from_env({"VPN_ADMIN_BASIC_USERS": "admin:pw"})
            >>> config.basic_users["admin"]
            'pw'
        """
        env = os.environ if environ is None else environ
        defaults = cls()

        def _get(name: str, default: str) -> str:
            value = env.get(name)
            if value is None or not value.strip():
                return default
            return value.strip()

        return cls(
            server_api_uri=_get("VPN_ADMIN_SERVER_API_URI", defaults.server_api_uri).rstrip("/"),
            server_api_user=_get("VPN_ADMIN_SERVER_API_USER", defaults.server_api_user),
            server_api_pass=env.get("VPN_ADMIN_SERVER_API_PASS", defaults.server_api_pass),
            server_api_timeout=_parse_timeout(env.get("VPN_ADMIN_SERVER_API_TIMEOUT")),
            auth_method=_get("VPN_ADMIN_AUTH_METHOD", defaults.auth_method).lower(),
            basic_users=_parse_basic_users(env.get("VPN_ADMIN_BASIC_USERS", "")),
            auth_header=_get("VPN_ADMIN_AUTH_HEADER", defaults.auth_header),
            stats_days=_parse_days(env.get("VPN_ADMIN_STATS_DAYS")),
        )
