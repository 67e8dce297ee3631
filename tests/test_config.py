"""Tests for config module."""

from __future__ import annotations

import os
from unittest.mock import patch

import pytest

from vpn_admin_portal.config import Config


class TestConfigConstants:
    """Tests for static configuration values."""

    def test_security_headers(self) -> None:
        """Verifies the headers added to every response.

        Business context:
        The portal controls VPN access; it must not be framed by other
        sites nor load resources from anywhere but itself.

        Assertion Strategy:
        Exact header values.
        """
        assert Config.SECURITY_HEADERS == {
            "Content-Security-Policy": "default-src 'self'",
            "X-Frame-Options": "DENY",
        }

    def test_date_formats(self) -> None:
        assert Config.DATE_FORMAT == "%Y-%m-%d"
        assert Config.DATE_TIME_FORMAT == "%Y-%m-%d %H:%M:%S"

    def test_default_stats_window(self) -> None:
        assert Config.DEFAULT_STATS_DAYS == 31
        assert Config().stats_days == 31


class TestConfigValidation:
    """Tests for __post_init__ checks."""

    def test_rejects_unknown_auth_method(self) -> None:
        with pytest.raises(ValueError, match="Unsupported authentication method"):
            Config(auth_method="ldap")

    def test_rejects_blank_auth_header(self) -> None:
        with pytest.raises(ValueError, match="header"):
            Config(auth_method="header", auth_header="  ")

    def test_is_frozen(self) -> None:
        config = Config()
        with pytest.raises(AttributeError):
            config.stats_days = 7  # type: ignore[misc]


class TestFromEnv:
    """Tests for Config.from_env.

    Categories:
    1. Defaults when unset (1 test)
    2. Parsing of each variable (3 tests)
    3. Rejection of malformed values (4 tests)
    """

    def test_defaults_when_environment_empty(self) -> None:
        """Verifies an empty environment yields the dataclass defaults."""
        assert Config.from_env({}) == Config()

    def test_reads_all_variables(self) -> None:
        """Verifies every VPN_ADMIN_* variable is honoured.

        Business context:
        Deployments configure the portal exclusively through the
        environment.

        Arrangement:
        Dict with every variable set.

        Action:
        Config.from_env(env).

        Assertion Strategy:
        Each field holds the parsed value; the trailing slash of the URI
        is stripped and the auth method lowercased.
        """
        env = {
            "VPN_ADMIN_SERVER_API_URI": "https://vpn.example.org/api.php/",
            "VPN_ADMIN_SERVER_API_USER": "portal",
            "VPN_ADMIN_SERVER_API_PASS": "pw",
            "VPN_ADMIN_SERVER_API_TIMEOUT": "2.5",
            "VPN_ADMIN_AUTH_METHOD": "HEADER",
            "VPN_ADMIN_BASIC_USERS": "admin:x",
            "VPN_ADMIN_AUTH_HEADER": "X-Forwarded-User",
            "VPN_ADMIN_STATS_DAYS": "14",
        }

        config = Config.from_env(env)

        assert config.server_api_uri == "https://vpn.example.org/api.php"
        assert config.server_api_user == "portal"
        assert config.server_api_pass == "pw"
        assert config.server_api_timeout == 2.5
        assert config.auth_method == "header"
        assert config.basic_users == {"admin": "x"}
        assert config.auth_header == "X-Forwarded-User"
        assert config.stats_days == 14

    def test_basic_users_allow_colons_in_password(self) -> None:
        config = Config.from_env({"VPN_ADMIN_BASIC_USERS": "admin:a:b, ops:pw,"})

        assert config.basic_users == {"admin": "a:b", "ops": "pw"}

    def test_reads_os_environ_by_default(self) -> None:
        with patch.dict(os.environ, {"VPN_ADMIN_STATS_DAYS": "7"}):
            assert Config.from_env().stats_days == 7

    @pytest.mark.parametrize("entry", ["admin", ":pw"])
    def test_rejects_malformed_basic_user(self, entry: str) -> None:
        with pytest.raises(ValueError, match="VPN_ADMIN_BASIC_USERS"):
            Config.from_env({"VPN_ADMIN_BASIC_USERS": entry})

    @pytest.mark.parametrize("value", ["soon", "0", "-1"])
    def test_rejects_bad_timeout(self, value: str) -> None:
        with pytest.raises(ValueError, match="VPN_ADMIN_SERVER_API_TIMEOUT"):
            Config.from_env({"VPN_ADMIN_SERVER_API_TIMEOUT": value})

    @pytest.mark.parametrize("value", ["week", "0"])
    def test_rejects_bad_stats_days(self, value: str) -> None:
        with pytest.raises(ValueError, match="VPN_ADMIN_STATS_DAYS"):
            Config.from_env({"VPN_ADMIN_STATS_DAYS": value})

    def test_rejects_unknown_auth_method(self) -> None:
        with pytest.raises(ValueError, match="authentication method"):
            Config.from_env({"VPN_ADMIN_AUTH_METHOD": "saml"})
