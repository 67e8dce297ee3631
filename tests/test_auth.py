"""Tests for auth module."""

from __future__ import annotations

import asyncio
import base64

import pytest

fastapi = pytest.importorskip("fastapi")

from fastapi import HTTPException, Request  # noqa: E402

from vpn_admin_portal.auth import (  # noqa: E402
    Authenticator,
    BasicAuthenticator,
    HeaderAuthenticator,
    build_authenticator,
)
from vpn_admin_portal.config import Config  # noqa: E402


def _request(headers: dict[str, str] | None = None) -> Request:
    raw = [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()]
    return Request({"type": "http", "method": "GET", "path": "/", "headers": raw})


def _basic(user: str, password: str) -> dict[str, str]:
    token = base64.b64encode(f"{user}:{password}".encode()).decode()
    return {"Authorization": f"Basic {token}"}


class TestAuthenticatorBase:
    """Test suite for the authenticator base class."""

    def test_base_class_is_abstract(self) -> None:
        """Verifies only concrete authenticators can be created."""
        with pytest.raises(TypeError, match="abstract"):
            Authenticator()  # type: ignore[abstract]

    def test_subclass_without_call_is_abstract(self) -> None:
        class Incomplete(Authenticator):
            pass

        with pytest.raises(TypeError):
            Incomplete()  # type: ignore[abstract]


class TestBasicAuthenticator:
    """Test suite for HTTP Basic authentication.

    Categories:
    1. Accepted credentials (1 test)
    2. Rejected credentials - missing, wrong password, unknown user (3 tests)
    """

    @pytest.fixture
    def authenticator(self) -> BasicAuthenticator:
        return BasicAuthenticator({"admin": "s3cret"}, realm="Test Realm")

    def test_valid_credentials_return_user(self, authenticator: BasicAuthenticator) -> None:
        """Verifies a known user with the right password is accepted.

        Business context:
        The resolved name identifies the administrator in logs.

        Assertion Strategy:
        The user name is returned.
        """
        user = asyncio.run(authenticator(_request(_basic("admin", "s3cret"))))

        assert user == "admin"

    def test_missing_credentials_challenge(self, authenticator: BasicAuthenticator) -> None:
        """Verifies an anonymous request gets 401 with a Basic challenge."""
        with pytest.raises(HTTPException) as excinfo:
            asyncio.run(authenticator(_request()))

        assert excinfo.value.status_code == 401
        assert excinfo.value.headers == {"WWW-Authenticate": 'Basic realm="Test Realm"'}

    def test_wrong_password_rejected(self, authenticator: BasicAuthenticator) -> None:
        with pytest.raises(HTTPException) as excinfo:
            asyncio.run(authenticator(_request(_basic("admin", "guess"))))

        assert excinfo.value.status_code == 401

    def test_unknown_user_rejected(self, authenticator: BasicAuthenticator) -> None:
        with pytest.raises(HTTPException) as excinfo:
            asyncio.run(authenticator(_request(_basic("mallory", "s3cret"))))

        assert excinfo.value.status_code == 401


class TestHeaderAuthenticator:
    """Test suite for reverse proxy header authentication."""

    def test_header_value_is_user(self) -> None:
        authenticator = HeaderAuthenticator("X-Remote-User")

        user = asyncio.run(authenticator(_request({"X-Remote-User": "admin@example.org"})))

        assert user == "admin@example.org"

    @pytest.mark.parametrize("headers", [{}, {"X-Remote-User": "  "}])
    def test_missing_or_blank_header_rejected(self, headers: dict[str, str]) -> None:
        """Verifies requests that bypassed the proxy are refused."""
        with pytest.raises(HTTPException) as excinfo:
            asyncio.run(HeaderAuthenticator("X-Remote-User")(_request(headers)))

        assert excinfo.value.status_code == 401


class TestBuildAuthenticator:
    """Test suite for choosing the authenticator from configuration."""

    def test_basic_by_default(self) -> None:
        authenticator = build_authenticator(Config(basic_users={"admin": "pw"}))

        assert isinstance(authenticator, BasicAuthenticator)

    def test_header_method(self) -> None:
        authenticator = build_authenticator(Config(auth_method="header"))

        assert isinstance(authenticator, HeaderAuthenticator)

    def test_basic_without_users_fails(self) -> None:
        """Verifies a portal with no administrators refuses to start."""
        with pytest.raises(ValueError, match="at least one user"):
            build_authenticator(Config())
