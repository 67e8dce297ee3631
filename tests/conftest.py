"""
Pytest configuration and shared fixtures for VPN Admin Portal tests.

This module contains:
- make_server_client: MagicMock(spec=ServerClient) answering from a dict
- Canned server API data shared by presenter and route tests
- A fixed clock so dates and timestamps are deterministic
"""

from __future__ import annotations

import copy
from collections.abc import Callable
from datetime import datetime
from typing import Any
from unittest.mock import MagicMock

import pytest

from vpn_admin_portal.server_client import ServerClient

FIXED_NOW = datetime(2026, 3, 2, 12, 30, 0)
ADMIN_CREDENTIALS = ("admin", "s3cret")

SERVER_DATA: dict[str, Any] = {
    "profile_list": {
        "internet": {"displayName": "Internet", "hostName": "vpn.example.org"},
        "office": {"displayName": "Office", "defaultGateway": False},
    },
    "client_connections": [
        {
            "id": "internet",
            "connections": [
                {
                    "common_name": "c0ffee",
                    "user_id": "alice",
                    "display_name": "Laptop",
                    "virtual_address_4": "10.10.10.2",
                    "virtual_address_6": "fd00:4242::2",
                    "connected_at": "2026-03-02 09:00:00",
                },
                {
                    "common_name": "beef01",
                    "user_id": "alice",
                    "display_name": "Phone",
                    "virtual_address_4": "10.10.10.3",
                    "virtual_address_6": "fd00:4242::3",
                },
            ],
        },
        {"id": "office", "connections": []},
    ],
    "user_list": [
        {"user_id": "alice", "is_disabled": False, "has_totp_secret": True},
        {"user_id": "bob", "is_disabled": True, "has_totp_secret": False},
    ],
    "client_certificate_list": [
        {
            "common_name": "c0ffee",
            "display_name": "Laptop",
            "valid_from": "2026-01-01 00:00:00",
            "valid_to": "2027-01-01 00:00:00",
            "is_disabled": False,
        }
    ],
    "user_messages": [
        {
            "id": "7",
            "type": "notification",
            "message": "Your certificate was renewed",
            "date_time": "2026-02-01 10:00:00",
        }
    ],
    "has_totp_secret": True,
    "is_disabled_user": False,
    "system_messages": [
        {"id": "3", "message_body": "Maintenance tonight", "date_time": "2026-03-01 08:00:00"}
    ],
    "log": [
        {"user_id": "alice", "common_name": "c0ffee", "connected_at": "2026-03-02 09:00:00"}
    ],
    "stats": {
        "generated_at": 1772438400,
        "profiles": {
            "internet": {
                "total_traffic": 3 * 1024**3,
                "unique_user_count": 5,
                "max_concurrent_connections": 3,
                "days": [
                    {"date": "2026-02-27", "bytes_transferred": 2048, "unique_user_count": 2},
                    {"date": "2026-03-01", "bytes_transferred": 4096, "unique_user_count": 4},
                ],
            },
            "removed": {"total_traffic": 1, "unique_user_count": 1, "days": []},
        },
    },
}


def make_server_client(overrides: dict[str, Any] | None = None) -> MagicMock:
    """
    Create a ServerClient mock answering every read from canned data.

    Each read accessor looks the operation up in SERVER_DATA (merged with
    ``overrides``) and ignores the parameters. Writes return True. Tests
    inspect ``mock.method_calls`` to check which calls were made and in
    which order.

    Business context: Presenters and routes only ever see the server API
    through ServerClient, so a spec'd mock isolates them from the network
    while rejecting calls to methods that do not exist.

    Args:
        overrides: Operation -> data entries replacing the defaults.

    Returns:
        MagicMock with spec=ServerClient.

    Example:
        >>> client = make_server_client({"user_list": []})
        >>> client.get_require_list("user_list")
        []
    """
    data = copy.deepcopy(SERVER_DATA)
    data.update(overrides or {})

    def _lookup(operation: str, params: Any = None) -> Any:
        return data[operation]

    client = MagicMock(spec=ServerClient)
    for accessor in (
        "get",
        "get_require_list",
        "get_require_mapping",
        "get_require_bool",
        "get_optional_list",
    ):
        getattr(client, accessor).side_effect = _lookup
    client.post.return_value = True
    return client


@pytest.fixture
def server_client() -> MagicMock:
    """Server API client mock loaded with the default canned data."""
    return make_server_client()


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    """Clock always returning 2026-03-02 12:30:00 local time."""
    return lambda: FIXED_NOW
