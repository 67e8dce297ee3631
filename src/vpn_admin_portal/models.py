"""
Data models for the VPN Admin Portal.

PURPOSE: Type-safe dataclasses for the entities returned by the server API.
AI CONTEXT: Request-scoped view data only - nothing here is persisted.

MODEL OVERVIEW:
- Profile: A VPN server configuration users connect through
- User: A portal end user and its account flags
- Connection: An active VPN session (one per client certificate in use)
- ClientCertificate / UserMessage: Per-user details on the user page
- SystemMessage: Administrator banner ("motd")
- DailyStat / ProfileStats: Usage statistics per profile

ACTIONS:
UserAction and MessageAction are closed enums. Parsing an unknown form
value raises InputValidationError, so route handlers only ever dispatch
over known members.

DESERIALIZATION:
All models have from_dict() accepting the server API's snake_case or
camelCase keys as documented per model.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .validation import InputValidationError

__all__ = [
    "Profile",
    "User",
    "Connection",
    "ClientCertificate",
    "UserMessage",
    "SystemMessage",
    "DailyStat",
    "ProfileStats",
    "UserAction",
    "MessageAction",
    "StatsStatus",
]


@dataclass(frozen=True)
class Profile:
    """VPN profile as listed by ``profile_list``."""

    id: str
    display_name: str
    settings: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_dict(cls, profile_id: str, data: dict[str, Any]) -> Profile:
        """
        Create a Profile from one ``profile_list`` entry.

        ``profile_list`` is a mapping keyed by profile id, so the id is
        passed separately. A missing displayName falls back to the id.
        The remaining settings are kept for the info page.

        Args:
            profile_id: Key of the entry in the profile mapping.
            data: Profile settings, carrying at least ``displayName``.

        Returns:
            Profile instance.

        Example:
            >>> Profile.from_dict("internet", {"displayName": "Internet"})
            Profile(id='internet', display_name='Internet')
        """
        settings = {k: v for k, v in data.items() if k != "displayName"}
        return cls(
            id=profile_id,
            display_name=str(data.get("displayName", profile_id)),
            settings=settings,
        )

    @classmethod
    def list_from_mapping(cls, profile_list: dict[str, Any]) -> list[Profile]:
        return [cls.from_dict(str(pid), data) for pid, data in profile_list.items()]


@dataclass(frozen=True)
class User:
    """Portal user as listed by ``user_list``."""

    user_id: str
    is_disabled: bool = False
    has_totp_secret: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> User:
        return cls(
            user_id=str(data["user_id"]),
            is_disabled=bool(data.get("is_disabled", False)),
            has_totp_secret=bool(data.get("has_totp_secret", False)),
        )


@dataclass(frozen=True)
class Connection:
    """
    Active VPN session.

    ``client_connections`` groups sessions per profile, so the profile id
    comes from the enclosing group rather than the connection itself.
    """

    common_name: str
    profile_id: str
    user_id: str | None = None
    display_name: str | None = None
    ip4: str | None = None
    ip6: str | None = None
    connected_at: str | None = None

    @classmethod
    def from_dict(cls, profile_id: str, data: dict[str, Any]) -> Connection:
        def _optional(key: str) -> str | None:
            value = data.get(key)
            return None if value is None else str(value)

        return cls(
            common_name=str(data["common_name"]),
            profile_id=profile_id,
            user_id=_optional("user_id"),
            display_name=_optional("display_name"),
            ip4=_optional("virtual_address_4") or _optional("ip4"),
            ip6=_optional("virtual_address_6") or _optional("ip6"),
            connected_at=_optional("connected_at"),
        )

    @classmethod
    def list_from_groups(cls, groups: list[dict[str, Any]]) -> list[Connection]:
        """
        Flatten ``client_connections`` output into a list of connections.

        Args:
            groups: List of ``{"id": <profile id>, "connections": [...]}``.

        Returns:
            All connections across all profiles, in server order.

        Example:
            >>> groups = [{"id": "a", "connections": [{"common_name": "x"}]}]
            >>> [c.common_name for c in Connection.list_from_groups(groups)]
            ['x']
        """
        return [
            cls.from_dict(str(group["id"]), item)
            for group in groups
            for item in group.get("connections", [])
        ]


@dataclass(frozen=True)
class ClientCertificate:
    """Client certificate issued to a user."""

    common_name: str
    display_name: str
    valid_from: str | None = None
    valid_to: str | None = None
    is_disabled: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ClientCertificate:
        return cls(
            common_name=str(data["common_name"]),
            display_name=str(data.get("display_name", "")),
            valid_from=None if data.get("valid_from") is None else str(data["valid_from"]),
            valid_to=None if data.get("valid_to") is None else str(data["valid_to"]),
            is_disabled=bool(data.get("is_disabled", False)),
        )


@dataclass(frozen=True)
class UserMessage:
    """Notification addressed to a single user."""

    id: str
    type: str
    body: str
    date_time: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> UserMessage:
        return cls(
            id=str(data["id"]),
            type=str(data.get("type", data.get("message_type", ""))),
            body=str(data.get("message", data.get("message_body", ""))),
            date_time=None if data.get("date_time") is None else str(data["date_time"]),
        )


@dataclass(frozen=True)
class SystemMessage:
    """System wide message; the portal only manages the "motd" type."""

    id: str
    type: str
    body: str
    date_time: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any], message_type: str = "motd") -> SystemMessage:
        return cls(
            id=str(data["id"]),
            type=str(data.get("type", data.get("message_type", message_type))),
            body=str(data.get("message", data.get("message_body", ""))),
            date_time=None if data.get("date_time") is None else str(data["date_time"]),
        )


@dataclass(frozen=True)
class DailyStat:
    """Traffic and user count for one profile on one day."""

    date: str
    bytes_transferred: int = 0
    unique_user_count: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DailyStat:
        return cls(
            date=str(data["date"]),
            bytes_transferred=int(data.get("bytes_transferred") or 0),
            unique_user_count=int(data.get("unique_user_count") or 0),
        )


@dataclass(frozen=True)
class ProfileStats:
    """Aggregated statistics of a single profile."""

    profile_id: str
    display_name: str
    total_traffic: int | None = None
    unique_user_count: int | None = None
    max_concurrent_connections: int | None = None
    days: list[DailyStat] = field(default_factory=list)

    @classmethod
    def from_dict(cls, profile: Profile, data: dict[str, Any]) -> ProfileStats:
        def _optional_int(key: str) -> int | None:
            value = data.get(key)
            return None if value is None else int(value)

        return cls(
            profile_id=profile.id,
            display_name=profile.display_name,
            total_traffic=_optional_int("total_traffic"),
            unique_user_count=_optional_int("unique_user_count"),
            max_concurrent_connections=_optional_int("max_concurrent_connections"),
            days=[DailyStat.from_dict(day) for day in data.get("days", [])],
        )


class UserAction(Enum):
    """Administrative actions on a single user account."""

    DISABLE_USER = "disableUser"
    ENABLE_USER = "enableUser"
    DELETE_TOTP_SECRET = "deleteTotpSecret"

    @classmethod
    def parse(cls, value: str | None) -> UserAction:
        """
        Convert the ``user_action`` form value into a UserAction.

        Args:
            value: Raw form value, possibly missing.

        Returns:
            Matching UserAction member.

        Raises:
            InputValidationError: If the value is missing or unknown.

        Example:
            >>> UserAction.parse("enableUser")
            <UserAction.ENABLE_USER: 'enableUser'>
        """
        try:
            return cls(value)
        except ValueError:
            raise InputValidationError('unsupported "user_action"') from None


class MessageAction(Enum):
    """Actions on the system message of the day."""

    SET = "set"
    DELETE = "delete"

    @classmethod
    def parse(cls, value: str | None) -> MessageAction:
        try:
            return cls(value)
        except ValueError:
            raise InputValidationError('unsupported "message_action"') from None


class StatsStatus(Enum):
    """Whether the server API returned statistics in a supported format."""

    AVAILABLE = "available"
    # The stats job has not yet produced the per-profile format; it runs
    # once a day on the server.
    UNAVAILABLE = "unavailable"
