"""Tests for models module."""

from __future__ import annotations

import pytest

from vpn_admin_portal.models import (
    ClientCertificate,
    Connection,
    DailyStat,
    MessageAction,
    Profile,
    ProfileStats,
    SystemMessage,
    User,
    UserAction,
    UserMessage,
)
from vpn_admin_portal.validation import InputValidationError


class TestProfile:
    """Tests for Profile deserialization."""

    def test_from_dict_uses_display_name(self) -> None:
        """Profile takes displayName and keeps the other settings."""
        profile = Profile.from_dict("internet", {"displayName": "Internet", "hostName": "vpn"})

        assert profile.id == "internet"
        assert profile.display_name == "Internet"
        assert profile.settings == {"hostName": "vpn"}

    def test_from_dict_falls_back_to_id(self) -> None:
        """Profile without displayName is named after its id."""
        assert Profile.from_dict("office", {}).display_name == "office"

    def test_list_from_mapping_keeps_order(self) -> None:
        """Profiles come out in server order."""
        profiles = Profile.list_from_mapping(
            {"b": {"displayName": "B"}, "a": {"displayName": "A"}}
        )

        assert [p.id for p in profiles] == ["b", "a"]

    def test_settings_do_not_affect_equality(self) -> None:
        """Two profiles with the same id and name compare equal."""
        assert Profile("x", "X", {"a": 1}) == Profile("x", "X")


class TestUser:
    """Tests for User deserialization."""

    def test_from_dict_defaults_flags(self) -> None:
        """Missing flags default to False."""
        user = User.from_dict({"user_id": "alice"})

        assert user == User("alice", is_disabled=False, has_totp_secret=False)

    def test_from_dict_requires_user_id(self) -> None:
        with pytest.raises(KeyError):
            User.from_dict({"is_disabled": True})


class TestConnection:
    """Tests for Connection deserialization."""

    def test_list_from_groups_flattens_and_tags_profile(self) -> None:
        """Connections are flattened and tagged with their group's profile id.

        Business context:
        client_connections groups sessions per profile; the connections
        page and the disable-user flow both need the flat list.
        """
        groups = [
            {"id": "internet", "connections": [{"common_name": "a"}, {"common_name": "b"}]},
            {"id": "office", "connections": [{"common_name": "c"}]},
            {"id": "empty"},
        ]

        connections = Connection.list_from_groups(groups)

        assert [(c.profile_id, c.common_name) for c in connections] == [
            ("internet", "a"),
            ("internet", "b"),
            ("office", "c"),
        ]

    def test_from_dict_reads_virtual_addresses(self) -> None:
        connection = Connection.from_dict(
            "internet",
            {
                "common_name": "a",
                "user_id": "alice",
                "virtual_address_4": "10.0.0.2",
                "virtual_address_6": "fd00::2",
            },
        )

        assert connection.ip4 == "10.0.0.2"
        assert connection.ip6 == "fd00::2"
        assert connection.user_id == "alice"
        assert connection.connected_at is None


class TestMessagesAndCertificates:
    """Tests for per-user details and system messages."""

    def test_certificate_from_dict(self) -> None:
        cert = ClientCertificate.from_dict({"common_name": "c", "display_name": "Laptop"})

        assert cert.display_name == "Laptop"
        assert cert.valid_to is None
        assert cert.is_disabled is False

    def test_user_message_body_from_message_key(self) -> None:
        message = UserMessage.from_dict({"id": 1, "type": "notification", "message": "hi"})

        assert message == UserMessage("1", "notification", "hi")

    def test_system_message_defaults_type(self) -> None:
        """System messages without a type are assigned the requested one."""
        message = SystemMessage.from_dict({"id": "3", "message_body": "Maintenance"})

        assert message.type == "motd"
        assert message.body == "Maintenance"


class TestStatistics:
    """Tests for DailyStat and ProfileStats."""

    def test_daily_stat_null_counts_are_zero(self) -> None:
        """Verifies explicit nulls from the server read as zero.

        Business context:
        A day without traffic may carry null instead of 0; the chart
        must draw an empty bar rather than fail.
        """
        stat = DailyStat.from_dict(
            {"date": "2026-03-01", "bytes_transferred": None, "unique_user_count": None}
        )

        assert stat == DailyStat("2026-03-01", bytes_transferred=0, unique_user_count=0)

    def test_profile_stats_from_dict(self) -> None:
        profile = Profile("internet", "Internet")
        stats = ProfileStats.from_dict(
            profile,
            {
                "total_traffic": 2048,
                "unique_user_count": 3,
                "days": [{"date": "2026-03-01", "bytes_transferred": 10}],
            },
        )

        assert stats.display_name == "Internet"
        assert stats.total_traffic == 2048
        assert stats.max_concurrent_connections is None
        assert stats.days == [DailyStat("2026-03-01", bytes_transferred=10)]


class TestActions:
    """Tests for the closed action enums.

    Unknown values must raise before any server API call, so parse()
    is the only way form values become actions.
    """

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("disableUser", UserAction.DISABLE_USER),
            ("enableUser", UserAction.ENABLE_USER),
            ("deleteTotpSecret", UserAction.DELETE_TOTP_SECRET),
        ],
    )
    def test_user_action_parse(self, value: str, expected: UserAction) -> None:
        assert UserAction.parse(value) is expected

    @pytest.mark.parametrize("value", [None, "", "deleteUser", "DISABLEUSER"])
    def test_user_action_rejects_unknown(self, value: str | None) -> None:
        with pytest.raises(InputValidationError, match='unsupported "user_action"'):
            UserAction.parse(value)

    def test_message_action_parse(self) -> None:
        assert MessageAction.parse("set") is MessageAction.SET
        assert MessageAction.parse("delete") is MessageAction.DELETE

    @pytest.mark.parametrize("value", [None, "add", "Set"])
    def test_message_action_rejects_unknown(self, value: str | None) -> None:
        with pytest.raises(InputValidationError, match='unsupported "message_action"'):
            MessageAction.parse(value)
