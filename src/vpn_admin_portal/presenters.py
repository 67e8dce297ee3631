"""
Presenters for the VPN Admin Portal.

PURPOSE: Orchestrate server API calls and shape the results for rendering.
AI CONTEXT: No HTTP, no HTML - routes validate input, presenters call the
server API, pages render the returned view models.

DESIGN PRINCIPLES:
1. Presenters receive a ServerClient and a clock, return view models
2. Remote calls are sequential and happen in a fixed, testable order
3. Mutations are only triggered here; no state is kept between requests
4. Fully unit-testable with a MagicMock(spec=ServerClient)

USAGE:
    presenter = PortalPresenter(client, clock=datetime.now)
    view = presenter.get_connections()

    charts = ChartPresenter(client, GraphRenderer(), clock=datetime.now)
    png = charts.render_traffic_chart("internet")
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any, assert_never

from .config import Config
from .graph import create_date_list, format_bytes, merge_series
from .models import (
    ClientCertificate,
    Connection,
    MessageAction,
    Profile,
    ProfileStats,
    StatsStatus,
    SystemMessage,
    User,
    UserAction,
    UserMessage,
)
from .server_client import ServerClientError

if TYPE_CHECKING:
    from .graph import GraphRenderer
    from .server_client import ServerClient

__all__ = [
    "Clock",
    "UnknownProfileError",
    "ConnectionsView",
    "InfoView",
    "UsersView",
    "UserDetailView",
    "LogView",
    "StatsView",
    "MessagesView",
    "PortalPresenter",
    "ChartPresenter",
]

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class UnknownProfileError(LookupError):
    """Raised when statistics are requested for a profile without data."""


# =============================================================================
# View models
# =============================================================================


@dataclass
class ConnectionsView:
    """View model for the active connections page."""

    id_name_mapping: dict[str, str]
    connections: list[Connection]

    def connections_for(self, profile_id: str) -> list[Connection]:
        return [c for c in self.connections if c.profile_id == profile_id]


@dataclass
class InfoView:
    """View model for the profile information page."""

    profiles: list[Profile]


@dataclass
class UsersView:
    """View model for the user list page."""

    users: list[User]


@dataclass
class UserDetailView:
    """View model for a single user's page."""

    user_id: str
    certificates: list[ClientCertificate]
    messages: list[UserMessage]
    has_totp_secret: bool
    is_disabled: bool


@dataclass
class LogView:
    """
    View model for the connection log search page.

    ``result`` is None both before a search and when the server found no
    match; ``searched`` tells the two apart.
    """

    current_date: str
    date_time: str | None = None
    ip_address: str | None = None
    result: list[dict[str, Any]] | None = None
    searched: bool = False

    @property
    def has_match(self) -> bool:
        return self.result is not None


@dataclass
class StatsView:
    """View model for the usage statistics page."""

    status: StatsStatus
    generated_at: str | None = None
    generated_at_tz: str = ""
    profiles: list[ProfileStats] = field(default_factory=list)

    @property
    def id_name_mapping(self) -> dict[str, str]:
        return {p.profile_id: p.display_name for p in self.profiles}


@dataclass
class MessagesView:
    """View model for the message of the day page."""

    motd: SystemMessage | None


# =============================================================================
# Presenters
# =============================================================================


class PortalPresenter:
    """
    Presenter for every HTML page of the portal.

    Each get_* method issues the server API reads for one page; each
    apply_* method performs the writes of one form submission.
    """

    def __init__(self, client: ServerClient, clock: Clock = datetime.now) -> None:
        """
        Initialize the presenter with its collaborators.

        Business context: The clock is injected so the log form's current
        timestamp and the statistics time zone are deterministic in tests.

        Args:
            client: Server API client.
            clock: Callable returning the current local datetime.

        Example:
            >>> presenter = PortalPresenter(client, clock=lambda: datetime(2026, 1, 1))
        """
        self.client = client
        self.clock = clock

    # ---------------------------------------------------------------- reads

    def _profiles(self) -> list[Profile]:
        return Profile.list_from_mapping(self.client.get_require_mapping("profile_list"))

    def get_connections(self) -> ConnectionsView:
        """
        Gather active connections and the profile names to group them by.

        Returns:
            ConnectionsView with the profile id -> display name mapping and
            every active connection, in server order.

        Raises:
            ServerClientError: If either server API call fails.
        """
        profiles = self._profiles()
        groups = self.client.get_require_list("client_connections")
        return ConnectionsView(
            id_name_mapping={p.id: p.display_name for p in profiles},
            connections=Connection.list_from_groups(groups),
        )

    def get_info(self) -> InfoView:
        return InfoView(profiles=self._profiles())

    def get_users(self) -> UsersView:
        users = self.client.get_require_list("user_list")
        return UsersView(users=[User.from_dict(u) for u in users])

    def get_user(self, user_id: str) -> UserDetailView:
        """
        Gather everything shown on a single user's page.

        Args:
            user_id: Already validated user id.

        Returns:
            UserDetailView with certificates, messages and account flags.

        Raises:
            ServerClientError: If any of the four server API calls fails.
        """
        params = {"user_id": user_id}
        certificates = self.client.get_require_list("client_certificate_list", params)
        messages = self.client.get_require_list("user_messages", params)
        return UserDetailView(
            user_id=user_id,
            certificates=[ClientCertificate.from_dict(c) for c in certificates],
            messages=[UserMessage.from_dict(m) for m in messages],
            has_totp_secret=self.client.get_require_bool("has_totp_secret", params),
            is_disabled=self.client.get_require_bool("is_disabled_user", params),
        )

    def get_log_form(self) -> LogView:
        return LogView(current_date=self.clock().strftime(Config.DATE_TIME_FORMAT))

    def search_log(self, date_time: str, ip_address: str) -> LogView:
        """
        Look up which user held an IP address at a given moment.

        Args:
            date_time: Validated "YYYY-MM-DD HH:MM:SS" timestamp.
            ip_address: Validated IPv4 or IPv6 address.

        Returns:
            LogView marked as searched; ``result`` is None when the server
            API reports no match.

        Raises:
            ServerClientError: If the log call fails.
        """
        result = self.client.get_optional_list(
            "log", {"date_time": date_time, "ip_address": ip_address}
        )
        return LogView(
            current_date=self.clock().strftime(Config.DATE_TIME_FORMAT),
            date_time=date_time,
            ip_address=ip_address,
            result=result,
            searched=True,
        )

    def get_stats(self) -> StatsView:
        """
        Gather usage statistics for the profiles that still exist.

        Statistics are produced by a daily job on the server. A payload
        without a "profiles" member is an old format the portal no longer
        reads; it yields an UNAVAILABLE view until the job runs again.
        Profiles present in the statistics but no longer configured are
        dropped.

        Business context: The statistics page is how operators see
        traffic and user trends per VPN offering.

        Returns:
            StatsView with status, generation time, local time zone name
            and one ProfileStats per configured profile with data.

        Raises:
            ServerClientError: If a server API call fails.

        Example:
            >>> view = presenter.get_stats()
            >>> view.status
            <StatsStatus.AVAILABLE: 'available'>
        """
        tz_name = self.clock().astimezone().tzname() or ""
        stats = self.client.get("stats")
        stats_profiles = _stats_profiles(stats)
        if stats_profiles is None:
            return StatsView(status=StatsStatus.UNAVAILABLE, generated_at_tz=tz_name)

        profiles = [
            ProfileStats.from_dict(profile, stats_profiles[profile.id])
            for profile in self._profiles()
            if profile.id in stats_profiles
        ]
        return StatsView(
            status=StatsStatus.AVAILABLE,
            generated_at=_format_generated_at(stats.get("generated_at")),
            generated_at_tz=tz_name,
            profiles=profiles,
        )

    def get_messages(self) -> MessagesView:
        """
        Fetch the message of the day.

        Only one motd is meant to exist; if the server holds more, the
        first is shown and the others are left alone.

        Returns:
            MessagesView whose motd is None when no message is set.
        """
        return MessagesView(motd=next(iter(self._motd_messages()), None))

    def _motd_messages(self) -> list[SystemMessage]:
        messages = self.client.get_require_list(
            "system_messages", {"message_type": Config.MOTD_MESSAGE_TYPE}
        )
        return [SystemMessage.from_dict(m, Config.MOTD_MESSAGE_TYPE) for m in messages]

    # --------------------------------------------------------------- writes

    def apply_user_action(self, user_id: str, action: UserAction) -> None:
        """
        Perform an administrative action on a user account.

        Disabling a user also terminates every active session of that
        user, one kill_client call per connection after disable_user, so
        a disabled user cannot keep using an existing tunnel. A failure
        part way leaves earlier kills in place.

        Args:
            user_id: Validated user id.
            action: Parsed UserAction.

        Raises:
            ServerClientError: If any server API call fails.

        Example:
            >>> presenter.apply_user_action("alice", UserAction.DISABLE_USER)
        """
        params = {"user_id": user_id}
        match action:
            case UserAction.DISABLE_USER:
                self.client.post("disable_user", params)
                groups = self.client.get_require_list("client_connections", params)
                for connection in Connection.list_from_groups(groups):
                    self.client.post("kill_client", {"common_name": connection.common_name})
                logger.info("Disabled user %s", user_id)
            case UserAction.ENABLE_USER:
                self.client.post("enable_user", params)
                logger.info("Enabled user %s", user_id)
            case UserAction.DELETE_TOTP_SECRET:
                self.client.post("delete_totp_secret", params)
                logger.info("Deleted TOTP secret of user %s", user_id)
            case _:
                assert_never(action)

    def set_motd(self, body: str) -> None:
        """
        Replace the message of the day.

        Every existing motd is deleted before the new one is added, which
        keeps at most one motd on the server.

        Args:
            body: Message text, accepted as-is.
        """
        for message in self._motd_messages():
            self.client.post("delete_system_message", {"message_id": message.id})
        self.client.post(
            "add_system_message",
            {"message_type": Config.MOTD_MESSAGE_TYPE, "message_body": body},
        )

    def delete_message(self, message_id: str) -> None:
        self.client.post("delete_system_message", {"message_id": message_id})

    def apply_message_action(
        self,
        action: MessageAction,
        *,
        body: str = "",
        message_id: str | None = None,
    ) -> None:
        match action:
            case MessageAction.SET:
                self.set_motd(body)
            case MessageAction.DELETE:
                if message_id is None:
                    raise ValueError("message_id is required to delete a message")
                self.delete_message(message_id)
            case _:
                assert_never(action)


class ChartPresenter:
    """
    Presenter for the statistics chart images.

    Builds a zero-filled daily series for one profile and renders it with
    the injected GraphRenderer.
    """

    def __init__(
        self,
        client: ServerClient,
        renderer: GraphRenderer,
        clock: Clock = datetime.now,
        stats_days: int = Config.DEFAULT_STATS_DAYS,
    ) -> None:
        self.client = client
        self.renderer = renderer
        self.clock = clock
        self.stats_days = stats_days

    def daily_series(self, profile_id: str, attribute: str) -> dict[str, float]:
        """
        Build the per-day series of one statistic for one profile.

        Args:
            profile_id: Validated profile id.
            attribute: DailyStat attribute, "bytes_transferred" or
                "unique_user_count".

        Returns:
            Date -> value mapping covering the configured window ending
            yesterday, zero where the server has no data, plus any older
            days the server reported.

        Raises:
            UnknownProfileError: If the statistics hold no data for the
                profile (or are in the unsupported old format).
            ServerClientError: If the stats call fails.

        Example:
            >>> charts.daily_series("internet", "unique_user_count")
            {'2026-09-17': 0, ..., '2026-10-17': 12}
        """
        profiles = _stats_profiles(self.client.get("stats"))
        if profiles is None or profile_id not in profiles:
            raise UnknownProfileError(profile_id)

        profile = Profile(id=profile_id, display_name=profile_id)
        days = ProfileStats.from_dict(profile, profiles[profile_id]).days
        values = {day.date: getattr(day, attribute) for day in days}

        scaffold = create_date_list(self.clock().date(), timedelta(days=self.stats_days))
        return merge_series(scaffold, values)

    def render_traffic_chart(self, profile_id: str) -> bytes:
        return self.renderer.draw(
            self.daily_series(profile_id, "bytes_transferred"), format_bytes
        )

    def render_users_chart(self, profile_id: str) -> bytes:
        return self.renderer.draw(self.daily_series(profile_id, "unique_user_count"))


def _format_generated_at(value: Any) -> str | None:
    """Render the stats generation time; the server sends a Unix timestamp."""
    if value is None or value is False:
        return None
    if isinstance(value, int | float) and not isinstance(value, bool):
        return datetime.fromtimestamp(value).strftime(Config.DATE_TIME_FORMAT)
    return str(value)


def _stats_profiles(stats: Any) -> dict[str, Any] | None:
    """
    Return the per-profile statistics, or None for the old stats format.

    Only a payload without a "profiles" member is the old format. An
    empty mapping arrives as [] because the server's JSON encoder cannot
    tell the two apart.

    Raises:
        ServerClientError: If "profiles" is present but not a mapping.
    """
    if not isinstance(stats, dict) or "profiles" not in stats:
        return None
    profiles = stats["profiles"]
    if profiles == []:
        return {}
    if not isinstance(profiles, dict):
        raise ServerClientError("stats", f"expected an object, got {type(profiles).__name__}")
    return profiles
