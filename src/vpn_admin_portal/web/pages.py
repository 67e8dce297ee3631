"""
HTML page rendering for the VPN Admin Portal.

PURPOSE: Turn presenter view models into complete HTML documents.
AI CONTEXT: String templates only - every dynamic value goes through
_e() (HTML escaping) or _q() (URL quoting) before interpolation.

CONVENTIONS:
- ``root`` is the portal's base path ending in "/", so the portal works
  behind a reverse proxy prefix
- No inline scripts or styles: the Content-Security-Policy is
  "default-src 'self'", styling comes from /static/portal.css
"""

from __future__ import annotations

from html import escape
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from ..__version__ import __version__
from ..graph import format_bytes
from ..models import StatsStatus

if TYPE_CHECKING:
    from ..models import Connection
    from ..presenters import (
        ConnectionsView,
        InfoView,
        LogView,
        MessagesView,
        StatsView,
        UserDetailView,
        UsersView,
    )

__all__ = [
    "render_connections",
    "render_info",
    "render_users",
    "render_user",
    "render_log",
    "render_stats",
    "render_messages",
]

_NAV = (
    ("connections", "Connections"),
    ("users", "Users"),
    ("info", "Info"),
    ("stats", "Stats"),
    ("messages", "Messages"),
    ("log", "Log"),
)
_ACTIVE = ' class="active"'


def _e(value: Any) -> str:
    return escape(str(value), quote=True)


def _q(value: str) -> str:
    return quote(value, safe="")


def _layout(title: str, active: str, content: str, root: str) -> str:
    """
    Wrap page content in the shared document shell.

    Args:
        title: Page title shown in the header and browser tab.
        active: Nav entry to highlight (path without leading slash).
        content: Already escaped inner HTML.
        root: Portal base path ending in "/".

    Returns:
        Complete HTML document string.
    """
    nav = "".join(
        f'<a href="{_e(root + path)}"{_ACTIVE if path == active else ""}>{label}</a>'
        for path, label in _NAV
    )
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>VPN Admin Portal - {_e(title)}</title>
    <link rel="stylesheet" href="{_e(root)}static/portal.css">
</head>
<body>
    <div class="container">
        <header>
            <h1>{_e(title)}</h1>
            <nav>{nav}</nav>
        </header>
        {content}
        <footer>VPN Admin Portal {_e(__version__)}</footer>
    </div>
</body>
</html>"""


def _table(headers: list[str], rows: list[str], empty: str) -> str:
    head = "".join(f"<th>{_e(h)}</th>" for h in headers)
    body = "".join(rows) or f'<tr><td colspan="{len(headers)}" class="muted">{_e(empty)}</td></tr>'
    return f"<table><thead><tr>{head}</tr></thead><tbody>{body}</tbody></table>"


def _yes_no(flag: bool) -> str:
    return "yes" if flag else "no"


def _badge(disabled: bool) -> str:
    if disabled:
        return '<span class="status-badge status-disabled">disabled</span>'
    return '<span class="status-badge status-active">active</span>'


def _optional(value: Any) -> str:
    return "—" if value is None else _e(value)


def _user_link(user_id: str, root: str) -> str:
    return f'<a href="{_e(root)}user?user_id={_e(_q(user_id))}">{_e(user_id)}</a>'


def _connection_row(connection: Connection, root: str) -> str:
    user = _user_link(connection.user_id, root) if connection.user_id else "—"
    return f"""<tr>
        <td>{user}</td>
        <td>{_optional(connection.display_name)}</td>
        <td>{_e(connection.common_name)}</td>
        <td>{_optional(connection.ip4)}<br>{_optional(connection.ip6)}</td>
        <td>{_optional(connection.connected_at)}</td>
    </tr>"""


# =============================================================================
# Pages
# =============================================================================


def render_connections(view: ConnectionsView, root: str) -> str:
    """
    Render active connections, one panel per profile.

    Profiles without connections still get a panel so the administrator
    can see the profile exists and is idle.

    Args:
        view: ConnectionsView from PortalPresenter.get_connections().
        root: Portal base path ending in "/".

    Returns:
        Complete HTML document.

    Example:
        >>> html = render_connections(view, "/")
        >>> "Connections" in html
        True
    """
    panels = []
    profile_ids = list(view.id_name_mapping)
    profile_ids += sorted({c.profile_id for c in view.connections} - set(profile_ids))
    for profile_id in profile_ids:
        rows = [_connection_row(c, root) for c in view.connections_for(profile_id)]
        name = view.id_name_mapping.get(profile_id, profile_id)
        table = _table(
            ["User", "Configuration", "Common Name", "VPN Addresses", "Connected Since"],
            rows,
            "No active connections",
        )
        panels.append(f'<div class="panel"><h2>{_e(name)}</h2>{table}</div>')

    content = "".join(panels) or '<div class="panel muted">No profiles configured</div>'
    return _layout("Connections", "connections", content, root)


def render_info(view: InfoView, root: str) -> str:
    panels = []
    for profile in view.profiles:
        rows = [
            f"<tr><th>{_e(key)}</th><td>{_e(_setting_value(value))}</td></tr>"
            for key, value in sorted(profile.settings.items())
        ]
        body = "".join(rows) or '<tr><td class="muted">No settings</td></tr>'
        panels.append(
            f'<div class="panel"><h2>{_e(profile.display_name)} ({_e(profile.id)})</h2>'
            f"<table><tbody>{body}</tbody></table></div>"
        )
    content = "".join(panels) or '<div class="panel muted">No profiles configured</div>'
    return _layout("Info", "info", content, root)


def _setting_value(value: Any) -> str:
    if isinstance(value, bool):
        return _yes_no(value)
    if isinstance(value, list):
        return ", ".join(str(v) for v in value)
    return str(value)


def render_users(view: UsersView, root: str) -> str:
    rows = [
        f"""<tr>
            <td>{_user_link(u.user_id, root)}</td>
            <td>{_badge(u.is_disabled)}</td>
            <td>{_yes_no(u.has_totp_secret)}</td>
        </tr>"""
        for u in view.users
    ]
    table = _table(["User", "Status", "TOTP"], rows, "No users")
    return _layout("Users", "users", f'<div class="panel">{table}</div>', root)


def render_user(view: UserDetailView, root: str) -> str:
    """
    Render a single user's certificates, messages and account actions.

    The action buttons post back to /user; which buttons show depends on
    the account state (disable vs enable, TOTP removal only when set).

    Args:
        view: UserDetailView from PortalPresenter.get_user().
        root: Portal base path ending in "/".

    Returns:
        Complete HTML document.
    """
    certificate_rows = [
        f"""<tr>
            <td>{_e(c.display_name)}</td>
            <td>{_e(c.common_name)}</td>
            <td>{_optional(c.valid_from)}</td>
            <td>{_optional(c.valid_to)}</td>
            <td>{_badge(c.is_disabled)}</td>
        </tr>"""
        for c in view.certificates
    ]
    message_rows = [
        f"<tr><td>{_optional(m.date_time)}</td><td>{_e(m.type)}</td><td>{_e(m.body)}</td></tr>"
        for m in view.messages
    ]

    def _action(action: str, label: str, css: str = "") -> str:
        css_attr = f' class="{css}"' if css else ""
        return f"""<form class="inline" method="post" action="{_e(root)}user">
            <input type="hidden" name="user_id" value="{_e(view.user_id)}">
            <input type="hidden" name="user_action" value="{action}">
            <button type="submit"{css_attr}>{label}</button>
        </form>"""

    actions = (
        _action("enableUser", "Enable User")
        if view.is_disabled
        else _action("disableUser", "Disable User", "danger")
    )
    if view.has_totp_secret:
        actions += _action("deleteTotpSecret", "Delete TOTP Secret", "danger")

    certificates = _table(
        ["Name", "Common Name", "Valid From", "Valid To", "Status"],
        certificate_rows,
        "No certificates",
    )
    messages = _table(["Date", "Type", "Message"], message_rows, "No messages")

    content = f"""<div class="panel">
            <h2>Account</h2>
            <p>{_e(view.user_id)} {_badge(view.is_disabled)}
               TOTP: {_yes_no(view.has_totp_secret)}</p>
            <p>{actions}</p>
        </div>
        <div class="panel">
            <h2>Certificates</h2>
            {certificates}
        </div>
        <div class="panel">
            <h2>Messages</h2>
            {messages}
        </div>"""
    return _layout(f"User {view.user_id}", "users", content, root)


def render_log(view: LogView, root: str) -> str:
    """
    Render the connection log search form and, after a search, its result.

    Args:
        view: LogView from get_log_form() or search_log().
        root: Portal base path ending in "/".

    Returns:
        Complete HTML document.
    """
    date_time = view.date_time or view.current_date
    ip_address = view.ip_address or ""
    form = f"""<div class="panel">
            <h2>Search</h2>
            <form method="post" action="{_e(root)}log">
                <input type="text" name="date_time" value="{_e(date_time)}"
                       placeholder="YYYY-MM-DD HH:MM:SS">
                <input type="text" name="ip_address" value="{_e(ip_address)}"
                       placeholder="IP address">
                <button type="submit">Search</button>
            </form>
            <p class="muted">Current time: {_e(view.current_date)}</p>
        </div>"""

    result = ""
    if view.searched:
        if not view.result:
            result = '<div class="panel"><h2>Result</h2><p class="muted">No match</p></div>'
        else:
            keys: list[str] = []
            for entry in view.result:
                keys += [k for k in entry if k not in keys]
            rows = [
                "<tr>" + "".join(f"<td>{_optional(entry.get(k))}</td>" for k in keys) + "</tr>"
                for entry in view.result
            ]
            result = f'<div class="panel"><h2>Result</h2>{_table(keys, rows, "")}</div>'

    return _layout("Log", "log", form + result, root)


def render_stats(view: StatsView, root: str) -> str:
    """
    Render per-profile usage summaries with their traffic and user charts.

    Args:
        view: StatsView from PortalPresenter.get_stats().
        root: Portal base path ending in "/".

    Returns:
        Complete HTML document; a notice instead of data when the view is
        UNAVAILABLE.
    """
    if view.status is StatsStatus.UNAVAILABLE:
        content = (
            '<div class="panel warning">Statistics are not available yet. '
            "They are generated once a day by the server.</div>"
        )
        return _layout("Stats", "stats", content, root)

    generated = (
        f'<p class="muted">Generated at {_e(view.generated_at)} {_e(view.generated_at_tz)}</p>'
        if view.generated_at
        else ""
    )
    panels = []
    for profile in view.profiles:
        pid = _e(_q(profile.profile_id))
        traffic = "—" if profile.total_traffic is None else _e(format_bytes(profile.total_traffic))
        panels.append(
            f"""<div class="panel">
            <h2>{_e(profile.display_name)}</h2>
            <p>Total traffic: {traffic}
               &bull; Unique users: {_optional(profile.unique_user_count)}
               &bull; Max concurrent connections: {_optional(profile.max_concurrent_connections)}</p>
            <div class="chart-container">
                <img src="{_e(root)}stats/traffic?profile_id={pid}" alt="Traffic">
            </div>
            <div class="chart-container">
                <img src="{_e(root)}stats/users?profile_id={pid}" alt="Unique users">
            </div>
        </div>"""
        )
    content = generated + ("".join(panels) or '<div class="panel muted">No statistics</div>')
    return _layout("Stats", "stats", content, root)


def render_messages(view: MessagesView, root: str) -> str:
    """
    Render the message of the day editor.

    Args:
        view: MessagesView from PortalPresenter.get_messages().
        root: Portal base path ending in "/".

    Returns:
        Complete HTML document with a set form and, when a message
        exists, its text and a delete form.
    """
    current = '<p class="muted">No message of the day set</p>'
    body = ""
    if view.motd is not None:
        body = view.motd.body
        current = f"""<p>{_e(view.motd.body)}</p>
            <form method="post" action="{_e(root)}messages">
                <input type="hidden" name="message_action" value="delete">
                <input type="hidden" name="message_id" value="{_e(view.motd.id)}">
                <button type="submit" class="danger">Delete</button>
            </form>"""

    content = f"""<div class="panel">
            <h2>Current Message of the Day</h2>
            {current}
        </div>
        <div class="panel">
            <h2>Set Message of the Day</h2>
            <form method="post" action="{_e(root)}messages">
                <input type="hidden" name="message_action" value="set">
                <textarea name="message_body">{_e(body)}</textarea>
                <button type="submit">Set</button>
            </form>
        </div>"""
    return _layout("Messages", "messages", content, root)
