"""
FastAPI routes for the VPN Admin Portal.

PURPOSE: Thin route handlers that validate input and delegate to presenters.
AI CONTEXT: Routes should be simple - orchestration lives in presenters,
markup lives in pages.

ROUTE STRUCTURE:
- GET  /            : Redirect to /connections
- GET  /connections : Active VPN sessions per profile
- GET  /info        : Profile configuration
- GET  /users, /user: User list and single user
- POST /user        : Disable/enable user, delete TOTP secret
- GET/POST /log     : Connection log search
- GET  /stats       : Usage statistics
- GET  /stats/*     : PNG charts
- GET/POST /messages: Message of the day

Handlers are plain functions: FastAPI runs them in its thread pool, so
the blocking server API calls never stall the event loop.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Form, HTTPException, Query, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse, Response

from .. import validation
from ..auth import require_admin
from ..graph import GraphRenderer
from ..models import MessageAction, UserAction
from ..presenters import ChartPresenter, Clock, PortalPresenter, UnknownProfileError
from ..server_client import ServerClient
from . import pages

__all__ = [
    "router",
    "get_server_client",
    "get_clock",
    "get_portal_presenter",
    "get_chart_presenter",
]

router = APIRouter(dependencies=[Depends(require_admin)])

OptionalQuery = Annotated[str | None, Query()]
OptionalForm = Annotated[str | None, Form()]

# =============================================================================
# Dependency Factory Functions
# =============================================================================


def get_server_client(request: Request) -> ServerClient:
    """
    Return the application's shared server API client.

    The client is created once by create_app() and stored on app.state;
    tests replace it with a MagicMock(spec=ServerClient).

    Args:
        request: Current request, used to reach app.state.

    Returns:
        ServerClient instance.
    """
    return request.app.state.server_client


def get_clock(request: Request) -> Clock:
    return request.app.state.clock


def get_portal_presenter(
    client: Annotated[ServerClient, Depends(get_server_client)],
    clock: Annotated[Clock, Depends(get_clock)],
) -> PortalPresenter:
    return PortalPresenter(client, clock)


def get_chart_presenter(
    request: Request,
    client: Annotated[ServerClient, Depends(get_server_client)],
    clock: Annotated[Clock, Depends(get_clock)],
) -> ChartPresenter:
    """
    Create a ChartPresenter wired to the app's renderer and stats window.

    Args:
        request: Current request, used to reach app.state.
        client: Injected server API client.
        clock: Injected clock; the chart window ends the day before its date.

    Returns:
        ChartPresenter ready to render traffic and user charts.
    """
    renderer: GraphRenderer = request.app.state.graph_renderer
    return ChartPresenter(client, renderer, clock, request.app.state.config.stats_days)


PortalDep = Annotated[PortalPresenter, Depends(get_portal_presenter)]
ChartDep = Annotated[ChartPresenter, Depends(get_chart_presenter)]


def _root(request: Request) -> str:
    """Base path of the portal, honouring a reverse proxy prefix."""
    return request.scope.get("root_path", "").rstrip("/") + "/"


def _html(content: str) -> HTMLResponse:
    return HTMLResponse(content=content, media_type="text/html; charset=utf-8")


def _redirect(request: Request, path: str) -> RedirectResponse:
    return RedirectResponse(url=_root(request) + path, status_code=status.HTTP_302_FOUND)


# ============================================================================
# Page Routes
# ============================================================================


@router.get("/")
def index(request: Request) -> RedirectResponse:
    return _redirect(request, "connections")


@router.get("/connections", response_class=HTMLResponse)
def connections_page(request: Request, presenter: PortalDep) -> HTMLResponse:
    return _html(pages.render_connections(presenter.get_connections(), _root(request)))


@router.get("/info", response_class=HTMLResponse)
def info_page(request: Request, presenter: PortalDep) -> HTMLResponse:
    return _html(pages.render_info(presenter.get_info(), _root(request)))


@router.get("/users", response_class=HTMLResponse)
def users_page(request: Request, presenter: PortalDep) -> HTMLResponse:
    return _html(pages.render_users(presenter.get_users(), _root(request)))


@router.get("/user", response_class=HTMLResponse)
def user_page(
    request: Request,
    presenter: PortalDep,
    user_id: OptionalQuery = None,
) -> HTMLResponse:
    user_id = validation.user_id(user_id)
    return _html(pages.render_user(presenter.get_user(user_id), _root(request)))


@router.post("/user")
def user_action(
    request: Request,
    presenter: PortalDep,
    user_id: OptionalForm = None,
    user_action: OptionalForm = None,
) -> RedirectResponse:
    """
    Apply an administrative action to a user, then return to the user list.

    The user id is validated and the action parsed before any server API
    call, so malformed or unknown input changes nothing.

    Args:
        request: Current request.
        presenter: Injected PortalPresenter.
        user_id: Form field, the affected user.
        user_action: Form field, one of disableUser, enableUser,
            deleteTotpSecret.

    Returns:
        302 redirect to /users.

    Raises:
        InputValidationError: 400 for a bad user id or unknown action.

    Example:
        >>> # POST /user  user_id=alice&user_action=disableUser
        >>> # -> 302 Location: /users
    """
    user_id = validation.user_id(user_id)
    action = UserAction.parse(user_action)
    presenter.apply_user_action(user_id, action)
    return _redirect(request, "users")


@router.get("/log", response_class=HTMLResponse)
def log_page(request: Request, presenter: PortalDep) -> HTMLResponse:
    return _html(pages.render_log(presenter.get_log_form(), _root(request)))


@router.post("/log", response_class=HTMLResponse)
def log_search(
    request: Request,
    presenter: PortalDep,
    date_time: OptionalForm = None,
    ip_address: OptionalForm = None,
) -> HTMLResponse:
    date_time = validation.date_time(date_time)
    ip_address = validation.ip_address(ip_address)
    return _html(pages.render_log(presenter.search_log(date_time, ip_address), _root(request)))


@router.get("/stats", response_class=HTMLResponse)
def stats_page(request: Request, presenter: PortalDep) -> HTMLResponse:
    return _html(pages.render_stats(presenter.get_stats(), _root(request)))


@router.get("/messages", response_class=HTMLResponse)
def messages_page(request: Request, presenter: PortalDep) -> HTMLResponse:
    return _html(pages.render_messages(presenter.get_messages(), _root(request)))


@router.post("/messages")
def message_action(
    request: Request,
    presenter: PortalDep,
    message_action: OptionalForm = None,
    message_body: OptionalForm = None,
    message_id: OptionalForm = None,
) -> RedirectResponse:
    """
    Set or delete the message of the day, then return to /messages.

    "set" accepts the body as-is. "delete" requires a numeric message id.

    Raises:
        InputValidationError: 400 for an unknown action or bad message id.
    """
    action = MessageAction.parse(message_action)
    if action is MessageAction.DELETE:
        presenter.apply_message_action(action, message_id=validation.message_id(message_id))
    else:
        presenter.apply_message_action(action, body=message_body or "")
    return _redirect(request, "messages")


# ============================================================================
# Chart Routes (PNG images)
# ============================================================================


def _png(render: ChartDep, profile_id: str | None, traffic: bool) -> Response:
    profile_id = validation.profile_id(profile_id)
    try:
        if traffic:
            png_bytes = render.render_traffic_chart(profile_id)
        else:
            png_bytes = render.render_users_chart(profile_id)
    except UnknownProfileError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f'no statistics for profile "{profile_id}"',
        ) from None
    return Response(content=png_bytes, media_type="image/png")


@router.get("/stats/traffic")
def traffic_chart(presenter: ChartDep, profile_id: OptionalQuery = None) -> Response:
    """
    Serve the daily traffic chart of one profile as PNG.

    Y-axis labels are scaled through B, kiB, MiB, GiB and TiB.

    Raises:
        InputValidationError: 400 for a malformed profile id.
        HTTPException: 404 when the statistics hold no such profile.

    Example:
        >>> # <img src="/stats/traffic?profile_id=internet">
    """
    return _png(presenter, profile_id, traffic=True)


@router.get("/stats/users")
def users_chart(presenter: ChartDep, profile_id: OptionalQuery = None) -> Response:
    """Serve the daily unique user count chart of one profile as PNG."""
    return _png(presenter, profile_id, traffic=False)
