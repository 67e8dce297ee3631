"""
Web module for the VPN Admin Portal.

PURPOSE: FastAPI-based administration UI.
AI CONTEXT: Pages are rendered server side as plain HTML; charts are
PNG images rendered with matplotlib.

FEATURES:
- Active connections, profile info and user management pages
- Connection log search and message of the day editing
- Usage statistics with per-profile traffic and user charts

USAGE:
    # Via CLI
    vpn-admin-portal serve

    # Programmatically
    from vpn_admin_portal.web import create_app
    app = create_app()
"""

from .app import create_app, run_portal

__all__ = ["create_app", "run_portal"]
