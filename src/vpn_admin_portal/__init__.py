"""
VPN Admin Portal.

PURPOSE: Administrative web front-end for a VPN service.
AI CONTEXT: Thin HTTP layer - all VPN state lives behind the remote server API.

PACKAGE STRUCTURE:
- config.py: Environment-driven settings
- server_client.py: JSON-over-HTTP client for the server API
- validation.py: Request parameter checks
- graph.py: Date scaffolds, byte units and PNG chart rendering
- auth.py: Administrator authentication (Basic or trusted header)
- presenters.py: Remote calls shaped into view models
- web/: FastAPI application, routes and HTML pages

QUICK START:
    # Run the portal
    vpn-admin-portal serve --port 8000

    # Or programmatically
    from vpn_admin_portal.web import create_app
"""

from vpn_admin_portal.__version__ import (
    __author__,
    __copyright__,
    __description__,
    __license__,
    __title__,
    __version__,
    __version_date__,
)

__all__ = [
    "__version__",
    "__version_date__",
    "__title__",
    "__description__",
    "__author__",
    "__license__",
    "__copyright__",
]
