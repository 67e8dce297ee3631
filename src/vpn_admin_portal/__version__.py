"""Version information for vpn-admin-portal."""

__version__ = "1.0.0"
__version_date__ = "2026-10-18"

__title__ = "vpn_admin_portal"
__description__ = "Administrative web portal for a VPN service backed by a remote server API"

__author__ = "VPN Admin Portal Developers"

__license__ = "AGPL-3.0-or-later"
__copyright__ = "Copyright 2026 VPN Admin Portal Developers"

__all__ = [
    "__version__",
    "__version_date__",
    "__title__",
    "__description__",
    "__author__",
    "__license__",
    "__copyright__",
]
