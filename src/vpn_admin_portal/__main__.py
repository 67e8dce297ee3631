"""
Package entry point for python -m execution.

USAGE:
    python -m vpn_admin_portal                # Serve the portal
    python -m vpn_admin_portal serve --port 80
"""

import sys

from vpn_admin_portal.cli import main

if __name__ == "__main__":
    sys.exit(main())
