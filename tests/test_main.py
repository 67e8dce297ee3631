"""Main test module for vpn-admin-portal."""

import runpy
import sys
from unittest.mock import patch

import pytest

import vpn_admin_portal


class TestVersion:
    """Test version information."""

    def test_version_format(self) -> None:
        """Verifies version follows semantic versioning format.

        Tests that version string has MAJOR.MINOR.PATCH structure
        with numeric components.

        Business context:
        The version is shown in every page footer and in --version,
        and administrators quote it when reporting problems.

        Arrangement:
        None - tests package-level attribute.

        Action:
        Parse version string and validate components.

        Assertion Strategy:
        Validates 3 parts, all numeric.
        """
        parts = vpn_admin_portal.__version__.split(".")
        assert len(parts) == 3
        assert all(part.isdigit() for part in parts)

    def test_metadata(self) -> None:
        """Package metadata is exported at top level."""
        assert vpn_admin_portal.__title__ == "vpn_admin_portal"
        assert vpn_admin_portal.__license__ == "AGPL-3.0-or-later"
        assert "__version__" in vpn_admin_portal.__all__


class TestModuleExecution:
    """Test python -m vpn_admin_portal."""

    def test_runs_cli_main(self) -> None:
        """Running the package as a module exits with main()'s code."""
        with (
            patch.object(sys, "argv", ["vpn-admin-portal"]),
            patch("vpn_admin_portal.cli.run_serve") as mock_serve,
        ):
            with pytest.raises(SystemExit) as excinfo:
                runpy.run_module("vpn_admin_portal", run_name="__main__")

        assert excinfo.value.code == 0
        mock_serve.assert_called_once_with()
