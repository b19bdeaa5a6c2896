from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from pacpin.__main__ import _print_startup_error, main


@pytest.mark.unit
class TestMain:
    """Tests for the ``python -m pacpin`` entry point."""

    @pytest.mark.parametrize(
        "exit_code",
        [0, 1, 2, 130],
        ids=["success", "error", "usage", "interrupted"],
    )
    def test_main_returns_cli_exit_code(self, exit_code: int) -> None:
        """Test main returns the exit code of the CLI."""
        mock_cli_module = MagicMock()
        mock_cli_module.main = MagicMock(return_value=exit_code)

        with patch.dict("sys.modules", {"pacpin.cli": mock_cli_module}):
            result = main()

        assert result == exit_code
        mock_cli_module.main.assert_called_once_with()

    def test_main_import_error_returns_one(self, capsys: pytest.CaptureFixture) -> None:
        """Test main reports an import failure and returns 1."""
        with patch.dict("sys.modules", {"pacpin.cli": None}):
            result = main()

        assert result == 1
        captured = capsys.readouterr()
        assert "pacpin CLI could not be loaded." in captured.err
        assert "ImportError:" in captured.err


@pytest.mark.unit
class TestPrintStartupError:
    """Tests for _print_startup_error."""

    def test_includes_versions(self, capsys: pytest.CaptureFixture) -> None:
        """Test Python and pacpin versions are reported."""
        from pacpin.__version__ import __version__

        _print_startup_error(ImportError("No module named 'rich'"))

        err = capsys.readouterr().err
        assert "Python version :" in err
        assert f"pacpin version: {__version__}" in err
        assert "ImportError: No module named 'rich'" in err
