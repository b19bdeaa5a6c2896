"""
Utility helpers for pacpin.

This package provides reusable utilities used across pacpin, including:

- Console output helpers (Rich-based)
- Logging configuration and retrieval
- Filesystem safety helpers and MSYS2 path translation
- Async HTTP client utilities

Only symbols listed in ``__all__`` are considered part of the public API.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Filesystem utilities
# ---------------------------------------------------------------------------

from pacpin.utils.filesystem import (
    remove_file,
    resolve_download_dir,
    safe_read_file,
    safe_write_bytes,
    validate_path,
    windows_path_to_posix,
)

# ---------------------------------------------------------------------------
# Logging utilities
# ---------------------------------------------------------------------------

from pacpin.utils.logger import (
    get_logger,
    is_logging_configured,
    setup_logging,
    verbosity_to_level,
)

# ---------------------------------------------------------------------------
# Console utilities
# ---------------------------------------------------------------------------

from pacpin.utils.console import (
    get_raw_console,
    print_error,
    print_info,
    print_success,
    print_table,
    print_warning,
    reconfigure_console,
)

# ---------------------------------------------------------------------------
# HTTP utilities
# ---------------------------------------------------------------------------

from pacpin.utils.http import HTTPClient

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

__all__ = [
    # Console
    "print_info",
    "print_error",
    "print_table",
    "print_success",
    "print_warning",
    "get_raw_console",
    "reconfigure_console",
    # Logging
    "get_logger",
    "setup_logging",
    "verbosity_to_level",
    "is_logging_configured",
    # Filesystem
    "remove_file",
    "safe_read_file",
    "safe_write_bytes",
    "validate_path",
    "resolve_download_dir",
    "windows_path_to_posix",
    # HTTP
    "HTTPClient",
]
