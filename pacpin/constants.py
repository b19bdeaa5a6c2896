"""
Centralized constants for pacpin.

This module defines immutable configuration values used across pacpin,
including repository layout, network settings, catalog classification
rules, the specification syntax, and logging formats. All values are
intended to be treated as read-only.
"""

from typing import Final, Mapping, Sequence

# ---------------------------------------------------------------------------
# Project metadata
# ---------------------------------------------------------------------------

#: HTTP User-Agent template used for outbound requests.
USER_AGENT_TEMPLATE: Final[str] = "pacpin/{version}"

# ---------------------------------------------------------------------------
# Repository layout
# ---------------------------------------------------------------------------

#: Directory listing of one MSYS2 environment.
REPO_URL_TEMPLATE: Final[str] = "https://repo.msys2.org/mingw/{msystem}/"

#: Package name prefix shared by every package of an environment.
PACKAGE_PREFIX_TEMPLATE: Final[str] = "mingw-w64-{arch}"

#: Environment identifier -> architecture string.
ENVIRONMENT_ARCHITECTURES: Final[Mapping[str, str]] = {
    "mingw32": "i686",
    "mingw64": "x86_64",
    "ucrt64": "ucrt-x86_64",
    "clang64": "clang-x86_64",
    "clangarm64": "clang-aarch64",
}

#: Known identifiers that can not be used, with the reason shown to users.
UNSUPPORTED_ENVIRONMENTS: Final[Mapping[str, str]] = {
    "clang32": "is deprecated and can't be used anymore",
    "mingw64arm": "is not supported",
    "msys": "is not supported",
}

#: Environment used when nothing is configured.
DEFAULT_ENVIRONMENT: Final[str] = "mingw64"

# ---------------------------------------------------------------------------
# HTTP configuration
# ---------------------------------------------------------------------------

#: Default network timeout in seconds.
DEFAULT_TIMEOUT: Final[int] = 30

#: Maximum number of retries for failed HTTP requests.
DEFAULT_MAX_RETRIES: Final[int] = 3

#: Maximum number of concurrent artifact downloads.
DEFAULT_MAX_CONCURRENCY: Final[int] = 4

# ---------------------------------------------------------------------------
# Catalog classification
# ---------------------------------------------------------------------------

#: Link target of the parent-directory row in an autoindex listing.
PARENT_DIRECTORY_LINK: Final[str] = "../"

SKIP_REASON_SIGNATURE: Final[str] = "sig package"
SKIP_REASON_DATABASE: Final[str] = ".db file"
SKIP_REASON_OLD: Final[str] = ".old file"
SKIP_REASON_DIRECTORY: Final[str] = "directory file"

# ---------------------------------------------------------------------------
# Specification syntax
# ---------------------------------------------------------------------------

#: Separates a package name from its version specifier.
VERSION_SEPARATOR: Final[str] = "="

#: Separates a version specifier from the settings string.
SETTINGS_SEPARATOR: Final[str] = ":"

#: Version specifier meaning "same version as the rest of the line".
SAME_AS_REST_MARKER: Final[str] = "!"

#: Settings character marking a virtual package.
SETTING_VIRTUAL: Final[str] = "v"

#: Settings character disabling the environment prefix.
SETTING_NO_PREFIX: Final[str] = "n"

# ---------------------------------------------------------------------------
# Installation
# ---------------------------------------------------------------------------

#: Packages needed to unpack ``.pkg.tar.zst`` archives; ``{prefix}`` is
#: replaced by the environment package prefix.
PREREQUISITE_PACKAGES: Final[Sequence[str]] = (
    "zstd",
    "libzstd",
    "tar",
    "{prefix}-zstd",
)

#: Folder created below ``RUNNER_TEMP`` / the system temp directory.
DOWNLOAD_FOLDER_NAME: Final[str] = "pacpin"

#: Default value of the ``install_prerequisites`` option.
DEFAULT_INSTALL_PREREQUISITES: Final[bool] = True

#: Default value of the ``keep_downloads`` option.
DEFAULT_KEEP_DOWNLOADS: Final[bool] = False

#: Maximum allowed size (in bytes) of a specification file.
MAX_FILE_SIZE: Final[int] = 1 * 1024 * 1024  # 1 MB

# ---------------------------------------------------------------------------
# Logging configuration
# ---------------------------------------------------------------------------

#: Timestamp format for verbose logging.
LOG_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

#: Default log format (non-verbose).
LOG_DEFAULT_FORMAT: Final[str] = "%(levelname)s: %(message)s"

#: Verbose log format including timestamp and logger name.
LOG_VERBOSE_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
