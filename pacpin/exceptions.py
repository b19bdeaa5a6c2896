"""
Custom exception hierarchy for pacpin.

This module defines structured exception types used across pacpin.
All exceptions inherit from :class:`PacpinError` and support optional
structured metadata via the ``details`` attribute to improve diagnostics
and logging.

Every error is fatal for a run: nothing in pacpin retries or recovers
from these, the CLI reports the first one and exits non-zero.
"""

from __future__ import annotations

from typing import Any, Mapping, MutableMapping, Optional, Sequence


class PacpinError(Exception):
    """Base exception for all pacpin errors.

    Args:
        message: Human-readable error message.
        details: Optional structured metadata describing the error.
    """

    __slots__ = ("message", "details")

    def __init__(
        self,
        message: str,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.message: str = message
        # Internally normalize to a mutable dict
        self.details: MutableMapping[str, Any] = dict(details) if details else {}
        super().__init__(message)

    def __str__(self) -> str:
        if not self.details:
            return self.message
        formatted = ", ".join(f"{k}={v}" for k, v in self.details.items())
        return f"{self.message} ({formatted})"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, details={dict(self.details)!r})"
        )


def _add_if(details: MutableMapping[str, Any], key: str, value: Any) -> None:
    """Add a key to ``details`` only if ``value`` is not ``None``."""
    if value is not None:
        details[key] = value


def _truncate(text: str, max_length: int = 200) -> str:
    """Truncate long text for safe logging or error reporting."""
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."


# ---------------------------------------------------------------------------
# Specification grammar
# ---------------------------------------------------------------------------


class GrammarError(PacpinError):
    """Raised when the installation specification does not follow the syntax.

    Args:
        message: Error description.
        token: The offending raw token (or line).
    """

    __slots__ = ("token",)

    def __init__(self, message: str, *, token: Optional[str] = None) -> None:
        details: MutableMapping[str, Any] = {}
        if token is not None:
            details["token"] = repr(token)

        super().__init__(message, details)

        self.token = token


class MalformedVersionSpecError(GrammarError):
    """A version specifier is not ``major[.minor[.patch[-rev]]]``, ``""`` or ``!``."""


class NotAnIntegerError(GrammarError):
    """A version field is not a non-negative decimal integer."""


class InvalidSettingsCharError(GrammarError):
    """The settings string contains a character other than ``v`` or ``n``."""

    __slots__ = ("char",)

    def __init__(self, message: str, *, char: str, token: Optional[str] = None) -> None:
        super().__init__(message, token=token)
        self.char = char
        self.details["char"] = repr(char)


class MalformedTokenError(GrammarError):
    """A package token has too many ``=`` / ``:`` separators or no name."""


class EmptyPackageTokenError(GrammarError):
    """A specification line contains an empty token (doubled or stray spaces)."""

    __slots__ = ("line_number",)

    def __init__(
        self,
        message: str,
        *,
        token: Optional[str] = None,
        line_number: Optional[int] = None,
    ) -> None:
        super().__init__(message, token=token)
        self.line_number = line_number
        _add_if(self.details, "line", line_number)


# ---------------------------------------------------------------------------
# Catalog document
# ---------------------------------------------------------------------------


class CatalogError(PacpinError):
    """Raised when the repository listing can not be understood."""


class MalformedCatalogDocumentError(CatalogError):
    """The listing document has no ``<pre>`` block.

    Args:
        message: Error description.
        url: Listing URL, if known.
    """

    __slots__ = ("url",)

    def __init__(self, message: str, *, url: Optional[str] = None) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "url", url)
        super().__init__(message, details)
        self.url = url


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


class ResolutionError(PacpinError):
    """Raised when a requested package can not be mapped to an artifact.

    Args:
        message: Error description.
        package: The package name as the user wrote it.
    """

    __slots__ = ("package",)

    def __init__(
        self,
        message: str,
        *,
        package: Optional[str] = None,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        merged: MutableMapping[str, Any] = {}
        _add_if(merged, "package", package)
        if details:
            merged.update(details)
        super().__init__(message, merged)
        self.package = package


class NoPriorVersionToReferenceError(ResolutionError):
    """``!`` was used before any normal package in its line."""


class InconsistentSiblingVersionsError(ResolutionError):
    """``!`` was used but the earlier packages of its line disagree on a version.

    Args:
        message: Error description.
        package: The package name as the user wrote it.
        versions: Rendered versions of the earlier packages.
    """

    __slots__ = ("versions",)

    def __init__(
        self,
        message: str,
        *,
        package: Optional[str] = None,
        versions: Sequence[str] = (),
    ) -> None:
        super().__init__(
            message,
            package=package,
            details={"versions": ", ".join(versions)},
        )
        self.versions = list(versions)


class NoSuitablePackageFoundError(ResolutionError):
    """No catalog entry matches the candidate names and the requested version.

    Args:
        message: Error description.
        package: The package name as the user wrote it.
        candidates: Catalog names that were accepted.
        requested: Rendered requested version.
        pinned: Version a ``!`` request was pinned to by its siblings.
    """

    __slots__ = ("candidates", "requested", "pinned")

    def __init__(
        self,
        message: str,
        *,
        package: Optional[str] = None,
        candidates: Sequence[str] = (),
        requested: Optional[str] = None,
        pinned: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {"candidates": ", ".join(candidates)}
        _add_if(details, "requested", requested)
        _add_if(details, "pinned", pinned)
        super().__init__(message, package=package, details=details)
        self.candidates = list(candidates)
        self.requested = requested
        self.pinned = pinned


# ---------------------------------------------------------------------------
# Upstream collaborators
# ---------------------------------------------------------------------------


class NetworkError(PacpinError):
    """Raised when HTTP or network operations fail.

    Args:
        message: Error description.
        url: URL being accessed.
        status_code: HTTP status code, if available.
        response_body: Raw response body, truncated for safety.
    """

    __slots__ = ("url", "status_code", "response_body")

    def __init__(
        self,
        message: str,
        *,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "url", url)
        _add_if(details, "status_code", status_code)

        if response_body is not None:
            details["response"] = _truncate(response_body)

        super().__init__(message, details)

        self.url = url
        self.status_code = status_code
        self.response_body = response_body


class CatalogFetchFailedError(NetworkError):
    """The repository listing could not be downloaded."""


class ArtifactDownloadFailedError(NetworkError):
    """A resolved package archive could not be downloaded."""


class InstallerError(PacpinError):
    """Raised when pacman (or the MSYS2 shell around it) fails.

    Args:
        message: Error description.
        command: The argv that was executed.
        returncode: Process exit code, if the process ran.
        output: Captured output, truncated for safety.
    """

    __slots__ = ("command", "returncode", "output")

    def __init__(
        self,
        message: str,
        *,
        command: Optional[Sequence[str]] = None,
        returncode: Optional[int] = None,
        output: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "returncode", returncode)
        if output:
            details["output"] = _truncate(output.strip())

        super().__init__(message, details)

        self.command = list(command) if command is not None else None
        self.returncode = returncode
        self.output = output


# ---------------------------------------------------------------------------
# Local environment
# ---------------------------------------------------------------------------


class ConfigError(PacpinError):
    """Raised when configuration is invalid.

    Args:
        message: Error description.
        config_path: Path of the configuration file involved.
        option: Name of the offending option.
    """

    __slots__ = ("config_path", "option")

    def __init__(
        self,
        message: str,
        *,
        config_path: Optional[str] = None,
        option: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "path", config_path)
        _add_if(details, "option", option)

        super().__init__(message, details)

        self.config_path = config_path
        self.option = option


class UnknownEnvironmentError(ConfigError):
    """The MSYS2 environment identifier is unknown or unsupported."""

    __slots__ = ("environment",)

    def __init__(self, message: str, *, environment: str) -> None:
        super().__init__(message, option="msystem")
        self.environment = environment


class FileOperationError(PacpinError):
    """Raised when file system operations fail.

    Args:
        message: Error description.
        file_path: Path to the file involved.
        operation: Operation being performed (read/write/delete).
        original_error: Original exception that triggered this error.
    """

    __slots__ = ("file_path", "operation", "original_error")

    def __init__(
        self,
        message: str,
        *,
        file_path: Optional[str] = None,
        operation: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "path", file_path)
        _add_if(details, "operation", operation)
        _add_if(
            details,
            "original_error",
            str(original_error) if original_error else None,
        )

        super().__init__(message, details)

        self.file_path = file_path
        self.operation = operation
        self.original_error = original_error
