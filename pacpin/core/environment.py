"""MSYS2 environments and the names and URLs derived from them."""

from __future__ import annotations

from enum import Enum

from pacpin.exceptions import UnknownEnvironmentError
from pacpin.constants import (
    ENVIRONMENT_ARCHITECTURES,
    PACKAGE_PREFIX_TEMPLATE,
    REPO_URL_TEMPLATE,
    UNSUPPORTED_ENVIRONMENTS,
)


class Environment(str, Enum):
    """A supported MSYS2 environment (the ``MSYSTEM`` value, lower-cased)."""

    MINGW32 = "mingw32"
    MINGW64 = "mingw64"
    UCRT64 = "ucrt64"
    CLANG64 = "clang64"
    CLANGARM64 = "clangarm64"

    @property
    def arch(self) -> str:
        """Architecture string, e.g. ``ucrt-x86_64``."""
        return ENVIRONMENT_ARCHITECTURES[self.value]

    @property
    def prefix(self) -> str:
        """Package name prefix, e.g. ``mingw-w64-ucrt-x86_64``."""
        return PACKAGE_PREFIX_TEMPLATE.format(arch=self.arch)

    @property
    def repo_url(self) -> str:
        """Directory listing URL, always ending in ``/``."""
        return REPO_URL_TEMPLATE.format(msystem=self.value)

    @classmethod
    def parse(cls, text: str) -> "Environment":
        """Look up an environment by identifier, ignoring case.

        Raises:
            UnknownEnvironmentError: The identifier is deprecated,
                unsupported, or not an MSYS2 environment at all.
        """
        key = text.strip().lower()

        if key in UNSUPPORTED_ENVIRONMENTS:
            raise UnknownEnvironmentError(
                f"MSYS2 environment '{key}' {UNSUPPORTED_ENVIRONMENTS[key]}",
                environment=text,
            )

        try:
            return cls(key)
        except ValueError:
            raise UnknownEnvironmentError(
                f"'{text}' is not a valid MSYS2 environment "
                f"(expected one of: {', '.join(e.value for e in cls)})",
                environment=text,
            ) from None

    def __str__(self) -> str:
        return self.value
