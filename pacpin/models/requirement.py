"""
Package request data model for pacpin.

A specification such as::

    gcc=14 gcc-libs=!
    base-devel=:vn

parses into one list of requests per line. Each token becomes either a
:class:`NormalRequest` (looked up in the catalog) or a
:class:`VirtualRequest` (passed to pacman by name).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple, Union

from pacpin.models.version import RequestedVersion, Unconstrained


@dataclass
class ResolveSettings:
    """Flags parsed from the settings string after ``:``.

    Attributes:
        virtual: Set by ``v``. Install by name, skip the catalog.
        prepend_prefix: Cleared by ``n``. Do not add the environment
            prefix to the name.
    """

    virtual: bool = False
    prepend_prefix: bool = True


@dataclass
class PackageInput:
    """One token split into its parts, before name resolution."""

    name: str
    version: RequestedVersion = field(default_factory=Unconstrained)
    settings: ResolveSettings = field(default_factory=ResolveSettings)


@dataclass(frozen=True)
class NormalRequest:
    """A package to look up in the catalog.

    Attributes:
        names: Acceptable catalog package names, in priority order.
        original_name: The name as the user wrote it.
        version: Requested version.
    """

    names: Tuple[str, ...]
    original_name: str
    version: RequestedVersion

    def __str__(self) -> str:
        return f"{self.original_name} {self.version}"


@dataclass(frozen=True)
class VirtualRequest:
    """A package installed by name only."""

    name: str

    def __str__(self) -> str:
        return f"{self.name} (virtual)"


PackageRequest = Union[NormalRequest, VirtualRequest]
