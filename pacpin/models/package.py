"""
Resolved package data model for pacpin.

The resolver turns every request into a resolved package; the installer
downloads the normal ones and passes virtual names through.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Union

from pacpin.models.version import Version


@dataclass(frozen=True)
class ResolvedNormal:
    """A catalog archive chosen for a request.

    Attributes:
        name: Decoded archive file name.
        version: Version of the archive.
        url: Download URL.
    """

    name: str
    version: Version
    url: str

    @property
    def is_virtual(self) -> bool:
        return False

    def to_json(self) -> Dict[str, Any]:
        """Serialize to a JSON-compatible dictionary."""
        return {
            "type": "normal",
            "name": self.name,
            "version": str(self.version),
            "url": self.url,
        }

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class ResolvedVirtual:
    """A package name handed to pacman untouched."""

    name: str

    @property
    def is_virtual(self) -> bool:
        return True

    def to_json(self) -> Dict[str, Any]:
        """Serialize to a JSON-compatible dictionary."""
        return {"type": "virtual", "name": self.name}

    def __str__(self) -> str:
        return self.name


ResolvedPackage = Union[ResolvedNormal, ResolvedVirtual]
