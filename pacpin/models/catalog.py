"""
Repository catalog data model for pacpin.

One :class:`Catalog` is built per listing fetch. It holds the rows that
parsed as versioned archives plus the diagnostics for every row that did
not; the diagnostics never block resolution.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from pacpin.models.version import Version


@dataclass(frozen=True)
class ArtifactName:
    """The parts of an archive file name.

    ``mingw-w64-x86_64-gcc-14.2.0-1-any.pkg.tar.zst`` splits into name
    ``mingw-w64-x86_64-gcc``, version ``14.2.0-1``, target ``any`` and
    extension ``pkg.tar.zst``.
    """

    name: str
    version: Version
    target: str
    ext: str


@dataclass(frozen=True)
class CatalogEntry:
    """A usable row of the repository listing.

    Attributes:
        raw_name: Link target exactly as published (percent-encoded).
        name: Decoded file name, used for display and as download name.
        artifact: Parsed file name.
        url: Absolute download URL built from ``raw_name``.
    """

    raw_name: str
    name: str
    artifact: ArtifactName
    url: str

    @property
    def package_name(self) -> str:
        return self.artifact.name

    @property
    def version(self) -> Version:
        return self.artifact.version


@dataclass(frozen=True)
class SkippedEntry:
    """A listing row that is deliberately ignored."""

    name: str
    reason: str


@dataclass
class Catalog:
    """Result of parsing one repository listing.

    Attributes:
        entries: Usable archives in listing order.
        skipped: Signature files, databases, backups and the parent link.
        failed: Raw names that did not match the archive name pattern.
    """

    entries: List[CatalogEntry] = field(default_factory=list)
    skipped: List[SkippedEntry] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.entries)
