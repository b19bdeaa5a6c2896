"""
Unified data model exports for pacpin.

Example:
    >>> from pacpin.models import Version, Fixed, NormalRequest
"""

from __future__ import annotations

from pacpin.models.version import (
    Fixed,
    PartialVersion,
    RequestedVersion,
    SameAsSiblings,
    Unconstrained,
    Version,
    render_version,
)
from pacpin.models.catalog import ArtifactName, Catalog, CatalogEntry, SkippedEntry
from pacpin.models.requirement import (
    NormalRequest,
    PackageInput,
    PackageRequest,
    ResolveSettings,
    VirtualRequest,
)
from pacpin.models.package import ResolvedNormal, ResolvedPackage, ResolvedVirtual

__all__ = [
    "Version",
    "Unconstrained",
    "Fixed",
    "SameAsSiblings",
    "PartialVersion",
    "RequestedVersion",
    "render_version",
    "ArtifactName",
    "CatalogEntry",
    "SkippedEntry",
    "Catalog",
    "ResolveSettings",
    "PackageInput",
    "NormalRequest",
    "VirtualRequest",
    "PackageRequest",
    "ResolvedNormal",
    "ResolvedVirtual",
    "ResolvedPackage",
]
