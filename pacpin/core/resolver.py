"""Resolution of package requests to catalog archives.

Every specification line is resolved on its own, left to right. The
versions of the normal packages resolved so far in the line are carried
along so that a ``!`` request can pin itself to them::

    gcc=14 gcc-libs=!

resolves ``gcc`` to the newest ``14.x.y-z`` in the catalog, then requires
``gcc-libs`` at exactly that version. If that archive does not exist the
run fails; there is no fallback to another version.

Resolution is pure: the same requests and catalog always give the same
result, and the first failure aborts the whole batch so a partial install
set is never produced.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import reduce
from typing import Callable, List, Sequence, Tuple

from pacpin.core.matcher import is_compatible
from pacpin.utils.logger import get_logger
from pacpin.exceptions import (
    InconsistentSiblingVersionsError,
    NoPriorVersionToReferenceError,
    NoSuitablePackageFoundError,
)
from pacpin.models.catalog import CatalogEntry
from pacpin.models.package import ResolvedNormal, ResolvedPackage, ResolvedVirtual
from pacpin.models.requirement import NormalRequest, PackageRequest, VirtualRequest
from pacpin.models.version import (
    PartialVersion,
    SameAsSiblings,
    Version,
)

logger = get_logger("resolver")


@dataclass(frozen=True)
class LineState:
    """Accumulator threaded through the resolution of one line.

    Attributes:
        resolved: Packages resolved so far, in request order.
        prior_versions: Versions of the normal packages among them.
    """

    resolved: Tuple[ResolvedPackage, ...] = ()
    prior_versions: Tuple[Version, ...] = ()


def resolve_sibling_version(
    request: NormalRequest, prior_versions: Sequence[Version]
) -> Version:
    """Return the single version shared by ``prior_versions``.

    Raises:
        NoPriorVersionToReferenceError: No normal package precedes the
            request in its line.
        InconsistentSiblingVersionsError: The preceding packages resolved
            to different versions.
    """
    if not prior_versions:
        raise NoPriorVersionToReferenceError(
            f"While trying to resolve package '{request.original_name}': "
            "can't use '!' for the first package of a line",
            package=request.original_name,
        )

    first = prior_versions[0]
    if any(version.weight != first.weight for version in prior_versions):
        rendered = [str(version) for version in prior_versions]
        raise InconsistentSiblingVersionsError(
            f"While trying to resolve package '{request.original_name}': "
            "'!' requires all earlier packages of the line to have the same "
            f"version, but they are: {', '.join(rendered)}",
            package=request.original_name,
            versions=rendered,
        )

    return first


def find_candidates(
    names: Sequence[str], partial: PartialVersion, entries: Sequence[CatalogEntry]
) -> List[CatalogEntry]:
    """Return the entries named one of ``names`` and compatible with ``partial``.

    Entries keep their catalog order.
    """
    return [
        entry
        for entry in entries
        if entry.package_name in names and is_compatible(entry.version, partial)
    ]


def select_best(candidates: Sequence[CatalogEntry]) -> CatalogEntry:
    """Return the newest candidate; on equal versions the first listed wins."""
    # sorted() is stable, so equal weights keep catalog order
    return sorted(candidates, key=lambda entry: entry.version.weight, reverse=True)[0]


def resolve_request(
    request: PackageRequest,
    entries: Sequence[CatalogEntry],
    prior_versions: Sequence[Version] = (),
) -> ResolvedPackage:
    """Resolve a single request.

    Args:
        request: The request to resolve.
        entries: Usable catalog entries.
        prior_versions: Versions of the normal packages resolved earlier
            in the same line.

    Raises:
        ResolutionError: The request can not be resolved.
    """
    if isinstance(request, VirtualRequest):
        logger.info("Using virtual package '%s'", request.name)
        return ResolvedVirtual(name=request.name)

    requested = request.version
    if isinstance(requested, SameAsSiblings):
        partial: PartialVersion = resolve_sibling_version(
            request, prior_versions
        ).as_requirement()
    else:
        partial = requested

    candidates = find_candidates(request.names, partial, entries)

    if not candidates:
        logger.info(
            "While searching for %s %s", ", ".join(request.names), requested
        )
        pinned = str(partial) if isinstance(requested, SameAsSiblings) else None
        raise NoSuitablePackageFoundError(
            f"Can't resolve package {request.original_name} as no suitable "
            f"packages were found online, requested version: {requested}",
            package=request.original_name,
            candidates=request.names,
            requested=str(requested),
            pinned=pinned,
        )

    best = select_best(candidates)
    logger.info(
        "Resolved package %s with version %s to '%s'",
        request.original_name,
        requested,
        best.name,
    )
    return ResolvedNormal(name=best.name, version=best.version, url=best.url)


def _step(
    entries: Sequence[CatalogEntry],
) -> Callable[[LineState, PackageRequest], LineState]:
    def step(state: LineState, request: PackageRequest) -> LineState:
        resolved = resolve_request(request, entries, state.prior_versions)
        prior_versions = state.prior_versions
        if isinstance(resolved, ResolvedNormal):
            prior_versions = prior_versions + (resolved.version,)
        return LineState(
            resolved=state.resolved + (resolved,),
            prior_versions=prior_versions,
        )

    return step


def resolve_line(
    requests: Sequence[PackageRequest], entries: Sequence[CatalogEntry]
) -> List[ResolvedPackage]:
    """Resolve the requests of one specification line, in order."""
    final_state = reduce(_step(entries), requests, LineState())
    return list(final_state.resolved)


def resolve_batch(
    requests: Sequence[Sequence[PackageRequest]], entries: Sequence[CatalogEntry]
) -> List[List[ResolvedPackage]]:
    """Resolve every line of a parsed specification.

    Args:
        requests: Output of :meth:`SpecParser.parse_string`.
        entries: Usable catalog entries (``Catalog.entries``).

    Returns:
        One list of resolved packages per line, in the same order.

    Raises:
        ResolutionError: Any request can not be resolved.
    """
    return [resolve_line(line, entries) for line in requests]
