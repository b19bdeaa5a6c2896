"""Unit tests for pacpin.core.resolver module.

Test Coverage:
- Newest compatible archive selection and tie-breaking
- Both name spellings searched together
- ``!`` references to earlier packages of the same line
- Line independence and batch ordering
- Error messages and error attributes
"""

from __future__ import annotations

from typing import List, Tuple

import pytest

from pacpin.core.environment import Environment
from pacpin.core.resolver import (
    LineState,
    find_candidates,
    resolve_batch,
    resolve_line,
    resolve_request,
    resolve_sibling_version,
    select_best,
)
from pacpin.core.spec_parser import SpecParser
from pacpin.exceptions import (
    InconsistentSiblingVersionsError,
    NoPriorVersionToReferenceError,
    NoSuitablePackageFoundError,
    ResolutionError,
)
from pacpin.models import (
    ArtifactName,
    CatalogEntry,
    Fixed,
    NormalRequest,
    ResolvedNormal,
    ResolvedVirtual,
    SameAsSiblings,
    Unconstrained,
    Version,
    VirtualRequest,
)

BASE_URL = "https://repo.msys2.org/mingw/mingw64/"
PREFIX = "mingw-w64-x86_64"


def make_entry(package: str, version: Tuple[int, int, int, int], target: str = "any") -> CatalogEntry:
    """Build a catalog entry the way the listing parser would."""
    major, minor, patch, rev = version
    name = f"{package}-{major}.{minor}.{patch}-{rev}-{target}.pkg.tar.zst"
    return CatalogEntry(
        raw_name=name,
        name=name,
        artifact=ArtifactName(
            name=package,
            version=Version(*version),
            target=target,
            ext="pkg.tar.zst",
        ),
        url=BASE_URL + name,
    )


@pytest.fixture
def entries() -> List[CatalogEntry]:
    """A small mingw64 catalog."""
    return [
        make_entry(f"{PREFIX}-gcc", (13, 2, 0, 6)),
        make_entry(f"{PREFIX}-gcc", (14, 1, 0, 3)),
        make_entry(f"{PREFIX}-gcc", (14, 2, 0, 1)),
        make_entry(f"{PREFIX}-gcc-libs", (13, 2, 0, 6)),
        make_entry(f"{PREFIX}-gcc-libs", (14, 1, 0, 3)),
        make_entry(f"{PREFIX}-python", (3, 12, 7, 1)),
        make_entry("python", (3, 11, 9, 1)),
    ]


@pytest.fixture
def parser() -> SpecParser:
    return SpecParser(Environment.MINGW64)


def resolve_text(parser: SpecParser, text: str, entries: List[CatalogEntry]):
    return resolve_batch(parser.parse_string(text), entries)


@pytest.mark.unit
class TestFindCandidatesAndSelectBest:
    """Tests for find_candidates and select_best."""

    def test_filters_by_name_and_version(self, entries: List[CatalogEntry]) -> None:
        """Test only matching names with compatible versions are kept."""
        candidates = find_candidates([f"{PREFIX}-gcc"], Fixed(14), entries)

        assert [entry.version for entry in candidates] == [
            Version(14, 1, 0, 3),
            Version(14, 2, 0, 1),
        ]

    def test_select_best_picks_highest_weight(self, entries: List[CatalogEntry]) -> None:
        """Test the newest candidate wins regardless of listing order."""
        candidates = find_candidates([f"{PREFIX}-gcc"], Unconstrained(), entries)

        assert select_best(candidates).version == Version(14, 2, 0, 1)

    def test_select_best_tie_keeps_listing_order(self) -> None:
        """Test equal versions resolve to the first listed entry."""
        first = make_entry("pkg", (1, 0, 0, 1), target="any")
        second = make_entry("pkg", (1, 0, 0, 1), target="x86_64")

        assert select_best([first, second]) is first
        assert select_best([second, first]) is second


@pytest.mark.unit
class TestResolveSiblingVersion:
    """Tests for resolve_sibling_version."""

    def _request(self) -> NormalRequest:
        return NormalRequest(
            names=("gcc-libs",), original_name="gcc-libs", version=SameAsSiblings()
        )

    def test_no_prior_versions(self) -> None:
        """Test ``!`` with nothing before it fails."""
        with pytest.raises(NoPriorVersionToReferenceError) as exc_info:
            resolve_sibling_version(self._request(), [])

        assert exc_info.value.package == "gcc-libs"

    def test_consistent_versions(self) -> None:
        """Test equal prior versions give that version."""
        version = Version(14, 2, 0, 1)

        assert resolve_sibling_version(self._request(), [version, version]) == version

    def test_inconsistent_versions(self) -> None:
        """Test different prior versions fail with both listed."""
        with pytest.raises(InconsistentSiblingVersionsError) as exc_info:
            resolve_sibling_version(
                self._request(), [Version(14, 2, 0, 1), Version(3, 12, 7, 1)]
            )

        assert exc_info.value.versions == ["v14.2.0-1", "v3.12.7-1"]
        assert "v14.2.0-1, v3.12.7-1" in str(exc_info.value)


@pytest.mark.unit
class TestResolveRequest:
    """Tests for resolve_request."""

    def test_virtual_passes_through(self, entries: List[CatalogEntry]) -> None:
        """Test virtual requests never touch the catalog."""
        assert resolve_request(VirtualRequest(name="base-devel"), []) == ResolvedVirtual(
            name="base-devel"
        )

    def test_normal_request(self, entries: List[CatalogEntry]) -> None:
        """Test a normal request resolves to the newest compatible archive."""
        request = NormalRequest(
            names=("gcc", f"{PREFIX}-gcc"), original_name="gcc", version=Fixed(14)
        )

        resolved = resolve_request(request, entries)

        assert resolved == ResolvedNormal(
            name=f"{PREFIX}-gcc-14.2.0-1-any.pkg.tar.zst",
            version=Version(14, 2, 0, 1),
            url=BASE_URL + f"{PREFIX}-gcc-14.2.0-1-any.pkg.tar.zst",
        )

    def test_both_spellings_compete_by_version(self, entries: List[CatalogEntry]) -> None:
        """Test bare and prefixed names are searched together."""
        request = NormalRequest(
            names=("python", f"{PREFIX}-python"),
            original_name="python",
            version=Unconstrained(),
        )

        assert resolve_request(request, entries).version == Version(3, 12, 7, 1)

    def test_not_found_message(self, entries: List[CatalogEntry]) -> None:
        """Test the error names the package and requested version."""
        request = NormalRequest(
            names=("gcc", f"{PREFIX}-gcc"), original_name="gcc", version=Fixed(15)
        )

        with pytest.raises(NoSuitablePackageFoundError) as exc_info:
            resolve_request(request, entries)

        error = exc_info.value
        assert (
            "Can't resolve package gcc as no suitable packages were found online, "
            "requested version: v15"
        ) in str(error)
        assert error.package == "gcc"
        assert error.candidates == ["gcc", f"{PREFIX}-gcc"]
        assert error.requested == "v15"
        assert error.pinned is None
        assert "pinned" not in error.details

    def test_same_as_siblings_message_shows_marker(self, entries: List[CatalogEntry]) -> None:
        """Test a failed ``!`` names the marker, with the pin kept in details."""
        request = NormalRequest(
            names=("gcc-libs", f"{PREFIX}-gcc-libs"),
            original_name="gcc-libs",
            version=SameAsSiblings(),
        )

        with pytest.raises(NoSuitablePackageFoundError) as exc_info:
            resolve_request(request, entries, [Version(14, 2, 0, 1)])

        error = exc_info.value
        assert error.message.endswith("requested version: <same_as_rest>")
        assert error.requested == "<same_as_rest>"
        assert error.pinned == "v14.2.0-1"
        assert error.details["pinned"] == "v14.2.0-1"


@pytest.mark.unit
class TestResolveBatch:
    """End-to-end resolution of parsed specifications."""

    def test_prefix_version_picks_newest(
        self, parser: SpecParser, entries: List[CatalogEntry]
    ) -> None:
        """Test ``gcc=14`` picks 14.2.0-1 over 14.1.0-3."""
        [[resolved]] = resolve_text(parser, "gcc=14", entries)

        assert resolved.version == Version(14, 2, 0, 1)

    def test_same_as_rest_pins_exact_version(
        self, parser: SpecParser, entries: List[CatalogEntry]
    ) -> None:
        """Test ``!`` pins to the exact version of the earlier package."""
        [[gcc, gcc_libs]] = resolve_text(parser, "gcc=14.1 gcc-libs=!", entries)

        assert gcc.version == Version(14, 1, 0, 3)
        assert gcc_libs.version == Version(14, 1, 0, 3)
        assert gcc_libs.name == f"{PREFIX}-gcc-libs-14.1.0-3-any.pkg.tar.zst"

    def test_same_as_rest_has_no_fallback(
        self, parser: SpecParser, entries: List[CatalogEntry]
    ) -> None:
        """Test a missing exact sibling fails instead of picking 14.1.0-3."""
        with pytest.raises(NoSuitablePackageFoundError) as exc_info:
            resolve_text(parser, "gcc=14 gcc-libs=!", entries)

        assert exc_info.value.package == "gcc-libs"

    def test_leading_same_as_rest(
        self, parser: SpecParser, entries: List[CatalogEntry]
    ) -> None:
        """Test ``!`` on the first package of a line fails."""
        with pytest.raises(NoPriorVersionToReferenceError):
            resolve_text(parser, "gcc-libs=! gcc=14", entries)

    def test_virtual_packages_do_not_count_as_siblings(
        self, parser: SpecParser, entries: List[CatalogEntry]
    ) -> None:
        """Test a virtual package before ``!`` gives it nothing to reference."""
        with pytest.raises(NoPriorVersionToReferenceError):
            resolve_text(parser, "toolchain=:v gcc-libs=!", entries)

    def test_siblings_resolved_with_bang_count_too(
        self, parser: SpecParser, entries: List[CatalogEntry]
    ) -> None:
        """Test packages resolved through ``!`` join the earlier versions."""
        [batch] = resolve_text(parser, "gcc=13 gcc-libs=! gcc=!", entries)

        assert [package.version for package in batch] == [Version(13, 2, 0, 6)] * 3

    def test_inconsistent_siblings(
        self, parser: SpecParser, entries: List[CatalogEntry]
    ) -> None:
        """Test ``!`` after packages of different versions fails."""
        with pytest.raises(InconsistentSiblingVersionsError):
            resolve_text(parser, "gcc=14 python gcc-libs=!", entries)

    def test_lines_are_independent(
        self, parser: SpecParser, entries: List[CatalogEntry]
    ) -> None:
        """Test ``!`` never looks at earlier lines."""
        with pytest.raises(NoPriorVersionToReferenceError):
            resolve_text(parser, "gcc=14.1\ngcc-libs=!", entries)

    def test_batches_keep_line_and_token_order(
        self, parser: SpecParser, entries: List[CatalogEntry]
    ) -> None:
        """Test the result mirrors the specification shape."""
        batches = resolve_text(parser, "python base-devel=:vn\ngcc=13 gcc-libs=!", entries)

        assert [[str(package) for package in batch] for batch in batches] == [
            [f"{PREFIX}-python-3.12.7-1-any.pkg.tar.zst", "base-devel"],
            [
                f"{PREFIX}-gcc-13.2.0-6-any.pkg.tar.zst",
                f"{PREFIX}-gcc-libs-13.2.0-6-any.pkg.tar.zst",
            ],
        ]

    def test_no_prefix_setting_only_searches_bare_name(
        self, parser: SpecParser, entries: List[CatalogEntry]
    ) -> None:
        """Test ``n`` restricts the search to the name as written."""
        [[resolved]] = resolve_text(parser, "python=:n", entries)

        assert resolved.version == Version(3, 11, 9, 1)

    def test_is_deterministic(self, parser: SpecParser, entries: List[CatalogEntry]) -> None:
        """Test identical input gives identical output."""
        text = "gcc=13 gcc-libs=!\npython"

        assert resolve_text(parser, text, entries) == resolve_text(parser, text, entries)

    def test_empty_catalog(self, parser: SpecParser) -> None:
        """Test every normal request fails against an empty catalog."""
        with pytest.raises(ResolutionError):
            resolve_text(parser, "gcc", [])

    def test_resolve_line_empty(self, entries: List[CatalogEntry]) -> None:
        """Test an empty line resolves to nothing."""
        assert resolve_line([], entries) == []
        assert LineState() == LineState(resolved=(), prior_versions=())
