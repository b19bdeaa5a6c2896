"""Parsing of archive file names and user version specifiers.

Archive names look like ``<name>-<major>.<minor>.<patch>-<rev>-<target>.<ext>``;
most listing rows that are not archives simply fail to match, which is not
an error. Version specifiers are the part after ``=`` in a specification
token: ``""``, ``"!"`` or ``major[.minor[.patch[-rev]]]``.
"""

from __future__ import annotations

import re
from typing import Optional

from pacpin.constants import SAME_AS_REST_MARKER
from pacpin.exceptions import MalformedVersionSpecError, NotAnIntegerError
from pacpin.models.catalog import ArtifactName
from pacpin.models.version import (
    Fixed,
    RequestedVersion,
    SameAsSiblings,
    Unconstrained,
    Version,
)

# Greedy name so that dashes inside the package name stay in the name
ARTIFACT_NAME_RE = re.compile(
    r"^(?P<name>.*)-"
    r"(?P<major>[0-9]+)\.(?P<minor>[0-9]+)\.(?P<patch>[0-9]+)-(?P<rev>[0-9]+)"
    r"-(?P<target>[^.]*)\.(?P<ext>.*)$"
)

PARTIAL_VERSION_RE = re.compile(
    r"^(?P<major>[0-9]+)"
    r"(?:\.(?P<minor>[0-9]+)"
    r"(?:\.(?P<patch>[0-9]+)"
    r"(?:-(?P<rev>[0-9]+))?)?)?$"
)


def parse_int(text: str) -> int:
    """Parse a non-negative decimal integer.

    Raises:
        NotAnIntegerError: ``text`` is empty or contains anything but
            ASCII digits.
    """
    if not text or not all("0" <= char <= "9" for char in text):
        raise NotAnIntegerError(f"Not a valid integer: '{text}'", token=text)
    return int(text)


def _optional_int(text: Optional[str]) -> Optional[int]:
    return None if text is None else parse_int(text)


def parse_artifact_name(name: str) -> Optional[ArtifactName]:
    """Split an archive file name into package name, version, target and extension.

    Args:
        name: Decoded file name.

    Returns:
        The parsed name, or ``None`` if ``name`` is not a versioned archive.

    Example::

        >>> parse_artifact_name("mingw-w64-x86_64-gcc-14.2.0-1-any.pkg.tar.zst")
        ArtifactName(name='mingw-w64-x86_64-gcc', version=Version(major=14, ...), target='any', ext='pkg.tar.zst')
        >>> parse_artifact_name("mingw64.db") is None
        True
    """
    match = ARTIFACT_NAME_RE.match(name)
    if match is None:
        return None

    version = Version(
        major=parse_int(match.group("major")),
        minor=parse_int(match.group("minor")),
        patch=parse_int(match.group("patch")),
        rev=parse_int(match.group("rev")),
    )
    return ArtifactName(
        name=match.group("name"),
        version=version,
        target=match.group("target"),
        ext=match.group("ext"),
    )


def parse_partial_version(text: str) -> RequestedVersion:
    """Parse the version part of a specification token.

    Args:
        text: Everything between ``=`` and the optional ``:``.

    Returns:
        :class:`Unconstrained` for ``""``, :class:`SameAsSiblings` for
        ``"!"``, otherwise a :class:`Fixed` prefix.

    Raises:
        MalformedVersionSpecError: ``text`` has any other shape.
    """
    if text == SAME_AS_REST_MARKER:
        return SameAsSiblings()

    if text == "":
        return Unconstrained()

    match = PARTIAL_VERSION_RE.match(text)
    if match is None:
        raise MalformedVersionSpecError(
            f"Invalid partial version specifier: '{text}'", token=text
        )

    return Fixed(
        major=parse_int(match.group("major")),
        minor=_optional_int(match.group("minor")),
        patch=_optional_int(match.group("patch")),
        rev=_optional_int(match.group("rev")),
    )
