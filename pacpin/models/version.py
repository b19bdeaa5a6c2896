"""
Version data model for pacpin.

MSYS2 archive names carry a four-field version, ``major.minor.patch-rev``.
Requested versions are one of three kinds:

* :class:`Unconstrained`: no version given, anything matches.
* :class:`Fixed`: a prefix of the four fields, the rest are wildcards
  (``14`` matches ``14.2.0-1`` and ``14.1.0-3``).
* :class:`SameAsSiblings`: the ``!`` marker, "the version the earlier
  packages of this line resolved to".
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, Union

MAJOR_WEIGHT = 10**9
MINOR_WEIGHT = 10**6
PATCH_WEIGHT = 10**3
REV_WEIGHT = 1


@dataclass(frozen=True)
class Version:
    """A concrete ``major.minor.patch-rev`` version.

    Versions are ordered by :attr:`weight`, so two versions with the same
    weight compare equal for ordering purposes even if their fields differ.

    Attributes:
        major: Major version number.
        minor: Minor version number.
        patch: Patch version number.
        rev: Package revision (``pkgrel``).
    """

    major: int
    minor: int
    patch: int
    rev: int

    def __post_init__(self) -> None:
        for field_name, value in zip(("major", "minor", "patch", "rev"), self.fields):
            if value < 0:
                raise ValueError(f"Version field {field_name} must be >= 0, got {value}")

    @property
    def fields(self) -> Tuple[int, int, int, int]:
        """The four fields in positional order."""
        return (self.major, self.minor, self.patch, self.rev)

    @property
    def weight(self) -> int:
        """Single integer used to order versions."""
        return (
            self.major * MAJOR_WEIGHT
            + self.minor * MINOR_WEIGHT
            + self.patch * PATCH_WEIGHT
            + self.rev * REV_WEIGHT
        )

    def as_requirement(self) -> Fixed:
        """Return a :class:`Fixed` requirement pinning all four fields."""
        return Fixed(self.major, self.minor, self.patch, self.rev)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.weight < other.weight

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.weight <= other.weight

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.weight > other.weight

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.weight >= other.weight

    def __str__(self) -> str:
        return f"v{self.major}.{self.minor}.{self.patch}-{self.rev}"


@dataclass(frozen=True)
class Unconstrained:
    """No version requested; every version is compatible."""

    def __str__(self) -> str:
        return "<Empty version>"


@dataclass(frozen=True)
class Fixed:
    """A version prefix; unset trailing fields are wildcards.

    A field may only be set when every field before it is set, so
    ``Fixed(14, None, 0)`` is rejected.
    """

    major: int
    minor: Optional[int] = None
    patch: Optional[int] = None
    rev: Optional[int] = None

    def __post_init__(self) -> None:
        seen_unset = False
        for field_name, value in zip(("major", "minor", "patch", "rev"), self.fields):
            if value is None:
                seen_unset = True
                continue
            if seen_unset:
                raise ValueError(
                    f"Version field {field_name} is set but an earlier field is not"
                )
            if value < 0:
                raise ValueError(f"Version field {field_name} must be >= 0, got {value}")

    @property
    def fields(self) -> Tuple[Optional[int], Optional[int], Optional[int], Optional[int]]:
        """The four fields in positional order, ``None`` for wildcards."""
        return (self.major, self.minor, self.patch, self.rev)

    def __str__(self) -> str:
        if self.minor is None:
            return f"v{self.major}"
        if self.patch is None:
            return f"v{self.major}.{self.minor}"
        if self.rev is None:
            return f"v{self.major}.{self.minor}.{self.patch}"
        return f"v{self.major}.{self.minor}.{self.patch}-{self.rev}"


@dataclass(frozen=True)
class SameAsSiblings:
    """The ``!`` marker: same version as the earlier packages of the line."""

    def __str__(self) -> str:
        return "<same_as_rest>"


#: Requirements that can be matched against a catalog directly.
PartialVersion = Union[Unconstrained, Fixed]

#: Anything a user can write after ``=``.
RequestedVersion = Union[Unconstrained, Fixed, SameAsSiblings]


def render_version(version: Union[Version, RequestedVersion]) -> str:
    """Human-readable form of any version kind, used in messages."""
    return str(version)
