"""Field-by-field version compatibility.

A requirement is turned into four matchers, one per version field: "any"
for a wildcard field, "equals N" for a pinned one. There are no ranges.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, Union

from pacpin.models.version import Fixed, PartialVersion, Unconstrained, Version


@dataclass(frozen=True)
class AnyMatcher:
    def matches(self, value: int) -> bool:
        return True


@dataclass(frozen=True)
class EqMatcher:
    expected: int

    def matches(self, value: int) -> bool:
        return value == self.expected


Matcher = Union[AnyMatcher, EqMatcher]


def _matcher_for(value: Optional[int]) -> Matcher:
    return AnyMatcher() if value is None else EqMatcher(value)


def build_matchers(partial: PartialVersion) -> Tuple[Matcher, Matcher, Matcher, Matcher]:
    """Return the four positional matchers for ``partial``."""
    if isinstance(partial, Unconstrained):
        return (AnyMatcher(), AnyMatcher(), AnyMatcher(), AnyMatcher())

    if isinstance(partial, Fixed):
        major, minor, patch, rev = partial.fields
        return (
            _matcher_for(major),
            _matcher_for(minor),
            _matcher_for(patch),
            _matcher_for(rev),
        )

    raise TypeError(f"Can not match against {type(partial).__name__}")


def is_compatible(version: Version, partial: PartialVersion) -> bool:
    """Return True if every pinned field of ``partial`` equals the field of ``version``.

    Example::

        >>> is_compatible(Version(14, 2, 0, 1), Fixed(14))
        True
        >>> is_compatible(Version(14, 2, 0, 1), Fixed(14, 1))
        False
    """
    return all(
        matcher.matches(value)
        for matcher, value in zip(build_matchers(partial), version.fields)
    )
