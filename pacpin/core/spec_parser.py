"""Installation specification parser.

The specification is a small line-oriented language. Each line is one
batch of packages that pacman installs together; tokens are separated by
single spaces::

    gcc=14 gcc-libs=!
    python=3.12.7-1
    base-devel=:vn

Token syntax is ``name[=version[:settings]]`` where

- ``version`` is empty (newest), ``!`` (same as the packages before it on
  the line) or ``major[.minor[.patch[-rev]]]``;
- ``settings`` is any combination of ``v`` (virtual: install by name, no
  catalog lookup) and ``n`` (do not add the environment prefix).

Names without the environment prefix are matched both as written and with
the prefix, so ``gcc`` finds ``mingw-w64-ucrt-x86_64-gcc`` as well as a
plain ``gcc`` package.

Typical usage::

    parser = SpecParser(Environment.UCRT64)
    batches = parser.parse_string("gcc=14 gcc-libs=!\\nmake")
    # [[NormalRequest(gcc v14), NormalRequest(gcc-libs <same_as_rest>)],
    #  [NormalRequest(make <Empty version>)]]
"""

from __future__ import annotations

import re
from typing import List, Tuple

from pacpin.core.environment import Environment
from pacpin.core.version_grammar import parse_partial_version
from pacpin.utils.logger import get_logger
from pacpin.exceptions import (
    EmptyPackageTokenError,
    InvalidSettingsCharError,
    MalformedTokenError,
)
from pacpin.models.requirement import (
    NormalRequest,
    PackageInput,
    PackageRequest,
    ResolveSettings,
    VirtualRequest,
)
from pacpin.constants import (
    SETTING_NO_PREFIX,
    SETTING_VIRTUAL,
    SETTINGS_SEPARATOR,
    VERSION_SEPARATOR,
)


def parse_settings(text: str, *, token: str) -> ResolveSettings:
    """Parse the settings string that follows ``:``.

    Raises:
        InvalidSettingsCharError: ``text`` contains a character other than
            ``v`` or ``n``.
    """
    settings = ResolveSettings()

    for char in text:
        if char == SETTING_VIRTUAL:
            settings.virtual = True
        elif char == SETTING_NO_PREFIX:
            settings.prepend_prefix = False
        else:
            raise InvalidSettingsCharError(
                f"Invalid settings char: '{char}'", char=char, token=token
            )

    return settings


def parse_package_token(token: str) -> PackageInput:
    """Split one token into name, version and settings.

    Raises:
        MalformedTokenError: More than one ``=`` or ``:``, or no name.
        MalformedVersionSpecError: The version part is malformed.
        InvalidSettingsCharError: The settings part is malformed.
    """
    if VERSION_SEPARATOR not in token:
        return PackageInput(name=token)

    name, *rest = token.split(VERSION_SEPARATOR)
    if len(rest) != 1:
        raise MalformedTokenError(
            "Invalid version specifier, it can't contain '='", token=token
        )
    if not name:
        raise MalformedTokenError("Missing package name before '='", token=token)

    remainder = rest[0]
    if SETTINGS_SEPARATOR not in remainder:
        return PackageInput(name=name, version=parse_partial_version(remainder))

    version_text, *settings_parts = remainder.split(SETTINGS_SEPARATOR)
    if len(settings_parts) != 1:
        raise MalformedTokenError(
            "Invalid settings specifier, it can't contain ':'", token=token
        )

    return PackageInput(
        name=name,
        version=parse_partial_version(version_text),
        settings=parse_settings(settings_parts[0], token=token),
    )


def resolve_virtual_name(name: str, environment: Environment, prepend_prefix: bool) -> str:
    """Return the pacman name for a virtual package."""
    prefix = environment.prefix

    # Already qualified; stripping the prefix would name a different package
    if name.startswith(prefix):
        return name

    if prepend_prefix:
        return f"{prefix}-{name}"

    return name


def resolve_candidate_names(
    name: str, environment: Environment, prepend_prefix: bool
) -> List[str]:
    """Return the catalog package names a user-supplied name may refer to."""
    prefix = environment.prefix

    if name.startswith(prefix):
        return [name]

    if not prepend_prefix:
        return [name]

    return [name, f"{prefix}-{name}"]


_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")


def split_lines(text: str) -> List[Tuple[int, str]]:
    """Split a specification into ``(line_number, line)`` pairs.

    ``\\r\\n``, ``\\r`` and ``\\n`` each end a line, so CRLF files read like
    LF files and line numbers match what an editor shows.
    """
    return list(enumerate(_LINE_BREAK_RE.split(text), start=1))


class SpecParser:
    """Parser for installation specifications of one environment.

    Args:
        environment: Environment whose package prefix is used for name
            resolution.

    Example::

        >>> parser = SpecParser(Environment.MINGW64)
        >>> parser.parse_token("gcc=14")
        NormalRequest(names=('gcc', 'mingw-w64-x86_64-gcc'), original_name='gcc', version=Fixed(major=14, ...))
    """

    def __init__(self, environment: Environment) -> None:
        self.environment = environment
        self.logger = get_logger("spec_parser")

    def parse_string(self, text: str) -> List[List[PackageRequest]]:
        """Parse a whole specification into one request list per line.

        Empty lines carry no requests and are dropped. A line holding only
        spaces is not empty and fails like any other stray space.

        Raises:
            GrammarError: Any token is malformed. Nothing is returned for
                the other lines.
        """
        batches: List[List[PackageRequest]] = []

        for line_number, line in split_lines(text):
            if not line:
                continue
            batch = self.parse_line(line, line_number)
            self.logger.debug(
                "Line %d: %s", line_number, ", ".join(str(req) for req in batch)
            )
            batches.append(batch)

        self.logger.debug("Parsed %d batch(es)", len(batches))
        return batches

    def parse_line(self, line: str, line_number: int = 0) -> List[PackageRequest]:
        """Parse the space-separated tokens of one line.

        Raises:
            EmptyPackageTokenError: The line has leading, trailing or
                doubled spaces.
        """
        requests: List[PackageRequest] = []

        for token in line.split(" "):
            if not token:
                raise EmptyPackageTokenError(
                    "Empty package token, packages must be separated by a single space",
                    token=line,
                    line_number=line_number or None,
                )
            requests.append(self.parse_token(token))

        return requests

    def parse_token(self, token: str) -> PackageRequest:
        """Parse one token and resolve its names for this environment."""
        package_input = parse_package_token(token)
        settings = package_input.settings

        if settings.virtual:
            return VirtualRequest(
                name=resolve_virtual_name(
                    package_input.name, self.environment, settings.prepend_prefix
                )
            )

        names = resolve_candidate_names(
            package_input.name, self.environment, settings.prepend_prefix
        )
        return NormalRequest(
            names=tuple(names),
            original_name=package_input.name,
            version=package_input.version,
        )
