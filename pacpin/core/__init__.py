"""
Core functionality exports for pacpin.

This module provides convenient access to the core subsystems of pacpin.
Importing from here keeps user-facing imports clean and stable:

    from pacpin.core import SpecParser, resolve_batch
"""

from __future__ import annotations

from pacpin.core.environment import Environment
from pacpin.core.spec_parser import SpecParser
from pacpin.core.catalog_parser import parse_catalog
from pacpin.core.resolver import resolve_batch, resolve_line
from pacpin.core.repository import fetch_catalog
from pacpin.core.installer import Installer, PacmanRunner

__all__ = [
    "Environment",
    "SpecParser",
    "parse_catalog",
    "resolve_batch",
    "resolve_line",
    "fetch_catalog",
    "Installer",
    "PacmanRunner",
]
