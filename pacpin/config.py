"""Configuration file loader for pacpin.

Handles discovery, loading, parsing, and validation of configuration files.
Supports two formats:

- ``pacpin.toml`` with settings under the ``[pacpin]`` table
- ``pyproject.toml`` with settings under the ``[tool.pacpin]`` table

Discovery order:

1. Explicit path from ``--config`` or ``PACPIN_CONFIG``
2. ``pacpin.toml`` in current directory
3. ``pyproject.toml`` with ``[tool.pacpin]`` section

Configuration precedence: defaults < config file < environment < CLI args.

Typical usage::

    config = load_config()  # Auto-discover
    config = load_config(Path("ci/pacpin.toml"))  # Explicit path

Example (``pacpin.toml``)::

    [pacpin]
    msystem = "ucrt64"
    keep_downloads = true
    timeout = 60
"""

from __future__ import annotations

import tomli as tomllib
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple
from dataclasses import dataclass, field

from pacpin.exceptions import ConfigError
from pacpin.utils.logger import get_logger
from pacpin.constants import (
    DEFAULT_ENVIRONMENT,
    DEFAULT_INSTALL_PREREQUISITES,
    DEFAULT_KEEP_DOWNLOADS,
    DEFAULT_TIMEOUT,
)

logger = get_logger("config")


@dataclass
class PacpinConfig:
    """Parsed and validated pacpin configuration.

    All fields have defaults, so empty config files are valid.

    Attributes:
        msystem: MSYS2 environment identifier (validated when used).
        msys2_shell: Shell pacman runs in; ``None`` picks the default.
        download_dir: Where archives are downloaded; ``None`` picks the
            default.
        install_prerequisites: Install the archive tools before the first
            batch.
        keep_downloads: Keep downloaded archives after installing.
        timeout: HTTP timeout in seconds.
        source_path: Path to loaded config file, or ``None`` if using defaults.
    """

    msystem: str = DEFAULT_ENVIRONMENT
    msys2_shell: Optional[str] = None
    download_dir: Optional[str] = None
    install_prerequisites: bool = DEFAULT_INSTALL_PREREQUISITES
    keep_downloads: bool = DEFAULT_KEEP_DOWNLOADS
    timeout: int = DEFAULT_TIMEOUT

    # Metadata (not a user-facing option)
    source_path: Optional[Path] = field(default=None, repr=False)

    def to_log_dict(self) -> Dict[str, Any]:
        """Return configuration as dictionary for debug logging."""
        return {
            "msystem": self.msystem,
            "msys2_shell": self.msys2_shell,
            "download_dir": self.download_dir,
            "install_prerequisites": self.install_prerequisites,
            "keep_downloads": self.keep_downloads,
            "timeout": self.timeout,
        }


def _is_str(value: Any) -> bool:
    return isinstance(value, str)


def _is_bool(value: Any) -> bool:
    return isinstance(value, bool)


def _is_positive_int(value: Any) -> bool:
    # bool is a subclass of int
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


#: Option name -> (validator, description used in error messages).
_OPTIONS: Dict[str, Tuple[Callable[[Any], bool], str]] = {
    "msystem": (_is_str, "a string"),
    "msys2_shell": (_is_str, "a string"),
    "download_dir": (_is_str, "a string"),
    "install_prerequisites": (_is_bool, "a boolean"),
    "keep_downloads": (_is_bool, "a boolean"),
    "timeout": (_is_positive_int, "a positive integer"),
}


def discover_config_file(explicit_path: Optional[Path] = None) -> Optional[Path]:
    """Find the configuration file to load.

    Search order:

    1. ``explicit_path`` (from ``--config`` or ``PACPIN_CONFIG``)
    2. ``pacpin.toml`` in current directory
    3. ``pyproject.toml`` with ``[tool.pacpin]`` section in current directory

    Args:
        explicit_path: Explicit config path. If provided, must exist.

    Returns:
        Resolved path to config file, or ``None`` if not found.

    Raises:
        ConfigError: Explicit path provided but does not exist.
    """
    if explicit_path is not None:
        resolved = explicit_path.resolve()
        if not resolved.is_file():
            raise ConfigError(
                f"Configuration file not found: {explicit_path}",
                config_path=str(explicit_path),
            )
        logger.debug("Using explicit config: %s", resolved)
        return resolved

    cwd = Path.cwd()

    pacpin_toml = cwd / "pacpin.toml"
    if pacpin_toml.is_file():
        logger.debug("Found pacpin.toml: %s", pacpin_toml)
        return pacpin_toml

    pyproject_toml = cwd / "pyproject.toml"
    if pyproject_toml.is_file() and _pyproject_has_pacpin_section(pyproject_toml):
        logger.debug("Found [tool.pacpin] in pyproject.toml: %s", pyproject_toml)
        return pyproject_toml

    logger.debug("No configuration file found")
    return None


def _pyproject_has_pacpin_section(path: Path) -> bool:
    """Check if pyproject.toml contains a ``[tool.pacpin]`` section.

    A pyproject.toml that can not be parsed is treated as having none.
    """
    try:
        raw = _read_toml(path)
    except ConfigError as exc:
        logger.debug("Ignoring unreadable %s: %s", path, exc)
        return False
    return "pacpin" in raw.get("tool", {})


def load_config(config_path: Optional[Path] = None) -> PacpinConfig:
    """Load and validate pacpin configuration.

    Args:
        config_path: Explicit path to config file. If ``None``, uses
            auto-discovery (see :func:`discover_config_file`).

    Returns:
        Validated :class:`PacpinConfig` with values from file or defaults.

    Raises:
        ConfigError: File cannot be parsed, has unknown keys, or invalid values.
    """
    resolved = discover_config_file(config_path)

    if resolved is None:
        logger.debug("No config file found, using defaults")
        return PacpinConfig()

    logger.info("Loading configuration from %s", resolved)
    raw = _read_toml(resolved)

    if resolved.name == "pyproject.toml":
        section = raw.get("tool", {}).get("pacpin", {})
    else:
        section = raw.get("pacpin", {})

    if not section:
        logger.debug("Config file found but no pacpin section, using defaults")
        return PacpinConfig(source_path=resolved)

    config = _parse_section(section, config_path=str(resolved))
    config.source_path = resolved

    logger.debug("Loaded configuration: %s", config.to_log_dict())
    return config


def _read_toml(path: Path) -> Dict[str, Any]:
    """Read and parse a TOML file.

    Raises:
        ConfigError: File cannot be read or is not valid TOML.
    """
    try:
        with open(path, "rb") as fh:
            return tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(
            f"Invalid TOML in {path.name}: {exc}",
            config_path=str(path),
        ) from exc
    except OSError as exc:
        raise ConfigError(
            f"Cannot read configuration file {path}: {exc}",
            config_path=str(path),
        ) from exc


def _parse_section(
    section: Dict[str, Any],
    *,
    config_path: str,
) -> PacpinConfig:
    """Parse and validate a ``[pacpin]`` or ``[tool.pacpin]`` table.

    Raises:
        ConfigError: Unknown keys or incorrect types.
    """
    unknown = set(section.keys()) - set(_OPTIONS)
    if unknown:
        raise ConfigError(
            f"Unknown configuration keys: {', '.join(sorted(unknown))}",
            config_path=config_path,
        )

    config = PacpinConfig()

    for option, value in section.items():
        validator, expected = _OPTIONS[option]
        if not validator(value):
            raise ConfigError(
                f"{option} must be {expected}, got {type(value).__name__}",
                config_path=config_path,
                option=option,
            )
        setattr(config, option, value)

    return config
