"""
Command-line interface for pacpin.

This module provides the main CLI entry point and handles global options,
configuration loading, and command registration.
"""

from __future__ import annotations

import os
import sys
import logging
from pathlib import Path
from typing import Optional

import click

from pacpin.config import load_config
from pacpin.__version__ import __version__
from pacpin.context import PacpinContext
from pacpin.exceptions import ConfigError, PacpinError
from pacpin.utils.logger import get_logger, setup_logging, verbosity_to_level
from pacpin.utils.console import print_error, print_warning, reconfigure_console

logger = get_logger("cli")


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file.",
    envvar="PACPIN_CONFIG",
)
@click.option(
    "--verbose",
    "-v",
    count=True,
    help="Increase verbosity (can be repeated: -v, -vv).",
)
@click.option(
    "--color/--no-color",
    default=True,
    help="Enable or disable colored output.",
    envvar="PACPIN_COLOR",
)
@click.version_option(
    version=__version__,
    prog_name="pacpin",
    message="%(prog)s %(version)s",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config: Optional[Path],
    verbose: int,
    color: bool,
) -> None:
    """pacpin: install pinned package versions from MSYS2 repositories.

    \b
    Available commands:
      pacpin resolve SPEC          Show which archives SPEC resolves to
      pacpin install SPEC          Download and install them with pacman

    \b
    Specification syntax (one batch per line, single spaces):
      name                   newest build
      name=14                newest 14.x.y-z
      name=14.2.0-1          exactly that build
      name=!                 same version as the packages before it
      name=:v                virtual package, installed by name
      name=:n                do not add the mingw-w64-<arch> prefix

    \b
    Examples:
      pacpin resolve "gcc=14 gcc-libs=!" -m ucrt64
      pacpin -v install -f msys2-packages.txt

    Use ``pacpin COMMAND --help`` for command-specific options.
    """
    # Respect NO_COLOR for downstream libraries
    if color:
        os.environ.pop("NO_COLOR", None)
    else:
        os.environ["NO_COLOR"] = "1"
    reconfigure_console()

    _configure_logging(verbose)

    try:
        loaded_config = load_config(config)
    except ConfigError as exc:
        print_error(str(exc))
        raise SystemExit(1) from exc

    pacpin_ctx = PacpinContext()
    pacpin_ctx.config_path = config or loaded_config.source_path
    pacpin_ctx.color = color
    pacpin_ctx.verbose = verbose
    pacpin_ctx.config = loaded_config
    ctx.obj = pacpin_ctx

    logger.debug("pacpin v%s", __version__)
    logger.debug("Config path: %s", pacpin_ctx.config_path)
    if loaded_config.source_path:
        logger.debug("Loaded configuration: %s", loaded_config.to_log_dict())
    logger.debug("Verbosity: %s | Color: %s", verbose, color)


def _configure_logging(verbose: int) -> None:
    """Configure logging level based on verbosity flags."""
    level = verbosity_to_level(verbose)
    setup_logging(level=level, verbose=verbose >= 2)
    logger.debug("Logging initialized at %s level", logging.getLevelName(level))


# Register CLI subcommands
try:
    from pacpin.commands.resolve import resolve
    from pacpin.commands.install import install

    cli.add_command(resolve)
    cli.add_command(install)

except ImportError as exc:
    sys.stderr.write(f"FATAL: Failed to import CLI commands: {exc}\n")
    sys.exit(1)


def main() -> int:
    """Main entry point for the pacpin CLI.

    Returns:
        Exit code:
            0   Success
            1   Unhandled or application error
            2   Usage error (Click)
            130 Interrupted by user (Ctrl+C)
    """
    try:
        cli(standalone_mode=False)
        return 0

    except click.ClickException as exc:
        exc.show()
        return exc.exit_code

    except click.exceptions.Exit as exc:
        return exc.exit_code

    except click.Abort:
        print_warning("\nOperation cancelled by user")
        return 130

    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else 1

    except PacpinError as exc:
        print_error(str(exc))
        logger.debug(
            "PacpinError details: %s",
            exc.details or "<none>",
            exc_info=True,
        )
        return 1

    except KeyboardInterrupt:
        print_warning("\nOperation cancelled by user")
        return 130

    except Exception as exc:
        print_error(f"Unexpected error: {exc}")
        logger.exception("Unhandled exception in CLI")
        return 1


if __name__ == "__main__":
    sys.exit(main())
