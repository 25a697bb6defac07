"""
Command-line interface for depprune.

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

from depprune.config import load_config
from depprune.__version__ import VERSION_STRING, __version__
from depprune.context import DepPruneContext
from depprune.exceptions import AnalysisCancelled, ConfigError, DepPruneError
from depprune.utils.logger import get_logger, level_for_verbosity, setup_logging
from depprune.utils.console import print_error, print_warning, reconfigure_console

logger = get_logger("cli")


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file.",
    envvar="DEPPRUNE_CONFIG",
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
    envvar="DEPPRUNE_COLOR",
)
@click.version_option(
    version=__version__,
    prog_name="depprune",
    message=VERSION_STRING,
)
@click.pass_context
def cli(
    ctx: click.Context,
    config: Optional[Path],
    verbose: int,
    color: bool,
) -> None:
    """depprune — find and remove unused module dependencies.

    \b
    Available commands:
      depprune analyze MANIFEST    Report unused dependencies
      depprune prune MANIFEST      Remove unused dependencies

    \b
    Examples:
      depprune analyze META-INF/MANIFEST.MF -r plugins/ -u used.txt
      depprune prune META-INF/MANIFEST.MF -r plugins/ -u used.txt --dry-run
      depprune -v analyze META-INF/MANIFEST.MF --snapshot registry.json

    Use ``depprune COMMAND --help`` for command-specific options.
    """
    _configure_logging(verbose)

    try:
        loaded_config = load_config(config)
    except ConfigError as exc:
        print_error(str(exc))
        raise SystemExit(1) from exc

    depprune_ctx = DepPruneContext()
    depprune_ctx.config_path = config or loaded_config.source_path
    depprune_ctx.color = color
    depprune_ctx.verbose = verbose
    depprune_ctx.config = loaded_config
    ctx.obj = depprune_ctx

    # Respect NO_COLOR for downstream libraries
    if color:
        os.environ.pop("NO_COLOR", None)
    else:
        os.environ["NO_COLOR"] = "1"
    reconfigure_console()

    logger.debug("depprune v%s", __version__)
    logger.debug("Config path: %s", depprune_ctx.config_path)
    if loaded_config.source_path:
        logger.debug("Loaded configuration: %s", loaded_config.to_log_dict())
    logger.debug("Verbosity: %s | Color: %s", verbose, color)


def _configure_logging(verbose: int) -> None:
    """Configure logging level based on verbosity flags."""
    level = level_for_verbosity(verbose)
    setup_logging(level=level, verbose=verbose >= 2)
    logger.debug("Logging initialized at %s level", logging.getLevelName(level))


# Register CLI subcommands
from depprune.commands.analyze import analyze  # noqa: E402
from depprune.commands.prune import prune  # noqa: E402

cli.add_command(analyze)
cli.add_command(prune)


def main() -> int:
    """Main entry point for the depprune CLI.

    Returns:
        Exit code:
            0   Success
            1   Unhandled or application error
            2   Usage error (Click)
            130 Interrupted by user (Ctrl+C) or analysis cancelled
    """
    try:
        cli(standalone_mode=False)
        return 0

    except click.exceptions.Abort:
        print_warning("\nOperation cancelled by user")
        return 130

    except click.ClickException as exc:
        exc.show()
        return exc.exit_code

    except SystemExit as exc:
        # Commands report their outcome through sys.exit
        return exc.code if isinstance(exc.code, int) else 1

    except AnalysisCancelled:
        print_warning("Analysis cancelled")
        return 130

    except DepPruneError as exc:
        print_error(str(exc))
        logger.debug(
            "DepPruneError details: %s",
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
