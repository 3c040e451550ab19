"""
Command-line interface for chunkmc.

Defines the top-level ``chunkmc`` group: global options, configuration
loading, logging setup and command registration.
"""

from __future__ import annotations

import os
import sys
import logging
from pathlib import Path
from typing import Optional

import click

from chunkmc.config import load_config
from chunkmc.__version__ import __version__
from chunkmc.constants import CONFIG_ENV_VAR
from chunkmc.context import ChunkContext
from chunkmc.exceptions import ChunkError, ConfigError
from chunkmc.utils.logger import get_logger, setup_logging, verbosity_to_level
from chunkmc.utils.console import print_error, print_warning, reconfigure_console

logger = get_logger("cli")


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file.",
    envvar=CONFIG_ENV_VAR,
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
    envvar="CHUNK_COLOR",
)
@click.version_option(
    version=__version__,
    prog_name="chunkmc",
    message="%(prog)s %(version)s",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config: Optional[Path],
    verbose: int,
    color: bool,
) -> None:
    """chunkmc: dependency resolution for Minecraft modpacks.

    \b
    Available commands:
      chunkmc check                Validate the .chunk.json manifest
      chunkmc resolve MOD VERSION  Resolve a mod's dependency tree

    \b
    Examples:
      chunkmc check --dir ./server
      chunkmc resolve sodium 0.5.8 --index mods.json --format dot

    Use ``chunkmc COMMAND --help`` for command-specific options.
    """
    # Must happen before anything is printed
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

    chunk_ctx = ChunkContext()
    chunk_ctx.config_path = config or loaded_config.source_path
    chunk_ctx.color = color
    chunk_ctx.verbose = verbose
    chunk_ctx.config = loaded_config
    ctx.obj = chunk_ctx

    logger.debug("chunkmc v%s", __version__)
    logger.debug("Config path: %s", chunk_ctx.config_path)
    if loaded_config.source_path:
        logger.debug("Loaded configuration: %s", loaded_config.to_log_dict())
    logger.debug("Verbosity: %s | Color: %s", verbose, color)


def _configure_logging(verbose: int) -> None:
    level = verbosity_to_level(verbose)
    setup_logging(level=level, verbose=verbose >= 2)
    logger.debug("Logging initialized at %s level", logging.getLevelName(level))


# Register CLI subcommands
try:
    from chunkmc.commands.check import check
    from chunkmc.commands.resolve import resolve

    cli.add_command(check)
    cli.add_command(resolve)

except ImportError as exc:
    sys.stderr.write(f"FATAL: Failed to import CLI commands: {exc}\n")
    sys.exit(1)


def main() -> int:
    """Main entry point for the chunkmc CLI.

    Returns:
        Exit code:
            0   Success
            1   Application error
            2   Usage error (Click)
            130 Interrupted by user (Ctrl+C)
    """
    try:
        cli(standalone_mode=False)
        return 0

    except click.ClickException as exc:
        exc.show()
        return exc.exit_code

    except ChunkError as exc:
        print_error(str(exc))
        logger.debug("ChunkError details: %s", exc.details or "<none>", exc_info=True)
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
