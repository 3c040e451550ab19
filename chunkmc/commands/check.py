"""Check command implementation for chunkmc.

Validates the ``dependencies`` section of a modpack's ``.chunk.json``
without contacting any metadata source: constraints declared for the
same mod are checked against each other, and mods that are both
required and declared incompatible are flagged.

Typical usage::

    # Check the manifest in the current directory
    $ chunkmc check

    # Check another server directory, machine-readable output
    $ chunkmc check --dir ./server --format json
"""

from __future__ import annotations

import sys
import json
from pathlib import Path
from typing import Dict, List

import click

from chunkmc.context import ChunkContext, pass_context
from chunkmc.core import ChunkManifest, find_manifest, load_manifest, validate_dependencies
from chunkmc.exceptions import ChunkError
from chunkmc.models import Dependency, DependencyType, LoaderType, ValidationResult
from chunkmc.utils import (
    colorize_validation_type,
    get_logger,
    get_raw_console,
    print_error,
    print_info,
    print_success,
    print_table,
    print_warning,
)
from chunkmc.constants import MANIFEST_FILE_NAME

logger = get_logger("commands.check")


@click.command()
@click.option(
    "--dir",
    "-d",
    "directory",
    type=click.Path(file_okay=False, path_type=Path),
    default=".",
    help="Directory containing the .chunk.json manifest.",
)
@click.option(
    "--format",
    "-f",
    type=click.Choice(["text", "json"], case_sensitive=False),
    default="text",
    help="Output format.",
)
@pass_context
def check(ctx: ChunkContext, directory: Path, format: str) -> None:
    """Validate the dependencies declared in a modpack manifest.

    \b
    Reports:
      CONFLICT      constraints on one mod that cannot all hold
      INCOMPATIBLE  a mod that is both required and declared incompatible
      MISSING       a required mod that cannot be found
      WARNING       anything worth a look that is not an error

    Exits 1 when any CONFLICT, INCOMPATIBLE or MISSING finding exists.
    A directory without a manifest is reported and exits 0.
    """
    try:
        failed = _run_check(ctx, directory.resolve(), format.lower())
    except ChunkError as exc:
        print_error(f"{exc}")
        sys.exit(1)

    sys.exit(1 if failed else 0)


def _run_check(ctx: ChunkContext, directory: Path, format: str) -> bool:
    """Load, validate and render. Returns ``True`` when an error was found."""
    manifest_path = find_manifest(directory)
    if manifest_path is None:
        print_warning(f"No {MANIFEST_FILE_NAME} found in {directory}")
        if format == "text":
            get_raw_console().print(
                f"To validate dependencies, add a {MANIFEST_FILE_NAME} file with a "
                "'dependencies' section listing mod requirements."
            )
        return False

    manifest = load_manifest(manifest_path)
    logger.info("Validating %d dependencies from %s", len(manifest.dependencies), manifest_path)

    results = validate_dependencies(manifest.dependencies)
    failed = any(result.type.is_error for result in results)

    if format == "json":
        _display_json(manifest, results)
    else:
        _display_text(manifest, results, verbose=ctx.verbose > 0)

    return failed


def _display_text(
    manifest: ChunkManifest,
    results: List[ValidationResult],
    *,
    verbose: bool,
) -> None:
    console = get_raw_console()

    title = manifest.name or "modpack"
    loader_type = manifest.loader_type
    loader = loader_type.value if loader_type is not None else manifest.loader
    details = ", ".join(part for part in (manifest.mc_version, loader) if part)
    print_info(f"Checking {title}" + (f" ({details})" if details else ""))
    if manifest.loader and loader_type is None:
        known = ", ".join(item.value for item in LoaderType)
        print_warning(f"Unknown loader '{manifest.loader}' (expected one of: {known})")

    if not manifest.dependencies:
        print_success("No dependencies to validate")
        return

    if not results:
        print_success(f"All {len(manifest.dependencies)} dependencies are valid")
        _display_summary(manifest.dependencies)
        return

    console.print("\n[bold]Dependency issues found:[/bold]\n")
    for result in results:
        console.print(f"  {colorize_validation_type(result.type)}: {result.mod_id}")
        console.print(f"     {result.message}", markup=False)
    console.print("")

    if verbose:
        _display_summary(manifest.dependencies)

    errors = sum(1 for result in results if result.type.is_error)
    if errors:
        print_error(f"{errors} dependency problem(s) found")
    else:
        print_warning(f"{len(results)} warning(s) found")


def _display_summary(dependencies: List[Dependency]) -> None:
    """Show how many dependencies of each type the manifest declares."""
    counts: Dict[DependencyType, int] = {dep_type: 0 for dep_type in DependencyType}
    for dep in dependencies:
        counts[dep.type] += 1

    rows = [
        {"Type": dep_type.value.capitalize(), "Count": str(count)}
        for dep_type, count in counts.items()
        if count
    ]
    print_table(
        rows,
        title="Dependency Summary",
        column_styles={"Count": {"justify": "right"}},
    )


def _display_json(manifest: ChunkManifest, results: List[ValidationResult]) -> None:
    data = {
        "manifest": manifest.to_dict(),
        "valid": not any(result.type.is_error for result in results),
        "results": [result.to_dict() for result in results],
    }
    print(json.dumps(data, indent=2))
