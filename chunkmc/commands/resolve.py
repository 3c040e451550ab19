"""Resolve command implementation for chunkmc.

Resolves one mod's full dependency tree against a local JSON metadata
index and renders the result as a tree, as JSON, or as a Graphviz DOT
graph.

Resolver options come from the configuration file and can be overridden
per invocation::

    $ chunkmc resolve create 0.5.1 --index mods.json
    $ chunkmc resolve create 0.5.1 --index mods.json --strategy minimal --no-optional
    $ chunkmc resolve create 0.5.1 --index mods.json --format dot | dot -Tpng > deps.png
"""

from __future__ import annotations

import sys
import json
from pathlib import Path
from typing import Optional

import click

from chunkmc.context import ChunkContext, pass_context
from chunkmc.core import (
    DependencyGraph,
    ResolutionOptions,
    ResolutionStrategy,
    Resolver,
    load_index,
)
from chunkmc.exceptions import ChunkError, ResolutionError
from chunkmc.models import LoaderType
from chunkmc.utils import (
    get_logger,
    get_raw_console,
    print_error,
    print_success,
    print_tree,
    print_warning,
)

logger = get_logger("commands.resolve")


@click.command()
@click.argument("mod_id")
@click.argument("version")
@click.option(
    "--index",
    "-i",
    "index_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="JSON metadata index to resolve against.",
)
@click.option(
    "--format",
    "-f",
    type=click.Choice(["tree", "json", "dot"], case_sensitive=False),
    default="tree",
    help="Output format.",
)
@click.option(
    "--strategy",
    type=click.Choice([s.value for s in ResolutionStrategy], case_sensitive=False),
    default=None,
    help="Pick the newest or the oldest matching version.",
)
@click.option(
    "--optional/--no-optional",
    "include_optional",
    default=None,
    help="Resolve optional dependencies.",
)
@click.option(
    "--max-depth",
    type=click.IntRange(min=0),
    default=None,
    help="Stop descending below this depth (0 = unlimited).",
)
@click.option(
    "--loader",
    type=click.Choice([loader.value for loader in LoaderType], case_sensitive=False),
    default=None,
    help="Loader to check mod compatibility against.",
)
@click.option(
    "--loader-version",
    default=None,
    help="Version of the target loader.",
)
@pass_context
def resolve(
    ctx: ChunkContext,
    mod_id: str,
    version: str,
    index_path: Path,
    format: str,
    strategy: Optional[str],
    include_optional: Optional[bool],
    max_depth: Optional[int],
    loader: Optional[str],
    loader_version: Optional[str],
) -> None:
    """Resolve the dependency tree of MOD_ID at VERSION.

    Exits 0 for a clean resolution, 1 when resolution failed or when it
    succeeded with conflicts, incompatibilities or loader mismatches.
    """
    options = _build_options(
        ctx,
        strategy=strategy,
        include_optional=include_optional,
        max_depth=max_depth,
        loader=loader,
        loader_version=loader_version,
    )

    try:
        provider = load_index(index_path)
        graph = Resolver(provider, options).resolve(mod_id, version)
    except ResolutionError as exc:
        print_error(f"Resolution failed: {exc}")
        logger.debug("Resolution error details: %s", exc.details or "<none>")
        sys.exit(1)
    except ChunkError as exc:
        print_error(f"{exc}")
        sys.exit(1)

    _render(graph, format.lower())

    if graph.has_errors():
        if format.lower() == "tree":
            for line in graph.get_errors():
                print_warning(line)
        sys.exit(1)

    sys.exit(0)


def _build_options(
    ctx: ChunkContext,
    *,
    strategy: Optional[str],
    include_optional: Optional[bool],
    max_depth: Optional[int],
    loader: Optional[str],
    loader_version: Optional[str],
) -> ResolutionOptions:
    """Layer command-line overrides on top of the configured options."""
    options = ctx.config.to_resolution_options()

    if strategy is not None:
        options.strategy = ResolutionStrategy(strategy.lower())
    if include_optional is not None:
        options.include_optional = include_optional
    if max_depth is not None:
        options.max_depth = max_depth
    if loader is not None:
        options.target_loader = LoaderType(loader.lower())
    if loader_version is not None:
        options.target_loader_version = loader_version

    logger.debug("Resolution options: %s", options)
    return options


def _render(graph: DependencyGraph, format: str) -> None:
    if format == "json":
        print(json.dumps(graph.to_dict(), indent=2))
        return

    if format == "dot":
        # Raw text: DOT labels contain brackets Rich would read as markup
        sys.stdout.write(graph.generate_graph())
        return

    if graph.root is not None:
        print_tree(graph.root)
    get_raw_console().print(f"\n{len(graph.all_mods)} mod(s) resolved")
    if not graph.has_errors():
        print_success("No conflicts found")
