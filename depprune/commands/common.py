"""Input handling shared by the ``analyze`` and ``prune`` commands.

Both commands need the same three inputs:

1. the manifest of the module to analyze,
2. a module registry (``--registry`` paths, a ``--snapshot`` file, and
   ``registry_paths`` from the configuration),
3. a used-package oracle (``--used-packages`` or ``used_packages`` from the
   configuration).
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, List, Optional, Sequence, TypeVar

import click

from depprune.models import Module
from depprune.context import DepPruneContext
from depprune.exceptions import DepPruneError
from depprune.core import (
    AnalysisResult,
    ModuleRegistry,
    ProgressMonitor,
    ProgressUpdate,
    UnusedDependencyAnalyzer,
    UsedPackagesFileOracle,
)
from depprune.utils import create_progress, get_logger

logger = get_logger("commands.common")

F = TypeVar("F", bound=Callable[..., object])


def analysis_options(func: F) -> F:
    """Attach the registry and oracle options to a command."""
    options = [
        click.option(
            "--registry",
            "-r",
            "registry_paths",
            multiple=True,
            type=click.Path(exists=True, path_type=Path),
            help="Module directory or manifest to add to the registry (repeatable).",
        ),
        click.option(
            "--snapshot",
            type=click.Path(exists=True, dir_okay=False, path_type=Path),
            help="JSON registry snapshot.",
        ),
        click.option(
            "--used-packages",
            "-u",
            type=click.Path(exists=True, dir_okay=False, path_type=Path),
            help="File listing the packages the module's code references.",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def build_registry(
    ctx: DepPruneContext,
    registry_paths: Sequence[Path],
    snapshot: Optional[Path],
) -> ModuleRegistry:
    """Combine the snapshot, configured paths and ``--registry`` paths.

    Raises:
        DepPruneError: No registry source was given at all.
    """
    paths: List[Path] = list(ctx.config.registry_paths) if ctx.config else []
    paths.extend(registry_paths)

    if snapshot is None and not paths:
        raise DepPruneError(
            "No module registry given; pass --registry or --snapshot, "
            "or set registry_paths in the configuration"
        )

    registry = ModuleRegistry.from_snapshot(snapshot) if snapshot else ModuleRegistry()
    if paths:
        for module in ModuleRegistry.from_paths(paths):
            registry.add(module)

    logger.info("Registry holds %d module(s)", len(registry))
    return registry


def build_oracle(
    ctx: DepPruneContext,
    used_packages: Optional[Path],
) -> UsedPackagesFileOracle:
    """Return the oracle for ``--used-packages`` or the configured file.

    Raises:
        DepPruneError: Neither was given.
    """
    path = used_packages or (ctx.config.used_packages if ctx.config else None)
    if path is None:
        raise DepPruneError(
            "No used-package file given; pass --used-packages or set "
            "used_packages in the configuration"
        )
    return UsedPackagesFileOracle(path)


def run_analysis(
    module: Module,
    registry: ModuleRegistry,
    oracle: UsedPackagesFileOracle,
    *,
    show_progress: bool,
) -> AnalysisResult:
    """Run the analyzer, rendering a progress bar when requested."""
    analyzer = UnusedDependencyAnalyzer(module, registry, oracle)

    if not show_progress:
        return analyzer.run()

    with create_progress() as progress:
        task_id = progress.add_task("Analyzing", total=None)

        def _update(update: ProgressUpdate) -> None:
            progress.update(
                task_id,
                total=update.total or None,
                completed=update.completed,
                description=update.task_name or "Analyzing",
            )

        return analyzer.run(ProgressMonitor(callback=_update))
