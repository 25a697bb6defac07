"""Analyze command implementation for depprune.

Reports the declared dependencies of a module manifest that its code does
not need.

The command orchestrates three inputs:

1. **Manifest** — the module to analyze, parsed into a :class:`Module`.
2. **ModuleRegistry** — every other module, used to resolve required
   modules and walk re-export chains.
3. **UsedPackagesFileOracle** — the packages the module's code references,
   as computed by an external analyzer.

Typical usage::

    # Table report
    $ depprune analyze plugin/META-INF/MANIFEST.MF -r plugins/ -u used.txt

    # Machine-readable JSON output
    $ depprune analyze MANIFEST.MF --snapshot registry.json -u used.json -f json
"""

from __future__ import annotations

import sys
import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import click

from depprune.core import AnalysisResult, load_module
from depprune.context import pass_context, DepPruneContext
from depprune.exceptions import AnalysisCancelled, DepPruneError
from depprune.models import UnusedEntry, UnusedModule, UnusedPackage
from depprune.commands.common import (
    analysis_options,
    build_oracle,
    build_registry,
    run_analysis,
)
from depprune.utils import (
    colorize_entry_kind,
    get_logger,
    get_raw_console,
    print_error,
    print_success,
    print_table,
    print_warning,
)

logger = get_logger("commands.analyze")


@click.command()
@click.argument(
    "manifest",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@analysis_options
@click.option(
    "--format",
    "-f",
    type=click.Choice(["table", "simple", "json"], case_sensitive=False),
    default="table",
    help="Output format.",
)
@pass_context
def analyze(
    ctx: DepPruneContext,
    manifest: Path,
    registry_paths: Tuple[Path, ...],
    snapshot: Optional[Path],
    used_packages: Optional[Path],
    format: str,
) -> None:
    """Report unused dependencies declared by MANIFEST.

    Exits with 1 when unused dependencies were found, 0 when every
    declared dependency is needed.
    """
    try:
        has_unused = _analyze(
            ctx,
            manifest,
            registry_paths,
            snapshot,
            used_packages,
            format.lower(),
        )
        sys.exit(1 if has_unused else 0)

    except AnalysisCancelled:
        print_warning("Analysis cancelled")
        sys.exit(130)
    except DepPruneError as e:
        print_error(f"{e}")
        sys.exit(1)
    except Exception as e:
        print_error(f"Unexpected error: {e}")
        logger.exception("Error in analyze command")
        sys.exit(1)


def _analyze(
    ctx: DepPruneContext,
    manifest: Path,
    registry_paths: Tuple[Path, ...],
    snapshot: Optional[Path],
    used_packages: Optional[Path],
    format: str,
) -> bool:
    """Load inputs, run the analysis and render it.

    Returns:
        ``True`` if any unused dependency was found.
    """
    show_progress = format == "table"

    logger.info("Analyzing %s...", manifest)
    module = load_module(manifest)
    if not module.has_module_structure():
        if format == "json":
            _display_json(AnalysisResult(module_id=""))
        else:
            print_warning(f"{manifest} does not declare a module id")
        return False

    registry = build_registry(ctx, registry_paths, snapshot)
    oracle = build_oracle(ctx, used_packages)
    result = run_analysis(module, registry, oracle, show_progress=show_progress)

    if format == "json":
        _display_json(result)
    elif format == "simple":
        _display_simple(result)
    else:
        _display_table(result)

    return result.has_unused()


# ---------------------------------------------------------------------------
# Display renderers
# ---------------------------------------------------------------------------


def describe_entry(entry: UnusedEntry) -> str:
    """Return the detail column for an unused entry."""
    if isinstance(entry, UnusedModule):
        return entry.module_import.version_range or "-"
    if isinstance(entry, UnusedPackage):
        provider = entry.package_import.providing_module
        return f"provided by {provider}" if provider else "-"
    return "-"


def _table_rows(result: AnalysisResult) -> List[Dict[str, Any]]:
    return [
        {
            "Kind": colorize_entry_kind(entry.kind),
            "Dependency": entry.name,
            "Detail": describe_entry(entry),
        }
        for entry in result.unused
    ]


def _display_table(result: AnalysisResult) -> None:
    """Render the unused entries as a Rich table followed by a summary."""
    if not result.has_unused():
        print_success(f"{result.module_id}: all declared dependencies are used")
        return

    column_styles: Dict[str, Dict[str, Any]] = {
        "Kind": {"justify": "center", "no_wrap": True, "width": 9},
        "Dependency": {"style": "bold", "no_wrap": True},
        "Detail": {"style": "dim"},
    }
    print_table(
        _table_rows(result),
        title=f"Unused dependencies of {result.module_id}",
        column_styles=column_styles,
    )
    print_warning(f"\n{result.summary()}")


def _display_simple(result: AnalysisResult) -> None:
    """Render one ``kind name`` line per unused entry.

    Example::

        module  org.example.log
        package org.json
    """
    console = get_raw_console()
    for entry in result.unused:
        console.print(f"{entry.kind:7} {entry.name}", markup=False, highlight=False)


def _display_json(result: AnalysisResult) -> None:
    """Render the result as JSON for machine consumption."""
    print(json.dumps(result.to_json(), indent=2))
