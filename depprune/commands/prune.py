"""Prune command implementation for depprune.

Removes the unused dependencies of a module manifest and rewrites the
manifest in place.

The command runs the same analysis as ``analyze``, then:

1. shows the removal plan,
2. asks for confirmation (unless ``--yes``),
3. backs up the manifest (unless ``--no-backup`` or ``create_backup =
   false``),
4. removes the entries from the module and writes the manifest back,
   restoring the backup if writing fails.

Typical usage::

    # Preview what would be removed
    $ depprune prune plugin/META-INF/MANIFEST.MF -r plugins/ -u used.txt --dry-run

    # Remove without prompting and without a backup
    $ depprune prune MANIFEST.MF -r plugins/ -u used.txt -y --no-backup
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import click

from depprune.models import UnusedEntry
from depprune.core import apply_removal, load_module, write_module
from depprune.context import pass_context, DepPruneContext
from depprune.exceptions import AnalysisCancelled, DepPruneError
from depprune.commands.analyze import describe_entry
from depprune.commands.common import (
    analysis_options,
    build_oracle,
    build_registry,
    run_analysis,
)
from depprune.utils import (
    colorize_entry_kind,
    create_timestamped_backup,
    get_logger,
    print_error,
    print_success,
    print_table,
    print_warning,
    restore_backup,
)

logger = get_logger("commands.prune")


@click.command()
@click.argument(
    "manifest",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@analysis_options
@click.option(
    "--dry-run",
    is_flag=True,
    help="Preview removals without applying them.",
)
@click.option(
    "--yes",
    "-y",
    is_flag=True,
    help="Skip confirmation prompt.",
)
@click.option(
    "--backup/--no-backup",
    default=None,
    help="Back up the manifest before rewriting it (default from config).",
)
@pass_context
def prune(
    ctx: DepPruneContext,
    manifest: Path,
    registry_paths: Tuple[Path, ...],
    snapshot: Optional[Path],
    used_packages: Optional[Path],
    dry_run: bool,
    yes: bool,
    backup: Optional[bool],
) -> None:
    """Remove unused dependencies from MANIFEST.

    Exits with 0 when the manifest was pruned or nothing needed pruning,
    1 on error.
    """
    if backup is None:
        backup = ctx.config.create_backup if ctx.config else True

    try:
        _prune(
            ctx,
            manifest,
            registry_paths,
            snapshot,
            used_packages,
            dry_run,
            yes,
            backup,
        )
        sys.exit(0)

    except AnalysisCancelled:
        print_warning("Analysis cancelled")
        sys.exit(130)
    except DepPruneError as e:
        print_error(f"{e}")
        sys.exit(1)
    except Exception as e:
        print_error(f"Unexpected error: {e}")
        logger.exception("Error in prune command")
        sys.exit(1)


def _prune(
    ctx: DepPruneContext,
    manifest: Path,
    registry_paths: Tuple[Path, ...],
    snapshot: Optional[Path],
    used_packages: Optional[Path],
    dry_run: bool,
    skip_confirm: bool,
    backup: bool,
) -> None:
    """Analyze, confirm, back up and rewrite ``manifest``.

    Raises:
        DepPruneError: Inputs cannot be loaded or the manifest cannot be
            written.
    """
    logger.info("Pruning %s...", manifest)

    module = load_module(manifest)
    if not module.has_module_structure():
        print_warning(f"{manifest} does not declare a module id")
        return

    registry = build_registry(ctx, registry_paths, snapshot)
    oracle = build_oracle(ctx, used_packages)
    result = run_analysis(module, registry, oracle, show_progress=True)

    if not result.has_unused():
        print_success(f"{module.module_id}: nothing to prune")
        return

    _display_prune_plan(list(result.unused), dry_run)

    if dry_run:
        print_warning("\nDry run mode - no changes applied")
        return

    if not skip_confirm and not _confirm_prune(len(result.unused)):
        logger.info("Prune cancelled by user")
        return

    backup_path: Optional[Path] = None
    if backup:
        backup_path = create_timestamped_backup(manifest)
        logger.info("Created backup: %s", backup_path)

    removed = apply_removal(module, result.unused)

    try:
        write_module(module, manifest, backup=False)
    except Exception as e:
        if backup_path and backup_path.exists():
            print_error(f"Error while writing {manifest}: {e}")
            logger.info("Restoring from backup...")
            restore_backup(backup_path, manifest)
            print_success("Restored original manifest from backup")
        raise DepPruneError(f"Failed to write pruned manifest: {e}") from e

    noun = "dependency" if removed == 1 else "dependencies"
    print_success(f"\nRemoved {removed} unused {noun} from {module.module_id}")
    failed = len(result.unused) - removed
    if failed:
        print_warning(
            f"{failed} {'entry' if failed == 1 else 'entries'} could not be "
            "removed; run with -v for details"
        )


def _display_prune_plan(entries: List[UnusedEntry], dry_run: bool) -> None:
    """Show the entries that are about to be removed."""
    title = "Prune Plan (Dry Run)" if dry_run else "Prune Plan"

    data = [
        {
            "Kind": colorize_entry_kind(entry.kind),
            "Dependency": entry.name,
            "Detail": describe_entry(entry),
        }
        for entry in entries
    ]
    column_styles: Dict[str, Dict[str, Any]] = {
        "Kind": {"justify": "center", "no_wrap": True},
        "Dependency": {"style": "bold", "no_wrap": True},
        "Detail": {"style": "dim"},
    }
    print_table(data, title=title, column_styles=column_styles)


def _confirm_prune(count: int) -> bool:
    """Ask whether ``count`` entries should be removed. Defaults to yes."""
    noun = "dependency" if count == 1 else "dependencies"
    response = click.prompt(
        f"\nRemove {count} unused {noun}?",
        type=click.Choice(["y", "n"], case_sensitive=False),
        default="y",
        show_choices=True,
    )
    return response.lower() == "y"
