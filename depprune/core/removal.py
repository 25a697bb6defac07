"""Removal of unused declarations from a module.

:func:`apply_removal` edits the in-memory :class:`Module`;
:func:`write_module` persists it. Removal is best effort per entry: an
entry that can no longer be removed (for example because it was already
detached) is logged and skipped, and the remaining entries are still
processed.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional, Union

from depprune.models.module import Module
from depprune.exceptions import FileOperationError
from depprune.core.manifest import render_manifest
from depprune.models.unused import UnusedEntry, UnusedModule, UnusedPackage
from depprune.utils import create_timestamped_backup, get_logger, safe_write_file

logger = get_logger("removal")


def apply_removal(module: Module, entries: Iterable[UnusedEntry]) -> int:
    """Remove ``entries`` from ``module``.

    Required modules are removed from ``module.requires``; imported
    packages are removed from the header they belong to.

    Returns:
        Number of entries actually removed.
    """
    removed = 0

    for entry in entries:
        try:
            if isinstance(entry, UnusedModule):
                module.remove_import(entry.module_import)
            elif isinstance(entry, UnusedPackage):
                header = entry.package_import.header
                if header is None:
                    raise ValueError(
                        f"Package import {entry.name!r} is already detached"
                    )
                header.remove_package(entry.package_import)
            else:
                raise TypeError(f"Unsupported entry type: {type(entry).__name__}")
        except (ValueError, TypeError) as exc:
            logger.warning("Could not remove %s: %s", entry, exc)
            continue

        logger.debug("Removed %s from %s", entry, module.module_id)
        removed += 1

    return removed


def write_module(
    module: Module,
    path: Optional[Union[str, Path]] = None,
    *,
    backup: bool = True,
) -> Optional[Path]:
    """Write ``module`` back to its manifest.

    Args:
        module: Module to write.
        path: Destination; defaults to ``module.location``.
        backup: Copy the existing file to a timestamped backup first.

    Returns:
        Path of the backup, if one was created.

    Raises:
        FileOperationError: No destination is known, or writing fails.
    """
    target = Path(path) if path is not None else module.location
    if target is None:
        raise FileOperationError(
            f"No manifest location known for {module.module_id or '<no id>'}",
            operation="write",
        )

    backup_path: Optional[Path] = None
    if backup and target.is_file():
        backup_path = create_timestamped_backup(target)
        logger.info("Created backup: %s", backup_path)

    safe_write_file(target, render_manifest(module))
    logger.info("Wrote %s", target)
    return backup_path
