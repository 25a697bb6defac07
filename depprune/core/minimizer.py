"""Re-export aware minimization of the used dependency set.

After classification some declarations are still redundant:

1. **Package absorption** — an imported package whose
   ``bundle-symbolic-name`` names a required module that is itself used is
   already reachable through that module.
2. **Re-export contraction** — a required module that another used module
   re-exports is visible through the re-exporter, so the direct
   declaration can go.

Contraction walks the :class:`~depprune.core.registry.ReexportGraph` from
every used module with an explicit stack and a visited set, so re-export
cycles terminate and every node is expanded once.

Contraction does not check that the re-exporting module's own path to
the analyzed module survives earlier contractions. Two used modules that
re-export each other are therefore both reported; the result is a
heuristic, not a proof.
"""

from __future__ import annotations

from typing import Dict, List, MutableMapping, Optional, Sequence, Set

from depprune.utils.logger import get_logger
from depprune.core.registry import ReexportGraph
from depprune.core.progress import ProgressMonitor
from depprune.models.module import ModuleImport, PackageImport
from depprune.models.unused import UnusedEntry, UnusedModule, UnusedPackage

logger = get_logger("minimizer")

__all__ = ["absorb_packages", "contract_reexports", "minimize_dependencies"]


def absorb_packages(
    used_modules: MutableMapping[str, ModuleImport],
    used_packages: Sequence[PackageImport],
) -> List[PackageImport]:
    """Return the used package imports already provided by a used module."""
    absorbed = [
        package
        for package in used_packages
        if package.providing_module is not None
        and package.providing_module in used_modules
    ]
    for package in absorbed:
        logger.debug(
            "Package %s is provided by used module %s",
            package.name,
            package.providing_module,
        )
    return absorbed


def contract_reexports(
    used_modules: MutableMapping[str, ModuleImport],
    graph: ReexportGraph,
    *,
    monitor: Optional[ProgressMonitor] = None,
    module_id: Optional[str] = None,
) -> List[ModuleImport]:
    """Drop used modules that another used module re-exports.

    ``used_modules`` is modified in place: contracted ids are removed.

    Args:
        used_modules: Used required modules keyed by id, in declaration
            order. The last one is expanded first.
        graph: Re-export graph of the registry.
        monitor: Polled for cancellation once per node expanded.
        module_id: Analyzed module, reported if the run is cancelled.

    Returns:
        The contracted declarations in the order they were found.
    """
    contracted: List[ModuleImport] = []
    stack: List[str] = list(used_modules)
    visited: Set[str] = set()

    while stack:
        current = stack.pop()
        if current in visited:
            continue
        visited.add(current)

        if monitor is not None:
            monitor.check_canceled(module_id)

        for target in graph.successors(current):
            removed = used_modules.pop(target, None)
            if removed is not None:
                logger.debug("Module %s is re-exported by %s", target, current)
                contracted.append(removed)
            stack.append(target)

    return contracted


def minimize_dependencies(
    used_modules: Dict[str, ModuleImport],
    used_packages: Sequence[PackageImport],
    graph: ReexportGraph,
    *,
    monitor: Optional[ProgressMonitor] = None,
    module_id: Optional[str] = None,
) -> List[UnusedEntry]:
    """Run absorption, then contraction, and return the new unused entries.

    Absorption sees ``used_modules`` before contraction shrinks it.
    """
    entries: List[UnusedEntry] = [
        UnusedPackage(package) for package in absorb_packages(used_modules, used_packages)
    ]
    entries.extend(
        UnusedModule(module_import)
        for module_import in contract_reexports(
            used_modules, graph, monitor=monitor, module_id=module_id
        )
    )
    return entries
