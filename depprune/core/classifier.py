"""Used/unused classification of declared dependencies.

Both predicates are pure: they read the registry and the used-package set
and never mutate anything.
"""

from __future__ import annotations

from typing import AbstractSet, Collection, List, Optional, Set

from depprune.core.exports import exports_of
from depprune.models.module import Module, ModuleImport, PackageImport
from depprune.core.registry import ModuleRegistry, ReexportGraph

__all__ = ["candidate_modules", "is_module_unused", "is_package_unused"]


def candidate_modules(
    module_import: ModuleImport,
    registry: ModuleRegistry,
    graph: Optional[ReexportGraph] = None,
) -> List[Module]:
    """Return the modules whose exports a required module makes visible.

    That is every registered version of the required module, followed by
    the modules it re-exports, transitively. Ids the registry cannot
    resolve contribute nothing.
    """
    if graph is None:
        graph = registry.reexport_graph()

    target = module_import.module_id
    found: List[Module] = []
    seen: Set[int] = set()

    for module_id in graph.closure(target):
        if module_id == target:
            modules = registry.candidates(module_id)
        else:
            resolved = registry.resolve(module_id)
            modules = [resolved] if resolved is not None else []

        for module in modules:
            if id(module) not in seen:
                seen.add(id(module))
                found.append(module)

    return found


def is_module_unused(
    module_import: ModuleImport,
    computed_packages: AbstractSet[str],
    registry: ModuleRegistry,
    graph: Optional[ReexportGraph] = None,
) -> bool:
    """Return True if no candidate of ``module_import`` exports a used package.

    A required module that cannot be resolved at all is unused.
    """
    for module in candidate_modules(module_import, registry, graph):
        if not exports_of(module).isdisjoint(computed_packages):
            return False
    return True


def is_package_unused(
    package_import: PackageImport,
    exported_packages: Optional[Collection[str]],
    computed_packages: AbstractSet[str],
) -> bool:
    """Return True if an imported package is neither re-exported nor used.

    A module that exports the very package it imports satisfies the import
    itself, which happens with split packages and fragments.
    """
    if exported_packages is not None and package_import.value in exported_packages:
        return False
    return package_import.name not in computed_packages
