"""Unused dependency analysis for a single module.

:class:`UnusedDependencyAnalyzer` sequences the whole analysis:

1. **Oracle** — compute the packages the module's code references, once,
   inside the oracle's context.
2. **Classification** — decide used/unused for every required module
   (:func:`~depprune.core.classifier.is_module_unused`) and every imported
   package (:func:`~depprune.core.classifier.is_package_unused`).
3. **Minimization** — absorb packages provided by used modules and
   contract modules re-exported by other used modules
   (:mod:`depprune.core.minimizer`).
4. **Policy filters** — keep buddy modules and re-exported modules
   (:mod:`depprune.core.filters`).

Each run allocates its own state, so independent analyses may run
concurrently as long as the shared registry is not modified meanwhile.

Typical usage::

    from depprune.core import ModuleRegistry, UnusedDependencyAnalyzer
    from depprune.core.manifest import load_module
    from depprune.core.oracle import UsedPackagesFileOracle

    module   = load_module("plugin/META-INF/MANIFEST.MF")
    registry = ModuleRegistry.from_paths(["plugins/"])
    oracle   = UsedPackagesFileOracle("used-packages.txt")

    result = UnusedDependencyAnalyzer(module, registry, oracle).run()
    for entry in result.unused:
        print(entry)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Tuple

from depprune.models.module import Module, ModuleImport, PackageImport
from depprune.models.unused import UnusedEntry, UnusedModule, UnusedPackage
from depprune.exceptions import AnalysisCancelled, OracleError
from depprune.utils.logger import get_logger
from depprune.core.exports import exports_of
from depprune.core.registry import ModuleRegistry
from depprune.core.oracle import StaticOracle, UsedPackageOracle
from depprune.core.progress import ProgressMonitor, unused_count_message
from depprune.core.filters import exclude_buddies, exclude_reexported
from depprune.core.minimizer import minimize_dependencies
from depprune.core.classifier import is_module_unused, is_package_unused

logger = get_logger("analyzer")

__all__ = [
    "AnalysisResult",
    "UnusedDependencyAnalyzer",
    "find_unused_dependencies",
]

# Work units charged per required module; imported packages cost one.
_MODULE_IMPORT_WORK: int = 3


@dataclass(frozen=True)
class AnalysisResult:
    """Outcome of one analysis run.

    Attributes:
        module_id: Id of the analyzed module (empty if it has none).
        unused: Removable declarations, in the order they were found.
        used_packages: Package set the oracle reported.
        declared_count: Number of declarations that were classified.
    """

    module_id: str
    unused: Tuple[UnusedEntry, ...] = ()
    used_packages: FrozenSet[str] = frozenset()
    declared_count: int = 0

    def unused_modules(self) -> List[UnusedModule]:
        return [e for e in self.unused if isinstance(e, UnusedModule)]

    def unused_packages(self) -> List[UnusedPackage]:
        return [e for e in self.unused if isinstance(e, UnusedPackage)]

    def has_unused(self) -> bool:
        return bool(self.unused)

    def to_json(self) -> Dict[str, Any]:
        """Return a JSON-serializable representation."""
        return {
            "module": self.module_id,
            "declared": self.declared_count,
            "unused": [entry.to_json() for entry in self.unused],
        }

    def summary(self) -> str:
        """Return a one-line human-readable summary."""
        count = len(self.unused)
        noun = "dependency" if count == 1 else "dependencies"
        return (
            f"{self.module_id}: {count} unused {noun} "
            f"out of {self.declared_count} declared"
        )


class UnusedDependencyAnalyzer:
    """Find the declared dependencies of ``module`` that can be removed.

    Args:
        module: Module to analyze.
        registry: Registry resolving required module ids.
        oracle: Source of the packages the module's code references.
    """

    def __init__(
        self,
        module: Module,
        registry: ModuleRegistry,
        oracle: UsedPackageOracle,
    ) -> None:
        self.module = module
        self.registry = registry
        self.oracle = oracle

    def run(self, monitor: Optional[ProgressMonitor] = None) -> AnalysisResult:
        """Run the analysis.

        Args:
            monitor: Progress sink and cancellation token. A silent monitor
                is used when omitted.

        Returns:
            The :class:`AnalysisResult`. A module without an id yields an
            empty result.

        Raises:
            AnalysisCancelled: The monitor was cancelled, or the oracle was
                interrupted.
            OracleError: The used-package computation failed.
        """
        monitor = monitor or ProgressMonitor()
        module = self.module
        module_id = module.module_id

        if not module.has_module_structure():
            logger.info("Manifest has no module id; nothing to analyze")
            return AnalysisResult(module_id="")

        monitor.check_canceled(module_id)
        computed = self._compute_used_packages()
        logger.debug("%s references %d package(s)", module_id, len(computed))

        requires = list(module.requires)
        packages = module.package_imports
        monitor.begin(
            len(requires) * _MODULE_IMPORT_WORK + len(packages) + 1,
            unused_count_message(0),
        )

        graph = self.registry.reexport_graph()
        exported = exports_of(module)

        unused: List[UnusedEntry] = []
        used_modules: Dict[str, ModuleImport] = {}
        for module_import in requires:
            monitor.check_canceled(module_id)
            if is_module_unused(module_import, computed, self.registry, graph):
                unused.append(UnusedModule(module_import))
            else:
                used_modules[module_import.module_id] = module_import
            monitor.worked(_MODULE_IMPORT_WORK)
            monitor.set_task_name(unused_count_message(len(unused)))

        used_packages: List[PackageImport] = []
        for package_import in packages:
            monitor.check_canceled(module_id)
            if is_package_unused(package_import, exported, computed):
                unused.append(UnusedPackage(package_import))
                monitor.set_task_name(unused_count_message(len(unused)))
            else:
                used_packages.append(package_import)
            monitor.worked(1)

        monitor.check_canceled(module_id)
        unused.extend(
            minimize_dependencies(
                used_modules,
                used_packages,
                graph,
                monitor=monitor,
                module_id=module_id,
            )
        )
        monitor.worked(1)
        monitor.set_task_name(unused_count_message(len(unused)))

        unused = exclude_buddies(unused, module)
        unused = exclude_reexported(unused)

        result = AnalysisResult(
            module_id=module_id,
            unused=tuple(unused),
            used_packages=computed,
            declared_count=len(requires) + len(packages),
        )
        logger.info(result.summary())
        return result

    def _compute_used_packages(self) -> FrozenSet[str]:
        """Run the oracle inside its context and capture its answer.

        An interrupted oracle surfaces as :class:`AnalysisCancelled`; every
        other failure becomes :class:`OracleError`.
        """
        module_id = self.module.module_id
        try:
            with self.oracle as oracle:
                return frozenset(oracle.compute(self.module))
        except (AnalysisCancelled, OracleError):
            raise
        except KeyboardInterrupt as exc:
            raise AnalysisCancelled(module_id=module_id) from exc
        except Exception as exc:
            raise OracleError(
                f"Failed to compute used packages: {exc}",
                module_id=module_id,
                original_error=exc,
            ) from exc


def find_unused_dependencies(
    module: Module,
    registry: ModuleRegistry,
    used_packages: Iterable[str],
    monitor: Optional[ProgressMonitor] = None,
) -> AnalysisResult:
    """Analyze ``module`` against an already computed used-package set."""
    analyzer = UnusedDependencyAnalyzer(module, registry, StaticOracle(used_packages))
    return analyzer.run(monitor)
