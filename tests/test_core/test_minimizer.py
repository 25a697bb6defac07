from __future__ import annotations

from typing import Dict

import pytest

from depprune.exceptions import AnalysisCancelled
from depprune.core.registry import ReexportGraph
from depprune.core.progress import ProgressMonitor
from depprune.models import ModuleImport, PackageImport, UnusedModule, UnusedPackage
from depprune.core.minimizer import (
    absorb_packages,
    contract_reexports,
    minimize_dependencies,
)


def _used(*ids: str) -> Dict[str, ModuleImport]:
    return {module_id: ModuleImport(module_id) for module_id in ids}


def _provided(name: str, provider: str) -> PackageImport:
    return PackageImport(name, attributes={"bundle-symbolic-name": provider})


@pytest.mark.unit
class TestAbsorbPackages:
    """Tests for absorb_packages."""

    def test_absorbs_packages_provided_by_used_modules(self) -> None:
        provided = _provided("org.x.api", "org.x")
        packages = [provided, _provided("org.y.api", "org.y"), PackageImport("org.json")]

        assert absorb_packages(_used("org.x"), packages) == [provided]

    def test_nothing_to_absorb(self) -> None:
        assert absorb_packages({}, [_provided("org.x.api", "org.x")]) == []


@pytest.mark.unit
class TestContractReexports:
    """Tests for contract_reexports."""

    def test_direct_reexport_is_contracted(self) -> None:
        used = _used("org.x", "org.y")
        y_import = used["org.y"]

        contracted = contract_reexports(used, ReexportGraph(edges={"org.x": ("org.y",)}))

        assert contracted == [y_import]
        assert list(used) == ["org.x"]

    def test_transitive_reexport_is_contracted(self) -> None:
        used = _used("org.a", "org.c")
        graph = ReexportGraph(edges={"org.a": ("org.b",), "org.b": ("org.c",)})

        contracted = contract_reexports(used, graph)

        assert [imp.module_id for imp in contracted] == ["org.c"]
        assert list(used) == ["org.a"]

    def test_unrelated_modules_are_kept(self) -> None:
        used = _used("org.a", "org.b")

        assert contract_reexports(used, ReexportGraph()) == []
        assert list(used) == ["org.a", "org.b"]

    def test_cycle_terminates_without_duplicates(self) -> None:
        """Two used modules re-exporting each other are both contracted once."""
        used = _used("org.a", "org.b")
        graph = ReexportGraph(edges={"org.a": ("org.b",), "org.b": ("org.a",)})

        contracted = contract_reexports(used, graph)

        assert [imp.module_id for imp in contracted] == ["org.a", "org.b"]
        assert used == {}

    def test_last_declared_module_is_expanded_first(self) -> None:
        used = _used("org.a", "org.b", "org.c")
        graph = ReexportGraph(edges={"org.a": ("org.c",), "org.c": ("org.b",)})

        contracted = contract_reexports(used, graph)

        # org.c is expanded first and claims org.b before org.a claims org.c
        assert [imp.module_id for imp in contracted] == ["org.b", "org.c"]

    def test_checks_cancellation(self) -> None:
        monitor = ProgressMonitor()
        monitor.cancel()

        with pytest.raises(AnalysisCancelled) as exc_info:
            contract_reexports(
                _used("org.a"),
                ReexportGraph(),
                monitor=monitor,
                module_id="org.root",
            )

        assert exc_info.value.module_id == "org.root"


@pytest.mark.unit
class TestMinimizeDependencies:
    """Tests for minimize_dependencies."""

    def test_packages_first_then_modules(self) -> None:
        used = _used("org.x", "org.y")
        y_import = used["org.y"]
        package = _provided("org.x.api", "org.x")
        graph = ReexportGraph(edges={"org.x": ("org.y",)})

        entries = minimize_dependencies(used, [package], graph)

        assert entries == [UnusedPackage(package), UnusedModule(y_import)]

    def test_absorption_sees_modules_before_contraction(self) -> None:
        """A package provided by a module that is contracted later is still absorbed."""
        used = _used("org.x", "org.y")
        package = _provided("org.y.api", "org.y")

        entries = minimize_dependencies(
            used, [package], ReexportGraph(edges={"org.x": ("org.y",)})
        )

        assert [e.kind for e in entries] == ["package", "module"]
