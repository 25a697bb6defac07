"""
Core functionality exports for depprune.

This module provides convenient access to the core subsystems of depprune.
Importing from here keeps user-facing imports clean and stable:

    from depprune.core import ModuleRegistry, UnusedDependencyAnalyzer
"""

from __future__ import annotations

from depprune.core.exports import exports_of
from depprune.core.registry import ModuleRegistry, ReexportGraph
from depprune.core.progress import ProgressMonitor, ProgressUpdate
from depprune.core.removal import apply_removal, write_module
from depprune.core.manifest import load_module, render_manifest
from depprune.core.oracle import (
    StaticOracle,
    UsedPackageOracle,
    UsedPackagesFileOracle,
)
from depprune.core.analyzer import (
    AnalysisResult,
    UnusedDependencyAnalyzer,
    find_unused_dependencies,
)

__all__ = [
    "exports_of",
    "ModuleRegistry",
    "ReexportGraph",
    "ProgressMonitor",
    "ProgressUpdate",
    "apply_removal",
    "write_module",
    "load_module",
    "render_manifest",
    "StaticOracle",
    "UsedPackageOracle",
    "UsedPackagesFileOracle",
    "AnalysisResult",
    "UnusedDependencyAnalyzer",
    "find_unused_dependencies",
]
