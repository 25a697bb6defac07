"""
Unified data model exports for depprune.

This module re-exports all core data models to provide a stable and
convenient public API. Users can import models directly from
``depprune.models`` instead of individual submodules.

Example:
    >>> from depprune.models import Module, ModuleImport, UnusedModule
"""

from __future__ import annotations

from depprune.models.module import (
    ImportPackageHeader,
    Module,
    ModuleImport,
    PackageImport,
    parse_module_version,
)
from depprune.models.unused import UnusedEntry, UnusedModule, UnusedPackage

__all__ = [
    "Module",
    "ModuleImport",
    "PackageImport",
    "ImportPackageHeader",
    "parse_module_version",
    "UnusedEntry",
    "UnusedModule",
    "UnusedPackage",
]
