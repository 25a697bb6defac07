"""
Unused-dependency entries.

An analysis reports two kinds of removable declarations: required modules
and imported packages. :data:`UnusedEntry` is the union of the two entry
classes so filters and the removal step can dispatch with ``isinstance``
on a closed set of types.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Dict, Optional, Union

from depprune.models.module import ModuleImport, PackageImport


@dataclass(frozen=True)
class UnusedModule:
    """A ``Require-Bundle`` declaration that can be removed."""

    module_import: ModuleImport

    kind: ClassVar[str] = "module"

    @property
    def name(self) -> str:
        return self.module_import.module_id

    @property
    def reexported(self) -> bool:
        return self.module_import.reexported

    def to_display_string(self) -> str:
        """Return a human-readable description of the entry."""
        return f"Require-Bundle: {self.name}"

    def to_json(self) -> Dict[str, Optional[str]]:
        """Return a JSON-serializable representation."""
        return {
            "kind": self.kind,
            "name": self.name,
            "version_range": self.module_import.version_range,
        }

    def __str__(self) -> str:
        return self.to_display_string()


@dataclass(frozen=True)
class UnusedPackage:
    """An ``Import-Package`` declaration that can be removed."""

    package_import: PackageImport

    kind: ClassVar[str] = "package"

    @property
    def name(self) -> str:
        return self.package_import.name

    def to_display_string(self) -> str:
        """Return a human-readable description of the entry."""
        return f"Import-Package: {self.name}"

    def to_json(self) -> Dict[str, Optional[str]]:
        """Return a JSON-serializable representation."""
        return {
            "kind": self.kind,
            "name": self.name,
            "providing_module": self.package_import.providing_module,
        }

    def __str__(self) -> str:
        return self.to_display_string()


UnusedEntry = Union[UnusedModule, UnusedPackage]
