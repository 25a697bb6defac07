"""
Module descriptor data models for depprune.

A :class:`Module` is the in-memory form of one module manifest: its id and
version, the modules it requires, the packages it imports, and the raw
header values needed to write the manifest back out after pruning.

Import entries compare by identity. Two ``Require-Bundle`` clauses naming
the same module are still two declarations, and removal must take out the
exact one that was reported.
"""

from __future__ import annotations

import re
from pathlib import Path
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

from packaging.version import InvalidVersion, Version

from depprune.constants import (
    DEFAULT_MODULE_VERSION,
    MODULE_VERSION_ATTRIBUTE,
    PROVIDING_MODULE_ATTRIBUTE,
)

_LEADING_NUMERIC = re.compile(r"^\d+(?:\.\d+){0,2}")


def parse_module_version(text: Optional[str]) -> Version:
    """Parse a manifest version into a comparable :class:`Version`.

    Manifest versions may carry a free-form qualifier
    (``1.2.0.v20240101``) that PEP 440 rejects; in that case only the
    numeric ``major.minor.micro`` prefix is kept. Anything unparseable
    sorts as ``0``.
    """
    if not text:
        return Version("0")

    candidate = text.strip()
    try:
        return Version(candidate)
    except InvalidVersion:
        pass

    match = _LEADING_NUMERIC.match(candidate)
    if match:
        return Version(match.group(0))
    return Version("0")


@dataclass(eq=False)
class ModuleImport:
    """A required module (one ``Require-Bundle`` entry).

    Attributes:
        module_id: Id of the required module.
        reexported: ``visibility:=reexport``; modules requiring the importer
            see the target's exports too.
        optional: ``resolution:=optional``. Carried for rendering only.
        attributes: Remaining clause attributes (e.g. ``bundle-version``).
        directives: Remaining clause directives.
    """

    module_id: str
    reexported: bool = False
    optional: bool = False
    attributes: Dict[str, str] = field(default_factory=dict)
    directives: Dict[str, str] = field(default_factory=dict)

    @property
    def version_range(self) -> Optional[str]:
        """Return the declared ``bundle-version`` range, if any."""
        return self.attributes.get(MODULE_VERSION_ATTRIBUTE)

    def __repr__(self) -> str:
        return (
            "ModuleImport("
            f"module_id={self.module_id!r}, "
            f"reexported={self.reexported!r}"
            ")"
        )


@dataclass(eq=False)
class PackageImport:
    """An imported package (one name of an ``Import-Package`` clause).

    Attributes:
        name: Fully-qualified package name.
        attributes: Clause attributes (``version``, ``bundle-symbolic-name``...).
        directives: Clause directives (``resolution``...).
        header: The :class:`ImportPackageHeader` this import belongs to, or
            ``None`` once detached.
    """

    name: str
    attributes: Dict[str, str] = field(default_factory=dict)
    directives: Dict[str, str] = field(default_factory=dict)
    header: Optional["ImportPackageHeader"] = field(
        default=None, repr=False, compare=False
    )

    @property
    def value(self) -> str:
        """Return the header value of this import (the package name)."""
        return self.name

    @property
    def providing_module(self) -> Optional[str]:
        """Return the id of the module expected to provide this package."""
        return self.attributes.get(PROVIDING_MODULE_ATTRIBUTE)

    def __repr__(self) -> str:
        return f"PackageImport(name={self.name!r})"


class ImportPackageHeader:
    """Ordered collection of the package imports of one manifest."""

    __slots__ = ("_packages",)

    def __init__(self, packages: Optional[List[PackageImport]] = None) -> None:
        self._packages: List[PackageImport] = []
        for package in packages or []:
            self.add_package(package)

    @property
    def packages(self) -> List[PackageImport]:
        """Return a copy of the imports in declaration order."""
        return list(self._packages)

    def add_package(self, package: PackageImport) -> None:
        """Append ``package`` and attach it to this header."""
        self._packages.append(package)
        package.header = self

    def remove_package(self, package: PackageImport) -> None:
        """Detach ``package`` from this header.

        Raises:
            ValueError: ``package`` is not (or no longer) part of this header.
        """
        for index, existing in enumerate(self._packages):
            if existing is package:
                del self._packages[index]
                package.header = None
                return
        raise ValueError(f"Package import {package.name!r} is not in this header")

    def __iter__(self) -> Iterator[PackageImport]:
        return iter(list(self._packages))

    def __len__(self) -> int:
        return len(self._packages)

    def __repr__(self) -> str:
        return f"ImportPackageHeader(packages={[p.name for p in self._packages]!r})"


@dataclass(eq=False)
class Module:
    """A module descriptor loaded from a manifest or registry snapshot.

    Attributes:
        module_id: Unique id (``Bundle-SymbolicName`` without directives).
            Empty when the manifest has no module structure.
        version: Declared ``Bundle-Version``.
        requires: Required modules in declaration order.
        package_header: Imported packages, or ``None`` when the manifest
            has no ``Import-Package`` header.
        headers: Raw header values in manifest order.
        metadata_exports: Exports derived from compiled metadata. Only used
            when the manifest does not declare ``Export-Package``.
        location: Manifest path, if the module was loaded from disk.
        line_ending: Line ending to use when writing the manifest back.
    """

    module_id: str
    version: str = DEFAULT_MODULE_VERSION
    requires: List[ModuleImport] = field(default_factory=list)
    package_header: Optional[ImportPackageHeader] = None
    headers: Dict[str, str] = field(default_factory=dict)
    metadata_exports: Optional[List[str]] = None
    location: Optional[Path] = None
    line_ending: str = "\n"

    @property
    def parsed_version(self) -> Version:
        return parse_module_version(self.version)

    @property
    def package_imports(self) -> List[PackageImport]:
        """Return the package imports in declaration order."""
        if self.package_header is None:
            return []
        return self.package_header.packages

    def has_module_structure(self) -> bool:
        """Return True if the manifest declares a module id."""
        return bool(self.module_id)

    def header(self, name: str) -> Optional[str]:
        """Return a raw header value, matching the name case-insensitively."""
        if name in self.headers:
            return self.headers[name]
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return None

    def remove_import(self, module_import: ModuleImport) -> None:
        """Remove one required-module declaration.

        Raises:
            ValueError: ``module_import`` is not declared by this module.
        """
        for index, existing in enumerate(self.requires):
            if existing is module_import:
                del self.requires[index]
                return
        raise ValueError(
            f"Module import {module_import.module_id!r} is not declared by "
            f"{self.module_id!r}"
        )

    def __repr__(self) -> str:
        return f"Module(module_id={self.module_id!r}, version={self.version!r})"
