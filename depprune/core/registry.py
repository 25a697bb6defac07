"""Module registry and re-export graph.

The registry owns every known :class:`Module`, keyed by id. Several
versions of one module may be registered; :meth:`ModuleRegistry.resolve`
returns the highest.

Registries are built either from manifests on disk or from a JSON snapshot.
A snapshot can also record exports derived from compiled metadata, which
the export resolver falls back to when a manifest declares no
``Export-Package`` header::

    {
      "modules": [
        {
          "headers": {"Bundle-SymbolicName": "org.example.util",
                      "Bundle-Version": "1.2.0"},
          "exports": ["org.example.util", "org.example.util.io"]
        }
      ]
    }
"""

from __future__ import annotations

import json
from pathlib import Path
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Optional, Set, Tuple, Union

from depprune.models.module import Module
from depprune.core.manifest import load_module, module_from_headers
from depprune.exceptions import FileOperationError, ManifestError, RegistryError
from depprune.utils import find_manifest_files, get_logger, safe_read_file

logger = get_logger("registry")

__all__ = ["ModuleRegistry", "ReexportGraph"]


class ModuleRegistry:
    """Id-based lookup of module descriptors.

    Args:
        modules: Modules to register immediately.

    Example::

        >>> registry = ModuleRegistry.from_paths(["plugins/"])
        >>> registry.resolve("org.example.util")
        Module(module_id='org.example.util', version='1.2.0')
    """

    def __init__(self, modules: Iterable[Module] = ()) -> None:
        self._modules: Dict[str, List[Module]] = {}
        for module in modules:
            self.add(module)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add(self, module: Module) -> None:
        """Register ``module``, keeping versions sorted highest first.

        Raises:
            RegistryError: The module has no id.
        """
        if not module.has_module_structure():
            raise RegistryError(
                "Cannot register a module without an id",
                source=str(module.location) if module.location else None,
            )

        versions = self._modules.setdefault(module.module_id, [])
        versions.append(module)
        versions.sort(key=lambda m: m.parsed_version, reverse=True)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def resolve(self, module_id: Optional[str]) -> Optional[Module]:
        """Return the highest registered version of ``module_id``, or ``None``."""
        if not module_id:
            return None
        versions = self._modules.get(module_id)
        return versions[0] if versions else None

    def candidates(self, module_id: str) -> List[Module]:
        """Return every registered version of ``module_id``, highest first."""
        return list(self._modules.get(module_id, ()))

    def reexport_graph(self) -> "ReexportGraph":
        """Return the re-export graph over the resolved modules."""
        return ReexportGraph.from_registry(self)

    def ids(self) -> List[str]:
        return list(self._modules)

    def __contains__(self, module_id: object) -> bool:
        return module_id in self._modules

    def __iter__(self) -> Iterator[Module]:
        for versions in self._modules.values():
            yield from versions

    def __len__(self) -> int:
        return sum(len(versions) for versions in self._modules.values())

    def __repr__(self) -> str:
        return f"ModuleRegistry(modules={len(self)})"

    # ------------------------------------------------------------------
    # Loaders
    # ------------------------------------------------------------------

    @classmethod
    def from_paths(cls, paths: Iterable[Union[str, Path]]) -> "ModuleRegistry":
        """Build a registry from manifest files and module directories.

        Manifests that cannot be read or parsed, or that declare no module
        id, are skipped with a warning so one broken module does not hide
        the rest of the registry.
        """
        registry = cls()

        for manifest in find_manifest_files(paths):
            try:
                module = load_module(manifest)
            except (FileOperationError, ManifestError) as exc:
                logger.warning("Skipping unreadable manifest %s: %s", manifest, exc)
                continue

            if not module.has_module_structure():
                logger.warning("Skipping manifest without module id: %s", manifest)
                continue

            registry.add(module)

        logger.info("Registry loaded %d module(s)", len(registry))
        return registry

    @classmethod
    def from_snapshot(cls, path: Union[str, Path]) -> "ModuleRegistry":
        """Build a registry from a JSON snapshot file.

        Raises:
            RegistryError: The file is not valid JSON or does not match the
                snapshot layout.
            FileOperationError: The file cannot be read.
        """
        source = str(path)
        text = safe_read_file(path)

        try:
            raw = json.loads(text)
        except json.JSONDecodeError as exc:
            raise RegistryError(f"Invalid JSON snapshot: {exc}", source=source) from exc

        entries = raw.get("modules") if isinstance(raw, dict) else None
        if not isinstance(entries, list):
            raise RegistryError(
                "Snapshot must be an object with a 'modules' list", source=source
            )

        registry = cls()
        for index, entry in enumerate(entries):
            registry.add(_module_from_snapshot_entry(entry, index=index, source=source))

        logger.info("Snapshot %s loaded %d module(s)", source, len(registry))
        return registry


def _module_from_snapshot_entry(entry: Any, *, index: int, source: str) -> Module:
    if not isinstance(entry, dict):
        raise RegistryError(f"Snapshot entry {index} is not an object", source=source)

    headers = entry.get("headers")
    if not isinstance(headers, dict) or not all(
        isinstance(k, str) and isinstance(v, str) for k, v in headers.items()
    ):
        raise RegistryError(
            f"Snapshot entry {index} needs a 'headers' object of strings",
            source=source,
        )

    exports = entry.get("exports")
    if exports is not None and (
        not isinstance(exports, list) or not all(isinstance(e, str) for e in exports)
    ):
        raise RegistryError(
            f"Snapshot entry {index} has a non-list 'exports' value", source=source
        )

    location = entry.get("location")

    try:
        module = module_from_headers(
            headers,
            metadata_exports=exports,
            location=Path(location) if isinstance(location, str) else None,
        )
    except ManifestError as exc:
        raise RegistryError(
            f"Snapshot entry {index} has malformed headers: {exc}", source=source
        ) from exc

    if not module.has_module_structure():
        raise RegistryError(f"Snapshot entry {index} has no module id", source=source)
    return module


@dataclass
class ReexportGraph:
    """Directed graph of re-exported requires.

    Nodes are module ids; an edge ``a → b`` means the resolved module ``a``
    requires ``b`` with ``visibility:=reexport``. Edges keep declaration
    order. Self-edges are dropped.
    """

    edges: Dict[str, Tuple[str, ...]] = field(default_factory=dict)

    @classmethod
    def from_registry(cls, registry: ModuleRegistry) -> "ReexportGraph":
        edges: Dict[str, Tuple[str, ...]] = {}
        for module_id in registry.ids():
            module = registry.resolve(module_id)
            if module is None:
                continue
            targets = tuple(
                imp.module_id
                for imp in module.requires
                if imp.reexported and imp.module_id and imp.module_id != module_id
            )
            if targets:
                edges[module_id] = targets
        return cls(edges=edges)

    def successors(self, module_id: str) -> Tuple[str, ...]:
        """Return the ids ``module_id`` re-exports."""
        return self.edges.get(module_id, ())

    def closure(self, module_id: str) -> List[str]:
        """Return ``module_id`` and every id reachable from it, in visit order."""
        order: List[str] = []
        visited: Set[str] = set()
        stack = [module_id]

        while stack:
            current = stack.pop()
            if current in visited:
                continue
            visited.add(current)
            order.append(current)
            stack.extend(reversed(self.successors(current)))

        return order
