"""Used-package oracles.

An oracle answers one question: which packages does a module's code
actually reference? How that is computed (bytecode scanning, a build
tool, a static analyzer) is outside depprune; the analyzer only needs the
resulting set of fully-qualified package names.

Oracles are context managers. The analyzer enters the oracle, calls
:meth:`UsedPackageOracle.compute` once, and leaves it again on every exit
path, so implementations holding processes or file handles can release
them in :meth:`UsedPackageOracle.close`.

The file-backed oracle reads either plain text::

    # packages referenced by org.example.core
    org.example.api
    org.json

or JSON, as a list of names or an object keyed by module id::

    {"org.example.core": ["org.example.api", "org.json"]}
"""

from __future__ import annotations

import abc
import json
from pathlib import Path
from typing import Any, Dict, FrozenSet, Iterable, Optional, Set, Union

from depprune.models.module import Module
from depprune.exceptions import OracleError
from depprune.utils import get_logger, safe_read_file

logger = get_logger("oracle")

__all__ = ["UsedPackageOracle", "StaticOracle", "UsedPackagesFileOracle"]


class UsedPackageOracle(abc.ABC):
    """Source of the packages a module's code references."""

    def open(self) -> None:
        """Acquire resources needed by :meth:`compute`."""

    def close(self) -> None:
        """Release resources acquired by :meth:`open`."""

    @abc.abstractmethod
    def compute(self, module: Module) -> Set[str]:
        """Return the fully-qualified package names ``module`` references."""

    def __enter__(self) -> "UsedPackageOracle":
        self.open()
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        self.close()


class StaticOracle(UsedPackageOracle):
    """Oracle returning the same fixed package set for every module."""

    def __init__(self, packages: Iterable[str]) -> None:
        self._packages: FrozenSet[str] = frozenset(packages)

    def compute(self, module: Module) -> Set[str]:
        return set(self._packages)

    def __repr__(self) -> str:
        return f"StaticOracle(packages={sorted(self._packages)!r})"


class UsedPackagesFileOracle(UsedPackageOracle):
    """Oracle backed by a text or JSON file produced by an external analyzer.

    The file is read when the oracle is entered and dropped when it is
    left. A JSON object maps module ids to package lists; a module missing
    from it references nothing, which is logged as a warning.

    Args:
        path: File to read.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)
        self._by_module: Optional[Dict[str, FrozenSet[str]]] = None
        self._shared: Optional[FrozenSet[str]] = None

    def open(self) -> None:
        text = safe_read_file(self.path)
        if self.path.suffix.lower() == ".json":
            self._load_json(text)
        else:
            self._shared = frozenset(_parse_text(text))
        logger.debug("Loaded used packages from %s", self.path)

    def close(self) -> None:
        self._by_module = None
        self._shared = None

    def compute(self, module: Module) -> Set[str]:
        if self._shared is not None:
            return set(self._shared)
        if self._by_module is not None:
            if module.module_id not in self._by_module:
                logger.warning(
                    "%s has no entry for %s; treating it as referencing nothing",
                    self.path.name,
                    module.module_id,
                )
                return set()
            return set(self._by_module[module.module_id])
        raise OracleError(
            "Oracle used outside of its context",
            module_id=module.module_id,
        )

    def _load_json(self, text: str) -> None:
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as exc:
            raise OracleError(
                f"Invalid JSON in {self.path.name}: {exc}",
                original_error=exc,
            ) from exc

        if isinstance(raw, list) and all(isinstance(p, str) for p in raw):
            self._shared = frozenset(raw)
            return

        if isinstance(raw, dict) and all(
            isinstance(v, list) and all(isinstance(p, str) for p in v)
            for v in raw.values()
        ):
            self._by_module = {k: frozenset(v) for k, v in raw.items()}
            return

        raise OracleError(
            f"{self.path.name} must hold a list of package names or an object "
            "mapping module ids to lists"
        )

    def __repr__(self) -> str:
        return f"UsedPackagesFileOracle(path={str(self.path)!r})"


def _parse_text(text: str) -> Set[str]:
    packages: Set[str] = set()
    for line in text.splitlines():
        name = line.split("#", 1)[0].strip()
        if name:
            packages.add(name)
    return packages
