from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, Optional, Sequence

import pytest

from depprune.models import Module
from depprune.core.manifest import module_from_headers

MakeModule = Callable[..., Module]


@pytest.fixture
def make_module() -> MakeModule:
    """Factory building a :class:`Module` from header values.

    Example::

        make_module("org.a", requires="org.b;visibility:=reexport",
                    exports="org.a.api")
    """

    def _make(
        module_id: Optional[str],
        *,
        version: str = "1.0.0",
        requires: Optional[str] = None,
        imports: Optional[str] = None,
        exports: Optional[str] = None,
        buddies: Optional[str] = None,
        metadata_exports: Optional[Sequence[str]] = None,
        location: Optional[Path] = None,
    ) -> Module:
        headers: Dict[str, str] = {"Manifest-Version": "1.0"}
        if module_id is not None:
            headers["Bundle-SymbolicName"] = module_id
            headers["Bundle-Version"] = version
        if requires is not None:
            headers["Require-Bundle"] = requires
        if imports is not None:
            headers["Import-Package"] = imports
        if exports is not None:
            headers["Export-Package"] = exports
        if buddies is not None:
            headers["Eclipse-RegisterBuddy"] = buddies
        return module_from_headers(
            headers,
            metadata_exports=metadata_exports,
            location=location,
        )

    return _make


@pytest.fixture
def write_manifest(tmp_path: Path) -> Callable[[str, str], Path]:
    """Write ``text`` to ``<tmp>/<name>/META-INF/MANIFEST.MF``."""

    def _write(name: str, text: str) -> Path:
        path = tmp_path / name / "META-INF" / "MANIFEST.MF"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8", newline="")
        return path

    return _write


@pytest.fixture
def isolated_cli(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Run CLI invocations from an empty directory with a quiet console.

    The CLI rewrites ``NO_COLOR`` and installs a logging handler bound to
    the runner's stderr; both are restored afterwards.
    """
    import logging

    from depprune.utils.console import reconfigure_console

    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("NO_COLOR", "1")
    monkeypatch.delenv("DEPPRUNE_CONFIG", raising=False)
    monkeypatch.delenv("DEPPRUNE_COLOR", raising=False)
    reconfigure_console()
    yield tmp_path
    logging.getLogger("depprune").handlers.clear()
    logging.getLogger("depprune").propagate = True
    reconfigure_console()


@pytest.fixture
def plugin_workspace(
    tmp_path: Path, write_manifest: Callable[[str, str], Path]
) -> Dict[str, Path]:
    """Lay out a small plugin directory, a target manifest and a used list.

    ``org.m`` requires ``org.x`` and ``org.y`` and imports ``org.json``;
    only ``org.x.p`` is referenced, so ``org.y`` and ``org.json`` are
    unused.
    """
    plugins = tmp_path / "plugins"
    for module_id, exports in (("org.x", "org.x.p"), ("org.y", "org.y.api")):
        path = plugins / module_id / "META-INF" / "MANIFEST.MF"
        path.parent.mkdir(parents=True)
        path.write_text(
            "Manifest-Version: 1.0\n"
            f"Bundle-SymbolicName: {module_id}\n"
            "Bundle-Version: 1.0.0\n"
            f"Export-Package: {exports}\n",
            encoding="utf-8",
        )

    manifest = write_manifest(
        "org.m",
        "Manifest-Version: 1.0\n"
        "Bundle-SymbolicName: org.m\n"
        "Bundle-Version: 1.0.0\n"
        "Require-Bundle: org.x,org.y\n"
        "Import-Package: org.json\n",
    )

    used = tmp_path / "used.txt"
    used.write_text("org.x.p\n", encoding="utf-8")

    return {"plugins": plugins, "manifest": manifest, "used": used}
