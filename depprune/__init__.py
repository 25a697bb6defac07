"""
depprune — unused module dependency detection and pruning

depprune compares the dependencies a module manifest declares
(``Require-Bundle`` and ``Import-Package``) with the packages its code
actually references, walks the re-export graph of a module registry, and
reports the declarations that can safely be removed.

Library usage::

    from depprune.core import ModuleRegistry, find_unused_dependencies
    from depprune.core.manifest import load_module

    module = load_module("plugin/META-INF/MANIFEST.MF")
    registry = ModuleRegistry.from_paths(["plugins/"])
    result = find_unused_dependencies(module, registry, {"org.example.api"})
"""

from __future__ import annotations

from depprune.__version__ import __version__

# ---------------------------------------------------------------------------
# Package Metadata
# ---------------------------------------------------------------------------

__author__ = "depprune Contributors"
__license__ = "Apache-2.0"
__description__ = "Find and remove unused module dependencies."

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

__all__ = [
    "__version__",
]
