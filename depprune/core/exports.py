"""Export resolution for module descriptors."""

from __future__ import annotations

from typing import Set

from depprune.models.module import Module
from depprune.core.manifest import parse_names
from depprune.constants import EXPORT_PACKAGE_HEADER


def exports_of(module: Module) -> Set[str]:
    """Return the package names ``module`` exports.

    An explicit ``Export-Package`` header wins and is returned as declared,
    even when it names nothing; exports derived from compiled metadata are
    used only when the header is absent. Nothing declared means an empty set.
    """
    header = module.header(EXPORT_PACKAGE_HEADER)
    if header is not None:
        return set(parse_names(header, header=EXPORT_PACKAGE_HEADER))

    if module.metadata_exports is not None:
        return set(module.metadata_exports)

    return set()
