"""Policy filters applied to the unused set.

Both filters only ever drop entries:

- required modules registered as buddies are loaded implicitly, outside
  normal reference analysis, and must stay
- re-exported required modules are part of the module's own public surface
"""

from __future__ import annotations

import re
from typing import List, Sequence

from depprune.models.module import Module
from depprune.constants import BUDDY_HEADER
from depprune.utils.logger import get_logger
from depprune.models.unused import UnusedEntry, UnusedModule

logger = get_logger("filters")

_BUDDY_SEPARATOR = re.compile(r"\s*,\s*")


def buddy_ids(module: Module) -> List[str]:
    """Return the module ids listed in the buddy declaration of ``module``."""
    value = module.header(BUDDY_HEADER)
    if value is None:
        return []
    return [name for name in _BUDDY_SEPARATOR.split(value.strip()) if name]


def exclude_buddies(entries: Sequence[UnusedEntry], module: Module) -> List[UnusedEntry]:
    """Drop required modules that ``module`` lists as buddies."""
    buddies = set(buddy_ids(module))
    if not buddies:
        return list(entries)

    kept: List[UnusedEntry] = []
    for entry in entries:
        if isinstance(entry, UnusedModule) and entry.name in buddies:
            logger.debug("Keeping buddy module %s", entry.name)
            continue
        kept.append(entry)
    return kept


def exclude_reexported(entries: Sequence[UnusedEntry]) -> List[UnusedEntry]:
    """Drop required modules declared with ``visibility:=reexport``."""
    kept: List[UnusedEntry] = []
    for entry in entries:
        if isinstance(entry, UnusedModule) and entry.reexported:
            logger.debug("Keeping re-exported module %s", entry.name)
            continue
        kept.append(entry)
    return kept
