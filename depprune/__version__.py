"""
depprune version information.

This module provides a single source of truth for the package version,
written in PEP 440 form (``0.1.0``, ``0.1.0.dev0``, ``1.0.0rc1``).
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Main version (single source of truth)
# ---------------------------------------------------------------------------

__version__ = "0.1.0.dev0"


# ---------------------------------------------------------------------------
# Human-readable version (for CLI)
# ---------------------------------------------------------------------------

VERSION_STRING = f"depprune {__version__}"
