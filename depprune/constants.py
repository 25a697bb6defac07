"""
Centralized constants for depprune.

This module defines immutable configuration values used across depprune,
including manifest header names, clause attribute keys, file locations,
defaults, and logging formats. All values are intended to be treated as
read-only.
"""

from typing import Final

# ---------------------------------------------------------------------------
# Manifest headers
# ---------------------------------------------------------------------------

#: Header carrying the module's unique id (plus optional directives).
MODULE_ID_HEADER: Final[str] = "Bundle-SymbolicName"

#: Header carrying the module's version.
MODULE_VERSION_HEADER: Final[str] = "Bundle-Version"

#: Header listing required modules.
REQUIRE_MODULE_HEADER: Final[str] = "Require-Bundle"

#: Header listing imported packages.
IMPORT_PACKAGE_HEADER: Final[str] = "Import-Package"

#: Header listing exported packages.
EXPORT_PACKAGE_HEADER: Final[str] = "Export-Package"

#: Header listing buddy modules granted implicit visibility.
BUDDY_HEADER: Final[str] = "Eclipse-RegisterBuddy"

# ---------------------------------------------------------------------------
# Clause attributes and directives
# ---------------------------------------------------------------------------

#: Directive marking a required module as re-exported.
VISIBILITY_DIRECTIVE: Final[str] = "visibility"

#: Value of :data:`VISIBILITY_DIRECTIVE` for re-exported requires.
VISIBILITY_REEXPORT: Final[str] = "reexport"

#: Directive marking an import as optional.
RESOLUTION_DIRECTIVE: Final[str] = "resolution"

#: Value of :data:`RESOLUTION_DIRECTIVE` for optional imports.
RESOLUTION_OPTIONAL: Final[str] = "optional"

#: Attribute naming the module that provides an imported package.
PROVIDING_MODULE_ATTRIBUTE: Final[str] = "bundle-symbolic-name"

#: Attribute carrying a version range on a required module.
MODULE_VERSION_ATTRIBUTE: Final[str] = "bundle-version"

#: Version assumed for modules that do not declare one.
DEFAULT_MODULE_VERSION: Final[str] = "0.0.0"

# ---------------------------------------------------------------------------
# Manifest layout
# ---------------------------------------------------------------------------

#: Manifest location relative to a module directory.
MANIFEST_RELATIVE_PATH: Final[str] = "META-INF/MANIFEST.MF"

#: Maximum manifest line length in bytes, continuation lines included.
MANIFEST_LINE_WIDTH: Final[int] = 72

# ---------------------------------------------------------------------------
# Configuration defaults
# ---------------------------------------------------------------------------

#: Back up manifests before pruning them.
DEFAULT_CREATE_BACKUP: Final[bool] = True

# ---------------------------------------------------------------------------
# Security constraints
# ---------------------------------------------------------------------------

#: Maximum allowed file size (in bytes) when reading manifests and inputs.
MAX_FILE_SIZE: Final[int] = 10 * 1024 * 1024  # 10 MB

# ---------------------------------------------------------------------------
# Logging configuration
# ---------------------------------------------------------------------------

#: Timestamp format for verbose logging.
LOG_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

#: Default log format (non-verbose).
LOG_DEFAULT_FORMAT: Final[str] = "%(levelname)s: %(message)s"

#: Verbose log format including timestamp and logger name.
LOG_VERBOSE_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
