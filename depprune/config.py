"""Configuration file loader for depprune.

Handles discovery, loading, parsing, and validation of configuration files.
Supports two formats:

- ``depprune.toml`` — settings under ``[depprune]`` table
- ``pyproject.toml`` — settings under ``[tool.depprune]`` table

Discovery order:

1. Explicit path from ``--config`` or ``DEPPRUNE_CONFIG``
2. ``depprune.toml`` in current directory
3. ``pyproject.toml`` with ``[tool.depprune]`` section

Configuration precedence: defaults < config file < CLI args.

Relative paths in the file are resolved against the file's directory.

Example (``depprune.toml``)::

    [depprune]
    registry_paths = ["plugins", "target/platform"]
    used_packages = "build/used-packages.json"
    create_backup = true
"""

from __future__ import annotations

import tomli as tomllib
from pathlib import Path
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field

from depprune.exceptions import ConfigError
from depprune.utils.logger import get_logger
from depprune.constants import DEFAULT_CREATE_BACKUP

logger = get_logger("config")

_KNOWN_KEYS = frozenset({"registry_paths", "used_packages", "create_backup"})


@dataclass
class DepPruneConfig:
    """Parsed and validated depprune configuration.

    All fields have defaults, so empty config files are valid.

    Attributes:
        registry_paths: Directories or manifests that make up the module
            registry, in addition to ``--registry`` options.
        used_packages: Default used-package file for the oracle.
        create_backup: Back up manifests before ``prune`` rewrites them.
        source_path: Path to loaded config file, or ``None`` if using defaults.
    """

    registry_paths: List[Path] = field(default_factory=list)
    used_packages: Optional[Path] = None
    create_backup: bool = DEFAULT_CREATE_BACKUP

    # Metadata (not a user-facing option)
    source_path: Optional[Path] = field(default=None, repr=False)

    def to_log_dict(self) -> Dict[str, Any]:
        """Return configuration as dictionary for debug logging.

        Excludes ``source_path`` metadata.
        """
        return {
            "registry_paths": [str(p) for p in self.registry_paths],
            "used_packages": str(self.used_packages) if self.used_packages else None,
            "create_backup": self.create_backup,
        }


def discover_config_file(explicit_path: Optional[Path] = None) -> Optional[Path]:
    """Find the configuration file to load.

    Args:
        explicit_path: Explicit config path. If provided, must exist.

    Returns:
        Resolved path to config file, or ``None`` if not found.

    Raises:
        ConfigError: Explicit path provided but does not exist.
    """
    if explicit_path is not None:
        resolved = explicit_path.resolve()
        if not resolved.is_file():
            raise ConfigError(
                f"Configuration file not found: {explicit_path}",
                config_path=str(explicit_path),
            )
        logger.debug("Using explicit config: %s", resolved)
        return resolved

    cwd = Path.cwd()

    depprune_toml = cwd / "depprune.toml"
    if depprune_toml.is_file():
        logger.debug("Found depprune.toml: %s", depprune_toml)
        return depprune_toml

    pyproject_toml = cwd / "pyproject.toml"
    if pyproject_toml.is_file() and _pyproject_has_depprune_section(pyproject_toml):
        logger.debug("Found [tool.depprune] in pyproject.toml: %s", pyproject_toml)
        return pyproject_toml

    logger.debug("No configuration file found")
    return None


def _pyproject_has_depprune_section(path: Path) -> bool:
    """Check if pyproject.toml contains a [tool.depprune] section.

    Parse errors count as "no section" so a broken unrelated pyproject
    does not stop discovery.
    """
    try:
        raw = _read_toml(path)
    except ConfigError:
        return False
    tool = raw.get("tool", {})
    return isinstance(tool, dict) and "depprune" in tool


def load_config(config_path: Optional[Path] = None) -> DepPruneConfig:
    """Load and validate depprune configuration.

    Args:
        config_path: Explicit path to config file. If ``None``, uses
            auto-discovery (see :func:`discover_config_file`).

    Returns:
        Validated :class:`DepPruneConfig` with values from file or defaults.

    Raises:
        ConfigError: File cannot be parsed, has unknown keys, or invalid values.
    """
    resolved = discover_config_file(config_path)

    if resolved is None:
        logger.debug("No config file found, using defaults")
        return DepPruneConfig()

    logger.info("Loading configuration from %s", resolved)
    raw = _read_toml(resolved)

    if resolved.name == "pyproject.toml":
        section = raw.get("tool", {}).get("depprune", {})
    else:
        section = raw.get("depprune", {})

    if not section:
        logger.debug("Config file found but no depprune section, using defaults")
        return DepPruneConfig(source_path=resolved)

    config = _parse_section(section, config_path=str(resolved), base_dir=resolved.parent)
    config.source_path = resolved

    logger.debug("Loaded configuration: %s", config.to_log_dict())
    return config


def _read_toml(path: Path) -> Dict[str, Any]:
    """Read and parse a TOML file.

    Raises:
        ConfigError: File cannot be read or is not valid TOML.
    """
    try:
        with open(path, "rb") as fh:
            return tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(
            f"Invalid TOML in {path.name}: {exc}",
            config_path=str(path),
        ) from exc
    except OSError as exc:
        raise ConfigError(
            f"Cannot read configuration file {path}: {exc}",
            config_path=str(path),
        ) from exc


def _parse_section(
    section: Dict[str, Any],
    *,
    config_path: str,
    base_dir: Path,
) -> DepPruneConfig:
    """Validate a ``[depprune]`` / ``[tool.depprune]`` table.

    Raises:
        ConfigError: Unknown keys or incorrect types.
    """
    config = DepPruneConfig()

    unknown = set(section.keys()) - _KNOWN_KEYS
    if unknown:
        raise ConfigError(
            f"Unknown configuration keys: {', '.join(sorted(unknown))}",
            config_path=config_path,
        )

    if "registry_paths" in section:
        val = section["registry_paths"]
        if not isinstance(val, list) or not all(isinstance(p, str) for p in val):
            raise ConfigError(
                "registry_paths must be a list of strings",
                config_path=config_path,
                option="registry_paths",
            )
        config.registry_paths = [base_dir / p for p in val]

    if "used_packages" in section:
        val = section["used_packages"]
        if not isinstance(val, str):
            raise ConfigError(
                f"used_packages must be a string, got {type(val).__name__}",
                config_path=config_path,
                option="used_packages",
            )
        config.used_packages = base_dir / val

    if "create_backup" in section:
        val = section["create_backup"]
        if not isinstance(val, bool):
            raise ConfigError(
                f"create_backup must be a boolean, got {type(val).__name__}",
                config_path=config_path,
                option="create_backup",
            )
        config.create_backup = val

    return config
