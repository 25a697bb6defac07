"""Module manifest reader and writer.

Manifests follow the JAR manifest layout used by OSGi bundles:

- ``Name: value`` header lines, at most 72 bytes each
- continuation lines starting with a single space
- the main section ends at the first blank line

Header values such as ``Require-Bundle`` or ``Import-Package`` are lists of
clauses separated by commas. Each clause has one or more names followed by
``key=value`` attributes and ``key:=value`` directives, all separated by
semicolons. Values may be double-quoted to protect commas and semicolons::

    Require-Bundle: org.example.util;bundle-version="[1.0,2.0)";
     visibility:=reexport,org.example.log
    Import-Package: org.example.api;bundle-symbolic-name=org.example.util

Typical usage::

    from depprune.core.manifest import load_module, render_manifest

    module = load_module("plugin/META-INF/MANIFEST.MF")
    print([imp.module_id for imp in module.requires])
    text = render_manifest(module)
"""

from __future__ import annotations

import re
from pathlib import Path
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Union

from depprune.exceptions import ManifestError
from depprune.utils import get_logger, safe_read_file
from depprune.models.module import (
    ImportPackageHeader,
    Module,
    ModuleImport,
    PackageImport,
)
from depprune.constants import (
    DEFAULT_MODULE_VERSION,
    IMPORT_PACKAGE_HEADER,
    MANIFEST_LINE_WIDTH,
    MODULE_ID_HEADER,
    MODULE_VERSION_HEADER,
    REQUIRE_MODULE_HEADER,
    RESOLUTION_DIRECTIVE,
    RESOLUTION_OPTIONAL,
    VISIBILITY_DIRECTIVE,
    VISIBILITY_REEXPORT,
)

logger = get_logger("manifest")

_HEADER_NAME = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_-]*$")

# Values containing any of these must be quoted when rendered
_NEEDS_QUOTING = re.compile(r'[,;:="\s]')


@dataclass
class ManifestClause:
    """One comma-separated element of a header value.

    Attributes:
        names: Leading path names (usually exactly one).
        attributes: ``key=value`` pairs, quotes removed.
        directives: ``key:=value`` pairs, quotes removed.
    """

    names: List[str]
    attributes: Dict[str, str] = field(default_factory=dict)
    directives: Dict[str, str] = field(default_factory=dict)

    def to_string(self) -> str:
        """Render the clause back to header syntax."""
        parts = list(self.names)
        parts.extend(f"{k}={_quote(v)}" for k, v in self.attributes.items())
        parts.extend(f"{k}:={_quote(v)}" for k, v in self.directives.items())
        return ";".join(parts)

    def __str__(self) -> str:
        return self.to_string()


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def parse_manifest(
    text: str,
    *,
    file_path: Optional[str] = None,
) -> Dict[str, str]:
    """Parse the main section of a manifest into an ordered header mapping.

    Args:
        text: Manifest text.
        file_path: Source path, used in error messages only.

    Returns:
        Header name → value, in manifest order.

    Raises:
        ManifestError: A line is not a header, a continuation line has no
            header to continue, or a header is declared twice.
    """
    headers: Dict[str, str] = {}
    current: Optional[str] = None

    for line_number, line in enumerate(text.splitlines(), start=1):
        if not line:
            # End of the main section; per-entry sections are not needed
            break

        if line.startswith(" "):
            if current is None:
                raise ManifestError(
                    "Continuation line without a header",
                    line_number=line_number,
                    line_content=line,
                    file_path=file_path,
                )
            headers[current] += line[1:]
            continue

        name, sep, value = line.partition(":")
        if not sep or not _HEADER_NAME.match(name):
            raise ManifestError(
                "Invalid manifest header line",
                line_number=line_number,
                line_content=line,
                file_path=file_path,
            )
        if name in headers:
            raise ManifestError(
                f"Duplicate manifest header: {name}",
                line_number=line_number,
                file_path=file_path,
                header=name,
            )

        headers[name] = value[1:] if value.startswith(" ") else value
        current = name

    return headers


def _split_outside_quotes(text: str, separator: str) -> List[str]:
    """Split ``text`` on ``separator`` ignoring separators inside quotes."""
    parts: List[str] = []
    current: List[str] = []
    in_quotes = False

    for char in text:
        if char == '"':
            in_quotes = not in_quotes
        if char == separator and not in_quotes:
            parts.append("".join(current))
            current = []
        else:
            current.append(char)

    if in_quotes:
        raise ValueError("Unterminated quoted value")

    parts.append("".join(current))
    return parts


def _unquote(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == '"' and value[-1] == '"':
        return value[1:-1]
    return value


def _quote(value: str) -> str:
    if value and not _NEEDS_QUOTING.search(value):
        return value
    return '"' + value + '"'


def parse_header(
    value: Optional[str],
    *,
    header: Optional[str] = None,
) -> List[ManifestClause]:
    """Parse a header value into clauses.

    Empty clauses (for example from a trailing comma) are skipped.

    Args:
        value: Raw header value; ``None`` or blank yields no clauses.
        header: Header name, used in error messages only.

    Raises:
        ManifestError: Unbalanced quotes, an attribute or directive without
            a key, or a clause without a name.
    """
    if value is None or not value.strip():
        return []

    try:
        raw_clauses = _split_outside_quotes(value, ",")
    except ValueError as exc:
        raise ManifestError(str(exc), header=header, line_content=value) from exc

    clauses: List[ManifestClause] = []
    for raw_clause in raw_clauses:
        if not raw_clause.strip():
            continue

        clause = ManifestClause(names=[])
        for part in _split_outside_quotes(raw_clause, ";"):
            part = part.strip()
            if not part:
                continue

            eq = part.find("=")
            if eq < 0:
                clause.names.append(part)
                continue

            if eq > 0 and part[eq - 1] == ":":
                key, target = part[: eq - 1].strip(), clause.directives
            else:
                key, target = part[:eq].strip(), clause.attributes

            if not key:
                raise ManifestError(
                    "Parameter without a key",
                    header=header,
                    line_content=raw_clause,
                )
            target[key] = _unquote(part[eq + 1 :])

        if not clause.names:
            raise ManifestError(
                "Clause without a name",
                header=header,
                line_content=raw_clause,
            )
        clauses.append(clause)

    return clauses


def parse_names(value: Optional[str], *, header: Optional[str] = None) -> List[str]:
    """Return every name declared by a header, in order."""
    return [name for clause in parse_header(value, header=header) for name in clause.names]


# ---------------------------------------------------------------------------
# Model construction
# ---------------------------------------------------------------------------


def _module_import_from_clause(name: str, clause: ManifestClause) -> ModuleImport:
    directives = dict(clause.directives)
    visibility = directives.pop(VISIBILITY_DIRECTIVE, None)
    resolution = directives.pop(RESOLUTION_DIRECTIVE, None)
    return ModuleImport(
        module_id=name,
        reexported=visibility == VISIBILITY_REEXPORT,
        optional=resolution == RESOLUTION_OPTIONAL,
        attributes=dict(clause.attributes),
        directives=directives,
    )


def module_from_headers(
    headers: Mapping[str, str],
    *,
    location: Optional[Path] = None,
    metadata_exports: Optional[Sequence[str]] = None,
    line_ending: str = "\n",
) -> Module:
    """Build a :class:`Module` from parsed manifest headers.

    A manifest without ``Bundle-SymbolicName`` yields a module with an
    empty id; :meth:`Module.has_module_structure` reports it.

    Raises:
        ManifestError: A dependency header is malformed.
    """
    id_clauses = parse_header(headers.get(MODULE_ID_HEADER), header=MODULE_ID_HEADER)
    module_id = id_clauses[0].names[0] if id_clauses else ""

    version = (headers.get(MODULE_VERSION_HEADER) or "").strip()

    requires = [
        _module_import_from_clause(name, clause)
        for clause in parse_header(
            headers.get(REQUIRE_MODULE_HEADER), header=REQUIRE_MODULE_HEADER
        )
        for name in clause.names
    ]

    package_header: Optional[ImportPackageHeader] = None
    if IMPORT_PACKAGE_HEADER in headers:
        package_header = ImportPackageHeader()
        for clause in parse_header(
            headers[IMPORT_PACKAGE_HEADER], header=IMPORT_PACKAGE_HEADER
        ):
            for name in clause.names:
                package_header.add_package(
                    PackageImport(
                        name=name,
                        attributes=dict(clause.attributes),
                        directives=dict(clause.directives),
                    )
                )

    return Module(
        module_id=module_id,
        version=version or DEFAULT_MODULE_VERSION,
        requires=requires,
        package_header=package_header,
        headers=dict(headers),
        metadata_exports=list(metadata_exports) if metadata_exports is not None else None,
        location=location,
        line_ending=line_ending,
    )


def _detect_line_ending(text: str) -> str:
    if "\r\n" in text:
        return "\r\n"
    if "\r" in text:
        return "\r"
    return "\n"


def load_module(path: Union[str, Path]) -> Module:
    """Read and parse a manifest file into a :class:`Module`.

    Raises:
        FileOperationError: The file cannot be read.
        ManifestError: The manifest is malformed.
    """
    manifest_path = Path(path)
    text = safe_read_file(manifest_path)

    try:
        headers = parse_manifest(text, file_path=str(manifest_path))
        module = module_from_headers(
            headers,
            location=manifest_path,
            line_ending=_detect_line_ending(text),
        )
    except ManifestError as exc:
        exc.file_path = str(manifest_path)
        exc.details.setdefault("file", str(manifest_path))
        raise

    logger.debug(
        "Loaded %s %s from %s (%d required module(s), %d imported package(s))",
        module.module_id or "<no id>",
        module.version,
        manifest_path,
        len(module.requires),
        len(module.package_imports),
    )
    return module


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def _module_import_clause(module_import: ModuleImport) -> ManifestClause:
    directives = dict(module_import.directives)
    if module_import.reexported:
        directives[VISIBILITY_DIRECTIVE] = VISIBILITY_REEXPORT
    if module_import.optional:
        directives[RESOLUTION_DIRECTIVE] = RESOLUTION_OPTIONAL
    return ManifestClause(
        names=[module_import.module_id],
        attributes=dict(module_import.attributes),
        directives=directives,
    )


def _package_import_clause(package_import: PackageImport) -> ManifestClause:
    return ManifestClause(
        names=[package_import.name],
        attributes=dict(package_import.attributes),
        directives=dict(package_import.directives),
    )


def _wrap(text: str, *, continuation: bool) -> List[str]:
    """Split one logical segment into physical lines of at most 72 bytes."""
    lines: List[str] = []
    current = " " if continuation else ""
    width = len(current)

    for char in text:
        size = len(char.encode("utf-8"))
        if width + size > MANIFEST_LINE_WIDTH:
            lines.append(current)
            current, width = " ", 1
        current += char
        width += size

    lines.append(current)
    return lines


def _render_header(name: str, clauses: Sequence[str]) -> List[str]:
    """Render a header with one clause per continuation line."""
    lines: List[str] = []
    for index, clause in enumerate(clauses):
        segment = clause + ("," if index < len(clauses) - 1 else "")
        if index == 0:
            lines.extend(_wrap(f"{name}: {segment}", continuation=False))
        else:
            lines.extend(_wrap(segment, continuation=True))
    return lines


def render_manifest(module: Module) -> str:
    """Render ``module`` back to manifest text.

    Headers keep their original order. ``Require-Bundle`` and
    ``Import-Package`` are regenerated from the model and dropped when they
    no longer declare anything; every other header is written verbatim.
    """
    require_clauses = [_module_import_clause(imp).to_string() for imp in module.requires]
    package_clauses = [
        _package_import_clause(pkg).to_string() for pkg in module.package_imports
    ]

    lines: List[str] = []
    seen_require = seen_import = False

    for name, value in module.headers.items():
        if name == REQUIRE_MODULE_HEADER:
            seen_require = True
            if require_clauses:
                lines.extend(_render_header(name, require_clauses))
        elif name == IMPORT_PACKAGE_HEADER:
            seen_import = True
            if package_clauses:
                lines.extend(_render_header(name, package_clauses))
        else:
            lines.extend(_wrap(f"{name}: {value}", continuation=False))

    if not seen_require and require_clauses:
        lines.extend(_render_header(REQUIRE_MODULE_HEADER, require_clauses))
    if not seen_import and package_clauses:
        lines.extend(_render_header(IMPORT_PACKAGE_HEADER, package_clauses))

    newline = module.line_ending
    return newline.join(lines) + newline
