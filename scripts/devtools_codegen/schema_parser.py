"""Schema parser for DevTools-style protocol JSON documents.

Parses a protocol document into the typed schema model.

Public API:
    SchemaParseError — raised when the document is malformed or breaks an invariant
    parse_protocol(document) → ProtocolDefinition
    load_protocol(*paths) → ProtocolDefinition

Document shape (browser_protocol.json / js_protocol.json):

    {"version": {"major": "1", "minor": "3"},
     "domains": [{"domain": "Network",
                  "dependencies": ["Page"],
                  "types": [...], "commands": [...], "events": [...]}]}

Design notes:
- Raises SchemaParseError on any structural problem; never silently skips.
- Enforces model invariants here so generation can assume them: unique
  domain names, unique member names per domain and kind, unique property
  names per member list, non-empty unique enum values (all compared
  case-insensitively except enum values, which are wire literals).
- Returns a complete, immutable ProtocolDefinition; no partial results.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable, Mapping

from devtools_codegen.definitions import (
    CommandDefinition,
    DomainDefinition,
    EventDefinition,
    TypeDefinition,
)
from devtools_codegen.errors import SchemaParseError
from devtools_codegen.protocol import ProtocolDefinition
from devtools_codegen.types import (
    ARRAY_TOKEN,
    PRIMITIVE_TYPES,
    PropertyDefinition,
    TypeKind,
    TypeReference,
)

logger = logging.getLogger(__name__)


# ─── Internal helpers ─────────────────────────────────────────────────────────


def _require(entry: Mapping[str, Any], key: str, where: str) -> str:
    """Return a required non-empty string value or raise SchemaParseError."""
    value = entry.get(key)
    if not isinstance(value, str) or value.strip() == "":
        raise SchemaParseError(
            f"Missing required '{key}' at {where}. "
            f"Every entry of this kind must name its '{key}'. "
            f"Fix: add a non-empty \"{key}\" string to the entry."
        )
    return value


def _list(entry: Mapping[str, Any], key: str, where: str) -> list[Any]:
    value = entry.get(key, [])
    if not isinstance(value, list):
        raise SchemaParseError(
            f"'{key}' at {where} must be a list, got {type(value).__name__}. "
            f"Fix: write \"{key}\" as a JSON array."
        )
    return value


def _mapping(value: Any, where: str) -> Mapping[str, Any]:
    if not isinstance(value, dict):
        raise SchemaParseError(
            f"Expected an object at {where}, got {type(value).__name__}. "
            f"Fix: write this entry as a JSON object."
        )
    return value


def _check_unique(names: Iterable[str], what: str, where: str) -> None:
    seen: dict[str, str] = {}
    for name in names:
        key = name.lower()
        if key in seen:
            raise SchemaParseError(
                f"Duplicate {what} '{name}' at {where} (clashes with '{seen[key]}'; "
                f"names are compared case-insensitively). "
                f"Fix: rename or remove one of them."
            )
        seen[key] = name


def _parse_enum(values: Any, where: str) -> tuple[str, ...]:
    if not isinstance(values, list) or not values:
        raise SchemaParseError(
            f"Enum at {where} must be a non-empty list of strings. "
            f"Fix: list at least one literal value."
        )
    if not all(isinstance(v, str) for v in values):
        raise SchemaParseError(
            f"Enum at {where} contains non-string values: {values!r}. "
            f"Fix: enum literals must be strings."
        )
    if len(set(values)) != len(values):
        duplicates = sorted({v for v in values if values.count(v) > 1})
        raise SchemaParseError(
            f"Enum at {where} repeats values {duplicates}. Fix: list each literal once."
        )
    return tuple(values)


def _parse_reference(entry: Mapping[str, Any], where: str) -> TypeReference:
    """Parse the type part of a property, parameter or array items entry."""
    if "$ref" in entry:
        return TypeReference(_require(entry, "$ref", where))
    token = _require(entry, "type", where)
    if token == ARRAY_TOKEN:
        if "items" not in entry:
            raise SchemaParseError(
                f"Array at {where} has no 'items'. "
                f"Fix: add \"items\": {{\"$ref\": ...}} or {{\"type\": ...}}."
            )
        items = _parse_reference(_mapping(entry["items"], f"{where}.items"), f"{where}.items")
        return TypeReference(ARRAY_TOKEN, items=items)
    if token not in PRIMITIVE_TYPES:
        raise SchemaParseError(
            f"Unknown type '{token}' at {where}. "
            f"Valid types: {sorted(PRIMITIVE_TYPES) + [ARRAY_TOKEN]}, or use \"$ref\". "
            f"Fix: correct the 'type' value."
        )
    enum = _parse_enum(entry["enum"], where) if "enum" in entry else ()
    return TypeReference(token, enum=enum)


def _flag(entry: Mapping[str, Any], key: str) -> bool:
    return bool(entry.get(key, False))


def _parse_properties(entries: list[Any], what: str, where: str) -> tuple[PropertyDefinition, ...]:
    result: list[PropertyDefinition] = []
    for i, raw in enumerate(entries):
        entry = _mapping(raw, f"{where}[{i}]")
        name = _require(entry, "name", f"{where}[{i}]")
        result.append(PropertyDefinition(
            name=name,
            type=_parse_reference(entry, f"{where}[{i}] ({name})"),
            optional=_flag(entry, "optional"),
            description=entry.get("description"),
            deprecated=_flag(entry, "deprecated"),
            experimental=_flag(entry, "experimental"),
        ))
    _check_unique((p.name for p in result), what, where)
    return tuple(result)


def _parse_type(entry: Mapping[str, Any], where: str) -> TypeDefinition:
    type_id = _require(entry, "id", where)
    where = f"{where} ({type_id})"
    common: dict[str, Any] = {
        "description": entry.get("description"),
        "deprecated": _flag(entry, "deprecated"),
        "experimental": _flag(entry, "experimental"),
    }
    if "$ref" in entry:
        ref = TypeReference(_require(entry, "$ref", where))
        return TypeDefinition(id=type_id, kind=TypeKind.REFERENCE, ref=ref, **common)

    token = _require(entry, "type", where)
    if token == ARRAY_TOKEN:
        ref = _parse_reference(entry, where)
        return TypeDefinition(id=type_id, kind=TypeKind.ARRAY, items=ref.items, **common)
    if token == "object" and "properties" in entry:
        properties = _parse_properties(
            _list(entry, "properties", where), "property", f"{where}.properties"
        )
        return TypeDefinition(id=type_id, kind=TypeKind.OBJECT, properties=properties, **common)
    if "enum" in entry:
        if token != "string":
            raise SchemaParseError(
                f"Enum type at {where} has type '{token}'. "
                f"Only string enums are supported. Fix: set \"type\": \"string\"."
            )
        values = _parse_enum(entry["enum"], where)
        return TypeDefinition(id=type_id, kind=TypeKind.ENUM, enum=values, **common)
    if token not in PRIMITIVE_TYPES:
        raise SchemaParseError(
            f"Unknown type '{token}' at {where}. "
            f"Valid types: {sorted(PRIMITIVE_TYPES) + [ARRAY_TOKEN]}, or use \"$ref\". "
            f"Fix: correct the 'type' value."
        )
    return TypeDefinition(id=type_id, kind=TypeKind.PRIMITIVE, primitive=token, **common)


def _parse_command(entry: Mapping[str, Any], where: str) -> CommandDefinition:
    name = _require(entry, "name", where)
    where = f"{where} ({name})"
    redirect = entry.get("redirect")
    if redirect is not None and (not isinstance(redirect, str) or not redirect.strip()):
        raise SchemaParseError(
            f"Invalid redirect {redirect!r} at {where}. "
            f"Fix: set \"redirect\" to a domain name or \"Domain.command\"."
        )
    return CommandDefinition(
        name=name,
        parameters=_parse_properties(
            _list(entry, "parameters", where), "parameter", f"{where}.parameters"
        ),
        returns=_parse_properties(_list(entry, "returns", where), "return", f"{where}.returns"),
        redirect=redirect,
        description=entry.get("description"),
        deprecated=_flag(entry, "deprecated"),
        experimental=_flag(entry, "experimental"),
    )


def _parse_event(entry: Mapping[str, Any], where: str) -> EventDefinition:
    name = _require(entry, "name", where)
    where = f"{where} ({name})"
    return EventDefinition(
        name=name,
        parameters=_parse_properties(
            _list(entry, "parameters", where), "parameter", f"{where}.parameters"
        ),
        description=entry.get("description"),
        deprecated=_flag(entry, "deprecated"),
        experimental=_flag(entry, "experimental"),
    )


def _parse_domain(entry: Mapping[str, Any], where: str) -> DomainDefinition:
    name = _require(entry, "domain", where)
    where = f"{where} ({name})"

    dependencies = _list(entry, "dependencies", where)
    if not all(isinstance(d, str) and d for d in dependencies):
        raise SchemaParseError(
            f"'dependencies' at {where} must list domain names, got {dependencies!r}. "
            f"Fix: write dependencies as a list of strings."
        )

    types = tuple(
        _parse_type(_mapping(raw, f"{where}.types[{i}]"), f"{where}.types[{i}]")
        for i, raw in enumerate(_list(entry, "types", where))
    )
    commands = tuple(
        _parse_command(_mapping(raw, f"{where}.commands[{i}]"), f"{where}.commands[{i}]")
        for i, raw in enumerate(_list(entry, "commands", where))
    )
    events = tuple(
        _parse_event(_mapping(raw, f"{where}.events[{i}]"), f"{where}.events[{i}]")
        for i, raw in enumerate(_list(entry, "events", where))
    )
    _check_unique((t.id for t in types), "type", f"{where}.types")
    _check_unique((c.name for c in commands), "command", f"{where}.commands")
    _check_unique((e.name for e in events), "event", f"{where}.events")

    return DomainDefinition(
        name=name,
        types=types,
        commands=commands,
        events=events,
        dependencies=frozenset(dependencies),
        description=entry.get("description"),
        deprecated=_flag(entry, "deprecated"),
        experimental=_flag(entry, "experimental"),
    )


def _format_version(version: Any) -> str | None:
    if isinstance(version, dict) and "major" in version:
        return f"{version['major']}.{version.get('minor', '0')}"
    if version is None:
        return None
    return str(version)


# ─── Public API ───────────────────────────────────────────────────────────────


def parse_protocol(document: Mapping[str, Any], source: str = "<document>") -> ProtocolDefinition:
    """Parse an already-decoded protocol document into a ProtocolDefinition.

    Args:
        document: Decoded JSON object with a "domains" list.
        source: Name of the document used in error messages.

    Raises:
        SchemaParseError: The document is structurally invalid or breaks a
            model invariant. The message says where and how to fix it.
    """
    document = _mapping(document, source)
    if "domains" not in document:
        raise SchemaParseError(
            f"Missing 'domains' list in {source}. "
            f"A protocol document must have a top-level \"domains\" array. "
            f"Fix: wrap the domain objects in {{\"domains\": [...]}}."
        )
    domains = tuple(
        _parse_domain(_mapping(raw, f"{source}: domains[{i}]"), f"{source}: domains[{i}]")
        for i, raw in enumerate(_list(document, "domains", source))
    )
    _check_unique((d.name for d in domains), "domain", source)
    logger.debug("Parsed %d domain(s) from %s", len(domains), source)
    return ProtocolDefinition(domains=domains, version=_format_version(document.get("version")))


def load_protocol(*paths: Path) -> ProtocolDefinition:
    """Read one or more protocol JSON files and combine their domains.

    The first file's version is kept; domains are concatenated in argument
    order (e.g. browser_protocol.json then js_protocol.json).

    Raises:
        SchemaParseError: A file is missing or not valid JSON, or the combined
            document breaks an invariant.
    """
    if not paths:
        raise SchemaParseError(
            "No protocol files given. Fix: pass at least one protocol JSON path."
        )
    combined: dict[str, Any] = {"domains": []}
    for path in paths:
        if not path.exists():
            raise SchemaParseError(
                f"Protocol file not found: {path}. "
                f"Fix: check the path, or download the protocol JSON first."
            )
        try:
            document = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise SchemaParseError(
                f"JSON parse error in {path}: {e}. "
                f"The protocol file is not valid JSON. "
                f"Fix: correct the syntax error at the reported line/column."
            ) from e
        document = _mapping(document, str(path))
        if "domains" not in document:
            raise SchemaParseError(
                f"Missing 'domains' list in {path}. "
                f"Fix: wrap the domain objects in {{\"domains\": [...]}}."
            )
        combined.setdefault("version", document.get("version"))
        combined["domains"].extend(_list(document, "domains", str(path)))
    source = ", ".join(str(p) for p in paths)
    return parse_protocol(combined, source=source)
