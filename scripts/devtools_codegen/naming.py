"""Identifier derivation for generated Python code.

Schema names are camelCase wire names ("getCookies", "requestWillBeSent",
"no-referrer"). Generated identifiers must be valid, non-keyword Python
names and must be deterministic for a given schema and convention.
"""

from __future__ import annotations

import keyword
import re

from devtools_codegen.types import NamingConvention

_NON_IDENTIFIER = re.compile(r"[^0-9A-Za-z_]+")


def camel_to_snake(name: str) -> str:
    """Convert camelCase / PascalCase (including acronyms) to snake_case.

    >>> camel_to_snake("XMLHttpRequest")
    'xml_http_request'
    """
    out: list[str] = []
    for i, c in enumerate(name):
        if c.isupper():
            if i > 0 and name[i - 1] != "_" and (
                name[i - 1].islower()
                or name[i - 1].isdigit()
                or (i + 1 < len(name) and name[i + 1].islower())
            ):
                out.append("_")
            out.append(c.lower())
        else:
            out.append(c)
    return "".join(out)


def _words(name: str) -> list[str]:
    normalized = _NON_IDENTIFIER.sub("_", name)
    return [part for part in camel_to_snake(normalized).split("_") if part]


def _escape(identifier: str, fallback: str) -> str:
    if not identifier:
        identifier = fallback
    if identifier[0].isdigit():
        identifier = f"_{identifier}"
    if keyword.iskeyword(identifier):
        identifier = f"{identifier}_"
    return identifier


def apply_convention(name: str, convention: NamingConvention, fallback: str = "Value") -> str:
    """Return name rewritten in the given convention as a valid identifier."""
    if convention is NamingConvention.PRESERVE:
        return _escape(_NON_IDENTIFIER.sub("_", name).strip("_"), fallback)
    words = _words(name)
    if convention is NamingConvention.SNAKE:
        text = "_".join(words)
    else:
        text = "".join(w[:1].upper() + w[1:] for w in words)
        if convention is NamingConvention.LOWER_CAMEL and text:
            text = text[:1].lower() + text[1:]
    return _escape(text, fallback)


def class_name(name: str, convention: NamingConvention, suffix: str = "") -> str:
    """Generated class identifier for a schema member plus an optional suffix.

    The suffix is appended before the convention is applied, so
    ("getCookies", UPPER_CAMEL, "Result") → "GetCookiesResult" and
    ("getCookies", SNAKE, "Result") → "get_cookies_result".
    """
    if suffix and convention is NamingConvention.PRESERVE:
        return apply_convention(f"{name}{suffix}", convention)
    if suffix:
        return apply_convention(f"{name}_{suffix}", convention)
    return apply_convention(name, convention)


def member_identifier(name: str, convention: NamingConvention) -> str:
    return apply_convention(name, convention, fallback="value")


def member_identifiers(
    names: list[str] | tuple[str, ...],
    convention: NamingConvention,
    reserved: frozenset[str] = frozenset(),
) -> list[str]:
    """Derive one unique field identifier per wire name, in order.

    A name in reserved (module-level names the generated class body
    relies on) gets a trailing "_" like a keyword. Names that fold to the
    same identifier ("fooBar", "foo_bar") are disambiguated with "_2",
    "_3", ... so no wire field is lost.
    """
    used: set[str] = set()
    out: list[str] = []
    for name in names:
        base = member_identifier(name, convention)
        if base in reserved:
            base = f"{base}_"
        out.append(_unique(base, used))
    return out


def module_name(domain: str) -> str:
    """Python module name for a domain: "DOMDebugger" → "dom_debugger"."""
    return apply_convention(domain, NamingConvention.SNAKE, fallback="domain")


def entity_module_name(class_identifier: str) -> str:
    """Module holding one generated class: "GetCookiesResult" → "get_cookies_result"."""
    return apply_convention(class_identifier, NamingConvention.SNAKE, fallback="entity")


def enum_member_identifiers(values: list[str] | tuple[str, ...]) -> list[str]:
    """Derive one unique UPPER_SNAKE identifier per enum literal, in order.

    Non-identifier characters become "_", leading digits are escaped with
    a leading "_", keywords get a trailing "_", and literals that map to
    the same identifier are disambiguated with "_2", "_3", ...
    """
    used: set[str] = set()
    out: list[str] = []
    for value in values:
        base = _escape("_".join(w.upper() for w in _words(value)), "VALUE")
        out.append(_unique(base, used))
    return out


def _unique(base: str, used: set[str]) -> str:
    candidate = base
    suffix = 2
    while candidate in used:
        candidate = f"{base}_{suffix}"
        suffix += 1
    used.add(candidate)
    return candidate
