"""Jinja2 rendering of generated Python source.

Templates live in the package's templates/ directory:
    record.py.j2  — dataclass for object types, command params/results, events
    enum.py.j2    — str Enum for enum types
    module.py.j2  — module wrapper (header, imports) around one or more classes
    package.py.j2 — package __init__ re-exporting per-class modules

StrictUndefined is used everywhere: a template referencing a variable the
generator did not supply fails at render time instead of emitting blanks.
"""

from __future__ import annotations

import functools
import json
from dataclasses import dataclass
from typing import Iterable

from jinja2 import Environment, PackageLoader, StrictUndefined

from devtools_codegen.artifacts import ModuleImport

GENERATED_HEADER = "AUTO-GENERATED by devtools_codegen. DO NOT EDIT."


@dataclass(frozen=True)
class RecordField:
    """One generated dataclass field."""

    identifier: str
    annotation: str
    wire_name: str
    optional: bool
    description: str | None = None


@dataclass(frozen=True)
class EnumMember:
    identifier: str
    value: str


def py_string(value: str) -> str:
    """Render value as a double-quoted Python string literal."""
    return json.dumps(value, ensure_ascii=False)


def docstring(text: str | None) -> str:
    """Make schema prose safe to embed in a triple-quoted docstring."""
    if not text:
        return ""
    text = text.strip().replace("\\", "\\\\").replace('"""', '\\"\\"\\"')
    if text.endswith('"'):
        text += " "
    return text


@functools.lru_cache(maxsize=1)
def environment() -> Environment:
    env = Environment(
        loader=PackageLoader("devtools_codegen", "templates"),
        undefined=StrictUndefined,
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["py_string"] = py_string
    env.filters["docstring"] = docstring
    return env


def render(template_name: str, **context: object) -> str:
    return environment().get_template(template_name).render(**context)


def render_record(
    name: str,
    doc: str,
    fields: list[RecordField],
    class_vars: dict[str, str] | None = None,
) -> str:
    """Render a dataclass; required fields are emitted before optional ones."""
    ordered = [f for f in fields if not f.optional] + [f for f in fields if f.optional]
    return render(
        "record.py.j2",
        name=name,
        doc=doc,
        fields=ordered,
        class_vars=class_vars or {},
    )


def render_enum(name: str, doc: str, members: list[EnumMember]) -> str:
    return render("enum.py.j2", name=name, doc=doc, members=members)


def render_module(
    namespace: str,
    domain: str,
    doc: str,
    bodies: list[str],
    imports: Iterable[ModuleImport] = (),
) -> str:
    """Render a module around class bodies.

    Plain imports go at the top. "from" imports of sibling class modules go
    after the classes, so modules that import each other load in any order.
    """
    ordered = sorted(set(imports))
    return render(
        "module.py.j2",
        header=GENERATED_HEADER,
        namespace=namespace,
        domain=domain,
        doc=doc,
        bodies=bodies,
        modules=[i.module for i in ordered if not i.name],
        from_imports=[i for i in ordered if i.name],
    )


def render_package(namespace: str, doc: str, exports: list[tuple[str, str]]) -> str:
    """Render a package __init__ re-exporting (module, class) pairs."""
    return render(
        "package.py.j2",
        header=GENERATED_HEADER,
        namespace=namespace,
        doc=doc,
        exports=exports,
    )
