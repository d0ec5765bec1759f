"""Type reference resolution.

resolve() turns a TypeReference into a ResolvedType handle without
expanding it: a handle is a (domain, type id) key into the protocol's
arena of domains, so self-referential and mutually-referential types
never recurse during resolution.

render_annotation() expands handles into Python annotation text for the
generated code. Object and enum types render as class references (lazy,
since generated modules use postponed annotations); array, reference and
named primitive types are inlined. Expansion tracks the handles it is
inlining, and a handle met again while being inlined renders as
typing.Any, so expansion always terminates.

Resolution rules:
- Built-in primitives resolve without any domain lookup.
- Unqualified ids resolve against the owning domain.
- Qualified ids ("Domain.Type") resolve against the named domain:
  UnknownDomainError if absent, UnknownTypeError if the id is absent.
- A cross-domain hit on a domain the owner does not declare as a
  dependency is reported as an UndeclaredDependencyError warning.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Union

from devtools_codegen.artifacts import ModuleImport
from devtools_codegen.errors import (
    UndeclaredDependencyError,
    UnknownDomainError,
    UnknownTypeError,
    UnresolvedReferenceError,
)
from devtools_codegen.naming import class_name, entity_module_name, module_name
from devtools_codegen.rendering import py_string
from devtools_codegen.types import PRIMITIVE_TYPES, Granularity, TypeKind, TypeReference

if TYPE_CHECKING:
    from devtools_codegen.context import GenerationContext
    from devtools_codegen.definitions import TypeDefinition

logger = logging.getLogger(__name__)

ANY = "typing.Any"


# ─── Resolved forms ───────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Primitive:
    name: str


@dataclass(frozen=True)
class TypeHandle:
    """Non-owning key of a named type: resolved lazily through the protocol."""

    domain: str
    type_id: str

    def __str__(self) -> str:
        return f"{self.domain}.{self.type_id}"


@dataclass(frozen=True)
class ArrayOf:
    """An array; enum carries the item literals of an inline string enum."""

    item: ResolvedType
    enum: tuple[str, ...] = ()


ResolvedType = Union[Primitive, TypeHandle, ArrayOf]


# ─── Resolution ───────────────────────────────────────────────────────────────


def resolve(
    reference: TypeReference,
    context: GenerationContext,
    referrer: str,
    *,
    report_undeclared: bool = True,
) -> ResolvedType:
    """Resolve reference from the context's owning domain.

    Args:
        reference: The member's type reference.
        context: Generation context; context.domain is the owning domain.
        referrer: Qualified member name used in diagnostics
            (e.g. "Network.Cookie.expires").
        report_undeclared: When False, an undeclared cross-domain target is
            not reported. Used when re-resolving a named type's own reference,
            which was already reported once by that type's generator.

    Raises:
        UnknownDomainError: qualified reference to a domain not in the protocol.
        UnknownTypeError: the type id is not defined in the target domain.
        UnresolvedReferenceError: an array reference without an item type.
    """
    owner = context.owner
    if reference.is_array:
        if reference.items is None:
            raise UnresolvedReferenceError(
                str(reference),
                referrer,
                owner.name,
                "Array members must declare 'items'. Fix: add an 'items' entry.",
            )
        item = resolve(reference.items, context, referrer, report_undeclared=report_undeclared)
        return ArrayOf(item, reference.items.enum)
    if reference.is_primitive:
        return Primitive(reference.token)

    target_name = reference.domain_name or owner.name
    target = context.protocol.get_domain(target_name)
    if target is None:
        raise UnknownDomainError(reference.token, referrer, owner.name, target_name)
    if target.get_type(reference.type_id) is None:
        raise UnknownTypeError(
            reference.token, referrer, owner.name, target_name, reference.type_id
        )
    if report_undeclared and target.name != owner.name and target.name not in owner.dependencies:
        context.diagnostics.warn(
            UndeclaredDependencyError(owner.name, target.name, reference.token, referrer)
        )
    return TypeHandle(target.name, reference.type_id)


def lookup(handle: TypeHandle, context: GenerationContext) -> TypeDefinition:
    """Return the definition a handle points at (the handle is already resolved)."""
    domain = context.protocol.get_domain(handle.domain)
    definition = domain.get_type(handle.type_id) if domain is not None else None
    if definition is None:
        raise LookupError(
            f"Stale type handle {handle}: the protocol has no such type. "
            f"Fix: resolve handles against the protocol they are rendered with."
        )
    return definition


# ─── Expansion ────────────────────────────────────────────────────────────────


def render_annotation(
    resolved: ResolvedType,
    context: GenerationContext,
    referrer: str,
    enum: tuple[str, ...] = (),
    imports: set[ModuleImport] | None = None,
    _inlining: frozenset[TypeHandle] = frozenset(),
) -> str:
    """Expand a resolved type into a Python annotation for generated code.

    When imports is given, every module the annotation refers to is added
    to it, so the caller can emit the imports the annotation needs.
    """
    if isinstance(resolved, Primitive):
        if enum and resolved.name == "string":
            literals = ", ".join(py_string(value) for value in enum)
            return f"typing.Literal[{literals}]"
        return PRIMITIVE_TYPES[resolved.name]
    if isinstance(resolved, ArrayOf):
        item = render_annotation(resolved.item, context, referrer, resolved.enum, imports, _inlining)
        return f"list[{item}]"

    definition = lookup(resolved, context)
    if definition.kind in (TypeKind.OBJECT, TypeKind.ENUM):
        return _class_reference(resolved, definition, context, imports)

    if resolved in _inlining:
        logger.debug("Cyclic inline type %s reached from %s; rendering as Any", resolved, referrer)
        return ANY
    inlining = _inlining | {resolved}
    if definition.kind is TypeKind.PRIMITIVE:
        primitive = Primitive(definition.primitive or "any")
        return render_annotation(primitive, context, referrer, definition.enum, imports, inlining)

    # Array and reference types are inlined. Their own tokens resolve against
    # the domain that defines them; class references still render relative
    # to the domain that owns the annotation.
    inner_ref = definition.items if definition.kind is TypeKind.ARRAY else definition.ref
    if inner_ref is None:
        raise UnresolvedReferenceError(
            str(resolved),
            referrer,
            context.owner.name,
            f"Type {resolved} is a {definition.kind.value} type with no target type. "
            f"Fix: give it an 'items' or '$ref' entry.",
        )
    home = replace(context, domain=context.protocol.get_domain(resolved.domain))
    inner = resolve(inner_ref, home, str(resolved), report_undeclared=False)
    text = render_annotation(inner, context, referrer, inner_ref.enum, imports, inlining)
    if definition.kind is TypeKind.ARRAY:
        return f"list[{text}]"
    return text


def _class_reference(
    handle: TypeHandle,
    definition: TypeDefinition,
    context: GenerationContext,
    imports: set[ModuleImport] | None,
) -> str:
    """Class name as seen from the owning domain's generated module.

    Same-domain classes render bare. In entity granularity each class has
    its own module, so a bare name needs a "from" import of that module.
    Cross-domain classes render through the target domain's package.
    """
    settings = context.settings
    home = context.protocol.get_domain(handle.domain)
    if home is None:
        raise LookupError(
            f"Stale type handle {handle}: domain '{handle.domain}' is not in the protocol. "
            f"Fix: resolve handles against the protocol they are rendered with."
        )
    if not settings.includes(
        deprecated=definition.deprecated or home.deprecated,
        experimental=definition.experimental or home.experimental,
    ):
        logger.debug("Type %s is excluded by settings; rendering as Any", handle)
        return ANY
    name = class_name(definition.id, settings.naming)
    package = domain_module(settings.namespace, handle.domain)
    if handle.domain == context.owner.name:
        if imports is not None and settings.granularity is Granularity.ENTITY:
            imports.add(ModuleImport(entity_module(settings.namespace, handle.domain, name), name))
        return name
    if imports is not None:
        imports.add(ModuleImport(package))
    return f"{package}.{name}"


def domain_module(namespace: str, domain: str) -> str:
    """Dotted module (or package, per entity) generated for a domain."""
    return f"{namespace}.{module_name(domain)}"


def entity_module(namespace: str, domain: str, name: str) -> str:
    """Dotted module holding one generated class in entity granularity."""
    return f"{domain_module(namespace, domain)}.{entity_module_name(name)}"
