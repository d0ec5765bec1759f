"""Schema definitions and their code generation.

TypeDefinition, CommandDefinition and EventDefinition are the leaf
generators; DomainDefinition orchestrates them and merges their output.
All four satisfy the CodeGenerator protocol (context.py).

Leaf artifacts are class fragments keyed "<Domain>.<ClassName>":
- object type        → one record         ("Network.Cookie")
- enum type          → one enum           ("Network.ResourceType")
- array / reference / primitive type → nothing (inlined at point of use)
- command            → "<Command>Params" if it has parameters,
                       "<Command>Result" if it has returns,
                       nothing if it redirects (an alias is recorded instead)
- event              → "<Event>Event" if it has parameters

The domain wraps fragments into modules according to the configured
granularity and records each module's dotted path and the imports its
annotations need.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator

from devtools_codegen.artifacts import ArtifactMap, ModuleImport
from devtools_codegen.context import CodeGenerator, GenerationContext
from devtools_codegen.errors import (
    GenerationFailedError,
    UndeclaredDependencyError,
    UnknownDomainError,
    UnknownTypeError,
    UnresolvedReferenceError,
)
from devtools_codegen.naming import class_name, enum_member_identifiers, member_identifiers
from devtools_codegen.rendering import (
    EnumMember,
    RecordField,
    render_enum,
    render_module,
    render_record,
)
from devtools_codegen.resolver import domain_module, entity_module, render_annotation, resolve
from devtools_codegen.settings import CodeGenerationSettings
from devtools_codegen.types import Granularity, PropertyDefinition, TypeKind, TypeReference

logger = logging.getLogger(__name__)


# ─── Shared helpers ───────────────────────────────────────────────────────────


def _included(
    members: tuple[PropertyDefinition, ...],
    settings: CodeGenerationSettings,
) -> list[PropertyDefinition]:
    return [
        m for m in members
        if settings.includes(deprecated=m.deprecated, experimental=m.experimental)
    ]


def _reserved_names(
    settings: CodeGenerationSettings,
    class_vars: dict[str, str] | None,
) -> frozenset[str]:
    """Names a generated class body must not rebind: its class vars and the
    modules its annotations are evaluated against.
    """
    return frozenset({"enum", "typing", settings.namespace.split(".")[0], *(class_vars or {})})


def _fields(
    members: list[PropertyDefinition],
    context: GenerationContext,
    owner: str,
    imports: set[ModuleImport],
    class_vars: dict[str, str] | None = None,
) -> list[RecordField]:
    """Resolve every member and build its field; the first failure propagates."""
    identifiers = member_identifiers(
        [m.name for m in members],
        context.settings.member_naming,
        _reserved_names(context.settings, class_vars),
    )
    result: list[RecordField] = []
    for identifier, member in zip(identifiers, members):
        referrer = f"{owner}.{member.name}"
        resolved = resolve(member.type, context, referrer)
        result.append(RecordField(
            identifier=identifier,
            annotation=render_annotation(resolved, context, referrer, member.type.enum, imports),
            wire_name=member.name,
            optional=member.optional,
            description=member.description,
        ))
    return result


# ─── Types ────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class TypeDefinition:
    """A named protocol type.

    Exactly one shape field is meaningful per kind:
        OBJECT → properties, ARRAY → items, ENUM → enum,
        REFERENCE → ref, PRIMITIVE → primitive.
    """

    id: str
    kind: TypeKind
    properties: tuple[PropertyDefinition, ...] = ()
    items: TypeReference | None = None
    enum: tuple[str, ...] = ()
    ref: TypeReference | None = None
    primitive: str | None = None
    description: str | None = None
    deprecated: bool = False
    experimental: bool = False

    def generate_code(
        self,
        settings: CodeGenerationSettings,
        context: GenerationContext,
    ) -> ArtifactMap:
        result = ArtifactMap()
        domain = context.owner.name
        qualified = f"{domain}.{self.id}"
        name = class_name(self.id, settings.naming)

        if self.kind is TypeKind.OBJECT:
            imports: set[ModuleImport] = set()
            fields = _fields(_included(self.properties, settings), context, qualified, imports)
            text = render_record(name, self.description or qualified, fields)
            result.add(f"{domain}.{name}", text, f"type {qualified}", frozenset(imports))
        elif self.kind is TypeKind.ENUM:
            members = [
                EnumMember(identifier=ident, value=value)
                for ident, value in zip(enum_member_identifiers(self.enum), self.enum)
            ]
            text = render_enum(name, self.description or qualified, members)
            result.add(f"{domain}.{name}", text, f"type {qualified}")
        elif self.kind in (TypeKind.ARRAY, TypeKind.REFERENCE):
            # Inlined at use sites; resolve now so dangling targets are reported.
            target = self.items if self.kind is TypeKind.ARRAY else self.ref
            if target is None:
                raise UnresolvedReferenceError(
                    self.kind.value,
                    qualified,
                    domain,
                    f"Type {qualified} has no target type. "
                    f"Fix: give it an 'items' or '$ref' entry.",
                )
            resolve(target, context, qualified)
        return result


# ─── Commands ─────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class CommandDefinition:
    """A request: ordered parameters, ordered return fields, optional redirect.

    redirect names another domain ("Emulation") or a qualified command
    ("Emulation.setTouchEmulationEnabled"); a bare domain redirects to the
    command of the same name there.
    """

    name: str
    parameters: tuple[PropertyDefinition, ...] = ()
    returns: tuple[PropertyDefinition, ...] = ()
    redirect: str | None = None
    description: str | None = None
    deprecated: bool = False
    experimental: bool = False

    def generate_code(
        self,
        settings: CodeGenerationSettings,
        context: GenerationContext,
    ) -> ArtifactMap:
        result = ArtifactMap()
        domain = context.owner.name
        qualified = f"{domain}.{self.name}"

        if self.redirect:
            target = self.resolve_redirect(context)
            context.diagnostics.aliases[qualified] = target
            logger.debug("Command %s redirects to %s", qualified, target)
            return result

        parameters = _included(self.parameters, settings)
        returns = _included(self.returns, settings)
        doc = self.description or qualified
        class_vars = {"METHOD": qualified}
        if parameters:
            name = class_name(self.name, settings.naming, "Params")
            imports: set[ModuleImport] = set()
            fields = _fields(parameters, context, qualified, imports, class_vars)
            text = render_record(name, doc, fields, class_vars)
            result.add(
                f"{domain}.{name}", text, f"command {qualified} (parameters)", frozenset(imports)
            )
        if returns:
            name = class_name(self.name, settings.naming, "Result")
            imports = set()
            fields = _fields(returns, context, qualified, imports, class_vars)
            text = render_record(name, f"Result of {qualified}.", fields, class_vars)
            result.add(f"{domain}.{name}", text, f"command {qualified} (result)", frozenset(imports))
        return result

    def resolve_redirect(self, context: GenerationContext) -> str:
        """Resolve the redirect target to a qualified command name.

        Follows the type-reference rules: the target domain and command must
        exist, and an undeclared target domain is reported as a warning.
        """
        if not self.redirect:
            raise ValueError(
                f"Command {self.name} has no redirect to resolve. "
                f"Fix: call resolve_redirect() only for commands that set 'redirect'."
            )
        owner = context.owner
        referrer = f"{owner.name}.{self.name}"
        target_domain, _, target_command = self.redirect.partition(".")
        target_command = target_command or self.name

        target = context.protocol.get_domain(target_domain)
        if target is None:
            raise UnknownDomainError(self.redirect, referrer, owner.name, target_domain)
        if target.get_command(target_command) is None:
            raise UnknownTypeError(
                self.redirect, referrer, owner.name, target_domain, target_command,
                member_kind="command",
            )
        if target.name != owner.name and target.name not in owner.dependencies:
            context.diagnostics.warn(
                UndeclaredDependencyError(owner.name, target.name, self.redirect, referrer)
            )
        return f"{target.name}.{target_command}"


# ─── Events ───────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class EventDefinition:
    """An asynchronous notification with ordered parameters."""

    name: str
    parameters: tuple[PropertyDefinition, ...] = ()
    description: str | None = None
    deprecated: bool = False
    experimental: bool = False

    def generate_code(
        self,
        settings: CodeGenerationSettings,
        context: GenerationContext,
    ) -> ArtifactMap:
        result = ArtifactMap()
        domain = context.owner.name
        qualified = f"{domain}.{self.name}"
        parameters = _included(self.parameters, settings)
        if parameters:
            name = class_name(self.name, settings.naming, "Event")
            class_vars = {"EVENT": qualified}
            imports: set[ModuleImport] = set()
            fields = _fields(parameters, context, qualified, imports, class_vars)
            text = render_record(name, self.description or qualified, fields, class_vars)
            result.add(f"{domain}.{name}", text, f"event {qualified}", frozenset(imports))
        return result


# ─── Domains ──────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class DomainDefinition:
    """A named group of types, commands and events plus its declared dependencies."""

    name: str
    types: tuple[TypeDefinition, ...] = ()
    commands: tuple[CommandDefinition, ...] = ()
    events: tuple[EventDefinition, ...] = ()
    dependencies: frozenset[str] = frozenset()
    description: str | None = None
    deprecated: bool = False
    experimental: bool = False

    def get_type(self, type_id: str) -> TypeDefinition | None:
        for t in self.types:
            if t.id == type_id:
                return t
        return None

    def get_command(self, name: str) -> CommandDefinition | None:
        for c in self.commands:
            if c.name == name:
                return c
        return None

    def members(self) -> Iterator[TypeDefinition | CommandDefinition | EventDefinition]:
        """Types, then commands, then events, each in declaration order."""
        yield from self.types
        yield from self.commands
        yield from self.events

    def generate_code(
        self,
        settings: CodeGenerationSettings,
        context: GenerationContext,
    ) -> ArtifactMap:
        """Generate every member and merge the results.

        A member whose references fail to resolve is recorded on the domain
        report and skipped; the remaining members still generate. Artifact
        name collisions raise DuplicateArtifactError immediately.

        When context is already scoped to this domain (context.for_domain),
        the caller owns the report and decides how to surface its errors.
        Otherwise a private report is used and any accumulated errors are
        raised together as GenerationFailedError.
        """
        if context.domain is not self:
            scoped = context.for_domain(self)
            result = self.generate_code(settings, scoped)
            if scoped.diagnostics.errors:
                raise GenerationFailedError(scoped.diagnostics.errors)
            return result

        fragments = ArtifactMap()
        if not settings.includes(deprecated=self.deprecated, experimental=self.experimental):
            logger.debug("Skipping domain %s (excluded by settings)", self.name)
            return fragments

        for member in self.members():
            if not settings.includes(deprecated=member.deprecated, experimental=member.experimental):
                logger.debug("Skipping %s.%s (excluded by settings)", self.name, _member_name(member))
                continue
            generator: CodeGenerator = member
            try:
                produced = generator.generate_code(settings, context)
            except UnresolvedReferenceError as e:
                context.diagnostics.fail(e)
                continue
            fragments.merge(produced)

        return self._package(fragments, settings)

    def _package(self, fragments: ArtifactMap, settings: CodeGenerationSettings) -> ArtifactMap:
        """Wrap class fragments into modules with the imports they need.

        DOMAIN: one module "<namespace>.<domain>" holding every class.
        ENTITY: one module "<namespace>.<domain>.<class>" per class; the
        domain package re-exports them (see gen_client.write_artifacts).
        """
        doc = self.description or f"{self.name} domain."
        result = ArtifactMap()
        if settings.granularity is Granularity.DOMAIN:
            if len(fragments):
                entries = list(fragments.entries())
                module = domain_module(settings.namespace, self.name)
                imports = frozenset().union(*(entry.requires for entry in entries))
                text = render_module(
                    settings.namespace, self.name, doc, [entry.text for entry in entries], imports
                )
                result.add(self.name, text, f"domain {self.name}", imports, module)
            return result
        for entry in fragments.entries():
            class_identifier = entry.name.rpartition(".")[2]
            module = entity_module(settings.namespace, self.name, class_identifier)
            imports = frozenset(i for i in entry.requires if i.module != module)
            text = render_module(settings.namespace, self.name, doc, [entry.text], imports)
            result.add(entry.name, text, entry.source, imports, module)
        return result


def _member_name(member: TypeDefinition | CommandDefinition | EventDefinition) -> str:
    return member.id if isinstance(member, TypeDefinition) else member.name
