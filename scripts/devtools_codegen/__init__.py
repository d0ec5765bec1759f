"""DevTools protocol code generator — public API.

Turns a DevTools-style protocol schema (domains of types, commands and
events with declared inter-domain dependencies) into typed Python source
artifacts for a protocol client.

Public API (re-exported from submodules):

Schema model (frozen dataclasses):
    ProtocolDefinition  — arena of domains; dependency ordering and generation
    DomainDefinition    — types, commands, events, dependencies of one domain
    TypeDefinition      — primitive / enum / array / object / reference type
    CommandDefinition   — request with parameters, returns, optional redirect
    EventDefinition     — notification with parameters
    PropertyDefinition  — member of an object, command or event
    TypeReference       — non-owning lookup key of a member's type

Enums:
    TypeKind          — primitive, enum, array, object, reference
    NamingConvention  — upper_camel, lower_camel, snake, preserve
    Granularity       — entity, domain

Generation:
    CodeGenerationSettings — generation options; load_settings(path) reads YAML
    CodeGenerator          — capability implemented by every generatable entity
    GenerationContext      — owning protocol/domain, settings and report
    GenerationResult       — artifacts, redirect aliases, warnings
    ArtifactMap            — case-insensitive, collision-checked artifact mapping

Schema parser (from schema_parser.py):
    parse_protocol(document) — decoded JSON → ProtocolDefinition
    load_protocol(*paths)    — JSON files → ProtocolDefinition

Errors (from errors.py):
    CodegenError, SchemaParseError, SettingsError, UnresolvedReferenceError,
    UnknownDomainError, UnknownTypeError, UndeclaredDependencyError,
    CyclicDependencyError, DuplicateArtifactError, GenerationFailedError
"""

from devtools_codegen.artifacts import ArtifactEntry, ArtifactMap
from devtools_codegen.context import CodeGenerator, DomainReport, GenerationContext
from devtools_codegen.definitions import (
    CommandDefinition,
    DomainDefinition,
    EventDefinition,
    TypeDefinition,
)
from devtools_codegen.errors import (
    CodegenError,
    CyclicDependencyError,
    DuplicateArtifactError,
    GenerationFailedError,
    SchemaParseError,
    SettingsError,
    UndeclaredDependencyError,
    UnknownDomainError,
    UnknownTypeError,
    UnresolvedReferenceError,
)
from devtools_codegen.protocol import GenerationResult, ProtocolDefinition
from devtools_codegen.schema_parser import load_protocol, parse_protocol
from devtools_codegen.settings import CodeGenerationSettings, load_settings
from devtools_codegen.types import (
    Granularity,
    NamingConvention,
    PropertyDefinition,
    TypeKind,
    TypeReference,
)

__version__ = "0.1.0"

__all__ = [
    # Schema model
    "ProtocolDefinition",
    "DomainDefinition",
    "TypeDefinition",
    "CommandDefinition",
    "EventDefinition",
    "PropertyDefinition",
    "TypeReference",
    # Enums
    "TypeKind",
    "NamingConvention",
    "Granularity",
    # Generation
    "CodeGenerationSettings",
    "load_settings",
    "CodeGenerator",
    "GenerationContext",
    "DomainReport",
    "GenerationResult",
    "ArtifactMap",
    "ArtifactEntry",
    # Schema parser
    "parse_protocol",
    "load_protocol",
    # Errors
    "CodegenError",
    "SchemaParseError",
    "SettingsError",
    "UnresolvedReferenceError",
    "UnknownDomainError",
    "UnknownTypeError",
    "UndeclaredDependencyError",
    "CyclicDependencyError",
    "DuplicateArtifactError",
    "GenerationFailedError",
]
