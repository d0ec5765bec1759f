"""Error types for the devtools protocol code generator.

Every error message is actionable: it says what went wrong, where it
happened, and how to fix the schema or the naming strategy.

Hierarchy:
    CodegenError
    ├── SchemaParseError           — schema document is malformed
    ├── SettingsError              — generation settings are invalid
    ├── UnresolvedReferenceError   — a reference target does not exist
    │   ├── UnknownDomainError
    │   └── UnknownTypeError
    ├── UndeclaredDependencyError  — warning-level, reported never raised
    ├── CyclicDependencyError      — fatal, aborts the whole run
    ├── DuplicateArtifactError     — fatal, aborts the whole run
    └── GenerationFailedError      — carries every accumulated leaf error
"""

from __future__ import annotations

from typing import Sequence


class CodegenError(Exception):
    """Base class for all generator errors."""


class SchemaParseError(CodegenError):
    """Raised when a protocol schema document is malformed or violates an invariant."""


class SettingsError(CodegenError):
    """Raised when a recognised generation setting carries an invalid value."""


# ─── Reference resolution ─────────────────────────────────────────────────────


class UnresolvedReferenceError(CodegenError):
    """Raised when a type, domain or command reference has no target.

    Attributes:
        reference: The raw reference token (e.g. "Network.Cookie").
        referrer: Qualified name of the member holding the reference.
        domain: Name of the domain the reference was resolved from.
    """

    def __init__(self, reference: str, referrer: str, domain: str, detail: str = "") -> None:
        self.reference = reference
        self.referrer = referrer
        self.domain = domain
        message = (
            f"Unresolved reference '{reference}' in {referrer} (domain {domain})."
        )
        if detail:
            message = f"{message} {detail}"
        super().__init__(message)


class UnknownDomainError(UnresolvedReferenceError):
    """The domain prefix of a qualified reference names no domain in the protocol."""

    def __init__(self, reference: str, referrer: str, domain: str, target_domain: str) -> None:
        self.target_domain = target_domain
        super().__init__(
            reference,
            referrer,
            domain,
            f"Domain '{target_domain}' is not defined in the protocol. "
            f"Fix: add the domain to the schema or correct the reference prefix.",
        )


class UnknownTypeError(UnresolvedReferenceError):
    """The referenced id is not defined in the target domain."""

    def __init__(
        self,
        reference: str,
        referrer: str,
        domain: str,
        target_domain: str,
        type_id: str,
        member_kind: str = "type",
    ) -> None:
        self.target_domain = target_domain
        self.type_id = type_id
        super().__init__(
            reference,
            referrer,
            domain,
            f"Domain '{target_domain}' defines no {member_kind} '{type_id}'. "
            f"Fix: define the {member_kind} or correct the reference.",
        )


class UndeclaredDependencyError(CodegenError):
    """A cross-domain reference resolved, but the domain does not declare the dependency.

    Warning-level: collected on the generation report and logged, generation
    continues.
    """

    def __init__(self, domain: str, target_domain: str, reference: str, referrer: str) -> None:
        self.domain = domain
        self.target_domain = target_domain
        self.reference = reference
        self.referrer = referrer
        super().__init__(
            f"{referrer} references '{reference}' but domain '{domain}' does not "
            f"declare a dependency on '{target_domain}'. "
            f"Fix: add \"{target_domain}\" to the dependencies of '{domain}'."
        )


# ─── Structural errors ────────────────────────────────────────────────────────


class CyclicDependencyError(CodegenError):
    """Declared domain dependencies form a cycle.

    Attributes:
        cycle: Domain names along the cycle, first name repeated at the end.
    """

    def __init__(self, cycle: Sequence[str]) -> None:
        self.cycle = tuple(cycle)
        super().__init__(
            f"Cyclic domain dependency: {' -> '.join(self.cycle)}. "
            f"Domains cannot be ordered for generation. "
            f"Fix: remove one of the dependency declarations along the cycle."
        )


class DuplicateArtifactError(CodegenError):
    """Two entities emit artifacts whose names are equal ignoring case.

    Attributes:
        name: The artifact name being inserted.
        existing_name: The original-case name already present.
        existing_source: Entity that produced the existing artifact.
        source: Entity that produced the rejected artifact.
    """

    def __init__(self, name: str, existing_name: str, existing_source: str, source: str) -> None:
        self.name = name
        self.existing_name = existing_name
        self.existing_source = existing_source
        self.source = source
        super().__init__(
            f"Artifact '{name}' from {source} collides with artifact "
            f"'{existing_name}' from {existing_source} (names are compared "
            f"case-insensitively). Fix: rename one of the schema members or "
            f"choose a naming convention that keeps them distinct."
        )


class GenerationFailedError(CodegenError):
    """Raised after a full run when one or more entities failed to generate.

    Attributes:
        errors: Every accumulated UnresolvedReferenceError, in generation order.
    """

    def __init__(self, errors: Sequence[UnresolvedReferenceError]) -> None:
        self.errors = tuple(errors)
        lines = "\n".join(f"  - {e}" for e in self.errors)
        super().__init__(f"Code generation failed with {len(self.errors)} error(s):\n{lines}")
