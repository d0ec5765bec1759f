"""Generation context and the code-generation capability.

This module defines:
- CodeGenerator (@runtime_checkable Protocol): the capability shared by
  TypeDefinition, CommandDefinition, EventDefinition and DomainDefinition.
- DomainReport: per-domain buffer for warnings, aliases and leaf errors.
- GenerationContext: the typed context passed down the generation chain.

Each domain gets its own DomainReport, so domains can be generated in
parallel against the read-only schema graph; the protocol merges reports
in dependency order afterwards.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from devtools_codegen.artifacts import ArtifactMap
from devtools_codegen.errors import UndeclaredDependencyError, UnresolvedReferenceError

if TYPE_CHECKING:
    from devtools_codegen.definitions import DomainDefinition
    from devtools_codegen.protocol import ProtocolDefinition
    from devtools_codegen.settings import CodeGenerationSettings

logger = logging.getLogger(__name__)


@runtime_checkable
class CodeGenerator(Protocol):
    """Anything that turns part of the schema into generated artifacts."""

    def generate_code(
        self,
        settings: CodeGenerationSettings,
        context: GenerationContext,
    ) -> ArtifactMap:
        """Return artifact name → source text for this entity.

        Raises:
            UnresolvedReferenceError: a member reference has no target.
            DuplicateArtifactError: two emitted names collide ignoring case.
        """
        ...


@dataclass
class DomainReport:
    """Mutable diagnostics buffer owned by exactly one domain's generation."""

    domain: str
    warnings: list[UndeclaredDependencyError] = field(default_factory=list)
    errors: list[UnresolvedReferenceError] = field(default_factory=list)
    aliases: dict[str, str] = field(default_factory=dict)

    def warn(self, warning: UndeclaredDependencyError) -> None:
        """Record a warning once per (domain, target, reference, referrer)."""
        key = _warning_key(warning)
        if any(_warning_key(seen) == key for seen in self.warnings):
            return
        logger.warning("%s", warning)
        self.warnings.append(warning)

    def fail(self, error: UnresolvedReferenceError) -> None:
        logger.debug("Entity failed in domain %s: %s", self.domain, error)
        self.errors.append(error)


@dataclass(frozen=True)
class GenerationContext:
    """Everything a generator needs beyond its own definition.

    domain is None only at protocol level; every leaf generator runs with
    its owning domain set.
    """

    protocol: ProtocolDefinition
    settings: CodeGenerationSettings
    domain: DomainDefinition | None = None
    report: DomainReport | None = None

    def for_domain(self, domain: DomainDefinition) -> GenerationContext:
        """Child context owning a fresh report for domain."""
        return replace(self, domain=domain, report=DomainReport(domain=domain.name))

    @property
    def owner(self) -> DomainDefinition:
        if self.domain is None:
            raise RuntimeError("GenerationContext has no owning domain. Use for_domain() first.")
        return self.domain

    @property
    def diagnostics(self) -> DomainReport:
        if self.report is None:
            raise RuntimeError("GenerationContext has no report. Use for_domain() first.")
        return self.report


def _warning_key(warning: UndeclaredDependencyError) -> tuple[str, str, str, str]:
    return (warning.domain, warning.target_domain, warning.reference, warning.referrer)
