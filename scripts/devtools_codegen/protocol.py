"""Protocol definition: the arena of domains and whole-schema generation.

Generation order follows declared domain dependencies: every domain is
generated after the domains it depends on. Domains with no dependency
relation keep their schema declaration order, so output is stable across
regenerations.

Public API:
    ProtocolDefinition.dependency_order() -> list[DomainDefinition]
    ProtocolDefinition.generate(settings) -> GenerationResult
    ProtocolDefinition.generate_all(settings) -> ArtifactMap
"""

from __future__ import annotations

import functools
import heapq
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

from devtools_codegen.artifacts import ArtifactMap
from devtools_codegen.context import GenerationContext
from devtools_codegen.definitions import DomainDefinition
from devtools_codegen.errors import (
    CyclicDependencyError,
    GenerationFailedError,
    UndeclaredDependencyError,
    UnknownDomainError,
    UnresolvedReferenceError,
)
from devtools_codegen.settings import CodeGenerationSettings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationResult:
    """Complete output of one generation run.

    artifacts: every generated artifact, merged across domains.
    aliases: redirecting command → the qualified command it forwards to.
    warnings: undeclared cross-domain dependencies, in generation order.
    """

    artifacts: ArtifactMap
    aliases: dict[str, str] = field(default_factory=dict)
    warnings: tuple[UndeclaredDependencyError, ...] = ()


@dataclass(frozen=True)
class ProtocolDefinition:
    """The full schema: domains in declaration order."""

    domains: tuple[DomainDefinition, ...]
    version: str | None = None

    @functools.cached_property
    def _by_name(self) -> dict[str, DomainDefinition]:
        return {d.name: d for d in self.domains}

    def get_domain(self, name: str) -> DomainDefinition | None:
        return self._by_name.get(name)

    # ─── Ordering ─────────────────────────────────────────────────────────────

    def dependency_order(self) -> list[DomainDefinition]:
        """Topologically order domains, dependencies first.

        Raises:
            UnknownDomainError: a domain depends on a domain not in the protocol.
            CyclicDependencyError: declared dependencies form a cycle.
        """
        position = {d.name: i for i, d in enumerate(self.domains)}
        dependents: dict[str, list[str]] = {d.name: [] for d in self.domains}
        indegree: dict[str, int] = {}

        for domain in self.domains:
            for dep in sorted(domain.dependencies, key=lambda n: position.get(n, -1)):
                if dep not in position:
                    raise UnknownDomainError(
                        dep, f"dependencies of domain {domain.name}", domain.name, dep
                    )
                dependents[dep].append(domain.name)
            indegree[domain.name] = len(domain.dependencies)

        ready = [(position[name], name) for name, count in indegree.items() if count == 0]
        heapq.heapify(ready)
        ordered: list[DomainDefinition] = []
        while ready:
            _, name = heapq.heappop(ready)
            ordered.append(self._by_name[name])
            for dependent in dependents[name]:
                indegree[dependent] -= 1
                if indegree[dependent] == 0:
                    heapq.heappush(ready, (position[dependent], dependent))

        if len(ordered) != len(self.domains):
            done = {d.name for d in ordered}
            remaining = [d for d in self.domains if d.name not in done]
            raise CyclicDependencyError(self._find_cycle(remaining, position))
        return ordered

    @staticmethod
    def _find_cycle(remaining: list[DomainDefinition], position: dict[str, int]) -> list[str]:
        """Walk unresolved dependencies from the first remaining domain until one repeats.

        Every domain left over by the topological sort still has at least one
        dependency among the leftovers, so the walk always closes a cycle.
        """
        by_name = {d.name: d for d in remaining}
        path: list[str] = []
        seen: dict[str, int] = {}
        current = remaining[0].name
        while current not in seen:
            seen[current] = len(path)
            path.append(current)
            pending = sorted(
                (dep for dep in by_name[current].dependencies if dep in by_name),
                key=lambda n: position[n],
            )
            current = pending[0]
        return path[seen[current]:] + [current]

    # ─── Generation ───────────────────────────────────────────────────────────

    def generate(self, settings: CodeGenerationSettings) -> GenerationResult:
        """Generate every domain and merge the artifacts.

        Domains are generated in dependency order (concurrently when
        settings.max_workers > 1, each into its own map and report) and
        merged in that order, case-insensitively and fail-fast.

        Raises:
            UnknownDomainError / CyclicDependencyError: before any generation.
            DuplicateArtifactError: two artifacts collide ignoring case.
            GenerationFailedError: one or more entities had unresolved
                references; carries every such error.
        """
        ordered = self.dependency_order()
        root = GenerationContext(protocol=self, settings=settings)
        contexts = [root.for_domain(domain) for domain in ordered]
        logger.info(
            "Generating %d domain(s): %s", len(ordered), ", ".join(d.name for d in ordered)
        )

        if settings.max_workers > 1 and len(contexts) > 1:
            with ThreadPoolExecutor(max_workers=settings.max_workers) as pool:
                produced = list(pool.map(lambda ctx: ctx.owner.generate_code(settings, ctx), contexts))
        else:
            produced = [ctx.owner.generate_code(settings, ctx) for ctx in contexts]

        artifacts = ArtifactMap()
        aliases: dict[str, str] = {}
        warnings: list[UndeclaredDependencyError] = []
        errors: list[UnresolvedReferenceError] = []
        for ctx, domain_artifacts in zip(contexts, produced):
            artifacts.merge(domain_artifacts)
            aliases.update(ctx.diagnostics.aliases)
            warnings.extend(ctx.diagnostics.warnings)
            errors.extend(ctx.diagnostics.errors)

        if errors:
            raise GenerationFailedError(errors)
        logger.info(
            "Generated %d artifact(s), %d alias(es), %d warning(s)",
            len(artifacts), len(aliases), len(warnings),
        )
        return GenerationResult(artifacts=artifacts, aliases=aliases, warnings=tuple(warnings))

    def generate_all(self, settings: CodeGenerationSettings) -> ArtifactMap:
        return self.generate(settings).artifacts

    def generate_code(
        self,
        settings: CodeGenerationSettings,
        context: GenerationContext,
    ) -> ArtifactMap:
        return self.generate_all(settings)
