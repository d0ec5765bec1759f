"""Case-insensitive, collision-checked accumulation of generated artifacts.

Target namespaces (file systems, Python packages) can treat names that
differ only in case as the same entry, so two artifacts whose names are
equal ignoring case are a naming collision. ArtifactMap never overwrites:
a colliding insert raises DuplicateArtifactError naming both producers.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass

from devtools_codegen.errors import DuplicateArtifactError


@dataclass(frozen=True, order=True)
class ModuleImport:
    """An import a generated fragment needs.

    An empty name renders "import <module>"; otherwise
    "from <module> import <name>".
    """

    module: str
    name: str = ""


@dataclass(frozen=True)
class ArtifactEntry:
    """One generated artifact with the entity that produced it.

    requires: imports a class fragment needs once wrapped in a module.
    module: dotted Python module the artifact is written as; None for
        fragments not yet packaged by their domain.
    """

    name: str
    text: str
    source: str
    requires: frozenset[ModuleImport] = frozenset()
    module: str | None = None


class ArtifactMap(Mapping[str, str]):
    """Ordered mapping of artifact name → generated source text.

    Keys are normalised with str.lower(); the original-case name is
    kept for iteration and diagnostics. Insertion order is preserved.
    """

    def __init__(self) -> None:
        self._entries: dict[str, ArtifactEntry] = {}

    @staticmethod
    def _key(name: str) -> str:
        return name.lower()

    def add(
        self,
        name: str,
        text: str,
        source: str,
        requires: frozenset[ModuleImport] = frozenset(),
        module: str | None = None,
    ) -> None:
        """Insert one artifact, raising DuplicateArtifactError on collision."""
        key = self._key(name)
        existing = self._entries.get(key)
        if existing is not None:
            raise DuplicateArtifactError(name, existing.name, existing.source, source)
        self._entries[key] = ArtifactEntry(
            name=name, text=text, source=source, requires=requires, module=module
        )

    def merge(self, other: ArtifactMap) -> None:
        """Add every entry of other, in order, with the same collision check."""
        for entry in other.entries():
            self.add(entry.name, entry.text, entry.source, entry.requires, entry.module)

    def entries(self) -> Iterator[ArtifactEntry]:
        return iter(self._entries.values())

    def source_of(self, name: str) -> str:
        return self._entries[self._key(name)].source

    def __getitem__(self, name: str) -> str:
        return self._entries[self._key(name)].text

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self._key(name) in self._entries

    def __iter__(self) -> Iterator[str]:
        return (entry.name for entry in self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"ArtifactMap({list(self)!r})"
