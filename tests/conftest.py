"""Shared pytest fixtures and helpers for the devtools_codegen test suite.

Module-level helpers (import directly):
    _make_protocol(*domains) — ProtocolDefinition from DomainDefinitions.
    _prop(name, token, **kwargs) — PropertyDefinition shorthand.
    _domain_context(protocol, name, settings) — GenerationContext scoped to a domain.
    _load_generated(name, text) — execute generated source as a real module.

Module-level fixtures (import directly):
    _PROTOCOL_FIXTURE — ProtocolFixture singleton (loaded once, shared across tests).

pytest fixtures:
    protocol_fixture  — ProtocolFixture singleton.
    protocol_document — fresh deep copy of the fixture document.
    protocol          — the fixture document parsed into a ProtocolDefinition.
    settings          — default CodeGenerationSettings.
    import_generated  — write a GenerationResult as a package and import from it.
"""

from __future__ import annotations

import importlib
import sys
import types
from pathlib import Path
from typing import Any, Callable, Iterator

import pytest

from devtools_codegen.context import GenerationContext
from devtools_codegen.definitions import DomainDefinition
from devtools_codegen.gen_client import write_artifacts
from devtools_codegen.protocol import GenerationResult, ProtocolDefinition
from devtools_codegen.schema_parser import parse_protocol
from devtools_codegen.settings import CodeGenerationSettings
from devtools_codegen.types import PropertyDefinition, TypeReference

# Import after production imports so PYTHONPATH=scripts:tests resolves fixtures/
from fixtures.fixture_loader import ProtocolFixture


# ─── Protocol Fixture Singleton ───────────────────────────────────────────────

_PROTOCOL_FIXTURE = ProtocolFixture()


# ─── Module-Level Helpers ─────────────────────────────────────────────────────


def _make_protocol(*domains: DomainDefinition) -> ProtocolDefinition:
    return ProtocolDefinition(domains=tuple(domains))


def _prop(
    name: str,
    token: str,
    optional: bool = False,
    items: str | None = None,
    enum: tuple[str, ...] = (),
    **kwargs: Any,
) -> PropertyDefinition:
    """PropertyDefinition shorthand: _prop("cookies", "array", items="Cookie")."""
    reference = TypeReference(
        token,
        items=TypeReference(items) if items is not None else None,
        enum=enum,
    )
    return PropertyDefinition(name=name, type=reference, optional=optional, **kwargs)


def _domain_context(
    protocol: ProtocolDefinition,
    name: str,
    settings: CodeGenerationSettings | None = None,
) -> GenerationContext:
    domain = protocol.get_domain(name)
    assert domain is not None, f"domain {name} not in protocol"
    root = GenerationContext(protocol=protocol, settings=settings or CodeGenerationSettings())
    return root.for_domain(domain)


def _load_generated(name: str, text: str, monkeypatch: pytest.MonkeyPatch) -> types.ModuleType:
    """Execute generated source as a registered module and return it.

    Registration in sys.modules lets dataclasses recognise the
    "typing.ClassVar[...]" string annotations of generated classes.
    """
    module = types.ModuleType(name)
    monkeypatch.setitem(sys.modules, name, module)
    exec(compile(text, f"<generated {name}>", "exec"), module.__dict__)
    return module


# ─── pytest Fixtures ──────────────────────────────────────────────────────────


@pytest.fixture
def protocol_fixture() -> ProtocolFixture:
    return _PROTOCOL_FIXTURE


@pytest.fixture
def protocol_document(protocol_fixture: ProtocolFixture) -> dict[str, Any]:
    return protocol_fixture.fresh_document()


@pytest.fixture
def protocol(protocol_document: dict[str, Any]) -> ProtocolDefinition:
    return parse_protocol(protocol_document, source="protocol_minimal.json")


@pytest.fixture
def settings() -> CodeGenerationSettings:
    return CodeGenerationSettings()


@pytest.fixture
def import_generated(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Iterator[Callable[..., types.ModuleType]]:
    """Write results under tmp_path with write_artifacts and import modules from there.

    Generated packages are dropped from sys.modules afterwards so every test
    imports its own output.
    """
    root = tmp_path / "generated"
    root.mkdir()
    monkeypatch.syspath_prepend(str(root))
    namespaces: set[str] = set()

    def _import(result: GenerationResult, module: str, namespace: str = "cdp") -> types.ModuleType:
        write_artifacts(result, root, namespace)
        namespaces.add(namespace.split(".")[0])
        importlib.invalidate_caches()
        return importlib.import_module(module)

    yield _import
    for name in list(sys.modules):
        if any(name == ns or name.startswith(f"{ns}.") for ns in namespaces):
            del sys.modules[name]
