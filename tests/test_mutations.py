"""Single-defect mutations of the protocol fixture.

Each mutation breaks exactly one thing. Parse mutations must be rejected
by parse_protocol(); generate mutations must parse and then fail during
generation, either directly (ordering, collisions) or inside the batched
GenerationFailedError (unresolved references).
"""

from __future__ import annotations

import pytest

from devtools_codegen.errors import CodegenError, GenerationFailedError, SchemaParseError
from devtools_codegen.schema_parser import parse_protocol
from devtools_codegen.settings import CodeGenerationSettings

from conftest import _PROTOCOL_FIXTURE
from fixtures.fixture_loader import GENERATE_MUTATIONS, PARSE_MUTATIONS, SchemaMutation


def _params(mutations: list[SchemaMutation]) -> list:
    return [pytest.param(m, id=f"{m.category}:{m.name}") for m in mutations]


class TestMutationCatalogue:
    def test_names_are_unique(self) -> None:
        names = [m.name for m in _PROTOCOL_FIXTURE.generate_all_mutations()]
        assert len(names) == len(set(names))

    def test_unmutated_fixture_is_clean(self) -> None:
        protocol = parse_protocol(_PROTOCOL_FIXTURE.fresh_document())
        result = protocol.generate(CodeGenerationSettings())
        assert result.warnings == ()

    def test_mutations_do_not_touch_the_shared_document(self) -> None:
        before = _PROTOCOL_FIXTURE.fresh_document()
        for mutation in _PROTOCOL_FIXTURE.generate_all_mutations():
            _PROTOCOL_FIXTURE.apply_mutation(mutation)
        assert _PROTOCOL_FIXTURE.fresh_document() == before


class TestParseMutations:
    @pytest.mark.parametrize("mutation", _params(PARSE_MUTATIONS))
    def test_rejected_by_parser(self, mutation: SchemaMutation) -> None:
        document = _PROTOCOL_FIXTURE.apply_mutation(mutation)
        with pytest.raises(SchemaParseError) as excinfo:
            parse_protocol(document, source="mutated.json")
        assert mutation.expected_fragment in str(excinfo.value)
        assert "mutated.json" in str(excinfo.value)


class TestGenerateMutations:
    @pytest.mark.parametrize("mutation", _params(GENERATE_MUTATIONS))
    @pytest.mark.parametrize("max_workers", [1, 2], ids=["serial", "parallel"])
    def test_fails_during_generation(self, mutation: SchemaMutation, max_workers: int) -> None:
        document = _PROTOCOL_FIXTURE.apply_mutation(mutation)
        protocol = parse_protocol(document, source="mutated.json")
        settings = CodeGenerationSettings(max_workers=max_workers)

        with pytest.raises(CodegenError) as excinfo:
            protocol.generate(settings)

        raised = excinfo.value
        errors = list(raised.errors) if isinstance(raised, GenerationFailedError) else [raised]
        matching = [e for e in errors if isinstance(e, mutation.expected_error)]
        assert matching, f"{mutation.name}: no {mutation.expected_error.__name__} in {raised}"
        assert any(mutation.expected_fragment in str(e) for e in matching)
