"""Tests for the devtools-codegen command line (devtools_codegen.gen_client)."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from devtools_codegen.gen_client import build_parser, main

from fixtures.fixture_loader import (
    EXPECTED_ARTIFACTS,
    PROTOCOL_PATH,
    SETTINGS_PATH,
    ProtocolFixture,
    member_entry,
)


class TestParser:
    def test_requires_output(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as excinfo:
            build_parser().parse_args([str(PROTOCOL_PATH)])
        assert excinfo.value.code == 2
        assert "--output" in capsys.readouterr().err

    def test_multiple_schemas(self, tmp_path: Path) -> None:
        args = build_parser().parse_args(["a.json", "b.json", "-o", str(tmp_path), "-v"])
        assert args.schemas == [Path("a.json"), Path("b.json")]
        assert args.output == tmp_path
        assert args.config is None
        assert args.verbose is True


class TestMain:
    def test_success_writes_every_artifact(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        out = tmp_path / "generated"
        assert main([str(PROTOCOL_PATH), "-o", str(out)]) == 0
        modules = [p for p in out.rglob("*.py") if p.name != "__init__.py"]
        assert len(modules) == len(EXPECTED_ARTIFACTS)
        assert (out / "cdp" / "network" / "get_cookies_result.py").is_file()
        assert (out / "cdp" / "runtime" / "console_api_called_event.py").is_file()
        assert sorted(p.relative_to(out).as_posix() for p in out.rglob("__init__.py")) == [
            "cdp/__init__.py",
            "cdp/emulation/__init__.py",
            "cdp/network/__init__.py",
            "cdp/page/__init__.py",
            "cdp/runtime/__init__.py",
        ]
        package = (out / "cdp" / "network" / "__init__.py").read_text(encoding="utf-8")
        assert "from cdp.network.cookie import Cookie\n" in package
        assert '    "Cookie",\n' in package
        captured = capsys.readouterr()
        assert f"Generated {len(EXPECTED_ARTIFACTS)} artifact(s) (24 file(s)) in {out}" in captured.out
        assert "Alias Page.setTouchEmulationEnabled -> Emulation.setTouchEmulationEnabled" in captured.err

    def test_settings_file_applied(self, tmp_path: Path) -> None:
        out = tmp_path / "generated"
        assert main([str(PROTOCOL_PATH), "-o", str(out), "-c", str(SETTINGS_PATH)]) == 0
        assert sorted(p.name for p in (out / "devtools").glob("*.py")) == [
            "__init__.py", "emulation.py", "network.py", "page.py", "runtime.py",
        ]
        network = (out / "devtools" / "network.py").read_text(encoding="utf-8")
        assert "# Namespace: devtools" in network
        assert "\nimport devtools.runtime\n" in network
        assert "devtools.runtime.StackTrace" in network
        assert "CanClearBrowserCacheResult" not in network

    def test_module_path_collision_exits_1(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        schema = tmp_path / "protocol.json"
        schema.write_text(json.dumps({"domains": [{
            "domain": "Storage",
            "types": [
                {"id": "fooBar", "type": "object", "properties": [{"name": "a", "type": "string"}]},
                {"id": "foo_bar", "type": "string", "enum": ["x"]},
            ],
        }]}), encoding="utf-8")
        config = tmp_path / "codegen.yaml"
        config.write_text("naming: preserve\n", encoding="utf-8")
        out = tmp_path / "generated"

        assert main([str(schema), "-o", str(out), "-c", str(config)]) == 1
        err = capsys.readouterr().err
        assert "cdp/storage/foo_bar.py" in err
        assert not out.exists()

    def test_generation_errors_exit_1(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        document = ProtocolFixture().fresh_document()
        member_entry(document, "Network", "types", "Cookie")["properties"][2] = {
            "name": "expires", "$ref": "Biscuit",
        }
        member_entry(document, "Page", "types", "Frame")["properties"][2] = {
            "name": "url", "$ref": "Runtime.Url",
        }
        schema = tmp_path / "protocol.json"
        schema.write_text(json.dumps(document), encoding="utf-8")
        out = tmp_path / "generated"

        assert main([str(schema), "-o", str(out)]) == 1
        err = capsys.readouterr().err
        assert "defines no type 'Biscuit'" in err
        assert "defines no type 'Url'" in err
        assert "2 error(s) encountered." in err
        assert not out.exists()

    def test_cycle_exits_1(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        schema = tmp_path / "protocol.json"
        schema.write_text(json.dumps({"domains": [
            {"domain": "A", "dependencies": ["B"]},
            {"domain": "B", "dependencies": ["A"]},
        ]}), encoding="utf-8")
        assert main([str(schema), "-o", str(tmp_path / "out")]) == 1
        assert "Cyclic domain dependency: A -> B -> A." in capsys.readouterr().err

    def test_malformed_schema_exits_2(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        schema = tmp_path / "protocol.json"
        schema.write_text("{not json", encoding="utf-8")
        assert main([str(schema), "-o", str(tmp_path / "out")]) == 2
        assert "ERROR: JSON parse error" in capsys.readouterr().err

    def test_missing_schema_exits_2(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert main([str(tmp_path / "absent.json"), "-o", str(tmp_path / "out")]) == 2
        assert "Protocol file not found" in capsys.readouterr().err

    def test_invalid_settings_exit_2(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        config = tmp_path / "codegen.yaml"
        config.write_text("granularity: file\n", encoding="utf-8")
        assert main([str(PROTOCOL_PATH), "-o", str(tmp_path / "out"), "-c", str(config)]) == 2
        assert "Invalid value 'file' for setting 'granularity'" in capsys.readouterr().err
