"""Generate typed client modules from protocol JSON files.

Usage (CLI)
-----------
    python -m devtools_codegen.gen_client browser_protocol.json js_protocol.json \\
        --output generated/ [--config codegen.yaml] [--verbose]

Artifacts are written as an importable package: ``<output>/<namespace>/``
holds one module per domain, or one package per domain with a module per
class, depending on the configured granularity. Redirect aliases and
undeclared-dependency warnings are reported on stderr.

Exit codes: 0 success, 1 generation errors, 2 schema or settings file errors.
"""

from __future__ import annotations

import argparse
import logging
import pathlib
import sys
from typing import Sequence

from devtools_codegen.artifacts import ArtifactMap
from devtools_codegen.errors import (
    CyclicDependencyError,
    DuplicateArtifactError,
    GenerationFailedError,
    SchemaParseError,
    SettingsError,
    UnresolvedReferenceError,
)
from devtools_codegen.protocol import GenerationResult
from devtools_codegen.rendering import render_package
from devtools_codegen.schema_parser import load_protocol
from devtools_codegen.settings import load_settings

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="devtools-codegen",
        description="Generate typed Python client modules from DevTools protocol JSON.",
    )
    parser.add_argument(
        "schemas",
        nargs="+",
        type=pathlib.Path,
        metavar="SCHEMA",
        help="Protocol JSON file(s); domains are combined in the given order.",
    )
    parser.add_argument(
        "-o", "--output",
        type=pathlib.Path,
        required=True,
        help="Directory to write generated artifacts into.",
    )
    parser.add_argument(
        "-c", "--config",
        type=pathlib.Path,
        default=None,
        help="YAML settings file (namespace, naming, granularity, ...).",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log per-entity decisions (DEBUG).",
    )
    return parser


def write_artifacts(
    result: GenerationResult,
    output: pathlib.Path,
    namespace: str,
) -> list[pathlib.Path]:
    """Write every artifact as an importable package under output.

    Each artifact goes to the file of its module ("cdp.network" →
    cdp/network.py, "cdp.network.cookie" → cdp/network/cookie.py). Every
    enclosing package gets an __init__.py, and a domain package in entity
    granularity re-exports its classes, so "cdp.network.Cookie" resolves
    in both granularities.

    Raises:
        DuplicateArtifactError: two artifacts map to the same file path
            (paths are compared case-insensitively).
    """
    files = ArtifactMap()
    packages: dict[str, list[tuple[str, str]]] = {}
    docs: dict[str, str] = {}
    for entry in result.artifacts.entries():
        if entry.module is None:
            raise ValueError(
                f"Artifact {entry.name} has no module path. "
                f"Fix: write artifacts produced by ProtocolDefinition.generate()."
            )
        files.add(_module_file(entry.module), entry.text, entry.source)
        package = entry.module.rpartition(".")[0]
        domain, _, class_identifier = entry.name.rpartition(".")
        exports = packages.setdefault(package, [])
        if domain:
            exports.append((entry.module, class_identifier))
            docs[package] = f"{domain} domain."
        while "." in package:
            package = package.rpartition(".")[0]
            packages.setdefault(package, [])

    for package, exports in packages.items():
        doc = docs.get(package, "Generated DevTools protocol client.")
        text = render_package(namespace, doc, exports)
        files.add(_package_file(package), text, f"package {package}")

    written: list[pathlib.Path] = []
    for entry in files.entries():
        path = output / entry.name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(entry.text, encoding="utf-8")
        written.append(path)
    logger.debug("Wrote %d file(s) under %s", len(written), output)
    return written


def _module_file(module: str) -> str:
    return module.replace(".", "/") + ".py"


def _package_file(package: str) -> str:
    return package.replace(".", "/") + "/__init__.py"


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entry point. Returns 0 on success, 1 on generation errors, 2 on input errors."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = load_settings(args.config)
        protocol = load_protocol(*args.schemas)
    except (SchemaParseError, SettingsError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    try:
        result = protocol.generate(settings)
    except GenerationFailedError as e:
        for error in e.errors:
            print(f"ERROR: {error}", file=sys.stderr)
        print(f"\n{len(e.errors)} error(s) encountered.", file=sys.stderr)
        return 1
    except (CyclicDependencyError, DuplicateArtifactError, UnresolvedReferenceError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    for alias, target in result.aliases.items():
        print(f"Alias {alias} -> {target}", file=sys.stderr)

    try:
        written = write_artifacts(result, args.output, settings.namespace)
    except DuplicateArtifactError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"ERROR writing {args.output}: {e}", file=sys.stderr)
        return 2

    print(
        f"Generated {len(result.artifacts)} artifact(s) "
        f"({len(written)} file(s)) in {args.output}"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
