"""Generation settings.

Settings are a frozen dataclass so one instance can be shared by every
domain during (possibly parallel) generation. They are usually loaded
from a YAML file:

    namespace: cdp
    naming: upper_camel
    member-naming: snake
    include-deprecated: false
    include-experimental: true
    granularity: entity
    max-workers: 4

Keys may use dashes or underscores. Unrecognised keys are ignored (logged
at DEBUG) so newer front-ends can pass options older generators do not
know about.
"""

from __future__ import annotations

import keyword
import logging
from dataclasses import dataclass, fields
from enum import Enum
from pathlib import Path
from typing import Any, Mapping

import yaml

from devtools_codegen.errors import SettingsError
from devtools_codegen.types import Granularity, NamingConvention

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CodeGenerationSettings:
    """Options recognised by the generator.

    namespace: package prefix used in generated headers and cross-domain
        annotations ("cdp" → "cdp.network.Cookie").
    naming: convention for generated class names (and so artifact names).
    member_naming: convention for generated field names.
    include_deprecated / include_experimental: when False, members flagged
        that way are skipped and emit nothing.
    granularity: one artifact per entity, or one per domain.
    max_workers: domains generated concurrently when > 1.
    """

    namespace: str = "cdp"
    naming: NamingConvention = NamingConvention.UPPER_CAMEL
    member_naming: NamingConvention = NamingConvention.SNAKE
    include_deprecated: bool = True
    include_experimental: bool = True
    granularity: Granularity = Granularity.ENTITY
    max_workers: int = 1

    def includes(self, *, deprecated: bool, experimental: bool) -> bool:
        """True when a member with these flags should be generated."""
        if deprecated and not self.include_deprecated:
            return False
        if experimental and not self.include_experimental:
            return False
        return True

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any]) -> CodeGenerationSettings:
        """Build settings from a loosely-typed mapping (parsed YAML, CLI)."""
        known = {f.name: f for f in fields(cls)}
        values: dict[str, Any] = {}
        for raw_key, raw_value in options.items():
            key = str(raw_key).replace("-", "_")
            if key not in known:
                logger.debug("Ignoring unrecognised generation setting %r", raw_key)
                continue
            values[key] = _coerce(key, raw_value, known[key].default)
        return cls(**values)


def _coerce(key: str, value: Any, default: Any) -> Any:
    if isinstance(default, Enum):
        enum_type = type(default)
        try:
            return enum_type(str(value).replace("-", "_").lower())
        except ValueError:
            raise SettingsError(
                f"Invalid value {value!r} for setting '{key}'. "
                f"Valid values: {[m.value for m in enum_type]}. "
                f"Fix: correct '{key}' in the settings file."
            ) from None
    if isinstance(default, bool):
        if not isinstance(value, bool):
            raise SettingsError(
                f"Invalid value {value!r} for setting '{key}': expected true or false. "
                f"Fix: correct '{key}' in the settings file."
            )
        return value
    if isinstance(default, int):
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            raise SettingsError(
                f"Invalid value {value!r} for setting '{key}': expected a positive integer. "
                f"Fix: correct '{key}' in the settings file."
            )
        return value
    if not isinstance(value, str) or not value.strip():
        raise SettingsError(
            f"Invalid value {value!r} for setting '{key}': expected a non-empty string. "
            f"Fix: correct '{key}' in the settings file."
        )
    if key == "namespace" and not all(
        part.isidentifier() and not keyword.iskeyword(part) for part in value.split(".")
    ):
        raise SettingsError(
            f"Invalid value {value!r} for setting 'namespace': expected a dotted "
            f"Python package name. Fix: use identifiers joined by dots, e.g. 'cdp'."
        )
    return value


def load_settings(path: Path | None) -> CodeGenerationSettings:
    """Load settings from a YAML file; None, a missing or empty file gives defaults.

    Raises:
        SettingsError: the file is not valid YAML, is not a mapping, or a
            recognised key has an invalid value.
    """
    if path is None or not path.exists():
        return CodeGenerationSettings()
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise SettingsError(
            f"YAML parse error in {path}: {e}. Fix: correct the settings file syntax."
        ) from e
    if data is None:
        return CodeGenerationSettings()
    if not isinstance(data, dict):
        raise SettingsError(
            f"Settings file {path} must contain a mapping at the top level, "
            f"got {type(data).__name__}. Fix: write settings as 'key: value' lines."
        )
    return CodeGenerationSettings.from_mapping(data)
