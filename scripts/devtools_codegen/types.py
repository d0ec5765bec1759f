"""Core value types shared by the schema model, resolver and generator.

All enums are str Enums so settings files and schema documents can use the
plain string values.
All dataclasses are frozen: the schema graph is built once and never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


# ─── Enums ────────────────────────────────────────────────────────────────────


class TypeKind(str, Enum):
    """Shape of a named protocol type."""

    PRIMITIVE = "primitive"
    ENUM = "enum"
    ARRAY = "array"
    OBJECT = "object"
    REFERENCE = "reference"


class NamingConvention(str, Enum):
    """Identifier casing applied to generated class and member names."""

    UPPER_CAMEL = "upper_camel"
    LOWER_CAMEL = "lower_camel"
    SNAKE = "snake"
    PRESERVE = "preserve"


class Granularity(str, Enum):
    """How generated fragments are grouped into artifacts."""

    ENTITY = "entity"  # one artifact per type/command/event class
    DOMAIN = "domain"  # one artifact per domain


# ─── Primitives ───────────────────────────────────────────────────────────────

# Built-in schema primitive → Python annotation in generated code.
PRIMITIVE_TYPES: dict[str, str] = {
    "string": "str",
    "integer": "int",
    "number": "float",
    "boolean": "bool",
    "object": "dict[str, typing.Any]",
    "any": "typing.Any",
    "binary": "str",  # base64-encoded on the wire
}

ARRAY_TOKEN = "array"


# ─── References and members ───────────────────────────────────────────────────


@dataclass(frozen=True)
class TypeReference:
    """A lookup key naming the type of a member, never the type itself.

    token is a primitive name, a local type id ("Cookie"), a qualified id
    ("Network.Cookie"), or "array" with items set. enum carries inline
    string literals declared directly on a member.
    """

    token: str
    items: TypeReference | None = None
    enum: tuple[str, ...] = ()

    @property
    def is_array(self) -> bool:
        return self.token == ARRAY_TOKEN

    @property
    def is_primitive(self) -> bool:
        return self.token in PRIMITIVE_TYPES

    @property
    def is_qualified(self) -> bool:
        return "." in self.token

    @property
    def domain_name(self) -> str | None:
        """Domain prefix of a qualified token, None when unqualified."""
        if not self.is_qualified:
            return None
        return self.token.split(".", 1)[0]

    @property
    def type_id(self) -> str:
        """Local id of the token with any domain prefix removed."""
        return self.token.split(".", 1)[-1]

    def __str__(self) -> str:
        if self.is_array and self.items is not None:
            return f"array<{self.items}>"
        return self.token


@dataclass(frozen=True)
class PropertyDefinition:
    """A named member: object property, command parameter/return, event parameter."""

    name: str
    type: TypeReference
    optional: bool = False
    description: str | None = None
    deprecated: bool = False
    experimental: bool = False
