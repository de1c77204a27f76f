"""
Name resolver for Rust identifiers.

Converts CSDL names to Rust type, field and variant identifiers, escapes
keywords and keeps identifiers unique where case conversion or
namespace merging would make them collide.
"""

from __future__ import annotations

from collections import Counter

from ...utils import pascal_to_snake_case, snake_to_pascal_case
from ..analyzer.resolved import ResolvedModel
from ..schema_ast.nodes import local_name

# Rust strict and reserved keywords (2021 edition, plus `gen`)
RUST_KEYWORDS = {
    "abstract",
    "as",
    "async",
    "await",
    "become",
    "box",
    "break",
    "const",
    "continue",
    "do",
    "dyn",
    "else",
    "enum",
    "extern",
    "false",
    "final",
    "fn",
    "for",
    "gen",
    "if",
    "impl",
    "in",
    "let",
    "loop",
    "macro",
    "match",
    "mod",
    "move",
    "mut",
    "override",
    "priv",
    "pub",
    "ref",
    "return",
    "static",
    "struct",
    "trait",
    "true",
    "try",
    "type",
    "typeof",
    "unsafe",
    "unsized",
    "use",
    "virtual",
    "where",
    "while",
    "yield",
}

# Keywords that cannot be written as raw identifiers
NON_RAW_KEYWORDS = {"crate", "self", "Self", "super"}

# Type identifiers already taken by the generated prelude or std's prelude
RESERVED_TYPE_NAMES = {
    "Box",
    "OpenDataModel",
    "OpenDataType",
    "Option",
    "Result",
    "Self",
    "String",
    "Vec",
}


def escape_identifier(name: str) -> str:
    """Make ``name`` usable as a Rust identifier."""
    if name in NON_RAW_KEYWORDS:
        return f"{name}_"
    if name in RUST_KEYWORDS:
        return f"r#{name}"
    return name


def field_identifier(name: str) -> str:
    """snake_case field identifier for a CSDL property name."""
    ident = pascal_to_snake_case(name) or "field"
    if ident[0].isdigit():
        ident = f"field_{ident}"
    return escape_identifier(ident)


def variant_identifier(name: str) -> str:
    """PascalCase variant identifier for a CSDL enum member name."""
    ident = snake_to_pascal_case(name) or "Member"
    if ident[0].isdigit():
        ident = f"Member{ident}"
    return escape_identifier(ident)


def unique(ident: str, used: set[str]) -> str:
    """Return ``ident``, or ``ident`` with a numeric suffix if already used."""
    candidate = ident
    counter = 2
    while candidate in used:
        candidate = f"{ident}_{counter}"
        counter += 1
    used.add(candidate)
    return candidate


class RustNameResolver:
    """Maps qualified CSDL type names to Rust type identifiers."""

    def __init__(self, model: ResolvedModel):
        qualified_names = [enum_type.name for enum_type in model.enum_types]
        qualified_names += [resolved.name for resolved in model.complex_types + model.entity_types]

        counts = Counter(local_name(name) for name in qualified_names)
        self.type_names: dict[str, str] = {}
        used: set[str] = set()

        for qualified_name in qualified_names:
            namespace, _, local = qualified_name.rpartition(".")
            ident = snake_to_pascal_case(local) or "Type"
            if counts[local] > 1 or ident in RESERVED_TYPE_NAMES or ident in RUST_KEYWORDS:
                # Same unqualified name in several namespaces: qualify all of them
                ident = snake_to_pascal_case(namespace) + ident
            self.type_names[qualified_name] = unique(ident, used)

    def type_name(self, qualified_name: str) -> str:
        return self.type_names[qualified_name]
