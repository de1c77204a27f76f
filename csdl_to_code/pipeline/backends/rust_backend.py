"""
Rust code generation backend.

Generates Rust structs and enums from the resolved model. Enumerations
come first, then complex types, then entity types, each in document
order, so the output reads top to bottom and diffs cleanly.
"""

from __future__ import annotations

import logging
from typing import Any

from ..analyzer.resolved import (
    PropertyKind,
    ResolvedModel,
    ResolvedNavigation,
    ResolvedProperty,
    ResolvedType,
)
from ..errors import UnsupportedPrimitiveError
from ..schema_ast.nodes import EnumType
from .base import CodeBackend
from .rust_names import RustNameResolver, field_identifier, unique, variant_identifier

logger = logging.getLogger(__name__)

EMPTY_STRING_AS_NONE = "empty_string_as_none"


class RustBackend(CodeBackend):
    """Rust code generation backend."""

    TEMPLATE_LANG = "rust"
    FILE_EXTENSION = "rs"

    # EDM primitive kind -> Rust type; the keys double as OpenDataType variants
    TYPE_MAP = {
        "Binary": "Vec<u8>",
        "Boolean": "bool",
        "Byte": "u8",
        "SByte": "i8",
        "Int16": "i16",
        "Int32": "i32",
        "Int64": "i64",
        "Single": "f32",
        "Double": "f64",
        "Decimal": "f64",
        "String": "String",
        "Guid": "String",
        "DateTime": "chrono::NaiveDateTime",
        "DateTimeOffset": "chrono::DateTime<chrono::FixedOffset>",
        "Date": "chrono::NaiveDate",
        "TimeOfDay": "chrono::NaiveTime",
        "Time": "String",
        "Duration": "String",
    }

    # Integer kinds allowed as enum underlying types
    REPR_MAP = {
        "Byte": "u8",
        "SByte": "i8",
        "Int16": "i16",
        "Int32": "i32",
        "Int64": "i64",
    }

    def generate(self, model: ResolvedModel) -> str:
        """Generate Rust code from the resolved model."""
        self.names = RustNameResolver(model)
        self.boxed_edges = self._recursive_edges(model)

        # Build every declaration before rendering anything, so a failure leaves no output
        enums = [self._prepare_enum_context(enum_type) for enum_type in model.enum_types]
        complex_types = [self._prepare_struct_context(resolved) for resolved in model.complex_types]
        entity_types = [self._prepare_struct_context(resolved) for resolved in model.entity_types]

        # The helper is only emitted when a field refers to it
        uses_helper = any(
            EMPTY_STRING_AS_NONE in argument for ctx in complex_types + entity_types for field in ctx["fields"] for argument in field["SERDE"]
        )
        reflection = self.options.emit_reflection_metadata

        prefix = self.prefix_template.render(
            COMMENT_PREFIX=self._get_comment_prefix(),
            GENERATION_COMMENT=self._generation_comment(),
            EMPTY_STRING_AS_NONE=EMPTY_STRING_AS_NONE if uses_helper else None,
            REFLECTION=reflection,
            PRIMITIVE_TAGS=list(self.TYPE_MAP),
        )

        declarations = [self.enum_template.render(ctx) for ctx in enums]
        declarations += [self.struct_template.render(ctx) for ctx in complex_types + entity_types]

        suffix = self.suffix_template.render(
            REFLECTION=reflection,
            ENTITY_TYPES=[(ctx["QUALIFIED_NAME"], ctx["REFLECTION_FIELDS"]) for ctx in entity_types],
            ENTITY_SETS=[(entity_set.name, entity_set.entity_type) for entity_set in model.entity_sets],
        )

        logger.debug(
            "Rendered %d enums, %d complex types and %d entity types",
            len(enums),
            len(complex_types),
            len(entity_types),
        )
        return prefix + "\n".join(declarations) + suffix

    def _recursive_edges(self, model: ResolvedModel) -> set[tuple[str, str]]:
        """
        Find the by-value complex property edges that close a cycle.

        Returns:
            ``(owner, target)`` pairs where ``target`` can reach ``owner``
            again through non-collection complex properties
        """
        graph: dict[str, set[str]] = {resolved.name: set() for resolved in model.complex_types}
        for resolved in model.complex_types:
            for prop in resolved.properties:
                if prop.kind == PropertyKind.COMPLEX and not prop.is_collection:
                    graph[resolved.name].add(prop.element_type)

        def reachable(start: str) -> set[str]:
            seen = {start}
            stack = [start]
            while stack:
                for target in graph.get(stack.pop(), ()):
                    if target not in seen:
                        seen.add(target)
                        stack.append(target)
            return seen

        boxed = set()
        for owner, targets in graph.items():
            for target in targets:
                if owner in reachable(target):
                    boxed.add((owner, target))

        if boxed:
            logger.debug("Boxing %d recursive complex properties", len(boxed))
        return boxed

    def _primitive(self, kind: str, type_name: str, property_name: str | None = None) -> str:
        """Look up an EDM primitive kind such as ``Edm.Int32``; never guesses a fallback."""
        short = kind.removeprefix("Edm.")
        if short not in self.TYPE_MAP:
            raise UnsupportedPrimitiveError(kind, type_name, property_name)
        return short

    def translate_type(self, prop: ResolvedProperty, owner: str) -> str:
        """Translate a resolved property to a Rust type string."""
        if prop.kind == PropertyKind.PRIMITIVE:
            result = self.TYPE_MAP[self._primitive(prop.element_type, prop.declaring_type, prop.name)]
        else:
            result = self.names.type_name(prop.element_type)
            # A struct cannot contain itself by value, directly or through other structs
            if not prop.is_collection and (owner, prop.element_type) in self.boxed_edges:
                result = f"Box<{result}>"

        if prop.is_collection:
            return f"Vec<{result}>"
        if prop.nullable:
            return f"Option<{result}>"
        return result

    def translate_navigation(self, navigation: ResolvedNavigation) -> str:
        """Translate a navigation property; the outer Option means "not expanded"."""
        target = self.names.type_name(navigation.target)
        if navigation.is_to_many:
            return f"Option<Vec<{target}>>"
        return f"Option<Box<{target}>>"

    def reflection_tag(self, prop: ResolvedProperty) -> str:
        """OpenDataType expression describing a property."""
        nullable = "true" if prop.nullable else "false"
        key = "true" if prop.is_key else "false"

        if prop.kind == PropertyKind.PRIMITIVE:
            short = self._primitive(prop.element_type, prop.declaring_type, prop.name)
            tag = f"OpenDataType::{short} {{ nullable: {nullable}, key: {key} }}"
        elif prop.kind == PropertyKind.ENUM:
            tag = f'OpenDataType::Enum {{ name: "{prop.element_type}", nullable: {nullable}, key: {key} }}'
        else:
            tag = f'OpenDataType::Complex {{ name: "{prop.element_type}", nullable: {nullable} }}'

        if prop.is_collection:
            return f"OpenDataType::Collection(&{tag})"
        return tag

    def _prepare_enum_context(self, enum_type: EnumType) -> dict[str, Any]:
        """Prepare the template context for an enumeration."""
        underlying = self._primitive(enum_type.underlying_type, enum_type.name)
        if underlying not in self.REPR_MAP:
            raise UnsupportedPrimitiveError(enum_type.underlying_type, enum_type.name)

        used: set[str] = set()
        members = []
        for member in enum_type.members:
            ident = unique(variant_identifier(member.name), used)
            members.append(
                {
                    "NAME": ident,
                    "VALUE": member.value,
                    "RENAME": member.name if ident != member.name else None,
                }
            )

        return {
            "NAME": self.names.type_name(enum_type.name),
            "QUALIFIED_NAME": enum_type.name,
            "REPR": self.REPR_MAP[underlying],
            "IS_FLAGS": enum_type.is_flags,
            "SERDE": self.options.emit_serialization_support,
            "members": members,
        }

    def _struct_doc(self, resolved: ResolvedType) -> list[str]:
        kind = "Entity type" if resolved.is_entity else "Complex type"
        doc = [f"{kind} `{resolved.name}`."]

        if resolved.base_type:
            ancestors = " -> ".join(f"`{name}`" for name in reversed(resolved.inheritance_chain[:-1]))
            doc += ["", f"Derives from {ancestors}; inherited fields come first."]

        flags = []
        if resolved.definition.abstract:
            flags.append("abstract")
        if resolved.definition.open_type:
            flags.append("open type: the service may send undeclared properties")
        if resolved.is_entity and resolved.definition.has_stream:
            flags.append("has a media stream")
        if flags:
            doc += ["", f"Declared as {', '.join(flags)}."]
        return doc

    def _field_serde(self, wire_name: str, ident: str, rust_type: str) -> list[str]:
        """serde attribute arguments for a structural field."""
        if not self.options.emit_serialization_support:
            return []

        args = []
        if ident != wire_name:
            args.append(f'rename = "{wire_name}"')
        if self.options.coerce_empty_string_to_null and rust_type == "Option<String>":
            args += ["default", f'deserialize_with = "{EMPTY_STRING_AS_NONE}"']
        elif rust_type.startswith("Vec<"):
            args.append("default")
        return args

    def _prepare_field_context(self, prop: ResolvedProperty, owner: str, used: set[str]) -> dict[str, Any]:
        """Prepare the template context for a structural field."""
        ident = unique(field_identifier(prop.name), used)
        rust_type = self.translate_type(prop, owner)

        doc = []
        if prop.property.facets:
            doc.append(", ".join(f"{facet}={value}" for facet, value in prop.property.facets.items()))

        return {
            "NAME": ident,
            "TYPE": rust_type,
            "SERDE": self._field_serde(prop.name, ident, rust_type),
            "DOC": doc,
        }

    def _prepare_navigation_context(self, navigation: ResolvedNavigation, used: set[str]) -> dict[str, Any]:
        """Prepare the template context for a navigation field."""
        ident = unique(field_identifier(navigation.name), used)

        cardinality = "many" if navigation.is_to_many else "one"
        via = f", via association `{navigation.association}`" if navigation.association else ""
        doc = [f"Navigation to {cardinality} `{navigation.target}`{via}. `None` unless expanded."]

        serde = []
        if self.options.emit_serialization_support:
            if ident != navigation.name:
                serde.append(f'rename = "{navigation.name}"')
            serde += ["default", 'skip_serializing_if = "Option::is_none"']

        return {
            "NAME": ident,
            "TYPE": self.translate_navigation(navigation),
            "SERDE": serde,
            "DOC": doc,
        }

    def _prepare_struct_context(self, resolved: ResolvedType) -> dict[str, Any]:
        """Prepare the template context for an entity or complex type."""
        used: set[str] = set()
        fields = [self._prepare_field_context(prop, resolved.name, used) for prop in resolved.properties]

        if self.options.include_navigation_properties:
            fields += [self._prepare_navigation_context(navigation, used) for navigation in resolved.navigation_properties]

        relations = []
        if self.options.include_navigation_properties:
            relations = [(navigation.name, navigation.target) for navigation in resolved.navigation_properties]

        reflection_fields = []
        if self.options.emit_reflection_metadata:
            reflection_fields = [(prop.name, self.reflection_tag(prop)) for prop in resolved.properties]

        return {
            "NAME": self.names.type_name(resolved.name),
            "QUALIFIED_NAME": resolved.name,
            "DOC": self._struct_doc(resolved),
            "SERDE": self.options.emit_serialization_support,
            "REFLECTION": self.options.emit_reflection_metadata,
            "KEYS": ", ".join(f'"{key}"' for key in resolved.key),
            "REFLECTION_FIELDS": reflection_fields,
            "RELATIONS": relations,
            "fields": fields,
        }
