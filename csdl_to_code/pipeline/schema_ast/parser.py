"""
OData CSDL parser that builds a Schema.

Phase 1 of the pipeline: read the metadata document into a flat,
name-keyed model without validating cross-references. Every schema
section of the document is merged into one Schema; names are qualified
with their declaring namespace and namespace aliases are expanded.
"""

from __future__ import annotations

import logging

from lxml import etree

from ..errors import MalformedDocumentError, UnsupportedElementError
from .nodes import (
    Association,
    AssociationEnd,
    ComplexType,
    EntitySet,
    EntityType,
    EnumMember,
    EnumType,
    Multiplicity,
    NavigationProperty,
    Property,
    Schema,
    is_edm_primitive,
    split_collection,
)

logger = logging.getLogger(__name__)

# Facets carried through onto Property.facets
FACET_ATTRIBUTES = (
    "MaxLength",
    "FixedLength",
    "Precision",
    "Scale",
    "Unicode",
    "SRID",
    "DefaultValue",
    "ConcurrencyMode",
    "Collation",
)

# Elements that may appear anywhere and carry no structure
ANNOTATION_ELEMENTS = {"Documentation", "Annotation", "ValueAnnotation", "TypeAnnotation"}

# Schema-level elements that are understood but do not produce types
IGNORED_SCHEMA_ELEMENTS = ANNOTATION_ELEMENTS | {
    "Using",
    "Annotations",
    "Function",
    "Action",
    "Term",
    "ValueTerm",
    "TypeDefinition",
}

IGNORED_CONTAINER_ELEMENTS = ANNOTATION_ELEMENTS | {
    "AssociationSet",
    "FunctionImport",
    "ActionImport",
    "Singleton",
}

IGNORED_ASSOCIATION_ELEMENTS = ANNOTATION_ELEMENTS | {"ReferentialConstraint"}


def _is_edm_namespace(namespace: str | None) -> bool:
    # CSDL 1.0-3.0 use schemas.microsoft.com/ado/<date>/edm, CSDL 4.0 docs.oasis-open.org/odata/ns/edm
    return namespace is None or namespace.rstrip("/").endswith("/edm")


def _local(element: etree._Element) -> str:
    return etree.QName(element).localname


class SchemaParser:
    """Parses an OData CSDL document into a Schema."""

    def __init__(self):
        # Alias -> namespace, collected before any declaration is read
        self._aliases: dict[str, str] = {}

    def parse(self, text: str | bytes) -> Schema:
        """
        Parse a CSDL document.

        Args:
            text: The full XML text of the metadata document

        Returns:
            Schema holding every declaration of every schema section

        Raises:
            MalformedDocumentError: If the XML is not well-formed or unusable
            UnsupportedElementError: If an unknown EDM element appears where
                a type or member was expected
        """
        root = self._load(text)
        schema_elements = self._find_schema_elements(root)

        # First pass: namespaces and aliases, so later references can be qualified
        self._aliases = {}
        namespaces = []
        for element in schema_elements:
            namespace = self._required(element, "Namespace")
            namespaces.append(namespace)
            alias = element.get("Alias")
            if alias:
                self._aliases[alias] = namespace

        entity_types: dict[str, EntityType] = {}
        complex_types: dict[str, ComplexType] = {}
        enum_types: dict[str, EnumType] = {}
        associations: dict[str, Association] = {}
        entity_sets: list[EntitySet] = []
        declared: set[str] = set()

        # Second pass: declarations
        for element, namespace in zip(schema_elements, namespaces):
            for child in self._children(element):
                kind = _local(child)
                if kind in IGNORED_SCHEMA_ELEMENTS:
                    continue

                if kind == "EntityContainer":
                    entity_sets.extend(self._parse_entity_container(child, namespace))
                    continue

                if kind == "EntityType":
                    node = self._parse_entity_type(child, namespace)
                    target = entity_types
                elif kind == "ComplexType":
                    node = self._parse_complex_type(child, namespace)
                    target = complex_types
                elif kind == "EnumType":
                    node = self._parse_enum_type(child, namespace)
                    target = enum_types
                elif kind == "Association":
                    node = self._parse_association(child, namespace)
                    target = associations
                else:
                    raise UnsupportedElementError(kind, "Schema", child.sourceline)

                if node.name in declared:
                    raise MalformedDocumentError(f"Duplicate declaration of '{node.name}'", kind, child.sourceline)
                declared.add(node.name)
                target[node.name] = node

        logger.debug(
            "Parsed %d entity types, %d complex types, %d enum types, %d associations from %d schema(s)",
            len(entity_types),
            len(complex_types),
            len(enum_types),
            len(associations),
            len(namespaces),
        )

        return Schema(
            namespaces=tuple(namespaces),
            entity_types=entity_types,
            complex_types=complex_types,
            enum_types=enum_types,
            associations=associations,
            entity_sets=tuple(entity_sets),
        )

    def _load(self, text: str | bytes) -> etree._Element:
        """Parse the raw XML into an element tree."""
        if isinstance(text, str):
            text = text.encode("utf-8")
        if not text.strip():
            raise MalformedDocumentError("Metadata document is empty")

        parser = etree.XMLParser(
            resolve_entities=False,
            no_network=True,
            remove_comments=True,
            remove_pis=True,
        )
        try:
            return etree.fromstring(text, parser)
        except etree.XMLSyntaxError as e:
            raise MalformedDocumentError(f"Metadata document is not well-formed XML: {e}") from e

    def _find_schema_elements(self, root: etree._Element) -> list[etree._Element]:
        """Locate every Schema section, whether wrapped in edmx:Edmx or not."""
        root_name = _local(root)
        if root_name not in ("Edmx", "Schema"):
            raise UnsupportedElementError(root_name, "document", root.sourceline)

        schemas = [el for el in root.iter() if isinstance(el.tag, str) and _local(el) == "Schema" and _is_edm_namespace(etree.QName(el).namespace)]
        if not schemas:
            raise MalformedDocumentError("Metadata document contains no <Schema> element", root_name, root.sourceline)
        return schemas

    def _children(self, element: etree._Element):
        """Yield EDM child elements, skipping foreign-namespace annotation elements."""
        for child in element:
            if not isinstance(child.tag, str):
                continue
            if not _is_edm_namespace(etree.QName(child).namespace):
                continue
            yield child

    def _attr(self, element: etree._Element, name: str) -> str | None:
        """Read an attribute by local name, whether or not it is namespace-qualified."""
        value = element.get(name)
        if value is not None:
            return value
        for key, value in element.attrib.items():
            if etree.QName(key).localname == name:
                return value
        return None

    def _required(self, element: etree._Element, name: str) -> str:
        value = element.get(name)
        if not value:
            raise MalformedDocumentError(f"<{_local(element)}> is missing the required '{name}' attribute", _local(element), element.sourceline)
        return value

    def _bool(self, element: etree._Element, name: str, default: bool) -> bool:
        value = self._attr(element, name)
        if value is None:
            return default
        lowered = value.strip().lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
        raise MalformedDocumentError(f"Attribute '{name}' must be 'true' or 'false', got '{value}'", _local(element), element.sourceline)

    def _qualify(self, name: str, namespace: str) -> str:
        """Expand aliases and qualify a bare name with the declaring namespace."""
        inner, is_collection = split_collection(name.strip())
        if is_edm_primitive(inner):
            resolved = inner
        elif "." in inner:
            prefix, _, local = inner.rpartition(".")
            resolved = f"{self._aliases.get(prefix, prefix)}.{local}"
        else:
            resolved = f"{namespace}.{inner}"
        return f"Collection({resolved})" if is_collection else resolved

    def _parse_property(self, element: etree._Element, namespace: str) -> Property:
        facets = {}
        for facet in FACET_ATTRIBUTES:
            value = element.get(facet)
            if value is not None:
                facets[facet] = value

        return Property(
            name=self._required(element, "Name"),
            type_name=self._qualify(self._required(element, "Type"), namespace),
            nullable=self._bool(element, "Nullable", True),
            facets=facets,
        )

    def _parse_navigation_property(self, element: etree._Element, namespace: str) -> NavigationProperty:
        name = self._required(element, "Name")
        relationship = element.get("Relationship")
        type_name = element.get("Type")

        if relationship:
            return NavigationProperty(
                name=name,
                relationship=self._qualify(relationship, namespace),
                from_role=element.get("FromRole"),
                to_role=element.get("ToRole"),
            )
        if type_name:
            return NavigationProperty(
                name=name,
                type_name=self._qualify(type_name, namespace),
                nullable=self._bool(element, "Nullable", True),
                partner=element.get("Partner"),
            )
        raise MalformedDocumentError(
            f"<NavigationProperty Name=\"{name}\"> needs either a 'Relationship' or a 'Type' attribute",
            "NavigationProperty",
            element.sourceline,
        )

    def _parse_key(self, element: etree._Element) -> list[str]:
        key = []
        for child in self._children(element):
            kind = _local(child)
            if kind == "PropertyRef":
                key.append(self._required(child, "Name"))
            elif kind not in ANNOTATION_ELEMENTS:
                raise UnsupportedElementError(kind, "Key", child.sourceline)
        return key

    def _parse_entity_type(self, element: etree._Element, namespace: str) -> EntityType:
        name = self._required(element, "Name")
        properties = []
        navigation_properties = []
        key = []

        for child in self._children(element):
            kind = _local(child)
            if kind == "Property":
                properties.append(self._parse_property(child, namespace))
            elif kind == "NavigationProperty":
                navigation_properties.append(self._parse_navigation_property(child, namespace))
            elif kind == "Key":
                key.extend(self._parse_key(child))
            elif kind not in ANNOTATION_ELEMENTS:
                raise UnsupportedElementError(kind, f"EntityType {name}", child.sourceline)

        base_type = element.get("BaseType")
        return EntityType(
            name=f"{namespace}.{name}",
            namespace=namespace,
            base_type=self._qualify(base_type, namespace) if base_type else None,
            properties=tuple(properties),
            navigation_properties=tuple(navigation_properties),
            key=tuple(key),
            abstract=self._bool(element, "Abstract", False),
            open_type=self._bool(element, "OpenType", False),
            has_stream=self._bool(element, "HasStream", False),
        )

    def _parse_complex_type(self, element: etree._Element, namespace: str) -> ComplexType:
        name = self._required(element, "Name")
        properties = []

        for child in self._children(element):
            kind = _local(child)
            if kind == "Property":
                properties.append(self._parse_property(child, namespace))
            elif kind not in ANNOTATION_ELEMENTS:
                raise UnsupportedElementError(kind, f"ComplexType {name}", child.sourceline)

        base_type = element.get("BaseType")
        return ComplexType(
            name=f"{namespace}.{name}",
            namespace=namespace,
            base_type=self._qualify(base_type, namespace) if base_type else None,
            properties=tuple(properties),
            abstract=self._bool(element, "Abstract", False),
            open_type=self._bool(element, "OpenType", False),
        )

    def _parse_enum_type(self, element: etree._Element, namespace: str) -> EnumType:
        name = self._required(element, "Name")
        members = []
        # Members without a Value continue from the previous one, starting at 0
        next_value = 0

        for child in self._children(element):
            kind = _local(child)
            if kind == "Member":
                member_name = self._required(child, "Name")
                raw_value = child.get("Value")
                if raw_value is not None:
                    try:
                        next_value = int(raw_value.strip())
                    except ValueError as e:
                        raise MalformedDocumentError(
                            f"Member '{member_name}' of enum '{name}' has a non-integer value '{raw_value}'",
                            "Member",
                            child.sourceline,
                        ) from e
                members.append(EnumMember(name=member_name, value=next_value))
                next_value += 1
            elif kind not in ANNOTATION_ELEMENTS:
                raise UnsupportedElementError(kind, f"EnumType {name}", child.sourceline)

        underlying_type = element.get("UnderlyingType", "Edm.Int32")
        return EnumType(
            name=f"{namespace}.{name}",
            namespace=namespace,
            underlying_type=self._qualify(underlying_type, namespace),
            members=tuple(members),
            is_flags=self._bool(element, "IsFlags", False),
        )

    def _parse_association(self, element: etree._Element, namespace: str) -> Association:
        name = self._required(element, "Name")
        ends = []

        for child in self._children(element):
            kind = _local(child)
            if kind == "End":
                type_name = self._qualify(self._required(child, "Type"), namespace)
                raw_multiplicity = self._required(child, "Multiplicity")
                try:
                    multiplicity = Multiplicity(raw_multiplicity.strip())
                except ValueError as e:
                    raise MalformedDocumentError(
                        f"End of association '{name}' has an invalid multiplicity '{raw_multiplicity}'",
                        "End",
                        child.sourceline,
                    ) from e
                ends.append(
                    AssociationEnd(
                        # Role defaults to the unqualified type name
                        role=child.get("Role") or type_name.rsplit(".", 1)[-1],
                        type_name=type_name,
                        multiplicity=multiplicity,
                    )
                )
            elif kind not in IGNORED_ASSOCIATION_ELEMENTS:
                raise UnsupportedElementError(kind, f"Association {name}", child.sourceline)

        if len(ends) != 2:
            raise MalformedDocumentError(f"Association '{name}' must declare exactly two ends, found {len(ends)}", "Association", element.sourceline)

        return Association(name=f"{namespace}.{name}", ends=tuple(ends))

    def _parse_entity_container(self, element: etree._Element, namespace: str) -> list[EntitySet]:
        container = self._required(element, "Name")
        entity_sets = []

        for child in self._children(element):
            kind = _local(child)
            if kind == "EntitySet":
                entity_sets.append(
                    EntitySet(
                        name=self._required(child, "Name"),
                        entity_type=self._qualify(self._required(child, "EntityType"), namespace),
                        container=container,
                    )
                )
            elif kind not in IGNORED_CONTAINER_ELEMENTS:
                raise UnsupportedElementError(kind, f"EntityContainer {container}", child.sourceline)

        return entity_sets
