"""
Resolved model definitions.

These nodes are the output of the model resolver: inheritance is
flattened, every reference has been checked, and navigation properties
know whether they point at one entity or many. The emitter consumes them
directly and never walks inheritance chains itself.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ..schema_ast.nodes import (
    Association,
    ComplexType,
    EntitySet,
    EntityType,
    EnumType,
    Multiplicity,
    NavigationProperty,
    Property,
    local_name,
)


class PropertyKind(Enum):
    """What a structural property's element type refers to."""

    PRIMITIVE = "primitive"  # Edm.*
    ENUM = "enum"
    COMPLEX = "complex"


@dataclass(frozen=True)
class ResolvedProperty:
    property: Property
    declaring_type: str
    kind: PropertyKind
    is_key: bool = False

    @property
    def name(self) -> str:
        return self.property.name

    @property
    def element_type(self) -> str:
        return self.property.element_type

    @property
    def is_collection(self) -> bool:
        return self.property.is_collection

    @property
    def nullable(self) -> bool:
        # Key properties are never nullable, whatever the document says
        return self.property.nullable and not self.is_key


@dataclass(frozen=True)
class ResolvedNavigation:
    navigation: NavigationProperty
    declaring_type: str
    target: str  # Qualified entity type name
    target_multiplicity: Multiplicity
    source_multiplicity: Multiplicity | None = None
    association: str | None = None

    @property
    def name(self) -> str:
        return self.navigation.name

    @property
    def is_to_many(self) -> bool:
        return self.target_multiplicity.is_many


@dataclass(frozen=True)
class ResolvedType:
    """An entity or complex type with its inheritance flattened root-first."""

    definition: EntityType | ComplexType
    inheritance_chain: tuple[str, ...]  # Root ancestor first, this type last
    properties: tuple[ResolvedProperty, ...] = ()
    navigation_properties: tuple[ResolvedNavigation, ...] = ()
    key: tuple[str, ...] = ()

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def local_name(self) -> str:
        return local_name(self.definition.name)

    @property
    def namespace(self) -> str:
        return self.definition.namespace

    @property
    def is_entity(self) -> bool:
        return isinstance(self.definition, EntityType)

    @property
    def base_type(self) -> str | None:
        return self.definition.base_type


@dataclass(frozen=True)
class ResolvedModel:
    """The complete resolved model, each kind in document order."""

    namespaces: tuple[str, ...] = ()
    enum_types: tuple[EnumType, ...] = ()
    complex_types: tuple[ResolvedType, ...] = ()
    entity_types: tuple[ResolvedType, ...] = ()
    associations: tuple[Association, ...] = ()
    entity_sets: tuple[EntitySet, ...] = ()

    def get(self, name: str) -> ResolvedType | None:
        for resolved in self.complex_types + self.entity_types:
            if resolved.name == name:
                return resolved
        return None
