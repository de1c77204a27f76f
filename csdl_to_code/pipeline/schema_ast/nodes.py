"""
Schema node definitions for OData CSDL.

These nodes represent the parsed document before any cross-reference is
validated. Names are fully qualified (``Namespace.Name``) and namespace
aliases have already been expanded. All nodes are immutable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

EDM_PREFIX = "Edm."


class Multiplicity(Enum):
    """Cardinality of an association end."""

    ONE = "1"
    ZERO_OR_ONE = "0..1"
    MANY = "*"

    @property
    def is_many(self) -> bool:
        return self is Multiplicity.MANY


def split_collection(type_name: str) -> tuple[str, bool]:
    """Split ``Collection(T)`` into ``(T, True)``; other names give ``(name, False)``."""
    if type_name.startswith("Collection(") and type_name.endswith(")"):
        return type_name[len("Collection(") : -1], True
    return type_name, False


def is_edm_primitive(type_name: str) -> bool:
    return type_name.startswith(EDM_PREFIX)


def local_name(qualified_name: str) -> str:
    return qualified_name.rsplit(".", 1)[-1]


@dataclass(frozen=True)
class Property:
    """A structural property of an entity or complex type."""

    name: str = ""
    type_name: str = ""  # "Edm.String", "NS.Address", "Collection(Edm.Int32)"
    nullable: bool = True

    # Pass-through facets (MaxLength, Precision, ...), never enforced
    facets: dict[str, str] = field(default_factory=dict)

    @property
    def element_type(self) -> str:
        return split_collection(self.type_name)[0]

    @property
    def is_collection(self) -> bool:
        return split_collection(self.type_name)[1]


@dataclass(frozen=True)
class NavigationProperty:
    """A relationship from one entity type to another.

    CSDL 1.0-3.0 documents name an Association and two roles. CSDL 4.0
    documents give the target type directly in ``type_name``.
    """

    name: str = ""
    relationship: str | None = None  # Qualified association name
    from_role: str | None = None
    to_role: str | None = None

    type_name: str | None = None  # "NS.Product" or "Collection(NS.Product)"
    nullable: bool = True
    partner: str | None = None


@dataclass(frozen=True)
class EntityType:
    name: str = ""  # Qualified name
    namespace: str = ""
    base_type: str | None = None
    properties: tuple[Property, ...] = ()
    navigation_properties: tuple[NavigationProperty, ...] = ()
    key: tuple[str, ...] = ()
    abstract: bool = False
    open_type: bool = False
    has_stream: bool = False


@dataclass(frozen=True)
class ComplexType:
    name: str = ""
    namespace: str = ""
    base_type: str | None = None
    properties: tuple[Property, ...] = ()
    abstract: bool = False
    open_type: bool = False


@dataclass(frozen=True)
class EnumMember:
    name: str = ""
    value: int = 0


@dataclass(frozen=True)
class EnumType:
    name: str = ""
    namespace: str = ""
    underlying_type: str = "Edm.Int32"
    members: tuple[EnumMember, ...] = ()
    is_flags: bool = False


# Declaration kinds consumed by the resolver and the emitter
TypeDef = EntityType | ComplexType | EnumType


@dataclass(frozen=True)
class AssociationEnd:
    role: str = ""
    type_name: str = ""
    multiplicity: Multiplicity = Multiplicity.ONE


@dataclass(frozen=True)
class Association:
    name: str = ""
    ends: tuple[AssociationEnd, ...] = ()

    def end_for_role(self, role: str | None) -> AssociationEnd | None:
        for end in self.ends:
            if end.role == role:
                return end
        return None


@dataclass(frozen=True)
class EntitySet:
    name: str = ""
    entity_type: str = ""
    container: str = ""


@dataclass(frozen=True)
class Schema:
    """The whole document: every schema section merged into one flat model."""

    namespaces: tuple[str, ...] = ()
    entity_types: dict[str, EntityType] = field(default_factory=dict)
    complex_types: dict[str, ComplexType] = field(default_factory=dict)
    enum_types: dict[str, EnumType] = field(default_factory=dict)
    associations: dict[str, Association] = field(default_factory=dict)
    entity_sets: tuple[EntitySet, ...] = ()

    def lookup(self, name: str) -> TypeDef | None:
        """Find any declared type by qualified name."""
        return self.entity_types.get(name) or self.complex_types.get(name) or self.enum_types.get(name)
