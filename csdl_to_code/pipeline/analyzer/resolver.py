"""
Model resolver that transforms a Schema into a ResolvedModel.

Phase 2 of the pipeline: follow base types, flatten inherited
properties, resolve associations and check that every referenced name
exists. Cycles are only looked for along inheritance chains; navigation
graphs may be cyclic.
"""

from __future__ import annotations

import logging

from ..errors import (
    CyclicInheritanceError,
    DuplicateEnumMemberError,
    DuplicatePropertyError,
    InvalidKeyError,
    UnknownAssociationError,
    UnknownTypeError,
)
from ..schema_ast.nodes import (
    ComplexType,
    EntityType,
    EnumType,
    Multiplicity,
    NavigationProperty,
    Property,
    Schema,
    is_edm_primitive,
    split_collection,
)
from .resolved import (
    PropertyKind,
    ResolvedModel,
    ResolvedNavigation,
    ResolvedProperty,
    ResolvedType,
)

logger = logging.getLogger(__name__)


class ModelResolver:
    """Resolves a parsed Schema into a ResolvedModel."""

    def __init__(self):
        # Will be set during resolution
        self.schema: Schema | None = None
        self._resolved: dict[str, ResolvedType] = {}

    def resolve(self, schema: Schema) -> ResolvedModel:
        """
        Resolve a schema.

        Args:
            schema: The parsed schema

        Returns:
            ResolvedModel with one ResolvedType per entity and complex type

        Raises:
            ResolutionError: On the first unresolvable reference, cycle or
                duplicate found
        """
        self.schema = schema
        self._resolved = {}

        for enum_type in schema.enum_types.values():
            self._check_enum(enum_type)

        complex_types = tuple(self._resolve_structured(name) for name in schema.complex_types)
        entity_types = tuple(self._resolve_structured(name) for name in schema.entity_types)

        for association in schema.associations.values():
            for end in association.ends:
                if end.type_name not in schema.entity_types:
                    raise UnknownTypeError(end.type_name, f"Association {association.name}", "is not a defined entity type")

        for entity_set in schema.entity_sets:
            if entity_set.entity_type not in schema.entity_types:
                raise UnknownTypeError(entity_set.entity_type, f"EntitySet {entity_set.name}", "is not a defined entity type")

        logger.debug("Resolved %d complex types and %d entity types", len(complex_types), len(entity_types))

        return ResolvedModel(
            namespaces=schema.namespaces,
            enum_types=tuple(schema.enum_types.values()),
            complex_types=complex_types,
            entity_types=entity_types,
            associations=tuple(schema.associations.values()),
            entity_sets=schema.entity_sets,
        )

    def _check_enum(self, enum_type: EnumType) -> None:
        if not is_edm_primitive(enum_type.underlying_type):
            raise UnknownTypeError(enum_type.underlying_type, enum_type.name, "is not an EDM integer type")

        names: set[str] = set()
        values: set[int] = set()
        for member in enum_type.members:
            if member.name in names or member.value in values:
                raise DuplicateEnumMemberError(enum_type.name, member.name, member.value)
            names.add(member.name)
            values.add(member.value)

    def _table_for(self, name: str) -> dict[str, EntityType] | dict[str, ComplexType]:
        if name in self.schema.entity_types:
            return self.schema.entity_types
        return self.schema.complex_types

    def inheritance_chain(self, name: str) -> list[str]:
        """
        Follow base types from ``name`` up to its root.

        Returns:
            Qualified names, root ancestor first and ``name`` last

        Raises:
            CyclicInheritanceError: If a type is reached twice
            UnknownTypeError: If a base type is missing or of the wrong kind
        """
        table = self._table_for(name)
        chain = [name]
        current = table[name]

        while current.base_type is not None:
            base = current.base_type
            if base in chain:
                cycle = chain[chain.index(base) :] + [base]
                raise CyclicInheritanceError(cycle)
            if base not in table:
                if self.schema.lookup(base) is not None:
                    kind = "an entity type" if table is self.schema.entity_types else "a complex type"
                    raise UnknownTypeError(base, current.name, f"is not {kind} and cannot be a base type")
                raise UnknownTypeError(base, current.name)
            chain.append(base)
            current = table[base]

        chain.reverse()
        return chain

    def _resolve_structured(self, name: str) -> ResolvedType:
        """Resolve an entity or complex type, memoizing every ancestor on the way."""
        if name in self._resolved:
            return self._resolved[name]

        chain = self.inheritance_chain(name)
        definition = self._table_for(name)[name]

        base: ResolvedType | None = None
        if len(chain) > 1:
            base = self._resolve_structured(chain[-2])

        # Properties and navigation properties share one name space on the wire
        seen: dict[str, str] = {}
        properties: list[tuple[Property, str]] = []
        navigations: list[ResolvedNavigation] = []

        if base is not None:
            for resolved_property in base.properties:
                seen[resolved_property.name] = resolved_property.declaring_type
                properties.append((resolved_property.property, resolved_property.declaring_type))
            for navigation in base.navigation_properties:
                seen[navigation.name] = navigation.declaring_type
                navigations.append(navigation)

        for prop in definition.properties:
            self._claim(seen, name, prop.name)
            properties.append((prop, name))

        if isinstance(definition, EntityType):
            for navigation in definition.navigation_properties:
                self._claim(seen, name, navigation.name)
                navigations.append(self._resolve_navigation(definition, navigation))

        key = self._resolve_key(definition, base, [prop.name for prop, _ in properties])

        resolved = ResolvedType(
            definition=definition,
            inheritance_chain=tuple(chain),
            properties=tuple(self._resolve_property(prop, declaring_type, prop.name in key) for prop, declaring_type in properties),
            navigation_properties=tuple(navigations),
            key=key,
        )
        self._resolved[name] = resolved
        return resolved

    def _claim(self, seen: dict[str, str], type_name: str, property_name: str) -> None:
        if property_name in seen:
            raise DuplicatePropertyError(type_name, property_name, seen[property_name])
        seen[property_name] = type_name

    def _resolve_key(
        self,
        definition: EntityType | ComplexType,
        base: ResolvedType | None,
        property_names: list[str],
    ) -> tuple[str, ...]:
        if not isinstance(definition, EntityType):
            return ()

        if definition.key:
            key = definition.key
        elif base is not None:
            key = base.key
        else:
            key = ()

        for key_name in key:
            if key_name not in property_names:
                raise InvalidKeyError(definition.name, key_name)
        return tuple(key)

    def _resolve_property(self, prop: Property, declaring_type: str, is_key: bool) -> ResolvedProperty:
        element_type = prop.element_type
        referenced_by = f"{declaring_type}.{prop.name}"

        if is_edm_primitive(element_type):
            # Unknown Edm.* kinds are reported by the emitter, which owns the type table
            kind = PropertyKind.PRIMITIVE
        elif element_type in self.schema.enum_types:
            kind = PropertyKind.ENUM
        elif element_type in self.schema.complex_types:
            kind = PropertyKind.COMPLEX
        elif element_type in self.schema.entity_types:
            raise UnknownTypeError(element_type, referenced_by, "is an entity type; use a navigation property")
        else:
            raise UnknownTypeError(element_type, referenced_by)

        return ResolvedProperty(
            property=prop,
            declaring_type=declaring_type,
            kind=kind,
            is_key=is_key,
        )

    def _resolve_navigation(self, entity_type: EntityType, navigation: NavigationProperty) -> ResolvedNavigation:
        referenced_by = f"{entity_type.name}.{navigation.name}"

        if navigation.relationship is None:
            target, is_collection = split_collection(navigation.type_name)
            if is_collection:
                multiplicity = Multiplicity.MANY
            elif navigation.nullable:
                multiplicity = Multiplicity.ZERO_OR_ONE
            else:
                multiplicity = Multiplicity.ONE

            self._check_navigation_target(target, referenced_by)
            return ResolvedNavigation(
                navigation=navigation,
                declaring_type=entity_type.name,
                target=target,
                target_multiplicity=multiplicity,
            )

        association = self.schema.associations.get(navigation.relationship)
        if association is None:
            raise UnknownAssociationError(navigation.relationship, referenced_by)

        to_end = association.end_for_role(navigation.to_role)
        if to_end is None:
            raise UnknownAssociationError(navigation.relationship, referenced_by, f"has no end with role '{navigation.to_role}'")
        from_end = association.end_for_role(navigation.from_role)

        self._check_navigation_target(to_end.type_name, referenced_by)
        return ResolvedNavigation(
            navigation=navigation,
            declaring_type=entity_type.name,
            target=to_end.type_name,
            target_multiplicity=to_end.multiplicity,
            source_multiplicity=from_end.multiplicity if from_end else None,
            association=association.name,
        )

    def _check_navigation_target(self, target: str, referenced_by: str) -> None:
        if target in self.schema.entity_types:
            return
        if self.schema.lookup(target) is not None:
            raise UnknownTypeError(target, referenced_by, "is not an entity type and cannot be a navigation target")
        raise UnknownTypeError(target, referenced_by)
