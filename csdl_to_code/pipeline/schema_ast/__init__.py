"""
Schema AST module.

Contains the node definitions and parser for OData CSDL documents.
"""

from __future__ import annotations

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
    TypeDef,
)
from .parser import SchemaParser

__all__ = [
    "Association",
    "AssociationEnd",
    "ComplexType",
    "EntitySet",
    "EntityType",
    "EnumMember",
    "EnumType",
    "Multiplicity",
    "NavigationProperty",
    "Property",
    "Schema",
    "TypeDef",
    "SchemaParser",
]
