"""
Analyzer module.

Contains inheritance flattening, reference resolution and the resolved
model consumed by the backends.
"""

from __future__ import annotations

from .resolved import (
    PropertyKind,
    ResolvedModel,
    ResolvedNavigation,
    ResolvedProperty,
    ResolvedType,
)
from .resolver import ModelResolver

__all__ = [
    "ModelResolver",
    "PropertyKind",
    "ResolvedModel",
    "ResolvedNavigation",
    "ResolvedProperty",
    "ResolvedType",
]
