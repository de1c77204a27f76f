"""
Pipeline - OData CSDL to Rust code generator.

This module provides a multi-phase architecture for generating code
from OData metadata documents:

1. Phase 1 (Parser): Parse CSDL XML into a flat, name-keyed Schema
2. Phase 2 (Resolver): Flatten inheritance and resolve references into a ResolvedModel
3. Phase 3 (Backend): Render the resolved model as Rust source with Jinja2 templates
"""

from __future__ import annotations

from .config import GenerationOptions
from .errors import (
    CyclicInheritanceError,
    DuplicateEnumMemberError,
    DuplicatePropertyError,
    EmitError,
    GenerationError,
    InvalidKeyError,
    MalformedDocumentError,
    ParseError,
    ResolutionError,
    UnknownAssociationError,
    UnknownTypeError,
    UnsupportedElementError,
    UnsupportedPrimitiveError,
)
from .generator import PipelineGenerator, generate
from .writer import AtomicWriter

__all__ = [
    "PipelineGenerator",
    "generate",
    "GenerationOptions",
    "AtomicWriter",
    "GenerationError",
    "ParseError",
    "MalformedDocumentError",
    "UnsupportedElementError",
    "ResolutionError",
    "CyclicInheritanceError",
    "DuplicatePropertyError",
    "UnknownTypeError",
    "UnknownAssociationError",
    "InvalidKeyError",
    "DuplicateEnumMemberError",
    "EmitError",
    "UnsupportedPrimitiveError",
]
