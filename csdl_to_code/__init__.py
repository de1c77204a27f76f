"""CSDL to Code Generator

A Python package for generating Rust data structures from OData CSDL
metadata documents. Supports navigation properties, run-time reflection
metadata and serde serialization support, each configurable.
"""

__version__ = "1.0.0"

from .pipeline import (
    AtomicWriter,
    CyclicInheritanceError,
    DuplicateEnumMemberError,
    DuplicatePropertyError,
    EmitError,
    GenerationError,
    GenerationOptions,
    InvalidKeyError,
    MalformedDocumentError,
    ParseError,
    PipelineGenerator,
    ResolutionError,
    UnknownAssociationError,
    UnknownTypeError,
    UnsupportedElementError,
    UnsupportedPrimitiveError,
    generate,
)

__all__ = [
    "generate",
    "PipelineGenerator",
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
