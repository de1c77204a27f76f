"""
Error taxonomy for the generation pipeline.

Every stage fails fast on the first defect it meets. Each exception carries
the offending names as attributes so callers can report them without
re-reading the source document.
"""

from __future__ import annotations


class GenerationError(Exception):
    """Base class for every failure raised by ``generate``."""


class ParseError(GenerationError):
    """Raised when the CSDL document cannot be turned into a Schema."""


class MalformedDocumentError(ParseError):
    """The document is not well-formed XML, or a required attribute is unusable."""

    def __init__(self, message: str, element: str | None = None, line: int | None = None):
        self.element = element
        self.line = line
        if line is not None:
            message = f"{message} (line {line})"
        super().__init__(message)


class UnsupportedElementError(ParseError):
    """An EDM element the generator does not understand appeared in a structural position."""

    def __init__(self, element: str, parent: str, line: int | None = None):
        self.element = element
        self.parent = parent
        self.line = line
        message = f"Unsupported element <{element}> inside <{parent}>"
        if line is not None:
            message = f"{message} (line {line})"
        super().__init__(message)


class ResolutionError(GenerationError):
    """Raised when cross-references in a Schema cannot be resolved."""


class CyclicInheritanceError(ResolutionError):
    def __init__(self, cycle: list[str]):
        self.cycle = tuple(cycle)
        super().__init__(f"Cyclic inheritance: {' -> '.join(self.cycle)}")


class DuplicatePropertyError(ResolutionError):
    def __init__(self, type_name: str, property_name: str, declared_in: str):
        self.type_name = type_name
        self.property_name = property_name
        self.declared_in = declared_in
        super().__init__(f"Property '{property_name}' of type '{type_name}' is already declared by '{declared_in}'")


class UnknownTypeError(ResolutionError):
    def __init__(self, type_name: str, referenced_by: str, reason: str = "is not defined"):
        self.type_name = type_name
        self.referenced_by = referenced_by
        super().__init__(f"Type '{type_name}' referenced by '{referenced_by}' {reason}")


class UnknownAssociationError(ResolutionError):
    def __init__(self, association_name: str, referenced_by: str, reason: str = "is not defined"):
        self.association_name = association_name
        self.referenced_by = referenced_by
        super().__init__(f"Association '{association_name}' referenced by '{referenced_by}' {reason}")


class InvalidKeyError(ResolutionError):
    def __init__(self, type_name: str, property_name: str):
        self.type_name = type_name
        self.property_name = property_name
        super().__init__(f"Key property '{property_name}' is not a property of '{type_name}' or its base types")


class DuplicateEnumMemberError(ResolutionError):
    def __init__(self, type_name: str, member_name: str, value: int):
        self.type_name = type_name
        self.member_name = member_name
        self.value = value
        super().__init__(f"Enum member '{member_name}' = {value} of '{type_name}' duplicates an earlier member")


class EmitError(GenerationError):
    """Raised when the resolved model cannot be expressed in the target language."""


class UnsupportedPrimitiveError(EmitError):
    def __init__(self, kind: str, type_name: str, property_name: str | None = None):
        self.kind = kind
        self.type_name = type_name
        self.property_name = property_name
        where = f"{type_name}.{property_name}" if property_name else type_name
        super().__init__(f"Unsupported EDM primitive '{kind}' used by '{where}'")
