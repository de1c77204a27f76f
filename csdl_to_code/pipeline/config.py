"""
Configuration for the code generator pipeline.

Every toggle defaults to enabled and maps one-to-one onto a negating
command-line flag (``--no-empty-string-is-null``, ``--no-expand``,
``--no-reflection``, ``--no-serde``).
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class GenerationOptions:
    """Configuration options for code generation."""

    # Deserialize "" into None for optional string fields
    coerce_empty_string_to_null: bool = True

    # Emit fields for $expand-able navigation properties
    include_navigation_properties: bool = True

    # Emit the OpenDataModel reflection trait and its implementations
    emit_reflection_metadata: bool = True

    # Emit serde derives and field attributes
    emit_serialization_support: bool = True

    # Add generation comment at top of file
    add_generation_comment: bool = True

    @staticmethod
    def from_dict(d: dict) -> GenerationOptions:
        """Create options from a dictionary, ignoring unknown keys.

        Raises:
            ValueError: If a known option is not a boolean
        """
        options = GenerationOptions()
        for k, v in d.items():
            if hasattr(options, k):
                if not isinstance(v, bool):
                    raise ValueError(f"Option '{k}' must be true or false, got {v!r}")
                setattr(options, k, v)
        return options

    def to_dict(self) -> dict:
        """Convert options to a dictionary."""
        return {
            "coerce_empty_string_to_null": self.coerce_empty_string_to_null,
            "include_navigation_properties": self.include_navigation_properties,
            "emit_reflection_metadata": self.emit_reflection_metadata,
            "emit_serialization_support": self.emit_serialization_support,
            "add_generation_comment": self.add_generation_comment,
        }
