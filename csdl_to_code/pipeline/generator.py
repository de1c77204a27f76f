"""
Pipeline generator: CSDL text in, Rust source out.

Runs the three phases strictly in sequence. Each phase's output is
immutable and the first error aborts the run, so either a complete
declaration set is produced or nothing is.
"""

from __future__ import annotations

import logging

from .analyzer import ModelResolver, ResolvedModel
from .backends import RustBackend
from .config import GenerationOptions
from .schema_ast import Schema, SchemaParser

logger = logging.getLogger(__name__)


class PipelineGenerator:
    """Generates Rust code from an OData CSDL document."""

    def __init__(self, xml_text: str | bytes, options: GenerationOptions | None = None, command_line: str | None = None):
        """
        Initialize the generator.

        Args:
            xml_text: The CSDL metadata document
            options: Generation options (defaults to everything enabled)
            command_line: Command line recorded in the generation comment
        """
        self.xml_text = xml_text
        self.options = options if options is not None else GenerationOptions()
        self.command_line = command_line

        self.parser = SchemaParser()
        self.resolver = ModelResolver()
        self.backend = RustBackend(self.options, command_line)

    def parse(self) -> Schema:
        """Phase 1: parse the document."""
        return self.parser.parse(self.xml_text)

    def resolve(self, schema: Schema) -> ResolvedModel:
        """Phase 2: resolve inheritance and references."""
        return self.resolver.resolve(schema)

    def generate(self) -> str:
        """
        Run the full pipeline.

        Returns:
            The generated Rust source

        Raises:
            GenerationError: If any phase fails
        """
        logger.debug("Generating with options %s", self.options.to_dict())
        schema = self.parse()
        model = self.resolve(schema)
        return self.backend.generate(model)


def generate(xml_text: str | bytes, options: GenerationOptions | None = None) -> str:
    """Translate a CSDL document into Rust declarations.

    Raises:
        GenerationError: A ParseError, ResolutionError or EmitError
    """
    return PipelineGenerator(xml_text, options).generate()
