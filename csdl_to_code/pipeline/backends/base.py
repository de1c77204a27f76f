"""
Base class for code generation backends.

Defines the interface that all language-specific backends must implement.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

import jinja2

from ..analyzer.resolved import ResolvedModel, ResolvedProperty
from ..config import GenerationOptions


class CodeBackend(ABC):
    """Abstract base class for code generation backends."""

    # Type mapping from EDM primitive kinds to language types
    TYPE_MAP: dict[str, str] = {}

    # Template directory name
    TEMPLATE_LANG: str = ""

    # File extension
    FILE_EXTENSION: str = ""

    GENERATOR_NAME = "csdl_to_code"

    def __init__(self, options: GenerationOptions, command_line: str | None = None):
        """
        Initialize the backend.

        Args:
            options: Generation options
            command_line: Command line to record in the generation comment
        """
        self.options = options
        self.command_line = command_line
        self._setup_templates()

    def _setup_templates(self) -> None:
        """Set up Jinja2 templates."""
        template_dir = Path(__file__).parent.parent.parent / "templates" / self.TEMPLATE_LANG
        self.jinja_env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(template_dir)),
            lstrip_blocks=True,
            trim_blocks=True,
            keep_trailing_newline=True,
        )

        self.prefix_template = self.jinja_env.get_template(f"prefix.{self.FILE_EXTENSION}.jinja2")
        self.enum_template = self.jinja_env.get_template(f"enum.{self.FILE_EXTENSION}.jinja2")
        self.struct_template = self.jinja_env.get_template(f"struct.{self.FILE_EXTENSION}.jinja2")
        self.suffix_template = self.jinja_env.get_template(f"suffix.{self.FILE_EXTENSION}.jinja2")

    @abstractmethod
    def generate(self, model: ResolvedModel) -> str:
        """
        Generate code from the resolved model.

        Args:
            model: The resolved model

        Returns:
            Generated code as a string
        """

    @abstractmethod
    def translate_type(self, prop: ResolvedProperty, owner: str) -> str:
        """
        Translate a resolved property to a language-specific type string.

        Args:
            prop: The resolved property
            owner: Qualified name of the type being emitted

        Returns:
            Language-specific type string
        """

    def _get_comment_prefix(self) -> str:
        """Get the comment prefix for the language."""
        return "//"

    def _generation_comment(self) -> list[str]:
        """Lines of the header comment, without comment markers."""
        if not self.options.add_generation_comment:
            return []

        lines = [f"Code automatically generated by {self.GENERATOR_NAME} from OData CSDL metadata."]
        if self.command_line:
            lines.append(f"Command: {self.command_line}")
        lines.append("Any changes made to this file may be overwritten by future code generation runs!")
        return lines
