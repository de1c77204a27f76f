"""
Atomic file writer for generated code.

Ensures that an interrupted or rejected write never leaves a half
written output file behind.
"""

from __future__ import annotations

import logging
import tempfile
from collections.abc import Callable
from pathlib import Path

logger = logging.getLogger(__name__)


class AtomicWriter:
    """Handles atomic file writes with validation.

    Uses a two-phase commit approach:
    1. Write to a temporary file in the same directory
    2. Validate the content
    3. Atomically replace the target file
    """

    def __init__(self, validate_rust: Callable[[str], None] | None = None):
        """Initialize the atomic writer.

        Args:
            validate_rust: Optional validation function for Rust code
        """
        self._validate_rust = validate_rust or self._default_validate_rust

    def write(self, path: Path, content: str, validate: bool = True) -> None:
        """Write content to file atomically.

        Args:
            path: Target file path
            content: Content to write
            validate: Whether to validate before finalizing

        Raises:
            ValueError: If validation fails
            OSError: If file operations fail
        """
        path.parent.mkdir(parents=True, exist_ok=True)

        # Same directory ensures atomic rename on the same filesystem
        temp_fd, temp_path_str = tempfile.mkstemp(
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            text=True,
        )
        temp_path = Path(temp_path_str)

        try:
            with open(temp_fd, "w", encoding="utf-8") as f:
                f.write(content)

            if validate:
                self._validate_rust(content)

            temp_path.replace(path)
            logger.debug("Wrote %d characters to %s", len(content), path)

        except Exception:
            if temp_path.exists():
                try:
                    temp_path.unlink()
                except OSError:
                    pass  # Best effort cleanup
            raise

    def _default_validate_rust(self, content: str) -> None:
        """Default Rust validation: structural checks only, no compilation.

        Comment lines are not counted: doc comments repeat facet values verbatim.

        Raises:
            ValueError: If validation fails
        """
        code = [line for line in content.splitlines() if not line.lstrip().startswith("//")]
        open_braces = sum(line.count("{") for line in code)
        close_braces = sum(line.count("}") for line in code)
        if open_braces != close_braces:
            raise ValueError(f"Generated Rust code has unbalanced braces: {open_braces} open, {close_braces} close")
