"""
Dialog document parser.

Reads JSON dialog documents, validates them against the bundled
dialog schema, then builds immutable DialogDefinition models.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

import jsonschema
from pydantic import ValidationError

from narrative.dialog.models import DialogDefinition

SCHEMA_PATH = Path(__file__).parent / "schemas" / "dialog.schema.json"


class DialogParseError(Exception):
    """A document could not be turned into a DialogDefinition."""

    def __init__(self, source: str, message: str):
        super().__init__(f"{source}: {message}")
        self.source = source
        self.message = message


class DialogParser:
    """
    Parses dialog documents.

    Usage:
        parser = DialogParser()
        definition = parser.parse_file("Dialogs/en/intro.json")
    """

    def __init__(self, schema_path: Path | str = SCHEMA_PATH):
        self.logger = logging.getLogger(__name__)
        with open(schema_path, "r", encoding="utf-8") as f:
            self._schema: dict[str, Any] = json.load(f)
        self._validator = jsonschema.Draft7Validator(self._schema)

    def parse_data(self, data: Any, source: str = "<data>") -> DialogDefinition:
        """Validate an already decoded document."""
        error = jsonschema.exceptions.best_match(self._validator.iter_errors(data))
        if error is not None:
            location = "/".join(str(p) for p in error.absolute_path) or "<root>"
            raise DialogParseError(source, f"schema error at {location}: {error.message}")

        try:
            return DialogDefinition.model_validate(data)
        except ValidationError as e:
            raise DialogParseError(source, f"invalid dialog data: {e.error_count()} error(s): {e}") from e

    def parse_string(self, content: str, source: str = "<string>") -> DialogDefinition:
        if not content or not content.strip():
            raise DialogParseError(source, "document is empty")
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise DialogParseError(source, f"malformed JSON: {e}") from e
        return self.parse_data(data, source)

    def parse_file(self, path: Path | str) -> DialogDefinition:
        path = Path(path)
        try:
            # utf-8-sig tolerates files saved with a byte order mark
            content = path.read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError) as e:
            raise DialogParseError(str(path), f"cannot read file: {e}") from e
        return self.parse_string(content, str(path))

    def load_file(self, path: Path | str) -> Optional[DialogDefinition]:
        """Parse a file, logging and returning None on failure."""
        try:
            return self.parse_file(path)
        except DialogParseError as e:
            self.logger.error(f"Failed to load dialog {e.source}: {e.message}")
            return None
