"""JSON schema validation for uploaded metadata documents."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from jsonschema import Draft7Validator
from jsonschema.exceptions import SchemaError
from jsonschema.validators import validator_for

from gypsum_indexer.errors import InvalidMetadata


@dataclass
class SchemaRegistry:
    """Schemas resolved from a directory, keyed by the document's ``$schema``."""

    root: Path

    def __post_init__(self) -> None:
        self._validators: dict[str, Any] = {}

    def _validator(self, name: str) -> Any:
        if name in self._validators:
            return self._validators[name]
        path = (self.root / name).resolve()
        if not path.is_relative_to(self.root.resolve()) or not path.is_file():
            raise FileNotFoundError(name)
        schema = json.loads(path.read_text(encoding="utf-8"))
        cls = validator_for(schema, default=Draft7Validator)
        cls.check_schema(schema)
        validator = cls(schema)
        self._validators[name] = validator
        return validator

    def validate(self, key: str, document: Any) -> None:
        name = document.get("$schema") if isinstance(document, dict) else None
        if not isinstance(name, str) or not name:
            raise InvalidMetadata(key, "document has no '$schema' property")
        try:
            validator = self._validator(name)
        except (OSError, json.JSONDecodeError, SchemaError) as e:
            raise InvalidMetadata(key, f"cannot load schema '{name}': {e}") from e
        errors = sorted(validator.iter_errors(document), key=lambda e: [str(p) for p in e.path])
        if errors:
            messages = "; ".join(error.message for error in errors)
            raise InvalidMetadata(key, f"schema validation failed for {name}: {messages}")
