"""Extraction schemas and the in-memory registry they are looked up from.

A schema is the named, ordered list of fields one extraction task expects
back from the model. Schemas are registered once at startup and read
concurrently afterwards.
"""

import logging
import threading
from collections.abc import Iterable, Mapping, Sequence
from enum import Enum

from pydantic import BaseModel, ConfigDict, model_validator

logger = logging.getLogger(__name__)


class FieldKind(str, Enum):
    STRING = "string"
    DATE = "date"
    NUMBER = "number"
    FREE_TEXT = "free-text"


class FieldSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    kind: FieldKind
    required: bool = False
    description: str = ""


class Schema(BaseModel):
    """Named, ordered set of expected output fields."""

    model_config = ConfigDict(frozen=True)

    name: str
    fields: tuple[FieldSpec, ...]

    @model_validator(mode="after")
    def _check_fields(self) -> "Schema":
        if not self.name.strip():
            raise ValueError("schema name must not be empty")
        if not self.fields:
            raise ValueError(f"schema {self.name!r} declares no fields")

        seen: set[str] = set()
        for field in self.fields:
            if field.name in seen:
                raise ValueError(f"schema {self.name!r} declares field {field.name!r} twice")
            seen.add(field.name)

        if not any(field.required for field in self.fields):
            raise ValueError(f"schema {self.name!r} needs at least one required field")
        return self

    @property
    def field_names(self) -> list[str]:
        return [field.name for field in self.fields]

    @property
    def date_fields(self) -> list[str]:
        return [field.name for field in self.fields if field.kind is FieldKind.DATE]

    def get_field(self, name: str) -> FieldSpec | None:
        for field in self.fields:
            if field.name == name:
                return field
        return None

    @classmethod
    def from_definitions(
        cls,
        name: str,
        definitions: Iterable[Mapping | Sequence],
    ) -> "Schema":
        """Build a schema from ``{name, kind, required}`` mappings or
        ``(name, kind, required)`` tuples."""
        fields = []
        for definition in definitions:
            if isinstance(definition, Mapping):
                fields.append(FieldSpec(**definition))
            else:
                field_name, kind, *rest = definition
                fields.append(FieldSpec(
                    name=field_name,
                    kind=kind,
                    required=bool(rest[0]) if rest else False,
                ))
        return cls(name=name, fields=tuple(fields))


class DuplicateSchemaError(Exception):
    """A schema with the same name is already registered."""


class UnknownSchemaError(KeyError):
    """No schema is registered under the requested name."""

    def __str__(self) -> str:
        return f"Unknown extraction schema: {self.args[0]}"


SchemaNotFoundError = UnknownSchemaError


class SchemaRegistry:
    """Name -> schema mapping. Writes are locked, lookups are plain dict reads."""

    def __init__(self):
        self._schemas: dict[str, Schema] = {}
        self._lock = threading.Lock()

    def register(self, schema: Schema) -> None:
        with self._lock:
            if schema.name in self._schemas:
                raise DuplicateSchemaError(f"Schema already registered: {schema.name}")
            self._schemas = {**self._schemas, schema.name: schema}
        logger.info("Registered schema %s (%d fields)", schema.name, len(schema.fields))

    def get(self, name: str) -> Schema:
        try:
            return self._schemas[name]
        except KeyError:
            raise UnknownSchemaError(name) from None

    def names(self) -> list[str]:
        return list(self._schemas)

    def schemas(self) -> list[Schema]:
        return list(self._schemas.values())

    def __contains__(self, name: object) -> bool:
        return name in self._schemas

    def __len__(self) -> int:
        return len(self._schemas)


# Process-wide registry, seeded by the service at startup
registry = SchemaRegistry()
