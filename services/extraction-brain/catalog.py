"""Built-in extraction schemas seeded into the registry at service startup."""

import logging

from schema_registry import DuplicateSchemaError, FieldKind, FieldSpec, Schema, SchemaRegistry

logger = logging.getLogger(__name__)

SANCTIONS = Schema(
    name="sanctions",
    fields=(
        FieldSpec(
            name="name",
            kind=FieldKind.STRING,
            required=True,
            description="family name of the sanctioned person",
        ),
        FieldSpec(
            name="sanction",
            kind=FieldKind.STRING,
            required=True,
            description="the sanction imposed, e.g. Reprimand, Suspension",
        ),
        FieldSpec(
            name="date",
            kind=FieldKind.DATE,
            required=True,
            description="date the sanction was decided",
        ),
        FieldSpec(
            name="description",
            kind=FieldKind.FREE_TEXT,
            description="short summary of the facts behind the sanction",
        ),
    ),
)

GIFTS = Schema(
    name="gifts",
    fields=(
        FieldSpec(
            name="recipient",
            kind=FieldKind.STRING,
            required=True,
            description="person who received the gift or invitation",
        ),
        FieldSpec(
            name="donor",
            kind=FieldKind.STRING,
            required=True,
            description="person or organisation that offered it",
        ),
        FieldSpec(
            name="description",
            kind=FieldKind.FREE_TEXT,
            description="what was offered",
        ),
        FieldSpec(
            name="value",
            kind=FieldKind.NUMBER,
            description="estimated value as a plain number, no currency sign",
        ),
        FieldSpec(
            name="date",
            kind=FieldKind.DATE,
            required=True,
            description="date the gift was received",
        ),
    ),
)

BUILTIN_SCHEMAS: tuple[Schema, ...] = (SANCTIONS, GIFTS)


def seed_registry(registry: SchemaRegistry) -> list[str]:
    """Register every built-in schema not already present. Returns the names added."""
    added = []
    for schema in BUILTIN_SCHEMAS:
        try:
            registry.register(schema)
        except DuplicateSchemaError:
            logger.info("Schema %s already registered, keeping existing definition", schema.name)
            continue
        added.append(schema.name)
    return added
