"""Extraction prompt construction.

The prompt lists the schema's keys in declared order, pins the date format
and demands a bare JSON array, so the response parser has one shape to look for.
"""

from models import ExtractionRequest
from schema_registry import FieldKind, Schema, SchemaRegistry, UnknownSchemaError
from schema_registry import registry as default_registry

DATE_FORMAT_LABEL = "yyyy-mm-dd"

DEFAULT_INSTRUCTION = """You are extracting structured records from a document.
Find every record of the requested kind in the source and return them as a JSON array,
one object per record, in the order they appear in the source."""

_KIND_HINTS: dict[FieldKind, str] = {
    FieldKind.STRING: "short text",
    FieldKind.DATE: f"date in {DATE_FORMAT_LABEL} format",
    FieldKind.NUMBER: "plain decimal number, no currency sign or thousands separator",
    FieldKind.FREE_TEXT: "free text",
}

_JSON_SUFFIX = """

CRITICAL OUTPUT RULES:
- Output only the JSON array, no explanatory text.
- Do NOT include any thinking, preamble, explanation, or markdown formatting.
- Do NOT wrap in code fences. Just raw JSON.
- If a field is not present for a record, omit that key from the object.
- If the source contains no records, output []."""


class InvalidRequestError(ValueError):
    """The extraction request cannot be built from the given inputs."""


def build_request(
    schema: Schema,
    source_text: str,
    attachment: str | None = None,
    instruction: str | None = None,
    registry: SchemaRegistry | None = None,
) -> ExtractionRequest:
    """Compose the prompt for one extraction. Pure: never contacts the model."""
    registry = registry if registry is not None else default_registry

    if schema.name not in registry or registry.get(schema.name) != schema:
        raise UnknownSchemaError(schema.name)

    source_text = source_text or ""
    attachment = attachment or None
    if not source_text.strip() and attachment is None:
        raise InvalidRequestError("source text is empty and no attachment was supplied")

    instruction = instruction if instruction is not None else DEFAULT_INSTRUCTION

    return ExtractionRequest(
        schema_name=schema.name,
        fields=schema.fields,
        source_text=source_text,
        attachment=attachment,
        instruction=instruction,
        prompt=render_prompt(schema, source_text, instruction, has_attachment=attachment is not None),
    )


def render_prompt(
    schema: Schema,
    source_text: str,
    instruction: str,
    has_attachment: bool = False,
) -> str:
    lines = [instruction.strip(), "", "Use EXACTLY these keys, in this order:", ""]
    for field in schema.fields:
        line = f'- "{field.name}" ({_KIND_HINTS[field.kind]}, {"required" if field.required else "optional"})'
        if field.description:
            line += f": {field.description}"
        lines.append(line)

    date_fields = schema.date_fields
    if date_fields:
        names = ", ".join(f'"{name}"' for name in date_fields)
        lines += [
            "",
            f"Write every date ({names}) in {DATE_FORMAT_LABEL} format, "
            f"e.g. 2025-03-10. Convert dates written any other way.",
        ]

    prompt = "\n".join(lines) + _JSON_SUFFIX

    if has_attachment:
        prompt += "\n\nThe source document is attached."
    if source_text.strip():
        prompt += f"\n\nSOURCE TEXT:\n{source_text.strip()}"
    return prompt
