"""Tests for extraction prompt construction."""

import sys
from pathlib import Path

import pytest
from pydantic import ValidationError

sys.path.insert(0, str(Path(__file__).parent.parent))

from catalog import GIFTS, SANCTIONS
from prompts import DEFAULT_INSTRUCTION, InvalidRequestError, build_request
from schema_registry import FieldKind, FieldSpec, Schema, SchemaRegistry, UnknownSchemaError

SOURCE = "On 10 March 2025 the board reprimanded Mr Doe for failing to disclose a conflict."


class TestBuildRequest:
    def test_fields_listed_in_declared_order(self, registry: SchemaRegistry):
        request = build_request(GIFTS, SOURCE, registry=registry)
        positions = [request.prompt.index(f'"{name}"') for name in GIFTS.field_names]
        assert positions == sorted(positions)

    def test_only_schema_fields_listed(self, registry: SchemaRegistry):
        request = build_request(SANCTIONS, SOURCE, registry=registry)
        listed = [line for line in request.prompt.splitlines() if line.startswith('- "')]
        assert len(listed) == len(SANCTIONS.fields)

    def test_date_format_stated(self, registry: SchemaRegistry):
        request = build_request(SANCTIONS, SOURCE, registry=registry)
        assert "yyyy-mm-dd" in request.prompt
        assert 'Write every date ("date")' in request.prompt

    def test_no_date_rule_without_date_fields(self):
        schema = Schema(name="people", fields=(FieldSpec(name="who", kind=FieldKind.STRING, required=True),))
        reg = SchemaRegistry()
        reg.register(schema)
        request = build_request(schema, SOURCE, registry=reg)
        assert "Write every date" not in request.prompt

    def test_json_only_instruction(self, registry: SchemaRegistry):
        request = build_request(SANCTIONS, SOURCE, registry=registry)
        assert "Output only the JSON array, no explanatory text." in request.prompt

    def test_source_text_included(self, registry: SchemaRegistry):
        request = build_request(SANCTIONS, SOURCE, registry=registry)
        assert request.prompt.endswith(SOURCE)
        assert request.source_text == SOURCE
        assert request.schema_name == "sanctions"
        assert request.fields == SANCTIONS.fields

    def test_default_and_custom_instruction(self, registry: SchemaRegistry):
        request = build_request(SANCTIONS, SOURCE, registry=registry)
        assert request.instruction == DEFAULT_INSTRUCTION
        assert request.prompt.startswith(DEFAULT_INSTRUCTION.splitlines()[0])

        custom = "List every disciplinary sanction in this French report. {not a placeholder}"
        request = build_request(SANCTIONS, SOURCE, instruction=custom, registry=registry)
        assert request.prompt.startswith(custom)

    def test_attachment_without_text(self, registry: SchemaRegistry):
        request = build_request(SANCTIONS, "", attachment="/data/scan-01.png", registry=registry)
        assert request.attachment == "/data/scan-01.png"
        assert "attached" in request.prompt
        assert "SOURCE TEXT" not in request.prompt

    def test_empty_attachment_ignored(self, registry: SchemaRegistry):
        request = build_request(SANCTIONS, SOURCE, attachment="", registry=registry)
        assert request.attachment is None
        assert "attached" not in request.prompt

        with pytest.raises(InvalidRequestError):
            build_request(SANCTIONS, "", attachment="", registry=registry)

    def test_empty_text_without_attachment_rejected(self, registry: SchemaRegistry):
        with pytest.raises(InvalidRequestError):
            build_request(SANCTIONS, "   \n", registry=registry)

    def test_unregistered_schema_rejected(self):
        with pytest.raises(UnknownSchemaError):
            build_request(SANCTIONS, SOURCE, registry=SchemaRegistry())

    def test_shadowing_schema_rejected(self, registry: SchemaRegistry):
        impostor = Schema(name="sanctions", fields=(FieldSpec(name="x", kind=FieldKind.STRING, required=True),))
        with pytest.raises(UnknownSchemaError):
            build_request(impostor, SOURCE, registry=registry)

    def test_request_is_immutable(self, registry: SchemaRegistry):
        request = build_request(SANCTIONS, SOURCE, registry=registry)
        with pytest.raises(ValidationError):
            request.prompt = "something else"
