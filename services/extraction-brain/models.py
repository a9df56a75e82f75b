"""Pydantic models for extraction requests and reports."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, computed_field

from response_parser import ParseErrorKind
from schema_registry import FieldSpec


class ExtractionRequest(BaseModel):
    """One prompt ready to send. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    schema_name: str
    fields: tuple[FieldSpec, ...]
    source_text: str = ""
    attachment: str | None = None
    instruction: str
    prompt: str


class FailureKind(str, Enum):
    MISSING_FIELD = "MissingField"
    INVALID_DATE = "InvalidDate"
    INVALID_NUMBER = "InvalidNumber"
    INVALID_VALUE = "InvalidValue"
    UNEXPECTED_FIELD = "UnexpectedField"


class FieldFailure(BaseModel):
    record_index: int
    field: str
    kind: FailureKind
    reason: str
    fatal: bool = True


class ValidatedRecord(BaseModel):
    index: int
    values: dict[str, Any]
    valid: bool
    failures: list[FieldFailure] = []


class ParseDiagnostic(BaseModel):
    kind: ParseErrorKind
    detail: str = ""


class ExtractionReport(BaseModel):
    """Complete outcome of one extraction call."""

    schema_name: str
    records: list[ValidatedRecord] = []
    failures: list[FieldFailure] = []
    parse_error: ParseDiagnostic | None = None
    raw_response: str = ""
    processing_time_ms: int = 0

    @computed_field
    @property
    def total(self) -> int:
        return len(self.records)

    @computed_field
    @property
    def valid_count(self) -> int:
        return sum(1 for record in self.records if record.valid)

    @computed_field
    @property
    def invalid_count(self) -> int:
        return self.total - self.valid_count

    @property
    def valid_records(self) -> list[ValidatedRecord]:
        return [record for record in self.records if record.valid]
