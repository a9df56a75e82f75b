"""Per-record schema validation and kind coercion.

Each record is checked on its own so one bad record never hides the
good ones. Failures on required fields make a record invalid; failures on
optional fields and unexpected keys are reported but do not.
"""

import logging
import math
import re
from datetime import date, datetime
from typing import Any

from models import ExtractionReport, FailureKind, FieldFailure, ValidatedRecord
from schema_registry import FieldKind, FieldSpec, Schema

logger = logging.getLogger(__name__)

_ISO_DATE = re.compile(r"\d{4}-\d{2}-\d{2}", re.ASCII)
_DECIMAL = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)", re.ASCII)


class CoercionError(ValueError):
    def __init__(self, kind: FailureKind, reason: str):
        self.kind = kind
        self.reason = reason
        super().__init__(reason)


def coerce_string(value: Any) -> str:
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    raise CoercionError(FailureKind.INVALID_VALUE, f"expected text, got {type(value).__name__}")


def coerce_date(value: Any) -> date:
    """Strict yyyy-mm-dd. No alternate formats are tried."""
    if not isinstance(value, str) or not _ISO_DATE.fullmatch(value.strip()):
        raise CoercionError(FailureKind.INVALID_DATE, f"{value!r} is not in yyyy-mm-dd format")
    try:
        return datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except ValueError:
        raise CoercionError(FailureKind.INVALID_DATE, f"{value!r} is not a calendar date") from None


def coerce_number(value: Any) -> int | float:
    """JSON numbers pass through; decimal strings become int, or float when
    they carry a decimal point. Float rounding (e.g. "0.10" -> 0.1) is accepted:
    values are read back by people, not summed as money.
    """
    if isinstance(value, bool):
        raise CoercionError(FailureKind.INVALID_NUMBER, f"{value!r} is a boolean, not a number")
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            raise CoercionError(FailureKind.INVALID_NUMBER, f"{value!r} is not a finite number")
        return value
    if isinstance(value, str) and _DECIMAL.fullmatch(value.strip()):
        text = value.strip()
        return float(text) if "." in text else int(text)
    raise CoercionError(FailureKind.INVALID_NUMBER, f"{value!r} is not a decimal number")


_COERCERS = {
    FieldKind.STRING: coerce_string,
    FieldKind.DATE: coerce_date,
    FieldKind.NUMBER: coerce_number,
    FieldKind.FREE_TEXT: lambda value: value,
}


def validate_record(index: int, record: dict[str, Any], schema: Schema) -> ValidatedRecord:
    values: dict[str, Any] = {}
    failures: list[FieldFailure] = []

    for field in schema.fields:
        raw = record.get(field.name)
        if raw is None:
            # Missing key and JSON null are treated alike
            if field.required:
                failures.append(_failure(index, field, FailureKind.MISSING_FIELD, "required field is missing"))
            continue

        try:
            values[field.name] = _COERCERS[field.kind](raw)
        except CoercionError as e:
            failures.append(_failure(index, field, e.kind, e.reason))

    for key, raw in record.items():
        if schema.get_field(key) is None:
            values[key] = raw
            failures.append(FieldFailure(
                record_index=index,
                field=key,
                kind=FailureKind.UNEXPECTED_FIELD,
                reason="key is not part of the schema",
                fatal=False,
            ))

    return ValidatedRecord(
        index=index,
        values=values,
        valid=not any(failure.fatal for failure in failures),
        failures=failures,
    )


def validate_records(records: list[dict[str, Any]], schema: Schema) -> ExtractionReport:
    """Validate parsed records against the schema and collect every failure."""
    validated = [validate_record(index, record, schema) for index, record in enumerate(records)]
    failures = [failure for record in validated for failure in record.failures]

    report = ExtractionReport(schema_name=schema.name, records=validated, failures=failures)
    logger.info(
        "Validated %d records for schema %s: %d valid, %d invalid",
        report.total, schema.name, report.valid_count, report.invalid_count,
    )
    return report


def _failure(index: int, field: FieldSpec, kind: FailureKind, reason: str) -> FieldFailure:
    return FieldFailure(
        record_index=index,
        field=field.name,
        kind=kind,
        reason=reason,
        fatal=field.required,
    )
