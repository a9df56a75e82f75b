"""Extraction orchestrator: build prompt, call the model once, parse, validate.

The model call is injected. Problems with the shape or content of the
response end up in the report; transport failures propagate unchanged.
"""

import logging
import time
from typing import Protocol

from models import ExtractionReport, ExtractionRequest, ParseDiagnostic
from prompts import build_request
from response_parser import ParseError, parse_response
from schema_registry import SchemaRegistry
from schema_registry import registry as default_registry
from validator import validate_records

logger = logging.getLogger(__name__)


class ModelCallError(Exception):
    """The model provider could not be reached or rejected the request."""

    def __init__(self, status: int | None, message: str):
        self.status = status
        self.message = message
        super().__init__(f"[{status}] {message}" if status is not None else message)


class ModelCall(Protocol):
    def __call__(self, request: ExtractionRequest) -> str:
        """Send the request, return the raw response text. Raises ModelCallError."""
        ...


def extract(
    schema_name: str,
    source_text: str,
    model_call: ModelCall,
    attachment: str | None = None,
    instruction: str | None = None,
    registry: SchemaRegistry | None = None,
) -> ExtractionReport:
    """Run one extraction: exactly one model call, no retries."""
    start = time.monotonic()
    registry = registry if registry is not None else default_registry

    schema = registry.get(schema_name)
    request = build_request(schema, source_text, attachment, instruction, registry=registry)
    logger.info(
        "Extracting schema=%s text=%d chars attachment=%s",
        schema_name, len(request.source_text), request.attachment is not None,
    )

    raw = model_call(request)

    try:
        records = parse_response(raw)
    except ParseError as e:
        elapsed_ms = int((time.monotonic() - start) * 1000)
        logger.warning("Could not parse model response for schema %s: %s", schema_name, e)
        return ExtractionReport(
            schema_name=schema_name,
            parse_error=ParseDiagnostic(kind=e.kind, detail=e.detail),
            raw_response=raw,
            processing_time_ms=elapsed_ms,
        )

    report = validate_records(records, schema)
    return report.model_copy(update={
        "raw_response": raw,
        "processing_time_ms": int((time.monotonic() - start) * 1000),
    })
