"""Turn raw model output into a list of JSON records.

Models often wrap the requested array in prose, markdown fences or
reasoning blocks. The parser keeps the text between the first ``[`` and
the last ``]`` and applies no schema knowledge; that is the validator's job.
"""

import json
import logging
import re
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)

_THINK_BLOCK = re.compile(r"<think>.*?</think>", re.DOTALL)


class ParseErrorKind(str, Enum):
    NO_JSON_FOUND = "NoJsonFound"
    MALFORMED_JSON = "MalformedJson"
    UNEXPECTED_SHAPE = "UnexpectedShape"


class ParseError(Exception):
    """The model output does not contain a usable JSON array of objects."""

    def __init__(self, kind: ParseErrorKind, detail: str = ""):
        self.kind = kind
        self.detail = detail
        super().__init__(f"{kind.value}: {detail}" if detail else kind.value)


def parse_response(raw: str) -> list[dict[str, Any]]:
    """Parse raw model output into records, preserving order and keys.

    Raises ParseError (NoJsonFound, MalformedJson or UnexpectedShape).
    """
    # Reasoning models may quote JSON-like text inside <think> blocks
    cleaned = _THINK_BLOCK.sub("", raw or "")

    start = cleaned.find("[")
    if start == -1:
        logger.warning("No JSON array in model response: %s", cleaned[:200])
        raise ParseError(ParseErrorKind.NO_JSON_FOUND, "response contains no '['")

    end = cleaned.rfind("]")
    if end < start:
        logger.warning("Unterminated JSON array in model response: %s", cleaned[:200])
        raise ParseError(
            ParseErrorKind.MALFORMED_JSON,
            "no closing ']' after the first '[' (truncated response?)",
        )

    try:
        parsed = json.loads(cleaned[start:end + 1])
    except (json.JSONDecodeError, RecursionError) as e:
        # Runaway nesting exhausts the decoder stack
        logger.warning("Malformed JSON in model response: %s", e)
        raise ParseError(ParseErrorKind.MALFORMED_JSON, str(e)) from e

    # The slice is bracketed, so a successful decode is always a list
    for position, item in enumerate(parsed):
        if not isinstance(item, dict):
            raise ParseError(
                ParseErrorKind.UNEXPECTED_SHAPE,
                f"element {position} is {type(item).__name__}, expected an object",
            )

    return [dict(item) for item in parsed]
