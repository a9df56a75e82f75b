"""Shared test fixtures for extraction brain tests."""

import json
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# Add parent directory to path so we can import the modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from catalog import GIFTS, SANCTIONS
from schema_registry import SchemaRegistry


@pytest.fixture
def registry() -> SchemaRegistry:
    """Fresh registry holding the built-in schemas."""
    reg = SchemaRegistry()
    reg.register(SANCTIONS)
    reg.register(GIFTS)
    return reg


@pytest.fixture
def sanctions_records() -> list[dict]:
    return [
        {
            "name": "Doe",
            "sanction": "Reprimand",
            "date": "2025-03-10",
            "description": "Failed to disclose a conflict of interest.",
        },
        {
            "name": "Roe",
            "sanction": "Suspension",
            "date": "2025-06-01",
            "description": "Repeated absence from committee sessions.",
        },
    ]


@pytest.fixture
def mock_sanctions_response(sanctions_records: list[dict]) -> str:
    """Mock model response: a bare JSON array."""
    return json.dumps(sanctions_records)


@pytest.fixture
def mock_markdown_response(sanctions_records: list[dict]) -> str:
    """Mock model response wrapped in a markdown code fence."""
    return "```json\n" + json.dumps(sanctions_records, indent=2) + "\n```"


@pytest.fixture
def mock_preamble_response(sanctions_records: list[dict]) -> str:
    """Mock model response with prose before and after the array."""
    return "Here you go:\n" + json.dumps(sanctions_records) + "\nThanks!"


@pytest.fixture
def model_call():
    """Model-call capability stub; set ``return_value`` or ``side_effect`` per test."""
    return MagicMock()
