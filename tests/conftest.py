"""
Pytest configuration and fixtures for survey import tests.

The pipeline is a pure function over in-memory text, so fixtures only need to
provide file content; nothing is created on disk or over the network.
"""

import json

import pytest

from survey_import.domain.imports.templates import (
    SAMPLE_CSV_TEMPLATE,
    SAMPLE_JSON_TEMPLATE,
    SAMPLE_TSV_TEMPLATE,
)


@pytest.fixture
def sample_csv_bytes() -> bytes:
    return SAMPLE_CSV_TEMPLATE.encode("utf-8")


@pytest.fixture
def sample_tsv_bytes() -> bytes:
    return SAMPLE_TSV_TEMPLATE.encode("utf-8")


@pytest.fixture
def sample_json_bytes() -> bytes:
    return json.dumps(SAMPLE_JSON_TEMPLATE, indent=2).encode("utf-8")
