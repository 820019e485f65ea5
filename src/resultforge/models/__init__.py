"""Canonical result model: records, collections and aggregated outcomes."""

from .record import Node, Record, RecordCollection, field_value
from .results import (
    RESULT_FAIL,
    RESULT_OK,
    RESULT_SKIP,
    DetailEntry,
    OutputArtifact,
    TestDescriptor,
    TestOutcome,
)

__all__ = [
    "RESULT_FAIL",
    "RESULT_OK",
    "RESULT_SKIP",
    "DetailEntry",
    "Node",
    "OutputArtifact",
    "Record",
    "RecordCollection",
    "TestDescriptor",
    "TestOutcome",
    "field_value",
]
