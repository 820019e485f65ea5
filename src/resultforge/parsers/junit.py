"""JUnit XML adapter.

Extends the XUnit adapter with what JUnit reports carry on top of it:

- ordered ``<properties>`` key/value pairs per suite
- suite roll-up counters: elapsed ``time``, ``errors``, ``failures``, ``tests``

Counters come from the suite attributes when present and are computed from
the parsed cases otherwise.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import Any

from resultforge.codec import register_type
from resultforge.models import Record, RecordCollection, TestOutcome

from .xunit import XUnitParser, _to_float


def _to_int(value: str | None, default: int) -> int:
    try:
        return int(value) if value is not None else default
    except ValueError:
        return default


@register_type
class JUnitOutcome(TestOutcome):
    """Suite outcome with JUnit properties and counters."""

    @property
    def properties(self) -> RecordCollection:
        return self.get("properties") or RecordCollection()

    @property
    def time(self) -> float:
        return self.get("time", 0.0)

    @property
    def errors(self) -> int:
        return self.get("errors", 0)

    @property
    def failures(self) -> int:
        return self.get("failures", 0)

    @property
    def tests(self) -> int:
        return self.get("tests", 0)


@register_type
class JUnitParser(XUnitParser):
    """Parser for JUnit XML reports."""

    format_name = "JUnit"
    default_category = "junit"
    outcome_class = JUnitOutcome

    def _suite_extras(self, testsuite: ET.Element, cases: list[Record]) -> dict[str, Any]:
        properties = RecordCollection(
            Record(name=prop.get("name", ""), value=prop.get("value", ""))
            for prop in testsuite.iterfind("properties/property")
        )
        return {
            "properties": properties,
            "time": _to_float(testsuite.get("time"), sum(case["time"] for case in cases)),
            "errors": _to_int(
                testsuite.get("errors"), sum(1 for case in cases if case["status"] == "error")
            ),
            "failures": _to_int(
                testsuite.get("failures"), sum(1 for case in cases if case["status"] == "failed")
            ),
            "tests": _to_int(testsuite.get("tests"), len(cases)),
        }
