"""XUnit XML adapter.

Reads the plain structured-suite XML flavour produced by most xUnit-style
reporters:

- ``<testsuites>`` holding ``<testsuite>`` elements, or a single ``<testsuite>`` root
- ``<testcase>`` children with optional ``failure``, ``error``, ``skipped``,
  ``system-out`` and ``system-err`` elements

Every suite becomes one ``TestDescriptor`` plus one ``TestOutcome``; every
case becomes one elementary result record, one ``DetailEntry`` and one output
artifact.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import Any

from resultforge.codec import register_type
from resultforge.core.exceptions import ReportFormatError
from resultforge.models import (
    RESULT_FAIL,
    RESULT_OK,
    RESULT_SKIP,
    DetailEntry,
    Record,
    TestDescriptor,
    TestOutcome,
)

from .base import Parser, sanitize_name

PASSING_STATUSES = frozenset({"success", "passed", "pass", "ok"})
SKIPPED_STATUSES = frozenset({"skipped", "skip", "disabled", "notrun"})
OUTPUT_TAGS = ("system-out", "system-err", "failure", "error")

RESULT_BY_STATUS = {
    "passed": RESULT_OK,
    "failed": RESULT_FAIL,
    "error": RESULT_FAIL,
    "skipped": RESULT_SKIP,
}


def _first_line(text: str) -> str:
    stripped = text.strip()
    return stripped.split("\n")[0] if stripped else ""


def _to_float(value: str | None, default: float = 0.0) -> float:
    try:
        return float(value) if value is not None else default
    except ValueError:
        return default


@register_type
class XUnitParser(Parser):
    """Parser for XUnit XML reports."""

    format_name = "XUnit"
    default_category = "xunit"
    outcome_class: type[TestOutcome] = TestOutcome

    def parse(self, raw: str | None = None) -> Parser:
        text = self._raw_or_content(raw)
        try:
            root = ET.fromstring(text)  # noqa: S314 - trusted test report data
        except ET.ParseError as e:
            raise ReportFormatError(f"Invalid {self.format_name} XML: {e}") from e

        for number, testsuite in enumerate(root.iter("testsuite"), 1):
            self._parse_testsuite(testsuite, number)

        self._mark_parsed()
        return self

    def _suite_category(self, testsuite: ET.Element) -> str:
        package = testsuite.get("package", "")
        # Keep the leading package component only: "tests.unit" -> "tests"
        category = sanitize_name(package).split(".")[0]
        return category or self.default_category

    def _parse_testsuite(self, testsuite: ET.Element, number: int) -> TestOutcome:
        """Parse a testsuite element into a descriptor and an aggregated outcome."""
        category = self._suite_category(testsuite)
        name = sanitize_name(testsuite.get("name") or testsuite.get("id") or f"suite{number}")
        descriptor = TestDescriptor(
            name=name,
            category=category,
            script=testsuite.get("script"),
            flags={},
        )

        cases = []
        details = []
        for num, testcase in enumerate(testsuite.findall("testcase"), 1):
            case = self._parse_testcase(testcase, name)
            cases.append(case)
            self.results.add(case)

            artifact = self._add_output(
                f"{category}-{name}-{num}.txt", self._render_output(testcase)
            )
            details.append(
                DetailEntry(
                    result=RESULT_BY_STATUS.get(case["status"], RESULT_FAIL),
                    text=artifact.file,
                    title=case["name"],
                )
            )

        return self._add_test_result(
            descriptor, details, self.outcome_class, **self._suite_extras(testsuite, cases)
        )

    def _parse_testcase(self, testcase: ET.Element, suite_name: str) -> Record:
        """Parse a testcase element into an elementary result record."""
        status, message = self._case_status(testcase)
        return Record(
            suite=suite_name,
            classname=testcase.get("classname", ""),
            name=testcase.get("name", ""),
            time=_to_float(testcase.get("time")),
            status=status,
            message=message,
        )

    @staticmethod
    def _case_status(testcase: ET.Element) -> tuple[str, str]:
        for tag, status in (("error", "error"), ("failure", "failed")):
            element = testcase.find(tag)
            if element is not None:
                return status, element.get("message") or _first_line(element.text or "")

        skipped = testcase.find("skipped")
        if skipped is not None:
            return "skipped", skipped.get("message", "")

        # Some producers report the outcome as an attribute instead of a child
        status_attr = testcase.get("status", "").lower()
        if status_attr and status_attr not in PASSING_STATUSES:
            if status_attr in SKIPPED_STATUSES:
                return "skipped", ""
            return "failed", status_attr
        return "passed", ""

    @staticmethod
    def _render_output(testcase: ET.Element) -> str:
        content = f"# {testcase.get('name', '')}\n"
        for child in testcase:
            if child.tag in OUTPUT_TAGS:
                content += f"# {child.tag}: \n\n{child.text or ''}\n"
        return content

    def _suite_extras(self, testsuite: ET.Element, cases: list[Record]) -> dict[str, Any]:
        """Extra outcome fields for a suite; none for plain XUnit."""
        return {}
