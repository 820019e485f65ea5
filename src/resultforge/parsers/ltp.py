"""LTP JSON adapter (flat-record test results, schema v1 and v2).

Schema v1 carries the environment inside every record and encodes the
outcome as a ``T*`` result code in the nested ``test`` block::

    {"results": [{"test_fqn": "LTP:cpuhotplug:cpuhotplug02",
                  "status": "pass",
                  "environment": {"gcc": "...", "kernel": "..."},
                  "test": {"result": "TPASS", "duration": 5.9, "log": "..."}}]}

Schema v2 hoists the environment to a top-level block shared by all records
and relies on the lower-case per-record ``status``::

    {"environment": {"gcc": "...", "kernel": "..."},
     "results": [{"test_fqn": "...", "status": "pass", "test": {...}}]}
"""

from __future__ import annotations

import json
import re
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

CATEGORY = "LTP"

V1_RESULT_CODES = {
    "TPASS": RESULT_OK,
    "TCONF": RESULT_SKIP,
}
V2_STATUSES = {
    "pass": RESULT_OK,
    "conf": RESULT_SKIP,
    "skip": RESULT_SKIP,
}

_FQN_SEPARATORS = re.compile(r"[:/]")


@register_type
class LTPResult(Record):
    """One elementary LTP record."""

    @property
    def test_fqn(self) -> str:
        return self.get("test_fqn", "")

    @property
    def status(self) -> str:
        return self.get("status", "")

    @property
    def environment(self) -> Record | None:
        return self.get("environment")

    @property
    def test(self) -> Record | None:
        return self.get("test")


@register_type
class LTPOutcome(TestOutcome):
    """Outcome of one LTP test, keeping its fully-qualified name and duration."""

    @property
    def test_fqn(self) -> str:
        return self.get("test_fqn", "")

    @property
    def duration(self) -> float | None:
        return self.get("duration")


@register_type
class LTPParser(Parser):
    """Parser for LTP JSON results.

    Attributes:
        environment: Shared environment record (schema v2 only).
        schema_version: 1 or 2 once a document is parsed.
    """

    format_name = "LTP"

    def _clear(self) -> None:
        super()._clear()
        self.environment: Record | None = None
        self.schema_version: int | None = None

    def parse(self, raw: str | None = None) -> Parser:
        text = self._raw_or_content(raw)
        try:
            document = json.loads(text)
        except json.JSONDecodeError as e:
            raise ReportFormatError(f"Invalid LTP JSON: {e}") from e
        if not isinstance(document, dict):
            raise ReportFormatError("LTP document must be a JSON object")

        shared_environment = document.get("environment")
        if isinstance(shared_environment, dict):
            self.schema_version = 2
            self.environment = Record(shared_environment)
        else:
            self.schema_version = 1

        for entry in document.get("results") or []:
            if isinstance(entry, dict):
                self._parse_result(entry)

        self._mark_parsed()
        return self

    def _parse_result(self, entry: dict[str, Any]) -> TestOutcome:
        fields = dict(entry)
        for block in ("environment", "test"):
            if isinstance(fields.get(block), dict):
                fields[block] = Record(fields[block])
        result = self.results.add(LTPResult(fields))

        test_fqn = str(entry.get("test_fqn") or f"test{len(self.results)}")
        name = sanitize_name(_FQN_SEPARATORS.sub("_", test_fqn))
        descriptor = TestDescriptor(name=name, category=CATEGORY, flags={})

        test_block = result.test or Record()
        artifact = self._add_output(f"{CATEGORY}-{name}.txt", str(test_block.get("log") or ""))
        detail = DetailEntry(result=self._detail_result(result), text=artifact.file, title=name)

        return self._add_test_result(
            descriptor,
            [detail],
            LTPOutcome,
            test_fqn=test_fqn,
            duration=test_block.get("duration"),
        )

    def _detail_result(self, result: LTPResult) -> str:
        code = result.test.get("result") if result.test is not None else None
        if self.schema_version == 1 and code:
            return V1_RESULT_CODES.get(str(code).upper(), RESULT_FAIL)
        return V2_STATUSES.get(str(result.status).lower(), RESULT_FAIL)

    def as_mapping(self) -> dict[str, Any]:
        mapping = super().as_mapping()
        mapping["environment"] = self.environment
        mapping["schema_version"] = self.schema_version
        return mapping

    def restore_mapping(self, data: dict[str, Any]) -> None:
        super().restore_mapping(data)
        self.environment = data.get("environment")
        self.schema_version = data.get("schema_version")
