"""Canonical result records produced by every format adapter."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from resultforge.codec import register_type

from .record import Record

RESULT_OK = "ok"
RESULT_FAIL = "fail"
RESULT_SKIP = "skip"


@register_type
class TestDescriptor(Record):
    """Identifies one logical test case or suite."""

    __test__ = False

    def __init__(
        self,
        name: str = "",
        category: str = "",
        script: str | None = None,
        flags: Mapping[str, Any] | None = None,
        **extra: Any,
    ) -> None:
        super().__init__(
            name=name, category=category, script=script, flags=dict(flags or {}), **extra
        )

    @property
    def name(self) -> str:
        return self.get("name", "")

    @property
    def category(self) -> str:
        return self.get("category", "")

    @property
    def script(self) -> str | None:
        return self.get("script")

    @property
    def flags(self) -> dict[str, Any]:
        return self.get("flags") or {}


@register_type
class DetailEntry(Record):
    """One elementary check: result, output file name and title."""

    def __init__(
        self, result: str = RESULT_OK, text: str = "", title: str = "", **extra: Any
    ) -> None:
        super().__init__(result=result, text=text, title=title, **extra)

    @property
    def result(self) -> str:
        return self.get("result", "")

    @property
    def text(self) -> str:
        return self.get("text", "")

    @property
    def title(self) -> str:
        return self.get("title", "")

    @property
    def ok(self) -> bool:
        return self.result == RESULT_OK


@register_type
class OutputArtifact(Record):
    """Captured free-form output for one detail entry."""

    def __init__(self, file: str = "", content: str = "", **extra: Any) -> None:
        super().__init__(file=file, content=content, **extra)

    @property
    def file(self) -> str:
        return self.get("file", "")

    @property
    def content(self) -> str:
        return self.get("content", "")


@register_type
class TestOutcome(Record):
    """Aggregated result of one suite.

    ``dents`` counts the details that are not ``ok``; ``result`` is ``ok``
    only when every detail is ``ok``.
    """

    __test__ = False

    def __init__(
        self,
        details: Iterable[DetailEntry | Mapping[str, Any]] = (),
        test: TestDescriptor | None = None,
        **extra: Any,
    ) -> None:
        super().__init__(**extra)
        self["details"] = [
            detail if isinstance(detail, Record) else DetailEntry(**detail) for detail in details
        ]
        if test is not None:
            self["test"] = test
        self.recount()

    @classmethod
    def from_details(
        cls,
        details: Iterable[DetailEntry | Mapping[str, Any]],
        test: TestDescriptor | None = None,
        **extra: Any,
    ) -> TestOutcome:
        return cls(details=details, test=test, **extra)

    def recount(self) -> TestOutcome:
        """Recompute ``dents`` and ``result`` from the current details."""
        dents = sum(1 for detail in self.details if detail.get("result") != RESULT_OK)
        self["dents"] = dents
        self["result"] = RESULT_OK if dents == 0 else RESULT_FAIL
        return self

    @property
    def details(self) -> list[DetailEntry]:
        return self.get("details") or []

    @property
    def result(self) -> str:
        return self.get("result", RESULT_OK)

    @property
    def dents(self) -> int:
        return self.get("dents", 0)

    @property
    def test(self) -> TestDescriptor | None:
        return self.get("test")

    def to_result_mapping(self, include_test: bool = False) -> dict[str, Any]:
        """Render the persisted ``{result, details, dents[, test]}`` shape."""
        data: dict[str, Any] = {
            "result": self.result,
            "details": [detail.as_mapping() for detail in self.details],
            "dents": self.dents,
        }
        if include_test and self.test is not None:
            data["test"] = self.test.as_mapping()
        return data
