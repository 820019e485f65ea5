"""Base parser: the document lifecycle shared by every format adapter.

A parser starts ``FRESH``, becomes ``LOADED`` once raw content is read and
``PARSED`` once an adapter has extracted results. ``reset()`` returns it to
``FRESH``. Decoding a tree yields a parser in whatever state was encoded,
without replaying load or parse.
"""

from __future__ import annotations

import json
import re
from enum import Enum
from pathlib import Path
from typing import Any

from resultforge.codec import MappingSerializable, TreeCodecMixin, register_type
from resultforge.core.exceptions import (
    MissingArgumentError,
    ParseNotImplementedError,
    ReportIOError,
)
from resultforge.logging import get_logger
from resultforge.models import (
    DetailEntry,
    OutputArtifact,
    RecordCollection,
    TestDescriptor,
    TestOutcome,
)

logger = get_logger(__name__)

_UNSAFE_NAME_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def sanitize_name(value: str) -> str:
    """Replace characters that are unsafe in artifact file names."""
    return _UNSAFE_NAME_CHARS.sub("_", value)


class ParserLifecycle(Enum):
    """Lifecycle state of a parser."""

    FRESH = "fresh"
    LOADED = "loaded"
    PARSED = "parsed"


def _as_collection(value: Any) -> RecordCollection:
    if isinstance(value, RecordCollection):
        return value
    return RecordCollection(value or ())


@register_type
class Parser(TreeCodecMixin, MappingSerializable):
    """Base parser holding raw content, elementary results and aggregated outcomes.

    Concrete adapters override ``parse`` only. The base implementation is the
    no-op default used by dispatch when no format is named.

    Attributes:
        content: Raw document text, kept when ``include_content`` is set.
        results: Elementary per-check records.
        generated_tests: One ``TestDescriptor`` per logical suite.
        generated_tests_results: One ``TestOutcome`` per descriptor, same order.
        generated_tests_output: One ``OutputArtifact`` per detail entry.
        extensions: Ad hoc values attached by callers; serialized with the state.
    """

    format_name = "Base"

    def __init__(self, include_content: bool = False, include_results: bool = False) -> None:
        self.include_content = include_content
        self.include_results = include_results
        self.extensions: dict[str, Any] = {}
        self._clear()

    @classmethod
    def blank(cls) -> Parser:
        """Return a fresh instance without running ``__init__``."""
        parser = cls.__new__(cls)
        parser.include_content = False
        parser.include_results = False
        parser.extensions = {}
        parser._clear()
        return parser

    def _clear(self) -> None:
        self.content: str | None = None
        self.state = ParserLifecycle.FRESH
        self.results = RecordCollection()
        self.generated_tests = RecordCollection()
        self.generated_tests_results = RecordCollection()
        self.generated_tests_output = RecordCollection()
        self._output_names: set[str] = set()

    def reset(self) -> Parser:
        """Discard content and every result; extensions are kept."""
        self._clear()
        return self

    def load(self, source: str | Path | None = None) -> Parser:
        """Read a report file and parse it.

        Args:
            source: Path to the report file.

        Returns:
            The parser itself.

        Raises:
            MissingArgumentError: If no source is given.
            ReportIOError: If the file cannot be opened or read.
        """
        if not source:
            raise MissingArgumentError("You need to specify a file to load")

        path = Path(source)
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ReportIOError(source, e) from e

        if self.include_content:
            self.content = text
        self.state = ParserLifecycle.LOADED
        logger.debug("report_loaded", parser=type(self).__name__, source=str(path), size=len(text))

        self.parse(text)
        return self

    def parse(self, raw: str | None = None) -> Parser:
        """Extract results from raw report text. Implemented by format adapters."""
        raise ParseNotImplementedError(type(self).__name__)

    def _raw_or_content(self, raw: str | bytes | None) -> str:
        text = raw if raw is not None else self.content
        if isinstance(text, bytes):
            text = text.decode("utf-8")
        if not text:
            raise MissingArgumentError(f"No {self.format_name} content given or loaded")
        return text

    def _mark_parsed(self) -> None:
        self.state = ParserLifecycle.PARSED
        logger.info(
            "report_parsed",
            parser=type(self).__name__,
            tests=len(self.generated_tests),
            results=len(self.results),
        )

    def _add_test_result(
        self,
        descriptor: TestDescriptor,
        details: list[DetailEntry],
        outcome_cls: type[TestOutcome] = TestOutcome,
        **extra: Any,
    ) -> TestOutcome:
        self.generated_tests.add(descriptor)
        return self.generated_tests_results.add(
            outcome_cls.from_details(details, test=descriptor, **extra)
        )

    def _add_output(self, file: str, content: str) -> OutputArtifact:
        """Record an output artifact under a file name no other artifact uses.

        A taken name gets a numeric suffix before its extension, so
        ``xunit-dup-1.txt`` becomes ``xunit-dup-1-2.txt``.
        """
        name = Path(file).name
        stem, suffix = Path(name).stem, Path(name).suffix
        counter = 1
        while name in self._output_names:
            counter += 1
            name = f"{stem}-{counter}{suffix}"
        self._output_names.add(name)
        return self.generated_tests_output.add(OutputArtifact(file=name, content=content))

    def set_extension(self, key: str, value: Any) -> Parser:
        self.extensions[key] = value
        return self

    def get_extension(self, key: str, default: Any = None) -> Any:
        return self.extensions.get(key, default)

    def write_output(self, directory: str | Path | None = None) -> list[Path]:
        """Write one file per detail entry holding its captured output.

        Raises:
            MissingArgumentError: If no directory is given.
            ReportIOError: If a file cannot be written.
        """
        if not directory:
            raise MissingArgumentError("You need to specify a directory")

        out_dir = Path(directory)
        written = []
        try:
            out_dir.mkdir(parents=True, exist_ok=True)
            for artifact in self.generated_tests_output:
                target = out_dir / Path(artifact.file).name
                target.write_text(artifact.content or "", encoding="utf-8")
                written.append(target)
        except OSError as e:
            raise ReportIOError(out_dir, e) from e

        logger.info("output_written", directory=str(out_dir), count=len(written))
        return written

    def write_test_result(
        self, directory: str | Path | None = None, include_test: bool | None = None
    ) -> list[Path]:
        """Write one JSON file per aggregated outcome.

        Files are named ``result-<index>-<name>.json`` and hold
        ``{result, details, dents}``, plus ``test`` when ``include_test`` is
        true (defaults to ``include_results``).

        Raises:
            MissingArgumentError: If no directory is given.
            ReportIOError: If a file cannot be written.
        """
        if not directory:
            raise MissingArgumentError("You need to specify a directory")

        include = self.include_results if include_test is None else include_test
        out_dir = Path(directory)
        written = []
        try:
            out_dir.mkdir(parents=True, exist_ok=True)
            for index, outcome in enumerate(self.generated_tests_results):
                target = out_dir / f"result-{index}-{self._result_name(index, outcome)}.json"
                data = outcome.to_result_mapping(include_test=include)
                target.write_text(json.dumps(data, indent=2, sort_keys=True), encoding="utf-8")
                written.append(target)
        except OSError as e:
            raise ReportIOError(out_dir, e) from e

        logger.info("test_results_written", directory=str(out_dir), count=len(written))
        return written

    def _result_name(self, index: int, outcome: TestOutcome) -> str:
        descriptor = (
            self.generated_tests.get(index) if index < len(self.generated_tests) else outcome.test
        )
        name = descriptor.name if descriptor is not None else ""
        return sanitize_name(name) or "unnamed"

    def as_mapping(self) -> dict[str, Any]:
        mapping: dict[str, Any] = {
            "include_content": self.include_content,
            "include_results": self.include_results,
            "state": self.state.value,
            "results": self.results,
            "generated_tests": self.generated_tests,
            "generated_tests_results": self.generated_tests_results,
            "generated_tests_output": self.generated_tests_output,
            "extensions": dict(self.extensions),
        }
        if self.content is not None:
            mapping["content"] = self.content
        return mapping

    def restore_mapping(self, data: dict[str, Any]) -> None:
        self.include_content = bool(data.get("include_content", False))
        self.include_results = bool(data.get("include_results", False))
        self.state = ParserLifecycle(data.get("state", ParserLifecycle.PARSED.value))
        self.content = data.get("content")
        self.results = _as_collection(data.get("results"))
        self.generated_tests = _as_collection(data.get("generated_tests"))
        self.generated_tests_results = _as_collection(data.get("generated_tests_results"))
        self.generated_tests_output = _as_collection(data.get("generated_tests_output"))
        self._output_names = {Path(artifact.file).name for artifact in self.generated_tests_output}
        self.extensions = dict(data.get("extensions") or {})

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(state={self.state.value}, "
            f"tests={len(self.generated_tests)}, results={len(self.results)})"
        )
