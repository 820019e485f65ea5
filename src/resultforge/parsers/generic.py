"""Generic JSON adapter for documents with no fixed shape.

Each top-level array element (or the whole document when it is not an array)
is wrapped in a ``Node`` and stored in ``results``; callers navigate it with
chained ``get``/attribute access. No outcomes are generated.
"""

from __future__ import annotations

import json

from resultforge.codec import register_type
from resultforge.core.exceptions import ReportFormatError
from resultforge.models import Node

from .base import Parser


@register_type
class GenericParser(Parser):
    """Parser that exposes arbitrary JSON as navigable nodes."""

    format_name = "Generic"

    def parse(self, raw: str | None = None) -> Parser:
        text = self._raw_or_content(raw)
        try:
            document = json.loads(text)
        except json.JSONDecodeError as e:
            raise ReportFormatError(f"Invalid JSON: {e}") from e

        items = document if isinstance(document, list) else [document]
        for item in items:
            self.results.add(Node(item))

        self._mark_parsed()
        return self
