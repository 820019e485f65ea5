"""Parser registry for resolving format names to adapters."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from functools import lru_cache
from pathlib import Path
from typing import Any

from resultforge.core.exceptions import InvalidParserError, ParserNotFoundError

from .base import Parser
from .generic import GenericParser
from .junit import JUnitParser
from .ltp import LTPParser
from .xunit import XUnitParser

DEFAULT_FORMAT = "Base"


def _normalize(name: str) -> str:
    # "JUnit", "junit" and "JUnitParser" all resolve to the same entry
    key = name.strip().lower()
    if key != "parser":
        key = key.removesuffix("parser")
    return key


class ParserRegistry:
    """Explicit table of format names and their parser types.

    Names are matched case-insensitively and the ``Parser`` suffix is
    optional.
    """

    def __init__(self, table: Mapping[str, type[Parser]] | None = None) -> None:
        """Initialize the registry from a ``name -> parser type`` table."""
        self._parsers: dict[str, type[Parser]] = {}
        self._names: dict[str, str] = {}
        for name, parser_cls in (table or {}).items():
            self.register(name, parser_cls)

    @classmethod
    def from_parsers(cls, parsers: Iterable[type[Parser]]) -> ParserRegistry:
        """Build a registry keyed by each parser's ``format_name``."""
        return cls({parser_cls.format_name: parser_cls for parser_cls in parsers})

    @property
    def names(self) -> list[str]:
        """Return the registered format names."""
        return sorted(self._names.values())

    def register(self, name: str, parser_cls: type[Parser]) -> None:
        """Register a parser type under a format name."""
        key = _normalize(name)
        self._parsers[key] = parser_cls
        self._names[key] = name

    def lookup(self, name: str) -> type[Parser]:
        """Return the parser type registered for ``name``.

        Raises:
            ParserNotFoundError: If no parser matches.
        """
        parser_cls = self._parsers.get(_normalize(name))
        if parser_cls is None:
            raise ParserNotFoundError(name)
        return parser_cls

    def resolve(self, name: str, **options: Any) -> Parser:
        """Instantiate the parser registered for ``name``.

        Raises:
            ParserNotFoundError: If no parser matches.
            InvalidParserError: If the parser cannot be constructed.
        """
        parser_cls = self.lookup(name)
        try:
            return parser_cls(**options)
        except Exception as e:
            raise InvalidParserError(name, e) from e

    def parser(
        self, name: str | None = None, source: str | Path | None = None, **options: Any
    ) -> Parser:
        """Resolve a parser and, when ``source`` is given, load it."""
        instance = self.resolve(name or DEFAULT_FORMAT, **options)
        if source is not None:
            instance.load(source)
        return instance


@lru_cache(maxsize=1)
def get_default_registry() -> ParserRegistry:
    """Create the registry with every built-in format.

    Returns:
        A ParserRegistry with Base, XUnit, JUnit, LTP and Generic parsers.
    """
    return ParserRegistry.from_parsers(
        [Parser, XUnitParser, JUnitParser, LTPParser, GenericParser]
    )


def parser(
    name: str | None = None,
    source: str | Path | None = None,
    *,
    registry: ParserRegistry | None = None,
    **options: Any,
) -> Parser:
    """Resolve a parser by format name and optionally load a report with it.

    Args:
        name: Format name; defaults to the no-op base parser.
        source: Report file to load.
        registry: Registry to use instead of the default one.
        **options: Constructor options (``include_content``, ``include_results``).

    Returns:
        The parser instance.
    """
    return (registry or get_default_registry()).parser(name, source, **options)
