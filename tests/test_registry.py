"""Tests for parser dispatch."""

from __future__ import annotations

import pytest

from resultforge.core.exceptions import InvalidParserError, ParserNotFoundError
from resultforge.parsers import (
    GenericParser,
    JUnitParser,
    LTPParser,
    Parser,
    ParserRegistry,
    XUnitParser,
    get_default_registry,
    parser,
)


class Broken(Parser):
    """Parser whose constructor always fails."""

    format_name = "Broken"

    def __init__(self, **options):
        raise RuntimeError("cannot build Broken")


class TestDefaultRegistry:
    """Tests for the built-in format table."""

    def test_known_formats(self):
        """The default table lists every adapter."""
        assert get_default_registry().names == ["Base", "Generic", "JUnit", "LTP", "XUnit"]

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("JUnit", JUnitParser),
            ("junit", JUnitParser),
            ("JUnitParser", JUnitParser),
            ("XUnit", XUnitParser),
            ("LTP", LTPParser),
            ("ltpparser", LTPParser),
            ("Generic", GenericParser),
            ("Base", Parser),
        ],
    )
    def test_lookup_is_case_insensitive(self, name, expected):
        """Lookup ignores case and an optional Parser suffix."""
        assert get_default_registry().lookup(name) is expected

    def test_no_name_gives_base_parser(self):
        """No name resolves to the base parser."""
        instance = parser()

        assert type(instance) is Parser

    def test_unknown_format(self):
        """An unknown name raises ParserNotFoundError."""
        with pytest.raises(ParserNotFoundError) as exc_info:
            parser("NoSuchFormat")

        assert exc_info.value.name == "NoSuchFormat"
        assert str(exc_info.value) == "Parser not found for format: NoSuchFormat"

    def test_options_are_passed_through(self):
        """Options reach the parser constructor."""
        instance = parser("JUnit", include_content=True, include_results=True)

        assert instance.include_content is True
        assert instance.include_results is True

    def test_source_is_loaded(self, junit_report):
        """A source argument is loaded right away."""
        instance = parser("JUnit", junit_report)

        assert instance.generated_tests_results.size() == 9

    def test_invalid_option_is_invalid_parser(self):
        """A bad option raises InvalidParserError."""
        with pytest.raises(InvalidParserError):
            parser("LTP", no_such_option=1)


class TestCustomRegistry:
    """Tests for caller-built registries."""

    def test_broken_parser_wraps_cause(self):
        """Constructor failures are chained as the cause."""
        registry = ParserRegistry({"Broken": Broken})

        with pytest.raises(InvalidParserError) as exc_info:
            registry.resolve("Broken")

        assert "cannot build Broken" in str(exc_info.value)
        assert isinstance(exc_info.value.cause, RuntimeError)
        assert exc_info.value.__cause__ is exc_info.value.cause

    def test_module_level_parser_with_registry(self):
        """parser() dispatches through a given registry."""
        registry = ParserRegistry.from_parsers([LTPParser])

        assert type(parser("ltp", registry=registry)) is LTPParser
        with pytest.raises(ParserNotFoundError):
            parser("JUnit", registry=registry)

    def test_register_overrides_existing_name(self):
        """Registering a name again replaces the entry."""
        registry = ParserRegistry({"Report": XUnitParser})
        registry.register("report", JUnitParser)

        assert registry.lookup("REPORT") is JUnitParser
        assert registry.names == ["report"]

    def test_bare_parser_name_is_not_stripped(self):
        """A name that is only Parser keeps its suffix."""
        registry = ParserRegistry({"Parser": Parser})

        assert registry.lookup("parser") is Parser
