"""Report parsers and format dispatch.

Usage:
    from resultforge.parsers import parser

    junit = parser("JUnit", "results.xml", include_content=True)
    junit.generated_tests_results.search_in_details("text", r"tests-systemd")
    payload = junit.serialize()
"""

from .base import Parser, ParserLifecycle, sanitize_name
from .generic import GenericParser
from .junit import JUnitOutcome, JUnitParser
from .ltp import LTPOutcome, LTPParser, LTPResult
from .registry import DEFAULT_FORMAT, ParserRegistry, get_default_registry, parser
from .xunit import XUnitParser

__all__ = [
    "DEFAULT_FORMAT",
    "GenericParser",
    "JUnitOutcome",
    "JUnitParser",
    "LTPOutcome",
    "LTPParser",
    "LTPResult",
    "Parser",
    "ParserLifecycle",
    "ParserRegistry",
    "XUnitParser",
    "get_default_registry",
    "parser",
    "sanitize_name",
]
