"""Shared exceptions and warnings for the resultforge package."""

from __future__ import annotations


class ResultForgeError(Exception):
    """Base class for every error raised by resultforge."""


class MissingArgumentError(ResultForgeError, ValueError):
    """A required argument (source path, output directory, ...) was omitted."""


class ReportIOError(ResultForgeError, OSError):
    """Exception raised when a report source or output target cannot be accessed.

    Carries the source identifier and the underlying cause so callers can
    report which file failed and why.
    """

    def __init__(self, source: object, cause: BaseException):
        self.source = str(source)
        self.cause = cause
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        return f"Cannot access {self.source}: {self.cause}"

    def __str__(self) -> str:
        return self._format_message()


class ReportFormatError(ResultForgeError, ValueError):
    """Raised when raw report content cannot be decoded as its declared format."""


class ParseNotImplementedError(ResultForgeError, NotImplementedError):
    """Raised when ``parse`` is called on the abstract base parser."""

    def __init__(self, parser_name: str):
        self.parser_name = parser_name
        super().__init__(f"{parser_name} does not implement parse(); use a format adapter")


class ParserNotFoundError(ResultForgeError, LookupError):
    """No parser is registered under the requested format name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Parser not found for format: {name}")


class InvalidParserError(ResultForgeError):
    """A parser type was found but could not be instantiated."""

    def __init__(self, name: str, cause: BaseException):
        self.name = name
        self.cause = cause
        super().__init__(f"Invalid parser {name}: {cause}")


class UnknownTypeError(ResultForgeError, LookupError):
    """A tree node references a type tag that is not registered."""

    def __init__(self, type_tag: str):
        self.type_tag = type_tag
        super().__init__(f"Unknown type tag in tree: {type_tag}")


class APIClientError(ResultForgeError):
    """Exception raised for API transport and HTTP status errors."""

    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.status_code:
            return f"API Error ({self.status_code}): {self.message}"
        return f"API Error: {self.message}"


class UnsupportedValueWarning(UserWarning):
    """A value with no mapping/sequence shape was dropped while encoding."""


class LegacySerializationWarning(UserWarning):
    """A value was encoded through the structural compatibility fallback.

    The type is registered but does not implement ``MappingSerializable`` or
    ``SequenceSerializable``; its raw fields were serialized instead.
    """
