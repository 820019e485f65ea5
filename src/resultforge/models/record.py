"""Open-field records and heterogeneous record collections."""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Iterator, Mapping
from typing import Any

from resultforge.codec import (
    MappingSerializable,
    SequenceSerializable,
    TreeCodecMixin,
    register_type,
)

_MISSING = object()


@register_type
class Record(TreeCodecMixin, MappingSerializable):
    """A schema-less field bag.

    Adapters populate well-known fields, callers may attach any other field at
    any time. Every field takes part in serialization and equality.
    """

    __hash__ = None  # type: ignore[assignment]

    def __init__(self, fields: Mapping[str, Any] | None = None, **kwargs: Any) -> None:
        self._fields: dict[str, Any] = {}
        if fields:
            self._fields.update(fields)
        self._fields.update(kwargs)

    @classmethod
    def blank(cls) -> Record:
        """Return an empty instance without running ``__init__``."""
        record = cls.__new__(cls)
        record._fields = {}
        return record

    def get(self, name: str, default: Any = None) -> Any:
        return self._fields.get(name, default)

    def set(self, name: str, value: Any) -> Record:
        self._fields[name] = value
        return self

    def update(self, fields: Mapping[str, Any]) -> Record:
        self._fields.update(fields)
        return self

    def fields(self) -> list[str]:
        return list(self._fields)

    def __getitem__(self, name: str) -> Any:
        return self._fields[name]

    def __setitem__(self, name: str, value: Any) -> None:
        self._fields[name] = value

    def __contains__(self, name: object) -> bool:
        return name in self._fields

    def as_mapping(self) -> dict[str, Any]:
        return dict(self._fields)

    def restore_mapping(self, data: dict[str, Any]) -> None:
        self._fields = dict(data)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Record):
            return NotImplemented
        return self._fields == other._fields

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._fields!r})"


def field_value(item: Any, name: str, default: Any = _MISSING) -> Any:
    """Read a named field from a record, mapping, or plain object."""
    if isinstance(item, Record):
        return item.get(name, default)
    if isinstance(item, Mapping):
        return item.get(name, default)
    if isinstance(item, MappingSerializable):
        return item.as_mapping().get(name, default)
    return getattr(item, name, default)


def _matches(value: Any, regex: re.Pattern[str]) -> bool:
    return value is not _MISSING and regex.search(str(value)) is not None


@register_type
class RecordCollection(TreeCodecMixin, SequenceSerializable):
    """Ordered, heterogeneous list of records and other serializable values."""

    __hash__ = None  # type: ignore[assignment]

    def __init__(self, items: Iterable[Any] = ()) -> None:
        self._items: list[Any] = list(items)

    @classmethod
    def blank(cls) -> RecordCollection:
        collection = cls.__new__(cls)
        collection._items = []
        return collection

    def add(self, item: Any) -> Any:
        self._items.append(item)
        return item

    def remove(self, index: int) -> Any:
        """Remove and return the item at ``index``; later items shift down."""
        return self._items.pop(index)

    def get(self, index: int) -> Any:
        return self._items[index]

    def first(self) -> Any:
        return self._items[0] if self._items else None

    def last(self) -> Any:
        return self._items[-1] if self._items else None

    def size(self) -> int:
        return len(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._items)

    def each(self, fn: Callable[[Any], Any]) -> None:
        for item in self._items:
            fn(item)

    def search(self, field: str, pattern: str | re.Pattern[str]) -> RecordCollection:
        """Return the items whose stringified ``field`` matches ``pattern``.

        Args:
            field: Field name to read from every item.
            pattern: Regular expression, applied with ``re.search``.

        Returns:
            New collection with the matching items in their original order.
            Items without the field never match.
        """
        regex = re.compile(pattern)
        return RecordCollection(
            item for item in self._items if _matches(field_value(item, field), regex)
        )

    def search_in_details(self, field: str, pattern: str | re.Pattern[str]) -> RecordCollection:
        """Search the ``details`` of every item and return the matching details.

        Answers questions like "how many individual checks across all suites
        match X" in one call.
        """
        regex = re.compile(pattern)
        matches = RecordCollection()
        for item in self._items:
            details = field_value(item, "details", None) or ()
            for detail in details:
                if _matches(field_value(detail, field), regex):
                    matches.add(detail)
        return matches

    def as_sequence(self) -> list[Any]:
        return list(self._items)

    def restore_sequence(self, items: list[Any]) -> None:
        self._items = list(items)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RecordCollection):
            return NotImplemented
        return self._items == other._items

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._items!r})"


@register_type
class Node(TreeCodecMixin, MappingSerializable):
    """Navigable wrapper over one value of a document with no fixed shape.

    ``node.get("a").get("b")`` and ``node.a.b`` walk nested mappings; a
    missing key yields a node wrapping ``None`` so chains never raise.
    Integer keys index into sequences. ``.val`` returns the wrapped value.
    """

    __hash__ = None  # type: ignore[assignment]

    def __init__(self, val: Any = None) -> None:
        self._val = val

    @classmethod
    def blank(cls) -> Node:
        node = cls.__new__(cls)
        node._val = None
        return node

    @property
    def val(self) -> Any:
        return self._val

    def get(self, name: str | int) -> Node:
        val = self._val
        if isinstance(val, Mapping):
            return Node(val.get(name))
        if isinstance(val, (list, tuple)) and isinstance(name, int):
            return Node(val[name] if -len(val) <= name < len(val) else None)
        return Node(None)

    def __getattr__(self, name: str) -> Node:
        if name.startswith("_"):
            raise AttributeError(name)
        return self.get(name)

    def as_mapping(self) -> dict[str, Any]:
        return {"val": self._val}

    def restore_mapping(self, data: dict[str, Any]) -> None:
        self._val = data.get("val")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Node):
            return NotImplemented
        return self._val == other._val

    def __repr__(self) -> str:
        return f"Node({self._val!r})"
