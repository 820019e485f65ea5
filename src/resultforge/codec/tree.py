"""Polymorphic value tree codec.

Every value handled by resultforge is encoded into a schema-less tree made of
plain dicts, lists and scalars. Typed compound values become tagged nodes::

    {"type_tag": "<registered type name>", "payload": <mapping or sequence>}

Encoding policy for compound values, evaluated in order:

1. ``MappingSerializable`` values are tagged mappings built from ``as_mapping()``.
2. Other mapping-shaped values (``dict`` subclasses, plain objects with an
   instance ``__dict__``) are tagged from their raw fields. This is a
   compatibility fallback and emits ``LegacySerializationWarning``.
3. ``SequenceSerializable`` values are tagged sequences built from ``as_sequence()``.
4. ``list``/``tuple`` subclasses are tagged from their items, with the same
   fallback warning.
5. Anything else is dropped with ``UnsupportedValueWarning``; encoding goes on.

Plain dicts whose keys are exactly ``type_tag`` and ``payload`` are wrapped in a
``builtins.dict`` node so they never read back as a typed value.

Decoding never calls a type's constructor: the registry hands out a blank
instance from the type's zero-value factory and the decoder fills it in.
"""

from __future__ import annotations

import warnings
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from enum import Enum
from types import ModuleType
from typing import Any

from resultforge.core.exceptions import (
    LegacySerializationWarning,
    ReportFormatError,
    UnknownTypeError,
    UnsupportedValueWarning,
)
from resultforge.logging import get_logger

logger = get_logger(__name__)

TYPE_TAG = "type_tag"
PAYLOAD = "payload"

# Plain dicts shaped like a tagged node are wrapped under this name
DICT_TYPE_NAME = "builtins.dict"

SCALAR_TYPES = (str, int, float, bool, type(None))

# Marker for values dropped from their parent container
_OMIT = object()


class MappingSerializable(ABC):
    """Capability of types that serialize as a field mapping."""

    @abstractmethod
    def as_mapping(self) -> dict[str, Any]:
        """Return the fields to serialize."""

    @abstractmethod
    def restore_mapping(self, data: dict[str, Any]) -> None:
        """Populate a blank instance from decoded fields."""


class SequenceSerializable(ABC):
    """Capability of types that serialize as an ordered item list."""

    @abstractmethod
    def as_sequence(self) -> list[Any]:
        """Return the items to serialize."""

    @abstractmethod
    def restore_sequence(self, items: list[Any]) -> None:
        """Populate a blank instance from decoded items."""


def default_type_name(cls: type) -> str:
    return f"{cls.__module__}.{cls.__qualname__}"


def _default_factory(cls: type) -> Callable[[], Any]:
    blank = getattr(cls, "blank", None)
    if callable(blank):
        return blank
    # Allocate through the builtin base so no user-defined __new__/__init__ runs
    for base in (dict, list, tuple):
        if issubclass(cls, base):
            return lambda: base.__new__(cls)
    return lambda: object.__new__(cls)


class TypeRegistry:
    """Table of type names and the zero-value factories used to rebuild them."""

    def __init__(self) -> None:
        self._factories: dict[str, Callable[[], Any]] = {}
        self._names: dict[type, str] = {}
        self.register(dict, name=DICT_TYPE_NAME, factory=dict)

    def register(
        self,
        cls: type | None = None,
        *,
        name: str | None = None,
        factory: Callable[[], Any] | None = None,
    ) -> Any:
        """Register a type; usable as ``@register`` or ``@register(name=...)``.

        Args:
            cls: The class to register.
            name: Type tag to use. Defaults to ``module.qualname``.
            factory: Zero-argument callable returning a blank instance.
                Defaults to ``cls.blank`` when defined.

        Returns:
            The class itself, or a decorator when called without ``cls``.
        """

        def decorator(klass: type) -> type:
            type_name = name or default_type_name(klass)
            self._factories[type_name] = factory or _default_factory(klass)
            self._names[klass] = type_name
            return klass

        if cls is None:
            return decorator
        return decorator(cls)

    def name_for(self, cls: type) -> str:
        return self._names.get(cls) or default_type_name(cls)

    def __contains__(self, type_name: object) -> bool:
        return type_name in self._factories

    @property
    def names(self) -> list[str]:
        return sorted(self._factories)

    def create(self, type_name: str) -> Any:
        """Return a blank instance of the named type.

        Raises:
            UnknownTypeError: If no factory is registered under ``type_name``.
        """
        factory = self._factories.get(type_name)
        if factory is None:
            raise UnknownTypeError(type_name)
        return factory()


TYPES = TypeRegistry()
register_type = TYPES.register


def is_tagged(node: Any) -> bool:
    """Check if a tree node is a ``{type_tag, payload}`` node."""
    return (
        isinstance(node, dict)
        and node.keys() == {TYPE_TAG, PAYLOAD}
        and isinstance(node[TYPE_TAG], str)
    )


def _warn(message: str, category: type[Warning]) -> None:
    """Emit a warning with no per-call-site registry, so repeats are not suppressed."""
    warnings.warn_explicit(message, category, __file__, 0, module=__name__, registry=None)


def _has_reserved_shape(fields: dict[str, Any]) -> bool:
    return fields.keys() == {TYPE_TAG, PAYLOAD}


def _is_mapping_shaped(value: Any) -> bool:
    if isinstance(value, Mapping):
        return True
    if isinstance(value, (SequenceSerializable, list, tuple, str, bytes, bytearray)):
        return False
    if callable(value) or isinstance(value, ModuleType):
        return False
    return hasattr(value, "__dict__")


class TreeEncoder:
    """Encode values into a value tree."""

    def __init__(self, registry: TypeRegistry | None = None) -> None:
        self.registry = registry or TYPES

    def encode(self, value: Any) -> Any:
        node = self._encode(value, "$")
        return None if node is _OMIT else node

    def _encode(self, value: Any, path: str) -> Any:
        if isinstance(value, Enum):
            value = value.value
        if isinstance(value, SCALAR_TYPES):
            return self._encode_scalar(value)

        value_type = type(value)
        if value_type is dict:
            fields = self._encode_fields(value, path)
            if _has_reserved_shape(fields):
                return {TYPE_TAG: DICT_TYPE_NAME, PAYLOAD: fields}
            return fields
        if value_type in (list, tuple):
            return self._encode_items(value, path)

        if isinstance(value, MappingSerializable):
            return self._tagged(value, self._encode_fields(value.as_mapping(), path))
        if _is_mapping_shaped(value):
            self._warn_legacy(value, path)
            raw = dict(value) if isinstance(value, Mapping) else vars(value)
            return self._tagged(value, self._encode_fields(raw, path))
        if isinstance(value, SequenceSerializable):
            return self._tagged(value, self._encode_items(value.as_sequence(), path))
        if isinstance(value, (list, tuple)):
            self._warn_legacy(value, path)
            return self._tagged(value, self._encode_items(value, path))

        self._warn_unsupported(value, path)
        return _OMIT

    @staticmethod
    def _encode_scalar(value: Any) -> Any:
        if value is None or type(value) in SCALAR_TYPES:
            return value
        # Normalize subclasses (IntEnum members, str subclasses) to builtins
        for base in (bool, int, float, str):
            if isinstance(value, base):
                return base(value)
        return value

    def _encode_fields(self, fields: Mapping[Any, Any], path: str) -> dict[str, Any]:
        encoded = {}
        for key, item in fields.items():
            node = self._encode(item, f"{path}.{key}")
            if node is not _OMIT:
                encoded[str(key)] = node
        return encoded

    def _encode_items(self, items: Any, path: str) -> list[Any]:
        encoded = []
        for index, item in enumerate(items):
            node = self._encode(item, f"{path}[{index}]")
            if node is not _OMIT:
                encoded.append(node)
        return encoded

    def _tagged(self, value: Any, payload: Any) -> dict[str, Any]:
        return {TYPE_TAG: self.registry.name_for(type(value)), PAYLOAD: payload}

    @staticmethod
    def _warn_legacy(value: Any, path: str) -> None:
        type_name = type(value).__name__
        logger.warning("legacy_serialization", path=path, value_type=type_name)
        _warn(
            f"{type_name} at {path} has no serialization capability; "
            "encoding its raw fields (compatibility fallback)",
            LegacySerializationWarning,
        )

    @staticmethod
    def _warn_unsupported(value: Any, path: str) -> None:
        type_name = type(value).__name__
        logger.warning("unsupported_value", path=path, value_type=type_name)
        _warn(f"Cannot encode {type_name} at {path}; value omitted", UnsupportedValueWarning)


class TreeDecoder:
    """Rebuild values from a value tree."""

    def __init__(self, registry: TypeRegistry | None = None) -> None:
        self.registry = registry or TYPES

    def decode(self, node: Any) -> Any:
        if is_tagged(node):
            return self._decode_tagged(node)
        if isinstance(node, dict):
            return {key: self.decode(item) for key, item in node.items()}
        if isinstance(node, list):
            return [self.decode(item) for item in node]
        return node

    def _decode_tagged(self, node: dict[str, Any]) -> Any:
        type_name = node[TYPE_TAG]
        instance = self.registry.create(type_name)
        payload = node[PAYLOAD]
        if isinstance(payload, dict):
            fields = {key: self.decode(item) for key, item in payload.items()}
            return _populate_mapping(instance, fields, type_name)
        if isinstance(payload, list):
            items = [self.decode(item) for item in payload]
            return _populate_sequence(instance, items, type_name)
        raise ReportFormatError(f"Payload of {type_name} must be a mapping or a sequence")


def _populate_mapping(instance: Any, fields: dict[str, Any], type_name: str) -> Any:
    if isinstance(instance, MappingSerializable):
        instance.restore_mapping(fields)
    elif isinstance(instance, dict):
        instance.update(fields)
    elif hasattr(instance, "__dict__"):
        vars(instance).update(fields)
    else:
        raise ReportFormatError(f"{type_name} cannot be populated from a mapping payload")
    return instance


def _populate_sequence(instance: Any, items: list[Any], type_name: str) -> Any:
    if isinstance(instance, SequenceSerializable):
        instance.restore_sequence(items)
    elif isinstance(instance, list):
        instance.extend(items)
    elif isinstance(instance, tuple):
        return tuple.__new__(type(instance), items)
    else:
        raise ReportFormatError(f"{type_name} cannot be populated from a sequence payload")
    return instance


def build_tree(value: Any, registry: TypeRegistry | None = None) -> Any:
    """Encode ``value`` into a value tree."""
    return TreeEncoder(registry).encode(value)


def load_tree(tree: Any, registry: TypeRegistry | None = None) -> Any:
    """Decode a value tree back into objects.

    Raises:
        UnknownTypeError: If a tagged node names an unregistered type.
    """
    return TreeDecoder(registry).decode(tree)
