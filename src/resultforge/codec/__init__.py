"""Value tree codec and its wire encodings."""

from .tree import (
    DICT_TYPE_NAME,
    PAYLOAD,
    TYPE_TAG,
    TYPES,
    MappingSerializable,
    SequenceSerializable,
    TreeDecoder,
    TreeEncoder,
    TypeRegistry,
    build_tree,
    is_tagged,
    load_tree,
    register_type,
)
from .wire import TreeCodecMixin, from_native, from_text, to_native, to_text

__all__ = [
    "DICT_TYPE_NAME",
    "PAYLOAD",
    "TYPE_TAG",
    "TYPES",
    "MappingSerializable",
    "SequenceSerializable",
    "TreeCodecMixin",
    "TreeDecoder",
    "TreeEncoder",
    "TypeRegistry",
    "build_tree",
    "from_native",
    "from_text",
    "is_tagged",
    "load_tree",
    "register_type",
    "to_native",
    "to_text",
]
