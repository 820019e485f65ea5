"""Wire encodings for value trees.

Two renderings of the same tree:

- text: JSON, for inspection and interop
- native: pickle of the plain tree, for fast in-process round trips

Native payloads are loaded with an unpickler that refuses every global, so
only the plain containers and scalars a tree is made of can come back out.
"""

from __future__ import annotations

import io
import json
import pickle
from typing import Any

from resultforge.codec.tree import build_tree, load_tree
from resultforge.core.exceptions import ReportFormatError


class _TreeUnpickler(pickle.Unpickler):
    def find_class(self, module: str, name: str) -> Any:
        raise pickle.UnpicklingError(f"global '{module}.{name}' is not allowed in a value tree")


def to_text(tree: Any) -> str:
    """Render a tree as JSON text."""
    return json.dumps(tree, indent=2, sort_keys=True, ensure_ascii=False)


def from_text(text: str | bytes) -> Any:
    """Parse JSON text back into a tree.

    Raises:
        ReportFormatError: If the text is not valid JSON.
    """
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ReportFormatError(f"Invalid tree text: {e}") from e


def to_native(tree: Any) -> bytes:
    """Render a tree in the compact native encoding."""
    return pickle.dumps(tree, protocol=pickle.HIGHEST_PROTOCOL)


def from_native(data: bytes) -> Any:
    """Load a tree from the compact native encoding.

    Raises:
        ReportFormatError: If the data is truncated, corrupt, or references globals.
    """
    try:
        return _TreeUnpickler(io.BytesIO(data)).load()
    except (pickle.UnpicklingError, EOFError, ValueError, TypeError) as e:
        raise ReportFormatError(f"Invalid native tree data: {e}") from e


class TreeCodecMixin:
    """Whole-object codec entry points for serializable types."""

    def build_tree(self) -> Any:
        return build_tree(self)

    @classmethod
    def load_tree(cls, tree: Any) -> Any:
        """Decode ``tree`` and check the result is an instance of ``cls``."""
        value = load_tree(tree)
        if not isinstance(value, cls):
            raise TypeError(f"Tree decodes to {type(value).__name__}, expected {cls.__name__}")
        return value

    def serialize(self) -> bytes:
        return to_native(self.build_tree())

    @classmethod
    def deserialize(cls, data: bytes) -> Any:
        return cls.load_tree(from_native(data))

    def to_text(self) -> str:
        return to_text(self.build_tree())

    @classmethod
    def from_text(cls, text: str | bytes) -> Any:
        return cls.load_tree(from_text(text))
