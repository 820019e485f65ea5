"""resultforge - canonical test-result model, tree codec and report adapters."""

__version__ = "0.1.0"

from resultforge.codec import (
    MappingSerializable,
    SequenceSerializable,
    build_tree,
    load_tree,
    register_type,
)
from resultforge.models import (
    DetailEntry,
    Node,
    OutputArtifact,
    Record,
    RecordCollection,
    TestDescriptor,
    TestOutcome,
)
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

__all__ = [
    "DetailEntry",
    "GenericParser",
    "JUnitParser",
    "LTPParser",
    "MappingSerializable",
    "Node",
    "OutputArtifact",
    "Parser",
    "ParserRegistry",
    "Record",
    "RecordCollection",
    "SequenceSerializable",
    "TestDescriptor",
    "TestOutcome",
    "XUnitParser",
    "build_tree",
    "get_default_registry",
    "load_tree",
    "parser",
    "register_type",
]
