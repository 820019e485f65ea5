"""Tests for Record, RecordCollection and Node."""

from __future__ import annotations

import pytest

from resultforge.codec import build_tree, load_tree
from resultforge.models import DetailEntry, Node, Record, RecordCollection, TestOutcome


class TestRecord:
    """Tests for the open-field record."""

    def test_equality_ignores_insertion_order(self):
        """Equality ignores field insertion order."""
        assert Record(bar=4, foo=2) == Record(foo=2, bar=4)

    def test_as_mapping_ignores_insertion_order(self):
        """as_mapping() compares equal whatever the set order."""
        record = Record()
        record.set("foo", 2).set("bar", 4)

        assert record.as_mapping() == {"bar": 4, "foo": 2}

    def test_round_trip_ignores_insertion_order(self):
        """Records built in different orders decode equal."""
        original = Record(bar=4, foo=2)
        restored = Record.from_text(Record(foo=2, bar=4).to_text())

        assert restored == original

    def test_set_adds_a_field_at_any_time(self):
        """set() adds new fields and returns the record."""
        record = Record(name="a")

        assert record.set("late", [1, 2]) is record
        assert record.get("late") == [1, 2]
        assert "late" in record.fields()

    def test_get_missing_field_returns_default(self):
        """get() returns the default for a missing field."""
        assert Record().get("absent") is None
        assert Record().get("absent", 3) == 3

    def test_item_access(self):
        """Fields support item access and membership."""
        record = Record({"a": 1})
        record["b"] = 2

        assert record["a"] == 1
        assert "b" in record
        with pytest.raises(KeyError):
            record["missing"]

    def test_all_fields_participate_in_equality(self):
        """An extra field, even None, breaks equality."""
        assert Record(a=1) != Record(a=1, extra=None)

    def test_subclass_round_trip_keeps_type(self):
        """Record subclasses decode to their own type."""
        detail = DetailEntry(result="fail", text="out.txt", title="check")

        restored = load_tree(build_tree(detail))

        assert type(restored) is DetailEntry
        assert restored.ok is False
        assert restored == detail

    def test_records_are_unhashable(self):
        """Records are mutable and therefore unhashable."""
        with pytest.raises(TypeError):
            hash(Record(a=1))


class TestRecordCollection:
    """Tests for the ordered heterogeneous collection."""

    def test_add_returns_the_item(self):
        """add() returns the added item."""
        collection = RecordCollection()
        record = Record(a=1)

        assert collection.add(record) is record
        assert collection.size() == 1

    def test_add_then_remove_restores_size(self):
        """Adding then removing an item restores the size."""
        collection = RecordCollection([Record(i=0)])

        collection.add(Record(i=1))
        assert collection.get(1) == Record(i=1)
        collection.remove(0)

        assert collection.size() == 1

    def test_remove_shifts_later_items(self):
        """remove() shifts later items down."""
        collection = RecordCollection([Record(i=0), Record(i=1), Record(i=2)])

        removed = collection.remove(1)

        assert removed == Record(i=1)
        assert collection.get(1) == Record(i=2)
        assert len(collection) == 2

    def test_first_and_last(self):
        """first() and last() return the end items."""
        collection = RecordCollection(["a", "b", "c"])

        assert collection.first() == "a"
        assert collection.last() == "c"

    def test_first_and_last_of_empty_collection(self):
        """first() and last() of an empty collection are None."""
        assert RecordCollection().first() is None
        assert RecordCollection().last() is None

    def test_get_out_of_range_raises(self):
        """get() past the end raises IndexError."""
        with pytest.raises(IndexError):
            RecordCollection().get(0)

    def test_each_visits_items_in_order(self):
        """each() visits items in insertion order."""
        seen = []
        RecordCollection([Record(i=0), Record(i=1)]).each(lambda r: seen.append(r.get("i")))

        assert seen == [0, 1]

    def test_holds_heterogeneous_items(self):
        """Records, plain values and subclasses mix and round-trip."""
        collection = RecordCollection([Record(a=1), DetailEntry(), "text", 4])

        restored = RecordCollection.from_text(collection.to_text())

        assert restored == collection
        assert type(restored.get(1)) is DetailEntry


class TestSearch:
    """Tests for regex search over fields."""

    @pytest.fixture
    def collection(self):
        return RecordCollection(
            [
                Record(name="cpuhotplug02", status="pass"),
                Record(name="open01", status="fail"),
                Record(name="cpuhotplug03", status="pass"),
                Record(status="pass"),
            ]
        )

    def test_search_returns_matches_in_order(self, collection):
        """search() keeps the collection order."""
        found = collection.search("name", r"^cpuhotplug")

        assert [r.get("name") for r in found] == ["cpuhotplug02", "cpuhotplug03"]

    def test_search_is_unanchored(self, collection):
        """Patterns match anywhere in the value."""
        assert collection.search("name", "01").size() == 1

    def test_missing_field_never_matches(self, collection):
        """Items without the field never match."""
        assert collection.search("name", ".*").size() == 3

    def test_search_stringifies_values(self):
        """Non-string values are matched as text."""
        collection = RecordCollection([Record(count=12), Record(count=3)])

        assert collection.search("count", r"^\d\d$").first() == Record(count=12)

    def test_search_returns_a_new_collection(self, collection):
        """search() leaves the source collection untouched."""
        found = collection.search("status", "pass")

        assert isinstance(found, RecordCollection)
        assert found is not collection
        assert collection.size() == 4

    def test_search_in_details_flattens_matches(self):
        """Matching details from all outcomes are flattened."""
        outcomes = RecordCollection(
            [
                TestOutcome(
                    details=[
                        DetailEntry(text="pkg-a-1.txt"),
                        DetailEntry(result="fail", text="other-a-2.txt"),
                    ]
                ),
                TestOutcome(details=[DetailEntry(text="pkg-b-1.txt")]),
                Record(name="no details here"),
            ]
        )

        found = outcomes.search_in_details("text", "^pkg")

        assert [d.text for d in found] == ["pkg-a-1.txt", "pkg-b-1.txt"]

    def test_search_in_details_by_result(self):
        """Details are searchable by result."""
        outcomes = RecordCollection(
            [TestOutcome(details=[{"result": "fail", "text": "x"}, {"result": "ok", "text": "y"}])]
        )

        assert outcomes.search_in_details("result", "fail").size() == 1


class TestNode:
    """Tests for navigation over schema-less documents."""

    def test_chained_get(self):
        """get() calls chain through nested mappings."""
        node = Node({"a": {"b": {"c": 3}}})

        assert node.get("a").get("b").get("c").val == 3

    def test_attribute_navigation(self):
        """Attributes navigate mapping keys."""
        node = Node({"environment": {"gcc": "7.2.1"}})

        assert node.environment.gcc.val == "7.2.1"

    def test_missing_key_yields_empty_node(self):
        """A missing key gives an empty node all the way down."""
        node = Node({"a": 1})

        assert node.get("missing").get("deeper").val is None

    def test_sequence_index(self):
        """Integer keys index into sequences."""
        node = Node({"items": [10, 20]})

        assert node.items.get(1).val == 20
        assert node.items.get(5).val is None

    def test_scalar_has_no_children(self):
        """A scalar node has no children."""
        assert Node(5).get("x").val is None

    def test_private_names_are_not_navigated(self):
        """Underscore names raise AttributeError."""
        with pytest.raises(AttributeError):
            Node({"_hidden": 1})._hidden

    def test_round_trip(self):
        """The wrapped document survives a text round trip."""
        node = Node({"a": [1, {"b": None}]})

        assert Node.from_text(node.to_text()) == node
