"""Filter expression tests"""

from types import SimpleNamespace

from tinydb import TinyDB
from tinydb.storages import MemoryStorage

from family_organizer.models.organizer import Visibility
from family_organizer.services.filters import And, Eq, Or


def make_table(*docs):
    table = TinyDB(storage=MemoryStorage).table("records")
    for doc in docs:
        table.insert(doc)
    return table


class TestMatches:
    """In-memory evaluation"""

    def test_eq(self):
        assert Eq("name", "a").matches({"name": "a"})
        assert not Eq("name", "a").matches({"name": "b"})
        assert not Eq("name", "a").matches({})

    def test_enum_values_compare_by_value(self):
        assert Eq("visibility", Visibility.FAMILY).matches({"visibility": "FAMILY"})
        assert Eq("visibility", "FAMILY").matches({"visibility": Visibility.FAMILY})

    def test_attribute_records(self):
        record = SimpleNamespace(name="a", size=2)
        assert And(Eq("name", "a"), Eq("size", 2)).matches(record)

    def test_and_or(self):
        expression = And(Eq("a", 1), Or(Eq("b", 2), Eq("c", 3)))
        assert expression.matches({"a": 1, "b": 2})
        assert expression.matches({"a": 1, "c": 3})
        assert not expression.matches({"a": 1, "b": 0, "c": 0})
        assert not expression.matches({"a": 0, "b": 2})

    def test_empty_and_matches_everything(self):
        assert And().matches({"anything": True})

    def test_empty_or_matches_nothing(self):
        assert not Or().matches({"anything": True})


class TestToQuery:
    """Rendering to TinyDB queries"""

    def test_pushdown_agrees_with_matches(self):
        docs = [
            {"a": 1, "b": 2, "c": 0},
            {"a": 1, "b": 0, "c": 3},
            {"a": 1, "b": 0, "c": 0},
            {"a": 0, "b": 2, "c": 3},
            {"b": 2},
        ]
        table = make_table(*docs)
        expression = And(Eq("a", 1), Or(Eq("b", 2), Eq("c", 3)))

        found = table.search(expression.to_query())
        assert [dict(d) for d in found] == [d for d in docs if expression.matches(d)]

    def test_empty_and_query_matches_everything(self):
        table = make_table({"a": 1}, {"a": 2})
        assert len(table.search(And().to_query())) == 2

    def test_empty_or_query_matches_nothing(self):
        table = make_table({"a": 1}, {"a": 2})
        assert table.search(Or().to_query()) == []

    def test_enum_value_stored_as_string(self):
        table = make_table({"visibility": "ADULT"}, {"visibility": "FAMILY"})
        found = table.search(Eq("visibility", Visibility.ADULT).to_query())
        assert [d["visibility"] for d in found] == ["ADULT"]


class TestToDict:
    """Plain rendering for logs"""

    def test_nested(self):
        expression = And(Eq("family_id", "F1"), Or(Eq("visibility", Visibility.FAMILY)))
        assert expression.to_dict() == {
            "and": [
                {"eq": ["family_id", "F1"]},
                {"or": [{"eq": ["visibility", "FAMILY"]}]},
            ]
        }

    def test_expressions_are_values(self):
        assert And(Eq("a", 1), Eq("b", 2)) == And(Eq("a", 1), Eq("b", 2))
        assert Or(Eq("a", 1)) != And(Eq("a", 1))
