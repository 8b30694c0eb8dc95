"""
Declarative filter expressions

A small tagged union (Eq / And / Or) describing record filters independently
of any storage backend. Expressions can be evaluated in memory against a
record, rendered to a TinyDB query for pushdown, or dumped to a plain dict.
"""
from dataclasses import dataclass
from enum import Enum
from functools import reduce
from typing import Any, Mapping, Tuple, Union
import operator

from tinydb import Query
from tinydb.queries import QueryInstance


def _plain(value: Any) -> Any:
    """Enum members compare and store by their value"""
    if isinstance(value, Enum):
        return value.value
    return value


def field_value(record: Any, name: str) -> Any:
    """Read a field from a mapping (TinyDB document) or an attribute object"""
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


@dataclass(frozen=True)
class Eq:
    field: str
    value: Any

    def matches(self, record: Any) -> bool:
        return _plain(field_value(record, self.field)) == _plain(self.value)

    def to_query(self) -> QueryInstance:
        return Query()[self.field] == _plain(self.value)

    def to_dict(self) -> dict:
        return {"eq": [self.field, _plain(self.value)]}


@dataclass(frozen=True, init=False)
class And:
    clauses: Tuple["FilterExpression", ...]

    def __init__(self, *clauses: "FilterExpression"):
        object.__setattr__(self, "clauses", tuple(clauses))

    def matches(self, record: Any) -> bool:
        return all(clause.matches(record) for clause in self.clauses)

    def to_query(self) -> QueryInstance:
        if not self.clauses:
            return Query().noop()
        return reduce(operator.and_, (clause.to_query() for clause in self.clauses))

    def to_dict(self) -> dict:
        return {"and": [clause.to_dict() for clause in self.clauses]}


@dataclass(frozen=True, init=False)
class Or:
    clauses: Tuple["FilterExpression", ...]

    def __init__(self, *clauses: "FilterExpression"):
        object.__setattr__(self, "clauses", tuple(clauses))

    def matches(self, record: Any) -> bool:
        return any(clause.matches(record) for clause in self.clauses)

    def to_query(self) -> QueryInstance:
        # An empty disjunction matches nothing
        if not self.clauses:
            return ~Query().noop()
        return reduce(operator.or_, (clause.to_query() for clause in self.clauses))

    def to_dict(self) -> dict:
        return {"or": [clause.to_dict() for clause in self.clauses]}


FilterExpression = Union[Eq, And, Or]
