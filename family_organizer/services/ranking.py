"""
Search relevance scoring

Scores a free-text query against a record's title and description:
exact title match 100, title prefix 80, title substring 60 (only the
strongest applies), description substring +20, titles of 50 characters
or fewer +10.
"""
from typing import Any, Iterable, Iterator, List, Optional, Tuple

from ..errors import InvalidQueryError
from .filters import field_value

EXACT_MATCH_SCORE = 100
PREFIX_MATCH_SCORE = 80
SUBSTRING_MATCH_SCORE = 60
DESCRIPTION_MATCH_SCORE = 20
SHORT_TITLE_SCORE = 10
SHORT_TITLE_LENGTH = 50
MAX_SCORE = EXACT_MATCH_SCORE + DESCRIPTION_MATCH_SCORE + SHORT_TITLE_SCORE

DEFAULT_MIN_QUERY_LENGTH = 2


def validate_query(query: Optional[str], min_length: int = DEFAULT_MIN_QUERY_LENGTH) -> str:
    """Strip the query and reject it when shorter than min_length"""
    stripped = (query or "").strip()
    if not stripped or len(stripped) < min_length:
        raise InvalidQueryError(min_length)
    return stripped


def score(query: str, title: str, description: Optional[str] = None) -> int:
    """Relevance of a record to the query, between 0 and MAX_SCORE"""
    if not query or not query.strip():
        raise InvalidQueryError(DEFAULT_MIN_QUERY_LENGTH)

    title = title or ""
    query_lower = query.lower()
    title_lower = title.lower()

    total = 0
    if title_lower == query_lower:
        total += EXACT_MATCH_SCORE
    elif title_lower.startswith(query_lower):
        total += PREFIX_MATCH_SCORE
    elif query_lower in title_lower:
        total += SUBSTRING_MATCH_SCORE

    if description and query_lower in description.lower():
        total += DESCRIPTION_MATCH_SCORE

    if len(title) <= SHORT_TITLE_LENGTH:
        total += SHORT_TITLE_SCORE

    return total


class RankedResults:
    """Records paired with their score, highest first.

    Ranking happens on first iteration and is reused afterwards, so the
    results can be iterated any number of times. Equal scores keep the
    order the records were given in.
    """

    def __init__(
        self,
        records: Iterable[Any],
        query: str,
        title_key: str = "title",
        description_key: str = "description"
    ):
        self.query = query
        self.title_key = title_key
        self.description_key = description_key
        self._records = tuple(records)
        self._ranked: Optional[List[Tuple[Any, int]]] = None

    def _rank(self) -> List[Tuple[Any, int]]:
        scored = [
            (
                record,
                score(
                    self.query,
                    field_value(record, self.title_key),
                    field_value(record, self.description_key)
                )
            )
            for record in self._records
        ]
        # sorted() is stable, so ties stay in input order
        return sorted(scored, key=lambda pair: -pair[1])

    def __iter__(self) -> Iterator[Tuple[Any, int]]:
        if self._ranked is None:
            self._ranked = self._rank()
        return iter(self._ranked)

    def __len__(self) -> int:
        return len(self._records)


def rank(
    records: Iterable[Any],
    query: str,
    title_key: str = "title",
    description_key: str = "description",
    min_length: int = DEFAULT_MIN_QUERY_LENGTH
) -> RankedResults:
    """Order records by relevance to the query (stable on ties)"""
    query = validate_query(query, min_length)
    return RankedResults(records, query, title_key, description_key)
