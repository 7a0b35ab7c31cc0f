"""Tests for ``dbspine.cardinality`` — One / Empty / TooMany outcomes."""

from __future__ import annotations

import pytest

from dbspine.cardinality import Empty, One, TooMany, classify
from dbspine.record import Record


def _rows(n: int) -> list[Record]:
    return [Record({"id": i}) for i in range(1, n + 1)]


class TestClassify:
    def test_empty(self):
        assert classify([]) == Empty()

    def test_one(self):
        rows = _rows(1)
        outcome = classify(rows)
        assert outcome == One(rows[0])
        assert outcome.record is rows[0]

    @pytest.mark.parametrize("n", [2, 3, 10])
    def test_too_many(self, n):
        assert classify(_rows(n)) == TooMany(n)


class TestOutcomeFlags:
    def test_one(self):
        outcome = One(Record({"id": 1}))
        assert (outcome.is_one(), outcome.is_empty(), outcome.is_too_many()) == (True, False, False)

    def test_empty(self):
        outcome = Empty()
        assert (outcome.is_one(), outcome.is_empty(), outcome.is_too_many()) == (False, True, False)

    def test_too_many(self):
        outcome = TooMany(2)
        assert (outcome.is_one(), outcome.is_empty(), outcome.is_too_many()) == (False, False, True)

    def test_outcomes_are_frozen(self):
        with pytest.raises(AttributeError):
            TooMany(2).count = 3


class TestPatternMatching:
    @pytest.mark.parametrize("n, expected", [(0, "empty"), (1, "one:1"), (4, "many:4")])
    def test_match(self, n, expected):
        match classify(_rows(n)):
            case One(record):
                result = f"one:{record['id']}"
            case Empty():
                result = "empty"
            case TooMany(count):
                result = f"many:{count}"
        assert result == expected
