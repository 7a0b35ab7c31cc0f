"""Tests for ``dbspine.params`` — placeholder parsing and parameter binding."""

from __future__ import annotations

import pytest

from dbspine.errors import ExecutionError
from dbspine.params import (
    ParamType,
    Placeholder,
    bind_typed,
    check_named,
    check_positional,
    normalize_named,
    parse_sql,
)


class TestParseSQL:
    def test_named(self):
        parsed = parse_sql("SELECT * FROM t WHERE a = :a AND b = :b_2")
        assert parsed.names == ("a", "b_2")
        assert parsed.positional_count == 0
        assert parsed.is_mixed is False

    def test_repeated_name_counts_once(self):
        parsed = parse_sql("SELECT :x + :x")
        assert parsed.names == ("x",)
        assert len(parsed.placeholders) == 2

    def test_positional(self):
        parsed = parse_sql("INSERT INTO t VALUES (?, ?, ?)")
        assert parsed.positional_count == 3
        assert parsed.names == ()
        assert [p.index for p in parsed.placeholders] == [0, 1, 2]

    def test_mixed(self):
        assert parse_sql("SELECT * FROM t WHERE a = :a AND b = ?").is_mixed is True

    def test_placeholders_in_string_literals_are_ignored(self):
        parsed = parse_sql("SELECT ':nope', '?', 'it''s :x' FROM t WHERE a = :a")
        assert parsed.names == ("a",)
        assert parsed.positional_count == 0

    def test_quoted_identifiers_are_ignored(self):
        parsed = parse_sql('SELECT "a:b", `c?d` FROM t')
        assert parsed.placeholders == ()

    def test_comments_are_ignored(self):
        sql = "SELECT 1 -- where :a\n/* and ? */ FROM t WHERE b = :b"
        assert parse_sql(sql).names == ("b",)

    def test_double_colon_is_not_a_placeholder(self):
        assert parse_sql("SELECT a::text FROM t").placeholders == ()

    def test_colon_without_identifier(self):
        assert parse_sql("SELECT ': ' || x FROM t").placeholders == ()

    def test_hash_comment_only_in_mysql_syntax(self):
        sql = "SELECT 1 # :a\nFROM t"
        assert parse_sql(sql, mysql_syntax=True).names == ()
        assert parse_sql(sql).names == ("a",)

    def test_backslash_escape_only_in_mysql_syntax(self):
        sql = r"SELECT 'a\' :x' FROM t"
        assert parse_sql(sql, mysql_syntax=True).names == ()

    def test_render(self):
        parsed = parse_sql("SELECT * FROM t WHERE a = :a AND b = ':b'")
        rendered = parsed.render(lambda name: f"%({name})s", lambda index: "%s")
        assert rendered == "SELECT * FROM t WHERE a = %(a)s AND b = ':b'"

    def test_chunks_hold_placeholders(self):
        parsed = parse_sql("SELECT ?")
        assert parsed.chunks == ("SELECT ", Placeholder(index=0))


class TestNamedParameters:
    def test_leading_colon_is_stripped(self):
        assert normalize_named({":id": 1, "name": "a"}) == {"id": 1, "name": "a"}

    def test_duplicate_after_normalization(self):
        with pytest.raises(ExecutionError, match="more than once"):
            normalize_named({":id": 1, "id": 2})

    def test_non_string_key(self):
        with pytest.raises(ExecutionError):
            normalize_named({1: "a"})

    def test_check_named_exact(self):
        check_named(parse_sql("SELECT :a, :b"), {"a": 1, "b": 2})

    def test_check_named_missing(self):
        with pytest.raises(ExecutionError, match="missing b"):
            check_named(parse_sql("SELECT :a, :b"), {"a": 1})

    def test_check_named_unexpected(self):
        with pytest.raises(ExecutionError, match="unexpected c"):
            check_named(parse_sql("SELECT :a"), {"a": 1, "c": 3})


class TestPositionalParameters:
    def test_count_matches(self):
        check_positional(parse_sql("SELECT ?, ?"), (1, 2))

    def test_count_mismatch(self):
        with pytest.raises(ExecutionError, match="2 positional placeholder"):
            check_positional(parse_sql("SELECT ?, ?"), (1,))


class TestBindTyped:
    def test_no_hints(self):
        assert bind_typed([1, "a"], None) == (1, "a")

    def test_mapping_hints_by_position(self):
        values = bind_typed(["42", 7, "raw"], {1: ParamType.INTEGER, 2: ParamType.STRING, 3: ParamType.BINARY})
        assert values == (42, "7", b"raw")

    def test_sequence_hints_with_gaps(self):
        assert bind_typed(["1", "2"], [None, ParamType.INTEGER]) == ("1", 2)

    def test_string_type_names(self):
        assert bind_typed(["5"], {1: "integer"}) == (5,)

    def test_null_type(self):
        assert bind_typed(["x"], {1: ParamType.NULL}) == (None,)

    def test_none_value_stays_none(self):
        assert bind_typed([None], {1: ParamType.INTEGER}) == (None,)

    def test_bytes_as_string(self):
        assert bind_typed([b"abc"], {1: ParamType.STRING}) == ("abc",)

    def test_named_params_rejected(self):
        with pytest.raises(ExecutionError, match="ordinal"):
            bind_typed({"a": 1}, {1: ParamType.INTEGER})

    def test_string_params_rejected(self):
        with pytest.raises(ExecutionError):
            bind_typed("abc", {1: ParamType.STRING})

    def test_position_out_of_range(self):
        with pytest.raises(ExecutionError, match="out of range"):
            bind_typed([1], {2: ParamType.INTEGER})

    def test_position_zero_out_of_range(self):
        with pytest.raises(ExecutionError, match="out of range"):
            bind_typed([1], {0: ParamType.INTEGER})

    def test_too_many_sequence_hints(self):
        with pytest.raises(ExecutionError):
            bind_typed([1], [ParamType.INTEGER, ParamType.STRING])

    def test_unknown_type(self):
        with pytest.raises(ExecutionError, match="Unknown parameter type"):
            bind_typed([1], {1: "decimal"})

    def test_unconvertible_value(self):
        with pytest.raises(ExecutionError, match="as integer"):
            bind_typed(["abc"], {1: ParamType.INTEGER})

    def test_int_as_binary_rejected(self):
        with pytest.raises(ExecutionError):
            bind_typed([5], {1: ParamType.BINARY})
