"""Unit tests for proxy_rewrite.tokens."""

from __future__ import annotations

import dataclasses

import pytest

from proxy_rewrite.tokens import (
    IndexToken,
    SchemaToken,
    SQLStatement,
    SQLType,
    TableToken,
    sort_by_begin_position,
)


class TestTokens:
    def test_end_position(self) -> None:
        token = SchemaToken(14, "user_db", schema_name="user_db")
        assert token.end_position == 21

    def test_end_position_empty_literals(self) -> None:
        assert TableToken(5, "", table_name="t").end_position == 5

    def test_schema_name_keeps_case(self) -> None:
        assert SchemaToken(0, "UserDB", schema_name="UserDB").schema_name == "UserDB"

    def test_schema_name_required(self) -> None:
        with pytest.raises(TypeError):
            SchemaToken(0, "user_db")  # type: ignore[call-arg]

    def test_frozen(self) -> None:
        token = SchemaToken(0, "user_db", schema_name="user_db")
        with pytest.raises(dataclasses.FrozenInstanceError):
            token.begin_position = 3  # type: ignore[misc]

    def test_variants_are_distinct(self) -> None:
        schema = SchemaToken(0, "x", schema_name="x")
        table = TableToken(0, "x", table_name="x")
        assert schema != table


class TestSortByBeginPosition:
    def test_sorts_ascending(self) -> None:
        tokens = [
            SchemaToken(30, "db_b", schema_name="db_b"),
            SchemaToken(4, "db_a", schema_name="db_a"),
            TableToken(12, "t1", table_name="t1"),
        ]
        assert [t.begin_position for t in sort_by_begin_position(tokens)] == [4, 12, 30]

    def test_stable_for_equal_positions(self) -> None:
        table = TableToken(14, "user_db.orders", table_name="orders")
        schema = SchemaToken(14, "user_db", schema_name="user_db")
        assert sort_by_begin_position([table, schema]) == (table, schema)
        assert sort_by_begin_position([schema, table]) == (schema, table)

    def test_input_not_mutated(self) -> None:
        tokens = [SchemaToken(9, "b", schema_name="b"), SchemaToken(1, "a", schema_name="a")]
        original = list(tokens)
        sort_by_begin_position(tokens)
        assert tokens == original

    def test_accepts_generators(self) -> None:
        tokens = (IndexToken(i, "idx", index_name="idx") for i in (3, 1, 2))
        assert [t.begin_position for t in sort_by_begin_position(tokens)] == [1, 2, 3]

    def test_empty(self) -> None:
        assert sort_by_begin_position([]) == ()


class TestSQLStatement:
    def test_defaults(self) -> None:
        statement = SQLStatement()
        assert statement.sql_type == SQLType.DQL
        assert statement.sql_tokens == ()

    def test_of_copies_into_tuple(self) -> None:
        tokens = [SchemaToken(0, "a", schema_name="a")]
        statement = SQLStatement.of(tokens, SQLType.DML)
        tokens.append(SchemaToken(5, "b", schema_name="b"))
        assert len(statement.sql_tokens) == 1
        assert statement.sql_type == SQLType.DML

    def test_schema_tokens(self) -> None:
        schema = SchemaToken(14, "user_db", schema_name="user_db")
        statement = SQLStatement.of([TableToken(22, "orders", table_name="orders"), schema])
        assert statement.schema_tokens() == [schema]
