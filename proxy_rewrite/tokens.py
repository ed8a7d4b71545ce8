"""SQL tokens handed over by the upstream parser.

A token marks a region of the original SQL text.  The parser owns the
tokens; the rewrite engine only reads them.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable
from dataclasses import dataclass, field

# ---------------------------------------------------------------------------
# Statement type
# ---------------------------------------------------------------------------


class SQLType(str, enum.Enum):
    """Statement category as reported by the parser."""

    DQL = "DQL"
    DML = "DML"
    DDL = "DDL"
    TCL = "TCL"
    DAL = "DAL"
    DCL = "DCL"


# ---------------------------------------------------------------------------
# Token variants
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class SQLToken:
    """A positional marker into the original SQL.

    ``original_literals`` is the exact text found at ``begin_position``.
    """

    begin_position: int
    original_literals: str

    @property
    def end_position(self) -> int:
        """Offset just past the token's original text."""
        return self.begin_position + len(self.original_literals)


@dataclass(frozen=True, slots=True)
class SchemaToken(SQLToken):
    """A schema name reference, e.g. ``user_db`` in ``user_db.orders``."""

    schema_name: str = field(kw_only=True)


@dataclass(frozen=True, slots=True)
class TableToken(SQLToken):
    """A table name reference.  Handled by sibling rewrite engines."""

    table_name: str = field(kw_only=True)


@dataclass(frozen=True, slots=True)
class IndexToken(SQLToken):
    """An index name reference.  Handled by sibling rewrite engines."""

    index_name: str = field(kw_only=True)


# ---------------------------------------------------------------------------
# Statement
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class SQLStatement:
    """Parsed statement: its category and the tokens found in it."""

    sql_type: SQLType = SQLType.DQL
    sql_tokens: tuple[SQLToken, ...] = ()

    @classmethod
    def of(cls, tokens: Iterable[SQLToken], sql_type: SQLType = SQLType.DQL) -> SQLStatement:
        return cls(sql_type=sql_type, sql_tokens=tuple(tokens))

    def schema_tokens(self) -> list[SchemaToken]:
        return [t for t in self.sql_tokens if isinstance(t, SchemaToken)]


def sort_by_begin_position(tokens: Iterable[SQLToken]) -> tuple[SQLToken, ...]:
    """Return *tokens* ordered by ``begin_position``.

    The sort is stable, so tokens sharing a position keep their relative
    order.  The input sequence is left untouched.
    """
    return tuple(sorted(tokens, key=lambda t: t.begin_position))
