"""SQL rewrite engine for master/slave routing.

Replaces every schema name reference in a statement with the name of the
data source that backs it.  All other text, including the spans of
non-schema tokens, is copied through unchanged.

The rewrite is a pure function of its inputs and keeps no state between
calls, so one engine per statement is cheap and safe across threads.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from proxy_rewrite.builder import SchemaPlaceholder, SQLBuilder
from proxy_rewrite.config import Settings
from proxy_rewrite.errors import MalformedTokenError
from proxy_rewrite.metadata import MetaDataStore
from proxy_rewrite.profiling import profile_operation
from proxy_rewrite.rule import MasterSlaveRule
from proxy_rewrite.tokens import SchemaToken, SQLStatement, SQLToken, sort_by_begin_position

logger = logging.getLogger(__name__)


class MasterSlaveSQLRewriteEngine:
    """Rewrites schema names of one statement for a master/slave rule.

    Parameters
    ----------
    master_slave_rule:
        Routing context, handed through to the builder untouched.
    original_sql:
        The SQL text the parser produced *sql_statement* from.
    sql_statement:
        Parsed statement carrying the tokens.
    metadata:
        Store resolving schema names to data source names.
    verify_literals:
        If ``True``, reject schema tokens whose ``original_literals`` do not
        match the SQL text at their position.
    """

    def __init__(
        self,
        master_slave_rule: MasterSlaveRule | None,
        original_sql: str,
        sql_statement: SQLStatement,
        metadata: MetaDataStore,
        *,
        verify_literals: bool = False,
    ) -> None:
        self._master_slave_rule = master_slave_rule
        self._original_sql = original_sql
        self._sql_statement = sql_statement
        self._metadata = metadata
        self._verify_literals = verify_literals

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        master_slave_rule: MasterSlaveRule | None,
        original_sql: str,
        sql_statement: SQLStatement,
        metadata: MetaDataStore,
    ) -> MasterSlaveSQLRewriteEngine:
        return cls(
            master_slave_rule,
            original_sql,
            sql_statement,
            metadata,
            verify_literals=settings.verify_token_literals,
        )

    @profile_operation("sql.rewrite")
    def rewrite(self) -> str:
        """Return the rewritten SQL.

        Raises
        ------
        MalformedTokenError
            If a schema token lies outside the SQL or overlaps another one.
        SchemaNotFoundError
            If a schema name has no data source in the metadata store.
        """
        if not self._sql_statement.sql_tokens:
            return self._original_sql

        builder = SQLBuilder()
        self._splice(builder, sort_by_begin_position(self._sql_statement.sql_tokens))
        return builder.to_sql(self._master_slave_rule, self._metadata)

    def _splice(self, builder: SQLBuilder, tokens: tuple[SQLToken, ...]) -> None:
        schema_tokens: list[SchemaToken] = []
        for token in tokens:
            match token:
                case SchemaToken():
                    schema_tokens.append(token)
                case _:
                    # Left in place; the surrounding literal gap carries its text.
                    pass

        sql = self._original_sql
        if not schema_tokens:
            builder.append_literals(sql)
            return

        builder.append_literals(sql[: self._checked_begin(schema_tokens[0], 0)])
        for index, token in enumerate(schema_tokens):
            builder.append_placeholder(SchemaPlaceholder(token.schema_name))
            if index + 1 < len(schema_tokens):
                gap_end = self._checked_begin(schema_tokens[index + 1], token.end_position)
            else:
                gap_end = len(sql)
            builder.append_literals(sql[token.end_position : gap_end])

        logger.debug("Spliced %d schema token(s) out of %d token(s)", len(schema_tokens), len(tokens))

    def _checked_begin(self, token: SchemaToken, cursor: int) -> int:
        """Validate *token* against the SQL and the current cursor."""
        sql = self._original_sql
        if token.begin_position < 0 or token.end_position > len(sql):
            raise MalformedTokenError(
                token,
                f"span [{token.begin_position}, {token.end_position}) is outside SQL of length {len(sql)}",
            )
        if token.begin_position < cursor:
            raise MalformedTokenError(
                token,
                f"begins at {token.begin_position}, before the previous token ends at {cursor}",
            )
        if self._verify_literals and sql[token.begin_position : token.end_position] != token.original_literals:
            raise MalformedTokenError(token, "original literals do not match the SQL text")
        return token.begin_position


def rewrite(
    original_sql: str,
    tokens: Iterable[SQLToken],
    master_slave_rule: MasterSlaveRule | None,
    metadata: MetaDataStore,
    *,
    verify_literals: bool = False,
) -> str:
    """Rewrite *original_sql* using *tokens*.

    Convenience wrapper that builds the statement and runs a fresh
    :class:`MasterSlaveSQLRewriteEngine`.
    """
    engine = MasterSlaveSQLRewriteEngine(
        master_slave_rule,
        original_sql,
        SQLStatement.of(tokens),
        metadata,
        verify_literals=verify_literals,
    )
    return engine.rewrite()
