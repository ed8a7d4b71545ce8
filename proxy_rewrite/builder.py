"""Append-only SQL builder with deferred schema placeholders.

Building is split in two phases.  During splicing the engine appends
literal text and :class:`SchemaPlaceholder` segments without touching any
metadata.  :meth:`SQLBuilder.to_sql` then resolves every placeholder against
the metadata store and joins the segments, in order, into the final SQL.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Union

from proxy_rewrite.errors import BuilderConsumedError, SchemaNotFoundError
from proxy_rewrite.metadata import MetaDataStore
from proxy_rewrite.profiling import profile_operation
from proxy_rewrite.rule import MasterSlaveRule

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SchemaPlaceholder:
    """Deferred replacement for a schema name.

    ``alias`` is reserved and never influences the resolved text.
    """

    schema_name: str
    alias: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "schema_name", self.schema_name.lower())

    def resolve(self, metadata: MetaDataStore) -> str:
        """Return the data source name backing this schema.

        Raises
        ------
        SchemaNotFoundError
            If *metadata* has no entry for the schema.
        """
        data_source = metadata.get_data_source_name(self.schema_name)
        if data_source is None:
            raise SchemaNotFoundError(self.schema_name)
        return data_source


Segment = Union[str, SchemaPlaceholder]


class SQLBuilder:
    """Ordered sequence of literal and placeholder segments.

    A builder is single use: once :meth:`to_sql` has run, further appends
    or resolves raise :class:`BuilderConsumedError`.
    """

    def __init__(self) -> None:
        self._segments: list[Segment] = []
        self._consumed = False

    @property
    def segments(self) -> tuple[Segment, ...]:
        return tuple(self._segments)

    def append_literals(self, literals: str) -> None:
        self._check_open()
        self._segments.append(literals)

    def append_placeholder(self, placeholder: SchemaPlaceholder) -> None:
        self._check_open()
        self._segments.append(placeholder)

    @profile_operation("sql.resolve")
    def to_sql(self, master_slave_rule: MasterSlaveRule | None, metadata: MetaDataStore) -> str:
        """Resolve placeholders and join all segments.

        *master_slave_rule* is routing context only; the substituted text
        comes from *metadata* alone.  The builder is consumed even when
        resolution fails, and no partial SQL is ever returned.
        """
        self._check_open()
        self._consumed = True

        parts: list[str] = []
        for segment in self._segments:
            if isinstance(segment, SchemaPlaceholder):
                parts.append(segment.resolve(metadata))
            else:
                parts.append(segment)

        logger.debug(
            "Resolved %d segment(s) for rule %s",
            len(self._segments),
            master_slave_rule.name if master_slave_rule is not None else None,
        )
        return "".join(parts)

    def _check_open(self) -> None:
        if self._consumed:
            raise BuilderConsumedError("SQLBuilder has already been resolved")

    def __repr__(self) -> str:
        return f"SQLBuilder(segments={self._segments!r}, consumed={self._consumed})"
