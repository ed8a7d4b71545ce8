"""Data source metadata used to resolve schema placeholders.

The store maps a lower-cased logic schema name to the name of the physical
data source that backs it.  Per data source it also keeps the connection
coordinates parsed from the JDBC URL.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from proxy_rewrite.errors import RuleConfigurationError

if TYPE_CHECKING:
    from proxy_rewrite.config import RuleConfiguration

logger = logging.getLogger(__name__)

_DEFAULT_PORTS: dict[str, int] = {
    "mysql": 3306,
    "mariadb": 3306,
    "postgresql": 5432,
    "sqlserver": 1433,
    "oracle": 1521,
}

_NETWORK_URL = re.compile(
    r"^jdbc:(?P<db>[a-z0-9]+):(?:thin:@)?//(?P<host>[\w\-.]+)(?::(?P<port>\d+))?[/:;](?:databaseName=)?(?P<schema>[\w\-$]+)",
    re.IGNORECASE,
)
_H2_MEMORY_URL = re.compile(r"^jdbc:h2:mem:(?P<schema>[\w\-$]+)", re.IGNORECASE)


@runtime_checkable
class MetaDataStore(Protocol):
    """Anything that can turn a schema name into a data source name."""

    def get_data_source_name(self, schema_name: str) -> str | None:
        """Return the data source for *schema_name* (lower-cased), or ``None``."""
        ...


@dataclass(frozen=True, slots=True)
class DataSourceMetaData:
    """Connection coordinates of one physical data source."""

    host: str
    port: int
    schema_name: str

    @classmethod
    def from_url(cls, url: str) -> DataSourceMetaData:
        """Parse a JDBC URL such as ``jdbc:mysql://127.0.0.1:3306/demo_ds``.

        H2 in-memory URLs (``jdbc:h2:mem:demo_ds``) have no host and a port
        of ``-1``.

        Raises
        ------
        RuleConfigurationError
            If the URL is not a JDBC URL this parser understands.
        """
        memory = _H2_MEMORY_URL.match(url)
        if memory:
            return cls(host="", port=-1, schema_name=memory.group("schema"))

        match = _NETWORK_URL.match(url)
        if match is None:
            raise RuleConfigurationError(f"Cannot parse data source URL: {url}")

        db = match.group("db").lower()
        port = match.group("port")
        return cls(
            host=match.group("host"),
            port=int(port) if port else _DEFAULT_PORTS.get(db, -1),
            schema_name=match.group("schema"),
        )


class ShardingMetaData:
    """In-memory :class:`MetaDataStore`.

    Parameters
    ----------
    schema_data_sources:
        Logic schema name to data source name.  Keys are lower-cased on
        the way in, so lookups are case-insensitive.
    data_sources:
        Optional data source name to connection metadata.
    """

    def __init__(
        self,
        schema_data_sources: Mapping[str, str],
        data_sources: Mapping[str, DataSourceMetaData] | None = None,
    ) -> None:
        self._schemas = {name.lower(): ds for name, ds in schema_data_sources.items()}
        self._data_sources = dict(data_sources or {})

    def get_data_source_name(self, schema_name: str) -> str | None:
        return self._schemas.get(schema_name.lower())

    def get_data_source_metadata(self, data_source_name: str) -> DataSourceMetaData | None:
        return self._data_sources.get(data_source_name)

    @property
    def schema_names(self) -> tuple[str, ...]:
        return tuple(sorted(self._schemas))

    @classmethod
    def from_configuration(cls, config: RuleConfiguration) -> ShardingMetaData:
        """Build the store from a loaded rule configuration.

        The configured ``schemaName`` resolves to the rule's master data
        source; entries under ``schemaMapping`` are added on top.
        """
        schemas = {config.schema_name: config.master_slave_rule.master_data_source_name}
        schemas.update(config.schema_mapping)
        data_sources = {name: DataSourceMetaData.from_url(ds.url) for name, ds in config.data_sources.items()}
        logger.debug("Loaded metadata for %d schema(s), %d data source(s)", len(schemas), len(data_sources))
        return cls(schemas, data_sources)

    def __repr__(self) -> str:
        return f"ShardingMetaData(schemas={self.schema_names!r})"
