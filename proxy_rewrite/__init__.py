"""Schema-name rewriting for the master/slave routing layer of a sharding proxy.

Usage::

    from proxy_rewrite import SchemaToken, ShardingMetaData, rewrite

    metadata = ShardingMetaData({"user_db": "ds_master_0"})
    sql = "SELECT * FROM user_db.orders WHERE id=1"
    token = SchemaToken(14, "user_db", schema_name="user_db")
    rewrite(sql, [token], rule, metadata)
    # -> "SELECT * FROM ds_master_0.orders WHERE id=1"

Tokens come from an upstream SQL parser; this package never parses SQL.
"""

from .builder import Segment, SchemaPlaceholder, SQLBuilder
from .config import (
    DataSourceConfig,
    RuleConfiguration,
    Settings,
    load_rule_configuration,
    load_settings,
)
from .engine import MasterSlaveSQLRewriteEngine, rewrite
from .errors import (
    BuilderConsumedError,
    MalformedTokenError,
    RewriteError,
    RuleConfigurationError,
    SchemaNotFoundError,
)
from .metadata import DataSourceMetaData, MetaDataStore, ShardingMetaData
from .rule import LoadBalanceAlgorithmType, MasterSlaveRule
from .tokens import (
    IndexToken,
    SchemaToken,
    SQLStatement,
    SQLToken,
    SQLType,
    TableToken,
    sort_by_begin_position,
)

__all__ = [
    # Engine
    "MasterSlaveSQLRewriteEngine",
    "rewrite",
    # Tokens
    "SQLToken",
    "SchemaToken",
    "TableToken",
    "IndexToken",
    "SQLStatement",
    "SQLType",
    "sort_by_begin_position",
    # Builder
    "SQLBuilder",
    "SchemaPlaceholder",
    "Segment",
    # Routing context
    "MasterSlaveRule",
    "LoadBalanceAlgorithmType",
    "MetaDataStore",
    "ShardingMetaData",
    "DataSourceMetaData",
    # Configuration
    "Settings",
    "load_settings",
    "RuleConfiguration",
    "DataSourceConfig",
    "load_rule_configuration",
    # Exceptions
    "RewriteError",
    "SchemaNotFoundError",
    "MalformedTokenError",
    "BuilderConsumedError",
    "RuleConfigurationError",
]
