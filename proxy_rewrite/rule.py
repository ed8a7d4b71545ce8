"""Master/slave routing rule.

The rewrite engine receives the rule as opaque routing context.  Choosing
between master and slave happens in the routing layer, not here.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class LoadBalanceAlgorithmType(str, Enum):
    """How the routing layer spreads reads across slaves."""

    ROUND_ROBIN = "ROUND_ROBIN"
    RANDOM = "RANDOM"


class MasterSlaveRule(BaseModel):
    """One master data source and the slaves replicating it."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    name: str = Field(min_length=1)
    master_data_source_name: str = Field(min_length=1)
    slave_data_source_names: tuple[str, ...] = Field(min_length=1)
    load_balance_algorithm_type: LoadBalanceAlgorithmType = LoadBalanceAlgorithmType.ROUND_ROBIN

    @model_validator(mode="after")
    def _check_data_sources(self) -> MasterSlaveRule:
        if self.master_data_source_name in self.slave_data_source_names:
            raise ValueError(f"Master data source '{self.master_data_source_name}' cannot also be a slave")
        if len(set(self.slave_data_source_names)) != len(self.slave_data_source_names):
            raise ValueError("Slave data source names must be distinct")
        return self

    @property
    def all_data_source_names(self) -> tuple[str, ...]:
        """Master first, then slaves in declaration order."""
        return (self.master_data_source_name, *self.slave_data_source_names)
