"""Shared fixtures for proxy_rewrite tests."""

from __future__ import annotations

import pytest

from proxy_rewrite.metadata import ShardingMetaData
from proxy_rewrite.profiling import ProfileCollector
from proxy_rewrite.rule import MasterSlaveRule


@pytest.fixture(autouse=True)
def _reset_profile_collector():
    """Give each test a fresh profile collector singleton."""
    ProfileCollector.reset()
    yield
    ProfileCollector.reset()


@pytest.fixture()
def master_slave_rule() -> MasterSlaveRule:
    return MasterSlaveRule(
        name="ms_ds",
        master_data_source_name="ds_master_0",
        slave_data_source_names=("ds_slave_0", "ds_slave_1"),
    )


@pytest.fixture()
def metadata() -> ShardingMetaData:
    return ShardingMetaData(
        {
            "user_db": "ds_master_0",
            "db_a": "ds_a",
            "db_b": "ds_b",
        }
    )
