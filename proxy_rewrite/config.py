"""Rewrite engine configuration.

Runtime settings come from environment variables (``PROXY_REWRITE_`` prefix)
or a ``.env`` file.  The master/slave rule and its data sources are read
from a YAML rule file.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml  # type: ignore[import-untyped]
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator
from pydantic.alias_generators import to_camel
from pydantic_settings import BaseSettings, SettingsConfigDict

from proxy_rewrite.errors import RuleConfigurationError
from proxy_rewrite.profiling import ProfileCollector
from proxy_rewrite.rule import MasterSlaveRule

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Runtime settings loaded from environment variables with PROXY_REWRITE_ prefix."""

    model_config = SettingsConfigDict(
        env_prefix="PROXY_REWRITE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    debug: bool = False

    # Reject schema tokens whose literals differ from the SQL text
    verify_token_literals: bool = False

    # Record rewrite timings in the profile collector
    profiling_enabled: bool = True

    rule_config_path: Path | None = None

    def load_rule_configuration(self) -> RuleConfiguration:
        """Load the rule file named by ``rule_config_path``."""
        if self.rule_config_path is None:
            raise RuleConfigurationError("PROXY_REWRITE_RULE_CONFIG_PATH is not set")
        return load_rule_configuration(self.rule_config_path)


def load_settings(**overrides: object) -> Settings:
    """Load settings from environment, with optional overrides for testing."""
    settings = Settings(**overrides)  # type: ignore[arg-type]
    ProfileCollector.get_instance().enabled = settings.profiling_enabled

    if settings.debug:
        logger.info("Loaded rewrite settings (verify_token_literals=%s)", settings.verify_token_literals)

    return settings


# ---------------------------------------------------------------------------
# Rule file
# ---------------------------------------------------------------------------


class DataSourceConfig(BaseModel):
    """One physical data source as declared in the rule file."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    url: str = Field(min_length=1)
    username: str | None = None


class RuleConfiguration(BaseModel):
    """Contents of a master/slave rule file."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    schema_name: str = Field(min_length=1)
    data_sources: dict[str, DataSourceConfig] = Field(min_length=1)
    master_slave_rule: MasterSlaveRule
    schema_mapping: dict[str, str] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _check_references(self) -> RuleConfiguration:
        declared = set(self.data_sources)
        unknown = [name for name in self.master_slave_rule.all_data_source_names if name not in declared]
        unknown += [target for target in self.schema_mapping.values() if target not in declared]
        if unknown:
            raise ValueError(f"Undeclared data source(s): {', '.join(sorted(set(unknown)))}")
        return self


def load_rule_configuration(path: Path) -> RuleConfiguration:
    """Read and validate a YAML rule file.

    Raises
    ------
    RuleConfigurationError
        If the file is missing, is not valid YAML, or fails validation.
    """
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise RuleConfigurationError(f"Cannot read rule file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise RuleConfigurationError(f"Invalid YAML in rule file {path}: {exc}") from exc

    if not isinstance(raw, dict):
        raise RuleConfigurationError(f"Rule file {path} must contain a mapping at the top level")

    try:
        config = RuleConfiguration.model_validate(raw)
    except ValidationError as exc:
        raise RuleConfigurationError(f"Invalid rule file {path}: {exc}") from exc

    logger.debug(
        "Loaded rule '%s' from %s with %d data source(s)",
        config.master_slave_rule.name,
        path,
        len(config.data_sources),
    )
    return config
