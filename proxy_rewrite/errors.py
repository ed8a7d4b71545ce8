"""Exceptions raised by the rewrite engine and its configuration layer."""

from __future__ import annotations

from typing import Any


class RewriteError(Exception):
    """Base exception for all proxy_rewrite errors."""


class SchemaNotFoundError(RewriteError):
    """A schema placeholder has no data source in the metadata store."""

    def __init__(self, schema_name: str) -> None:
        self.schema_name = schema_name
        super().__init__(f"Schema '{schema_name}' is not mapped to any data source")


class MalformedTokenError(RewriteError):
    """A token's span is out of range or overlaps a previous token."""

    def __init__(self, token: Any, reason: str) -> None:
        self.token = token
        self.reason = reason
        super().__init__(f"Malformed token {token!r}: {reason}")


class BuilderConsumedError(RewriteError):
    """An SQLBuilder was used again after its terminal resolve."""


class RuleConfigurationError(RewriteError):
    """Rule configuration could not be loaded or is inconsistent."""
