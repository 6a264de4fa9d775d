"""Cypress config adapters, one per config file generation."""

from cypress_parallel.adapters.base import (
    ConfigLoadError,
    ConfigNotFoundError,
    CypressConfigAdapter,
    CypressConfigError,
    DiscoveryRule,
    ResolvedConfig,
    TestFiles,
    TranspileError,
)
from cypress_parallel.adapters.cypress9_adapter import Cypress9ConfigAdapter
from cypress_parallel.adapters.cypress_adapter import (
    CypressJSConfigAdapter,
    CypressTSConfigAdapter,
)
from cypress_parallel.adapters.registry import parse, select_adapter

__all__ = [
    "ConfigLoadError",
    "ConfigNotFoundError",
    "Cypress9ConfigAdapter",
    "CypressConfigAdapter",
    "CypressConfigError",
    "CypressJSConfigAdapter",
    "CypressTSConfigAdapter",
    "DiscoveryRule",
    "ResolvedConfig",
    "TestFiles",
    "TranspileError",
    "parse",
    "select_adapter",
]
