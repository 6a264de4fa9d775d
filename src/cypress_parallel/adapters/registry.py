"""Adapter selection and the fault-tolerant parse entry point.

Adapters are tried in a fixed order: TypeScript config, JavaScript config,
then the legacy ``cypress.json``.  The first one whose config file is
present is used.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from cypress_parallel.adapters.base import CypressConfigAdapter, TestFiles
from cypress_parallel.adapters.cypress9_adapter import Cypress9ConfigAdapter
from cypress_parallel.adapters.cypress_adapter import (
    CypressJSConfigAdapter,
    CypressTSConfigAdapter,
)

if TYPE_CHECKING:
    from pathlib import Path

    from cypress_parallel.config import RunConfig

logger = logging.getLogger(__name__)

ADAPTERS: tuple[type[CypressConfigAdapter], ...] = (
    CypressTSConfigAdapter,
    CypressJSConfigAdapter,
    Cypress9ConfigAdapter,
)
"""Adapter classes in order of precedence."""


def select_adapter(
    working_directory: Path,
    *,
    follow_symbolic_links: bool = True,
) -> CypressConfigAdapter | None:
    """Return an adapter for the first config file found, or ``None``."""
    for adapter_cls in ADAPTERS:
        if adapter_cls.has_config_file(working_directory):
            adapter = adapter_cls(working_directory, follow_symbolic_links=follow_symbolic_links)
            logger.debug("Using %s adapter for %s", adapter.name, working_directory)
            return adapter
    return None


def parse_tests(adapter: CypressConfigAdapter) -> TestFiles:
    """Run *adapter*, degrading any failure to an empty result.

    The failure is logged; the caller decides what an empty result means.
    """
    try:
        return adapter.parse_tests()
    except Exception as exc:
        logger.error("Failed to parse cypress tests: %s", exc)
        logger.debug("Parse failure details", exc_info=True)
        return TestFiles(integration_tests=[], component_tests=[])


def parse(run_config: RunConfig) -> TestFiles | None:
    """Find and parse the Cypress config for *run_config*.

    Returns ``None`` when no supported config file exists.
    """
    adapter = select_adapter(
        run_config.working_directory,
        follow_symbolic_links=run_config.follow_symbolic_links,
    )
    if adapter is None:
        return None
    return parse_tests(adapter)
